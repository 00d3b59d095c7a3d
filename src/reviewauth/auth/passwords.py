# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass
from typing import Tuple

from argon2.low_level import Type, hash_secret_raw

from reviewauth.errors import MalformedCredential

logger = logging.getLogger(__name__)

SALT_BYTES = 16
KEY_BYTES = 64
SEPARATOR = "."
HEX_RE = re.compile(r"(?:[0-9a-f]{2})+")


@dataclass(frozen=True)
class KdfParams:
    """Argon2id cost. Not stored in the credential string, so it must stay fixed per deployment."""

    time_cost: int = 2
    memory_cost: int = 19456  # KiB
    parallelism: int = 1


DEFAULT_KDF = KdfParams()


def _derive(plain: str, salt: bytes, params: KdfParams) -> bytes:
    return hash_secret_raw(
        secret=plain.encode("utf-8"),
        salt=salt,
        time_cost=params.time_cost,
        memory_cost=params.memory_cost,
        parallelism=params.parallelism,
        hash_len=KEY_BYTES,
        type=Type.ID,
    )


def parse_credential(stored: str) -> Tuple[bytes, bytes]:
    """Split ``"<hex hash>.<hex salt>"`` into raw bytes."""
    if not stored or stored.count(SEPARATOR) != 1:
        raise MalformedCredential("missing separator")
    hashed, salt = stored.split(SEPARATOR)
    if not hashed or not salt:
        raise MalformedCredential("empty component")
    if not HEX_RE.fullmatch(hashed) or not HEX_RE.fullmatch(salt):
        raise MalformedCredential("non-hex component")
    return bytes.fromhex(hashed), bytes.fromhex(salt)


def hash_password(plain: str, params: KdfParams = DEFAULT_KDF) -> str:
    if not plain:
        raise ValueError("Empty password")
    salt = secrets.token_bytes(SALT_BYTES)
    key = _derive(plain, salt, params)
    return f"{key.hex()}{SEPARATOR}{salt.hex()}"


def verify_password(plain: str, stored: str, params: KdfParams = DEFAULT_KDF) -> bool:
    try:
        expected, salt = parse_credential(stored)
    except MalformedCredential as e:
        logger.warning("Stored credential is malformed (%s); treating as mismatch", e)
        return False
    # Key length is fixed by the KDF and not secret.
    if len(expected) != KEY_BYTES:
        return False
    try:
        supplied = _derive(plain or "", salt, params)
    except UnicodeEncodeError:
        # Lone surrogates cannot be UTF-8 encoded, so they can never match.
        return False
    return secrets.compare_digest(supplied, expected)
