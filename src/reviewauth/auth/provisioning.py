# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging

from reviewauth.auth.passwords import DEFAULT_KDF, KdfParams, hash_password
from reviewauth.auth.users import Principal, UserDirectory

logger = logging.getLogger(__name__)


def ensure_admin(
    directory: UserDirectory,
    username: str,
    password: str,
    *,
    display_handle: str = "admin",
    kdf: KdfParams = DEFAULT_KDF,
) -> Principal:
    """Create the bootstrap admin unless the username is already taken.

    An existing account is returned as is: its password and admin flag are
    never touched, so running this on every startup is safe.
    """
    u = (username or "").strip()
    if not u:
        raise ValueError("Admin username is empty")
    existing = directory.find_by_username(u)
    if existing is not None:
        if not existing.is_admin:
            logger.warning("Bootstrap admin %r exists but is not an admin; leaving it unchanged", u)
        return existing
    admin = directory.insert(
        Principal(
            username=u,
            credential=hash_password(password, kdf),
            display_handle=display_handle,
            is_admin=True,
        )
    )
    logger.info("Provisioned bootstrap admin %r (id=%s)", admin.username, admin.id)
    return admin
