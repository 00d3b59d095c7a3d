# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

DEFAULT_TTL = timedelta(days=7)
REMEMBER_ME_TTL = timedelta(days=30)
SESSION_ID_BYTES = 32


class SessionState(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"


@dataclass(frozen=True)
class Session:
    session_id: str
    principal_id: int
    created_at: datetime
    expires_at: datetime
    remember_me: bool = False

    def state(self, now: datetime) -> SessionState:
        return SessionState.ACTIVE if now < self.expires_at else SessionState.EXPIRED

    def is_active(self, now: datetime) -> bool:
        return self.state(now) is SessionState.ACTIVE

    @property
    def max_age_seconds(self) -> int:
        return int((self.expires_at - self.created_at).total_seconds())


def session_ttl(remember_me: bool) -> timedelta:
    return REMEMBER_ME_TTL if remember_me else DEFAULT_TTL


def new_session(principal_id: int, *, remember_me: bool, now: datetime) -> Session:
    return Session(
        session_id=secrets.token_urlsafe(SESSION_ID_BYTES),
        principal_id=principal_id,
        created_at=now,
        expires_at=now + session_ttl(remember_me),
        remember_me=remember_me,
    )


class SessionCookieSigner:
    """Signs session ids for the cookie. Expiry is enforced server-side by the store."""

    def __init__(self, secret_key: str, *, salt: str = "reviewauth.session.v1"):
        if not secret_key:
            raise RuntimeError("Missing secret key for session cookies")
        self._serializer = URLSafeTimedSerializer(secret_key=secret_key, salt=salt)

    def sign(self, session_id: str) -> str:
        return self._serializer.dumps({"sid": session_id})

    def unsign(self, token: str) -> Optional[str]:
        if not token:
            return None
        try:
            data = self._serializer.loads(token, max_age=int(REMEMBER_ME_TTL.total_seconds()))
        except (BadSignature, BadTimeSignature):
            return None
        sid = (data or {}).get("sid") if isinstance(data, dict) else None
        sid = str(sid or "").strip()
        return sid or None
