# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Tuple

from reviewauth.auth.passwords import DEFAULT_KDF, KdfParams, hash_password, verify_password
from reviewauth.auth.session import Session, new_session
from reviewauth.auth.store import SessionStore
from reviewauth.auth.users import Principal, UserDirectory
from reviewauth.errors import AuthFailure, DuplicateUsername, Forbidden, Unauthenticated

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Capability(str, Enum):
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"


class Decision(str, Enum):
    ALLOWED = "allowed"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Identity:
    session: Session
    principal: Principal


def evaluate(identity: Optional[Identity], capability: Capability, now: datetime) -> Decision:
    if identity is None:
        return Decision.UNAUTHENTICATED
    session, principal = identity.session, identity.principal
    if principal is None or principal.id != session.principal_id or not session.is_active(now):
        return Decision.UNAUTHENTICATED
    if capability is Capability.ADMIN and not principal.is_admin:
        return Decision.FORBIDDEN
    return Decision.ALLOWED


def authorize(identity: Optional[Identity], capability: Capability, now: datetime) -> bool:
    return evaluate(identity, capability, now) is Decision.ALLOWED


def require(identity: Optional[Identity], capability: Capability, now: datetime) -> Principal:
    decision = evaluate(identity, capability, now)
    if decision is Decision.UNAUTHENTICATED:
        raise Unauthenticated()
    if decision is Decision.FORBIDDEN:
        raise Forbidden()
    return identity.principal


class CredentialAuthority:
    """Owns password checks and the session lifecycle.

    Users and sessions live in the injected directory and store; this class only
    dictates how credentials are checked and how long sessions last.
    """

    def __init__(
        self,
        directory: UserDirectory,
        sessions: SessionStore,
        *,
        kdf: KdfParams = DEFAULT_KDF,
        clock: Clock = utcnow,
    ):
        self.directory = directory
        self.sessions = sessions
        self.kdf = kdf
        self.clock = clock
        # Unknown usernames are checked against this so they cost one KDF run too.
        self._decoy_credential = hash_password("decoy-credential", kdf)

    def hash_password(self, plain: str) -> str:
        return hash_password(plain, self.kdf)

    def verify_password(self, plain: str, stored: str) -> bool:
        return verify_password(plain, stored, self.kdf)

    def authenticate(self, username: str, password: str) -> Principal:
        u = (username or "").strip()
        if not u or not (password or "").strip():
            raise AuthFailure()
        principal = self.directory.find_by_username(u)
        if principal is None:
            self.verify_password(password, self._decoy_credential)
            logger.info("Login failed for %r", u)
            raise AuthFailure()
        if not self.verify_password(password, principal.credential):
            logger.info("Login failed for %r", u)
            raise AuthFailure()
        return principal

    def issue_session(self, principal: Principal, remember_me: bool = False) -> Session:
        session = new_session(principal.id, remember_me=remember_me, now=self.clock())
        self.sessions.put(session)
        return session

    def login(self, username: str, password: str, remember_me: bool = False) -> Tuple[Principal, Session]:
        principal = self.authenticate(username, password)
        return principal, self.issue_session(principal, remember_me)

    def register(self, username: str, password: str, display_handle: str) -> Tuple[Principal, Session]:
        u = username.strip()
        if self.directory.find_by_username(u) is not None:
            raise DuplicateUsername()
        principal = self.directory.insert(
            Principal(
                username=u,
                credential=self.hash_password(password),
                display_handle=display_handle.strip(),
                is_admin=False,
            )
        )
        logger.info("Registered user %r (id=%s)", principal.username, principal.id)
        return principal, self.issue_session(principal, remember_me=False)

    def resolve(self, session_id: Optional[str]) -> Optional[Identity]:
        if not session_id:
            return None
        session = self.sessions.get(session_id, self.clock())
        if session is None:
            return None
        principal = self.directory.get(session.principal_id)
        if principal is None:
            self.sessions.delete(session_id)
            return None
        return Identity(session=session, principal=principal)

    def destroy_session(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        self.sessions.delete(session_id)
        logger.debug("Session destroyed")

    def authorize(self, identity: Optional[Identity], capability: Capability) -> bool:
        return authorize(identity, capability, self.clock())

    def require(self, identity: Optional[Identity], capability: Capability) -> Principal:
        return require(identity, capability, self.clock())
