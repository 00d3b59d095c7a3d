# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Session storage.

Replaceable with any backend offering atomic per-record put/get/delete.
Expired and absent sessions are indistinguishable to callers.
"""

from __future__ import annotations

import threading
from datetime import datetime
from typing import Dict, Optional, Protocol

from reviewauth.auth.session import Session


class SessionStore(Protocol):
    def put(self, session: Session) -> None:
        ...

    def get(self, session_id: str, now: datetime) -> Optional[Session]:
        ...

    def delete(self, session_id: str) -> None:
        ...

    def sweep(self, now: datetime) -> int:
        ...


class InMemorySessionStore:
    def __init__(self):
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def put(self, session: Session) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def get(self, session_id: str, now: datetime) -> Optional[Session]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if not session.is_active(now):
                # Lazy reap
                del self._sessions[session_id]
                return None
            return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def sweep(self, now: datetime) -> int:
        """Drop every expired session. Returns how many were removed."""
        with self._lock:
            expired = [sid for sid, s in self._sessions.items() if not s.is_active(now)]
            for sid in expired:
                del self._sessions[sid]
        return len(expired)
