# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List

from reviewauth.schemas import ContactMessageRequest


@dataclass(frozen=True)
class ContactMessage:
    id: int
    name: str
    email: str
    message: str
    created_at: datetime

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "message": self.message,
            "createdAt": self.created_at.isoformat(),
        }


class ContactInbox:
    """Contact-form submissions. Anyone may submit; only admins may list."""

    def __init__(self):
        self._messages: List[ContactMessage] = []
        self._lock = threading.Lock()

    def submit(self, req: ContactMessageRequest) -> ContactMessage:
        with self._lock:
            msg = ContactMessage(
                id=len(self._messages) + 1,
                name=req.name.strip(),
                email=req.email,
                message=req.message.strip(),
                created_at=datetime.now(timezone.utc),
            )
            self._messages.append(msg)
            return msg

    def list_messages(self) -> List[ContactMessage]:
        """Newest first."""
        with self._lock:
            return sorted(self._messages, key=lambda m: (m.created_at, m.id), reverse=True)
