# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Tuple

import yaml

from reviewauth.errors import DuplicateUsername


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Principal:
    username: str
    credential: str
    display_handle: str
    is_admin: bool = False
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    def to_public(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "username": self.username,
            "instagramHandle": self.display_handle,
            "isAdmin": self.is_admin,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


class UserDirectory(Protocol):
    def find_by_username(self, username: str) -> Optional[Principal]:
        ...

    def get(self, principal_id: int) -> Optional[Principal]:
        ...

    def insert(self, principal: Principal) -> Principal:
        ...


class InMemoryUserDirectory:
    def __init__(self):
        self._by_id: Dict[int, Principal] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def find_by_username(self, username: str) -> Optional[Principal]:
        u = (username or "").strip()
        if not u:
            return None
        with self._lock:
            for p in self._by_id.values():
                if p.username == u:
                    return p
        return None

    def get(self, principal_id: int) -> Optional[Principal]:
        with self._lock:
            return self._by_id.get(principal_id)

    def insert(self, principal: Principal) -> Principal:
        with self._lock:
            if any(p.username == principal.username for p in self._by_id.values()):
                raise DuplicateUsername()
            stored = dataclasses.replace(
                principal,
                id=self._next_id,
                created_at=principal.created_at or _utcnow(),
            )
            self._by_id[stored.id] = stored
            self._next_id += 1
            return stored

    def delete(self, principal_id: int) -> None:
        with self._lock:
            self._by_id.pop(principal_id, None)


class YamlUserDirectory:
    """User directory persisted to a users.yml file.

    Layout::

        version: 1
        users:
          alice:
            id: 1
            credential: "<hex hash>.<hex salt>"
            display_handle: alice.shop
            is_admin: false
            created_at: "2026-01-01T00:00:00+00:00"

    Reads are cached by file mtime so hand edits are picked up.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._cache: Tuple[float, Dict[str, Principal]] = (0.0, {})
        self._lock = threading.Lock()

    def _read_raw(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"version": 1, "users": {}}
        raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raw = {}
        if not isinstance(raw.get("users"), dict):
            raw["users"] = {}
        raw.setdefault("version", 1)
        return raw

    @staticmethod
    def _parse_created_at(value: Any) -> Optional[datetime]:
        if isinstance(value, datetime):
            return value
        if not value:
            return None
        try:
            return datetime.fromisoformat(str(value))
        except ValueError:
            return None

    def _load_users_file(self) -> Dict[str, Principal]:
        out: Dict[str, Principal] = {}
        for uname, udata in self._read_raw()["users"].items():
            if not isinstance(udata, dict):
                continue
            username = str(uname).strip()
            if not username:
                continue
            try:
                pid = int(udata.get("id"))
            except (TypeError, ValueError):
                continue
            out[username] = Principal(
                id=pid,
                username=username,
                credential=str(udata.get("credential") or "").strip(),
                display_handle=str(udata.get("display_handle") or "").strip(),
                is_admin=bool(udata.get("is_admin", False)),
                created_at=self._parse_created_at(udata.get("created_at")),
            )
        return out

    def _users(self) -> Dict[str, Principal]:
        mtime = self.path.stat().st_mtime if self.path.exists() else 0.0
        cached_mtime, cached_users = self._cache
        if mtime and mtime == cached_mtime and cached_users:
            return cached_users
        users = self._load_users_file()
        self._cache = (mtime, users)
        return users

    def find_by_username(self, username: str) -> Optional[Principal]:
        u = (username or "").strip()
        if not u:
            return None
        with self._lock:
            return self._users().get(u)

    def get(self, principal_id: int) -> Optional[Principal]:
        with self._lock:
            for p in self._users().values():
                if p.id == principal_id:
                    return p
        return None

    def insert(self, principal: Principal) -> Principal:
        with self._lock:
            raw = self._read_raw()
            users = raw["users"]
            if principal.username in users:
                raise DuplicateUsername()
            ids = []
            for u in users.values():
                if not isinstance(u, dict):
                    continue
                try:
                    ids.append(int(u.get("id")))
                except (TypeError, ValueError):
                    continue
            stored = dataclasses.replace(
                principal,
                id=max(ids, default=0) + 1,
                created_at=principal.created_at or _utcnow(),
            )
            users[stored.username] = {
                "id": stored.id,
                "credential": stored.credential,
                "display_handle": stored.display_handle,
                "is_admin": stored.is_admin,
                "created_at": stored.created_at.isoformat(),
            }
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(yaml.safe_dump(raw, sort_keys=False, allow_unicode=True), encoding="utf-8")
            self._cache = (0.0, {})
            return stored
