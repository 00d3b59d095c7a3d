# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from reviewauth.auth.passwords import KdfParams

# Anchor the default users.yml path to the project root (works well with editable installs).
BASE_DIR = Path(__file__).resolve().parents[2]
DEFAULT_USERS_PATH = BASE_DIR / "data" / "users.yml"


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class Settings:
    secret_key: str
    cookie_name: str = "reviewauth_session"
    cookie_secure: bool = False
    users_path: Optional[Path] = DEFAULT_USERS_PATH
    admin_username: str = "admin"
    admin_password: str = ""
    admin_handle: str = "admin"
    kdf: KdfParams = field(default_factory=KdfParams)

    def cookie_settings(self) -> dict:
        return {"httponly": True, "samesite": "lax", "secure": self.cookie_secure}


def load_settings() -> Settings:
    secret = os.getenv("SECRET_KEY") or os.getenv("REVIEWAUTH_SECRET_KEY")
    if not secret:
        raise RuntimeError("Missing SECRET_KEY (or REVIEWAUTH_SECRET_KEY) in environment")

    defaults = KdfParams()
    kdf = KdfParams(
        time_cost=int(os.getenv("REVIEWAUTH_KDF_TIME_COST", str(defaults.time_cost))),
        memory_cost=int(os.getenv("REVIEWAUTH_KDF_MEMORY_COST", str(defaults.memory_cost))),
        parallelism=int(os.getenv("REVIEWAUTH_KDF_PARALLELISM", str(defaults.parallelism))),
    )
    return Settings(
        secret_key=secret,
        cookie_name=os.getenv("REVIEWAUTH_COOKIE_NAME", "reviewauth_session"),
        cookie_secure=_flag("REVIEWAUTH_COOKIE_SECURE"),
        users_path=Path(os.getenv("REVIEWAUTH_USERS_PATH", str(DEFAULT_USERS_PATH))).resolve(),
        admin_username=os.getenv("REVIEWAUTH_ADMIN_USERNAME", "admin").strip() or "admin",
        admin_password=os.getenv("REVIEWAUTH_ADMIN_PASSWORD", ""),
        admin_handle=os.getenv("REVIEWAUTH_ADMIN_HANDLE", "admin").strip() or "admin",
        kdf=kdf,
    )
