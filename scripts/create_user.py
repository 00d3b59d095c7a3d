#!/usr/bin/env python3
"""Provision a user in users.yml out of band (the only way to create extra admins)."""
from __future__ import annotations

from getpass import getpass

from reviewauth.auth.passwords import hash_password
from reviewauth.auth.users import Principal, YamlUserDirectory
from reviewauth.config import load_settings
from reviewauth.errors import DuplicateUsername


def main() -> None:
    settings = load_settings()
    directory = YamlUserDirectory(settings.users_path)

    username = input("Username: ").strip()
    handle = input("Instagram handle: ").strip() or username
    admin_in = input("Admin? [y/N]: ").strip().lower()
    is_admin = admin_in in {"y", "yes"}

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")
    if not pw1.strip():
        raise SystemExit("Password cannot be empty")

    try:
        p = directory.insert(
            Principal(
                username=username,
                credential=hash_password(pw1, settings.kdf),
                display_handle=handle,
                is_admin=is_admin,
            )
        )
    except DuplicateUsername:
        raise SystemExit(f"User {username!r} already exists")
    print(f"OK -> {directory.path} (id={p.id})")


if __name__ == "__main__":
    main()
