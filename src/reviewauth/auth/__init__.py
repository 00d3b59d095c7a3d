# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Credential and session authority.

This package provides:
- Password hashing/verification (argon2id, "<hex hash>.<hex salt>")
- User directories (in-memory, users.yml)
- Server-side sessions with signed cookie ids (itsdangerous)
- The Authenticated/Admin authorization gate
"""
