# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Typed outcomes of the authentication core.

Every failure the auth core recovers from locally is one of these. KDF and
resource failures are not: they propagate untouched and surface as 500.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional


class AuthError(Exception):
    status_code = 400
    detail = "Request rejected"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.detail}


class MalformedCredential(AuthError):
    """Stored credential cannot be parsed. Never shown to end users."""

    status_code = 401
    detail = "Invalid credentials"

    def __init__(self, reason: str = "unparseable"):
        super().__init__()
        self.reason = reason

    def __str__(self) -> str:
        return self.reason


class AuthFailure(AuthError):
    status_code = 401
    detail = "Invalid credentials"


class Unauthenticated(AuthError):
    status_code = 401
    detail = "Authentication required"


class Forbidden(AuthError):
    status_code = 403
    detail = "Admin access required"


class DuplicateUsername(AuthError):
    status_code = 400
    detail = "Username already exists"


class RequestValidationFailed(AuthError):
    status_code = 400
    detail = "Validation failed"

    def __init__(self, errors: List[Dict[str, str]]):
        super().__init__()
        self.errors = errors

    def to_payload(self) -> Dict[str, Any]:
        return {"error": self.detail, "details": self.errors}
