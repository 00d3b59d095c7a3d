# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from fastapi import Request

from reviewauth.auth.authority import Capability, CredentialAuthority, Identity
from reviewauth.auth.session import SessionCookieSigner
from reviewauth.auth.users import Principal
from reviewauth.config import Settings


def get_authority(request: Request) -> CredentialAuthority:
    return request.app.state.authority


def session_id_from_request(request: Request) -> Optional[str]:
    settings: Settings = request.app.state.settings
    signer: SessionCookieSigner = request.app.state.signer
    return signer.unsign(request.cookies.get(settings.cookie_name, ""))


def load_identity_from_request(request: Request) -> Optional[Identity]:
    return get_authority(request).resolve(session_id_from_request(request))


def current_identity_optional(request: Request) -> Optional[Identity]:
    # Resolved lazily from sync dependencies so directory IO stays off the event loop.
    if not hasattr(request.state, "identity"):
        request.state.identity = load_identity_from_request(request)
    return request.state.identity


def require_capability(capability: Capability):
    def _dep(request: Request) -> Principal:
        return get_authority(request).require(current_identity_optional(request), capability)

    return _dep


require_user = require_capability(Capability.AUTHENTICATED)
require_admin = require_capability(Capability.ADMIN)
