# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from reviewauth.auth.authority import Clock, CredentialAuthority, utcnow
from reviewauth.auth.provisioning import ensure_admin
from reviewauth.auth.session import Session, SessionCookieSigner
from reviewauth.auth.store import InMemorySessionStore, SessionStore
from reviewauth.auth.users import InMemoryUserDirectory, Principal, UserDirectory, YamlUserDirectory
from reviewauth.config import Settings, load_settings
from reviewauth.errors import AuthError, AuthFailure, RequestValidationFailed
from reviewauth.messages import ContactInbox
from reviewauth.permissions import (
    get_authority,
    require_admin,
    require_user,
    session_id_from_request,
)
from reviewauth.schemas import ContactMessageRequest, LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


def _user_response(request: Request, principal: Principal, session: Session, status_code: int) -> JSONResponse:
    settings: Settings = request.app.state.settings
    resp = JSONResponse(principal.to_public(), status_code=status_code)
    resp.set_cookie(
        settings.cookie_name,
        request.app.state.signer.sign(session.session_id),
        max_age=session.max_age_seconds,
        **settings.cookie_settings(),
    )
    return resp


def create_app(
    settings: Optional[Settings] = None,
    *,
    directory: Optional[UserDirectory] = None,
    sessions: Optional[SessionStore] = None,
    clock: Clock = utcnow,
) -> FastAPI:
    settings = settings or load_settings()
    if directory is None:
        directory = YamlUserDirectory(settings.users_path) if settings.users_path else InMemoryUserDirectory()
    authority = CredentialAuthority(
        directory,
        sessions if sessions is not None else InMemorySessionStore(),
        kdf=settings.kdf,
        clock=clock,
    )

    if settings.admin_password:
        ensure_admin(
            directory,
            settings.admin_username,
            settings.admin_password,
            display_handle=settings.admin_handle,
            kdf=settings.kdf,
        )
    else:
        logger.warning("REVIEWAUTH_ADMIN_PASSWORD not set; skipping bootstrap admin provisioning")

    app = FastAPI(title="reviewauth")
    app.state.settings = settings
    app.state.authority = authority
    app.state.signer = SessionCookieSigner(settings.secret_key)
    app.state.inbox = ContactInbox()

    @app.exception_handler(AuthError)
    async def _auth_error_handler(request: Request, exc: AuthError):
        return JSONResponse(exc.to_payload(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _body_error_handler(request: Request, exc: RequestValidationError):
        # Undecodable bodies get the same answer as any other bad input on that route.
        if request.url.path == "/api/login":
            err: AuthError = AuthFailure()
        else:
            err = RequestValidationFailed(
                [
                    {"field": ".".join(str(p) for p in e.get("loc", ())) or "body", "message": str(e.get("msg", ""))}
                    for e in exc.errors()
                ]
            )
        return JSONResponse(err.to_payload(), status_code=err.status_code)

    # ------------------ Routes ------------------

    # KDF-bound handlers are plain defs so FastAPI runs them in its threadpool.

    @app.post("/api/register")
    def register(request: Request, payload: Any = Body(None)):
        parsed = RegisterRequest.parse(payload)
        if not parsed.ok:
            raise RequestValidationFailed(parsed.errors)
        req = parsed.value
        principal, session = get_authority(request).register(req.username, req.password, req.display_handle)
        return _user_response(request, principal, session, status_code=201)

    @app.post("/api/login")
    def login(request: Request, payload: Any = Body(None)):
        req = LoginRequest.parse(payload).value or LoginRequest()
        principal, session = get_authority(request).login(req.username, req.password, req.remember_me)
        return _user_response(request, principal, session, status_code=200)

    @app.post("/api/logout")
    def logout(request: Request):
        get_authority(request).destroy_session(session_id_from_request(request))
        resp = JSONResponse({"ok": True})
        resp.delete_cookie(request.app.state.settings.cookie_name)
        return resp

    @app.get("/api/user")
    def current_user(user: Principal = Depends(require_user)):
        return user.to_public()

    @app.post("/api/contact", status_code=201)
    def contact(request: Request, payload: Any = Body(None)):
        parsed = ContactMessageRequest.parse(payload)
        if not parsed.ok:
            raise RequestValidationFailed(parsed.errors)
        return request.app.state.inbox.submit(parsed.value).to_public()

    @app.get("/api/admin/contact-messages")
    def contact_messages(request: Request, user: Principal = Depends(require_admin)):
        return [m.to_public() for m in request.app.state.inbox.list_messages()]

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
