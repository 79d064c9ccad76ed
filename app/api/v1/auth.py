"""
Authentication endpoints.

- One POST endpoint, discriminated by the `action` field (register | login)
- The session token travels in an HTTP-only cookie
- Return minimal information on failure
"""
from __future__ import annotations
from typing import Any
from fastapi import APIRouter, Body, Depends, Request, Response
from fastapi.responses import JSONResponse
from core.auth import auth_required, Authed
from core.logger import log_security_event
from schemas.auth import MeOut
from services.auth_service import AuthService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def get_auth_service(req: Request) -> AuthService:
    return req.app.state.auth_service


@router.post("")
def auth_action(
    req: Request,
    body: Any = Body(default=None),
    service: AuthService = Depends(get_auth_service),
) -> JSONResponse:
    """
    Register a tenant or log a user in, depending on `action`.

    Returns:
        register → {"tenant", "user"}
        login → {"id", "email", "role", "tenantId", "message"} plus the session cookie
    """
    result = service.dispatch(body)
    response = JSONResponse(content=result.body)
    if result.token:
        settings = req.app.state.settings
        response.set_cookie(
            key=settings.AUTH_COOKIE_NAME,
            value=result.token,
            max_age=settings.session_max_age,
            path="/",
            httponly=True,
            secure=settings.AUTH_COOKIE_SECURE,
            samesite="lax",
        )
    return response


@router.get("/me", response_model=MeOut)
def me(auth: Authed = Depends(auth_required)) -> MeOut:
    """Claims of the current session."""
    return MeOut(id=auth.user_id, email=auth.email, role=auth.role, tenant_id=auth.tenant_id)


@router.post("/logout")
def logout(req: Request, response: Response, auth: Authed = Depends(auth_required)) -> dict:
    response.delete_cookie(req.app.state.settings.AUTH_COOKIE_NAME, path="/")
    log_security_event(action="logout", result="success", user_id=auth.user_id, tenant_id=auth.tenant_id)
    return {"ok": True}
