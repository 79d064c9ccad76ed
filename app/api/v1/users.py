"""
Tenant user endpoints.

- Listing users → min role sales-rep (needed to assign leads and deals)
- Creating users → role admin
- All queries are tenant-scoped by the session token
"""
from __future__ import annotations
from fastapi import APIRouter, Depends, Request
from core.auth import Authed
from core.roles import require_min_role, require_roles
from schemas.crm import UserCreate
from services import user_service

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.get("")
def users_list(auth: Authed = Depends(require_min_role("sales-rep"))) -> dict:
    return {"items": user_service.list_users(auth.tenant_id)}


@router.post("", status_code=201)
def user_create(
    body: UserCreate,
    req: Request,
    auth: Authed = Depends(require_roles("admin")),
) -> dict:
    """
    Add a user to the caller's tenant.

    Returns:
        Public fields of the created user
    """
    return user_service.create_user(auth, body, req.app.state.settings.BCRYPT_ROUNDS)
