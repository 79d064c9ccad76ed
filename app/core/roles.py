"""
RBAC (Role-Based Access Control) module.

- Roles are: admin, sales-mgr, sales-rep (lowercase)
- RBAC logic lives in this dedicated module, not scattered
- Clear rules:
  - CRM records read/write → min role sales-rep
  - Deleting CRM records → min role sales-mgr
  - User management → role admin
- Never trust role or tenant information from client; always from token claims
"""
from __future__ import annotations
from typing import Callable
from fastapi import Depends
from core.auth import Authed, auth_required
from core.errors import ForbiddenError

# Role hierarchy (lower number = higher privilege)
ROLE_HIERARCHY = {
    "admin": 0,
    "sales-mgr": 1,
    "sales-rep": 2,
}


def _deny(auth: Authed, **meta) -> ForbiddenError:
    return ForbiddenError(
        "You do not have permission for this action",
        meta={**meta, "current_role": auth.role, "tenant_id": auth.tenant_id},
    )


def require_roles(*allowed: str) -> Callable:
    """
    Dependency that ensures the caller's role is in `allowed`.

    Example:
        @router.post("/users")
        def endpoint(auth: Authed = Depends(require_roles("admin"))):
            ...
    """
    def _inner(auth: Authed = Depends(auth_required)) -> Authed:
        if auth.role not in allowed:
            raise _deny(auth, required_roles=list(allowed))
        return auth
    return _inner


def require_min_role(min_role: str) -> Callable:
    """
    Dependency that ensures the caller's role meets a minimum privilege level.

    Role hierarchy: admin > sales-mgr > sales-rep
    """
    if min_role not in ROLE_HIERARCHY:
        raise ValueError(f"Invalid role: {min_role}. Must be one of {list(ROLE_HIERARCHY.keys())}")

    min_level = ROLE_HIERARCHY[min_role]

    def _inner(auth: Authed = Depends(auth_required)) -> Authed:
        user_level = ROLE_HIERARCHY.get(auth.role, 999)  # Unknown roles = lowest privilege
        if user_level > min_level:
            raise _deny(auth, required_min_role=min_role)
        return auth
    return _inner
