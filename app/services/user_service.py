"""
Service layer for tenant user management.
"""
from __future__ import annotations
from core.auth import Authed
from core.errors import ConflictError
from core.logger import log_security_event
from core.security import hash_password
from domain.models import UserStatus
from repositories import user_repo
from schemas.crm import UserCreate


def list_users(tenant_id: str) -> list[dict]:
    return [u.public() for u in user_repo.list_users(tenant_id)]


def create_user(auth: Authed, data: UserCreate, bcrypt_rounds: int) -> dict:
    """
    Add a user to the caller's tenant.

    Raises:
        ConflictError: 409 if the email is already registered
    """
    if user_repo.find_user_by_email(data.email):
        raise ConflictError("A user with this email already exists")

    user = user_repo.create_user(
        tenant_id=auth.tenant_id,
        first_name=data.first_name.strip(),
        last_name=data.last_name.strip(),
        email=data.email,
        password_hash=hash_password(data.password, bcrypt_rounds),
        role=data.role,
        status=UserStatus.ACTIVE,
    )
    log_security_event(
        action="user_create",
        result="success",
        user_id=auth.user_id,
        tenant_id=auth.tenant_id,
        meta={"created_user_id": user.id, "role": user.role.value},
    )
    return user.public()
