"""
Repository for users.

- Email lookups are case-insensitive (emails are stored lower-cased)
- The unique index on users.email backs the check-then-insert in registration
"""
from __future__ import annotations
from typing import Optional
from psycopg2 import errors as pg_errors
from core.db import get_conn, is_uuid
from core.errors import ConflictError
from domain.models import User, UserRole, UserStatus

_COLUMNS = "id, first_name, last_name, email, password_hash, role, status, tenant_id"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _row_to_user(r) -> User:
    return User(
        id=str(r[0]),
        first_name=r[1],
        last_name=r[2],
        email=r[3],
        password_hash=r[4],
        role=UserRole(r[5]),
        status=UserStatus(r[6]),
        tenant_id=str(r[7]),
    )


def find_user_by_email(email: str) -> Optional[User]:
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute(f"SELECT {_COLUMNS} FROM users WHERE email=%s LIMIT 1", (normalize_email(email),))
        r = cur.fetchone()
        return _row_to_user(r) if r else None


def get_user(tenant_id: str, user_id: str) -> Optional[User]:
    if not is_uuid(user_id):
        return None
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {_COLUMNS} FROM users WHERE id=%s AND tenant_id=%s",
            (user_id, tenant_id),
        )
        r = cur.fetchone()
        return _row_to_user(r) if r else None


def create_user(
    tenant_id: str,
    first_name: str,
    last_name: str,
    email: str,
    password_hash: str,
    role: UserRole,
    status: UserStatus = UserStatus.ACTIVE,
) -> User:
    """
    Insert a user.

    Raises:
        ConflictError: if the email is already taken (unique index violation)
    """
    try:
        with get_conn() as conn, conn.cursor() as cur:
            cur.execute(
                f"""
                INSERT INTO users (tenant_id, first_name, last_name, email, password_hash, role, status)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                RETURNING {_COLUMNS}
                """,
                (tenant_id, first_name, last_name, normalize_email(email), password_hash, role.value, status.value),
            )
            return _row_to_user(cur.fetchone())
    except pg_errors.UniqueViolation:
        raise ConflictError("A user with this email already exists")


def delete_user(user_id: str) -> bool:
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM users WHERE id=%s", (user_id,))
        return cur.rowcount > 0


def list_users(tenant_id: str) -> list[User]:
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {_COLUMNS} FROM users WHERE tenant_id=%s ORDER BY lower(first_name), lower(last_name), email",
            (tenant_id,),
        )
        return [_row_to_user(r) for r in cur.fetchall()]
