"""
Tenant provisioning for self-service registration.

Registration writes several rows that are not covered by one database
transaction (tenant, admin user, two master-data batches, tenant status).
`ProvisioningSaga` runs those steps in order and records an undo action for
each one; if a later step fails the recorded undos run in reverse order.

Undos are best-effort: each one is attempted once, failures are logged and
the remaining undos still run. A process crash between the tenant insert and
the rollback can still leave a `pending` tenant without users.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Optional
from core.logger import logger, log_security_event
from core.security import hash_password
from domain.models import (
    DEFAULT_MASTER_DATA, Tenant, TenantStatus, User, UserRole, UserStatus,
)
from repositories import master_data_repo, tenant_repository, user_repo


def split_full_name(name: str) -> tuple[str, str]:
    """
    Split a full name at the first whitespace boundary; the rest is
    re-joined with single spaces.

    >>> split_full_name("John")
    ('John', '')
    >>> split_full_name("Mary Jane Watson")
    ('Mary', 'Jane Watson')
    """
    parts = (name or "").strip().split(None, 1)
    first = parts[0] if parts else ""
    last = " ".join(parts[1].split()) if len(parts) > 1 else ""
    return first, last


@dataclass
class _Undo:
    name: str
    action: Callable[[], Any]


@dataclass
class ProvisioningSaga:
    """
    Ordered steps with reverse-order compensation.

    Use as a context manager: leaving the block with an exception triggers
    `rollback()` and the exception propagates unchanged.
    """
    label: str = "provisioning"
    completed: list[str] = field(default_factory=list)
    compensated: list[str] = field(default_factory=list)
    failed_step: Optional[str] = None
    _undo: list[_Undo] = field(default_factory=list)
    _current: Optional[str] = None

    def step(self, name: str, run: Callable[[], Any], compensate: Callable[[Any], Any] | None = None) -> Any:
        """Run a step; register `compensate(result)` once it succeeded."""
        self._current = name
        result = run()
        if compensate is not None:
            self._undo.append(_Undo(name, lambda: compensate(result)))
        self.completed.append(name)
        self._current = None
        return result

    def defer(self, name: str, compensate: Callable[[], Any]) -> None:
        """Register an undo before a step that may leave partial writes behind."""
        self._undo.append(_Undo(name, compensate))

    def rollback(self) -> list[str]:
        while self._undo:
            undo = self._undo.pop()
            try:
                undo.action()
                self.compensated.append(undo.name)
            except Exception:
                logger.exception(
                    "Compensation failed",
                    extra={"action": self.label, "result": "compensation_failed", "meta": {"step": undo.name}},
                )
        return self.compensated

    def __enter__(self) -> "ProvisioningSaga":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            self.failed_step = self._current
            self.rollback()
        return False


def provision_tenant(
    company_name: str,
    full_name: str,
    email: str,
    password: str,
    bcrypt_rounds: int = 10,
) -> tuple[Tenant, User]:
    """
    Create a tenant with its admin user and default master data, then activate it.

    The caller is responsible for the email uniqueness pre-check.

    Returns:
        (tenant, user) with the tenant in `active` status

    Raises:
        Whatever the failing step raised, after the completed steps were undone
    """
    saga = ProvisioningSaga(label="register")
    try:
        with saga:
            tenant = saga.step(
                "create_tenant",
                lambda: tenant_repository.create_tenant(company_name, TenantStatus.PENDING),
                compensate=lambda t: tenant_repository.delete_tenant(t.id),
            )

            password_hash = saga.step("hash_password", lambda: hash_password(password, bcrypt_rounds))
            first_name, last_name = split_full_name(full_name)

            user = saga.step(
                "create_user",
                lambda: user_repo.create_user(
                    tenant_id=tenant.id,
                    first_name=first_name,
                    last_name=last_name,
                    email=email,
                    password_hash=password_hash,
                    role=UserRole.ADMIN,
                    status=UserStatus.ACTIVE,
                ),
                compensate=lambda u: user_repo.delete_user(u.id),
            )

            saga.defer("seed_master_data", lambda: master_data_repo.delete_master_data(tenant.id))
            for category, values in DEFAULT_MASTER_DATA.items():
                saga.step(
                    f"seed_{category.value}",
                    lambda category=category, values=values: master_data_repo.insert_master_data(
                        tenant.id, category, values
                    ),
                )

            saga.step(
                "activate_tenant",
                lambda: tenant_repository.set_tenant_status(tenant.id, TenantStatus.ACTIVE),
            )
    except Exception:
        log_security_event(
            action="register",
            result="rolled_back",
            meta={"failed_step": saga.failed_step, "compensated": saga.compensated},
            level="warning",
        )
        raise

    return tenant.model_copy(update={"status": TenantStatus.ACTIVE}), user
