"""
Authentication service: registration and login behind one `action` dispatch.

- Validates credentials securely
- Logs security events (register, login attempts)
- NEVER logs plaintext passwords, hashes or tokens
- Configuration (signing secret, token lifetime, bcrypt cost) is injected at
  construction time
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable
from pydantic import ValidationError
from core.auth import SessionTokens
from core.config import Settings
from core.errors import (
    AppError, BadRequestError, ConflictError, InternalError, NotFoundError,
    UnauthorizedError, ValidationFailed,
)
from core.logger import logger, log_security_event
from core.security import verify_password
from domain.models import UserStatus
from repositories import user_repo
from schemas.auth import AuthAction, LoginIn, RegisterIn
from services.provisioning import provision_tenant


@dataclass
class AuthResult:
    """Response body plus the session token to set as a cookie, if any."""
    body: dict
    token: str | None = None


def _parse(model, body: dict):
    try:
        return model.model_validate(body)
    except ValidationError as e:
        raise ValidationFailed(
            "Invalid request payload",
            meta={"errors": e.errors(include_url=False, include_context=False, include_input=False)},
        )


class AuthService:
    def __init__(self, settings: Settings, tokens: SessionTokens):
        self.settings = settings
        self.tokens = tokens
        self._handlers: dict[AuthAction, Callable[[dict], AuthResult]] = {
            AuthAction.REGISTER: self._handle_register,
            AuthAction.LOGIN: self._handle_login,
        }

    def dispatch(self, body: Any) -> AuthResult:
        """
        Route a raw request body to the handler selected by its `action`.

        Raises:
            BadRequestError: 400 for a missing or unsupported action
        """
        action = AuthAction.from_body(body)
        handler = self._handlers.get(action)
        if handler is None:
            logger.info("Rejected auth request", extra={"action": "auth_dispatch", "result": "invalid_action"})
            raise BadRequestError("Invalid action")
        return handler(body)

    def _handle_register(self, body: dict) -> AuthResult:
        return AuthResult(body=self.register(_parse(RegisterIn, body)))

    def _handle_login(self, body: dict) -> AuthResult:
        return self.login(_parse(LoginIn, body))

    # =========================
    # Register
    # =========================

    def register(self, data: RegisterIn) -> dict:
        """
        Create a tenant and its admin user.

        Returns:
            {"tenant": {...}, "user": {...}} with public fields only

        Raises:
            ConflictError: 409 if the email is already registered (any tenant)
            InternalError: 500 for any other failure, after rollback
        """
        try:
            existing = user_repo.find_user_by_email(data.email)
        except Exception as e:
            logger.exception("Registration lookup failed", extra={"action": "register", "result": "error"})
            raise InternalError("Registration failed") from e

        if existing:
            log_security_event(action="register", result="failure", meta={"reason": "duplicate_email"})
            raise ConflictError("A user with this email already exists")

        try:
            tenant, user = provision_tenant(
                company_name=data.company_name,
                full_name=data.name,
                email=data.email,
                password=data.password,
                bcrypt_rounds=self.settings.BCRYPT_ROUNDS,
            )
        except AppError:
            raise
        except Exception as e:
            logger.exception("Registration failed", extra={"action": "register", "result": "error"})
            raise InternalError("Registration failed") from e

        log_security_event(action="register", result="success", user_id=user.id, tenant_id=tenant.id)
        return {"tenant": tenant.public(), "user": user.public()}

    # =========================
    # Login
    # =========================

    def login(self, data: LoginIn) -> AuthResult:
        """
        Verify credentials and issue a session token.

        Raises:
            NotFoundError: 404 if no user has this email
            UnauthorizedError: 401 for a wrong password or inactive user
            InternalError: 500 for storage failures
        """
        try:
            user = user_repo.find_user_by_email(data.email)
        except Exception as e:
            logger.exception("Login lookup failed", extra={"action": "login", "result": "error"})
            raise InternalError("Error logging in") from e

        if not user:
            log_security_event(action="login", result="failure", meta={"reason": "user_not_found"})
            raise NotFoundError("User not found")

        if not verify_password(data.password, user.password_hash):
            log_security_event(
                action="login",
                result="failure",
                user_id=user.id,
                tenant_id=user.tenant_id,
                meta={"reason": "invalid_password"},
            )
            raise UnauthorizedError("Invalid credentials")

        if user.status != UserStatus.ACTIVE:
            log_security_event(
                action="login",
                result="failure",
                user_id=user.id,
                tenant_id=user.tenant_id,
                meta={"reason": "user_inactive"},
            )
            raise UnauthorizedError("Invalid credentials")

        token = self.tokens.issue(user.id, user.email, user.role.value, user.tenant_id)
        log_security_event(
            action="login",
            result="success",
            user_id=user.id,
            tenant_id=user.tenant_id,
            meta={"role": user.role.value},
        )
        return AuthResult(
            body={
                "id": user.id,
                "email": user.email,
                "role": user.role.value,
                "tenantId": user.tenant_id,
                "message": "Login successful",
            },
            token=token,
        )
