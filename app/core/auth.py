"""
Session token management.

- Tokens are signed with the secret handed over at construction time
  (never read ad hoc from the environment)
- Claims carry user id, email, role and tenant id
- Tokens expire after the configured lifetime (1 day by default)
- Accepted from the session cookie or an `Authorization: Bearer <token>` header
"""
from __future__ import annotations
import datetime
import jwt
from fastapi import Request
from pydantic import BaseModel
from core.errors import UnauthorizedError

ALGORITHM = "HS256"


class Authed(BaseModel):
    """Authenticated user context with tenant and role information."""
    user_id: str
    email: str
    tenant_id: str
    role: str


class SessionTokens:
    """Issues and verifies signed, time-limited session tokens."""

    def __init__(self, secret: str, ttl: datetime.timedelta):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self.ttl = ttl

    def issue(
        self,
        user_id: str,
        email: str,
        role: str,
        tenant_id: str,
        now: datetime.datetime | None = None,
    ) -> str:
        """
        Sign a token for the given identity.

        Args:
            user_id: User identifier
            email: User email
            role: User role (admin, sales-mgr, sales-rep)
            tenant_id: Owning tenant identifier
            now: Issue time, defaults to the current UTC time

        Returns:
            Encoded JWT string
        """
        now = now or datetime.datetime.now(datetime.timezone.utc)
        payload = {
            "id": str(user_id),
            "email": email,
            "role": role,
            "tenantId": str(tenant_id),
            "iat": now,
            "exp": now + self.ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def decode(self, token: str) -> dict:
        """
        Verify signature and expiry and return the claims.

        Raises:
            UnauthorizedError: if the token is expired or invalid
        """
        try:
            return jwt.decode(
                token,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Token has expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid or expired token")

    def authed(self, token: str) -> Authed:
        claims = self.decode(token)
        return Authed(
            user_id=str(claims.get("id", "")),
            email=str(claims.get("email", "")),
            tenant_id=str(claims.get("tenantId", "")),
            role=str(claims.get("role", "")),
        )


def _token_from_request(req: Request) -> str | None:
    cookie_name = req.app.state.settings.AUTH_COOKIE_NAME
    token = req.cookies.get(cookie_name)
    if token:
        return token
    auth = req.headers.get("authorization")
    if auth and auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1].strip() or None
    return None


def auth_required(req: Request) -> Authed:
    """
    FastAPI dependency that validates the session token.

    Raises:
        UnauthorizedError: 401 if token is missing, invalid, or expired
    """
    token = _token_from_request(req)
    if not token:
        raise UnauthorizedError("Authentication is required")
    tokens: SessionTokens = req.app.state.tokens
    return tokens.authed(token)
