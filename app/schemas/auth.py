"""
Pydantic schemas for the authentication endpoint.

- The single auth endpoint is discriminated by `action`
- Wire names are camelCase to match the web client
"""
from __future__ import annotations
from enum import Enum
from typing import Any
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class AuthAction(str, Enum):
    """Closed set of actions the auth endpoint understands."""
    REGISTER = "register"
    LOGIN = "login"
    UNKNOWN = "unknown"

    @classmethod
    def from_body(cls, body: Any) -> "AuthAction":
        raw = body.get("action") if isinstance(body, dict) else None
        if raw == cls.REGISTER.value:
            return cls.REGISTER
        if raw == cls.LOGIN.value:
            return cls.LOGIN
        return cls.UNKNOWN


class RegisterIn(BaseModel):
    """Request schema for tenant registration."""
    model_config = ConfigDict(populate_by_name=True)

    company_name: str = Field(..., alias="companyName", min_length=1, description="Company (tenant) name")
    name: str = Field(..., description="Full name of the first admin user")
    email: EmailStr = Field(..., description="Admin email address")
    password: str = Field(..., min_length=1, description="Admin password")


class LoginIn(BaseModel):
    """Request schema for user login."""
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., description="User password")


class MeOut(BaseModel):
    """Response schema for /me endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    email: str
    role: str
    tenant_id: str = Field(..., serialization_alias="tenantId")
