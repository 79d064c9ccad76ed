"""
Pydantic schemas for CRM records (leads, deals, users, master data).

- ALWAYS use Pydantic models for request/response
- Wire names are camelCase; Python attributes are snake_case
- Never expose password hashes
"""
from __future__ import annotations
from datetime import date
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from domain.models import DealStatus, LeadScore, LeadStatus, UserRole

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =========================
# Leads
# =========================

class LeadCreate(CamelModel):
    """Request schema for lead creation."""
    first_name: str = Field(..., min_length=1)
    last_name: str = ""
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    source: Optional[str] = Field(default=None, description="A lead-source master data value")
    status: LeadStatus = LeadStatus.NEW
    score: LeadScore = LeadScore.WARM
    notes: Optional[str] = None
    assigned_to: Optional[str] = Field(default=None, description="User id in the same tenant")


class LeadUpdate(CamelModel):
    """Request schema for partial lead updates (only sent fields change)."""
    first_name: Optional[str] = Field(default=None, min_length=1)
    last_name: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    source: Optional[str] = None
    status: Optional[LeadStatus] = None
    score: Optional[LeadScore] = None
    notes: Optional[str] = None
    assigned_to: Optional[str] = None


class LeadOut(CamelModel):
    id: str
    tenant_id: str
    first_name: str
    last_name: str = ""
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    source: Optional[str] = None
    status: LeadStatus
    score: LeadScore
    notes: Optional[str] = None
    assigned_to: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# =========================
# Deals
# =========================

class DealCreate(CamelModel):
    """Request schema for deal creation."""
    title: str = Field(..., min_length=1)
    value: float = Field(default=0, ge=0)
    stage: str = Field(..., description="A deal-stage master data value")
    status: DealStatus = DealStatus.OPEN
    lead_id: Optional[str] = None
    assigned_to: Optional[str] = None
    expected_close: Optional[date] = None
    notes: Optional[str] = None


class DealUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    value: Optional[float] = Field(default=None, ge=0)
    stage: Optional[str] = None
    status: Optional[DealStatus] = None
    lead_id: Optional[str] = None
    assigned_to: Optional[str] = None
    expected_close: Optional[date] = None
    notes: Optional[str] = None


class DealOut(CamelModel):
    id: str
    tenant_id: str
    title: str
    value: float
    stage: str
    status: DealStatus
    lead_id: Optional[str] = None
    assigned_to: Optional[str] = None
    expected_close: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


# =========================
# Pagination
# =========================

class Pagination(CamelModel):
    page: int
    limit: int
    total_pages: int
    total_items: int


class Page(CamelModel, Generic[T]):
    data: List[T]
    pagination: Pagination


# =========================
# Users
# =========================

class UserCreate(CamelModel):
    """Request schema for adding a user to the caller's tenant."""
    first_name: str = Field(..., min_length=1)
    last_name: str = ""
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.SALES_REP
