"""
SQLAlchemy models for the CRM schema.

The repositories talk to PostgreSQL through psycopg2 directly; these models
describe the tables they rely on and are used by `core.db.create_schema()`
to create them.
"""
from __future__ import annotations
from sqlalchemy import (
    Column, String, Boolean, Integer, ForeignKey, Text, Numeric, Date,
    TIMESTAMP, Index, UniqueConstraint, text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


def _uuid_pk() -> Column:
    return Column(UUID(as_uuid=False), primary_key=True, server_default=text("gen_random_uuid()"))


def _timestamps():
    return (
        Column("created_at", TIMESTAMP(timezone=True), nullable=False, server_default=func.now()),
        Column("updated_at", TIMESTAMP(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()),
    )


class Tenant(Base):
    """
    An isolated customer organization.

    Created `pending` during registration and flipped to `active` once its
    admin user and master data exist.
    """
    __tablename__ = "tenants"

    id = _uuid_pk()
    company_name = Column(String, nullable=False)
    status = Column(String, nullable=False, server_default="pending")
    created_at, updated_at = _timestamps()

    users = relationship("User", back_populates="tenant", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, company_name={self.company_name}, status={self.status})>"


class User(Base):
    """
    A user owned by exactly one tenant.

    Email is unique across the whole system, not per tenant.
    """
    __tablename__ = "users"

    id = _uuid_pk()
    tenant_id = Column(UUID(as_uuid=False), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(String, nullable=False, server_default="")
    last_name = Column(String, nullable=False, server_default="")
    email = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, server_default="sales-rep")
    status = Column(String, nullable=False, server_default="active")
    created_at, updated_at = _timestamps()

    tenant = relationship("Tenant", back_populates="users")

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"


class MasterData(Base):
    """Tenant-scoped reference lists (deal stages, lead sources)."""
    __tablename__ = "master_data"

    id = _uuid_pk()
    tenant_id = Column(UUID(as_uuid=False), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    category = Column(String, nullable=False)
    name = Column(String, nullable=False)
    value = Column(String, nullable=False)
    display_order = Column(Integer, nullable=False, server_default="0")
    is_active = Column(Boolean, nullable=False, server_default="true")
    created_at, updated_at = _timestamps()

    __table_args__ = (
        UniqueConstraint("tenant_id", "category", "value", name="uq_master_data_value"),
        Index("ix_master_data_tenant_category", "tenant_id", "category", "display_order"),
    )


class Lead(Base):
    __tablename__ = "leads"

    id = _uuid_pk()
    tenant_id = Column(UUID(as_uuid=False), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, server_default="")
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    company = Column(String, nullable=True)
    source = Column(String, nullable=True)
    status = Column(String, nullable=False, server_default="new")
    score = Column(String, nullable=False, server_default="warm")
    notes = Column(Text, nullable=True)
    assigned_to = Column(UUID(as_uuid=False), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at, updated_at = _timestamps()


class Deal(Base):
    __tablename__ = "deals"

    id = _uuid_pk()
    tenant_id = Column(UUID(as_uuid=False), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    value = Column(Numeric(14, 2), nullable=False, server_default="0")
    stage = Column(String, nullable=False)
    status = Column(String, nullable=False, server_default="open")
    lead_id = Column(UUID(as_uuid=False), ForeignKey("leads.id", ondelete="SET NULL"), nullable=True)
    assigned_to = Column(UUID(as_uuid=False), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    expected_close = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)
    created_at, updated_at = _timestamps()
