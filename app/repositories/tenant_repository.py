# app/repositories/tenant_repository.py
from __future__ import annotations
from typing import Optional
from core.db import get_conn
from domain.models import Tenant, TenantStatus


def _row_to_tenant(r) -> Tenant:
    return Tenant(id=str(r[0]), company_name=r[1], status=TenantStatus(r[2]))


def create_tenant(company_name: str, status: TenantStatus = TenantStatus.PENDING) -> Tenant:
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute(
            "INSERT INTO tenants (company_name, status) VALUES (%s, %s) RETURNING id, company_name, status",
            (company_name, status.value),
        )
        return _row_to_tenant(cur.fetchone())


def get_tenant(tenant_id: str) -> Optional[Tenant]:
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute("SELECT id, company_name, status FROM tenants WHERE id=%s", (tenant_id,))
        r = cur.fetchone()
        return _row_to_tenant(r) if r else None


def set_tenant_status(tenant_id: str, status: TenantStatus) -> None:
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute(
            "UPDATE tenants SET status=%s, updated_at=now() WHERE id=%s",
            (status.value, tenant_id),
        )


def delete_tenant(tenant_id: str) -> bool:
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM tenants WHERE id=%s", (tenant_id,))
        return cur.rowcount > 0
