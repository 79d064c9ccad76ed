# app/repositories/crm_repo.py
"""
Leads and deals persistence.

- Every statement is tenant-scoped
- Partial updates only touch whitelisted columns
- Ids that are not UUIDs match nothing and never reach the database
"""
from __future__ import annotations
from typing import Any, Optional
from core.db import get_conn, is_uuid

LEAD_COLUMNS = (
    "id", "tenant_id", "first_name", "last_name", "email", "phone", "company",
    "source", "status", "score", "notes", "assigned_to", "created_at", "updated_at",
)
LEAD_WRITABLE = (
    "first_name", "last_name", "email", "phone", "company",
    "source", "status", "score", "notes", "assigned_to",
)

DEAL_COLUMNS = (
    "id", "tenant_id", "title", "value", "stage", "status", "lead_id",
    "assigned_to", "expected_close", "notes", "created_at", "updated_at",
)
DEAL_WRITABLE = (
    "title", "value", "stage", "status", "lead_id", "assigned_to", "expected_close", "notes",
)


def _to_dict(columns: tuple[str, ...], row) -> dict:
    out: dict[str, Any] = {}
    for col, val in zip(columns, row):
        if col in ("id", "tenant_id", "assigned_to", "lead_id") and val is not None:
            val = str(val)
        elif hasattr(val, "isoformat"):
            val = val.isoformat()
        elif col == "value" and val is not None:
            val = float(val)
        out[col] = val
    return out


def _insert(table: str, columns: tuple[str, ...], writable: tuple[str, ...], tenant_id: str, data: dict) -> dict:
    fields = [k for k in writable if k in data]
    cols = ["tenant_id", *fields]
    values = [tenant_id, *(data[k] for k in fields)]
    placeholders = ", ".join(["%s"] * len(cols))
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute(
            f"INSERT INTO {table} ({', '.join(cols)}) VALUES ({placeholders}) RETURNING {', '.join(columns)}",
            tuple(values),
        )
        return _to_dict(columns, cur.fetchone())


def _get(table: str, columns: tuple[str, ...], tenant_id: str, record_id: str) -> Optional[dict]:
    if not is_uuid(record_id):
        return None
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute(
            f"SELECT {', '.join(columns)} FROM {table} WHERE id=%s AND tenant_id=%s",
            (record_id, tenant_id),
        )
        r = cur.fetchone()
        return _to_dict(columns, r) if r else None


def _update(
    table: str, columns: tuple[str, ...], writable: tuple[str, ...],
    tenant_id: str, record_id: str, data: dict,
) -> Optional[dict]:
    if not is_uuid(record_id):
        return None

    update_fields = []
    update_values = []
    for key in writable:
        if key in data:
            update_fields.append(f"{key} = %s")
            update_values.append(data[key])

    if not update_fields:
        return _get(table, columns, tenant_id, record_id)

    update_fields.append("updated_at = now()")
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute(
            f"""
            UPDATE {table}
            SET {', '.join(update_fields)}
            WHERE id = %s AND tenant_id = %s
            RETURNING {', '.join(columns)}
            """,
            (*update_values, record_id, tenant_id),
        )
        r = cur.fetchone()
        return _to_dict(columns, r) if r else None


def _delete(table: str, tenant_id: str, record_id: str) -> bool:
    if not is_uuid(record_id):
        return False
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute(f"DELETE FROM {table} WHERE id=%s AND tenant_id=%s", (record_id, tenant_id))
        return cur.rowcount > 0


def _list(
    table: str, columns: tuple[str, ...], tenant_id: str,
    where: list[str], params: list, page: int, limit: int,
) -> tuple[list[dict], int]:
    clauses = " AND ".join(["tenant_id = %s", *where])
    base_params = [tenant_id, *params]
    offset = (page - 1) * limit
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute(f"SELECT count(*) FROM {table} WHERE {clauses}", tuple(base_params))
        total = cur.fetchone()[0]
        cur.execute(
            f"""
            SELECT {', '.join(columns)} FROM {table}
            WHERE {clauses}
            ORDER BY created_at DESC, id
            LIMIT %s OFFSET %s
            """,
            (*base_params, limit, offset),
        )
        rows = [_to_dict(columns, r) for r in cur.fetchall()]
    return rows, total


# =========================
# Leads
# =========================

def create_lead(tenant_id: str, data: dict) -> dict:
    return _insert("leads", LEAD_COLUMNS, LEAD_WRITABLE, tenant_id, data)


def get_lead(tenant_id: str, lead_id: str) -> Optional[dict]:
    return _get("leads", LEAD_COLUMNS, tenant_id, lead_id)


def update_lead(tenant_id: str, lead_id: str, data: dict) -> Optional[dict]:
    return _update("leads", LEAD_COLUMNS, LEAD_WRITABLE, tenant_id, lead_id, data)


def delete_lead(tenant_id: str, lead_id: str) -> bool:
    return _delete("leads", tenant_id, lead_id)


def list_leads(tenant_id: str, filters: dict, page: int, limit: int) -> tuple[list[dict], int]:
    if filters.get("assigned_to") and not is_uuid(filters["assigned_to"]):
        return [], 0
    where, params = [], []
    for key in ("status", "source", "assigned_to"):
        if filters.get(key):
            where.append(f"{key} = %s")
            params.append(filters[key])
    if filters.get("search"):
        where.append("(first_name ILIKE %s OR last_name ILIKE %s OR email ILIKE %s OR company ILIKE %s)")
        params.extend([f"%{filters['search']}%"] * 4)
    return _list("leads", LEAD_COLUMNS, tenant_id, where, params, page, limit)


# =========================
# Deals
# =========================

def create_deal(tenant_id: str, data: dict) -> dict:
    return _insert("deals", DEAL_COLUMNS, DEAL_WRITABLE, tenant_id, data)


def get_deal(tenant_id: str, deal_id: str) -> Optional[dict]:
    return _get("deals", DEAL_COLUMNS, tenant_id, deal_id)


def update_deal(tenant_id: str, deal_id: str, data: dict) -> Optional[dict]:
    return _update("deals", DEAL_COLUMNS, DEAL_WRITABLE, tenant_id, deal_id, data)


def delete_deal(tenant_id: str, deal_id: str) -> bool:
    return _delete("deals", tenant_id, deal_id)


def list_deals(tenant_id: str, filters: dict, page: int, limit: int) -> tuple[list[dict], int]:
    if filters.get("assigned_to") and not is_uuid(filters["assigned_to"]):
        return [], 0
    where, params = [], []
    if filters.get("title"):
        where.append("title ILIKE %s")
        params.append(f"%{filters['title']}%")
    for key in ("status", "stage", "assigned_to"):
        if filters.get(key):
            where.append(f"{key} = %s")
            params.append(filters[key])
    return _list("deals", DEAL_COLUMNS, tenant_id, where, params, page, limit)
