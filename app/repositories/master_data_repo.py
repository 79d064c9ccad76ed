"""
Repository for tenant-scoped master data (deal stages, lead sources).

- All queries are tenant-scoped
- Category lists are cached in redis and invalidated on writes
"""
from __future__ import annotations
from core.db import get_conn
from core.cache import cached_json, invalidate
from domain.models import MasterDataCategory

CACHE_TTL = 3600


def _cache_key(tenant_id: str, category: MasterDataCategory) -> str:
    return f"master_data:{tenant_id}:{category.value}"


def insert_master_data(tenant_id: str, category: MasterDataCategory, values: list[str] | tuple[str, ...]) -> list[dict]:
    """
    Insert one category list; display order follows the position in `values`.

    Returns:
        The inserted rows
    """
    rows = []
    with get_conn() as conn, conn.cursor() as cur:
        for order, value in enumerate(values):
            cur.execute(
                """
                INSERT INTO master_data (tenant_id, category, name, value, display_order, is_active)
                VALUES (%s, %s, %s, %s, %s, true)
                RETURNING id, category, name, value, display_order, is_active
                """,
                (tenant_id, category.value, value, value, order),
            )
            r = cur.fetchone()
            rows.append({
                "id": str(r[0]),
                "tenantId": tenant_id,
                "category": r[1],
                "name": r[2],
                "value": r[3],
                "displayOrder": r[4],
                "isActive": r[5],
            })
    invalidate(_cache_key(tenant_id, category))
    return rows


def delete_master_data(tenant_id: str) -> int:
    with get_conn() as conn, conn.cursor() as cur:
        cur.execute("DELETE FROM master_data WHERE tenant_id=%s", (tenant_id,))
        deleted = cur.rowcount
    invalidate(*(_cache_key(tenant_id, c) for c in MasterDataCategory))
    return deleted


def list_master_data(tenant_id: str, category: MasterDataCategory) -> list[dict]:
    def _load() -> list[dict]:
        with get_conn() as conn, conn.cursor() as cur:
            cur.execute(
                """
                SELECT id, category, name, value, display_order, is_active
                FROM master_data
                WHERE tenant_id=%s AND category=%s AND is_active
                ORDER BY display_order, name
                """,
                (tenant_id, category.value),
            )
            return [
                {
                    "id": str(r[0]),
                    "tenantId": tenant_id,
                    "category": r[1],
                    "name": r[2],
                    "value": r[3],
                    "displayOrder": r[4],
                    "isActive": r[5],
                }
                for r in cur.fetchall()
            ]

    return cached_json(_cache_key(tenant_id, category), CACHE_TTL, _load)


def configure_cache_ttl(ttl: int) -> None:
    global CACHE_TTL
    CACHE_TTL = ttl
