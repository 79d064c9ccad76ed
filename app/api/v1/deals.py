# app/api/v1/deals.py
from typing import Optional
from fastapi import APIRouter, Depends, Query
from core.auth import Authed
from core.roles import require_min_role
from domain.models import DealStatus
from schemas.crm import DealCreate, DealOut, DealUpdate, Page
from services import crm_service

router = APIRouter(prefix="/api/v1/deals", tags=["deals"])


@router.get("", response_model=Page[DealOut])
def deals_list(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    title: Optional[str] = Query(None, max_length=200),
    status: Optional[DealStatus] = Query(None),
    stage: Optional[str] = Query(None),
    assigned_to: Optional[str] = Query(None, alias="assignedTo"),
    auth: Authed = Depends(require_min_role("sales-rep")),
):
    filters = {
        "title": title,
        "status": status.value if status else None,
        "stage": stage,
        "assigned_to": assigned_to,
    }
    return crm_service.list_deals(auth.tenant_id, filters, page, limit)


@router.post("", response_model=DealOut, status_code=201)
def deal_create(body: DealCreate, auth: Authed = Depends(require_min_role("sales-rep"))):
    return crm_service.create_deal(auth.tenant_id, body)


@router.get("/{deal_id}", response_model=DealOut)
def deal_get(deal_id: str, auth: Authed = Depends(require_min_role("sales-rep"))):
    return crm_service.get_deal(auth.tenant_id, deal_id)


@router.put("/{deal_id}", response_model=DealOut)
def deal_update(deal_id: str, body: DealUpdate, auth: Authed = Depends(require_min_role("sales-rep"))):
    return crm_service.update_deal(auth.tenant_id, deal_id, body)


@router.delete("/{deal_id}")
def deal_delete(deal_id: str, auth: Authed = Depends(require_min_role("sales-mgr"))) -> dict:
    crm_service.delete_deal(auth.tenant_id, deal_id)
    return {"ok": True}
