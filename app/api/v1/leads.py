"""
Lead endpoints.

- Read/write → min role sales-rep
- Delete → min role sales-mgr
- Tenant comes from the session token, never from the client
"""
from __future__ import annotations
from typing import Optional
from fastapi import APIRouter, Depends, Query
from core.auth import Authed
from core.roles import require_min_role
from domain.models import LeadStatus
from schemas.crm import LeadCreate, LeadOut, LeadUpdate, Page
from services import crm_service

router = APIRouter(prefix="/api/v1/leads", tags=["leads"])


@router.get("", response_model=Page[LeadOut])
def leads_list(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[LeadStatus] = Query(None),
    source: Optional[str] = Query(None),
    assigned_to: Optional[str] = Query(None, alias="assignedTo"),
    search: Optional[str] = Query(None, max_length=100),
    auth: Authed = Depends(require_min_role("sales-rep")),
):
    filters = {
        "status": status.value if status else None,
        "source": source,
        "assigned_to": assigned_to,
        "search": search,
    }
    return crm_service.list_leads(auth.tenant_id, filters, page, limit)


@router.post("", response_model=LeadOut, status_code=201)
def lead_create(body: LeadCreate, auth: Authed = Depends(require_min_role("sales-rep"))):
    return crm_service.create_lead(auth.tenant_id, body)


@router.get("/{lead_id}", response_model=LeadOut)
def lead_get(lead_id: str, auth: Authed = Depends(require_min_role("sales-rep"))):
    return crm_service.get_lead(auth.tenant_id, lead_id)


@router.put("/{lead_id}", response_model=LeadOut)
def lead_update(lead_id: str, body: LeadUpdate, auth: Authed = Depends(require_min_role("sales-rep"))):
    return crm_service.update_lead(auth.tenant_id, lead_id, body)


@router.delete("/{lead_id}")
def lead_delete(lead_id: str, auth: Authed = Depends(require_min_role("sales-mgr"))) -> dict:
    crm_service.delete_lead(auth.tenant_id, lead_id)
    return {"ok": True}
