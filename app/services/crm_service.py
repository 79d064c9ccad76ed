"""
Service layer for leads and deals.

- Data access is routed through repositories
- Reference fields are checked against the caller's tenant:
  lead `source` → active lead-sources, deal `stage` → active deal-stages,
  `assignedTo` → a user of the same tenant
"""
from __future__ import annotations
import math
from core.errors import BadRequestError, NotFoundError
from domain.models import MasterDataCategory
from repositories import crm_repo, master_data_repo, user_repo
from schemas.crm import (
    DealCreate, DealOut, DealUpdate, LeadCreate, LeadOut, LeadUpdate, Page, Pagination,
)

# Columns that may be omitted from an update but never cleared.
_LEAD_REQUIRED = ("first_name", "last_name", "status", "score")
_DEAL_REQUIRED = ("title", "value", "stage", "status")


def pagination(total: int, page: int, limit: int) -> Pagination:
    return Pagination(
        page=page,
        limit=limit,
        total_pages=max(1, math.ceil(total / limit)),
        total_items=total,
    )


def _check_master_value(tenant_id: str, category: MasterDataCategory, value: str | None, field: str) -> None:
    if value is None:
        return
    allowed = {row["value"] for row in master_data_repo.list_master_data(tenant_id, category)}
    if value not in allowed:
        raise BadRequestError(
            f"Unknown {field}",
            meta={"field": field, "value": value, "allowed": sorted(allowed)},
        )


def _check_assignee(tenant_id: str, user_id: str | None) -> None:
    if user_id is None:
        return
    if user_repo.get_user(tenant_id, user_id) is None:
        raise BadRequestError("Assigned user not found in this tenant", meta={"field": "assignedTo"})


def _update_payload(model, required: tuple[str, ...]) -> dict:
    data = model.model_dump(mode="json", exclude_unset=True)
    return {k: v for k, v in data.items() if not (k in required and v is None)}


# =========================
# Leads
# =========================

def list_leads(tenant_id: str, filters: dict, page: int, limit: int) -> Page[LeadOut]:
    rows, total = crm_repo.list_leads(tenant_id, filters, page, limit)
    return Page[LeadOut](
        data=[LeadOut.model_validate(r) for r in rows],
        pagination=pagination(total, page, limit),
    )


def get_lead(tenant_id: str, lead_id: str) -> LeadOut:
    row = crm_repo.get_lead(tenant_id, lead_id)
    if not row:
        raise NotFoundError("Lead not found")
    return LeadOut.model_validate(row)


def create_lead(tenant_id: str, data: LeadCreate) -> LeadOut:
    _check_master_value(tenant_id, MasterDataCategory.LEAD_SOURCES, data.source, "source")
    _check_assignee(tenant_id, data.assigned_to)
    row = crm_repo.create_lead(tenant_id, data.model_dump(mode="json"))
    return LeadOut.model_validate(row)


def update_lead(tenant_id: str, lead_id: str, data: LeadUpdate) -> LeadOut:
    payload = _update_payload(data, _LEAD_REQUIRED)
    _check_master_value(tenant_id, MasterDataCategory.LEAD_SOURCES, payload.get("source"), "source")
    _check_assignee(tenant_id, payload.get("assigned_to"))
    row = crm_repo.update_lead(tenant_id, lead_id, payload)
    if not row:
        raise NotFoundError("Lead not found")
    return LeadOut.model_validate(row)


def delete_lead(tenant_id: str, lead_id: str) -> None:
    if not crm_repo.delete_lead(tenant_id, lead_id):
        raise NotFoundError("Lead not found")


# =========================
# Deals
# =========================

def _check_lead(tenant_id: str, lead_id: str | None) -> None:
    if lead_id is not None and crm_repo.get_lead(tenant_id, lead_id) is None:
        raise BadRequestError("Lead not found in this tenant", meta={"field": "leadId"})


def list_deals(tenant_id: str, filters: dict, page: int, limit: int) -> Page[DealOut]:
    rows, total = crm_repo.list_deals(tenant_id, filters, page, limit)
    return Page[DealOut](
        data=[DealOut.model_validate(r) for r in rows],
        pagination=pagination(total, page, limit),
    )


def get_deal(tenant_id: str, deal_id: str) -> DealOut:
    row = crm_repo.get_deal(tenant_id, deal_id)
    if not row:
        raise NotFoundError("Deal not found")
    return DealOut.model_validate(row)


def create_deal(tenant_id: str, data: DealCreate) -> DealOut:
    _check_master_value(tenant_id, MasterDataCategory.DEAL_STAGES, data.stage, "stage")
    _check_assignee(tenant_id, data.assigned_to)
    _check_lead(tenant_id, data.lead_id)
    row = crm_repo.create_deal(tenant_id, data.model_dump(mode="json"))
    return DealOut.model_validate(row)


def update_deal(tenant_id: str, deal_id: str, data: DealUpdate) -> DealOut:
    payload = _update_payload(data, _DEAL_REQUIRED)
    _check_master_value(tenant_id, MasterDataCategory.DEAL_STAGES, payload.get("stage"), "stage")
    _check_assignee(tenant_id, payload.get("assigned_to"))
    _check_lead(tenant_id, payload.get("lead_id"))
    row = crm_repo.update_deal(tenant_id, deal_id, payload)
    if not row:
        raise NotFoundError("Deal not found")
    return DealOut.model_validate(row)


def delete_deal(tenant_id: str, deal_id: str) -> None:
    if not crm_repo.delete_deal(tenant_id, deal_id):
        raise NotFoundError("Deal not found")
