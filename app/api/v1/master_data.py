# app/api/v1/master_data.py
from fastapi import APIRouter, Depends, Query
from core.auth import auth_required, Authed
from core.errors import BadRequestError
from domain.models import MasterDataCategory
from repositories import master_data_repo

router = APIRouter(prefix="/api/v1/master-data", tags=["master-data"])


@router.get("")
def master_data(
    category: str = Query(..., description="deal-stages | lead-sources"),
    auth: Authed = Depends(auth_required),
) -> dict:
    try:
        cat = MasterDataCategory(category)
    except ValueError:
        raise BadRequestError(
            "Unknown master data category",
            meta={"allowed": [c.value for c in MasterDataCategory]},
        )
    return {"items": master_data_repo.list_master_data(auth.tenant_id, cat)}
