from enum import Enum
from pydantic import BaseModel


class TenantStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"


class UserRole(str, Enum):
    ADMIN = "admin"
    SALES_MGR = "sales-mgr"
    SALES_REP = "sales-rep"


class UserStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class MasterDataCategory(str, Enum):
    DEAL_STAGES = "deal-stages"
    LEAD_SOURCES = "lead-sources"


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    LOST = "lost"
    CONVERTED = "converted"


class LeadScore(str, Enum):
    HOT = "hot"
    WARM = "warm"
    COLD = "cold"


class DealStatus(str, Enum):
    OPEN = "open"
    WON = "won"
    LOST = "lost"


# Reference lists seeded for every new tenant, in display order.
DEFAULT_MASTER_DATA: dict[MasterDataCategory, tuple[str, ...]] = {
    MasterDataCategory.DEAL_STAGES: ("qualification", "meeting", "proposal", "negotiation", "closing"),
    MasterDataCategory.LEAD_SOURCES: ("event", "other", "referral", "social-media", "website"),
}


class User(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    password_hash: str
    role: UserRole
    status: UserStatus
    tenant_id: str

    def public(self) -> dict:
        """Identity fields safe to return to clients (no hash)."""
        return {
            "id": self.id,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "role": self.role.value,
            "status": self.status.value,
            "tenantId": self.tenant_id,
        }


class Tenant(BaseModel):
    id: str
    company_name: str
    status: TenantStatus

    def public(self) -> dict:
        return {"id": self.id, "companyName": self.company_name, "status": self.status.value}
