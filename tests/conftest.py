import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from core import redis as redis_client
from core.config import Settings
from core.errors import ConflictError
from domain.models import Tenant, TenantStatus, User, UserStatus
from main import create_app
from repositories import crm_repo, master_data_repo, tenant_repository, user_repo

TEST_SECRET = "test-secret-key-for-session-tokens"


class ForcedFailure(RuntimeError):
    pass


class InMemoryStore:
    """
    Stand-in for the repositories: same function signatures, dict storage.

    `fail_on` holds operation names that raise ForcedFailure; `calls` records
    every operation in order.
    """

    def __init__(self):
        self.tenants: dict[str, Tenant] = {}
        self.users: dict[str, User] = {}
        self.master_data: list[dict] = []
        self.leads: dict[str, dict] = {}
        self.deals: dict[str, dict] = {}
        self.calls: list[str] = []
        self.fail_on: set[str] = set()

    def _op(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise ForcedFailure(f"forced failure in {name}")

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    # --- tenants ---
    def create_tenant(self, company_name, status=TenantStatus.PENDING):
        self._op("create_tenant")
        tenant = Tenant(id=str(uuid.uuid4()), company_name=company_name, status=status)
        self.tenants[tenant.id] = tenant
        return tenant

    def get_tenant(self, tenant_id):
        self._op("get_tenant")
        return self.tenants.get(tenant_id)

    def set_tenant_status(self, tenant_id, status):
        self._op("set_tenant_status")
        self.tenants[tenant_id] = self.tenants[tenant_id].model_copy(update={"status": status})

    def delete_tenant(self, tenant_id):
        self._op("delete_tenant")
        return self.tenants.pop(tenant_id, None) is not None

    # --- users ---
    def find_user_by_email(self, email):
        self._op("find_user_by_email")
        email = user_repo.normalize_email(email)
        return next((u for u in self.users.values() if u.email == email), None)

    def get_user(self, tenant_id, user_id):
        self._op("get_user")
        u = self.users.get(user_id)
        return u if u and u.tenant_id == tenant_id else None

    def create_user(self, tenant_id, first_name, last_name, email, password_hash, role, status=UserStatus.ACTIVE):
        self._op("create_user")
        email = user_repo.normalize_email(email)
        if any(u.email == email for u in self.users.values()):
            raise ConflictError("A user with this email already exists")
        user = User(
            id=str(uuid.uuid4()),
            first_name=first_name,
            last_name=last_name,
            email=email,
            password_hash=password_hash,
            role=role,
            status=status,
            tenant_id=tenant_id,
        )
        self.users[user.id] = user
        return user

    def delete_user(self, user_id):
        self._op("delete_user")
        return self.users.pop(user_id, None) is not None

    def list_users(self, tenant_id):
        self._op("list_users")
        return [u for u in self.users.values() if u.tenant_id == tenant_id]

    # --- master data ---
    def insert_master_data(self, tenant_id, category, values):
        self._op(f"insert_master_data:{category.value}")
        rows = [
            {
                "id": str(uuid.uuid4()),
                "tenantId": tenant_id,
                "category": category.value,
                "name": v,
                "value": v,
                "displayOrder": i,
                "isActive": True,
            }
            for i, v in enumerate(values)
        ]
        self.master_data.extend(rows)
        return rows

    def delete_master_data(self, tenant_id):
        self._op("delete_master_data")
        before = len(self.master_data)
        self.master_data = [r for r in self.master_data if r["tenantId"] != tenant_id]
        return before - len(self.master_data)

    def list_master_data(self, tenant_id, category):
        self._op("list_master_data")
        rows = [
            r for r in self.master_data
            if r["tenantId"] == tenant_id and r["category"] == category.value and r["isActive"]
        ]
        return sorted(rows, key=lambda r: r["displayOrder"])

    # --- leads / deals ---
    def _insert(self, table, tenant_id, data, defaults):
        record = {**defaults, **data, "id": str(uuid.uuid4()), "tenant_id": tenant_id,
                  "created_at": self._now(), "updated_at": self._now()}
        table[record["id"]] = record
        return dict(record)

    def _update(self, table, tenant_id, record_id, data):
        record = table.get(record_id)
        if not record or record["tenant_id"] != tenant_id:
            return None
        record.update(data, updated_at=self._now())
        return dict(record)

    def _delete(self, table, tenant_id, record_id):
        record = table.get(record_id)
        if not record or record["tenant_id"] != tenant_id:
            return False
        del table[record_id]
        return True

    @staticmethod
    def _page(rows, page, limit):
        return [dict(r) for r in rows[(page - 1) * limit: page * limit]], len(rows)

    def create_lead(self, tenant_id, data):
        self._op("create_lead")
        return self._insert(self.leads, tenant_id, data, {"status": "new", "score": "warm", "last_name": ""})

    def get_lead(self, tenant_id, lead_id):
        self._op("get_lead")
        r = self.leads.get(lead_id)
        return dict(r) if r and r["tenant_id"] == tenant_id else None

    def update_lead(self, tenant_id, lead_id, data):
        self._op("update_lead")
        return self._update(self.leads, tenant_id, lead_id, data)

    def delete_lead(self, tenant_id, lead_id):
        self._op("delete_lead")
        return self._delete(self.leads, tenant_id, lead_id)

    def list_leads(self, tenant_id, filters, page, limit):
        self._op("list_leads")
        rows = [r for r in self.leads.values() if r["tenant_id"] == tenant_id]
        for key in ("status", "source", "assigned_to"):
            if filters.get(key):
                rows = [r for r in rows if r.get(key) == filters[key]]
        if filters.get("search"):
            needle = filters["search"].lower()
            rows = [
                r for r in rows
                if any(needle in (r.get(k) or "").lower() for k in ("first_name", "last_name", "email", "company"))
            ]
        return self._page(rows, page, limit)

    def create_deal(self, tenant_id, data):
        self._op("create_deal")
        return self._insert(self.deals, tenant_id, data, {"status": "open", "value": 0})

    def get_deal(self, tenant_id, deal_id):
        self._op("get_deal")
        r = self.deals.get(deal_id)
        return dict(r) if r and r["tenant_id"] == tenant_id else None

    def update_deal(self, tenant_id, deal_id, data):
        self._op("update_deal")
        return self._update(self.deals, tenant_id, deal_id, data)

    def delete_deal(self, tenant_id, deal_id):
        self._op("delete_deal")
        return self._delete(self.deals, tenant_id, deal_id)

    def list_deals(self, tenant_id, filters, page, limit):
        self._op("list_deals")
        rows = [r for r in self.deals.values() if r["tenant_id"] == tenant_id]
        if filters.get("title"):
            rows = [r for r in rows if filters["title"].lower() in r["title"].lower()]
        for key in ("status", "stage", "assigned_to"):
            if filters.get(key):
                rows = [r for r in rows if r.get(key) == filters[key]]
        return self._page(rows, page, limit)


_PATCHED = {
    tenant_repository: ("create_tenant", "get_tenant", "set_tenant_status", "delete_tenant"),
    user_repo: ("find_user_by_email", "get_user", "create_user", "delete_user", "list_users"),
    master_data_repo: ("insert_master_data", "delete_master_data", "list_master_data"),
    crm_repo: (
        "create_lead", "get_lead", "update_lead", "delete_lead", "list_leads",
        "create_deal", "get_deal", "update_deal", "delete_deal", "list_deals",
    ),
}


class FakeRedis:
    def __init__(self):
        self.data: dict[str, str] = {}

    def get(self, key):
        return self.data.get(key)

    def setex(self, key, ttl, value):
        self.data[key] = value

    def delete(self, *keys):
        return sum(1 for k in keys if self.data.pop(k, None) is not None)


@pytest.fixture
def settings() -> Settings:
    return Settings(JWT_SECRET=TEST_SECRET, BCRYPT_ROUNDS=4, _env_file=None)


@pytest.fixture
def store(monkeypatch) -> InMemoryStore:
    s = InMemoryStore()
    for module, names in _PATCHED.items():
        for name in names:
            monkeypatch.setattr(module, name, getattr(s, name))
    return s


@pytest.fixture
def fake_redis(monkeypatch) -> FakeRedis:
    r = FakeRedis()
    monkeypatch.setattr(redis_client, "_client", r)
    return r


@pytest.fixture
def app(settings, store, fake_redis):
    application = create_app(settings)
    redis_client.set_client(fake_redis)
    return application


@pytest.fixture
def client(app) -> TestClient:
    with TestClient(app) as c:
        yield c


def register(client, email="owner@acme.com", password="s3cret-pass", name="Mary Jane Watson", company="Acme"):
    return client.post(
        "/api/v1/auth",
        json={"action": "register", "companyName": company, "name": name, "email": email, "password": password},
    )


def login(client, email="owner@acme.com", password="s3cret-pass"):
    return client.post("/api/v1/auth", json={"action": "login", "email": email, "password": password})


@pytest.fixture
def admin_session(client):
    """Registered tenant with the admin logged in (cookie kept by the client)."""
    reg = register(client)
    assert reg.status_code == 200
    assert login(client).status_code == 200
    return reg.json()
