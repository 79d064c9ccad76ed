import uuid
from contextlib import contextmanager
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest
from psycopg2 import errors as pg_errors

from core.errors import ConflictError
from domain.models import MasterDataCategory, UserRole
from repositories import crm_repo, master_data_repo, user_repo

# Captured before the `store` fixture swaps them for in-memory versions.
REAL_GET_LEAD = crm_repo.get_lead
REAL_UPDATE_LEAD = crm_repo.update_lead
REAL_DELETE_LEAD = crm_repo.delete_lead
REAL_LIST_LEADS = crm_repo.list_leads
REAL_GET_USER = user_repo.get_user

TENANT = str(uuid.uuid4())
CREATED = datetime(2026, 1, 5, 9, 30, tzinfo=timezone.utc)


class FakeCursor:
    def __init__(self, results, error=None):
        self.results = list(results)
        self.error = error
        self.executed = []
        self.rowcount = 1

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, params=None):
        if self.error is not None:
            raise self.error
        self.executed.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self.results.pop(0)

    def fetchall(self):
        return self.results.pop(0)


class FakeConn:
    def __init__(self, cursor):
        self._cursor = cursor

    def cursor(self):
        return self._cursor


def _use_cursor(monkeypatch, module, cursor):
    @contextmanager
    def fake_get_conn():
        yield FakeConn(cursor)

    monkeypatch.setattr(module, "get_conn", fake_get_conn)
    return cursor


def _no_db(monkeypatch, *modules):
    @contextmanager
    def refuse():
        raise AssertionError("database must not be queried")
        yield

    for module in modules:
        monkeypatch.setattr(module, "get_conn", refuse)


def _deal_row(deal_id):
    return (
        uuid.UUID(deal_id), uuid.UUID(TENANT), "Renewal", Decimal("1500.50"), "proposal", "open",
        None, None, date(2026, 3, 1), None, CREATED, CREATED,
    )


def test_update_only_sets_writable_columns(monkeypatch):
    deal_id = str(uuid.uuid4())
    cur = _use_cursor(monkeypatch, crm_repo, FakeCursor([_deal_row(deal_id)]))

    row = crm_repo.update_deal(TENANT, deal_id, {"title": "Renewal", "value": 1500.5, "tenant_id": "other", "bogus": 1})

    sql, params = cur.executed[0]
    assert sql.startswith("UPDATE deals SET title = %s, value = %s, updated_at = now() WHERE id = %s AND tenant_id = %s")
    assert params == ("Renewal", 1500.5, deal_id, TENANT)
    assert row["id"] == deal_id
    assert row["value"] == 1500.5
    assert row["expected_close"] == "2026-03-01"
    assert row["created_at"] == CREATED.isoformat()


def test_empty_update_reads_current_row(monkeypatch):
    deal_id = str(uuid.uuid4())
    cur = _use_cursor(monkeypatch, crm_repo, FakeCursor([_deal_row(deal_id)]))

    crm_repo.update_deal(TENANT, deal_id, {})

    assert cur.executed[0][0].startswith("SELECT id, tenant_id, title")


def test_list_leads_builds_filters_and_offset(monkeypatch):
    assignee = str(uuid.uuid4())
    cur = _use_cursor(monkeypatch, crm_repo, FakeCursor([(3,), []]))

    rows, total = crm_repo.list_leads(TENANT, {"status": "new", "search": "ann", "assigned_to": assignee}, 2, 10)

    assert (rows, total) == ([], 3)
    count_sql, count_params = cur.executed[0]
    assert count_sql == (
        "SELECT count(*) FROM leads WHERE tenant_id = %s AND status = %s AND assigned_to = %s "
        "AND (first_name ILIKE %s OR last_name ILIKE %s OR email ILIKE %s OR company ILIKE %s)"
    )
    assert count_params == (TENANT, "new", assignee, "%ann%", "%ann%", "%ann%", "%ann%")
    assert cur.executed[1][1][-2:] == (10, 10)


@pytest.mark.parametrize("bad_id", ["abc", "123", "not-a-uuid"])
def test_non_uuid_ids_match_nothing(monkeypatch, bad_id):
    _no_db(monkeypatch, crm_repo, user_repo)

    assert crm_repo.get_lead(TENANT, bad_id) is None
    assert crm_repo.update_deal(TENANT, bad_id, {"title": "x"}) is None
    assert crm_repo.delete_lead(TENANT, bad_id) is False
    assert crm_repo.list_deals(TENANT, {"assigned_to": bad_id}, 1, 10) == ([], 0)
    assert user_repo.get_user(TENANT, bad_id) is None


def test_insert_master_data_keeps_order_and_drops_cache(monkeypatch, fake_redis):
    key = f"master_data:{TENANT}:lead-sources"
    fake_redis.data[key] = "[]"
    ids = [uuid.uuid4(), uuid.uuid4()]
    cur = _use_cursor(monkeypatch, master_data_repo, FakeCursor([
        (ids[0], "lead-sources", "website", "website", 0, True),
        (ids[1], "lead-sources", "referral", "referral", 1, True),
    ]))

    rows = master_data_repo.insert_master_data(TENANT, MasterDataCategory.LEAD_SOURCES, ["website", "referral"])

    assert [p[-1] for _, p in cur.executed] == [0, 1]
    assert rows[1] == {
        "id": str(ids[1]), "tenantId": TENANT, "category": "lead-sources",
        "name": "referral", "value": "referral", "displayOrder": 1, "isActive": True,
    }
    assert key not in fake_redis.data


def test_unique_violation_becomes_conflict(monkeypatch):
    _use_cursor(monkeypatch, user_repo, FakeCursor([], error=pg_errors.UniqueViolation("duplicate key")))

    with pytest.raises(ConflictError):
        user_repo.create_user(TENANT, "Ann", "Lee", "Ann@Acme.com", "hash", UserRole.SALES_REP)


def test_user_email_is_normalized_on_insert(monkeypatch):
    user_id = uuid.uuid4()
    cur = _use_cursor(monkeypatch, user_repo, FakeCursor([
        (user_id, "Ann", "Lee", "ann@acme.com", "hash", "sales-rep", "active", uuid.UUID(TENANT)),
    ]))

    user = user_repo.create_user(TENANT, "Ann", "Lee", "  Ann@Acme.com ", "hash", UserRole.SALES_REP)

    assert cur.executed[0][1][3] == "ann@acme.com"
    assert user.id == str(user_id)


def test_malformed_ids_over_http_use_error_body(client, admin_session, monkeypatch):
    for name, fn in (
        ("get_lead", REAL_GET_LEAD), ("update_lead", REAL_UPDATE_LEAD),
        ("delete_lead", REAL_DELETE_LEAD), ("list_leads", REAL_LIST_LEADS),
    ):
        monkeypatch.setattr(crm_repo, name, fn)
    monkeypatch.setattr(user_repo, "get_user", REAL_GET_USER)
    _no_db(monkeypatch, crm_repo, user_repo)

    res = client.get("/api/v1/leads/abc")
    assert res.status_code == 404
    assert res.json() == {"error": "Lead not found", "code": "not_found"}

    assert client.put("/api/v1/leads/abc", json={"firstName": "x"}).status_code == 404
    assert client.delete("/api/v1/leads/abc").status_code == 404

    listed = client.get("/api/v1/leads", params={"assignedTo": "foo"})
    assert listed.status_code == 200
    assert listed.json()["pagination"]["totalItems"] == 0

    deal = client.post("/api/v1/deals", json={"title": "x", "value": 1, "stage": "qualification", "leadId": "x"})
    assert deal.status_code == 400
    assert deal.json()["meta"]["field"] == "leadId"

    lead = client.post("/api/v1/leads", json={"firstName": "Peter", "assignedTo": "foo"})
    assert lead.status_code == 400
    assert lead.json()["meta"]["field"] == "assignedTo"
