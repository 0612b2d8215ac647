import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.policies import get_audit_log, get_policy_store, router
from connectors.policies.store import PolicyStore
from pipelines.audit import AuditLog


@pytest.fixture
def audit_log(tmp_path):
    return AuditLog(tmp_path / "audit.jsonl")


@pytest.fixture
def client(repo_policies_dir, audit_log, monkeypatch):
    monkeypatch.setenv("POLICY_CATEGORIES_FILE", str(repo_policies_dir / "categories.json"))
    store = PolicyStore(repo_policies_dir)
    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_policy_store] = lambda: store
    app.dependency_overrides[get_audit_log] = lambda: audit_log
    return TestClient(app)


def _submit_body(**extraction):
    payload = {
        "amount": 49,
        "currency": "USD",
        "dateISO": "2024-09-15T12:00:00Z",
        "vendor": "Uber",
        "pickupCountry": "US",
        "confidence": {"amount": 0.9},
    }
    payload.update(extraction)
    return {"extraction": payload, "answers": {}, "overrides": {}}


def test_list_active_policies(client):
    resp = client.get("/policies", params={"date": "2024-09-15T00:00:00Z"})
    assert resp.status_code == 200
    body = resp.json()
    active_ids = {rule["id"] for rule in body["active"]}
    assert "US-RIDE-2024-09" in active_ids
    assert "US-RIDE-2024-10" not in active_ids
    assert body["totalRules"] >= len(body["active"])
    assert "all" not in body
    assert "categories" not in body


def test_list_policies_with_all_and_categories(client):
    resp = client.get("/policies", params={"date": "2024-09-15", "all": "true", "categories": "true"})
    body = resp.json()
    assert len(body["all"]) == body["totalRules"]
    assert {"id": "ride_hail", "label": "Ride hail"} in body["categories"]


def test_list_policies_invalid_date(client):
    resp = client.get("/policies", params={"date": "whenever"})
    assert resp.status_code == 422


def test_reload(client):
    resp = client.post("/policies/reload")
    assert resp.status_code == 200
    assert resp.json()["totalRules"] > 0


def test_submit_returns_decision_and_explanation(client, audit_log):
    resp = client.post("/submit", json=_submit_body())
    assert resp.status_code == 200
    body = resp.json()
    assert body["decision"]["steps"] == ["finance"]
    assert body["decision"]["skipped"] == ["manager"]
    assert body["decision"]["ruleHits"][0]["ruleId"] == "US-RIDE-2024-09"
    assert body["explanation"].startswith("For the US ride_hail expense on 2024-09-15")
    assert len(audit_log.read_all()) == 1


def test_submit_eu_compliance(client):
    resp = client.post("/submit", json=_submit_body(amount=60, currency="EUR", dateISO="2025-01-10T12:00:00Z", pickupCountry="Germany"))
    body = resp.json()
    assert body["decision"]["steps"] == ["compliance", "finance"]
    assert body["decision"]["skipped"] == ["manager"]


def test_submit_invalid_payload(client):
    resp = client.post("/submit", json={"extraction": {"amount": "lots"}})
    assert resp.status_code == 422


def test_submit_invalid_date(client, audit_log):
    resp = client.post("/submit", json=_submit_body(dateISO="someday"))
    assert resp.status_code == 422
    assert audit_log.read_all() == []
