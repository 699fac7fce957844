"""
Tests for the HTTP surface.

Covers:
  - Routers registered in the main app
  - Submission validation (422 on missing / blank fields)
  - Evaluation, history and treasury endpoints
  - Contract audits credit the treasury
  - Health check reports evaluator tiers
"""

import pytest
from fastapi.testclient import TestClient

from patchbounty.main import app
from patchbounty.services import configure_services

from conftest import AUTH_MIDDLEWARE_DIFF, TYPO_DIFF


def _payload(**overrides):
    data = {
        "title": "docs: correct typo in README",
        "author": "octocat",
        "repo": "acme/widgets",
        "files_changed": 1,
        "additions": 1,
        "deletions": 1,
        "diff": TYPO_DIFF,
        "payout_address": "0x1111111111111111111111111111111111111111",
    }
    data.update(overrides)
    return data


@pytest.fixture
def client():
    configure_services()
    with TestClient(app) as c:
        yield c
    configure_services()


# ===================================================================
# Router registration
# ===================================================================

class TestRoutes:

    def test_routes_registered(self):
        paths = [r.path for r in app.routes]
        assert "/api/v1/evaluations" in paths
        assert "/api/v1/evaluations/history" in paths
        assert "/api/v1/evaluations/{evaluation_id}" in paths
        assert "/api/v1/treasury" in paths
        assert "/api/v1/treasury/stats" in paths
        assert "/api/v1/audits" in paths
        assert "/api/health" in paths


# ===================================================================
# Evaluations
# ===================================================================

class TestEvaluations:

    def test_typo_fix_evaluated(self, client):
        resp = client.post("/api/v1/evaluations", json=_payload())
        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["evaluation"]["evaluation"]["verdict"] == "FAIL"
        assert body["evaluation"]["evaluation"]["score"] == 49
        assert body["evaluation"]["payout"]["status"] == "skipped"
        assert body["treasury"]["net_balance"] == "500.00"

    def test_auth_fix_paid_with_audit(self, client):
        resp = client.post(
            "/api/v1/evaluations",
            json=_payload(
                title="fix: harden auth middleware against token injection",
                additions=60,
                deletions=5,
                diff=AUTH_MIDDLEWARE_DIFF,
            ),
        )
        body = resp.json()
        assert body["evaluation"]["evaluation"]["verdict"] == "PASS"
        assert body["evaluation"]["audit"]["triggered"] is True
        assert body["evaluation"]["payout"]["amount"] == "48.80"
        assert body["treasury"]["subcontractor_spend"] == "1.00"

    @pytest.mark.parametrize("field", ["title", "author", "payout_address"])
    def test_missing_field_rejected(self, client, field):
        data = _payload()
        del data[field]
        assert client.post("/api/v1/evaluations", json=data).status_code == 422

    def test_blank_field_rejected(self, client):
        resp = client.post("/api/v1/evaluations", json=_payload(repo="   "))
        assert resp.status_code == 422
        assert client.get("/api/v1/evaluations").json()["stats"]["totalEvaluated"] == 0

    def test_negative_count_rejected(self, client):
        assert client.post("/api/v1/evaluations", json=_payload(additions=-1)).status_code == 422

    def test_list_and_stats(self, client):
        client.post("/api/v1/evaluations", json=_payload())
        client.post("/api/v1/evaluations", json=_payload(source="simulation"))
        body = client.get("/api/v1/evaluations").json()
        assert len(body["evaluations"]) == 2
        assert body["evaluations"][0]["source"] == "simulation"
        assert body["stats"]["failed"] == 2
        assert body["stats"]["passRate"] == "0.0"

    def test_persisted_record_fetchable(self, client):
        created = client.post("/api/v1/evaluations", json=_payload()).json()
        eval_id = created["evaluation"]["id"]

        resp = client.get(f"/api/v1/evaluations/{eval_id}")
        assert resp.status_code == 200
        assert resp.json()["verdict"] == "FAIL"

        history = client.get("/api/v1/evaluations/history", params={"verdict": "FAIL"}).json()
        assert eval_id in [r["id"] for r in history["evaluations"]]

    def test_unknown_evaluation_404(self, client):
        assert client.get("/api/v1/evaluations/eval-missing").status_code == 404

    def test_history_rejects_bad_verdict(self, client):
        assert client.get("/api/v1/evaluations/history", params={"verdict": "MAYBE"}).status_code == 422


# ===================================================================
# Treasury and audits
# ===================================================================

class TestTreasuryAndAudits:

    def test_treasury_snapshot(self, client):
        body = client.get("/api/v1/treasury").json()
        assert body["monthly_budget"] == "500.00"
        assert body["net_balance"] == "500.00"
        assert body["bounty_count"] == 0

    def test_audit_credits_treasury(self, client):
        resp = client.post(
            "/api/v1/audits",
            json={
                "client": "Acme DeFi",
                "contract_name": "Bank.sol",
                "source": "contract Bank { function withdraw() external {} }",
                "price": "10.00",
            },
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["amount_charged"] == "10.00"
        assert body["audit"]["verdict"] == "CRITICAL"
        assert body["treasury"]["net_balance"] == "510.00"

        assert client.get("/api/v1/treasury").json()["total_earned"] == "10.00"
        assert len(client.get("/api/v1/audits").json()["audits"]) == 1

    def test_audit_rejects_non_positive_price(self, client):
        resp = client.post(
            "/api/v1/audits",
            json={"client": "Acme", "contract_name": "A.sol", "source": "contract A {}", "price": "0"},
        )
        assert resp.status_code == 422

    def test_treasury_stats(self, client):
        client.post("/api/v1/evaluations", json=_payload())
        body = client.get("/api/v1/treasury/stats").json()
        assert body["stats"]["totalEvaluated"] == 1
        assert body["treasury"]["epoch"]


# ===================================================================
# Health
# ===================================================================

class TestHealth:

    def test_health_reports_heuristic_tier(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "healthy"
        assert body["evaluator_tiers"][-1] == {"name": "heuristic", "model": None, "status": "configured"}
        assert body["payments"] == "not_configured"
        assert body["commit_policy"] == "optimistic"
