"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from website_biz.api import create_app


@pytest.fixture
def client_for(make_ctx):
    """Factory returning a started TestClient around a test context."""
    clients = []

    def _make(config_env=None, **overrides) -> TestClient:
        client = TestClient(create_app(make_ctx(config_env, **overrides)))
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


class TestJobEndpoints:
    """Tests for ``/api/jobs``."""

    @pytest.mark.unit
    def test_health(self, client_for):
        assert client_for().get("/health").json() == {"ok": True}

    @pytest.mark.unit
    def test_create_list_get(self, client_for):
        client = client_for()
        created = client.post("/api/jobs", json={"type": "enrich",
                                                 "payload": {"leadsFile": "leads-x.json"}})
        assert created.status_code == 200
        job = created.json()
        assert job["status"] == "queued"
        assert job["payload"] == {"leadsFile": "leads-x.json"}

        listed = client.get("/api/jobs", params={"limit": 5}).json()
        assert [j["id"] for j in listed] == [job["id"]]
        assert client.get(f"/api/jobs/{job['id']}").json()["type"] == "enrich"

    @pytest.mark.unit
    def test_unknown_type_rejected(self, client_for):
        response = client_for().post("/api/jobs", json={"type": "frobnicate"})
        assert response.status_code == 400
        assert response.json()["detail"] == "unknown_job_type:frobnicate"

    @pytest.mark.unit
    def test_missing_job(self, client_for):
        assert client_for().get("/api/jobs/nope").status_code == 404


class TestWorkerEndpoint:
    """Tests for ``/api/worker`` and its token check."""

    @pytest.mark.unit
    def test_open_without_token(self, client_for):
        response = client_for().post("/api/worker")
        assert response.json() == {"ok": True, "idle": True}

    @pytest.mark.unit
    def test_token_required_when_configured(self, client_for):
        client = client_for({"WORKER_TOKEN": "s3cret"})
        assert client.post("/api/worker").status_code == 401
        assert client.post("/api/worker", headers={"X-Worker-Token": "wrong"}).status_code == 401
        assert client.post("/api/worker", headers={"X-Worker-Token": "s3cret"}).status_code == 200
        assert client.get("/api/worker", params={"token": "s3cret"}).status_code == 200
        assert client.get("/api/worker", headers={"X-Vercel-Cron": "1"}).status_code == 200

    @pytest.mark.unit
    def test_processes_one_job(self, client_for):
        client = client_for()
        client.post("/api/jobs", json={"type": "daily-set",
                                       "payload": {"query": "hvac", "location": "Springfield"}})
        body = client.post("/api/worker").json()
        assert body["ok"] is True
        assert body["job"]["status"] == "done"

    @pytest.mark.unit
    def test_failed_job_reported(self, client_for):
        client = client_for()
        client.post("/api/jobs", json={"type": "send", "payload": {"leadsFile": "x.json"}})
        body = client_for(mail_client=None).post("/api/worker").json()
        # Separate clients share the data directory, so the second one sees the job
        assert body["ok"] is False
        assert body["job"]["error"] == "SENDGRID_API_KEY is required for email delivery"


class TestRunEndpoint:
    """Tests for ``/api/run`` and ``/api/status``."""

    @pytest.mark.unit
    def test_run_action(self, client_for):
        client = client_for()
        body = client.post("/api/run", json={"action": "template-list"}).json()
        assert body["ok"] is True
        assert body["result"][0]["name"] == "Cold intro"

    @pytest.mark.unit
    def test_unknown_action(self, client_for):
        response = client_for().post("/api/run", json={"action": "explode"})
        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "unknown_action"}

    @pytest.mark.unit
    def test_action_error(self, client_for):
        response = client_for().post("/api/run", json={"action": "daily-run"})
        assert response.status_code == 500
        assert response.json() == {"ok": False, "error": "daily_target_not_set"}

    @pytest.mark.unit
    def test_status(self, client_for):
        client = client_for()
        client.post("/api/run", json={"action": "daily-set",
                                      "params": {"query": "hvac", "location": "Springfield"}})
        status = client.get("/api/status").json()
        assert status["leadsSummary"] == []
        assert status["outreachTotal"] == 0
        assert status["defaultTemplate"] == "Cold intro"
        assert status["daily"]["query"] == "hvac"
