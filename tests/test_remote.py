"""
Tests for fetching the candidate pool from the hosted question table.
"""

from datetime import date

import pytest
import requests

from dupcheck.logger import get_logger
from dupcheck.remote import build_request, fetch_candidate_pool

BASE_URL = "https://example.supabase.co"


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []
    monkeypatch.setattr("dupcheck.remote.time.sleep", delays.append)
    return delays


@pytest.fixture
def fake_get(monkeypatch):
    """Replace requests.get with a scripted sequence of responses/exceptions."""
    calls = []
    script = []

    def _get(url, params=None, headers=None, timeout=None):
        calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        outcome = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr("dupcheck.remote.requests.get", _get)
    return calls, script


class TestBuildRequest:
    """Test the PostgREST query."""

    def test_request_shape(self):
        request = build_request(BASE_URL + "/", "secret", 200)

        assert request["url"] == "https://example.supabase.co/rest/v1/questions"
        assert request["params"] == {
            "select": "id,title,closes_at,status,created_at",
            "visibility": "eq.public",
            "order": "created_at.desc",
            "limit": 200,
        }
        assert request["headers"]["apikey"] == "secret"
        assert request["headers"]["Authorization"] == "Bearer secret"


class TestFetchCandidatePool:
    """Test fetching and error handling."""

    def test_success(self, fake_get, no_sleep):
        calls, script = fake_get
        script.append(FakeResponse(payload=[
            {"id": "q1", "title": "Kommt die CO2-Steuer 2027?", "closes_at": "2027-01-01", "status": "open"},
            {"id": "q2", "title": None, "closes_at": "2027-01-01", "status": "open"},
            {"id": 3, "title": "Steigt die Inflation 2026?", "closes_at": None, "status": None},
        ]))

        pool = fetch_candidate_pool(BASE_URL, "secret", limit=50)

        assert [c.id for c in pool] == ["q1", "3"]
        assert pool[0].closes_at == date(2027, 1, 1)
        assert len(calls) == 1
        assert calls[0]["params"]["limit"] == 50
        assert calls[0]["timeout"] == 15

    def test_reads_credentials_from_env(self, fake_get, no_sleep, monkeypatch):
        calls, script = fake_get
        script.append(FakeResponse(payload=[]))
        monkeypatch.setenv("SUPABASE_URL", BASE_URL)
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "from-env")

        assert fetch_candidate_pool() == []
        assert calls[0]["headers"]["apikey"] == "from-env"

    def test_missing_credentials(self, monkeypatch):
        monkeypatch.delenv("SUPABASE_URL", raising=False)
        monkeypatch.delenv("SUPABASE_SERVICE_ROLE_KEY", raising=False)

        with pytest.raises(ValueError, match="SUPABASE_URL"):
            fetch_candidate_pool()
        with pytest.raises(ValueError, match="SUPABASE_SERVICE_ROLE_KEY"):
            fetch_candidate_pool(base_url=BASE_URL)

    def test_retries_server_errors(self, fake_get, no_sleep):
        calls, script = fake_get
        script.extend([
            FakeResponse(status_code=503),
            FakeResponse(status_code=502),
            FakeResponse(payload=[{"id": "q1", "title": "Frage eins"}]),
        ])

        pool = fetch_candidate_pool(BASE_URL, "secret")

        assert [c.id for c in pool] == ["q1"]
        assert len(calls) == 3
        assert no_sleep == [0.5, 1.0]

    def test_client_error_not_retried(self, fake_get, no_sleep):
        calls, script = fake_get
        script.append(FakeResponse(status_code=401))

        with pytest.raises(ValueError, match="401"):
            fetch_candidate_pool(BASE_URL, "wrong")

        assert len(calls) == 1
        assert get_logger().get_metrics()["errors_by_type"] == {"HTTPError_401": 1}

    def test_timeouts_exhaust_retries(self, fake_get, no_sleep):
        calls, script = fake_get
        script.append(requests.exceptions.Timeout("read timed out"))

        with pytest.raises(ValueError, match="after retries"):
            fetch_candidate_pool(BASE_URL, "secret")

        assert len(calls) == 3
        metrics = get_logger().get_metrics()
        assert metrics["pool_fetches"] == 1
        assert metrics["pool_fetch_failures"] == 1

    def test_unexpected_payload(self, fake_get, no_sleep):
        calls, script = fake_get
        script.append(FakeResponse(payload={"message": "not a list"}))

        with pytest.raises(ValueError, match="not a list"):
            fetch_candidate_pool(BASE_URL, "secret")
