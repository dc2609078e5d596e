"""Tests for the Flask endpoints in app.py."""

from __future__ import annotations

import csv

import pytest

from conftest import DummyResponse, DummySession
from constants import EMPTY_EXISTING_ERROR, EMPTY_RECOMMENDED_ERROR


@pytest.fixture
def stub_transport(monkeypatch: pytest.MonkeyPatch) -> DummySession:
    """Route verifier traffic to an in-memory session."""
    session = DummySession(
        {
            "https://good.test/a": DummyResponse(status_code=200, url="https://good.test/a"),
            "https://bad.test/x": DummyResponse(status_code=200, url="https://bad.test/x"),
        }
    )
    monkeypatch.setattr("verifier.build_session", lambda: session)
    return session


def test_index_renders_form(client) -> None:
    resp = client.get("/")
    body = resp.get_data(as_text=True)
    assert resp.status_code == 200
    assert "All Existing URLs" in body
    assert "All recommended URLs" in body


def test_verify_json_returns_results(client, stub_transport: DummySession) -> None:
    resp = client.post(
        "/verify",
        json={"existing": "good.test/a\nbad.test/x", "recommended": "https://good.test/a\nhttps://bad.test/y"},
    )

    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["error"] is None
    assert payload["progress"] == 100
    assert payload["all_success"] is False
    assert [r["status"] for r in payload["results"]] == ["success", "error"]
    assert stub_transport.get_calls == ["https://good.test/a", "https://bad.test/x"]
    assert stub_transport.closed is True


def test_verify_json_all_success(client, stub_transport: DummySession) -> None:
    resp = client.post("/verify", json={"existing": "good.test/a", "recommended": "https://good.test/a"})

    assert resp.get_json()["all_success"] is True


@pytest.mark.parametrize(
    "payload, expected",
    [
        ({"existing": "  ", "recommended": "https://a.test"}, EMPTY_EXISTING_ERROR),
        ({"existing": "a.test", "recommended": ""}, EMPTY_RECOMMENDED_ERROR),
        ({}, EMPTY_EXISTING_ERROR),
    ],
)
def test_verify_json_run_errors(client, stub_transport: DummySession, payload, expected: str) -> None:
    resp = client.post("/verify", json=payload)

    assert resp.status_code == 400
    body = resp.get_json()
    assert body["error"] == expected
    assert body["results"] == []
    assert stub_transport.get_calls == []


def test_verify_form_renders_table(client, stub_transport: DummySession) -> None:
    resp = client.post("/verify", data={"existing": "bad.test/x", "recommended": "https://bad.test/y"})

    body = resp.get_data(as_text=True)
    assert resp.status_code == 200
    assert "Errors or mismatches found!" in body
    assert "https://bad.test/y" in body
    assert "does not match Recommended URL" in body


def test_verify_form_shows_run_error(client, stub_transport: DummySession) -> None:
    resp = client.post("/verify", data={"existing": "", "recommended": "https://a.test"})

    assert resp.status_code == 400
    assert EMPTY_EXISTING_ERROR in resp.get_data(as_text=True)


def test_download_csv_returns_last_results(client, stub_transport: DummySession) -> None:
    client.post("/verify", json={"existing": "good.test/a", "recommended": "https://good.test/a"})

    resp = client.get("/download_csv")

    assert resp.status_code == 200
    assert resp.mimetype == "text/csv"
    assert "attachment" in resp.headers["Content-Disposition"]
    rows = list(csv.DictReader(resp.get_data(as_text=True).splitlines()))
    assert len(rows) == 1
    assert rows[0]["existing_url"] == "https://good.test/a"
    assert rows[0]["status"] == "success"
