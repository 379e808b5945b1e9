"""Tests for the record, punctuation and log REST endpoints."""

from __future__ import annotations

import pytest


@pytest.fixture()
def client_for(app_factory):
    def factory(**overrides):
        overrides.setdefault("ENABLE_OPERATOR", True)
        return app_factory(**overrides).test_client()

    return factory


def test_record_is_posted_and_result_returned(endpoint, client_for):
    client = client_for(
        HTTPPOST_URL=endpoint.url("/created"),
        HTTPPOST_OUTPUT_SCHEMA="id:int",
    )

    response = client.post("/api/records", json={"record": {"payload": "hello", "id": 9}})

    assert response.status_code == 200
    emitted = response.get_json()["emitted"]
    assert len(emitted) == 1
    assert emitted[0]["statusCode"] == 201
    assert emitted[0]["responseMessage"] == "stored"
    assert emitted[0]["id"] == 9
    assert endpoint.requests[-1].body == b"hello"


def test_form_encoded_record(endpoint, client_for):
    client = client_for(
        HTTPPOST_URL=endpoint.url(),
        HTTPPOST_CONTENT_TYPE="application/x-www-form-urlencoded",
    )

    response = client.post("/api/records", json={"record": {"msg": "hello world"}})

    assert response.status_code == 200
    assert endpoint.requests[-1].body == b"msg=hello+world"


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"record": {}},
        {"record": ["a"]},
        {"record": {"msg": {"nested": True}}},
    ],
)
def test_invalid_record_payload_is_rejected(endpoint, client_for, payload):
    client = client_for(HTTPPOST_URL=endpoint.url())

    response = client.post("/api/records", json=payload)

    assert response.status_code == 400
    assert "error" in response.get_json()
    assert endpoint.requests == []


def test_skipped_record_returns_empty_emission(client_for):
    client = client_for(HTTPPOST_URL="http://127.0.0.1:9/unreachable", HTTPPOST_TIMEOUT=2.0)

    response = client.post("/api/records", json={"record": {"msg": "x"}})

    assert response.status_code == 200
    assert response.get_json() == {"emitted": []}


def test_transport_error_maps_to_bad_gateway_under_raise_policy(client_for):
    client = client_for(
        HTTPPOST_URL="http://127.0.0.1:9/unreachable",
        HTTPPOST_TRANSPORT_ERRORS="raise",
        HTTPPOST_TIMEOUT=2.0,
    )

    response = client.post("/api/records", json={"record": {"msg": "x"}})

    assert response.status_code == 502
    assert "failed" in response.get_json()["error"]


def test_records_endpoint_requires_running_operator(app_factory):
    client = app_factory(ENABLE_OPERATOR=False).test_client()

    response = client.post("/api/records", json={"record": {"msg": "x"}})

    assert response.status_code == 503


def test_punctuation_is_forwarded(endpoint, client_for):
    client = client_for(HTTPPOST_URL=endpoint.url())

    response = client.post("/api/punctuation", json={"mark": "FINAL_MARKER"})
    assert response.status_code == 200
    assert response.get_json() == {"forwarded": ["FINAL_MARKER"]}

    bad = client.post("/api/punctuation", json={"mark": "END"})
    assert bad.status_code == 400


def test_dispatches_are_persisted_as_run_logs(endpoint, client_for):
    client = client_for(HTTPPOST_URL=endpoint.url())
    client.post("/api/records", json={"record": {"msg": "one"}})
    client.post("/api/records", json={"record": {"msg": "two"}})

    response = client.get("/api/logs", query_string={"source": "dispatch", "limit": 1})
    assert response.status_code == 200
    entries = response.get_json()
    assert len(entries) == 1
    details = entries[0]["details"]
    assert details["count"] == 2
    assert details["emitted"] == 1
    assert details["statusCode"] == 200
    assert details["statusMessage"].upper() == "OK"

    startup = client.get("/api/logs", query_string={"source": "operator"}).get_json()
    assert any("started (ready)" in entry["message"] for entry in startup)

    assert client.get("/api/logs", query_string={"source": "unknown"}).status_code == 400


def test_transport_failure_is_logged_with_error_details(client_for):
    client = client_for(
        HTTPPOST_URL="http://127.0.0.1:9/unreachable",
        HTTPPOST_TRANSPORT_ERRORS="raise",
        HTTPPOST_TIMEOUT=2.0,
    )
    client.post("/api/records", json={"record": {"msg": "x"}})

    entries = client.get("/api/logs", query_string={"source": "dispatch"}).get_json()

    assert entries[0]["details"]["emitted"] == 0
    assert "failed" in entries[0]["details"]["error"]


def test_logs_are_newest_first_and_limited(endpoint, client_for):
    client = client_for(HTTPPOST_URL=endpoint.url())
    client.post("/api/records", json={"record": {"msg": "one"}})

    entries = client.get("/api/logs").get_json()
    assert [entry["source"] for entry in entries] == ["dispatch", "operator"]
    assert "message" in entries[1] and "details" not in entries[1]

    limited = client.get("/api/logs", query_string={"limit": 0}).get_json()
    assert len(limited) == 1


@pytest.mark.parametrize("path", ["/api/records", "/api/punctuation"])
@pytest.mark.parametrize("body", [[{"msg": "x"}], "text", 3])
def test_non_object_json_body_is_rejected(endpoint, client_for, path, body):
    client = client_for(HTTPPOST_URL=endpoint.url())

    response = client.post(path, json=body)

    assert response.status_code == 400
    assert response.get_json() == {"error": "payload must be an object"}
    assert endpoint.requests == []
