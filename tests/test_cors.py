"""Cross-origin policy: one allowed origin, GET/POST only, Content-Type header only."""

from __future__ import annotations

import httpx
from fastapi.testclient import TestClient

from conftest import ALLOWED_ORIGIN, FakeUpstream, chat_completion

OTHER_ORIGIN = "https://evil.example.net"


def _preflight(
    client: TestClient,
    origin: str,
    method: str = "POST",
    headers: str = "Content-Type",
) -> httpx.Response:
    return client.options(
        "/api/openai",
        headers={
            "Origin": origin,
            "Access-Control-Request-Method": method,
            "Access-Control-Request-Headers": headers,
        },
    )


def test_preflight_from_allowed_origin(client: TestClient) -> None:
    r = _preflight(client, ALLOWED_ORIGIN)
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == ALLOWED_ORIGIN
    assert "POST" in r.headers["access-control-allow-methods"]


def test_preflight_from_other_origin_rejected(client: TestClient) -> None:
    r = _preflight(client, OTHER_ORIGIN)
    assert r.status_code == 400
    assert "access-control-allow-origin" not in r.headers


def test_preflight_disallowed_method_rejected(client: TestClient) -> None:
    r = _preflight(client, ALLOWED_ORIGIN, method="DELETE")
    assert r.status_code == 400


def test_preflight_disallowed_header_rejected(client: TestClient) -> None:
    r = _preflight(client, ALLOWED_ORIGIN, headers="Authorization")
    assert r.status_code == 400


def test_request_from_other_origin_never_reaches_handler(
    client: TestClient, upstream: FakeUpstream
) -> None:
    upstream.responder = lambda req: httpx.Response(200, json=chat_completion("42"))

    r = client.post(
        "/api/openai", json={"question": "hi"}, headers={"Origin": OTHER_ORIGIN}
    )
    assert r.status_code == 403
    assert r.json() == {"error": "Origin not allowed."}
    assert upstream.requests == []


def test_stt_upload_from_other_origin_rejected(
    client: TestClient, upstream: FakeUpstream
) -> None:
    r = client.post(
        "/api/stt",
        files={"audio": ("a.webm", b"abc", "audio/webm")},
        headers={"Origin": OTHER_ORIGIN},
    )
    assert r.status_code == 403
    assert upstream.requests == []


def test_request_from_allowed_origin_gets_cors_header(
    client: TestClient, upstream: FakeUpstream
) -> None:
    upstream.responder = lambda req: httpx.Response(200, json=chat_completion("42"))

    r = client.post(
        "/api/openai", json={"question": "hi"}, headers={"Origin": ALLOWED_ORIGIN}
    )
    assert r.status_code == 200
    assert r.json() == {"answer": "42"}
    assert r.headers["access-control-allow-origin"] == ALLOWED_ORIGIN


def test_request_without_origin_passes(client: TestClient) -> None:
    r = client.get("/health")
    assert r.status_code == 200
