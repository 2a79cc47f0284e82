"""Shared fixtures: gateway app wired to a mocked OpenAI upstream (no network)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from voice_gateway.config import GatewayConfig
from voice_gateway.main import create_app
from voice_gateway.upstream import make_client

ALLOWED_ORIGIN = "https://frontend.example.com"
TEST_API_KEY = "sk-test-key"
CONTRACTS_DIR = Path(__file__).resolve().parents[1] / "contracts"


def load_schema(name: str) -> dict:
    return json.loads((CONTRACTS_DIR / name).read_text(encoding="utf-8"))


def chat_completion(content: str | None) -> dict:
    """Minimal chat.completion body with one choice."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 0,
        "model": "gpt-3.5-turbo",
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


class FakeUpstream:
    """Records outbound requests and answers them with `responder`."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda req: (
            httpx.Response(500, json={"error": {"message": "unexpected upstream call"}})
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)


@pytest.fixture
def gateway_config() -> GatewayConfig:
    return GatewayConfig(
        openai_api_key=TEST_API_KEY,
        openai_base_url="https://upstream.test/v1",
        allowed_origin=ALLOWED_ORIGIN,
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def client(gateway_config: GatewayConfig, upstream: FakeUpstream) -> TestClient:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    app = create_app(gateway_config, client=make_client(gateway_config, http_client=http_client))
    return TestClient(app)
