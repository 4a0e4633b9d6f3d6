"""Tests for the request middleware."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from botsense.security.agent_patterns import SourceType
from botsense.security.detection import AgentDetector
from botsense.security.middleware import AgentDetectionMiddleware
from botsense.security.rules import RuleSet
from tests._agents import CHATGPT_USER_UA, CHROME_UA, GPTBOT_UA


def _build(registry, rules=None):
    collector = MagicMock()
    collector.log_event = AsyncMock()
    app = FastAPI()
    app.add_middleware(
        AgentDetectionMiddleware,
        detector=AgentDetector(registry, rules or RuleSet()),
        collector=collector,
    )

    @app.get("/page")
    async def page(request: Request):
        detection = request.state.agent_detection
        return {"sourceType": detection.source_type.value}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return TestClient(app), collector


@pytest.fixture
def client_and_collector(registry):
    return _build(registry, RuleSet(block_ai_model_trainers=True))


def test_blocked_agent_gets_403(client_and_collector):
    client, collector = client_and_collector
    response = client.get("/page", headers={"User-Agent": GPTBOT_UA})
    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden"}

    collector.log_event.assert_awaited_once()
    detection, event = collector.log_event.await_args.args
    assert detection.should_block is True
    assert event.response_status == 403


def test_allowed_bot_passes_and_is_logged(client_and_collector):
    client, collector = client_and_collector
    response = client.get("/page", headers={"User-Agent": CHATGPT_USER_UA})
    assert response.status_code == 200
    assert response.json() == {"sourceType": "bot"}
    detection, event = collector.log_event.await_args.args
    assert detection.source_type == SourceType.BOT
    assert event.response_status == 200


def test_ai_referrer_is_logged(client_and_collector):
    client, collector = client_and_collector
    response = client.get(
        "/page",
        headers={"User-Agent": CHROME_UA, "Referer": "https://chat.openai.com/c/1"},
    )
    assert response.status_code == 200
    assert response.json() == {"sourceType": "ai_referrer"}
    detection, event = collector.log_event.await_args.args
    assert detection.source_type == SourceType.AI_REFERRER
    assert event.referrer == "https://chat.openai.com/c/1"


def test_ordinary_traffic_is_not_logged(client_and_collector):
    client, collector = client_and_collector
    response = client.get("/page", headers={"User-Agent": CHROME_UA})
    assert response.status_code == 200
    assert response.json() == {"sourceType": "none"}
    collector.log_event.assert_not_awaited()


def test_excluded_paths_skip_detection(client_and_collector):
    client, collector = client_and_collector
    response = client.get("/health", headers={"User-Agent": GPTBOT_UA})
    assert response.status_code == 200
    collector.log_event.assert_not_awaited()


def test_client_ip_prefers_proxy_headers(client_and_collector):
    client, collector = client_and_collector
    client.get(
        "/page",
        headers={"User-Agent": GPTBOT_UA, "X-Forwarded-For": "198.51.100.1, 10.0.0.1"},
    )
    _, event = collector.log_event.await_args.args
    assert event.ip_address == "198.51.100.1"
