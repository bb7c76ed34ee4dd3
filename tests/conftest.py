"""Shared pytest fixtures for all test modules.

Provides common fixtures for:
- Settings isolated from the developer's .env file
- StackStorm API clients backed by httpx.MockTransport
- A fully wired engine with a stubbed scheduler
"""

import json
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from src.config import Settings
from src.core.aliases.client import St2Client
from src.core.aliases.models import AliasDefinition
from src.core.engine import ChatOpsEngine

ST2_API = "http://st2.test:9101"

SAMPLE_ALIASES: list[dict[str, Any]] = [
    {
        "name": "deploy",
        "description": "Deploy an application",
        "formats": ["deploy {{app}} to {{env}}"],
    },
    {
        "name": "list_executions",
        "description": "List recent executions",
        "formats": ["list executions", "show executions"],
    },
    {
        "name": "run_remote",
        "description": "",
        "formats": ["run {{cmd}} on {{hosts}}"],
    },
]


class FakeSt2:
    """In-memory StackStorm API for httpx.MockTransport.

    Attributes:
        aliases: Body returned by GET /exp/actionalias (any JSON value).
        alias_status: Status code for the alias list.
        execution_status: Status code for POST /exp/aliasexecution.
        execution_body: Raw body for POST /exp/aliasexecution.
        token: Token returned by POST /tokens, None to answer 401.
        fail_with: Exception raised for every request when set.
        requests: Every request received, in order.
    """

    def __init__(self) -> None:
        self.aliases: Any = list(SAMPLE_ALIASES)
        self.alias_status = 200
        self.execution_status = 200
        self.execution_body = "exec-123"
        self.token: str | None = "test-token"
        self.fail_with: Exception | None = None
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        path = request.url.path
        if request.method == "GET" and path == "/exp/actionalias":
            content = (
                self.aliases
                if isinstance(self.aliases, (str, bytes))
                else json.dumps(self.aliases)
            )
            return httpx.Response(self.alias_status, content=content)
        if request.method == "POST" and path == "/exp/aliasexecution":
            return httpx.Response(self.execution_status, text=self.execution_body)
        if request.method == "POST" and path == "/tokens":
            if self.token is None:
                return httpx.Response(401, json={"faultstring": "Invalid credentials"})
            return httpx.Response(201, json={"token": self.token})
        return httpx.Response(404, text="not found")

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


@pytest.fixture
def fake_st2() -> FakeSt2:
    return FakeSt2()


@pytest.fixture
def make_client(fake_st2: FakeSt2) -> Callable[..., St2Client]:
    """Factory for St2Client instances talking to fake_st2."""

    def _make(**kwargs: Any) -> St2Client:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(fake_st2.handler), base_url=ST2_API
        )
        return St2Client(ST2_API, http_client=http_client, **kwargs)

    return _make


@pytest.fixture
def test_settings() -> Settings:
    """Settings that ignore .env and the process environment's credentials."""
    return Settings(
        _env_file=None,
        st2_api=ST2_API,
        st2_channel="chatops",
        st2_auth_username="",
        st2_auth_password="",
        st2_auth_url="",
        bot_name="hubot",
        api_auth_key="",
        api_rate_limit=60,
    )


@pytest.fixture
def stub_scheduler() -> MagicMock:
    """Stand-in for AsyncIOScheduler that records jobs without running them."""
    scheduler = MagicMock()
    scheduler.running = False
    return scheduler


@pytest.fixture
def engine(
    test_settings: Settings,
    make_client: Callable[..., St2Client],
    stub_scheduler: MagicMock,
) -> ChatOpsEngine:
    return ChatOpsEngine(test_settings, client=make_client(), scheduler=stub_scheduler)


@pytest.fixture
def loaded_engine(engine: ChatOpsEngine) -> ChatOpsEngine:
    """Engine whose registry already holds SAMPLE_ALIASES."""
    engine.registry.replace(AliasDefinition.from_dict(a) for a in SAMPLE_ALIASES)
    return engine
