"""Tests for dispatching resolved commands to StackStorm."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from src.core.aliases.dispatcher import (
    START_MESSAGES,
    Dispatcher,
    extract_execution_id,
)
from src.core.aliases.models import ResolvedMatch

MATCH = ResolvedMatch(
    alias_name="deploy",
    format_string="deploy {{app}} to {{env}}",
    raw_text="deploy web to prod",
)


class TestExtractExecutionId:
    """Tests for extract_execution_id."""

    def test_plain_body(self) -> None:
        assert extract_execution_id("exec-123") == "exec-123"

    def test_json_object_with_id(self) -> None:
        assert extract_execution_id(json.dumps({"id": "5a1b"})) == "5a1b"

    def test_nested_execution_id(self) -> None:
        body = json.dumps({"execution": {"id": "5a1c", "status": "requested"}})
        assert extract_execution_id(body) == "5a1c"

    def test_json_string(self) -> None:
        assert extract_execution_id('"5a1d"') == "5a1d"


class TestDispatch:
    """Tests for Dispatcher.dispatch."""

    @pytest.mark.asyncio
    async def test_sends_execution_request(self, make_client, fake_st2) -> None:
        dispatcher = Dispatcher(make_client(), "chatops")

        await dispatcher.dispatch(MATCH, "alice", "C123")

        request = fake_st2.requests[-1]
        assert request.method == "POST"
        assert request.url.path == "/exp/aliasexecution"
        assert json.loads(request.content) == {
            "name": "deploy",
            "format": "deploy {{app}} to {{env}}",
            "command": "deploy web to prod",
            "user": "alice",
            "source_channel": "C123",
            "notification_channel": "chatops",
        }

    @pytest.mark.asyncio
    async def test_success_reports_execution_id(self, make_client, fake_st2) -> None:
        fake_st2.execution_body = "exec-123"
        reply = AsyncMock()
        dispatcher = Dispatcher(make_client(), "chatops")

        result = await dispatcher.dispatch(MATCH, "alice", "C123", reply)

        assert result.ok
        assert result.execution_id == "exec-123"
        assert "exec-123" in result.message
        assert result.message in [
            m.format(execution_id="exec-123") for m in START_MESSAGES
        ]
        reply.assert_awaited_once_with(result.message)

    @pytest.mark.asyncio
    async def test_error_status_reported(self, make_client, fake_st2) -> None:
        fake_st2.execution_status = 500
        fake_st2.execution_body = "boom"
        reply = AsyncMock()
        dispatcher = Dispatcher(make_client(), "chatops")

        result = await dispatcher.dispatch(MATCH, "alice", "C123", reply)

        assert not result.ok
        assert "500" in result.message
        assert "boom" in result.message
        assert result.message == 'status code "500": boom'
        reply.assert_awaited_once_with(result.message)

    @pytest.mark.asyncio
    async def test_transport_error_reported(self, make_client, fake_st2) -> None:
        fake_st2.fail_with = httpx.ConnectError("connection refused")
        reply = AsyncMock()
        dispatcher = Dispatcher(make_client(), "chatops")

        result = await dispatcher.dispatch(MATCH, "alice", "C123", reply)

        assert not result.ok
        assert result.message.startswith("error : ")
        assert "connection refused" in result.message
        assert len(fake_st2.requests) == 1  # no retry

    @pytest.mark.asyncio
    async def test_closed_client_reported(self, make_client, fake_st2) -> None:
        client = make_client()
        await client.aclose()
        reply = AsyncMock()
        dispatcher = Dispatcher(client, "chatops")

        result = await dispatcher.dispatch(MATCH, "alice", "C123", reply)

        assert not result.ok
        assert result.message.startswith("error : ")
        assert fake_st2.requests == []
        reply.assert_awaited_once_with(result.message)

    @pytest.mark.asyncio
    async def test_reply_failure_not_raised(self, make_client) -> None:
        reply = AsyncMock(side_effect=RuntimeError("slack down"))
        dispatcher = Dispatcher(make_client(), "chatops")

        result = await dispatcher.dispatch(MATCH, "alice", "C123", reply)

        assert result.ok
        reply.assert_awaited_once()
