"""Tests for the FastAPI result webhook and read endpoints."""

import json
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from src.core.engine import ChatOpsEngine
from src.interfaces.api.main import WEBHOOK_PATH, create_app


@pytest.fixture
def chat_sender() -> AsyncMock:
    sender = AsyncMock()
    sender.send.return_value = "1700000000.000100"
    return sender


@pytest.fixture
def api_client(engine, chat_sender):
    app = create_app(engine, chat_sender)
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


class TestWebhook:
    """Tests for POST /hubot/st2."""

    @pytest.mark.asyncio
    async def test_raw_json_whisper(self, api_client, chat_sender) -> None:
        async with api_client as client:
            response = await client.post(
                WEBHOOK_PATH,
                json={
                    "message": "done",
                    "user": "alice",
                    "channel": "#ops",
                    "whisper": True,
                },
            )

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        chat_sender.send.assert_awaited_once_with("alice", "done")

    @pytest.mark.asyncio
    async def test_raw_json_user_in_channel(self, api_client, chat_sender) -> None:
        async with api_client as client:
            response = await client.post(
                WEBHOOK_PATH,
                json={
                    "message": "done",
                    "user": "alice",
                    "channel": "#ops",
                    "whisper": False,
                },
            )

        assert response.status_code == 200
        chat_sender.send.assert_awaited_once_with("#ops", "alice :\ndone")

    @pytest.mark.asyncio
    async def test_form_encoded_payload(self, api_client, chat_sender) -> None:
        payload = json.dumps({"message": {"stdout": "ok"}, "channel": "#ops"})
        async with api_client as client:
            response = await client.post(WEBHOOK_PATH, data={"payload": payload})

        assert response.status_code == 200
        assert response.json()["status"] == "completed"
        chat_sender.send.assert_awaited_once_with("#ops", "```\nstdout: ok\n```")

    @pytest.mark.asyncio
    async def test_unparseable_body_acknowledged(self, api_client, chat_sender) -> None:
        async with api_client as client:
            response = await client.post(
                WEBHOOK_PATH,
                content=b"{not json",
                headers={"Content-Type": "application/json"},
            )

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "failed"
        assert "An error occurred trying to post the message" in data["msg"]
        chat_sender.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_bad_form_payload_acknowledged(self, api_client, chat_sender) -> None:
        async with api_client as client:
            response = await client.post(WEBHOOK_PATH, data={"payload": "{oops"})

        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        chat_sender.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_default_channel_used(self, api_client, chat_sender) -> None:
        async with api_client as client:
            response = await client.post(WEBHOOK_PATH, json={"message": "done"})

        assert response.json()["status"] == "completed"
        chat_sender.send.assert_awaited_once_with("chatops", "done")

    @pytest.mark.asyncio
    async def test_delivery_failure_reported(self, api_client, chat_sender) -> None:
        chat_sender.send.return_value = None
        async with api_client as client:
            response = await client.post(
                WEBHOOK_PATH, json={"message": "done", "channel": "#ops"}
            )

        assert response.status_code == 200
        assert response.json()["status"] == "failed"

    @pytest.mark.asyncio
    async def test_no_chat_adapter(self, engine) -> None:
        app = create_app(engine)
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.post(
                WEBHOOK_PATH, json={"message": "done", "channel": "#ops"}
            )

        assert response.status_code == 200
        assert response.json()["status"] == "failed"


class TestReadEndpoints:
    """Tests for GET /aliases and GET /health."""

    @pytest.mark.asyncio
    async def test_aliases_lists_commands(self, engine, api_client) -> None:
        await engine.refresher.refresh()

        async with api_client as client:
            response = await client.get("/aliases")

        assert response.status_code == 200
        data = response.json()
        assert data["generation"] == 1
        assert data["aliases"] == 3
        assert "hubot deploy {{app}} to {{env}} - Deploy an application" in data[
            "commands"
        ]
        assert "hubot run {{cmd}} on {{hosts}}" in data["commands"]

    @pytest.mark.asyncio
    async def test_health(self, api_client) -> None:
        async with api_client as client:
            response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["commands_loaded"] is False
        assert data["chat_connected"] is True


class TestAccessControl:
    """Tests for the API key and rate limit taken from the engine settings."""

    @pytest.fixture
    def make_api_client(self, test_settings, make_client, stub_scheduler):
        def _make(**overrides) -> AsyncClient:
            settings = test_settings.model_copy(update=overrides)
            engine = ChatOpsEngine(
                settings, client=make_client(), scheduler=stub_scheduler
            )
            return AsyncClient(
                transport=ASGITransport(app=create_app(engine)),
                base_url="http://test",
            )

        return _make

    @pytest.mark.asyncio
    async def test_missing_key_rejected(self, make_api_client) -> None:
        async with make_api_client(api_auth_key="s3cret") as client:
            response = await client.get("/aliases")

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_wrong_key_rejected(self, make_api_client) -> None:
        async with make_api_client(api_auth_key="s3cret") as client:
            response = await client.get("/aliases", headers={"X-API-Key": "nope"})

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_valid_key_accepted(self, make_api_client) -> None:
        async with make_api_client(api_auth_key="s3cret") as client:
            response = await client.get("/aliases", headers={"X-API-Key": "s3cret"})

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_no_key_configured(self, make_api_client) -> None:
        async with make_api_client(api_auth_key="") as client:
            response = await client.get("/aliases")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_webhook_needs_no_key(self, make_api_client) -> None:
        async with make_api_client(api_auth_key="s3cret") as client:
            response = await client.post(
                WEBHOOK_PATH, json={"message": "done", "channel": "#ops"}
            )

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_rate_limit_from_settings(self, make_api_client) -> None:
        async with make_api_client(api_rate_limit=2) as client:
            statuses = [(await client.get("/health")).status_code for _ in range(3)]

        assert statuses == [200, 200, 429]
