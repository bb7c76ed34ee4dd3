"""Tests for the StackStorm API client."""

import httpx
import pytest

from src.core.aliases.client import St2Client, derive_auth_url
from src.core.aliases.errors import AuthenticationError, RemoteServiceError


class TestDeriveAuthUrl:
    """Tests for derive_auth_url."""

    def test_explicit_port_replaced(self) -> None:
        assert derive_auth_url("http://localhost:9101") == "http://localhost:9100"

    def test_default_port_kept(self) -> None:
        assert derive_auth_url("https://st2.example.com") == "https://st2.example.com"

    def test_path_dropped(self) -> None:
        assert derive_auth_url("http://st2.local:9101/api") == "http://st2.local:9100"

    def test_explicit_auth_url_used(self) -> None:
        client = St2Client("http://st2.local:9101", auth_url="https://auth.local/")
        assert client.auth_url == "https://auth.local"


class TestListAliases:
    """Tests for St2Client.list_aliases."""

    @pytest.mark.asyncio
    async def test_returns_array(self, make_client) -> None:
        aliases = await make_client().list_aliases()
        assert [a["name"] for a in aliases] == [
            "deploy",
            "list_executions",
            "run_remote",
        ]

    @pytest.mark.asyncio
    async def test_non_array_is_error(self, make_client, fake_st2) -> None:
        fake_st2.aliases = {"faultstring": "nope"}
        with pytest.raises(RemoteServiceError):
            await make_client().list_aliases()

    @pytest.mark.asyncio
    async def test_status_error(self, make_client, fake_st2) -> None:
        fake_st2.alias_status = 503
        with pytest.raises(RemoteServiceError) as exc_info:
            await make_client().list_aliases()
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_transport_error(self, make_client, fake_st2) -> None:
        fake_st2.fail_with = httpx.ReadTimeout("timed out")
        with pytest.raises(RemoteServiceError) as exc_info:
            await make_client().list_aliases()
        assert exc_info.value.status_code is None


class TestAuthenticate:
    """Tests for St2Client.authenticate."""

    @pytest.mark.asyncio
    async def test_token_stored_and_sent(self, make_client, fake_st2) -> None:
        client = make_client(auth_url="http://st2.test:9100")

        token = await client.authenticate("admin", "secret")

        assert token == "test-token"
        auth_request = fake_st2.requests[0]
        assert str(auth_request.url) == "http://st2.test:9100/tokens"
        assert auth_request.headers["Authorization"].startswith("Basic ")

        await client.list_aliases()
        assert fake_st2.requests[-1].headers["X-Auth-Token"] == "test-token"

    @pytest.mark.asyncio
    async def test_rejected_credentials(self, make_client, fake_st2) -> None:
        fake_st2.token = None
        client = make_client(auth_url="http://st2.test:9100")

        with pytest.raises(AuthenticationError) as exc_info:
            await client.authenticate("admin", "wrong")

        assert exc_info.value.status_code == 401
        assert client.token is None
        assert len(fake_st2.requests) == 1


class TestClosedClient:
    """Tests for calls made after the client was closed."""

    @pytest.mark.asyncio
    async def test_list_aliases_after_close(self, make_client) -> None:
        client = make_client()
        await client.aclose()

        with pytest.raises(RemoteServiceError) as exc_info:
            await client.list_aliases()

        assert exc_info.value.status_code is None
