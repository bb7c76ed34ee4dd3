# src/core/aliases/client.py
"""HTTP client for the StackStorm API.

Wraps an httpx.AsyncClient for the three calls the alias engine makes:
listing action aliases, submitting an alias execution, and obtaining an
auth token. Transport and protocol failures are raised as
RemoteServiceError so callers can decide whether to log or report them.
"""

import json
import logging
from typing import Any

import httpx
import tenacity

from src.core.aliases.errors import AuthenticationError, RemoteServiceError
from src.core.aliases.models import ExecutionRequest

logger = logging.getLogger(__name__)

ALIAS_LIST_PATH = "/exp/actionalias"
ALIAS_EXECUTION_PATH = "/exp/aliasexecution"
AUTH_TOKENS_PATH = "/tokens"
AUTH_TOKEN_HEADER = "X-Auth-Token"

# StackStorm serves its auth API on a separate port next to the main API
DEFAULT_AUTH_PORT = 9100

# Failures of a request that never got a response. A closed client raises
# RuntimeError and a malformed URL raises InvalidURL, neither an HTTPError.
TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL, RuntimeError)


def derive_auth_url(api_url: str) -> str:
    """Derive the auth API URL from the main API URL.

    Keeps scheme and host. When the API URL names an explicit port, the
    auth API's default port is used instead.

    Args:
        api_url: Base StackStorm API URL, e.g. "http://st2.local:9101".

    Returns:
        Auth API base URL, e.g. "http://st2.local:9100".
    """
    url = httpx.URL(api_url)
    base = f"{url.scheme}://{url.host}"
    if url.port is not None:
        base += f":{DEFAULT_AUTH_PORT}"
    return base


class St2Client:
    """Async client for the StackStorm alias endpoints.

    Attributes:
        api_url: Base StackStorm API URL.
        auth_url: Auth API base URL used by authenticate().
        token: Auth token sent with every request once set.

    Example:
        >>> client = St2Client("http://localhost:9101")
        >>> aliases = await client.list_aliases()
        >>> await client.aclose()
    """

    def __init__(
        self,
        api_url: str,
        auth_url: str | None = None,
        timeout: float = 30.0,
        verify: bool = True,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_url: Base StackStorm API URL.
            auth_url: Explicit auth API URL; derived from api_url when None.
            timeout: Per-request timeout in seconds.
            verify: Whether to verify TLS certificates.
            http_client: Preconfigured httpx client (tests inject one backed by
                httpx.MockTransport). Must use api_url as its base_url.
        """
        self.api_url = api_url.rstrip("/")
        self.auth_url = (auth_url or derive_auth_url(api_url)).rstrip("/")
        self.token: str | None = None
        self._http = http_client or httpx.AsyncClient(
            base_url=self.api_url, timeout=timeout, verify=verify
        )

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {AUTH_TOKEN_HEADER: self.token}
        return {}

    async def list_aliases(self) -> list[Any]:
        """Fetch the raw action alias list.

        Returns:
            Decoded JSON array of alias objects.

        Raises:
            RemoteServiceError: On transport errors, a non-200 status, an
                unparseable body, or a body that is not a JSON array.
        """
        try:
            response = await self._http.get(ALIAS_LIST_PATH, headers=self._headers())
        except TRANSPORT_ERRORS as e:
            raise RemoteServiceError(f"Failed to retrieve commands: {e}") from e

        if response.status_code != 200:
            raise RemoteServiceError(
                f"Failed to retrieve commands: HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise RemoteServiceError(
                f"Failed to retrieve commands: {response.text}",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(data, list):
            raise RemoteServiceError(
                f"Failed to retrieve commands: {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        return data

    async def execute(self, request: ExecutionRequest) -> str:
        """Submit an alias execution.

        Args:
            request: Execution payload.

        Returns:
            Raw response body of a successful (HTTP 200) submission.

        Raises:
            RemoteServiceError: On transport errors, an invalid URL or a closed
                client (status_code None), or any status other than 200
                (status_code and body set).
        """
        logger.debug("Sending command payload %s", request.to_dict())
        try:
            response = await self._http.post(
                ALIAS_EXECUTION_PATH, json=request.to_dict(), headers=self._headers()
            )
        except TRANSPORT_ERRORS as e:
            raise RemoteServiceError(str(e) or type(e).__name__) from e

        if response.status_code != 200:
            raise RemoteServiceError(
                f"Execution failed with HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )
        return response.text

    @tenacity.retry(
        stop=tenacity.stop_after_attempt(3),
        wait=tenacity.wait_exponential(multiplier=1, min=1, max=10),
        retry=tenacity.retry_if_exception_type(
            (httpx.TimeoutException, httpx.ConnectError)
        ),
        reraise=True,
    )
    async def _request_token(self, username: str, password: str) -> httpx.Response:
        return await self._http.post(
            f"{self.auth_url}{AUTH_TOKENS_PATH}", auth=(username, password), json={}
        )

    async def authenticate(self, username: str, password: str) -> str:
        """Obtain an auth token and use it for subsequent requests.

        Connection and timeout errors are retried a few times before giving up.

        Args:
            username: StackStorm username.
            password: StackStorm password.

        Returns:
            The auth token.

        Raises:
            AuthenticationError: If no token could be obtained.
        """
        try:
            response = await self._request_token(username, password)
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Failed to authenticate: {e}") from e

        if response.status_code not in (200, 201):
            raise AuthenticationError(
                f"Failed to authenticate: HTTP {response.status_code}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            token = response.json().get("token")
        except (json.JSONDecodeError, AttributeError) as e:
            raise AuthenticationError(
                "Failed to authenticate: unexpected response",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not token:
            raise AuthenticationError(
                "Failed to authenticate: no token in response",
                status_code=response.status_code,
                body=response.text,
            )

        self.token = token
        logger.debug("Successfully authenticated.")
        return token

    async def aclose(self) -> None:
        await self._http.aclose()
