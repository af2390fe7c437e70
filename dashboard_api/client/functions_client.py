import json
import logging
from typing import Any, Callable, Union

import httpx

from dashboard_api.core.errors import ParseError, TransportError, error_from_envelope

logger = logging.getLogger(__name__)

PROXY_FUNCTION = "n8n-proxy"

TokenProvider = Union[str, Callable[[], str]]


class FunctionsClient:
    """
    Calls the dashboard's function endpoints on behalf of one signed-in user.

    Args:
        base_url: Root of the functions API, e.g. ``https://api.example.com/functions/v1``.
        access_token: Supabase access token, or a callable returning the current one.
        client: Optional shared ``httpx.AsyncClient``; one is opened per call otherwise.
        timeout: Per-call timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        access_token: TokenProvider,
        client: httpx.AsyncClient | None = None,
        timeout: float = 60.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.access_token = access_token
        self.client = client
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    def _headers(self) -> dict:
        token = self.access_token() if callable(self.access_token) else self.access_token
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

    async def _send(self, method: str, url: str, body: Any) -> httpx.Response:
        kwargs = {"headers": self._headers(), "timeout": self.timeout}
        if body is not None:
            kwargs["content"] = json.dumps(body).encode("utf-8")
        if self.client is None:
            async with httpx.AsyncClient() as client:
                return await client.request(method, url, **kwargs)
        return await self.client.request(method, url, **kwargs)

    async def invoke(self, name: str, body: Any = None, method: str = "POST") -> Any:
        """Call one function and return its decoded payload, raising on error envelopes"""
        url = f"{self.base_url}/{name}"
        self.logger.info(f"invoke: Entry - {method} {name}")

        try:
            response = await self._send(method, url, body)
        except httpx.HTTPError as e:
            self.logger.error(f"invoke: Failure - {name} - {e!r}")
            raise TransportError(
                f"Could not reach function {name}",
                details={"error": str(e) or e.__class__.__name__},
            )

        payload = self._decode(name, response)
        if not response.is_success:
            error = error_from_envelope(response.status_code, payload)
            self.logger.error(f"invoke: Failure - {name} - {error.code} ({error.status_code})")
            raise error

        self.logger.info(f"invoke: Success - {name} ({response.status_code})")
        return payload

    def _decode(self, name: str, response: httpx.Response) -> Any:
        if not response.content:
            return None
        content_type = response.headers.get("content-type", "")
        if "json" not in content_type:
            return response.text
        try:
            return response.json()
        except ValueError as e:
            self.logger.error(f"invoke: Failure - {name} returned malformed JSON - {e}")
            raise ParseError(
                f"Malformed JSON from function {name}",
                details={"status": response.status_code, "body": response.text[:500]},
            )

    async def forward(self, method: str, path: str, body: Any = None) -> Any:
        """Relay an n8n REST call through the proxy function"""
        payload = {"path": path, "method": method.upper()}
        if body is not None:
            payload["body"] = body
        return await self.invoke(PROXY_FUNCTION, payload)
