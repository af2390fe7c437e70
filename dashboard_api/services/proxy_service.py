import json
import logging
from typing import Any

import httpx
from pydantic import BaseModel

from dashboard_api.core.config import settings
from dashboard_api.core.errors import InvalidRequest, TransportError, UpstreamError
from dashboard_api.services.secret_store import N8nCredentials, require_api_key

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
USER_AGENT = "Dashboard-N8N-Proxy/1.0"
ALLOWED_METHODS = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE")
BODYLESS_METHODS = ("GET", "HEAD")
REDIRECT_STATUSES = (301, 302, 303, 307, 308)


class ProxyResponse(BaseModel):
    status_code: int
    content_type: str | None = None
    content: bytes = b""

    def text(self) -> str:
        return self.content.decode("utf-8", errors="replace")


def build_upstream_url(base_url: str, path: str) -> str:
    if not path.startswith("/"):
        path = "/" + path
    return f"{base_url}{API_PREFIX}{path}"


def encode_body(method: str, body: Any) -> bytes | None:
    """GET/HEAD never carry a body; strings pass through, anything else is JSON-encoded"""
    if method in BODYLESS_METHODS or body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body).encode("utf-8")


class N8nProxyService:
    """
    Relays one request to the n8n REST API with the caller's stored key.

    A single attempt is made per call. The optional ``client`` lets callers
    share or fake the transport; otherwise a client is opened per request.
    """

    def __init__(self, client: httpx.AsyncClient | None = None, timeout: float | None = None):
        self.client = client
        self.timeout = timeout if timeout is not None else settings.n8n_request_timeout
        self.logger = logging.getLogger(__name__)

    async def forward(
        self,
        method: str,
        path: str,
        credentials: N8nCredentials,
        body: Any = None,
    ) -> ProxyResponse:
        method = (method or "GET").upper()
        self.logger.info(f"forward: Entry - {method} {path}")

        if method not in ALLOWED_METHODS:
            raise InvalidRequest(f"Unsupported method: {method}")
        if not path:
            raise InvalidRequest("API path is required")

        api_key = require_api_key(credentials)
        url = build_upstream_url(credentials.base_url, path)
        headers = {
            "X-N8N-API-KEY": api_key,
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        content = encode_body(method, body)

        try:
            if self.client is None:
                async with httpx.AsyncClient(follow_redirects=False) as client:
                    response = await client.request(
                        method, url, headers=headers, content=content, timeout=self.timeout
                    )
            else:
                response = await self.client.request(
                    method, url, headers=headers, content=content, timeout=self.timeout
                )
        except httpx.TimeoutException as e:
            self.logger.error(f"forward: Failure - timeout after {self.timeout}s - {e!r}")
            raise TransportError(
                f"n8n request timed out ({self.timeout:g}s)",
                details={"timeout": True, "url": credentials.base_url},
            )
        except httpx.HTTPError as e:
            self.logger.error(f"forward: Failure - {e!r}")
            raise TransportError(
                "Internal error while contacting n8n",
                details={"error": str(e) or e.__class__.__name__, "url": credentials.base_url},
            )

        if response.status_code in REDIRECT_STATUSES:
            self.logger.warning(
                f"forward: n8n instance returned redirect {response.status_code} to "
                f"{response.headers.get('Location', 'unknown')}. "
                "This usually indicates the instance is behind Cloudflare Access or similar authentication."
            )

        if not response.is_success:
            self.logger.error(f"forward: Failure - n8n API error ({response.status_code}): {response.text}")
            raise UpstreamError(response.status_code, response.text)

        self.logger.info(f"forward: Success - {method} {path} ({response.status_code})")
        return ProxyResponse(
            status_code=response.status_code,
            content_type=response.headers.get("content-type"),
            content=response.content,
        )
