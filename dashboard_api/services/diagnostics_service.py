import json
import logging

from dashboard_api.core.constants import HEALTH_PROBE_PATH
from dashboard_api.core.errors import (
    ConfigurationMissing,
    GatewayError,
    TransportError,
    UpstreamError,
)
from dashboard_api.services.proxy_service import N8nProxyService
from dashboard_api.services.secret_store import N8nCredentials

logger = logging.getLogger(__name__)

DEBUG_ENDPOINTS = [
    ("workflows", "/workflows?limit=10"),
    ("executions", "/executions?limit=5"),
    ("tags", "/tags"),
    ("variables", "/variables"),
    ("projects", "/projects"),
]

# upstream status -> (error, troubleshooting)
TROUBLESHOOTING = {
    401: (
        "Invalid or expired n8n API key",
        "Check that your API key is correct and active in n8n",
    ),
    403: (
        "Access denied - insufficient permissions",
        'Check that your API key has the "workflow:*" permissions',
    ),
    404: (
        "n8n API URL not found",
        "Check that the base URL points at your n8n instance",
    ),
    500: (
        "n8n server unavailable",
        "The n8n server seems to be having problems. Try again later.",
    ),
}
TROUBLESHOOTING[502] = TROUBLESHOOTING[500]
TROUBLESHOOTING[503] = TROUBLESHOOTING[500]


def _parse(content: str):
    try:
        return json.loads(content)
    except ValueError:
        return content


def _count(payload) -> int:
    if isinstance(payload, dict) and isinstance(payload.get("data"), list):
        return len(payload["data"])
    if isinstance(payload, list):
        return len(payload)
    return 0


class DiagnosticsService:
    """Connection test and endpoint sweep on top of the proxy"""

    def __init__(self, proxy: N8nProxyService | None = None):
        self.proxy = proxy or N8nProxyService()
        self.logger = logging.getLogger(__name__)

    async def test_connection(self, credentials: N8nCredentials) -> tuple[int, dict]:
        """
        Probe the workflows endpoint and explain the outcome.

        Returns the HTTP status to answer with and the response body:
        200 on success, the upstream status on n8n errors, 408 on timeout,
        400 when no key is configured and 500 on other network failures.
        """
        self.logger.info(f"test_connection: Entry - base_url: {credentials.base_url}")
        probe_url = f"{credentials.base_url}/api/v1{HEALTH_PROBE_PATH}"

        try:
            response = await self.proxy.forward("GET", HEALTH_PROBE_PATH, credentials)
        except ConfigurationMissing as e:
            self.logger.error(f"test_connection: Failure - {e}")
            return 400, {
                "success": False,
                "error": e.message,
                "details": "Save your n8n API key in the settings first",
            }
        except UpstreamError as e:
            self.logger.error(f"test_connection: Failure - upstream {e.upstream_status}")
            error, troubleshooting = TROUBLESHOOTING.get(
                e.upstream_status,
                (f"HTTP error {e.upstream_status}", f"Server error: {e.body}"),
            )
            return e.upstream_status, {
                "success": False,
                "error": error,
                "troubleshooting": troubleshooting,
                "details": {"status": e.upstream_status, "body": e.body, "url": probe_url},
            }
        except TransportError as e:
            self.logger.error(f"test_connection: Failure - {e}")
            if isinstance(e.details, dict) and e.details.get("timeout"):
                return 408, {
                    "success": False,
                    "error": e.message,
                    "troubleshooting": "The n8n server is not responding. Check the URL and that the server is reachable.",
                    "details": e.details,
                }
            return 500, {
                "success": False,
                "error": "Network connection error",
                "troubleshooting": "Unable to reach the n8n server. Check the URL and your connection.",
                "details": e.details,
            }

        payload = _parse(response.text())
        result = {
            "success": True,
            "message": "n8n connection established",
            "details": {
                "workflowCount": _count(payload),
                "url": credentials.base_url,
            },
        }
        self.logger.info(f"test_connection: Success - {result['details']['workflowCount']} workflows")
        return 200, result

    async def debug(self, user_id: str, credentials: N8nCredentials) -> dict:
        """Sweep a fixed list of read-only endpoints and report each outcome"""
        self.logger.info(f"debug: Entry - user: {user_id}")

        diagnostics = {
            "user_id": user_id,
            "secrets_found": {
                "api_key": bool(credentials.api_key),
                "base_url": bool(credentials.base_url),
                "api_key_length": len(credentials.api_key or ""),
                "source": credentials.source,
            },
            "base_url": credentials.base_url,
            "endpoints_tested": {},
        }

        if not credentials.api_key:
            self.logger.info("debug: Success - no API key configured")
            return {"success": False, "error": "n8n API key missing", "diagnostics": diagnostics}

        for name, path in DEBUG_ENDPOINTS:
            try:
                response = await self.proxy.forward("GET", path, credentials)
                payload = _parse(response.text())
                entry = {
                    "status": response.status_code,
                    "ok": True,
                    "data_length": _count(payload),
                    "error": None,
                }
                if name == "workflows" and isinstance(payload, dict) and isinstance(payload.get("data"), list):
                    entry["workflows"] = [
                        {"id": w.get("id"), "name": w.get("name"), "active": w.get("active")}
                        for w in payload["data"]
                        if isinstance(w, dict)
                    ]
            except UpstreamError as e:
                entry = {
                    "status": e.upstream_status,
                    "ok": False,
                    "data_length": 0,
                    "error": _parse(e.body),
                }
            except GatewayError as e:
                entry = {"error": e.message, "failed": True}
            diagnostics["endpoints_tested"][name] = entry

        self.logger.info(f"debug: Success - {len(diagnostics['endpoints_tested'])} endpoints tested")
        return {"success": True, "diagnostics": diagnostics}
