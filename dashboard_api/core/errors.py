"""
Error taxonomy shared by the function endpoints and the client library.

Every error carries an HTTP status and a machine-readable ``code``. The
endpoints render errors as ``{"error", "code", "details"}`` envelopes and the
client maps envelopes back to the same classes by ``code``.
"""

from typing import Any, Optional


class GatewayError(Exception):
    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str, details: Any = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code

    def to_envelope(self) -> dict:
        envelope = {"error": self.message, "code": self.code}
        if self.details is not None:
            envelope["details"] = self.details
        return envelope


class Unauthorized(GatewayError):
    status_code = 401
    code = "unauthorized"


class ConfigurationMissing(GatewayError):
    status_code = 400
    code = "configuration_missing"


class InvalidRequest(GatewayError):
    status_code = 400
    code = "invalid_request"


class UpstreamError(GatewayError):
    """Non-2xx answer from n8n; keeps the upstream status and body text."""

    code = "upstream_error"

    def __init__(self, status: int, body: str, message: Optional[str] = None):
        super().__init__(
            message or f"n8n API error ({status}): {body}",
            details={"status": status, "body": body},
            status_code=status,
        )
        self.upstream_status = status
        self.body = body


class TransportError(GatewayError):
    status_code = 500
    code = "transport_error"


class ParseError(GatewayError):
    status_code = 502
    code = "parse_error"


class InternalError(GatewayError):
    status_code = 500
    code = "internal_error"


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (
        Unauthorized,
        ConfigurationMissing,
        InvalidRequest,
        TransportError,
        ParseError,
        InternalError,
    )
}


def error_from_envelope(status_code: int, payload: Any) -> GatewayError:
    """Rebuild the error a function endpoint raised from its JSON envelope."""
    if not isinstance(payload, dict):
        return GatewayError(str(payload) or f"HTTP {status_code}", status_code=status_code)

    code = payload.get("code")
    message = payload.get("error") or f"HTTP {status_code}"
    details = payload.get("details")

    if code == UpstreamError.code and isinstance(details, dict):
        return UpstreamError(
            details.get("status", status_code),
            details.get("body", ""),
            message=message,
        )
    error_cls = ERRORS_BY_CODE.get(code)
    if error_cls is None:
        if status_code == 401:
            error_cls = Unauthorized
        else:
            return GatewayError(message, details=details, status_code=status_code)
    return error_cls(message, details=details, status_code=status_code)
