from fastapi.responses import JSONResponse, Response
from dashboard_api.core.errors import GatewayError

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}


def json_response(content, status_code: int = 200) -> JSONResponse:
    return JSONResponse(content=content, status_code=status_code, headers=CORS_HEADERS)


def error_response(error: GatewayError) -> JSONResponse:
    return json_response(error.to_envelope(), status_code=error.status_code)


def preflight_response() -> Response:
    return Response(content="ok", status_code=200, headers=CORS_HEADERS)
