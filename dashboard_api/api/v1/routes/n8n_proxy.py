import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from dashboard_api.api.dependencies import get_current_user, get_proxy_service, get_secret_store
from dashboard_api.api.responses import CORS_HEADERS
from dashboard_api.core.database import get_db
from dashboard_api.core.errors import GatewayError, InternalError, InvalidRequest
from dashboard_api.services.proxy_service import N8nProxyService
from dashboard_api.services.secret_store import SecretStore

logger = logging.getLogger(__name__)

router = APIRouter()


class ProxyRequest(BaseModel):
    """Logical n8n call: path below /api/v1, HTTP method and optional JSON body"""
    path: str | None = None
    method: str = "GET"
    body: Any = None


@router.post("/n8n-proxy")
async def n8n_proxy(
    request: ProxyRequest = Body(...),
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
    secret_store: SecretStore = Depends(get_secret_store),
    proxy: N8nProxyService = Depends(get_proxy_service),
):
    """
    Relay one request to the caller's n8n instance.

    The upstream status, content type and body come back unchanged on
    success. Upstream failures keep their status code and are wrapped in an
    error envelope.
    """
    logger.info(
        f"n8n_proxy: Entry - user: {current_user['uid']}, {request.method} {request.path}")

    try:
        if not request.path:
            raise InvalidRequest("API path is required")

        credentials = secret_store.resolve(db, current_user['uid'])
        result = await proxy.forward(
            request.method, request.path, credentials, body=request.body
        )

        logger.info(
            f"n8n_proxy: Success - {request.method} {request.path} ({result.status_code})")
        return Response(
            content=result.content,
            status_code=result.status_code,
            headers={
                **CORS_HEADERS,
                "Content-Type": result.content_type or "application/json",
            },
        )
    except GatewayError:
        raise
    except Exception as e:
        logger.error(f"n8n_proxy: Failure - {e}")
        raise InternalError("Internal n8n proxy error", details=str(e))
