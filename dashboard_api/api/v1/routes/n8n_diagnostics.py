import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dashboard_api.api.dependencies import (
    get_current_user,
    get_diagnostics_service,
    get_secret_store,
)
from dashboard_api.api.responses import json_response
from dashboard_api.core.database import get_db
from dashboard_api.core.errors import GatewayError, InternalError
from dashboard_api.services.diagnostics_service import DiagnosticsService
from dashboard_api.services.secret_store import SecretStore

logger = logging.getLogger(__name__)

router = APIRouter()


async def _test_connection(
    current_user: dict,
    db: Session,
    secret_store: SecretStore,
    diagnostics: DiagnosticsService,
):
    logger.info(f"test_n8n_connection: Entry - user: {current_user['uid']}")

    try:
        credentials = secret_store.resolve(db, current_user['uid'])
        status_code, result = await diagnostics.test_connection(credentials)
        logger.info(f"test_n8n_connection: Success - status: {status_code}")
        return json_response(result, status_code=status_code)
    except GatewayError:
        raise
    except Exception as e:
        logger.error(f"test_n8n_connection: Failure - {e}")
        raise InternalError("Internal service error", details=str(e))


@router.get("/test-n8n-connection")
async def test_n8n_connection(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
    secret_store: SecretStore = Depends(get_secret_store),
    diagnostics: DiagnosticsService = Depends(get_diagnostics_service),
):
    """Probe the caller's n8n instance and explain any failure"""
    return await _test_connection(current_user, db, secret_store, diagnostics)


@router.post("/test-n8n-connection")
async def test_n8n_connection_post(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
    secret_store: SecretStore = Depends(get_secret_store),
    diagnostics: DiagnosticsService = Depends(get_diagnostics_service),
):
    return await _test_connection(current_user, db, secret_store, diagnostics)


async def _debug(
    current_user: dict,
    db: Session,
    secret_store: SecretStore,
    diagnostics: DiagnosticsService,
):
    logger.info(f"debug_n8n_api: Entry - user: {current_user['uid']}")

    try:
        credentials = secret_store.resolve(db, current_user['uid'])
        result = await diagnostics.debug(current_user['uid'], credentials)
        logger.info(f"debug_n8n_api: Success - success: {result['success']}")
        return json_response(result)
    except GatewayError:
        raise
    except Exception as e:
        logger.error(f"debug_n8n_api: Failure - {e}")
        raise InternalError("Internal service error", details=str(e))


@router.get("/debug-n8n-api")
async def debug_n8n_api(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
    secret_store: SecretStore = Depends(get_secret_store),
    diagnostics: DiagnosticsService = Depends(get_diagnostics_service),
):
    """Sweep the main n8n endpoints with the caller's key"""
    return await _debug(current_user, db, secret_store, diagnostics)


@router.post("/debug-n8n-api")
async def debug_n8n_api_post(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
    secret_store: SecretStore = Depends(get_secret_store),
    diagnostics: DiagnosticsService = Depends(get_diagnostics_service),
):
    return await _debug(current_user, db, secret_store, diagnostics)
