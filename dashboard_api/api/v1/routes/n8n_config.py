import logging
from datetime import datetime

from fastapi import APIRouter, Body, Depends
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from dashboard_api.api.dependencies import get_current_user, get_secret_store
from dashboard_api.api.responses import json_response
from dashboard_api.core.database import get_db
from dashboard_api.core.errors import GatewayError, InternalError
from dashboard_api.core.security import mask_secret
from dashboard_api.services.secret_store import SecretStore

logger = logging.getLogger(__name__)

router = APIRouter()


class SaveConfigRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)  # Allows both api_key and apiKey

    api_key: str | None = Field(None, alias="apiKey")
    base_url: str | None = Field(None, alias="baseUrl")


async def _get_secrets(current_user: dict, db: Session, secret_store: SecretStore):
    """Effective n8n settings for the current user, with the key masked"""
    logger.info(f"get_n8n_secrets: Entry - user: {current_user['uid']}")

    try:
        credentials = secret_store.resolve(db, current_user['uid'])
        logger.info(f"get_n8n_secrets: Success - source: {credentials.source}")
        return json_response({
            "n8n_api_key": mask_secret(credentials.api_key),
            "n8n_base_url": credentials.base_url,
            "has_api_key": credentials.api_key is not None,
            "source": credentials.source,
        })
    except GatewayError:
        raise
    except Exception as e:
        logger.error(f"get_n8n_secrets: Failure - {e}")
        raise InternalError("Error while reading n8n secrets", details=str(e))


@router.get("/get-n8n-secrets")
async def get_n8n_secrets(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
    secret_store: SecretStore = Depends(get_secret_store),
):
    return await _get_secrets(current_user, db, secret_store)


@router.post("/get-n8n-secrets")
async def get_n8n_secrets_post(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
    secret_store: SecretStore = Depends(get_secret_store),
):
    return await _get_secrets(current_user, db, secret_store)


@router.post("/save-n8n-config")
async def save_n8n_config(
    config: SaveConfigRequest = Body(...),
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
    secret_store: SecretStore = Depends(get_secret_store),
):
    """Store the n8n API key and base URL for the current user"""
    logger.info(f"save_n8n_config: Entry - user: {current_user['uid']}")

    try:
        saved = secret_store.save(
            db, current_user['uid'], config.api_key, config.base_url
        )
        logger.info(f"save_n8n_config: Success - user: {current_user['uid']}")
        return json_response({
            "success": True,
            "message": "n8n configuration saved",
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "user_id": current_user['uid'],
            "secrets_saved": saved,
        })
    except GatewayError:
        raise
    except Exception as e:
        logger.error(f"save_n8n_config: Failure - {e}")
        raise InternalError("Error while saving n8n configuration", details=str(e))
