from datetime import datetime
import logging
import uuid

from cryptography.fernet import InvalidToken
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dashboard_api.core.config import settings
from dashboard_api.core.errors import ConfigurationMissing, InvalidRequest
from dashboard_api.core.security import (
    decrypt_secret,
    encrypt_secret,
    encryption_enabled,
    mask_secret,
)
from dashboard_api.models.app_settings import AppSettings
from dashboard_api.models.user_secret import UserSecret

logger = logging.getLogger(__name__)

API_KEY_SECRET = "n8n_api_key"
BASE_URL_SECRET = "n8n_base_url"
N8N_SECRET_NAMES = (API_KEY_SECRET, BASE_URL_SECRET)

SOURCE_USER_SECRETS = "user_secrets"
SOURCE_APP_SETTINGS = "app_settings"
SOURCE_DEFAULT = "default"


class N8nCredentials(BaseModel):
    api_key: str | None = None
    base_url: str
    source: str = SOURCE_DEFAULT


def normalize_base_url(base_url: str) -> str:
    """Strip trailing slashes and an /api/v1 suffix; the proxy appends /api/v1 itself."""
    url = base_url.strip().rstrip("/")
    if url.endswith("/api/v1"):
        url = url[: -len("/api/v1")].rstrip("/")
    return url


def require_api_key(credentials: N8nCredentials) -> str:
    if not credentials.api_key:
        raise ConfigurationMissing(
            "n8n configuration missing. Set your API key in the settings."
        )
    return credentials.api_key


class SecretStore:
    """
    Per-user n8n credential lookup.

    The generic ``user_secrets`` table is the primary source. The older
    ``app_settings`` row is consulted only when no API key is stored there.
    """

    def __init__(self, default_base_url: str | None = None):
        self.default_base_url = normalize_base_url(default_base_url or settings.n8n_default_base_url)
        self.logger = logging.getLogger(__name__)

    def resolve(self, db: Session, user_id: str) -> N8nCredentials:
        """Effective credentials for a user; never raises for missing configuration"""
        self.logger.info(f"resolve: Entry - user: {user_id}")

        secrets = self._from_user_secrets(db, user_id)
        source = SOURCE_USER_SECRETS
        if not secrets.get(API_KEY_SECRET):
            legacy = self._from_app_settings(db, user_id)
            if legacy.get(API_KEY_SECRET):
                secrets = legacy
                source = SOURCE_APP_SETTINGS

        api_key = secrets.get(API_KEY_SECRET) or None
        base_url = secrets.get(BASE_URL_SECRET)
        if not api_key:
            source = SOURCE_DEFAULT

        credentials = N8nCredentials(
            api_key=api_key,
            base_url=normalize_base_url(base_url) if base_url else self.default_base_url,
            source=source,
        )
        self.logger.info(
            f"resolve: Success - user: {user_id}, source: {credentials.source}, "
            f"api_key: {mask_secret(credentials.api_key)}, base_url: {credentials.base_url}"
        )
        return credentials

    def save(self, db: Session, user_id: str, api_key: str, base_url: str) -> list[str]:
        """Upsert both n8n secrets for a user in one transaction"""
        self.logger.info(f"save: Entry - user: {user_id}")

        if not isinstance(api_key, str) or not api_key.strip():
            raise InvalidRequest("A valid API key is required")
        if not isinstance(base_url, str) or not base_url.strip():
            raise InvalidRequest("A valid base URL is required")

        api_key = api_key.strip()
        base_url = base_url.strip()

        try:
            now = datetime.utcnow()
            if encryption_enabled():
                self._upsert(db, user_id, API_KEY_SECRET, encrypt_secret(api_key), True, now)
            else:
                self._upsert(db, user_id, API_KEY_SECRET, api_key, False, now)
            self._upsert(db, user_id, BASE_URL_SECRET, base_url, False, now)
            db.commit()

            self.logger.info(
                f"save: Success - user: {user_id}, api_key: {mask_secret(api_key)}, base_url: {base_url}"
            )
            return list(N8N_SECRET_NAMES)
        except Exception as e:
            db.rollback()
            self.logger.error(f"save: Failure - {e}")
            raise

    def _upsert(
        self,
        db: Session,
        user_id: str,
        name: str,
        value: str,
        is_encrypted: bool,
        now: datetime,
    ):
        secret = db.query(UserSecret).filter(
            UserSecret.user_id == user_id,
            UserSecret.secret_name == name,
        ).first()

        if secret is None:
            secret = UserSecret(
                id=str(uuid.uuid4()),
                user_id=user_id,
                secret_name=name,
                created_at=now,
            )
            db.add(secret)

        secret.secret_value = value
        secret.is_encrypted = is_encrypted
        secret.updated_at = now

    def _from_user_secrets(self, db: Session, user_id: str) -> dict:
        try:
            rows = db.query(UserSecret).filter(
                UserSecret.user_id == user_id,
                UserSecret.secret_name.in_(N8N_SECRET_NAMES),
            ).all()

            secrets = {}
            for row in rows:
                value = row.secret_value
                if row.is_encrypted:
                    if not encryption_enabled():
                        self.logger.warning(f"_from_user_secrets: {row.secret_name} is encrypted but no key is configured")
                        continue
                    value = decrypt_secret(value)
                secrets[row.secret_name] = value
            return secrets
        except (SQLAlchemyError, InvalidToken, ValueError) as e:
            # Missing table or undecryptable value reads as "not configured"
            db.rollback()
            self.logger.warning(f"_from_user_secrets: No secrets - {e!r}")
            return {}

    def _from_app_settings(self, db: Session, user_id: str) -> dict:
        try:
            row = db.query(AppSettings).filter(AppSettings.user_id == user_id).first()
            if row is None:
                return {}
            return {
                API_KEY_SECRET: row.n8n_api_key,
                BASE_URL_SECRET: row.n8n_base_url,
            }
        except SQLAlchemyError as e:
            db.rollback()
            self.logger.warning(f"_from_app_settings: No settings - {e!r}")
            return {}
