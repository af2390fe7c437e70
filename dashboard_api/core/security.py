from typing import Optional
from cryptography.fernet import Fernet
from dashboard_api.core.config import settings
import logging

logger = logging.getLogger(__name__)


def encryption_enabled() -> bool:
    return bool(settings.encryption_key)


def get_cipher() -> Fernet:
    """Fernet cipher built from ENCRYPTION_KEY; only valid when encryption_enabled()"""
    return Fernet(settings.encryption_key.encode())


def encrypt_secret(value: str) -> str:
    """Encrypt a user_secrets value so only a Fernet token is stored"""
    logger.info("encrypt_secret: Entry")

    try:
        token = get_cipher().encrypt(value.encode("utf-8")).decode("ascii")
        logger.info("encrypt_secret: Success")
        return token
    except Exception as e:
        logger.error(f"encrypt_secret: Failure - {e}")
        raise


def decrypt_secret(token: str) -> str:
    """
    Decrypt a stored user_secrets value.

    Raises cryptography.fernet.InvalidToken when the row was written with a
    different ENCRYPTION_KEY; SecretStore reads that as "not configured".
    """
    logger.info("decrypt_secret: Entry")

    try:
        value = get_cipher().decrypt(token.encode("ascii")).decode("utf-8")
        logger.info("decrypt_secret: Success")
        return value
    except Exception as e:
        logger.error(f"decrypt_secret: Failure - {e.__class__.__name__}")
        raise


def mask_secret(value: Optional[str], visible: int = 10) -> Optional[str]:
    """Keep only a short prefix of a secret for logs and API responses"""
    if not value:
        return None
    return value[:visible] + "..."
