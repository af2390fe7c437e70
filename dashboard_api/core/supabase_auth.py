import httpx
from dashboard_api.core.config import settings
from dashboard_api.core.errors import Unauthorized
import logging

logger = logging.getLogger(__name__)


def supabase_headers(token: str) -> dict:
    """Headers for calls made on behalf of the signed-in user"""
    return {
        "apikey": settings.supabase_anon_key,
        "Authorization": f"Bearer {token}",
    }


async def verify_supabase_token(token: str, client: httpx.AsyncClient | None = None) -> dict:
    """Resolve a Supabase access token to its user record via the auth API"""
    logger.info("verify_supabase_token: Entry")

    url = f"{settings.supabase_url}/auth/v1/user"
    try:
        if client is None:
            async with httpx.AsyncClient() as session:
                response = await session.get(url, headers=supabase_headers(token))
        else:
            response = await client.get(url, headers=supabase_headers(token))
    except httpx.HTTPError as e:
        logger.error(f"verify_supabase_token: Failure - {e}")
        raise Unauthorized("User is not authenticated", details=str(e))

    if response.status_code != 200:
        logger.error(f"verify_supabase_token: Failure - status {response.status_code}")
        raise Unauthorized("Invalid token", details=response.text)

    try:
        user = response.json()
    except ValueError:
        user = None
    if not isinstance(user, dict) or not user.get("id"):
        logger.error("verify_supabase_token: Failure - no user in auth response")
        raise Unauthorized("User is not authenticated")

    logger.info(f"verify_supabase_token: Success - {user['id']}")
    return user
