from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from dashboard_api.core.errors import GatewayError, Unauthorized
from dashboard_api.core.supabase_auth import verify_supabase_token
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security)
) -> dict:
    """
    Dependency to get current authenticated user from a Supabase access token.
    Runs before any secret lookup or upstream call.
    """
    logger.info("get_current_user: Entry")

    if credentials is None or not credentials.credentials:
        logger.error("get_current_user: Failure - missing bearer token")
        raise Unauthorized("Authentication required")

    try:
        token = credentials.credentials
        user = await verify_supabase_token(token)
        logger.info(f"get_current_user: Success - {user['id']}")
        return {
            'uid': user['id'],
            'email': user.get('email'),
            'token': token,
        }
    except GatewayError:
        raise
    except Exception as e:
        logger.error(f"get_current_user: Failure - {e}")
        raise Unauthorized("Could not validate credentials", details=str(e))
