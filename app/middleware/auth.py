"""
Authentication middleware for FastAPI
Verifies Firebase ID tokens and checks the caller's admin role
"""
import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from grok_trends.config import TrendsConfig
from grok_trends.dependencies import get_config, get_store

logger = logging.getLogger(__name__)

# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    store=Depends(get_store),
) -> dict:
    """
    FastAPI dependency that verifies Firebase ID token and returns user info

    Returns:
        Decoded token with user info (uid, email, name, etc.)

    Raises:
        HTTPException: 401 if token is invalid or missing
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        decoded_token = store.verify_id_token(credentials.credentials)
    except ValueError as e:
        logger.error(f"Token verification failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid authentication token: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info(f"User authenticated: {decoded_token.get('uid')}")
    return decoded_token


async def get_admin_user(
    user: dict = Depends(get_current_user),
    store=Depends(get_store),
    config: TrendsConfig = Depends(get_config),
) -> dict:
    """
    Require a users/{uid} document whose role is one of the admin roles

    Returns:
        The decoded token merged with the stored user profile

    Raises:
        HTTPException: 403 if the user has no admin role
    """
    uid = user.get("uid")
    profile = store.get(config.users_collection, uid) if uid else None

    if not profile or profile.get("role") not in config.admin_roles:
        logger.warning(f"Admin access denied for user {uid}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )

    return {
        **user,
        "role": profile.get("role"),
        "name": profile.get("name") or profile.get("displayName") or user.get("name"),
    }
