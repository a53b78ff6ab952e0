"""API dependencies for authentication and per-user photo stores"""

from typing import Optional
from fastapi import Depends, HTTPException, status, Header
from pydantic import BaseModel

from src.services.errors import AuthError
from src.services.identity import TokenIdentityResolver
from src.services.photo_store import PhotoStore
from src.services.store_registry import PhotoStoreRegistry


class CurrentUser(BaseModel):
    """Authenticated caller"""

    user_id: str
    token: str


# Process-wide registry; replaced in tests through dependency overrides
store_registry = PhotoStoreRegistry()


def unauthorized(detail: str, instance: Optional[str] = None) -> HTTPException:
    problem = {
        "type": "/errors/unauthorized",
        "title": "Unauthorized",
        "status": 401,
        "detail": detail,
    }
    if instance:
        problem["instance"] = instance
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=problem,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(authorization: Optional[str] = Header(None)) -> CurrentUser:
    """
    Get current authenticated user from the bearer token.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        CurrentUser with id and raw token

    Raises:
        HTTPException: If the header is missing or the token does not resolve
    """
    if not authorization:
        raise unauthorized("Authorization header missing")

    # Extract token from "Bearer <token>"
    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise unauthorized("Invalid authorization header format")

    token = parts[1]
    try:
        user_id = await TokenIdentityResolver(token)()
    except AuthError as e:
        raise unauthorized(str(e))

    return CurrentUser(user_id=user_id, token=token)


def get_store_registry() -> PhotoStoreRegistry:
    """Registry holding per-user photo stores"""
    return store_registry


async def get_photo_store(
    current_user: CurrentUser = Depends(get_current_user),
    registry: PhotoStoreRegistry = Depends(get_store_registry),
) -> PhotoStore:
    """Photo store of the authenticated caller, loaded on first use"""
    return await registry.get(current_user.user_id, current_user.token)
