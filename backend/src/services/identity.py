"""Identity and caller profile resolution"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from src.database import AsyncSessionLocal
from src.models.profile import Profile
from src.services.auth_service import AuthService
from src.services.errors import AuthError, TransportError
from src.services.redis_service import RedisService

logger = logging.getLogger(__name__)


class TokenIdentityResolver:
    """Resolves the acting user id from a bearer token"""

    def __init__(self, token: Optional[str], redis_service: Optional[RedisService] = None):
        self.token = token
        self.redis_service = redis_service or RedisService()

    async def __call__(self) -> str:
        """
        Return the user id carried by the token.

        Raises:
            AuthError: If the token is missing, invalid, expired, revoked,
                or revocation cannot be checked
        """
        if not self.token:
            raise AuthError("Authorization token missing")

        payload = AuthService.validate_token(self.token)
        if not payload:
            raise AuthError("Invalid or expired token")

        try:
            revoked = await self.redis_service.is_token_revoked(self.token)
        except Exception as e:
            logger.error(f"Could not check token revocation: {e}")
            raise AuthError("Unable to verify token")
        if revoked:
            raise AuthError("Token has been revoked")

        user_id = payload.get("sub")
        if not user_id:
            raise AuthError("Invalid token payload")
        return str(user_id)


class ProfileService:
    """Service for reading caller profiles"""

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        self.session_factory = session_factory or AsyncSessionLocal

    async def get_location(self, user_id: str) -> Optional[str]:
        """
        Get the jurisdiction name assigned to a user.

        Returns:
            Location name, or None when the user has no profile

        Raises:
            TransportError: If the profile query fails
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(Profile.location).where(Profile.user_id == user_id)
                )
                return result.scalar_one_or_none()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error fetching profile for user {user_id}: {e}")
            raise TransportError(f"Failed to fetch profile: {str(e)}")


class CallerProfileResolver:
    """Resolves the jurisdiction name of a fixed caller"""

    def __init__(self, user_id: str, profile_service: Optional[ProfileService] = None):
        self.user_id = user_id
        self.profile_service = profile_service or ProfileService()

    async def __call__(self) -> Optional[str]:
        return await self.profile_service.get_location(self.user_id)
