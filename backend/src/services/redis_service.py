"""Redis access for the bearer token revocation list"""

import redis.asyncio as redis
from typing import Optional
from src.config import settings

# Written by the issuing auth service on logout
REVOKED_TOKEN_PREFIX = "blacklist:"


class RedisService:
    """Shared Redis connection and revocation lookups"""

    _client: Optional[redis.Redis] = None

    @classmethod
    async def get_client(cls) -> redis.Redis:
        """Get or create the shared client"""
        if cls._client is None:
            cls._client = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True
            )
        return cls._client

    @classmethod
    async def ping(cls) -> bool:
        client = await cls.get_client()
        return await client.ping()

    @classmethod
    async def close(cls):
        """Close the shared client"""
        if cls._client:
            await cls._client.aclose()
            cls._client = None

    async def is_token_revoked(self, token: str) -> bool:
        """
        Check the revocation list for a bearer token

        Args:
            token: Raw JWT

        Returns:
            True if the token was revoked before it expired
        """
        client = await self.get_client()
        return await client.exists(f"{REVOKED_TOKEN_PREFIX}{token}") > 0
