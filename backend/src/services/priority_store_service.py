"""Override store backed by the photo_priorities table"""

import logging
from typing import Dict, Optional

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from src.database import AsyncSessionLocal
from src.models.photo_priority import PhotoPriority
from src.models.base import utcnow
from src.schemas.photo import Priority
from src.services.errors import TransportError
from src.services.override_reconciler import canonical_photo_key

logger = logging.getLogger(__name__)


class OverrideStoreError(TransportError):
    """Override store read or write failed"""
    pass


class PriorityStoreService:
    """
    Service for reading and writing per-user priority overrides.
    Photo ids always go through canonical_photo_key on the way in.
    """

    def __init__(self, session_factory: Optional[async_sessionmaker] = None):
        """Initialize with a session factory (defaults to the application factory)"""
        self.session_factory = session_factory or AsyncSessionLocal

    async def list_overrides(self, user_id: str) -> Dict[str, str]:
        """
        Get all overrides owned by a user.

        Args:
            user_id: Acting user id

        Returns:
            Mapping of photo id to priority

        Raises:
            OverrideStoreError: If the query fails
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(PhotoPriority.photo_id, PhotoPriority.priority).where(
                        PhotoPriority.user_id == user_id
                    )
                )
                rows = result.all()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Error fetching priority overrides: {e}")
            raise OverrideStoreError(f"Failed to fetch priority overrides: {str(e)}")

        return {canonical_photo_key(photo_id): priority for photo_id, priority in rows}

    async def upsert_override(self, photo_id: str, user_id: str, priority: Priority) -> None:
        """
        Insert or update the (photo, user) override.

        Raises:
            OverrideStoreError: If the write fails
        """
        key = canonical_photo_key(photo_id)
        value = Priority(priority).value
        statement = insert(PhotoPriority).values(
            photo_id=key, user_id=user_id, priority=value
        )
        statement = statement.on_conflict_do_update(
            index_elements=[PhotoPriority.photo_id, PhotoPriority.user_id],
            set_={"priority": value, "updated_at": utcnow()},
        )
        await self._write(statement, f"save priority for photo {key}")

    async def delete_override(self, photo_id: str, user_id: str) -> None:
        """
        Delete the (photo, user) override; missing rows are not an error.

        Raises:
            OverrideStoreError: If the delete fails
        """
        key = canonical_photo_key(photo_id)
        statement = delete(PhotoPriority).where(
            PhotoPriority.photo_id == key,
            PhotoPriority.user_id == user_id,
        )
        await self._write(statement, f"clear priority for photo {key}")

    async def _write(self, statement, description: str) -> None:
        try:
            async with self.session_factory() as session:
                await session.execute(statement)
                await session.commit()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database error trying to {description}: {e}")
            raise OverrideStoreError(f"Failed to {description}: {str(e)}")
        logger.debug(f"Override store: {description}")
