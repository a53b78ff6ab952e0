"""Process-local registry of per-user photo stores"""

import asyncio
import logging
from typing import Callable, Dict, Optional, Set

from src.services.document_source import get_document_source
from src.services.identity import CallerProfileResolver, TokenIdentityResolver
from src.services.photo_store import PhotoStore
from src.services.priority_store_service import PriorityStoreService

logger = logging.getLogger(__name__)

StoreFactory = Callable[[str, Optional[str]], PhotoStore]


def build_photo_store(user_id: str, token: Optional[str]) -> PhotoStore:
    """Wire a photo store to the configured collaborators"""
    return PhotoStore(
        document_source=get_document_source(),
        override_store=PriorityStoreService(),
        resolve_user_id=TokenIdentityResolver(token),
        resolve_jurisdiction_name=CallerProfileResolver(user_id),
    )


class PhotoStoreRegistry:
    """
    Holds one loaded PhotoStore per acting user for the process lifetime.

    The first request for a user builds and loads the store. The registry
    lock only guards the lookup tables; each user's initial load runs under
    that user's own lock, so one slow export fetch never delays other users.
    """

    def __init__(self, factory: Optional[StoreFactory] = None):
        self.factory = factory or build_photo_store
        self._stores: Dict[str, PhotoStore] = {}
        self._user_locks: Dict[str, asyncio.Lock] = {}
        self._loaded: Set[str] = set()
        self._lock = asyncio.Lock()

    async def get(self, user_id: str, token: Optional[str]) -> PhotoStore:
        """
        Get the caller's store, creating and loading it on first use.

        Args:
            user_id: Acting user id
            token: Bearer token used for identity resolution on mutations

        Returns:
            Loaded PhotoStore
        """
        async with self._lock:
            store = self._stores.get(user_id)
            created = store is None
            if created:
                logger.info(f"Creating photo store for user {user_id}")
                store = self.factory(user_id, token)
                self._stores[user_id] = store
                self._user_locks[user_id] = asyncio.Lock()
            user_lock = self._user_locks[user_id]

        if not created:
            store.bind_identity(TokenIdentityResolver(token))

        async with user_lock:
            if user_id not in self._loaded:
                await store.load()
                self._loaded.add(user_id)
        return store

    def close(self) -> None:
        """Cancel pending work in every store and forget them"""
        for store in self._stores.values():
            store.close()
        self._stores.clear()
        self._user_locks.clear()
        self._loaded.clear()
