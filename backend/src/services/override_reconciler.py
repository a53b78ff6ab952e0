"""Merging of per-user priority overrides onto normalized photo records"""

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Set

from src.schemas.photo import PhotoRecord, Priority
from src.services.errors import AuthError, MutationInProgressError, PhotoNotFoundError

logger = logging.getLogger(__name__)


def canonical_photo_key(photo_id: Any) -> str:
    """
    Single textual form of a photo id, used for both override writes and lookups.

    Numeric ids persisted as text ("42") and ids held as numbers (42) resolve
    to the same key.
    """
    if isinstance(photo_id, float) and photo_id.is_integer():
        photo_id = int(photo_id)
    return str(photo_id).strip()


def coerce_priority(value: Any) -> Optional[Priority]:
    """Accept only the three enumerated priorities"""
    if isinstance(value, Priority):
        return value
    try:
        return Priority(value)
    except ValueError:
        return None


def apply_overrides(
    records: Iterable[PhotoRecord], overrides: Mapping[Any, Any]
) -> List[PhotoRecord]:
    """
    Overwrite record priorities with persisted overrides.

    Overrides win unconditionally; values outside the priority enum are
    ignored. Input records are not modified, and applying the same overrides
    again yields the same result.

    Args:
        records: Normalized photo records
        overrides: Mapping of photo id to priority

    Returns:
        New list of records in input order
    """
    keyed: Dict[str, Priority] = {}
    for photo_id, value in overrides.items():
        priority = coerce_priority(value)
        if priority is None:
            logger.warning(f"Ignoring invalid priority override {value!r} for photo {photo_id}")
            continue
        keyed[canonical_photo_key(photo_id)] = priority

    merged = []
    applied = 0
    for record in records:
        priority = keyed.get(canonical_photo_key(record.id))
        if priority is not None:
            record = record.model_copy(update={"priority": priority})
            applied += 1
        merged.append(record)

    logger.debug(f"Applied {applied} priority overrides to {len(merged)} records")
    return merged


class OverrideStore(Protocol):
    """Keyed record store holding one priority row per (photo id, user id)"""

    async def list_overrides(self, user_id: str) -> Dict[str, str]: ...

    async def upsert_override(self, photo_id: str, user_id: str, priority: Priority) -> None: ...

    async def delete_override(self, photo_id: str, user_id: str) -> None: ...


IdentityResolver = Callable[[], Awaitable[str]]


class OverrideReconciler:
    """
    Owns the optimistic read/write/rollback protocol for priority mutation.

    Each mutation is a three-phase transaction against the caller's record
    set: snapshot the current priority, apply the new value speculatively,
    then commit it to the override store or revert to the snapshot.
    """

    def __init__(
        self,
        override_store: OverrideStore,
        resolve_user_id: IdentityResolver,
        on_change: Optional[Callable[[], None]] = None,
    ):
        self.override_store = override_store
        self.resolve_user_id = resolve_user_id
        self.on_change = on_change
        self._in_flight: Set[str] = set()

    async def load_overrides(self, user_id: Optional[str] = None) -> Dict[str, str]:
        """
        Read overrides for the acting user.

        Identity or store failures are not fatal here; callers get an empty
        mapping and the load proceeds without overrides.
        """
        try:
            if user_id is None:
                user_id = await self.resolve_user_id()
            return await self.override_store.list_overrides(user_id)
        except Exception as e:
            logger.warning(f"Continuing without priority overrides: {e}")
            return {}

    async def set_priority(
        self, records: Dict[str, PhotoRecord], photo_id: Any, priority: Priority
    ) -> PhotoRecord:
        """
        Set a photo priority, persisting it as an upsert keyed on (photo, user).

        Args:
            records: Mutable id -> record mapping owned by the photo store
            photo_id: Photo id
            priority: New priority

        Returns:
            The committed record

        Raises:
            PhotoNotFoundError: If the photo is not in the record set
            MutationInProgressError: If the photo already has a mutation in flight
            AuthError: If the acting user cannot be resolved (state reverted)
            TransportError: If the override store write fails (state reverted)
        """
        priority = Priority(priority)

        async def persist(key: str, user_id: str) -> None:
            await self.override_store.upsert_override(key, user_id, priority)

        return await self._mutate(records, photo_id, priority, persist, "set")

    async def clear_priority(self, records: Dict[str, PhotoRecord], photo_id: Any) -> PhotoRecord:
        """
        Clear a photo priority, deleting the (photo, user) override row.

        Raises the same errors as set_priority, with the same rollback.
        """

        async def persist(key: str, user_id: str) -> None:
            await self.override_store.delete_override(key, user_id)

        return await self._mutate(records, photo_id, None, persist, "clear")

    async def _mutate(
        self,
        records: Dict[str, PhotoRecord],
        photo_id: Any,
        priority: Optional[Priority],
        persist: Callable[[str, str], Awaitable[None]],
        operation: str,
    ) -> PhotoRecord:
        key = canonical_photo_key(photo_id)
        if key not in records:
            raise PhotoNotFoundError(key)
        if key in self._in_flight:
            raise MutationInProgressError(key)

        self._in_flight.add(key)
        try:
            # Snapshot, then apply speculatively
            original = records[key]
            speculative = original.model_copy(update={"priority": priority})
            records[key] = speculative
            self._notify()

            try:
                user_id = await self.resolve_user_id()
            except AuthError:
                self._revert(records, key, original, operation)
                raise
            except Exception as e:
                self._revert(records, key, original, operation)
                raise AuthError(f"User not authenticated: {e}") from e

            try:
                await persist(key, user_id)
            except Exception:
                self._revert(records, key, original, operation)
                raise

            logger.info(f"Priority {operation} for photo {key} by user {user_id}: {priority}")
            return speculative
        finally:
            self._in_flight.discard(key)

    def _revert(
        self, records: Dict[str, PhotoRecord], key: str, original: PhotoRecord, operation: str
    ) -> None:
        records[key] = original
        logger.warning(
            f"Reverted priority {operation} for photo {key} to {original.priority}"
        )
        self._notify()

    def _notify(self) -> None:
        if self.on_change is not None:
            self.on_change()
