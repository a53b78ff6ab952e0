"""Photo store orchestrating load, filtering and priority mutation"""

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional, Protocol

from src.config import settings
from src.monitoring.metrics import metrics_collector
from src.schemas.photo import (
    BoundingBox,
    FilterState,
    Jurisdiction,
    PhotoRecord,
    Priority,
    SelectedRegion,
)
from src.services.errors import PhotoStoreError
from src.services.filter_pipeline import derive_visible_set
from src.services.jurisdiction import national_jurisdiction, resolve_jurisdiction
from src.services.override_reconciler import (
    IdentityResolver,
    OverrideReconciler,
    OverrideStore,
    apply_overrides,
)
from src.services.record_normalizer import RecordNormalizer

logger = logging.getLogger(__name__)


class StoreState(str, Enum):
    """Photo store lifecycle state"""
    LOADING = "loading"
    READY = "ready"


class DocumentSource(Protocol):
    """Bulk source returning a FeatureCollection or a flat document list"""

    async def fetch_documents(self) -> Any: ...


ProfileResolver = Callable[[], Awaitable[Optional[str]]]


class ViewportDebouncer:
    """
    Cancellable delayed task for viewport updates.

    Each new viewport cancels the pending task, so at most one callback fires
    per quiet period.
    """

    def __init__(self, delay_seconds: float, callback: Callable[[Optional[BoundingBox]], None]):
        self.delay_seconds = delay_seconds
        self.callback = callback
        self._pending: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self, viewport: Optional[BoundingBox]) -> None:
        """Replace any pending viewport with this one; must run inside an event loop"""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._pending = loop.create_task(self._fire(viewport))

    def cancel(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        self._pending = None

    async def _fire(self, viewport: Optional[BoundingBox]) -> None:
        await asyncio.sleep(self.delay_seconds)
        if self._pending is asyncio.current_task():
            self._pending = None
        self.callback(viewport)


class PhotoStore:
    """
    Owns the canonical photo set and the derived visible set for one caller.

    The visible set is re-derived eagerly whenever the canonical set, filter
    state, selected region, viewport or jurisdiction changes.
    """

    def __init__(
        self,
        document_source: DocumentSource,
        override_store: OverrideStore,
        resolve_user_id: IdentityResolver,
        resolve_jurisdiction_name: Optional[ProfileResolver] = None,
        normalizer: Optional[RecordNormalizer] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self.document_source = document_source
        self.resolve_jurisdiction_name = resolve_jurisdiction_name
        self.normalizer = normalizer or RecordNormalizer()
        self.reconciler = OverrideReconciler(
            override_store, resolve_user_id, on_change=self._rederive
        )

        if debounce_seconds is None:
            debounce_seconds = settings.viewport_debounce_ms / 1000
        self._debouncer = ViewportDebouncer(debounce_seconds, self.set_viewport)
        self._load_lock = asyncio.Lock()
        # Loads and mutations exclude each other; mutations may overlap
        self._state_changed = asyncio.Condition()
        self._swapping = False
        self._active_mutations = 0

        self.state = StoreState.LOADING
        self.last_error: Optional[str] = None
        self._records: Dict[str, PhotoRecord] = {}
        self._visible: List[PhotoRecord] = []
        self._filter_state = FilterState()
        self._selected_region: Optional[SelectedRegion] = None
        self._viewport: Optional[BoundingBox] = None
        self._jurisdiction: Jurisdiction = national_jurisdiction()

    # Read side

    @property
    def is_loading(self) -> bool:
        return self.state == StoreState.LOADING

    @property
    def visible_photos(self) -> List[PhotoRecord]:
        return list(self._visible)

    @property
    def all_photos(self) -> List[PhotoRecord]:
        return list(self._records.values())

    @property
    def filter_state(self) -> FilterState:
        return self._filter_state

    @property
    def selected_region(self) -> Optional[SelectedRegion]:
        return self._selected_region

    @property
    def viewport(self) -> Optional[BoundingBox]:
        return self._viewport

    @property
    def jurisdiction(self) -> Jurisdiction:
        return self._jurisdiction

    @property
    def submitters(self) -> List[str]:
        """Distinct non-empty submitters of the canonical set"""
        return sorted({photo.submitter for photo in self._records.values() if photo.submitter})

    def get_photo(self, photo_id: str) -> Optional[PhotoRecord]:
        return self._records.get(photo_id)

    # Loading

    async def load(self) -> bool:
        """
        Fetch, normalize and reconcile a fresh snapshot.

        Calling it again discards the previous snapshot. On a format or
        transport failure the previous snapshot (or an empty one) is kept,
        the diagnostic is stored in last_error and False is returned.

        In-flight priority mutations finish before overrides are read, and
        mutations issued during the load apply to the new snapshot.

        Returns:
            True if a new snapshot was installed
        """
        async with self._load_lock:
            self.state = StoreState.LOADING
            try:
                await self._begin_swap()
                try:
                    document = await self.document_source.fetch_documents()
                    records = self.normalizer.normalize(document)
                except PhotoStoreError as e:
                    logger.error(f"Error loading photos, keeping previous snapshot: {e}")
                    self.last_error = str(e)
                    metrics_collector.record_load("failed")
                    return False

                overrides = await self.reconciler.load_overrides()
                records = apply_overrides(records, overrides)
                self._jurisdiction = await self._load_jurisdiction()

                self._records = {record.id: record for record in records}
                self.last_error = None
                metrics_collector.record_load("success", len(records))
                logger.info(
                    f"Loaded {len(records)} photos with {len(overrides)} priority overrides"
                )
                return True
            finally:
                self.state = StoreState.READY
                self._rederive()
                await self._end_swap()

    async def reload(self) -> bool:
        """Explicit reload; same semantics as load"""
        return await self.load()

    async def _load_jurisdiction(self) -> Jurisdiction:
        if self.resolve_jurisdiction_name is None:
            return self._jurisdiction
        try:
            name = await self.resolve_jurisdiction_name()
        except Exception as e:
            logger.warning(f"Could not resolve caller jurisdiction, keeping {self._jurisdiction.name}: {e}")
            return self._jurisdiction
        return resolve_jurisdiction(name)

    # Filter inputs

    def update_filters(self, **changes: Any) -> FilterState:
        """
        Merge a partial filter update; a None value clears that field.

        Raises:
            ValueError: If a key is not a filter field
        """
        unknown = set(changes) - set(FilterState.model_fields)
        if unknown:
            raise ValueError(f"Unknown filter fields: {sorted(unknown)}")
        merged = {**self._filter_state.model_dump(), **changes}
        self._filter_state = FilterState.model_validate(merged)
        self._rederive()
        return self._filter_state

    def clear_filters(self) -> None:
        """Reset all filters and the selected region"""
        self._filter_state = FilterState()
        self._selected_region = None
        self._rederive()

    def set_selected_region(self, region: Optional[SelectedRegion]) -> None:
        self._selected_region = region
        self._rederive()

    def set_viewport(self, viewport: Optional[BoundingBox]) -> None:
        """Apply a viewport immediately"""
        self._viewport = viewport
        self._rederive()

    def schedule_viewport(self, viewport: Optional[BoundingBox]) -> None:
        """Apply a viewport after the debounce window, superseding any pending one"""
        self._debouncer.schedule(viewport)

    # Mutation

    async def set_priority(self, photo_id: str, priority: Priority) -> PhotoRecord:
        """Optimistically set a priority; reverted and re-raised on failure"""
        try:
            async with self._mutation_slot():
                record = await self.reconciler.set_priority(self._records, photo_id, priority)
        except Exception:
            metrics_collector.record_mutation("set", "failed")
            raise
        metrics_collector.record_mutation("set", "success")
        return record

    async def clear_priority(self, photo_id: str) -> PhotoRecord:
        """Optimistically clear a priority; reverted and re-raised on failure"""
        try:
            async with self._mutation_slot():
                record = await self.reconciler.clear_priority(self._records, photo_id)
        except Exception:
            metrics_collector.record_mutation("clear", "failed")
            raise
        metrics_collector.record_mutation("clear", "success")
        return record

    def bind_identity(self, resolve_user_id: IdentityResolver) -> None:
        """Swap the identity resolver used by subsequent loads and mutations"""
        self.reconciler.resolve_user_id = resolve_user_id

    def close(self) -> None:
        """Cancel any pending debounced viewport update"""
        self._debouncer.cancel()

    def _rederive(self) -> None:
        start_time = time.perf_counter()
        self._visible = derive_visible_set(
            list(self._records.values()),
            self._filter_state,
            self._selected_region,
            self._viewport,
            self._jurisdiction,
        )
        metrics_collector.record_derivation(time.perf_counter() - start_time, len(self._visible))

    # Load/mutation exclusion

    async def _begin_swap(self) -> None:
        """Block new mutations and wait for in-flight ones to commit or revert"""
        async with self._state_changed:
            self._swapping = True
            await self._state_changed.wait_for(lambda: self._active_mutations == 0)

    async def _end_swap(self) -> None:
        async with self._state_changed:
            self._swapping = False
            self._state_changed.notify_all()

    @asynccontextmanager
    async def _mutation_slot(self) -> AsyncIterator[None]:
        """Hold off snapshot swaps for the duration of one mutation"""
        async with self._state_changed:
            await self._state_changed.wait_for(lambda: not self._swapping)
            self._active_mutations += 1
        try:
            yield
        finally:
            async with self._state_changed:
                self._active_mutations -= 1
                self._state_changed.notify_all()
