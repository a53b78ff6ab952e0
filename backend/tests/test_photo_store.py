"""Tests for the photo store"""

import asyncio
import pytest

from src.schemas.photo import BoundingBox, Priority, SelectedRegion
from src.services.errors import TransportError
from src.services.photo_store import PhotoStore, StoreState, ViewportDebouncer
from fakes import FakeDocumentSource, InMemoryOverrideStore, StaticIdentity, StaticProfile


def ids(photos):
    return [p.id for p in photos]


TEXAS_VIEWPORT = BoundingBox(north=31, south=29, east=-95, west=-98)
NEW_YORK_VIEWPORT = BoundingBox(north=41, south=40, east=-73, west=-75)


class TestLoad:
    """Test snapshot loading"""

    @pytest.mark.asyncio
    async def test_starts_loading_then_ready(self, make_store, feature_collection):
        store = make_store(feature_collection)
        assert store.is_loading
        assert store.visible_photos == []

        assert await store.load() is True

        assert store.state == StoreState.READY
        assert not store.is_loading
        assert ids(store.visible_photos) == ["tx-1", "tx-2", "ny-1"]
        assert store.last_error is None

    @pytest.mark.asyncio
    async def test_overrides_applied(self, make_store, feature_collection, override_store):
        override_store.rows = {("tx-1", "user-1"): "low", ("ny-1", "user-2"): "high"}
        store = make_store(feature_collection)

        await store.load()

        assert store.get_photo("tx-1").priority == Priority.LOW
        assert store.get_photo("tx-2").priority == Priority.MEDIUM
        assert store.get_photo("ny-1").priority is None

    @pytest.mark.asyncio
    async def test_override_read_failure_is_not_fatal(self, make_store, feature_collection, override_store):
        override_store.rows = {("tx-1", "user-1"): "low"}
        override_store.fail_reads = True
        store = make_store(feature_collection)

        assert await store.load() is True

        assert store.get_photo("tx-1").priority == Priority.HIGH

    @pytest.mark.asyncio
    async def test_missing_identity_loads_without_overrides(self, make_store, feature_collection, identity):
        identity.user_id = None
        store = make_store(feature_collection)

        assert await store.load() is True
        assert len(store.all_photos) == 3

    @pytest.mark.asyncio
    async def test_transport_failure_is_fail_soft(self, make_store):
        store = make_store(error=TransportError("export bucket unreachable"))

        assert await store.load() is False

        assert not store.is_loading
        assert store.all_photos == []
        assert store.visible_photos == []
        assert store.last_error == "export bucket unreachable"

    @pytest.mark.asyncio
    async def test_format_failure_is_fail_soft(self, make_store):
        store = make_store({"type": "Feature"})

        assert await store.load() is False
        assert "Unexpected data format" in store.last_error

    @pytest.mark.asyncio
    async def test_failed_reload_keeps_previous_snapshot(self, make_store, feature_collection):
        store = make_store(feature_collection)
        await store.load()

        store.document_source.error = TransportError("timeout")
        assert await store.reload() is False

        assert len(store.all_photos) == 3
        assert store.last_error == "timeout"

    @pytest.mark.asyncio
    async def test_reload_replaces_snapshot(self, make_store, feature_collection):
        store = make_store(feature_collection)
        await store.load()

        store.document_source.document = [{"id": "fresh"}]
        assert await store.reload() is True

        assert ids(store.all_photos) == ["fresh"]
        assert store.document_source.calls == 2

    @pytest.mark.asyncio
    async def test_concurrent_loads_serialized(self, feature_collection):
        active = []
        overlaps = []

        class SlowSource(FakeDocumentSource):
            async def fetch_documents(self):
                if active:
                    overlaps.append(True)
                active.append(True)
                await asyncio.sleep(0.01)
                active.pop()
                return await super().fetch_documents()

        store = PhotoStore(SlowSource(feature_collection), InMemoryOverrideStore(), StaticIdentity())

        await asyncio.gather(store.load(), store.load())

        assert overlaps == []
        assert store.document_source.calls == 2


class TestJurisdiction:
    """Test caller jurisdiction masking"""

    @pytest.mark.asyncio
    async def test_state_jurisdiction(self, make_store, feature_collection):
        store = make_store(feature_collection, location="Texas")

        await store.load()

        assert store.jurisdiction.name == "Texas"
        assert ids(store.visible_photos) == ["tx-1", "tx-2"]
        assert len(store.all_photos) == 3

    @pytest.mark.asyncio
    async def test_no_profile_is_unrestricted(self, make_store, feature_collection):
        store = make_store(feature_collection)

        await store.load()

        assert store.jurisdiction.is_unrestricted

    @pytest.mark.asyncio
    async def test_profile_failure_keeps_current(self, feature_collection):
        store = PhotoStore(
            FakeDocumentSource(feature_collection),
            InMemoryOverrideStore(),
            StaticIdentity(),
            resolve_jurisdiction_name=StaticProfile(error=TransportError("profiles down")),
        )

        assert await store.load() is True

        assert store.jurisdiction.is_unrestricted
        assert len(store.visible_photos) == 3

    @pytest.mark.asyncio
    async def test_reload_picks_up_changed_location(self, feature_collection):
        profile = StaticProfile("Texas")
        store = PhotoStore(
            FakeDocumentSource(feature_collection),
            InMemoryOverrideStore(),
            StaticIdentity(),
            resolve_jurisdiction_name=profile,
        )
        await store.load()
        assert ids(store.visible_photos) == ["tx-1", "tx-2"]

        profile.location = "New York"
        await store.reload()

        assert store.jurisdiction.name == "New York"
        assert ids(store.visible_photos) == ["ny-1"]


class TestFilters:
    """Test filter inputs and re-derivation"""

    @pytest.mark.asyncio
    async def test_update_filters_merges(self, make_store, feature_collection):
        store = make_store(feature_collection)
        await store.load()

        store.update_filters(submitter="alice")
        assert ids(store.visible_photos) == ["tx-1", "ny-1"]

        store.update_filters(priority=Priority.HIGH)
        assert ids(store.visible_photos) == ["tx-1"]
        assert store.filter_state.active_count() == 2

        store.update_filters(submitter=None)
        assert store.filter_state.submitter is None
        assert store.filter_state.priority == Priority.HIGH

    @pytest.mark.asyncio
    async def test_unknown_filter_rejected(self, make_store, feature_collection):
        store = make_store(feature_collection)
        await store.load()

        with pytest.raises(ValueError, match="Unknown filter fields"):
            store.update_filters(colour="red")

    @pytest.mark.asyncio
    async def test_clear_filters_resets_region(self, make_store, feature_collection):
        store = make_store(feature_collection)
        await store.load()
        store.update_filters(search_text="flood")
        store.set_selected_region(SelectedRegion(type="rectangle", bounds=TEXAS_VIEWPORT))
        assert ids(store.visible_photos) == ["tx-2"]

        store.clear_filters()

        assert store.selected_region is None
        assert store.filter_state.active_count() == 0
        assert len(store.visible_photos) == 3

    @pytest.mark.asyncio
    async def test_submitters(self, make_store, feature_collection):
        store = make_store(feature_collection)
        await store.load()

        assert store.submitters == ["alice", "bob"]


class TestViewport:
    """Test debounced viewport updates"""

    @pytest.mark.asyncio
    async def test_only_last_viewport_applied(self, make_store, feature_collection):
        store = make_store(feature_collection)
        await store.load()

        store.schedule_viewport(TEXAS_VIEWPORT)
        store.schedule_viewport(NEW_YORK_VIEWPORT)
        assert store.viewport is None

        await asyncio.sleep(0.1)

        assert store.viewport == NEW_YORK_VIEWPORT
        assert ids(store.visible_photos) == ["ny-1"]

    @pytest.mark.asyncio
    async def test_close_cancels_pending(self, make_store, feature_collection):
        store = make_store(feature_collection)
        await store.load()

        store.schedule_viewport(TEXAS_VIEWPORT)
        store.close()
        await asyncio.sleep(0.1)

        assert store.viewport is None

    @pytest.mark.asyncio
    async def test_debouncer_pending_flag(self):
        fired = []
        debouncer = ViewportDebouncer(0.01, fired.append)

        debouncer.schedule(TEXAS_VIEWPORT)
        assert debouncer.pending

        await asyncio.sleep(0.05)

        assert not debouncer.pending
        assert fired == [TEXAS_VIEWPORT]


class TestPriorityMutation:
    """Test priority mutation through the store"""

    @pytest.mark.asyncio
    async def test_set_priority_rederives(self, make_store, feature_collection, override_store):
        store = make_store(feature_collection)
        await store.load()
        store.update_filters(priority=Priority.HIGH)
        assert ids(store.visible_photos) == ["tx-1"]

        await store.set_priority("tx-2", Priority.HIGH)

        assert ids(store.visible_photos) == ["tx-1", "tx-2"]
        assert override_store.rows == {("tx-2", "user-1"): "high"}

    @pytest.mark.asyncio
    async def test_failed_mutation_reverts_visible_set(self, make_store, feature_collection, override_store):
        store = make_store(feature_collection)
        await store.load()
        store.update_filters(priority=Priority.HIGH)
        override_store.fail_writes = True

        with pytest.raises(TransportError):
            await store.set_priority("tx-2", Priority.HIGH)

        assert ids(store.visible_photos) == ["tx-1"]
        assert store.get_photo("tx-2").priority == Priority.MEDIUM

    @pytest.mark.asyncio
    async def test_clear_priority(self, make_store, feature_collection, override_store):
        override_store.rows = {("tx-1", "user-1"): "low"}
        store = make_store(feature_collection)
        await store.load()

        record = await store.clear_priority("tx-1")

        assert record.priority is None
        assert override_store.rows == {}

    @pytest.mark.asyncio
    async def test_bind_identity_switches_writer(self, make_store, feature_collection, override_store):
        store = make_store(feature_collection)
        await store.load()

        store.bind_identity(StaticIdentity("user-9"))
        await store.set_priority("ny-1", Priority.LOW)

        assert override_store.rows == {("ny-1", "user-9"): "low"}


class TestLoadDuringMutation:
    """Test reloads interleaved with priority mutations"""

    @pytest.mark.asyncio
    async def test_reload_waits_for_in_flight_mutation(self, make_store, feature_collection, override_store):
        store = make_store(feature_collection)
        await store.load()
        released = asyncio.Event()
        persist = override_store.upsert_override

        async def blocked_upsert(*args):
            await released.wait()
            await persist(*args)

        override_store.upsert_override = blocked_upsert
        mutation = asyncio.create_task(store.set_priority("tx-1", Priority.LOW))
        await asyncio.sleep(0.01)
        reload = asyncio.create_task(store.reload())
        await asyncio.sleep(0.01)

        assert store.document_source.calls == 1
        assert not reload.done()

        released.set()
        await asyncio.gather(mutation, reload)

        assert store.document_source.calls == 2
        assert store.get_photo("tx-1").priority == Priority.LOW
        assert override_store.rows == {("tx-1", "user-1"): "low"}

    @pytest.mark.asyncio
    async def test_mutation_during_load_applies_to_new_snapshot(self, feature_collection, override_store):
        released = asyncio.Event()

        class SlowSource(FakeDocumentSource):
            async def fetch_documents(self):
                if self.calls:
                    await released.wait()
                return await super().fetch_documents()

        store = PhotoStore(SlowSource(feature_collection), override_store, StaticIdentity(), debounce_seconds=0.01)
        await store.load()

        reload = asyncio.create_task(store.reload())
        await asyncio.sleep(0.01)
        mutation = asyncio.create_task(store.set_priority("tx-2", Priority.LOW))
        await asyncio.sleep(0.01)

        assert not mutation.done()
        assert override_store.writes == []

        released.set()
        await asyncio.gather(reload, mutation)

        assert not store.is_loading
        assert store.get_photo("tx-2").priority == Priority.LOW
        assert override_store.rows == {("tx-2", "user-1"): "low"}

    @pytest.mark.asyncio
    async def test_reverted_mutation_does_not_block_reload(self, make_store, feature_collection, override_store):
        store = make_store(feature_collection)
        await store.load()
        override_store.fail_writes = True

        with pytest.raises(TransportError):
            await store.set_priority("tx-2", Priority.HIGH)

        assert await asyncio.wait_for(store.reload(), timeout=1) is True
        assert store.get_photo("tx-2").priority == Priority.MEDIUM
