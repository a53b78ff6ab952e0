"""Tests for the database-backed override store"""

import pytest
from unittest.mock import AsyncMock, MagicMock, Mock
from sqlalchemy.dialects import postgresql
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from src.schemas.photo import Priority
from src.services.errors import TransportError
from src.services.priority_store_service import OverrideStoreError, PriorityStoreService


@pytest.fixture
def session():
    return AsyncMock()


@pytest.fixture
def service(session):
    session_factory = MagicMock()
    session_factory.return_value.__aenter__.return_value = session
    return PriorityStoreService(session_factory=session_factory)


def compiled(statement):
    return str(statement.compile(dialect=postgresql.dialect()))


class TestListOverrides:
    """Test reading a user's overrides"""

    @pytest.mark.asyncio
    async def test_returns_canonical_keys(self, service, session):
        result = Mock()
        result.all.return_value = [("a", "high"), (" 42 ", "low")]
        session.execute.return_value = result

        overrides = await service.list_overrides("user-1")

        assert overrides == {"a": "high", "42": "low"}
        sql = compiled(session.execute.call_args.args[0])
        assert "photo_priorities.user_id = " in sql

    @pytest.mark.asyncio
    async def test_query_failure(self, service, session):
        session.execute.side_effect = SQLAlchemyError("connection reset")

        with pytest.raises(OverrideStoreError, match="connection reset"):
            await service.list_overrides("user-1")

    @pytest.mark.asyncio
    async def test_connection_failure(self, service, session):
        session.execute.side_effect = OSError("Connection refused")

        with pytest.raises(TransportError):
            await service.list_overrides("user-1")


class TestWrites:
    """Test upsert and delete"""

    @pytest.mark.asyncio
    async def test_upsert_on_photo_and_user(self, service, session):
        await service.upsert_override(42, "user-1", Priority.HIGH)

        statement = session.execute.call_args.args[0]
        sql = compiled(statement)
        assert "INSERT INTO photo_priorities" in sql
        assert "ON CONFLICT (photo_id, user_id) DO UPDATE" in sql
        params = statement.compile(dialect=postgresql.dialect()).params
        assert params["photo_id"] == "42"
        assert params["priority"] == "high"
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_scoped_to_user(self, service, session):
        await service.delete_override("a", "user-1")

        sql = compiled(session.execute.call_args.args[0])
        assert sql.startswith("DELETE FROM photo_priorities")
        assert "photo_priorities.photo_id = " in sql
        assert "photo_priorities.user_id = " in sql
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_write_failure(self, service, session):
        session.commit.side_effect = OperationalError("COMMIT", {}, Exception("server closed"))

        with pytest.raises(OverrideStoreError, match="save priority for photo a"):
            await service.upsert_override("a", "user-1", "low")

    @pytest.mark.asyncio
    async def test_invalid_priority_rejected_before_write(self, service, session):
        with pytest.raises(ValueError):
            await service.upsert_override("a", "user-1", "urgent")

        session.execute.assert_not_called()
