"""Pytest configuration and shared fixtures"""

from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from src.services.photo_store import PhotoStore
from fakes import FakeDocumentSource, InMemoryOverrideStore, StaticIdentity, StaticProfile


@pytest.fixture
def feature_collection():
    """GeoJSON export with a mix of upstream field spellings"""
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [-97.7431, 30.2672, 149.0]},
                "properties": {
                    "id": "tx-1",
                    "preview": "https://photos.example.com/tx-1.jpg",
                    "instant": "2024-06-01T10:00:00Z",
                    "caption": "Roof torn off",
                    "username": "alice",
                    "priority": "Critical",
                    "heading": 90,
                    "tags": ["roof", "wind"],
                },
            },
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [-95.3698, 29.7604]},
                "properties": {
                    "uuid": "tx-2",
                    "thumbnail": "https://photos.example.com/tx-2.jpg",
                    "timestamp": "2024-06-03T15:30:00Z",
                    "description": "Flooded street",
                    "author": "bob",
                    "priority": "moderate",
                    "tags": ["flood"],
                },
            },
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [-74.0060, 40.7128]},
                "properties": {
                    "signature": "ny-1",
                    "url": "https://photos.example.com/ny-1.jpg",
                    "created_at": "2024-06-05T08:15:00Z",
                    "title": "Downed tree on car",
                    "user": "alice",
                    "priority": "urgent",
                },
            },
        ],
    }


@pytest.fixture
def override_store():
    return InMemoryOverrideStore()


@pytest.fixture
def identity():
    return StaticIdentity("user-1")


@pytest.fixture
def make_store(override_store, identity):
    """Factory for a PhotoStore wired to in-memory collaborators"""

    def factory(document: Any = None, error: Optional[Exception] = None, location: Optional[str] = None):
        return PhotoStore(
            document_source=FakeDocumentSource(document, error),
            override_store=override_store,
            resolve_user_id=identity,
            resolve_jurisdiction_name=StaticProfile(location),
            debounce_seconds=0.05,
        )

    return factory


@pytest.fixture
def client():
    """Test client running the application lifespan"""
    from src.main import app

    with TestClient(app) as test_client:
        yield test_client
