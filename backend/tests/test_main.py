"""Tests for main API endpoints"""

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, Mock, patch

from src.api.health import VERSION


def test_root_endpoint(client: TestClient):
    """Test root endpoint returns expected response"""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Damage Photo Map API"
    assert data["status"] == "running"


def test_health_check(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["timestamp"].endswith("Z")


@pytest.mark.unit
def test_api_version(client: TestClient):
    """Test API version is returned"""
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["version"] == VERSION


def test_detailed_health_reports_degraded_services(client: TestClient):
    """Test unreachable dependencies are reported per service"""
    session = AsyncMock()
    session.execute.side_effect = OSError("Connection refused")
    session_factory = Mock()
    session_factory.return_value.__aenter__ = AsyncMock(return_value=session)
    session_factory.return_value.__aexit__ = AsyncMock(return_value=False)

    redis_client = AsyncMock()
    redis_client.ping.return_value = True

    with patch("src.api.health.AsyncSessionLocal", session_factory), \
            patch("src.api.health.RedisService.get_client", AsyncMock(return_value=redis_client)), \
            patch("src.api.health.S3Service") as mock_s3:
        mock_s3.return_value.check_bucket.return_value = None
        response = client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["services"]["database"].startswith("disconnected")
    assert data["services"]["redis"] == "connected"
    assert data["services"]["s3"] == "connected"
    assert data["version"] == VERSION


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus exposition includes photo store metrics"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "photo_loads_total" in response.text
