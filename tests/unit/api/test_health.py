"""Tests for health endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

from tests.fixtures.dummies import FailingRecordCache


class TestHealth:
    def test_liveness(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "user-service"}

    def test_ready(self, client):
        response = client.get("/health/ready")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ready"
        assert body["checks"]["database"]["status"] == "healthy"
        assert body["checks"]["cache"] == {"status": "healthy", "type": "in-memory"}

    def test_degraded_cache_is_still_ready(self, client, app_dependencies):
        app_dependencies.record_cache = FailingRecordCache()

        response = client.get("/health/ready")

        assert response.status_code == 200
        assert response.json()["checks"]["cache"]["status"] == "degraded"

    def test_database_down_is_not_ready(self, client, app_dependencies):
        with patch.object(app_dependencies.database_service, "health_check", return_value=False):
            response = client.get("/health/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "not_ready"
        assert body["checks"]["database"]["status"] == "unhealthy"


class TestDependencyHealth:
    def test_database(self, client):
        response = client.get("/health/database")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["type"] == "sqlite"
        assert "pool" in body

    def test_database_down(self, client, app_dependencies):
        with patch.object(app_dependencies.database_service, "health_check", return_value=False):
            response = client.get("/health/database")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    def test_cache_without_redis(self, client):
        response = client.get("/health/cache")

        assert response.status_code == 200
        assert response.json()["status"] == "disabled"
        assert response.json()["type"] == "in-memory"

    def test_cache_with_redis(self, client, app_dependencies):
        redis_service = MagicMock(is_enabled=True)
        redis_service.health_check = AsyncMock(return_value=True)
        redis_service.get_info = AsyncMock(return_value={"version": "7.2.4"})
        app_dependencies.redis_service = redis_service

        response = client.get("/health/cache")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["info"] == {"version": "7.2.4"}

    def test_unreachable_redis_is_degraded_not_failed(self, client, app_dependencies):
        redis_service = MagicMock(is_enabled=True)
        redis_service.health_check = AsyncMock(return_value=False)
        redis_service.get_info = AsyncMock(return_value=None)
        app_dependencies.redis_service = redis_service

        response = client.get("/health/cache")

        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert "info" not in response.json()
