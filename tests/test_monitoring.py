"""Tests for the health checker."""

from unittest.mock import Mock, patch

from statement_analyzer.config.settings import Settings
from statement_analyzer.monitoring.health_checker import HealthChecker
from statement_analyzer.storage.temp_store import DiskTempFileStore


def _memory(percent):
    return Mock(percent=percent, total=8 * 1024**3, available=2 * 1024**3)


class TestHealthChecker:
    """Test cases for HealthChecker class."""

    def test_healthy(self, sample_settings, memory_store):
        checker = HealthChecker(sample_settings, memory_store)

        with patch("psutil.virtual_memory", return_value=_memory(40.0)), \
                patch("psutil.disk_usage", return_value=Mock(total=100, used=50, free=50)):
            report = checker.run_health_check()

        assert report["status"] == "healthy"
        assert report["alerts"] == []

    def test_missing_api_key_is_unhealthy(self, temp_dir, memory_store):
        checker = HealthChecker(Settings(temp_dir=str(temp_dir)), memory_store)

        with patch("psutil.virtual_memory", return_value=_memory(40.0)), \
                patch("psutil.disk_usage", return_value=Mock(total=100, used=50, free=50)):
            report = checker.run_health_check()

        assert report["status"] == "unhealthy"
        assert report["components"]["gemini"]["message"] == "Missing API key"
        assert "Component gemini: Missing API key" in report["alerts"]

    def test_high_memory_is_degraded(self, sample_settings, memory_store):
        checker = HealthChecker(sample_settings, memory_store)

        with patch("psutil.virtual_memory", return_value=_memory(85.0)), \
                patch("psutil.disk_usage", return_value=Mock(total=100, used=50, free=50)):
            report = checker.run_health_check()

        assert report["status"] == "degraded"
        assert report["components"]["memory"]["status"] == "degraded"

    def test_disk_store_not_yet_created(self, sample_settings, temp_dir):
        store = DiskTempFileStore(str(temp_dir / "not" / "yet"))
        checker = HealthChecker(sample_settings, store)

        result = checker.run_health_check()["components"]["temp_storage"]

        assert result["status"] == "healthy"
        assert result["info"]["exists"] is False

    def test_component_failure_is_reported(self, sample_settings, memory_store):
        checker = HealthChecker(sample_settings, memory_store)

        with patch("psutil.virtual_memory", side_effect=RuntimeError("no /proc")), \
                patch("psutil.disk_usage", return_value=Mock(total=100, used=50, free=50)):
            report = checker.run_health_check()

        assert report["components"]["memory"]["status"] == "error"
        assert report["status"] == "unhealthy"
