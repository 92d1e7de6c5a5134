"""Health reporting."""

from statement_analyzer.monitoring.health_checker import HealthChecker

__all__ = ["HealthChecker"]
