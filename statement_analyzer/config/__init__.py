"""Configuration for the statement analysis service."""

from statement_analyzer.config.settings import Settings

__all__ = ["Settings"]
