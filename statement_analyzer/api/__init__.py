"""HTTP surface of the statement analyzer."""

from statement_analyzer.api.app import create_app
from statement_analyzer.api.processing_api import ProcessingAPI

__all__ = ["create_app", "ProcessingAPI"]
