"""Temporary storage for uploaded PDF statements."""

from statement_analyzer.storage.temp_store import (
    CleanupReport,
    DiskTempFileStore,
    InMemoryTempFileStore,
    TempFileStore,
    generate_session_id,
)

__all__ = [
    "CleanupReport",
    "DiskTempFileStore",
    "InMemoryTempFileStore",
    "TempFileStore",
    "generate_session_id",
]
