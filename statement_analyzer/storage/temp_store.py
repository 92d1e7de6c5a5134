"""Short-lived storage of uploaded PDF bytes keyed by session id."""

import os
import secrets
import string
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from statement_analyzer.config.settings import SESSION_MAX_AGE_SECONDS
from statement_analyzer.utils.logger import get_logger
from statement_analyzer.utils.validators import validate_session_id

SESSION_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits
SESSION_SUFFIX_LENGTH = 9
PDF_SUFFIX = ".pdf"


def generate_session_id() -> str:
    """Generate a session identifier.

    Returns:
        ``session_<epoch millis>_<9 base36 chars>``.
    """
    suffix = "".join(secrets.choice(SESSION_SUFFIX_ALPHABET) for _ in range(SESSION_SUFFIX_LENGTH))
    return f"session_{int(time.time() * 1000)}_{suffix}"


@dataclass
class CleanupReport:
    """Outcome of a delete or sweep.

    Cleanup never raises; failures end up in ``warnings``.
    """

    removed: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.warnings


class TempFileStore(ABC):
    """Storage contract for session PDFs.

    Each session id is written once, read once and then deleted, so no
    locking is done.
    """

    def __init__(
        self,
        max_age_seconds: int = SESSION_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.time
    ) -> None:
        self.max_age_seconds = max_age_seconds
        self.clock = clock
        self.logger = get_logger(__name__)

    @abstractmethod
    def save(self, session_id: str, data: bytes) -> None:
        """Persist ``data`` under ``session_id``."""

    @abstractmethod
    def load(self, session_id: str) -> Optional[bytes]:
        """Return the bytes stored under ``session_id`` or None."""

    @abstractmethod
    def delete(self, session_id: str) -> CleanupReport:
        """Remove ``session_id``; a missing entry is not an error."""

    @abstractmethod
    def sweep(self, max_age_seconds: Optional[int] = None) -> CleanupReport:
        """Remove every entry older than ``max_age_seconds``."""

    def exists(self, session_id: str) -> bool:
        return self.load(session_id) is not None

    def _max_age(self, max_age_seconds: Optional[int]) -> int:
        return self.max_age_seconds if max_age_seconds is None else max_age_seconds


class DiskTempFileStore(TempFileStore):
    """Stores each session as ``<temp_dir>/<session_id>.pdf``."""

    def __init__(
        self,
        temp_dir: str,
        max_age_seconds: int = SESSION_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.time
    ) -> None:
        super().__init__(max_age_seconds, clock)
        self.temp_dir = temp_dir

    def _path(self, session_id: str) -> str:
        validate_session_id(session_id)
        return os.path.join(self.temp_dir, f"{session_id}{PDF_SUFFIX}")

    def save(self, session_id: str, data: bytes) -> None:
        path = self._path(session_id)
        os.makedirs(self.temp_dir, exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        self.logger.info(f"File saved temporarily: {session_id}")

    def load(self, session_id: str) -> Optional[bytes]:
        path = self._path(session_id)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            self.logger.warning(f"File not found: {session_id}")
            return None

    def delete(self, session_id: str) -> CleanupReport:
        report = CleanupReport()
        path = self._path(session_id)
        try:
            os.remove(path)
            report.removed.append(session_id)
            self.logger.info(f"Temp file deleted: {session_id}")
        except FileNotFoundError:
            self.logger.debug(f"Temp file already gone: {session_id}")
        except OSError as e:
            message = f"Failed to delete temp file {session_id}: {e}"
            self.logger.warning(message)
            report.warnings.append(message)
        return report

    def sweep(self, max_age_seconds: Optional[int] = None) -> CleanupReport:
        report = CleanupReport()
        max_age = self._max_age(max_age_seconds)
        now = self.clock()

        try:
            entries = list(os.scandir(self.temp_dir))
        except FileNotFoundError:
            return report
        except OSError as e:
            message = f"Cleanup error: cannot list {self.temp_dir}: {e}"
            self.logger.warning(message)
            report.warnings.append(message)
            return report

        for entry in entries:
            try:
                if not entry.is_file():
                    continue
                age = now - entry.stat().st_mtime
                if age > max_age:
                    os.remove(entry.path)
                    report.removed.append(entry.name)
                    self.logger.info(f"Cleaned up old temp file: {entry.name}")
            except FileNotFoundError:
                continue
            except OSError as e:
                message = f"Cleanup error for {entry.name}: {e}"
                self.logger.warning(message)
                report.warnings.append(message)

        return report


class InMemoryTempFileStore(TempFileStore):
    """Keeps session PDFs in a dict; contents are lost on restart."""

    def __init__(
        self,
        max_age_seconds: int = SESSION_MAX_AGE_SECONDS,
        clock: Callable[[], float] = time.time
    ) -> None:
        super().__init__(max_age_seconds, clock)
        self._entries: Dict[str, Tuple[bytes, float]] = {}

    def save(self, session_id: str, data: bytes) -> None:
        validate_session_id(session_id)
        self._entries[session_id] = (bytes(data), self.clock())
        self.logger.info(f"File saved temporarily: {session_id}")

    def load(self, session_id: str) -> Optional[bytes]:
        validate_session_id(session_id)
        entry = self._entries.get(session_id)
        if entry is None:
            self.logger.warning(f"File not found: {session_id}")
            return None
        return entry[0]

    def delete(self, session_id: str) -> CleanupReport:
        validate_session_id(session_id)
        report = CleanupReport()
        if self._entries.pop(session_id, None) is not None:
            report.removed.append(session_id)
            self.logger.info(f"Temp file deleted: {session_id}")
        return report

    def sweep(self, max_age_seconds: Optional[int] = None) -> CleanupReport:
        report = CleanupReport()
        max_age = self._max_age(max_age_seconds)
        now = self.clock()

        for session_id, (_, created_at) in list(self._entries.items()):
            if now - created_at > max_age:
                del self._entries[session_id]
                report.removed.append(session_id)
                self.logger.info(f"Cleaned up old temp file: {session_id}")

        return report

    def __len__(self) -> int:
        return len(self._entries)
