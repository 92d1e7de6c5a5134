"""Celery application and the periodic temp sweep task."""

from typing import Any, Dict, Optional

from celery import Celery

from statement_analyzer.config.settings import Settings
from statement_analyzer.storage.temp_store import DiskTempFileStore
from statement_analyzer.utils.logger import setup_logger

settings = Settings.from_env()

# Initialize Celery app
celery_app = Celery(
    "statement_analyzer",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    task_serializer=settings.celery_task_serializer,
    result_serializer=settings.celery_result_serializer,
    accept_content=settings.celery_accept_content,
    timezone=settings.celery_timezone,
)

celery_app.conf.update(
    task_routes={
        "cleanup_temp_files": {"queue": "maintenance"},
    },
    worker_prefetch_multiplier=1,
    task_acks_late=True,
)

logger = setup_logger(
    "celery_tasks",
    level=settings.get_log_level(),
    logs_dir=settings.logs_dir,
    log_format=settings.log_format,
)


def sweep_temp_directory(
    temp_dir: Optional[str] = None,
    max_age_seconds: Optional[int] = None
) -> Dict[str, Any]:
    """Delete expired session files from ``temp_dir``.

    Returns:
        Dictionary with ``success``, ``removed``, ``warnings`` and
        ``temp_directory``.
    """
    temp_dir = temp_dir or settings.temp_dir
    store = DiskTempFileStore(temp_dir, settings.session_max_age_seconds)
    report = store.sweep(max_age_seconds)

    logger.info(f"Cleaned up {len(report.removed)} temporary files in {temp_dir}")
    for warning in report.warnings:
        logger.warning(warning)

    return {
        "success": report.ok,
        "removed": report.removed,
        "warnings": report.warnings,
        "temp_directory": temp_dir,
    }


@celery_app.task(name="cleanup_temp_files")
def cleanup_temp_files(
    temp_dir: Optional[str] = None,
    max_age_seconds: Optional[int] = None
) -> Dict[str, Any]:
    """Periodic sweep of expired session files."""
    return sweep_temp_directory(temp_dir, max_age_seconds)


celery_app.conf.beat_schedule = {
    "cleanup-temp-files": {
        "task": "cleanup_temp_files",
        "schedule": float(settings.sweep_interval_seconds),
        "options": {"queue": "maintenance"},
    },
}
