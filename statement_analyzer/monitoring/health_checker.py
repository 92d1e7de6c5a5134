"""Health check module for the statement analysis service."""

import os
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional

import psutil

from statement_analyzer import __version__
from statement_analyzer.config.settings import Settings
from statement_analyzer.storage.temp_store import DiskTempFileStore, TempFileStore
from statement_analyzer.utils.logger import get_logger

DEGRADED_PERCENT = 80
UNHEALTHY_PERCENT = 90


def _usage_status(percent: float) -> str:
    if percent > UNHEALTHY_PERCENT:
        return 'unhealthy'
    if percent > DEGRADED_PERCENT:
        return 'degraded'
    return 'healthy'


def _existing_parent(path: str) -> str:
    path = os.path.abspath(path)
    while not os.path.exists(path):
        parent = os.path.dirname(path)
        if parent == path:
            break
        path = parent
    return path


class HealthChecker:
    """Health checker for the service and its temp storage."""

    def __init__(self, settings: Settings, store: Optional[TempFileStore] = None):
        """Initialize health checker with settings."""
        self.settings = settings
        self.store = store
        self.logger = get_logger(self.__class__.__name__)
        self.started_at = time.time()

        self.components: Dict[str, Callable[[], Dict[str, Any]]] = {
            'disk_space': self._check_disk_space,
            'memory': self._check_memory_usage,
            'temp_storage': self._check_temp_storage,
            'gemini': self._check_gemini_configuration,
        }

    def run_health_check(self) -> Dict[str, Any]:
        """Run all component checks.

        Returns:
            Dict with the overall ``status`` (healthy, degraded or
            unhealthy), per-component results and alert messages.
        """
        start_time = time.time()
        health_data: Dict[str, Any] = {
            'status': 'healthy',
            'timestamp': datetime.now().isoformat(),
            'uptime_seconds': int(time.time() - self.started_at),
            'version': __version__,
            'components': {},
            'alerts': [],
        }

        unhealthy = []
        degraded = []

        for component_name, check_func in self.components.items():
            try:
                result = check_func()
            except Exception as e:
                self.logger.error(f"Health check failed for {component_name}: {e}")
                result = {'status': 'error', 'message': str(e)}

            health_data['components'][component_name] = result

            if result['status'] == 'degraded':
                degraded.append(component_name)
            elif result['status'] != 'healthy':
                unhealthy.append(component_name)

            if result['status'] != 'healthy':
                health_data['alerts'].append(
                    f"Component {component_name}: {result.get('message', 'Unknown issue')}"
                )

        if unhealthy:
            health_data['status'] = 'unhealthy'
        elif degraded:
            health_data['status'] = 'degraded'

        health_data['check_duration'] = round(time.time() - start_time, 3)
        return health_data

    def is_healthy(self) -> bool:
        return self.run_health_check()['status'] == 'healthy'

    def _check_disk_space(self) -> Dict[str, Any]:
        """Check free space on the volume holding the temp directory."""
        disk_usage = psutil.disk_usage(_existing_parent(self.settings.temp_dir))
        used_percent = (disk_usage.used / disk_usage.total) * 100 if disk_usage.total else 0.0
        status = _usage_status(used_percent)

        return {
            'status': status,
            'message': f"Disk {used_percent:.1f}% used",
            'info': {
                'total_gb': round(disk_usage.total / (1024**3), 2),
                'free_gb': round(disk_usage.free / (1024**3), 2),
                'used_percent': round(used_percent, 2),
            },
        }

    def _check_memory_usage(self) -> Dict[str, Any]:
        """Check memory usage."""
        memory = psutil.virtual_memory()
        status = _usage_status(memory.percent)

        return {
            'status': status,
            'message': f"Memory {memory.percent:.1f}% used",
            'info': {
                'total_gb': round(memory.total / (1024**3), 2),
                'available_gb': round(memory.available / (1024**3), 2),
                'used_percent': round(memory.percent, 2),
            },
        }

    def _check_temp_storage(self) -> Dict[str, Any]:
        """Check that session PDFs can be written."""
        if self.store is not None and not isinstance(self.store, DiskTempFileStore):
            return {'status': 'healthy', 'message': 'In-memory storage', 'info': {'backend': 'memory'}}

        temp_dir = self.store.temp_dir if isinstance(self.store, DiskTempFileStore) else self.settings.temp_dir
        target = temp_dir if os.path.isdir(temp_dir) else _existing_parent(temp_dir)
        writable = os.access(target, os.W_OK)

        return {
            'status': 'healthy' if writable else 'unhealthy',
            'message': f"{temp_dir} {'is' if writable else 'is not'} writable",
            'info': {'backend': 'disk', 'path': temp_dir, 'exists': os.path.isdir(temp_dir), 'writable': writable},
        }

    def _check_gemini_configuration(self) -> Dict[str, Any]:
        """Check that an API key is configured; no request is made."""
        configured = self.settings.has_gemini_api_key()
        return {
            'status': 'healthy' if configured else 'unhealthy',
            'message': 'API key configured' if configured else 'Missing API key',
            'info': {'model': self.settings.gemini_model, 'configured': configured},
        }
