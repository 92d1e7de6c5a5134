"""FastAPI application factory."""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from statement_analyzer import __version__
from statement_analyzer.analysis.client import GeminiAnalysisClient
from statement_analyzer.api.errors import register_exception_handlers
from statement_analyzer.api.middleware import RequestLoggingMiddleware
from statement_analyzer.api.processing_api import ProcessingAPI
from statement_analyzer.api.routes import root_router, router
from statement_analyzer.config.settings import Settings
from statement_analyzer.monitoring.health_checker import HealthChecker
from statement_analyzer.storage.temp_store import DiskTempFileStore, TempFileStore
from statement_analyzer.utils.logger import get_logger

logger = get_logger(__name__)


async def run_sweep_loop(api: ProcessingAPI, interval_seconds: int) -> None:
    """Sweep expired sessions every ``interval_seconds`` until cancelled."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await api.sweep_temp_files()
        except Exception as e:
            logger.error(f"Temp sweep failed: {str(e)}")


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[TempFileStore] = None,
    analysis_client: Optional[GeminiAnalysisClient] = None,
    http_transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings to use, read from the environment when omitted.
        store: Session store, a disk store under ``settings.temp_dir`` when omitted.
        analysis_client: Gemini client, built from ``settings`` when omitted.
        http_transport: Transport for remote PDF downloads.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or Settings.from_env()
    settings.require_valid()
    if store is None:
        store = DiskTempFileStore(settings.temp_dir, settings.session_max_age_seconds)

    processing_api = ProcessingAPI(
        settings,
        store,
        analysis_client=analysis_client,
        http_transport=http_transport,
    )
    health_checker = HealthChecker(settings, store)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweep_task = None
        if settings.sweep_in_process:
            logger.info(f"Starting temp sweep every {settings.sweep_interval_seconds}s")
            sweep_task = asyncio.create_task(
                run_sweep_loop(processing_api, settings.sweep_interval_seconds)
            )
        if not settings.has_gemini_api_key():
            logger.warning("GEMINI_API_KEY is not set; analysis requests will fail")

        yield

        if sweep_task is not None:
            sweep_task.cancel()
            try:
                await sweep_task
            except asyncio.CancelledError:
                pass

    app = FastAPI(
        title="Statement Analyzer",
        description="Bank and credit card statement analysis with Gemini",
        version=__version__,
        debug=settings.is_debug_enabled(),
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition", "X-Request-ID"],
    )

    register_exception_handlers(app)

    app.include_router(root_router)
    app.include_router(router)

    app.state.settings = settings
    app.state.processing_api = processing_api
    app.state.health_checker = health_checker

    return app
