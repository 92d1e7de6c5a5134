"""Request workflows behind the HTTP endpoints."""

import asyncio
import functools
from typing import Any, Callable, Dict, Optional, Tuple

import httpx

from statement_analyzer.analysis.client import GeminiAnalysisClient, is_fallback_analysis
from statement_analyzer.analysis.document import DocumentType
from statement_analyzer.analysis.prompts import build_prompt
from statement_analyzer.config.settings import Settings
from statement_analyzer.excel_generator.converter import ReportRenderer, generate_report_filename
from statement_analyzer.pdf_processor.decryptor import PDFGatekeeper
from statement_analyzer.pdf_processor.extractor import PDFTextExtractor
from statement_analyzer.storage.temp_store import CleanupReport, TempFileStore, generate_session_id
from statement_analyzer.utils.exceptions import PDFDownloadError, SessionNotFoundError, ValidationError
from statement_analyzer.utils.logger import get_logger
from statement_analyzer.utils.validators import (
    validate_analysis_text,
    validate_password,
    validate_pdf_bytes,
    validate_pdf_url,
    validate_session_id,
)

UNLOCKED_SUFFIX = "_unlocked"


class ProcessingAPI:
    """Runs the check, unlock, process, analyze and report workflows.

    Blocking work (PDF parsing, disk I/O, the Gemini SDK, openpyxl) is
    run on the event loop's default executor; the steps of one request run
    one after another.
    """

    def __init__(
        self,
        settings: Settings,
        store: TempFileStore,
        analysis_client: Optional[GeminiAnalysisClient] = None,
        gatekeeper: Optional[PDFGatekeeper] = None,
        extractor: Optional[PDFTextExtractor] = None,
        renderer: Optional[ReportRenderer] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """Initialize the processing API."""
        self.settings = settings
        self.store = store
        self.logger = get_logger(self.__class__.__name__)

        self.analysis_client = analysis_client or GeminiAnalysisClient(settings)
        self.gatekeeper = gatekeeper or PDFGatekeeper()
        self.extractor = extractor or PDFTextExtractor()
        self.renderer = renderer or ReportRenderer(settings)
        self.http_transport = http_transport

    async def _run_blocking(self, func: Callable[..., Any], *args: Any) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, functools.partial(func, *args))

    async def _load_session(self, session_id: Optional[str]) -> Tuple[str, bytes]:
        session_id = validate_session_id(session_id)
        data = await self._run_blocking(self.store.load, session_id)
        if data is None:
            raise SessionNotFoundError(session_id)
        return session_id, data

    async def check_pdf(
        self,
        data: bytes,
        file_name: Optional[str] = None,
        file_size: Optional[int] = None
    ) -> Dict[str, Any]:
        """Store an uploaded PDF and report whether it needs a password.

        Returns:
            Response payload with ``status``, ``passwordRequired``,
            ``message``, ``fileName``, ``fileSize`` and ``sessionId``.
        """
        validate_pdf_bytes(data, self.settings.max_upload_size_mb)

        check = await self._run_blocking(self.gatekeeper.check_password, data)
        session_id = generate_session_id()
        await self._run_blocking(self.store.save, session_id, data)

        if check.needs_password:
            self.logger.info(f"Session {session_id}: PDF is password protected")
            return {
                'status': 'password_required',
                'passwordRequired': True,
                'message': 'This PDF is password protected. Please enter the password.',
                'fileName': file_name,
                'fileSize': file_size if file_size is not None else len(data),
                'sessionId': session_id,
            }

        self.logger.info(f"Session {session_id}: no password required ({check.page_count} pages)")
        return {
            'status': 'success',
            'passwordRequired': False,
            'message': 'No password required. Click to continue.',
            'fileName': file_name,
            'fileSize': file_size if file_size is not None else len(data),
            'sessionId': session_id,
        }

    async def download_pdf(self, url: Optional[str]) -> bytes:
        """Download a remote PDF, enforcing the upload size limit.

        Raises:
            ValidationError: If the URL is invalid or the file too large.
            PDFDownloadError: If the download fails.
        """
        url = validate_pdf_url(url)
        limit = self.settings.get_max_upload_size_bytes()
        self.logger.info("Downloading PDF from remote URL")

        try:
            async with httpx.AsyncClient(
                timeout=self.settings.download_timeout_seconds,
                follow_redirects=True,
                transport=self.http_transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    if response.status_code >= 400:
                        raise PDFDownloadError(
                            f"Failed to download PDF: HTTP {response.status_code}"
                        )

                    chunks = []
                    total = 0
                    async for chunk in response.aiter_bytes():
                        total += len(chunk)
                        if total > limit:
                            raise ValidationError(
                                f"File exceeds maximum allowed size {self.settings.max_upload_size_mb}MB"
                            )
                        chunks.append(chunk)

        except httpx.HTTPError as e:
            raise PDFDownloadError(f"Failed to download PDF: {str(e)}")

        return b"".join(chunks)

    async def check_pdf_url(
        self,
        url: Optional[str],
        file_name: Optional[str] = None,
        file_size: Optional[int] = None
    ) -> Dict[str, Any]:
        """Download a PDF and run :meth:`check_pdf` on it."""
        data = await self.download_pdf(url)
        return await self.check_pdf(data, file_name, file_size)

    async def unlock_pdf(self, session_id: Optional[str], password: Optional[str]) -> Dict[str, Any]:
        """Unlock a stored PDF and store the decrypted copy.

        The decrypted copy is stored under ``<session_id>_unlocked`` and the
        encrypted original is removed.

        Raises:
            ValidationError: If the session id or password is missing.
            SessionNotFoundError: If the session has expired.
            InvalidPasswordError: If the password is wrong.
        """
        if not session_id or not password:
            raise ValidationError("Session ID and password are required")
        validate_password(password)

        session_id, data = await self._load_session(session_id)
        unlocked = await self._run_blocking(self.gatekeeper.unlock, data, password)

        unlocked_id = f"{session_id}{UNLOCKED_SUFFIX}"
        await self._run_blocking(self.store.save, unlocked_id, unlocked)
        await self._run_blocking(self.store.delete, session_id)

        self.logger.info(f"Session {session_id}: PDF unlocked")
        return {
            'status': 'success',
            'message': 'PDF unlocked successfully! Processing...',
            'sessionId': unlocked_id,
        }

    async def analyze(self, text: str, document_type: DocumentType) -> Dict[str, Any]:
        """Render the prompt for ``text`` and run it through Gemini."""
        prompt = build_prompt(
            document_type,
            text,
            max_chars=self.settings.max_prompt_chars,
            head_chars=self.settings.prompt_head_chars,
            tail_chars=self.settings.prompt_tail_chars,
        )
        return await self._run_blocking(self.analysis_client.analyze, prompt, document_type)

    async def process_pdf(self, session_id: Optional[str], document_type: DocumentType) -> Dict[str, Any]:
        """Extract a stored PDF's text, delete it, and analyze the text.

        Returns:
            Response payload with ``status``, ``analysis``,
            ``analysisFailed``, ``documentType``, ``textLength`` and
            ``warnings`` (non-fatal cleanup problems).
        """
        session_id, data = await self._load_session(session_id)

        self.logger.info(f"Session {session_id}: extracting text from PDF")
        text = await self._run_blocking(self.extractor.extract_text, data)

        cleanup: CleanupReport = await self._run_blocking(self.store.delete, session_id)

        analysis = await self.analyze(text, document_type)
        return {
            'status': 'success',
            'analysis': analysis,
            'analysisFailed': is_fallback_analysis(analysis),
            'documentType': document_type.value,
            'textLength': len(text),
            'warnings': cleanup.warnings,
        }

    async def analyze_text(self, text: Optional[str], document_type: DocumentType) -> Dict[str, Any]:
        """Analyze text the client extracted itself."""
        text = validate_analysis_text(text)
        self.logger.info(f"Analyzing text from client - Type: {document_type.value}, length: {len(text)}")

        analysis = await self.analyze(text, document_type)
        return {
            'status': 'success',
            'analysis': analysis,
            'analysisFailed': is_fallback_analysis(analysis),
            'documentType': document_type.value,
            'textLength': len(text),
        }

    async def generate_report(
        self,
        analysis: Optional[Dict[str, Any]],
        document_type: DocumentType
    ) -> Tuple[bytes, str]:
        """Render a workbook for a client-supplied analysis.

        Returns:
            Tuple of xlsx bytes and the download filename.
        """
        if analysis is None or not isinstance(analysis, dict):
            raise ValidationError("Analysis data is required")

        content = await self._run_blocking(self.renderer.render, analysis, document_type)
        return content, generate_report_filename()

    async def sweep_temp_files(self) -> CleanupReport:
        """Delete sessions older than the configured maximum age."""
        report = await self._run_blocking(self.store.sweep)
        if report.removed or report.warnings:
            self.logger.info(
                f"Temp sweep removed {len(report.removed)} files with {len(report.warnings)} warnings"
            )
        return report
