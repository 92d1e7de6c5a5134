"""HTTP endpoints."""

from typing import Optional

from fastapi import APIRouter, File, Request, Response, UploadFile

from statement_analyzer import __version__
from statement_analyzer.analysis.document import parse_document_type
from statement_analyzer.api.processing_api import ProcessingAPI
from statement_analyzer.api.schemas import (
    AnalyzeTextRequest,
    CheckPdfUrlRequest,
    GenerateReportRequest,
    ProcessPdfRequest,
    SettingsRequest,
    UnlockPdfRequest,
)
from statement_analyzer.excel_generator.converter import XLSX_CONTENT_TYPE
from statement_analyzer.utils.exceptions import ValidationError
from statement_analyzer.utils.logger import get_logger
from statement_analyzer.utils.validators import validate_content_type

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["statements"])
root_router = APIRouter(tags=["service"])

ENDPOINTS = [
    "POST /api/check-pdf",
    "POST /api/check-pdf-url",
    "POST /api/unlock-pdf",
    "POST /api/process-pdf",
    "POST /api/analyze-text",
    "POST /api/generate-report",
    "POST /api/settings",
    "GET /health",
]

FEATURES = [
    "Password protected PDFs",
    "Client-side PDF processing support",
    "Text analysis endpoint",
    "Remote URL support",
    "Direct Excel download",
]


def get_processing_api(request: Request) -> ProcessingAPI:
    return request.app.state.processing_api


def _mask_email(email: str) -> str:
    name, _, domain = email.partition("@")
    if not domain:
        return "***"
    return f"{name[:1]}***@{domain}"


@router.post("/check-pdf")
async def check_pdf(request: Request, pdf: Optional[UploadFile] = File(None)):
    """Check an uploaded PDF for a password and open a session."""
    if pdf is None:
        raise ValidationError("No file uploaded")

    logger.info(f"Checking PDF - File received: {pdf.filename}")
    validate_content_type(pdf.content_type)
    data = await pdf.read()

    return await get_processing_api(request).check_pdf(data, pdf.filename, len(data))


@router.post("/check-pdf-url")
async def check_pdf_url(request: Request, body: CheckPdfUrlRequest):
    """Download a PDF from a URL, check it and open a session."""
    return await get_processing_api(request).check_pdf_url(body.pdf_url, body.file_name, body.file_size)


@router.post("/unlock-pdf")
async def unlock_pdf(request: Request, body: UnlockPdfRequest):
    """Unlock a password protected PDF held in a session."""
    logger.info(f"Unlocking PDF - Session: {body.session_id}")
    return await get_processing_api(request).unlock_pdf(body.session_id, body.password)


@router.post("/process-pdf")
async def process_pdf(request: Request, body: ProcessPdfRequest):
    """Extract and analyze the PDF held in a session."""
    document_type = parse_document_type(body.document_type)
    logger.info(f"Processing PDF - Session: {body.session_id} Type: {document_type.value}")
    return await get_processing_api(request).process_pdf(body.session_id, document_type)


@router.post("/analyze-text")
async def analyze_text(request: Request, body: AnalyzeTextRequest):
    """Analyze statement text extracted by the client."""
    document_type = parse_document_type(body.document_type)
    return await get_processing_api(request).analyze_text(body.text, document_type)


@router.post("/generate-report")
async def generate_report(request: Request, body: GenerateReportRequest):
    """Render an analysis as an Excel download."""
    document_type = parse_document_type(body.document_type)
    logger.info(f"Generating Excel report for download - Type: {document_type.value}")

    content, filename = await get_processing_api(request).generate_report(body.analysis, document_type)
    return Response(
        content=content,
        media_type=XLSX_CONTENT_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/settings")
async def save_settings(body: SettingsRequest):
    """Acknowledge notification settings; nothing is persisted."""
    if body.email:
        logger.info(f"Email saved: {_mask_email(body.email)}")
    return {"status": "success", "message": "Settings saved"}


@root_router.get("/")
async def root(request: Request):
    """Liveness and capability descriptor."""
    settings = get_processing_api(request).settings
    return {
        "status": "Statement Analyzer Running",
        "endpoints": ENDPOINTS,
        "version": __version__,
        "features": FEATURES,
        "geminiConfigured": settings.has_gemini_api_key(),
    }


@root_router.get("/health")
async def health(request: Request):
    """Component health report."""
    return request.app.state.health_checker.run_health_check()
