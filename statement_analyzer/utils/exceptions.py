"""Exception hierarchy for the statement analysis service.

Every exception carries the HTTP status the API layer answers with, so
components can raise without knowing about FastAPI.
"""


class StatementAnalyzerError(Exception):
    """Base exception for statement analysis errors."""

    http_status = 500


class ValidationError(StatementAnalyzerError):
    """Raised when request input is missing or malformed."""

    http_status = 400


class SessionNotFoundError(StatementAnalyzerError):
    """Raised when a session has expired or never existed."""

    http_status = 404

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__("Session expired or file not found")


class PDFDecryptionError(StatementAnalyzerError):
    """Raised when a PDF cannot be opened or decrypted."""


class InvalidPasswordError(PDFDecryptionError):
    """Raised when the supplied PDF password is rejected."""

    http_status = 401


class PDFExtractionError(StatementAnalyzerError):
    """Raised when text cannot be extracted from a PDF."""


class PDFDownloadError(StatementAnalyzerError):
    """Raised when a remote PDF cannot be downloaded."""


class AnalysisError(StatementAnalyzerError):
    """Raised when the generative model cannot be reached."""


class ExcelConversionError(StatementAnalyzerError):
    """Raised when the analysis workbook cannot be built."""
