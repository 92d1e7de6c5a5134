"""Validation utilities for the statement analysis service."""

import re
from typing import List, Optional
from urllib.parse import urlparse

from statement_analyzer.config.settings import MAX_UPLOAD_SIZE_MB, SUPPORTED_PDF_CONTENT_TYPES
from statement_analyzer.utils.exceptions import ValidationError

PDF_MAGIC_BYTES = b"%PDF-"
SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


def validate_session_id(session_id: Optional[str]) -> str:
    """Validate a session identifier before it is used as a storage key.

    Args:
        session_id: Session identifier supplied by the client.

    Returns:
        The session identifier.

    Raises:
        ValidationError: If the identifier is missing or contains
            characters outside ``[A-Za-z0-9_-]``.
    """
    if not session_id:
        raise ValidationError("Session ID is required")

    if not SESSION_ID_PATTERN.match(session_id):
        raise ValidationError("Session ID is malformed")

    return session_id


def validate_password(password: Optional[str]) -> None:
    """Validate PDF password.

    Args:
        password: Password to validate.

    Raises:
        ValidationError: If password is invalid.
    """
    if not isinstance(password, str):
        raise ValidationError("Password must be a string")

    if len(password.strip()) == 0:
        raise ValidationError("Password cannot be empty or whitespace only")


def validate_pdf_bytes(data: bytes, max_size_mb: int = MAX_UPLOAD_SIZE_MB) -> None:
    """Validate raw PDF content.

    Args:
        data: File content.
        max_size_mb: Maximum allowed size in MB.

    Raises:
        ValidationError: If the content is empty, too large or not a PDF.
    """
    if not data:
        raise ValidationError("No file uploaded")

    size_mb = len(data) / (1024 * 1024)
    if size_mb > max_size_mb:
        raise ValidationError(
            f"File size {size_mb:.2f}MB exceeds maximum "
            f"allowed size {max_size_mb}MB"
        )

    if not data.lstrip()[:len(PDF_MAGIC_BYTES)] == PDF_MAGIC_BYTES:
        raise ValidationError("Only PDF files are allowed!")


def validate_content_type(
    content_type: Optional[str],
    supported_types: List[str] = SUPPORTED_PDF_CONTENT_TYPES
) -> None:
    """Validate an upload's declared content type.

    A missing content type is accepted; the magic-byte check in
    :func:`validate_pdf_bytes` still applies.

    Raises:
        ValidationError: If the declared type is not a PDF type.
    """
    if content_type is None:
        return

    base_type = content_type.split(";", 1)[0].strip().lower()
    if base_type not in supported_types:
        raise ValidationError("Only PDF files are allowed!")


def validate_pdf_url(url: Optional[str]) -> str:
    """Validate a remote PDF location.

    Raises:
        ValidationError: If the URL is missing or not http(s).
    """
    if not url:
        raise ValidationError("No PDF URL provided")

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Unsupported PDF URL: {url}")

    return url


def validate_analysis_text(text: Optional[str]) -> str:
    """Validate text submitted for analysis.

    Raises:
        ValidationError: If no text was provided.
    """
    if not text or not text.strip():
        raise ValidationError("No text provided for analysis")
    return text
