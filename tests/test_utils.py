"""Tests for utility modules."""

import logging

import pytest

from statement_analyzer.utils.exceptions import (
    InvalidPasswordError,
    PDFDecryptionError,
    SessionNotFoundError,
    StatementAnalyzerError,
    ValidationError,
)
from statement_analyzer.utils.logger import get_logger, setup_logger
from statement_analyzer.utils.validators import (
    validate_analysis_text,
    validate_content_type,
    validate_password,
    validate_pdf_bytes,
    validate_pdf_url,
    validate_session_id,
)


class TestLogger:
    """Test cases for logging functionality."""

    def test_setup_logger_writes_file(self, temp_dir):
        """Test logging setup with file output."""
        logger = setup_logger("test_file_logger", log_file="test.log", level="DEBUG", logs_dir=str(temp_dir))

        logger.info("Test log message")

        log_file = temp_dir / "test.log"
        assert log_file.exists()
        assert "Test log message" in log_file.read_text()

    def test_log_levels(self, temp_dir):
        """Test different log levels."""
        logger = setup_logger("test_level_logger", log_file="levels.log", level="WARNING", logs_dir=str(temp_dir))

        logger.info("Info message")
        logger.warning("Warning message")

        log_content = (temp_dir / "levels.log").read_text()
        assert "Warning message" in log_content
        assert "Info message" not in log_content
        assert logger.level == logging.WARNING

    def test_setup_logger_does_not_duplicate_handlers(self, temp_dir):
        """Calling setup twice replaces handlers instead of stacking them."""
        setup_logger("test_dup_logger", logs_dir=str(temp_dir))
        logger = setup_logger("test_dup_logger", logs_dir=str(temp_dir))

        assert len(logger.handlers) == 2

    def test_get_logger(self):
        """Test logger retrieval."""
        logger = get_logger("test_logger")
        assert logger.name == "test_logger"
        assert get_logger("test_logger") is logger


class TestExceptions:
    """Test cases for the exception hierarchy."""

    def test_http_status(self):
        assert StatementAnalyzerError("boom").http_status == 500
        assert ValidationError("bad").http_status == 400
        assert InvalidPasswordError("nope").http_status == 401
        assert SessionNotFoundError("session_1").http_status == 404

    def test_invalid_password_is_decryption_error(self):
        assert issubclass(InvalidPasswordError, PDFDecryptionError)

    def test_session_not_found_message(self):
        error = SessionNotFoundError("session_1")
        assert error.session_id == "session_1"
        assert str(error) == "Session expired or file not found"


class TestValidators:
    """Test cases for validation functions."""

    @pytest.mark.parametrize("session_id", [
        "session_1700000000000_abc123xyz",
        "session_1700000000000_abc123xyz_unlocked",
        "a",
    ])
    def test_validate_session_id_valid(self, session_id):
        assert validate_session_id(session_id) == session_id

    @pytest.mark.parametrize("session_id", ["../etc/passwd", "a/b", "id with space", "x" * 129, "id.pdf"])
    def test_validate_session_id_malformed(self, session_id):
        with pytest.raises(ValidationError, match="malformed"):
            validate_session_id(session_id)

    @pytest.mark.parametrize("session_id", [None, ""])
    def test_validate_session_id_missing(self, session_id):
        with pytest.raises(ValidationError, match="Session ID is required"):
            validate_session_id(session_id)

    def test_validate_password(self):
        validate_password("secret")

        with pytest.raises(ValidationError):
            validate_password("   ")
        with pytest.raises(ValidationError):
            validate_password(None)

    def test_validate_pdf_bytes(self, plain_pdf_bytes):
        validate_pdf_bytes(plain_pdf_bytes)

    def test_validate_pdf_bytes_empty(self):
        with pytest.raises(ValidationError, match="No file uploaded"):
            validate_pdf_bytes(b"")

    def test_validate_pdf_bytes_not_pdf(self):
        with pytest.raises(ValidationError, match="Only PDF files are allowed!"):
            validate_pdf_bytes(b"PK\x03\x04 this is a zip")

    def test_validate_pdf_bytes_too_large(self):
        data = b"%PDF-1.4\n" + b"0" * (1024 * 1024)
        with pytest.raises(ValidationError, match="exceeds maximum"):
            validate_pdf_bytes(data, max_size_mb=1)

    def test_validate_content_type(self):
        validate_content_type("application/pdf")
        validate_content_type("application/pdf; charset=binary")
        validate_content_type(None)

        with pytest.raises(ValidationError, match="Only PDF files are allowed!"):
            validate_content_type("image/png")

    def test_validate_pdf_url(self):
        assert validate_pdf_url("https://example.com/a.pdf") == "https://example.com/a.pdf"

        with pytest.raises(ValidationError, match="No PDF URL provided"):
            validate_pdf_url(None)
        with pytest.raises(ValidationError, match="Unsupported PDF URL"):
            validate_pdf_url("file:///etc/passwd")
        with pytest.raises(ValidationError, match="Unsupported PDF URL"):
            validate_pdf_url("https://")

    def test_validate_analysis_text(self):
        assert validate_analysis_text("some text") == "some text"

        for text in (None, "", "   \n"):
            with pytest.raises(ValidationError, match="No text provided for analysis"):
                validate_analysis_text(text)
