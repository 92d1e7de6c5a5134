"""Password detection and unlocking for uploaded PDF statements."""

import io
from dataclasses import dataclass
from typing import Optional

from PyPDF2 import PdfReader, PdfWriter
from PyPDF2.errors import PdfReadError

from statement_analyzer.utils.exceptions import InvalidPasswordError, PDFDecryptionError
from statement_analyzer.utils.logger import get_logger
from statement_analyzer.utils.validators import validate_password


@dataclass
class PasswordCheck:
    """Result of probing a PDF for a password."""

    needs_password: bool
    page_count: Optional[int] = None


class PDFGatekeeper:
    """Decides whether a PDF needs a password and unlocks it."""

    def __init__(self) -> None:
        """Initialize PDF gatekeeper."""
        self.logger = get_logger(__name__)

    def _open(self, data: bytes) -> PdfReader:
        try:
            return PdfReader(io.BytesIO(data))
        except PdfReadError as e:
            raise PDFDecryptionError(f"PDF read error: {str(e)}")
        except Exception as e:
            raise PDFDecryptionError(f"Unexpected error while opening PDF: {str(e)}")

    def check_password(self, data: bytes) -> PasswordCheck:
        """Check whether a PDF needs a password to be read.

        A PDF encrypted with an empty user password opens without one and
        is reported as not needing a password.

        Args:
            data: Raw PDF bytes.

        Returns:
            PasswordCheck with the verdict.

        Raises:
            PDFDecryptionError: If the bytes are not a readable PDF.
        """
        reader = self._open(data)

        try:
            if reader.is_encrypted and not reader.decrypt(""):
                self.logger.info("PDF is password protected")
                return PasswordCheck(needs_password=True)

            return PasswordCheck(needs_password=False, page_count=len(reader.pages))

        except PdfReadError as e:
            raise PDFDecryptionError(f"PDF read error: {str(e)}")
        except Exception as e:
            raise PDFDecryptionError(f"Failed to check encryption status: {str(e)}")

    def unlock(self, data: bytes, password: str) -> bytes:
        """Decrypt a PDF and re-serialize it without encryption.

        Args:
            data: Raw (possibly encrypted) PDF bytes.
            password: User or owner password.

        Returns:
            Bytes of an unencrypted copy of the document.

        Raises:
            ValidationError: If the password is empty.
            InvalidPasswordError: If the password is rejected.
            PDFDecryptionError: For any other failure.
        """
        validate_password(password)
        reader = self._open(data)

        try:
            if reader.is_encrypted:
                if not reader.decrypt(password):
                    self.logger.info("PDF password rejected")
                    raise InvalidPasswordError("Incorrect password. Please try again.")
                self.logger.info("Successfully decrypted PDF with password")
            else:
                self.logger.info("PDF is not encrypted")

            writer = PdfWriter()
            for page in reader.pages:
                writer.add_page(page)

            buffer = io.BytesIO()
            writer.write(buffer)
            return buffer.getvalue()

        except InvalidPasswordError:
            raise
        except PdfReadError as e:
            raise PDFDecryptionError(f"PDF read error: {str(e)}")
        except Exception as e:
            raise PDFDecryptionError(f"Unexpected error during decryption: {str(e)}")
