"""Plain-text extraction from PDF statements."""

import io
from typing import List, Optional

import pdfplumber

from statement_analyzer.utils.exceptions import PDFExtractionError
from statement_analyzer.utils.logger import get_logger


class PDFTextExtractor:
    """Handles text extraction from PDF statements."""

    def __init__(self) -> None:
        """Initialize PDF text extractor."""
        self.logger = get_logger(__name__)

    def extract_pages(self, data: bytes, password: Optional[str] = None) -> List[str]:
        """Extract text content from PDF bytes.

        Args:
            data: Raw PDF bytes.
            password: Optional password for an encrypted PDF.

        Returns:
            List of text strings, one per page that yielded text.

        Raises:
            PDFExtractionError: If the document cannot be opened.
        """
        text_content = []

        try:
            with pdfplumber.open(io.BytesIO(data), password=password or "") as pdf:
                for page_num, page in enumerate(pdf.pages, 1):
                    try:
                        page_text = page.extract_text()
                        if page_text:
                            text_content.append(page_text)
                            self.logger.debug(f"Extracted text from page {page_num}")
                        else:
                            self.logger.warning(f"No text found on page {page_num}")
                    except Exception as e:
                        self.logger.warning(f"Failed to extract text from page {page_num}: {str(e)}")
                        continue

        except Exception as e:
            raise PDFExtractionError(f"Failed to extract text from PDF: {str(e)}")

        self.logger.info(f"Extracted text from {len(text_content)} pages")
        return text_content

    def extract_text(self, data: bytes, password: Optional[str] = None) -> str:
        """Extract the whole document as one newline-joined string.

        A document without extractable text yields an empty string.
        """
        text = "\n".join(self.extract_pages(data, password))
        if not text:
            self.logger.warning("No text content extracted from PDF")
        else:
            self.logger.info(f"Text extracted, length: {len(text)}")
        return text
