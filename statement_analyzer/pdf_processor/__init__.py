"""PDF handling: password detection, unlocking and text extraction."""

from statement_analyzer.pdf_processor.decryptor import PasswordCheck, PDFGatekeeper
from statement_analyzer.pdf_processor.extractor import PDFTextExtractor

__all__ = ["PasswordCheck", "PDFGatekeeper", "PDFTextExtractor"]
