"""Spreadsheet rendering of statement analyses."""

from statement_analyzer.excel_generator.converter import (
    XLSX_CONTENT_TYPE,
    ReportRenderer,
    generate_report_filename,
)

__all__ = ["XLSX_CONTENT_TYPE", "ReportRenderer", "generate_report_filename"]
