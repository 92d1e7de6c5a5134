"""Excel rendering of statement analyses."""

import io
import json
import time
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd
from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows
from openpyxl.worksheet.worksheet import Worksheet

from statement_analyzer.analysis.document import DocumentType
from statement_analyzer.config.settings import CURRENCY_SYMBOL, Settings
from statement_analyzer.utils.exceptions import ExcelConversionError, ValidationError
from statement_analyzer.utils.logger import get_logger

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (header, analysis key, default)
Column = Tuple[str, str, Any]

BANK_TRANSACTION_COLUMNS: List[Column] = [
    ("Date", "date", ""),
    ("Description", "description", ""),
    ("Debit", "debit", 0),
    ("Credit", "credit", 0),
    ("Balance", "balance", 0),
    ("Category", "category", ""),
]

CREDIT_TRANSACTION_COLUMNS: List[Column] = [
    ("Date", "date", ""),
    ("Merchant", "merchant", ""),
    ("Amount", "amount", 0),
    ("Category", "category", ""),
]

SUBSCRIPTION_COLUMNS: List[Column] = [
    ("Service", "merchant", ""),
    ("Amount", "amount", 0),
    ("Frequency", "frequency", ""),
    ("Category", "category", ""),
]

BANK_SUMMARY_ROWS: List[Column] = [
    ("Total Deposits", "totalDeposits", 0),
    ("Total Withdrawals", "totalWithdrawals", 0),
    ("Net Flow", "netFlow", 0),
    ("Transaction Count", "transactionCount", 0),
    ("Average Daily Spending", "avgDailySpending", 0),
]

CREDIT_SUMMARY_ROWS: List[Column] = [
    ("Total Spent", "totalSpent", 0),
    ("Payment Made", "paymentMade", 0),
    ("Minimum Due", "minimumDue", 0),
    ("Due Date", "dueDate", ""),
    ("Outstanding Balance", "outstandingBalance", 0),
]

SUMMARY_COLUMNS = ["Metric", "Value"]
COLUMN_WIDTH_LIMIT = 50


def generate_report_filename(timestamp_ms: Optional[int] = None) -> str:
    """Generate the download filename for a report."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"statement_analysis_{timestamp_ms}.xlsx"


def _clean_text(value: str) -> str:
    """Drop control characters that xlsx cannot store."""
    return ILLEGAL_CHARACTERS_RE.sub("", value)


def _cell_value(value: Any, default: Any) -> Any:
    """Copy a value into a cell, defaulting missing ones.

    Nested structures cannot live in a cell and are written as JSON text.
    """
    if value is None or value == "":
        return default
    if isinstance(value, (dict, list)):
        value = json.dumps(value, ensure_ascii=False)
    if isinstance(value, str):
        return _clean_text(value)
    return value


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


class ReportRenderer:
    """Renders an analysis dict into an xlsx workbook."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Initialize report renderer."""
        self.logger = get_logger(__name__)
        self.currency_symbol = settings.currency_symbol if settings else CURRENCY_SYMBOL

        # Define Excel styles
        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        self.header_alignment = Alignment(horizontal="center", vertical="center")
        self.section_font = Font(bold=True)

    def records_to_dataframe(self, records: Any, columns: List[Column]) -> pd.DataFrame:
        """Normalize analysis records into a DataFrame.

        Args:
            records: List of record dicts from the analysis; anything else
                is treated as empty.
            columns: Column layout with per-column defaults.

        Returns:
            DataFrame with one column per layout entry and one row per
            dict record.
        """
        rows = []
        for record in _as_list(records):
            if not isinstance(record, dict):
                continue
            rows.append([_cell_value(record.get(key), default) for _, key, default in columns])

        return pd.DataFrame(rows, columns=[header for header, _, _ in columns], dtype=object)

    def _style_header_row(self, worksheet: Worksheet) -> None:
        for cell in worksheet[1]:
            cell.font = self.header_font
            cell.fill = self.header_fill
            cell.alignment = self.header_alignment

    def _keep_formulas_as_text(self, worksheet: Worksheet) -> None:
        # Values are copied verbatim; text starting with "=" must not evaluate
        for row in worksheet.iter_rows():
            for cell in row:
                if cell.data_type == "f":
                    cell.data_type = "s"

    def _auto_size_columns(self, worksheet: Worksheet) -> None:
        for col_idx in range(1, worksheet.max_column + 1):
            max_length = 0
            for row_idx in range(1, worksheet.max_row + 1):
                value = worksheet.cell(row=row_idx, column=col_idx).value
                if value is not None:
                    max_length = max(max_length, len(str(value)))

            adjusted_width = min(max_length + 2, COLUMN_WIDTH_LIMIT)
            worksheet.column_dimensions[get_column_letter(col_idx)].width = adjusted_width

    def create_table_sheet(
        self,
        workbook: Workbook,
        sheet_name: str,
        records: Any,
        columns: List[Column]
    ) -> Worksheet:
        """Create a sheet with a styled header and one row per record.

        Args:
            workbook: Excel workbook object.
            sheet_name: Name for the sheet.
            records: Records copied into the rows.
            columns: Column layout.

        Returns:
            The new worksheet.
        """
        worksheet = workbook.create_sheet(title=sheet_name)
        frame = self.records_to_dataframe(records, columns)

        worksheet.append(list(frame.columns))
        for row in dataframe_to_rows(frame, index=False, header=False):
            worksheet.append(row)

        self._style_header_row(worksheet)
        self._keep_formulas_as_text(worksheet)
        self._auto_size_columns(worksheet)
        self.logger.info(f"Created {sheet_name} sheet with {len(frame)} rows")
        return worksheet

    def create_summary_sheet(
        self,
        workbook: Workbook,
        analysis: Dict[str, Any],
        summary_rows: List[Column],
        sheet_name: str = "Summary"
    ) -> Worksheet:
        """Create the key/value summary sheet with a category breakdown.

        Args:
            workbook: Excel workbook object.
            analysis: Analysis dict.
            summary_rows: Metric layout read from ``analysis["summary"]``.
            sheet_name: Name for the sheet.

        Returns:
            The new worksheet.
        """
        worksheet = workbook.create_sheet(title=sheet_name)
        worksheet.append(SUMMARY_COLUMNS)
        self._style_header_row(worksheet)

        summary = _as_dict(analysis.get("summary"))
        for label, key, default in summary_rows:
            worksheet.append([label, _cell_value(summary.get(key), default)])

        worksheet.append(["", ""])
        worksheet.append(["Category Breakdown", ""])
        worksheet.cell(row=worksheet.max_row, column=1).font = self.section_font

        for category, data in _as_dict(analysis.get("categories")).items():
            data = _as_dict(data)
            total = _cell_value(data.get("total"), 0)
            count = _cell_value(data.get("count"), 0)
            worksheet.append([
                _clean_text(str(category).upper()),
                f"{self.currency_symbol}{total} ({count} transactions)",
            ])

        self._keep_formulas_as_text(worksheet)
        self._auto_size_columns(worksheet)
        return worksheet

    def build_workbook(self, analysis: Dict[str, Any], document_type: DocumentType) -> Workbook:
        """Build the workbook for a document type.

        Bank statements get ``All Transactions`` and ``Summary``; credit
        card statements get ``Transactions``, ``Subscriptions`` and
        ``Summary``.
        """
        workbook = Workbook()

        # Remove default sheet
        if "Sheet" in workbook.sheetnames:
            workbook.remove(workbook["Sheet"])

        if DocumentType(document_type) is DocumentType.BANK:
            self.create_table_sheet(
                workbook, "All Transactions", analysis.get("transactions"), BANK_TRANSACTION_COLUMNS
            )
            self.create_summary_sheet(workbook, analysis, BANK_SUMMARY_ROWS)
        else:
            self.create_table_sheet(
                workbook, "Transactions", analysis.get("transactions"), CREDIT_TRANSACTION_COLUMNS
            )
            self.create_table_sheet(
                workbook, "Subscriptions", analysis.get("subscriptions"), SUBSCRIPTION_COLUMNS
            )
            self.create_summary_sheet(workbook, analysis, CREDIT_SUMMARY_ROWS)

        return workbook

    def render(self, analysis: Dict[str, Any], document_type: DocumentType) -> bytes:
        """Render an analysis into xlsx bytes.

        Args:
            analysis: Analysis dict as returned by the analysis endpoints.
            document_type: Selects the sheet layout.

        Returns:
            The workbook serialized as xlsx.

        Raises:
            ValidationError: If ``analysis`` is not a dict.
            ExcelConversionError: If the workbook cannot be built.
        """
        if not isinstance(analysis, dict):
            raise ValidationError("Analysis data is required")

        try:
            workbook = self.build_workbook(analysis, document_type)
            buffer = io.BytesIO()
            workbook.save(buffer)
            workbook.close()
        except Exception as e:
            raise ExcelConversionError(f"Failed to generate report: {str(e)}")

        self.logger.info(f"Generated {DocumentType(document_type).value} report")
        return buffer.getvalue()
