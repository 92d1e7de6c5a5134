"""Tests for Excel generation modules."""

import io
import re
from unittest.mock import patch

import pytest
from openpyxl import load_workbook

from statement_analyzer.analysis.client import build_fallback_analysis
from statement_analyzer.analysis.document import DocumentType
from statement_analyzer.excel_generator.converter import (
    CREDIT_TRANSACTION_COLUMNS,
    ReportRenderer,
    generate_report_filename,
)
from statement_analyzer.utils.exceptions import ExcelConversionError, ValidationError


def _rows(worksheet):
    return [list(row) for row in worksheet.iter_rows(values_only=True)]


def _load(content: bytes):
    return load_workbook(io.BytesIO(content))


class TestReportRenderer:
    """Test cases for ReportRenderer class."""

    def test_credit_workbook_layout(self, sample_settings, credit_analysis):
        workbook = _load(ReportRenderer(sample_settings).render(credit_analysis, DocumentType.CREDIT))

        assert workbook.sheetnames == ["Transactions", "Subscriptions", "Summary"]

        transactions = _rows(workbook["Transactions"])
        assert transactions[0] == ["Date", "Merchant", "Amount", "Category"]
        assert transactions[1:] == [
            ["05/01/2024", "Swiggy", 400, "dining"],
            ["12/01/2024", "Amazon", 6000, "shopping"],
            ["15/01/2024", "Netflix", 649, "entertainment"],
        ]

        subscriptions = _rows(workbook["Subscriptions"])
        assert subscriptions[0] == ["Service", "Amount", "Frequency", "Category"]
        assert subscriptions[1] == ["Netflix", 649, "monthly", "entertainment"]

    def test_credit_summary_sheet(self, sample_settings, credit_analysis):
        workbook = _load(ReportRenderer(sample_settings).render(credit_analysis, DocumentType.CREDIT))

        summary = _rows(workbook["Summary"])
        assert summary[0] == ["Metric", "Value"]
        assert summary[1:6] == [
            ["Total Spent", 8000],
            ["Payment Made", 5000],
            ["Minimum Due", 400],
            ["Due Date", "15/02/2024"],
            ["Outstanding Balance", 8000],
        ]
        assert summary[7][0] == "Category Breakdown"
        assert summary[8] == ["DINING", "₹1200 (3 transactions)"]
        assert summary[9] == ["SHOPPING", "₹6151 (2 transactions)"]

    def test_bank_workbook_layout(self, sample_settings, bank_analysis):
        workbook = _load(ReportRenderer(sample_settings).render(bank_analysis, DocumentType.BANK))

        assert workbook.sheetnames == ["All Transactions", "Summary"]

        transactions = _rows(workbook["All Transactions"])
        assert transactions[0] == ["Date", "Description", "Debit", "Credit", "Balance", "Category"]
        assert transactions[2] == ["03/01/2024", "UPI/Grocer", 7500, 0, 52500, "upi"]

        summary = _rows(workbook["Summary"])
        assert ["Net Flow", 2500] in summary
        assert ["UPI", "₹7500 (1 transactions)"] in summary

    def test_header_is_styled(self, sample_settings, credit_analysis):
        workbook = _load(ReportRenderer(sample_settings).render(credit_analysis, DocumentType.CREDIT))

        header = workbook["Transactions"]["A1"]
        assert header.font.bold
        assert header.fill.start_color.rgb.endswith("366092")

    def test_missing_fields_get_defaults(self, sample_settings):
        analysis = {
            "transactions": [{"date": "01/01/2024"}, "not a record"],
            "summary": {"totalSpent": None},
            "categories": {"travel": {}},
        }

        workbook = _load(ReportRenderer(sample_settings).render(analysis, DocumentType.CREDIT))

        assert _rows(workbook["Transactions"])[1:] == [["01/01/2024", None, 0, None]]
        assert len(_rows(workbook["Subscriptions"])) == 1
        summary = _rows(workbook["Summary"])
        assert summary[1] == ["Total Spent", 0]
        assert ["TRAVEL", "₹0 (0 transactions)"] in summary

    def test_nested_values_are_written_as_json(self, sample_settings):
        analysis = {"transactions": [{"merchant": {"name": "Amazon"}, "amount": 1}]}

        workbook = _load(ReportRenderer(sample_settings).render(analysis, DocumentType.CREDIT))

        assert _rows(workbook["Transactions"])[1][1] == '{"name": "Amazon"}'

    def test_formula_like_text_stays_text(self, sample_settings):
        formula = '=HYPERLINK("http://x","y")'
        analysis = {
            "transactions": [{"date": "01/01/2024", "merchant": formula, "amount": 10}],
            "summary": {"dueDate": "=1+1"},
            "categories": {"=SUM(A1:A2)": {"total": 1, "count": 1}},
        }

        workbook = _load(ReportRenderer(sample_settings).render(analysis, DocumentType.CREDIT))

        merchant = workbook["Transactions"]["B2"]
        assert merchant.data_type == "s"
        assert merchant.value == formula
        summary = workbook["Summary"]
        assert summary["B5"].data_type == "s"
        assert summary["B5"].value == "=1+1"
        assert summary["A9"].data_type == "s"
        assert summary["A9"].value == "=SUM(A1:A2)"

    def test_control_characters_are_stripped(self, sample_settings):
        analysis = {
            "transactions": [{"merchant": "AMAZON\x0cPAY", "category": "shop\x0bping"}],
            "categories": {"travel\x01": {"total": "1\x0b200", "count": 2}},
        }

        workbook = _load(ReportRenderer(sample_settings).render(analysis, DocumentType.CREDIT))

        assert _rows(workbook["Transactions"])[1] == [None, "AMAZONPAY", 0, "shopping"]
        assert ["TRAVEL", "₹1200 (2 transactions)"] in _rows(workbook["Summary"])

    def test_fallback_analysis_renders(self, sample_settings):
        analysis = build_fallback_analysis("garbage", DocumentType.BANK)

        workbook = _load(ReportRenderer(sample_settings).render(analysis, DocumentType.BANK))

        assert len(_rows(workbook["All Transactions"])) == 1
        assert ["Total Deposits", 0] in _rows(workbook["Summary"])

    def test_currency_symbol_from_settings(self, sample_settings, credit_analysis):
        sample_settings.currency_symbol = "$"

        workbook = _load(ReportRenderer(sample_settings).render(credit_analysis, DocumentType.CREDIT))

        assert ["DINING", "$1200 (3 transactions)"] in _rows(workbook["Summary"])

    def test_render_rejects_non_dict(self, sample_settings):
        with pytest.raises(ValidationError, match="Analysis data is required"):
            ReportRenderer(sample_settings).render(["not", "a", "dict"], DocumentType.CREDIT)

    def test_render_failure_raises(self, sample_settings, credit_analysis):
        renderer = ReportRenderer(sample_settings)

        with patch.object(renderer, "build_workbook", side_effect=RuntimeError("disk full")):
            with pytest.raises(ExcelConversionError, match="disk full"):
                renderer.render(credit_analysis, DocumentType.CREDIT)

    def test_records_to_dataframe(self, sample_settings, credit_analysis):
        frame = ReportRenderer(sample_settings).records_to_dataframe(
            credit_analysis["transactions"], CREDIT_TRANSACTION_COLUMNS
        )

        assert list(frame.columns) == ["Date", "Merchant", "Amount", "Category"]
        assert len(frame) == 3

    def test_records_to_dataframe_non_list(self, sample_settings):
        frame = ReportRenderer(sample_settings).records_to_dataframe(None, CREDIT_TRANSACTION_COLUMNS)

        assert frame.empty


def test_generate_report_filename():
    assert generate_report_filename(1700000000000) == "statement_analysis_1700000000000.xlsx"
    assert re.match(r"^statement_analysis_\d{13}\.xlsx$", generate_report_filename())
