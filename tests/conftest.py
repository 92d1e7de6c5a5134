"""Pytest configuration and fixtures for the statement analyzer."""

import io
import json
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from PyPDF2 import PdfWriter

from statement_analyzer.analysis.client import GeminiAnalysisClient
from statement_analyzer.api.app import create_app
from statement_analyzer.config.settings import Settings
from statement_analyzer.storage.temp_store import InMemoryTempFileStore

PDF_PASSWORD = "secret"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def sample_settings(temp_dir):
    """Create sample settings for testing."""
    return Settings(
        gemini_api_key="test-key",
        log_level="INFO",
        logs_dir=str(temp_dir / "logs"),
        temp_dir=str(temp_dir / "temp"),
        sweep_in_process=False,
        currency_symbol="₹",
    )


def make_pdf(pages: int = 1, password: str = None) -> bytes:
    """Build a PDF of blank pages, optionally encrypted."""
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=72, height=72)
    if password is not None:
        writer.encrypt(password)

    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def pdf_factory():
    """Factory building PDFs of blank pages."""
    return make_pdf


@pytest.fixture
def plain_pdf_bytes():
    """Unencrypted two-page PDF."""
    return make_pdf(pages=2)


@pytest.fixture
def encrypted_pdf_bytes():
    """PDF encrypted with ``PDF_PASSWORD``."""
    return make_pdf(pages=1, password=PDF_PASSWORD)


@pytest.fixture
def empty_password_pdf_bytes():
    """PDF encrypted with an empty user password."""
    return make_pdf(pages=1, password="")


@pytest.fixture
def credit_analysis() -> Dict[str, Any]:
    """Analysis as Gemini returns it for a credit card statement."""
    return {
        "cardInfo": {
            "bankName": "HDFC",
            "cardNumber": "XXXX1234",
            "statementPeriod": "01/01/2024 - 31/01/2024",
            "creditLimit": 100000,
            "availableCredit": 92000,
        },
        "summary": {
            "totalSpent": 8000,
            "paymentMade": 5000,
            "minimumDue": 400,
            "dueDate": "15/02/2024",
            "outstandingBalance": 8000,
        },
        "subscriptions": [
            {"merchant": "Netflix", "amount": 649, "category": "entertainment", "frequency": "monthly"},
        ],
        "categories": {
            "dining": {"total": 1200, "count": 3, "percentage": 15},
            "shopping": {"total": 6151, "count": 2, "percentage": 77},
        },
        "expensiveTransactions": [
            {"date": "12/01/2024", "merchant": "Amazon", "amount": 6000},
        ],
        "alerts": ["High spending on shopping"],
        "transactions": [
            {"date": "05/01/2024", "merchant": "Swiggy", "amount": 400, "category": "dining"},
            {"date": "12/01/2024", "merchant": "Amazon", "amount": 6000, "category": "shopping"},
            {"date": "15/01/2024", "merchant": "Netflix", "amount": 649, "category": "entertainment"},
        ],
    }


@pytest.fixture
def bank_analysis() -> Dict[str, Any]:
    """Analysis as Gemini returns it for a bank statement."""
    return {
        "accountInfo": {
            "bankName": "SBI",
            "accountNumber": "XXXX9876",
            "period": "January 2024",
            "openingBalance": 10000,
            "closingBalance": 12500,
        },
        "summary": {
            "totalDeposits": 50000,
            "totalWithdrawals": 47500,
            "netFlow": 2500,
            "transactionCount": 2,
            "avgDailySpending": 1532.26,
        },
        "categories": {
            "upi": {"total": 7500, "count": 1, "percentage": 16},
            "neft": {"total": 40000, "count": 1, "percentage": 84},
        },
        "alerts": [],
        "transactions": [
            {"date": "01/01/2024", "description": "Salary", "debit": 0, "credit": 50000, "balance": 60000, "category": "neft"},
            {"date": "03/01/2024", "description": "UPI/Grocer", "debit": 7500, "credit": 0, "balance": 52500, "category": "upi"},
        ],
    }


def fake_gemini_client(text: str) -> Mock:
    """Stand-in for ``genai.Client`` whose model always answers ``text``."""
    client = Mock()
    client.models.generate_content.return_value = Mock(text=text)
    return client


@pytest.fixture
def gemini_client(credit_analysis):
    """Fake Gemini client answering with a fenced credit analysis."""
    return fake_gemini_client(f"Here you go:\n```json\n{json.dumps(credit_analysis)}\n```")


@pytest.fixture
def analysis_client(sample_settings, gemini_client):
    """Analysis client wired to the fake Gemini client."""
    return GeminiAnalysisClient(sample_settings, client=gemini_client)


@pytest.fixture
def memory_store():
    """In-memory session store."""
    return InMemoryTempFileStore(max_age_seconds=3600)


@pytest.fixture
def app(sample_settings, memory_store, analysis_client):
    """Application wired to in-memory storage and the fake Gemini client."""
    return create_app(
        settings=sample_settings,
        store=memory_store,
        analysis_client=analysis_client,
    )


@pytest.fixture
def client(app):
    """HTTP test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def gemini_factory():
    """Factory building fake Gemini clients."""
    return fake_gemini_client


@pytest.fixture
def pdf_password():
    """Password of ``encrypted_pdf_bytes``."""
    return PDF_PASSWORD
