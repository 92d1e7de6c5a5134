"""Prompt templates sent to the generative model."""

from string import Template
from typing import Dict

from statement_analyzer.analysis.document import DocumentType
from statement_analyzer.config.settings import MAX_PROMPT_CHARS, PROMPT_HEAD_CHARS, PROMPT_TAIL_CHARS

OMISSION_MARKER = "\n\n[... {omitted} characters omitted ...]\n\n"

FORMAT_RULES = """
    Formatting rules:
    - Dates must use the format DD/MM/YYYY.
    - Amounts must be bare numbers: no currency symbols, no thousands separators.
    - Percentages are numbers from 0 to 100 giving each category's share of total spending.
    - Use 0 for unknown numbers and "" for unknown strings; never omit a field.
"""

BANK_STATEMENT_TEMPLATE = Template("""
    You are a financial analyst. Analyze this bank statement and extract ALL information.

    IMPORTANT: Return ONLY valid JSON with no additional text or formatting.

    Extract and analyze:
    1. All transactions with date, description, debit/credit amounts, and balance
    2. Categorize each transaction (UPI, NEFT, ATM, Credit Card, etc.)
    3. Calculate total money in and out
    4. Find patterns in spending
    5. Identify all recurring payments
$format_rules
    Return this exact JSON structure:
    {
      "accountInfo": {
        "bankName": "string",
        "accountNumber": "string",
        "period": "string",
        "openingBalance": number,
        "closingBalance": number
      },
      "summary": {
        "totalDeposits": number,
        "totalWithdrawals": number,
        "netFlow": number,
        "transactionCount": number,
        "avgDailySpending": number
      },
      "categories": {
        "upi": { "total": number, "count": number, "percentage": number },
        "neft": { "total": number, "count": number, "percentage": number },
        "atm": { "total": number, "count": number, "percentage": number },
        "creditCard": { "total": number, "count": number, "percentage": number },
        "others": { "total": number, "count": number, "percentage": number }
      },
      "monthlyPatterns": {
        "highestSpendingMonth": "string",
        "lowestSpendingMonth": "string",
        "averageMonthlySpending": number
      },
      "recurringPayments": [
        { "description": "string", "amount": number, "frequency": "string" }
      ],
      "topTransactions": [
        { "date": "DD/MM/YYYY", "description": "string", "amount": number, "type": "string" }
      ],
      "alerts": ["string"],
      "transactions": [
        { "date": "DD/MM/YYYY", "description": "string", "debit": number, "credit": number, "balance": number, "category": "string" }
      ]
    }

    Bank Statement Text:
    $statement_text
""")

CREDIT_CARD_TEMPLATE = Template("""
    You are a financial analyst. Analyze this credit card statement and extract ALL information.

    IMPORTANT: Return ONLY valid JSON with no additional text or formatting.

    Extract and analyze:
    1. All transactions with date, merchant, and amount
    2. Identify ALL subscriptions (Netflix, Spotify, ChatGPT, etc.)
    3. Categorize spending by type
    4. Find expensive transactions
    5. Calculate total spending
$format_rules
    Return this exact JSON structure:
    {
      "cardInfo": {
        "bankName": "string",
        "cardNumber": "string",
        "statementPeriod": "string",
        "creditLimit": number,
        "availableCredit": number
      },
      "summary": {
        "totalSpent": number,
        "paymentMade": number,
        "minimumDue": number,
        "dueDate": "DD/MM/YYYY",
        "outstandingBalance": number
      },
      "subscriptions": [
        {
          "merchant": "string",
          "amount": number,
          "category": "string",
          "frequency": "monthly/annual"
        }
      ],
      "categories": {
        "dining": { "total": number, "count": number, "percentage": number },
        "shopping": { "total": number, "count": number, "percentage": number },
        "travel": { "total": number, "count": number, "percentage": number },
        "entertainment": { "total": number, "count": number, "percentage": number },
        "utilities": { "total": number, "count": number, "percentage": number },
        "others": { "total": number, "count": number, "percentage": number }
      },
      "expensiveTransactions": [
        { "date": "DD/MM/YYYY", "merchant": "string", "amount": number }
      ],
      "alerts": ["string"],
      "transactions": [
        { "date": "DD/MM/YYYY", "merchant": "string", "amount": number, "category": "string" }
      ]
    }

    Credit Card Statement Text:
    $statement_text
""")

TEMPLATES: Dict[DocumentType, Template] = {
    DocumentType.BANK: BANK_STATEMENT_TEMPLATE,
    DocumentType.CREDIT: CREDIT_CARD_TEMPLATE,
}


def truncate_text(
    text: str,
    max_chars: int = MAX_PROMPT_CHARS,
    head_chars: int = PROMPT_HEAD_CHARS,
    tail_chars: int = PROMPT_TAIL_CHARS
) -> str:
    """Cut oversized text down to a head and tail window.

    Text of at most ``max_chars`` characters is returned unchanged. Longer
    text keeps its first ``head_chars`` and last ``tail_chars`` characters
    with a marker naming how many characters were dropped in between.

    Args:
        text: Extracted statement text.
        max_chars: Largest text passed through untouched.
        head_chars: Characters kept from the start.
        tail_chars: Characters kept from the end.

    Returns:
        The text, or its head/marker/tail rendition.
    """
    if len(text) <= max_chars:
        return text

    omitted = len(text) - head_chars - tail_chars
    head = text[:head_chars]
    tail = text[len(text) - tail_chars:] if tail_chars > 0 else ""
    return head + OMISSION_MARKER.format(omitted=omitted) + tail


def build_prompt(
    document_type: DocumentType,
    text: str,
    max_chars: int = MAX_PROMPT_CHARS,
    head_chars: int = PROMPT_HEAD_CHARS,
    tail_chars: int = PROMPT_TAIL_CHARS
) -> str:
    """Render the prompt for a statement.

    Args:
        document_type: Selects the bank or credit card template.
        text: Extracted statement text.

    Returns:
        Prompt text.
    """
    template = TEMPLATES[DocumentType(document_type)]
    return template.substitute(
        format_rules=FORMAT_RULES,
        statement_text=truncate_text(text, max_chars, head_chars, tail_chars),
    )
