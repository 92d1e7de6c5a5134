"""Gemini client that turns a statement prompt into an analysis dict."""

import json
import re
from typing import Any, Dict, List, Optional

from google import genai
from google.genai import types

from statement_analyzer.analysis.document import DocumentType
from statement_analyzer.config.settings import RAW_RESPONSE_PREVIEW_CHARS, Settings
from statement_analyzer.utils.exceptions import AnalysisError
from statement_analyzer.utils.logger import get_logger

FENCED_BLOCK_PATTERN = re.compile(r"```(?:json|JSON)?[ \t]*\r?\n?(.*?)```", re.DOTALL)

FALLBACK_SUMMARY_ERROR = "Analysis completed but formatting failed"
FALLBACK_ALERT = "Analysis completed but data formatting failed"

FALLBACK_SUMMARY_FIELDS = {
    DocumentType.BANK: ["totalDeposits", "totalWithdrawals", "netFlow", "transactionCount", "avgDailySpending"],
    DocumentType.CREDIT: ["totalSpent", "paymentMade", "minimumDue", "outstandingBalance"],
}

EXPECTED_KEYS = {
    DocumentType.BANK: ["accountInfo", "summary", "categories", "transactions", "alerts"],
    DocumentType.CREDIT: ["cardInfo", "summary", "subscriptions", "categories", "transactions", "alerts"],
}


def _loads_object(candidate: str) -> Optional[Dict[str, Any]]:
    try:
        value = json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def _first_balanced_object(text: str) -> Optional[str]:
    """Return the first top-level ``{...}`` span, honouring JSON strings."""
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
            elif char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start:index + 1]
        # Unbalanced from here; try the next opening brace.
        start = text.find("{", start + 1)
    return None


def extract_json_payload(text: Optional[str]) -> Optional[Dict[str, Any]]:
    """Pull the analysis object out of free-form model output.

    Candidates are tried in order: the first fenced code block, the first
    balanced top-level object, then everything between the first ``{`` and
    the last ``}``. Only JSON objects are accepted.

    Args:
        text: Raw model output.

    Returns:
        The parsed object, or None if no candidate parses.
    """
    if not text:
        return None

    candidates: List[str] = []

    fenced = FENCED_BLOCK_PATTERN.search(text)
    if fenced:
        candidates.append(fenced.group(1).strip())

    balanced = _first_balanced_object(text)
    if balanced:
        candidates.append(balanced)

    first, last = text.find("{"), text.rfind("}")
    if first != -1 and last > first:
        candidates.append(text[first:last + 1])

    for candidate in candidates:
        parsed = _loads_object(candidate)
        if parsed is not None:
            return parsed

    return None


def build_fallback_analysis(
    raw_text: Optional[str],
    document_type: DocumentType = DocumentType.BANK,
    preview_chars: int = RAW_RESPONSE_PREVIEW_CHARS
) -> Dict[str, Any]:
    """Build the error-flagged analysis returned when parsing fails."""
    summary: Dict[str, Any] = {name: 0 for name in FALLBACK_SUMMARY_FIELDS[DocumentType(document_type)]}
    summary["error"] = FALLBACK_SUMMARY_ERROR

    return {
        "error": True,
        "summary": summary,
        "categories": {},
        "alerts": [FALLBACK_ALERT],
        "rawResponse": (raw_text or "")[:preview_chars],
    }


def is_fallback_analysis(analysis: Any) -> bool:
    return isinstance(analysis, dict) and analysis.get("error") is True


class GeminiAnalysisClient:
    """Sends prompts to Gemini and parses the JSON it returns."""

    def __init__(self, settings: Settings, client: Optional[Any] = None) -> None:
        """Initialize the analysis client.

        Args:
            settings: Service settings; supplies model name, sampling
                temperature, output cap and API key.
            client: Optional pre-built ``genai.Client`` (or a stand-in with
                the same ``models.generate_content`` method).
        """
        self.settings = settings
        self.logger = get_logger(__name__)
        self._client = client

    @property
    def client(self) -> Any:
        if self._client is None:
            if not self.settings.has_gemini_api_key():
                raise AnalysisError("Gemini API key is not configured")
            self._client = genai.Client(api_key=self.settings.gemini_api_key)
        return self._client

    def generate(self, prompt: str) -> str:
        """Send a prompt and return the raw response text.

        Raises:
            AnalysisError: If the API call fails.
        """
        client = self.client
        self.logger.info(f"Processing with Gemini AI ({self.settings.gemini_model})...")

        try:
            response = client.models.generate_content(
                model=self.settings.gemini_model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    temperature=self.settings.temperature,
                    max_output_tokens=self.settings.max_output_tokens,
                ),
            )
        except Exception as e:
            raise AnalysisError(f"Gemini request failed: {str(e)}")

        text = getattr(response, "text", None) or ""
        self.logger.info(f"Gemini response received: {len(text)} characters")
        return text

    def parse_response(self, text: str, document_type: DocumentType) -> Dict[str, Any]:
        """Parse model output, falling back to the sentinel analysis."""
        analysis = extract_json_payload(text)

        if analysis is None:
            self.logger.error(f"Failed to parse Gemini response: {text[:500]}")
            return build_fallback_analysis(
                text, document_type, self.settings.raw_response_preview_chars
            )

        missing = [key for key in EXPECTED_KEYS[DocumentType(document_type)] if key not in analysis]
        if missing:
            self.logger.warning(f"Analysis is missing expected keys: {', '.join(missing)}")

        return analysis

    def analyze(self, prompt: str, document_type: DocumentType = DocumentType.BANK) -> Dict[str, Any]:
        """Analyze a rendered prompt.

        Unparseable output never raises; the sentinel analysis is returned
        instead and can be recognised with :func:`is_fallback_analysis`.

        Raises:
            AnalysisError: If Gemini cannot be reached.
        """
        return self.parse_response(self.generate(prompt), document_type)
