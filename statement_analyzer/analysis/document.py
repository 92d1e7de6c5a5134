"""Statement kinds understood by the service."""

from enum import Enum
from typing import Optional, Union

from statement_analyzer.utils.exceptions import ValidationError


class DocumentType(str, Enum):
    """Selects the prompt template and the workbook layout."""

    BANK = "bank"
    CREDIT = "credit"


# Requests without a type were treated as credit card statements.
DEFAULT_DOCUMENT_TYPE = DocumentType.CREDIT


def parse_document_type(value: Optional[Union[str, DocumentType]]) -> DocumentType:
    """Convert a wire value into a DocumentType.

    Raises:
        ValidationError: If the value names an unknown document type.
    """
    if value is None or value == "":
        return DEFAULT_DOCUMENT_TYPE
    if isinstance(value, DocumentType):
        return value
    try:
        return DocumentType(str(value).strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown document type '{value}'. "
            f"Supported types: {', '.join(t.value for t in DocumentType)}"
        )
