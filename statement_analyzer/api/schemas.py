"""Request bodies accepted by the JSON endpoints.

Fields are optional at the schema level so that missing values produce
the service's own 400 messages instead of generic validation output.
"""

from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CheckPdfUrlRequest(RequestModel):
    pdf_url: Optional[str] = Field(default=None, validation_alias=AliasChoices("pdfUrl", "url"))
    file_name: Optional[str] = Field(default=None, validation_alias=AliasChoices("fileName", "filename"))
    file_size: Optional[int] = Field(default=None, validation_alias=AliasChoices("fileSize", "size"))


class UnlockPdfRequest(RequestModel):
    session_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("sessionId", "session_id"))
    password: Optional[str] = None


class ProcessPdfRequest(RequestModel):
    session_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("sessionId", "session_id"))
    document_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("documentType", "type"))


class AnalyzeTextRequest(RequestModel):
    text: Optional[str] = None
    document_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("documentType", "type"))


class GenerateReportRequest(RequestModel):
    analysis: Optional[Dict[str, Any]] = None
    document_type: Optional[str] = Field(default=None, validation_alias=AliasChoices("documentType", "type"))


class SettingsRequest(RequestModel):
    email: Optional[str] = None
