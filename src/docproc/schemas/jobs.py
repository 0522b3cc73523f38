"""Type-safe job and payload definitions."""

import enum
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model for camelCase wire payloads."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class JobType(str, enum.Enum):
    """Closed set of job types the worker understands."""
    PING = "ping"
    PDF_PREPROCESS = "pdf_preprocess"
    PDF_EXPORT = "pdf_export"
    PDF_PASSWORD_ENCRYPT = "pdf_password_encrypt"
    PDF_REMOVE_METADATA = "pdf_remove_metadata"
    DOCX_SIMPLE_COMPARE = "docx_simple_compare"
    DOCX_CONSOLIDATE = "docx_consolidate"
    CREATE_TEMP_FILE = "create_temp_file"
    DOCX_UPLOAD = "docx_upload"

    @classmethod
    def from_event(cls, event: str) -> Optional["JobType"]:
        try:
            return cls(event)
        except ValueError:
            return None


class Job(BaseModel):
    """One unit of work decoded from the inbound stream.

    ``event`` is kept as the raw string so unsupported events can still be
    answered on the response channel.
    """
    event: str
    job_id: str
    user_id: Optional[str] = None
    email: Optional[str] = None
    data: Any = None

    @field_validator("user_id", "email", mode="before")
    @classmethod
    def empty_is_absent(cls, value):
        if value == "":
            return None
        return value

    @property
    def job_type(self) -> Optional[JobType]:
        return JobType.from_event(self.event)


# ===== DOCUMENT REFERENCES =====

class DocumentVersionReference(CamelModel):
    """Reference to a stored document version."""
    document_id: str
    document_version_id: int


class DocumentKeyReference(CamelModel):
    """Reference to an already-materialized storage key."""
    document_key: str
    file_name: str


DocumentReference = Union[DocumentVersionReference, DocumentKeyReference]


# ===== PAYLOADS =====

class PingPayload(BaseModel):
    """Liveness probe. Any content is accepted and ignored."""

    class Config:
        extra = "allow"


class PdfPreprocessUploadPayload(CamelModel):
    """A pdf upload triggered preprocessing; only the job is recorded."""
    document_id: str
    upload: Literal[True]


class PdfPreprocessInvokePayload(CamelModel):
    """Trigger preprocessing of an existing document version."""
    document_id: str
    document_version_id: int
    upload: Literal[False] = False

    class Config:
        json_schema_extra = {
            "example": {
                "documentId": "doc_123",
                "documentVersionId": 4,
            }
        }


PdfPreprocessPayload = Union[PdfPreprocessUploadPayload, PdfPreprocessInvokePayload]


class PdfExportPayload(CamelModel):
    """Export a pdf with its stored modifications applied."""
    document_id: str
    document_version_id: Optional[int] = None


class PdfPasswordEncryptPayload(CamelModel):
    document_id: str
    document_version_id: int
    password: str = Field(min_length=1)


class PdfRemoveMetadataPayload(CamelModel):
    document_id: str
    document_version_id: int


class DocxSimpleComparePayload(CamelModel):
    """Compare exactly two documents."""
    files: List[DocumentReference] = Field(min_length=2, max_length=2)
    document_name: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "files": [
                    {"documentId": "doc_1", "documentVersionId": 1},
                    {"documentKey": "temp_files/job_1-abc.pdf", "fileName": "draft"},
                ],
            }
        }


class DocxConsolidatePayload(CamelModel):
    """Consolidate the revisions of two or more documents into one."""
    files: List[DocumentReference] = Field(min_length=2)
    document_name: Optional[str] = None


class DocxUploadPayload(CamelModel):
    document_id: str


class CreateTempFilePayload(CamelModel):
    file_type: Literal["pdf", "docx"]


__all__ = [
    "CamelModel",
    "JobType",
    "Job",
    "DocumentVersionReference",
    "DocumentKeyReference",
    "DocumentReference",
    "PingPayload",
    "PdfPreprocessUploadPayload",
    "PdfPreprocessInvokePayload",
    "PdfPreprocessPayload",
    "PdfExportPayload",
    "PdfPasswordEncryptPayload",
    "PdfRemoveMetadataPayload",
    "DocxSimpleComparePayload",
    "DocxConsolidatePayload",
    "DocxUploadPayload",
    "CreateTempFilePayload",
]
