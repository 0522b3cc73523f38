"""Document metadata and assembled file definitions."""

from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, model_validator

from .jobs import CamelModel

FileType = Literal["pdf", "docx"]

T = TypeVar("T")


class BomPart(CamelModel):
    """One archive path mapped to its content-addressed key."""
    path: str
    sha: str


class DocumentMetadata(CamelModel):
    document_id: str
    document_version_id: int
    document_name: str
    owner: str
    file_type: FileType
    document_bom: Optional[List[BomPart]] = None

    @model_validator(mode="after")
    def check_bom(self):
        if self.file_type != "docx":
            return self
        if not self.document_bom:
            raise ValueError(f"docx document {self.document_id} has no bill of materials")
        seen = set()
        for part in self.document_bom:
            if part.path in seen:
                raise ValueError(f"duplicate bill of materials path: {part.path}")
            seen.add(part.path)
        return self


class DssResponse(BaseModel, Generic[T]):
    """Envelope returned by every document metadata service endpoint."""
    error: bool = False
    message: Optional[str] = None
    data: Optional[T] = None


class DocumentData(CamelModel):
    document_metadata: DocumentMetadata


class DocumentKeyData(CamelModel):
    key: str


class UserAccessLevelData(CamelModel):
    user_access_level: Optional[str] = None


class PdfModificationData(CamelModel):
    modification_data: Optional[Dict[str, Any]] = None


class CreatedDocumentData(CamelModel):
    document_metadata: DocumentMetadata
    presigned_url: str


@dataclass(frozen=True)
class File:
    """A fully assembled document ready for a downstream service."""
    content: bytes
    name: str
    type: FileType

    @property
    def filename(self) -> str:
        return f"{self.name}.{self.type}"

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES[self.type]


CONTENT_TYPES = {
    "pdf": "application/pdf",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


__all__ = [
    "FileType",
    "BomPart",
    "DocumentMetadata",
    "DssResponse",
    "DocumentData",
    "DocumentKeyData",
    "UserAccessLevelData",
    "PdfModificationData",
    "CreatedDocumentData",
    "File",
    "CONTENT_TYPES",
]
