"""Outbound response definitions and the per-job-type response registry."""

from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, Field

from .jobs import CamelModel, JobType


class PongData(CamelModel):
    pong: bool


class PdfPreprocessResponseData(CamelModel):
    document_id: str
    cached: bool = False


class ResultUrlData(CamelModel):
    """Signed retrieval URL of a scratch output."""
    result_url: str


class CompareResponseData(CamelModel):
    """Identity of the persisted result document and its revision counts."""
    document_id: str
    insertions: int = Field(ge=0)
    deletions: int = Field(ge=0)


class DocumentIdData(CamelModel):
    document_id: str


class TempFileData(CamelModel):
    key: str
    upload_url: str


RESPONSE_SCHEMAS: Dict[JobType, Type[BaseModel]] = {
    JobType.PING: PongData,
    JobType.PDF_PREPROCESS: PdfPreprocessResponseData,
    JobType.PDF_EXPORT: ResultUrlData,
    JobType.PDF_PASSWORD_ENCRYPT: ResultUrlData,
    JobType.PDF_REMOVE_METADATA: ResultUrlData,
    JobType.DOCX_SIMPLE_COMPARE: CompareResponseData,
    JobType.DOCX_CONSOLIDATE: CompareResponseData,
    JobType.CREATE_TEMP_FILE: TempFileData,
    JobType.DOCX_UPLOAD: DocumentIdData,
}


class JobResponse(CamelModel):
    """Envelope placed on the outbound response channel."""
    job_id: str = Field(min_length=1)
    job_type: str = Field(min_length=1)
    data: Optional[Dict[str, Any]] = None
    error: Optional[bool] = None
    message: Optional[str] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class JobErrorResponse(JobResponse):
    """Error responses carry no data and always a message."""
    data: None = None
    error: bool = True
    message: str


__all__ = [
    "PongData",
    "PdfPreprocessResponseData",
    "ResultUrlData",
    "CompareResponseData",
    "DocumentIdData",
    "TempFileData",
    "RESPONSE_SCHEMAS",
    "JobResponse",
    "JobErrorResponse",
]
