from .jobs import (
    JobType,
    Job,
    DocumentVersionReference,
    DocumentKeyReference,
    DocumentReference,
    PingPayload,
    PdfPreprocessUploadPayload,
    PdfPreprocessInvokePayload,
    PdfPreprocessPayload,
    PdfExportPayload,
    PdfPasswordEncryptPayload,
    PdfRemoveMetadataPayload,
    DocxSimpleComparePayload,
    DocxConsolidatePayload,
    DocxUploadPayload,
    CreateTempFilePayload,
)
from .documents import (
    BomPart,
    DocumentMetadata,
    DssResponse,
    File,
)
from .responses import (
    RESPONSE_SCHEMAS,
    JobResponse,
    JobErrorResponse,
)

__all__ = [
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
    "BomPart",
    "DocumentMetadata",
    "DssResponse",
    "File",
    "RESPONSE_SCHEMAS",
    "JobResponse",
    "JobErrorResponse",
]
