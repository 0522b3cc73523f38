"""Downstream collaborator clients."""

from .storage import ContentStore
from .document_storage import DocumentStorageClient
from .conversion import ServiceResponse, PdfServiceClient, DocxServiceClient
from .invocation import PreprocessInvoker

__all__ = [
    "ContentStore",
    "DocumentStorageClient",
    "ServiceResponse",
    "PdfServiceClient",
    "DocxServiceClient",
    "PreprocessInvoker",
]
