from .errors import (
    DocumentProcessingError,
    PermanentError,
    UnsupportedJobError,
    InvalidJobPayload,
    PermissionDeniedError,
    DocumentNotFound,
    DocumentStorageError,
    MissingContentError,
    ServiceError,
    PdfServiceError,
    DocxServiceError,
    InvalidResponseData,
)
from .logging import setup_logging, JSONFormatter
from .redis import get_redis_client, close_redis

__all__ = [
    "DocumentProcessingError",
    "PermanentError",
    "UnsupportedJobError",
    "InvalidJobPayload",
    "PermissionDeniedError",
    "DocumentNotFound",
    "DocumentStorageError",
    "MissingContentError",
    "ServiceError",
    "PdfServiceError",
    "DocxServiceError",
    "InvalidResponseData",
    "setup_logging",
    "JSONFormatter",
    "get_redis_client",
    "close_redis",
]
