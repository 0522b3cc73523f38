from .base import Base, TimestampMixin
from .job import (
    User,
    DocumentProcessResult,
    JobToDocumentProcessResult,
    UploadJob,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "DocumentProcessResult",
    "JobToDocumentProcessResult",
    "UploadJob",
]
