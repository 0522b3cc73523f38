"""Document processing worker - job stream consumer, pipelines and clients."""

from .config import Settings, settings, get_settings
from .context import WorkerContext, build_context
from .dispatcher import JobDispatcher, JobRoute, JOB_ROUTES
from .consumer import JobConsumer, decode_frame
from .publisher import ResponsePublisher
from .schemas import Job, JobType, File
from .utils import (
    setup_logging,
    DocumentProcessingError,
    PermanentError,
    PdfServiceError,
    DocxServiceError,
    MissingContentError,
    InvalidResponseData,
)

__version__ = "0.1.0"
__all__ = [
    "Settings",
    "settings",
    "get_settings",
    "WorkerContext",
    "build_context",
    "JobDispatcher",
    "JobRoute",
    "JOB_ROUTES",
    "JobConsumer",
    "decode_frame",
    "ResponsePublisher",
    "Job",
    "JobType",
    "File",
    "setup_logging",
    "DocumentProcessingError",
    "PermanentError",
    "PdfServiceError",
    "DocxServiceError",
    "MissingContentError",
    "InvalidResponseData",
]
