"""Error definitions for the document processing worker."""

from typing import Iterable, Optional


class DocumentProcessingError(Exception):
    """Base exception for the worker."""
    pass


class PermanentError(DocumentProcessingError):
    """Error that terminates a job. The worker never retries."""
    pass


class UnsupportedJobError(PermanentError):
    """No route is registered for the job event."""

    def __init__(self, event: str):
        super().__init__("event not supported")
        self.event = event


class InvalidJobPayload(PermanentError):
    """Job data failed validation for its job type."""
    pass


class PermissionDeniedError(PermanentError):
    """Acting user may not access the document."""
    pass


class DocumentNotFound(PermanentError):
    """Document metadata could not be resolved."""
    pass


class DocumentStorageError(PermanentError):
    """Document metadata service rejected a write."""
    pass


class MissingContentError(PermanentError):
    """One or more content-addressed parts were not found in storage."""

    def __init__(self, keys: Iterable[str]):
        self.keys = sorted(keys)
        super().__init__(f"Failed to download all document parts: {', '.join(self.keys)}")


class ServiceError(PermanentError):
    """Downstream transformation service returned a non-success status."""

    service = "service"

    def __init__(self, job_type: str, status: Optional[int] = None, detail: Optional[str] = None):
        self.job_type = job_type
        self.status = status
        self.detail = detail
        message = f"{self.service} error during {job_type}"
        if status is not None:
            message = f"{message} (status {status})"
        super().__init__(message)


class PdfServiceError(ServiceError):
    """Pdf service call failed."""
    service = "pdf service"


class DocxServiceError(ServiceError):
    """Docx service call failed."""
    service = "docx service"


class InvalidResponseData(DocumentProcessingError):
    """Outbound response does not match the schema for its job type."""

    def __init__(self, detail: str = ""):
        super().__init__("invalid response data")
        self.detail = detail
