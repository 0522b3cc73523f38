"""Helpers shared by the job pipelines."""

import logging
from typing import Any, Dict, Tuple, Type
from uuid import uuid4

from ..assembler import TEMP_FILES_PREFIX
from ..context import WorkerContext
from ..schemas.documents import CONTENT_TYPES, File, FileType
from ..schemas.jobs import Job
from ..services.conversion import ServiceResponse
from ..utils.errors import InvalidJobPayload, ServiceError

logger = logging.getLogger(__name__)


def job_metadata(job: Job, **extra: Any) -> Dict[str, Any]:
    return {"job_id": job.job_id, "job_type": job.event, "user_id": job.user_id, **extra}


def temp_file_key(job_id: str, file_type: FileType) -> str:
    return f"{TEMP_FILES_PREFIX}{job_id}-{uuid4().hex}.{file_type}"


def ensure_success(
    result: ServiceResponse,
    error_class: Type[ServiceError],
    job: Job,
    action: str,
) -> bytes:
    """Return the body of a successful call or raise the typed service error."""
    if not result.ok:
        logger.error(
            f"failed to {action}",
            extra=job_metadata(job, status=result.status, response=result.text()),
        )
        raise error_class(job.event, status=result.status, detail=result.text())
    return result.body


async def upload_temp_file(
    ctx: WorkerContext,
    job: Job,
    content: bytes,
    file_type: FileType,
) -> Tuple[str, str]:
    """Store a scratch output and return its key and signed retrieval URL."""
    key = temp_file_key(job.job_id, file_type)
    await ctx.temp_store.put_object(key, content, CONTENT_TYPES[file_type])
    url = ctx.temp_store.generate_download_url(key, ctx.settings.PRESIGNED_URL_EXPIRY_SECONDS)
    logger.info("uploaded result file", extra=job_metadata(job, key=key))
    return key, url


def require_pdf(file: File, job: Job) -> None:
    if file.type != "pdf":
        raise InvalidJobPayload(f"{job.event} requires a pdf document, got {file.type}")
