"""Upload bookkeeping and scratch file creation."""

import logging
from typing import Any, Dict

from ..cache import insert_upload_job
from ..context import WorkerContext
from ..permissions import validate_document_permission
from ..schemas.jobs import CreateTempFilePayload, DocxUploadPayload, Job, JobType
from .common import job_metadata, temp_file_key

logger = logging.getLogger(__name__)


async def handle_docx_upload(
    ctx: WorkerContext,
    job: Job,
    payload: DocxUploadPayload,
) -> Dict[str, Any]:
    """Link an uploaded docx to this job so its unpacking can be reported back."""
    await validate_document_permission(ctx, payload.document_id, job.user_id)
    await insert_upload_job(ctx, job.job_id, JobType.DOCX_UPLOAD, payload.document_id)
    return {"documentId": payload.document_id}


async def handle_create_temp_file(
    ctx: WorkerContext,
    job: Job,
    payload: CreateTempFilePayload,
) -> Dict[str, Any]:
    """Reserve a scratch key and hand out a signed upload URL for it."""
    key = temp_file_key(job.job_id, payload.file_type)
    upload_url = ctx.temp_store.generate_upload_url(key, ctx.settings.PRESIGNED_URL_EXPIRY_SECONDS)
    logger.info("created temp file", extra=job_metadata(job, key=key))
    return {"key": key, "uploadUrl": upload_url}
