"""Pdf export: the stored pdf with its modification data merged in."""

import logging
from typing import Any, Dict

from ..assembler import fetch_file, get_document_metadata
from ..context import WorkerContext
from ..permissions import validate_document_permission
from ..schemas.jobs import Job, PdfExportPayload
from ..utils.errors import DocumentNotFound, PdfServiceError
from .common import ensure_success, job_metadata, require_pdf, upload_temp_file

logger = logging.getLogger(__name__)


async def handle_pdf_export(
    ctx: WorkerContext,
    job: Job,
    payload: PdfExportPayload,
) -> Dict[str, Any]:
    metadata = job_metadata(job, document_id=payload.document_id)
    await validate_document_permission(ctx, payload.document_id, job.user_id)

    document_version_id = payload.document_version_id
    if document_version_id is None:
        latest = await get_document_metadata(ctx, payload.document_id, log_metadata=metadata)
        document_version_id = latest.document_version_id

    file = await fetch_file(ctx, payload.document_id, document_version_id)
    require_pdf(file, job)

    response = await ctx.document_storage.get_full_pdf_modification_data(payload.document_id)
    if response.error:
        logger.error(
            "unable to get pdf modification data",
            extra={**metadata, "error_message": response.message},
        )
        raise DocumentNotFound("unable to get pdf modification data")

    modification_data = response.data.modification_data if response.data else None
    content = file.content
    if modification_data:
        result = await ctx.pdf_service.modify(file, modification_data)
        content = ensure_success(result, PdfServiceError, job, "apply pdf modification data")
    else:
        logger.debug("no modification data, exporting original pdf", extra=metadata)

    _, url = await upload_temp_file(ctx, job, content, "pdf")
    return {"resultUrl": url}
