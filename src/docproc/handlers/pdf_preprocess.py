"""Pdf preprocessing jobs."""

import logging
from typing import Any, Dict, Optional

from ..cache import check_for_cached_result, insert_upload_job
from ..context import WorkerContext
from ..permissions import validate_document_permission
from ..schemas.jobs import (
    Job,
    JobType,
    PdfPreprocessInvokePayload,
    PdfPreprocessPayload,
    PdfPreprocessUploadPayload,
)
from ..utils.errors import DocumentNotFound
from .common import job_metadata

logger = logging.getLogger(__name__)


async def handle_pdf_preprocess(
    ctx: WorkerContext,
    job: Job,
    payload: PdfPreprocessPayload,
) -> Optional[Dict[str, Any]]:
    if isinstance(payload, PdfPreprocessUploadPayload):
        return await _record_upload(ctx, job, payload)
    return await _invoke_preprocess(ctx, job, payload)


async def _record_upload(
    ctx: WorkerContext,
    job: Job,
    payload: PdfPreprocessUploadPayload,
) -> Dict[str, Any]:
    """The upload pipeline preprocesses on its own; remember which job it belongs to."""
    await insert_upload_job(ctx, job.job_id, JobType.PDF_PREPROCESS, payload.document_id)
    return {"documentId": payload.document_id}


async def _invoke_preprocess(
    ctx: WorkerContext,
    job: Job,
    payload: PdfPreprocessInvokePayload,
) -> Optional[Dict[str, Any]]:
    """Hand preprocessing to the preprocess worker.

    Returns None once dispatched: the preprocess worker reports completion.
    """
    metadata = job_metadata(
        job,
        document_id=payload.document_id,
        document_version_id=payload.document_version_id,
    )
    await validate_document_permission(ctx, payload.document_id, job.user_id)

    if await check_for_cached_result(ctx, payload.document_id, JobType.PDF_PREPROCESS, job.job_id):
        logger.info("preprocess result already exists", extra=metadata)
        return {"documentId": payload.document_id, "cached": True}

    response = await ctx.document_storage.get_document_key(
        payload.document_id, payload.document_version_id
    )
    if response.error or not response.data:
        logger.error(
            "unable to get document key",
            extra={**metadata, "error_message": response.message},
        )
        raise DocumentNotFound("unable to get document key")

    await ctx.preprocess_invoker.trigger(
        job.job_id,
        payload.document_id,
        payload.document_version_id,
        response.data.key,
    )
    return None
