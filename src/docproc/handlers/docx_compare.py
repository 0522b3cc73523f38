"""Docx comparison and consolidation jobs."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..assembler import fetch_compare_files
from ..cache import insert_upload_job
from ..context import WorkerContext
from ..permissions import validate_document_permission
from ..schemas.documents import DocumentMetadata, File
from ..schemas.jobs import (
    DocumentReference,
    DocumentVersionReference,
    DocxConsolidatePayload,
    DocxSimpleComparePayload,
    Job,
    JobType,
)
from ..services.conversion import ServiceResponse
from ..utils.errors import DocxServiceError, PermissionDeniedError
from .common import ensure_success, job_metadata

logger = logging.getLogger(__name__)

DEFAULT_COMPARE_NAME = "Comparison"
DEFAULT_CONSOLIDATE_NAME = "Consolidation"


async def validate_all_permissions(ctx: WorkerContext, job: Job, refs: List[DocumentReference]) -> None:
    """Every referenced document must be accessible before any is fetched."""
    if not job.user_id:
        raise PermissionDeniedError("no user provided for compare job")
    document_ids = {ref.document_id for ref in refs if isinstance(ref, DocumentVersionReference)}
    results = await asyncio.gather(
        *(validate_document_permission(ctx, document_id, job.user_id) for document_id in sorted(document_ids)),
        return_exceptions=True,
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result


async def persist_result_document(ctx: WorkerContext, job: Job, job_type: JobType, file: File) -> DocumentMetadata:
    """Create the result document, link it to the job, then upload its content.

    The job row is written before the upload so the upload pipeline can
    always find the job the document belongs to.
    """
    created = await ctx.document_storage.create_document(
        file.content,
        document_name=file.name,
        owner=job.user_id,
        file_type="docx",
    )
    document = created.document_metadata
    await insert_upload_job(ctx, job.job_id, job_type, document.document_id)
    await ctx.document_storage.upload_to_presigned_url(created.presigned_url, file.content, "docx")
    logger.info("persisted result document", extra=job_metadata(job, document_id=document.document_id))
    return document


async def count_revisions(ctx: WorkerContext, job: Job, file: File) -> Dict[str, int]:
    result = await ctx.docx_service.count_revisions(file)
    ensure_success(result, DocxServiceError, job, "count revisions")
    counts = result.json()
    return {"insertions": int(counts["insertions"]), "deletions": int(counts["deletions"])}


async def _run_compare(
    ctx: WorkerContext,
    job: Job,
    job_type: JobType,
    refs: List[DocumentReference],
    document_name: Optional[str],
    call: Callable[[List[File]], Awaitable[ServiceResponse]],
    action: str,
) -> Dict[str, Any]:
    await validate_all_permissions(ctx, job, refs)

    files = await fetch_compare_files(ctx, job.job_id, job.user_id, job_type, refs)
    content = ensure_success(await call(files), DocxServiceError, job, action)
    result_file = File(content=content, name=document_name, type="docx")

    # Both must succeed; the first failure cancels the other.
    tasks = [
        asyncio.ensure_future(persist_result_document(ctx, job, job_type, result_file)),
        asyncio.ensure_future(count_revisions(ctx, job, result_file)),
    ]
    try:
        document, revisions = await asyncio.gather(*tasks)
    except Exception:
        for task in tasks:
            task.cancel()
        raise
    return {"documentId": document.document_id, **revisions}


async def handle_docx_simple_compare(
    ctx: WorkerContext,
    job: Job,
    payload: DocxSimpleComparePayload,
) -> Dict[str, Any]:
    return await _run_compare(
        ctx,
        job,
        JobType.DOCX_SIMPLE_COMPARE,
        payload.files,
        payload.document_name or DEFAULT_COMPARE_NAME,
        ctx.docx_service.simple_compare,
        "compare documents",
    )


async def handle_docx_consolidate(
    ctx: WorkerContext,
    job: Job,
    payload: DocxConsolidatePayload,
) -> Dict[str, Any]:
    return await _run_compare(
        ctx,
        job,
        JobType.DOCX_CONSOLIDATE,
        payload.files,
        payload.document_name or DEFAULT_CONSOLIDATE_NAME,
        ctx.docx_service.consolidate,
        "consolidate documents",
    )
