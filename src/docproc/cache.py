"""Idempotency cache of completed per-document results."""

import logging

from sqlalchemy import select

from .context import WorkerContext
from .models import DocumentProcessResult, JobToDocumentProcessResult, UploadJob
from .schemas.jobs import JobType

logger = logging.getLogger(__name__)


async def check_for_cached_result(
    ctx: WorkerContext,
    document_id: str,
    job_type: JobType,
    job_id: str,
) -> bool:
    """Link ``job_id`` to an existing result for ``(document_id, job_type)``.

    Returns:
        True when a result exists and the link row was created. False on a
        miss or on any database error; the cache is only an optimization.
    """
    metadata = {"document_id": document_id, "job_type": job_type.value, "job_id": job_id}
    try:
        async with ctx.session_factory() as session:
            stmt = (
                select(DocumentProcessResult.id)
                .where(DocumentProcessResult.document_id == document_id)
                .where(DocumentProcessResult.job_type == job_type.value)
                .order_by(DocumentProcessResult.id.desc())
                .limit(1)
            )
            result_id = (await session.execute(stmt)).scalar_one_or_none()
            if result_id is None:
                return False

            session.add(
                JobToDocumentProcessResult(job_id=job_id, document_process_result_id=result_id)
            )
            await session.commit()
    except Exception as e:
        logger.warning(
            "cache lookup failed, treating as miss",
            extra={**metadata, "error": str(e)},
        )
        return False

    logger.info("found cached result", extra={**metadata, "result_id": result_id})
    return True


async def insert_upload_job(
    ctx: WorkerContext,
    job_id: str,
    job_type: JobType,
    document_id: str,
) -> None:
    """Record the job that a document upload belongs to.

    Errors propagate: without this row the upload can never be reported back.
    """
    async with ctx.session_factory() as session:
        session.add(UploadJob(job_id=job_id, job_type=job_type.value, document_id=document_id))
        await session.commit()
    logger.debug(
        "inserted upload job",
        extra={"job_id": job_id, "job_type": job_type.value, "document_id": document_id},
    )
