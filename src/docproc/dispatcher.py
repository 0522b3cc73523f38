"""Routing of decoded jobs to their pipelines.

Each job runs as its own asyncio task. ``handle_job`` only routes and
launches, so the inbound stream never waits on a database or network call.
The task wrapper publishes exactly one terminal response for the job
(success or error), except when a pipeline hands completion to another
worker by returning ``None``.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from pydantic import TypeAdapter, ValidationError
from sqlalchemy import select

from .context import WorkerContext
from .handlers import (
    handle_create_temp_file,
    handle_docx_consolidate,
    handle_docx_simple_compare,
    handle_docx_upload,
    handle_pdf_export,
    handle_pdf_password_encrypt,
    handle_pdf_preprocess,
    handle_pdf_remove_metadata,
)
from .models import User
from .schemas.jobs import (
    CreateTempFilePayload,
    DocxConsolidatePayload,
    DocxSimpleComparePayload,
    DocxUploadPayload,
    Job,
    JobType,
    PdfExportPayload,
    PdfPasswordEncryptPayload,
    PdfPreprocessPayload,
    PdfRemoveMetadataPayload,
)
from .utils.errors import DocumentProcessingError, InvalidJobPayload, UnsupportedJobError

logger = logging.getLogger(__name__)

Handler = Callable[[WorkerContext, Job, Any], Awaitable[Optional[Dict[str, Any]]]]

REDACTED_FIELDS = {"password"}


@dataclass(frozen=True)
class JobRoute:
    """Payload type and pipeline for one job type."""
    payload_type: Any
    handler: Handler

    def parse(self, data: Any) -> Any:
        """Validate raw job data into the typed payload.

        Raises:
            InvalidJobPayload: data does not match the payload type
        """
        try:
            return TypeAdapter(self.payload_type).validate_python(data)
        except ValidationError as e:
            # input values are left out, payloads can carry passwords
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc']) or 'data'}: {error['msg']}"
                for error in e.errors(include_input=False)
            )
            raise InvalidJobPayload(f"invalid job data: {details}") from e


JOB_ROUTES: Dict[JobType, JobRoute] = {
    JobType.PDF_PREPROCESS: JobRoute(PdfPreprocessPayload, handle_pdf_preprocess),
    JobType.PDF_EXPORT: JobRoute(PdfExportPayload, handle_pdf_export),
    JobType.PDF_PASSWORD_ENCRYPT: JobRoute(PdfPasswordEncryptPayload, handle_pdf_password_encrypt),
    JobType.PDF_REMOVE_METADATA: JobRoute(PdfRemoveMetadataPayload, handle_pdf_remove_metadata),
    JobType.DOCX_SIMPLE_COMPARE: JobRoute(DocxSimpleComparePayload, handle_docx_simple_compare),
    JobType.DOCX_CONSOLIDATE: JobRoute(DocxConsolidatePayload, handle_docx_consolidate),
    JobType.DOCX_UPLOAD: JobRoute(DocxUploadPayload, handle_docx_upload),
    JobType.CREATE_TEMP_FILE: JobRoute(CreateTempFilePayload, handle_create_temp_file),
}

_unrouted = set(JobType) - set(JOB_ROUTES) - {JobType.PING}
if _unrouted:
    raise RuntimeError(f"job types without a route: {sorted(t.value for t in _unrouted)}")


def redact(data: Any) -> Any:
    if isinstance(data, dict):
        return {
            key: "***" if key in REDACTED_FIELDS else redact(value)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact(item) for item in data]
    return data


async def lookup_user_id(ctx: WorkerContext, email: str) -> Optional[str]:
    async with ctx.session_factory() as session:
        stmt = select(User.id).where(User.email == email)
        return (await session.execute(stmt)).scalar_one_or_none()


class JobDispatcher:
    """Validate, route and run jobs without blocking the inbound stream."""

    def __init__(self, ctx: WorkerContext, routes: Optional[Dict[JobType, JobRoute]] = None):
        self.ctx = ctx
        self.routes = JOB_ROUTES if routes is None else routes
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def _spawn(self, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def handle_job(self, job: Job) -> None:
        """Launch ``job`` and return without awaiting any downstream call.

        Never raises; failures become an error response.
        """
        try:
            if job.event == JobType.PING.value:
                self._spawn(self._pong(job))
                return

            job_type = job.job_type
            route = self.routes.get(job_type) if job_type is not None else None
            if route is None:
                raise UnsupportedJobError(job.event)

            self._spawn(
                self.ctx.publisher.send_ws_response(job.job_id, "started", f"{job.event} started")
            )
            self._spawn(self._run(job, route))
        except Exception as e:
            self._spawn(self.handle_catch_error(job, e))

    async def _pong(self, job: Job) -> None:
        try:
            await self.ctx.publisher.send_response(job.event, job.job_id, data={"pong": True})
        except Exception as e:
            logger.error("unable to answer ping", extra={"job_id": job.job_id, "error": str(e)})

    async def _resolve_user(self, job: Job) -> None:
        """Email, when it resolves to a known user, takes precedence over userId."""
        if not job.email:
            return
        try:
            user_id = await lookup_user_id(self.ctx, job.email)
        except Exception as e:
            logger.warning(
                "unable to look up user by email",
                extra={"job_id": job.job_id, "job_type": job.event, "error": str(e)},
            )
            return
        if user_id:
            job.user_id = user_id

    async def _run(self, job: Job, route: JobRoute) -> None:
        started = time.monotonic()
        try:
            await self._resolve_user(job)
            payload = route.parse(job.data)

            logger.info(f"[{job.event}] Starting job", extra={"job_id": job.job_id, "user_id": job.user_id})
            data = await route.handler(self.ctx, job, payload)
            if data is not None:
                await self.ctx.publisher.send_response(job.event, job.job_id, data=data)
        except Exception as e:
            await self.handle_catch_error(job, e)
        finally:
            logger.info(
                f"[{job.event}] Job finished",
                extra={
                    "job_id": job.job_id,
                    "duration_ms": round((time.monotonic() - started) * 1000),
                },
            )

    async def handle_catch_error(self, job: Job, error: BaseException) -> None:
        """Log full job context and publish the error response."""
        logger.error(
            f"[{job.event}] Job failed: {error}",
            extra={
                "job_id": job.job_id,
                "job_type": job.event,
                "user_id": job.user_id,
                "data": redact(job.data),
                "error_type": type(error).__name__,
            },
            exc_info=None if isinstance(error, DocumentProcessingError) else error,
        )
        if isinstance(error, DocumentProcessingError):
            message = str(error)
        else:
            message = f"unexpected error ({type(error).__name__})"
        try:
            await self.ctx.publisher.send_response(job.event, job.job_id, error=True, message=message)
        except Exception as e:
            logger.critical(
                "unable to publish error response",
                extra={"job_id": job.job_id, "job_type": job.event, "error": str(e)},
            )

    async def drain(self) -> None:
        """Wait until every in-flight job has finished."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight), return_exceptions=True)
