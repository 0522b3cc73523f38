"""Password encryption and metadata removal for stored pdfs."""

from typing import Any, Dict

from ..assembler import fetch_file
from ..context import WorkerContext
from ..permissions import validate_document_permission
from ..schemas.jobs import Job, PdfPasswordEncryptPayload, PdfRemoveMetadataPayload
from ..utils.errors import PdfServiceError
from .common import ensure_success, require_pdf, upload_temp_file


async def handle_pdf_password_encrypt(
    ctx: WorkerContext,
    job: Job,
    payload: PdfPasswordEncryptPayload,
) -> Dict[str, Any]:
    await validate_document_permission(ctx, payload.document_id, job.user_id)
    file = await fetch_file(ctx, payload.document_id, payload.document_version_id)
    require_pdf(file, job)

    result = await ctx.pdf_service.password_encrypt(file, payload.password)
    content = ensure_success(result, PdfServiceError, job, "encrypt pdf")

    _, url = await upload_temp_file(ctx, job, content, "pdf")
    return {"resultUrl": url}


async def handle_pdf_remove_metadata(
    ctx: WorkerContext,
    job: Job,
    payload: PdfRemoveMetadataPayload,
) -> Dict[str, Any]:
    await validate_document_permission(ctx, payload.document_id, job.user_id)
    file = await fetch_file(ctx, payload.document_id, payload.document_version_id)
    require_pdf(file, job)

    result = await ctx.pdf_service.remove_metadata(file)
    content = ensure_success(result, PdfServiceError, job, "remove pdf metadata")

    _, url = await upload_temp_file(ctx, job, content, "pdf")
    return {"resultUrl": url}
