"""Reassembly of documents from content-addressed storage.

A pdf is a single object stored at ``{owner}/{documentId}/{documentVersionId}.pdf``.
A docx is a bill of materials (BOM): archive paths mapped to content hashes,
each hash stored as its own object. Every object a request needs is fetched
in parallel, and the request fails as a whole if any of them is missing.
"""

import asyncio
import io
import logging
import zipfile
from typing import Any, Dict, Iterable, List, Optional, Union

from .context import WorkerContext
from .schemas.documents import BomPart, DocumentMetadata, File
from .schemas.jobs import DocumentKeyReference, DocumentReference, JobType
from .services.storage import ContentStore
from .utils.errors import DocumentNotFound, MissingContentError, PdfServiceError, PermissionDeniedError

logger = logging.getLogger(__name__)

TEMP_FILES_PREFIX = "temp_files/"


def format_pdf_key(owner: str, document_id: str, document_version_id: int) -> str:
    return f"{owner}/{document_id}/{document_version_id}.pdf"


def pdf_key_for(document: DocumentMetadata) -> str:
    return format_pdf_key(document.owner, document.document_id, document.document_version_id)


def content_keys(document: DocumentMetadata) -> List[str]:
    """Every storage key needed to rebuild ``document``."""
    if document.file_type == "docx":
        return [part.sha for part in document.document_bom]
    return [pdf_key_for(document)]


def build_docx_archive(bom: List[BomPart], contents: Dict[str, bytes]) -> bytes:
    """Write each BOM entry's content at its archive path."""
    missing = [part.sha for part in bom if part.sha not in contents]
    if missing:
        raise MissingContentError(missing)

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for part in bom:
            archive.writestr(part.path, contents[part.sha])
    return buffer.getvalue()


def store_for_key(ctx: WorkerContext, key: str) -> ContentStore:
    if key.startswith(TEMP_FILES_PREFIX):
        return ctx.temp_store
    return ctx.document_store


async def download_all(
    ctx: WorkerContext,
    keys: Iterable[str],
    log_metadata: Optional[Dict[str, Any]] = None,
) -> Dict[str, bytes]:
    """Fetch every distinct key in parallel.

    Raises:
        MissingContentError: naming every key that could not be found
    """
    unique_keys = sorted(set(keys))
    results = await asyncio.gather(
        *(store_for_key(ctx, key).get_object(key) for key in unique_keys)
    )
    missing = [key for key, data in zip(unique_keys, results) if not data]
    if missing:
        logger.error(
            "failed to download all document parts",
            extra={**(log_metadata or {}), "failed": missing},
        )
        raise MissingContentError(missing)
    return dict(zip(unique_keys, results))


async def get_document_metadata(
    ctx: WorkerContext,
    document_id: str,
    document_version_id: Optional[int] = None,
    log_metadata: Optional[Dict[str, Any]] = None,
) -> DocumentMetadata:
    """Resolve metadata for a document version (latest when no version is given)."""
    if document_version_id is None:
        response = await ctx.document_storage.get_document(document_id)
    else:
        response = await ctx.document_storage.get_document_version(document_id, document_version_id)

    metadata = {
        **(log_metadata or {}),
        "document_id": document_id,
        "document_version_id": document_version_id,
    }
    if response.error:
        logger.error(
            "unable to get document version",
            extra={**metadata, "error_message": response.message},
        )
        raise DocumentNotFound("unable to get document version")
    if not response.data:
        logger.error("document data is empty", extra=metadata)
        raise DocumentNotFound("document data is empty")
    return response.data.document_metadata


def file_from_contents(document: DocumentMetadata, contents: Dict[str, bytes], name: str) -> File:
    if document.file_type == "docx":
        return File(content=build_docx_archive(document.document_bom, contents), name=name, type="docx")
    return File(content=contents[pdf_key_for(document)], name=name, type="pdf")


async def fetch_file(ctx: WorkerContext, document_id: str, document_version_id: int) -> File:
    """Given a stored document version, rebuild it as a ``File``.

    Raises:
        DocumentNotFound: metadata could not be resolved
        MissingContentError: any part is missing from storage
    """
    log_metadata = {"document_id": document_id, "document_version_id": document_version_id}
    document = await get_document_metadata(ctx, document_id, document_version_id)
    contents = await download_all(ctx, content_keys(document), log_metadata)
    return file_from_contents(document, contents, document.document_name)


async def _convert_to_docx(ctx: WorkerContext, pdf: File, job_type: JobType, log_metadata: Dict[str, Any]) -> bytes:
    result = await ctx.pdf_service.convert(pdf, "docx")
    if not result.ok:
        logger.error(
            "failed to convert pdf to docx for compare",
            extra={**log_metadata, "status": result.status, "response": result.text()},
        )
        raise PdfServiceError(job_type.value, status=result.status)
    return result.body


async def fetch_compare_files(
    ctx: WorkerContext,
    job_id: str,
    user_id: Optional[str],
    job_type: JobType,
    refs: List[DocumentReference],
) -> List[File]:
    """Fetch every compare input as docx, converting pdf inputs.

    Output names are suffixed with the 1-based input position.
    """
    log_metadata = {
        "job_id": job_id,
        "user_id": user_id,
        "job_type": job_type.value,
        "files": [ref.model_dump(by_alias=True) for ref in refs],
    }

    # stored documents are only reachable by id, after a permission check
    for ref in refs:
        if isinstance(ref, DocumentKeyReference) and not ref.document_key.startswith(TEMP_FILES_PREFIX):
            logger.error(
                "document key is not a temp file",
                extra={**log_metadata, "document_key": ref.document_key},
            )
            raise PermissionDeniedError(f"document key {ref.document_key} is not a temp file")

    async def resolve(ref: DocumentReference) -> Union[DocumentMetadata, DocumentKeyReference]:
        if isinstance(ref, DocumentKeyReference):
            return ref
        return await get_document_metadata(
            ctx, ref.document_id, ref.document_version_id, log_metadata
        )

    documents = await asyncio.gather(*(resolve(ref) for ref in refs))

    keys: List[str] = []
    for document in documents:
        if isinstance(document, DocumentKeyReference):
            keys.append(document.document_key)
        else:
            keys.extend(content_keys(document))

    contents = await download_all(ctx, keys, log_metadata)

    files: List[File] = []
    for index, document in enumerate(documents, start=1):
        if isinstance(document, DocumentKeyReference):
            name = f"{document.file_name}-{index}"
            data = contents[document.document_key]
            if document.document_key.endswith(".pdf"):
                data = await _convert_to_docx(
                    ctx, File(content=data, name=document.file_name, type="pdf"), job_type, log_metadata
                )
            files.append(File(content=data, name=name, type="docx"))
            continue

        name = f"{document.document_name}-{index}"
        file = file_from_contents(document, contents, document.document_name)
        if file.type == "pdf":
            files.append(
                File(content=await _convert_to_docx(ctx, file, job_type, log_metadata), name=name, type="docx")
            )
        else:
            files.append(File(content=file.content, name=name, type="docx"))

    return files
