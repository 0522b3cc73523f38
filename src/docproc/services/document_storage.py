"""Client for the document metadata service (internal API)."""

import hashlib
import logging
from typing import Any, Dict, Optional, Type

import aiohttp
from pydantic import BaseModel

from ..schemas.documents import (
    CONTENT_TYPES,
    CreatedDocumentData,
    DocumentData,
    DocumentKeyData,
    DssResponse,
    FileType,
    PdfModificationData,
    UserAccessLevelData,
)
from ..utils.errors import DocumentStorageError

logger = logging.getLogger(__name__)

AUTH_HEADER = "x-document-storage-service-auth-key"
USER_ID_HEADER = "x-document-storage-service-user-id"


class DocumentStorageClient:
    """Thin wrapper over the metadata service endpoints the worker consumes.

    Read endpoints return the service envelope (``DssResponse``) unchanged;
    callers decide how to treat ``error``/missing ``data``. Write endpoints
    raise ``DocumentStorageError`` on any non-success status.
    """

    def __init__(self, session: aiohttp.ClientSession, base_url: str, auth_key: str):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.auth_key = auth_key

    def _headers(self, user_id: Optional[str] = None) -> Dict[str, str]:
        headers = {AUTH_HEADER: self.auth_key}
        if user_id:
            headers[USER_ID_HEADER] = user_id
        return headers

    async def _get(
        self,
        path: str,
        data_model: Type[BaseModel],
        user_id: Optional[str] = None,
    ) -> DssResponse:
        async with self.session.get(
            f"{self.base_url}{path}", headers=self._headers(user_id)
        ) as response:
            body = await response.json(content_type=None)
            status = response.status

        if not isinstance(body, dict):
            return DssResponse[data_model](error=True, message=f"unexpected response (status {status})")
        return DssResponse[data_model].model_validate(body)

    async def get_document(self, document_id: str) -> DssResponse:
        """Latest version of a document."""
        logger.debug("get_document", extra={"document_id": document_id})
        return await self._get(f"/internal/documents/{document_id}", DocumentData)

    async def get_document_version(self, document_id: str, document_version_id: int) -> DssResponse:
        logger.debug(
            "get_document_version",
            extra={"document_id": document_id, "document_version_id": document_version_id},
        )
        return await self._get(
            f"/internal/documents/{document_id}/{document_version_id}", DocumentData
        )

    async def get_document_key(self, document_id: str, document_version_id: int) -> DssResponse:
        """Storage key of a pdf document version."""
        logger.debug(
            "get_document_key",
            extra={"document_id": document_id, "document_version_id": document_version_id},
        )
        return await self._get(
            f"/internal/documents/{document_id}/{document_version_id}/key", DocumentKeyData
        )

    async def get_document_user_access_level(self, document_id: str, user_id: str) -> DssResponse:
        logger.debug("get_document_user_access_level", extra={"document_id": document_id})
        return await self._get(
            f"/internal/documents/{document_id}/access_level",
            UserAccessLevelData,
            user_id=user_id,
        )

    async def get_full_pdf_modification_data(self, document_id: str) -> DssResponse:
        logger.debug("get_full_pdf_modification_data", extra={"document_id": document_id})
        return await self._get(
            f"/internal/documents/{document_id}/full_pdf_modification_data",
            PdfModificationData,
        )

    async def create_document(
        self,
        content: bytes,
        document_name: str,
        owner: str,
        file_type: FileType,
        branched_from_id: Optional[str] = None,
        branched_from_version_id: Optional[int] = None,
    ) -> CreatedDocumentData:
        """Register a new document; the content is uploaded separately to the returned URL."""
        metadata = {"document_name": document_name, "owner": owner, "file_type": file_type}
        logger.debug("create_document", extra=metadata)

        body: Dict[str, Any] = {
            "documentName": document_name,
            "owner": owner,
            "fileType": file_type,
            "sha": hashlib.sha256(content).hexdigest(),
            "isShareable": False,
        }
        if branched_from_id is not None:
            body["branchedFromId"] = branched_from_id
            body["branchedFromVersionId"] = branched_from_version_id

        async with self.session.post(
            f"{self.base_url}/internal/documents",
            json=body,
            headers=self._headers(owner),
        ) as response:
            if response.status != 200:
                logger.error(
                    "unable to create document",
                    extra={**metadata, "status": response.status, "error": await response.text()},
                )
                raise DocumentStorageError("unable to create document")
            result = await response.json(content_type=None)

        return CreatedDocumentData.model_validate(result.get("data") or {})

    async def upload_to_presigned_url(self, url: str, content: bytes, file_type: FileType) -> None:
        async with self.session.put(
            url,
            data=content,
            headers={
                "Content-Type": CONTENT_TYPES[file_type],
                "x-ms-blob-type": "BlockBlob",
            },
        ) as response:
            if response.status not in (200, 201):
                logger.error(
                    "unable to upload document to storage",
                    extra={"status": response.status, "error": await response.text()},
                )
                raise DocumentStorageError("unable to upload document to storage")
