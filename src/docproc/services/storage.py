from datetime import datetime, timedelta, timezone
from typing import Dict, Optional
import logging
from azure.core.exceptions import ResourceNotFoundError
from azure.storage.blob import (
    BlobSasPermissions,
    ContentSettings,
    generate_blob_sas,
)
from azure.storage.blob.aio import BlobServiceClient

__all__ = ["ContentStore", "parse_connection_string"]

logger = logging.getLogger(__name__)


def parse_connection_string(connection_string: str) -> Dict[str, str]:
    """Parse connection string to extract account name and key for SAS token generation"""
    account_name = ""
    account_key = ""

    for part in connection_string.split(";"):
        if part.startswith("AccountName="):
            account_name = part[len("AccountName=") :]
        elif part.startswith("AccountKey="):
            account_key = part[len("AccountKey=") :]

    if not account_name or not account_key:
        raise ValueError(
            "Invalid connection string: missing AccountName or AccountKey"
        )

    return {"account_name": account_name, "account_key": account_key}


class ContentStore:
    """Blob container holding immutable, content-addressed objects.

    ``get_object`` treats a missing blob as ``None`` so callers can collect
    every missing key of a batch before failing.
    """

    def __init__(
        self,
        service_client: BlobServiceClient,
        container_name: str,
        account_name: str,
        account_key: str,
    ):
        self.service_client = service_client
        self.container_name = container_name
        self.account_name = account_name
        self.account_key = account_key

    def _blob_client(self, key: str):
        container_client = self.service_client.get_container_client(self.container_name)
        return container_client.get_blob_client(key)

    async def get_object(self, key: str) -> Optional[bytes]:
        """Download a blob. Returns None when it does not exist."""
        try:
            download_stream = await self._blob_client(key).download_blob()
            return await download_stream.readall()
        except ResourceNotFoundError:
            logger.warning(
                f"[storage] Blob not found: {key}",
                extra={"container": self.container_name},
            )
            return None

    async def put_object(self, key: str, content: bytes, content_type: str) -> None:
        """Upload (or overwrite) a blob."""
        await self._blob_client(key).upload_blob(
            content,
            overwrite=True,
            content_settings=ContentSettings(content_type=content_type),
        )
        logger.info(f"[storage] Saved blob: {key}", extra={"container": self.container_name})

    def _sas_url(self, key: str, permission: BlobSasPermissions, expiry_seconds: int) -> str:
        sas_token = generate_blob_sas(
            account_name=self.account_name,
            container_name=self.container_name,
            blob_name=key,
            account_key=self.account_key,
            permission=permission,
            expiry=datetime.now(timezone.utc) + timedelta(seconds=expiry_seconds),
        )
        return f"{self._blob_client(key).url}?{sas_token}"

    def generate_download_url(self, key: str, expiry_seconds: int) -> str:
        """Presigned URL (SAS URL) with read permission"""
        return self._sas_url(key, BlobSasPermissions(read=True), expiry_seconds)

    def generate_upload_url(self, key: str, expiry_seconds: int) -> str:
        """Presigned URL (SAS URL) allowing the client to create the blob"""
        return self._sas_url(key, BlobSasPermissions(create=True, write=True), expiry_seconds)
