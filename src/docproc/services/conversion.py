"""HTTP clients for the pdf and docx transformation services.

Both services are black boxes: every call returns the raw status and body,
and the job handlers decide what a non-200 means for their job type.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import aiohttp

from ..schemas.documents import File, FileType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceResponse:
    status: int
    body: bytes

    @property
    def ok(self) -> bool:
        return self.status == 200

    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        return json.loads(self.body)


def _file_form(files: List[File], field: str = "file", fields: Optional[Dict[str, str]] = None) -> aiohttp.FormData:
    form = aiohttp.FormData()
    for file in files:
        form.add_field(field, file.content, filename=file.filename, content_type=file.content_type)
    for name, value in (fields or {}).items():
        form.add_field(name, value)
    return form


class _ServiceClient:
    name = "service"

    def __init__(self, session: aiohttp.ClientSession, base_url: str):
        self.session = session
        self.base_url = base_url.rstrip("/")

    async def _post(self, path: str, form: aiohttp.FormData, params: Optional[Dict[str, str]] = None) -> ServiceResponse:
        logger.debug(f"[{self.name}] POST {path}")
        async with self.session.post(f"{self.base_url}{path}", data=form, params=params) as response:
            return ServiceResponse(status=response.status, body=await response.read())


class PdfServiceClient(_ServiceClient):
    name = "pdf_service"

    async def convert(self, file: File, to_type: FileType) -> ServiceResponse:
        return await self._post("/convert", _file_form([file]), params={"to": to_type})

    async def modify(self, file: File, modification_data: Dict[str, Any]) -> ServiceResponse:
        """Merge stored modification data (annotations, placeables, ...) into the pdf."""
        form = _file_form([file], fields={"modificationData": json.dumps(modification_data)})
        return await self._post("/modify", form)

    async def password_encrypt(self, file: File, password: str) -> ServiceResponse:
        return await self._post("/password/encrypt", _file_form([file], fields={"password": password}))

    async def remove_metadata(self, file: File) -> ServiceResponse:
        return await self._post("/remove_metadata", _file_form([file]))


class DocxServiceClient(_ServiceClient):
    name = "docx_service"

    async def simple_compare(self, files: List[File]) -> ServiceResponse:
        return await self._post("/compare/simple", _file_form(files, field="files"))

    async def consolidate(self, files: List[File]) -> ServiceResponse:
        return await self._post("/compare/consolidate", _file_form(files, field="files"))

    async def count_revisions(self, file: File) -> ServiceResponse:
        """Body is JSON ``{"insertions": int, "deletions": int}`` on success."""
        return await self._post("/revisions/count", _file_form([file]))
