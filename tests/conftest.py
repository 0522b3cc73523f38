"""Test configuration and fixtures."""

import asyncio
import json
import os

# Set test environment variables BEFORE any imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["AZURE_STORAGE_CONNECTION_STRING"] = (
    "DefaultEndpointsProtocol=http;AccountName=devstoreaccount1;"
    "AccountKey=Eby8vdM02xNOcqFlqUwJPLlmEtlCDXOU+FH+fNGuNGVGyWjnRZGuyBC0wWgyWkVDclxwGXQ15j0Dhn4XbJXg==;"
    "BlobEndpoint=http://127.0.0.1:10000/devstoreaccount1;"
)

import pytest
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from docproc.config import Settings
from docproc.context import WorkerContext
from docproc.database import init_db
from docproc.publisher import ResponsePublisher
from docproc.schemas.documents import (
    BomPart,
    DocumentData,
    DocumentMetadata,
    DssResponse,
    UserAccessLevelData,
)
from docproc.services.conversion import DocxServiceClient, PdfServiceClient, ServiceResponse
from docproc.services.document_storage import DocumentStorageClient
from docproc.services.invocation import PreprocessInvoker


class InMemoryContentStore:
    """Content store double backed by a dict."""

    def __init__(self, container_name: str, objects: Optional[Dict[str, bytes]] = None):
        self.container_name = container_name
        self.objects: Dict[str, bytes] = dict(objects or {})
        self.delays: Dict[str, float] = {}
        self.requested: List[str] = []

    async def get_object(self, key: str) -> Optional[bytes]:
        self.requested.append(key)
        if key in self.delays:
            await asyncio.sleep(self.delays[key])
        return self.objects.get(key)

    async def put_object(self, key: str, content: bytes, content_type: str) -> None:
        self.objects[key] = content

    def generate_download_url(self, key: str, expiry_seconds: int) -> str:
        return f"https://blob.test/{self.container_name}/{key}?sp=r&se={expiry_seconds}"

    def generate_upload_url(self, key: str, expiry_seconds: int) -> str:
        return f"https://blob.test/{self.container_name}/{key}?sp=cw&se={expiry_seconds}"


def pdf_metadata(document_id="doc-1", version=1, owner="user-1", name="contract") -> DocumentMetadata:
    return DocumentMetadata(
        document_id=document_id,
        document_version_id=version,
        document_name=name,
        owner=owner,
        file_type="pdf",
    )


def docx_metadata(bom: Dict[str, str], document_id="doc-2", version=1, owner="user-1", name="memo") -> DocumentMetadata:
    return DocumentMetadata(
        document_id=document_id,
        document_version_id=version,
        document_name=name,
        owner=owner,
        file_type="docx",
        document_bom=[BomPart(path=path, sha=sha) for path, sha in bom.items()],
    )


def document_response(metadata: DocumentMetadata) -> DssResponse:
    return DssResponse[DocumentData](data=DocumentData(document_metadata=metadata))


def access_level_response(level: Optional[str] = "view") -> DssResponse:
    return DssResponse[UserAccessLevelData](data=UserAccessLevelData(user_access_level=level))


def error_response(message: str = "not found") -> DssResponse:
    return DssResponse[DocumentData](error=True, message=message)


def service_response(status: int = 200, body: bytes = b"") -> ServiceResponse:
    return ServiceResponse(status=status, body=body)


def published_responses(redis_mock, channel: str) -> List[dict]:
    """Decode every ``[event, jobId, payload]`` frame published on ``channel``."""
    responses = []
    for call in redis_mock.publish.call_args_list:
        published_channel, raw = call.args
        if published_channel != channel:
            continue
        event, job_id, payload = json.loads(raw)
        responses.append({"event": event, "job_id": job_id, "payload": json.loads(payload)})
    return responses


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
async def session_factory():
    """In-memory job database."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    await init_db(engine)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def redis_mock():
    """Mock Redis client for testing."""
    client = MagicMock()
    client.publish = AsyncMock(return_value=1)
    return client


@pytest.fixture
def ctx(settings, session_factory, redis_mock):
    """Worker context with every network collaborator mocked."""
    document_storage = AsyncMock(spec=DocumentStorageClient)
    document_storage.get_document_user_access_level.return_value = access_level_response("edit")

    return WorkerContext(
        settings=settings,
        session_factory=session_factory,
        document_store=InMemoryContentStore(settings.DOCUMENT_STORAGE_CONTAINER),
        temp_store=InMemoryContentStore(settings.TEMP_FILES_CONTAINER),
        document_storage=document_storage,
        pdf_service=AsyncMock(spec=PdfServiceClient),
        docx_service=AsyncMock(spec=DocxServiceClient),
        preprocess_invoker=AsyncMock(spec=PreprocessInvoker),
        publisher=ResponsePublisher(
            redis_mock, settings.RESPONSE_CHANNEL, settings.STATUS_CHANNEL
        ),
        redis_client=redis_mock,
    )
