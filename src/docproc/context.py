"""Dependency container shared by every job pipeline."""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

import aiohttp
from azure.storage.blob.aio import BlobServiceClient
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from .celery_app import create_celery_app
from .config import Settings
from .database import create_session_factory
from .publisher import ResponsePublisher
from .services.conversion import DocxServiceClient, PdfServiceClient
from .services.document_storage import DocumentStorageClient
from .services.invocation import PreprocessInvoker
from .services.storage import ContentStore, parse_connection_string
from .utils.redis import close_redis, get_redis_client

logger = logging.getLogger(__name__)


@dataclass
class WorkerContext:
    """Every collaborator a job handler may call.

    Built once at process start and passed explicitly to each handler.
    """
    settings: Settings
    session_factory: async_sessionmaker
    document_store: ContentStore
    temp_store: ContentStore
    document_storage: DocumentStorageClient
    pdf_service: PdfServiceClient
    docx_service: DocxServiceClient
    preprocess_invoker: PreprocessInvoker
    publisher: ResponsePublisher
    redis_client: Optional[Redis] = None
    _closeables: List[Any] = field(default_factory=list, repr=False)

    async def aclose(self) -> None:
        """Release every connection owned by the context."""
        for resource in reversed(self._closeables):
            try:
                if isinstance(resource, AsyncEngine):
                    await resource.dispose()
                elif isinstance(resource, Redis):
                    await close_redis(resource)
                else:
                    await resource.close()
            except Exception as e:
                logger.error(f"[context] Error closing {type(resource).__name__}: {e}")
        self._closeables.clear()


async def build_context(settings: Settings) -> WorkerContext:
    """Construct all clients from settings."""
    if not settings.AZURE_STORAGE_CONNECTION_STRING:
        raise ValueError(
            "AZURE_STORAGE_CONNECTION_STRING not configured. "
            "Please set it in your .env file."
        )

    engine, session_factory = create_session_factory(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)
    redis_client = await get_redis_client(settings.REDIS_URL)
    http_session = aiohttp.ClientSession(
        timeout=aiohttp.ClientTimeout(total=settings.HTTP_TIMEOUT_SECONDS)
    )
    blob_service = BlobServiceClient.from_connection_string(settings.AZURE_STORAGE_CONNECTION_STRING)
    credentials = parse_connection_string(settings.AZURE_STORAGE_CONNECTION_STRING)

    celery_app = create_celery_app(settings)

    return WorkerContext(
        settings=settings,
        session_factory=session_factory,
        document_store=ContentStore(
            blob_service, settings.DOCUMENT_STORAGE_CONTAINER, **credentials
        ),
        temp_store=ContentStore(blob_service, settings.TEMP_FILES_CONTAINER, **credentials),
        document_storage=DocumentStorageClient(
            http_session,
            settings.DOCUMENT_STORAGE_SERVICE_URL,
            settings.DOCUMENT_STORAGE_SERVICE_AUTH_KEY,
        ),
        pdf_service=PdfServiceClient(http_session, settings.PDF_SERVICE_URL),
        docx_service=DocxServiceClient(http_session, settings.DOCX_SERVICE_URL),
        preprocess_invoker=PreprocessInvoker(
            celery_app,
            settings.PREPROCESS_TASK_NAME,
            settings.PREPROCESS_QUEUE,
            bucket=settings.DOCUMENT_STORAGE_CONTAINER,
        ),
        publisher=ResponsePublisher(
            redis_client, settings.RESPONSE_CHANNEL, settings.STATUS_CHANNEL
        ),
        redis_client=redis_client,
        _closeables=[engine, redis_client, http_session, blob_service],
    )
