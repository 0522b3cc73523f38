"""Asynchronous hand-off to the pdf preprocessing worker."""

import asyncio
import logging

from celery import Celery

logger = logging.getLogger(__name__)


class PreprocessInvoker:
    """Dispatch preprocessing without waiting for its result.

    The preprocessing worker reports completion for the job on its own, so
    the only thing awaited here is the broker accepting the message.
    """

    def __init__(self, celery_app: Celery, task_name: str, queue: str, bucket: str):
        self.celery_app = celery_app
        self.task_name = task_name
        self.queue = queue
        self.bucket = bucket

    async def trigger(self, job_id: str, document_id: str, document_version_id: int, key: str) -> str:
        job_payload = {
            "job_id": job_id,
            "document_id": document_id,
            "document_version_id": document_version_id,
            "bucket": self.bucket,
            "key": key,
        }
        # send_task blocks on the broker connection
        result = await asyncio.to_thread(
            self.celery_app.send_task,
            self.task_name,
            args=[job_payload],
            queue=self.queue,
        )
        logger.info(
            f"[preprocess] Dispatched {self.task_name} for document {document_id}",
            extra={"job_id": job_id, "task_id": result.id},
        )
        return result.id
