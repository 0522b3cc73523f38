"""Inbound job stream subscriber."""

import asyncio
import json
import logging
from typing import Any, Optional

from redis.asyncio import Redis

from .dispatcher import JobDispatcher
from .schemas.jobs import Job

logger = logging.getLogger(__name__)

FRAME_PARTS = 5


class InvalidFrame(ValueError):
    """Inbound frame cannot be turned into a job."""
    pass


def decode_frame(raw: Any) -> Job:
    """Decode ``[event, jobId, userId, email, data]`` into a ``Job``.

    ``data`` is JSON; when it does not parse it is kept as the raw string so
    payload validation fails for the job and an error response goes out.

    Raises:
        InvalidFrame: the frame has no usable event/job id
    """
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    try:
        parts = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise InvalidFrame(f"frame is not valid JSON: {e}") from e

    if not isinstance(parts, list) or len(parts) != FRAME_PARTS:
        raise InvalidFrame(f"expected {FRAME_PARTS} frame parts")

    event, job_id, user_id, email, data = parts
    if not event or not job_id:
        raise InvalidFrame("frame is missing event or job id")

    if isinstance(data, str):
        try:
            data = json.loads(data) if data else None
        except ValueError:
            logger.warning("job data is not valid JSON", extra={"job_id": job_id, "job_type": event})

    return Job(
        event=str(event),
        job_id=str(job_id),
        user_id=user_id or None,
        email=email or None,
        data=data,
    )


class JobConsumer:
    """Subscribe to the job channel and hand each job to the dispatcher."""

    def __init__(self, redis_client: Redis, channel: str, dispatcher: JobDispatcher):
        self.redis_client = redis_client
        self.channel = channel
        self.dispatcher = dispatcher
        self._stopped = asyncio.Event()

    def stop(self) -> None:
        self._stopped.set()

    async def handle_message(self, raw: Any) -> None:
        try:
            job = decode_frame(raw)
        except InvalidFrame as e:
            logger.error(f"[consumer] Dropping invalid frame: {e}", extra={"frame": str(raw)[:512]})
            return
        await self.dispatcher.handle_job(job)

    async def run(self, poll_timeout: float = 1.0) -> None:
        """Consume until ``stop`` is called."""
        pubsub = self.redis_client.pubsub()
        await pubsub.subscribe(self.channel)
        logger.info(f"[consumer] Subscribed to {self.channel}")
        try:
            while not self._stopped.is_set():
                message: Optional[dict] = await pubsub.get_message(
                    ignore_subscribe_messages=True, timeout=poll_timeout
                )
                if message is None or message.get("type") != "message":
                    continue
                await self.handle_message(message["data"])
        finally:
            await pubsub.unsubscribe(self.channel)
            await pubsub.aclose()
            logger.info(f"[consumer] Unsubscribed from {self.channel}")
