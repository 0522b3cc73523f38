"""Job responses and status notifications via Redis Pub/Sub."""

import json
import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError
from redis.asyncio import Redis

from .schemas.jobs import JobType
from .schemas.responses import RESPONSE_SCHEMAS, JobErrorResponse, JobResponse
from .utils.errors import InvalidResponseData

logger = logging.getLogger(__name__)


def build_response(
    event: str,
    job_id: str,
    data: Optional[Dict[str, Any]] = None,
    error: bool = False,
    message: Optional[str] = None,
) -> JobResponse:
    """Validate a response against the schema registered for ``event``.

    Raises:
        ValidationError: response does not match its schema
        KeyError: success response for an event with no registered schema
    """
    if error:
        return JobErrorResponse(job_id=job_id, job_type=event, message=message or "")

    schema = RESPONSE_SCHEMAS[JobType(event)]
    validated = schema.model_validate(data if data is not None else {})
    return JobResponse(
        job_id=job_id,
        job_type=event,
        data=validated.model_dump(by_alias=True),
        message=message,
    )


class ResponsePublisher:
    """Publish job responses and status notifications to Redis."""

    def __init__(self, redis_client: Redis, response_channel: str, status_channel: str):
        self.redis_client = redis_client
        self.response_channel = response_channel
        self.status_channel = status_channel

    async def send_response(
        self,
        event: str,
        job_id: str,
        data: Optional[Dict[str, Any]] = None,
        error: bool = False,
        message: Optional[str] = None,
    ) -> JobResponse:
        """Validate and publish the terminal response of a job.

        The frame is ``[event, jobId, payload]``. Nothing is published when
        validation fails.
        """
        try:
            response = build_response(event, job_id, data=data, error=error, message=message)
        except (ValidationError, KeyError, ValueError) as e:
            logger.error(
                "invalid response data",
                extra={"job_id": job_id, "job_type": event, "data": data, "error": str(e)},
            )
            raise InvalidResponseData(str(e)) from e

        frame = [event, job_id, json.dumps(response.to_wire())]
        try:
            await self.redis_client.publish(self.response_channel, json.dumps(frame))
        except Exception as e:
            logger.error(
                "failed to publish response",
                extra={"job_id": job_id, "job_type": event, "error": str(e)},
            )
            raise InvalidResponseData(str(e)) from e
        return response

    async def send_ws_response(self, job_id: str, status: str, message: str = "") -> None:
        """Best-effort status notification. Failures are logged only."""
        payload = {
            "jobId": job_id,
            "status": status,
            "data": {"message": message},
        }
        try:
            await self.redis_client.publish(self.status_channel, json.dumps(payload))
        except Exception as e:
            logger.warning(
                "failed to send status notification",
                extra={"job_id": job_id, "status": status, "error": str(e)},
            )
