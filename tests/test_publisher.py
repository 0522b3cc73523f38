"""Tests for response publishing and status notifications."""

import json

import pytest

from docproc.publisher import ResponsePublisher, build_response
from docproc.utils.errors import InvalidResponseData
from conftest import published_responses


@pytest.fixture
def publisher(redis_mock, settings):
    return ResponsePublisher(redis_mock, settings.RESPONSE_CHANNEL, settings.STATUS_CHANNEL)


@pytest.mark.asyncio
async def test_send_response_publishes_three_part_frame(publisher, redis_mock, settings):
    await publisher.send_response("pdf_export", "J1", data={"resultUrl": "https://blob.test/x"})

    redis_mock.publish.assert_awaited_once()
    channel, raw = redis_mock.publish.call_args.args
    assert channel == settings.RESPONSE_CHANNEL
    event, job_id, payload = json.loads(raw)
    assert event == "pdf_export"
    assert job_id == "J1"
    assert json.loads(payload) == {
        "jobId": "J1",
        "jobType": "pdf_export",
        "data": {"resultUrl": "https://blob.test/x"},
    }


@pytest.mark.asyncio
async def test_invalid_response_is_never_published(publisher, redis_mock):
    with pytest.raises(InvalidResponseData, match="invalid response data"):
        await publisher.send_response("docx_simple_compare", "J1", data={"documentId": "D9"})

    redis_mock.publish.assert_not_awaited()


@pytest.mark.asyncio
async def test_error_response_for_unsupported_event(publisher, redis_mock, settings):
    await publisher.send_response("pdf_teleport", "J1", error=True, message="event not supported")

    [response] = published_responses(redis_mock, settings.RESPONSE_CHANNEL)
    assert response["event"] == "pdf_teleport"
    assert response["payload"] == {
        "jobId": "J1",
        "jobType": "pdf_teleport",
        "error": True,
        "message": "event not supported",
    }


@pytest.mark.asyncio
async def test_publish_failure_surfaces_as_invalid_response_data(publisher, redis_mock):
    redis_mock.publish.side_effect = ConnectionError("redis down")

    with pytest.raises(InvalidResponseData):
        await publisher.send_response("ping", "J1", data={"pong": True})


@pytest.mark.asyncio
async def test_status_notification_payload(publisher, redis_mock, settings):
    await publisher.send_ws_response("J1", "started", "pdf_export started")

    channel, raw = redis_mock.publish.call_args.args
    assert channel == settings.STATUS_CHANNEL
    assert json.loads(raw) == {
        "jobId": "J1",
        "status": "started",
        "data": {"message": "pdf_export started"},
    }


@pytest.mark.asyncio
async def test_status_notification_failure_is_swallowed(publisher, redis_mock):
    redis_mock.publish.side_effect = ConnectionError("redis down")

    await publisher.send_ws_response("J1", "started")


def test_build_response_uses_wire_names():
    response = build_response(
        "docx_consolidate", "J2", data={"documentId": "D2", "insertions": 3, "deletions": 1}
    )

    assert response.to_wire()["data"] == {"documentId": "D2", "insertions": 3, "deletions": 1}
