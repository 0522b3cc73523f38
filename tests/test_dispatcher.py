"""Tests for job routing, task lifecycle and terminal responses."""

import asyncio
import json
import logging

import pytest
from unittest.mock import AsyncMock

from docproc.dispatcher import JOB_ROUTES, JobDispatcher, JobRoute, redact
from docproc.models import User
from docproc.schemas.jobs import Job, JobType, PdfExportPayload, PdfPasswordEncryptPayload
from conftest import published_responses


def make_job(event="pdf_export", data=None, user_id="U1", email=None, job_id="J1") -> Job:
    if data is None:
        data = {"documentId": "D1", "documentVersionId": 1}
    return Job(event=event, job_id=job_id, user_id=user_id, email=email, data=data)


def export_route(handler) -> dict:
    return {JobType.PDF_EXPORT: JobRoute(PdfExportPayload, handler)}


def status_messages(redis_mock, channel):
    return [
        json.loads(call.args[1])
        for call in redis_mock.publish.call_args_list
        if call.args[0] == channel
    ]


def test_every_job_type_except_ping_is_routed():
    assert set(JOB_ROUTES) == set(JobType) - {JobType.PING}


def test_redact_masks_passwords():
    data = {"documentId": "D1", "password": "hunter2", "nested": [{"password": "x"}]}

    assert redact(data) == {"documentId": "D1", "password": "***", "nested": [{"password": "***"}]}


@pytest.mark.asyncio
async def test_ping_gets_pong_without_started_notification(ctx, redis_mock, settings, caplog):
    dispatcher = JobDispatcher(ctx)

    with caplog.at_level(logging.INFO, logger="docproc.dispatcher"):
        await dispatcher.handle_job(make_job(event="ping", data={}))
        await dispatcher.drain()

    [response] = published_responses(redis_mock, settings.RESPONSE_CHANNEL)
    assert response["payload"] == {"jobId": "J1", "jobType": "ping", "data": {"pong": True}}
    assert dispatcher.in_flight == 0
    assert status_messages(redis_mock, settings.STATUS_CHANNEL) == []
    assert "Job finished" not in caplog.text


@pytest.mark.asyncio
async def test_unsupported_event_gets_single_error(ctx, redis_mock, settings):
    dispatcher = JobDispatcher(ctx)

    await dispatcher.handle_job(make_job(event="pdf_teleport"))
    await dispatcher.drain()

    [response] = published_responses(redis_mock, settings.RESPONSE_CHANNEL)
    assert response["event"] == "pdf_teleport"
    assert response["payload"]["error"] is True
    assert "event not supported" in response["payload"]["message"]


@pytest.mark.asyncio
async def test_invalid_payload_gets_error_response(ctx, redis_mock, settings):
    handler = AsyncMock(return_value={"resultUrl": "https://blob.test/x"})
    dispatcher = JobDispatcher(ctx, routes=export_route(handler))

    await dispatcher.handle_job(make_job(data={"documentVersionId": "not-a-number"}))
    await dispatcher.drain()

    handler.assert_not_awaited()
    [response] = published_responses(redis_mock, settings.RESPONSE_CHANNEL)
    assert response["payload"]["error"] is True
    assert "invalid job data" in response["payload"]["message"]


@pytest.mark.asyncio
async def test_started_notification_and_success_response(ctx, redis_mock, settings):
    handler = AsyncMock(return_value={"resultUrl": "https://blob.test/x"})
    dispatcher = JobDispatcher(ctx, routes=export_route(handler))

    await dispatcher.handle_job(make_job())
    await dispatcher.drain()

    [status] = status_messages(redis_mock, settings.STATUS_CHANNEL)
    assert status["jobId"] == "J1"
    assert status["status"] == "started"
    [response] = published_responses(redis_mock, settings.RESPONSE_CHANNEL)
    assert response["payload"]["data"] == {"resultUrl": "https://blob.test/x"}
    _, job, payload = handler.await_args.args
    assert isinstance(payload, PdfExportPayload)
    assert payload.document_id == "D1"


@pytest.mark.asyncio
async def test_handle_job_returns_before_handler_completes(ctx, redis_mock, settings):
    release = asyncio.Event()

    async def slow_handler(ctx, job, payload):
        await release.wait()
        return {"resultUrl": "https://blob.test/x"}

    dispatcher = JobDispatcher(ctx, routes=export_route(slow_handler))

    await dispatcher.handle_job(make_job(job_id="J1"))
    await dispatcher.handle_job(make_job(job_id="J2"))
    await asyncio.sleep(0)

    assert dispatcher.in_flight >= 2
    assert published_responses(redis_mock, settings.RESPONSE_CHANNEL) == []

    release.set()
    await dispatcher.drain()

    responses = published_responses(redis_mock, settings.RESPONSE_CHANNEL)
    assert sorted(r["job_id"] for r in responses) == ["J1", "J2"]
    assert dispatcher.in_flight == 0


@pytest.mark.asyncio
async def test_handler_failure_gets_single_error_response(ctx, redis_mock, settings, caplog):
    handler = AsyncMock(side_effect=RuntimeError("boom"))
    dispatcher = JobDispatcher(ctx, routes=export_route(handler))

    with caplog.at_level(logging.INFO, logger="docproc.dispatcher"):
        await dispatcher.handle_job(make_job(data={"documentId": "D1", "password": "secret"}))
        await dispatcher.drain()

    [response] = published_responses(redis_mock, settings.RESPONSE_CHANNEL)
    assert response["payload"]["error"] is True
    assert response["payload"]["message"] == "unexpected error (RuntimeError)"
    failed = [r for r in caplog.records if "Job failed" in r.getMessage()]
    assert failed[0].data["password"] == "***"
    assert any("Job finished" in r.getMessage() for r in caplog.records)


@pytest.mark.asyncio
async def test_handler_returning_none_publishes_nothing(ctx, redis_mock, settings):
    handler = AsyncMock(return_value=None)
    dispatcher = JobDispatcher(ctx, routes=export_route(handler))

    await dispatcher.handle_job(make_job())
    await dispatcher.drain()

    handler.assert_awaited_once()
    assert published_responses(redis_mock, settings.RESPONSE_CHANNEL) == []


@pytest.mark.asyncio
async def test_invalid_handler_result_becomes_error(ctx, redis_mock, settings):
    handler = AsyncMock(return_value={"unexpected": 1})
    dispatcher = JobDispatcher(ctx, routes=export_route(handler))

    await dispatcher.handle_job(make_job())
    await dispatcher.drain()

    [response] = published_responses(redis_mock, settings.RESPONSE_CHANNEL)
    assert response["payload"]["error"] is True
    assert response["payload"]["message"] == "invalid response data"


@pytest.mark.asyncio
async def test_email_resolves_acting_user(ctx, session_factory):
    async with session_factory() as session:
        session.add(User(id="U-db", email="lawyer@example.com"))
        await session.commit()
    handler = AsyncMock(return_value={"resultUrl": "https://blob.test/x"})
    dispatcher = JobDispatcher(ctx, routes=export_route(handler))

    await dispatcher.handle_job(make_job(user_id="U-frame", email="lawyer@example.com"))
    await dispatcher.drain()

    _, job, _ = handler.await_args.args
    assert job.user_id == "U-db"


@pytest.mark.asyncio
async def test_unknown_email_keeps_user_id(ctx):
    handler = AsyncMock(return_value={"resultUrl": "https://blob.test/x"})
    dispatcher = JobDispatcher(ctx, routes=export_route(handler))

    await dispatcher.handle_job(make_job(user_id="U-frame", email="nobody@example.com"))
    await dispatcher.drain()

    _, job, _ = handler.await_args.args
    assert job.user_id == "U-frame"


@pytest.mark.asyncio
async def test_email_lookup_failure_is_not_fatal(ctx, redis_mock, settings, mocker):
    handler = AsyncMock(return_value={"resultUrl": "https://blob.test/x"})
    dispatcher = JobDispatcher(ctx, routes=export_route(handler))

    mocker.patch("docproc.dispatcher.lookup_user_id", AsyncMock(side_effect=RuntimeError("db down")))

    await dispatcher.handle_job(make_job(user_id="U-frame", email="lawyer@example.com"))
    await dispatcher.drain()

    _, job, _ = handler.await_args.args
    assert job.user_id == "U-frame"
    [response] = published_responses(redis_mock, settings.RESPONSE_CHANNEL)
    assert "error" not in response["payload"]


@pytest.mark.asyncio
async def test_error_publish_failure_is_logged(ctx, redis_mock, caplog):
    redis_mock.publish.side_effect = ConnectionError("redis down")
    dispatcher = JobDispatcher(ctx)

    with caplog.at_level(logging.CRITICAL, logger="docproc.dispatcher"):
        await dispatcher.handle_job(make_job(event="pdf_teleport"))
        await dispatcher.drain()

    assert "unable to publish error response" in caplog.text


@pytest.mark.asyncio
async def test_invalid_payload_error_leaves_out_password(ctx, redis_mock, settings, caplog):
    handler = AsyncMock(return_value={"resultUrl": "https://blob.test/x"})
    routes = {JobType.PDF_PASSWORD_ENCRYPT: JobRoute(PdfPasswordEncryptPayload, handler)}
    dispatcher = JobDispatcher(ctx, routes=routes)

    with caplog.at_level(logging.DEBUG, logger="docproc"):
        await dispatcher.handle_job(
            make_job(event="pdf_password_encrypt", data={"documentId": "D1", "password": "hunter2"})
        )
        await dispatcher.drain()

    handler.assert_not_awaited()
    [response] = published_responses(redis_mock, settings.RESPONSE_CHANNEL)
    assert response["payload"]["error"] is True
    assert "documentVersionId" in response["payload"]["message"]
    assert "hunter2" not in json.dumps(response["payload"])
    assert "hunter2" not in caplog.text
    for record in caplog.records:
        assert "hunter2" not in json.dumps(getattr(record, "data", None), default=str)
        assert "hunter2" not in str(getattr(record, "error", ""))


@pytest.mark.asyncio
async def test_slow_email_lookup_does_not_hold_up_handle_job(ctx, redis_mock, settings, mocker):
    release = asyncio.Event()

    async def slow_lookup(ctx, email):
        await release.wait()
        return "U-db"

    mocker.patch("docproc.dispatcher.lookup_user_id", slow_lookup)
    handler = AsyncMock(return_value={"resultUrl": "https://blob.test/x"})
    dispatcher = JobDispatcher(ctx, routes=export_route(handler))

    await asyncio.wait_for(
        dispatcher.handle_job(make_job(user_id="U-frame", email="lawyer@example.com")), timeout=1
    )
    await asyncio.wait_for(dispatcher.handle_job(make_job(event="ping", data={}, job_id="J2")), timeout=1)
    await asyncio.sleep(0)

    assert dispatcher.in_flight >= 1
    handler.assert_not_awaited()

    release.set()
    await dispatcher.drain()

    _, job, _ = handler.await_args.args
    assert job.user_id == "U-db"
    responses = published_responses(redis_mock, settings.RESPONSE_CHANNEL)
    assert sorted(r["job_id"] for r in responses) == ["J1", "J2"]
