"""Step executor request building and response classification."""

import logging

import httpx
import pytest

from tigerclaw.contracts import (
    StepNotFound,
    StepSuccess,
    StepTransportFailure,
    StepUnauthorized,
    StepUnexpectedStatus,
)
from tigerclaw.errors import InvalidInputError, StatusPayloadDecodeError
from tigerclaw.execute import StepExecutor
from tigerclaw.status import WorkflowPhase

STEP_PATH = "/migrate/sas/advertiser/98765/execute-step/ADV"
STATUS_PATH = "/migrate/sas/advertiser/98765/status"


@pytest.mark.asyncio
async def test_execute_step_request_shape(service):
    service.respond("POST", STEP_PATH, 200, text="started")
    executor = StepExecutor(service.client())

    outcome = await executor.execute_step("tok-123", 98765, WorkflowPhase.ADV)

    assert isinstance(outcome, StepSuccess)
    assert outcome.status_code == 200
    assert outcome.body == "started"
    request = service.requests[0]
    assert request.method == "POST"
    assert str(request.url) == "http://migration.test:8080" + STEP_PATH
    assert request.headers["Authorization"] == "Bearer tok-123"
    assert request.content == b""


@pytest.mark.asyncio
async def test_mem_tag_uses_wire_token(service):
    path = "/migrate/sas/advertiser/98765/execute-step/MEM_TAG"
    service.respond("POST", path, 200)
    outcome = await StepExecutor(service.client()).execute_step(
        "tok", 98765, WorkflowPhase.MEM_TAG
    )
    assert isinstance(outcome, StepSuccess)
    assert service.calls() == [("POST", path)]


@pytest.mark.asyncio
@pytest.mark.parametrize("code", [201, 202, 204, 400, 409, 500, 503])
async def test_execute_step_only_accepts_200(service, code):
    service.respond("POST", STEP_PATH, code, text="nope")
    outcome = await StepExecutor(service.client()).execute_step("tok", 98765, WorkflowPhase.ADV)
    assert isinstance(outcome, StepUnexpectedStatus)
    assert outcome.status_code == code


@pytest.mark.asyncio
async def test_not_found_carries_decoded_payload(service, not_found_body):
    service.respond("POST", STEP_PATH, 404, json_body=not_found_body)
    outcome = await StepExecutor(service.client()).execute_step("tok", 98765, WorkflowPhase.ADV)

    assert isinstance(outcome, StepNotFound)
    assert outcome.payload.model_dump() == not_found_body


@pytest.mark.asyncio
@pytest.mark.parametrize("body", ["", "<html>404</html>", '{"status": 404}'])
async def test_unreadable_not_found_body_is_an_error(service, body):
    service.respond("POST", STEP_PATH, 404, text=body)
    with pytest.raises(StatusPayloadDecodeError) as exc:
        await StepExecutor(service.client()).execute_step("tok", 98765, WorkflowPhase.ADV)
    assert exc.value.body == body


@pytest.mark.asyncio
async def test_unauthorized(service):
    service.respond("POST", STEP_PATH, 401)
    outcome = await StepExecutor(service.client()).execute_step("tok", 98765, WorkflowPhase.ADV)
    assert isinstance(outcome, StepUnauthorized)
    assert len(service.requests) == 1


@pytest.mark.asyncio
async def test_transport_failure_is_captured(service):
    service.fail("POST", STEP_PATH, httpx.ConnectError("connection refused"))
    outcome = await StepExecutor(service.client()).execute_step("tok", 98765, WorkflowPhase.ADV)
    assert isinstance(outcome, StepTransportFailure)
    assert isinstance(outcome.cause, httpx.ConnectError)
    assert "connection refused" in outcome.message


@pytest.mark.asyncio
@pytest.mark.parametrize("bad_id", [0, -1])
async def test_invalid_id_is_rejected_locally(service, bad_id):
    with pytest.raises(InvalidInputError):
        await StepExecutor(service.client()).execute_step("tok", bad_id, WorkflowPhase.ADV)
    assert service.requests == []


@pytest.mark.asyncio
async def test_force_status_request_shape(service, make_config):
    service.respond("PATCH", STATUS_PATH, 202)
    config = make_config(force_run=True, force_status="COMPLETED")

    outcome = await StepExecutor(service.client()).force_status("tok-9", config)

    assert isinstance(outcome, StepSuccess)
    assert outcome.status_code == 202
    request = service.requests[0]
    assert request.method == "PATCH"
    assert request.headers["Authorization"] == "Bearer tok-9"
    assert request.headers["Content-Type"] == "application/json"
    assert service.body_of(request) == {"force_status": "COMPLETED"}


@pytest.mark.asyncio
@pytest.mark.parametrize("code", [200, 202, 204])
async def test_force_status_success_codes(service, make_config, code):
    service.respond("PATCH", STATUS_PATH, code)
    outcome = await StepExecutor(service.client()).force_status("tok", make_config(force_status="INIT_DONE"))
    assert isinstance(outcome, StepSuccess)


@pytest.mark.asyncio
async def test_force_status_failures(service, make_config, not_found_body):
    executor = StepExecutor(service.client())
    config = make_config(force_status="INIT_DONE")

    service.respond("PATCH", STATUS_PATH, 401)
    assert isinstance(await executor.force_status("tok", config), StepUnauthorized)

    service.respond("PATCH", STATUS_PATH, 404, json_body=not_found_body)
    assert isinstance(await executor.force_status("tok", config), StepNotFound)

    service.respond("PATCH", STATUS_PATH, 409)
    outcome = await executor.force_status("tok", config)
    assert isinstance(outcome, StepUnexpectedStatus)
    assert outcome.status_code == 409

    service.respond("PATCH", STATUS_PATH, 404, text="gone")
    with pytest.raises(StatusPayloadDecodeError):
        await executor.force_status("tok", config)


@pytest.mark.asyncio
async def test_force_status_requires_external_id(service, make_config):
    with pytest.raises(InvalidInputError):
        await StepExecutor(service.client()).force_status("tok", make_config(external_id=None))
    assert service.requests == []


@pytest.mark.asyncio
async def test_force_status_warning_names_advertiser_and_target(service, make_config, caplog):
    service.respond("PATCH", STATUS_PATH, 409)
    config = make_config(force_status="INIT_DONE")

    with caplog.at_level(logging.WARNING, logger="tigerclaw.execute"):
        await StepExecutor(service.client()).force_status("tok", config)

    assert "409" in caplog.text
    assert "INIT_DONE" in caplog.text
    assert "external_id=98765" in caplog.text
