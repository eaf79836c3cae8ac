"""Step execution against the growth migration service."""

from __future__ import annotations

import logging
from typing import Collection

import httpx
from pydantic import ValidationError

from .client import MigrationServiceClient
from .config import TigerClawConfig
from .contracts import (
    StatusPayload,
    StepExecutionOutcome,
    StepNotFound,
    StepSuccess,
    StepTransportFailure,
    StepUnauthorized,
    StepUnexpectedStatus,
)
from .errors import StatusPayloadDecodeError
from .status import WorkflowPhase
from .utils.ids import require_positive

logger = logging.getLogger(__name__)

EXECUTE_SUCCESS_CODES = frozenset({200})
FORCE_SUCCESS_CODES = frozenset({200, 202, 204})


def step_endpoint(external_id: int, phase: WorkflowPhase) -> str:
    return f"migrate/sas/advertiser/{external_id}/execute-step/{phase.token}"


def status_endpoint(external_id: int) -> str:
    return f"migrate/sas/advertiser/{external_id}/status"


def classify_response(
    response: httpx.Response, success_codes: Collection[int]
) -> StepExecutionOutcome:
    """Map an HTTP response onto a step outcome by status code.

    Raises:
        StatusPayloadDecodeError: A 404 body is not a valid status payload.
    """
    code = response.status_code
    if code in success_codes:
        return StepSuccess(status_code=code, body=response.text)
    if code == 404:
        try:
            payload = StatusPayload.model_validate_json(response.content)
        except ValidationError as e:
            raise StatusPayloadDecodeError(response.text, e) from e
        return StepNotFound(payload=payload)
    if code == 401:
        return StepUnauthorized()
    return StepUnexpectedStatus(status_code=code, body=response.text)


class StepExecutor:
    """Runs single migration steps and status overrides."""

    def __init__(self, client: MigrationServiceClient) -> None:
        self._client = client

    async def execute_step(
        self, token: str, external_id: int, phase: WorkflowPhase
    ) -> StepExecutionOutcome:
        """Ask the migration service to run ``phase`` for ``external_id``.

        Returns:
            The classified outcome. Transport errors are captured as
            :class:`StepTransportFailure`, never raised.

        Raises:
            InvalidInputError: ``external_id`` is not positive.
            StatusPayloadDecodeError: A 404 carried an unreadable body.
        """
        require_positive("external_id", external_id)
        try:
            response = await self._client.post(step_endpoint(external_id, phase), token)
        except httpx.HTTPError as e:
            logger.error(
                f"Request to execute step {phase.token} for external_id={external_id} failed: {e}"
            )
            return StepTransportFailure(cause=e)
        return classify_response(response, EXECUTE_SUCCESS_CODES)

    async def force_status(
        self, token: str, config: TigerClawConfig
    ) -> StepExecutionOutcome:
        """Overwrite the advertiser's status with ``step_status_to_force``.

        The target token is sent verbatim; the service decides whether it is
        acceptable.
        """
        external_id = require_positive("external_id", config.globals.external_id)
        target = config.orchestration.step_status_to_force
        try:
            response = await self._client.patch(
                status_endpoint(external_id), token, json={"force_status": target}
            )
        except httpx.HTTPError as e:
            logger.error(
                f"Request to force status '{target}' for external_id={external_id} failed: {e}"
            )
            return StepTransportFailure(cause=e)

        outcome = classify_response(response, FORCE_SUCCESS_CODES)
        if isinstance(outcome, StepSuccess):
            logger.info(
                f"Successfully forced status update to '{target}' for external_id={external_id}"
            )
        elif isinstance(outcome, StepUnexpectedStatus):
            logger.warning(
                f"Unexpected status code {outcome.status_code} forcing status '{target}' "
                f"for external_id={external_id}"
            )
        return outcome
