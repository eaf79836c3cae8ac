"""Orchestration of one migration run for one advertiser."""

from __future__ import annotations

import logging
from typing import Awaitable

from .config import TigerClawConfig
from .contracts import (
    InvocationReport,
    StepExecutionOutcome,
    StepInvalidInput,
    StepSuccess,
    SubStepReport,
    describe_outcome,
)
from .errors import (
    AdvertiserNotFoundError,
    InvalidInputError,
    RecordStoreError,
    StatusPayloadDecodeError,
)
from .execute import StepExecutor
from .persistence import AdvertiserGateway
from .status import WorkflowPhase
from .utils.ids import require_positive

logger = logging.getLogger(__name__)


class MigrationOrchestrator:
    """Drives init, optional force override, and the requested step, in order.

    Each sub-step is attempted once. Failures of the init and force sub-steps
    are logged and the run continues; the requested step's outcome is the
    outcome of the run. The orchestrator never deletes advertiser records.
    """

    def __init__(self, gateway: AdvertiserGateway, executor: StepExecutor) -> None:
        self._gateway = gateway
        self._executor = executor

    async def run(self, token: str, config: TigerClawConfig) -> InvocationReport:
        external_id = config.globals.external_id
        report = InvocationReport(external_id=external_id)

        try:
            require_positive("external_id", external_id)
            phase = WorkflowPhase.parse(config.orchestration.step_to_run)
        except InvalidInputError as e:
            logger.error(f"Refusing to run orchestration for external_id={external_id}: {e}")
            report.invalid_input = StepInvalidInput(reason=str(e))
            return report
        report.phase = phase

        if not await self._advertiser_exists(external_id):
            logger.warning(
                f"Advertiser with external ID {external_id} not found or errored, re-initializing"
            )
            report.init = await self._run_substep(
                "init",
                WorkflowPhase.INIT.token,
                external_id,
                self._executor.execute_step(token, external_id, WorkflowPhase.INIT),
            )

        if config.orchestration.force_run:
            target = config.orchestration.step_status_to_force
            logger.info(f"Force running migration for advertiser {external_id} to '{target}'")
            report.force = await self._run_substep(
                "force", target, external_id, self._executor.force_status(token, config)
            )

        logger.info(f"Running orchestration step {phase.token} for advertiser {external_id}")
        report.step = await self._run_substep(
            "step",
            phase.token,
            external_id,
            self._executor.execute_step(token, external_id, phase),
        )
        return report

    async def _advertiser_exists(self, external_id: int) -> bool:
        # Store failures count as "absent": any failure to confirm existence
        # triggers re-initialization.
        try:
            await self._gateway.find_by_external_id(external_id)
        except AdvertiserNotFoundError:
            return False
        except RecordStoreError as e:
            logger.error(f"Advertiser lookup for external_id={external_id} failed: {e}")
            return False
        except Exception as e:
            logger.error(
                f"Advertiser lookup for external_id={external_id} raised "
                f"{type(e).__name__}: {e}"
            )
            return False
        return True

    async def _run_substep(
        self,
        name: str,
        target: str,
        external_id: int,
        call: Awaitable[StepExecutionOutcome],
    ) -> SubStepReport:
        try:
            outcome = await call
        except StatusPayloadDecodeError as e:
            logger.error(
                f"Sub-step {name} ({target}) for external_id={external_id} returned an "
                f"unreadable 404 body: {e}; body={e.body!r}"
            )
            return SubStepReport(name=name, target=target, error=str(e))

        result = SubStepReport(name=name, target=target, outcome=outcome)
        if result.succeeded:
            logger.info(
                f"Sub-step {name} ({target}) succeeded for external_id={external_id}"
            )
        elif isinstance(outcome, StepSuccess):
            logger.error(
                f"Sub-step {name} ({target}) failed for external_id={external_id}. "
                f"Status: {outcome.status_code} response: {outcome.body}"
            )
        else:
            logger.error(
                f"Sub-step {name} ({target}) failed for external_id={external_id}: "
                f"{describe_outcome(outcome)}"
            )
        return result
