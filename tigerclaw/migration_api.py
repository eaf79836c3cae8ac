"""Lockdown and fee-lock calls against the SAS migration API."""

from __future__ import annotations

import logging
from typing import Dict

import httpx

from .client import MigrationServiceClient
from .contracts import (
    StepExecutionOutcome,
    StepSuccess,
    StepTransportFailure,
    StepUnauthorized,
    StepUnexpectedStatus,
    describe_outcome,
)
from .utils.ids import require_positive

logger = logging.getLogger(__name__)


class MigrationApiClient:
    """Freeze a SAS merchant ahead of migration."""

    def __init__(self, client: MigrationServiceClient) -> None:
        self._client = client

    async def enable_lockdown(self, token: str, merchant_id: int) -> StepExecutionOutcome:
        return await self._lock(token, merchant_id, "lockdown")

    async def enable_fee_lock(self, token: str, merchant_id: int) -> StepExecutionOutcome:
        return await self._lock(token, merchant_id, "feelock")

    async def run_locks(self, token: str, merchant_id: int) -> Dict[str, StepExecutionOutcome]:
        """Apply lockdown then fee lock; the second runs even if the first fails."""
        require_positive("merchant_id", merchant_id)
        return {
            "lockdown": await self.enable_lockdown(token, merchant_id),
            "feelock": await self.enable_fee_lock(token, merchant_id),
        }

    async def _lock(self, token: str, merchant_id: int, kind: str) -> StepExecutionOutcome:
        require_positive("merchant_id", merchant_id)
        try:
            response = await self._client.post(f"sasMigrationApi/{kind}/{merchant_id}", token)
        except httpx.HTTPError as e:
            outcome: StepExecutionOutcome = StepTransportFailure(cause=e)
        else:
            if response.is_success:
                outcome = StepSuccess(status_code=response.status_code, body=response.text)
            elif response.status_code == 401:
                outcome = StepUnauthorized()
            else:
                outcome = StepUnexpectedStatus(
                    status_code=response.status_code, body=response.text
                )

        if isinstance(outcome, StepSuccess):
            logger.info(f"Enabled {kind} for merchant_id: {merchant_id}")
        else:
            logger.error(
                f"Failed to enable {kind} for merchant_id: {merchant_id}. "
                f"{describe_outcome(outcome)}"
            )
        return outcome
