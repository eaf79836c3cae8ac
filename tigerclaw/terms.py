"""Terms and conditions lookup for migrated advertisers."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from .client import MigrationServiceClient
from .contracts import Terms
from .errors import (
    AdvertiserNotFoundError,
    TigerClawError,
    UnauthorizedError,
    UnexpectedStatusError,
)
from .utils.ids import require_positive

logger = logging.getLogger(__name__)


class TermsClient:
    def __init__(self, client: MigrationServiceClient) -> None:
        self._client = client

    async def get_terms(self, token: str, awin_advertiser_id: int) -> Terms:
        """Fetch the terms offered to an AWIN advertiser.

        Raises:
            AdvertiserNotFoundError: 404, no terms for this advertiser.
            UnauthorizedError: 401.
            UnexpectedStatusError: any other non-200 status.
            httpx.HTTPError: The request failed.
        """
        require_positive("advertiser_id", awin_advertiser_id)
        response = await self._client.get(
            f"terms/sas/advertiser/awin/{awin_advertiser_id}", token
        )
        if response.status_code == 200:
            try:
                terms = Terms.model_validate_json(response.content)
            except ValidationError as e:
                raise TigerClawError(f"Failed to parse terms response: {e}") from e
            problems = terms.term_params.validation_errors()
            if problems:
                logger.warning(
                    f"Terms for advertiser {awin_advertiser_id} failed validation: {problems}"
                )
            return terms
        if response.status_code == 404:
            raise AdvertiserNotFoundError(
                awin_advertiser_id, "Advertiser not found or terms not available"
            )
        if response.status_code == 401:
            raise UnauthorizedError()
        raise UnexpectedStatusError(response.status_code)
