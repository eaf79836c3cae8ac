"""Checks against the SAS data import service."""

from __future__ import annotations

import logging
import os
from typing import Optional

import httpx
from pydantic import ValidationError

from .config import GlobalConfig
from .contracts import Merchant, ServiceHealth
from .errors import DataImportError
from .utils.ids import require_positive

logger = logging.getLogger(__name__)

API_KEY_VARIABLE = "AWIN_SAS_DATA_IMPORT_API_SECRET"


def get_api_key() -> Optional[str]:
    api_key = os.getenv(API_KEY_VARIABLE)
    if not api_key:
        logger.error("SAS Data Import API secret not found in environment variables")
        return None
    return api_key


class DataImportClient:
    """Talks to the SAS data import service.

    The health endpoint lives on the bare base URL; merchant extraction goes
    through the configured port.
    """

    def __init__(
        self,
        config: GlobalConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._config.request_timeout, transport=self._transport)

    async def health_check(self) -> Optional[str]:
        """Return the status reported by the service, or ``None`` if unreachable."""
        url = f"{self._config.base_sas_data_import_url.rstrip('/')}/actuator/health"
        logger.info(f"Running health check on: {url}")
        try:
            async with self._client() as client:
                response = await client.get(url)
            health = ServiceHealth.model_validate_json(response.content)
        except httpx.HTTPError as e:
            logger.error(f"sas_data_import ping request error: {e}")
            return None
        except ValidationError as e:
            logger.error(f"Failed to parse response from SAS data import: {e}")
            return None

        if health.status != "UP":
            logger.error(f"SAS Data Import service is not returning UP status: {health.status}")
        else:
            logger.info(f"SAS Data Import service is running with status: {health.status}")
        return health.status

    async def extract_merchant(self, external_id: int, api_key: str) -> Merchant:
        """Fetch the merchant exported for ``external_id``.

        Raises:
            DataImportError: The service did not answer 200 or the body is not
                a merchant.
            httpx.HTTPError: The request failed.
        """
        require_positive("external_id", external_id)
        url = f"{self._config.sas_data_import_base_url}/merchant/{external_id}"
        logger.info(f"Extracting merchant data using URL: {url}")
        async with self._client() as client:
            response = await client.get(url, headers={"Authorization": api_key})

        if response.status_code != 200:
            raise DataImportError(
                f"Failed to extract merchant data: {response.status_code}"
            )
        try:
            merchant = Merchant.model_validate_json(response.content)
        except ValidationError as e:
            raise DataImportError(f"Failed to parse merchant data: {e}") from e
        logger.info(f"Merchant data extracted for merchant_id={merchant.merchant_id}")
        return merchant
