"""HTTP access to the growth migration service."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .config import GlobalConfig

logger = logging.getLogger(__name__)


class MigrationServiceClient:
    """Send single bearer-authenticated requests to the migration service.

    A fresh ``httpx.AsyncClient`` is opened per call, so instances hold no
    connection state and can be shared between concurrent invocations.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(
        cls, config: GlobalConfig, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "MigrationServiceClient":
        return cls(
            config.growth_migration_base_url,
            timeout=config.request_timeout,
            transport=transport,
        )

    def url_for(self, endpoint_path: str) -> str:
        return f"{self.base_url}/{endpoint_path.lstrip('/')}"

    async def request(
        self,
        method: str,
        endpoint_path: str,
        token: str,
        json: Any = None,
    ) -> httpx.Response:
        """Send one request and return the response, whatever its status.

        Raises:
            httpx.HTTPError: The request could not be sent or answered.
        """
        headers = {"Authorization": f"Bearer {token}"}
        if json is not None:
            headers["Content-Type"] = "application/json"
        url = self.url_for(endpoint_path)
        logger.debug(f"{method} {url}")
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            return await client.request(method, url, headers=headers, json=json)

    async def get(self, endpoint_path: str, token: str) -> httpx.Response:
        return await self.request("GET", endpoint_path, token)

    async def post(self, endpoint_path: str, token: str) -> httpx.Response:
        return await self.request("POST", endpoint_path, token)

    async def patch(self, endpoint_path: str, token: str, json: Any) -> httpx.Response:
        return await self.request("PATCH", endpoint_path, token, json=json)
