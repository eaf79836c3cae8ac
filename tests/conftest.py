"""Shared fixtures: a fake migration service and config builders."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from tigerclaw.client import MigrationServiceClient
from tigerclaw.config import GlobalConfig, OrchestrationConfig, TigerClawConfig

BASE_URL = "http://migration.test"
PORT = 8080


class FakeMigrationService:
    """Scriptable stand-in for the remote service, served over httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._routes: Dict[Tuple[str, str], Any] = {}

    def respond(
        self,
        method: str,
        path: str,
        status_code: int = 200,
        json_body: Any = None,
        text: Optional[str] = None,
    ) -> None:
        self._routes[(method, path)] = (status_code, json_body, text)

    def fail(self, method: str, path: str, exc: Exception) -> None:
        self._routes[(method, path)] = exc

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self._routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(500, text=f"no route for {request.method} {request.url.path}")
        if isinstance(route, Exception):
            raise route
        status_code, json_body, text = route
        if json_body is not None:
            return httpx.Response(status_code, json=json_body)
        return httpx.Response(status_code, text=text or "")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> MigrationServiceClient:
        return MigrationServiceClient(f"{BASE_URL}:{PORT}", transport=self.transport)

    def calls(self, method: Optional[str] = None) -> List[Tuple[str, str]]:
        return [
            (r.method, r.url.path)
            for r in self.requests
            if method is None or r.method == method
        ]

    @staticmethod
    def body_of(request: httpx.Request) -> Any:
        return json.loads(request.content) if request.content else None


@pytest.fixture
def service() -> FakeMigrationService:
    return FakeMigrationService()


@pytest.fixture
def make_config():
    def _make(
        external_id: Optional[int] = 98765,
        step: str = "ADV",
        force_run: bool = False,
        force_status: str = "",
    ) -> TigerClawConfig:
        return TigerClawConfig(
            globals=GlobalConfig(
                external_id=external_id,
                migration_name="sas",
                base_growth_migration_url=BASE_URL,
                base_growth_migration_port=PORT,
            ),
            orchestration=OrchestrationConfig(
                enabled=True,
                step_to_run=step,
                force_run=force_run,
                step_status_to_force=force_status,
            ),
        )

    return _make


@pytest.fixture
def not_found_body() -> Dict[str, Any]:
    return {
        "timestamp": "2024-05-01T10:00:00Z",
        "status": 404,
        "error": "Not Found",
        "path": "/migrate/sas/advertiser/98765/execute-step/ADV",
    }
