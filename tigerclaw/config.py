from __future__ import annotations

import os
from typing import Optional

import yaml
from pydantic import BaseModel, ValidationError

from .contracts import SUPPORTED_MIGRATION_NAME
from .errors import ConfigError

DEFAULT_TABLE_NAME = "external-adv-awin-migration"


class GlobalConfig(BaseModel):
    """Settings shared by every section of a run."""

    advertiser_id: Optional[int] = None
    external_id: Optional[int] = None
    migration_name: Optional[str] = None
    environment: str = "dev"
    base_growth_migration_url: str = "http://localhost"
    base_growth_migration_port: Optional[int] = None
    base_sas_data_import_url: str = "http://localhost"
    base_sas_data_import_port: Optional[int] = None
    request_timeout: float = 30.0

    @property
    def growth_migration_base_url(self) -> str:
        """Base URL of the migration service, port included when configured."""
        return _join_port(self.base_growth_migration_url, self.base_growth_migration_port)

    @property
    def sas_data_import_base_url(self) -> str:
        return _join_port(self.base_sas_data_import_url, self.base_sas_data_import_port)

    def ensure_valid(self) -> None:
        """Raise :class:`ConfigError` when identifiers or migration name are invalid."""
        if self.advertiser_id is not None and self.advertiser_id <= 0:
            raise ConfigError(
                f"Invalid advertiser_id: {self.advertiser_id}. Must be greater than 0"
            )
        if self.external_id is not None and self.external_id <= 0:
            raise ConfigError(
                f"Invalid external_id: {self.external_id}. Must be greater than 0"
            )
        if (
            self.migration_name is not None
            and self.migration_name.lower() != SUPPORTED_MIGRATION_NAME
        ):
            raise ConfigError(
                f"Invalid migration_name: {self.migration_name}. "
                "Must be 'sas' (case insensitive)"
            )


class OrchestrationConfig(BaseModel):
    """Which step to run and whether to force a status first."""

    enabled: bool = False
    step_to_run: str = ""
    step_status_to_force: str = ""
    force_run: bool = False


class SectionToggle(BaseModel):
    enabled: bool = False


class RecordStoreConfig(BaseModel):
    """Location of the advertiser record table."""

    table_name: str = DEFAULT_TABLE_NAME
    region: Optional[str] = None
    profile: Optional[str] = None


class TigerClawConfig(BaseModel):
    """Top-level configuration model."""

    globals: GlobalConfig = GlobalConfig()
    orchestration: OrchestrationConfig = OrchestrationConfig()
    sas_data_import: SectionToggle = SectionToggle()
    migration_api: SectionToggle = SectionToggle()
    terms: SectionToggle = SectionToggle()
    record_store: RecordStoreConfig = RecordStoreConfig()

    def with_external_id(self, external_id: int) -> "TigerClawConfig":
        """Copy of this config addressed at a different advertiser."""
        globals_ = self.globals.model_copy(update={"external_id": external_id})
        return self.model_copy(update={"globals": globals_})


def _join_port(url: str, port: Optional[int]) -> str:
    url = url.rstrip("/")
    return f"{url}:{port}" if port else url


def config_path_for_environment(environment: str) -> str:
    """Default config file for ``environment``; unknown names fall back to staging."""
    return {
        "local": "tests.local.yaml",
        "dev": "tests.dev.yaml",
        "staging": "tests.staging.yaml",
        "production": "tests.prod.yaml",
    }.get(environment, "tests.staging.yaml")


def load_config(path: Optional[str] = None, environment: str = "dev") -> TigerClawConfig:
    """Load configuration from a YAML file.

    Args:
        path: Optional path to config file. Falls back to the TIGERCLAW_CONFIG
            env variable, then to the default file for ``environment``.

    Raises:
        ConfigError: The file is missing, is not valid YAML, or does not match
            the configuration schema.
    """

    config_path = (
        path or os.getenv("TIGERCLAW_CONFIG") or config_path_for_environment(environment)
    )
    if not os.path.exists(config_path):
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read configuration file: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(
            f"Failed to parse configuration file: expected a mapping, got {type(data).__name__}"
        )
    try:
        return TigerClawConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Failed to parse configuration file: {e}") from e


def validate_config(config: TigerClawConfig) -> None:
    """Check that something is enabled and that the global settings are sane."""
    if not (
        config.orchestration.enabled
        or config.sas_data_import.enabled
        or config.migration_api.enabled
        or config.terms.enabled
    ):
        raise ConfigError("At least one test type must be enabled in the configuration")
    config.globals.ensure_valid()
