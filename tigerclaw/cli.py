"""Command line interface for SAS to AWIN migration runs."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import httpx
import typer

from tigerclaw.auth import get_token_and_environment
from tigerclaw.batch import run_many
from tigerclaw.client import MigrationServiceClient
from tigerclaw.config import TigerClawConfig, load_config, validate_config
from tigerclaw.contracts import InvocationReport, describe_outcome
from tigerclaw.data_import import DataImportClient, get_api_key
from tigerclaw.errors import (
    AdvertiserNotFoundError,
    ConfigError,
    CredentialError,
    DataImportError,
    InvalidInputError,
    RecordStoreError,
    StatusDecodeError,
    TigerClawError,
)
from tigerclaw.execute import StepExecutor
from tigerclaw.migration_api import MigrationApiClient
from tigerclaw.orchestrator import MigrationOrchestrator
from tigerclaw.persistence import get_gateway
from tigerclaw.status import WorkflowPhase, all_tokens, decode
from tigerclaw.terms import TermsClient

logger = logging.getLogger(__name__)

app = typer.Typer(help="CLI wrapper for SAS to AWIN migration runs")

# Command groups
advertiser_app = typer.Typer(help="Commands for inspecting advertiser records")
status_app = typer.Typer(help="Commands for working with migration status tokens")

app.add_typer(advertiser_app, name="advertiser")
app.add_typer(status_app, name="status")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """TigerClaw - SAS Migration Tool."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_service_client(config: TigerClawConfig) -> MigrationServiceClient:
    return MigrationServiceClient.from_config(config.globals)


def build_orchestrator(config: TigerClawConfig) -> MigrationOrchestrator:
    return MigrationOrchestrator(
        get_gateway(config), StepExecutor(build_service_client(config))
    )


def _load(config_path: Optional[Path], env: str) -> TigerClawConfig:
    try:
        return load_config(str(config_path) if config_path else None, environment=env)
    except ConfigError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)


def _token(env: str) -> str:
    try:
        token, _environment = get_token_and_environment(env)
    except (CredentialError, InvalidInputError) as e:
        typer.secho(f"Could not obtain a token: {e}", fg=typer.colors.RED)
        raise typer.Exit(code=1)
    return token


def _echo_report(report: InvocationReport) -> None:
    if report.invalid_input is not None:
        typer.secho(
            f"[{report.external_id}] {describe_outcome(report.invalid_input)}",
            fg=typer.colors.RED,
        )
        return
    for sub in (report.init, report.force, report.step):
        if sub is None:
            continue
        detail = sub.error or describe_outcome(sub.outcome)
        colour = typer.colors.GREEN if sub.succeeded else typer.colors.RED
        typer.secho(f"[{report.external_id}] {sub.name} {sub.target}: {detail}", fg=colour)


@app.command("run")
def run(
    env: str = typer.Option("dev", "--env", "-n", help="Environment to run against"),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to YAML configuration file"
    ),
    external_id: Optional[int] = typer.Option(
        None, "--external-id", "-e", help="External (SAS merchant) ID to run against"
    ),
    advertiser_id: Optional[int] = typer.Option(
        None, "--advertiser-id", "-a", help="AWIN advertiser ID to run against"
    ),
    step: Optional[str] = typer.Option(
        None, "--step", "-s", help="Migration orchestration step to execute"
    ),
    force: Optional[bool] = typer.Option(
        None, "--force/--no-force", help="Force the advertiser status before the step"
    ),
    force_status: Optional[str] = typer.Option(
        None, "--force-status", help="Status token to force when --force is set"
    ),
) -> None:
    """
    Run every enabled section of the configuration for one advertiser.

    Orchestration runs when enabled and a step is set, followed by the SAS
    data import checks, the migration API locks, and the terms lookup.
    Command line values override the configuration file.

    Example:
        tigerclaw run --env dev --external-id 44911 --step ADV
        tigerclaw run -n dev -c tests.dev.yaml --force --force-status INIT_DONE
    """
    config = _load(config_path, env)

    if advertiser_id is not None:
        logger.warning("advertiser_id passed on the command line overrides the config file")
        config.globals.advertiser_id = advertiser_id
    if external_id is not None:
        logger.warning("external_id passed on the command line overrides the config file")
        config.globals.external_id = external_id
    if step is not None:
        config.orchestration.enabled = True
        config.orchestration.step_to_run = step
    if force is not None:
        config.orchestration.force_run = force
    if force_status is not None:
        config.orchestration.step_status_to_force = force_status

    try:
        validate_config(config)
    except ConfigError as e:
        logger.error(f"Configuration validation failed, exiting: {e}")
        return

    token = _token(env)
    ok = asyncio.run(_run_sections(token, config))
    if not ok:
        raise typer.Exit(code=1)


async def _run_sections(token: str, config: TigerClawConfig) -> bool:
    ok = True
    service = build_service_client(config)

    if config.orchestration.enabled and config.orchestration.step_to_run:
        typer.echo("Orchestration step is enabled, running...")
        report = await build_orchestrator(config).run(token, config)
        _echo_report(report)
        if report.invalid_input is not None:
            logger.error(
                f"Configuration validation failed, exiting: {report.invalid_input.reason}"
            )
            return True
        ok = report.succeeded
    else:
        typer.echo("Orchestration step is not enabled or no step specified, skipping.")

    if config.sas_data_import.enabled:
        typer.echo("SAS Data Import step is enabled, running...")
        await _run_data_import(config)

    if config.migration_api.enabled:
        typer.echo("Migration API step is enabled, running...")
        if config.globals.external_id is None:
            typer.secho("external_id is required for migration_api", fg=typer.colors.RED)
            ok = False
        else:
            outcomes = await MigrationApiClient(service).run_locks(
                token, config.globals.external_id
            )
            for kind, outcome in outcomes.items():
                typer.echo(f"{kind}: {describe_outcome(outcome)}")

    if config.terms.enabled:
        typer.echo("Terms step is enabled, running...")
        try:
            terms = await TermsClient(service).get_terms(token, config.globals.advertiser_id)
        except (TigerClawError, httpx.HTTPError) as e:
            typer.secho(f"Terms lookup failed: {e}", fg=typer.colors.RED)
        else:
            typer.echo(f"Advertiser terms: {terms.term_status}")

    return ok


async def _run_data_import(config: TigerClawConfig) -> None:
    client = DataImportClient(config.globals)
    await client.health_check()

    api_key = get_api_key()
    if api_key is None:
        return
    try:
        merchant = await client.extract_merchant(config.globals.external_id, api_key)
    except (InvalidInputError, DataImportError, httpx.HTTPError) as e:
        logger.error(f"Merchant extraction failed: {e}")
        return
    typer.echo(f"Merchant extraction completed: {merchant.merchant_id} {merchant.organization}")


@app.command("batch")
def batch(
    external_ids: List[int] = typer.Argument(..., help="External IDs to run"),
    step: str = typer.Option(..., "--step", "-s", help="Migration orchestration step to execute"),
    env: str = typer.Option("dev", "--env", "-n", help="Environment to run against"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c"),
    concurrency: int = typer.Option(4, "--concurrency", help="Advertisers in flight at once"),
    force: bool = typer.Option(False, "--force/--no-force"),
    force_status: Optional[str] = typer.Option(None, "--force-status"),
) -> None:
    """
    Run the same step for several advertisers concurrently.

    Example:
        tigerclaw batch --step ADV 44911 44912 44913 --concurrency 2
    """
    config = _load(config_path, env)
    config.orchestration.enabled = True
    config.orchestration.step_to_run = step
    config.orchestration.force_run = force
    if force_status is not None:
        config.orchestration.step_status_to_force = force_status

    try:
        WorkflowPhase.parse(step)
        validate_config(config)
    except (ConfigError, InvalidInputError) as e:
        logger.error(f"Configuration validation failed, exiting: {e}")
        return

    token = _token(env)
    reports = asyncio.run(
        run_many(build_orchestrator(config), token, config, external_ids, concurrency)
    )
    for report in reports:
        _echo_report(report)
    if not all(r.succeeded for r in reports):
        raise typer.Exit(code=1)


@advertiser_app.command("show")
def advertiser_show(
    external_id: int,
    env: str = typer.Option("dev", "--env", "-n"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c"),
) -> None:
    """Show the persisted advertiser record for an external ID."""
    config = _load(config_path, env)
    gateway = get_gateway(config)
    try:
        record = asyncio.run(gateway.find_by_external_id(external_id))
    except AdvertiserNotFoundError:
        typer.echo("Advertiser not found")
        raise typer.Exit(code=1)
    except (InvalidInputError, RecordStoreError) as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)

    typer.echo(f"Advertiser {record.external_id} (awin {record.awin_id})")
    typer.echo(f"  migration: {record.migration_name}")
    typer.echo(
        f"  status: {record.migration_status.token} (stored as {record.migration_status_token})"
    )
    typer.echo(f"  completed: {record.migration_completed}")
    if record.start_date or record.end_date:
        typer.echo(f"  window: {record.start_date} -> {record.end_date}")
    typer.echo(f"  terms: {record.terms.terms_status}")
    problems = record.validation_errors()
    if problems:
        typer.secho(f"  problems: {', '.join(problems)}", fg=typer.colors.YELLOW)


@status_app.command("phases")
def status_phases() -> None:
    """List workflow phases in canonical order."""
    for phase in WorkflowPhase:
        typer.echo(phase.token)


@status_app.command("tokens")
def status_tokens() -> None:
    """List every valid migration status token."""
    for token in all_tokens():
        typer.echo(token)


@status_app.command("decode")
def status_decode(token: str) -> None:
    """Decode a migration status token into phase and lifecycle."""
    try:
        status = decode(token)
    except StatusDecodeError as e:
        typer.secho(str(e), fg=typer.colors.RED)
        raise typer.Exit(code=1)
    typer.echo(f"{status.phase.name}\t{status.lifecycle.name}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    app()
