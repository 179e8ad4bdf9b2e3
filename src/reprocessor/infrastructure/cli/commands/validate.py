"""Validate configuration and collaborator reachability."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from reprocessor.infrastructure.adapters.http_entity_store import HttpEntityStore
from reprocessor.infrastructure.adapters.http_permission_checker import HttpPermissionChecker
from reprocessor.infrastructure.adapters.s3_staging_store import S3StagingStore
from reprocessor.infrastructure.adapters.sqs_batch_queue import SqsBatchQueue
from reprocessor.infrastructure.config.environment import OPTIONAL_VARIABLES, get_env
from reprocessor.infrastructure.config.settings import Settings

app = typer.Typer(help="Validate environment and configuration")
console = Console()
logger = logging.getLogger(__name__)


def _result(check: str, status: str, message: str, guidance: str = "") -> dict[str, Any]:
    return {"check": check, "status": status, "message": message, "guidance": guidance}


def _check_reachable(check: str, target: str, ping: Callable[[], bool], guidance: str) -> dict[str, Any]:
    if ping():
        return _result(check, "PASS", f"{target} reachable")
    return _result(check, "FAIL", f"{target} not reachable", guidance)


def _check_configuration(settings: Settings) -> dict[str, Any]:
    missing = settings.missing_required()
    if not missing:
        return _result("Configuration", "PASS", "All required settings present")
    return _result(
        "Configuration",
        "FAIL",
        f"Missing: {', '.join(missing)}",
        "\n".join(f"  Set {key}: {description}" for key, description in missing.items()),
    )


def _check_optional_variables() -> dict[str, Any]:
    unset = [key for key in OPTIONAL_VARIABLES if not get_env(key)]
    if not unset:
        return _result("Optional settings", "PASS", "All optional variables set")
    return _result("Optional settings", "PASS", f"Defaults in use for: {', '.join(unset)}")


def _validate(settings: Settings) -> list[dict[str, Any]]:
    results = [_check_configuration(settings), _check_optional_variables()]

    if settings.entity_store.url:
        store = HttpEntityStore(settings.entity_store.url, timeout_seconds=settings.entity_store.timeout_seconds)
        try:
            results.append(
                _check_reachable(
                    "Entity store",
                    settings.entity_store.url,
                    store.ping,
                    "Check ENTITY_STORE_URL and that the store API is running",
                )
            )
        finally:
            store.close()
    else:
        results.append(_result("Entity store", "SKIP", "ENTITY_STORE_URL not set"))

    if settings.permissions.url:
        checker = HttpPermissionChecker(settings.permissions.url, timeout_seconds=settings.permissions.timeout_seconds)
        try:
            results.append(
                _check_reachable(
                    "Permission service",
                    settings.permissions.url,
                    checker.ping,
                    "Check PERMISSIONS_URL and that the collections service is running",
                )
            )
        finally:
            checker.close()
    else:
        results.append(_result("Permission service", "SKIP", "PERMISSIONS_URL not set"))

    if settings.staging.bucket:
        staging = S3StagingStore(
            settings.staging.bucket,
            endpoint_url=settings.staging.endpoint_url,
            region=settings.staging.region,
        )
        results.append(
            _check_reachable(
                "Staging bucket",
                settings.staging.bucket,
                staging.ping,
                "Check STAGING_BUCKET, STAGING_ENDPOINT_URL and the AWS credentials",
            )
        )
    else:
        results.append(_result("Staging bucket", "SKIP", "STAGING_BUCKET not set"))

    if settings.queue.url:
        queue = SqsBatchQueue(settings.queue.url, region=settings.queue.region)
        results.append(
            _check_reachable(
                "Batch queue",
                settings.queue.url,
                queue.ping,
                "Check BATCH_QUEUE_URL, AWS_REGION and the AWS credentials",
            )
        )
    else:
        results.append(_result("Batch queue", "SKIP", "BATCH_QUEUE_URL not set"))

    return results


@app.command()
def run(
    config_path: str | None = typer.Option(None, "--config", help="Path to reprocessor.toml configuration file"),
) -> None:
    """
    Validate configuration and connectivity.

    Checks:
    - Required settings are present
    - Entity store and permission service respond
    - Staging bucket and batch queue are reachable

    Examples:
        reprocessor validate run
        reprocessor validate run --config deploy/reprocessor.toml
    """
    try:
        settings = Settings.from_toml(config_path)
    except Exception as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1)

    results = _validate(settings)
    _display_results_table(results)

    if all(r["status"] in ("PASS", "SKIP") for r in results):
        console.print("\n[green]✓ All validation checks passed![/green]")
        raise typer.Exit(0)
    console.print("\n[red]✗ Some validation checks failed. See details above.[/red]")
    raise typer.Exit(1)


def _display_results_table(results: list[dict[str, Any]]) -> None:
    """Display validation results in a formatted table."""
    table = Table(title="Validation Results", show_header=True, header_style="bold magenta")
    table.add_column("Check", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Message", style="white")

    for result in results:
        status_style = {
            "PASS": "[green][PASS][/green]",
            "FAIL": "[red][FAIL][/red]",
            "SKIP": "[dim][SKIP][/dim]",
        }.get(result["status"], result["status"])
        table.add_row(result["check"], status_style, result["message"])

    console.print()
    console.print(table)

    failed_results = [r for r in results if r["status"] == "FAIL" and r["guidance"]]
    if failed_results:
        console.print("\n[bold]Guidance for failed checks:[/bold]")
        for result in failed_results:
            console.print(f"\n[bold]{result['check']}:[/bold]")
            console.print(result["guidance"])
