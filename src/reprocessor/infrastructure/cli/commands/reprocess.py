"""Reprocess entities from the command line."""

from __future__ import annotations

import logging
from functools import partial
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from reprocessor.application.services.component_materializer import ComponentMaterializer
from reprocessor.application.services.entity_resolver import EntityResolver
from reprocessor.application.use_cases.handle_reprocess_request import (
    authorize_reprocess,
    handle_reprocess_request,
)
from reprocessor.application.use_cases.reprocess_entity import new_batch_id, reprocess_entity
from reprocessor.domain.errors import (
    DepthExceeded,
    DownstreamUnavailable,
    NotFoundError,
    PermissionDenied,
)
from reprocessor.domain.policy.cascade_policy import select_cascade_boundary
from reprocessor.infrastructure.adapters.http_entity_store import HttpEntityStore
from reprocessor.infrastructure.adapters.http_permission_checker import HttpPermissionChecker
from reprocessor.infrastructure.adapters.rich_pipeline_events import RichPipelineEvents
from reprocessor.infrastructure.adapters.s3_staging_store import S3StagingStore
from reprocessor.infrastructure.adapters.sqs_batch_queue import SqsBatchQueue
from reprocessor.infrastructure.config.settings import Settings
from reprocessor.infrastructure.logging import configure_logging, set_correlation_id

app = typer.Typer(help="Reprocess entities through the ingest pipeline")
console = Console()
logger = logging.getLogger(__name__)


def _load_settings(config_path: str | None) -> Settings:
    try:
        settings = Settings.from_toml(config_path)
    except Exception as e:
        typer.echo(f"Error loading configuration: {e}", err=True)
        raise typer.Exit(1)

    missing = settings.missing_required()
    if missing:
        for key, description in missing.items():
            typer.echo(f"Error: {key} is not set ({description})", err=True)
        raise typer.Exit(1)
    return settings


def _entity_store(settings: Settings) -> HttpEntityStore:
    return HttpEntityStore(
        base_url=settings.entity_store.url,
        token=settings.entity_store.token or None,
        timeout_seconds=settings.entity_store.timeout_seconds,
        # One connection per concurrent component download, plus entity reads
        max_connections=settings.materialization.max_component_workers
        + settings.materialization.max_entity_workers,
    )


def _parse_prompts(prompts: list[str] | None) -> dict[str, str] | None:
    """Parse ``key=value`` pairs; the request validation checks the keys."""
    if not prompts:
        return None
    parsed: dict[str, str] = {}
    for item in prompts:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            typer.echo(f"Error: --prompt expects key=value, got {item!r}", err=True)
            raise typer.Exit(1)
        parsed[key.strip()] = value
    return parsed


@app.command()
def run(
    pi: str = typer.Argument(..., help="Entity identifier (26-character ULID)"),
    phase: list[str] = typer.Option(..., "--phase", "-p", help="Phase to run: pinax, cheimarros or description (repeatable)"),
    cascade: bool = typer.Option(False, help="Also reprocess ancestors up to the collection root"),
    stop_at_pi: str | None = typer.Option(None, help="Ancestor at which the cascade stops (not included)"),
    custom_note: str | None = typer.Option(None, help="Free-text note passed to the pipeline"),
    prompt: list[str] | None = typer.Option(None, "--prompt", help="Custom prompt as key=value (repeatable)"),
    actor: str | None = typer.Option(None, help="Actor identifier used for the permission check"),
    config_path: str | None = typer.Option(None, "--config", help="Path to reprocessor.toml configuration file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show HTTP and AWS client logs"),
) -> None:
    """
    Stage an entity (and optionally its ancestors) and queue it for reprocessing.

    Examples:
        reprocessor reprocess run 01K8ABCDEFGHJKMNPQRSTVWXYZ --phase pinax
        reprocessor reprocess run 01K8ABCDEFGHJKMNPQRSTVWXYZ -p description --cascade
    """
    configure_logging(logging.INFO, verbose=verbose)
    settings = _load_settings(config_path)

    batch_id = new_batch_id()
    set_correlation_id(batch_id)

    options: dict[str, Any] = {}
    if stop_at_pi:
        options["stop_at_pi"] = stop_at_pi
    custom_prompts = _parse_prompts(prompt)
    if custom_prompts:
        options["custom_prompts"] = custom_prompts
    if custom_note:
        options["custom_note"] = custom_note
    payload = {"pi": pi, "phases": phase, "cascade": cascade, "options": options}

    retry_policy = settings.retry.to_policy()
    entity_store = _entity_store(settings)
    staging_store = S3StagingStore(
        bucket=settings.staging.bucket,
        endpoint_url=settings.staging.endpoint_url,
        region=settings.staging.region,
        max_pool_connections=settings.materialization.max_component_workers + 1,
    )
    run_job = partial(
        reprocess_entity,
        resolver=EntityResolver(entity_store, retry_policy, max_hops=settings.resolution.max_hops),
        materializer=ComponentMaterializer(
            entity_store,
            entity_store,
            staging_store,
            retry_policy,
            max_entity_workers=settings.materialization.max_entity_workers,
            max_component_workers=settings.materialization.max_component_workers,
        ),
        staging_store=staging_store,
        batch_queue=SqsBatchQueue(settings.queue.url, region=settings.queue.region),
        events=RichPipelineEvents(console),
        retry_policy=retry_policy,
        staging_root=settings.staging.root,
        status_base_url=settings.service.status_base_url,
        batch_id=batch_id,
    )

    permission_checker = HttpPermissionChecker(
        settings.permissions.url,
        timeout_seconds=settings.permissions.timeout_seconds,
    )
    try:
        status, body = handle_reprocess_request(payload, actor, permission_checker, run_job)
    finally:
        entity_store.close()
        permission_checker.close()

    if status != 200:
        console.print(f"[red]✗ {body['error']} ({status}): {body['message']}[/red]")
        raise typer.Exit(1)

    console.print_json(data=body)


@app.command()
def resolve(
    pi: str = typer.Argument(..., help="Entity identifier (26-character ULID)"),
    stop_at_pi: str | None = typer.Option(None, help="Ancestor at which the walk stops (defaults to the collection root)"),
    actor: str | None = typer.Option(None, help="Actor identifier used for the permission check"),
    config_path: str | None = typer.Option(None, "--config", help="Path to reprocessor.toml configuration file"),
) -> None:
    """
    Show which entities a cascading reprocess would cover, without staging anything.

    Examples:
        reprocessor reprocess resolve 01K8ABCDEFGHJKMNPQRSTVWXYZ
    """
    configure_logging(logging.WARNING)
    settings = _load_settings(config_path)

    entity_store = _entity_store(settings)
    permission_checker = HttpPermissionChecker(
        settings.permissions.url,
        timeout_seconds=settings.permissions.timeout_seconds,
    )
    resolver = EntityResolver(entity_store, settings.retry.to_policy(), max_hops=settings.resolution.max_hops)

    try:
        permission = authorize_reprocess(permission_checker, pi, actor)
        stop_id = select_cascade_boundary(stop_at_pi, permission)
        chain = resolver.resolve_chain(pi, cascade=True, stop_id=stop_id)
        entities = [entity_store.get_entity(entity_id) for entity_id in chain]
    except (PermissionDenied, NotFoundError, DepthExceeded, DownstreamUnavailable) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(1)
    finally:
        entity_store.close()
        permission_checker.close()

    table = Table(title=f"Cascade from {pi}", show_header=True, header_style="bold magenta")
    table.add_column("#", justify="right")
    table.add_column("PI", style="cyan", no_wrap=True)
    table.add_column("Version", justify="right")
    table.add_column("Components", justify="right")
    table.add_column("Children", justify="right")
    for index, entity in enumerate(entities):
        table.add_row(
            str(index),
            entity.pi,
            str(entity.ver),
            str(len(entity.components)),
            str(len(entity.children_pi)),
        )

    console.print(table)
    console.print(f"\nStop boundary: [cyan]{stop_id}[/cyan]")
