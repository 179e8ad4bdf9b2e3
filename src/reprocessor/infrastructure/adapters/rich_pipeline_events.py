"""Rich-based pipeline event sink for the CLI."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ...application.ports.pipeline_events import PipelineEventsPort
from .logging_pipeline_events import LoggingPipelineEvents

if TYPE_CHECKING:
    from ...domain.models.batch_message import BatchMessage
    from ...domain.models.manifest import BatchManifest
    from ...domain.models.materialized import MaterializedEntity


class RichPipelineEvents(PipelineEventsPort):
    """
    Prints pipeline stages to the terminal and logs them as well.

    In non-interactive mode (stdout is not a TTY) nothing is printed and
    only the log records are written, so piped output stays clean.
    """

    def __init__(self, console: Console | None = None) -> None:
        """
        Initialize the event sink.

        Args:
            console: Console to print to (defaults to stdout when interactive)
        """
        self.is_interactive = sys.stdout.isatty() if console is None else True
        self.console = console or Console(file=sys.stdout if self.is_interactive else sys.stderr)
        self.log_events = LoggingPipelineEvents()

    def batch_started(self, batch_id, target_id, phases, cascade, stop_id) -> None:
        self.log_events.batch_started(batch_id, target_id, phases, cascade, stop_id)
        if self.is_interactive:
            self.console.print(
                f"[bold]Batch[/bold] {batch_id}: reprocessing [cyan]{target_id}[/cyan] "
                f"({', '.join(phases)}, cascade={'yes' if cascade else 'no'})"
            )

    def chain_resolved(self, batch_id: str, entity_ids: list[str]) -> None:
        self.log_events.chain_resolved(batch_id, entity_ids)
        if self.is_interactive:
            self.console.print(f"[green]✓[/green] Resolved {len(entity_ids)} entities")

    def entities_materialized(self, batch_id: str, entities: list[MaterializedEntity]) -> None:
        self.log_events.entities_materialized(batch_id, entities)
        if not self.is_interactive:
            return

        table = Table(title="Staged Entities", show_header=True, header_style="bold")
        table.add_column("PI", style="cyan")
        table.add_column("Version", justify="right")
        table.add_column("Files", justify="right")
        table.add_column("Bytes", justify="right", style="green")
        for entity in entities:
            table.add_row(entity.pi, str(entity.ver), str(len(entity.files)), str(entity.total_bytes))
        self.console.print(table)

    def manifest_built(self, batch_id: str, manifest: BatchManifest) -> None:
        self.log_events.manifest_built(batch_id, manifest)
        if self.is_interactive:
            self.console.print(
                f"[green]✓[/green] Manifest built: {len(manifest.directories)} directories, "
                f"{manifest.total_files} files"
            )

    def batch_published(self, batch_id: str, message: BatchMessage, duration_seconds: float) -> None:
        self.log_events.batch_published(batch_id, message, duration_seconds)
        if not self.is_interactive:
            return

        summary_table = Table(title="Reprocessing Batch Summary", show_header=True, header_style="bold")
        summary_table.add_column("Metric", style="cyan")
        summary_table.add_column("Value", style="green")
        summary_table.add_row("Batch ID", batch_id)
        summary_table.add_row("Manifest", message.manifest_location)
        summary_table.add_row("Files", str(message.total_files))
        summary_table.add_row("Bytes", str(message.total_bytes))
        summary_table.add_row("Duration", f"{duration_seconds:.2f}s")
        self.console.print(summary_table)

    def batch_failed(self, batch_id: str, error: Exception) -> None:
        self.log_events.batch_failed(batch_id, error)
        if self.is_interactive:
            self.console.print(
                Panel(f"❌ {type(error).__name__}: {error}", title=f"Batch {batch_id} failed", border_style="red")
            )
