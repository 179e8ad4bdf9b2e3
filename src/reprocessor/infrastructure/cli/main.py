import json

import typer

from ...application.use_cases.handle_reprocess_request import service_info
from .commands import (
    reprocess as reprocess_cmd,
    validate as validate_cmd,
)

app = typer.Typer(help="Reprocessor CLI")

app.add_typer(reprocess_cmd.app, name="reprocess")
app.add_typer(validate_cmd.app, name="validate")


@app.command()
def info() -> None:
    """Show service name and version."""
    typer.echo(json.dumps(service_info()))


if __name__ == "__main__":
    app()
