"""Main entry point for decgen.

Generates a Go decorator for one interface per invocation:

    decgen -i Store -t trace -o store_trace.go ./store
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv

from decgen.cli import generate_command
from decgen.models import DecoratorKind

# Load environment variables (e.g. DECGEN_ENV, GOPATH) from a .env file if it exists
_ = load_dotenv()

app = typer.Typer(name="decgen")


@app.command()
def generate(  # noqa: PLR0913 - CLI entry point with many options
    source: Annotated[
        str,
        typer.Argument(
            help="Source package directory, or an import path of the current module",
        ),
    ],
    interface_name: Annotated[
        str,
        typer.Option("--interface", "-i", help="Interface name"),
    ],
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Output filename",
            file_okay=True,
            dir_okay=False,
        ),
    ],
    kind: Annotated[
        DecoratorKind,
        typer.Option("--type", "-t", help="Decorator type", case_sensitive=False),
    ],
    struct_name: Annotated[
        str | None,
        typer.Option(
            "--struct",
            "-s",
            help="Target struct name, default: <interface name>Tracer",
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Generator configuration YAML, defaults to ./.decgen.yaml when present",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable CLI verbose output (sets log level to DEBUG)",
        ),
    ] = False,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Set logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
            case_sensitive=False,
        ),
    ] = "INFO",
) -> None:
    """Generate a decorator that wraps an interface.

    Example:
        decgen -i Store -s StoreTx -t sqltx -o store_tx.go ./store

    """
    generate_command(
        source,
        interface_name,
        output,
        kind,
        struct_name=struct_name,
        config_path=config_path,
        verbose=verbose,
        log_level=log_level,
    )


if __name__ == "__main__":
    app()
