"""CLI command implementation and error handling for decgen."""

from __future__ import annotations

import logging
from collections.abc import Generator as ContextGenerator
from contextlib import contextmanager
from pathlib import Path
from typing import override

import typer
from rich.console import Console
from rich.panel import Panel

from decgen.config import GeneratorConfig
from decgen.generator import GenerationRequest, Generator
from decgen.logging import setup_logging
from decgen.models import DecoratorKind

logger = logging.getLogger(__name__)
console = Console()


class CLIError(Exception):
    """Exception for CLI-related errors with context.

    Wraps a generation failure together with the command that failed so
    the error panel tells the user where to look.
    """

    def __init__(
        self,
        message: str,
        command: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialise CLI error with context.

        Args:
            message: Human-readable error message describing what went wrong
            command: Name of the CLI command that failed
            original_error: The underlying exception that caused this CLI error

        """
        super().__init__(message)
        self.command = command
        self.original_error = original_error

    @override
    def __str__(self) -> str:
        """Return formatted error message with CLI context."""
        base_message = super().__str__()
        if self.command:
            return f"CLI command '{self.command}' failed: {base_message}"
        return base_message


@contextmanager
def cli_error_handler(command: str, title: str) -> ContextGenerator[None]:
    """Display failures as Rich error panels and exit with code 1.

    Decgen errors and unexpected exceptions alike are wrapped in a CLIError
    naming the command.

    Args:
        command: CLI command name for error context.
        title: Panel title for the error display.

    """
    try:
        yield
    except CLIError as e:
        logger.error("%s: %s", title, e)
        console.print(Panel(f"[red]{e}[/red]", title=f"❌ {title}", border_style="red"))
        raise typer.Exit(1) from e
    except Exception as e:
        cli_error = CLIError(str(e), command=command, original_error=e)
        logger.error("%s: %s", title, cli_error)
        console.print(
            Panel(f"[red]{cli_error}[/red]", title=f"❌ {title}", border_style="red")
        )
        raise typer.Exit(1) from cli_error


def setup_cli_logging(log_level: str, verbose: bool = False) -> None:
    """Set up logging for CLI commands.

    Args:
        log_level: Logging level string
        verbose: Override with DEBUG level if True

    """
    setup_logging(level="DEBUG" if verbose else log_level)


def generate_command(  # noqa: PLR0913 - mirrors the command line options
    source: str,
    interface_name: str,
    output: Path,
    kind: DecoratorKind,
    struct_name: str | None = None,
    config_path: Path | None = None,
    verbose: bool = False,
    log_level: str = "INFO",
) -> None:
    """CLI command implementation for generating a decorator.

    Args:
        source: Source package directory or import path
        interface_name: Interface to decorate
        output: Output file path
        kind: Decorator pattern
        struct_name: Generated struct name, defaults to <interface><suffix>
        config_path: Optional generator configuration file
        verbose: Enable verbose output
        log_level: Logging level

    """
    setup_cli_logging(log_level, verbose)

    with cli_error_handler("generate", "Generation failed"):
        config = GeneratorConfig.load(config_path)
        result = Generator(config).generate(
            GenerationRequest(
                source=source,
                interface_name=interface_name,
                output=output,
                kind=kind,
                struct_name=struct_name,
            )
        )
        console.print(
            f"[green]✅ Generated {result.kind} decorator {result.struct_name} "
            f"({len(result.methods)} methods): {result.output}[/green]"
        )
