"""Tests for the decgen command line.

Commands are exercised through their public functions and through the Typer
app, against real Go modules in temporary directories. Logging setup is
patched out so tests do not reconfigure the process-wide loggers.
"""

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import typer
from typer.testing import CliRunner

from decgen.__main__ import app
from decgen.cli import CLIError, cli_error_handler, generate_command
from decgen.errors import NotFoundError
from decgen.models import DecoratorKind

from gomodule import GoModuleBuilder

runner = CliRunner()


@pytest.fixture(autouse=True)
def mock_setup_logging() -> Iterator[MagicMock]:
    """Keep CLI commands from reconfiguring logging."""
    with patch("decgen.cli.setup_logging") as mock:
        yield mock


class TestGenerateCommand:
    """Test generate_command functionality."""

    def test_generates_decorator_successfully(
        self, store_module: GoModuleBuilder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test that a valid request writes the file and reports it."""
        output = store_module.directory("store") / "store_trace.go"

        generate_command("store", "Store", output, DecoratorKind.TRACE)

        assert output.exists()
        assert "Generated trace decorator StoreTracer" in capsys.readouterr().out

    def test_handles_missing_interface(
        self, store_module: GoModuleBuilder, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test that generation errors exit with code 1 and an error panel."""
        output = store_module.directory("store") / "store_trace.go"

        with pytest.raises(typer.Exit) as exc_info:
            generate_command("store", "Missing", output, DecoratorKind.TRACE)

        assert exc_info.value.exit_code == 1
        assert "Generation failed" in capsys.readouterr().out
        assert not output.exists()

    def test_handles_invalid_config_file(
        self, store_module: GoModuleBuilder, tmp_path: Path
    ) -> None:
        """Test that configuration errors are reported like generation errors."""
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("unknown_option: true\n")
        output = store_module.directory("store") / "store_trace.go"

        with pytest.raises(typer.Exit):
            generate_command(
                "store", "Store", output, DecoratorKind.TRACE, config_path=config_path
            )

        assert not output.exists()

    def test_uses_config_file(self, store_module: GoModuleBuilder, tmp_path: Path) -> None:
        """Test that the configuration file changes the default struct name."""
        config_path = tmp_path / "decgen.yaml"
        config_path.write_text("struct_suffix: Mutex\n")
        output = store_module.directory("store") / "store_mutex.go"

        generate_command(
            "store",
            "Store",
            output,
            DecoratorKind.SERIALIZE_ACCESS,
            config_path=config_path,
        )

        assert "type StoreMutex struct" in output.read_text(encoding="utf-8")

    def test_verbose_mode_changes_log_level(
        self, store_module: GoModuleBuilder, mock_setup_logging: MagicMock
    ) -> None:
        """Test that verbose mode sets up DEBUG logging."""
        output = store_module.directory("store") / "store_trace.go"

        generate_command("store", "Store", output, DecoratorKind.TRACE, verbose=True)

        mock_setup_logging.assert_called_once_with(level="DEBUG")

    def test_respects_log_level_parameter(
        self, store_module: GoModuleBuilder, mock_setup_logging: MagicMock
    ) -> None:
        """Test that the log level option is passed to logging setup."""
        output = store_module.directory("store") / "store_trace.go"

        generate_command("store", "Store", output, DecoratorKind.TRACE, log_level="WARNING")

        mock_setup_logging.assert_called_once_with(level="WARNING")


class TestCliErrorHandler:
    """Test the error panel context manager."""

    def test_decgen_errors_exit_with_code_one(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test that decgen errors are wrapped with the command name."""
        with pytest.raises(typer.Exit) as exc_info:
            with cli_error_handler("generate", "Generation failed"):
                raise NotFoundError("Type 'Store' not found")

        cli_error = exc_info.value.__cause__
        assert isinstance(cli_error, CLIError)
        assert cli_error.command == "generate"
        assert isinstance(cli_error.original_error, NotFoundError)
        assert "Type 'Store' not found" in capsys.readouterr().out

    def test_unexpected_exceptions_exit_with_code_one(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Test that I/O and other unexpected errors get the same panel."""
        with pytest.raises(typer.Exit) as exc_info:
            with cli_error_handler("generate", "Generation failed"):
                raise PermissionError("store_tx.go: permission denied")

        assert exc_info.value.exit_code == 1
        cli_error = exc_info.value.__cause__
        assert isinstance(cli_error, CLIError)
        assert isinstance(cli_error.original_error, PermissionError)
        assert "permission denied" in capsys.readouterr().out


class TestCLIError:
    """Test CLIError formatting."""

    def test_message_includes_command(self) -> None:
        """Test that the command name prefixes the message."""
        error = CLIError("Type 'Store' not found", command="generate")

        assert str(error) == "CLI command 'generate' failed: Type 'Store' not found"

    def test_message_without_command(self) -> None:
        """Test that the bare message is kept without a command."""
        assert str(CLIError("boom")) == "boom"


class TestApp:
    """Test option parsing of the Typer app."""

    def test_generate_through_app(self, store_module: GoModuleBuilder) -> None:
        """Test a complete invocation with short options."""
        output = store_module.directory("store") / "store_tx.go"
        store_module.write(
            "store/store.go",
            """
            package store

            import "context"

            type Store interface {
            	Delete(ctx context.Context, id int64) error
            }
            """,
        )

        result = runner.invoke(
            app, ["-i", "Store", "-t", "SQLTX", "-s", "StoreTx", "-o", str(output), "store"]
        )

        assert result.exit_code == 0, result.output
        assert "func NewStoreTx(" in output.read_text(encoding="utf-8")

    def test_missing_interface_option(self, store_module: GoModuleBuilder) -> None:
        """Test that the interface option is required."""
        result = runner.invoke(app, ["-t", "trace", "-o", "out.go", "store"])

        assert result.exit_code == 2

    def test_unknown_decorator_type(self, store_module: GoModuleBuilder) -> None:
        """Test that only the known decorator types are accepted."""
        result = runner.invoke(app, ["-i", "Store", "-t", "retry", "-o", "out.go", "store"])

        assert result.exit_code == 2

    def test_generation_failure_exit_code(self, store_module: GoModuleBuilder) -> None:
        """Test that a failing generation exits with code 1."""
        result = runner.invoke(
            app, ["-i", "Missing", "-t", "trace", "-o", "store/out.go", "store"]
        )

        assert result.exit_code == 1
        assert "Generation failed" in result.output
