"""Python-standard logging configuration for decgen.

Logging is set up with logging.config.dictConfig() from YAML files shipped
in the package's config/ directory. Modules log through
``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Any, cast

import yaml

CONFIG_DIR = Path(__file__).parent / "config"
ENVIRONMENT_VARIABLE = "DECGEN_ENV"

_ENVIRONMENT_ALIASES = {
    "dev": "dev",
    "development": "dev",
    "test": "test",
    "prod": "prod",
    "production": "prod",
}


class LoggingError(Exception):
    """Exception raised for logging configuration errors."""

    pass


def get_config_path(environment: str | None = None) -> Path:
    """Get the path to a logging configuration file.

    Args:
        environment: Environment (dev, test, prod) for environment-specific configs;
            read from DECGEN_ENV when omitted

    Returns:
        Path to the logging configuration file

    Raises:
        LoggingError: If no suitable configuration file is found

    """
    env = (environment or os.getenv(ENVIRONMENT_VARIABLE, "")).lower()
    env = _ENVIRONMENT_ALIASES.get(env, "")
    config_file = f"logging-{env}.yaml" if env else "logging.yaml"

    config_path = CONFIG_DIR / config_file

    # Fallback to default if specific config doesn't exist
    if not config_path.exists() and config_file != "logging.yaml":
        config_path = CONFIG_DIR / "logging.yaml"

    if not config_path.exists():
        raise LoggingError(
            f"No logging configuration found. Expected at: {config_path}"
        )

    return config_path


def load_config(config_path: Path) -> dict[str, Any]:
    """Load logging configuration from YAML file.

    Raises:
        LoggingError: If configuration cannot be loaded or parsed

    """
    try:
        with open(config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise LoggingError(f"Failed to parse YAML config {config_path}: {e}") from e
    except OSError as e:
        raise LoggingError(f"Failed to read config file {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise LoggingError(f"Invalid configuration format in {config_path}")

    return cast(dict[str, Any], config)


def setup_logging(
    config_path: Path | str | None = None,
    level: str | None = None,
    environment: str | None = None,
) -> None:
    """Configure logging using Python standard dictConfig.

    Any configuration failure falls back to basic console logging.

    Args:
        config_path: Path to logging configuration file
        level: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        environment: Environment for config selection (dev, test, prod)

    """
    try:
        if isinstance(config_path, str):
            config_path = Path(config_path)
        elif config_path is None:
            config_path = get_config_path(environment=environment)

        config = load_config(config_path)

        if level:
            _override_level(config, level)

        logging.config.dictConfig(config)
        logging.getLogger(__name__).debug("Logging configured from: %s", config_path)

    except (LoggingError, KeyError, ValueError, TypeError) as e:
        fallback_level = level or "INFO"
        _setup_basic_logging(fallback_level)
        logging.getLogger(__name__).warning(
            "Failed to configure logging from file (%s), using basic console logging at %s level",
            e,
            fallback_level,
        )


def _override_level(config: dict[str, Any], level: str) -> None:
    level = level.upper()
    numeric_level = logging.getLevelName(level)
    if not isinstance(numeric_level, int):
        raise LoggingError(f"Invalid log level: {level}")

    for logger_config in config.get("loggers", {}).values():
        logger_config["level"] = level
    if "root" in config:
        config["root"]["level"] = level

    # Handlers filter below their own level: only ever lower them
    for handler_config in config.get("handlers", {}).values():
        if isinstance(handler_config, dict) and "level" in handler_config:
            current = logging.getLevelName(str(handler_config["level"]).upper())
            if isinstance(current, int) and numeric_level < current:
                handler_config["level"] = level


def _setup_basic_logging(level: str) -> None:
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
        force=True,
    )
