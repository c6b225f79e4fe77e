"""Configuration for the decorator generator."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from decgen.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = ".decgen.yaml"


class GeneratorConfig(BaseModel):
    """Generator configuration with Pydantic validation.

    Values come from an optional YAML file; anything not set there keeps
    the defaults below, which reproduce the conventional Go setup
    (``context.Context`` first, ``error`` last, grpc ``Client``/``Server``
    naming).
    """

    model_config = ConfigDict(
        # Immutable - configuration cannot be modified after creation
        frozen=True,
        # Strict - extra fields not in the model are rejected
        extra="forbid",
    )

    context_type: str = Field(
        default="context.Context",
        description="Canonical name (<import path>.<Name>) of the context carrier type",
    )
    error_type: str = Field(
        default="error",
        description="Canonical name of the error carrier type",
    )
    struct_suffix: str = Field(
        default="Tracer",
        description="Suffix appended to the interface name when no struct name is given",
    )
    client_suffix: str = Field(
        default="Client",
        description="Interface name suffix required by the grpcadapter pattern",
    )
    server_suffix: str = Field(
        default="Server",
        description="Replacement suffix naming the adapted grpc server type",
    )
    validators: list[str] = Field(
        default_factory=lambda: ["context-first"],
        description="Names of validation predicates, run in order",
    )
    read_only_methods: frozenset[str] = Field(
        default_factory=frozenset,
        description="Methods the sqltx pattern calls without a transaction",
    )
    format_with_gofmt: bool = Field(
        default=False,
        description="Pipe the generated file through gofmt before writing it",
    )

    @field_validator("context_type", "error_type", "client_suffix", "server_suffix")
    @classmethod
    def validate_non_empty(cls, v: str) -> str:
        """Reject empty names."""
        if not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()

    @field_validator("validators")
    @classmethod
    def validate_context_first(cls, v: list[str]) -> list[str]:
        """Keep the context check: every pattern names the first parameter ctx."""
        if "context-first" not in v:
            raise ValueError("validators must include 'context-first'")
        return v

    @classmethod
    def from_properties(cls, properties: dict[str, Any]) -> Self:
        """Create configuration from a properties dictionary.

        Args:
            properties: Raw configuration values, e.g. loaded from YAML

        Returns:
            Validated configuration object

        Raises:
            ConfigError: If validation fails

        """
        try:
            return cls.model_validate(properties)
        except PydanticValidationError as e:
            raise ConfigError(f"Invalid decgen configuration: {e}") from e

    @classmethod
    def from_file(cls, config_path: Path) -> Self:
        """Load configuration from a YAML file.

        Raises:
            ConfigError: If the file cannot be read, parsed or validated

        """
        try:
            with open(config_path, encoding="utf-8") as f:
                properties = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML config {config_path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read config file {config_path}: {e}") from e

        if properties is None:
            properties = {}
        if not isinstance(properties, dict):
            raise ConfigError(f"Invalid configuration format in {config_path}")

        logger.debug("Loaded configuration from %s", config_path)
        return cls.from_properties(properties)  # type: ignore[arg-type]

    @classmethod
    def load(cls, config_path: Path | None = None) -> Self:
        """Load configuration from a path, the default file, or defaults.

        Args:
            config_path: Explicit config file; when None, ``.decgen.yaml`` in
                the working directory is used if present

        """
        if config_path is not None:
            return cls.from_file(config_path)

        default_path = Path.cwd() / DEFAULT_CONFIG_FILE
        if default_path.is_file():
            return cls.from_file(default_path)
        return cls()
