"""Error classes for decgen.

This module provides:
- DecgenError: Base exception class for all generator errors
- ParserError: Go source could not be parsed
- ExtractionError, NotFoundError, NotAnInterfaceError, TypeResolutionError,
  PackageResolutionError: Interface extraction exceptions
- ValidationError: One or more interface methods failed a validation predicate
- ZeroValueError: A zero value could not be synthesised for a result type
- PatternConfigurationError: The selected decorator pattern cannot wrap the interface
- RenderError, WriteError: Output rendering and writing exceptions
- ConfigError: Generator configuration is invalid
"""

from typing import override


class DecgenError(Exception):
    """Base exception for all decgen errors."""

    pass


class ParserError(DecgenError):
    """Raised when Go source code cannot be parsed."""

    pass


class ConfigError(DecgenError):
    """Raised when generator configuration is invalid."""

    pass


class ExtractionError(DecgenError):
    """Base exception for interface extraction errors."""

    pass


class NotFoundError(ExtractionError):
    """Raised when no type declaration has the requested name."""

    pass


class NotAnInterfaceError(ExtractionError):
    """Raised when the requested name resolves to a non-interface type."""

    pass


class TypeResolutionError(ExtractionError):
    """Raised when a type referenced by the interface cannot be resolved."""

    pass


class PackageResolutionError(ExtractionError):
    """Raised when a directory cannot be mapped to a Go import path."""

    pass


class ValidationError(DecgenError):
    """Raised when interface methods fail validation.

    Carries every failing method, not only the first one, so a single run
    reports all offending methods.
    """

    def __init__(self, failures: dict[str, str]) -> None:
        """Initialise with the failing methods.

        Args:
            failures: Mapping of method name to the reason it failed

        """
        self.failures = dict(sorted(failures.items()))
        super().__init__(self._format(self.failures))

    @staticmethod
    def _format(failures: dict[str, str]) -> str:
        details = "; ".join(
            f"method '{name}': {reason}" for name, reason in failures.items()
        )
        return f"failed to validate {len(failures)} method(s): {details}"

    @override
    def __reduce__(self) -> tuple[type["ValidationError"], tuple[dict[str, str]]]:
        return (self.__class__, (self.failures,))


class ZeroValueError(DecgenError):
    """Raised when no zero value is known for a result type."""

    pass


class PatternConfigurationError(DecgenError):
    """Raised when a decorator pattern cannot be applied to the interface."""

    pass


class RenderError(DecgenError):
    """Raised when the output source cannot be rendered."""

    pass


class WriteError(DecgenError):
    """Raised when the output file cannot be written."""

    pass
