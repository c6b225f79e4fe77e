"""Validation of extracted method signatures.

A predicate is a pure function that returns a failure message, or None when
the method is acceptable. The pipeline runs predicates in registration
order, stops at the first failure of a method, keeps going with the other
methods, and raises one ``ValidationError`` naming every failing method.

Named predicates live in ``PredicateRegistry``. Extra predicates can be
contributed by other distributions through the ``decgen.validators``
entry point group; each entry point loads to a predicate function.
"""

import logging
from collections.abc import Callable, Sequence
from importlib.metadata import entry_points
from typing import Any, TypedDict

from decgen.errors import ConfigError, ValidationError
from decgen.models import InterfaceModel, MethodSignature, TypeKind

logger = logging.getLogger(__name__)

type Predicate = Callable[[MethodSignature], str | None]

ENTRY_POINT_GROUP = "decgen.validators"


def context_first(signature: MethodSignature) -> str | None:
    """Require the first parameter to be the context carrier."""
    if not signature.parameters or signature.parameters[0].type.kind != TypeKind.CONTEXT:
        return "first param must be the context carrier"
    return None


def terminal_error(signature: MethodSignature) -> str | None:
    """Require the last result to be the error carrier."""
    if not signature.has_terminal_error:
        return "last result must be the error carrier"
    return None


def two_results(signature: MethodSignature) -> str | None:
    """Require exactly two results."""
    if len(signature.results) != 2:
        return f"must return exactly 2 results, returns {len(signature.results)}"
    return None


def no_pointer_results(signature: MethodSignature) -> str | None:
    """Reject pointers among the non-error results."""
    for result in signature.results:
        if not result.is_terminal_error and result.type.kind == TypeKind.POINTER:
            return f"result {result.index} must not be a pointer ({result.type.text})"
    return None


class PredicateRegistryState(TypedDict):
    """State snapshot for PredicateRegistry (used for test isolation)."""

    registry: dict[str, Predicate]
    discovered: bool


class PredicateRegistry:
    """Singleton registry of named validation predicates."""

    _instance: "PredicateRegistry | None" = None
    _registry: dict[str, Predicate]
    _discovered: bool

    def __new__(cls, *args: Any, **kwargs: Any) -> "PredicateRegistry":  # noqa: ANN401
        """Create or return the singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._registry = {}
            cls._instance._discovered = False
            cls._instance._register_builtins()
        return cls._instance

    def _register_builtins(self) -> None:
        self._registry.update(
            {
                "context-first": context_first,
                "terminal-error": terminal_error,
                "two-results": two_results,
                "no-pointer-results": no_pointer_results,
            }
        )

    def discover(self) -> None:
        """Register predicates published through entry points.

        Entry point group: decgen.validators. The entry point name is the
        predicate name.
        """
        if self._discovered:
            return

        for ep in entry_points(group=ENTRY_POINT_GROUP):
            if ep.name in self._registry:
                logger.warning("Ignoring duplicate validator entry point %s", ep.name)
                continue
            try:
                predicate = ep.load()
            except Exception as e:
                raise ConfigError(
                    f"Failed to load validator entry point '{ep.name}' ({ep.value}): {e}"
                ) from e
            self.register(ep.name, predicate)
            logger.debug("Discovered validator %s from %s", ep.name, ep.value)

        self._discovered = True

    def register(self, name: str, predicate: Predicate) -> None:
        """Register a predicate under a name.

        Raises:
            ConfigError: If the name is already registered

        """
        if name in self._registry:
            raise ConfigError(f"Validator '{name}' is already registered")
        self._registry[name] = predicate

    def get(self, name: str) -> Predicate:
        """Get a predicate by name.

        Raises:
            ConfigError: If no predicate has that name

        """
        if name not in self._registry:
            raise ConfigError(
                f"Unknown validator '{name}'. Available: {self.list_names()}"
            )
        return self._registry[name]

    def resolve(self, names: Sequence[str]) -> list[Predicate]:
        """Get predicates for names, in the given order."""
        self.discover()
        return [self.get(name) for name in names]

    def list_names(self) -> list[str]:
        """List registered predicate names."""
        return sorted(self._registry)

    @classmethod
    def snapshot_state(cls) -> PredicateRegistryState:
        """Capture current state for later restoration (test isolation)."""
        instance = cls()
        return {
            "registry": instance._registry.copy(),
            "discovered": instance._discovered,
        }

    @classmethod
    def restore_state(cls, state: PredicateRegistryState) -> None:
        """Restore state from a previously captured snapshot."""
        instance = cls()
        instance._registry = state["registry"].copy()
        instance._discovered = state["discovered"]


class ValidationPipeline:
    """Ordered predicates applied to every method of an interface."""

    def __init__(self, predicates: Sequence[Predicate] = ()) -> None:
        """Initialise with predicates, run in the given order."""
        self._predicates = list(predicates)

    def check(self, signature: MethodSignature) -> str | None:
        """Return the first failure for a method, or None if it passes."""
        for predicate in self._predicates:
            failure = predicate(signature)
            if failure is not None:
                return failure
        return None

    def validate(self, interface: InterfaceModel) -> None:
        """Validate every method of an interface.

        Raises:
            ValidationError: If any method fails, listing all failing methods

        """
        failures: dict[str, str] = {}
        for name, signature in interface.methods.items():
            failure = self.check(signature)
            if failure is not None:
                logger.debug("Method %s failed validation: %s", name, failure)
                failures[name] = failure

        if failures:
            raise ValidationError(failures)
