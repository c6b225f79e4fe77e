"""Workspace-level pytest configuration and fixtures."""

import pytest

from decgen.validation import PredicateRegistry


@pytest.fixture(autouse=True, scope="function")
def isolate_predicate_registry():
    """Automatically preserve and restore PredicateRegistry state for each test.

    PredicateRegistry is a singleton with mutable global state; tests that
    register or clear predicates would otherwise leak into later tests.
    """
    saved_state = PredicateRegistry.snapshot_state()

    yield

    PredicateRegistry.restore_state(saved_state)
