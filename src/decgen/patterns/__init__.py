"""Decorator patterns rendered from Jinja2 templates."""

from decgen.patterns.engine import PATTERNS, MethodView, PatternEngine, derive_server_name
from decgen.patterns.imports import GoImports

__all__ = [
    "PATTERNS",
    "GoImports",
    "MethodView",
    "PatternEngine",
    "derive_server_name",
]
