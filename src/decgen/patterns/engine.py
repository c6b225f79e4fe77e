"""Decorator pattern rendering.

Each decorator kind is a Jinja2 template under ``templates/``. The engine
prepares one ``MethodView`` per interface method (signature text, call
arguments, result bindings and the error and success return values), adds
what the selected kind needs on top, and renders the whole file.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from decgen.config import GeneratorConfig
from decgen.errors import PatternConfigurationError, RenderError
from decgen.models import DecoratorKind, DecoratorSpec, InterfaceModel, MethodSignature
from decgen.naming import (
    call_arguments,
    ok_values,
    result_bindings,
    signature_parameters,
)
from decgen.patterns.imports import GoImports
from decgen.zero_values import error_values

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).parent / "templates"
_ERRORS_IMPORT = "github.com/pkg/errors"
_GOFMT_TIMEOUT_SECONDS = 30


@dataclass(frozen=True)
class PatternDefinition:
    """Template and runtime imports of a decorator kind."""

    template: str
    imports: tuple[str, ...]
    always_wraps_errors: bool = False


PATTERNS = MappingProxyType(
    {
        DecoratorKind.SERIALIZE_ACCESS: PatternDefinition("mutex.go.j2", ("sync",)),
        DecoratorKind.TRACE: PatternDefinition(
            "trace.go.j2", ("github.com/opentracing/opentracing-go",)
        ),
        DecoratorKind.TRANSACTION_WRAP: PatternDefinition(
            "sqltx.go.j2", ("database/sql",), always_wraps_errors=True
        ),
        DecoratorKind.RPC_ADAPTER: PatternDefinition("grpcadapter.go.j2", ()),
    }
)


@dataclass(frozen=True)
class MethodView:
    """Everything a template needs to render one method."""

    name: str
    signature: str
    call: str
    forward_call: str
    bindings: str
    assign: str
    predeclare_error: bool
    has_error: bool
    has_results: bool
    error_prefix: str
    ok_return: str
    mutates: bool = True


def build_method_view(
    signature: MethodSignature, qualified: bool, mutates: bool = True
) -> MethodView:
    """Prepare the rendering data of one method.

    Zero values are only derived for methods with a terminal error, since
    only those have an error path.

    Args:
        signature: Method to render
        qualified: Render types as seen from another package
        mutates: Whether the method needs a transaction (sqltx only)

    Raises:
        ZeroValueError: If a non-error result has no known zero value

    """
    results = signature.results
    result_types = [result.type.render(qualified) for result in results]
    if not result_types:
        result_clause = ""
    elif len(result_types) == 1:
        result_clause = f" {result_types[0]}"
    else:
        result_clause = f" ({', '.join(result_types)})"

    has_error = signature.has_terminal_error
    zero_values = error_values(results) if has_error else []

    return MethodView(
        name=signature.name,
        signature=f"({signature_parameters(signature.parameters, qualified)}){result_clause}",
        call=call_arguments(signature.parameters),
        forward_call=call_arguments(signature.parameters, drop_last=True),
        bindings=", ".join(result_bindings(results)),
        assign="=" if signature.returns_only_error else ":=",
        predeclare_error=signature.returns_only_error,
        has_error=has_error,
        has_results=bool(results),
        error_prefix="".join(f"{value}, " for value in zero_values),
        ok_return=", ".join(ok_values(results)),
        mutates=mutates,
    )


def derive_server_name(
    interface_name: str, client_suffix: str = "Client", server_suffix: str = "Server"
) -> str:
    """Derive the grpc server type adapted by a client interface.

    Raises:
        PatternConfigurationError: If the name does not end with the client suffix

    """
    if not interface_name.endswith(client_suffix):
        raise PatternConfigurationError(
            f"The grpcadapter pattern needs an interface named '*{client_suffix}', "
            f"got '{interface_name}'"
        )
    return interface_name.removesuffix(client_suffix) + server_suffix


def _struct_fields(pairs: Sequence[tuple[str, str]]) -> str:
    width = max((len(name) for name, _ in pairs), default=0)
    return "\n".join(f"\t{name.ljust(width)} {value}" for name, value in pairs)


def _keyed_values(pairs: Sequence[tuple[str, str]]) -> str:
    width = max((len(name) for name, _ in pairs), default=0) + 1
    return "\n".join(f"\t\t{(name + ':').ljust(width)} {value}," for name, value in pairs)


def _as_assignments(pairs: Sequence[tuple[str, str]]) -> list[tuple[str, str]]:
    return [(name, name) for name, _ in pairs]


class PatternEngine:
    """Renders decorator source files."""

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        """Initialise the engine.

        Args:
            config: Generator configuration (defaults when omitted)

        """
        self._config = config or GeneratorConfig()
        self._env = Environment(
            loader=FileSystemLoader(str(_TEMPLATES_DIR)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self._env.filters["struct_fields"] = _struct_fields
        self._env.filters["keyed_values"] = _keyed_values
        self._env.filters["as_assignments"] = _as_assignments

    def render(
        self,
        spec: DecoratorSpec,
        interface: InterfaceModel,
        package_name: str,
        import_path: str,
    ) -> str:
        """Render a decorator for an interface.

        Args:
            spec: What to generate
            interface: Validated interface model
            package_name: Package clause of the generated file
            import_path: Import path of the package the file is written to

        Returns:
            Go source text

        Raises:
            PatternConfigurationError: If the kind cannot wrap this interface
            ZeroValueError: If an error path needs an unknown zero value
            RenderError: If the template or gofmt fails

        """
        if not spec.struct_name.isidentifier():
            raise PatternConfigurationError(
                f"'{spec.struct_name}' is not a valid Go identifier"
            )

        qualified = import_path != interface.import_path
        pattern = PATTERNS[spec.kind]
        methods = self._method_views(spec.kind, interface, qualified)
        context: dict[str, Any] = {
            "package_name": package_name,
            "struct_name": spec.struct_name,
            "interface_name": spec.interface_qualified_name,
            "methods": methods,
            **self._pattern_context(spec, interface, methods),
        }

        imports = GoImports(import_path)
        for runtime_import in pattern.imports:
            imports.add(runtime_import)
        if pattern.always_wraps_errors or any(m.has_error for m in methods):
            imports.add(_ERRORS_IMPORT)
        if qualified:
            imports.add(interface.import_path, interface.package_name)
        for signature in interface.methods.values():
            for parameter in signature.parameters:
                imports.update(parameter.type.imports)
            for result in signature.results:
                imports.update(result.type.imports)
        context["import_groups"] = imports.groups()

        try:
            source = self._env.get_template(pattern.template).render(**context)
        except TemplateError as e:
            raise RenderError(f"Failed to render {pattern.template}: {e}") from e

        logger.debug(
            "Rendered %s decorator %s with %d method(s)",
            spec.kind,
            spec.struct_name,
            len(methods),
        )

        if self._config.format_with_gofmt:
            source = self._gofmt(source)
        return source

    def _method_views(
        self, kind: DecoratorKind, interface: InterfaceModel, qualified: bool
    ) -> list[MethodView]:
        read_only = self._config.read_only_methods
        views: list[MethodView] = []
        for signature in interface.sorted_methods():
            self._check_method(kind, signature)
            mutates = kind != DecoratorKind.TRANSACTION_WRAP or signature.name not in read_only
            views.append(build_method_view(signature, qualified, mutates=mutates))
        return views

    @staticmethod
    def _check_method(kind: DecoratorKind, signature: MethodSignature) -> None:
        match kind:
            case DecoratorKind.TRANSACTION_WRAP if not signature.has_terminal_error:
                raise PatternConfigurationError(
                    f"The sqltx pattern needs method '{signature.name}' to return an error"
                )
            case DecoratorKind.RPC_ADAPTER if len(signature.parameters) < 2:
                raise PatternConfigurationError(
                    f"The grpcadapter pattern needs method '{signature.name}' to take "
                    "a trailing call options parameter"
                )

    def _pattern_context(
        self,
        spec: DecoratorSpec,
        interface: InterfaceModel,
        methods: list[MethodView],
    ) -> dict[str, Any]:
        match spec.kind:
            case DecoratorKind.SERIALIZE_ACCESS | DecoratorKind.TRACE:
                return {}
            case DecoratorKind.TRANSACTION_WRAP:
                return self._transaction_context(interface, methods)
            case DecoratorKind.RPC_ADAPTER:
                return {
                    "server_name": derive_server_name(
                        spec.interface_qualified_name,
                        self._config.client_suffix,
                        self._config.server_suffix,
                    )
                }

    def _transaction_context(
        self, interface: InterfaceModel, methods: list[MethodView]
    ) -> dict[str, Any]:
        read_only = self._config.read_only_methods
        unknown = sorted(read_only - interface.methods.keys())
        if unknown:
            logger.warning(
                "read_only_methods not found on %s: %s", interface.name, ", ".join(unknown)
            )

        mutating = [m for m in methods if m.mutates]
        if len(mutating) == len(methods) and methods:
            logger.warning(
                "All %d method(s) of %s run in a transaction; list pure reads in "
                "read_only_methods to call them without one",
                len(methods),
                interface.name,
            )
        return {"has_read_only": len(mutating) < len(methods)}

    @staticmethod
    def _gofmt(source: str) -> str:
        gofmt = shutil.which("gofmt")
        if gofmt is None:
            raise RenderError("format_with_gofmt is enabled but gofmt is not on PATH")
        try:
            completed = subprocess.run(  # noqa: S603
                [gofmt],
                input=source,
                capture_output=True,
                text=True,
                timeout=_GOFMT_TIMEOUT_SECONDS,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise RenderError(f"Failed to run gofmt: {e}") from e
        if completed.returncode != 0:
            raise RenderError(f"gofmt rejected the generated source: {completed.stderr}")
        return completed.stdout
