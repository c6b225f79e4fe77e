"""Generation run orchestration.

One run resolves the source and destination packages, extracts the
interface, validates every method, renders the selected pattern and only
then writes the output file.
"""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from decgen.config import GeneratorConfig
from decgen.errors import PackageResolutionError, WriteError
from decgen.extractor import InterfaceExtractor
from decgen.golang.packages import (
    GoPackage,
    PackageLoader,
    find_module,
    resolve_import_path,
    sanitize_package_name,
)
from decgen.golang.types import TypeResolver
from decgen.models import DecoratorKind, DecoratorSpec, InterfaceModel
from decgen.patterns.engine import PatternEngine
from decgen.validation import Predicate, PredicateRegistry, ValidationPipeline

logger = logging.getLogger(__name__)

_OUTPUT_MODE = 0o644


@dataclass(frozen=True)
class GenerationRequest:
    """Inputs of one generation run."""

    source: str
    interface_name: str
    output: Path
    kind: DecoratorKind
    struct_name: str | None = None


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of a successful generation run."""

    output: Path
    kind: DecoratorKind
    struct_name: str
    interface_name: str
    methods: tuple[str, ...]


@dataclass(frozen=True)
class _Destination:
    name: str
    import_path: str


class Generator:
    """Generates one decorator file per call to ``generate``."""

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        predicates: Sequence[Predicate] | None = None,
    ) -> None:
        """Initialise the generator.

        Args:
            config: Generator configuration (defaults when omitted)
            predicates: Validation predicates; resolved from ``config.validators``
                through the predicate registry when omitted

        Raises:
            ConfigError: If a configured validator is unknown

        """
        self._config = config or GeneratorConfig()
        if predicates is None:
            predicates = PredicateRegistry().resolve(self._config.validators)
        self._predicates = list(predicates)

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Run extraction, validation, rendering and the write.

        Raises:
            DecgenError: Any failure; nothing is written unless rendering succeeded

        """
        output = request.output.resolve()
        loader = PackageLoader()

        source_package = self._load_source(request.source, loader, output)
        destination = self._destination(output.parent, loader, output)

        resolver = TypeResolver(
            loader,
            context_type=self._config.context_type,
            error_type=self._config.error_type,
            destination_import_path=destination.import_path,
        )
        interface = InterfaceExtractor(resolver).extract(
            source_package, request.interface_name
        )
        ValidationPipeline(self._predicates).validate(interface)

        spec = DecoratorSpec(
            kind=request.kind,
            struct_name=request.struct_name
            or f"{interface.name}{self._config.struct_suffix}",
            interface_qualified_name=self._qualified_name(interface, destination),
        )
        source = PatternEngine(self._config).render(
            spec, interface, destination.name, destination.import_path
        )
        write_atomically(output, source)

        logger.info(
            "Generated %s decorator %s for %s in %s",
            spec.kind,
            spec.struct_name,
            spec.interface_qualified_name,
            output,
        )
        return GenerationResult(
            output=output,
            kind=spec.kind,
            struct_name=spec.struct_name,
            interface_name=spec.interface_qualified_name,
            methods=tuple(sorted(interface.methods)),
        )

    @staticmethod
    def _load_source(source: str, loader: PackageLoader, output: Path) -> GoPackage:
        """Load the source package from a directory or a module import path.

        Raises:
            PackageResolutionError: If the source is neither

        """
        directory = Path(source)
        if directory.is_dir():
            return loader.load(directory, exclude=output)

        module = find_module(Path.cwd())
        if module is not None and module.contains(source):
            directory = module.directory_of(source)
            if directory.is_dir():
                return loader.load(directory, exclude=output)

        raise PackageResolutionError(
            f"Source '{source}' is neither a directory nor a package of the current module"
        )

    @staticmethod
    def _destination(
        directory: Path, loader: PackageLoader, output: Path
    ) -> _Destination:
        if directory.is_dir():
            package = loader.load(directory, exclude=output)
            return _Destination(name=package.name, import_path=package.import_path)
        return _Destination(
            name=sanitize_package_name(directory),
            import_path=resolve_import_path(directory),
        )

    @staticmethod
    def _qualified_name(interface: InterfaceModel, destination: _Destination) -> str:
        if interface.import_path == destination.import_path:
            return interface.name
        return f"{interface.package_name}.{interface.name}"


def write_atomically(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` without leaving a partial file behind.

    Raises:
        WriteError: If the file cannot be written

    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(
            dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
                f.write(content)
            os.chmod(temp_name, _OUTPUT_MODE)
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise WriteError(f"Failed to write {path}: {e}") from e
