"""Go package loading and import path resolution.

A package is every non-test ``.go`` file in one directory. Import paths are
derived from the nearest ``go.mod`` (or ``$GOPATH/src`` as a fallback), which
is also how sibling packages of the same module are located when a type
declared elsewhere in the module has to be resolved.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from tree_sitter import Node

from decgen.errors import PackageResolutionError, ParserError
from decgen.golang.base import (
    find_child_by_type,
    find_children_by_type,
    get_node_text,
    unquote,
)
from decgen.golang.parser import GoSourceParser

logger = logging.getLogger(__name__)

_GO_MOD = "go.mod"
_MODULE_DIRECTIVE = re.compile(r"^\s*module\s+(\S+)", re.MULTILINE)
_MAJOR_VERSION = re.compile(r"^v[0-9]+$")
_IDENTIFIER_CHARS = re.compile(r"[^A-Za-z0-9_]")


@dataclass(frozen=True)
class TypeDeclaration:
    """A top-level ``type`` declaration."""

    name: str
    type_node: Node
    file: GoFile
    is_alias: bool = False
    has_type_parameters: bool = False


@dataclass
class GoFile:
    """A parsed Go source file."""

    path: Path
    source: bytes
    root: Node
    package_name: str
    # qualifier -> import path; qualifiers are explicit aliases or guessed names
    imports: dict[str, str] = field(default_factory=dict)

    def text(self, node: Node) -> str:
        """Return the source text of a node in this file."""
        return get_node_text(node, self.source)


@dataclass
class GoPackage:
    """Declarations of one Go package directory."""

    directory: Path
    name: str
    import_path: str
    files: list[GoFile] = field(default_factory=list)
    types: dict[str, TypeDeclaration] = field(default_factory=dict)


@dataclass(frozen=True)
class GoModule:
    """A Go module rooted at a ``go.mod`` file."""

    root: Path
    path: str

    def contains(self, import_path: str) -> bool:
        """Check if an import path belongs to this module."""
        return import_path == self.path or import_path.startswith(self.path + "/")

    def directory_of(self, import_path: str) -> Path:
        """Map an import path of this module to its directory."""
        relative = import_path[len(self.path) :].lstrip("/")
        return self.root / relative if relative else self.root


def find_module(directory: Path) -> GoModule | None:
    """Find the module enclosing a directory by walking up to ``go.mod``.

    Raises:
        PackageResolutionError: If a go.mod exists but has no module directive

    """
    directory = directory.resolve()
    for candidate in (directory, *directory.parents):
        go_mod = candidate / _GO_MOD
        if go_mod.is_file():
            try:
                content = go_mod.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise PackageResolutionError(f"Failed to read {go_mod}: {e}") from e
            match = _MODULE_DIRECTIVE.search(content)
            if match is None:
                raise PackageResolutionError(f"No module directive in {go_mod}")
            return GoModule(root=candidate, path=unquote(match.group(1)))
    return None


def resolve_import_path(directory: Path) -> str:
    """Get the Go import path of a package directory.

    Args:
        directory: Package directory

    Returns:
        Import path, e.g. ``example.com/app/store``

    Raises:
        PackageResolutionError: If the directory is outside any module or GOPATH

    """
    directory = directory.resolve()
    module = find_module(directory)
    if module is not None:
        relative = directory.relative_to(module.root).as_posix()
        return module.path if relative == "." else f"{module.path}/{relative}"

    gopath = os.environ.get("GOPATH") or str(Path.home() / "go")
    for entry in gopath.split(os.pathsep):
        src = (Path(entry) / "src").resolve()
        if directory.is_relative_to(src) and directory != src:
            return directory.relative_to(src).as_posix()

    raise PackageResolutionError(
        f"Cannot determine import path of {directory}: no go.mod found "
        f"and not under GOPATH ({gopath})"
    )


def guess_package_name(import_path: str) -> str:
    """Guess the package identifier for an import path without an alias.

    Follows the usual conventions: the last path element, skipping a major
    version suffix (``/v2``), dropping ``go-``/``-go`` affixes and ``.vN``
    suffixes (``gopkg.in/yaml.v3``).
    """
    elements = PurePosixPath(import_path).parts
    name = elements[-1]
    if _MAJOR_VERSION.match(name) and len(elements) > 1:
        name = elements[-2]
    name = re.sub(r"\.v[0-9]+$", "", name)
    name = name.removeprefix("go-").removesuffix("-go").removesuffix(".go")
    return _IDENTIFIER_CHARS.sub("", name)


def sanitize_package_name(directory: Path) -> str:
    """Derive a package name from a directory name."""
    name = _IDENTIFIER_CHARS.sub("", directory.resolve().name.lower())
    if not name or name[0].isdigit():
        name = f"pkg{name}"
    return name


class PackageLoader:
    """Loads and caches Go packages for one generation run."""

    def __init__(self, parser: GoSourceParser | None = None) -> None:
        """Initialise the loader.

        Args:
            parser: Parser to use (a new one is created if omitted)

        """
        self._parser = parser or GoSourceParser()
        self._packages: dict[Path, GoPackage] = {}

    def load(self, directory: Path, exclude: Path | None = None) -> GoPackage:
        """Load every non-test Go file in a directory.

        Args:
            directory: Package directory
            exclude: A file to ignore (the output file of a previous run)

        Returns:
            Loaded package (cached per directory)

        Raises:
            ParserError: If a file cannot be parsed or package clauses disagree
            PackageResolutionError: If the import path cannot be determined

        """
        directory = directory.resolve()
        if directory in self._packages:
            return self._packages[directory]

        if not directory.is_dir():
            raise PackageResolutionError(f"Not a package directory: {directory}")

        excluded = exclude.resolve() if exclude is not None else None
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            raise PackageResolutionError(f"Failed to list {directory}: {e}") from e
        files = [
            self._load_file(path)
            for path in entries
            if path.is_file()
            and GoSourceParser.is_supported_file(path)
            and path.resolve() != excluded
        ]

        names = {go_file.package_name for go_file in files}
        if len(names) > 1:
            raise ParserError(
                f"Multiple packages in {directory}: {sorted(names)}"
            )
        name = names.pop() if names else sanitize_package_name(directory)

        package = GoPackage(
            directory=directory,
            name=name,
            import_path=resolve_import_path(directory),
            files=files,
        )
        for go_file in files:
            self._collect_type_declarations(go_file, package)

        logger.debug(
            "Loaded package %s (%s): %d file(s), %d type(s)",
            package.name,
            package.import_path,
            len(files),
            len(package.types),
        )
        self._packages[directory] = package
        return package

    def load_import(self, import_path: str, near: Path) -> GoPackage | None:
        """Load a package of the module enclosing ``near`` by import path.

        Returns:
            The package, or None when the import path is outside the module

        """
        module = find_module(near)
        if module is None or not module.contains(import_path):
            return None
        directory = module.directory_of(import_path)
        if not directory.is_dir():
            return None
        return self.load(directory)

    def _load_file(self, path: Path) -> GoFile:
        root, source = self._parser.parse_file(path)
        clause = find_child_by_type(root, "package_clause")
        if clause is None:
            raise ParserError(f"Missing package clause in {path}")
        identifier = find_child_by_type(clause, "package_identifier")
        if identifier is None:
            raise ParserError(f"Missing package name in {path}")

        go_file = GoFile(
            path=path,
            source=source,
            root=root,
            package_name=get_node_text(identifier, source),
        )
        go_file.imports = self._collect_imports(go_file)
        return go_file

    def _collect_imports(self, go_file: GoFile) -> dict[str, str]:
        imports: dict[str, str] = {}
        for declaration in find_children_by_type(go_file.root, "import_declaration"):
            specs = [
                spec
                for child in declaration.children
                for spec in (
                    child.children if child.type == "import_spec_list" else [child]
                )
                if spec.type == "import_spec"
            ]
            for spec in specs:
                path_node = spec.child_by_field_name("path")
                if path_node is None:
                    continue
                import_path = unquote(go_file.text(path_node))
                name_node = spec.child_by_field_name("name")
                if name_node is None:
                    imports[guess_package_name(import_path)] = import_path
                elif name_node.type == "package_identifier":
                    imports[go_file.text(name_node)] = import_path
                # dot and blank imports introduce no qualifier
        return imports

    def _collect_type_declarations(self, go_file: GoFile, package: GoPackage) -> None:
        for declaration in find_children_by_type(go_file.root, "type_declaration"):
            for spec in declaration.children:
                if spec.type not in ("type_spec", "type_alias"):
                    continue
                name_node = spec.child_by_field_name("name")
                type_node = spec.child_by_field_name("type")
                if name_node is None or type_node is None:
                    continue
                name = go_file.text(name_node)
                if name in package.types:
                    # Go rejects redeclarations; keep the first like the compiler reports it
                    logger.debug("Duplicate type %s in %s ignored", name, go_file.path)
                    continue
                package.types[name] = TypeDeclaration(
                    name=name,
                    type_node=type_node,
                    file=go_file,
                    is_alias=spec.type == "type_alias",
                    has_type_parameters=spec.child_by_field_name("type_parameters")
                    is not None,
                )
