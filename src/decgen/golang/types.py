"""Classification of Go type expressions.

The generator only needs a handful of facts about a type: whether it is the
context or error carrier, whether it is a predeclared scalar, and for named
types what their underlying classification is. This module answers those
questions from syntax alone, following declarations through the source
package, sibling packages of the same module and a few well-known standard
library types.
"""

from __future__ import annotations

import logging
from types import MappingProxyType

from tree_sitter import Node

from decgen.errors import TypeResolutionError
from decgen.golang.packages import GoFile, GoPackage, PackageLoader, TypeDeclaration
from decgen.models import ScalarKind, TypeKind, TypeRef

logger = logging.getLogger(__name__)

SCALAR_FAMILIES = MappingProxyType(
    {
        **dict.fromkeys(
            [
                "int",
                "int8",
                "int16",
                "int32",
                "int64",
                "uint",
                "uint8",
                "uint16",
                "uint32",
                "uint64",
                "uintptr",
                "byte",
                "rune",
            ],
            ScalarKind.INTEGER,
        ),
        "float32": ScalarKind.FLOAT,
        "float64": ScalarKind.FLOAT,
        "complex64": ScalarKind.COMPLEX,
        "complex128": ScalarKind.COMPLEX,
        "bool": ScalarKind.BOOL,
        "string": ScalarKind.STRING,
    }
)

# Standard library named scalars that cannot be resolved from the module
WELL_KNOWN_SCALARS = MappingProxyType(
    {
        "time.Duration": "int64",
        "time.Month": "int",
        "time.Weekday": "int",
        "os.FileMode": "uint32",
        "io/fs.FileMode": "uint32",
    }
)

_COMPOSITE_KINDS = MappingProxyType(
    {
        "pointer_type": TypeKind.POINTER,
        "slice_type": TypeKind.SLICE,
        "array_type": TypeKind.ARRAY,
        "implicit_length_array_type": TypeKind.ARRAY,
        "map_type": TypeKind.MAP,
        "channel_type": TypeKind.CHANNEL,
        "function_type": TypeKind.FUNC,
        "interface_type": TypeKind.INTERFACE,
        "struct_type": TypeKind.STRUCT,
    }
)

_PREDECLARED_INTERFACES = frozenset({"any", "comparable"})

_ERROR = "error"

# Go rejects alias cycles; this only bounds malformed input
_MAX_ALIAS_HOPS = 32


def scalar_family(basic: str | None) -> ScalarKind | None:
    """Return the scalar family of a predeclared type name."""
    if basic is None:
        return None
    return SCALAR_FAMILIES.get(basic)


def _is_predeclared(name: str) -> bool:
    return name in SCALAR_FAMILIES or name in _PREDECLARED_INTERFACES or name == _ERROR


class TypeResolver:
    """Classifies type expressions of one generation run."""

    def __init__(
        self,
        loader: PackageLoader,
        context_type: str = "context.Context",
        error_type: str = _ERROR,
        destination_import_path: str | None = None,
    ) -> None:
        """Initialise the resolver.

        Args:
            loader: Loader used to reach other packages of the module
            context_type: Canonical name (``<import path>.<Name>``) of the context carrier
            error_type: Canonical name of the error carrier
            destination_import_path: Import path of the package the output goes to

        """
        self._loader = loader
        self._context_type = context_type
        self._error_type = error_type
        self._destination_import_path = destination_import_path

    def classify(
        self,
        node: Node,
        go_file: GoFile,
        package: GoPackage,
        home: GoPackage | None = None,
    ) -> TypeRef:
        """Classify a type expression.

        Args:
            node: Type expression node
            go_file: File the node belongs to
            package: Package the file belongs to
            home: Package of the interface being extracted, when the node comes
                from an interface embedded from another package

        Returns:
            Classified type reference

        Raises:
            TypeResolutionError: If the type uses a qualifier the file does not import

        """
        home = home or package
        imports: dict[str, str] = {}
        text = self._rewrite(node, go_file, package, home.import_path, imports)
        qualified_text = self._rewrite(
            node, go_file, package, self._destination_import_path or "", imports
        )

        canonical = self.canonical_name(node, go_file, package)
        if canonical is not None and canonical == self._context_type:
            return TypeRef(
                text=text,
                qualified_text=qualified_text,
                kind=TypeKind.CONTEXT,
                imports=imports,
            )
        if canonical is not None and canonical == self._error_type:
            return TypeRef(
                text=text,
                qualified_text=qualified_text,
                kind=TypeKind.ERROR,
                imports=imports,
            )

        kind, basic, underlying = self._classify(node, go_file, package)
        return TypeRef(
            text=text,
            qualified_text=qualified_text,
            kind=kind,
            basic=basic,
            underlying=underlying,
            imports=imports,
        )

    def canonical_name(
        self, node: Node, go_file: GoFile, package: GoPackage
    ) -> str | None:
        """Return ``<import path>.<Name>`` for a type name, or None for other types.

        Aliases (``type Ctx = context.Context``) are followed to the type
        they stand for.
        """
        node = _unparenthesize(node)
        for _ in range(_MAX_ALIAS_HOPS):
            if node.type not in ("type_identifier", "qualified_type"):
                return None
            found = self.lookup(node, go_file, package)
            if found is None or not found[0].is_alias:
                break
            declaration, package = found
            node, go_file = _unparenthesize(declaration.type_node), declaration.file
        else:
            raise TypeResolutionError(
                f"Alias chain through '{go_file.text(node)}' in {go_file.path} is too deep"
            )

        if node.type == "type_identifier":
            name = go_file.text(node)
            if _is_predeclared(name):
                return name
            return f"{package.import_path}.{name}"
        if node.type == "qualified_type":
            qualifier, name = self._split_qualified(node, go_file)
            return f"{self._import_of(qualifier, node, go_file)}.{name}"
        return None

    def lookup(
        self, node: Node, go_file: GoFile, package: GoPackage
    ) -> tuple[TypeDeclaration, GoPackage] | None:
        """Find the declaration a type name refers to.

        Returns:
            The declaration and its package, or None when it cannot be reached

        """
        node = _unparenthesize(node)
        if node.type == "generic_type":
            base = node.child_by_field_name("type")
            return self.lookup(base, go_file, package) if base is not None else None
        if node.type == "type_identifier":
            declaration = package.types.get(go_file.text(node))
            return (declaration, package) if declaration is not None else None
        if node.type == "qualified_type":
            qualifier, name = self._split_qualified(node, go_file)
            import_path = self._import_of(qualifier, node, go_file)
            other = self._loader.load_import(import_path, near=package.directory)
            if other is None:
                return None
            declaration = other.types.get(name)
            return (declaration, other) if declaration is not None else None
        return None

    def _classify(
        self, node: Node, go_file: GoFile, package: GoPackage
    ) -> tuple[TypeKind, str | None, TypeKind | None]:
        node = _unparenthesize(node)
        if node.type in _COMPOSITE_KINDS:
            return _COMPOSITE_KINDS[node.type], None, None

        if node.type == "type_identifier":
            name = go_file.text(node)
            if name in SCALAR_FAMILIES:
                return TypeKind.BASIC, name, None
            if name in _PREDECLARED_INTERFACES:
                return TypeKind.INTERFACE, None, None
            if name == _ERROR:
                return TypeKind.ERROR, None, None

        underlying, basic = self._underlying(node, go_file, package, seen=set())
        if underlying is None:
            logger.debug("Underlying type of %s is unresolved", go_file.text(node))
        return TypeKind.NAMED, basic, underlying

    def _underlying(
        self,
        node: Node,
        go_file: GoFile,
        package: GoPackage,
        seen: set[str],
    ) -> tuple[TypeKind | None, str | None]:
        node = _unparenthesize(node)
        if node.type in _COMPOSITE_KINDS:
            return _COMPOSITE_KINDS[node.type], None

        if node.type == "type_identifier":
            name = go_file.text(node)
            if name in SCALAR_FAMILIES:
                return TypeKind.BASIC, name
            if name in _PREDECLARED_INTERFACES or name == _ERROR:
                return TypeKind.INTERFACE, None

        if node.type == "qualified_type":
            canonical = self.canonical_name(node, go_file, package)
            if canonical in WELL_KNOWN_SCALARS:
                return TypeKind.BASIC, WELL_KNOWN_SCALARS[canonical]

        canonical = self.canonical_name(node, go_file, package)
        if canonical is not None:
            if canonical in seen:
                return None, None
            seen = seen | {canonical}

        found = self.lookup(node, go_file, package)
        if found is None:
            return None, None
        declaration, owner = found
        return self._underlying(declaration.type_node, declaration.file, owner, seen)

    def _rewrite(
        self,
        node: Node,
        go_file: GoFile,
        package: GoPackage,
        target: str,
        imports: dict[str, str],
    ) -> str:
        """Rebuild the text of a type as written inside the ``target`` package.

        Every package the rebuilt text refers to is recorded in ``imports``.
        """
        if node.type == "qualified_type":
            qualifier, name = self._split_qualified(node, go_file)
            import_path = self._import_of(qualifier, node, go_file)
            if import_path == target:
                return name
            imports[qualifier] = import_path
            return f"{qualifier}.{name}"

        if node.type == "type_identifier":
            name = go_file.text(node)
            if _is_predeclared(name) or package.import_path == target:
                return name
            imports[package.name] = package.import_path
            return f"{package.name}.{name}"

        if not node.children:
            return go_file.text(node)

        pieces: list[str] = []
        cursor = node.start_byte
        for child in node.children:
            pieces.append(go_file.source[cursor : child.start_byte].decode("utf-8"))
            pieces.append(self._rewrite(child, go_file, package, target, imports))
            cursor = child.end_byte
        pieces.append(go_file.source[cursor : node.end_byte].decode("utf-8"))
        return "".join(pieces)

    @staticmethod
    def _split_qualified(node: Node, go_file: GoFile) -> tuple[str, str]:
        package_node = node.child_by_field_name("package")
        name_node = node.child_by_field_name("name")
        if package_node is None or name_node is None:
            raise TypeResolutionError(
                f"Malformed qualified type '{go_file.text(node)}' in {go_file.path}"
            )
        return go_file.text(package_node), go_file.text(name_node)

    @staticmethod
    def _import_of(qualifier: str, node: Node, go_file: GoFile) -> str:
        if qualifier not in go_file.imports:
            raise TypeResolutionError(
                f"Package '{qualifier}' used by '{go_file.text(node)}' is not "
                f"imported in {go_file.path}"
            )
        return go_file.imports[qualifier]


def _unparenthesize(node: Node) -> Node:
    while node.type == "parenthesized_type" and node.named_children:
        node = node.named_children[0]
    return node
