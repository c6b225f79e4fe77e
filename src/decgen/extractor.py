"""Interface extraction.

Finds a named interface among the top-level type declarations of a Go
package and turns its method set into ``MethodSignature`` models. Parameter
and result order is kept exactly as declared.
"""

import logging

from tree_sitter import Node

from decgen.errors import (
    ExtractionError,
    NotAnInterfaceError,
    NotFoundError,
    TypeResolutionError,
)
from decgen.golang.packages import GoFile, GoPackage, TypeDeclaration
from decgen.golang.types import TypeResolver
from decgen.models import (
    InterfaceModel,
    MethodSignature,
    Parameter,
    Result,
    TypeKind,
    TypeRef,
)

logger = logging.getLogger(__name__)

# Go syntax node types
_INTERFACE_TYPE = "interface_type"
_METHOD_TYPES = frozenset({"method_elem", "method_spec"})
_EMBEDDED_NAME_TYPES = frozenset({"type_identifier", "qualified_type", "generic_type"})
_TYPE_ELEMENT = "type_elem"
_CONSTRAINT_TYPES = frozenset({"constraint_elem", "struct_elem"})
_PARAMETER_LIST = "parameter_list"
_PARAMETER = "parameter_declaration"
_VARIADIC_PARAMETER = "variadic_parameter_declaration"

_ANY = "any"
_ERROR = "error"
_ERROR_METHOD = MethodSignature(
    name="Error",
    results=[
        Result(
            index=0,
            type=TypeRef(
                text="string", qualified_text="string", kind=TypeKind.BASIC, basic="string"
            ),
        )
    ],
)


class InterfaceExtractor:
    """Extracts the method set of a named interface."""

    def __init__(self, resolver: TypeResolver) -> None:
        """Initialise with the resolver used to classify parameter and result types.

        Args:
            resolver: Type resolver of the current generation run

        """
        self._resolver = resolver

    def extract(self, package: GoPackage, interface_name: str) -> InterfaceModel:
        """Extract an interface from a package.

        Every top-level type declaration of every file in the package is
        considered; the name must match exactly.

        Args:
            package: Loaded source package
            interface_name: Name of the interface to extract

        Returns:
            The interface's method set

        Raises:
            NotFoundError: If no type declaration has that name
            NotAnInterfaceError: If the declaration is not a (plain) interface
            TypeResolutionError: If a type or embedded interface cannot be resolved

        """
        declaration = package.types.get(interface_name)
        if declaration is None:
            raise NotFoundError(
                f"Type '{interface_name}' not found in package "
                f"{package.import_path} ({package.directory})"
            )

        interface_node, owner_file, owner = self._resolve_interface(
            declaration, package, seen=set()
        )

        methods: dict[str, MethodSignature] = {}
        self._collect_methods(
            interface_node,
            owner_file,
            owner,
            home=package,
            methods=methods,
            seen={f"{package.import_path}.{interface_name}"},
        )

        logger.debug(
            "Extracted interface %s.%s with %d method(s): %s",
            package.name,
            interface_name,
            len(methods),
            ", ".join(methods),
        )
        return InterfaceModel(
            name=interface_name,
            package_name=package.name,
            import_path=package.import_path,
            methods=methods,
        )

    def _resolve_interface(
        self, declaration: TypeDeclaration, package: GoPackage, seen: set[str]
    ) -> tuple[Node, GoFile, GoPackage]:
        """Follow aliases and defined types until an interface literal is found."""
        key = f"{package.import_path}.{declaration.name}"
        if key in seen:
            raise NotAnInterfaceError(f"Type '{declaration.name}' is defined in a cycle")
        seen.add(key)

        if declaration.has_type_parameters:
            raise NotAnInterfaceError(
                f"Type '{declaration.name}' is generic; generic interfaces are not supported"
            )

        type_node = declaration.type_node
        if type_node.type == _INTERFACE_TYPE:
            return type_node, declaration.file, package

        if type_node.type in _EMBEDDED_NAME_TYPES:
            found = self._resolver.lookup(type_node, declaration.file, package)
            if found is not None:
                return self._resolve_interface(found[0], found[1], seen)

        raise NotAnInterfaceError(
            f"Type '{declaration.name}' is not an interface: "
            f"{declaration.file.text(type_node)}"
        )

    def _collect_methods(
        self,
        interface_node: Node,
        go_file: GoFile,
        package: GoPackage,
        home: GoPackage,
        methods: dict[str, MethodSignature],
        seen: set[str],
    ) -> None:
        for element in interface_node.named_children:
            if element.type in _METHOD_TYPES:
                signature = self._extract_method(element, go_file, package, home)
                self._add_method(signature, methods)
            elif element.type in _EMBEDDED_NAME_TYPES:
                self._embed(element, go_file, package, home, methods, seen)
            elif element.type == _TYPE_ELEMENT:
                embedded = element.named_children
                if len(embedded) != 1 or embedded[0].type not in _EMBEDDED_NAME_TYPES:
                    raise NotAnInterfaceError(
                        f"Constraint element '{go_file.text(element)}' is not supported"
                    )
                self._embed(embedded[0], go_file, package, home, methods, seen)
            elif element.type in _CONSTRAINT_TYPES:
                raise NotAnInterfaceError(
                    f"Constraint element '{go_file.text(element)}' is not supported"
                )

    def _embed(
        self,
        node: Node,
        go_file: GoFile,
        package: GoPackage,
        home: GoPackage,
        methods: dict[str, MethodSignature],
        seen: set[str],
    ) -> None:
        text = go_file.text(node)
        if text not in package.types:
            if text == _ANY:
                return
            if text == _ERROR:
                # The predeclared error interface contributes Error() string
                self._add_method(_ERROR_METHOD, methods)
                return

        found = self._resolver.lookup(node, go_file, package)
        if found is None:
            raise TypeResolutionError(
                f"Embedded interface '{text}' in {go_file.path} cannot be resolved"
            )
        declaration, owner = found
        key = f"{owner.import_path}.{declaration.name}"
        if key in seen:
            return

        interface_node, owner_file, owner = self._resolve_interface(
            declaration, owner, seen=set()
        )
        logger.debug("Flattening embedded interface %s", key)
        self._collect_methods(
            interface_node, owner_file, owner, home, methods, seen | {key}
        )

    @staticmethod
    def _add_method(
        signature: MethodSignature, methods: dict[str, MethodSignature]
    ) -> None:
        existing = methods.get(signature.name)
        if existing is None:
            methods[signature.name] = signature
        elif existing != signature:
            raise ExtractionError(
                f"Method '{signature.name}' is declared twice with different signatures"
            )

    def _extract_method(
        self, node: Node, go_file: GoFile, package: GoPackage, home: GoPackage
    ) -> MethodSignature:
        name_node = node.child_by_field_name("name")
        if name_node is None:
            raise ExtractionError(f"Method without a name in {go_file.path}")

        parameters_node = node.child_by_field_name("parameters")
        parameters = (
            self._extract_parameters(parameters_node, go_file, package, home)
            if parameters_node is not None
            else []
        )

        result_node = node.child_by_field_name("result")
        results: list[Result] = []
        if result_node is not None:
            if result_node.type == _PARAMETER_LIST:
                result_types = [
                    parameter.type
                    for parameter in self._extract_parameters(
                        result_node, go_file, package, home
                    )
                ]
            else:
                result_types = [
                    self._resolver.classify(result_node, go_file, package, home)
                ]
            results = self._build_results(result_types)

        return MethodSignature(
            name=go_file.text(name_node),
            parameters=parameters,
            results=results,
        )

    def _extract_parameters(
        self, node: Node, go_file: GoFile, package: GoPackage, home: GoPackage
    ) -> list[Parameter]:
        parameters: list[Parameter] = []
        for declaration in node.named_children:
            if declaration.type not in (_PARAMETER, _VARIADIC_PARAMETER):
                continue
            type_node = declaration.child_by_field_name("type")
            if type_node is None:
                raise ExtractionError(
                    f"Parameter without a type: '{go_file.text(declaration)}'"
                )
            type_ref = self._resolver.classify(type_node, go_file, package, home)
            # (a, b int) declares two parameters sharing one type
            count = max(1, len(declaration.children_by_field_name("name")))
            for _ in range(count):
                parameters.append(
                    Parameter(
                        index=len(parameters),
                        type=type_ref,
                        variadic=declaration.type == _VARIADIC_PARAMETER,
                    )
                )
        return parameters

    @staticmethod
    def _build_results(types: list[TypeRef]) -> list[Result]:
        last = len(types) - 1
        return [
            Result(
                index=index,
                type=type_ref,
                is_terminal_error=index == last and type_ref.kind == TypeKind.ERROR,
            )
            for index, type_ref in enumerate(types)
        ]
