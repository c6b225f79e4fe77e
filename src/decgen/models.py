"""Data models for interface signatures and decorator requests."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class TypeKind(StrEnum):
    """Classification of a Go type expression."""

    CONTEXT = "context"
    ERROR = "error"
    BASIC = "basic"
    NAMED = "named"
    POINTER = "pointer"
    SLICE = "slice"
    ARRAY = "array"
    MAP = "map"
    CHANNEL = "channel"
    FUNC = "func"
    INTERFACE = "interface"
    STRUCT = "struct"


class ScalarKind(StrEnum):
    """Scalar families of Go's predeclared basic types."""

    INTEGER = "integer"
    FLOAT = "float"
    COMPLEX = "complex"
    BOOL = "bool"
    STRING = "string"


class TypeRef(BaseModel):
    """A classified type reference.

    ``text`` is the type as written inside the interface's own package;
    ``qualified_text`` is the same type as written inside the destination
    package, with names declared in the source package qualified by its
    identifier and qualifiers naming the destination package dropped.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    qualified_text: str
    kind: TypeKind
    # For BASIC: the predeclared name. For NAMED: the resolved basic underlying, if any
    basic: str | None = None
    # For NAMED only: classification of the underlying type, None if unresolved
    underlying: TypeKind | None = None
    # qualifier -> import path for every package either text refers to
    imports: dict[str, str] = {}

    def render(self, qualified: bool) -> str:
        """Return the type text for the source (False) or destination (True) package."""
        return self.qualified_text if qualified else self.text


class Parameter(BaseModel):
    """A method parameter, 0-indexed in declaration order."""

    model_config = ConfigDict(frozen=True)

    index: int
    type: TypeRef
    variadic: bool = False


class Result(BaseModel):
    """A method result, 0-indexed in declaration order."""

    model_config = ConfigDict(frozen=True)

    index: int
    type: TypeRef
    is_terminal_error: bool = False


class MethodSignature(BaseModel):
    """A method of an interface in pattern-agnostic form."""

    model_config = ConfigDict(frozen=True)

    name: str
    parameters: list[Parameter] = []
    results: list[Result] = []

    @property
    def has_terminal_error(self) -> bool:
        """Check if the last result is the error carrier."""
        return bool(self.results) and self.results[-1].is_terminal_error

    @property
    def returns_only_error(self) -> bool:
        """Check if the result list is exactly the terminal error."""
        return len(self.results) == 1 and self.results[0].is_terminal_error


class InterfaceModel(BaseModel):
    """An interface's method set, keyed by method name."""

    model_config = ConfigDict(frozen=True)

    name: str
    package_name: str
    import_path: str
    methods: dict[str, MethodSignature] = {}

    def sorted_methods(self) -> list[MethodSignature]:
        """Return methods ordered by name for stable rendering."""
        return [self.methods[name] for name in sorted(self.methods)]


class DecoratorKind(StrEnum):
    """The built-in decorator patterns, by their command line literal."""

    SERIALIZE_ACCESS = "mutex"
    TRACE = "trace"
    TRANSACTION_WRAP = "sqltx"
    RPC_ADAPTER = "grpcadapter"


class DecoratorSpec(BaseModel):
    """What to generate: one per invocation, immutable."""

    model_config = ConfigDict(frozen=True)

    kind: DecoratorKind
    struct_name: str
    interface_qualified_name: str
