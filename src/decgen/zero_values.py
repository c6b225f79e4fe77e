"""Zero values for the error path of generated methods."""

from collections.abc import Sequence
from types import MappingProxyType

from decgen.errors import ZeroValueError
from decgen.golang.types import scalar_family
from decgen.models import Result, ScalarKind, TypeKind, TypeRef
from decgen.naming import NIL

ZERO_VALUES = MappingProxyType(
    {
        ScalarKind.INTEGER: "0",
        ScalarKind.FLOAT: "0",
        ScalarKind.COMPLEX: "0",
        ScalarKind.BOOL: "false",
        ScalarKind.STRING: '""',
    }
)

# Unnamed types whose zero value is nil
_NILABLE_KINDS = frozenset(
    {
        TypeKind.CONTEXT,
        TypeKind.ERROR,
        TypeKind.POINTER,
        TypeKind.SLICE,
        TypeKind.MAP,
        TypeKind.CHANNEL,
        TypeKind.FUNC,
        TypeKind.INTERFACE,
    }
)


def zero_value_of(type_ref: TypeRef) -> str:
    """Return the literal for the zero value of a type.

    Args:
        type_ref: A non-error result type

    Returns:
        Go literal such as ``0``, ``""``, ``false`` or ``nil``

    Raises:
        ZeroValueError: For structs, arrays, and named types whose underlying
            type is not a scalar

    """
    if type_ref.kind in _NILABLE_KINDS:
        return NIL

    if type_ref.kind in (TypeKind.BASIC, TypeKind.NAMED):
        family = scalar_family(type_ref.basic)
        if family is not None:
            return ZERO_VALUES[family]

    if type_ref.kind == TypeKind.NAMED:
        if type_ref.underlying is None:
            reason = "its underlying type could not be resolved"
        else:
            reason = f"its underlying type is a {type_ref.underlying}"
        raise ZeroValueError(
            f"No zero value known for named type '{type_ref.text}': {reason}"
        )

    raise ZeroValueError(
        f"No zero value known for {type_ref.kind} type '{type_ref.text}'"
    )


def error_values(results: Sequence[Result]) -> list[str]:
    """Return zero values for every result except the terminal error."""
    return [zero_value_of(result.type) for result in results if not result.is_terminal_error]
