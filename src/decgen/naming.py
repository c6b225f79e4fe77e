"""Position-based naming of parameters and results.

Names depend only on the shape of the parameter list so the generated code
is identical from one run to the next.
"""

from collections.abc import Sequence

from decgen.models import Parameter, Result, TypeKind

CONTEXT_NAME = "ctx"
REQUEST_NAME = "req"
ERROR_NAME = "err"
NIL = "nil"

_VARIADIC_MARKER = "..."


def param_name(index: int, parameters: Sequence[Parameter]) -> str:
    """Return the name of the parameter at ``index``.

    The first parameter is ``ctx`` when it is the context carrier, the second
    of exactly two parameters is ``req``, anything else is ``param<index>``.
    """
    parameter = parameters[index]

    if index == 0 and parameter.type.kind == TypeKind.CONTEXT:
        return CONTEXT_NAME

    if len(parameters) == 2 and index == 1:
        return REQUEST_NAME

    return f"param{index}"


def param_names(parameters: Sequence[Parameter]) -> list[str]:
    """Return the names of every parameter in order."""
    return [param_name(index, parameters) for index in range(len(parameters))]


def call_arguments(parameters: Sequence[Parameter], drop_last: bool = False) -> str:
    """Return the argument list forwarding ``parameters`` to another call.

    Variadic parameters get their expansion marker back at the call site.

    Args:
        parameters: Parameters of the decorated method
        drop_last: Forward every parameter except the last one

    """
    forwarded = parameters[:-1] if drop_last else parameters
    return ", ".join(
        param_name(parameter.index, parameters)
        + (_VARIADIC_MARKER if parameter.variadic else "")
        for parameter in forwarded
    )


def signature_parameters(parameters: Sequence[Parameter], qualified: bool) -> str:
    """Return the named parameter list of a method declaration."""
    declared: list[str] = []
    for parameter in parameters:
        type_text = parameter.type.render(qualified)
        if parameter.variadic:
            type_text = _VARIADIC_MARKER + type_text
        declared.append(f"{param_name(parameter.index, parameters)} {type_text}")
    return ", ".join(declared)


def result_name(result: Result) -> str:
    """Return the binding a result is assigned to."""
    return ERROR_NAME if result.is_terminal_error else f"arg{result.index}"


def result_bindings(results: Sequence[Result]) -> list[str]:
    """Return the bindings for every result in order."""
    return [result_name(result) for result in results]


def ok_values(results: Sequence[Result]) -> list[str]:
    """Return the success-path return values: bindings, with nil for the error."""
    return [NIL if result.is_terminal_error else result_name(result) for result in results]
