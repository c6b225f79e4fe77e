"""Tests for zero value synthesis."""

from collections.abc import Callable
from types import SimpleNamespace

import pytest

from decgen.errors import ZeroValueError
from decgen.models import MethodSignature, TypeKind
from decgen.zero_values import ZERO_VALUES, error_values, zero_value_of

from gomodule import type_ref


class TestZeroValueOf:
    """Test the zero value of each type classification."""

    @pytest.mark.parametrize(
        ("basic", "expected"),
        [
            ("int64", "0"),
            ("uint8", "0"),
            ("float32", "0"),
            ("complex64", "0"),
            ("string", '""'),
            ("bool", "false"),
        ],
    )
    def test_basic_scalars(self, basic: str, expected: str) -> None:
        """Test that scalar families map to their literal."""
        assert zero_value_of(type_ref(basic, TypeKind.BASIC, basic=basic)) == expected

    def test_named_scalar_uses_underlying_literal(self) -> None:
        """Test that named types zero like their scalar underlying."""
        user_id = type_ref("UserID", TypeKind.NAMED, basic="int64", underlying=TypeKind.BASIC)

        assert zero_value_of(user_id) == "0"

    @pytest.mark.parametrize(
        "kind",
        [
            TypeKind.POINTER,
            TypeKind.SLICE,
            TypeKind.MAP,
            TypeKind.CHANNEL,
            TypeKind.FUNC,
            TypeKind.INTERFACE,
            TypeKind.ERROR,
            TypeKind.CONTEXT,
        ],
    )
    def test_reference_kinds_are_nil(self, kind: TypeKind) -> None:
        """Test that unnamed reference types zero to nil."""
        assert zero_value_of(type_ref("T", kind)) == "nil"

    def test_struct_is_rejected(self) -> None:
        """Test that struct literals have no synthesised zero value."""
        with pytest.raises(ZeroValueError, match="struct type 'struct{}'"):
            zero_value_of(type_ref("struct{}", TypeKind.STRUCT))

    def test_array_is_rejected(self) -> None:
        """Test that arrays have no synthesised zero value."""
        with pytest.raises(ZeroValueError, match=r"\[4\]int"):
            zero_value_of(type_ref("[4]int", TypeKind.ARRAY))

    def test_named_struct_is_rejected_with_reason(self) -> None:
        """Test that named composite types name the type and the reason."""
        user = type_ref("User", TypeKind.NAMED, underlying=TypeKind.STRUCT)

        with pytest.raises(ZeroValueError, match="'User': its underlying type is a struct"):
            zero_value_of(user)

    def test_unresolved_named_type_is_rejected(self) -> None:
        """Test that named types of unknown shape are refused."""
        uuid = type_ref("uuid.UUID", TypeKind.NAMED)

        with pytest.raises(ZeroValueError, match="could not be resolved"):
            zero_value_of(uuid)

    def test_table_is_immutable(self) -> None:
        """Test that the zero value table cannot be modified."""
        with pytest.raises(TypeError):
            ZERO_VALUES["bool"] = "true"  # type: ignore[index]


class TestErrorValues:
    """Test error path value lists."""

    def test_terminal_error_is_excluded(
        self,
        go_types: SimpleNamespace,
        make_signature: Callable[..., MethodSignature],
    ) -> None:
        """Test that zero values cover every result except the terminal error."""
        method = make_signature(
            "Rename",
            [go_types.ctx],
            [go_types.response_ptr, go_types.int64, go_types.string, go_types.error],
        )

        assert error_values(method.results) == ["nil", "0", '""']

    def test_error_only_has_no_values(
        self,
        go_types: SimpleNamespace,
        make_signature: Callable[..., MethodSignature],
    ) -> None:
        """Test that an error-only result list needs no zero values."""
        method = make_signature("Delete", [go_types.ctx], [go_types.error])

        assert error_values(method.results) == []
