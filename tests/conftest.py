"""Global test configuration for decgen tests."""

from collections.abc import Callable
from pathlib import Path
from types import SimpleNamespace

import pytest
from dotenv import load_dotenv

from decgen.models import (
    InterfaceModel,
    MethodSignature,
    Parameter,
    Result,
    TypeKind,
    TypeRef,
)

from gomodule import MODULE_PATH, GoModuleBuilder, type_ref

# Load environment variables from .env file for testing
env_file = Path(__file__).parent.parent / ".env"
if env_file.exists():
    load_dotenv(env_file)


@pytest.fixture
def go_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> GoModuleBuilder:
    """Provide an empty Go module rooted at the test's working directory."""
    monkeypatch.chdir(tmp_path)
    return GoModuleBuilder(tmp_path)


@pytest.fixture
def store_module(go_module: GoModuleBuilder) -> GoModuleBuilder:
    """Provide a module with a typical repository interface in ./store."""
    go_module.write(
        "store/store.go",
        """
        package store

        import (
        	"context"
        	"time"
        )

        type UserID int64

        type User struct {
        	ID   UserID
        	Name string
        }

        type Store interface {
        	Get(ctx context.Context, id UserID) (*User, error)
        	Count(ctx context.Context) (int64, error)
        	Delete(ctx context.Context, id UserID) error
        	Rename(ctx context.Context, id UserID, name string) (string, bool, error)
        	Timeout(ctx context.Context) time.Duration
        }
        """,
    )
    return go_module


@pytest.fixture
def go_types() -> SimpleNamespace:
    """Provide commonly used classified types."""
    return SimpleNamespace(
        ctx=type_ref(
            "context.Context", TypeKind.CONTEXT, imports={"context": "context"}
        ),
        error=type_ref("error", TypeKind.ERROR),
        int64=type_ref("int64", TypeKind.BASIC, basic="int64"),
        string=type_ref("string", TypeKind.BASIC, basic="string"),
        bool=type_ref("bool", TypeKind.BASIC, basic="bool"),
        user_ptr=type_ref(
            "*User",
            TypeKind.POINTER,
            qualified_text="*store.User",
            imports={"store": f"{MODULE_PATH}/store"},
        ),
        request_ptr=type_ref("*Request", TypeKind.POINTER),
        response_ptr=type_ref("*Response", TypeKind.POINTER),
        options=type_ref(
            "grpc.CallOption", TypeKind.NAMED, imports={"grpc": "google.golang.org/grpc"}
        ),
    )


@pytest.fixture
def make_signature() -> Callable[..., MethodSignature]:
    """Provide a factory for method signatures built from types."""

    def make(
        name: str,
        parameters: list[TypeRef],
        results: list[TypeRef] | None = None,
        variadic_last: bool = False,
    ) -> MethodSignature:
        results = results or []
        last = len(results) - 1
        return MethodSignature(
            name=name,
            parameters=[
                Parameter(
                    index=index,
                    type=parameter,
                    variadic=variadic_last and index == len(parameters) - 1,
                )
                for index, parameter in enumerate(parameters)
            ],
            results=[
                Result(
                    index=index,
                    type=result,
                    is_terminal_error=index == last and result.kind == TypeKind.ERROR,
                )
                for index, result in enumerate(results)
            ],
        )

    return make


@pytest.fixture
def make_interface() -> Callable[..., InterfaceModel]:
    """Provide a factory for interface models in the ``store`` package."""

    def make(
        name: str,
        *methods: MethodSignature,
        package_name: str = "store",
        import_path: str = f"{MODULE_PATH}/store",
    ) -> InterfaceModel:
        return InterfaceModel(
            name=name,
            package_name=package_name,
            import_path=import_path,
            methods={method.name: method for method in methods},
        )

    return make
