"""Tests for Go package loading and import path resolution."""

from pathlib import Path
from unittest.mock import patch

import pytest

from decgen.errors import PackageResolutionError, ParserError
from decgen.golang.packages import (
    PackageLoader,
    find_module,
    guess_package_name,
    resolve_import_path,
    sanitize_package_name,
)

from gomodule import MODULE_PATH, GoModuleBuilder


class TestResolveImportPath:
    """Test mapping directories to import paths."""

    def test_module_root_maps_to_module_path(self, go_module: GoModuleBuilder) -> None:
        """Test that the module root directory is the module path itself."""
        assert resolve_import_path(go_module.root) == MODULE_PATH

    def test_nested_directory_joins_relative_path(
        self, go_module: GoModuleBuilder
    ) -> None:
        """Test that nested packages append their relative directory."""
        directory = go_module.directory("internal/store")
        directory.mkdir(parents=True)

        assert resolve_import_path(directory) == f"{MODULE_PATH}/internal/store"

    def test_gopath_fallback(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that packages outside modules resolve through GOPATH."""
        directory = tmp_path / "gopath" / "src" / "github.com" / "acme" / "store"
        directory.mkdir(parents=True)
        monkeypatch.setenv("GOPATH", str(tmp_path / "gopath"))

        assert resolve_import_path(directory) == "github.com/acme/store"

    def test_outside_module_and_gopath_raises(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test that unresolvable directories raise PackageResolutionError."""
        directory = tmp_path / "loose"
        directory.mkdir()
        monkeypatch.setenv("GOPATH", str(tmp_path / "gopath"))

        with pytest.raises(PackageResolutionError, match="Cannot determine import path"):
            resolve_import_path(directory)

    def test_go_mod_without_module_directive_raises(self, tmp_path: Path) -> None:
        """Test that a go.mod without a module line is rejected."""
        (tmp_path / "go.mod").write_text("go 1.22\n", encoding="utf-8")

        with pytest.raises(PackageResolutionError, match="No module directive"):
            find_module(tmp_path)

    def test_unreadable_go_mod_raises(self, tmp_path: Path) -> None:
        """Test that a go.mod that is not UTF-8 is a resolution error."""
        (tmp_path / "go.mod").write_bytes(b"module example.com/\xff\xfe\n")

        with pytest.raises(PackageResolutionError, match="Failed to read"):
            find_module(tmp_path)


class TestPackageNames:
    """Test package identifier guessing."""

    @pytest.mark.parametrize(
        ("import_path", "expected"),
        [
            ("context", "context"),
            ("database/sql", "sql"),
            ("github.com/pkg/errors", "errors"),
            ("github.com/opentracing/opentracing-go", "opentracing"),
            ("github.com/acme/go-store", "store"),
            ("gopkg.in/yaml.v3", "yaml"),
            ("github.com/acme/store/v2", "store"),
        ],
    )
    def test_guess_package_name(self, import_path: str, expected: str) -> None:
        """Test the conventional import path to identifier mapping."""
        assert guess_package_name(import_path) == expected

    def test_sanitize_package_name(self, tmp_path: Path) -> None:
        """Test that directory names become valid identifiers."""
        assert sanitize_package_name(tmp_path / "My-Store") == "mystore"
        assert sanitize_package_name(tmp_path / "2fa") == "pkg2fa"


class TestPackageLoader:
    """Test loading package directories."""

    def test_load_collects_types_across_files(self, go_module: GoModuleBuilder) -> None:
        """Test that type declarations from every file are recorded."""
        go_module.write("store/a.go", "package store\n\ntype A interface{}\n")
        go_module.write(
            "store/b.go",
            "package store\n\ntype (\n\tB int\n\tC = B\n)\n",
        )

        package = PackageLoader().load(go_module.directory("store"))

        assert package.name == "store"
        assert package.import_path == f"{MODULE_PATH}/store"
        assert sorted(package.types) == ["A", "B", "C"]
        assert package.types["C"].is_alias
        assert not package.types["B"].is_alias

    def test_load_skips_test_files_and_excluded_file(
        self, go_module: GoModuleBuilder
    ) -> None:
        """Test that _test.go files and the excluded output are ignored."""
        go_module.write("store/store.go", "package store\n\ntype Store interface{}\n")
        go_module.write("store/store_test.go", "package store_test\n\ntype T int\n")
        output = go_module.write("store/generated.go", "package store\n\ntype G int\n")

        package = PackageLoader().load(go_module.directory("store"), exclude=output)

        assert sorted(package.types) == ["Store"]

    def test_load_records_file_imports(self, go_module: GoModuleBuilder) -> None:
        """Test that aliased, plain, dot and blank imports are handled."""
        go_module.write(
            "store/store.go",
            """
            package store

            import (
            	"context"
            	pb "example.com/app/proto/v1"
            	. "strings"
            	_ "embed"
            )

            import "github.com/pkg/errors"
            """,
        )

        package = PackageLoader().load(go_module.directory("store"))

        assert package.files[0].imports == {
            "context": "context",
            "pb": "example.com/app/proto/v1",
            "errors": "github.com/pkg/errors",
        }

    def test_load_marks_generic_declarations(self, go_module: GoModuleBuilder) -> None:
        """Test that type parameters are detected."""
        go_module.write(
            "store/store.go",
            "package store\n\ntype Repo[T any] interface {\n\tGet() T\n}\n",
        )

        package = PackageLoader().load(go_module.directory("store"))

        assert package.types["Repo"].has_type_parameters

    def test_load_mixed_packages_raises(self, go_module: GoModuleBuilder) -> None:
        """Test that one directory may only hold one package."""
        go_module.write("store/a.go", "package store\n")
        go_module.write("store/b.go", "package other\n")

        with pytest.raises(ParserError, match="Multiple packages"):
            PackageLoader().load(go_module.directory("store"))

    def test_load_empty_directory_uses_directory_name(
        self, go_module: GoModuleBuilder
    ) -> None:
        """Test that an empty destination directory still gets a package name."""
        directory = go_module.directory("tracing")
        directory.mkdir()

        package = PackageLoader().load(directory)

        assert package.name == "tracing"
        assert package.types == {}

    def test_load_is_cached(self, go_module: GoModuleBuilder) -> None:
        """Test that a directory is parsed once per loader."""
        go_module.write("store/store.go", "package store\n")
        loader = PackageLoader()

        first = loader.load(go_module.directory("store"))
        second = loader.load(go_module.directory("store"))

        assert first is second

    def test_load_missing_directory_raises(self, go_module: GoModuleBuilder) -> None:
        """Test that a missing directory is a resolution error."""
        with pytest.raises(PackageResolutionError, match="Not a package directory"):
            PackageLoader().load(go_module.directory("missing"))

    def test_load_unlistable_directory_raises(self, go_module: GoModuleBuilder) -> None:
        """Test that a directory that cannot be listed is a resolution error."""
        directory = go_module.directory("store")
        directory.mkdir()

        with (
            patch.object(Path, "iterdir", side_effect=PermissionError("denied")),
            pytest.raises(PackageResolutionError, match="Failed to list"),
        ):
            PackageLoader().load(directory)

    def test_load_import_within_module(self, go_module: GoModuleBuilder) -> None:
        """Test that same-module import paths are loaded."""
        go_module.write("model/model.go", "package model\n\ntype ID string\n")
        go_module.write("store/store.go", "package store\n")

        package = PackageLoader().load_import(
            f"{MODULE_PATH}/model", near=go_module.directory("store")
        )

        assert package is not None
        assert "ID" in package.types

    def test_load_import_outside_module_returns_none(
        self, go_module: GoModuleBuilder
    ) -> None:
        """Test that third-party import paths are not loaded."""
        go_module.write("store/store.go", "package store\n")

        package = PackageLoader().load_import(
            "github.com/acme/other", near=go_module.directory("store")
        )

        assert package is None
