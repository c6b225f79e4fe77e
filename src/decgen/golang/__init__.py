"""Go source front end built on tree-sitter."""

from decgen.golang.packages import (
    GoPackage,
    PackageLoader,
    guess_package_name,
    resolve_import_path,
)
from decgen.golang.parser import GoSourceParser
from decgen.golang.types import TypeResolver

__all__ = [
    "GoPackage",
    "GoSourceParser",
    "PackageLoader",
    "TypeResolver",
    "guess_package_name",
    "resolve_import_path",
]
