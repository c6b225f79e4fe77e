"""Import block assembly for generated Go files."""

from decgen.errors import RenderError
from decgen.golang.packages import guess_package_name


class GoImports:
    """Collects the imports of a generated file, keyed by qualifier."""

    def __init__(self, own_import_path: str) -> None:
        """Initialise for a file of the package at ``own_import_path``.

        Imports of the file's own package are dropped: its names are used
        unqualified.
        """
        self._own_import_path = own_import_path
        self._by_qualifier: dict[str, str] = {}

    def add(self, import_path: str, qualifier: str | None = None) -> None:
        """Add an import.

        Args:
            import_path: Package import path
            qualifier: Identifier the file uses for the package; guessed from
                the path when omitted

        Raises:
            RenderError: If the qualifier already refers to another package

        """
        if import_path == self._own_import_path:
            return
        qualifier = qualifier or guess_package_name(import_path)
        existing = self._by_qualifier.get(qualifier)
        if existing is not None and existing != import_path:
            raise RenderError(
                f"Import name '{qualifier}' refers to both {existing} and {import_path}"
            )
        self._by_qualifier[qualifier] = import_path

    def update(self, imports: dict[str, str]) -> None:
        """Add every ``qualifier -> import path`` pair."""
        for qualifier, import_path in imports.items():
            self.add(import_path, qualifier)

    def groups(self) -> list[list[str]]:
        """Return import specs grouped (standard library first) and sorted by path."""
        standard: list[tuple[str, str]] = []
        external: list[tuple[str, str]] = []
        for qualifier, import_path in self._by_qualifier.items():
            spec = f'"{import_path}"'
            if qualifier != guess_package_name(import_path):
                spec = f"{qualifier} {spec}"
            first_element = import_path.split("/", 1)[0]
            target = external if "." in first_element else standard
            target.append((import_path, spec))
        return [
            [spec for _, spec in sorted(group)] for group in (standard, external) if group
        ]
