"""Go source parser using tree-sitter."""

from pathlib import Path

import tree_sitter_go
from tree_sitter import Language, Node, Parser

from decgen.errors import ParserError

_GO_LANGUAGE = Language(tree_sitter_go.language())

# Constants
_GO_EXTENSION = ".go"
_TEST_FILE_SUFFIX = "_test.go"
_DEFAULT_ENCODING = "utf-8"


class GoSourceParser:
    """Parser for Go source code using tree-sitter."""

    def __init__(self) -> None:
        """Initialise the parser with the tree-sitter Go grammar."""
        self.parser = Parser()
        self.parser.language = _GO_LANGUAGE

    def parse(self, source: bytes, origin: str = "<memory>") -> Node:
        """Parse Go source bytes.

        Args:
            source: Source code to parse
            origin: Name used in error messages (usually the file path)

        Returns:
            Syntax tree root node

        Raises:
            ParserError: If the source contains syntax errors

        """
        tree = self.parser.parse(source)
        root = tree.root_node
        if root.has_error:
            raise ParserError(f"Syntax error in Go source: {origin}")
        return root

    def parse_file(self, file_path: Path) -> tuple[Node, bytes]:
        """Read and parse a Go source file.

        Returns:
            Tuple of (root node, source bytes)

        Raises:
            ParserError: If the file cannot be read or contains syntax errors

        """
        try:
            source = file_path.read_bytes()
        except OSError as e:
            raise ParserError(f"Failed to read Go source {file_path}: {e}") from e
        return self.parse(source, origin=str(file_path)), source

    @staticmethod
    def is_supported_file(file_path: Path) -> bool:
        """Check if a file is a non-test Go source file.

        Args:
            file_path: Path to check

        Returns:
            True if the file should be part of a package's declarations

        """
        return (
            file_path.suffix == _GO_EXTENSION
            and not file_path.name.endswith(_TEST_FILE_SUFFIX)
            and not file_path.name.startswith((".", "_"))
        )
