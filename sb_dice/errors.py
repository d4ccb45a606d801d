"""Error types raised by sb_dice.

Every error carries the process exit code the CLI uses for it. InvariantError
marks an internal bug rather than bad input.
"""

from pathlib import Path


class SbDiceError(Exception):
    """Base class for all sb_dice errors."""

    exit_code = 1
    internal = False


class InputError(SbDiceError):
    """Raised for a missing argument, wrong extension or undecodable input."""

    exit_code = 2


class MappingDocumentError(InputError):
    """Raised when a mapping document is malformed or not contiguous."""


class TransformIOError(SbDiceError):
    """Raised when the input cannot be read or an output cannot be written."""

    exit_code = 3

    def __init__(self, message: str, path: Path | str | None = None):
        super().__init__(message)
        self.path = Path(path) if path is not None else None


class ParseError(SbDiceError):
    """Raised when the source is not valid TypeScript.

    Attributes:
        line: 1-based line of the first syntax error, if known.
        column: 1-based column of the first syntax error, if known.
        snippet: Source text around the error, if known.
    """

    exit_code = 4

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
        snippet: str | None = None,
        path: Path | str | None = None,
    ):
        super().__init__(message)
        self.line = line
        self.column = column
        self.snippet = snippet
        self.path = Path(path) if path is not None else None

    def __str__(self) -> str:
        message = super().__str__()
        location = ""
        if self.path is not None:
            location = str(self.path)
        if self.line is not None and location:
            location = f"{location}:{self.line}:{self.column}"
        elif self.line is not None:
            location = f"line {self.line}, column {self.column}"
        if location:
            message = f"{location}: {message}"
        if self.snippet:
            message = f"{message} near {self.snippet!r}"
        return message


class GenerationError(SbDiceError):
    """Raised when the rewritten source cannot be regenerated."""

    exit_code = 5


class InvariantError(SbDiceError):
    """Raised when the mapping table discipline is violated (internal bug)."""

    exit_code = 70
    internal = True


class GrammarError(SbDiceError):
    """Raised when the tree-sitter TypeScript grammar cannot be loaded."""

    exit_code = 70
    internal = True
