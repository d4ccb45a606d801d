"""End-to-end transformation of one TypeScript file.

Stages run strictly in sequence: read, parse, replace literals, regenerate,
serialize, write. Both output files are written only after every earlier
stage succeeded, and never one without the other.
"""

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from sb_dice.codegen import generate
from sb_dice.config import TransformOptions
from sb_dice.errors import InputError, TransformIOError
from sb_dice.logging import log_operation, logger
from sb_dice.mapping import MappingTable
from sb_dice.parser.typescript import TYPESCRIPT_EXTENSION, parse_typescript
from sb_dice.visitor import LiteralVisitor

REWRITTEN_SUFFIX = "_r.ts"
MAPPING_SUFFIX = "_s.json"


@dataclass(frozen=True)
class SourceFile:
    """An input file: its path, text and base name (path minus ``.ts``)."""

    path: Path
    text: str

    @property
    def base(self) -> Path:
        return self.path.with_suffix("")

    @classmethod
    def read(cls, path: str | Path) -> "SourceFile":
        """Validate the extension and read the file as UTF-8.

        Raises:
            InputError: Wrong extension or undecodable content.
            TransformIOError: The file cannot be read.
        """
        path = Path(path)
        if path.suffix != TYPESCRIPT_EXTENSION:
            raise InputError(f"Only {TYPESCRIPT_EXTENSION} files are supported: {path}")
        if path.is_dir():
            raise TransformIOError(f"Input is a directory: {path}", path=path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise TransformIOError(f"Failed to read {path}: {e.strerror or e}", path=path) from e
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise InputError(f"{path} is not valid UTF-8: {e}") from e
        return cls(path=path, text=text)


@dataclass(frozen=True)
class OutputPaths:
    """Where the two artifacts for an input go."""

    source: Path
    mapping: Path


def output_paths(source: SourceFile) -> OutputPaths:
    """``<base>_r.ts`` and ``<base>_s.json`` next to the input."""
    base = source.base
    return OutputPaths(
        source=base.with_name(base.name + REWRITTEN_SUFFIX),
        mapping=base.with_name(base.name + MAPPING_SUFFIX),
    )


@dataclass(frozen=True)
class TransformResult:
    """Rewritten source plus the frozen mapping table."""

    source: str
    mapping: MappingTable

    def mapping_document(self, options: TransformOptions | None = None) -> str:
        options = options or TransformOptions()
        return self.mapping.serialize(indent=options.indent, ensure_ascii=options.ensure_ascii)


class TransformSummary(BaseModel):
    """Report of a completed file transformation."""

    input: str = Field(description="Input file path")
    rewritten: str = Field(description="Path of the rewritten source")
    mapping: str = Field(description="Path of the mapping document")
    literal_count: int = Field(description="Number of literals replaced")
    elapsed_ms: float = Field(default=0.0, description="Wall time of the transformation")


def transform_source(
    text: str,
    options: TransformOptions | None = None,
    path: Path | None = None,
) -> TransformResult:
    """Replace eligible literals in TypeScript source text.

    Args:
        text: TypeScript source.
        options: Eligibility policy and verification settings.
        path: Originating file, for error messages.

    Returns:
        TransformResult with the comment-free rewritten source and the
        frozen mapping table.

    Raises:
        ParseError: The source is not valid TypeScript.
        GenerationError: The rewritten source could not be regenerated.
        InvariantError: The mapping table discipline was violated.
    """
    options = options or TransformOptions()

    with log_operation("parse", {"bytes": len(text)}):
        tree = parse_typescript(text, path=path)

    with log_operation("replace_literals"):
        table = LiteralVisitor(options.policy).visit(tree.root)

    with log_operation("generate"):
        rewritten = generate(tree, verify=options.verify_output)

    return TransformResult(source=rewritten, mapping=table.freeze())


def _write_temp(directory: Path, suffix: str, content: str) -> Path:
    fd, name = tempfile.mkstemp(dir=directory, prefix=".sb_dice-", suffix=suffix)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except BaseException:
        Path(name).unlink(missing_ok=True)
        raise
    return Path(name)


def write_artifacts(result: TransformResult, paths: OutputPaths, options: TransformOptions) -> None:
    """Write both artifacts, or neither.

    Content is written to temporary files in the target directory first and
    moved into place afterwards. If the second move fails the first output
    is removed again.

    Raises:
        TransformIOError: If either artifact cannot be written.
    """
    artifacts = [
        (paths.source, REWRITTEN_SUFFIX, result.source),
        (paths.mapping, MAPPING_SUFFIX, result.mapping_document(options)),
    ]
    temps: list[Path] = []
    placed: list[Path] = []
    target = paths.source
    try:
        for target, suffix, content in artifacts:
            temps.append(_write_temp(target.parent, suffix, content))
        for temp, (target, _, _) in zip(temps, artifacts, strict=True):
            os.replace(temp, target)
            placed.append(target)
    except OSError as e:
        for leftover in temps + placed:
            leftover.unlink(missing_ok=True)
        raise TransformIOError(f"Failed to write output {target}: {e.strerror or e}", path=target) from e

    logger.info("Wrote %s and %s", paths.source, paths.mapping)


def transform_file(path: str | Path, options: TransformOptions | None = None) -> TransformSummary:
    """Transform one ``.ts`` file and write ``<base>_r.ts`` and ``<base>_s.json``.

    Args:
        path: Input file.
        options: Transformation options.

    Returns:
        TransformSummary describing the written artifacts.

    Raises:
        SbDiceError: Any stage failure; nothing is written in that case.
    """
    options = options or TransformOptions()

    with log_operation("transform_file", {"path": path}) as timing:
        source = SourceFile.read(path)
        paths = output_paths(source)
        result = transform_source(source.text, options, path=source.path)
        write_artifacts(result, paths, options)

    return TransformSummary(
        input=str(source.path),
        rewritten=str(paths.source),
        mapping=str(paths.mapping),
        literal_count=len(result.mapping),
        elapsed_ms=timing.elapsed_ms,
    )
