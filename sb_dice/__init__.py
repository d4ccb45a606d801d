"""sb_dice - string literal extraction and replacement for TypeScript sources."""

# Load .env so SB_DICE_LOG_LEVEL is set before sb_dice.logging configures
# the logger, for any entry point (CLI, pytest, scripts).
from dotenv import load_dotenv

load_dotenv()

# Keep in sync with pyproject.toml [project] version.
__version__ = "0.1.0"

from sb_dice.config import LiteralPolicy, TransformOptions  # noqa: E402
from sb_dice.mapping import MappingEntry, MappingTable  # noqa: E402
from sb_dice.pipeline import (  # noqa: E402
    SourceFile,
    TransformResult,
    TransformSummary,
    transform_file,
    transform_source,
)

__all__ = [
    "__version__",
    "LiteralPolicy",
    "MappingEntry",
    "MappingTable",
    "SourceFile",
    "TransformOptions",
    "TransformResult",
    "TransformSummary",
    "transform_file",
    "transform_source",
]
