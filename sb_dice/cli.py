"""CLI interface for sb_dice.

Replaces the string literals of a TypeScript file with sequential indices
and writes the rewritten file plus a mapping document next to it.
"""

import logging
import sys
from pathlib import Path

import click

from sb_dice import __version__
from sb_dice.config import LiteralPolicy, TransformOptions
from sb_dice.errors import SbDiceError
from sb_dice.logging import set_log_level
from sb_dice.pipeline import transform_file

HELP_HINT = "Use 'sb_dice -h' or 'sb_dice --help' for help."

EPILOG = """\b
Outputs (next to the input file):
  <name>_r.ts    rewritten source, all comments removed
  <name>_s.json  mapping document {"0": "original 0", "1": "original 1", ...}

\b
Notes:
  - static text of template strings is never replaced
  - import/require module paths are replaced
"""


def _log_level(verbose: int, quiet: bool) -> int | None:
    if quiet:
        return logging.ERROR
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return None


@click.command(
    context_settings={"help_option_names": ["-h", "--help"]},
    epilog=EPILOG,
)
@click.version_option(version=__version__, prog_name="sb_dice")
@click.argument("path", type=click.Path(path_type=Path))
@click.option("--compact", is_flag=True, help="Write the mapping document on a single line.")
@click.option("--ascii", "ensure_ascii", is_flag=True, help="Escape non-ASCII characters in the mapping document.")
@click.option("--include-property-keys", is_flag=True, help="Also replace quoted property, member and enum member names.")
@click.option("--include-enum-initializers", is_flag=True, help="Also replace string initializers of enum members.")
@click.option("--include-type-literals", is_flag=True, help="Also replace string literal types and ambient module names.")
@click.option("--no-verify", is_flag=True, help="Skip re-parsing the rewritten source.")
@click.option("-v", "--verbose", count=True, help="Log progress (-vv for every literal).")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors.")
def cli(
    path: Path,
    compact: bool,
    ensure_ascii: bool,
    include_property_keys: bool,
    include_enum_initializers: bool,
    include_type_literals: bool,
    no_verify: bool,
    verbose: int,
    quiet: bool,
) -> None:
    """Replace the string literals of a TypeScript file with indices "0", "1", ...

    PATH: The .ts file to transform.
    """
    level = _log_level(verbose, quiet)
    if level is not None:
        set_log_level(level)

    options = TransformOptions(
        policy=LiteralPolicy(
            property_keys=include_property_keys,
            enum_initializers=include_enum_initializers,
            type_literals=include_type_literals,
        ),
        indent=None if compact else 2,
        ensure_ascii=ensure_ascii,
        verify_output=not no_verify,
    )

    try:
        summary = transform_file(path, options)
    except SbDiceError as e:
        prefix = "internal error" if e.internal else "error"
        click.echo(f"{prefix}: {e}", err=True)
        click.echo(HELP_HINT, err=True)
        sys.exit(e.exit_code)

    click.echo(
        f"Wrote {summary.rewritten} and {summary.mapping} ({summary.literal_count} literals)"
    )


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
