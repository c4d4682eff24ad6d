"""
z80lint - Z80 Assembly Static Analysis Command-Line Interface
=============================================================

This module implements the command-line interface for the analyzer.

Usage Examples
--------------
Check one file:
    $ z80lint check game.asm

Check every source under a directory (recursing on .asm, .z80, .s, .inc):
    $ z80lint check src/

Machine-readable output:
    $ z80lint check --format json src/

Use the comma-split dialect:
    $ z80lint check --dialect z80-basic game.asm

Show label/variable definitions and references:
    $ z80lint tokens game.asm

List dialects:
    $ z80lint dialects

Configuration
-------------
Defaults come from the environment (see z80_lint.config):
Z80LINT_DIALECT, Z80LINT_SOURCE_TAG, Z80LINT_EXTENSIONS, Z80LINT_ENCODING.
Command-line options take precedence.

Exit Codes
----------
0 - No diagnostics
1 - Diagnostics were found
2 - Invalid arguments, configuration or unreadable file
3 - Internal error
"""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import click

from z80_lint import __version__
from z80_lint.analyzer import Analyzer, classify_tokens, read_source, split_lines
from z80_lint.cli.errors import ExitCode, handle_cli_exception
from z80_lint.config import LintConfig
from z80_lint.diagnostics import DiagnosticSet
from z80_lint.dialects import available_dialects, get_dialect

# Configure logging
logger = logging.getLogger(__name__)


# =============================================================================
# CLI Context and Utilities
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Stores the verbosity flag and the configuration loaded from the
    environment.
    """

    def __init__(self) -> None:
        self.verbose: bool = False
        self.config: LintConfig = LintConfig()

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s" if self.verbose else "%(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


def format_summary(results: list[DiagnosticSet]) -> str:
    """One-line summary of a check run."""
    total = sum(r.error_count() for r in results)
    failing = sum(1 for r in results if r.has_errors())
    error_word = "error" if total == 1 else "errors"

    if total == 0:
        return f"Checked {len(results)} file(s): no errors"
    return f"Checked {len(results)} file(s): {total} {error_word} in {failing} file(s)"


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(version=__version__, prog_name="z80lint")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    Static analysis for Z80 assembly source.

    Flags duplicate labels and variables, references to undefined symbols,
    instructions and directives used with invalid operands, and unbalanced
    DEFVARS braces or MACRO/ENDM pairs.
    """
    ctx.verbose = verbose
    ctx.setup_logging()

    try:
        ctx.config = LintConfig.from_env()
    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Config")


# =============================================================================
# Check Command
# =============================================================================

@main.command()
@click.argument(
    "paths",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "-d", "--dialect",
    type=str,
    default=None,
    help="Assembly dialect (default: z80, see 'z80lint dialects')",
)
@click.option(
    "-f", "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text)",
)
@click.option(
    "--source-tag",
    type=str,
    default=None,
    help="Source tag stamped on every diagnostic",
)
@pass_context
def check(
    ctx: Context,
    paths: tuple[Path, ...],
    dialect: Optional[str],
    output_format: str,
    source_tag: Optional[str],
) -> None:
    """
    Analyze assembly source files.

    PATHS are files or directories. Directories are searched recursively
    for files with a configured extension.

    Example:
        z80lint check game.asm
        z80lint check --format json src/
    """
    config = ctx.config
    if dialect:
        config.dialect = dialect
    if source_tag:
        config.source_tag = source_tag

    results: list[DiagnosticSet] = []

    try:
        analyzer = Analyzer(config=config)

        sources: list[Path] = []
        for path in paths:
            sources.extend(config.collect_sources(path))

        if not sources:
            raise click.BadParameter(
                "no source files found (extensions: "
                + ", ".join(config.file_extensions) + ")",
                param_hint="PATHS",
            )

        for source in sources:
            logger.debug(f"Checking {source}")
            results.append(analyzer.analyze_file(source))

    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)

    if output_format == "json":
        click.echo(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        for result in results:
            if result.has_errors():
                click.echo(result.report())
                click.echo()
        click.echo(format_summary(results))

    if any(r.has_errors() for r in results):
        sys.exit(ExitCode.LINT_ERRORS)


# =============================================================================
# Tokens Command
# =============================================================================

@main.command()
@click.argument(
    "file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-d", "--dialect",
    type=str,
    default=None,
    help="Assembly dialect (default: z80)",
)
@pass_context
def tokens(ctx: Context, file: Path, dialect: Optional[str]) -> None:
    """
    Show label and variable definitions and references.

    Prints one token per line: LINE:COLUMN, token type and the text.

    Example:
        z80lint tokens game.asm
    """
    try:
        text = read_source(file, ctx.config.encoding)
        token_list = classify_tokens(text, dialect or ctx.config.dialect)
    except Exception as e:
        handle_cli_exception(e, verbose=ctx.verbose)

    lines = split_lines(text)
    for token in token_list:
        name = lines[token.line][token.start:token.start + token.length]
        click.echo(f"{token.line + 1}:{token.start + 1}\t{token.token_type}\t{name}")


# =============================================================================
# Dialects Command
# =============================================================================

@main.command()
@pass_context
def dialects(ctx: Context) -> None:
    """
    List the registered assembly dialects.

    Example:
        z80lint dialects
    """
    for name in available_dialects():
        dialect = get_dialect(name)
        marker = "*" if name == ctx.config.dialect else " "

        click.echo(f"{marker} {name:<12} {dialect.description}")
        click.echo(
            f"  {'':<12} instructions: {len(dialect.instruction_rules)}, "
            f"directives: {len(dialect.directive_rules)}, "
            f"%any single operand: {'yes' if dialect.any_single_operand else 'no'}, "
            f"composite patterns: {'yes' if dialect.composite_patterns else 'no'}"
        )


if __name__ == "__main__":
    main()
