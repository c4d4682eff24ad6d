"""
z80-lint Configuration
======================

Run configuration for the analyzer and the command-line tool. Values come
from:
- Default values (defined here)
- Environment variables (``LintConfig.from_env()``)
- Command-line options (applied by the CLI on top of the above)

Environment variables (all optional):
    Z80LINT_DIALECT: Dialect name (e.g. "z80", "z80-basic")
    Z80LINT_SOURCE_TAG: Source tag stamped on every diagnostic
    Z80LINT_EXTENSIONS: Comma-separated file extensions for directory scans
    Z80LINT_ENCODING: Text encoding used to read source files
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List
import codecs
import os

from z80_lint.diagnostics import DEFAULT_SOURCE_TAG
from z80_lint.errors import ConfigError


@dataclass
class LintConfig:
    """
    Configuration for an analysis run.

    Attributes:
        dialect: Name of the dialect to analyze with (default: "z80")
        source_tag: Source tag stamped on diagnostics (default: "Z80 Assembly")
        file_extensions: Extensions picked up when scanning directories
        encoding: Encoding used to read source files (default: "utf-8")
    """

    dialect: str = "z80"
    source_tag: str = DEFAULT_SOURCE_TAG
    file_extensions: List[str] = field(
        default_factory=lambda: [".asm", ".z80", ".s", ".inc"]
    )
    encoding: str = "utf-8"

    # =========================================================================
    # Factory Methods
    # =========================================================================

    @classmethod
    def from_env(cls) -> "LintConfig":
        """
        Create LintConfig from environment variables.

        Returns:
            LintConfig with values from environment variables

        Raises:
            ConfigError: If a variable is set to an unusable value
        """
        config = cls()

        if dialect := os.environ.get("Z80LINT_DIALECT"):
            config.dialect = dialect.strip()

        if source_tag := os.environ.get("Z80LINT_SOURCE_TAG"):
            config.source_tag = source_tag

        if extensions := os.environ.get("Z80LINT_EXTENSIONS"):
            config.file_extensions = parse_extensions(extensions)

        if encoding := os.environ.get("Z80LINT_ENCODING"):
            try:
                codecs.lookup(encoding)
            except LookupError:
                raise ConfigError(
                    f"unknown encoding '{encoding}'",
                    hint="check Z80LINT_ENCODING",
                )
            config.encoding = encoding

        return config

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def matches(self, path: Path) -> bool:
        """Return True if a file has one of the configured extensions."""
        return path.suffix.lower() in self.file_extensions

    def collect_sources(self, root: Path) -> List[Path]:
        """
        Expand a path into the source files to analyze.

        A file is returned as is, whatever its extension. A directory is
        searched recursively for files with a configured extension.

        Args:
            root: File or directory

        Returns:
            Sorted list of source files
        """
        if root.is_file():
            return [root]
        return sorted(p for p in root.rglob("*") if p.is_file() and self.matches(p))


def parse_extensions(value: str) -> List[str]:
    """
    Parse a comma-separated extension list.

    Entries are lower-cased and given a leading dot when missing:
    ``"asm, .Z80"`` becomes ``[".asm", ".z80"]``.

    Raises:
        ConfigError: If the list contains no extensions
    """
    extensions = []
    for item in value.split(","):
        item = item.strip().lower()
        if not item:
            continue
        extensions.append(item if item.startswith(".") else f".{item}")

    if not extensions:
        raise ConfigError(
            f"no file extensions in '{value}'",
            hint="use a comma-separated list such as '.asm,.z80'",
        )
    return extensions
