"""
Z80 Assembly Analyzer
=====================

Main entry point of the analysis engine. The Analyzer runs the passes over
one document and assembles their findings into a DiagnosticSet.

Analysis Process
----------------
1. **Definitions**: SymbolTableBuilder scans all lines once, collecting
   labels, variables, declarations and the block depths.
2. **Per-line checks**: for each line, in order, the usage validator and
   then the undefined-reference scan.
3. **Document checks**: duplicate definitions (labels, then variables) and
   the block-balance check.

Each run allocates its own symbol table and diagnostic list; the only
shared state is the dialect, which is read-only. Running the analyzer
twice on the same text yields the same diagnostics.

A line that raises during a check is logged and skipped; the rest of the
document is still analyzed.

Example Usage
-------------
>>> from z80_lint import Analyzer
>>> analyzer = Analyzer()
>>> result = analyzer.analyze_string('''
... LOOP: LD A, (HL)
...       JP LOOP
... ''')
>>> result.has_errors()
False
"""

from pathlib import Path
from typing import Optional, Union
import logging

from z80_lint.analyzer.checker import ReferenceChecker
from z80_lint.analyzer.lexer import code_part, split_lines
from z80_lint.analyzer.symbols import SymbolTableBuilder
from z80_lint.analyzer.usage import UsageValidator
from z80_lint.config import LintConfig
from z80_lint.diagnostics import Diagnostic, DiagnosticSet
from z80_lint.dialects import Dialect, get_dialect
from z80_lint.errors import SourceReadError

logger = logging.getLogger(__name__)


class Analyzer:
    """
    Static analyzer for Z80 assembly source.

    Attributes:
        dialect: The active Dialect
        config: The run configuration

    Usage:
        analyzer = Analyzer(dialect="z80")
        result = analyzer.analyze_file("game.asm")
        print(result.report())
    """

    def __init__(
        self,
        dialect: Union[str, Dialect, None] = None,
        config: Optional[LintConfig] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            dialect: Dialect name or instance. Defaults to the dialect
                named in the configuration ("z80" unless configured).
            config: Run configuration (defaults to LintConfig())

        Raises:
            UnknownDialectError: If the dialect name is not registered
        """
        self.config = config or LintConfig()

        if isinstance(dialect, Dialect):
            self.dialect = dialect
        else:
            self.dialect = get_dialect(dialect or self.config.dialect)

    # =========================================================================
    # Analysis Methods
    # =========================================================================

    def analyze_string(self, text: str, filename: str = "<input>") -> DiagnosticSet:
        """
        Analyze source text.

        Args:
            text: Full document text
            filename: Name used in formatted reports

        Returns:
            DiagnosticSet with every finding, in production order
        """
        lines = split_lines(text)
        result = DiagnosticSet(filename=filename, lines=lines)
        source = self.config.source_tag

        table = SymbolTableBuilder(self.dialect).build(lines)
        validator = UsageValidator(self.dialect, source)
        checker = ReferenceChecker(table, self.dialect, source)

        for index, raw_line in enumerate(lines):
            try:
                usage = validator.check_line(
                    code_part(raw_line, self.dialect.comment_markers), index
                )
                if usage is not None:
                    result.add(usage)
            except Exception as e:
                logger.warning(f"{filename}:{index + 1}: usage check skipped: {e}")

            try:
                result.extend(checker.check_line(raw_line, index))
            except Exception as e:
                logger.warning(f"{filename}:{index + 1}: reference check skipped: {e}")

        result.extend(checker.duplicate_diagnostics())
        result.extend(checker.balance_diagnostics())

        logger.debug(
            f"{filename}: {len(lines)} lines, {result.error_count()} diagnostic(s) "
            f"[{self.dialect.name}]"
        )
        return result

    def analyze_file(self, filepath: Union[str, Path]) -> DiagnosticSet:
        """
        Analyze a source file.

        Args:
            filepath: Path to the assembly source

        Returns:
            DiagnosticSet named after the file

        Raises:
            SourceReadError: If the file cannot be read or decoded
        """
        filepath = Path(filepath)
        text = read_source(filepath, self.config.encoding)
        return self.analyze_string(text, str(filepath))


# =============================================================================
# Convenience Functions
# =============================================================================

def read_source(filepath: Union[str, Path], encoding: str = "utf-8") -> str:
    """
    Read a source file as text.

    Raises:
        SourceReadError: If the file cannot be read or decoded
    """
    filepath = Path(filepath)
    try:
        return filepath.read_text(encoding=encoding)
    except UnicodeDecodeError as e:
        raise SourceReadError(str(filepath), f"not valid {encoding}: {e.reason}")
    except OSError as e:
        raise SourceReadError(str(filepath), e.strerror or str(e))


def analyze(text: str, dialect: Union[str, Dialect, None] = None) -> list[Diagnostic]:
    """
    Analyze source text and return the diagnostics as a list.

    Args:
        text: Full document text
        dialect: Dialect name or instance (default: "z80")

    Returns:
        Diagnostics in production order
    """
    return list(Analyzer(dialect).analyze_string(text))
