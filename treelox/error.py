"""
treelox - Errors
Diagnostic types raised by each pipeline stage, and a terminal reporter for them.

Every stage produces LoxError instances carrying a line and a message. Scan,
parse and resolve errors are collected per stage and raised together as
StaticErrors; runtime errors abort evaluation immediately.
"""

import os
import sys
from typing import Iterator, List, Optional, TextIO, Tuple

from termcolor import colored


class LoxError(Exception):
    """Base class for every diagnostic produced by the pipeline."""

    def __init__(self, message: str, line: int, where: str = ""):
        super().__init__(f"[{type(self).__name__}] Line {line}: {message}")
        self.message = message
        self.line = line
        self.where = where   # " at 'lexeme'", " at end" or ""


class ScanError(LoxError):
    pass


class ParseError(LoxError):
    pass


class ResolveError(LoxError):
    pass


class LoxRuntimeError(LoxError):
    pass


class StaticErrors(Exception):
    """All diagnostics collected by one static stage (scan, parse or resolve)."""

    def __init__(self, stage: str, errors: List[LoxError]):
        super().__init__("\n".join(str(e) for e in errors))
        self.stage = stage
        self.errors = errors

    def pairs(self) -> Iterator[Tuple[int, str]]:
        for error in self.errors:
            yield error.line, error.message


# Process exit codes (sysexits.h)
EX_OK       = 0
EX_DATAERR  = 65
EX_NOINPUT  = 66
EX_SOFTWARE = 70


class ErrorReporter:
    """Formats diagnostics for a terminal.

    Also a context manager: inside ``with reporter:`` any StaticErrors or
    LoxRuntimeError is reported and suppressed. When ``fatal`` is set the
    process exits with the matching status code instead.
    """
    ERROR = "red"
    LOCATION = "cyan"

    def __init__(self, stream: Optional[TextIO] = None, color: Optional[bool] = None, fatal: bool = False):
        self.stream = stream if stream is not None else sys.stderr
        if color is None:
            color = "NO_COLOR" not in os.environ and hasattr(self.stream, "isatty") and self.stream.isatty()
        self.color = color
        self.fatal = fatal
        self.had_static_error = False
        self.had_runtime_error = False

    def _paint(self, text: str, color: str = None, bold: bool = False) -> str:
        if not self.color:
            return text
        # color was decided for self.stream, not stdout
        return colored(text, color, attrs=["bold"] if bold else None, force_color=True)

    def format(self, error: LoxError) -> str:
        location = self._paint(f"[line {error.line}]", ErrorReporter.LOCATION)
        label = self._paint(f"Error{error.where}:", ErrorReporter.ERROR, bold=True)
        return f"{location} {label} {error.message}"

    def report(self, error: LoxError) -> None:
        if isinstance(error, LoxRuntimeError):
            self.had_runtime_error = True
        else:
            self.had_static_error = True
        print(self.format(error), file=self.stream)

    def report_all(self, failure: StaticErrors) -> None:
        for error in failure.errors:
            self.report(error)

    def reset(self) -> None:
        self.had_static_error = False
        self.had_runtime_error = False

    @property
    def exit_code(self) -> int:
        if self.had_static_error:
            return EX_DATAERR
        if self.had_runtime_error:
            return EX_SOFTWARE
        return EX_OK

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            return False
        if issubclass(exc_type, StaticErrors):
            self.report_all(exc_val)
        elif issubclass(exc_type, LoxError):
            self.report(exc_val)
        else:
            return False

        if self.fatal:
            sys.exit(self.exit_code)
        return True
