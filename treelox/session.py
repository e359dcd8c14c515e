"""
treelox - Session
Runs the pipeline phases in sequence over one source text:

    scan -> parse -> resolve -> interpret

A Session owns the global environment and the interpreter for its whole
lifetime, so definitions made by one input stay visible to the next (REPL).
A static error in any phase stops that input before it executes.
"""

import sys
from dataclasses import dataclass, field
from typing import Callable, List, Optional, TextIO

from .lexer import tokenize
from .parser import parse
from .resolver import resolve
from .interpreter import Interpreter
from .environment import Environment
from .printer import AstPrinter
from .ast_nodes import Stmt
from .error import LoxError, LoxRuntimeError, StaticErrors


@dataclass
class Outcome:
    """Terminal result of running one input."""
    ok: bool
    stage: Optional[str] = None   # "scan", "parse", "resolve" or "runtime"
    errors: List[LoxError] = field(default_factory=list)


class Session:
    def __init__(
        self,
        output: Optional[Callable[[str], None]] = None,
        debug: bool = False,
        log_stream: Optional[TextIO] = None,
    ):
        """
        Parameters
        ----------
        output     : write-line sink for print statements
        debug      : log each phase summary, the tokens and the AST
        log_stream : where debug lines go (default: stderr)
        """
        self.globals = Environment()
        self.interpreter = Interpreter(self.globals, output)
        self.debug = debug
        self.log_stream = log_stream

    def _log(self, msg: str) -> None:
        if self.debug:
            print(f"[treelox] {msg}", file=self.log_stream or sys.stderr)

    def parse(self, source: str) -> List[Stmt]:
        """Scan and parse only. Raises StaticErrors."""
        # ── Phase 1: Scanning ────────────────────────────────────────────────
        self._log("Phase 1: Scanning")
        tokens = tokenize(source)
        self._log(f"  {len(tokens)-1} tokens produced")
        if self.debug:
            for tok in tokens:
                self._log(f"    {tok!r}")

        # ── Phase 2: Parsing ─────────────────────────────────────────────────
        self._log("Phase 2: Parsing")
        statements = parse(tokens)
        self._log(f"  {len(statements)} top-level statements")
        if self.debug:
            for line in AstPrinter().print(statements).splitlines():
                self._log(f"    {line}")

        return statements

    def execute(self, source: str) -> None:
        """
        Run ``source`` against this session's globals.

        Raises
        ------
        StaticErrors     on scan, parse or resolve failure (nothing executed)
        LoxRuntimeError  on the first runtime fault (earlier output stands)
        """
        statements = self.parse(source)

        # ── Phase 3: Resolution ──────────────────────────────────────────────
        self._log("Phase 3: Resolving")
        distances = resolve(statements)
        self._log(f"  {len(distances)} local references resolved")
        self.interpreter.resolve(distances)

        # ── Phase 4: Interpretation ──────────────────────────────────────────
        self._log("Phase 4: Interpreting")
        self.interpreter.interpret(statements)
        self._log("  Run successful")

    def run(self, source: str) -> Outcome:
        """Like execute, but folds failures into an Outcome."""
        try:
            self.execute(source)
        except StaticErrors as e:
            self._log(f"  {len(e.errors)} {e.stage} error(s)")
            return Outcome(ok=False, stage=e.stage, errors=list(e.errors))
        except LoxRuntimeError as e:
            self._log("  runtime error")
            return Outcome(ok=False, stage="runtime", errors=[e])
        return Outcome(ok=True)


def run_source(source: str, output: Optional[Callable[[str], None]] = None, debug: bool = False) -> Outcome:
    """Run one program in a fresh session."""
    return Session(output=output, debug=debug).run(source)
