"""treelox - a tree-walking interpreter for a small Lox dialect."""

from .error import LoxError, ScanError, ParseError, ResolveError, LoxRuntimeError, StaticErrors
from .session import Session, Outcome, run_source

__version__ = "0.1.0"

__all__ = [
    "LoxError", "ScanError", "ParseError", "ResolveError", "LoxRuntimeError",
    "StaticErrors", "Session", "Outcome", "run_source",
]
