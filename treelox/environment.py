"""
treelox - Environment
A scope frame: name -> value bindings plus a link to the enclosing frame.
Frames are shared by reference; closures that captured one observe every
later write to it.
"""

from typing import Any, Dict, Optional

from .error import LoxRuntimeError
from .lexer import Token


class Environment:
    def __init__(self, enclosing: Optional["Environment"] = None):
        self.values: Dict[str, Any] = {}
        self.enclosing = enclosing

    def define(self, name: str, value: Any) -> None:
        """Bind (or rebind) ``name`` in this frame."""
        self.values[name] = value

    def get(self, name: Token) -> Any:
        """Look ``name`` up by walking outward from this frame."""
        env = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise LoxRuntimeError(f"Undefined variable '{name.lexeme}'.", name.line)

    def assign(self, name: Token, value: Any) -> None:
        env = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise LoxRuntimeError(f"Undefined variable '{name.lexeme}'.", name.line)

    def ancestor(self, distance: int) -> "Environment":
        env = self
        for _ in range(distance):
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str) -> Any:
        # The resolver guarantees the binding exists at that depth.
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: str, value: Any) -> None:
        self.ancestor(distance).values[name] = value

    def __repr__(self):
        depth = 0
        env = self.enclosing
        while env is not None:
            depth += 1
            env = env.enclosing
        return f"Environment(names={sorted(self.values)}, depth={depth})"
