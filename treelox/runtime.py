"""
treelox - Runtime Values
The object model seen by running programs.

    Lox value     Python representation
    ---------     ---------------------
    nil           None
    boolean       bool
    number        float
    string        str
    function      NativeFunction / LoxFunction (a Function node + its closure)
    class         LoxClass
    instance      LoxInstance (identity, mutable fields)
"""

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from .ast_nodes import SELF_NAME, INITIALIZER_NAME, Function
from .environment import Environment
from .error import LoxRuntimeError
from .lexer import Token

if TYPE_CHECKING:
    from .interpreter import Interpreter


class LoxCallable(ABC):
    @abstractmethod
    def arity(self) -> int:
        ...

    @abstractmethod
    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        ...


class NativeFunction(LoxCallable):
    """A built-in implemented in Python."""

    def __init__(self, name: str, arity: int, fn: Callable[..., Any]):
        self.name = name
        self._arity = arity
        self._fn = fn

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter, arguments):
        return self._fn(*arguments)

    def __str__(self):
        return f"<fn {self.name}>"

    def __repr__(self):
        return f"NativeFunction({self.name!r})"


class LoxFunction(LoxCallable):
    """A user function: its declaration plus the environment it closed over."""

    def __init__(self, declaration: Function, closure: Environment, is_initializer: bool = False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def arity(self) -> int:
        return len(self.declaration.params)

    def bind(self, instance: "LoxInstance") -> "LoxFunction":
        """Return a copy whose closure additionally binds '@' to ``instance``."""
        env = Environment(self.closure)
        env.define(SELF_NAME, instance)
        return LoxFunction(self.declaration, env, self.is_initializer)

    def call(self, interpreter, arguments):
        env = Environment(self.closure)
        for param, arg in zip(self.declaration.params, arguments):
            env.define(param.lexeme, arg)

        completion = interpreter.execute_block(self.declaration.body, env)
        if completion is None:
            return None
        return completion.value

    def __str__(self):
        return f"<fn {self.name}>"

    def __repr__(self):
        return f"LoxFunction({self.name!r})"


class LoxClass(LoxCallable):
    def __init__(self, name: str, methods: Dict[str, LoxFunction]):
        self.name = name
        self.methods = methods

    def find_method(self, name: str) -> Optional[LoxFunction]:
        return self.methods.get(name)

    def arity(self) -> int:
        initializer = self.find_method(INITIALIZER_NAME)
        return initializer.arity() if initializer else 0

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)
        initializer = self.find_method(INITIALIZER_NAME)
        if initializer is not None:
            # Whatever init returns is discarded; construction yields the instance.
            initializer.bind(instance).call(interpreter, arguments)
        return instance

    def __str__(self):
        return f"<class {self.name}>"

    def __repr__(self):
        return f"LoxClass({self.name!r})"


class LoxInstance:
    def __init__(self, klass: LoxClass):
        self.klass = klass
        self.fields: Dict[str, Any] = {}

    def get(self, name: Token) -> Any:
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(f"Undefined property '{name.lexeme}'.", name.line)

    def set(self, name: Token, value: Any) -> None:
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"<instance of {self.klass.name}>"

    def __repr__(self):
        return f"LoxInstance({self.klass.name!r}, {self.fields!r})"


# ── value helpers ────────────────────────────────────────────────────────────

def is_truthy(value: Any) -> bool:
    """nil and false are falsy; everything else, 0 and "" included, is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Any, b: Any) -> bool:
    # bool is a subclass of int in Python, so compare kinds exactly.
    if type(a) is not type(b):
        return False
    if a is None or isinstance(a, (bool, float, str)):
        return a == b
    return a is b


def format_number(n: float) -> str:
    if math.isnan(n):
        return "NaN"
    if math.isinf(n):
        return "inf" if n > 0 else "-inf"
    text = repr(n)
    if text.endswith(".0"):
        return text[:-2]
    return text


def stringify(value: Any) -> str:
    """Display text used by print."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)
