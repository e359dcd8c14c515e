"""
treelox - Interpreter
Tree-walking evaluator. Statements execute top to bottom and operands left to
right; variable references use the resolver's distances to reach their
binding in a fixed number of environment hops.

Statement execution returns a completion: None when control falls through,
or a ReturnValue that every enclosing statement sequence hands upward until
the nearest function call unwraps it.
"""

import math
import sys
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .ast_nodes import (
    ASTNode, NodeVisitor, Stmt, Expr, Literal, Variable, Assign, Binary, Unary,
    Logical, Grouping, Call, Get, Set, SelfRef, Expression, Print, Var, Block,
    If, While, Function, Return, Class, INITIALIZER_NAME,
)
from .environment import Environment
from .error import LoxRuntimeError
from .lexer import Token, TokenType
from .runtime import (
    LoxCallable, LoxClass, LoxFunction, LoxInstance, NativeFunction,
    is_equal, is_truthy, stringify,
)

# Each Lox call costs about a dozen Python frames.
RECURSION_LIMIT = 10000


@dataclass(frozen=True)
class ReturnValue:
    """Completion of a `return` statement, carried up to the calling function."""
    value: Any


class Interpreter(NodeVisitor):
    def __init__(self, globals: Optional[Environment] = None, output: Optional[Callable[[str], None]] = None):
        """
        Parameters
        ----------
        globals : the session's global scope; created here when omitted
        output  : write-line sink used by print; when omitted lines are
                  appended to ``self.printed``
        """
        self.globals = globals if globals is not None else Environment()
        self.locals: Dict[int, int] = {}
        self.printed: List[str] = []
        self._output = output if output is not None else self.printed.append
        self._env = self.globals
        self._started = time.monotonic()
        self._line = 0
        self._define_natives()

    def _define_natives(self) -> None:
        if "clock" not in self.globals.values:
            self.globals.define("clock", NativeFunction("clock", 0, self._clock))

    def _clock(self) -> float:
        """Milliseconds since the interpreter was created."""
        return (time.monotonic() - self._started) * 1000.0

    # ------------------------------------------------------------------ public

    def resolve(self, distances: Dict[int, int]) -> None:
        """Merge resolver output (ref id -> scope distance)."""
        self.locals.update(distances)

    def interpret(self, statements: List[Stmt]) -> None:
        """Run ``statements``; a runtime fault aborts the rest and propagates."""
        limit = sys.getrecursionlimit()
        sys.setrecursionlimit(max(limit, RECURSION_LIMIT))
        try:
            for stmt in statements:
                self.execute(stmt)
        except RecursionError:
            raise LoxRuntimeError("Stack overflow.", self._line) from None
        finally:
            sys.setrecursionlimit(limit)
            self._env = self.globals

    def execute(self, stmt: Stmt) -> Optional[ReturnValue]:
        self._line = stmt.line
        return self.visit(stmt)

    def evaluate(self, expr: Expr) -> Any:
        return self.visit(expr)

    def execute_block(self, statements: List[Stmt], env: Environment) -> Optional[ReturnValue]:
        previous = self._env
        self._env = env
        try:
            for stmt in statements:
                completion = self.execute(stmt)
                if completion is not None:
                    return completion
            return None
        finally:
            self._env = previous

    def generic_visit(self, node: ASTNode):
        raise TypeError(f"Interpreter has no rule for {type(node).__name__}")

    # ------------------------------------------------------------------ statements

    def visit_Expression(self, node: Expression) -> None:
        self.evaluate(node.expression)

    def visit_Print(self, node: Print) -> None:
        value = self.evaluate(node.expression)
        self._output(stringify(value))

    def visit_Var(self, node: Var) -> None:
        value = self.evaluate(node.initializer)
        self._env.define(node.name.lexeme, value)

    def visit_Block(self, node: Block) -> Optional[ReturnValue]:
        return self.execute_block(node.statements, Environment(self._env))

    def visit_If(self, node: If) -> Optional[ReturnValue]:
        if is_truthy(self.evaluate(node.condition)):
            return self.execute(node.then_branch)
        if node.else_branch is not None:
            return self.execute(node.else_branch)
        return None

    def visit_While(self, node: While) -> Optional[ReturnValue]:
        while is_truthy(self.evaluate(node.condition)):
            completion = self.execute(node.body)
            if completion is not None:
                return completion
        return None

    def visit_Function(self, node: Function) -> None:
        self._env.define(node.name.lexeme, LoxFunction(node, self._env))

    def visit_Return(self, node: Return) -> ReturnValue:
        value = None
        if node.value is not None:
            value = self.evaluate(node.value)
        return ReturnValue(value)

    def visit_Class(self, node: Class) -> None:
        methods = {
            name: LoxFunction(method, self._env, is_initializer=(name == INITIALIZER_NAME))
            for name, method in node.methods.items()
        }
        self._env.define(node.name.lexeme, LoxClass(node.name.lexeme, methods))

    # ------------------------------------------------------------------ expressions

    def visit_Literal(self, node: Literal) -> Any:
        return node.value

    def visit_Grouping(self, node: Grouping) -> Any:
        return self.evaluate(node.expression)

    def visit_Variable(self, node: Variable) -> Any:
        return self._look_up(node.name, node.ref)

    def visit_SelfRef(self, node: SelfRef) -> Any:
        return self._look_up(node.keyword, node.ref)

    def visit_Assign(self, node: Assign) -> Any:
        value = self.evaluate(node.value)
        distance = self.locals.get(node.ref)
        if distance is not None:
            self._env.assign_at(distance, node.name.lexeme, value)
        else:
            self.globals.assign(node.name, value)
        return value

    def _look_up(self, name: Token, ref: int) -> Any:
        distance = self.locals.get(ref)
        if distance is not None:
            return self._env.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def visit_Unary(self, node: Unary) -> Any:
        operand = self.evaluate(node.operand)

        if node.op.type == TokenType.BANG:
            return not is_truthy(operand)
        # MINUS
        if not isinstance(operand, float):
            raise LoxRuntimeError("Operand must be a number.", node.op.line, f" at '{node.op.lexeme}'")
        return -operand

    def visit_Logical(self, node: Logical) -> Any:
        left = self.evaluate(node.left)

        if node.op.type == TokenType.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left

        return self.evaluate(node.right)

    def visit_Binary(self, node: Binary) -> Any:
        left = self.evaluate(node.left)
        right = self.evaluate(node.right)
        op = node.op.type

        if op == TokenType.EQUAL_EQUAL:
            return is_equal(left, right)
        if op == TokenType.BANG_EQUAL:
            return not is_equal(left, right)

        if op == TokenType.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError("Operands must be two numbers or two strings.", node.op.line, " at '+'")

        self._check_numbers(node.op, left, right)

        if op == TokenType.MINUS:
            return left - right
        if op == TokenType.STAR:
            return left * right
        if op == TokenType.SLASH:
            return _divide(left, right)
        if op == TokenType.GREATER:
            return left > right
        if op == TokenType.GREATER_EQUAL:
            return left >= right
        if op == TokenType.LESS:
            return left < right
        if op == TokenType.LESS_EQUAL:
            return left <= right

        raise LoxRuntimeError(f"Unknown binary operator '{node.op.lexeme}'.", node.op.line)

    @staticmethod
    def _check_numbers(op: Token, left: Any, right: Any) -> None:
        if not (isinstance(left, float) and isinstance(right, float)):
            raise LoxRuntimeError("Operands must be numbers.", op.line, f" at '{op.lexeme}'")

    def visit_Call(self, node: Call) -> Any:
        callee = self.evaluate(node.callee)
        arguments = [self.evaluate(arg) for arg in node.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(
                f"Value '{stringify(callee)}' is not callable; can only call functions and classes.",
                node.line,
            )
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                f"Expected {callee.arity()} arguments but got {len(arguments)}.",
                node.line,
            )
        return callee.call(self, arguments)

    def visit_Get(self, node: Get) -> Any:
        obj = self.evaluate(node.object)
        if isinstance(obj, LoxInstance):
            return obj.get(node.name)
        raise LoxRuntimeError("Only instances have properties.", node.name.line, f" at '{node.name.lexeme}'")

    def visit_Set(self, node: Set) -> Any:
        obj = self.evaluate(node.object)
        if not isinstance(obj, LoxInstance):
            raise LoxRuntimeError("Only instances have fields.", node.name.line, f" at '{node.name.lexeme}'")
        value = self.evaluate(node.value)
        obj.set(node.name, value)
        return value


def _divide(left: float, right: float) -> float:
    """IEEE 754 division: x/0 is a signed infinity and 0/0 is NaN."""
    if right == 0.0:
        if left == 0.0 or left != left:
            return float("nan")
        sign = math.copysign(1.0, left) * math.copysign(1.0, right)
        return math.copysign(float("inf"), sign)
    return left / right
