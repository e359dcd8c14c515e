"""
treelox - Resolver
Static pass over the parsed statements. For every variable reference
(Variable, Assign, SelfRef) it computes how many scopes separate the
reference from the declaration it binds to, and reports:
  - a local read inside its own initializer (var a = a;)
  - '@' used outside a class
  - 'return' used outside a function or method
The distances are returned out-of-band, keyed by the node's ref id.
"""

from enum import Enum, auto
from typing import Dict, List, Tuple

from .error import ResolveError, StaticErrors
from .lexer import Token
from .ast_nodes import (
    ASTNode, NodeVisitor, Stmt, Literal, Variable, Assign, Binary, Unary,
    Logical, Grouping, Call, Get, Set, SelfRef, Expression, Print, Var, Block,
    If, While, Function, Return, Class, SELF_NAME,
)


class FunctionKind(Enum):
    NONE     = auto()
    FUNCTION = auto()


class ClassKind(Enum):
    NONE  = auto()
    CLASS = auto()


class Resolver(NodeVisitor):
    def __init__(self):
        # scopes[0] tracks globals for the self-initializer check only;
        # bindings found there are left for lookup by name at runtime.
        self._scopes: List[Dict[str, bool]] = [{}]
        self._function = FunctionKind.NONE
        self._class = ClassKind.NONE
        self.distances: Dict[int, int] = {}
        self.errors: List[ResolveError] = []

    def resolve(self, statements: List[Stmt]) -> Tuple[Dict[int, int], List[ResolveError]]:
        self._resolve_all(statements)
        return self.distances, self.errors

    # ------------------------------------------------------------------ scopes

    def _begin_scope(self) -> None:
        self._scopes.append({})

    def _end_scope(self) -> None:
        self._scopes.pop()

    def _declare(self, name: Token) -> None:
        self._scopes[-1][name.lexeme] = False

    def _define(self, name: Token) -> None:
        self._scopes[-1][name.lexeme] = True

    def _error(self, message: str, tok: Token) -> None:
        self.errors.append(ResolveError(message, tok.line, f" at '{tok.lexeme}'"))

    def _resolve_local(self, ref: int, name: str) -> None:
        innermost = len(self._scopes) - 1
        for index in range(innermost, 0, -1):
            if name in self._scopes[index]:
                self.distances[ref] = innermost - index
                return
        # not found in a local scope: global

    def _resolve_all(self, statements: List[Stmt]) -> None:
        for stmt in statements:
            self.visit(stmt)

    def _resolve_function(self, node: Function, kind: FunctionKind) -> None:
        enclosing = self._function
        self._function = kind

        self._begin_scope()
        for param in node.params:
            self._declare(param)
            self._define(param)
        self._resolve_all(node.body)
        self._end_scope()

        self._function = enclosing

    # ------------------------------------------------------------------ visitor

    def generic_visit(self, node: ASTNode):
        raise TypeError(f"Resolver has no rule for {type(node).__name__}")

    # statements

    def visit_Block(self, node: Block) -> None:
        self._begin_scope()
        self._resolve_all(node.statements)
        self._end_scope()

    def visit_Var(self, node: Var) -> None:
        self._declare(node.name)
        self.visit(node.initializer)
        self._define(node.name)

    def visit_Function(self, node: Function) -> None:
        # Defined before the body so the function can call itself.
        self._declare(node.name)
        self._define(node.name)
        self._resolve_function(node, FunctionKind.FUNCTION)

    def visit_Class(self, node: Class) -> None:
        enclosing = self._class
        self._class = ClassKind.CLASS

        self._declare(node.name)
        self._define(node.name)

        self._begin_scope()
        self._scopes[-1][SELF_NAME] = True
        for method in node.methods.values():
            self._resolve_function(method, FunctionKind.FUNCTION)
        self._end_scope()

        self._class = enclosing

    def visit_Expression(self, node: Expression) -> None:
        self.visit(node.expression)

    def visit_Print(self, node: Print) -> None:
        self.visit(node.expression)

    def visit_If(self, node: If) -> None:
        self.visit(node.condition)
        self.visit(node.then_branch)
        if node.else_branch is not None:
            self.visit(node.else_branch)

    def visit_While(self, node: While) -> None:
        self.visit(node.condition)
        self.visit(node.body)

    def visit_Return(self, node: Return) -> None:
        if self._function == FunctionKind.NONE:
            self._error("Can't return from top-level code.", node.keyword)
        # A value returned from init is discarded at runtime, not rejected here.
        if node.value is not None:
            self.visit(node.value)

    # expressions

    def visit_Variable(self, node: Variable) -> None:
        name = node.name.lexeme
        for scope in reversed(self._scopes):
            if name in scope:
                if scope[name] is False:
                    self._error("Can't read local variable in its own initializer.", node.name)
                break
        self._resolve_local(node.ref, name)

    def visit_Assign(self, node: Assign) -> None:
        self.visit(node.value)
        self._resolve_local(node.ref, node.name.lexeme)

    def visit_SelfRef(self, node: SelfRef) -> None:
        if self._class == ClassKind.NONE:
            self._error("Can't use '@' outside of a class.", node.keyword)
            return
        self._resolve_local(node.ref, SELF_NAME)

    def visit_Binary(self, node: Binary) -> None:
        self.visit(node.left)
        self.visit(node.right)

    def visit_Logical(self, node: Logical) -> None:
        self.visit(node.left)
        self.visit(node.right)

    def visit_Unary(self, node: Unary) -> None:
        self.visit(node.operand)

    def visit_Grouping(self, node: Grouping) -> None:
        self.visit(node.expression)

    def visit_Call(self, node: Call) -> None:
        self.visit(node.callee)
        for arg in node.arguments:
            self.visit(arg)

    def visit_Get(self, node: Get) -> None:
        self.visit(node.object)

    def visit_Set(self, node: Set) -> None:
        self.visit(node.object)
        self.visit(node.value)

    def visit_Literal(self, node: Literal) -> None:
        pass  # always valid


def resolve(statements: List[Stmt]) -> Dict[int, int]:
    """
    Return the ref id -> scope distance mapping for ``statements``.
    Raises StaticErrors holding every ResolveError found.
    """
    distances, errors = Resolver().resolve(statements)
    if errors:
        raise StaticErrors("resolve", errors)
    return distances
