"""
treelox - AST Node Definitions
Expression and statement nodes produced by the parser, plus a generic
read-only traversal used by the resolver, the interpreter and the printer.

Nodes are never mutated after parsing. Variable, Assign and SelfRef carry a
``ref`` id that is unique for the whole process, so analysis results can be
stored out-of-band (ref -> scope distance) and survive across REPL inputs.
"""

import itertools
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterator, List, Optional

from .lexer import Token

# Binding name of the receiver inside methods; "@" cannot be an identifier.
SELF_NAME = "@"
INITIALIZER_NAME = "init"

_REF_IDS = itertools.count()


def next_ref() -> int:
    return next(_REF_IDS)


@dataclass
class ASTNode:
    """Base class for all AST nodes."""
    line: int = 0


@dataclass
class Expr(ASTNode):
    pass


@dataclass
class Stmt(ASTNode):
    pass


# ── Expressions ──────────────────────────────────────────────────────────────

@dataclass
class Literal(Expr):
    """number, string, true, false or nil"""
    value: Any = None


@dataclass
class Variable(Expr):
    name: Token = None
    ref: int = field(default_factory=next_ref)


@dataclass
class Assign(Expr):
    """name = value"""
    name: Token = None
    value: Expr = None
    ref: int = field(default_factory=next_ref)


@dataclass
class Binary(Expr):
    left: Expr = None
    op: Token = None
    right: Expr = None


@dataclass
class Unary(Expr):
    """! operand, - operand"""
    op: Token = None
    operand: Expr = None


@dataclass
class Logical(Expr):
    """left and right, left or right (short-circuiting)"""
    left: Expr = None
    op: Token = None
    right: Expr = None


@dataclass
class Grouping(Expr):
    """( expression )"""
    expression: Expr = None


@dataclass
class Call(Expr):
    """callee(arguments...); line is the closing paren's line"""
    callee: Expr = None
    arguments: List[Expr] = field(default_factory=list)


@dataclass
class Get(Expr):
    """object.name"""
    object: Expr = None
    name: Token = None


@dataclass
class Set(Expr):
    """object.name = value"""
    object: Expr = None
    name: Token = None
    value: Expr = None


@dataclass
class SelfRef(Expr):
    """@, the instance a method is bound to."""
    keyword: Token = None
    ref: int = field(default_factory=next_ref)


# ── Statements ───────────────────────────────────────────────────────────────

@dataclass
class Expression(Stmt):
    expression: Expr = None


@dataclass
class Print(Stmt):
    expression: Expr = None


@dataclass
class Var(Stmt):
    """var name = initializer;  (the initializer is mandatory)"""
    name: Token = None
    initializer: Expr = None


@dataclass
class Block(Stmt):
    statements: List[Stmt] = field(default_factory=list)


@dataclass
class If(Stmt):
    """else_branch is a Block, a nested If (else if) or None."""
    condition: Expr = None
    then_branch: Block = None
    else_branch: Optional[Stmt] = None


@dataclass
class While(Stmt):
    condition: Expr = None
    body: Block = None


@dataclass
class Function(Stmt):
    name: Token = None
    params: List[Token] = field(default_factory=list)
    body: List[Stmt] = field(default_factory=list)


@dataclass
class Return(Stmt):
    keyword: Token = None
    value: Optional[Expr] = None


@dataclass
class Class(Stmt):
    name: Token = None
    methods: Dict[str, Function] = field(default_factory=dict)


EXPR_TYPES = (Literal, Variable, Assign, Binary, Unary, Logical, Grouping, Call, Get, Set, SelfRef)
STMT_TYPES = (Expression, Print, Var, Block, If, While, Function, Return, Class)
NODE_TYPES = EXPR_TYPES + STMT_TYPES


def iter_child_nodes(node: ASTNode) -> Iterator[ASTNode]:
    """Yield the direct child nodes of ``node`` in source order."""
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, ASTNode):
            yield value
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, ASTNode):
                    yield item
        elif isinstance(value, dict):
            for item in value.values():
                if isinstance(item, ASTNode):
                    yield item


class NodeVisitor:
    """Dispatches ``visit(node)`` to ``visit_<NodeClass>``.

    Subclasses implement one method per node kind they care about; anything
    else falls back to ``generic_visit``, which walks the children. Consumers
    that must handle every kind (resolver, interpreter, printer) override
    ``generic_visit`` to fail loudly instead.
    """

    def visit(self, node: ASTNode):
        method = f"visit_{type(node).__name__}"
        visitor = getattr(self, method, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode):
        for child in iter_child_nodes(node):
            self.visit(child)
