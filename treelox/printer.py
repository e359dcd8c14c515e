"""
treelox - AST Printer
Renders parsed statements as s-expressions, e.g.

    var x = 1 + 2 * 3;      ->  (var x (+ 1 (* 2 3)))
    fn f(a) { return a; }   ->  (fn f (a) (return a))

Used by ``--emit-ast`` and by debug output. Reads nodes only through the
generic NodeVisitor traversal.
"""

from typing import List, Union

from .ast_nodes import (
    ASTNode, NodeVisitor, Stmt, Literal, Variable, Assign, Binary, Unary,
    Logical, Grouping, Call, Get, Set, SelfRef, Expression, Print, Var, Block,
    If, While, Function, Return, Class,
)
from .runtime import format_number


class AstPrinter(NodeVisitor):
    def print(self, target: Union[ASTNode, List[Stmt]]) -> str:
        """Render one node, or a statement list with one statement per line."""
        if isinstance(target, list):
            return "\n".join(self.visit(stmt) for stmt in target)
        return self.visit(target)

    def generic_visit(self, node: ASTNode):
        raise TypeError(f"AstPrinter has no rule for {type(node).__name__}")

    def _parens(self, head: str, *parts) -> str:
        rendered = [head]
        for part in parts:
            rendered.append(part if isinstance(part, str) else self.visit(part))
        return "(" + " ".join(rendered) + ")"

    # ------------------------------------------------------------------ statements

    def visit_Expression(self, node: Expression) -> str:
        return self._parens("eval", node.expression)

    def visit_Print(self, node: Print) -> str:
        return self._parens("print", node.expression)

    def visit_Var(self, node: Var) -> str:
        return self._parens("var", node.name.lexeme, node.initializer)

    def visit_Block(self, node: Block) -> str:
        return self._parens("block", *node.statements)

    def visit_If(self, node: If) -> str:
        if node.else_branch is None:
            return self._parens("if", node.condition, node.then_branch)
        return self._parens("if", node.condition, node.then_branch, node.else_branch)

    def visit_While(self, node: While) -> str:
        return self._parens("while", node.condition, node.body)

    def visit_Function(self, node: Function) -> str:
        params = "(" + " ".join(p.lexeme for p in node.params) + ")"
        return self._parens("fn", node.name.lexeme, params, *node.body)

    def visit_Return(self, node: Return) -> str:
        if node.value is None:
            return "(return)"
        return self._parens("return", node.value)

    def visit_Class(self, node: Class) -> str:
        return self._parens("class", node.name.lexeme, *node.methods.values())

    # ------------------------------------------------------------------ expressions

    def visit_Literal(self, node: Literal) -> str:
        v = node.value
        if v is None:
            return "nil"
        if isinstance(v, bool):
            return "true" if v else "false"
        if isinstance(v, float):
            return format_number(v)
        return f'"{v}"'

    def visit_Variable(self, node: Variable) -> str:
        return node.name.lexeme

    def visit_Assign(self, node: Assign) -> str:
        return self._parens("=", node.name.lexeme, node.value)

    def visit_Binary(self, node: Binary) -> str:
        return self._parens(node.op.lexeme, node.left, node.right)

    def visit_Logical(self, node: Logical) -> str:
        return self._parens(node.op.lexeme, node.left, node.right)

    def visit_Unary(self, node: Unary) -> str:
        return self._parens(node.op.lexeme, node.operand)

    def visit_Grouping(self, node: Grouping) -> str:
        return self._parens("group", node.expression)

    def visit_Call(self, node: Call) -> str:
        return self._parens("call", node.callee, *node.arguments)

    def visit_Get(self, node: Get) -> str:
        return self._parens(".", node.object, node.name.lexeme)

    def visit_Set(self, node: Set) -> str:
        return self._parens(".=", node.object, node.name.lexeme, node.value)

    def visit_SelfRef(self, node: SelfRef) -> str:
        return "@"
