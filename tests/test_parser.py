"""
treelox - Parser Tests
"""

import unittest

from treelox.lexer import tokenize
from treelox.parser import parse, Parser, MAX_ARGUMENTS
from treelox.error import StaticErrors
from treelox.ast_nodes import (
    Literal, Variable, Assign, Binary, Unary, Logical, Grouping, Call, Get,
    Set, SelfRef, Expression, Print, Var, Block, If, While, Function, Return,
    Class,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════

def parse_(source: str):
    return parse(tokenize(source.strip()))


def expr_(source: str):
    """Parse a single expression statement and return its expression."""
    stmt = parse_(source)[0]
    assert isinstance(stmt, Expression), stmt
    return stmt.expression


def parse_errors(source: str):
    return Parser(tokenize(source)).parse()[1]


# ═══════════════════════════════════════════════════════════════════════════════
# Expressions
# ═══════════════════════════════════════════════════════════════════════════════

class TestExpressions(unittest.TestCase):

    def test_literals(self):
        self.assertEqual(expr_("1;").value, 1.0)
        self.assertEqual(expr_('"s";').value, "s")
        self.assertIs(expr_("true;").value, True)
        self.assertIs(expr_("false;").value, False)
        self.assertIsNone(expr_("nil;").value)

    def test_precedence_mul_over_add(self):
        e = expr_("1 + 2 * 3;")
        self.assertIsInstance(e, Binary)
        self.assertEqual(e.op.lexeme, "+")
        self.assertIsInstance(e.right, Binary)
        self.assertEqual(e.right.op.lexeme, "*")

    def test_grouping_overrides_precedence(self):
        e = expr_("(1 + 2) * 3;")
        self.assertEqual(e.op.lexeme, "*")
        self.assertIsInstance(e.left, Grouping)

    def test_left_associative(self):
        e = expr_("1 - 2 - 3;")
        self.assertIsInstance(e.left, Binary)
        self.assertEqual(e.left.left.value, 1.0)
        self.assertEqual(e.right.value, 3.0)

    def test_comparison_below_equality(self):
        e = expr_("1 < 2 == true;")
        self.assertEqual(e.op.lexeme, "==")
        self.assertEqual(e.left.op.lexeme, "<")

    def test_unary_nests(self):
        e = expr_("!-x;")
        self.assertIsInstance(e, Unary)
        self.assertIsInstance(e.operand, Unary)
        self.assertIsInstance(e.operand.operand, Variable)

    def test_and_binds_tighter_than_or(self):
        e = expr_("a or b and c;")
        self.assertIsInstance(e, Logical)
        self.assertEqual(e.op.lexeme, "or")
        self.assertIsInstance(e.right, Logical)
        self.assertEqual(e.right.op.lexeme, "and")

    def test_symbolic_logical_operators(self):
        e = expr_("a || b && c;")
        self.assertEqual(e.op.lexeme, "||")
        self.assertEqual(e.right.op.lexeme, "&&")

    def test_assignment_right_associative(self):
        e = expr_("a = b = 1;")
        self.assertIsInstance(e, Assign)
        self.assertEqual(e.name.lexeme, "a")
        self.assertIsInstance(e.value, Assign)
        self.assertEqual(e.value.name.lexeme, "b")

    def test_property_assignment_becomes_set(self):
        e = expr_("a.b.c = 1;")
        self.assertIsInstance(e, Set)
        self.assertEqual(e.name.lexeme, "c")
        self.assertIsInstance(e.object, Get)

    def test_call_chain(self):
        e = expr_("f(1)(2, 3);")
        self.assertIsInstance(e, Call)
        self.assertEqual(len(e.arguments), 2)
        self.assertIsInstance(e.callee, Call)
        self.assertEqual(len(e.callee.arguments), 1)

    def test_method_call(self):
        e = expr_("obj.method(x);")
        self.assertIsInstance(e, Call)
        self.assertIsInstance(e.callee, Get)
        self.assertEqual(e.callee.name.lexeme, "method")

    def test_self_reference(self):
        e = expr_("@.x;")
        self.assertIsInstance(e, Get)
        self.assertIsInstance(e.object, SelfRef)

    def test_reference_ids_are_unique(self):
        e = expr_("a + a;")
        self.assertNotEqual(e.left.ref, e.right.ref)

    def test_nodes_carry_lines(self):
        stmts = parse_("var a = 1;\n\nprint a;")
        self.assertEqual(stmts[0].line, 1)
        self.assertEqual(stmts[1].line, 3)
        self.assertEqual(stmts[1].expression.line, 3)


# ═══════════════════════════════════════════════════════════════════════════════
# Statements
# ═══════════════════════════════════════════════════════════════════════════════

class TestStatements(unittest.TestCase):

    def test_var(self):
        stmt = parse_("var x = 5;")[0]
        self.assertIsInstance(stmt, Var)
        self.assertEqual(stmt.name.lexeme, "x")
        self.assertIsInstance(stmt.initializer, Literal)

    def test_print(self):
        self.assertIsInstance(parse_("print x;")[0], Print)

    def test_block(self):
        stmt = parse_("{ var a = 1; print a; }")[0]
        self.assertIsInstance(stmt, Block)
        self.assertEqual(len(stmt.statements), 2)

    def test_if_without_parentheses(self):
        stmt = parse_("if a > 1 { print a; }")[0]
        self.assertIsInstance(stmt, If)
        self.assertIsInstance(stmt.condition, Binary)
        self.assertIsInstance(stmt.then_branch, Block)
        self.assertIsNone(stmt.else_branch)

    def test_else_if_chain(self):
        stmt = parse_("if a { print 1; } else if b { print 2; } else { print 3; }")[0]
        self.assertIsInstance(stmt.else_branch, If)
        self.assertIsInstance(stmt.else_branch.else_branch, Block)

    def test_while(self):
        stmt = parse_("while i < 10 { i = i + 1; }")[0]
        self.assertIsInstance(stmt, While)
        self.assertIsInstance(stmt.body, Block)

    def test_function(self):
        stmt = parse_("fn add(a, b) { return a + b; }")[0]
        self.assertIsInstance(stmt, Function)
        self.assertEqual(stmt.name.lexeme, "add")
        self.assertEqual([p.lexeme for p in stmt.params], ["a", "b"])
        self.assertIsInstance(stmt.body[0], Return)

    def test_return_without_value(self):
        fn = parse_("fn f() { return; }")[0]
        self.assertIsNone(fn.body[0].value)

    def test_class_methods(self):
        stmt = parse_("class P { init(x) { @.x = x; } fn get() { return @.x; } }")[0]
        self.assertIsInstance(stmt, Class)
        self.assertEqual(list(stmt.methods), ["init", "get"])
        self.assertIsInstance(stmt.methods["get"], Function)

    def test_empty_class(self):
        stmt = parse_("class Empty {}")[0]
        self.assertEqual(stmt.methods, {})


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════

class TestParseErrors(unittest.TestCase):

    def test_raises_static_errors(self):
        with self.assertRaises(StaticErrors) as ctx:
            parse_("print ;")
        self.assertEqual(ctx.exception.stage, "parse")
        error = ctx.exception.errors[0]
        self.assertEqual(error.message, "Expect expression.")
        self.assertEqual(error.where, " at ';'")

    def test_error_at_end(self):
        errors = parse_errors("print 1")
        self.assertEqual(errors[0].message, "Expect ';' after value.")
        self.assertEqual(errors[0].where, " at end")

    def test_invalid_assignment_target(self):
        errors = parse_errors("1 = 2;")
        self.assertEqual(errors[0].message, "Invalid assignment target.")
        self.assertEqual(errors[0].where, " at '='")

    def test_var_requires_initializer(self):
        errors = parse_errors("var x;")
        self.assertEqual(errors[0].message, "Expect '=' after variable name.")

    def test_while_requires_brace(self):
        errors = parse_errors("while x print x;")
        self.assertEqual(errors[0].message, "Expect '{' after while condition.")

    def test_reports_every_statement_error(self):
        errors = parse_errors("var = 1;\nprint 1\nvar y = 2;\nprint (;")
        self.assertEqual([e.line for e in errors], [1, 3, 4])
        self.assertEqual(errors[0].message, "Expect variable name.")

    def test_recovery_keeps_good_statements(self):
        stmts, errors = Parser(tokenize("print ;\nvar ok = 1;")).parse()
        self.assertEqual(len(errors), 1)
        self.assertEqual(len(stmts), 1)
        self.assertIsInstance(stmts[0], Var)

    def test_too_many_arguments(self):
        args = ", ".join(["1"] * (MAX_ARGUMENTS + 1))
        errors = parse_errors(f"f({args});")
        self.assertEqual(errors[0].message, "Can't have more than 255 arguments.")

    def test_max_arguments_allowed(self):
        args = ", ".join(["1"] * MAX_ARGUMENTS)
        call = expr_(f"f({args});")
        self.assertEqual(len(call.arguments), MAX_ARGUMENTS)

    def test_unclosed_block(self):
        errors = parse_errors("{ print 1;")
        self.assertEqual(errors[0].message, "Expect '}' after block.")


if __name__ == "__main__":
    unittest.main(verbosity=2)
