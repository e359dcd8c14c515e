"""
treelox - Lexer Tests
"""

import unittest

from treelox.lexer import tokenize, Scanner, TokenType
from treelox.error import StaticErrors


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════

def token_types(source: str):
    return [t.type for t in tokenize(source) if t.type != TokenType.EOF]


def scan_errors(source: str):
    with_errors = Scanner(source).scan()[1]
    return [(e.line, e.message) for e in with_errors]


# ═══════════════════════════════════════════════════════════════════════════════
# Tokens
# ═══════════════════════════════════════════════════════════════════════════════

class TestTokens(unittest.TestCase):

    def test_number_integer(self):
        toks = tokenize("42")
        self.assertEqual(toks[0].type, TokenType.NUMBER)
        self.assertEqual(toks[0].lexeme, "42")
        self.assertEqual(toks[0].literal, 42.0)

    def test_number_float(self):
        toks = tokenize("3.14")
        self.assertEqual(toks[0].literal, 3.14)

    def test_trailing_dot_is_not_part_of_number(self):
        self.assertEqual(token_types("1."), [TokenType.NUMBER, TokenType.DOT])

    def test_minus_is_separate_token(self):
        self.assertEqual(token_types("-5"), [TokenType.MINUS, TokenType.NUMBER])

    def test_string_literal(self):
        tok = tokenize('"hello world"')[0]
        self.assertEqual(tok.type, TokenType.STRING)
        self.assertEqual(tok.lexeme, '"hello world"')
        self.assertEqual(tok.literal, "hello world")

    def test_string_has_no_escapes(self):
        tok = tokenize(r'"a\nb"')[0]
        self.assertEqual(tok.literal, "a\\nb")

    def test_keywords(self):
        types = token_types("class fn var if else while return print nil true false")
        self.assertEqual(types, [
            TokenType.CLASS, TokenType.FN, TokenType.VAR, TokenType.IF,
            TokenType.ELSE, TokenType.WHILE, TokenType.RETURN, TokenType.PRINT,
            TokenType.NIL, TokenType.TRUE, TokenType.FALSE,
        ])

    def test_keyword_prefix_is_identifier(self):
        toks = tokenize("fnord classy")
        self.assertEqual(toks[0].type, TokenType.IDENTIFIER)
        self.assertEqual(toks[1].type, TokenType.IDENTIFIER)
        self.assertEqual(toks[0].lexeme, "fnord")

    def test_self_reference_symbol(self):
        self.assertEqual(token_types("@.x"), [TokenType.AT, TokenType.DOT, TokenType.IDENTIFIER])

    def test_logical_operator_spellings(self):
        self.assertEqual(token_types("and && or ||"),
                         [TokenType.AND, TokenType.AND, TokenType.OR, TokenType.OR])
        self.assertEqual(tokenize("&&")[0].lexeme, "&&")

    def test_comparison_ops(self):
        types = token_types("== != <= >= < > = !")
        self.assertEqual(types, [
            TokenType.EQUAL_EQUAL, TokenType.BANG_EQUAL, TokenType.LESS_EQUAL,
            TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.GREATER,
            TokenType.EQUAL, TokenType.BANG,
        ])

    def test_punctuation(self):
        types = token_types("(){},.;+-*/")
        self.assertEqual(types, [
            TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN, TokenType.LEFT_BRACE,
            TokenType.RIGHT_BRACE, TokenType.COMMA, TokenType.DOT,
            TokenType.SEMICOLON, TokenType.PLUS, TokenType.MINUS,
            TokenType.STAR, TokenType.SLASH,
        ])

    def test_ends_with_eof(self):
        toks = tokenize("a\nb")
        self.assertEqual(toks[-1].type, TokenType.EOF)
        self.assertEqual(toks[-1].line, 2)

    def test_empty_source(self):
        toks = tokenize("")
        self.assertEqual(len(toks), 1)
        self.assertEqual(toks[0].type, TokenType.EOF)


# ═══════════════════════════════════════════════════════════════════════════════
# Whitespace, comments and lines
# ═══════════════════════════════════════════════════════════════════════════════

class TestTrivia(unittest.TestCase):

    def test_line_tracking(self):
        toks = tokenize("a\nb\n\nc")
        lines = {t.lexeme: t.line for t in toks if t.type != TokenType.EOF}
        self.assertEqual(lines, {"a": 1, "b": 2, "c": 4})

    def test_line_comment_ignored(self):
        toks = tokenize("// this is a comment\nx")
        self.assertEqual(len(toks), 2)
        self.assertEqual(toks[0].lexeme, "x")
        self.assertEqual(toks[0].line, 2)

    def test_block_comment_ignored(self):
        self.assertEqual(token_types("a /* b c */ d"), [TokenType.IDENTIFIER, TokenType.IDENTIFIER])

    def test_block_comments_nest(self):
        toks = tokenize("/* a /* b */ still comment */ x")
        self.assertEqual([t.lexeme for t in toks[:-1]], ["x"])

    def test_block_comment_counts_lines(self):
        toks = tokenize("/*\n\n*/ x")
        self.assertEqual(toks[0].line, 3)

    def test_multiline_string_keeps_start_line(self):
        toks = tokenize('x "a\nb" y')
        self.assertEqual(toks[1].line, 1)
        self.assertEqual(toks[1].literal, "a\nb")
        self.assertEqual(toks[2].line, 2)

    def test_slash_is_division(self):
        self.assertEqual(token_types("a / b"),
                         [TokenType.IDENTIFIER, TokenType.SLASH, TokenType.IDENTIFIER])


# ═══════════════════════════════════════════════════════════════════════════════
# Errors
# ═══════════════════════════════════════════════════════════════════════════════

class TestScanErrors(unittest.TestCase):

    def test_unexpected_character(self):
        with self.assertRaises(StaticErrors) as ctx:
            tokenize("x ` y")
        self.assertEqual(ctx.exception.stage, "scan")
        self.assertEqual(list(ctx.exception.pairs()), [(1, "Unexpected character: '`'")])

    def test_unterminated_string_reports_start_line(self):
        self.assertEqual(scan_errors('print "abc\n\n'), [(1, "Unterminated string.")])

    def test_unterminated_block_comment(self):
        self.assertEqual(scan_errors("x\n/* never /* closed */"), [(2, "Unterminated block comment.")])

    def test_scanning_continues_after_error(self):
        tokens, errors = Scanner("a ` b\n# c").scan()
        self.assertEqual(len(errors), 2)
        self.assertEqual([e.line for e in errors], [1, 2])
        self.assertEqual([t.lexeme for t in tokens if t.type == TokenType.IDENTIFIER], ["a", "b", "c"])

    def test_error_string_names_line(self):
        with self.assertRaises(StaticErrors) as ctx:
            tokenize("\n$")
        self.assertEqual(str(ctx.exception.errors[0]), "[ScanError] Line 2: Unexpected character: '$'")


if __name__ == "__main__":
    unittest.main(verbosity=2)
