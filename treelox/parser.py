"""
treelox - Recursive Descent Parser
Converts a token stream into a list of statement nodes.

On a malformed declaration the parser records the error, skips to the next
statement boundary and carries on, so one pass reports every syntax error.
"""

from typing import List, Optional, Tuple

from .lexer import Token, TokenType
from .error import ParseError, StaticErrors
from .ast_nodes import (
    Expr, Stmt, Literal, Variable, Assign, Binary, Unary, Logical, Grouping,
    Call, Get, Set, SelfRef, Expression, Print, Var, Block, If, While,
    Function, Return, Class,
)

MAX_ARGUMENTS = 255

# Tokens that begin a statement; synchronization stops in front of them.
_STATEMENT_STARTS = {
    TokenType.CLASS, TokenType.FN, TokenType.VAR, TokenType.FOR,
    TokenType.IF, TokenType.WHILE, TokenType.PRINT, TokenType.RETURN,
}


class Parser:
    def __init__(self, tokens: List[Token]):
        self._tokens = tokens
        self._pos = 0
        self.errors: List[ParseError] = []

    # ------------------------------------------------------------------ helpers

    def _peek(self) -> Token:
        return self._tokens[self._pos]

    def _previous(self) -> Token:
        return self._tokens[self._pos - 1]

    def _at_end(self) -> bool:
        return self._peek().type == TokenType.EOF

    def _advance(self) -> Token:
        tok = self._tokens[self._pos]
        if not self._at_end():
            self._pos += 1
        return tok

    def _match(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _accept(self, *types: TokenType) -> Optional[Token]:
        """Consume and return the next token if it is one of ``types``."""
        if self._match(*types):
            return self._advance()
        return None

    def _expect(self, ttype: TokenType, message: str) -> Token:
        if self._match(ttype):
            return self._advance()
        raise self._error(self._peek(), message)

    @staticmethod
    def _error(tok: Token, message: str) -> ParseError:
        where = " at end" if tok.type == TokenType.EOF else f" at '{tok.lexeme}'"
        return ParseError(message, tok.line, where)

    def _synchronize(self) -> None:
        """Discard tokens until a statement boundary."""
        self._advance()
        while not self._at_end():
            if self._previous().type == TokenType.SEMICOLON:
                return
            if self._peek().type in _STATEMENT_STARTS:
                return
            self._advance()

    # ------------------------------------------------------------------ public

    def parse(self) -> Tuple[List[Stmt], List[ParseError]]:
        stmts = []
        while not self._at_end():
            stmt = self._parse_declaration()
            if stmt is not None:
                stmts.append(stmt)
        return stmts, self.errors

    # ------------------------------------------------------------------ declarations

    def _parse_declaration(self) -> Optional[Stmt]:
        try:
            if self._accept(TokenType.CLASS):
                return self._parse_class()
            if self._accept(TokenType.FN):
                return self._parse_function("function")
            if self._accept(TokenType.VAR):
                return self._parse_var()
            return self._parse_statement()
        except ParseError as e:
            self.errors.append(e)
            self._synchronize()
            return None

    def _parse_class(self) -> Class:
        name = self._expect(TokenType.IDENTIFIER, "Expect class name.")
        self._expect(TokenType.LEFT_BRACE, "Expect '{' before class body.")

        methods = {}
        while not self._match(TokenType.RIGHT_BRACE) and not self._at_end():
            self._accept(TokenType.FN)  # optional before a method
            method = self._parse_function("method")
            methods[method.name.lexeme] = method

        self._expect(TokenType.RIGHT_BRACE, "Expect '}' after class body.")
        return Class(name=name, methods=methods, line=name.line)

    def _parse_function(self, kind: str) -> Function:
        name = self._expect(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self._expect(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self._match(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGUMENTS:
                    raise self._error(self._peek(), f"Can't have more than {MAX_ARGUMENTS} parameters.")
                params.append(self._expect(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self._accept(TokenType.COMMA):
                    break
        self._expect(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")

        self._expect(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        body = self._parse_block_body()
        return Function(name=name, params=params, body=body, line=name.line)

    def _parse_var(self) -> Var:
        name = self._expect(TokenType.IDENTIFIER, "Expect variable name.")
        self._expect(TokenType.EQUAL, "Expect '=' after variable name.")
        initializer = self._parse_expression()
        self._expect(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return Var(name=name, initializer=initializer, line=name.line)

    # ------------------------------------------------------------------ statements

    def _parse_statement(self) -> Stmt:
        tok = self._peek()

        if self._accept(TokenType.PRINT):
            value = self._parse_expression()
            self._expect(TokenType.SEMICOLON, "Expect ';' after value.")
            return Print(expression=value, line=tok.line)

        if self._accept(TokenType.LEFT_BRACE):
            return Block(statements=self._parse_block_body(), line=tok.line)

        if self._accept(TokenType.IF):
            return self._parse_if()

        if self._accept(TokenType.WHILE):
            condition = self._parse_expression()
            body = self._parse_block("Expect '{' after while condition.")
            return While(condition=condition, body=body, line=tok.line)

        if self._accept(TokenType.RETURN):
            value = None
            if not self._match(TokenType.SEMICOLON):
                value = self._parse_expression()
            self._expect(TokenType.SEMICOLON, "Expect ';' after return value.")
            return Return(keyword=tok, value=value, line=tok.line)

        # bare expression statement
        expr = self._parse_expression()
        self._expect(TokenType.SEMICOLON, "Expect ';' after expression.")
        return Expression(expression=expr, line=tok.line)

    def _parse_if(self) -> If:
        line = self._previous().line
        condition = self._parse_expression()
        then_branch = self._parse_block("Expect '{' after if condition.")

        else_branch = None
        if self._accept(TokenType.ELSE):
            if self._accept(TokenType.IF):
                else_branch = self._parse_if()
            else:
                else_branch = self._parse_block("Expect '{' or 'if' after 'else'.")

        return If(condition=condition, then_branch=then_branch, else_branch=else_branch, line=line)

    def _parse_block(self, message: str) -> Block:
        """The condition of if/while is delimited by the body's opening brace."""
        open_tok = self._expect(TokenType.LEFT_BRACE, message)
        return Block(statements=self._parse_block_body(), line=open_tok.line)

    def _parse_block_body(self) -> List[Stmt]:
        """Declarations up to the closing brace; '{' already consumed."""
        stmts = []
        while not self._match(TokenType.RIGHT_BRACE) and not self._at_end():
            stmt = self._parse_declaration()
            if stmt is not None:
                stmts.append(stmt)
        self._expect(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return stmts

    # ------------------------------------------------------------------ expressions

    def _parse_expression(self) -> Expr:
        return self._parse_assignment()

    def _parse_assignment(self) -> Expr:
        expr = self._parse_or()

        if self._match(TokenType.EQUAL):
            equals = self._advance()
            value = self._parse_assignment()  # right-associative

            if isinstance(expr, Variable):
                return Assign(name=expr.name, value=value, line=expr.line)
            if isinstance(expr, Get):
                return Set(object=expr.object, name=expr.name, value=value, line=expr.line)
            raise self._error(equals, "Invalid assignment target.")

        return expr

    def _parse_or(self) -> Expr:
        left = self._parse_and()

        while self._match(TokenType.OR):
            op_tok = self._advance()
            right = self._parse_and()
            left = Logical(left=left, op=op_tok, right=right, line=op_tok.line)

        return left

    def _parse_and(self) -> Expr:
        left = self._parse_equality()

        while self._match(TokenType.AND):
            op_tok = self._advance()
            right = self._parse_equality()
            left = Logical(left=left, op=op_tok, right=right, line=op_tok.line)

        return left

    def _parse_equality(self) -> Expr:
        left = self._parse_comparison()

        while self._match(TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL):
            op_tok = self._advance()
            right = self._parse_comparison()
            left = Binary(left=left, op=op_tok, right=right, line=op_tok.line)

        return left

    def _parse_comparison(self) -> Expr:
        left = self._parse_additive()

        _CMP = (TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS, TokenType.LESS_EQUAL)
        while self._match(*_CMP):
            op_tok = self._advance()
            right = self._parse_additive()
            left = Binary(left=left, op=op_tok, right=right, line=op_tok.line)

        return left

    def _parse_additive(self) -> Expr:
        left = self._parse_multiplicative()

        while self._match(TokenType.MINUS, TokenType.PLUS):
            op_tok = self._advance()
            right = self._parse_multiplicative()
            left = Binary(left=left, op=op_tok, right=right, line=op_tok.line)

        return left

    def _parse_multiplicative(self) -> Expr:
        left = self._parse_unary()

        while self._match(TokenType.SLASH, TokenType.STAR):
            op_tok = self._advance()
            right = self._parse_unary()
            left = Binary(left=left, op=op_tok, right=right, line=op_tok.line)

        return left

    def _parse_unary(self) -> Expr:
        if self._match(TokenType.BANG, TokenType.MINUS):
            op_tok = self._advance()
            operand = self._parse_unary()
            return Unary(op=op_tok, operand=operand, line=op_tok.line)
        return self._parse_call()

    def _parse_call(self) -> Expr:
        expr = self._parse_primary()

        while True:
            if self._accept(TokenType.LEFT_PAREN):
                expr = self._finish_call(expr)
            elif self._accept(TokenType.DOT):
                name = self._expect(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = Get(object=expr, name=name, line=name.line)
            else:
                break

        return expr

    def _finish_call(self, callee: Expr) -> Call:
        args = []
        if not self._match(TokenType.RIGHT_PAREN):
            while True:
                if len(args) >= MAX_ARGUMENTS:
                    raise self._error(self._peek(), f"Can't have more than {MAX_ARGUMENTS} arguments.")
                args.append(self._parse_expression())
                if not self._accept(TokenType.COMMA):
                    break
        paren = self._expect(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee=callee, arguments=args, line=paren.line)

    def _parse_primary(self) -> Expr:
        tok = self._peek()

        if self._accept(TokenType.FALSE):
            return Literal(value=False, line=tok.line)
        if self._accept(TokenType.TRUE):
            return Literal(value=True, line=tok.line)
        if self._accept(TokenType.NIL):
            return Literal(value=None, line=tok.line)
        if self._accept(TokenType.NUMBER, TokenType.STRING):
            return Literal(value=tok.literal, line=tok.line)

        if self._accept(TokenType.AT):
            return SelfRef(keyword=tok, line=tok.line)

        if self._accept(TokenType.IDENTIFIER):
            return Variable(name=tok, line=tok.line)

        # Parenthesised expression
        if self._accept(TokenType.LEFT_PAREN):
            expr = self._parse_expression()
            self._expect(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expression=expr, line=tok.line)

        raise self._error(tok, "Expect expression.")


def parse(tokens: List[Token]) -> List[Stmt]:
    """
    Parse a token list into statements.
    Raises StaticErrors holding every ParseError if the program is malformed.
    """
    stmts, errors = Parser(tokens).parse()
    if errors:
        raise StaticErrors("parse", errors)
    return stmts
