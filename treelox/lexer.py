"""
treelox - Lexer
Tokenizes Lox source code into a flat token stream.
"""

import re
from dataclasses import dataclass
from typing import Any, List, Tuple
from enum import Enum, auto

from .error import ScanError, StaticErrors


class TokenType(Enum):
    # Single-character tokens
    LEFT_PAREN    = auto()   # (
    RIGHT_PAREN   = auto()   # )
    LEFT_BRACE    = auto()   # {
    RIGHT_BRACE   = auto()   # }
    COMMA         = auto()   # ,
    DOT           = auto()   # .
    MINUS         = auto()   # -
    PLUS          = auto()   # +
    SEMICOLON     = auto()   # ;
    SLASH         = auto()   # /
    STAR          = auto()   # *
    AT            = auto()   # @  (self reference)
    # One or two character tokens
    BANG          = auto()   # !
    BANG_EQUAL    = auto()   # !=
    EQUAL         = auto()   # =
    EQUAL_EQUAL   = auto()   # ==
    GREATER       = auto()   # >
    GREATER_EQUAL = auto()   # >=
    LESS          = auto()   # <
    LESS_EQUAL    = auto()   # <=
    # Literals
    IDENTIFIER    = auto()
    STRING        = auto()
    NUMBER        = auto()
    # Keywords
    AND           = auto()   # and &&
    CLASS         = auto()
    ELSE          = auto()
    FALSE         = auto()
    FN            = auto()
    FOR           = auto()
    IF            = auto()
    NIL           = auto()
    OR            = auto()   # or ||
    PRINT         = auto()
    RETURN        = auto()
    SUPER         = auto()
    TRUE          = auto()
    VAR           = auto()
    WHILE         = auto()
    # Sentinel
    EOF           = auto()


KEYWORDS = {
    "and":    TokenType.AND,
    "class":  TokenType.CLASS,
    "else":   TokenType.ELSE,
    "false":  TokenType.FALSE,
    "fn":     TokenType.FN,
    "for":    TokenType.FOR,
    "if":     TokenType.IF,
    "nil":    TokenType.NIL,
    "or":     TokenType.OR,
    "print":  TokenType.PRINT,
    "return": TokenType.RETURN,
    "super":  TokenType.SUPER,
    "true":   TokenType.TRUE,
    "var":    TokenType.VAR,
    "while":  TokenType.WHILE,
}


@dataclass(frozen=True)
class Token:
    type: TokenType
    lexeme: str
    literal: Any
    line: int

    def __repr__(self):
        return f"Token({self.type.name}, {self.lexeme!r}, line={self.line})"


# Token specification: ordered list of (TokenType, regex) pairs.
# Two-character operators come before their one-character prefixes.
_TOKEN_SPEC = [
    (TokenType.BANG_EQUAL,    r'!='),
    (TokenType.EQUAL_EQUAL,   r'=='),
    (TokenType.LESS_EQUAL,    r'<='),
    (TokenType.GREATER_EQUAL, r'>='),
    (TokenType.AND,           r'&&'),
    (TokenType.OR,            r'\|\|'),
    (TokenType.NUMBER,        r'\d+(?:\.\d+)?'),
    (TokenType.IDENTIFIER,    r'[A-Za-z_][A-Za-z0-9_]*'),
    (TokenType.BANG,          r'!'),
    (TokenType.EQUAL,         r'='),
    (TokenType.LESS,          r'<'),
    (TokenType.GREATER,       r'>'),
    (TokenType.LEFT_PAREN,    r'\('),
    (TokenType.RIGHT_PAREN,   r'\)'),
    (TokenType.LEFT_BRACE,    r'\{'),
    (TokenType.RIGHT_BRACE,   r'\}'),
    (TokenType.COMMA,         r','),
    (TokenType.DOT,           r'\.'),
    (TokenType.MINUS,         r'-'),
    (TokenType.PLUS,          r'\+'),
    (TokenType.SEMICOLON,     r';'),
    (TokenType.SLASH,         r'/'),
    (TokenType.STAR,          r'\*'),
    (TokenType.AT,            r'@'),
]

_MASTER_RE = re.compile(
    r'(?:' + '|'.join(f'(?P<T{i}>{spec[1]})' for i, spec in enumerate(_TOKEN_SPEC)) + r')',
    re.ASCII
)

_WHITESPACE_RE = re.compile(r'[ \t\r]+')
_COMMENT_RE    = re.compile(r'//[^\n]*')
_NEWLINE_RE    = re.compile(r'\n')


class Scanner:
    """Single pass over the source. Keeps going after a lexical fault so that
    every bad character or unterminated literal in the input is reported."""

    def __init__(self, source: str):
        self._source = source
        self._pos = 0
        self._line = 1
        self.tokens: List[Token] = []
        self.errors: List[ScanError] = []

    def scan(self) -> Tuple[List[Token], List[ScanError]]:
        source = self._source
        length = len(source)

        while self._pos < length:
            # Skip whitespace (not newlines)
            m = _WHITESPACE_RE.match(source, self._pos)
            if m:
                self._pos = m.end()
                continue

            # Newlines
            m = _NEWLINE_RE.match(source, self._pos)
            if m:
                self._line += 1
                self._pos = m.end()
                continue

            # Comments
            m = _COMMENT_RE.match(source, self._pos)
            if m:
                self._pos = m.end()
                continue
            if source.startswith("/*", self._pos):
                self._skip_block_comment()
                continue

            if source[self._pos] == '"':
                self._scan_string()
                continue

            # Try all token patterns
            m = _MASTER_RE.match(source, self._pos)
            if not m:
                self.errors.append(ScanError(f"Unexpected character: {source[self._pos]!r}", self._line))
                self._pos += 1
                continue

            self.tokens.append(self._make_token(m))
            self._pos = m.end()

        self.tokens.append(Token(TokenType.EOF, '', None, self._line))
        return self.tokens, self.errors

    def _make_token(self, m: re.Match) -> Token:
        raw = m.group(0)
        tok_type = _TOKEN_SPEC[int(m.lastgroup[1:])][0]

        if tok_type == TokenType.NUMBER:
            return Token(tok_type, raw, float(raw), self._line)

        # Reclassify identifiers that are keywords
        if tok_type == TokenType.IDENTIFIER:
            tok_type = KEYWORDS.get(raw, TokenType.IDENTIFIER)

        return Token(tok_type, raw, None, self._line)

    def _scan_string(self) -> None:
        start_line = self._line
        end = self._source.find('"', self._pos + 1)
        if end == -1:
            self.errors.append(ScanError("Unterminated string.", start_line))
            self._line += self._source.count('\n', self._pos)
            self._pos = len(self._source)
            return

        raw = self._source[self._pos:end + 1]
        self._line += raw.count('\n')
        self.tokens.append(Token(TokenType.STRING, raw, raw[1:-1], start_line))
        self._pos = end + 1

    def _skip_block_comment(self) -> None:
        """Block comments nest: /* a /* b */ c */ is one comment."""
        source = self._source
        start_line = self._line
        depth = 0
        while self._pos < len(source):
            if source.startswith("/*", self._pos):
                depth += 1
                self._pos += 2
            elif source.startswith("*/", self._pos):
                depth -= 1
                self._pos += 2
                if depth == 0:
                    return
            else:
                if source[self._pos] == '\n':
                    self._line += 1
                self._pos += 1
        self.errors.append(ScanError("Unterminated block comment.", start_line))


def tokenize(source: str) -> List[Token]:
    """
    Convert Lox source string into a list of Tokens ending with EOF.
    Raises StaticErrors holding every ScanError if any were found.
    """
    tokens, errors = Scanner(source).scan()
    if errors:
        raise StaticErrors("scan", errors)
    return tokens
