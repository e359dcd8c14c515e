"""Interactive mode for the treelox interpreter. Uses cmd as backend."""

import cmd

from .error import ErrorReporter
from .lexer import Scanner, TokenType
from .session import Session


class Shell(cmd.Cmd):
    """Lox REPL. Globals persist between inputs for the life of the session."""
    intro = "treelox :: tree-walking Lox interpreter\nType 'exit' or press Ctrl-D to quit."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, session: Session, reporter: ErrorReporter, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.session = session
        self.reporter = reporter
        self._tmp_source = ""

    def default(self, line):
        """Runs arbitrary Lox input. An open '{' continues onto the next line."""
        source = self._tmp_source + line + "\n"

        if _open_braces(source) > 0:
            self._tmp_source = source
            self.prompt = self.secondary_prompt
            return

        self._tmp_source = ""
        self.prompt = self._tmp_prompt

        with self.reporter:  # needed because cmd.Cmd exits on an uncaught exception
            self.session.execute(source)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True


def _open_braces(source: str) -> int:
    """Unclosed '{' count, ignoring braces inside strings and comments."""
    tokens, _ = Scanner(source).scan()
    depth = 0
    for tok in tokens:
        if tok.type == TokenType.LEFT_BRACE:
            depth += 1
        elif tok.type == TokenType.RIGHT_BRACE:
            depth -= 1
    return depth
