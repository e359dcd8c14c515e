"""
treelox - Command Line Interface

Usage:
    treelox script.lox [--debug] [--emit-ast] [--no-color]
    treelox                      (interactive mode)
    python -m treelox script.lox
"""

import sys
import argparse

from .error import ErrorReporter, EX_NOINPUT
from .printer import AstPrinter
from .session import Session
from .shell import Shell


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="treelox",
        description="treelox - tree-walking interpreter for the Lox scripting language",
    )
    parser.add_argument("file", nargs="?", help="Path to the .lox source file (omit for interactive mode)")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Print phase info, tokens and the AST to stderr",
    )
    parser.add_argument(
        "--emit-ast",
        action="store_true",
        dest="emit_ast",
        help="Print the parsed program as s-expressions instead of running it",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        dest="no_color",
        help="Never color diagnostics",
    )

    args = parser.parse_args(argv)
    if args.emit_ast and args.file is None:
        parser.error("--emit-ast requires a file")

    color = False if args.no_color else None
    session = Session(output=print, debug=args.debug)

    if args.file is None:
        Shell(session, ErrorReporter(color=color)).cmdloop()
        return 0

    try:
        with open(args.file, "r", encoding="utf-8") as f:
            source = f.read()
    except OSError as e:
        print(f"[treelox] Error: cannot read {args.file!r}: {e.strerror}", file=sys.stderr)
        return EX_NOINPUT

    reporter = ErrorReporter(color=color)
    with reporter:
        if args.emit_ast:
            print(AstPrinter().print(session.parse(source)))
        else:
            session.execute(source)

    return reporter.exit_code


if __name__ == "__main__":
    sys.exit(main())
