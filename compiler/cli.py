"""
rvexpr command line

Usage:
    rvexpr EXPR                     print assembly for EXPR
    rvexpr EXPR -o out.s            write assembly to a file
    rvexpr EXPR --emit tokens|ast   dump an intermediate stage
    rvexpr EXPR --run               run the program and print a0

Exit codes: 0 on success, 1 on any error. Diagnostics go to stderr.
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .lexer import Lexer
from .parser import Parser, DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT, check_max_depth
from .codegen import CodeGenerator
from .ast import ASTPrinter
from .diagnostics import Diagnostics
from .errors import ArgumentCountError, CompileError, MachineError

logger = logging.getLogger(__name__)


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser whose usage errors exit with status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def depth_limit(text: str) -> int:
    """argparse type for --max-depth."""
    try:
        return check_max_depth(int(text))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected an integer between 1 and {MAX_DEPTH_LIMIT}, got {text!r}")


def build_parser(prog: Optional[str] = None) -> ArgumentParser:
    parser = ArgumentParser(
        prog=prog,
        description="Compile an integer expression to RISC-V style assembly.",
    )
    parser.add_argument("expression", nargs="*", help="expression to compile")
    parser.add_argument("-o", "--output", help="write output to FILE instead of stdout")
    parser.add_argument("--emit", choices=("asm", "tokens", "ast"), default="asm",
                        help="what to output (default: asm)")
    parser.add_argument("--run", action="store_true",
                        help="execute the generated program and print the result")
    parser.add_argument("--max-depth", type=depth_limit, default=DEFAULT_MAX_DEPTH,
                        help=f"maximum nesting depth, 1..{MAX_DEPTH_LIMIT} (default: {DEFAULT_MAX_DEPTH})")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def compile_expression(source: str, emit: str, max_depth: int) -> str:
    """Run the pipeline up to the requested stage and return its text."""
    tokens = Lexer(source).tokenize()
    if emit == "tokens":
        return "".join(f"{tok!r}\n" for tok in tokens)

    ast = Parser(tokens, max_depth).parse()
    if emit == "ast":
        return ASTPrinter().print(ast) + "\n"

    return CodeGenerator().generate(ast).to_text()


def write_output(text: str, path: Optional[str]) -> None:
    if path is None:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the compiler CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Process exit status
    """
    parser = build_parser()
    # Expressions such as "-1+2" look like options to argparse
    args, extra = parser.parse_known_args(argv)
    expressions = args.expression + extra

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if len(expressions) != 1:
        error = ArgumentCountError(parser.prog, len(expressions))
        sys.stderr.write(f"{error.message}\n")
        return 1
    if args.run and args.emit != "asm":
        parser.error("--run cannot be combined with --emit tokens|ast")

    source = expressions[0]
    diagnostics = Diagnostics(source)

    try:
        text = compile_expression(source, args.emit, args.max_depth)
    except CompileError as e:
        logger.debug("compile failed: %s", e)
        diagnostics.fail(e)

    if args.run:
        # Imported here; the api package depends on this one
        from api.interpreter import execute
        try:
            result = execute(text)
        except MachineError as e:
            sys.stderr.write(f"{parser.prog}: {e}\n")
            return 1
        text = f"{result}\n"

    try:
        write_output(text, args.output)
    except OSError as e:
        sys.stderr.write(f"{parser.prog}: cannot write {args.output}: {e.strerror or e}\n")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
