"""
rvexpr Compiler Package

Compiles a single integer expression to assembly text for a small
RISC-V style register machine.
"""

from .tokens import Token, TokenKind
from .lexer import Lexer
from .ast import *
from .parser import Parser, DEFAULT_MAX_DEPTH, MAX_DEPTH_LIMIT, check_max_depth
from .assembly import Assembly, Instruction
from .codegen import CodeGenerator
from .diagnostics import Diagnostics
from .errors import (
    RVExprError, CompileError, ArgumentCountError, InvalidCharacterError,
    ExpectedTokenError, ExpectedNumberError, ExpectedExpressionError,
    TrailingTokenError, NestingTooDeepError, InternalInvariantError,
    MachineError,
)

__version__ = "0.1.0"
__all__ = [
    "Token",
    "TokenKind",
    "Lexer",
    "Parser",
    "DEFAULT_MAX_DEPTH",
    "MAX_DEPTH_LIMIT",
    "check_max_depth",
    "Assembly",
    "Instruction",
    "CodeGenerator",
    "Diagnostics",
    "RVExprError",
    "CompileError",
    "ArgumentCountError",
    "InvalidCharacterError",
    "ExpectedTokenError",
    "ExpectedNumberError",
    "ExpectedExpressionError",
    "TrailingTokenError",
    "NestingTooDeepError",
    "InternalInvariantError",
    "MachineError",
    "compile_source",
    "compile_file",
]


def compile_source(source: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Assembly:
    """
    Compile an expression to assembly.

    Args:
        source: Expression text
        max_depth: Deepest parenthesis/sign nesting accepted

    Returns:
        Assembly object; call to_text() for the output listing

    Raises:
        CompileError: If the expression is malformed
    """
    lexer = Lexer(source)
    tokens = lexer.tokenize()

    parser = Parser(tokens, max_depth)
    ast = parser.parse()

    codegen = CodeGenerator()
    return codegen.generate(ast)


def compile_file(filepath: str, max_depth: int = DEFAULT_MAX_DEPTH) -> Assembly:
    """
    Compile the expression stored in a file.

    Trailing newlines are stripped so diagnostics echo a single line.
    """
    with open(filepath, 'r', encoding='utf-8') as f:
        source = f.read().rstrip("\n")
    return compile_source(source, max_depth)
