"""
rvexpr Context

High-level API for compiling expressions and running the generated code.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from compiler import (
    Lexer, Parser, CodeGenerator, Assembly, Diagnostics, DEFAULT_MAX_DEPTH, check_max_depth,
)
from compiler.ast import ASTNode, ASTPrinter
from compiler.errors import RVExprError
from .interpreter import Interpreter, DEFAULT_STACK_WORDS

logger = logging.getLogger(__name__)


@dataclass
class Script:
    """
    A compiled expression.

    Contains the AST and the generated assembly.
    """

    source: str
    ast: ASTNode
    assembly: Assembly
    filename: Optional[str] = None

    @property
    def text(self) -> str:
        """Assembly listing in output format."""
        return self.assembly.to_text()

    def disassemble(self) -> str:
        """Numbered instruction listing."""
        return self.assembly.disassemble()

    def dump_ast(self) -> str:
        return ASTPrinter().print(self.ast)

    def save(self, path: str) -> None:
        """Write the assembly listing to a file."""
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.text)


class Context:
    """
    rvexpr compilation context.

    Example:
        ctx = Context()
        script = ctx.compile('1 + 2 * 3')
        result = ctx.execute(script)  # 7
    """

    def __init__(self,
                 max_depth: int = DEFAULT_MAX_DEPTH,
                 stack_words: int = DEFAULT_STACK_WORDS,
                 debug: bool = False):
        """
        Create a new context.

        Args:
            max_depth: Deepest parenthesis/sign nesting the parser accepts,
                at most MAX_DEPTH_LIMIT
            stack_words: Stack size of the interpreter in machine words
            debug: Log each compilation stage

        Raises:
            ValueError: If max_depth is out of range
        """
        self.max_depth = check_max_depth(max_depth)
        self.stack_words = stack_words
        self.debug = debug

    def compile(self, source: str, filename: Optional[str] = None) -> Script:
        """
        Compile an expression.

        Args:
            source: Expression text
            filename: Optional filename the source came from

        Returns:
            Compiled Script object

        Raises:
            CompileError: If the expression is malformed
        """
        # Tokenize
        lexer = Lexer(source)
        tokens = lexer.tokenize()

        # Parse
        parser = Parser(tokens, self.max_depth)
        ast = parser.parse()

        # Generate assembly
        codegen = CodeGenerator()
        assembly = codegen.generate(ast)

        if self.debug:
            logger.info("compiled %r: %d tokens, %d instructions",
                        source, len(tokens), len(assembly))

        return Script(source=source, ast=ast, assembly=assembly, filename=filename)

    def compile_file(self, path: str) -> Script:
        """
        Compile the expression stored in a file.

        Args:
            path: Path to a file holding one expression

        Returns:
            Compiled Script object
        """
        with open(path, 'r', encoding='utf-8') as f:
            source = f.read().rstrip("\n")
        return self.compile(source, filename=path)

    def execute(self, script: Script) -> int:
        """
        Run a compiled script on the register-machine interpreter.

        Returns:
            The value left in a0
        """
        interp = Interpreter(self.stack_words)
        result = interp.run(script.text)
        if self.debug:
            logger.info("executed %d steps, max stack depth %d",
                        interp.steps, interp.max_stack_depth)
        return result

    def evaluate(self, source: str) -> int:
        """Compile and run an expression."""
        return self.execute(self.compile(source))

    def format_error(self, source: str, error: RVExprError) -> str:
        """Render an error raised while compiling `source`."""
        return Diagnostics(source).format_error(error)


def create_context(**kwargs) -> Context:
    """Create a new rvexpr context."""
    return Context(**kwargs)


def run(source: str) -> int:
    """
    Quick helper to compile and run an expression.

    Args:
        source: Expression text

    Returns:
        Result value
    """
    return Context().evaluate(source)
