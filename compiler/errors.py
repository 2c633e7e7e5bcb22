"""
rvexpr Compiler Errors

Defines exception classes for compilation errors. Errors are raised where
they are detected and carry the source offset; rendering them as text is
left to compiler.diagnostics.
"""

from typing import Optional


class RVExprError(Exception):
    """Base exception for all rvexpr errors."""

    def __init__(self, message: str, offset: Optional[int] = None):
        self.message = message
        self.offset = offset
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with location information."""
        if self.offset is not None:
            return f"offset {self.offset}: {self.message}"
        return self.message


class ArgumentCountError(RVExprError):
    """Raised when the command line does not hold exactly one expression."""

    def __init__(self, prog: str, count: int):
        self.prog = prog
        self.count = count
        super().__init__(f"{prog}: invalid number of arguments.")


class CompileError(RVExprError):
    """Raised for user input errors during lexing or parsing."""

    def __init__(self, message: str, offset: int):
        super().__init__(message, offset)


class InvalidCharacterError(CompileError):
    """A character matched no token class."""

    def __init__(self, offset: int):
        super().__init__("invalid token", offset)


class ExpectedTokenError(CompileError):
    """A specific lexeme was required but absent."""

    def __init__(self, offset: int, expected: str):
        self.expected = expected
        super().__init__(f"expected '{expected}'", offset)


class ExpectedNumberError(CompileError):
    """A numeric literal was required but absent."""

    def __init__(self, offset: int):
        super().__init__("expected a number", offset)


class ExpectedExpressionError(CompileError):
    """Neither '(' nor a number was found where an operand should start."""

    def __init__(self, offset: int):
        super().__init__("expected an expression", offset)


class TrailingTokenError(CompileError):
    """Tokens remain after a complete expression."""

    def __init__(self, offset: int):
        super().__init__("extra token", offset)


class NestingTooDeepError(CompileError):
    """Parentheses or unary signs nest deeper than the parser allows."""

    def __init__(self, offset: int, limit: int):
        self.limit = limit
        super().__init__(f"nesting too deep (limit {limit})", offset)


class InternalInvariantError(RVExprError):
    """Raised when the code generator breaks its own invariants."""
    pass


class MachineError(RVExprError):
    """Raised when the register-machine interpreter cannot continue."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        super().__init__(message)

    def _format_message(self) -> str:
        if self.line is not None:
            return f"line {self.line}: {self.message}"
        return self.message
