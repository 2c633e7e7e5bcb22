"""
rvexpr Token Definitions

Defines token kinds and the Token class for lexical analysis.
"""

import string
from enum import Enum, auto
from dataclasses import dataclass
from typing import Optional


class TokenKind(Enum):
    """All token kinds in an expression."""

    NUMBER = auto()
    PUNCT = auto()
    EOF = auto()


# Two-character operators, tried before single characters (maximal munch)
TWO_CHAR_OPERATORS = ('==', '!=', '<=', '>=')

# ASCII punctuation; '#' is rejected as an invalid character
PUNCTUATORS = frozenset(string.punctuation) - {'#'}

WHITESPACE = frozenset(' \t\n\r\v\f')

DIGITS = frozenset('0123456789')


@dataclass(frozen=True)
class Token:
    """Represents a single token from the source text."""

    kind: TokenKind
    lexeme: str
    offset: int
    value: Optional[int] = None

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.kind.name}, {self.lexeme!r}, {self.value!r}, offset={self.offset})"
        return f"Token({self.kind.name}, {self.lexeme!r}, offset={self.offset})"

    @property
    def length(self) -> int:
        """Number of source characters this token spans."""
        return len(self.lexeme)

    def is_number(self) -> bool:
        return self.kind == TokenKind.NUMBER

    def is_eof(self) -> bool:
        return self.kind == TokenKind.EOF

    def equals(self, op: str) -> bool:
        """Check if this is a punctuation token spelled exactly `op`."""
        return self.kind == TokenKind.PUNCT and self.lexeme == op
