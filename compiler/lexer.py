"""
rvexpr Lexer

Tokenizes an expression into a list of tokens.
"""

import logging
from typing import List, Optional

from .tokens import Token, TokenKind, TWO_CHAR_OPERATORS, PUNCTUATORS, WHITESPACE, DIGITS
from .errors import InvalidCharacterError
from .target import to_word, WORD_MASK

logger = logging.getLogger(__name__)


class Lexer:
    """Lexical analyzer for expression source text."""

    def __init__(self, source: str):
        """
        Initialize the lexer.

        Args:
            source: Expression text to tokenize
        """
        self.source = source
        self.tokens: List[Token] = []
        self.start = 0      # Start of current token
        self.current = 0    # Current position

    def tokenize(self) -> List[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens ending with a single EOF token

        Raises:
            InvalidCharacterError: On the first character that starts no token
        """
        self.tokens = []
        self.start = 0
        self.current = 0

        while not self.is_at_end():
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenKind.EOF, "", len(self.source)))
        logger.debug("tokenized %d tokens from %d characters",
                     len(self.tokens), len(self.source))
        return self.tokens

    def scan_token(self) -> None:
        """Scan the next token."""
        c = self.peek()

        if c in WHITESPACE:
            self.advance()
            return

        if c in DIGITS:
            self.number()
            return

        # Maximal munch: two-character operators win over single characters
        pair = self.source[self.current:self.current + 2]
        if pair in TWO_CHAR_OPERATORS:
            self.current += 2
            self.add_token(TokenKind.PUNCT)
            return

        if c in PUNCTUATORS:
            self.advance()
            self.add_token(TokenKind.PUNCT)
            return

        raise InvalidCharacterError(self.current)

    def number(self) -> None:
        """Scan a decimal integer literal."""
        while self.peek() in DIGITS:
            self.advance()

        # Fold in chunks so arbitrarily long numerals stay within the
        # interpreter's int-from-string digit limit
        value = 0
        for i in range(self.start, self.current, 18):
            chunk = self.source[i:min(i + 18, self.current)]
            value = (value * 10 ** len(chunk) + int(chunk)) & WORD_MASK
        self.add_token(TokenKind.NUMBER, to_word(value))

    def advance(self) -> str:
        """Consume and return the current character."""
        c = self.source[self.current]
        self.current += 1
        return c

    def peek(self) -> str:
        """Return the current character without consuming it."""
        if self.is_at_end():
            return '\0'
        return self.source[self.current]

    def is_at_end(self) -> bool:
        """Check if we've reached the end of the source."""
        return self.current >= len(self.source)

    def add_token(self, kind: TokenKind, value: Optional[int] = None) -> None:
        """Add a token spanning start..current to the token list."""
        lexeme = self.source[self.start:self.current]
        self.tokens.append(Token(kind, lexeme, self.start, value))


def tokenize(source: str) -> List[Token]:
    """Tokenize `source` with a fresh Lexer."""
    return Lexer(source).tokenize()
