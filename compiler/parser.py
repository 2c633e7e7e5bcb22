"""
rvexpr Parser

Recursive descent parser that produces an AST from tokens.

Grammar, lowest to highest binding:

    expr           := equality
    equality       := relational (("==" | "!=") relational)*
    relational     := additive (("<" | "<=" | ">" | ">=") additive)*
    additive       := multiplicative (("+" | "-") multiplicative)*
    multiplicative := unary (("*" | "/") unary)*
    unary          := ("+" | "-") unary | primary
    primary        := "(" expr ")" | number
"""

import logging
from typing import List, Tuple

from .tokens import Token, TokenKind
from .ast import ASTNode, NumberNode, NegateNode, BinaryNode, NodeKind
from .errors import (
    ExpectedTokenError, ExpectedNumberError, ExpectedExpressionError,
    TrailingTokenError, NestingTooDeepError,
)

logger = logging.getLogger(__name__)

# Parenthesis/sign nesting accepted by default
DEFAULT_MAX_DEPTH = 100

# Each nesting level costs several Python frames in the recursive parser;
# larger limits would hit the interpreter recursion limit first
MAX_DEPTH_LIMIT = 120


def check_max_depth(max_depth: int) -> int:
    """Return `max_depth` if it is a usable nesting limit, else raise ValueError."""
    if not 1 <= max_depth <= MAX_DEPTH_LIMIT:
        raise ValueError(f"max depth must be between 1 and {MAX_DEPTH_LIMIT}, got {max_depth}")
    return max_depth


class Parser:
    """Recursive descent parser for integer expressions."""

    def __init__(self, tokens: List[Token], max_depth: int = DEFAULT_MAX_DEPTH):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from the lexer, ending with EOF
            max_depth: Deepest parenthesis/sign nesting accepted

        Raises:
            ValueError: If max_depth is outside 1..MAX_DEPTH_LIMIT
        """
        self.tokens = tokens
        self.max_depth = check_max_depth(max_depth)
        self.current = 0
        self.depth = 0

    def parse(self) -> ASTNode:
        """
        Parse the token stream as exactly one expression.

        Returns:
            Root AST node

        Raises:
            CompileError: On any syntax error, including tokens left over
                after the expression
        """
        node, rest = self.parse_prefix()
        if not rest.is_eof():
            raise TrailingTokenError(rest.offset)
        return node

    def parse_prefix(self) -> Tuple[ASTNode, Token]:
        """
        Parse one expression from the start of the token stream.

        Returns:
            The expression and the first token that was not consumed
        """
        self.current = 0
        self.depth = 0

        node = self.expression()
        logger.debug("parsed expression, stopped at %r", self.peek())
        return node, self.peek()

    # =========================================================================
    # Expressions
    # =========================================================================

    def expression(self) -> ASTNode:
        """Parse an expression."""
        return self.equality()

    def equality(self) -> ASTNode:
        """Parse an equality expression."""
        expr = self.relational()

        while True:
            if self.match("=="):
                operator = self.previous()
                expr = BinaryNode(NodeKind.EQ, expr, self.relational(), operator)
            elif self.match("!="):
                operator = self.previous()
                expr = BinaryNode(NodeKind.NE, expr, self.relational(), operator)
            else:
                return expr

    def relational(self) -> ASTNode:
        """Parse a comparison; '>' and '>=' become LT/LE with swapped operands."""
        expr = self.additive()

        while True:
            if self.match("<"):
                operator = self.previous()
                expr = BinaryNode(NodeKind.LT, expr, self.additive(), operator)
            elif self.match("<="):
                operator = self.previous()
                expr = BinaryNode(NodeKind.LE, expr, self.additive(), operator)
            elif self.match(">"):
                operator = self.previous()
                expr = BinaryNode(NodeKind.LT, self.additive(), expr, operator)
            elif self.match(">="):
                operator = self.previous()
                expr = BinaryNode(NodeKind.LE, self.additive(), expr, operator)
            else:
                return expr

    def additive(self) -> ASTNode:
        """Parse addition/subtraction."""
        expr = self.multiplicative()

        while True:
            if self.match("+"):
                operator = self.previous()
                expr = BinaryNode(NodeKind.ADD, expr, self.multiplicative(), operator)
            elif self.match("-"):
                operator = self.previous()
                expr = BinaryNode(NodeKind.SUB, expr, self.multiplicative(), operator)
            else:
                return expr

    def multiplicative(self) -> ASTNode:
        """Parse multiplication/division."""
        expr = self.unary()

        while True:
            if self.match("*"):
                operator = self.previous()
                expr = BinaryNode(NodeKind.MUL, expr, self.unary(), operator)
            elif self.match("/"):
                operator = self.previous()
                expr = BinaryNode(NodeKind.DIV, expr, self.unary(), operator)
            else:
                return expr

    def unary(self) -> ASTNode:
        """Parse unary sign prefixes."""
        self.enter()

        if self.match("+"):
            expr = self.unary()
        elif self.match("-"):
            operator = self.previous()
            operand = self.unary()
            expr = NegateNode(operand, operator)
        else:
            expr = self.primary()

        self.depth -= 1
        return expr

    def primary(self) -> ASTNode:
        """Parse a parenthesized expression or a number."""
        if self.match("("):
            expr = self.expression()
            self.consume(")")
            return expr

        if self.check_kind(TokenKind.NUMBER):
            token = self.expect_number()
            return NumberNode(token.value, token)

        raise ExpectedExpressionError(self.peek().offset)

    def enter(self) -> None:
        """Count one level of unary/parenthesis recursion."""
        self.depth += 1
        if self.depth > self.max_depth:
            raise NestingTooDeepError(self.peek().offset, self.max_depth)

    # =========================================================================
    # Helper Methods
    # =========================================================================

    def match(self, op: str) -> bool:
        """Consume the current token if it is the punctuator `op`."""
        if self.check(op):
            self.advance()
            return True
        return False

    def check(self, op: str) -> bool:
        """Check if current token is the punctuator `op`."""
        return self.peek().equals(op)

    def check_kind(self, kind: TokenKind) -> bool:
        return self.peek().kind == kind

    def advance(self) -> Token:
        """Consume and return the current token."""
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self) -> bool:
        """Check if we've reached the end of tokens."""
        return self.peek().kind == TokenKind.EOF

    def peek(self) -> Token:
        """Return the current token."""
        return self.tokens[self.current]

    def previous(self) -> Token:
        """Return the previous token."""
        return self.tokens[self.current - 1]

    def consume(self, op: str) -> Token:
        """Consume the punctuator `op` or raise an error at the actual token."""
        if self.check(op):
            return self.advance()
        raise ExpectedTokenError(self.peek().offset, op)

    def expect_number(self) -> Token:
        """Consume a number token or raise an error."""
        if self.check_kind(TokenKind.NUMBER):
            return self.advance()
        raise ExpectedNumberError(self.peek().offset)


def parse(tokens: List[Token], max_depth: int = DEFAULT_MAX_DEPTH) -> ASTNode:
    """Parse `tokens` as exactly one expression."""
    return Parser(tokens, max_depth).parse()
