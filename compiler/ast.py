"""
rvexpr Abstract Syntax Tree

Defines AST node classes for integer expressions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple
from .tokens import Token


# =============================================================================
# Base Classes
# =============================================================================

class ASTNode(ABC):
    """Base class for all AST nodes."""

    @abstractmethod
    def accept(self, visitor: 'ASTVisitor') -> Any:
        """Accept a visitor for traversal."""
        pass


class NodeKind(Enum):
    """Binary operator kinds. Greater-than forms are rewritten to LT/LE."""

    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    EQ = "=="
    NE = "!="
    LT = "<"
    LE = "<="


# =============================================================================
# Expressions
# =============================================================================

@dataclass(frozen=True)
class NumberNode(ASTNode):
    """Integer literal."""
    value: int
    token: Optional[Token] = field(default=None, compare=False, repr=False)

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_number(self)


@dataclass(frozen=True)
class NegateNode(ASTNode):
    """Unary minus."""
    operand: ASTNode
    token: Optional[Token] = field(default=None, compare=False, repr=False)

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_negate(self)


@dataclass(frozen=True)
class BinaryNode(ASTNode):
    """Binary operator expression."""
    kind: NodeKind
    left: ASTNode
    right: ASTNode
    token: Optional[Token] = field(default=None, compare=False, repr=False)

    def accept(self, visitor: 'ASTVisitor') -> Any:
        return visitor.visit_binary(self)


# =============================================================================
# Visitor Interface
# =============================================================================

class ASTVisitor(ABC):
    """Visitor interface for AST traversal."""

    @abstractmethod
    def visit_number(self, node: NumberNode) -> Any:
        pass

    @abstractmethod
    def visit_negate(self, node: NegateNode) -> Any:
        pass

    @abstractmethod
    def visit_binary(self, node: BinaryNode) -> Any:
        pass


# =============================================================================
# AST Printer (for debugging)
# =============================================================================

class ASTPrinter(ASTVisitor):
    """Prints AST for debugging."""

    def print(self, node: ASTNode) -> str:
        lines = []
        pending = [(node, 0)]
        while pending:
            current, indent = pending.pop()
            label, children = current.accept(self)
            lines.append("  " * indent + label)
            pending.extend((child, indent + 1) for child in reversed(children))
        return "\n".join(lines)

    def visit_number(self, node: NumberNode) -> Tuple[str, Tuple[ASTNode, ...]]:
        return f"Number({node.value})", ()

    def visit_negate(self, node: NegateNode) -> Tuple[str, Tuple[ASTNode, ...]]:
        return "Negate", (node.operand,)

    def visit_binary(self, node: BinaryNode) -> Tuple[str, Tuple[ASTNode, ...]]:
        return f"Binary({node.kind.name})", (node.left, node.right)
