"""
rvexpr Code Generator

Generates register-machine assembly from an AST.

The current value lives in the accumulator (a0). For a binary node the right
operand is computed first and pushed, the left operand is computed into the
accumulator, and the right operand is popped into the scratch register (a1)
before the two are combined.

Pending steps are kept on an explicit work stack, so long operator chains do
not recurse once per operator.
"""

import logging
from functools import partial

from .ast import ASTNode, ASTVisitor, NumberNode, NegateNode, BinaryNode, NodeKind
from .assembly import Assembly
from .errors import InternalInvariantError
from .target import WORD_SIZE, ACCUMULATOR, SCRATCH, STACK_POINTER

logger = logging.getLogger(__name__)

A0 = ACCUMULATOR
A1 = SCRATCH
SP = STACK_POINTER


class CodeGenerator(ASTVisitor):
    """Generates assembly from an expression AST."""

    def __init__(self):
        self.assembly = Assembly()
        self.depth = 0
        self.pushes = 0
        self.pending = []

    def generate(self, node: ASTNode) -> Assembly:
        """
        Generate assembly for an expression.

        Args:
            node: Root of the expression tree

        Returns:
            The buffered program; nothing is rendered until generation
            has completed and the stack is balanced

        Raises:
            InternalInvariantError: If the tree holds an unknown node or the
                push/pop discipline does not balance
        """
        self.assembly = Assembly()
        self.depth = 0
        self.pushes = 0
        self.pending = [node]

        while self.pending:
            step = self.pending.pop()
            if isinstance(step, ASTNode) or not callable(step):
                self.gen_expr(step)
            else:
                step()

        if self.depth != 0:
            raise InternalInvariantError(f"stack depth is {self.depth} after generation")

        logger.debug("generated %d instructions, %d pushes",
                     len(self.assembly), self.pushes)
        return self.assembly

    def gen_expr(self, node: ASTNode) -> None:
        if not isinstance(node, ASTNode):
            raise InternalInvariantError(f"invalid expression: {node!r}")
        node.accept(self)

    def schedule(self, *steps) -> None:
        """Queue nodes and emit callbacks to run in the given order."""
        self.pending.extend(reversed(steps))

    # =========================================================================
    # Stack Management
    # =========================================================================

    def push(self) -> None:
        """Save the accumulator on the stack."""
        self.assembly.emit("addi", SP, SP, -WORD_SIZE)
        self.assembly.emit("sd", A0, f"0({SP})")
        self.depth += 1
        self.pushes += 1

    def pop(self, reg: str) -> None:
        """Restore the most recently pushed value into `reg`."""
        self.assembly.emit("ld", reg, f"0({SP})")
        self.assembly.emit("addi", SP, SP, WORD_SIZE)
        self.depth -= 1

    # =========================================================================
    # Expression Visitors
    # =========================================================================

    def visit_number(self, node: NumberNode) -> None:
        self.assembly.emit("li", A0, node.value)

    def visit_negate(self, node: NegateNode) -> None:
        self.schedule(node.operand, self.gen_neg)

    def visit_binary(self, node: BinaryNode) -> None:
        """Generate code for a binary expression."""
        combine = self.COMBINERS.get(node.kind)
        if combine is None:
            raise InternalInvariantError(f"invalid expression kind: {node.kind!r}")

        self.schedule(node.right, self.push, node.left,
                      partial(self.pop, A1), partial(combine, self))

    # =========================================================================
    # Operators (a0 = left, a1 = right, result in a0)
    # =========================================================================

    def gen_neg(self) -> None:
        self.assembly.emit("neg", A0, A0)

    def gen_add(self) -> None:
        self.assembly.emit("add", A0, A0, A1)

    def gen_sub(self) -> None:
        self.assembly.emit("sub", A0, A0, A1)

    def gen_mul(self) -> None:
        self.assembly.emit("mul", A0, A0, A1)

    def gen_div(self) -> None:
        self.assembly.emit("div", A0, A0, A1)

    def gen_eq(self) -> None:
        self.assembly.emit("xor", A0, A0, A1)
        self.assembly.emit("seqz", A0, A0)

    def gen_ne(self) -> None:
        self.assembly.emit("xor", A0, A0, A1)
        self.assembly.emit("snez", A0, A0)

    def gen_lt(self) -> None:
        self.assembly.emit("slt", A0, A0, A1)

    def gen_le(self) -> None:
        # a <= b is !(b < a)
        self.assembly.emit("slt", A0, A1, A0)
        self.assembly.emit("xori", A0, A0, 1)

    COMBINERS = {
        NodeKind.ADD: gen_add,
        NodeKind.SUB: gen_sub,
        NodeKind.MUL: gen_mul,
        NodeKind.DIV: gen_div,
        NodeKind.EQ: gen_eq,
        NodeKind.NE: gen_ne,
        NodeKind.LT: gen_lt,
        NodeKind.LE: gen_le,
    }


def generate(node: ASTNode) -> Assembly:
    """Generate assembly for `node` with a fresh CodeGenerator."""
    return CodeGenerator().generate(node)
