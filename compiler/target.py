"""
rvexpr Target Machine

Constants describing the register machine the generated assembly runs on,
and the 64-bit word arithmetic shared by the lexer and the interpreter.
"""

import numpy as np

WORD_SIZE = 8
WORD_BITS = 64
WORD_MASK = (1 << WORD_BITS) - 1

WORD_MIN = -(1 << (WORD_BITS - 1))
WORD_MAX = (1 << (WORD_BITS - 1)) - 1

# Register names
ACCUMULATOR = "a0"
SCRATCH = "a1"
STACK_POINTER = "sp"
ZERO = "zero"

ENTRY_SYMBOL = "main"


def to_word(value: int) -> int:
    """
    Truncate an unbounded integer into a signed 64-bit machine word.

    Only the low 64 bits are kept and reinterpreted as two's complement,
    so 2**63 becomes WORD_MIN and 2**64 becomes 0.
    """
    bits = np.array(value & WORD_MASK, dtype=np.uint64)
    return int(bits.astype(np.int64))
