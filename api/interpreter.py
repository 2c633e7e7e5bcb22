"""
rvexpr Register-Machine Interpreter

Executes the assembly text produced by the code generator on a model of
the target machine: 64-bit registers a0, a1 and sp, and a word-addressed
stack region that grows downward.

Used to check generated programs and to back the CLI's --run option.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from compiler.errors import MachineError
from compiler.target import (
    WORD_SIZE, WORD_MIN, ACCUMULATOR, SCRATCH, STACK_POINTER, ZERO, to_word,
)

logger = logging.getLogger(__name__)

DEFAULT_STACK_WORDS = 1024
DEFAULT_MAX_STEPS = 1_000_000

_LINE = re.compile(r"^\s*([A-Za-z_.][\w.]*)\s*(.*?)\s*$")
_MEMORY = re.compile(r"^(-?\d+)\((\w+)\)$")


@dataclass(frozen=True)
class MachineInstruction:
    """A decoded instruction with its source line number."""
    mnemonic: str
    operands: Tuple[str, ...]
    line: int


def parse_program(text: str) -> List[MachineInstruction]:
    """
    Decode assembly text into instructions.

    Blank lines, directives and labels are skipped.
    """
    program = []
    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line or line.startswith(".") or line.endswith(":"):
            continue
        match = _LINE.match(line)
        if match is None:
            raise MachineError(f"cannot decode {raw!r}", number)
        mnemonic, rest = match.groups()
        operands = tuple(op.strip() for op in rest.split(",")) if rest else ()
        program.append(MachineInstruction(mnemonic, operands, number))
    return program


def divide(a: int, b: int) -> int:
    """Signed division with the target's rules for the edge cases."""
    if b == 0:
        return -1
    if a == WORD_MIN and b == -1:
        return WORD_MIN
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


class Interpreter:
    """
    Executes generated assembly.

    The stack is a numpy int64 array; sp holds a byte address into it and
    starts one past the top.
    """

    def __init__(self, stack_words: int = DEFAULT_STACK_WORDS,
                 max_steps: int = DEFAULT_MAX_STEPS):
        """
        Initialize the interpreter.

        Args:
            stack_words: Size of the stack region in machine words
            max_steps: Instructions executed before giving up
        """
        self.stack_words = stack_words
        self.max_steps = max_steps
        self.stack = np.zeros(stack_words, dtype=np.int64)
        self.registers: Dict[str, int] = {}
        self.steps = 0
        self.max_stack_depth = 0
        self.reset()

    def reset(self) -> None:
        """Clear registers and stack."""
        self.stack[:] = 0
        self.registers = {
            ACCUMULATOR: 0,
            SCRATCH: 0,
            STACK_POINTER: self.stack_words * WORD_SIZE,
        }
        self.steps = 0
        self.max_stack_depth = 0

    def run(self, text: str) -> int:
        """
        Execute a program until `ret`.

        Args:
            text: Assembly text

        Returns:
            The value of a0 at `ret`
        """
        program = parse_program(text)
        self.reset()

        pc = 0
        while pc < len(program):
            inst = program[pc]
            pc += 1
            self.steps += 1
            if self.steps > self.max_steps:
                raise MachineError("step limit exceeded", inst.line)
            if inst.mnemonic == "ret":
                result = self.registers[ACCUMULATOR]
                logger.debug("ret a0=%d after %d steps", result, self.steps)
                return result
            self.execute(inst)

        raise MachineError("program ended without ret")

    def execute(self, inst: MachineInstruction) -> None:
        """Execute one non-control instruction."""
        handler = self.HANDLERS.get(inst.mnemonic)
        if handler is None:
            raise MachineError(f"unknown instruction: {inst.mnemonic}", inst.line)
        expected = self.ARITY[inst.mnemonic]
        if len(inst.operands) != expected:
            raise MachineError(
                f"{inst.mnemonic} takes {expected} operands, got {len(inst.operands)}",
                inst.line)
        handler(self, inst)

    # =========================================================================
    # Registers and memory
    # =========================================================================

    def read(self, reg: str, line: int) -> int:
        if reg == ZERO:
            return 0
        if reg not in self.registers:
            raise MachineError(f"unknown register: {reg}", line)
        return self.registers[reg]

    def write(self, reg: str, value: int, line: int) -> None:
        if reg == ZERO:
            return
        if reg not in self.registers:
            raise MachineError(f"unknown register: {reg}", line)
        self.registers[reg] = to_word(value)

    def immediate(self, text: str, line: int) -> int:
        try:
            return int(text, 0)
        except ValueError:
            raise MachineError(f"bad immediate: {text}", line) from None

    def address(self, operand: str, line: int) -> int:
        """Resolve `offset(reg)` to a stack slot index."""
        match = _MEMORY.match(operand)
        if match is None:
            raise MachineError(f"bad memory operand: {operand}", line)
        addr = self.read(match.group(2), line) + int(match.group(1))
        if addr % WORD_SIZE:
            raise MachineError(f"misaligned access at {addr}", line)
        slot = addr // WORD_SIZE
        if slot < 0:
            raise MachineError("stack overflow", line)
        if slot >= self.stack_words:
            raise MachineError("stack underflow", line)
        return slot

    # =========================================================================
    # Instruction handlers
    # =========================================================================

    def op_li(self, inst: MachineInstruction) -> None:
        rd, imm = inst.operands
        self.write(rd, self.immediate(imm, inst.line), inst.line)

    def op_addi(self, inst: MachineInstruction) -> None:
        rd, rs, imm = inst.operands
        value = self.read(rs, inst.line) + self.immediate(imm, inst.line)
        self.write(rd, value, inst.line)
        if rd == STACK_POINTER:
            used = self.stack_words - self.registers[STACK_POINTER] // WORD_SIZE
            self.max_stack_depth = max(self.max_stack_depth, used)

    def op_xori(self, inst: MachineInstruction) -> None:
        rd, rs, imm = inst.operands
        self.write(rd, self.read(rs, inst.line) ^ self.immediate(imm, inst.line), inst.line)

    def _binary(self, inst: MachineInstruction, fn) -> None:
        rd, rs1, rs2 = inst.operands
        a = self.read(rs1, inst.line)
        b = self.read(rs2, inst.line)
        self.write(rd, fn(a, b), inst.line)

    def op_add(self, inst: MachineInstruction) -> None:
        self._binary(inst, lambda a, b: a + b)

    def op_sub(self, inst: MachineInstruction) -> None:
        self._binary(inst, lambda a, b: a - b)

    def op_mul(self, inst: MachineInstruction) -> None:
        self._binary(inst, lambda a, b: a * b)

    def op_div(self, inst: MachineInstruction) -> None:
        self._binary(inst, divide)

    def op_xor(self, inst: MachineInstruction) -> None:
        self._binary(inst, lambda a, b: a ^ b)

    def op_slt(self, inst: MachineInstruction) -> None:
        self._binary(inst, lambda a, b: 1 if a < b else 0)

    def op_neg(self, inst: MachineInstruction) -> None:
        rd, rs = inst.operands
        self.write(rd, -self.read(rs, inst.line), inst.line)

    def op_seqz(self, inst: MachineInstruction) -> None:
        rd, rs = inst.operands
        self.write(rd, 1 if self.read(rs, inst.line) == 0 else 0, inst.line)

    def op_snez(self, inst: MachineInstruction) -> None:
        rd, rs = inst.operands
        self.write(rd, 1 if self.read(rs, inst.line) != 0 else 0, inst.line)

    def op_sd(self, inst: MachineInstruction) -> None:
        rs, mem = inst.operands
        self.stack[self.address(mem, inst.line)] = self.read(rs, inst.line)

    def op_ld(self, inst: MachineInstruction) -> None:
        rd, mem = inst.operands
        self.write(rd, int(self.stack[self.address(mem, inst.line)]), inst.line)

    HANDLERS = {
        "li": op_li,
        "addi": op_addi,
        "xori": op_xori,
        "add": op_add,
        "sub": op_sub,
        "mul": op_mul,
        "div": op_div,
        "xor": op_xor,
        "slt": op_slt,
        "neg": op_neg,
        "seqz": op_seqz,
        "snez": op_snez,
        "sd": op_sd,
        "ld": op_ld,
    }

    ARITY = {
        "li": 2, "addi": 3, "xori": 3, "add": 3, "sub": 3, "mul": 3,
        "div": 3, "xor": 3, "slt": 3, "neg": 2, "seqz": 2, "snez": 2,
        "sd": 2, "ld": 2,
    }


def execute(text: str, stack_words: Optional[int] = None) -> int:
    """Run assembly text on a fresh interpreter and return a0."""
    if stack_words is None:
        stack_words = DEFAULT_STACK_WORDS
    return Interpreter(stack_words).run(text)
