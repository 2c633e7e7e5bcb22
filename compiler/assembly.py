"""
rvexpr Assembly Format

Defines the instruction record and the buffered program container the code
generator writes into. Text is only produced by Assembly.to_text(), after
generation has finished.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from .target import ENTRY_SYMBOL
from .errors import InternalInvariantError


# Mnemonics the code generator may emit
MNEMONICS = frozenset([
    "li", "add", "addi", "sub", "mul", "div", "neg",
    "xor", "xori", "seqz", "snez", "slt", "sd", "ld", "ret",
])


@dataclass(frozen=True)
class Instruction:
    """A single assembly instruction."""

    mnemonic: str
    operands: Tuple[str, ...] = ()

    def __str__(self) -> str:
        if self.operands:
            return f"{self.mnemonic} {', '.join(self.operands)}"
        return self.mnemonic


@dataclass
class Assembly:
    """
    Generated program for the `main` entry point.

    Holds the body instructions; the `.globl` header, the label and the
    trailing `ret` are added when rendering.
    """

    body: List[Instruction] = field(default_factory=list)
    entry: str = ENTRY_SYMBOL

    def emit(self, mnemonic: str, *operands: object) -> None:
        """Append an instruction; operands are converted with str()."""
        if mnemonic not in MNEMONICS:
            raise InternalInvariantError(f"unknown mnemonic: {mnemonic}")
        self.body.append(Instruction(mnemonic, tuple(str(op) for op in operands)))

    def __len__(self) -> int:
        return len(self.body)

    def instructions(self) -> List[Instruction]:
        """Full instruction sequence including the final `ret`."""
        return self.body + [Instruction("ret")]

    def lines(self) -> List[str]:
        """Output lines, without trailing newlines."""
        out = [f"  .globl {self.entry}", f"{self.entry}:"]
        out.extend(f"  {inst}" for inst in self.instructions())
        return out

    def to_text(self) -> str:
        return "\n".join(self.lines()) + "\n"

    def disassemble(self) -> str:
        """Numbered listing of the body, for debugging."""
        lines = []
        for index, inst in enumerate(self.instructions()):
            lines.append(f"{index:04d}  {inst}")
        return "\n".join(lines)

    def count(self, mnemonic: str, *operands: str) -> int:
        """Count instructions with this mnemonic (and exact operands, if given)."""
        total = 0
        for inst in self.body:
            if inst.mnemonic != mnemonic:
                continue
            if operands and inst.operands != operands:
                continue
            total += 1
        return total
