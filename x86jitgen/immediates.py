"""Planning of immediate-operand reads for one encoding and operand size."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .encoding import Encoding


OPERAND_SIZES = (16, 32)


class ImmediateRead(Enum):
    """Fetch of an immediate operand from the instruction stream."""

    IMM8 = "imm8"
    IMM8S = "imm8s"
    IMM16 = "imm16"
    IMM32S = "imm32s"
    MOFFS = "moffs"

    @property
    def width(self) -> Optional[int]:
        """Width in bits, ``None`` when it depends on the address size."""

        return {
            ImmediateRead.IMM8: 8,
            ImmediateRead.IMM8S: 8,
            ImmediateRead.IMM16: 16,
            ImmediateRead.IMM32S: 32,
            ImmediateRead.MOFFS: None,
        }[self]

    @property
    def signed(self) -> bool:
        return self in (ImmediateRead.IMM8S, ImmediateRead.IMM32S)


@dataclass(frozen=True)
class ImmediatePlan:
    primary: Optional[ImmediateRead] = None
    secondary: Optional[ImmediateRead] = None

    def reads(self) -> Tuple[ImmediateRead, ...]:
        """Return the planned reads in instruction-stream order."""

        return tuple(read for read in (self.primary, self.secondary) if read is not None)

    def __bool__(self) -> bool:
        return self.primary is not None


def resolve_operand_size(encoding: Encoding, requested: Optional[int]) -> Optional[int]:
    """Return the effective operand size, ``None`` for byte-sized forms.

    Odd opcodes conventionally operate on the full operand width, even ones
    on a byte operand, unless the record is explicitly ``os``.
    """

    if requested is not None and requested not in OPERAND_SIZES:
        raise ValueError(f"unsupported operand size {requested}")
    if encoding.os or encoding.opcode % 2 == 1:
        return requested
    return None


def primary_read(encoding: Encoding, size: Optional[int]) -> Optional[ImmediateRead]:
    if encoding.imm8:
        return ImmediateRead.IMM8
    if encoding.imm8s:
        return ImmediateRead.IMM8S
    if encoding.immaddr:
        return ImmediateRead.MOFFS
    if encoding.imm16 or (encoding.imm1632 and size == 16):
        return ImmediateRead.IMM16
    if encoding.imm1632 or encoding.imm32:
        return ImmediateRead.IMM32S
    return None


def plan_immediates(encoding: Encoding, requested: Optional[int]) -> ImmediatePlan:
    """Plan the immediate reads of ``encoding`` for the ``requested`` size."""

    primary = primary_read(encoding, resolve_operand_size(encoding, requested))
    secondary = None
    if primary is not None:
        if encoding.extra_imm16:
            secondary = ImmediateRead.IMM16
        elif encoding.extra_imm8:
            secondary = ImmediateRead.IMM8
    return ImmediatePlan(primary=primary, secondary=secondary)


__all__ = [
    "OPERAND_SIZES",
    "ImmediateRead",
    "ImmediatePlan",
    "resolve_operand_size",
    "primary_read",
    "plan_immediates",
]
