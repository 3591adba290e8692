"""Assemble per-slot bodies into the top-level opcode switches."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence, Tuple

from .encoding import Encoding
from .grouper import OpcodeGroup, group_encodings
from .ir.model import UNREACHABLE, IRCase, IRSwitch, Scrutinee, sequence
from .synthesizer import BodySynthesizer


logger = logging.getLogger(__name__)

# The plain table multiplexes both operand sizes in one switch: 32-bit
# requests are keyed with this bit set on top of the opcode byte.
OPERAND_SIZE_32_FLAG = 0x100


class TableKind(Enum):
    """Generated artifacts; the value doubles as the output file stem."""

    JIT = "jit"
    JIT0F_16 = "jit0f_16"
    JIT0F_32 = "jit0f_32"


def _table(cases: Sequence[IRCase]) -> IRSwitch:
    return IRSwitch(scrutinee=Scrutinee.OPCODE, cases=tuple(cases), default=sequence(UNREACHABLE))


class TableAssembler:
    """Build the opcode switches from grouped encodings."""

    def __init__(self, synthesizer: Optional[BodySynthesizer] = None) -> None:
        self.synthesizer = synthesizer or BodySynthesizer()

    def build_plain_table(self, groups: Sequence[OpcodeGroup]) -> IRSwitch:
        cases = []
        for group in groups:
            opcode = group.opcode
            if group.os:
                cases.append(IRCase((opcode,), self.synthesizer.synthesize(group, 16)))
                cases.append(
                    IRCase(
                        (opcode | OPERAND_SIZE_32_FLAG,),
                        self.synthesizer.synthesize(group, 32),
                    )
                )
            else:
                cases.append(
                    IRCase(
                        (opcode, opcode | OPERAND_SIZE_32_FLAG),
                        self.synthesizer.synthesize(group, None),
                    )
                )
        logger.debug("plain table: %d cases", len(cases))
        return _table(cases)

    def build_extended_tables(self, groups: Sequence[OpcodeGroup]) -> Tuple[IRSwitch, IRSwitch]:
        """Return the 16-bit and the 32-bit ``0x0F`` tables.

        Size-independent slots share one :class:`IRCase` between the tables.
        """

        cases_16 = []
        cases_32 = []
        for group in groups:
            opcode = group.opcode
            if group.os:
                cases_16.append(IRCase((opcode,), self.synthesizer.synthesize(group, 16)))
                cases_32.append(IRCase((opcode,), self.synthesizer.synthesize(group, 32)))
            else:
                shared = IRCase((opcode,), self.synthesizer.synthesize(group, None))
                cases_16.append(shared)
                cases_32.append(shared)
        logger.debug("0F tables: %d cases each", len(cases_16))
        return _table(cases_16), _table(cases_32)


def build_tables(
    encodings: Iterable[Encoding],
    kinds: Iterable[TableKind] = tuple(TableKind),
    assembler: Optional[TableAssembler] = None,
) -> Dict[TableKind, IRSwitch]:
    """Return the requested tables, built from ``encodings``.

    Every table is built before anything is returned so a failure leaves no
    partial result behind.
    """

    assembler = assembler or TableAssembler()
    selected = set(kinds)
    requested = [kind for kind in TableKind if kind in selected]
    maps = group_encodings(encodings)

    tables: Dict[TableKind, IRSwitch] = {}
    if TableKind.JIT in requested:
        tables[TableKind.JIT] = assembler.build_plain_table(maps.plain)
    if TableKind.JIT0F_16 in requested or TableKind.JIT0F_32 in requested:
        table_16, table_32 = assembler.build_extended_tables(maps.extended)
        if TableKind.JIT0F_16 in requested:
            tables[TableKind.JIT0F_16] = table_16
        if TableKind.JIT0F_32 in requested:
            tables[TableKind.JIT0F_32] = table_32
    return tables


__all__ = ["OPERAND_SIZE_32_FLAG", "TableKind", "TableAssembler", "build_tables"]
