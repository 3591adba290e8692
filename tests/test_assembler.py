from typing import List

import pytest

from x86jitgen.assembler import OPERAND_SIZE_32_FLAG, TableAssembler, TableKind, build_tables
from x86jitgen.encoding import Encoding
from x86jitgen.errors import MissingCoverageError
from x86jitgen.ir.model import UNREACHABLE, Scrutinee, sequence
from x86jitgen.table import ENCODINGS


TABLES = build_tables(ENCODINGS)


def _plain_table_without(opcode: int) -> List[Encoding]:
    return [encoding for encoding in ENCODINGS if encoding.opcode != opcode]


def test_all_tables_are_built_in_order():
    assert list(TABLES) == [TableKind.JIT, TableKind.JIT0F_16, TableKind.JIT0F_32]


def test_plain_table_covers_both_operand_sizes():
    table = TABLES[TableKind.JIT]
    labels = table.labels()

    assert table.scrutinee is Scrutinee.OPCODE
    assert sorted(labels) == list(range(0x200))
    assert len(labels) == len(set(labels))
    assert table.default == sequence(UNREACHABLE)


def test_plain_table_splits_operand_sized_slots():
    table = TABLES[TableKind.JIT]

    small = table.case_for(0x05)
    large = table.case_for(0x05 | OPERAND_SIZE_32_FLAG)

    assert small.labels == (0x05,)
    assert large.labels == (0x105,)
    assert small.body != large.body


def test_plain_table_merges_size_independent_slots():
    case = TABLES[TableKind.JIT].case_for(0x04)

    assert case.labels == (0x04, 0x104)
    assert case is TABLES[TableKind.JIT].case_for(0x104)


@pytest.mark.parametrize("kind", [TableKind.JIT0F_16, TableKind.JIT0F_32])
def test_extended_tables_are_total(kind):
    labels = TABLES[kind].labels()

    assert list(labels) == list(range(0x100))


def test_extended_tables_share_size_independent_cases():
    table_16 = TABLES[TableKind.JIT0F_16]
    table_32 = TABLES[TableKind.JIT0F_32]

    assert table_16.case_for(0x10) is table_32.case_for(0x10)
    assert table_16.case_for(0xB6) is not table_32.case_for(0xB6)
    assert table_16.case_for(0xB6).body != table_32.case_for(0xB6).body


def test_build_tables_returns_only_requested_kinds():
    tables = build_tables(ENCODINGS, [TableKind.JIT0F_32])

    assert list(tables) == [TableKind.JIT0F_32]
    assert tables[TableKind.JIT0F_32] == TABLES[TableKind.JIT0F_32]


def test_build_tables_orders_requested_kinds():
    tables = build_tables(ENCODINGS, [TableKind.JIT0F_16, TableKind.JIT])

    assert list(tables) == [TableKind.JIT, TableKind.JIT0F_16]


def test_incomplete_table_fails_before_building():
    with pytest.raises(MissingCoverageError, match="opcode 0x90"):
        build_tables(_plain_table_without(0x90), [TableKind.JIT0F_16])


def test_assembler_accepts_custom_synthesizer():
    class CountingSynthesizer:
        def __init__(self):
            self.calls = []

        def synthesize(self, group, size):
            self.calls.append((group.opcode, size))
            return sequence(UNREACHABLE)

    synthesizer = CountingSynthesizer()
    build_tables(ENCODINGS, [TableKind.JIT], TableAssembler(synthesizer))

    assert (0x05, 16) in synthesizer.calls
    assert (0x05, 32) in synthesizer.calls
    assert (0x04, None) in synthesizer.calls
    assert len(synthesizer.calls) == len({call for call in synthesizer.calls})
