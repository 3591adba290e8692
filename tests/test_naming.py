import re

import pytest

from x86jitgen.assembler import TableKind, build_tables
from x86jitgen.encoding import Encoding
from x86jitgen.ir.model import CallKind, IRCall, Operand, sequence
from x86jitgen.naming import handler_symbols, instruction_name
from x86jitgen.table import ENCODINGS


NAME_PATTERN = re.compile(
    r"^instr(16|32|)_((66|F2|F3)?0F)?[0-9A-F]{2}(_[0-7])?"
    r"(_jit_mem|_jit_reg|_mem_jit|_mem|_reg|_jit|)$"
)


@pytest.mark.parametrize(
    "encoding,size,prefix,expected",
    [
        (Encoding(opcode=0x05, os=True, imm1632=True), 16, None, "instr16_05"),
        (Encoding(opcode=0x05, os=True, imm1632=True), 32, None, "instr32_05"),
        (Encoding(opcode=0x04, imm8=True), None, None, "instr_04"),
        (Encoding(opcode=0x04, imm8=True), 32, None, "instr_04"),
        (Encoding(opcode=0x660F10, e=True), None, 0x66, "instr_660F10"),
        (Encoding(opcode=0x80, e=True, fixed_g=3, imm8=True), None, None, "instr_80_3"),
        (Encoding(opcode=0x0FBA, os=True, e=True, fixed_g=4, imm8=True), 32, None, "instr32_0FBA_4"),
        (Encoding(opcode=0xF30FB8, os=True, e=True), 16, 0xF3, "instr16_F30FB8"),
    ],
)
def test_instruction_name(encoding, size, prefix, expected):
    assert instruction_name(encoding, size, prefix) == expected


def test_handler_symbols_skip_runtime_helpers():
    body = sequence(
        IRCall("gen_modrm_resolve", (Operand.MODRM_BYTE,), CallKind.DIRECT),
        IRCall("instr_00_mem", (Operand.MODRM_REG,), CallKind.CODEGEN_MODRM),
        IRCall("instr_00_mem", (Operand.MODRM_REG,), CallKind.CODEGEN_MODRM),
        IRCall("trigger_ud"),
    )

    assert handler_symbols(body) == ["instr_00_mem"]


@pytest.mark.parametrize("kind", list(TableKind))
def test_generated_symbols_follow_naming_scheme(kind):
    table = build_tables(ENCODINGS, [kind])[kind]

    symbols = handler_symbols(table)

    assert symbols
    assert [name for name in symbols if not NAME_PATTERN.match(name)] == []


@pytest.mark.parametrize("kind", list(TableKind))
def test_cases_never_share_handler_symbols(kind):
    table = build_tables(ENCODINGS, [kind])[kind]

    owners = {}
    for case in table.cases:
        for name in handler_symbols(case.body):
            assert name not in owners, f"{name} used by cases {owners[name]} and {case.labels}"
            owners[name] = case.labels
