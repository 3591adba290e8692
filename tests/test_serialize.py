import json

import pytest

from x86jitgen.assembler import TableKind, build_tables
from x86jitgen.immediates import ImmediateRead
from x86jitgen.ir import serialize_node
from x86jitgen.ir.model import (
    READ_MODRM,
    CallKind,
    Condition,
    IRBranch,
    IRCall,
    IRConditional,
    Operand,
    sequence,
)
from x86jitgen.synthesizer import trap_body
from x86jitgen.table import ENCODINGS


def test_serialize_conditional():
    node = sequence(
        READ_MODRM,
        IRConditional(
            branches=(
                IRBranch(
                    Condition.PREFIX_66,
                    sequence(IRCall("instr_660F70", (Operand.MODRM_REG, ImmediateRead.IMM8))),
                ),
            ),
            else_body=trap_body(),
        ),
    )

    assert serialize_node(node) == {
        "op": "sequence",
        "nodes": [
            {"op": "literal", "statement": "read_modrm"},
            {
                "op": "if",
                "branches": [
                    {
                        "condition": "prefix_66",
                        "body": {
                            "op": "sequence",
                            "nodes": [
                                {
                                    "op": "call",
                                    "name": "instr_660F70",
                                    "kind": "codegen",
                                    "args": ["modrm_reg", "imm8"],
                                }
                            ],
                        },
                    }
                ],
                "else": {
                    "op": "sequence",
                    "nodes": [
                        {"op": "literal", "statement": "unreachable"},
                        {"op": "call", "name": "trigger_ud", "kind": "codegen", "args": []},
                    ],
                },
            },
        ],
    }


def test_serialize_conditional_without_else():
    node = IRConditional(
        branches=(IRBranch(Condition.MODRM_MEMORY, sequence(IRCall("x", (), CallKind.DIRECT))),)
    )

    assert serialize_node(node)["else"] is None


def test_serialized_table_is_json_compatible():
    table = build_tables(ENCODINGS, [TableKind.JIT0F_32])[TableKind.JIT0F_32]

    payload = json.loads(json.dumps(serialize_node(table)))

    assert payload["op"] == "switch"
    assert payload["scrutinee"] == "opcode"
    assert [case["labels"] for case in payload["cases"]] == [[opcode] for opcode in range(0x100)]
    assert payload["default"] == {"op": "sequence", "nodes": [{"op": "literal", "statement": "unreachable"}]}


def test_serialize_rejects_unknown_nodes():
    with pytest.raises(TypeError, match="unsupported IR node type"):
        serialize_node(object())
