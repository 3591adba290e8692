import pytest

from x86jitgen.immediates import ImmediateRead
from x86jitgen.ir.model import (
    MARK_NONFAULTING,
    READ_MODRM,
    CallKind,
    Condition,
    IRBranch,
    IRCall,
    IRCase,
    IRConditional,
    IRNode,
    IRSwitch,
    Operand,
    Scrutinee,
    sequence,
)


def test_every_node_type_describes_itself():
    call = IRCall("instr_80_3_mem", (ImmediateRead.IMM8,), CallKind.CODEGEN_MODRM)
    conditional = IRConditional(
        branches=(IRBranch(Condition.MODRM_MEMORY, sequence(call)),),
        else_body=sequence(MARK_NONFAULTING),
    )
    switch = IRSwitch(
        scrutinee=Scrutinee.MODRM_REG,
        cases=(IRCase((3,), sequence(call)),),
        default=sequence(),
    )

    assert READ_MODRM.describe() == "read_modrm"
    assert call.describe() == "call codegen_modrm instr_80_3_mem(imm8)"
    assert sequence(READ_MODRM, call).describe() == "{ read_modrm; call codegen_modrm instr_80_3_mem(imm8) }"
    assert conditional.describe() == (
        "if [modrm_memory -> { call codegen_modrm instr_80_3_mem(imm8) }, else -> { mark_nonfaulting }]"
    )
    assert switch.describe() == "switch modrm_reg cases=[0x03]"
    assert all(isinstance(node, IRNode) for node in (READ_MODRM, call, conditional, switch))


def test_base_node_carries_no_behaviour():
    assert not hasattr(IRNode(), "describe")


def test_sequence_splices_nested_sequences():
    call = IRCall("instr16_01_reg", (Operand.MODRM_RM, Operand.MODRM_REG))

    assert sequence(sequence(READ_MODRM), call, sequence(MARK_NONFAULTING)).nodes == (
        READ_MODRM,
        call,
        MARK_NONFAULTING,
    )


def test_structural_nodes_reject_empty_shapes():
    with pytest.raises(ValueError, match="at least one branch"):
        IRConditional(branches=())
    with pytest.raises(ValueError, match="at least one label"):
        IRCase((), sequence())


def test_switch_case_lookup_by_label():
    case = IRCase((0x05, 0x105), sequence(READ_MODRM))
    switch = IRSwitch(scrutinee=Scrutinee.OPCODE, cases=(case,), default=sequence())

    assert switch.case_for(0x105) is case
    with pytest.raises(KeyError):
        switch.case_for(0x06)
