import pytest

from x86jitgen.encoding import Encoding
from x86jitgen.immediates import ImmediatePlan, ImmediateRead, plan_immediates, resolve_operand_size


ADD_EAX_IMM = Encoding(opcode=0x05, nonfaulting=True, os=True, imm1632=True)


def test_imm1632_follows_operand_size():
    assert plan_immediates(ADD_EAX_IMM, 16).reads() == (ImmediateRead.IMM16,)
    assert plan_immediates(ADD_EAX_IMM, 32).reads() == (ImmediateRead.IMM32S,)


@pytest.mark.parametrize("size", [None, 16, 32])
def test_imm8s_is_size_independent(size):
    encoding = Encoding(opcode=0x6A, custom=True, os=True, imm8s=True)

    assert plan_immediates(encoding, size) == ImmediatePlan(primary=ImmediateRead.IMM8S)


def test_immaddr_width_is_left_to_runtime():
    plan = plan_immediates(Encoding(opcode=0xA1, os=True, immaddr=True, custom=True), 32)

    assert plan.primary is ImmediateRead.MOFFS
    assert plan.primary.width is None


def test_far_pointer_reads_offset_then_selector():
    callf = Encoding(opcode=0x9A, os=True, imm1632=True, extra_imm16=True, skip=True)

    assert plan_immediates(callf, 16).reads() == (ImmediateRead.IMM16, ImmediateRead.IMM16)
    assert plan_immediates(callf, 32).reads() == (ImmediateRead.IMM32S, ImmediateRead.IMM16)


def test_enter_reads_frame_size_then_level():
    enter = Encoding(opcode=0xC8, os=True, imm16=True, extra_imm8=True)

    assert plan_immediates(enter, 32).reads() == (ImmediateRead.IMM16, ImmediateRead.IMM8)


def test_no_immediate_gives_empty_plan():
    plan = plan_immediates(Encoding(opcode=0x90, nonfaulting=True), None)

    assert not plan
    assert plan.reads() == ()


def test_even_opcodes_without_os_are_byte_sized():
    assert resolve_operand_size(Encoding(opcode=0x04, imm8=True), 32) is None
    assert resolve_operand_size(Encoding(opcode=0x0F10, e=True), 16) is None
    assert resolve_operand_size(Encoding(opcode=0xB8, os=True, imm1632=True), 16) == 16
    assert resolve_operand_size(Encoding(opcode=0x05, imm1632=True), 32) == 32


def test_imm1632_without_resolved_size_reads_full_width():
    encoding = Encoding(opcode=0x68, custom=True, imm1632=True)

    assert plan_immediates(encoding, None).primary is ImmediateRead.IMM32S


def test_unsupported_operand_size():
    with pytest.raises(ValueError, match="unsupported operand size 8"):
        resolve_operand_size(ADD_EAX_IMM, 8)


@pytest.mark.parametrize(
    "read,width,signed",
    [
        (ImmediateRead.IMM8, 8, False),
        (ImmediateRead.IMM8S, 8, True),
        (ImmediateRead.IMM16, 16, False),
        (ImmediateRead.IMM32S, 32, True),
    ],
)
def test_read_widths(read, width, signed):
    assert read.width == width
    assert read.signed is signed
