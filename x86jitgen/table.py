"""Declarative x86 encoding table consumed by the dispatch generator.

Every entry describes one instruction form using the flags understood by
:class:`~x86jitgen.encoding.Encoding`.  The built-in table covers each slot
of the one-byte map and of the ``0x0F`` map.  Undefined or privileged
opcodes end the translated block (``block_boundary``).  ``skip`` marks
handlers left out of the randomized instruction tests; it does not change
the generated dispatch code.

Alternative tables can be provided as a JSON array of objects using the
same field names, see :func:`load_encoding_table`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .encoding import Encoding
from .errors import InvalidEncodingError


RawEntry = Dict[str, Any]


def _sse(opcode: int, prefixes: Sequence[int], **flags: Any) -> List[RawEntry]:
    """Return the unprefixed entry plus one entry per mandatory prefix."""

    entries = [dict(opcode=opcode, e=1, **flags)]
    for prefix in prefixes:
        entries.append(dict(opcode=prefix << 16 | opcode, e=1, **flags))
    return entries


_BASE_ENTRIES: List[RawEntry] = [
    dict(opcode=0x06, os=1, skip=1),
    dict(opcode=0x07, os=1, skip=1, block_boundary=1),  # pop es
    dict(opcode=0x0E, os=1, skip=1),
    dict(opcode=0x0F, os=1, prefix=1),
    dict(opcode=0x16, os=1, skip=1),
    dict(opcode=0x17, os=1, skip=1, block_boundary=1),  # pop ss
    dict(opcode=0x1E, os=1, skip=1),
    dict(opcode=0x1F, os=1, skip=1, block_boundary=1),  # pop ds
    dict(opcode=0x26, prefix=1),
    dict(opcode=0x27, nonfaulting=1),
    dict(opcode=0x2E, prefix=1),
    dict(opcode=0x2F, nonfaulting=1),
    dict(opcode=0x36, prefix=1),
    dict(opcode=0x37, nonfaulting=1),
    dict(opcode=0x3E, prefix=1),
    dict(opcode=0x3F, nonfaulting=1),

    dict(opcode=0x60, os=1, block_boundary=1),  # pusha
    dict(opcode=0x61, os=1, block_boundary=1),  # popa
    dict(opcode=0x62, e=1, skip=1),  # bound
    dict(opcode=0x63, e=1, block_boundary=1),  # arpl
    dict(opcode=0x64, prefix=1),
    dict(opcode=0x65, prefix=1),
    dict(opcode=0x66, prefix=1),
    dict(opcode=0x67, prefix=1),
    dict(opcode=0x68, custom=1, os=1, imm1632=1),
    dict(opcode=0x69, nonfaulting=1, os=1, e=1, imm1632=1),
    dict(opcode=0x6A, custom=1, os=1, imm8s=1),
    dict(opcode=0x6B, nonfaulting=1, os=1, e=1, imm8s=1),
    dict(opcode=0x6C, block_boundary=1, skip=1),  # ins
    dict(opcode=0x6D, block_boundary=1, os=1, skip=1),
    dict(opcode=0x6E, block_boundary=1, skip=1),  # outs
    dict(opcode=0x6F, block_boundary=1, os=1, skip=1),

    dict(opcode=0x84, nonfaulting=1, e=1),
    dict(opcode=0x85, nonfaulting=1, os=1, e=1),
    dict(opcode=0x86, nonfaulting=1, e=1),
    dict(opcode=0x87, nonfaulting=1, os=1, e=1),
    dict(opcode=0x88, custom=1, nonfaulting=1, e=1),
    dict(opcode=0x89, custom=1, nonfaulting=1, os=1, e=1),
    dict(opcode=0x8A, custom=1, nonfaulting=1, e=1),
    dict(opcode=0x8B, custom=1, nonfaulting=1, os=1, e=1),
    dict(opcode=0x8C, os=1, e=1, skip=1),
    dict(opcode=0x8D, nonfaulting=1, os=1, e=1),  # lea
    dict(opcode=0x8E, block_boundary=1, e=1, skip=1),  # mov sreg
    dict(opcode=0x8F, os=1, e=1, fixed_g=0, custom=1),  # pop r/m

    dict(opcode=0x90, nonfaulting=1),
    dict(opcode=0x98, nonfaulting=1, os=1),  # cbw
    dict(opcode=0x99, nonfaulting=1, os=1),  # cwd
    dict(opcode=0x9A, os=1, imm1632=1, extra_imm16=1, skip=1, block_boundary=1),  # callf
    dict(opcode=0x9B, block_boundary=1, skip=1),  # fwait
    dict(opcode=0x9C, os=1),  # pushf
    dict(opcode=0x9D, os=1, block_boundary=1, skip=1),  # popf
    dict(opcode=0x9E),  # sahf
    dict(opcode=0x9F),  # lahf

    dict(opcode=0xA0, immaddr=1, custom=1),
    dict(opcode=0xA1, os=1, immaddr=1, custom=1),
    dict(opcode=0xA2, immaddr=1, custom=1),
    dict(opcode=0xA3, os=1, immaddr=1, custom=1),
    # string instructions modify eip when repeated
    dict(opcode=0xA4, block_boundary=1),
    dict(opcode=0xA5, block_boundary=1, os=1),
    dict(opcode=0xA6, block_boundary=1),
    dict(opcode=0xA7, block_boundary=1, os=1),
    dict(opcode=0xA8, nonfaulting=1, imm8=1),
    dict(opcode=0xA9, nonfaulting=1, os=1, imm1632=1),
    dict(opcode=0xAA, block_boundary=1),
    dict(opcode=0xAB, block_boundary=1, os=1),
    dict(opcode=0xAC, block_boundary=1),
    dict(opcode=0xAD, block_boundary=1, os=1),
    dict(opcode=0xAE, block_boundary=1),
    dict(opcode=0xAF, block_boundary=1, os=1),

    dict(opcode=0xC2, custom=1, block_boundary=1, os=1, imm16=1, skip=1),  # ret
    dict(opcode=0xC3, custom=1, block_boundary=1, os=1, skip=1),
    dict(opcode=0xC4, block_boundary=1, os=1, e=1, skip=1),  # les
    dict(opcode=0xC5, block_boundary=1, os=1, e=1, skip=1),  # lds
    dict(opcode=0xC6, e=1, fixed_g=0, nonfaulting=1, imm8=1),
    dict(opcode=0xC7, custom=1, e=1, fixed_g=0, os=1, imm1632=1),
    dict(opcode=0xC8, os=1, imm16=1, extra_imm8=1, block_boundary=1),  # enter
    dict(opcode=0xC9, custom=1, os=1, skip=1),  # leave
    dict(opcode=0xCA, block_boundary=1, os=1, imm16=1, skip=1),  # retf
    dict(opcode=0xCB, block_boundary=1, os=1, skip=1),
    dict(opcode=0xCC, block_boundary=1, skip=1),  # int3
    dict(opcode=0xCD, block_boundary=1, skip=1, imm8=1),
    dict(opcode=0xCE, block_boundary=1, skip=1),  # into
    dict(opcode=0xCF, block_boundary=1, os=1, skip=1),  # iret

    dict(opcode=0xD4, imm8=1, block_boundary=1),  # aam, may raise #DE
    dict(opcode=0xD5, nonfaulting=1, imm8=1),  # aad
    dict(opcode=0xD6, nonfaulting=1),  # salc
    dict(opcode=0xD7, skip=1, custom=1),  # xlat

    dict(opcode=0xE0, os=1, imm8s=1, skip=1, block_boundary=1, custom=1),  # loopnz
    dict(opcode=0xE1, os=1, imm8s=1, skip=1, block_boundary=1, custom=1),  # loopz
    dict(opcode=0xE2, os=1, imm8s=1, skip=1, block_boundary=1, custom=1),  # loop
    dict(opcode=0xE3, os=1, imm8s=1, skip=1, block_boundary=1, custom=1),  # jcxz
    dict(opcode=0xE4, block_boundary=1, imm8=1, skip=1),  # in
    dict(opcode=0xE5, block_boundary=1, os=1, imm8=1, skip=1),
    dict(opcode=0xE6, block_boundary=1, imm8=1, skip=1),  # out
    dict(opcode=0xE7, block_boundary=1, os=1, imm8=1, skip=1),
    dict(opcode=0xE8, block_boundary=1, os=1, imm1632=1, custom=1, skip=1),  # call
    dict(opcode=0xE9, block_boundary=1, os=1, imm1632=1, custom=1, skip=1),  # jmp
    dict(opcode=0xEA, block_boundary=1, os=1, imm1632=1, extra_imm16=1, skip=1),  # jmpf
    dict(opcode=0xEB, block_boundary=1, imm8s=1, custom=1, skip=1),
    dict(opcode=0xEC, block_boundary=1, skip=1),  # in
    dict(opcode=0xED, block_boundary=1, os=1, skip=1),
    dict(opcode=0xEE, block_boundary=1, skip=1),  # out
    dict(opcode=0xEF, block_boundary=1, os=1, skip=1),

    dict(opcode=0xF0, prefix=1),  # lock
    dict(opcode=0xF1, skip=1, block_boundary=1),  # icebp
    dict(opcode=0xF2, prefix=1),  # repnz
    dict(opcode=0xF3, prefix=1),  # repz
    dict(opcode=0xF4, block_boundary=1, skip=1),  # hlt
    dict(opcode=0xF5, nonfaulting=1),  # cmc

    dict(opcode=0xF6, e=1, fixed_g=0, nonfaulting=1, imm8=1),
    dict(opcode=0xF6, e=1, fixed_g=1, nonfaulting=1, imm8=1),
    dict(opcode=0xF6, e=1, fixed_g=2, nonfaulting=1),
    dict(opcode=0xF6, e=1, fixed_g=3, nonfaulting=1),
    dict(opcode=0xF6, e=1, fixed_g=4, nonfaulting=1),
    dict(opcode=0xF6, e=1, fixed_g=5, nonfaulting=1),
    dict(opcode=0xF6, e=1, fixed_g=6),
    dict(opcode=0xF6, e=1, fixed_g=7),

    dict(opcode=0xF7, os=1, e=1, fixed_g=0, nonfaulting=1, imm1632=1),
    dict(opcode=0xF7, os=1, e=1, fixed_g=1, nonfaulting=1, imm1632=1),
    dict(opcode=0xF7, os=1, e=1, fixed_g=2, nonfaulting=1),
    dict(opcode=0xF7, os=1, e=1, fixed_g=3, nonfaulting=1),
    dict(opcode=0xF7, os=1, e=1, fixed_g=4, nonfaulting=1),
    dict(opcode=0xF7, os=1, e=1, fixed_g=5, nonfaulting=1),
    dict(opcode=0xF7, os=1, e=1, fixed_g=6),
    dict(opcode=0xF7, os=1, e=1, fixed_g=7),

    dict(opcode=0xF8, nonfaulting=1),  # clc
    dict(opcode=0xF9, nonfaulting=1),  # stc
    dict(opcode=0xFA, block_boundary=1, skip=1),  # cli
    dict(opcode=0xFB, block_boundary=1, skip=1),  # sti
    dict(opcode=0xFC, nonfaulting=1),  # cld
    dict(opcode=0xFD, nonfaulting=1),  # std

    dict(opcode=0xFE, e=1, fixed_g=0, nonfaulting=1),
    dict(opcode=0xFE, e=1, fixed_g=1, nonfaulting=1),
    dict(opcode=0xFF, os=1, e=1, fixed_g=0, nonfaulting=1),
    dict(opcode=0xFF, os=1, e=1, fixed_g=1, nonfaulting=1),
    dict(opcode=0xFF, os=1, e=1, fixed_g=2, block_boundary=1, skip=1),  # call near
    dict(opcode=0xFF, os=1, e=1, fixed_g=3, block_boundary=1, skip=1),  # call far
    dict(opcode=0xFF, os=1, e=1, fixed_g=4, block_boundary=1, skip=1),  # jmp near
    dict(opcode=0xFF, os=1, e=1, fixed_g=5, block_boundary=1, skip=1),  # jmp far
    dict(opcode=0xFF, os=1, e=1, fixed_g=6, custom=1),  # push

    dict(opcode=0x0F00, fixed_g=0, e=1, skip=1, block_boundary=1),  # sldt
    dict(opcode=0x0F00, fixed_g=1, e=1, skip=1, block_boundary=1),  # str
    dict(opcode=0x0F00, fixed_g=2, e=1, skip=1, block_boundary=1),  # lldt
    dict(opcode=0x0F00, fixed_g=3, e=1, skip=1, block_boundary=1),  # ltr
    dict(opcode=0x0F00, fixed_g=4, e=1, skip=1, block_boundary=1),  # verr
    dict(opcode=0x0F00, fixed_g=5, e=1, skip=1, block_boundary=1),  # verw
    dict(opcode=0x0F01, fixed_g=0, e=1, skip=1, block_boundary=1),  # sgdt
    dict(opcode=0x0F01, fixed_g=1, e=1, skip=1, block_boundary=1),  # sidt
    dict(opcode=0x0F01, fixed_g=2, e=1, skip=1, block_boundary=1),  # lgdt
    dict(opcode=0x0F01, fixed_g=3, e=1, skip=1, block_boundary=1),  # lidt
    dict(opcode=0x0F01, fixed_g=4, e=1, skip=1, block_boundary=1),  # smsw
    dict(opcode=0x0F01, fixed_g=6, e=1, skip=1, block_boundary=1),  # lmsw
    dict(opcode=0x0F01, fixed_g=7, e=1, skip=1, block_boundary=1),  # invlpg
    dict(opcode=0x0F02, os=1, e=1, skip=1, block_boundary=1),  # lar
    dict(opcode=0x0F03, os=1, e=1, skip=1, block_boundary=1),  # lsl
    dict(opcode=0x0F06, skip=1, block_boundary=1),  # clts
    dict(opcode=0x0F0B, skip=1, block_boundary=1),  # ud2

    dict(opcode=0x0F18, e=1, custom=1),  # prefetch
    dict(opcode=0x0F20, ignore_mod=1, e=1, skip=1, block_boundary=1),  # mov reg, creg
    dict(opcode=0x0F21, ignore_mod=1, e=1, skip=1, block_boundary=1),  # mov reg, dreg
    dict(opcode=0x0F22, ignore_mod=1, e=1, skip=1, block_boundary=1),  # mov creg, reg
    dict(opcode=0x0F23, ignore_mod=1, e=1, skip=1, block_boundary=1),  # mov dreg, reg

    dict(opcode=0x0F30, skip=1, block_boundary=1),  # wrmsr
    dict(opcode=0x0F31, skip=1),  # rdtsc
    dict(opcode=0x0F32, skip=1, block_boundary=1),  # rdmsr
    dict(opcode=0x0F34, skip=1, block_boundary=1),  # sysenter
    dict(opcode=0x0F35, skip=1, block_boundary=1),  # sysexit

    dict(opcode=0x0F77),  # emms

    dict(opcode=0x0FA0, os=1, skip=1),  # push fs
    dict(opcode=0x0FA1, os=1, block_boundary=1, skip=1),  # pop fs
    dict(opcode=0x0FA2, skip=1),  # cpuid
    dict(opcode=0x0FA3, os=1, e=1),  # bt
    dict(opcode=0x0FA4, nonfaulting=1, os=1, e=1, imm8=1),  # shld
    dict(opcode=0x0FA5, nonfaulting=1, os=1, e=1),
    dict(opcode=0x0FA8, os=1, skip=1),  # push gs
    dict(opcode=0x0FA9, os=1, block_boundary=1, skip=1),  # pop gs
    dict(opcode=0x0FAA, skip=1, block_boundary=1),  # rsm
    dict(opcode=0x0FAB, os=1, e=1),  # bts
    dict(opcode=0x0FAC, nonfaulting=1, os=1, e=1, imm8=1),  # shrd
    dict(opcode=0x0FAD, nonfaulting=1, os=1, e=1),
    dict(opcode=0x0FAF, nonfaulting=1, os=1, e=1, custom=1),  # imul

    dict(opcode=0x0FB0, e=1),  # cmpxchg
    dict(opcode=0x0FB1, os=1, e=1),
    dict(opcode=0x0FB2, block_boundary=1, os=1, e=1, skip=1),  # lss
    dict(opcode=0x0FB3, os=1, e=1),  # btr
    dict(opcode=0x0FB4, block_boundary=1, os=1, e=1, skip=1),  # lfs
    dict(opcode=0x0FB5, block_boundary=1, os=1, e=1, skip=1),  # lgs
    dict(opcode=0x0FB6, nonfaulting=1, os=1, e=1),  # movzx
    dict(opcode=0x0FB7, nonfaulting=1, os=1, e=1),
    dict(opcode=0x0FB8, os=1, e=1, block_boundary=1),  # ud
    dict(opcode=0xF30FB8, os=1, e=1),  # popcnt
    dict(opcode=0x0FB9, skip=1, block_boundary=1),  # ud1
    dict(opcode=0x0FBA, os=1, e=1, fixed_g=4, imm8=1),  # bt
    dict(opcode=0x0FBA, os=1, e=1, fixed_g=5, imm8=1),  # bts
    dict(opcode=0x0FBA, os=1, e=1, fixed_g=6, imm8=1),  # btr
    dict(opcode=0x0FBA, os=1, e=1, fixed_g=7, imm8=1),  # btc
    dict(opcode=0x0FBB, os=1, e=1),  # btc
    dict(opcode=0x0FBC, nonfaulting=1, os=1, e=1),  # bsf
    dict(opcode=0x0FBD, nonfaulting=1, os=1, e=1),  # bsr
    dict(opcode=0x0FBE, nonfaulting=1, os=1, e=1, custom=1),  # movsx
    dict(opcode=0x0FBF, nonfaulting=1, os=1, e=1, custom=1),

    dict(opcode=0x0FC0, e=1),  # xadd
    dict(opcode=0x0FC1, os=1, e=1),
    dict(opcode=0x0FC3, e=1),  # movnti
    dict(opcode=0x0FC7, e=1, fixed_g=1),  # cmpxchg8b
    dict(opcode=0x0FC7, e=1, fixed_g=6, skip=1),  # rdrand
    dict(opcode=0x0FFF, skip=1, block_boundary=1),  # ud0
]


def _generated_entries() -> List[RawEntry]:
    entries: List[RawEntry] = []

    for i in range(8):
        entries.extend([
            dict(opcode=0x00 | i << 3, nonfaulting=1, e=1),
            dict(opcode=0x01 | i << 3, nonfaulting=1, os=1, e=1),
            dict(opcode=0x02 | i << 3, nonfaulting=1, e=1),
            dict(opcode=0x03 | i << 3, nonfaulting=1, os=1, e=1),
            dict(opcode=0x04 | i << 3, nonfaulting=1, imm8=1),
            dict(opcode=0x05 | i << 3, nonfaulting=1, os=1, imm1632=1),

            dict(opcode=0x40 | i, nonfaulting=1, os=1),  # inc
            dict(opcode=0x48 | i, nonfaulting=1, os=1),  # dec
            dict(opcode=0x50 | i, custom=1, os=1),  # push
            dict(opcode=0x58 | i, custom=1, os=1),  # pop

            dict(opcode=0x70 | i, block_boundary=1, os=1, imm8s=1, custom=1, skip=1),
            dict(opcode=0x78 | i, block_boundary=1, os=1, imm8s=1, custom=1, skip=1),

            dict(opcode=0x80, nonfaulting=1, e=1, fixed_g=i, imm8=1),
            dict(opcode=0x81, nonfaulting=1, os=1, e=1, fixed_g=i, imm1632=1),
            dict(opcode=0x82, nonfaulting=1, e=1, fixed_g=i, imm8=1),
            dict(opcode=0x83, nonfaulting=1, os=1, e=1, fixed_g=i, imm8s=1),

            dict(opcode=0xB0 | i, nonfaulting=1, imm8=1),
            dict(opcode=0xB8 | i, nonfaulting=1, os=1, imm1632=1),

            dict(opcode=0xC0, nonfaulting=1, e=1, fixed_g=i, imm8=1),
            dict(opcode=0xC1, nonfaulting=1, os=1, e=1, fixed_g=i, imm8=1),
            dict(opcode=0xD0, nonfaulting=1, e=1, fixed_g=i),
            dict(opcode=0xD1, nonfaulting=1, os=1, e=1, fixed_g=i),
            dict(opcode=0xD2, nonfaulting=1, e=1, fixed_g=i),
            dict(opcode=0xD3, nonfaulting=1, os=1, e=1, fixed_g=i),

            dict(opcode=0xD8 | i, e=1, skip=1),  # fpu escapes

            dict(opcode=0x0FAE, e=1, fixed_g=i, skip=1, block_boundary=1),  # fxsave etc

            dict(opcode=0x0F40 | i, nonfaulting=1, os=1, e=1, custom=1),  # cmovcc
            dict(opcode=0x0F48 | i, nonfaulting=1, os=1, e=1, custom=1),
            dict(opcode=0x0F80 | i, block_boundary=1, os=1, imm1632=1, custom=1, skip=1),
            dict(opcode=0x0F88 | i, block_boundary=1, os=1, imm1632=1, custom=1, skip=1),
            dict(opcode=0x0F90 | i, nonfaulting=1, e=1, custom=1),  # setcc
            dict(opcode=0x0F98 | i, nonfaulting=1, e=1, custom=1),
            dict(opcode=0x0FC8 | i, nonfaulting=1),  # bswap
        ])

    # xchg with eax
    for opcode in range(0x91, 0x98):
        entries.append(dict(opcode=opcode, nonfaulting=1, os=1))

    # undefined or unsupported slots of the 0x0F map
    for opcode in (
        0x0F04, 0x0F05, 0x0F07, 0x0F08, 0x0F09, 0x0F0A, 0x0F0C, 0x0F0D, 0x0F0E, 0x0F0F,
        0x0F24, 0x0F25, 0x0F26, 0x0F27, 0x0F33, 0x0F36, 0x0F37,
        0x0F38, 0x0F39, 0x0F3A, 0x0F3B, 0x0F3C, 0x0F3D, 0x0F3E, 0x0F3F,
        0x0F78, 0x0F79, 0x0F7A, 0x0F7B, 0x0F7C, 0x0F7D,
        0x0FA6, 0x0FA7, 0x0FD0, 0x0FF0,
    ):
        entries.append(dict(opcode=opcode, skip=1, block_boundary=1))

    # multi-byte nop
    for opcode in range(0x0F19, 0x0F20):
        entries.append(dict(opcode=opcode, nonfaulting=1, e=1))

    entries.extend(_sse_entries())
    return entries


def _sse_entries() -> List[RawEntry]:
    entries: List[RawEntry] = []

    entries += _sse(0x0F10, (0x66, 0xF2, 0xF3))  # movups/movupd/movsd/movss
    entries += _sse(0x0F11, (0x66, 0xF2, 0xF3))
    entries += _sse(0x0F12, (0x66, 0xF2, 0xF3))
    entries += _sse(0x0F13, (0x66,))
    entries += _sse(0x0F14, (0x66,))  # unpcklps
    entries += _sse(0x0F15, (0x66,))
    entries += _sse(0x0F16, (0x66, 0xF3))
    entries += _sse(0x0F17, (0x66,))

    entries += _sse(0x0F28, (0x66,))  # movaps
    entries += _sse(0x0F29, (0x66,))
    entries += _sse(0x0F2A, (0x66, 0xF2, 0xF3))  # cvtpi2ps
    entries += _sse(0x0F2B, (0x66,))
    entries += _sse(0x0F2C, (0x66, 0xF2, 0xF3))  # cvttps2pi
    entries += _sse(0x0F2D, (0x66, 0xF2, 0xF3))
    entries += _sse(0x0F2E, (0x66,))  # ucomiss
    entries += _sse(0x0F2F, (0x66,))  # comiss

    entries += _sse(0x0F50, (0x66,))  # movmskps
    entries += _sse(0x0F51, (0x66, 0xF2, 0xF3))  # sqrtps
    entries += _sse(0x0F52, (0xF3,))  # rsqrtps
    entries += _sse(0x0F53, (0xF3,))  # rcpps
    for opcode in range(0x0F54, 0x0F58):  # and/andn/or/xor
        entries += _sse(opcode, (0x66,))
    for opcode in (0x0F58, 0x0F59, 0x0F5A, 0x0F5C, 0x0F5D, 0x0F5E, 0x0F5F):
        entries += _sse(opcode, (0x66, 0xF2, 0xF3))
    entries += _sse(0x0F5B, (0x66, 0xF3))  # cvtdq2ps

    for opcode in range(0x0F60, 0x0F6F):  # punpck/pack/pcmpgt
        entries += _sse(opcode, (0x66,))
    entries += _sse(0x0F6F, (0x66, 0xF3))  # movq/movdqa/movdqu
    entries += _sse(0x0F70, (0x66, 0xF2, 0xF3), imm8=1)  # pshufw/pshufd/pshuflw/pshufhw

    for opcode, groups in ((0x0F71, (2, 4, 6)), (0x0F72, (2, 4, 6)), (0x0F73, (2, 6))):
        for fixed_g in groups:  # psrl/psra/psll by immediate
            entries += _sse(opcode, (0x66,), fixed_g=fixed_g, imm8=1)
    for fixed_g in (3, 7):  # psrldq/pslldq
        entries.append(dict(opcode=0x660F73, e=1, fixed_g=fixed_g, imm8=1))

    for opcode in (0x0F74, 0x0F75, 0x0F76):  # pcmpeq
        entries += _sse(opcode, (0x66,))
    entries += _sse(0x0F7E, (0x66, 0xF3))  # movd/movq
    entries += _sse(0x0F7F, (0x66, 0xF3))

    entries += _sse(0x0FC2, (0x66, 0xF2, 0xF3), imm8=1)  # cmpps
    entries += _sse(0x0FC4, (0x66,), imm8=1)  # pinsrw
    entries += _sse(0x0FC5, (0x66,), imm8=1)  # pextrw
    entries += _sse(0x0FC6, (0x66,), imm8=1)  # shufps

    for opcode in range(0x0FD1, 0x0FE6):
        if opcode != 0x0FD6:
            entries += _sse(opcode, (0x66,))
    entries += _sse(0x0FD6, (0x66, 0xF2, 0xF3))  # movq/movdq2q/movq2dq
    entries += _sse(0x0FE6, (0x66, 0xF2, 0xF3))  # cvttpd2dq
    for opcode in range(0x0FE7, 0x0FF0):
        entries += _sse(opcode, (0x66,))
    for opcode in range(0x0FF1, 0x0FFF):
        entries += _sse(opcode, (0x66,))

    return entries


def _build(entries: Iterable[Mapping[str, Any]]) -> Tuple[Encoding, ...]:
    return tuple(Encoding.from_mapping(entry) for entry in entries)


ENCODINGS: Tuple[Encoding, ...] = _build(_BASE_ENTRIES + _generated_entries())


def load_encoding_table(path: Optional[Path] = None) -> Tuple[Encoding, ...]:
    """Return the encoding table stored at ``path`` or the built-in one."""

    if path is None:
        return ENCODINGS

    try:
        payload = json.loads(path.read_text("utf-8"))
    except OSError as exc:
        raise InvalidEncodingError(f"cannot read encoding table {path}: {exc.strerror}") from exc
    except ValueError as exc:
        raise InvalidEncodingError(f"encoding table {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, list):
        raise InvalidEncodingError(f"encoding table {path} must contain a JSON array")
    for entry in payload:
        if not isinstance(entry, Mapping):
            raise InvalidEncodingError(f"encoding table {path} contains a non-object entry")
    return _build(payload)


__all__ = ["ENCODINGS", "load_encoding_table"]
