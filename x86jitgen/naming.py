"""Canonical handler names for generated dispatch code.

Every handler the generated tables call is named after the encoding it
implements::

    instr(16|32|)_((66|F2|F3)?0F)?[0-9A-F]{2}(_[0-7])?(_jit_mem|_jit_reg|_mem_jit|_mem|_reg|_jit|)

The operand-size suffix only appears for ``os`` records, the mandatory
prefix and the ``0F`` marker only for records of the extended map and the
trailing ``_N`` only for members of an opcode-extension group.  Two
distinct (map, prefix, size, opcode, group) tuples therefore never share a
name.  The ``_mem``/``_reg`` and ``_jit`` suffixes are appended by the
synthesizer when it picks an operand form and calling convention.
"""

from __future__ import annotations

from typing import Iterator, List, Optional

from .encoding import Encoding
from .ir.model import IRCall, IRConditional, IRNode, IRSequence, IRSwitch


RUNTIME_HELPERS = frozenset({"gen_modrm_resolve", "trigger_ud"})


def hex_byte(value: int) -> str:
    return f"{value & 0xFF:02X}"


def instruction_name(
    encoding: Encoding,
    size: Optional[int],
    prefix: Optional[int] = None,
) -> str:
    """Return the handler base name for ``encoding`` at operand ``size``.

    ``prefix`` selects the mandatory-prefix variant; ``None`` names the
    unprefixed form.
    """

    suffix = str(size) if encoding.os and size is not None else ""
    prefix_hex = hex_byte(prefix) if prefix else ""
    escape = "0F" if encoding.is_extended else ""
    group = f"_{encoding.fixed_g}" if encoding.fixed_g is not None else ""
    return f"instr{suffix}_{prefix_hex}{escape}{hex_byte(encoding.opcode)}{group}"


def iter_calls(node: IRNode) -> Iterator[IRCall]:
    """Yield every :class:`IRCall` reachable from ``node`` in tree order."""

    if isinstance(node, IRCall):
        yield node
    elif isinstance(node, IRSequence):
        for child in node.nodes:
            yield from iter_calls(child)
    elif isinstance(node, IRConditional):
        for branch in node.branches:
            yield from iter_calls(branch.body)
        if node.else_body is not None:
            yield from iter_calls(node.else_body)
    elif isinstance(node, IRSwitch):
        for case in node.cases:
            yield from iter_calls(case.body)
        yield from iter_calls(node.default)


def handler_symbols(node: IRNode) -> List[str]:
    """Return the sorted, distinct handler symbols referenced by ``node``."""

    return sorted({call.name for call in iter_calls(node) if call.name not in RUNTIME_HELPERS})


__all__ = [
    "RUNTIME_HELPERS",
    "hex_byte",
    "instruction_name",
    "iter_calls",
    "handler_symbols",
]
