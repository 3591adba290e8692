"""Render the dispatch statement tree as C source text."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from ..immediates import ImmediateRead
from .model import (
    Argument,
    CallKind,
    Condition,
    IRCall,
    IRConditional,
    IRLiteral,
    IRNode,
    IRSequence,
    IRSwitch,
    Operand,
    Scrutinee,
    Statement,
)


INDENT = "    "

STATEMENTS = {
    Statement.READ_MODRM: "int32_t modrm_byte = read_imm8();",
    Statement.LOAD_PREFIXES: "int32_t prefixes_ = *prefixes;",
    Statement.MARK_NONFAULTING: "instr_flags |= JIT_INSTR_NONFAULTING_FLAG;",
    Statement.MARK_BLOCK_BOUNDARY: "instr_flags |= JIT_INSTR_BLOCK_BOUNDARY_FLAG;",
    Statement.UNREACHABLE: "assert(false);",
}

ARGUMENTS = {
    Operand.MODRM_BYTE: "modrm_byte",
    Operand.MODRM_RM: "modrm_byte & 7",
    Operand.MODRM_REG: "modrm_byte >> 3 & 7",
    Operand.ZERO: "0",
    ImmediateRead.IMM8: "read_imm8()",
    ImmediateRead.IMM8S: "read_imm8s()",
    ImmediateRead.IMM16: "read_imm16()",
    ImmediateRead.IMM32S: "read_imm32s()",
    ImmediateRead.MOFFS: "read_moffs()",
}

CONDITIONS = {
    Condition.MODRM_MEMORY: "modrm_byte < 0xC0",
    Condition.PREFIX_66: "prefixes_ & PREFIX_66",
    Condition.PREFIX_F2: "prefixes_ & PREFIX_F2",
    Condition.PREFIX_F3: "prefixes_ & PREFIX_F3",
}

SCRUTINEES = {
    Scrutinee.OPCODE: "opcode",
    Scrutinee.MODRM_REG: "modrm_byte >> 3 & 7",
}


class CTextRenderer:
    """Render IR trees into the C fragments included by the recompiler."""

    def render(self, node: IRNode) -> str:
        return "\n".join(self.render_lines(node)) + "\n"

    def write(self, node: IRNode, output_path: Path) -> None:
        output_path.write_text(self.render(node), "utf-8")

    def render_lines(self, node: IRNode) -> List[str]:
        return list(self._render_node(node))

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _render_node(self, node: IRNode) -> Iterable[str]:
        if isinstance(node, IRSequence):
            for child in node.nodes:
                yield from self._render_node(child)
        elif isinstance(node, IRLiteral):
            yield STATEMENTS[node.statement]
        elif isinstance(node, IRCall):
            yield self._render_call(node)
        elif isinstance(node, IRConditional):
            yield from self._render_conditional(node)
        elif isinstance(node, IRSwitch):
            yield from self._render_switch(node)
        else:
            raise TypeError(f"unsupported IR node type: {type(node)!r}")

    def _render_call(self, call: IRCall) -> str:
        args = [self._render_argument(arg) for arg in call.args]
        symbol = [f'"{call.name}"', str(len(call.name))]
        if call.kind is CallKind.CODEGEN:
            return self._format_call(f"gen_fn{len(args)}", symbol + args)
        if call.kind is CallKind.CODEGEN_MODRM:
            return self._format_call(f"gen_modrm_fn{len(args)}", symbol + args)
        if call.kind is CallKind.FLAGS:
            return "instr_flags |= " + self._format_call(call.name, args)
        return self._format_call(call.name, args)

    @staticmethod
    def _format_call(name: str, args: List[str]) -> str:
        return f"{name}({', '.join(args)});"

    @staticmethod
    def _render_argument(argument: Argument) -> str:
        try:
            return ARGUMENTS[argument]
        except KeyError:
            raise TypeError(f"unsupported call argument: {argument!r}") from None

    def _render_block(self, body: IRSequence) -> Iterable[str]:
        yield "{"
        yield from self._indent(self._render_node(body))
        yield "}"

    def _render_conditional(self, node: IRConditional) -> Iterable[str]:
        for index, branch in enumerate(node.branches):
            keyword = "if" if index == 0 else "else if"
            yield f"{keyword}({CONDITIONS[branch.condition]})"
            yield from self._render_block(branch.body)
        if node.else_body is not None:
            yield "else"
            yield from self._render_block(node.else_body)

    def _render_switch(self, node: IRSwitch) -> Iterable[str]:
        lines: List[str] = []
        for case in node.cases:
            for label in case.labels:
                lines.append(f"case {self._format_label(node.scrutinee, label)}:")
            lines.extend(self._render_block(case.body))
            lines.append("break;")
        lines.append("default:")
        lines.extend(self._indent(self._render_node(node.default)))

        yield f"switch({SCRUTINEES[node.scrutinee]})"
        yield "{"
        yield from self._indent(lines)
        yield "}"

    @staticmethod
    def _format_label(scrutinee: Scrutinee, label: int) -> str:
        if scrutinee is Scrutinee.MODRM_REG:
            return str(label)
        if label > 0xFF:
            return f"0x{label & 0xFF:02X}|0x{label & ~0xFF:X}"
        return f"0x{label:02X}"

    @staticmethod
    def _indent(lines: Iterable[str]) -> Iterable[str]:
        for line in lines:
            yield INDENT + line


__all__ = ["CTextRenderer"]
