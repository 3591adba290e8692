"""Dataclasses describing the dispatch statement tree.

The tree is pure data: conditions, operands and fixed statements are
symbolic enums so the synthesizer never deals with target syntax.  Only
:mod:`x86jitgen.ir.printer` knows how they are spelled in C.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Iterator, Optional, Tuple, Union

from ..immediates import ImmediateRead


class Statement(Enum):
    """Fixed statements that carry no operands."""

    READ_MODRM = auto()
    LOAD_PREFIXES = auto()
    MARK_NONFAULTING = auto()
    MARK_BLOCK_BOUNDARY = auto()
    UNREACHABLE = auto()


class CallKind(Enum):
    """Calling convention of an :class:`IRCall`."""

    CODEGEN = auto()
    CODEGEN_MODRM = auto()
    DIRECT = auto()
    FLAGS = auto()


class Operand(Enum):
    """Values derived from the modrm byte."""

    MODRM_BYTE = auto()
    MODRM_RM = auto()
    MODRM_REG = auto()
    ZERO = auto()


class Condition(Enum):
    MODRM_MEMORY = auto()
    PREFIX_66 = auto()
    PREFIX_F2 = auto()
    PREFIX_F3 = auto()

    @classmethod
    def for_prefix(cls, prefix: int) -> "Condition":
        try:
            return {0x66: cls.PREFIX_66, 0xF2: cls.PREFIX_F2, 0xF3: cls.PREFIX_F3}[prefix]
        except KeyError:
            raise ValueError(f"not a mandatory prefix: 0x{prefix:02X}") from None


class Scrutinee(Enum):
    OPCODE = auto()
    MODRM_REG = auto()


Argument = Union[Operand, ImmediateRead]


def _describe_argument(argument: Argument) -> str:
    return argument.name.lower()


@dataclass(frozen=True)
class IRNode:
    """Base class for IR nodes.

    The dataclasses are frozen so identical subtrees compare equal and can
    be shared between tables.
    """


@dataclass(frozen=True)
class IRLiteral(IRNode):
    """Opaque fixed statement such as the modrm read or a flag marker."""

    statement: Statement

    def describe(self) -> str:
        return self.statement.name.lower()


@dataclass(frozen=True)
class IRCall(IRNode):
    """Call of a handler or runtime helper."""

    name: str
    args: Tuple[Argument, ...] = field(default_factory=tuple)
    kind: CallKind = CallKind.CODEGEN

    def describe(self) -> str:
        args = ", ".join(_describe_argument(arg) for arg in self.args)
        return f"call {self.kind.name.lower()} {self.name}({args})"


@dataclass(frozen=True)
class IRSequence(IRNode):
    nodes: Tuple[IRNode, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[IRNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def extend(self, *nodes: IRNode) -> "IRSequence":
        return IRSequence(self.nodes + tuple(nodes))

    def describe(self) -> str:
        return "{ " + "; ".join(node.describe() for node in self.nodes) + " }"


@dataclass(frozen=True)
class IRBranch:
    condition: Condition
    body: IRSequence


@dataclass(frozen=True)
class IRConditional(IRNode):
    """``if``/``else if`` chain; the first matching branch wins."""

    branches: Tuple[IRBranch, ...]
    else_body: Optional[IRSequence] = None

    def __post_init__(self) -> None:
        if not self.branches:
            raise ValueError("conditional requires at least one branch")

    def describe(self) -> str:
        parts = [
            f"{branch.condition.name.lower()} -> {branch.body.describe()}"
            for branch in self.branches
        ]
        if self.else_body is not None:
            parts.append(f"else -> {self.else_body.describe()}")
        return "if [" + ", ".join(parts) + "]"


@dataclass(frozen=True)
class IRCase:
    labels: Tuple[int, ...]
    body: IRSequence

    def __post_init__(self) -> None:
        if not self.labels:
            raise ValueError("switch case requires at least one label")


@dataclass(frozen=True)
class IRSwitch(IRNode):
    scrutinee: Scrutinee
    cases: Tuple[IRCase, ...]
    default: IRSequence

    def labels(self) -> Tuple[int, ...]:
        return tuple(label for case in self.cases for label in case.labels)

    def case_for(self, label: int) -> IRCase:
        for case in self.cases:
            if label in case.labels:
                return case
        raise KeyError(label)

    def describe(self) -> str:
        labels = ", ".join(f"0x{label:02X}" for label in self.labels())
        return f"switch {self.scrutinee.name.lower()} cases=[{labels}]"


def sequence(*nodes: IRNode) -> IRSequence:
    """Build a sequence, splicing nested sequences into it."""

    flat = []
    for node in nodes:
        if isinstance(node, IRSequence):
            flat.extend(node.nodes)
        else:
            flat.append(node)
    return IRSequence(tuple(flat))


READ_MODRM = IRLiteral(Statement.READ_MODRM)
LOAD_PREFIXES = IRLiteral(Statement.LOAD_PREFIXES)
MARK_NONFAULTING = IRLiteral(Statement.MARK_NONFAULTING)
MARK_BLOCK_BOUNDARY = IRLiteral(Statement.MARK_BLOCK_BOUNDARY)
UNREACHABLE = IRLiteral(Statement.UNREACHABLE)


__all__ = [
    "Statement",
    "CallKind",
    "Operand",
    "Condition",
    "Scrutinee",
    "Argument",
    "IRNode",
    "IRLiteral",
    "IRCall",
    "IRSequence",
    "IRBranch",
    "IRConditional",
    "IRCase",
    "IRSwitch",
    "sequence",
    "READ_MODRM",
    "LOAD_PREFIXES",
    "MARK_NONFAULTING",
    "MARK_BLOCK_BOUNDARY",
    "UNREACHABLE",
]
