"""Encoding records and their dispatch-shape classification."""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum, auto
from typing import Any, Mapping, Optional

from .errors import IllegalFlagCombinationError, InvalidEncodingError, format_opcode


EXTENDED_MARKER = 0x0F
MANDATORY_PREFIXES = (0x66, 0xF2, 0xF3)
LEA_OPCODE = 0x8D

PRIMARY_IMMEDIATE_FIELDS = ("imm8", "imm8s", "imm16", "imm1632", "imm32", "immaddr")
SECONDARY_IMMEDIATE_FIELDS = ("extra_imm16", "extra_imm8")


class EncodingShape(Enum):
    """Closed set of dispatch shapes, one per synthesis strategy."""

    GROUP_MEMBER = auto()
    IGNORE_MOD = auto()
    ADDRESS_COMPUTATION = auto()
    MODRM = auto()
    PREFIX = auto()
    CUSTOM = auto()
    BARE = auto()


@dataclass(frozen=True)
class Encoding:
    """One logical x86 instruction form.

    ``opcode`` packs the opcode byte in bits 0-7, the ``0x0F`` escape in
    bits 8-15 for the extended map and an optional mandatory prefix in
    bits 16-23 (``0x660F10``).
    """

    opcode: int
    os: bool = False
    e: bool = False
    fixed_g: Optional[int] = None
    ignore_mod: bool = False
    imm8: bool = False
    imm8s: bool = False
    imm16: bool = False
    imm1632: bool = False
    imm32: bool = False
    immaddr: bool = False
    extra_imm16: bool = False
    extra_imm8: bool = False
    prefix: bool = False
    custom: bool = False
    nonfaulting: bool = False
    block_boundary: bool = False
    skip: bool = False

    def __post_init__(self) -> None:
        if not 0 <= self.opcode <= 0xFFFFFF:
            raise InvalidEncodingError("opcode must fit in three bytes", self.opcode)

    @property
    def opcode_byte(self) -> int:
        return self.opcode & 0xFF

    @property
    def escape(self) -> int:
        return (self.opcode >> 8) & 0xFF

    @property
    def mandatory_prefix(self) -> int:
        return (self.opcode >> 16) & 0xFF

    @property
    def is_extended(self) -> bool:
        return self.escape == EXTENDED_MARKER

    @property
    def has_modrm(self) -> bool:
        return self.e or self.fixed_g is not None

    @property
    def has_immediate(self) -> bool:
        return any(getattr(self, name) for name in PRIMARY_IMMEDIATE_FIELDS)

    @property
    def shape(self) -> EncodingShape:
        return classify_encoding(self)

    def label(self) -> str:
        text = format_opcode(self.opcode)
        if self.fixed_g is not None:
            text += f"/{self.fixed_g}"
        return text

    @classmethod
    def from_mapping(cls, entry: Mapping[str, Any]) -> "Encoding":
        """Build a record from a loosely typed mapping (JSON style flags)."""

        opcode = entry.get("opcode")
        known_opcode = opcode if _is_integer(opcode) else None
        known = {item.name for item in fields(cls)}
        unknown = sorted(set(entry) - known)
        if unknown:
            raise InvalidEncodingError(
                f"unknown encoding field(s): {', '.join(unknown)}", known_opcode
            )
        if "opcode" not in entry:
            raise InvalidEncodingError("encoding without opcode")

        values = {}
        for name, value in entry.items():
            if name == "opcode" or (name == "fixed_g" and value is not None):
                if not _is_integer(value):
                    raise InvalidEncodingError(
                        f"{name} must be an integer, got {value!r}", known_opcode
                    )
                values[name] = value
            elif name == "fixed_g":
                values[name] = None
            else:
                values[name] = bool(value)
        return cls(**values)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def classify_encoding(encoding: Encoding) -> EncodingShape:
    """Return the single dispatch shape of ``encoding``.

    Raises :class:`IllegalFlagCombinationError` for records whose flags do
    not describe exactly one shape.
    """

    opcode = encoding.opcode
    primaries = [name for name in PRIMARY_IMMEDIATE_FIELDS if getattr(encoding, name)]
    if len(primaries) > 1:
        raise IllegalFlagCombinationError(
            f"more than one primary immediate ({', '.join(primaries)})", opcode
        )
    if encoding.extra_imm16 and encoding.extra_imm8:
        raise IllegalFlagCombinationError("both extra_imm16 and extra_imm8 declared", opcode)
    if (encoding.extra_imm16 or encoding.extra_imm8) and not primaries:
        raise IllegalFlagCombinationError("secondary immediate without a primary one", opcode)

    if encoding.fixed_g is not None:
        if not 0 <= encoding.fixed_g <= 7:
            raise IllegalFlagCombinationError(
                f"fixed_g {encoding.fixed_g} outside of 0-7", opcode
            )
        if encoding.ignore_mod:
            raise IllegalFlagCombinationError("ignore_mod inside a fixed_g group", opcode)
        if encoding.prefix:
            raise IllegalFlagCombinationError("prefix instruction inside a fixed_g group", opcode)
        if encoding.custom and encoding.nonfaulting:
            raise IllegalFlagCombinationError(
                "custom fixed_g instruction marked as nonfaulting", opcode
            )
        return EncodingShape.GROUP_MEMBER

    if encoding.ignore_mod:
        if not encoding.e:
            raise IllegalFlagCombinationError("ignore_mod without a modrm byte", opcode)
        if primaries:
            raise IllegalFlagCombinationError("ignore_mod with an immediate operand", opcode)
        return EncodingShape.IGNORE_MOD

    if encoding.e:
        if encoding.prefix:
            raise IllegalFlagCombinationError("prefix instruction with a modrm byte", opcode)
        if opcode == LEA_OPCODE:
            return EncodingShape.ADDRESS_COMPUTATION
        return EncodingShape.MODRM

    if encoding.prefix or encoding.custom:
        if encoding.nonfaulting:
            raise IllegalFlagCombinationError(
                "prefix/custom instructions cannot be marked as nonfaulting", opcode
            )
        return EncodingShape.PREFIX if encoding.prefix else EncodingShape.CUSTOM

    return EncodingShape.BARE


__all__ = [
    "EXTENDED_MARKER",
    "MANDATORY_PREFIXES",
    "LEA_OPCODE",
    "EncodingShape",
    "Encoding",
    "classify_encoding",
]
