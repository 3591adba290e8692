"""Partition flat encoding records into per-opcode groups."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .encoding import EXTENDED_MARKER, MANDATORY_PREFIXES, Encoding, classify_encoding
from .errors import InvalidEncodingError, MissingCoverageError


logger = logging.getLogger(__name__)

MAP_SIZE = 0x100


@dataclass(frozen=True)
class GroupMember:
    """One ``fixed_g`` sibling together with its mandatory-prefix variants."""

    fixed_g: int
    base: Optional[Encoding]
    variants: Mapping[int, Encoding]

    @property
    def representative(self) -> Encoding:
        if self.base is not None:
            return self.base
        return self.variants[min(self.variants)]


@dataclass(frozen=True)
class OpcodeGroup:
    """All records sharing one opcode byte inside one opcode map."""

    opcode: int
    extended: bool
    encodings: Tuple[Encoding, ...]

    @property
    def base(self) -> Encoding:
        """Return the first unprefixed record, or the first record."""

        for encoding in self.encodings:
            if not encoding.mandatory_prefix:
                return encoding
        return self.encodings[0]

    @property
    def unprefixed(self) -> Optional[Encoding]:
        for encoding in self.encodings:
            if not encoding.mandatory_prefix:
                return encoding
        return None

    @property
    def os(self) -> bool:
        return self.base.os

    @property
    def is_group(self) -> bool:
        return self.base.fixed_g is not None

    @property
    def mandatory_prefixes(self) -> Tuple[int, ...]:
        present = {encoding.mandatory_prefix for encoding in self.encodings}
        return tuple(prefix for prefix in MANDATORY_PREFIXES if prefix in present)

    def variant(self, prefix: int) -> Encoding:
        for encoding in self.encodings:
            if encoding.mandatory_prefix == prefix:
                return encoding
        raise KeyError(prefix)

    def members(self) -> Tuple[GroupMember, ...]:
        """Return the ``fixed_g`` siblings sorted by their group index."""

        by_index: Dict[int, List[Encoding]] = defaultdict(list)
        for encoding in self.encodings:
            by_index[encoding.fixed_g].append(encoding)

        members = []
        for fixed_g in sorted(by_index):
            base = None
            variants: Dict[int, Encoding] = {}
            for encoding in by_index[fixed_g]:
                if encoding.mandatory_prefix:
                    variants[encoding.mandatory_prefix] = encoding
                else:
                    base = encoding
            members.append(GroupMember(fixed_g=fixed_g, base=base, variants=variants))
        return tuple(members)

    def label(self) -> str:
        escape = "0F" if self.extended else ""
        return f"{escape}{self.opcode:02X}"

    @property
    def full_opcode(self) -> int:
        return EXTENDED_MARKER << 8 | self.opcode if self.extended else self.opcode


@dataclass(frozen=True)
class OpcodeMaps:
    """The plain and the ``0x0F`` opcode maps, both indexed by opcode byte."""

    plain: Tuple[OpcodeGroup, ...]
    extended: Tuple[OpcodeGroup, ...]


def group_encodings(encodings: Iterable[Encoding]) -> OpcodeMaps:
    """Group ``encodings`` by opcode byte and check that both maps are total."""

    plain: Dict[int, List[Encoding]] = defaultdict(list)
    extended: Dict[int, List[Encoding]] = defaultdict(list)

    for encoding in encodings:
        classify_encoding(encoding)
        if encoding.opcode < MAP_SIZE:
            plain[encoding.opcode].append(encoding)
        elif encoding.is_extended:
            extended[encoding.opcode_byte].append(encoding)
        else:
            logger.debug("ignoring encoding outside of the supported maps: %s", encoding.label())

    return OpcodeMaps(
        plain=_build_map(plain, extended=False),
        extended=_build_map(extended, extended=True),
    )


def _build_map(records: Mapping[int, List[Encoding]], *, extended: bool) -> Tuple[OpcodeGroup, ...]:
    groups = []
    for opcode in range(MAP_SIZE):
        encodings = records.get(opcode)
        full_opcode = EXTENDED_MARKER << 8 | opcode if extended else opcode
        if not encodings:
            raise MissingCoverageError("opcode slot has no encoding", full_opcode)
        group = OpcodeGroup(opcode=opcode, extended=extended, encodings=tuple(encodings))
        _check_group(group)
        groups.append(group)
    logger.debug(
        "grouped %d records into the %s map",
        sum(len(group.encodings) for group in groups),
        "0F" if extended else "plain",
    )
    return tuple(groups)


def _check_group(group: OpcodeGroup) -> None:
    seen = set()
    grouped = {encoding.fixed_g is not None for encoding in group.encodings}
    if len(grouped) > 1:
        raise InvalidEncodingError(
            "fixed_g and non-fixed_g encodings share one opcode", group.full_opcode
        )
    for encoding in group.encodings:
        key = (encoding.mandatory_prefix, encoding.fixed_g)
        if key in seen:
            raise InvalidEncodingError(
                f"duplicate encoding {encoding.label()}", group.full_opcode
            )
        seen.add(key)
        if encoding.mandatory_prefix and encoding.mandatory_prefix not in MANDATORY_PREFIXES:
            raise InvalidEncodingError(
                f"unsupported mandatory prefix 0x{encoding.mandatory_prefix:02X}",
                group.full_opcode,
            )


__all__ = ["GroupMember", "OpcodeGroup", "OpcodeMaps", "group_encodings", "MAP_SIZE"]
