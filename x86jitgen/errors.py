"""Error taxonomy shared by every generation stage.

Generation is a build-time gate: a failure means the encoding table or the
command line is inconsistent and the run must stop before anything is
written.  Each category is its own exception type so callers (and tests)
can tell which invariant was violated.
"""

from __future__ import annotations

from typing import Optional


class GenerationError(ValueError):
    """Base class for every fatal generation-time failure."""

    def __init__(self, rule: str, opcode: Optional[int] = None) -> None:
        self.rule = rule
        self.opcode = opcode
        super().__init__(self.describe())

    def describe(self) -> str:
        if self.opcode is None:
            return self.rule
        return f"opcode {format_opcode(self.opcode)}: {self.rule}"


def format_opcode(opcode: int) -> str:
    """Format ``opcode`` with a whole number of bytes (``0x05``, ``0x0F10``)."""

    digits = 2
    while opcode >> (digits * 4) and digits < 6:
        digits += 2
    return f"0x{opcode:0{digits}X}"


class MissingCoverageError(GenerationError):
    """An opcode slot of a total map has no encoding record."""


class IllegalFlagCombinationError(GenerationError):
    """An encoding record (or opcode group) carries contradictory flags."""


class InvalidEncodingError(GenerationError):
    """Malformed record data such as an unknown field or bad opcode."""


class UsageError(GenerationError):
    """The command line did not select anything to generate."""


__all__ = [
    "GenerationError",
    "format_opcode",
    "MissingCoverageError",
    "IllegalFlagCombinationError",
    "InvalidEncodingError",
    "UsageError",
]
