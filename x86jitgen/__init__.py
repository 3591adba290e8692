"""Public package exports for the x86 dispatch-table generator."""

from .assembler import TableAssembler, TableKind, build_tables
from .encoding import Encoding, EncodingShape, classify_encoding
from .errors import (
    GenerationError,
    IllegalFlagCombinationError,
    InvalidEncodingError,
    MissingCoverageError,
    UsageError,
)
from .grouper import OpcodeGroup, OpcodeMaps, group_encodings
from .immediates import ImmediatePlan, ImmediateRead, plan_immediates, resolve_operand_size
from .ir import CTextRenderer, serialize_node
from .naming import handler_symbols, instruction_name
from .output import finalize_table
from .synthesizer import BodySynthesizer, Strategy, select_strategy
from .table import ENCODINGS, load_encoding_table

__all__ = [
    "Encoding",
    "EncodingShape",
    "classify_encoding",
    "ENCODINGS",
    "load_encoding_table",
    "OpcodeGroup",
    "OpcodeMaps",
    "group_encodings",
    "ImmediatePlan",
    "ImmediateRead",
    "plan_immediates",
    "resolve_operand_size",
    "instruction_name",
    "handler_symbols",
    "BodySynthesizer",
    "Strategy",
    "select_strategy",
    "TableAssembler",
    "TableKind",
    "build_tables",
    "CTextRenderer",
    "serialize_node",
    "finalize_table",
    "GenerationError",
    "MissingCoverageError",
    "IllegalFlagCombinationError",
    "InvalidEncodingError",
    "UsageError",
]
