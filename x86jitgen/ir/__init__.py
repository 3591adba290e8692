"""Public exports for the dispatch statement tree."""

from .model import (
    Argument,
    CallKind,
    Condition,
    IRBranch,
    IRCall,
    IRCase,
    IRConditional,
    IRLiteral,
    IRNode,
    IRSequence,
    IRSwitch,
    Operand,
    Scrutinee,
    Statement,
    sequence,
)
from .printer import CTextRenderer
from .serialize import serialize_node

__all__ = [
    "Argument",
    "CallKind",
    "Condition",
    "IRBranch",
    "IRCall",
    "IRCase",
    "IRConditional",
    "IRLiteral",
    "IRNode",
    "IRSequence",
    "IRSwitch",
    "Operand",
    "Scrutinee",
    "Statement",
    "sequence",
    "CTextRenderer",
    "serialize_node",
]
