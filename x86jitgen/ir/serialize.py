"""Helpers to serialise dispatch trees for offline inspection."""

from __future__ import annotations

from typing import Any, Dict

from .model import (
    Argument,
    IRCall,
    IRConditional,
    IRLiteral,
    IRNode,
    IRSequence,
    IRSwitch,
)


def serialize_node(node: IRNode) -> Dict[str, Any]:
    """Serialise an IR node into a dictionary with explicit type tags."""

    if isinstance(node, IRLiteral):
        return {"op": "literal", "statement": node.statement.name.lower()}
    if isinstance(node, IRCall):
        return {
            "op": "call",
            "name": node.name,
            "kind": node.kind.name.lower(),
            "args": [serialize_argument(arg) for arg in node.args],
        }
    if isinstance(node, IRSequence):
        return {"op": "sequence", "nodes": [serialize_node(child) for child in node.nodes]}
    if isinstance(node, IRConditional):
        return {
            "op": "if",
            "branches": [
                {
                    "condition": branch.condition.name.lower(),
                    "body": serialize_node(branch.body),
                }
                for branch in node.branches
            ],
            "else": None if node.else_body is None else serialize_node(node.else_body),
        }
    if isinstance(node, IRSwitch):
        return {
            "op": "switch",
            "scrutinee": node.scrutinee.name.lower(),
            "cases": [
                {"labels": list(case.labels), "body": serialize_node(case.body)}
                for case in node.cases
            ],
            "default": serialize_node(node.default),
        }
    raise TypeError(f"unsupported IR node type: {type(node)!r}")


def serialize_argument(argument: Argument) -> str:
    """Return the lower-case tag of a call argument (operand or immediate)."""

    return argument.name.lower()


__all__ = ["serialize_node", "serialize_argument"]
