"""Build the dispatch body of one opcode slot.

For every opcode group and requested operand size the synthesizer picks a
single strategy and returns a pure :class:`~x86jitgen.ir.model.IRSequence`:

``MANDATORY_PREFIX``
    read modrm, test the 66/F2/F3 prefix flags in that order and dispatch
    to the matching variant, the unprefixed record being the fallback.
``OPCODE_EXTENSION``
    read modrm and switch on its register field (``fixed_g`` groups).
``IGNORE_MOD``
    both operands are registers, one call with both register fields.
``ADDRESS_COMPUTATION``
    LEA: the memory form computes an address and never dereferences it,
    the register form has no valid encoding.
``MODRM``
    split on the addressing mode into a memory and a register handler.
``PREFIX_CUSTOM``
    one direct call; prefix handlers OR their result into the flags.
``BARE``
    one code generation call with the immediates as arguments.

Memory operands can fault on a bad address, so the nonfaulting marker is
only ever attached to the register form (except for LEA, whose memory form
does not access memory).
"""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import List, Optional, Sequence, Tuple

from .encoding import MANDATORY_PREFIXES, Encoding, EncodingShape, classify_encoding
from .errors import IllegalFlagCombinationError
from .grouper import GroupMember, OpcodeGroup
from .immediates import plan_immediates
from .ir.model import (
    MARK_BLOCK_BOUNDARY,
    MARK_NONFAULTING,
    LOAD_PREFIXES,
    READ_MODRM,
    UNREACHABLE,
    Argument,
    CallKind,
    Condition,
    IRBranch,
    IRCall,
    IRCase,
    IRConditional,
    IRNode,
    IRSequence,
    IRSwitch,
    Operand,
    Scrutinee,
    sequence,
)
from .naming import instruction_name


logger = logging.getLogger(__name__)

RESOLVE_MODRM = IRCall("gen_modrm_resolve", (Operand.MODRM_BYTE,), CallKind.DIRECT)
TRIGGER_UD = IRCall("trigger_ud")


class Strategy(Enum):
    MANDATORY_PREFIX = auto()
    OPCODE_EXTENSION = auto()
    IGNORE_MOD = auto()
    ADDRESS_COMPUTATION = auto()
    MODRM = auto()
    PREFIX_CUSTOM = auto()
    BARE = auto()


SHAPE_STRATEGIES = {
    EncodingShape.GROUP_MEMBER: Strategy.OPCODE_EXTENSION,
    EncodingShape.IGNORE_MOD: Strategy.IGNORE_MOD,
    EncodingShape.ADDRESS_COMPUTATION: Strategy.ADDRESS_COMPUTATION,
    EncodingShape.MODRM: Strategy.MODRM,
    EncodingShape.PREFIX: Strategy.PREFIX_CUSTOM,
    EncodingShape.CUSTOM: Strategy.PREFIX_CUSTOM,
    EncodingShape.BARE: Strategy.BARE,
}


def select_strategy(group: OpcodeGroup) -> Strategy:
    """Return the strategy used for ``group``."""

    if group.is_group:
        return Strategy.OPCODE_EXTENSION
    if group.mandatory_prefixes:
        return Strategy.MANDATORY_PREFIX
    return SHAPE_STRATEGIES[classify_encoding(group.base)]


def trap_body() -> IRSequence:
    """Body used for register-field values without an encoding."""

    return sequence(UNREACHABLE, TRIGGER_UD)


class BodySynthesizer:
    """Translate opcode groups into dispatch statement trees."""

    def synthesize(self, group: OpcodeGroup, size: Optional[int]) -> IRSequence:
        """Return the body of ``group`` for the requested operand ``size``."""

        for encoding in group.encodings:
            classify_encoding(encoding)
        strategy = select_strategy(group)
        logger.debug("%s size=%s: %s", group.label(), size, strategy.name.lower())

        if group.mandatory_prefixes:
            self._check_prefixed_group(group)

        if strategy is Strategy.OPCODE_EXTENSION:
            return self._opcode_extension(group, size)
        if strategy is Strategy.MANDATORY_PREFIX:
            body = sequence(
                READ_MODRM,
                LOAD_PREFIXES,
                self._prefix_dispatch(group.unprefixed, self._variants(group), size),
            )
            return body.extend(*self._block_boundary(group.base))

        encoding = group.base
        if strategy is Strategy.IGNORE_MOD:
            body = self._ignore_mod(encoding, size)
        elif strategy is Strategy.ADDRESS_COMPUTATION:
            body = self._address_computation(encoding, size)
        elif strategy is Strategy.MODRM:
            body = self._modrm(encoding, size)
        elif strategy is Strategy.PREFIX_CUSTOM:
            body = self._prefix_custom(encoding, size)
        else:
            body = self._bare(encoding, size)
        return body

    # ------------------------------------------------------------------
    # strategies
    # ------------------------------------------------------------------
    def _opcode_extension(self, group: OpcodeGroup, size: Optional[int]) -> IRSequence:
        cases = tuple(
            IRCase(labels=(member.fixed_g,), body=self._group_case(member, size))
            for member in group.members()
        )
        switch = IRSwitch(scrutinee=Scrutinee.MODRM_REG, cases=cases, default=trap_body())
        return sequence(READ_MODRM, switch)

    def _group_case(self, member: GroupMember, size: Optional[int]) -> IRSequence:
        postfix = self._block_boundary(member.representative)
        if member.variants:
            variants = [
                (prefix, member.variants[prefix])
                for prefix in MANDATORY_PREFIXES
                if prefix in member.variants
            ]
            dispatch = self._prefix_dispatch(member.base, variants, size)
            return sequence(LOAD_PREFIXES, dispatch, *postfix)

        encoding = member.base
        return sequence(
            self._group_split(encoding, size, prefix=None, nonfaulting=encoding.nonfaulting),
            *postfix,
        )

    def _group_split(
        self,
        encoding: Encoding,
        size: Optional[int],
        *,
        prefix: Optional[int],
        nonfaulting: bool,
    ) -> IRConditional:
        immediates = plan_immediates(encoding, size).reads()
        name = instruction_name(encoding, size, prefix)
        mem_args: Tuple[Argument, ...] = immediates
        reg_args: Tuple[Argument, ...] = (Operand.MODRM_RM,) + immediates
        if encoding.custom:
            mem_args += (Operand.MODRM_BYTE,)
        return self._split(
            name,
            mem_args,
            reg_args,
            custom=encoding.custom,
            reg_postfix=(MARK_NONFAULTING,) if nonfaulting else (),
        )

    def _prefix_dispatch(
        self,
        fallback: Optional[Encoding],
        variants: Sequence[Tuple[int, Encoding]],
        size: Optional[int],
    ) -> IRConditional:
        branches = tuple(
            IRBranch(
                condition=Condition.for_prefix(prefix),
                body=sequence(self._prefixed_split(encoding, size, prefix)),
            )
            for prefix, encoding in variants
        )
        if fallback is None:
            else_body = trap_body()
        else:
            else_body = sequence(self._prefixed_split(fallback, size, None))
        return IRConditional(branches=branches, else_body=else_body)

    def _prefixed_split(
        self, encoding: Encoding, size: Optional[int], prefix: Optional[int]
    ) -> IRConditional:
        if encoding.fixed_g is not None:
            return self._group_split(encoding, size, prefix=prefix, nonfaulting=False)
        immediates = plan_immediates(encoding, size).reads()
        return self._split(
            instruction_name(encoding, size, prefix),
            (Operand.MODRM_REG,) + immediates,
            (Operand.MODRM_RM, Operand.MODRM_REG) + immediates,
        )

    def _ignore_mod(self, encoding: Encoding, size: Optional[int]) -> IRSequence:
        call = IRCall(
            instruction_name(encoding, size),
            (Operand.MODRM_RM, Operand.MODRM_REG),
        )
        return sequence(READ_MODRM, call, *self._postfix(encoding))

    def _address_computation(self, encoding: Encoding, size: Optional[int]) -> IRSequence:
        name = instruction_name(encoding, size)
        mem_body = sequence(IRCall(f"{name}_mem_jit", (Operand.MODRM_BYTE,), CallKind.DIRECT))
        if encoding.nonfaulting:
            mem_body = mem_body.extend(MARK_NONFAULTING)
        reg_body = sequence(IRCall(f"{name}_reg", (Operand.ZERO, Operand.ZERO)))
        split = IRConditional(
            branches=(IRBranch(Condition.MODRM_MEMORY, mem_body),),
            else_body=reg_body,
        )
        return sequence(READ_MODRM, split, *self._block_boundary(encoding))

    def _modrm(self, encoding: Encoding, size: Optional[int]) -> IRSequence:
        immediates = plan_immediates(encoding, size).reads()
        split = self._split(
            instruction_name(encoding, size),
            (Operand.MODRM_REG,) + immediates,
            (Operand.MODRM_RM, Operand.MODRM_REG) + immediates,
            reg_postfix=(MARK_NONFAULTING,) if encoding.nonfaulting else (),
        )
        return sequence(READ_MODRM, split, *self._block_boundary(encoding))

    def _prefix_custom(self, encoding: Encoding, size: Optional[int]) -> IRSequence:
        kind = CallKind.FLAGS if encoding.prefix else CallKind.DIRECT
        call = IRCall(
            instruction_name(encoding, size) + "_jit",
            plan_immediates(encoding, size).reads(),
            kind,
        )
        return sequence(call, *self._block_boundary(encoding))

    def _bare(self, encoding: Encoding, size: Optional[int]) -> IRSequence:
        call = IRCall(instruction_name(encoding, size), plan_immediates(encoding, size).reads())
        return sequence(call, *self._postfix(encoding))

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _split(
        name: str,
        mem_args: Tuple[Argument, ...],
        reg_args: Tuple[Argument, ...],
        *,
        custom: bool = False,
        reg_postfix: Tuple[IRNode, ...] = (),
    ) -> IRConditional:
        if custom:
            mem_body = sequence(IRCall(f"{name}_jit_mem", mem_args, CallKind.DIRECT))
            reg_call = IRCall(f"{name}_jit_reg", reg_args, CallKind.DIRECT)
        else:
            mem_body = sequence(
                RESOLVE_MODRM,
                IRCall(f"{name}_mem", mem_args, CallKind.CODEGEN_MODRM),
            )
            reg_call = IRCall(f"{name}_reg", reg_args, CallKind.CODEGEN)
        return IRConditional(
            branches=(IRBranch(Condition.MODRM_MEMORY, mem_body),),
            else_body=sequence(reg_call, *reg_postfix),
        )

    @staticmethod
    def _block_boundary(encoding: Encoding) -> Tuple[IRNode, ...]:
        return (MARK_BLOCK_BOUNDARY,) if encoding.block_boundary else ()

    def _postfix(self, encoding: Encoding) -> Tuple[IRNode, ...]:
        nonfaulting = (MARK_NONFAULTING,) if encoding.nonfaulting else ()
        return self._block_boundary(encoding) + nonfaulting

    def _variants(self, group: OpcodeGroup) -> List[Tuple[int, Encoding]]:
        return [(prefix, group.variant(prefix)) for prefix in group.mandatory_prefixes]

    @staticmethod
    def _check_prefixed_group(group: OpcodeGroup) -> None:
        for encoding in group.encodings:
            if encoding.nonfaulting:
                raise IllegalFlagCombinationError(
                    "instruction with 66/F2/F3 prefix marked as nonfaulting",
                    group.full_opcode,
                )
            if not encoding.has_modrm or encoding.ignore_mod:
                raise IllegalFlagCombinationError(
                    "mandatory-prefix instruction without a regular modrm byte",
                    group.full_opcode,
                )


__all__ = ["BodySynthesizer", "Strategy", "select_strategy", "trap_body", "RESOLVE_MODRM"]
