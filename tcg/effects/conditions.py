"""Condition evaluator.

Recursively evaluates a ``ConditionExpr`` against an ``EffectContext``.
AND/OR operands are evaluated left to right with short-circuiting, so a
CUSTOM predicate with side effects always sees the same order.
"""

from __future__ import annotations

import logging
import operator
from typing import Any, Callable

from ..enums import PlayerId
from ..exceptions import ConditionError
from ..state import effective_power
from .types import CompareOperator, ConditionExpr, ConditionType, EffectContext

logger = logging.getLogger(__name__)

_OPERATORS: dict[CompareOperator, Callable[[Any, Any], bool]] = {
    CompareOperator.EQ: operator.eq,
    CompareOperator.NEQ: operator.ne,
    CompareOperator.GT: operator.gt,
    CompareOperator.LT: operator.lt,
    CompareOperator.GTE: operator.ge,
    CompareOperator.LTE: operator.le,
}


def _text(value: Any) -> str:
    """Enum members compare by value, plain strings as-is."""
    return getattr(value, "value", value)


def _player_ref(ctx: EffectContext, who: str):
    pid = ctx.controller if who == "controller" else PlayerId(ctx.controller).opponent
    return ctx.state.get_player(pid)


# Named operands usable on either side of COMPARE
_VALUE_REFS: dict[str, Callable[[EffectContext], Any]] = {
    "source.power": lambda ctx: effective_power(ctx.source, ctx.state, ctx.don_power_bonus) if ctx.source else 0,
    "source.cost": lambda ctx: ctx.source.cost if ctx.source else 0,
    "source.don": lambda ctx: len(ctx.source.given_don) if ctx.source else 0,
    "turn": lambda ctx: ctx.state.turn_number,
    "phase": lambda ctx: ctx.state.phase.value,
    "controller.hand": lambda ctx: len(_player_ref(ctx, "controller").hand),
    "controller.life": lambda ctx: len(_player_ref(ctx, "controller").life),
    "controller.don": lambda ctx: (
        len(_player_ref(ctx, "controller").cost_area)
        + sum(len(c.given_don) for c in _player_ref(ctx, "controller").field_cards())
    ),
    "controller.active_don": lambda ctx: len(_player_ref(ctx, "controller").active_don),
    "controller.characters": lambda ctx: len(_player_ref(ctx, "controller").characters),
    "opponent.hand": lambda ctx: len(_player_ref(ctx, "opponent").hand),
    "opponent.life": lambda ctx: len(_player_ref(ctx, "opponent").life),
    "opponent.characters": lambda ctx: len(_player_ref(ctx, "opponent").characters),
}


def resolve_value(value: str | int, ctx: EffectContext) -> Any:
    """Turn a COMPARE operand into a concrete value.

    Integers pass through; known references are looked up in the context;
    numeric strings are converted; anything else is compared as a string.
    """
    if isinstance(value, int):
        return value
    ref = _VALUE_REFS.get(value)
    if ref is not None:
        return ref(ctx)
    try:
        return int(value)
    except ValueError:
        return value


def evaluate_condition(condition: ConditionExpr, ctx: EffectContext) -> bool:
    """Evaluate a condition tree.

    Args:
        condition: expression to evaluate
        ctx: resolution context (source card, controller, live state)

    Returns:
        Truth value of the expression.

    Raises:
        ConditionError: unknown type or wrong operand count
    """
    ctype = condition.type

    if ctype is ConditionType.AND:
        return all(evaluate_condition(op, ctx) for op in condition.operands)

    if ctype is ConditionType.OR:
        return any(evaluate_condition(op, ctx) for op in condition.operands)

    if ctype is ConditionType.NOT:
        if len(condition.operands) != 1:
            raise ConditionError(
                f"NOT takes exactly one operand, got {len(condition.operands)}",
                condition_type=ctype.value,
            )
        return not evaluate_condition(condition.operands[0], ctx)

    if ctype is ConditionType.COMPARE:
        if condition.operator is None or condition.left is None or condition.right is None:
            raise ConditionError("COMPARE needs operator, left and right", condition_type=ctype.value)
        left = resolve_value(condition.left, ctx)
        right = resolve_value(condition.right, ctx)
        try:
            return _OPERATORS[condition.operator](left, right)
        except TypeError:
            logger.warning("Incomparable operands %r and %r", left, right)
            return False

    if ctype is ConditionType.HAS_KEYWORD:
        if not condition.keyword or ctx.source is None:
            return False
        return ctx.source.has_keyword(condition.keyword)

    if ctype is ConditionType.IN_ZONE:
        if condition.zone is None or ctx.source is None:
            return False
        return ctx.source.zone == condition.zone

    if ctype is ConditionType.IS_COLOR:
        if not condition.color or ctx.source is None:
            return False
        wanted = _text(condition.color).upper()
        return any(_text(c).upper() == wanted for c in ctx.source.definition.colors)

    if ctype is ConditionType.CUSTOM:
        if condition.predicate is None:
            raise ConditionError("CUSTOM condition has no predicate", condition_type=ctype.value)
        return bool(condition.predicate(ctx))

    raise ConditionError(f"Unknown condition type: {ctype}", condition_type=str(ctype))
