"""Tests for the condition evaluator"""

import dataclasses

import pytest

from tcg.effects.conditions import evaluate_condition, resolve_value
from tcg.effects.types import CompareOperator, ConditionExpr, ConditionType, EffectContext
from tcg.enums import ModifierDuration, ModifierType, ZoneId
from tcg.exceptions import ConditionError
from tcg.models import Modifier
from tcg.state import add_modifier, attach_don, find_card

from tests.builders import P1, P2

TRUE = ConditionExpr.custom(lambda ctx: True)
FALSE = ConditionExpr.custom(lambda ctx: False)


@pytest.fixture
def ctx(basic_state):
    return EffectContext(
        state=basic_state,
        source=find_card(basic_state, "P1-char-b"),
        controller=P1,
    )


class TestBoolean:
    def test_and(self, ctx):
        assert evaluate_condition(ConditionExpr.all_of(TRUE, TRUE), ctx)
        assert not evaluate_condition(ConditionExpr.all_of(TRUE, FALSE), ctx)

    def test_or(self, ctx):
        assert evaluate_condition(ConditionExpr.any_of(FALSE, TRUE), ctx)
        assert not evaluate_condition(ConditionExpr.any_of(FALSE, FALSE), ctx)

    def test_empty_and_or(self, ctx):
        assert evaluate_condition(ConditionExpr.all_of(), ctx) is True
        assert evaluate_condition(ConditionExpr.any_of(), ctx) is False

    def test_not(self, ctx):
        assert evaluate_condition(ConditionExpr.negate(FALSE), ctx)
        assert not evaluate_condition(ConditionExpr.negate(TRUE), ctx)

    def test_not_arity(self, ctx):
        bad = ConditionExpr(ConditionType.NOT, operands=(TRUE, FALSE))
        with pytest.raises(ConditionError):
            evaluate_condition(bad, ctx)

    def test_left_to_right_short_circuit(self, ctx):
        calls = []

        def recorder(name, value):
            def predicate(c):
                calls.append(name)
                return value
            return ConditionExpr.custom(predicate)

        evaluate_condition(ConditionExpr.all_of(recorder("a", True), recorder("b", False), recorder("c", True)), ctx)
        assert calls == ["a", "b"]

        calls.clear()
        evaluate_condition(ConditionExpr.any_of(recorder("a", False), recorder("b", True), recorder("c", True)), ctx)
        assert calls == ["a", "b"]

    def test_custom_sees_context(self, ctx):
        seen = []
        evaluate_condition(ConditionExpr.custom(lambda c: seen.append(c) or True), ctx)
        assert seen == [ctx]

    def test_custom_without_predicate(self, ctx):
        with pytest.raises(ConditionError):
            evaluate_condition(ConditionExpr(ConditionType.CUSTOM), ctx)


class TestCompare:
    @pytest.mark.parametrize("left,op,right,expected", [
        ("controller.hand", CompareOperator.EQ, 3, True),
        ("controller.life", CompareOperator.LTE, 4, True),
        ("controller.life", CompareOperator.LT, 4, False),
        ("opponent.characters", CompareOperator.GTE, 2, True),
        ("controller.don", CompareOperator.GT, 4, True),
        ("controller.active_don", CompareOperator.NEQ, 5, False),
        ("source.cost", CompareOperator.EQ, 5, True),
        ("source.power", CompareOperator.EQ, 6000, True),
        ("turn", CompareOperator.EQ, 1, True),
        ("phase", CompareOperator.EQ, "MAIN", True),
        (3, CompareOperator.LT, "10", True),
    ])
    def test_compare(self, ctx, left, op, right, expected):
        assert evaluate_condition(ConditionExpr.compare(left, op, right), ctx) is expected

    def test_source_don_and_total_don(self, ctx):
        state, _ = attach_don(ctx.state, P1, "P1-char-b", 2)
        ctx = dataclasses.replace(ctx, state=state, source=find_card(state, "P1-char-b"))
        assert evaluate_condition(ConditionExpr.compare("source.don", "GTE", 2), ctx)
        # DON!! given to a card still counts as the controller's DON!!
        assert evaluate_condition(ConditionExpr.compare("controller.don", "EQ", 5), ctx)
        assert evaluate_condition(ConditionExpr.compare("controller.active_don", "EQ", 3), ctx)

    def test_opponent_refs_follow_controller(self, ctx):
        ctx2 = dataclasses.replace(ctx, controller=P2)
        assert evaluate_condition(ConditionExpr.compare("opponent.hand", "EQ", 3), ctx2)

    def test_incomparable_is_false(self, ctx):
        assert not evaluate_condition(ConditionExpr.compare("phase", CompareOperator.GT, 3), ctx)

    def test_incomplete_compare(self, ctx):
        with pytest.raises(ConditionError):
            evaluate_condition(ConditionExpr(ConditionType.COMPARE, left="turn"), ctx)

    def test_resolve_value(self, ctx):
        assert resolve_value(7, ctx) == 7
        assert resolve_value("7", ctx) == 7
        assert resolve_value("controller.hand", ctx) == 3
        assert resolve_value("unknown.ref", ctx) == "unknown.ref"


class TestSourceChecks:
    def test_has_keyword_printed(self, ctx):
        assert evaluate_condition(ConditionExpr.has_keyword_of("blocker"), ctx)
        assert not evaluate_condition(ConditionExpr.has_keyword_of("Rush"), ctx)

    def test_has_keyword_granted(self, ctx):
        state = add_modifier(ctx.state, "P1-char-b", Modifier.create(
            ModifierType.KEYWORD, "Rush", ModifierDuration.UNTIL_END_OF_TURN, "X"))
        ctx = dataclasses.replace(ctx, state=state, source=find_card(state, "P1-char-b"))
        assert evaluate_condition(ConditionExpr.has_keyword_of("Rush"), ctx)

    def test_in_zone(self, ctx):
        assert evaluate_condition(ConditionExpr(ConditionType.IN_ZONE, zone=ZoneId.CHARACTER_AREA), ctx)
        assert not evaluate_condition(ConditionExpr(ConditionType.IN_ZONE, zone=ZoneId.HAND), ctx)

    def test_is_color(self, ctx):
        assert evaluate_condition(ConditionExpr(ConditionType.IS_COLOR, color="red"), ctx)
        assert not evaluate_condition(ConditionExpr(ConditionType.IS_COLOR, color="GREEN"), ctx)

    def test_no_source(self, ctx):
        ctx = dataclasses.replace(ctx, source=None)
        assert not evaluate_condition(ConditionExpr.has_keyword_of("Blocker"), ctx)
        assert not evaluate_condition(ConditionExpr(ConditionType.IN_ZONE, zone=ZoneId.HAND), ctx)
        assert evaluate_condition(ConditionExpr.compare("source.power", "EQ", 0), ctx)
