"""Card data validation tests"""

import pytest
from pydantic import ValidationError

from tcg.effects.types import (
    CompareOperator,
    ConditionType,
    CostType,
    EffectType,
    TargetType,
    ValueRange,
)
from tcg.enums import CardCategory, EffectTimingType, ModifierDuration, TriggerTiming, ZoneId
from tcg.schema import CardDataModel, ConditionModel, CostModel, EffectDefinitionModel, load_card, load_cards


def card_record(**overrides):
    record = {
        "id": "OP01-016",
        "name": "Nami",
        "category": "CHARACTER",
        "colors": ["RED"],
        "type_tags": ["Straw Hat Crew"],
        "power": 2000,
        "cost": 1,
        "counter": 1000,
    }
    record.update(overrides)
    return record


def ko_effect(**overrides):
    effect = {
        "id": "OP01-016-ko",
        "label": "[On Play]",
        "timing_type": "AUTO",
        "trigger_timing": "ON_PLAY",
        "effect_type": "KO_CHARACTER",
        "condition": {
            "type": "AND",
            "operands": [
                {"type": "COMPARE", "operator": "GTE", "left": "controller.active_don", "right": 2},
                {"type": "NOT", "operands": [{"type": "HAS_KEYWORD", "keyword": "Rush"}]},
            ],
        },
        "cost": {"type": "COMPOSITE", "costs": [
            {"type": "REST_DON", "amount": 1},
            {"type": "TRASH_CARD", "amount": 1},
        ]},
        "parameters": {
            "max_cost": 4,
            "target_type": "CARD",
            "max_targets": 1,
            "target_filter": {
                "controller": "opponent",
                "zone": ["CHARACTER_AREA"],
                "category": ["CHARACTER"],
                "cost_range": {"max": 4},
            },
        },
    }
    effect.update(overrides)
    return effect


class TestCardRecords:
    def test_minimal_record(self):
        definition = load_card(card_record())
        assert definition.id == "OP01-016"
        assert definition.category is CardCategory.CHARACTER
        assert definition.colors == ("RED",)
        assert definition.base_power == 2000
        assert definition.counter == 1000
        assert definition.effects == ()

    def test_effect_text_is_parsed(self):
        definition = load_card(card_record(effect_text="[On Play] Draw 2 cards."))
        (effect,) = definition.effects
        assert effect.effect_type is EffectType.DRAW_CARDS
        assert effect.parameters.card_count == 2
        assert effect.source_card_id == "OP01-016"

    def test_explicit_effects_win_over_text(self):
        definition = load_card(card_record(effect_text="[On Play] Draw 2 cards.", effects=[ko_effect()]))
        (effect,) = definition.effects
        assert effect.id == "OP01-016-ko"
        assert effect.effect_type is EffectType.KO_CHARACTER

    def test_nested_conversion(self):
        (effect,) = load_card(card_record(effects=[ko_effect()])).effects
        assert effect.timing_type is EffectTimingType.AUTO
        assert effect.trigger_timing is TriggerTiming.ON_PLAY

        condition = effect.condition
        assert condition.type is ConditionType.AND
        compare, negation = condition.operands
        assert compare.operator is CompareOperator.GTE
        assert compare.right == 2
        assert negation.operands[0].keyword == "Rush"

        assert effect.cost.type is CostType.COMPOSITE
        assert [c.type for c in effect.cost.costs] == [CostType.REST_DON, CostType.TRASH_CARD]

        params = effect.parameters
        assert params.target_type is TargetType.CARD
        assert params.target_filter.zone == (ZoneId.CHARACTER_AREA,)
        assert params.target_filter.cost_range == ValueRange(max=4)

    def test_duration_and_search(self):
        effect = {
            "id": "search",
            "timing_type": "AUTO",
            "effect_type": "SEARCH_DECK",
            "parameters": {
                "card_count": 5,
                "duration": "UNTIL_END_OF_TURN",
                "search_criteria": {"category": ["CHARACTER"], "cost": {"max": 3}},
            },
        }
        (definition,) = load_card(card_record(effects=[effect])).effects
        assert definition.parameters.duration is ModifierDuration.UNTIL_END_OF_TURN
        assert definition.parameters.search_criteria.cost == ValueRange(max=3)

    def test_load_many(self):
        cards = load_cards([card_record(), card_record(id="OP01-017", name="Zoro")])
        assert [c.id for c in cards] == ["OP01-016", "OP01-017"]

    def test_keywords_stripped(self):
        assert CardDataModel(**card_record(keywords=[" Rush "])).keywords == ["Rush"]


class TestRejections:
    def test_extra_field(self):
        with pytest.raises(ValidationError):
            load_card(card_record(rarity="SR"))

    def test_unknown_category(self):
        with pytest.raises(ValidationError):
            load_card(card_record(category="MONSTER"))

    def test_negative_power(self):
        with pytest.raises(ValidationError):
            load_card(card_record(power=-1000))

    def test_blank_keyword(self):
        with pytest.raises(ValidationError, match="blank"):
            load_card(card_record(keywords=["Blocker", "  "]))

    def test_custom_condition(self):
        with pytest.raises(ValidationError, match="CUSTOM"):
            ConditionModel(type="CUSTOM")

    @pytest.mark.parametrize("operands", [[], [{"type": "HAS_KEYWORD", "keyword": "a"}] * 2])
    def test_not_arity(self, operands):
        with pytest.raises(ValidationError, match="exactly one"):
            ConditionModel(type="NOT", operands=operands)

    def test_empty_and(self):
        with pytest.raises(ValidationError):
            ConditionModel(type="AND")

    def test_incomplete_compare(self):
        with pytest.raises(ValidationError, match="COMPARE"):
            ConditionModel(type="COMPARE", operator="GT", left="controller.hand")

    def test_composite_without_parts(self):
        with pytest.raises(ValidationError):
            CostModel(type="COMPOSITE")

    def test_negative_cost(self):
        with pytest.raises(ValidationError):
            CostModel(type="REST_DON", amount=-1)

    def test_trigger_timing_requires_auto(self):
        with pytest.raises(ValidationError, match="AUTO"):
            EffectDefinitionModel(
                id="x", timing_type="ACTIVATE", effect_type="DRAW_CARDS", trigger_timing="ON_PLAY",
            )

    def test_bad_nested_effect(self):
        with pytest.raises(ValidationError):
            load_card(card_record(effects=[ko_effect(effect_type="SUMMON")]))
