"""Per-type resolver tests (dispatched through the default registry)"""

import pytest

from tcg.effects.registry import create_default_registry
from tcg.effects.types import EffectType, SearchCriteria, Target, ValueRange
from tcg.enums import CardCategory, CardState, ModifierDuration, ModifierType, ZoneId
from tcg.exceptions import EffectValidationError
from tcg.state import effective_power, find_card, update_card

from tests.builders import (
    P1, P2, card_targets, make_card, make_effect, make_instance, make_player, make_state,
)


@pytest.fixture(scope="module")
def registry():
    return create_default_registry()


def run(registry, state, effect_type, targets=(), values=None, controller=P1, **params):
    instance = make_instance(make_effect(effect_type, **params), controller, targets, values)
    return registry.resolve(instance, state)


def hand_ids(state, pid=P1):
    return [c.id for c in state.get_player(pid).hand]


# ==================== Modifiers ====================

class TestPowerModification:
    def test_adds_modifier(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.POWER_MODIFICATION, card_targets("P2-char-a"),
                  power_change=-2000, duration=ModifierDuration.UNTIL_END_OF_TURN)
        card = find_card(new, "P2-char-a")
        (modifier,) = card.modifiers
        assert modifier.type is ModifierType.POWER
        assert modifier.value == -2000
        assert modifier.duration is ModifierDuration.UNTIL_END_OF_TURN
        assert modifier.source == "TEST-001"
        assert card.power == 2000
        assert find_card(basic_state, "P2-char-a").modifiers == ()

    def test_default_duration_is_permanent(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.POWER_MODIFICATION, card_targets("P1-char-a"),
                  power_change=1000)
        assert find_card(new, "P1-char-a").modifiers[0].duration is ModifierDuration.PERMANENT

    def test_requires_power_change(self, registry, basic_state):
        with pytest.raises(EffectValidationError):
            run(registry, basic_state, EffectType.POWER_MODIFICATION, card_targets("P1-char-a"))

    def test_vanished_target_is_skipped(self, registry, basic_state, caplog):
        with caplog.at_level("WARNING"):
            new = run(registry, basic_state, EffectType.POWER_MODIFICATION,
                      card_targets("gone", "P1-char-a"), power_change=1000)
        assert find_card(new, "P1-char-a").power == 4000
        assert "gone" in caplog.text


class TestGrantKeyword:
    def test_grants(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.GRANT_KEYWORD, card_targets("P1-char-a"),
                  keyword=" Rush ", duration=ModifierDuration.UNTIL_END_OF_TURN)
        card = find_card(new, "P1-char-a")
        assert card.has_keyword("Rush")
        assert card.modifiers[0].value == "Rush"

    def test_blank_keyword_rejected(self, registry, basic_state):
        with pytest.raises(EffectValidationError):
            run(registry, basic_state, EffectType.GRANT_KEYWORD, card_targets("P1-char-a"), keyword="  ")


# ==================== Removal ====================

class TestRemoval:
    def test_ko_within_cost(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.KO_CHARACTER,
                  card_targets("P2-char-a", "P2-char-b"), max_cost=4)
        assert find_card(new, "P2-char-a").zone is ZoneId.TRASH
        assert find_card(new, "P2-char-b").zone is ZoneId.CHARACTER_AREA

    def test_ko_power_threshold(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.KO_CHARACTER,
                  card_targets("P2-char-a", "P2-char-b"), max_power=5000)
        assert find_card(new, "P2-char-a").zone is ZoneId.TRASH
        assert find_card(new, "P2-char-b").zone is ZoneId.CHARACTER_AREA

    def test_ko_skips_leader(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.KO_CHARACTER, card_targets("PLAYER_2-leader"))
        assert new.get_player(P2).leader is not None
        assert new.get_player(P2).trash == ()

    def test_bounce_to_owner_hand(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.BOUNCE_CHARACTER, card_targets("P2-char-a"))
        assert hand_ids(new, P2)[-1] == "P2-char-a"
        assert len(new.get_player(P2).characters) == 1

    def test_banish(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.BANISH_CHARACTER, card_targets("P2-char-b"))
        assert [c.id for c in new.get_player(P2).banished] == ["P2-char-b"]
        assert new.get_player(P2).trash == ()


# ==================== Orientation ====================

class TestOrientation:
    def test_rest_characters_only(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.REST_CHARACTER,
                  card_targets("P2-char-a", "PLAYER_2-leader", "P2-char-b"))
        assert find_card(new, "P2-char-a").state is CardState.RESTED
        assert find_card(new, "P2-char-b").state is CardState.RESTED
        assert find_card(new, "PLAYER_2-leader").state is CardState.ACTIVE

    def test_rest_is_idempotent(self, registry, basic_state):
        once = run(registry, basic_state, EffectType.REST_CHARACTER, card_targets("P2-char-a"))
        twice = run(registry, once, EffectType.REST_CHARACTER, card_targets("P2-char-a"))
        assert twice is once

    def test_activate(self, registry, basic_state):
        rested = update_card(basic_state, "P1-char-a", state=CardState.RESTED)
        new = run(registry, rested, EffectType.ACTIVATE_CHARACTER, card_targets("P1-char-a", "gone"))
        assert find_card(new, "P1-char-a").state is CardState.ACTIVE

    def test_card_in_hand_untouched(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.REST_CHARACTER, card_targets("PLAYER_1-hand-0"))
        assert new is basic_state


# ==================== Cards ====================

class TestDraw:
    def test_draw(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.DRAW_CARDS, card_count=2)
        player = new.get_player(P1)
        assert len(player.hand) == 5
        assert len(player.deck) == 8
        assert hand_ids(new)[-2:] == ["PLAYER_1-deck-0", "PLAYER_1-deck-1"]

    def test_player_target(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.DRAW_CARDS, (Target.player(P2),), card_count=1)
        assert len(new.get_player(P2).hand) == 4
        assert len(new.get_player(P1).hand) == 3

    def test_short_deck(self, registry):
        state = make_state(make_player(P1, deck=1, hand=0))
        new = run(registry, state, EffectType.DRAW_CARDS, card_count=3)
        assert len(new.get_player(P1).hand) == 1
        assert new.get_player(P1).deck == ()

    def test_requires_count(self, registry, basic_state):
        with pytest.raises(EffectValidationError):
            run(registry, basic_state, EffectType.DRAW_CARDS)


class TestDiscard:
    def test_chosen(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.DISCARD_CARDS,
                  values={"card_ids": ["nope", "PLAYER_1-hand-2"]}, card_count=1)
        assert [c.id for c in new.get_player(P1).trash] == ["PLAYER_1-hand-2"]

    def test_cheapest_by_default(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.DISCARD_CARDS, card_count=2)
        assert hand_ids(new) == ["PLAYER_1-hand-2"]

    def test_max_targets_caps(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.DISCARD_CARDS, card_count=2, max_targets=1)
        assert len(new.get_player(P1).hand) == 2

    def test_more_than_hand(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.DISCARD_CARDS, card_count=10)
        assert new.get_player(P1).hand == ()
        assert len(new.get_player(P1).trash) == 3


class TestTrash:
    def test_top_of_deck(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.TRASH_CARDS, card_count=2)
        assert [c.id for c in new.get_player(P1).trash] == ["PLAYER_1-deck-0", "PLAYER_1-deck-1"]

    def test_card_targets(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.TRASH_CARDS, card_targets("P2-char-a", "gone"))
        assert find_card(new, "P2-char-a").zone is ZoneId.TRASH

    def test_needs_count_or_targets(self, registry, basic_state):
        with pytest.raises(EffectValidationError):
            run(registry, basic_state, EffectType.TRASH_CARDS)


@pytest.fixture
def search_state():
    deck = [
        make_card("D0", zone=ZoneId.DECK, category=CardCategory.EVENT, power=None, cost=1),
        make_card("D1", zone=ZoneId.DECK, cost=2),
        make_card("D2", zone=ZoneId.DECK, cost=6),
        make_card("D3", zone=ZoneId.DECK),
        make_card("D4", zone=ZoneId.DECK),
    ]
    return make_state(make_player(P1, deck=deck))


class TestSearchDeck:
    def test_takes_match_and_bottoms_rest(self, registry, search_state):
        new = run(registry, search_state, EffectType.SEARCH_DECK, card_count=3,
                  search_criteria=SearchCriteria(category=(CardCategory.CHARACTER,), cost=ValueRange(max=4)))
        player = new.get_player(P1)
        assert hand_ids(new) == ["D1"]
        assert [c.id for c in player.deck] == ["D3", "D4", "D0", "D2"]

    def test_chosen_ids(self, registry, search_state):
        new = run(registry, search_state, EffectType.SEARCH_DECK, values={"card_ids": ["D2"]},
                  card_count=3, max_targets=2,
                  search_criteria=SearchCriteria(category=(CardCategory.CHARACTER,)))
        assert hand_ids(new) == ["D2"]
        assert [c.id for c in new.get_player(P1).deck] == ["D3", "D4", "D0", "D1"]

    def test_no_match(self, registry, search_state):
        new = run(registry, search_state, EffectType.SEARCH_DECK, card_count=2,
                  search_criteria=SearchCriteria(category=(CardCategory.STAGE,)))
        assert hand_ids(new) == []
        assert [c.id for c in new.get_player(P1).deck] == ["D2", "D3", "D4", "D0", "D1"]

    def test_empty_deck(self, registry):
        state = make_state()
        assert run(registry, state, EffectType.SEARCH_DECK, card_count=5) is state


# ==================== Damage / DON!! ====================

@pytest.fixture
def life_state():
    life = [
        make_card("L0", owner=P2, zone=ZoneId.LIFE),
        make_card("L1", owner=P2, zone=ZoneId.LIFE, keywords=("Trigger",)),
    ]
    return make_state(p2=make_player(P2, life=life))


class TestDealDamage:
    def test_one_damage_to_hand(self, registry, life_state):
        new = run(registry, life_state, EffectType.DEAL_DAMAGE, (Target.player(P2),), value=1)
        assert hand_ids(new, P2) == ["L0"]
        assert [c.id for c in new.get_player(P2).life] == ["L1"]

    def test_trigger_card_to_trash(self, registry, life_state):
        new = run(registry, life_state, EffectType.DEAL_DAMAGE, (Target.player(P2),), value=2)
        assert hand_ids(new, P2) == ["L0"]
        assert [c.id for c in new.get_player(P2).trash] == ["L1"]

    def test_overflow_marks_defeated(self, registry, life_state):
        new = run(registry, life_state, EffectType.DEAL_DAMAGE, (Target.player(P2),), value=5)
        player = new.get_player(P2)
        assert player.life == ()
        assert player.flags.get("defeated") is True

    def test_leader_target(self, registry, life_state):
        new = run(registry, life_state, EffectType.DEAL_DAMAGE, card_targets("PLAYER_2-leader"), value=1)
        assert len(new.get_player(P2).life) == 1

    def test_non_leader_target_ignored(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.DEAL_DAMAGE, card_targets("P2-char-a"), value=1)
        assert new is basic_state

    def test_non_positive_value(self, registry, life_state):
        assert run(registry, life_state, EffectType.DEAL_DAMAGE, (Target.player(P2),), value=0) is life_state


class TestAttachDon:
    def test_attach(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.ATTACH_DON, card_targets("P1-char-a"), value=2)
        card = find_card(new, "P1-char-a")
        assert len(card.given_don) == 2
        assert len(new.get_player(P1).cost_area) == 3
        assert effective_power(card, new) == 5000

    def test_default_one(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.ATTACH_DON, card_targets("PLAYER_1-leader"))
        assert len(new.get_player(P1).leader.given_don) == 1

    def test_not_on_field(self, registry, basic_state):
        new = run(registry, basic_state, EffectType.ATTACH_DON, card_targets("PLAYER_1-hand-0"))
        assert new is basic_state
