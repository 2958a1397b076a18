"""Effect script registry.

Named scripts decouple card data from executable behaviour: a definition
with a ``script_id`` is resolved by looking the id up here at resolution
time instead of going through the type resolver. Scripts receive a
``ScriptContext`` whose helpers replace ``context.state`` with new values;
the state the caller handed in is never modified.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..enums import CardCategory, CardState, ModifierDuration, ModifierType, PlayerId, ZoneId
from ..exceptions import (
    CardNotFoundError,
    DuplicateScriptError,
    ScriptExecutionError,
    ScriptNotFoundError,
)
from ..models import CardInstance, Modifier
from ..state import add_modifier, find_card, move_card, update_card, zone_cards
from .targeting import card_matches_filter
from .types import EffectContext, TargetFilter, TargetType, ValueRange

logger = logging.getLogger(__name__)


@dataclass
class ScriptContext(EffectContext):
    """Resolution context with state-changing helpers for scripts"""

    script_id: Optional[str] = None

    # ==================== Target access ====================

    def first_card_target(self) -> str:
        """Id of the first target; it must be a card."""
        if not self.targets:
            raise ScriptExecutionError("No target specified", script_id=self.script_id)
        target = self.targets[0]
        if target.type is not TargetType.CARD or not target.card_id:
            raise ScriptExecutionError("Invalid target", script_id=self.script_id)
        return target.card_id

    def _card(self, card_id: str) -> CardInstance:
        card = find_card(self.state, card_id)
        if card is None:
            raise ScriptExecutionError(f"Card {card_id} not found", script_id=self.script_id)
        return card

    @property
    def source_id(self) -> str:
        if self.source is not None:
            return self.source.id
        if self.instance is not None:
            return self.instance.source_card_id
        return ""

    # ==================== State helpers ====================

    def move_card(self, card_id: str, to_zone: ZoneId) -> None:
        try:
            self.state = move_card(self.state, card_id, to_zone)
        except CardNotFoundError as e:
            raise ScriptExecutionError(
                f"Failed to move card {card_id} to {to_zone.value}: {e.message}",
                script_id=self.script_id,
            ) from e

    def draw_cards(self, player_id: PlayerId, count: int) -> None:
        for _ in range(count):
            deck = self.state.get_player(player_id).deck
            if not deck:
                raise ScriptExecutionError(
                    f"Player {PlayerId(player_id).value} has no cards left in deck",
                    script_id=self.script_id,
                )
            self.state = move_card(self.state, deck[0].id, ZoneId.HAND)

    def _add_modifier(self, card_id: str, modifier_type: ModifierType, value, duration: ModifierDuration) -> None:
        self._card(card_id)
        modifier = Modifier.create(modifier_type, value, duration, self.source_id)
        self.state = add_modifier(self.state, card_id, modifier)

    def modify_power(self, card_id: str, amount: int,
                     duration: ModifierDuration = ModifierDuration.PERMANENT) -> None:
        self._add_modifier(card_id, ModifierType.POWER, amount, duration)

    def modify_cost(self, card_id: str, amount: int,
                    duration: ModifierDuration = ModifierDuration.PERMANENT) -> None:
        self._add_modifier(card_id, ModifierType.COST, amount, duration)

    def grant_keyword(self, card_id: str, keyword: str,
                      duration: ModifierDuration = ModifierDuration.PERMANENT) -> None:
        self._add_modifier(card_id, ModifierType.KEYWORD, keyword, duration)

    def _remove_character(self, card_id: str, to_zone: ZoneId, verb: str) -> None:
        card = self._card(card_id)
        if card.zone is not ZoneId.CHARACTER_AREA:
            raise ScriptExecutionError(
                f"Cannot {verb} {card_id}: not in the character area", script_id=self.script_id,
            )
        self.state = move_card(self.state, card_id, to_zone)

    def ko_card(self, card_id: str) -> None:
        self._remove_character(card_id, ZoneId.TRASH, "K.O.")

    def banish_card(self, card_id: str) -> None:
        self._remove_character(card_id, ZoneId.BANISHED, "banish")

    def rest_card(self, card_id: str) -> None:
        self._card(card_id)
        self.state = update_card(self.state, card_id, state=CardState.RESTED)

    def activate_card(self, card_id: str) -> None:
        self._card(card_id)
        self.state = update_card(self.state, card_id, state=CardState.ACTIVE)

    def search_zone(self, player_id: PlayerId, zone: ZoneId,
                    target_filter: Optional[TargetFilter] = None) -> List[CardInstance]:
        """Cards of one zone matching ``target_filter``, in zone order."""
        cards = zone_cards(self.state.get_player(player_id), zone)
        if target_filter is None:
            return list(cards)
        return [c for c in cards if card_matches_filter(c, target_filter, self.state, self.don_power_bonus)]


EffectScript = Callable[[ScriptContext], None]


class EffectScriptRegistry:
    """Script id -> script callable"""

    def __init__(self):
        self._scripts: Dict[str, EffectScript] = {}

    def __len__(self) -> int:
        return len(self._scripts)

    def register(self, script_id: str, script: EffectScript) -> None:
        """
        Raises:
            DuplicateScriptError: ``script_id`` is taken
        """
        if script_id in self._scripts:
            raise DuplicateScriptError(script_id=script_id)
        self._scripts[script_id] = script

    def get(self, script_id: str) -> EffectScript:
        """
        Raises:
            ScriptNotFoundError: nothing registered under ``script_id``
        """
        script = self._scripts.get(script_id)
        if script is None:
            raise ScriptNotFoundError(script_id=script_id)
        return script

    def has(self, script_id: str) -> bool:
        return script_id in self._scripts

    def unregister(self, script_id: str) -> bool:
        return self._scripts.pop(script_id, None) is not None

    def names(self) -> List[str]:
        return list(self._scripts)

    def clear(self) -> None:
        self._scripts.clear()

    def execute(self, script_id: str, context: ScriptContext) -> ScriptContext:
        """Run a script; ``context.state`` holds the result afterwards."""
        script = self.get(script_id)
        context.script_id = script_id
        script(context)
        return context


# ==================== Script factories ====================


def draw_cards(count: int) -> EffectScript:
    def script(ctx: ScriptContext) -> None:
        ctx.draw_cards(ctx.controller, count)
    return script


def power_boost(amount: int, duration: ModifierDuration = ModifierDuration.PERMANENT) -> EffectScript:
    def script(ctx: ScriptContext) -> None:
        ctx.modify_power(ctx.first_card_target(), amount, duration)
    return script


def power_boost_source(amount: int, duration: ModifierDuration) -> EffectScript:
    """Boosts the source card itself ([When Attacking] style)."""
    def script(ctx: ScriptContext) -> None:
        if not ctx.source_id:
            raise ScriptExecutionError("No source card", script_id=ctx.script_id)
        ctx.modify_power(ctx.source_id, amount, duration)
    return script


def cost_reduction(amount: int) -> EffectScript:
    def script(ctx: ScriptContext) -> None:
        ctx.modify_cost(ctx.first_card_target(), -amount, ModifierDuration.UNTIL_END_OF_TURN)
    return script


def search_deck(target_filter: TargetFilter) -> EffectScript:
    """Adds the first matching deck card to hand."""
    def script(ctx: ScriptContext) -> None:
        found = ctx.search_zone(ctx.controller, ZoneId.DECK, target_filter)
        if found:
            ctx.move_card(found[0].id, ZoneId.HAND)
    return script


def ko_target(max_cost: int | None = None, rested_only: bool = False) -> EffectScript:
    def script(ctx: ScriptContext) -> None:
        card_id = ctx.first_card_target()
        card = ctx._card(card_id)
        if rested_only and card.state is not CardState.RESTED:
            raise ScriptExecutionError("Target must be a rested character", script_id=ctx.script_id)
        if max_cost is not None and card.cost > max_cost:
            raise ScriptExecutionError(
                f"Target cost {card.cost} exceeds {max_cost}", script_id=ctx.script_id,
            )
        ctx.ko_card(card_id)
    return script


def rest_target(ctx: ScriptContext) -> None:
    ctx.rest_card(ctx.first_card_target())


def activate_target(ctx: ScriptContext) -> None:
    ctx.activate_card(ctx.first_card_target())


def rest_all_opponent_characters(ctx: ScriptContext) -> None:
    opponent = PlayerId(ctx.controller).opponent
    for card in ctx.state.get_player(opponent).characters:
        if card.state is CardState.ACTIVE:
            ctx.rest_card(card.id)


def add_to_hand_from_trash(ctx: ScriptContext) -> None:
    """Returns the first character in the controller's trash to hand."""
    found = ctx.search_zone(
        ctx.controller, ZoneId.TRASH, TargetFilter(category=(CardCategory.CHARACTER,)),
    )
    if found:
        ctx.move_card(found[0].id, ZoneId.HAND)


def register_common_scripts(registry: EffectScriptRegistry) -> EffectScriptRegistry:
    """
    Install the stock scripts

    Returns:
        ``registry``, for chaining
    """
    until_eot = ModifierDuration.UNTIL_END_OF_TURN
    in_battle = ModifierDuration.UNTIL_END_OF_BATTLE

    # Draw
    for n in (1, 2, 3):
        registry.register(f"draw_{n}", draw_cards(n))

    # Power
    for amount in (1000, 2000, 3000):
        registry.register(f"power_boost_{amount}", power_boost(amount))
    for amount in (1000, 2000):
        registry.register(f"power_boost_{amount}_until_end_of_turn", power_boost(amount, until_eot))
        registry.register(f"power_boost_{amount}_during_battle", power_boost_source(amount, in_battle))

    # Cost
    for n in (1, 2, 3):
        registry.register(f"cost_reduction_{n}", cost_reduction(n))

    # Search
    registry.register("search_deck_character", search_deck(TargetFilter(category=(CardCategory.CHARACTER,))))
    registry.register("search_deck_event", search_deck(TargetFilter(category=(CardCategory.EVENT,))))
    registry.register("search_deck_stage", search_deck(TargetFilter(category=(CardCategory.STAGE,))))
    for n in (4, 5):
        registry.register(f"search_deck_cost_{n}_or_less", search_deck(TargetFilter(cost_range=ValueRange(max=n))))

    # K.O.
    registry.register("ko_target_character", ko_target())
    registry.register("ko_rested_character", ko_target(rested_only=True))
    for n in (3, 4):
        registry.register(f"ko_cost_{n}_or_less", ko_target(max_cost=n))

    # Rest / activate
    registry.register("rest_target_character", rest_target)
    registry.register("rest_all_opponent_characters", rest_all_opponent_characters)
    registry.register("activate_target_character", activate_target)

    # Timing-specific aliases
    registry.register("on_ko_search_deck", search_deck(TargetFilter(category=(CardCategory.CHARACTER,))))
    registry.register("on_ko_add_to_hand_from_trash", add_to_hand_from_trash)
    registry.register("on_ko_draw_1", draw_cards(1))
    registry.register("when_attacking_draw_1", draw_cards(1))
    registry.register("when_attacking_power_boost_1000", power_boost_source(1000, in_battle))
    registry.register("when_attacking_power_boost_2000", power_boost_source(2000, in_battle))

    logger.debug("Registered %d common effect scripts", len(registry))
    return registry
