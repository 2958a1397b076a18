"""Card movement resolvers
Draw, discard, trash and deck search
"""

from __future__ import annotations

import logging
from typing import Sequence

from ...enums import PlayerId, ZoneId
from ...exceptions import TargetNotFoundError
from ...models import CardInstance, GameState
from ...state import move_card
from ..types import EffectInstance, SearchCriteria, TargetType
from .base import EffectResolver

logger = logging.getLogger(__name__)


def _has_count(effect: EffectInstance) -> bool:
    count = effect.definition.parameters.card_count
    return count is not None and count > 0


def _chosen_ids(effect: EffectInstance) -> list[str] | None:
    """Card ids picked by the deciding player, if any were supplied."""
    chosen = effect.values.get("card_ids")
    return list(chosen) if chosen is not None else None


def _affected_player(effect: EffectInstance) -> PlayerId:
    """First PLAYER target, else the controller."""
    for target in effect.targets:
        if target.type is TargetType.PLAYER and target.player_id is not None:
            return PlayerId(target.player_id)
    return PlayerId(effect.controller)


class DrawCardsResolver(EffectResolver):
    """Moves up to N cards from the top of the deck to hand"""

    def can_resolve(self, effect, state):
        return _has_count(effect)

    def resolve(self, effect: EffectInstance, state: GameState) -> GameState:
        player_id = _affected_player(effect)
        deck = state.get_player(player_id).deck
        drawn = deck[: effect.definition.parameters.card_count]
        if len(drawn) < effect.definition.parameters.card_count:
            logger.info("%s can only draw %d card(s)", player_id.value, len(drawn))
        for card in drawn:
            state = move_card(state, card.id, ZoneId.HAND)
        return state


class DiscardCardsResolver(EffectResolver):
    """
    Moves up to N cards from hand to trash

    Uses ``values["card_ids"]`` when the deciding player supplied a choice;
    otherwise the cheapest cards are discarded.
    """

    def can_resolve(self, effect, state):
        return _has_count(effect)

    def resolve(self, effect: EffectInstance, state: GameState) -> GameState:
        params = effect.definition.parameters
        player_id = _affected_player(effect)
        hand = state.get_player(player_id).hand
        limit = params.max_targets if params.max_targets is not None else params.card_count
        limit = min(limit, params.card_count, len(hand))

        chosen = _chosen_ids(effect)
        if chosen is not None:
            in_hand = {c.id for c in hand}
            discard = [cid for cid in chosen if cid in in_hand][:limit]
        else:
            cheapest = sorted(hand, key=lambda c: c.definition.base_cost or 0)
            discard = [c.id for c in cheapest[:limit]]

        for card_id in discard:
            state = move_card(state, card_id, ZoneId.TRASH)
        logger.debug("%s discarded %d card(s)", player_id.value, len(discard))
        return state


class TrashCardsResolver(EffectResolver):
    """
    Trashes cards

    CARD targets are trashed from wherever they are; without card targets
    the top N cards of the affected player's deck are trashed.
    """

    def can_resolve(self, effect, state):
        return _has_count(effect) or any(self.card_target_ids(effect))

    def resolve(self, effect: EffectInstance, state: GameState) -> GameState:
        target_ids = list(self.card_target_ids(effect))
        if target_ids:
            for card_id in target_ids:
                state = self._trash_one(state, card_id)
            return state

        player_id = _affected_player(effect)
        for card in state.get_player(player_id).deck[: effect.definition.parameters.card_count]:
            state = move_card(state, card.id, ZoneId.TRASH)
        return state

    def _trash_one(self, state: GameState, card_id: str) -> GameState:
        try:
            card = self.require_card(state, card_id)
        except TargetNotFoundError as e:
            logger.warning("TrashCards: %s", e)
            return state
        if card.zone is ZoneId.TRASH:
            return state
        return move_card(state, card_id, ZoneId.TRASH)


def card_matches_criteria(card: CardInstance, criteria: SearchCriteria | None) -> bool:
    """True if ``card`` satisfies every set field of ``criteria``."""
    if criteria is None:
        return True
    definition = card.definition
    if criteria.category and definition.category not in criteria.category:
        return False
    if criteria.color:
        wanted = {getattr(c, "value", c).lower() for c in criteria.color}
        if not wanted & {c.lower() for c in definition.colors}:
            return False
    if criteria.cost is not None and not criteria.cost.contains(definition.base_cost or 0):
        return False
    if criteria.power is not None and not criteria.power.contains(definition.base_power or 0):
        return False
    if criteria.type_tags:
        wanted = {t.lower() for t in criteria.type_tags}
        if not wanted & {t.lower() for t in definition.type_tags}:
            return False
    if criteria.attributes:
        wanted = {a.lower() for a in criteria.attributes}
        if not wanted & {a.lower() for a in definition.attributes}:
            return False
    if criteria.keywords and not all(card.has_keyword(k) for k in criteria.keywords):
        return False
    if criteria.name_contains and criteria.name_contains.lower() not in definition.name.lower():
        return False
    return True


class SearchDeckResolver(EffectResolver):
    """
    Looks at the top N cards of the deck, adds matching cards to hand and
    places the rest at the bottom of the deck in their original order
    """

    def can_resolve(self, effect, state):
        return _has_count(effect)

    def resolve(self, effect: EffectInstance, state: GameState) -> GameState:
        params = effect.definition.parameters
        player_id = PlayerId(effect.controller)
        looked = state.get_player(player_id).deck[: params.card_count]
        if not looked:
            logger.info("%s: deck is empty, nothing to search", player_id.value)
            return state

        matching = [c for c in looked if card_matches_criteria(c, params.search_criteria)]
        picked = self._pick(effect, matching)

        for card_id in picked:
            state = move_card(state, card_id, ZoneId.HAND)
        picked_set = set(picked)
        for card in looked:
            if card.id not in picked_set:
                state = move_card(state, card.id, ZoneId.DECK, to_bottom=True)
        logger.debug("%s searched %d card(s), took %d", player_id.value, len(looked), len(picked))
        return state

    @staticmethod
    def _pick(effect: EffectInstance, matching: Sequence[CardInstance]) -> list[str]:
        params = effect.definition.parameters
        limit = params.max_targets if params.max_targets is not None else 1
        limit = min(limit, len(matching))
        chosen = _chosen_ids(effect)
        if chosen is not None:
            allowed = {c.id for c in matching}
            return [cid for cid in chosen if cid in allowed][:limit]
        return [c.id for c in matching[:limit]]
