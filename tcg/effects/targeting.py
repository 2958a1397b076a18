"""Target filters.

Turns a declarative ``TargetFilter`` into the list of legal CARD targets
for a controller, and checks a chosen target set against it.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..enums import CardCategory, PlayerId, ZoneId
from ..models import CardInstance, GameState
from ..state import effective_power, zone_cards
from .types import Target, TargetFilter, TargetType

logger = logging.getLogger(__name__)

# Zones searched when a filter names none
DEFAULT_TARGET_ZONES: tuple[ZoneId, ...] = (
    ZoneId.LEADER_AREA,
    ZoneId.CHARACTER_AREA,
    ZoneId.STAGE_AREA,
)


def _players_for(target_filter: TargetFilter, controller: PlayerId) -> list[PlayerId]:
    who = target_filter.controller or "any"
    controller = PlayerId(controller)
    players: list[PlayerId] = []
    if who in ("self", "any"):
        players.append(controller)
    if who in ("opponent", "any"):
        players.append(controller.opponent)
    return players


def _lower(values: Iterable[str]) -> set[str]:
    return {getattr(v, "value", v).lower() for v in values}


def card_matches_filter(
    card: CardInstance,
    target_filter: TargetFilter,
    state: GameState,
    don_power_bonus: int | None = None,
) -> bool:
    """True if ``card`` meets every constraint of ``target_filter``.

    Controller and zone are checked by ``get_legal_targets``; this covers the
    per-card properties only.
    """
    f = target_filter
    definition = card.definition

    if f.category and definition.category not in f.category:
        return False

    if f.color and not (_lower(f.color) & _lower(definition.colors)):
        return False

    if f.cost_range is not None and not f.cost_range.contains(card.cost):
        return False

    if f.power_range is not None and not f.power_range.contains(effective_power(card, state, don_power_bonus)):
        return False

    if f.state and card.state not in f.state:
        return False

    if f.has_keyword and not all(card.has_keyword(k) for k in f.has_keyword):
        return False

    if f.lacks_keyword and any(card.has_keyword(k) for k in f.lacks_keyword):
        return False

    if f.type_tags and not (_lower(f.type_tags) & _lower(definition.type_tags)):
        return False

    if f.attributes and not (_lower(f.attributes) & _lower(definition.attributes)):
        return False

    if f.custom_filter is not None and not f.custom_filter(card.id, state):
        return False

    return True


def get_legal_targets(
    state: GameState,
    target_filter: TargetFilter | None,
    controller: PlayerId,
    don_power_bonus: int | None = None,
) -> list[Target]:
    """Every card target allowed by the filter, in zone order.

    Args:
        state: current state
        target_filter: constraints; ``None`` means any character on the field
        controller: player choosing the targets
        don_power_bonus: power per attached DON!! for power ranges
            (shared config value when None)

    Returns:
        CARD targets, own cards first.
    """
    if target_filter is None:
        target_filter = TargetFilter(category=(CardCategory.CHARACTER,))
    zones = target_filter.zone or DEFAULT_TARGET_ZONES

    targets: list[Target] = []
    for player_id in _players_for(target_filter, controller):
        player = state.players.get(player_id)
        if player is None:
            continue
        for zone in zones:
            for card in zone_cards(player, zone):
                if card_matches_filter(card, target_filter, state, don_power_bonus):
                    targets.append(Target.card(card.id))
    return targets


def _card_ids(targets: Sequence[Target]) -> list[str]:
    return [t.card_id for t in targets if t.type is TargetType.CARD]


def has_duplicate_card_targets(targets: Sequence[Target]) -> bool:
    """True if some card was chosen more than once."""
    card_ids = _card_ids(targets)
    if len(card_ids) != len(set(card_ids)):
        logger.debug("Duplicate card targets %s", card_ids)
        return True
    return False


def validate_targets(
    state: GameState,
    targets: Sequence[Target],
    target_filter: TargetFilter | None,
    controller: PlayerId,
    min_targets: int | None = None,
    max_targets: int | None = None,
    don_power_bonus: int | None = None,
) -> bool:
    """Check a chosen target set.

    Every CARD target must be legal under the filter and chosen at most
    once; PLAYER/ZONE/VALUE targets are not constrained by a card filter.
    Bounds apply to the number of targets when given.
    """
    if min_targets is not None and len(targets) < min_targets:
        return False
    if max_targets is not None and len(targets) > max_targets:
        return False

    if has_duplicate_card_targets(targets):
        return False

    legal = {t.card_id for t in get_legal_targets(state, target_filter, controller, don_power_bonus)}
    for card_id in _card_ids(targets):
        if card_id not in legal:
            logger.debug("Illegal target %s", card_id)
            return False
    return True
