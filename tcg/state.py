"""Copy-on-write state helpers.

Each helper takes a ``GameState`` and returns a new one. Only the touched
branch (the player, the zone tuple and the card) is rebuilt; every other
branch is shared with the input value, which is never modified.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Iterator

from .config import get_config
from .enums import FIELD_ZONES, CardState, PlayerId, ZoneId
from .exceptions import CardNotFoundError
from .models import CardInstance, DonInstance, GameState, Modifier, PlayerState

logger = logging.getLogger(__name__)

# ZoneId -> PlayerState attribute holding a tuple of cards
_LIST_ZONES: dict[ZoneId, str] = {
    ZoneId.DECK: "deck",
    ZoneId.HAND: "hand",
    ZoneId.TRASH: "trash",
    ZoneId.LIFE: "life",
    ZoneId.BANISHED: "banished",
    ZoneId.CHARACTER_AREA: "characters",
}

# ZoneId -> PlayerState attribute holding a single optional card
_SINGLE_ZONES: dict[ZoneId, str] = {
    ZoneId.LEADER_AREA: "leader",
    ZoneId.STAGE_AREA: "stage",
}


# ==================== Zone access ====================


def zone_cards(player: PlayerState, zone: ZoneId) -> tuple[CardInstance, ...]:
    """Return the cards of one zone as a tuple."""
    if zone in _LIST_ZONES:
        return getattr(player, _LIST_ZONES[zone])
    if zone in _SINGLE_ZONES:
        card = getattr(player, _SINGLE_ZONES[zone])
        return (card,) if card is not None else ()
    return ()


def _with_zone(player: PlayerState, zone: ZoneId, cards: tuple[CardInstance, ...]) -> PlayerState:
    if zone in _LIST_ZONES:
        return replace(player, **{_LIST_ZONES[zone]: cards})
    if zone in _SINGLE_ZONES:
        if len(cards) > 1:
            raise ValueError(f"{zone.value} holds at most one card")
        return replace(player, **{_SINGLE_ZONES[zone]: cards[0] if cards else None})
    raise ValueError(f"{zone.value} does not hold cards")


def replace_player(state: GameState, player: PlayerState) -> GameState:
    """Return a state whose entry for ``player.id`` is ``player``."""
    players = dict(state.players)
    players[player.id] = player
    return replace(state, players=players)


# ==================== Lookup ====================


def iter_cards(state: GameState) -> Iterator[tuple[PlayerId, ZoneId, CardInstance]]:
    for player_id, player in state.players.items():
        for zone in (*_LIST_ZONES, *_SINGLE_ZONES):
            for card in zone_cards(player, zone):
                yield player_id, zone, card


def locate_card(state: GameState, card_id: str) -> tuple[PlayerId, ZoneId, CardInstance] | None:
    """Find a card: (holding player, zone, card) or None."""
    for player_id, zone, card in iter_cards(state):
        if card.id == card_id:
            return player_id, zone, card
    return None


def find_card(state: GameState, card_id: str) -> CardInstance | None:
    found = locate_card(state, card_id)
    return found[2] if found else None


def get_card(state: GameState, card_id: str) -> CardInstance:
    """Like ``find_card`` but raises ``CardNotFoundError``."""
    card = find_card(state, card_id)
    if card is None:
        raise CardNotFoundError(card_id=card_id)
    return card


def is_on_field(state: GameState, card_id: str) -> bool:
    """True if the card is in a leader, character or stage area right now."""
    found = locate_card(state, card_id)
    return found is not None and found[1] in FIELD_ZONES


def effective_power(card: CardInstance, state: GameState, don_power_bonus: int | None = None) -> int:
    """Power including attached DON!! (only on its controller's turn).

    ``don_power_bonus`` defaults to the shared config value.
    """
    power = card.power
    if card.given_don and card.controller == state.active_player:
        if don_power_bonus is None:
            don_power_bonus = get_config().don_power_bonus
        power += len(card.given_don) * don_power_bonus
    return power


# ==================== Card updates ====================


def update_card(state: GameState, card_id: str, /, **changes: Any) -> GameState:
    """Return a state where the card has ``changes`` applied in place."""
    found = locate_card(state, card_id)
    if found is None:
        raise CardNotFoundError(card_id=card_id)
    player_id, zone, card = found
    player = state.players[player_id]
    updated = replace(card, **changes)
    cards = tuple(updated if c.id == card_id else c for c in zone_cards(player, zone))
    return replace_player(state, _with_zone(player, zone, cards))


def add_modifier(state: GameState, card_id: str, modifier: Modifier) -> GameState:
    card = get_card(state, card_id)
    return update_card(state, card_id, modifiers=card.modifiers + (modifier,))


def move_card(
    state: GameState,
    card_id: str,
    to_zone: ZoneId,
    *,
    to_bottom: bool = True,
) -> GameState:
    """Move a card to ``to_zone``.

    Cards go to their owner's non-field zones and to their controller's
    field zones. A card leaving the field loses its modifiers and
    orientation, and any attached DON!! returns rested to the cost area.

    Args:
        state: current state
        card_id: card to move
        to_zone: destination zone
        to_bottom: append (True) or prepend (False); deck top is index 0

    Returns:
        The new state.
    """
    found = locate_card(state, card_id)
    if found is None:
        raise CardNotFoundError(card_id=card_id)
    from_player_id, from_zone, card = found

    from_player = state.players[from_player_id]
    remaining = tuple(c for c in zone_cards(from_player, from_zone) if c.id != card_id)
    state = replace_player(state, _with_zone(from_player, from_zone, remaining))

    leaving_field = from_zone in FIELD_ZONES and to_zone not in FIELD_ZONES
    if leaving_field and card.given_don:
        state = _return_don(state, card.given_don)

    moved = replace(card, zone=to_zone)
    if to_zone in FIELD_ZONES:
        if from_zone not in FIELD_ZONES:
            moved = replace(moved, state=CardState.ACTIVE)
        dest_id = card.controller
    else:
        moved = replace(moved, state=CardState.NONE, modifiers=(), given_don=())
        dest_id = card.owner
        if moved.controller != moved.owner:
            moved = replace(moved, controller=moved.owner)

    dest = state.players[dest_id]
    current = zone_cards(dest, to_zone)
    cards = current + (moved,) if to_bottom else (moved,) + current
    logger.debug("Card %s moved %s -> %s", card_id, from_zone.value, to_zone.value)
    return replace_player(state, _with_zone(dest, to_zone, cards))


# ==================== DON!! ====================


def _return_don(state: GameState, dons: tuple[DonInstance, ...]) -> GameState:
    for don in dons:
        owner = state.players[don.owner]
        returned = replace(don, zone=ZoneId.COST_AREA, state=CardState.RESTED)
        state = replace_player(state, replace(owner, cost_area=owner.cost_area + (returned,)))
    return state


def active_don_count(state: GameState, player_id: PlayerId) -> int:
    return len(state.get_player(player_id).active_don)


def rest_don(state: GameState, player_id: PlayerId, amount: int) -> GameState:
    """Rest ``amount`` active DON!! in the player's cost area.

    The caller checks affordability; resting more than is active raises
    ``ValueError``.
    """
    player = state.get_player(player_id)
    active_ids = [d.id for d in player.active_don][:amount]
    if len(active_ids) < amount:
        raise ValueError(f"{player_id.value} has only {len(active_ids)} active DON!!")
    to_rest = set(active_ids)
    cost_area = tuple(
        replace(d, state=CardState.RESTED) if d.id in to_rest else d
        for d in player.cost_area
    )
    return replace_player(state, replace(player, cost_area=cost_area))


def attach_don(state: GameState, player_id: PlayerId, card_id: str, amount: int) -> tuple[GameState, int]:
    """Move up to ``amount`` DON!! from the cost area onto a field card.

    Active DON!! are used first. Returns (new state, number attached).
    """
    player = state.get_player(player_id)
    ordered = sorted(player.cost_area, key=lambda d: d.state is not CardState.ACTIVE)
    chosen = ordered[:amount]
    if not chosen:
        return state, 0
    chosen_ids = {d.id for d in chosen}
    cost_area = tuple(d for d in player.cost_area if d.id not in chosen_ids)
    state = replace_player(state, replace(player, cost_area=cost_area))
    card = get_card(state, card_id)
    attached = tuple(replace(d, zone=ZoneId.CHARACTER_AREA) for d in chosen)
    return update_card(state, card_id, given_don=card.given_don + attached), len(chosen)


# ==================== Player flags ====================


def set_player_flag(state: GameState, player_id: PlayerId, key: str, value: Any) -> GameState:
    player = state.get_player(player_id)
    flags = dict(player.flags)
    flags[key] = value
    return replace_player(state, replace(player, flags=flags))
