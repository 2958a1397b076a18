"""Game state model.

Every class here is a frozen dataclass; zones are tuples. A state update
never edits a value in place: ``tcg.state`` builds a new value that shares
every untouched branch with the old one.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping

from .enums import (
    FIELD_ZONES,
    CardCategory,
    CardState,
    ModifierDuration,
    ModifierType,
    Phase,
    PlayerId,
    ZoneId,
)
from .exceptions import PlayerNotFoundError

if TYPE_CHECKING:
    from .effects.types import EffectDefinition


@dataclass(frozen=True, slots=True)
class CardDefinition:
    """Static card data

    Attributes:
        id: card number, e.g. "OP01-001"
        name: printed name
        category: leader/character/event/stage
        colors: card colors
        type_tags: type line entries ("Straw Hat Crew", ...)
        attributes: "Slash", "Ranged", ...
        base_power: printed power (None for events)
        base_cost: printed cost (None for leaders)
        life: leader life value
        counter: character counter value
        keywords: printed keywords ("Rush", "Blocker", "Trigger", ...)
        effects: effect definitions attached to the card
    """

    id: str
    name: str
    category: CardCategory
    colors: tuple[str, ...] = ()
    type_tags: tuple[str, ...] = ()
    attributes: tuple[str, ...] = ()
    base_power: int | None = None
    base_cost: int | None = None
    life: int | None = None
    counter: int | None = None
    keywords: tuple[str, ...] = ()
    effects: tuple[EffectDefinition, ...] = ()

    def find_effect(self, effect_id: str) -> EffectDefinition | None:
        for effect in self.effects:
            if effect.id == effect_id:
                return effect
        return None


@dataclass(frozen=True, slots=True)
class Modifier:
    """A timed, sourced adjustment attached to a card"""

    id: str
    type: ModifierType
    value: int | str
    duration: ModifierDuration
    source: str
    timestamp: float

    @classmethod
    def create(
        cls,
        modifier_type: ModifierType,
        value: int | str,
        duration: ModifierDuration,
        source: str,
    ) -> Modifier:
        """Build a modifier with a fresh unique id and the current timestamp."""
        return cls(
            id=f"modifier-{uuid.uuid4().hex}",
            type=modifier_type,
            value=value,
            duration=duration,
            source=source,
            timestamp=time.time(),
        )


@dataclass(frozen=True, slots=True)
class DonInstance:
    """One DON!! card"""

    id: str
    owner: PlayerId
    zone: ZoneId = ZoneId.COST_AREA
    state: CardState = CardState.ACTIVE


@dataclass(frozen=True, slots=True)
class CardInstance:
    """A physical card in a game"""

    id: str
    definition: CardDefinition
    owner: PlayerId
    controller: PlayerId
    zone: ZoneId
    state: CardState = CardState.NONE
    modifiers: tuple[Modifier, ...] = ()
    given_don: tuple[DonInstance, ...] = ()

    @property
    def category(self) -> CardCategory:
        return self.definition.category

    @property
    def is_character(self) -> bool:
        return self.definition.category is CardCategory.CHARACTER

    @property
    def on_field(self) -> bool:
        return self.zone in FIELD_ZONES

    @property
    def cost(self) -> int:
        """Printed cost plus COST modifiers"""
        base = self.definition.base_cost or 0
        return base + sum(
            m.value for m in self.modifiers
            if m.type is ModifierType.COST and isinstance(m.value, int)
        )

    @property
    def power(self) -> int:
        """Printed power plus POWER modifiers (attached DON!! not included)"""
        base = self.definition.base_power or 0
        return base + sum(
            m.value for m in self.modifiers
            if m.type is ModifierType.POWER and isinstance(m.value, int)
        )

    @property
    def keywords(self) -> tuple[str, ...]:
        """Printed keywords followed by granted ones"""
        granted = tuple(
            m.value for m in self.modifiers
            if m.type is ModifierType.KEYWORD and isinstance(m.value, str)
        )
        return self.definition.keywords + granted

    def has_keyword(self, keyword: str) -> bool:
        wanted = keyword.lower()
        return any(k.lower() == wanted for k in self.keywords)


@dataclass(frozen=True, slots=True)
class PlayerState:
    """One player's zones"""

    id: PlayerId
    deck: tuple[CardInstance, ...] = ()
    hand: tuple[CardInstance, ...] = ()
    trash: tuple[CardInstance, ...] = ()
    life: tuple[CardInstance, ...] = ()
    banished: tuple[CardInstance, ...] = ()
    don_deck: tuple[DonInstance, ...] = ()
    cost_area: tuple[DonInstance, ...] = ()
    leader: CardInstance | None = None
    characters: tuple[CardInstance, ...] = ()
    stage: CardInstance | None = None
    flags: Mapping[str, Any] = field(default_factory=dict)

    @property
    def active_don(self) -> tuple[DonInstance, ...]:
        return tuple(d for d in self.cost_area if d.state is CardState.ACTIVE)

    def field_cards(self) -> tuple[CardInstance, ...]:
        cards: list[CardInstance] = []
        if self.leader is not None:
            cards.append(self.leader)
        cards.extend(self.characters)
        if self.stage is not None:
            cards.append(self.stage)
        return tuple(cards)


@dataclass(frozen=True, slots=True)
class GameState:
    """The authoritative game-state value"""

    players: Mapping[PlayerId, PlayerState]
    active_player: PlayerId = PlayerId.PLAYER_1
    phase: Phase = Phase.MAIN
    turn_number: int = 1
    game_over: bool = False
    winner: PlayerId | None = None

    def get_player(self, player_id: PlayerId) -> PlayerState:
        player = self.players.get(player_id)
        if player is None:
            raise PlayerNotFoundError(player_id=str(player_id))
        return player

    def opponent_of(self, player_id: PlayerId) -> PlayerState:
        return self.get_player(PlayerId(player_id).opponent)
