"""
Effect resolver base class
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterator

from ...enums import CardCategory, ZoneId
from ...exceptions import TargetNotFoundError
from ...models import CardInstance, GameState
from ...state import find_card
from ..types import EffectInstance, TargetType

logger = logging.getLogger(__name__)


class EffectResolver(ABC):
    """
    Abstract base class of effect resolvers

    One subclass per ``EffectType``; ``EffectResolverRegistry`` routes an
    instance to the resolver registered for its definition's type.
    Resolvers never modify the state they receive; they return a new one.
    """

    def can_resolve(self, effect: EffectInstance, state: GameState) -> bool:
        """
        Check the instance's parameters

        Returns:
            False if the instance can never resolve (missing parameters)
        """
        return True

    @abstractmethod
    def resolve(self, effect: EffectInstance, state: GameState) -> GameState:
        """
        Apply the effect

        Returns:
            The new state
        """

    # -- helpers --

    @staticmethod
    def card_target_ids(effect: EffectInstance) -> Iterator[str]:
        for target in effect.targets:
            if target.type is TargetType.CARD and target.card_id:
                yield target.card_id

    @staticmethod
    def require_card(state: GameState, card_id: str) -> CardInstance:
        """Look up a target card; raise ``TargetNotFoundError`` if it is gone."""
        card = find_card(state, card_id)
        if card is None:
            raise TargetNotFoundError(f"Target card {card_id} not found", target_id=card_id)
        return card


class CardTargetResolver(EffectResolver):
    """
    Resolver that handles each CARD target independently

    A vanished target is logged and skipped; the other targets still
    resolve.
    """

    def resolve(self, effect: EffectInstance, state: GameState) -> GameState:
        for card_id in self.card_target_ids(effect):
            try:
                card = self.require_card(state, card_id)
            except TargetNotFoundError as e:
                logger.warning("%s: %s", type(self).__name__, e)
                continue
            state = self.apply_to_card(effect, card, state)
        return state

    @abstractmethod
    def apply_to_card(self, effect: EffectInstance, card: CardInstance, state: GameState) -> GameState:
        """Apply the effect to one target card."""


def is_character_on_field(card: CardInstance) -> bool:
    return card.definition.category is CardCategory.CHARACTER and card.zone is ZoneId.CHARACTER_AREA
