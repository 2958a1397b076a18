"""Removal resolvers
K.O., bounce and banish move a character off the field
"""

from __future__ import annotations

import logging

from ...enums import ZoneId
from ...models import CardInstance, GameState
from ...state import effective_power, move_card
from ..types import EffectInstance
from .base import CardTargetResolver, is_character_on_field

logger = logging.getLogger(__name__)


class _RemoveCharacterResolver(CardTargetResolver):
    """Moves each legal character target to ``destination``

    Honours the ``max_power``/``max_cost`` thresholds of the definition.
    """

    destination: ZoneId = ZoneId.TRASH
    verb: str = "removed"

    def __init__(self, don_power_bonus: int | None = None):
        self.don_power_bonus = don_power_bonus

    def apply_to_card(self, effect: EffectInstance, card: CardInstance, state: GameState) -> GameState:
        name = type(self).__name__
        if not is_character_on_field(card):
            logger.warning("%s: %s is not a character on the field", name, card.id)
            return state

        params = effect.definition.parameters
        if params.max_power is not None and effective_power(card, state, self.don_power_bonus) > params.max_power:
            logger.warning("%s: %s exceeds power %d", name, card.id, params.max_power)
            return state
        if params.max_cost is not None and card.cost > params.max_cost:
            logger.warning("%s: %s exceeds cost %d", name, card.id, params.max_cost)
            return state

        logger.info("%s %s", card.definition.name, self.verb)
        return move_card(state, card.id, self.destination)


class KOCharacterResolver(_RemoveCharacterResolver):
    destination = ZoneId.TRASH
    verb = "K.O.'d"


class BounceCharacterResolver(_RemoveCharacterResolver):
    destination = ZoneId.HAND
    verb = "returned to hand"


class BanishCharacterResolver(_RemoveCharacterResolver):
    destination = ZoneId.BANISHED
    verb = "banished"
