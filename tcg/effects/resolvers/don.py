"""DON!! attachment resolver"""

from __future__ import annotations

import logging

from ...enums import CardCategory, ZoneId
from ...models import CardInstance, GameState
from ...state import attach_don
from ..types import EffectInstance
from .base import CardTargetResolver

logger = logging.getLogger(__name__)


class AttachDonResolver(CardTargetResolver):
    """
    Gives ``parameters.value`` (default 1) DON!! from the cost area to each
    leader or character target. Targets without DON!! available are skipped.
    """

    def apply_to_card(self, effect: EffectInstance, card: CardInstance, state: GameState) -> GameState:
        if card.definition.category not in (CardCategory.LEADER, CardCategory.CHARACTER) \
                or card.zone not in (ZoneId.LEADER_AREA, ZoneId.CHARACTER_AREA):
            logger.warning("AttachDon: %s is not a leader or character on the field", card.id)
            return state

        amount = effect.definition.parameters.value
        if amount is None:
            amount = 1
        state, attached = attach_don(state, card.controller, card.id, amount)
        if attached < amount:
            logger.info("AttachDon: only %d of %d DON!! available for %s", attached, amount, card.id)
        return state
