"""Damage resolver"""

from __future__ import annotations

import logging

from ...enums import CardCategory, PlayerId, ZoneId
from ...models import GameState
from ...state import find_card, move_card, set_player_flag
from ..types import EffectInstance, TargetType
from .base import EffectResolver

logger = logging.getLogger(__name__)

TRIGGER_KEYWORD = "Trigger"


class DealDamageResolver(EffectResolver):
    """
    Deals ``parameters.value`` damage to each player or leader target

    Each point of damage takes the top life card: cards with [Trigger] go to
    the trash, the others to hand. Damage beyond the remaining life marks the
    player ``defeated`` instead of raising.
    """

    def resolve(self, effect: EffectInstance, state: GameState) -> GameState:
        amount = effect.definition.parameters.value or 0
        if amount <= 0:
            logger.warning("DealDamage: invalid damage value %r", amount)
            return state

        for player_id in self._damaged_players(effect, state):
            state = self.deal_damage(state, player_id, amount)
        return state

    def _damaged_players(self, effect: EffectInstance, state: GameState) -> list[PlayerId]:
        players: list[PlayerId] = []
        for target in effect.targets:
            if target.type is TargetType.PLAYER and target.player_id is not None:
                if target.player_id in state.players:
                    players.append(PlayerId(target.player_id))
                continue
            if target.type is TargetType.CARD and target.card_id:
                card = find_card(state, target.card_id)
                if card is None:
                    logger.warning("DealDamage: target %s not found", target.card_id)
                elif card.definition.category is not CardCategory.LEADER or card.zone is not ZoneId.LEADER_AREA:
                    logger.warning("DealDamage: target %s is not a leader", target.card_id)
                else:
                    players.append(card.controller)
                continue
            logger.warning("DealDamage: unsupported target %r", target)
        return players

    @staticmethod
    def deal_damage(state: GameState, player_id: PlayerId, amount: int) -> GameState:
        """Take ``amount`` life cards from ``player_id``."""
        dealt = 0
        for _ in range(amount):
            life = state.get_player(player_id).life
            if not life:
                logger.info("%s has no life left - defeated", player_id.value)
                state = set_player_flag(state, player_id, "defeated", True)
                break
            card = life[0]
            dest = ZoneId.TRASH if card.has_keyword(TRIGGER_KEYWORD) else ZoneId.HAND
            state = move_card(state, card.id, dest)
            dealt += 1
        logger.debug("%d damage dealt to %s", dealt, player_id.value)
        return state
