"""Rest / activate resolvers"""

from __future__ import annotations

from ...enums import CardState
from ...models import CardInstance, GameState
from ...state import update_card
from ..types import EffectInstance
from .base import CardTargetResolver, is_character_on_field


class _SetOrientationResolver(CardTargetResolver):
    """Flips characters in the character area to ``target_state``

    Non-characters and cards already in that state are skipped.
    """

    target_state: CardState = CardState.RESTED

    def apply_to_card(self, effect: EffectInstance, card: CardInstance, state: GameState) -> GameState:
        if not is_character_on_field(card) or card.state is self.target_state:
            return state
        return update_card(state, card.id, state=self.target_state)


class RestCharacterResolver(_SetOrientationResolver):
    target_state = CardState.RESTED


class ActivateCharacterResolver(_SetOrientationResolver):
    target_state = CardState.ACTIVE
