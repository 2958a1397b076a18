"""Modifier resolvers
Power modification and keyword grants
"""

from __future__ import annotations

from ...enums import ModifierDuration, ModifierType
from ...models import CardInstance, GameState, Modifier
from ...state import add_modifier
from ..types import EffectInstance
from .base import CardTargetResolver


class PowerModificationResolver(CardTargetResolver):
    """Adds a POWER modifier to each card target"""

    def can_resolve(self, effect, state):
        return effect.definition.parameters.power_change is not None

    def apply_to_card(self, effect: EffectInstance, card: CardInstance, state: GameState) -> GameState:
        params = effect.definition.parameters
        modifier = Modifier.create(
            ModifierType.POWER,
            params.power_change,
            params.duration or ModifierDuration.PERMANENT,
            effect.source_card_id,
        )
        return add_modifier(state, card.id, modifier)


class GrantKeywordResolver(CardTargetResolver):
    """Adds a KEYWORD modifier to each card target"""

    def can_resolve(self, effect, state):
        keyword = effect.definition.parameters.keyword
        return bool(keyword and keyword.strip())

    def apply_to_card(self, effect: EffectInstance, card: CardInstance, state: GameState) -> GameState:
        params = effect.definition.parameters
        modifier = Modifier.create(
            ModifierType.KEYWORD,
            params.keyword.strip(),
            params.duration or ModifierDuration.PERMANENT,
            effect.source_card_id,
        )
        return add_modifier(state, card.id, modifier)
