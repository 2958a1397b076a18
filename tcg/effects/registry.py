# -*- coding: utf-8 -*-
"""
Effect resolver registry
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..config import EngineConfig
from ..exceptions import DuplicateResolverError, EffectValidationError, MissingResolverError
from ..models import GameState
from .resolvers.base import EffectResolver
from .types import EffectInstance, EffectType

logger = logging.getLogger(__name__)


class EffectResolverRegistry:
    """
    Effect resolver registry

    Maps each ``EffectType`` to one ``EffectResolver``; the effect system
    routes every non-scripted instance through ``resolve``. Built
    explicitly by the host application and passed by reference.
    """

    def __init__(self):
        self._resolvers: Dict[EffectType, EffectResolver] = {}

    def __len__(self) -> int:
        return len(self._resolvers)

    def register(self, effect_type: EffectType, resolver: EffectResolver) -> None:
        """
        Register a resolver

        Raises:
            DuplicateResolverError: a resolver is already registered for the
                type (the original stays active)
        """
        effect_type = EffectType(effect_type)
        if effect_type in self._resolvers:
            raise DuplicateResolverError(effect_type=effect_type.value)
        self._resolvers[effect_type] = resolver

    def unregister(self, effect_type: EffectType) -> bool:
        return self._resolvers.pop(EffectType(effect_type), None) is not None

    def get_resolver(self, effect_type: EffectType) -> Optional[EffectResolver]:
        return self._resolvers.get(EffectType(effect_type))

    def has_resolver(self, effect_type: EffectType) -> bool:
        return EffectType(effect_type) in self._resolvers

    def can_resolve(self, effect: EffectInstance, state: GameState) -> bool:
        """True if a resolver exists and accepts the instance"""
        resolver = self.get_resolver(effect.definition.effect_type)
        if resolver is None:
            return False
        return resolver.can_resolve(effect, state)

    def resolve(self, effect: EffectInstance, state: GameState) -> GameState:
        """
        Dispatch an instance to its resolver

        Returns:
            The new state

        Raises:
            MissingResolverError: nothing registered for the effect type
            EffectValidationError: the resolver's ``can_resolve`` is False
        """
        effect_type = effect.definition.effect_type
        resolver = self.get_resolver(effect_type)
        if resolver is None:
            raise MissingResolverError(effect_type=effect_type.value)
        if not resolver.can_resolve(effect, state):
            raise EffectValidationError(
                f"Effect cannot be resolved: {effect_type.value} (source: {effect.source_card_id})",
                effect_type=effect_type.value,
                source_card_id=effect.source_card_id,
            )
        return resolver.resolve(effect, state)

    def registered_types(self) -> List[EffectType]:
        return list(self._resolvers)

    def clear(self) -> None:
        self._resolvers.clear()


def create_default_registry(config: Optional[EngineConfig] = None) -> EffectResolverRegistry:
    """
    Create a registry with every built-in resolver

    Args:
        config: rules values for the resolvers (power thresholds count
            attached DON!! with its ``don_power_bonus``); shared config
            when None

    Returns:
        Registry covering all ``EffectType`` values
    """
    from .resolvers.cards import (
        DiscardCardsResolver, DrawCardsResolver,
        SearchDeckResolver, TrashCardsResolver,
    )
    from .resolvers.damage import DealDamageResolver
    from .resolvers.don import AttachDonResolver
    from .resolvers.modifiers import GrantKeywordResolver, PowerModificationResolver
    from .resolvers.orientation import ActivateCharacterResolver, RestCharacterResolver
    from .resolvers.removal import (
        BanishCharacterResolver, BounceCharacterResolver, KOCharacterResolver,
    )

    bonus = config.don_power_bonus if config is not None else None
    registry = EffectResolverRegistry()

    # Modifiers
    registry.register(EffectType.POWER_MODIFICATION, PowerModificationResolver())
    registry.register(EffectType.GRANT_KEYWORD, GrantKeywordResolver())

    # Removal
    registry.register(EffectType.KO_CHARACTER, KOCharacterResolver(bonus))
    registry.register(EffectType.BOUNCE_CHARACTER, BounceCharacterResolver(bonus))
    registry.register(EffectType.BANISH_CHARACTER, BanishCharacterResolver(bonus))

    # Orientation
    registry.register(EffectType.REST_CHARACTER, RestCharacterResolver())
    registry.register(EffectType.ACTIVATE_CHARACTER, ActivateCharacterResolver())

    # Cards
    registry.register(EffectType.DRAW_CARDS, DrawCardsResolver())
    registry.register(EffectType.DISCARD_CARDS, DiscardCardsResolver())
    registry.register(EffectType.TRASH_CARDS, TrashCardsResolver())
    registry.register(EffectType.SEARCH_DECK, SearchDeckResolver())

    # Damage / DON!!
    registry.register(EffectType.DEAL_DAMAGE, DealDamageResolver())
    registry.register(EffectType.ATTACH_DON, AttachDonResolver())

    logger.debug("Default resolver registry built with %d resolvers", len(registry))
    return registry
