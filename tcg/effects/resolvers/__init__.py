"""Per-type effect resolvers"""

from .base import CardTargetResolver, EffectResolver
from .cards import DiscardCardsResolver, DrawCardsResolver, SearchDeckResolver, TrashCardsResolver
from .damage import DealDamageResolver
from .don import AttachDonResolver
from .modifiers import GrantKeywordResolver, PowerModificationResolver
from .orientation import ActivateCharacterResolver, RestCharacterResolver
from .removal import BanishCharacterResolver, BounceCharacterResolver, KOCharacterResolver

__all__ = [
    "EffectResolver",
    "CardTargetResolver",
    "PowerModificationResolver",
    "GrantKeywordResolver",
    "KOCharacterResolver",
    "BounceCharacterResolver",
    "BanishCharacterResolver",
    "RestCharacterResolver",
    "ActivateCharacterResolver",
    "DealDamageResolver",
    "DrawCardsResolver",
    "DiscardCardsResolver",
    "TrashCardsResolver",
    "SearchDeckResolver",
    "AttachDonResolver",
]
