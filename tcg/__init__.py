# -*- coding: utf-8 -*-
"""
TCG rules engine
Card text parsing, effect resolution and the immutable game-state model
"""

from .config import EngineConfig, get_config, reset_config
from .enums import (
    CardCategory, CardState, Color, EffectTimingType, ModifierDuration,
    ModifierType, Phase, PlayerId, TriggerTiming, ZoneId,
)
from .events import EngineEvent, EventBus, EventEmitter, EventType
from .exceptions import (
    ActivationError, CostPaymentError, EffectParseError, EffectValidationError,
    EngineError, MissingResolverError,
)
from .models import CardDefinition, CardInstance, DonInstance, GameState, Modifier, PlayerState
from .effects import EffectSystem, parse_effect_text

__all__ = [
    # Configuration
    'EngineConfig', 'get_config', 'reset_config',
    # Enums
    'CardCategory', 'CardState', 'Color', 'EffectTimingType', 'ModifierDuration',
    'ModifierType', 'Phase', 'PlayerId', 'TriggerTiming', 'ZoneId',
    # Events
    'EngineEvent', 'EventBus', 'EventEmitter', 'EventType',
    # Errors
    'ActivationError', 'CostPaymentError', 'EffectParseError', 'EffectValidationError',
    'EngineError', 'MissingResolverError',
    # State model
    'CardDefinition', 'CardInstance', 'DonInstance', 'GameState', 'Modifier', 'PlayerState',
    # Effects
    'EffectSystem', 'parse_effect_text',
]

__version__ = '1.0.0'
