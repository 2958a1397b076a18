"""Effect engine

Parser, condition evaluator, cost gate, replacement handler, resolver and
script registries, and the ``EffectSystem`` stack that drives them.
"""

from .conditions import evaluate_condition
from .costs import CostGate
from .parser import PARSE_RULES, EffectParser, ParseRule, parse_effect_text
from .registry import EffectResolverRegistry, create_default_registry
from .replacement import ReplacementEffectHandler
from .scripts import EffectScriptRegistry, ScriptContext, register_common_scripts
from .system import EffectSystem
from .targeting import get_legal_targets, validate_targets
from .types import (
    CompareOperator, ConditionExpr, ConditionType, CostExpr, CostType,
    EffectContext, EffectDefinition, EffectInstance, EffectParameters,
    EffectStackEntry, EffectType, SearchCriteria, Target, TargetFilter,
    TargetType, ValueRange,
)

__all__ = [
    'evaluate_condition', 'CostGate',
    'PARSE_RULES', 'EffectParser', 'ParseRule', 'parse_effect_text',
    'EffectResolverRegistry', 'create_default_registry',
    'ReplacementEffectHandler',
    'EffectScriptRegistry', 'ScriptContext', 'register_common_scripts',
    'EffectSystem',
    'get_legal_targets', 'validate_targets',
    'CompareOperator', 'ConditionExpr', 'ConditionType', 'CostExpr', 'CostType',
    'EffectContext', 'EffectDefinition', 'EffectInstance', 'EffectParameters',
    'EffectStackEntry', 'EffectType', 'SearchCriteria', 'Target', 'TargetFilter',
    'TargetType', 'ValueRange',
]
