"""Effect system type definitions.

Definitions (static templates parsed from card text or loaded from card
data), instances (one runtime activation), targets, filters, conditions and
costs. No behaviour lives here beyond small constructors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Mapping

from ..enums import (
    CardCategory,
    CardState,
    Color,
    EffectTimingType,
    ModifierDuration,
    PlayerId,
    TriggerTiming,
    ZoneId,
)

if TYPE_CHECKING:
    from ..models import CardInstance, GameState


class EffectType(str, Enum):
    """Closed set of effect kinds; one resolver per kind"""

    POWER_MODIFICATION = "POWER_MODIFICATION"
    KO_CHARACTER = "KO_CHARACTER"
    BOUNCE_CHARACTER = "BOUNCE_CHARACTER"
    BANISH_CHARACTER = "BANISH_CHARACTER"
    SEARCH_DECK = "SEARCH_DECK"
    DRAW_CARDS = "DRAW_CARDS"
    DISCARD_CARDS = "DISCARD_CARDS"
    TRASH_CARDS = "TRASH_CARDS"
    GRANT_KEYWORD = "GRANT_KEYWORD"
    ATTACH_DON = "ATTACH_DON"
    REST_CHARACTER = "REST_CHARACTER"
    ACTIVATE_CHARACTER = "ACTIVATE_CHARACTER"
    DEAL_DAMAGE = "DEAL_DAMAGE"


# ==================== Targets ====================


class TargetType(str, Enum):
    CARD = "CARD"
    PLAYER = "PLAYER"
    ZONE = "ZONE"
    VALUE = "VALUE"


@dataclass(frozen=True)
class Target:
    """A chosen target; which fields are set depends on ``type``"""

    type: TargetType
    card_id: str | None = None
    player_id: PlayerId | None = None
    zone_id: ZoneId | None = None
    value: Any = None

    @classmethod
    def card(cls, card_id: str) -> Target:
        return cls(TargetType.CARD, card_id=card_id)

    @classmethod
    def player(cls, player_id: PlayerId) -> Target:
        return cls(TargetType.PLAYER, player_id=PlayerId(player_id))

    @classmethod
    def zone(cls, zone_id: ZoneId, player_id: PlayerId | None = None) -> Target:
        return cls(TargetType.ZONE, zone_id=zone_id, player_id=player_id)

    @classmethod
    def of_value(cls, value: Any) -> Target:
        return cls(TargetType.VALUE, value=value)


@dataclass(frozen=True)
class ValueRange:
    """Inclusive numeric range; unset bounds are open"""

    min: int | None = None
    max: int | None = None
    exact: int | None = None

    def contains(self, value: int) -> bool:
        if self.exact is not None and value != self.exact:
            return False
        if self.min is not None and value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


@dataclass(frozen=True)
class SearchCriteria:
    """Criteria for picking cards out of a looked-at group"""

    category: tuple[CardCategory, ...] = ()
    color: tuple[Color, ...] = ()
    cost: ValueRange | None = None
    power: ValueRange | None = None
    type_tags: tuple[str, ...] = ()
    attributes: tuple[str, ...] = ()
    keywords: tuple[str, ...] = ()
    name_contains: str | None = None


@dataclass(frozen=True)
class TargetFilter:
    """Declarative constraints on legal targets

    Empty tuples / None mean "no constraint".
    """

    controller: str | None = None  # "self" | "opponent" | "any"
    zone: tuple[ZoneId, ...] = ()
    category: tuple[CardCategory, ...] = ()
    color: tuple[Color, ...] = ()
    cost_range: ValueRange | None = None
    power_range: ValueRange | None = None
    state: tuple[CardState, ...] = ()
    has_keyword: tuple[str, ...] = ()
    lacks_keyword: tuple[str, ...] = ()
    type_tags: tuple[str, ...] = ()
    attributes: tuple[str, ...] = ()
    custom_filter: Callable[[str, GameState], bool] | None = None


# ==================== Parameters ====================


@dataclass
class EffectParameters:
    """Variant parameter bag; which fields matter depends on the effect type"""

    power_change: int | None = None
    max_power: int | None = None
    max_cost: int | None = None
    card_count: int | None = None
    search_criteria: SearchCriteria | None = None
    keyword: str | None = None
    target_type: TargetType | None = None
    target_count: int | None = None
    min_targets: int | None = None
    max_targets: int | None = None
    target_filter: TargetFilter | None = None
    duration: ModifierDuration | None = None
    value: int | None = None
    string_value: str | None = None
    boolean_value: bool | None = None


# ==================== Conditions ====================


class ConditionType(str, Enum):
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    COMPARE = "COMPARE"
    HAS_KEYWORD = "HAS_KEYWORD"
    IN_ZONE = "IN_ZONE"
    IS_COLOR = "IS_COLOR"
    CUSTOM = "CUSTOM"


class CompareOperator(str, Enum):
    EQ = "EQ"
    NEQ = "NEQ"
    GT = "GT"
    LT = "LT"
    GTE = "GTE"
    LTE = "LTE"


@dataclass(frozen=True)
class ConditionExpr:
    """Boolean expression tree over a resolution context"""

    type: ConditionType
    operands: tuple[ConditionExpr, ...] = ()
    operator: CompareOperator | None = None
    left: str | int | None = None
    right: str | int | None = None
    keyword: str | None = None
    zone: ZoneId | None = None
    color: str | None = None
    predicate: Callable[[EffectContext], bool] | None = None

    # -- constructors --

    @classmethod
    def all_of(cls, *operands: ConditionExpr) -> ConditionExpr:
        return cls(ConditionType.AND, operands=tuple(operands))

    @classmethod
    def any_of(cls, *operands: ConditionExpr) -> ConditionExpr:
        return cls(ConditionType.OR, operands=tuple(operands))

    @classmethod
    def negate(cls, operand: ConditionExpr) -> ConditionExpr:
        return cls(ConditionType.NOT, operands=(operand,))

    @classmethod
    def compare(cls, left: str | int, operator: CompareOperator | str, right: str | int) -> ConditionExpr:
        return cls(ConditionType.COMPARE, operator=CompareOperator(operator), left=left, right=right)

    @classmethod
    def has_keyword_of(cls, keyword: str) -> ConditionExpr:
        return cls(ConditionType.HAS_KEYWORD, keyword=keyword)

    @classmethod
    def custom(cls, predicate: Callable[[EffectContext], bool]) -> ConditionExpr:
        return cls(ConditionType.CUSTOM, predicate=predicate)


# ==================== Costs ====================


class CostType(str, Enum):
    REST_DON = "REST_DON"
    TRASH_CARD = "TRASH_CARD"
    REST_CARD = "REST_CARD"
    COMPOSITE = "COMPOSITE"


@dataclass(frozen=True)
class CostExpr:
    """Payment requirement"""

    type: CostType
    amount: int = 0
    costs: tuple[CostExpr, ...] = ()

    @classmethod
    def rest_don(cls, amount: int) -> CostExpr:
        return cls(CostType.REST_DON, amount=amount)

    @classmethod
    def trash_card(cls, amount: int) -> CostExpr:
        return cls(CostType.TRASH_CARD, amount=amount)

    @classmethod
    def composite(cls, *costs: CostExpr) -> CostExpr:
        return cls(CostType.COMPOSITE, costs=tuple(costs))


# ==================== Definitions & instances ====================


@dataclass
class EffectDefinition:
    """Static template of one card ability

    Only ``used_this_turn`` changes after creation (set on use, reset by the
    turn driver).
    """

    id: str
    source_card_id: str
    label: str
    timing_type: EffectTimingType
    effect_type: EffectType
    trigger_timing: TriggerTiming | None = None
    condition: ConditionExpr | None = None
    cost: CostExpr | None = None
    parameters: EffectParameters = field(default_factory=EffectParameters)
    once_per_turn: bool = False
    used_this_turn: bool = False
    script_id: str | None = None


@dataclass
class EffectInstance:
    """One runtime activation of a definition"""

    id: str
    definition: EffectDefinition
    source_card_id: str
    controller: PlayerId
    targets: tuple[Target, ...] = ()
    values: Mapping[str, Any] = field(default_factory=dict)
    timestamp: float = 0.0
    resolved: bool = False
    priority: int = 0


@dataclass(frozen=True)
class EffectStackEntry:
    """A pending instance on the effect stack"""

    effect: EffectInstance
    priority: int
    added_at: int  # push sequence number


@dataclass
class EffectContext:
    """What conditions, replacement functions and scripts can see"""

    state: GameState
    source: CardInstance | None
    controller: PlayerId
    targets: tuple[Target, ...] = ()
    values: Mapping[str, Any] = field(default_factory=dict)
    instance: EffectInstance | None = None
    # power per attached DON!! (None: shared config value)
    don_power_bonus: int | None = None
