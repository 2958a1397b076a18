"""Card data Pydantic validation models

Static card data (JSON/dicts from the card database loader) is validated
here before it is converted into the internal dataclasses:
  - validation models are kept apart from the engine dataclasses
    (validation layer vs. rules layer)
  - failures raise pydantic.ValidationError for the caller to handle
  - model_config = ConfigDict(extra="forbid") rejects unknown fields
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .effects.parser import parse_effect_text
from .effects.types import (
    CompareOperator,
    ConditionExpr,
    ConditionType,
    CostExpr,
    CostType,
    EffectDefinition,
    EffectParameters,
    EffectType,
    SearchCriteria,
    TargetFilter,
    TargetType,
    ValueRange,
)
from .enums import (
    CardCategory,
    CardState,
    Color,
    EffectTimingType,
    ModifierDuration,
    TriggerTiming,
    ZoneId,
)
from .models import CardDefinition

# ====================================================================== #
#  Filters                                                                 #
# ====================================================================== #


class ValueRangeModel(BaseModel):
    """Numeric range"""

    model_config = ConfigDict(extra="forbid")

    min: Optional[int] = None
    max: Optional[int] = None
    exact: Optional[int] = None

    def to_range(self) -> ValueRange:
        return ValueRange(min=self.min, max=self.max, exact=self.exact)


def _range(model: Optional[ValueRangeModel]) -> Optional[ValueRange]:
    return model.to_range() if model is not None else None


class TargetFilterModel(BaseModel):
    """Target filter"""

    model_config = ConfigDict(extra="forbid")

    controller: Optional[Literal["self", "opponent", "any"]] = None
    zone: list[ZoneId] = Field(default_factory=list)
    category: list[CardCategory] = Field(default_factory=list)
    color: list[Color] = Field(default_factory=list)
    cost_range: Optional[ValueRangeModel] = None
    power_range: Optional[ValueRangeModel] = None
    state: list[CardState] = Field(default_factory=list)
    has_keyword: list[str] = Field(default_factory=list)
    lacks_keyword: list[str] = Field(default_factory=list)
    type_tags: list[str] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)

    def to_filter(self) -> TargetFilter:
        return TargetFilter(
            controller=self.controller,
            zone=tuple(self.zone),
            category=tuple(self.category),
            color=tuple(self.color),
            cost_range=_range(self.cost_range),
            power_range=_range(self.power_range),
            state=tuple(self.state),
            has_keyword=tuple(self.has_keyword),
            lacks_keyword=tuple(self.lacks_keyword),
            type_tags=tuple(self.type_tags),
            attributes=tuple(self.attributes),
        )


class SearchCriteriaModel(BaseModel):
    """Deck search criteria"""

    model_config = ConfigDict(extra="forbid")

    category: list[CardCategory] = Field(default_factory=list)
    color: list[Color] = Field(default_factory=list)
    cost: Optional[ValueRangeModel] = None
    power: Optional[ValueRangeModel] = None
    type_tags: list[str] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    name_contains: Optional[str] = None

    def to_criteria(self) -> SearchCriteria:
        return SearchCriteria(
            category=tuple(self.category),
            color=tuple(self.color),
            cost=_range(self.cost),
            power=_range(self.power),
            type_tags=tuple(self.type_tags),
            attributes=tuple(self.attributes),
            keywords=tuple(self.keywords),
            name_contains=self.name_contains,
        )


# ====================================================================== #
#  Conditions / costs                                                      #
# ====================================================================== #


class ConditionModel(BaseModel):
    """Condition expression (CUSTOM predicates cannot come from data)"""

    model_config = ConfigDict(extra="forbid")

    type: ConditionType
    operands: list[ConditionModel] = Field(default_factory=list)
    operator: Optional[CompareOperator] = None
    left: Optional[Union[int, str]] = None
    right: Optional[Union[int, str]] = None
    keyword: Optional[str] = None
    zone: Optional[ZoneId] = None
    color: Optional[Color] = None

    @field_validator("type")
    @classmethod
    def no_custom(cls, v: ConditionType) -> ConditionType:
        if v is ConditionType.CUSTOM:
            raise ValueError("CUSTOM conditions need a predicate and cannot be loaded from data")
        return v

    @model_validator(mode="after")
    def check_shape(self) -> ConditionModel:
        if self.type is ConditionType.NOT and len(self.operands) != 1:
            raise ValueError("NOT takes exactly one operand")
        if self.type in (ConditionType.AND, ConditionType.OR) and not self.operands:
            raise ValueError(f"{self.type.value} needs at least one operand")
        if self.type is ConditionType.COMPARE and (
            self.operator is None or self.left is None or self.right is None
        ):
            raise ValueError("COMPARE needs operator, left and right")
        return self

    def to_expr(self) -> ConditionExpr:
        return ConditionExpr(
            type=self.type,
            operands=tuple(op.to_expr() for op in self.operands),
            operator=self.operator,
            left=self.left,
            right=self.right,
            keyword=self.keyword,
            zone=self.zone,
            color=self.color.value if self.color is not None else None,
        )


class CostModel(BaseModel):
    """Cost expression"""

    model_config = ConfigDict(extra="forbid")

    type: CostType
    amount: int = Field(default=0, ge=0)
    costs: list[CostModel] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_shape(self) -> CostModel:
        if self.type is CostType.COMPOSITE and not self.costs:
            raise ValueError("COMPOSITE cost needs at least one part")
        return self

    def to_expr(self) -> CostExpr:
        return CostExpr(
            type=self.type,
            amount=self.amount,
            costs=tuple(c.to_expr() for c in self.costs),
        )


# ====================================================================== #
#  Effects / cards                                                         #
# ====================================================================== #


class EffectParametersModel(BaseModel):
    """Effect parameter bag"""

    model_config = ConfigDict(extra="forbid")

    power_change: Optional[int] = None
    max_power: Optional[int] = None
    max_cost: Optional[int] = None
    card_count: Optional[int] = Field(default=None, ge=0)
    search_criteria: Optional[SearchCriteriaModel] = None
    keyword: Optional[str] = None
    target_type: Optional[TargetType] = None
    target_count: Optional[int] = Field(default=None, ge=0)
    min_targets: Optional[int] = Field(default=None, ge=0)
    max_targets: Optional[int] = Field(default=None, ge=0)
    target_filter: Optional[TargetFilterModel] = None
    duration: Optional[ModifierDuration] = None
    value: Optional[int] = None
    string_value: Optional[str] = None
    boolean_value: Optional[bool] = None

    def to_parameters(self) -> EffectParameters:
        data: dict[str, Any] = self.model_dump(exclude={"search_criteria", "target_filter"})
        return EffectParameters(
            search_criteria=self.search_criteria.to_criteria() if self.search_criteria else None,
            target_filter=self.target_filter.to_filter() if self.target_filter else None,
            **data,
        )


class EffectDefinitionModel(BaseModel):
    """Explicit effect definition"""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    label: str = ""
    timing_type: EffectTimingType
    effect_type: EffectType
    trigger_timing: Optional[TriggerTiming] = None
    condition: Optional[ConditionModel] = None
    cost: Optional[CostModel] = None
    parameters: EffectParametersModel = Field(default_factory=EffectParametersModel)
    once_per_turn: bool = False
    script_id: Optional[str] = None

    @model_validator(mode="after")
    def trigger_only_for_auto(self) -> EffectDefinitionModel:
        if self.trigger_timing is not None and self.timing_type is not EffectTimingType.AUTO:
            raise ValueError("trigger_timing is only valid for AUTO effects")
        return self

    def to_definition(self, card_id: str) -> EffectDefinition:
        return EffectDefinition(
            id=self.id,
            source_card_id=card_id,
            label=self.label,
            timing_type=self.timing_type,
            effect_type=self.effect_type,
            trigger_timing=self.trigger_timing,
            condition=self.condition.to_expr() if self.condition else None,
            cost=self.cost.to_expr() if self.cost else None,
            parameters=self.parameters.to_parameters(),
            once_per_turn=self.once_per_turn,
            script_id=self.script_id,
        )


class CardDataModel(BaseModel):
    """Static card record"""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1, max_length=32)
    name: str = Field(min_length=1)
    category: CardCategory
    colors: list[Color] = Field(default_factory=list)
    type_tags: list[str] = Field(default_factory=list)
    attributes: list[str] = Field(default_factory=list)
    power: Optional[int] = Field(default=None, ge=0)
    cost: Optional[int] = Field(default=None, ge=0)
    life: Optional[int] = Field(default=None, ge=0)
    counter: Optional[int] = Field(default=None, ge=0)
    keywords: list[str] = Field(default_factory=list)
    effect_text: Optional[str] = None
    effects: list[EffectDefinitionModel] = Field(default_factory=list)

    @field_validator("keywords")
    @classmethod
    def keywords_not_blank(cls, v: list[str]) -> list[str]:
        if any(not k.strip() for k in v):
            raise ValueError("keywords cannot be blank")
        return [k.strip() for k in v]

    def to_definition(self) -> CardDefinition:
        """Build the card definition; ``effect_text`` is parsed when no
        explicit effects are given."""
        if self.effects:
            effects = tuple(e.to_definition(self.id) for e in self.effects)
        else:
            effects = tuple(parse_effect_text(self.effect_text, self.id))
        return CardDefinition(
            id=self.id,
            name=self.name,
            category=self.category,
            colors=tuple(c.value for c in self.colors),
            type_tags=tuple(self.type_tags),
            attributes=tuple(self.attributes),
            base_power=self.power,
            base_cost=self.cost,
            life=self.life,
            counter=self.counter,
            keywords=tuple(self.keywords),
            effects=effects,
        )


ConditionModel.model_rebuild()
CostModel.model_rebuild()


def load_card(data: dict[str, Any]) -> CardDefinition:
    """Validate one card record and convert it.

    Raises:
        pydantic.ValidationError: invalid record
    """
    return CardDataModel.model_validate(data).to_definition()


def load_cards(records: list[dict[str, Any]]) -> list[CardDefinition]:
    return [load_card(r) for r in records]
