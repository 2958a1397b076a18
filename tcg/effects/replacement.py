"""Replacement effect handler.

Keeps the registered replacement entries and chains their cost/body
functions over an effect about to resolve. Whether an entry applies is
decided on every call from the context's current state; nothing is cached.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..enums import EffectTimingType
from ..exceptions import EffectValidationError
from ..state import is_on_field
from .types import CostExpr, EffectContext, EffectDefinition, EffectInstance

logger = logging.getLogger(__name__)

CostReplacement = Callable[[CostExpr, EffectContext], CostExpr]
BodyReplacement = Callable[[EffectInstance, EffectContext], EffectInstance]


@dataclass(frozen=True)
class ReplacementEntry:
    """One registered replacement; lower priority applies first"""

    card_id: str
    effect_id: str
    priority: int
    order: int  # registration sequence, breaks priority ties
    cost_replacement: Optional[CostReplacement] = None
    body_replacement: Optional[BodyReplacement] = None

    @property
    def key(self) -> tuple[str, str]:
        return self.card_id, self.effect_id


class ReplacementEffectHandler:
    """Registry of replacement entries keyed by (card id, effect id)"""

    def __init__(self):
        self._entries: dict[tuple[str, str], ReplacementEntry] = {}
        self._sequence = 0

    def __len__(self) -> int:
        return len(self._entries)

    # ==================== Registration ====================

    def register(
        self,
        card_id: str,
        definition: EffectDefinition,
        priority: int = 0,
        cost_replacement: Optional[CostReplacement] = None,
        body_replacement: Optional[BodyReplacement] = None,
    ) -> ReplacementEntry:
        """Register a replacement entry.

        Registering an existing key replaces the old entry.

        Raises:
            EffectValidationError: ``definition`` is not a REPLACEMENT effect
        """
        if definition.timing_type is not EffectTimingType.REPLACEMENT:
            raise EffectValidationError(
                f"Cannot register non-REPLACEMENT effect {definition.id} as replacement effect",
                effect_type=definition.effect_type.value,
                source_card_id=card_id,
            )
        self._sequence += 1
        entry = ReplacementEntry(
            card_id=card_id,
            effect_id=definition.id,
            priority=priority,
            order=self._sequence,
            cost_replacement=cost_replacement,
            body_replacement=body_replacement,
        )
        if entry.key in self._entries:
            logger.debug("Replacing replacement entry %s/%s", card_id, definition.id)
        self._entries[entry.key] = entry
        return entry

    def unregister(self, card_id: str, effect_id: str) -> bool:
        return self._entries.pop((card_id, effect_id), None) is not None

    def clear_from_card(self, card_id: str) -> int:
        """Remove every entry sourced from ``card_id``; returns how many."""
        keys = [key for key in self._entries if key[0] == card_id]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def clear_all(self) -> None:
        self._entries.clear()

    def active_entries(self) -> list[ReplacementEntry]:
        """All registered entries in application order (snapshot)."""
        return sorted(self._entries.values(), key=lambda e: (e.priority, e.order))

    # ==================== Application ====================

    def is_entry_active(self, entry: ReplacementEntry, context: EffectContext) -> bool:
        """True if the entry's source card is on the field in ``context.state``."""
        return is_on_field(context.state, entry.card_id)

    def apply_cost_replacements(self, cost: CostExpr, context: EffectContext) -> CostExpr:
        """Chain every active cost replacement over ``cost``."""
        for entry in self.active_entries():
            if entry.cost_replacement is None or not self.is_entry_active(entry, context):
                continue
            cost = entry.cost_replacement(cost, context)
            logger.debug("Cost replaced by %s/%s", entry.card_id, entry.effect_id)
        return cost

    def apply_body_replacements(self, instance: EffectInstance, context: EffectContext) -> EffectInstance:
        """Chain every active body replacement over ``instance``."""
        for entry in self.active_entries():
            if entry.body_replacement is None or not self.is_entry_active(entry, context):
                continue
            instance = entry.body_replacement(instance, context)
            logger.debug("Body replaced by %s/%s", entry.card_id, entry.effect_id)
        return instance
