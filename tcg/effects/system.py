"""Effect stack / orchestrator.

``EffectSystem`` owns the authoritative state value while effects resolve.
Each popped instance goes through:

    cost replacement -> cost gate (debit committed) -> body replacement
    -> condition (false: skipped) -> script or type resolver

Any exception raised for one instance is logged, published as
``EFFECT_FAILED`` and swallowed so the rest of the stack still drains.
"""

from __future__ import annotations

import itertools
import logging
import time
import uuid
from typing import Any, Mapping, Optional, Sequence

from ..config import EngineConfig, get_config
from ..enums import CardCategory, EffectTimingType, Phase, PlayerId
from ..events import EventBus, EventEmitter, EventType
from ..exceptions import ActivationError, CostPaymentError
from ..models import CardInstance, GameState
from ..state import find_card
from .conditions import evaluate_condition
from .costs import CostGate
from .registry import EffectResolverRegistry, create_default_registry
from .replacement import ReplacementEffectHandler
from .scripts import EffectScriptRegistry, ScriptContext
from .targeting import has_duplicate_card_targets, validate_targets
from .types import (
    EffectContext,
    EffectDefinition,
    EffectInstance,
    EffectStackEntry,
    Target,
)

logger = logging.getLogger(__name__)


class EffectSystem(EventEmitter):
    """
    Effect stack and resolution pipeline

    Registries are built by the host application and passed in; defaults
    are created when omitted.
    """

    def __init__(
        self,
        state: GameState,
        resolvers: Optional[EffectResolverRegistry] = None,
        scripts: Optional[EffectScriptRegistry] = None,
        replacements: Optional[ReplacementEffectHandler] = None,
        cost_gate: Optional[CostGate] = None,
        event_bus: Optional[EventBus] = None,
        config: Optional[EngineConfig] = None,
    ):
        super().__init__()
        self._state = state
        self.config = config if config is not None else get_config()
        self.resolvers = resolvers if resolvers is not None else create_default_registry(self.config)
        self.scripts = scripts if scripts is not None else EffectScriptRegistry()
        self.replacements = replacements if replacements is not None else ReplacementEffectHandler()
        self.cost_gate = cost_gate if cost_gate is not None else CostGate()
        self.set_event_bus(event_bus)

        self._stack: list[EffectStackEntry] = []
        self._push_sequence = itertools.count()

    # ==================== State ====================

    @property
    def state(self) -> GameState:
        """The authoritative state value"""
        return self._state

    def update_state(self, state: GameState) -> None:
        """Replace the authoritative state (e.g. after the turn driver acted)."""
        self._state = state

    def _context(self, instance: EffectInstance) -> EffectContext:
        return EffectContext(
            state=self._state,
            source=find_card(self._state, instance.source_card_id),
            controller=instance.controller,
            targets=instance.targets,
            values=instance.values,
            instance=instance,
            don_power_bonus=self.config.don_power_bonus,
        )

    # ==================== Instances ====================

    def create_instance(
        self,
        definition: EffectDefinition,
        controller: PlayerId,
        targets: Sequence[Target] = (),
        values: Optional[Mapping[str, Any]] = None,
        priority: int = 0,
    ) -> EffectInstance:
        """Build a runtime instance of ``definition``."""
        return EffectInstance(
            id=f"{definition.id}-{uuid.uuid4().hex[:12]}",
            definition=definition,
            source_card_id=definition.source_card_id,
            controller=PlayerId(controller),
            targets=tuple(targets),
            values=dict(values or {}),
            timestamp=time.time(),
            priority=priority,
        )

    # ==================== Stack ====================

    def push_effect(self, instance: EffectInstance, priority: Optional[int] = None) -> EffectStackEntry:
        """
        Queue an instance

        Args:
            instance: instance to queue
            priority: higher resolves first; defaults to ``instance.priority``
        """
        if priority is None:
            priority = instance.priority
        entry = EffectStackEntry(effect=instance, priority=priority, added_at=next(self._push_sequence))
        self._stack.append(entry)
        logger.debug("Pushed %s (priority %d)", instance.id, priority)
        self.emit(
            EventType.EFFECT_ADDED_TO_STACK,
            effect_id=instance.definition.id,
            card_id=instance.source_card_id,
            instance=instance,
            priority=priority,
        )
        return entry

    def get_effect_stack(self) -> tuple[EffectStackEntry, ...]:
        """Pending entries in push order (read-only snapshot)."""
        return tuple(self._stack)

    def _pop_next(self) -> EffectStackEntry:
        # Highest priority first; equal priorities resolve oldest push first
        best = max(range(len(self._stack)), key=lambda i: (self._stack[i].priority, -self._stack[i].added_at))
        return self._stack.pop(best)

    def resolve_stack(self) -> GameState:
        """
        Resolve entries until the stack is empty

        Entries pushed while resolving (cascading triggers) are resolved in
        the same call. The stack is empty when this returns, whatever
        happened to individual entries.

        Returns:
            The authoritative state after resolution
        """
        limit = self.config.stack_resolution_limit
        processed = 0
        try:
            while self._stack:
                if processed >= limit:
                    logger.error(
                        "Stack resolution limit (%d) reached; discarding %d pending effect(s)",
                        limit, len(self._stack),
                    )
                    self.emit_log(
                        f"Stack resolution limit ({limit}) reached",
                        discarded=len(self._stack),
                    )
                    break
                entry = self._pop_next()
                processed += 1
                self._process(entry.effect)
        finally:
            self._stack.clear()
        return self._state

    def clear_effect_stack(self) -> int:
        """Discard pending entries without resolving them; returns how many."""
        discarded = len(self._stack)
        self._stack.clear()
        if discarded:
            logger.info("Cleared %d pending effect(s)", discarded)
        self.emit(EventType.STACK_CLEARED, discarded=discarded)
        return discarded

    def _process(self, instance: EffectInstance) -> None:
        try:
            self.resolve_instance(instance)
        except Exception as e:
            self._report_failure(instance, e)

    def _report_failure(self, instance: EffectInstance, error: Exception) -> None:
        logger.error(
            "Effect %s from %s failed: %s",
            instance.definition.id, instance.source_card_id, error,
            exc_info=self.config.debug_mode,
        )
        self.emit(
            EventType.EFFECT_FAILED,
            effect_id=instance.definition.id,
            card_id=instance.source_card_id,
            instance=instance,
            error=error,
            message=str(error),
        )

    # ==================== Resolution ====================

    def resolve_instance(self, instance: EffectInstance) -> bool:
        """
        Run one instance through the pipeline (exceptions propagate)

        Returns:
            True if the body ran, False if the condition skipped it

        Raises:
            CostPaymentError: the (replaced) cost cannot be paid
            EffectValidationError: the resolver rejected the instance
            MissingResolverError, ScriptNotFoundError: configuration errors
        """
        original = instance
        before = self._state
        cost = instance.definition.cost
        if cost is not None:
            cost = self.replacements.apply_cost_replacements(cost, self._context(instance))
            # Commit the debit before the body runs
            self._state = self.cost_gate.pay(cost, instance.controller, self._state)

        instance = self.replacements.apply_body_replacements(instance, self._context(instance))
        definition = instance.definition
        context = self._context(instance)

        if definition.condition is not None and not evaluate_condition(definition.condition, context):
            logger.debug("Condition of %s not met; skipped", definition.id)
            self.emit(
                EventType.EFFECT_SKIPPED,
                effect_id=definition.id,
                card_id=instance.source_card_id,
                instance=instance,
            )
            self._announce_state(before, definition.id)
            return False

        self._state = self._dispatch(instance, context)
        instance.resolved = original.resolved = True
        # Mark the card's own definition; a body replacement may have swapped it
        if original.definition.once_per_turn:
            original.definition.used_this_turn = True
        self._announce_state(before, definition.id)

        logger.debug("Resolved %s", definition.id)
        self.emit(
            EventType.EFFECT_RESOLVED,
            effect_id=definition.id,
            card_id=instance.source_card_id,
            instance=instance,
        )
        return True

    def _announce_state(self, before: GameState, effect_id: str) -> None:
        if self._state is not before:
            self.emit(EventType.STATE_CHANGED, effect_id=effect_id, state=self._state)

    def _dispatch(self, instance: EffectInstance, context: EffectContext) -> GameState:
        script_id = instance.definition.script_id
        if script_id:
            script_context = ScriptContext(
                state=context.state,
                source=context.source,
                controller=context.controller,
                targets=context.targets,
                values=context.values,
                instance=instance,
                don_power_bonus=context.don_power_bonus,
            )
            return self.scripts.execute(script_id, script_context).state
        return self.resolvers.resolve(instance, context.state)

    # ==================== Activation ====================

    def _find_activation(
        self, card_id: str, effect_id: str, player_id: Optional[PlayerId],
    ) -> tuple[CardInstance, EffectDefinition, PlayerId]:
        card = find_card(self._state, card_id)
        if card is None:
            raise ActivationError(effect_id=effect_id, card_id=card_id, reason="card_not_found")
        definition = card.definition.find_effect(effect_id)
        if definition is None:
            raise ActivationError(effect_id=effect_id, card_id=card_id, reason="effect_not_found")
        controller = card.controller
        if player_id is not None and PlayerId(player_id) != controller:
            raise ActivationError(effect_id=effect_id, card_id=card_id, reason="not_controller")
        return card, definition, controller

    def _activation_problem(
        self,
        card: CardInstance,
        definition: EffectDefinition,
        controller: PlayerId,
        targets: Sequence[Target],
        values: Mapping[str, Any],
    ) -> Optional[str]:
        """Reason the activation is illegal, or None."""
        if definition.timing_type is not EffectTimingType.ACTIVATE:
            return "not_activate_effect"
        if "main" in definition.label.lower() and self._state.phase is not Phase.MAIN:
            return "wrong_phase"
        if definition.once_per_turn and definition.used_this_turn:
            return "already_used"
        if card.definition.category is not CardCategory.EVENT and not card.on_field:
            return "not_on_field"

        instance = self.create_instance(definition, controller, targets, values)
        context = self._context(instance)
        if definition.condition is not None and not evaluate_condition(definition.condition, context):
            return "condition_not_met"

        if definition.cost is not None:
            cost = self.replacements.apply_cost_replacements(definition.cost, context)
            if not self.cost_gate.can_pay(cost, controller, self._state):
                return "cannot_pay_cost"

        if has_duplicate_card_targets(targets):
            return "illegal_targets"
        params = definition.parameters
        if params.target_filter is not None and not validate_targets(
            self._state, targets, params.target_filter, controller,
            params.min_targets, params.max_targets, self.config.don_power_bonus,
        ):
            return "illegal_targets"
        return None

    def can_activate_effect(
        self,
        card_id: str,
        effect_id: str,
        player_id: Optional[PlayerId] = None,
        targets: Sequence[Target] = (),
        values: Optional[Mapping[str, Any]] = None,
    ) -> bool:
        """True if ``activate_effect`` with these arguments would be legal."""
        try:
            card, definition, controller = self._find_activation(card_id, effect_id, player_id)
        except ActivationError:
            return False
        return self._activation_problem(card, definition, controller, targets, values or {}) is None

    def activate_effect(
        self,
        card_id: str,
        effect_id: str,
        targets: Sequence[Target] = (),
        values: Optional[Mapping[str, Any]] = None,
        player_id: Optional[PlayerId] = None,
    ) -> EffectInstance:
        """
        Activate an ACTIVATE effect and resolve it immediately

        Every legality check runs before the state is touched. Failures
        after the cost is paid are contained like stack failures.

        Returns:
            The instance; ``instance.resolved`` tells whether the body ran

        Raises:
            ActivationError: the activation is not legal
        """
        card, definition, controller = self._find_activation(card_id, effect_id, player_id)
        problem = self._activation_problem(card, definition, controller, targets, values or {})
        if problem is not None:
            logger.info("Activation of %s on %s rejected: %s", effect_id, card_id, problem)
            raise ActivationError(effect_id=effect_id, card_id=card_id, reason=problem)

        instance = self.create_instance(definition, controller, targets, values)
        self.emit(
            EventType.EFFECT_ACTIVATED,
            effect_id=definition.id,
            card_id=card_id,
            instance=instance,
        )
        try:
            self.resolve_instance(instance)
        except CostPaymentError as e:
            # A cost replacement can still make the cost unpayable
            raise ActivationError(effect_id=effect_id, card_id=card_id, reason="cannot_pay_cost") from e
        except Exception as e:
            self._report_failure(instance, e)
        return instance
