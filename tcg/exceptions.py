"""Engine exception module.

Defines the error taxonomy of the effect engine. Every error carries a
message plus an optional ``details`` dict so callers (the turn driver or the
AI layer) can report a rejected action without parsing strings.

Soft errors (``EffectParseError``, ``TargetNotFoundError``) are raised and
caught inside the engine and only ever surface as log records.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class of every engine error.

    All effect-engine exceptions derive from this class so that the
    orchestrator can contain them uniformly.
    """

    def __init__(self, message: str, details: dict | None = None):
        """Initialise the error.

        Args:
            message: human readable message
            details: extra structured context (optional)
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# ==================== Parsing ====================


class EffectParseError(EngineError):
    """A single effect segment could not be parsed.

    Never escapes ``parse_effect_text``: the segment is skipped and logged.
    """

    def __init__(
        self,
        message: str | None = None,
        card_id: str | None = None,
        segment: str | None = None,
    ):
        if message is None:
            message = "Effect segment could not be parsed"
        details = {}
        if card_id:
            details["card_id"] = card_id
        if segment:
            details["segment"] = segment
        super().__init__(message, details)
        self.card_id = card_id
        self.segment = segment


# ==================== Validation ====================


class EffectValidationError(EngineError):
    """An effect failed validation (e.g. a resolver's ``can_resolve`` is False)."""

    def __init__(
        self,
        message: str | None = None,
        effect_type: str | None = None,
        source_card_id: str | None = None,
    ):
        if message is None:
            message = "Effect cannot be resolved"
        details = {}
        if effect_type:
            details["effect_type"] = effect_type
        if source_card_id:
            details["source_card_id"] = source_card_id
        super().__init__(message, details)
        self.effect_type = effect_type
        self.source_card_id = source_card_id


class ConditionError(EffectValidationError):
    """A condition expression is malformed (unknown type, wrong arity)."""

    def __init__(self, message: str | None = None, condition_type: str | None = None):
        if message is None:
            message = "Malformed condition expression"
        super().__init__(message)
        self.condition_type = condition_type
        if condition_type:
            self.details["condition_type"] = condition_type


# ==================== Costs ====================


class CostPaymentError(EngineError):
    """The controller cannot afford a cost. Raised before any mutation."""

    def __init__(
        self,
        message: str | None = None,
        cost_type: str | None = None,
        required: int = 0,
        available: int = 0,
    ):
        if message is None:
            message = "Cost cannot be paid"
        details = {"required": required, "available": available}
        if cost_type:
            details["cost_type"] = cost_type
        super().__init__(message, details)
        self.cost_type = cost_type
        self.required = required
        self.available = available


# ==================== Registries ====================


class MissingResolverError(EngineError):
    """No resolver registered for an effect type (configuration error)."""

    def __init__(self, message: str | None = None, effect_type: str | None = None):
        if message is None:
            message = f"No resolver registered for effect type: {effect_type}"
        details = {}
        if effect_type:
            details["effect_type"] = effect_type
        super().__init__(message, details)
        self.effect_type = effect_type


class DuplicateResolverError(EngineError):
    """A resolver is already registered for this effect type."""

    def __init__(self, message: str | None = None, effect_type: str | None = None):
        if message is None:
            message = f"Resolver already registered for effect type: {effect_type}"
        details = {}
        if effect_type:
            details["effect_type"] = effect_type
        super().__init__(message, details)
        self.effect_type = effect_type


class ScriptNotFoundError(EngineError):
    """No effect script registered under the requested id."""

    def __init__(self, message: str | None = None, script_id: str | None = None):
        if message is None:
            message = f"Effect script {script_id} not found in registry"
        details = {}
        if script_id:
            details["script_id"] = script_id
        super().__init__(message, details)
        self.script_id = script_id


class DuplicateScriptError(EngineError):
    """An effect script is already registered under this id."""

    def __init__(self, message: str | None = None, script_id: str | None = None):
        if message is None:
            message = f"Script {script_id} is already registered"
        details = {}
        if script_id:
            details["script_id"] = script_id
        super().__init__(message, details)
        self.script_id = script_id


class ScriptExecutionError(EngineError):
    """An effect script rejected its context (missing or invalid target)."""

    def __init__(self, message: str | None = None, script_id: str | None = None):
        if message is None:
            message = "Effect script failed"
        details = {}
        if script_id:
            details["script_id"] = script_id
        super().__init__(message, details)
        self.script_id = script_id


# ==================== State lookups ====================


class TargetNotFoundError(EngineError):
    """A chosen target vanished between selection and resolution (soft)."""

    def __init__(self, message: str | None = None, target_id: str | None = None):
        if message is None:
            message = "Target not found"
        details = {}
        if target_id:
            details["target_id"] = target_id
        super().__init__(message, details)
        self.target_id = target_id


class CardNotFoundError(EngineError):
    """A card id does not exist in the current state."""

    def __init__(self, message: str | None = None, card_id: str | None = None):
        if message is None:
            message = f"Card {card_id} not found"
        details = {}
        if card_id:
            details["card_id"] = card_id
        super().__init__(message, details)
        self.card_id = card_id


class PlayerNotFoundError(EngineError):
    """A player id does not exist in the current state."""

    def __init__(self, message: str | None = None, player_id: str | None = None):
        if message is None:
            message = f"Player {player_id} not found"
        details = {}
        if player_id:
            details["player_id"] = player_id
        super().__init__(message, details)
        self.player_id = player_id


# ==================== Activation ====================


class ActivationError(EngineError):
    """An activation request is not legal.

    Surfaced to the decision-making layer as "action not legal"; raised
    before the authoritative state is touched.
    """

    def __init__(
        self,
        message: str | None = None,
        effect_id: str | None = None,
        card_id: str | None = None,
        reason: str | None = None,
    ):
        if message is None:
            message = "Action not legal"
        details = {}
        if effect_id:
            details["effect_id"] = effect_id
        if card_id:
            details["card_id"] = card_id
        if reason:
            details["reason"] = reason
        super().__init__(message, details)
        self.effect_id = effect_id
        self.card_id = card_id
        self.reason = reason
