"""Cost gate.

Checks whether a controller can afford a ``CostExpr`` and, if so, returns
the state with the cost debited. The caller commits that state as
authoritative before the effect body runs; when the cost is unaffordable
``CostPaymentError`` is raised and no new state exists to commit.
"""

from __future__ import annotations

import logging

from ..enums import CardState, PlayerId, ZoneId
from ..exceptions import CostPaymentError
from ..models import GameState
from ..state import move_card, rest_don, update_card
from .types import CostExpr, CostType

logger = logging.getLogger(__name__)


class CostGate:
    """Affordability check and resource debit"""

    # ==================== Affordability ====================

    def available(self, cost: CostExpr, controller: PlayerId, state: GameState) -> int:
        """Resources the controller has for a simple cost type."""
        player = state.get_player(controller)
        if cost.type is CostType.REST_DON:
            return len(player.active_don)
        if cost.type is CostType.TRASH_CARD:
            return len(player.hand)
        if cost.type is CostType.REST_CARD:
            return sum(1 for c in player.characters if c.state is CardState.ACTIVE)
        return 0

    def can_pay(self, cost: CostExpr | None, controller: PlayerId, state: GameState) -> bool:
        """True if the cost could be paid right now (no mutation)."""
        if cost is None:
            return True
        if cost.type is CostType.COMPOSITE:
            return self._can_pay_composite(cost, controller, state)
        if cost.amount < 0:
            return False
        return self.available(cost, controller, state) >= cost.amount

    def _can_pay_composite(self, cost: CostExpr, controller: PlayerId, state: GameState) -> bool:
        # Parts can draw on the same pool, so check them against the
        # state left by paying the previous ones.
        if not cost.costs:
            return False
        for sub in cost.costs:
            if not self.can_pay(sub, controller, state):
                return False
            state = self._debit(sub, controller, state)
        return True

    # ==================== Payment ====================

    def pay(self, cost: CostExpr | None, controller: PlayerId, state: GameState) -> GameState:
        """Debit the cost.

        Args:
            cost: cost to pay; ``None`` is free
            controller: paying player
            state: current state (never modified)

        Returns:
            State with the cost debited.

        Raises:
            CostPaymentError: the cost cannot be afforded
        """
        if cost is None:
            return state

        if not self.can_pay(cost, controller, state):
            required = cost.amount
            available = 0 if cost.type is CostType.COMPOSITE else self.available(cost, controller, state)
            raise CostPaymentError(
                f"{controller.value} cannot pay {cost.type.value}",
                cost_type=cost.type.value,
                required=required,
                available=available,
            )

        paid = self._debit(cost, controller, state)
        logger.debug("%s paid %s x%d", controller.value, cost.type.value, cost.amount)
        return paid

    def _debit(self, cost: CostExpr, controller: PlayerId, state: GameState) -> GameState:
        if cost.type is CostType.REST_DON:
            return rest_don(state, controller, cost.amount)

        if cost.type is CostType.TRASH_CARD:
            player = state.get_player(controller)
            for card in player.hand[: cost.amount]:
                state = move_card(state, card.id, ZoneId.TRASH)
            return state

        if cost.type is CostType.REST_CARD:
            player = state.get_player(controller)
            active = [c for c in player.characters if c.state is CardState.ACTIVE]
            for card in active[: cost.amount]:
                state = update_card(state, card.id, state=CardState.RESTED)
            return state

        if cost.type is CostType.COMPOSITE:
            for sub in cost.costs:
                state = self._debit(sub, controller, state)
            return state

        raise CostPaymentError(f"Unknown cost type: {cost.type}", cost_type=str(cost.type))
