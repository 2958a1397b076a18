"""Cost gate property tests.

Core invariants:
1. An unaffordable activation never runs its body and leaves the state as is
2. An affordable activation rests exactly the cost in DON!! before the body
3. can_pay agrees with pay raising or not
"""

from __future__ import annotations

import sys
from pathlib import Path

_project_root = str(Path(__file__).resolve().parents[2])
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tcg.effects.costs import CostGate
from tcg.effects.scripts import EffectScriptRegistry
from tcg.effects.system import EffectSystem
from tcg.effects.types import CostExpr, CostType, EffectType
from tcg.enums import CardState, EffectTimingType
from tcg.exceptions import ActivationError, CostPaymentError
from tcg.state import active_don_count

from tests.builders import P1, make_card_def, make_character, make_effect, make_player, make_state


def _activation_system(active_don: int, seen: list[int]):
    definition = make_effect(
        EffectType.DRAW_CARDS,
        card_id="HERO",
        effect_id="HERO-rest-3",
        timing_type=EffectTimingType.ACTIVATE,
        label="[Activate: Main]",
        cost=CostExpr.rest_don(3),
        script_id="observe",
    )
    hero = make_character("HERO", P1, definition=make_card_def("HERO", effects=[definition]))
    state = make_state(make_player(P1, characters=[hero], don=active_don))

    scripts = EffectScriptRegistry()
    scripts.register("observe", lambda ctx: seen.append(active_don_count(ctx.state, ctx.controller)))
    return EffectSystem(state, scripts=scripts)


@given(active_don=st.integers(min_value=0, max_value=10))
@settings(max_examples=50)
def test_rest_three_activation(active_don: int) -> None:
    seen: list[int] = []
    system = _activation_system(active_don, seen)
    before = system.state

    if active_don < 3:
        with pytest.raises(ActivationError) as exc_info:
            system.activate_effect("HERO", "HERO-rest-3")
        assert exc_info.value.reason == "cannot_pay_cost"
        assert seen == []
        assert system.state is before
    else:
        system.activate_effect("HERO", "HERO-rest-3")
        assert seen == [active_don - 3]
        assert active_don_count(system.state, P1) == active_don - 3
        cost_area = system.state.get_player(P1).cost_area
        assert sum(1 for d in cost_area if d.state is CardState.RESTED) == 3


simple_costs = st.builds(
    CostExpr,
    type=st.sampled_from([CostType.REST_DON, CostType.TRASH_CARD, CostType.REST_CARD]),
    amount=st.integers(min_value=0, max_value=6),
)


@given(
    cost=st.one_of(simple_costs, st.lists(simple_costs, min_size=1, max_size=3).map(
        lambda parts: CostExpr.composite(*parts))),
    don=st.integers(min_value=0, max_value=6),
    hand=st.integers(min_value=0, max_value=6),
)
@settings(max_examples=100)
def test_can_pay_matches_pay(cost: CostExpr, don: int, hand: int) -> None:
    state = make_state(make_player(P1, don=don, hand=hand, characters=2))
    gate = CostGate()

    if gate.can_pay(cost, P1, state):
        gate.pay(cost, P1, state)
    else:
        with pytest.raises(CostPaymentError):
            gate.pay(cost, P1, state)
    assert active_don_count(state, P1) == don
    assert len(state.get_player(P1).hand) == hand
