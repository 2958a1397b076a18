"""Shared pytest fixtures."""

import pytest

from tcg.config import reset_config
from tcg.events import EventBus

from tests.builders import P1, P2, make_character, make_player, make_state


@pytest.fixture(autouse=True)
def fresh_config():
    """Each test sees a config built from its own environment."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def basic_state():
    """Both players with a leader, deck, hand, life and DON!!; two characters each."""
    p1 = make_player(
        P1, deck=10, hand=3, life=4, don=5,
        characters=[
            make_character("P1-char-a", P1, cost=2, power=3000),
            make_character("P1-char-b", P1, cost=5, power=6000, keywords=("Blocker",)),
        ],
    )
    p2 = make_player(
        P2, deck=10, hand=3, life=4, don=5,
        characters=[
            make_character("P2-char-a", P2, cost=3, power=4000, colors=("GREEN",)),
            make_character("P2-char-b", P2, cost=6, power=7000),
        ],
    )
    return make_state(p1, p2)
