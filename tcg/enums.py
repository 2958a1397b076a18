"""Core game enums shared by the state model and the effect engine.

Kept in their own module so ``models``, ``state`` and ``effects`` can import
them without circular imports.
"""

from enum import Enum


class PlayerId(str, Enum):
    """Player seats"""

    PLAYER_1 = "PLAYER_1"
    PLAYER_2 = "PLAYER_2"

    @property
    def opponent(self) -> "PlayerId":
        return PlayerId.PLAYER_2 if self is PlayerId.PLAYER_1 else PlayerId.PLAYER_1


class ZoneId(str, Enum):
    """Card zones"""

    DECK = "DECK"
    HAND = "HAND"
    TRASH = "TRASH"
    LIFE = "LIFE"
    DON_DECK = "DON_DECK"
    COST_AREA = "COST_AREA"
    LEADER_AREA = "LEADER_AREA"
    CHARACTER_AREA = "CHARACTER_AREA"
    STAGE_AREA = "STAGE_AREA"
    BANISHED = "BANISHED"  # removed from the game


# Zones whose cards count as "on the field"
FIELD_ZONES = frozenset({ZoneId.LEADER_AREA, ZoneId.CHARACTER_AREA, ZoneId.STAGE_AREA})


class CardCategory(str, Enum):
    """Card categories"""

    LEADER = "LEADER"
    CHARACTER = "CHARACTER"
    EVENT = "EVENT"
    STAGE = "STAGE"
    DON = "DON"


class Color(str, Enum):
    """Card colors"""

    RED = "RED"
    GREEN = "GREEN"
    BLUE = "BLUE"
    PURPLE = "PURPLE"
    BLACK = "BLACK"
    YELLOW = "YELLOW"


class CardState(str, Enum):
    """Orientation of a card or DON!! on the field"""

    ACTIVE = "ACTIVE"
    RESTED = "RESTED"
    NONE = "NONE"  # zones where orientation doesn't apply


class Phase(str, Enum):
    """Turn phases"""

    REFRESH = "REFRESH"
    DRAW = "DRAW"
    DON_PHASE = "DON_PHASE"
    MAIN = "MAIN"
    END = "END"


class EffectTimingType(str, Enum):
    """How an effect is brought into play"""

    AUTO = "AUTO"  # fires on a trigger timing
    ACTIVATE = "ACTIVATE"  # player chooses to use it
    PERMANENT = "PERMANENT"  # always on while the card is in play
    REPLACEMENT = "REPLACEMENT"  # rewrites other effects' cost/body


class TriggerTiming(str, Enum):
    """Trigger timings for AUTO effects"""

    START_OF_GAME = "START_OF_GAME"
    START_OF_TURN = "START_OF_TURN"
    START_OF_MAIN = "START_OF_MAIN"
    WHEN_ATTACKING = "WHEN_ATTACKING"
    ON_OPPONENT_ATTACK = "ON_OPPONENT_ATTACK"
    ON_BLOCK = "ON_BLOCK"
    WHEN_ATTACKED = "WHEN_ATTACKED"
    ON_PLAY = "ON_PLAY"
    ON_KO = "ON_KO"
    COUNTER = "COUNTER"
    TRIGGER = "TRIGGER"  # life card revealed by damage
    END_OF_BATTLE = "END_OF_BATTLE"
    END_OF_YOUR_TURN = "END_OF_YOUR_TURN"
    END_OF_OPPONENT_TURN = "END_OF_OPPONENT_TURN"


class ModifierDuration(str, Enum):
    """How long a modifier lasts (expiry sweep lives in the turn driver)"""

    PERMANENT = "PERMANENT"
    UNTIL_END_OF_TURN = "UNTIL_END_OF_TURN"
    UNTIL_END_OF_BATTLE = "UNTIL_END_OF_BATTLE"
    UNTIL_START_OF_NEXT_TURN = "UNTIL_START_OF_NEXT_TURN"


class ModifierType(str, Enum):
    """What a modifier adjusts"""

    POWER = "POWER"
    COST = "COST"
    KEYWORD = "KEYWORD"
