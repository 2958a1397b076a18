"""Effect text parser.

Turns printed card text into ``EffectDefinition`` values:

1. the text is split into segments at known ``[Label]`` tokens;
2. keyword-only labels and ``[Once Per Turn]`` never produce a definition;
3. the label decides timing type and trigger timing;
4. a leading cost ("rest 1 DON!!:", "trash 1 card from your hand:") and
   leading "If you have ..." conditions are lifted off the body;
5. the body is classified by the first matching rule of ``PARSE_RULES``
   and that rule's builder extracts the parameters.

Parsing is total: nothing here raises to the caller. A segment that fails
is logged and skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

from ..enums import (
    CardCategory,
    Color,
    EffectTimingType,
    ModifierDuration,
    TriggerTiming,
    ZoneId,
)
from ..exceptions import EffectParseError
from .types import (
    CompareOperator,
    ConditionExpr,
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

logger = logging.getLogger(__name__)

# ==================== Labels ====================

# Labels that start a new segment
LABEL_PATTERN = re.compile(
    r"\[(On Play|When Attacking|When Attacked|On K\.O\.|Activate:\s*Main|DON!!\s*x\d+"
    r"|End of Your Turn|Start of Your Turn|On Block|On Your Opponent's Attack"
    r"|Trigger|Counter|Blocker|Rush|Double Attack|Banish)\]",
    re.IGNORECASE,
)
ONCE_PER_TURN_PATTERN = re.compile(r"\[Once Per Turn\]", re.IGNORECASE)
DON_LABEL_PATTERN = re.compile(r"\[DON!!\s*x(\d+)\]", re.IGNORECASE)

KEYWORD_LABELS = frozenset({"blocker", "rush", "double attack", "banish"})

# Label (lower case, brackets stripped) -> trigger timing of AUTO effects
TRIGGER_TIMINGS: dict[str, TriggerTiming] = {
    "on play": TriggerTiming.ON_PLAY,
    "when attacking": TriggerTiming.WHEN_ATTACKING,
    "when attacked": TriggerTiming.WHEN_ATTACKED,
    "on k.o.": TriggerTiming.ON_KO,
    "end of your turn": TriggerTiming.END_OF_YOUR_TURN,
    "start of your turn": TriggerTiming.START_OF_TURN,
    "on block": TriggerTiming.ON_BLOCK,
    "on your opponent's attack": TriggerTiming.ON_OPPONENT_ATTACK,
    "trigger": TriggerTiming.TRIGGER,
    "counter": TriggerTiming.COUNTER,
}


def _label_key(label: str) -> str:
    return re.sub(r"\s+", " ", label.strip("[]").strip().lower())


def is_keyword_label(label: str) -> bool:
    return _label_key(label) in KEYWORD_LABELS


def timing_for_label(label: str) -> tuple[EffectTimingType, Optional[TriggerTiming]]:
    """Timing type and trigger timing for a label."""
    key = _label_key(label)
    if key.startswith("activate"):
        return EffectTimingType.ACTIVATE, None
    if key in KEYWORD_LABELS or key.startswith("don!!"):
        return EffectTimingType.PERMANENT, None
    timing = TRIGGER_TIMINGS.get(key)
    if timing is None:
        raise EffectParseError(f"Unknown label {label}", segment=label)
    return EffectTimingType.AUTO, timing


@dataclass
class Segment:
    label: str
    body: str


def split_segments(text: str) -> list[Segment]:
    """Split card text at its labels.

    A keyword label inside a sentence ("This Character gains [Rush].") is
    body text, not a boundary. Text before the first label is attached to
    the first segment's body.
    """
    boundaries = []
    for match in LABEL_PATTERN.finditer(text):
        before = text[:match.start()].rstrip()
        if is_keyword_label(match.group(0)) and before and before[-1] not in ".])":
            continue
        boundaries.append(match)

    if not boundaries:
        return []

    leading = text[:boundaries[0].start()].strip()
    segments = []
    for i, match in enumerate(boundaries):
        end = boundaries[i + 1].start() if i + 1 < len(boundaries) else len(text)
        segments.append(Segment(label=match.group(0), body=text[match.end():end].strip()))

    if leading:
        first = segments[0]
        first.body = f"{first.body} {leading}".strip()
    return segments


# ==================== Regex helpers ====================

_NUMBER = r"(\d+)"
COLOR_WORDS = {c.value.lower(): c for c in Color}
_COLOR_PATTERN = re.compile(r"\b(" + "|".join(COLOR_WORDS) + r")\b", re.IGNORECASE)
_ZONE_WORDS = {"hand": ZoneId.HAND, "deck": ZoneId.DECK, "trash": ZoneId.TRASH}
_SOURCE_ZONE_PATTERN = re.compile(
    r"\b(?:from|in)\s+(?:your\s+opponent's\s+|your\s+|their\s+|the\s+|its\s+owner's\s+)?(hand|deck|trash)\b",
    re.IGNORECASE,
)
_TYPE_TAG_PATTERN = re.compile(r"\{([^}]+)\}")


def _first_int(pattern: str, text: str) -> Optional[int]:
    match = re.search(pattern, text, re.IGNORECASE)
    return int(match.group(1)) if match else None


def parse_duration(body: str) -> ModifierDuration:
    lower = body.lower()
    if "during this battle" in lower or "until end of battle" in lower:
        return ModifierDuration.UNTIL_END_OF_BATTLE
    if "until the start of your next turn" in lower:
        return ModifierDuration.UNTIL_START_OF_NEXT_TURN
    if "during this turn" in lower or "until end of turn" in lower or "until the end of" in lower:
        return ModifierDuration.UNTIL_END_OF_TURN
    return ModifierDuration.PERMANENT


def _max_cost(body: str) -> Optional[int]:
    return _first_int(r"cost\s*(?:of\s*)?" + _NUMBER + r"\s*or\s*less", body)


def _max_power(body: str) -> Optional[int]:
    return _first_int(_NUMBER + r"\s*power\s*or\s*less", body)


def _colors(body: str) -> tuple[Color, ...]:
    found: list[Color] = []
    for match in _COLOR_PATTERN.finditer(body):
        color = COLOR_WORDS[match.group(1).lower()]
        if color not in found:
            found.append(color)
    return tuple(found)


def _categories(lower: str) -> tuple[CardCategory, ...]:
    categories = []
    for word, category in (
        ("leader", CardCategory.LEADER),
        ("character", CardCategory.CHARACTER),
        ("stage", CardCategory.STAGE),
        ("event", CardCategory.EVENT),
    ):
        if word in lower:
            categories.append(category)
    return tuple(categories)


def parse_targeting(body: str) -> dict:
    """Target count bounds and a ``TargetFilter`` from keyword co-occurrence."""
    lower = body.lower()
    target_count = min_targets = max_targets = 1

    up_to = _first_int(r"up\s*to\s*" + _NUMBER, body)
    if up_to is not None:
        target_count = max_targets = up_to
        min_targets = 0
    else:
        exact = _first_int(_NUMBER + r"\s*of\s*(?:your|opponent)", body)
        if exact is not None:
            target_count = min_targets = max_targets = exact

    controller = None
    if "your opponent" in lower or "opponent's" in lower:
        controller = "opponent"
    elif "your" in lower:
        controller = "self"

    categories = _categories(lower)

    zones: list[ZoneId] = []
    for match in _SOURCE_ZONE_PATTERN.finditer(body):
        zone = _ZONE_WORDS[match.group(1).lower()]
        if zone not in zones:
            zones.append(zone)
    if not zones:
        if CardCategory.LEADER in categories:
            zones.append(ZoneId.LEADER_AREA)
        if CardCategory.CHARACTER in categories:
            zones.append(ZoneId.CHARACTER_AREA)
        if CardCategory.STAGE in categories:
            zones.append(ZoneId.STAGE_AREA)

    max_cost = _max_cost(body)
    max_power = _max_power(body)
    target_filter = TargetFilter(
        controller=controller,
        zone=tuple(zones),
        category=categories,
        color=_colors(body),
        cost_range=ValueRange(max=max_cost) if max_cost is not None else None,
        power_range=ValueRange(max=max_power) if max_power is not None else None,
    )
    return {
        "target_type": TargetType.CARD,
        "target_count": target_count,
        "min_targets": min_targets,
        "max_targets": max_targets,
        "target_filter": target_filter,
    }


def parse_search_criteria(body: str) -> SearchCriteria:
    lower = body.lower()
    category: tuple[CardCategory, ...] = ()
    for word, cat in (("character", CardCategory.CHARACTER), ("event", CardCategory.EVENT),
                      ("stage", CardCategory.STAGE)):
        if word in lower:
            category = (cat,)
            break
    colors = _colors(body)
    max_cost = _max_cost(body)
    max_power = _max_power(body)
    return SearchCriteria(
        category=category,
        color=colors[:1],
        cost=ValueRange(max=max_cost) if max_cost is not None else None,
        power=ValueRange(max=max_power) if max_power is not None else None,
        type_tags=tuple(t.strip() for t in _TYPE_TAG_PATTERN.findall(body)),
    )


# ==================== Builders ====================

Built = tuple[EffectType, EffectParameters]


def build_power_modification(body: str) -> Built:
    match = re.search(r"([+\-−]\s*\d+)\s*power", body, re.IGNORECASE)
    power_change = None
    if match:
        power_change = int(match.group(1).replace("−", "-").replace(" ", ""))
    return EffectType.POWER_MODIFICATION, EffectParameters(
        power_change=power_change, duration=parse_duration(body), **parse_targeting(body),
    )


def build_ko(body: str) -> Built:
    return EffectType.KO_CHARACTER, EffectParameters(
        max_power=_max_power(body), max_cost=_max_cost(body), **parse_targeting(body),
    )


def build_bounce(body: str) -> Built:
    return EffectType.BOUNCE_CHARACTER, EffectParameters(
        max_cost=_max_cost(body), **parse_targeting(body),
    )


def build_banish(body: str) -> Built:
    return EffectType.BANISH_CHARACTER, EffectParameters(
        max_cost=_max_cost(body), max_power=_max_power(body), **parse_targeting(body),
    )


def build_search(body: str) -> Built:
    count = _first_int(r"top\s*" + _NUMBER, body) or _first_int(_NUMBER + r"\s*card", body) or 1
    pick = _first_int(r"(?:reveal|add)\s*up\s*to\s*" + _NUMBER, body)
    return EffectType.SEARCH_DECK, EffectParameters(
        card_count=count,
        search_criteria=parse_search_criteria(body),
        min_targets=0,
        max_targets=pick if pick is not None else 1,
    )


def build_draw(body: str) -> Built:
    count = _first_int(r"draw\s*" + _NUMBER, body)
    return EffectType.DRAW_CARDS, EffectParameters(card_count=count if count is not None else 1)


def build_discard(body: str) -> Built:
    count = _first_int(r"discard\s*" + _NUMBER, body)
    return EffectType.DISCARD_CARDS, EffectParameters(card_count=count if count is not None else 1)


def build_trash(body: str) -> Built:
    count = _first_int(r"trash\s*(?:up\s*to\s*)?" + _NUMBER, body)
    return EffectType.TRASH_CARDS, EffectParameters(
        card_count=count if count is not None else 1, **parse_targeting(body),
    )


def build_rest(body: str) -> Built:
    return EffectType.REST_CHARACTER, EffectParameters(**parse_targeting(body))


def build_activate(body: str) -> Built:
    return EffectType.ACTIVATE_CHARACTER, EffectParameters(**parse_targeting(body))


def build_attach_don(body: str) -> Built:
    count = _first_int(_NUMBER + r"\s*(?:rested\s*|active\s*)?don", body)
    return EffectType.ATTACH_DON, EffectParameters(
        value=count if count is not None else 1, **parse_targeting(body),
    )


def build_damage(body: str) -> Built:
    amount = _first_int(_NUMBER + r"\s*damage", body)
    return EffectType.DEAL_DAMAGE, EffectParameters(
        value=amount if amount is not None else 1, target_type=TargetType.PLAYER,
    )


def build_keyword_grant(body: str) -> Built:
    lower = body.lower()
    keyword = next(
        (k for k in ("Double Attack", "Rush", "Blocker", "Banish") if k.lower() in lower), None,
    )
    return EffectType.GRANT_KEYWORD, EffectParameters(
        keyword=keyword, duration=parse_duration(body), **parse_targeting(body),
    )


# ==================== Rule table ====================


@dataclass(frozen=True)
class ParseRule:
    """Body classifier: the first rule whose predicate matches wins"""

    name: str
    predicate: Callable[[str], bool]
    builder: Callable[[str], Built]


def _has(*words: str) -> Callable[[str], bool]:
    return lambda lower: all(w in lower for w in words)


_REST_WORD = re.compile(r"\brest\b")


PARSE_RULES: tuple[ParseRule, ...] = (
    ParseRule(
        "power_modification",
        lambda b: "give" in b and ("power" in b or (("+" in b or "-" in b) and "don!!" not in b)),
        build_power_modification,
    ),
    ParseRule("ko", _has("k.o."), build_ko),
    ParseRule("bounce", _has("return", "hand"), build_bounce),
    ParseRule("banish", _has("remove", "from the game"), build_banish),
    ParseRule("search", lambda b: "search" in b or ("look at" in b and "deck" in b), build_search),
    ParseRule("draw", _has("draw"), build_draw),
    ParseRule("discard", _has("discard"), build_discard),
    ParseRule("trash", _has("trash"), build_trash),
    ParseRule("rest", lambda b: _REST_WORD.search(b) is not None and "character" in b, build_rest),
    ParseRule(
        "activate",
        lambda b: ("activate" in b or "as active" in b) and "character" in b,
        build_activate,
    ),
    ParseRule("attach_don", lambda b: ("attach" in b or "give" in b) and "don" in b, build_attach_don),
    ParseRule("damage", _has("deal", "damage"), build_damage),
    ParseRule(
        "keyword_grant",
        lambda b: "gain" in b and any(k in b for k in ("rush", "blocker", "double attack", "banish")),
        build_keyword_grant,
    ),
)


def classify_body(body: str, rules: tuple[ParseRule, ...] = PARSE_RULES) -> tuple[Optional[str], Built]:
    """Run the rule table over a body.

    Returns:
        (matching rule name or None, (effect type, parameters)). No match
        gives POWER_MODIFICATION with empty parameters.
    """
    lower = body.lower()
    for rule in rules:
        if rule.predicate(lower):
            return rule.name, rule.builder(body)
    return None, (EffectType.POWER_MODIFICATION, EffectParameters())


# ==================== Costs & conditions ====================

# ①..⑩ and the dingbat forms ➀..➉
_CIRCLED_DIGITS = {
    chr(base + i): i + 1
    for base in (0x2460, 0x2780)
    for i in range(10)
}

_COST_PATTERNS: tuple[tuple[re.Pattern, CostType], ...] = (
    (re.compile(r"rest\s*" + _NUMBER + r"\s*(?:of\s*your\s*)?don", re.IGNORECASE), CostType.REST_DON),
    (re.compile(r"trash\s*" + _NUMBER + r"\s*cards?\s*from\s*your\s*hand", re.IGNORECASE), CostType.TRASH_CARD),
    (re.compile(r"rest\s*" + _NUMBER + r"\s*of\s*your\s*characters?", re.IGNORECASE), CostType.REST_CARD),
)


def parse_cost(prefix: str) -> Optional[CostExpr]:
    """Cost expression from the text before a body's ':' (None if none)."""
    costs: list[CostExpr] = []
    circled = sum(n for ch, n in _CIRCLED_DIGITS.items() if ch in prefix)
    if circled:
        costs.append(CostExpr.rest_don(circled))
    for pattern, cost_type in _COST_PATTERNS:
        match = pattern.search(prefix)
        if match:
            costs.append(CostExpr(cost_type, amount=int(match.group(1))))
    if not costs:
        return None
    if len(costs) == 1:
        return costs[0]
    return CostExpr.composite(*costs)


def split_cost(body: str) -> tuple[Optional[CostExpr], str]:
    """Lift a leading "<cost>:" off the body."""
    head, sep, rest = body.partition(":")
    if not sep or len(head) > 120:
        return None, body
    cost = parse_cost(head)
    if cost is None:
        return None, body
    return cost, rest.strip()


_CONDITION_PATTERNS: tuple[tuple[re.Pattern, str, CompareOperator], ...] = (
    (re.compile(r"if you have " + _NUMBER + r" or more don!! cards?[^,.]*[,.]?", re.IGNORECASE),
     "controller.don", CompareOperator.GTE),
    (re.compile(r"if you have " + _NUMBER + r" or (?:less|fewer) cards? in your hand[,.]?", re.IGNORECASE),
     "controller.hand", CompareOperator.LTE),
    (re.compile(r"if you have " + _NUMBER + r" or (?:less|fewer) life cards?[,.]?", re.IGNORECASE),
     "controller.life", CompareOperator.LTE),
    (re.compile(r"if your opponent has " + _NUMBER + r" or more characters?[,.]?", re.IGNORECASE),
     "opponent.characters", CompareOperator.GTE),
    (re.compile(r"if you have " + _NUMBER + r" or more characters?[,.]?", re.IGNORECASE),
     "controller.characters", CompareOperator.GTE),
)


def split_conditions(body: str) -> tuple[list[ConditionExpr], str]:
    """Lift "If you have ..." clauses off the body as COMPARE conditions."""
    conditions: list[ConditionExpr] = []
    for pattern, ref, op in _CONDITION_PATTERNS:
        match = pattern.search(body)
        if match:
            conditions.append(ConditionExpr.compare(ref, op, int(match.group(1))))
            body = (body[:match.start()] + body[match.end():]).strip()
    return conditions, body


def don_condition(required: int) -> ConditionExpr:
    return ConditionExpr.compare("source.don", CompareOperator.GTE, required)


def _combine(conditions: list[ConditionExpr]) -> Optional[ConditionExpr]:
    if not conditions:
        return None
    if len(conditions) == 1:
        return conditions[0]
    return ConditionExpr.all_of(*conditions)


# ==================== Parser ====================


class EffectParser:
    """Card text -> effect definitions

    ``rules`` is the ordered classification table; pass a different tuple
    to change the tie-break policy.
    """

    def __init__(self, rules: tuple[ParseRule, ...] = PARSE_RULES):
        self.rules = rules

    def parse(self, text: Optional[str], card_id: str) -> list[EffectDefinition]:
        """
        Parse card text.

        Args:
            text: printed effect text (``None`` and blank text give ``[]``)
            card_id: id of the card carrying the text

        Returns:
            Definitions in text order
        """
        if not isinstance(text, str) or not text.strip():
            return []

        definitions: list[EffectDefinition] = []
        pending_don: Optional[int] = None

        for index, segment in enumerate(split_segments(text)):
            try:
                don_match = DON_LABEL_PATTERN.fullmatch(segment.label)
                body = ONCE_PER_TURN_PATTERN.sub("", segment.body).strip()
                if don_match and not body:
                    # "[DON!! x1] [When Attacking] ..." applies to the next segment
                    pending_don = int(don_match.group(1))
                    continue
                definition = self.parse_segment(segment, card_id, index, pending_don)
                pending_don = None
                if definition is not None:
                    definitions.append(definition)
            except EffectParseError as e:
                logger.warning("Skipping effect segment of %s: %s", card_id, e)
            except Exception as e:
                logger.warning("Failed to parse effect segment of %s %r: %s", card_id, segment.label, e)

        return definitions

    def parse_segment(
        self,
        segment: Segment,
        card_id: str,
        index: int,
        pending_don: Optional[int] = None,
    ) -> Optional[EffectDefinition]:
        """One segment -> definition, or None for keyword-only segments."""
        label = segment.label
        if is_keyword_label(label):
            return None

        once_per_turn = bool(ONCE_PER_TURN_PATTERN.search(segment.body))
        body = ONCE_PER_TURN_PATTERN.sub("", segment.body).strip()
        if not body:
            raise EffectParseError("Label without effect text", card_id=card_id, segment=label)

        timing_type, trigger_timing = timing_for_label(label)

        conditions: list[ConditionExpr] = []
        don_match = DON_LABEL_PATTERN.fullmatch(label)
        if don_match:
            conditions.append(don_condition(int(don_match.group(1))))
        elif pending_don is not None:
            conditions.append(don_condition(pending_don))

        cost, body = split_cost(body)
        parsed_conditions, body = split_conditions(body)
        conditions.extend(parsed_conditions)

        rule_name, (effect_type, parameters) = classify_body(body, self.rules)
        if rule_name is None:
            logger.warning("Unknown effect type for %s body: %r", card_id, body)

        return EffectDefinition(
            id=f"{card_id}-effect-{index}",
            source_card_id=card_id,
            label=label,
            timing_type=timing_type,
            trigger_timing=trigger_timing,
            effect_type=effect_type,
            condition=_combine(conditions),
            cost=cost,
            parameters=parameters,
            once_per_turn=once_per_turn,
        )


_default_parser = EffectParser()


def parse_effect_text(text: Optional[str], card_id: str) -> list[EffectDefinition]:
    """Parse card text with the default rule table."""
    return _default_parser.parse(text, card_id)
