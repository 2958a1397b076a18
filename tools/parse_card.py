"""Card text parsing tool
Shows the effect definitions the parser derives from card text, for
checking new card data and debugging the rule table
"""

import json
import sys
from pathlib import Path
from typing import Any

# Project root
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from logging_config import setup_logging
from tcg.effects.parser import PARSE_RULES, parse_effect_text
from tcg.effects.types import EffectDefinition
from tcg.schema import load_cards

console = Console()


def _fmt(value: Any) -> str:
    if value is None:
        return "-"
    return str(getattr(value, "value", value))


def _params_summary(definition: EffectDefinition) -> str:
    params = definition.parameters
    parts = []
    for name in ("power_change", "max_power", "max_cost", "card_count", "keyword",
                 "value", "min_targets", "max_targets", "duration"):
        value = getattr(params, name)
        if value is not None:
            parts.append(f"{name}={_fmt(value)}")
    f = params.target_filter
    if f is not None:
        if f.controller:
            parts.append(f"controller={f.controller}")
        if f.category:
            parts.append("category=" + "/".join(c.value for c in f.category))
    return ", ".join(parts)


def definitions_table(title: str, definitions: list[EffectDefinition]) -> Table:
    """Render definitions as a rich table"""
    table = Table(title=title, expand=True, border_style="green")
    table.add_column("Id", style="cyan", no_wrap=True)
    table.add_column("Label", style="magenta")
    table.add_column("Timing")
    table.add_column("Type", style="bold")
    table.add_column("Cost")
    table.add_column("Cond", justify="center")
    table.add_column("Parameters")

    for d in definitions:
        timing = d.timing_type.value
        if d.trigger_timing is not None:
            timing += f" ({d.trigger_timing.value})"
        cost = "-" if d.cost is None else f"{d.cost.type.value} {d.cost.amount}"
        table.add_row(
            d.id,
            d.label + (" [1/turn]" if d.once_per_turn else ""),
            timing,
            d.effect_type.value,
            cost,
            "yes" if d.condition is not None else "-",
            _params_summary(d),
        )
    return table


def rules_table() -> Table:
    table = Table(title="Parse rules (first match wins)", border_style="blue")
    table.add_column("#", justify="right")
    table.add_column("Rule", style="cyan")
    table.add_column("Builder")
    for i, rule in enumerate(PARSE_RULES, 1):
        table.add_row(str(i), rule.name, rule.builder.__name__)
    return table


def main(argv: list[str] | None = None) -> int:
    """Command line entry"""
    import argparse

    parser = argparse.ArgumentParser(description="Parse card effect text")
    parser.add_argument('text', nargs='?', help='effect text to parse')
    parser.add_argument('--card-id', default='CARD-000', help='card id used for definition ids')
    parser.add_argument('-f', '--file', help='JSON file with a list of card records')
    parser.add_argument('-r', '--rules', action='store_true', help='list the parse rule order')
    parser.add_argument('-v', '--verbose', action='store_true', help='show parser warnings')

    args = parser.parse_args(argv)
    setup_logging(
        level="DEBUG" if args.verbose else "WARNING",
        enable_file=False,
        enable_console=args.verbose,
        console_level="DEBUG",
    )

    if args.rules:
        console.print(rules_table())
        return 0

    if args.file:
        try:
            with open(args.file, encoding='utf-8') as f:
                records = json.load(f)
            cards = load_cards(records)
        except (OSError, json.JSONDecodeError) as e:
            console.print(f"[red]Cannot read {args.file}: {e}[/red]")
            return 1
        except ValidationError as e:
            console.print(f"[red]Invalid card data:[/red]\n{e}")
            return 1
        for card in cards:
            console.print(definitions_table(f"{card.id} {card.name}", list(card.effects)))
        return 0

    if not args.text:
        parser.print_help()
        return 2

    definitions = parse_effect_text(args.text, args.card_id)
    if not definitions:
        console.print("[yellow]No effects found[/yellow]")
        return 0
    console.print(definitions_table(args.card_id, definitions))
    return 0


if __name__ == "__main__":
    sys.exit(main())
