"""Command-line entry point: compute and roll a skill pool."""

import argparse
import json
import sys
from collections.abc import Sequence

import structlog

from tabuleiro.config import configure_logging, get_settings
from tabuleiro.errors import InvalidConditionError, RulesError
from tabuleiro.game.character.attributes import ATTRIBUTE_NAMES, AttributeSet, ProficiencyTier
from tabuleiro.game.systems.conditions import (
    Condition,
    calculate_condition_dice_penalties,
    format_penalty_summary,
)
from tabuleiro.game.systems.dice_pool import PenaltyContext, calculate_skill_pool
from tabuleiro.game.systems.pool_roller import format_pool_result, roll_pool
from tabuleiro.game.systems.results import RollHistory, RollRecord
from tabuleiro.game.systems.rng import SeededRandom, default_source
from tabuleiro.rules.loader import get_rule_tables
from tabuleiro.rules.tables import ArmorTier

logger = structlog.get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ``tabuleiro-roll``."""
    parser = argparse.ArgumentParser(
        prog="tabuleiro-roll",
        description="Roll a Tabuleiro do Caos skill test.",
    )
    parser.add_argument("skill", help="Skill id, e.g. atletismo")
    for name in ATTRIBUTE_NAMES:
        parser.add_argument(f"--{name}", type=int, default=1, help=f"{name} value (default 1)")
    parser.add_argument(
        "--attribute",
        choices=ATTRIBUTE_NAMES,
        help="Roll this attribute instead of the skill's key attribute",
    )
    parser.add_argument(
        "--tier",
        choices=[tier.value for tier in ProficiencyTier],
        default=ProficiencyTier.UNTRAINED.value,
        help="Proficiency tier in the skill",
    )
    parser.add_argument("--level", type=int, default=1, help="Character level")
    parser.add_argument("--signature", action="store_true", help="Skill is the signature ability")
    parser.add_argument("--size", help="Creature size id, e.g. pequeno")
    parser.add_argument("--overloaded", action="store_true", help="Character is overloaded")
    parser.add_argument(
        "--armor",
        choices=[tier.value for tier in ArmorTier],
        default=ArmorTier.NONE.value,
        help="Equipped armor tier",
    )
    parser.add_argument(
        "--no-instrument", action="store_true", help="Character lacks the required instrument"
    )
    parser.add_argument(
        "--condition",
        action="append",
        default=[],
        metavar="ID[:STACKS]",
        help="Active condition, repeatable (e.g. abalado:2)",
    )
    parser.add_argument("--rolls", type=int, default=1, help="Number of times to roll")
    parser.add_argument("--seed", type=int, help="Seed for a reproducible roll")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    return parser


def parse_condition(text: str) -> Condition:
    """Parse ``id`` or ``id:stacks`` into a Condition."""
    condition_id, _, stacks = text.partition(":")
    if not stacks:
        return Condition(id=condition_id, source="cli")
    try:
        count = int(stacks)
    except ValueError:
        raise InvalidConditionError(
            condition_id, f"stack count must be a number, got {stacks!r}"
        ) from None
    return Condition(id=condition_id, stacks=count, source="cli")


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run one ``tabuleiro-roll`` invocation.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings)

    tables = get_rule_tables()
    attributes = AttributeSet(**{name: getattr(args, name) for name in ATTRIBUTE_NAMES})
    conditions = [parse_condition(text) for text in args.condition]
    penalties = calculate_condition_dice_penalties(conditions, (), tables)

    calculation = calculate_skill_pool(
        args.skill,
        attributes,
        args.tier,
        tables=tables,
        attribute=args.attribute,
        is_signature=args.signature,
        level=args.level,
        penalty_context=PenaltyContext(
            is_overloaded=args.overloaded,
            armor_tier=ArmorTier(args.armor),
            has_required_instrument=not args.no_instrument,
        ),
        condition_penalties=penalties,
        size=args.size,
    )

    rng = SeededRandom(args.seed) if args.seed is not None else default_source()
    roll_count = max(args.rolls, 1)
    history = RollHistory(max_size=roll_count)
    for _ in range(roll_count):
        result = roll_pool(calculation.formula, rng)
        history.add(RollRecord.pool(result, calculation.formula, context=args.skill))

    logger.info(
        "skill_rolled",
        skill=args.skill,
        formula=str(calculation.formula),
        rolls=len(history),
        seed=rng.seed,
    )

    records = list(reversed(history.get_all()))
    if args.json:
        payload = {
            "skill": args.skill,
            "formula": {
                "dice_count": calculation.formula.dice_count,
                "die_faces": calculation.formula.die_faces,
                "is_penalty_roll": calculation.formula.is_penalty_roll,
            },
            "was_capped": calculation.was_capped,
            "penalties": penalties,
            "rolls": [
                {
                    "faces": list(record.result.faces),
                    "raw_successes": record.result.raw_successes,
                    "cancellations": record.result.cancellations,
                    "net_successes": record.result.net_successes,
                }
                for record in records
            ],
        }
        print(json.dumps(payload, ensure_ascii=False))
    else:
        print(f"{args.skill}: {calculation.formula}")
        for line in format_penalty_summary(penalties):
            print(f"  {line}")
        for record in records:
            print(f"  {format_pool_result(record.result)}")

    return 0


def run() -> None:
    """Console-script entry point."""
    try:
        sys.exit(main())
    except RulesError as e:
        logger.error("rules_error", error=str(e))
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    run()
