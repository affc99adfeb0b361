"""
Legacy d20 rolling for the older rulebook edition.

In this edition a test rolls a handful of d20s and keeps the highest (or the
lowest, when the attribute is 0 or dice penalties push the count below 1),
then adds a flat modifier built from attribute × proficiency multiplier.
It shares only the randomness source with the pool system.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum

import structlog

from tabuleiro.game.character.attributes import (
    ProficiencyTier,
    calculate_signature_ability_bonus,
    get_proficiency_multiplier,
)
from tabuleiro.game.systems.dice_pool import Modifier
from tabuleiro.game.systems.rng import RandomnessSource
from tabuleiro.rules.tables import SkillMetadata

logger = structlog.get_logger(__name__)

D20_FACES = 20
LOAD_PENALTY = -5
TRUE_CRITICAL_MARGIN = 5
DEFAULT_CRITICAL_RANGE = 20


@dataclass(frozen=True)
class LegacyRollFormula:
    """How many d20s to roll, which one to keep and the flat modifier."""

    dice_count: int
    take_lowest: bool = False
    modifier: int = 0

    def __str__(self) -> str:
        text = f"{self.dice_count}d20"
        if self.take_lowest:
            text += " (lower)"
        if self.modifier:
            text += f"{self.modifier:+d}"
        return text


@dataclass(frozen=True)
class D20RollResult:
    """
    Outcome of a d20 test.

    Attributes:
        rolls: Every d20 rolled, in roll order
        kept: The die that counts (highest, or lowest when take_lowest)
        modifier: Flat modifier added to the kept die
        total: kept + modifier
        take_lowest: Whether the lowest die was kept
        is_critical: The kept die shows 20
        is_disaster: The kept die shows 1
    """

    rolls: tuple[int, ...]
    kept: int
    modifier: int
    total: int
    take_lowest: bool
    is_critical: bool
    is_disaster: bool


@dataclass(frozen=True)
class LegacySkillModifier:
    """Breakdown of a legacy flat skill modifier."""

    attribute_value: int
    proficiency_multiplier: int
    base_modifier: int
    signature_bonus: int
    other_modifiers: int
    load_penalty: int

    @property
    def total(self) -> int:
        return self.base_modifier + self.signature_bonus + self.other_modifiers + self.load_penalty


class AttackOutcome(StrEnum):
    """Result of an attack against a defense value."""

    MISS = "miss"
    GRAZE = "graze"
    HIT = "hit"
    CRITICAL = "critical"
    TRUE_CRITICAL = "true-critical"


OUTCOME_LABELS: dict[AttackOutcome, str] = {
    AttackOutcome.MISS: "ERROU",
    AttackOutcome.GRAZE: "ATAQUE DE RASPÃO",
    AttackOutcome.HIT: "ACERTOU",
    AttackOutcome.CRITICAL: "CRÍTICO!",
    AttackOutcome.TRUE_CRITICAL: "CRÍTICO VERDADEIRO!!",
}


@dataclass(frozen=True)
class AttackResult:
    """Attack roll compared to a defense."""

    attack_roll: int
    natural_roll: int
    defense: int
    critical_range: int
    outcome: AttackOutcome
    margin: int

    @property
    def is_critical(self) -> bool:
        return self.outcome in (AttackOutcome.CRITICAL, AttackOutcome.TRUE_CRITICAL)

    @property
    def is_true_critical(self) -> bool:
        return self.outcome == AttackOutcome.TRUE_CRITICAL

    @property
    def is_graze(self) -> bool:
        return self.outcome == AttackOutcome.GRAZE

    @property
    def is_hit(self) -> bool:
        return self.outcome not in (AttackOutcome.MISS, AttackOutcome.GRAZE)


def dice_for_test(number_of_dice: int) -> tuple[int, bool]:
    """
    Translate a d20 count into (dice to roll, keep lowest).

    - n > 0: roll n, keep the highest
    - n = 0: roll 2, keep the lowest
    - n < 0: roll |n| + 2, keep the lowest

    Examples:
        >>> dice_for_test(3)
        (3, False)
        >>> dice_for_test(0)
        (2, True)
        >>> dice_for_test(-1)
        (3, True)
    """
    if number_of_dice > 0:
        return number_of_dice, False
    return abs(number_of_dice) + 2, True


def roll_formula(formula: LegacyRollFormula, rng: RandomnessSource) -> D20RollResult:
    """Roll a legacy formula, drawing one d20 per die left to right."""
    count = max(formula.dice_count, 1)
    rolls = tuple(rng.randint(1, D20_FACES) for _ in range(count))
    kept = min(rolls) if formula.take_lowest else max(rolls)

    result = D20RollResult(
        rolls=rolls,
        kept=kept,
        modifier=formula.modifier,
        total=kept + formula.modifier,
        take_lowest=formula.take_lowest,
        is_critical=kept == D20_FACES,
        is_disaster=kept == 1,
    )

    logger.debug(
        "d20_test_rolled",
        rolls=rolls,
        kept=kept,
        total=result.total,
        is_critical=result.is_critical,
        is_disaster=result.is_disaster,
    )

    return result


def roll_d20_test(number_of_dice: int, modifier: int, rng: RandomnessSource) -> D20RollResult:
    """
    Roll a d20 test.

    Args:
        number_of_dice: d20 count (see dice_for_test for 0 and negative counts)
        modifier: Flat modifier added to the kept die
        rng: Randomness source

    Returns:
        Rolled dice, kept die, total and critical/disaster flags
    """
    count, take_lowest = dice_for_test(number_of_dice)
    return roll_formula(LegacyRollFormula(count, take_lowest, modifier), rng)


def calculate_legacy_skill_modifier(
    attribute_value: int,
    tier: ProficiencyTier | str,
    *,
    is_signature: bool = False,
    level: int = 1,
    modifiers: Iterable[Modifier] = (),
    is_overloaded: bool = False,
    skill: SkillMetadata | None = None,
) -> LegacySkillModifier:
    """
    Calculate a legacy flat skill modifier.

    Total = attribute × proficiency multiplier + signature bonus + flat
    modifiers, with -5 when overloaded on a load-sensitive skill. Only the
    modifiers that do not affect dice count here.
    """
    multiplier = get_proficiency_multiplier(tier)
    base = attribute_value * multiplier
    signature_bonus = calculate_signature_ability_bonus(level) if is_signature else 0
    other = sum(m.value for m in modifiers if not m.affects_dice)
    load_penalty = 0
    if is_overloaded and skill is not None and skill.load_sensitive:
        load_penalty = LOAD_PENALTY

    return LegacySkillModifier(
        attribute_value=attribute_value,
        proficiency_multiplier=multiplier,
        base_modifier=base,
        signature_bonus=signature_bonus,
        other_modifiers=other,
        load_penalty=load_penalty,
    )


def calculate_legacy_roll_formula(
    attribute_value: int,
    total_modifier: int,
    dice_modifiers: Iterable[Modifier] = (),
) -> LegacyRollFormula:
    """
    Build the d20 formula for a legacy skill test.

    The attribute sets the number of d20s (0 means 2 dice keeping the lowest).
    Dice modifiers add or remove d20s; if the count drops below 1, roll
    ``abs(count)`` dice (at least 1) and keep the lowest.

    Examples:
        >>> str(calculate_legacy_roll_formula(2, 4))
        '2d20+4'
        >>> str(calculate_legacy_roll_formula(0, 2))
        '2d20 (lower)+2'
        >>> str(calculate_legacy_roll_formula(2, 5, [Modifier.dice("Cego", -3)]))
        '1d20 (lower)+5'
    """
    dice_count = attribute_value
    take_lowest = False
    if attribute_value == 0:
        dice_count = 2
        take_lowest = True

    dice_count += sum(m.value for m in dice_modifiers if m.affects_dice)

    if dice_count < 1:
        dice_count = abs(dice_count) or 1
        take_lowest = True

    return LegacyRollFormula(
        dice_count=dice_count, take_lowest=take_lowest, modifier=total_modifier
    )


def calculate_attack_outcome(
    attack_roll: int,
    natural_roll: int,
    defense: int,
    critical_range: int = DEFAULT_CRITICAL_RANGE,
) -> AttackResult:
    """
    Compare an attack roll with a defense.

    - A natural 20, or a total above the defense, hits
    - A hit whose natural roll is within the critical range is a critical;
      with a margin of 5 or more it is a true critical
    - A total equal to the defense grazes
    - Anything else misses

    Args:
        attack_roll: Attack total (kept die + modifier)
        natural_roll: The kept die alone
        defense: Target defense
        critical_range: Lowest natural roll that crits
    """
    margin = attack_roll - defense
    in_critical_range = natural_roll >= critical_range

    if natural_roll == D20_FACES or attack_roll > defense:
        if in_critical_range and margin >= TRUE_CRITICAL_MARGIN:
            outcome = AttackOutcome.TRUE_CRITICAL
        elif in_critical_range:
            outcome = AttackOutcome.CRITICAL
        else:
            outcome = AttackOutcome.HIT
    elif attack_roll == defense:
        outcome = AttackOutcome.GRAZE
    else:
        outcome = AttackOutcome.MISS

    return AttackResult(
        attack_roll=attack_roll,
        natural_roll=natural_roll,
        defense=defense,
        critical_range=critical_range,
        outcome=outcome,
        margin=margin,
    )
