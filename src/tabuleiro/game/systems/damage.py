"""
Damage resolution for Tabuleiro do Caos.

Normal hits roll their damage dice. Criticals maximize the base dice instead
of rolling them, and true criticals roll an extra bonus spec on top. A graze
deals half the maximum base damage when the attack has dice, or a third of the
flat modifier when it does not, never less than 1.
"""

import re
from dataclasses import dataclass
from enum import StrEnum

import structlog

from tabuleiro.game.systems.legacy_d20 import AttackOutcome
from tabuleiro.game.systems.rng import RandomnessSource

logger = structlog.get_logger(__name__)

GRAZE_MINIMUM = 1
GRAZE_FLAT_DIVISOR = 3

_DICE_PATTERN = re.compile(r"^\s*(?:(\d*)\s*d\s*(\d+))?\s*(?:([+-])\s*(\d+))?\s*$", re.IGNORECASE)
_FLAT_PATTERN = re.compile(r"^\s*([+-]?\d+)\s*$")


@dataclass(frozen=True)
class DiceSpec:
    """
    A damage expression such as 2d6+3.

    Attributes:
        count: Number of dice (0 for flat damage)
        faces: Die size
        modifier: Flat modifier added after the dice
    """

    count: int = 0
    faces: int = 6
    modifier: int = 0

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"Dice count must be >= 0, got {self.count}")
        if self.faces < 1:
            raise ValueError(f"Die faces must be >= 1, got {self.faces}")

    @classmethod
    def parse(cls, text: str) -> "DiceSpec":
        """
        Parse a dice expression.

        Accepts ``"2d6+3"``, ``"d8"``, ``"1d10-1"`` and flat values like ``"4"``.

        Raises:
            ValueError: If the text is not a dice expression

        Examples:
            >>> DiceSpec.parse("2d6+3")
            DiceSpec(count=2, faces=6, modifier=3)
            >>> DiceSpec.parse("5")
            DiceSpec(count=0, faces=6, modifier=5)
        """
        flat = _FLAT_PATTERN.match(text)
        if flat:
            return cls(count=0, modifier=int(flat.group(1)))

        match = _DICE_PATTERN.match(text)
        if not match or match.group(2) is None:
            raise ValueError(f"Invalid dice expression: {text!r}")

        count_text, faces_text, sign, amount = match.groups()
        count = int(count_text) if count_text else 1
        modifier = int(amount) if amount else 0
        if sign == "-":
            modifier = -modifier
        return cls(count=count, faces=int(faces_text), modifier=modifier)

    @property
    def has_dice(self) -> bool:
        return self.count > 0

    @property
    def maximum(self) -> int:
        """Highest total the dice can show, before the modifier."""
        return self.count * self.faces

    def __str__(self) -> str:
        if not self.has_dice:
            return str(self.modifier)
        text = f"{self.count}d{self.faces}"
        if self.modifier:
            text += f"{self.modifier:+d}"
        return text


class DamageKind(StrEnum):
    """How damage is resolved."""

    NORMAL = "normal"
    CRITICAL = "critical"
    TRUE_CRITICAL = "true-critical"
    GRAZE = "graze"

    @classmethod
    def from_flags(
        cls, *, is_critical: bool = False, is_true_critical: bool = False, is_graze: bool = False
    ) -> "DamageKind":
        """Pick a kind from attack flags; graze wins over any critical flag."""
        if is_graze:
            return cls.GRAZE
        if is_true_critical:
            return cls.TRUE_CRITICAL
        if is_critical:
            return cls.CRITICAL
        return cls.NORMAL

    @classmethod
    def from_outcome(cls, outcome: AttackOutcome) -> "DamageKind | None":
        """Damage kind for an attack outcome, or None for a miss."""
        return _OUTCOME_DAMAGE.get(outcome)


_OUTCOME_DAMAGE: dict[AttackOutcome, DamageKind] = {
    AttackOutcome.GRAZE: DamageKind.GRAZE,
    AttackOutcome.HIT: DamageKind.NORMAL,
    AttackOutcome.CRITICAL: DamageKind.CRITICAL,
    AttackOutcome.TRUE_CRITICAL: DamageKind.TRUE_CRITICAL,
}


@dataclass(frozen=True)
class DamageRoll:
    """Dice rolled for one spec."""

    rolls: tuple[int, ...]
    modifier: int

    @property
    def dice_total(self) -> int:
        return sum(self.rolls)

    @property
    def total(self) -> int:
        """Dice plus modifier, floored at 0."""
        return max(0, self.dice_total + self.modifier)


@dataclass(frozen=True)
class DamageResult:
    """
    Resolved damage with its parts.

    Attributes:
        kind: How the damage was resolved
        total: Final damage, never negative
        base_rolls: Base dice rolled (empty when maximized or grazing)
        base_maximized: Maximum of the base dice on a critical
        bonus_rolls: Bonus dice rolled on a true critical
        true_critical_damage: Bonus dice plus bonus modifier on a true critical
        breakdown: Human-readable summary
    """

    kind: DamageKind
    total: int
    base_rolls: tuple[int, ...] = ()
    base_maximized: int | None = None
    bonus_rolls: tuple[int, ...] = ()
    true_critical_damage: int | None = None
    breakdown: str = ""


def roll_damage(spec: DiceSpec, rng: RandomnessSource) -> DamageRoll:
    """
    Roll a damage spec, one die at a time, left to right.

    With no dice the result is just the modifier (floored at 0 by ``total``).
    """
    rolls = tuple(rng.randint(1, spec.faces) for _ in range(spec.count))
    return DamageRoll(rolls=rolls, modifier=spec.modifier)


def calculate_graze_damage(spec: DiceSpec) -> int:
    """
    Graze damage, which is never rolled.

    - With dice: half the maximum base damage, rounded down
    - Flat only: the modifier divided by 3, rounded down
    Either way at least 1.

    Examples:
        >>> calculate_graze_damage(DiceSpec(2, 6, 4))
        6
        >>> calculate_graze_damage(DiceSpec(0, 6, 7))
        2
        >>> calculate_graze_damage(DiceSpec(0, 6, 2))
        1
    """
    if spec.has_dice:
        return max(GRAZE_MINIMUM, spec.maximum // 2)
    return max(GRAZE_MINIMUM, spec.modifier // GRAZE_FLAT_DIVISOR)


def resolve_attack_damage(
    base: DiceSpec,
    rng: RandomnessSource,
    kind: DamageKind = DamageKind.NORMAL,
    critical_bonus: DiceSpec | None = None,
) -> DamageResult:
    """
    Resolve the damage of a landed attack.

    Args:
        base: The attack's damage spec
        rng: Randomness source (not drawn from for grazes or plain criticals)
        kind: How to resolve the damage
        critical_bonus: Extra spec rolled on a true critical

    Returns:
        DamageResult with a non-negative total
    """
    if kind == DamageKind.GRAZE:
        total = calculate_graze_damage(base)
        result = DamageResult(kind=kind, total=total, breakdown=f"Raspão: {base} → {total}")

    elif kind in (DamageKind.CRITICAL, DamageKind.TRUE_CRITICAL):
        maximized = base.maximum
        subtotal = maximized + base.modifier
        breakdown = f"Crítico: {base} maximizado ({maximized}){base.modifier:+d}"

        bonus_rolls: tuple[int, ...] = ()
        true_critical_damage = None
        if kind == DamageKind.TRUE_CRITICAL and critical_bonus is not None:
            bonus = roll_damage(critical_bonus, rng)
            bonus_rolls = bonus.rolls
            true_critical_damage = bonus.dice_total + bonus.modifier
            subtotal += true_critical_damage
            breakdown += f" + Crítico Verdadeiro {critical_bonus} {list(bonus.rolls)}"

        total = max(0, subtotal)
        result = DamageResult(
            kind=kind,
            total=total,
            base_maximized=maximized,
            bonus_rolls=bonus_rolls,
            true_critical_damage=true_critical_damage,
            breakdown=f"{breakdown} = {total}",
        )

    else:
        roll = roll_damage(base, rng)
        result = DamageResult(
            kind=kind,
            total=roll.total,
            base_rolls=roll.rolls,
            breakdown=f"{base}: {list(roll.rolls)}{base.modifier:+d} = {roll.total}",
        )

    logger.debug("damage_resolved", kind=str(kind), base=str(base), total=result.total)

    return result
