"""
Dice pool formula calculation for Tabuleiro do Caos.

A skill test rolls a pool of dice whose size comes from the key attribute plus
bonus and penalty dice, and whose die size comes from the proficiency tier.
A pool that would end up empty or negative becomes a penalty roll instead:
two dice, keeping the lower one.

Everything here is pure; rolling happens in the pool roller.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum

import structlog

from tabuleiro.errors import InvalidModifierError, KeyAttributeRequiredError
from tabuleiro.game.character.attributes import (
    AttributeSet,
    ProficiencyTier,
    calculate_signature_ability_bonus,
    coerce_tier,
    get_die_faces,
)
from tabuleiro.game.systems.conditions import get_dice_penalty_for_attribute
from tabuleiro.rules.tables import ArmorTier, RuleTables, SkillMetadata

logger = structlog.get_logger(__name__)

# Pool limits
MAX_POOL_DICE = 8
PENALTY_ROLL_DICE = 2

VALID_DIE_FACES = frozenset({6, 8, 10, 12, 20})

# Penalty dice
OVERLOAD_PENALTY = -2
PROFICIENCY_PENALTY = -2
INSTRUMENT_PENALTY = -2
ARMOR_PENALTIES: dict[ArmorTier, int] = {
    ArmorTier.NONE: 0,
    ArmorTier.LIGHT: 0,
    ArmorTier.MEDIUM: -1,
    ArmorTier.HEAVY: -2,
}


class ModifierKind(StrEnum):
    """Whether a modifier helps or hinders."""

    BONUS = "bonus"
    PENALTY = "penalty"


@dataclass(frozen=True)
class Modifier:
    """
    A named modifier attached to a test.

    Only modifiers with ``affects_dice`` set change the pool size; the others
    belong to the old flat-bonus system and are carried along untouched.

    Raises:
        InvalidModifierError: If the name is empty or the value's sign disagrees with the kind
    """

    name: str
    value: int
    kind: ModifierKind = ModifierKind.BONUS
    affects_dice: bool = True

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise InvalidModifierError("Modifier name must not be empty")
        if self.kind == ModifierKind.BONUS and self.value < 0:
            raise InvalidModifierError(
                f"Bonus modifier {self.name!r} has negative value {self.value}"
            )
        if self.kind == ModifierKind.PENALTY and self.value > 0:
            raise InvalidModifierError(
                f"Penalty modifier {self.name!r} has positive value {self.value}"
            )

    @classmethod
    def dice(cls, name: str, value: int) -> "Modifier":
        """Build a dice modifier, picking the kind from the value's sign."""
        kind = ModifierKind.PENALTY if value < 0 else ModifierKind.BONUS
        return cls(name=name, value=value, kind=kind, affects_dice=True)


@dataclass(frozen=True)
class PenaltyContext:
    """Equipment state that can cost dice."""

    is_overloaded: bool = False
    armor_tier: ArmorTier = ArmorTier.NONE
    has_required_instrument: bool = True


@dataclass(frozen=True)
class DicePoolFormula:
    """
    A fully resolved pool: how many dice, what size, and whether to keep the lower die.

    Raises:
        ValueError: If dice_count is negative or die_faces is not a pool die
    """

    dice_count: int
    die_faces: int
    is_penalty_roll: bool = False

    def __post_init__(self) -> None:
        if self.dice_count < 0:
            raise ValueError(f"dice_count must be >= 0, got {self.dice_count}")
        if self.die_faces not in VALID_DIE_FACES:
            raise ValueError(
                f"die_faces must be one of {sorted(VALID_DIE_FACES)}, got {self.die_faces}"
            )

    def __str__(self) -> str:
        return format_formula(self)


@dataclass(frozen=True)
class PoolBreakdown:
    """Every term that went into a pool, for display and auditing."""

    attribute: int
    signature_bonus: int = 0
    modifier_dice: int = 0
    overload_penalty: int = 0
    armor_penalty: int = 0
    proficiency_penalty: int = 0
    instrument_penalty: int = 0
    applied_modifiers: tuple[Modifier, ...] = field(default_factory=tuple)

    @property
    def penalty_total(self) -> int:
        """Sum of the load, armor, proficiency and instrument penalties."""
        return (
            self.overload_penalty
            + self.armor_penalty
            + self.proficiency_penalty
            + self.instrument_penalty
        )

    @property
    def total(self) -> int:
        """Pool size before the cap and the penalty-roll rule."""
        return self.attribute + self.signature_bonus + self.modifier_dice + self.penalty_total


@dataclass(frozen=True)
class DicePoolCalculation:
    """Result of a pool calculation."""

    formula: DicePoolFormula
    breakdown: PoolBreakdown

    @property
    def was_capped(self) -> bool:
        """True when the pool hit the dice cap."""
        return not self.formula.is_penalty_roll and self.breakdown.total > MAX_POOL_DICE


def calculate_dice_pool_formula(
    attribute_value: int,
    tier: ProficiencyTier | str,
    *,
    is_signature: bool = False,
    level: int = 1,
    modifiers: Iterable[Modifier] = (),
    penalty_context: PenaltyContext | None = None,
    skill: SkillMetadata | None = None,
) -> DicePoolCalculation:
    """
    Calculate the dice pool for a test.

    Pool = attribute + signature bonus + dice modifiers + penalties, where the
    penalties are independent and cumulative:
    - overload: -2d on load-sensitive skills
    - armor: -1d medium, -2d heavy on load-sensitive skills
    - proficiency: -2d when untrained in a skill that requires proficiency
    - instrument: -2d when the skill needs an instrument the character lacks

    A total of 0 or less becomes a penalty roll (2 dice, keep the lower);
    otherwise the pool is capped at 8 dice.

    Args:
        attribute_value: Value of the attribute being rolled
        tier: Proficiency tier in the skill (sets the die size)
        is_signature: Whether this is the character's signature skill
        level: Character level (scales the signature bonus)
        modifiers: Modifiers attached to the test; only dice modifiers count
        penalty_context: Overload, armor and instrument state
        skill: Skill metadata; without it no skill-flag penalty applies

    Returns:
        The resolved formula with its breakdown

    Examples:
        >>> calculate_dice_pool_formula(3, "versed").formula
        DicePoolFormula(dice_count=3, die_faces=10, is_penalty_roll=False)
    """
    tier = coerce_tier(tier)
    context = penalty_context or PenaltyContext()
    die_faces = get_die_faces(tier)

    signature_bonus = calculate_signature_ability_bonus(level) if is_signature else 0

    applied = tuple(m for m in modifiers if m.affects_dice)
    modifier_dice = sum(m.value for m in applied)

    overload_penalty = 0
    armor_penalty = 0
    proficiency_penalty = 0
    instrument_penalty = 0
    if skill is not None:
        if skill.load_sensitive:
            if context.is_overloaded:
                overload_penalty = OVERLOAD_PENALTY
            armor_penalty = ARMOR_PENALTIES[context.armor_tier]
        if skill.requires_proficiency and tier == ProficiencyTier.UNTRAINED:
            proficiency_penalty = PROFICIENCY_PENALTY
        if skill.requires_instrument and not context.has_required_instrument:
            instrument_penalty = INSTRUMENT_PENALTY

    breakdown = PoolBreakdown(
        attribute=attribute_value,
        signature_bonus=signature_bonus,
        modifier_dice=modifier_dice,
        overload_penalty=overload_penalty,
        armor_penalty=armor_penalty,
        proficiency_penalty=proficiency_penalty,
        instrument_penalty=instrument_penalty,
        applied_modifiers=applied,
    )

    total = breakdown.total
    if total <= 0:
        formula = DicePoolFormula(PENALTY_ROLL_DICE, die_faces, is_penalty_roll=True)
    else:
        formula = DicePoolFormula(min(total, MAX_POOL_DICE), die_faces)

    logger.debug(
        "dice_pool_calculated",
        skill=skill.id if skill else None,
        tier=str(tier),
        total=total,
        dice_count=formula.dice_count,
        die_faces=die_faces,
        is_penalty_roll=formula.is_penalty_roll,
    )

    return DicePoolCalculation(formula=formula, breakdown=breakdown)


def calculate_skill_pool(
    skill_id: str,
    attributes: AttributeSet,
    tier: ProficiencyTier | str,
    *,
    tables: RuleTables,
    attribute: str | None = None,
    is_signature: bool = False,
    level: int = 1,
    modifiers: Iterable[Modifier] = (),
    penalty_context: PenaltyContext | None = None,
    condition_penalties: Mapping[str, int] | None = None,
    size: str | None = None,
) -> DicePoolCalculation:
    """
    Calculate the pool for a skill test straight from character state.

    Resolves the skill's metadata and key attribute from the rule tables, then
    folds in the condition penalty for that attribute and the creature-size
    modifier for the skill as named dice modifiers.

    Args:
        skill_id: Skill id from the skill table
        attributes: The character's attributes
        tier: Proficiency tier in the skill
        tables: Rule tables
        attribute: Attribute to roll instead of the skill's default
        is_signature: Whether this is the character's signature skill
        level: Character level
        modifiers: Extra modifiers attached to the test
        penalty_context: Overload, armor and instrument state
        condition_penalties: Output of calculate_condition_dice_penalties
        size: Creature size id

    Raises:
        UnknownSkillError: If the skill id is not in the table
        UnknownAttributeError: If the chosen attribute is not one of the six
        KeyAttributeRequiredError: If the skill has no default attribute and none was given
    """
    try:
        skill = tables.get_skill(skill_id)
    except KeyError:
        logger.warning("unknown_skill", skill_id=skill_id)
        raise

    key_attribute = attribute or skill.key_attribute
    if key_attribute is None:
        raise KeyAttributeRequiredError(skill_id)
    attribute_value = attributes.get(key_attribute)

    extra = list(modifiers)
    if condition_penalties:
        condition_dice = get_dice_penalty_for_attribute(condition_penalties, key_attribute)
        if condition_dice:
            extra.append(Modifier.dice("Condições", condition_dice))
    if size is not None:
        size_info = tables.get_size(size)
        size_dice = size_info.skill_dice.get(skill_id, 0)
        if size_dice:
            extra.append(Modifier.dice(f"Tamanho ({size_info.label})", size_dice))

    return calculate_dice_pool_formula(
        attribute_value,
        tier,
        is_signature=is_signature,
        level=level,
        modifiers=extra,
        penalty_context=penalty_context,
        skill=skill,
    )


def format_formula(formula: DicePoolFormula) -> str:
    """
    Render a formula for display.

    Examples:
        >>> format_formula(DicePoolFormula(3, 10))
        '3d10'
        >>> format_formula(DicePoolFormula(2, 6, is_penalty_roll=True))
        '2d6 (lower)'
    """
    text = f"{formula.dice_count}d{formula.die_faces}"
    if formula.is_penalty_roll:
        text += " (lower)"
    return text
