"""Character attributes, proficiency tiers and derived stats for Tabuleiro do Caos.

This module provides the six core attributes, the proficiency ladder that maps a
tier to a pool die size, and the small derived-stat formulas (carry capacity,
dying rounds, Power Point limits) that the rulebook defines on top of them.
All fractional results round down, including for negative values.
"""

import math
from dataclasses import asdict, dataclass
from enum import StrEnum

from tabuleiro.errors import UnknownAttributeError


class AttributeName(StrEnum):
    """Core character attributes."""

    AGILIDADE = "agilidade"
    CORPO = "corpo"
    INFLUENCIA = "influencia"
    MENTE = "mente"
    ESSENCIA = "essencia"
    INSTINTO = "instinto"


# Constant attribute names for easy import
ATTRIBUTE_NAMES = [attr.value for attr in AttributeName]

# Penalty-map key that applies to every test regardless of attribute
ALL_TARGET = "all"


class ProficiencyTier(StrEnum):
    """Skill proficiency tiers, lowest to highest."""

    UNTRAINED = "untrained"
    ADEPT = "adept"
    VERSED = "versed"
    MASTER = "master"


# Pool die size per tier
PROFICIENCY_DIE_FACES: dict[ProficiencyTier, int] = {
    ProficiencyTier.UNTRAINED: 6,
    ProficiencyTier.ADEPT: 8,
    ProficiencyTier.VERSED: 10,
    ProficiencyTier.MASTER: 12,
}

# Flat multiplier used by the legacy d20 modifier system
PROFICIENCY_MULTIPLIERS: dict[ProficiencyTier, int] = {
    ProficiencyTier.UNTRAINED: 0,
    ProficiencyTier.ADEPT: 1,
    ProficiencyTier.VERSED: 2,
    ProficiencyTier.MASTER: 3,
}

MAX_SIGNATURE_BONUS = 3


class EncumbranceState(StrEnum):
    """Load states relative to carry capacity."""

    NORMAL = "normal"
    OVERLOADED = "overloaded"
    IMMOBILIZED = "immobilized"


@dataclass(frozen=True)
class AttributeSet:
    """The six attribute values of a character (nominal range 0-6, no hard ceiling)."""

    agilidade: int = 1
    corpo: int = 1
    influencia: int = 1
    mente: int = 1
    essencia: int = 1
    instinto: int = 1

    def get(self, name: str) -> int:
        """Get an attribute value by name.

        Args:
            name: Attribute name (e.g. "agilidade")

        Returns:
            The attribute value

        Raises:
            UnknownAttributeError: If name is not one of the six attributes
        """
        if name not in ATTRIBUTE_NAMES:
            raise UnknownAttributeError(name)
        return getattr(self, name)

    def as_dict(self) -> dict[str, int]:
        """Return the attributes as a plain name -> value mapping."""
        return asdict(self)


def coerce_tier(tier: ProficiencyTier | str) -> ProficiencyTier:
    """Convert a tier name into a ProficiencyTier.

    Raises:
        ValueError: If the name is not a known tier
    """
    try:
        return ProficiencyTier(tier)
    except ValueError:
        raise ValueError(f"Unknown proficiency tier: {tier!r}") from None


def get_die_faces(tier: ProficiencyTier | str) -> int:
    """Get the pool die size for a proficiency tier.

    Examples:
        >>> get_die_faces("untrained")
        6
        >>> get_die_faces(ProficiencyTier.MASTER)
        12
    """
    return PROFICIENCY_DIE_FACES[coerce_tier(tier)]


def get_proficiency_multiplier(tier: ProficiencyTier | str) -> int:
    """Get the legacy flat multiplier (0-3) for a proficiency tier."""
    return PROFICIENCY_MULTIPLIERS[coerce_tier(tier)]


def calculate_signature_ability_bonus(character_level: int) -> int:
    """Calculate the signature ability dice bonus.

    Formula: min(3, ceil(level / 5))
    - Level 1-5: +1d
    - Level 6-10: +2d
    - Level 11+: +3d
    - Level 0 or below: no bonus

    Args:
        character_level: The character's current level

    Returns:
        Number of bonus dice added to the signature skill's pool
    """
    return max(0, min(MAX_SIGNATURE_BONUS, math.ceil(character_level / 5)))


def calculate_carry_capacity(corpo: int, other_bonuses: int = 0) -> int:
    """Calculate carry capacity in Espaço units: 5 + (Corpo x 5) + bonuses."""
    return 5 + corpo * 5 + other_bonuses


def calculate_max_push(carry_capacity: int) -> int:
    """Maximum weight that can be pushed: 2x carry capacity."""
    return carry_capacity * 2


def calculate_max_lift(carry_capacity: int) -> int:
    """Maximum weight that can be lifted: half carry capacity, rounded down."""
    return carry_capacity // 2


def get_encumbrance_state(current_load: int, carry_capacity: int) -> EncumbranceState:
    """Determine encumbrance from load.

    - Normal: up to carry capacity
    - Overloaded: above capacity, up to 2x capacity
    - Immobilized: above 2x capacity

    A zero capacity is handled like any other: any load above it overloads.
    """
    if current_load > carry_capacity * 2:
        return EncumbranceState.IMMOBILIZED
    if current_load > carry_capacity:
        return EncumbranceState.OVERLOADED
    return EncumbranceState.NORMAL


def is_overloaded(current_load: int, carry_capacity: int) -> bool:
    """Check whether the load puts the character past normal encumbrance."""
    return get_encumbrance_state(current_load, carry_capacity) != EncumbranceState.NORMAL


def calculate_max_dying_rounds(corpo: int, other_bonuses: int = 0) -> int:
    """Rounds a character can remain dying: 2 + Corpo + bonuses."""
    return 2 + corpo + other_bonuses


def calculate_pp_per_round(character_level: int, essencia: int, other_bonuses: int = 0) -> int:
    """Maximum Power Points spendable in one round: level + Essência + bonuses."""
    return character_level + essencia + other_bonuses


def calculate_skill_proficiencies(mente: int) -> int:
    """Number of skill proficiencies available: 3 + Mente."""
    return 3 + mente


def calculate_additional_languages(mente: int) -> int:
    """Languages known beyond Common: Mente - 1, minimum 0."""
    return max(mente - 1, 0)
