"""Character attributes, proficiency tiers and derived stats."""

from .attributes import (
    ATTRIBUTE_NAMES,
    AttributeName,
    AttributeSet,
    EncumbranceState,
    ProficiencyTier,
    calculate_signature_ability_bonus,
    get_die_faces,
    get_proficiency_multiplier,
)

__all__ = [
    "ATTRIBUTE_NAMES",
    "AttributeName",
    "AttributeSet",
    "EncumbranceState",
    "ProficiencyTier",
    "calculate_signature_ability_bonus",
    "get_die_faces",
    "get_proficiency_multiplier",
]
