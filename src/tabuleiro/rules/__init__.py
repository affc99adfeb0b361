"""Static rule tables - skills, conditions, creature sizes and archetypes."""

from .loader import get_rule_tables, load_rule_tables, load_yaml_table
from .tables import (
    ArchetypeInfo,
    ArmorTier,
    ConditionCategory,
    ConditionInfo,
    DicePenalty,
    RuleTables,
    SizeModifiers,
    SkillMetadata,
)

__all__ = [
    "ArchetypeInfo",
    "ArmorTier",
    "ConditionCategory",
    "ConditionInfo",
    "DicePenalty",
    "RuleTables",
    "SizeModifiers",
    "SkillMetadata",
    "get_rule_tables",
    "load_rule_tables",
    "load_yaml_table",
]
