"""Skill metadata queries for Tabuleiro do Caos.

Thin lookups over the injected skill table. Every query fails fast with
UnknownSkillError when the skill id is not in the table.
"""

from typing import TYPE_CHECKING

from tabuleiro.game.character.attributes import AttributeName

if TYPE_CHECKING:
    from tabuleiro.rules.tables import RuleTables, SkillMetadata


def get_skill(tables: "RuleTables", skill_id: str) -> "SkillMetadata":
    """Get the metadata for a skill.

    Raises:
        UnknownSkillError: If the skill id is not in the table
    """
    return tables.get_skill(skill_id)


def get_key_attribute(tables: "RuleTables", skill_id: str) -> AttributeName | None:
    """Get a skill's default key attribute.

    Returns:
        The attribute, or None for skills whose attribute is chosen per use
        (e.g. "oficio", "sorte")
    """
    return tables.get_skill(skill_id).key_attribute


def has_load_penalty(tables: "RuleTables", skill_id: str) -> bool:
    """Check whether overload and armor penalties apply to a skill."""
    return tables.get_skill(skill_id).load_sensitive


def requires_instrument(tables: "RuleTables", skill_id: str) -> bool:
    """Check whether a skill needs a tool or instrument."""
    return tables.get_skill(skill_id).requires_instrument


def requires_proficiency(tables: "RuleTables", skill_id: str) -> bool:
    """Check whether untrained use of a skill is penalized."""
    return tables.get_skill(skill_id).requires_proficiency


def is_combat_skill(tables: "RuleTables", skill_id: str) -> bool:
    """Check whether a skill is used for attacks, defenses or saving throws."""
    return tables.get_skill(skill_id).is_combat_skill


def get_combat_skills(tables: "RuleTables") -> list[str]:
    """List the ids of every combat skill, in table order."""
    return [skill.id for skill in tables.skills.values() if skill.is_combat_skill]


def get_load_sensitive_skills(tables: "RuleTables") -> list[str]:
    """List the ids of every skill affected by load and armor, in table order."""
    return [skill.id for skill in tables.skills.values() if skill.load_sensitive]


def get_skills_by_attribute(tables: "RuleTables", attribute: AttributeName | str) -> list[str]:
    """List the ids of every skill keyed to an attribute, in table order."""
    return [skill.id for skill in tables.skills.values() if skill.key_attribute == attribute]
