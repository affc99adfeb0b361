"""
Rule table models for Tabuleiro do Caos.

Defines the static, data-only tables the calculators consult: skill metadata,
condition effects, creature sizes and archetype progression. Instances are
validated once at load time and then passed explicitly to the calculators.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from tabuleiro.errors import (
    UnknownConditionError,
    UnknownSkillError,
    UnknownTableEntryError,
)
from tabuleiro.game.character.attributes import ALL_TARGET, ATTRIBUTE_NAMES, AttributeName


class ArmorTier(StrEnum):
    """Equipped armor weight class."""

    NONE = "none"
    LIGHT = "light"
    MEDIUM = "medium"
    HEAVY = "heavy"


class ConditionCategory(StrEnum):
    """Broad grouping of conditions."""

    CORPORAL = "corporal"
    MENTAL = "mental"
    SENSORIAL = "sensorial"
    ESPIRITUAL = "espiritual"


class SkillMetadata(BaseModel):
    """
    Static metadata for a single skill.

    Attributes:
        id: Skill identifier (e.g., "acrobacia")
        label: Display name
        key_attribute: Default attribute rolled for this skill (None when chosen per use)
        load_sensitive: Overload and armor penalties apply
        requires_proficiency: Untrained characters take the proficiency penalty
        requires_instrument: A tool/instrument is needed to avoid the instrument penalty
        is_combat_skill: Used for attacks or active defense
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Unique skill identifier")
    label: str = Field(..., description="Display name of the skill")
    key_attribute: AttributeName | None = Field(default=None, description="Default key attribute")
    load_sensitive: bool = False
    requires_proficiency: bool = False
    requires_instrument: bool = False
    is_combat_skill: bool = False


class DicePenalty(BaseModel):
    """Dice added to (or removed from) pools while a condition is active."""

    model_config = ConfigDict(frozen=True)

    targets: frozenset[str] = Field(..., min_length=1)
    modifier: int
    scales_with_stacks: bool = False

    @field_validator("targets")
    @classmethod
    def _known_targets(cls, targets: frozenset[str]) -> frozenset[str]:
        unknown = sorted(t for t in targets if t != ALL_TARGET and t not in ATTRIBUTE_NAMES)
        if unknown:
            raise ValueError(f"unknown penalty targets: {', '.join(unknown)}")
        return targets


class ConditionInfo(BaseModel):
    """Static description of a condition and its mechanical effect."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    category: ConditionCategory
    description: str = ""
    stackable: bool = False
    max_stacks: int = Field(default=1, ge=1)
    implies: tuple[str, ...] = ()
    dice_penalty: DicePenalty | None = None


class SizeModifiers(BaseModel):
    """Modifiers granted by a creature size."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    guard: int = 0
    carrying_capacity: int = 0
    combat_maneuvers: int = 0
    tracking: int = 0
    skill_dice: dict[str, int] = Field(default_factory=dict)


class ArchetypeInfo(BaseModel):
    """Per-level Guard and Power Point gains for an archetype.

    Each level adds the value of ``guard_attribute`` to Guard and
    ``power_points_per_level`` + Essência to Power Points.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    guard_attribute: AttributeName
    power_points_per_level: int = Field(..., ge=0)


class RuleTables(BaseModel):
    """All static rule tables, resolved through explicit lookups."""

    model_config = ConfigDict(frozen=True)

    skills: dict[str, SkillMetadata] = Field(default_factory=dict)
    conditions: dict[str, ConditionInfo] = Field(default_factory=dict)
    sizes: dict[str, SizeModifiers] = Field(default_factory=dict)
    archetypes: dict[str, ArchetypeInfo] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_references(self) -> "RuleTables":
        for condition in self.conditions.values():
            for implied in condition.implies:
                if implied not in self.conditions:
                    raise ValueError(
                        f"condition '{condition.id}' implies unknown condition '{implied}'"
                    )
        for size in self.sizes.values():
            for skill_id in size.skill_dice:
                if skill_id not in self.skills:
                    raise ValueError(f"size '{size.id}' modifies unknown skill '{skill_id}'")
        return self

    def get_skill(self, skill_id: str) -> SkillMetadata:
        """
        Look up skill metadata.

        Raises:
            UnknownSkillError: If the skill id is not in the table
        """
        try:
            return self.skills[skill_id]
        except KeyError:
            raise UnknownSkillError(skill_id) from None

    def get_condition(self, condition_id: str) -> ConditionInfo:
        """
        Look up condition info.

        Raises:
            UnknownConditionError: If the condition id is not in the table
        """
        try:
            return self.conditions[condition_id]
        except KeyError:
            raise UnknownConditionError(condition_id) from None

    def get_size(self, size_id: str) -> SizeModifiers:
        """Look up size modifiers; raises UnknownTableEntryError when missing."""
        try:
            return self.sizes[size_id]
        except KeyError:
            raise UnknownTableEntryError("size", size_id) from None

    def get_archetype(self, archetype_id: str) -> ArchetypeInfo:
        """Look up an archetype; raises UnknownTableEntryError when missing."""
        try:
            return self.archetypes[archetype_id]
        except KeyError:
            raise UnknownTableEntryError("archetype", archetype_id) from None
