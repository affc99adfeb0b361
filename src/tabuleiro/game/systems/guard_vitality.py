"""
Guard/Vitality combat resources for Tabuleiro do Caos.

Guard (GA) soaks damage first, temporary Guard before regular Guard. Whatever
Guard cannot absorb spills into Vitality (PV), which never drops below 0.
While Vitality is at 0 the character's Guard maximum is halved; crossing into
or out of that state pulls current Guard to half of its maximum.

All state is immutable: every operation returns new instances.
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import StrEnum

import structlog

from tabuleiro.game.character.attributes import AttributeSet
from tabuleiro.rules.tables import RuleTables

logger = structlog.get_logger(__name__)

# Resource constants
BASE_GUARD = 15
BASE_POWER_POINTS = 2
VITALITY_DIVISOR = 3
PV_RECOVERY_COST = 5  # recovery points per Vitality point


@dataclass(frozen=True)
class GuardPoints:
    """
    Guard (GA) state.

    Attributes:
        current: Regular Guard left
        max: Guard maximum
        temporary: Temporary Guard, spent before regular Guard
    """

    current: int
    max: int
    temporary: int = 0


@dataclass(frozen=True)
class VitalityPoints:
    """Vitality (PV) state."""

    current: int
    max: int


@dataclass(frozen=True)
class PowerPoints:
    """Power Point (PP) state."""

    current: int
    max: int
    temporary: int = 0


class CombatState(StrEnum):
    """Wound state, derived from Vitality."""

    NORMAL = "normal"
    DIRECT_WOUND = "direct-wound"
    CRITICAL_WOUND = "critical-wound"


def calculate_vitality(guard_max: int) -> int:
    """
    Vitality maximum from the Guard maximum.

    Examples:
        >>> calculate_vitality(15)
        5
        >>> calculate_vitality(18)
        6
    """
    return guard_max // VITALITY_DIVISOR


def create_guard_vitality(guard_max: int) -> tuple[GuardPoints, VitalityPoints]:
    """Fresh, fully healed Guard and Vitality for a Guard maximum."""
    vitality_max = calculate_vitality(guard_max)
    return (
        GuardPoints(current=guard_max, max=guard_max),
        VitalityPoints(current=vitality_max, max=vitality_max),
    )


def apply_damage_to_guard_vitality(
    guard: GuardPoints, vitality: VitalityPoints, damage: int
) -> tuple[GuardPoints, VitalityPoints]:
    """
    Apply damage to Guard, overflowing into Vitality.

    Temporary Guard absorbs first, then regular Guard; the remainder comes off
    Vitality, floored at 0. Damage of 0 or less changes nothing.

    Args:
        guard: Current Guard
        vitality: Current Vitality
        damage: Raw damage

    Returns:
        (guard, vitality) after the damage

    Examples:
        >>> apply_damage_to_guard_vitality(GuardPoints(5, 15), VitalityPoints(5, 5), 8)
        (GuardPoints(current=0, max=15, temporary=0), VitalityPoints(current=2, max=5))
    """
    if damage <= 0:
        return guard, vitality

    remaining = damage

    temporary = guard.temporary
    if temporary > 0:
        absorbed = min(temporary, remaining)
        temporary -= absorbed
        remaining -= absorbed

    guard_current = guard.current
    if remaining > 0 and guard_current > 0:
        absorbed = min(guard_current, remaining)
        guard_current -= absorbed
        remaining -= absorbed

    vitality_current = vitality.current
    if remaining > 0:
        vitality_current = max(0, vitality_current - remaining)

    return (
        replace(guard, current=guard_current, temporary=temporary),
        replace(vitality, current=vitality_current),
    )


def heal_guard(guard: GuardPoints, amount: int) -> GuardPoints:
    """Restore Guard, capped at its maximum. Non-positive amounts do nothing."""
    if amount <= 0:
        return guard
    return replace(guard, current=min(guard.current + amount, guard.max))


def heal_vitality(vitality: VitalityPoints, recovery_points: int) -> tuple[VitalityPoints, int]:
    """
    Spend recovery points on Vitality at 5 points per PV.

    Only proceeds while Vitality is below its maximum and at least 5 points
    are available. Points that do not buy a whole PV are returned.

    Returns:
        (vitality, remaining_recovery_points)
    """
    if recovery_points < PV_RECOVERY_COST or vitality.current >= vitality.max:
        return vitality, recovery_points

    missing = vitality.max - vitality.current
    healed = min(missing, recovery_points // PV_RECOVERY_COST)
    spent = healed * PV_RECOVERY_COST

    return replace(vitality, current=vitality.current + healed), recovery_points - spent


def get_effective_guard_max(guard_max: int, vitality_current: int) -> int:
    """Guard maximum in effect: halved (rounded down) while Vitality is at 0."""
    if vitality_current <= 0:
        return guard_max // 2
    return guard_max


def adjust_guard_on_vitality_crossing(
    guard_current: int,
    guard_max: int,
    vitality_was_zero: bool,
    vitality_is_zero: bool,
) -> int:
    """
    Adjust current Guard when Vitality reaches or leaves 0.

    - Reaching 0: Guard is clamped down to half its maximum
    - Leaving 0: Guard is raised to at least half its maximum
    - No crossing: unchanged

    Examples:
        >>> adjust_guard_on_vitality_crossing(15, 20, False, True)
        10
        >>> adjust_guard_on_vitality_crossing(5, 20, True, False)
        10
    """
    half_max = guard_max // 2

    if not vitality_was_zero and vitality_is_zero:
        return min(guard_current, half_max)

    if vitality_was_zero and not vitality_is_zero:
        return max(guard_current, half_max)

    return guard_current


def determine_combat_state(vitality: VitalityPoints) -> CombatState:
    """Wound state from Vitality alone; Guard does not matter."""
    if vitality.current <= 0:
        return CombatState.CRITICAL_WOUND
    if vitality.current < vitality.max:
        return CombatState.DIRECT_WOUND
    return CombatState.NORMAL


def _apply_crossing(
    guard: GuardPoints, before: VitalityPoints, after: VitalityPoints
) -> GuardPoints:
    was_zero = before.current <= 0
    is_zero = after.current <= 0
    adjusted = adjust_guard_on_vitality_crossing(guard.current, guard.max, was_zero, is_zero)

    if was_zero != is_zero:
        logger.info(
            "vitality_zero_crossed",
            vitality_is_zero=is_zero,
            guard_before=guard.current,
            guard_after=adjusted,
        )

    return replace(guard, current=adjusted)


def take_damage(
    guard: GuardPoints, vitality: VitalityPoints, damage: int
) -> tuple[GuardPoints, VitalityPoints]:
    """
    Apply damage and the Vitality threshold rule in one step.

    Returns:
        (guard, vitality) after the damage and any Guard clamp
    """
    new_guard, new_vitality = apply_damage_to_guard_vitality(guard, vitality, damage)
    new_guard = _apply_crossing(new_guard, vitality, new_vitality)

    if damage > 0:
        logger.debug(
            "damage_taken",
            damage=damage,
            guard=new_guard.current,
            vitality=new_vitality.current,
            combat_state=str(determine_combat_state(new_vitality)),
        )

    return new_guard, new_vitality


def recover_vitality(
    guard: GuardPoints, vitality: VitalityPoints, recovery_points: int
) -> tuple[GuardPoints, VitalityPoints, int]:
    """
    Spend recovery points on Vitality and restore Guard if Vitality leaves 0.

    Returns:
        (guard, vitality, remaining_recovery_points)
    """
    new_vitality, remaining = heal_vitality(vitality, recovery_points)
    new_guard = _apply_crossing(guard, vitality, new_vitality)
    return new_guard, new_vitality, remaining


def calculate_guard_max(
    archetype_levels: Mapping[str, int],
    attributes: AttributeSet,
    tables: RuleTables,
    *,
    size: str | None = None,
    other_modifiers: int = 0,
) -> int:
    """
    Guard maximum from archetype levels.

    GA = 15 + Σ(level × archetype's Guard attribute) + size Guard + other modifiers.

    Args:
        archetype_levels: Levels taken per archetype id
        attributes: Character attributes
        tables: Rule tables holding archetypes and sizes
        size: Creature size id
        other_modifiers: Flat bonuses from items, feats, etc.

    Raises:
        UnknownTableEntryError: If an archetype or size id is not in the tables
    """
    total = BASE_GUARD
    for archetype_id, level in archetype_levels.items():
        if level <= 0:
            continue
        archetype = tables.get_archetype(archetype_id)
        total += level * attributes.get(archetype.guard_attribute)

    if size is not None:
        total += tables.get_size(size).guard

    return total + other_modifiers


def calculate_power_points_max(
    archetype_levels: Mapping[str, int],
    essencia: int,
    tables: RuleTables,
    other_modifiers: int = 0,
) -> int:
    """
    Power Point maximum from archetype levels.

    PP = 2 + Σ level × (archetype PP per level + Essência) + other modifiers.
    """
    total = BASE_POWER_POINTS
    for archetype_id, level in archetype_levels.items():
        if level <= 0:
            continue
        archetype = tables.get_archetype(archetype_id)
        total += level * (archetype.power_points_per_level + essencia)
    return total + other_modifiers


def calculate_rest_guard_recovery(character_level: int, corpo: int, other_bonuses: int = 0) -> int:
    """Guard recovered by a rest: level × Corpo + bonuses, never negative."""
    return max(0, character_level * corpo + other_bonuses)


def apply_delta_to_power_points(power_points: PowerPoints, delta: int) -> PowerPoints:
    """
    Spend or recover Power Points.

    Spending (negative delta) uses temporary PP first, then current, floored
    at 0. Recovering adds to current only, capped at the maximum.

    Examples:
        >>> apply_delta_to_power_points(PowerPoints(5, 10, 3), -4)
        PowerPoints(current=4, max=10, temporary=0)
        >>> apply_delta_to_power_points(PowerPoints(9, 10), 5)
        PowerPoints(current=10, max=10, temporary=0)
    """
    if delta == 0:
        return power_points

    if delta > 0:
        return replace(power_points, current=min(power_points.current + delta, power_points.max))

    remaining = -delta
    temporary = power_points.temporary
    if temporary > 0:
        spent = min(temporary, remaining)
        temporary -= spent
        remaining -= spent

    current = power_points.current
    if remaining > 0:
        current = max(0, current - remaining)

    return replace(power_points, current=current, temporary=temporary)
