"""
Condition penalty aggregation for Tabuleiro do Caos.

Combines manually applied conditions with the ones triggered automatically by
Guard, Vitality and Power Point thresholds into a single map of dice deltas
keyed by attribute name (or "all" for penalties that hit every test).
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from tabuleiro.errors import InvalidConditionError
from tabuleiro.game.character.attributes import ALL_TARGET, AttributeName

if TYPE_CHECKING:
    from tabuleiro.game.systems.guard_vitality import GuardPoints, VitalityPoints
    from tabuleiro.rules.tables import ConditionInfo, RuleTables

logger = structlog.get_logger(__name__)

# Auto-triggered condition ids
GUARD_DAMAGED_CONDITION = "avariado"
VITALITY_WOUNDED_CONDITION = "machucado"
POWER_DEPLETED_CONDITION = "esgotado"

AUTO_CONDITION_IDS = (
    GUARD_DAMAGED_CONDITION,
    VITALITY_WOUNDED_CONDITION,
    POWER_DEPLETED_CONDITION,
)

ATTRIBUTE_LABELS: dict[str, str] = {
    AttributeName.AGILIDADE: "Agilidade",
    AttributeName.CORPO: "Corpo",
    AttributeName.INFLUENCIA: "Influência",
    AttributeName.MENTE: "Mente",
    AttributeName.ESSENCIA: "Essência",
    AttributeName.INSTINTO: "Instinto",
    ALL_TARGET: "todos os testes",
}


@dataclass(frozen=True)
class Condition:
    """
    A condition applied to a character.

    Attributes:
        id: Condition id from the condition table
        stacks: Stack count (only meaningful for stackable conditions)
        source: What applied the condition (spell, attack, "manual", ...)
    """

    id: str
    stacks: int = 1
    source: str | None = None

    def __post_init__(self) -> None:
        if self.stacks < 1:
            raise InvalidConditionError(
                self.id, f"must have at least 1 stack, got {self.stacks}"
            )


def _effective_stacks(info: "ConditionInfo", stacks: int) -> int:
    """Stack multiplier for a condition's dice penalty."""
    penalty = info.dice_penalty
    if penalty is None or not info.stackable or not penalty.scales_with_stacks:
        return 1
    return stacks


def _add_contribution(penalties: dict[str, int], info: "ConditionInfo", stacks: int) -> None:
    penalty = info.dice_penalty
    if penalty is None:
        return

    delta = penalty.modifier * _effective_stacks(info, stacks)
    for target in sorted(penalty.targets):
        penalties[target] = penalties.get(target, 0) + delta


def _lookup(tables: "RuleTables", condition_id: str) -> "ConditionInfo":
    try:
        return tables.get_condition(condition_id)
    except KeyError:
        logger.warning("unknown_condition", condition_id=condition_id)
        raise


def calculate_condition_dice_penalties(
    manual: Iterable[Condition],
    auto_ids: Iterable[str],
    tables: "RuleTables",
) -> dict[str, int]:
    """
    Aggregate the dice penalties of every active condition.

    A stackable condition whose penalty scales with stacks contributes
    ``modifier × stacks``; every other condition contributes its base modifier
    once. Every manual entry contributes, so repeated entries for the same id
    add up. An auto-triggered id that also appears among the manual entries
    is skipped.

    Args:
        manual: Conditions applied by hand
        auto_ids: Condition ids triggered by resource thresholds
        tables: Rule tables holding the condition definitions

    Returns:
        Map of target ("all" or an attribute name) to dice delta; zero totals are omitted

    Raises:
        UnknownConditionError: If any id is not in the condition table
    """
    manual = list(manual)
    manual_ids = {condition.id for condition in manual}

    penalties: dict[str, int] = {}
    for condition in manual:
        _add_contribution(penalties, _lookup(tables, condition.id), condition.stacks)

    auto_applied: list[str] = []
    for condition_id in dict.fromkeys(auto_ids):
        if condition_id in manual_ids:
            continue
        _add_contribution(penalties, _lookup(tables, condition_id), 1)
        auto_applied.append(condition_id)

    result = {target: delta for target, delta in penalties.items() if delta != 0}

    logger.debug(
        "condition_penalties_calculated",
        manual=sorted(manual_ids),
        auto=sorted(auto_applied),
        penalties=result,
    )

    return result


def get_dice_penalty_for_attribute(penalties: Mapping[str, int], attribute: str) -> int:
    """
    Resolve the effective dice penalty for one attribute.

    Examples:
        >>> get_dice_penalty_for_attribute({"all": -1, "agilidade": -2}, "agilidade")
        -3
        >>> get_dice_penalty_for_attribute({"corpo": -1}, "mente")
        0
    """
    return penalties.get(ALL_TARGET, 0) + penalties.get(attribute, 0)


def has_active_penalties(penalties: Mapping[str, int]) -> bool:
    """Check whether any target carries a non-zero delta."""
    return any(delta != 0 for delta in penalties.values())


def format_penalty_summary(penalties: Mapping[str, int]) -> list[str]:
    """
    Render a penalty map as display lines, e.g. ``["-1d todos os testes", "-2d Corpo"]``.

    Zero entries are skipped; positive deltas get a leading "+".
    """
    lines = []
    for target, delta in penalties.items():
        if delta == 0:
            continue
        label = ATTRIBUTE_LABELS.get(target, target)
        lines.append(f"{delta:+d}d {label}")
    return lines


def derive_auto_conditions(
    guard: "GuardPoints",
    vitality: "VitalityPoints",
    power_points_current: int | None = None,
) -> list[str]:
    """
    Work out which conditions are triggered by the character's resources.

    - avariado: Guard at or below half its maximum (rounded down)
    - machucado: Vitality below its maximum
    - esgotado: Power Points at zero (skipped when Power Points are not tracked)

    Returns:
        Triggered condition ids, in AUTO_CONDITION_IDS order
    """
    triggered = []
    if guard.current <= guard.max // 2:
        triggered.append(GUARD_DAMAGED_CONDITION)
    if vitality.current < vitality.max:
        triggered.append(VITALITY_WOUNDED_CONDITION)
    if power_points_current is not None and power_points_current <= 0:
        triggered.append(POWER_DEPLETED_CONDITION)
    return triggered


def implied_condition_ids(condition_ids: Iterable[str], tables: "RuleTables") -> set[str]:
    """
    Expand condition ids with every condition they imply, transitively.

    "morrendo" implies "inconsciente", which in turn implies "indefeso", so
    both appear in the result. The input ids are included.

    Raises:
        UnknownConditionError: If any id is not in the condition table
    """
    resolved: set[str] = set()
    pending = list(condition_ids)
    while pending:
        condition_id = pending.pop()
        if condition_id in resolved:
            continue
        info = tables.get_condition(condition_id)
        resolved.add(condition_id)
        pending.extend(info.implies)
    return resolved
