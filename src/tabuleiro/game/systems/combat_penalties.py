"""Saving-throw dice penalties.

Passing a saving throw that mitigates an effect completely costs -1d on the
next throw of the same kind. Each kind is tracked separately; failing a throw
resets its penalty and the start of a new round resets all of them.
"""

from collections.abc import Mapping
from enum import StrEnum
from types import MappingProxyType

import structlog

logger = structlog.get_logger(__name__)

SAVING_THROW_DICE_PENALTY_PER_SUCCESS = -1


class SavingThrow(StrEnum):
    """Saving throw kinds."""

    DETERMINACAO = "determinacao"
    REFLEXO = "reflexo"
    SINTONIA = "sintonia"
    TENACIDADE = "tenacidade"
    VIGOR = "vigor"


SAVING_THROW_LABELS: dict[SavingThrow, str] = {
    SavingThrow.DETERMINACAO: "Determinação",
    SavingThrow.REFLEXO: "Reflexo",
    SavingThrow.SINTONIA: "Sintonia",
    SavingThrow.TENACIDADE: "Tenacidade",
    SavingThrow.VIGOR: "Vigor",
}

SavingThrowPenalties = Mapping[SavingThrow, int]


def create_default_penalties() -> SavingThrowPenalties:
    """Penalty state with every saving throw at 0."""
    return MappingProxyType({throw: 0 for throw in SavingThrow})


def apply_saving_throw_penalty(
    penalties: SavingThrowPenalties, saving_throw: SavingThrow | str
) -> SavingThrowPenalties:
    """Record a fully mitigating success: that throw takes another -1d."""
    throw = SavingThrow(saving_throw)
    updated = dict(penalties)
    updated[throw] = updated.get(throw, 0) + SAVING_THROW_DICE_PENALTY_PER_SUCCESS

    logger.debug("saving_throw_penalty_applied", saving_throw=str(throw), penalty=updated[throw])

    return MappingProxyType(updated)


def reset_saving_throw_penalty(
    penalties: SavingThrowPenalties, saving_throw: SavingThrow | str
) -> SavingThrowPenalties:
    """Record a failed throw: its penalty returns to 0, others are untouched."""
    throw = SavingThrow(saving_throw)
    updated = dict(penalties)
    updated[throw] = 0
    return MappingProxyType(updated)


def reset_all_penalties() -> SavingThrowPenalties:
    """Round start: every saving throw penalty returns to 0."""
    return create_default_penalties()


def has_any_penalty(penalties: SavingThrowPenalties) -> bool:
    """Check whether any saving throw currently carries a penalty."""
    return any(value != 0 for value in penalties.values())
