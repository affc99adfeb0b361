"""Rest recovery for Tabuleiro do Caos.

A rest has two separate halves:
- Sleeping recovers Vitality: level × Corpo + modifiers
- Meditating recovers Power Points: level × Essência + modifiers

Each base is scaled by the rest quality multiplier and rounded down. The
Vitality amount is a pool of recovery points, spent by
``heal_vitality`` at 5 points per PV.
"""

import math
from dataclasses import dataclass
from enum import StrEnum

import structlog

from tabuleiro.errors import InvalidRestInputError

logger = structlog.get_logger(__name__)


class RestQuality(StrEnum):
    """Where and how well the character rested."""

    PRECARIO = "precario"
    NORMAL = "normal"
    CONFORTAVEL = "confortavel"
    ABASTADO1 = "abastado1"
    ABASTADO2 = "abastado2"
    ABASTADO3 = "abastado3"
    ABASTADO4 = "abastado4"
    ABASTADO5 = "abastado5"


REST_QUALITY_MULTIPLIERS: dict[RestQuality, float] = {
    RestQuality.PRECARIO: 0.5,
    RestQuality.NORMAL: 1.0,
    RestQuality.CONFORTAVEL: 1.5,
    RestQuality.ABASTADO1: 2.5,
    RestQuality.ABASTADO2: 3.0,
    RestQuality.ABASTADO3: 3.5,
    RestQuality.ABASTADO4: 4.0,
    RestQuality.ABASTADO5: 4.5,
}

REST_QUALITY_LABELS: dict[RestQuality, str] = {
    RestQuality.PRECARIO: "Precário",
    RestQuality.NORMAL: "Normal",
    RestQuality.CONFORTAVEL: "Confortável",
    RestQuality.ABASTADO1: "Abastado 1",
    RestQuality.ABASTADO2: "Abastado 2",
    RestQuality.ABASTADO3: "Abastado 3",
    RestQuality.ABASTADO4: "Abastado 4",
    RestQuality.ABASTADO5: "Abastado 5",
}


@dataclass(frozen=True)
class RestRecovery:
    """
    Result of one rest.

    Attributes:
        pv_recovery: Recovery points for Vitality (from sleeping)
        pp_recovery: Power Points recovered (from meditating)
        sleep_base: Sleep recovery before the quality multiplier
        meditate_base: Meditation recovery before the quality multiplier
        multiplier: Quality multiplier applied to both
    """

    pv_recovery: int
    pp_recovery: int
    sleep_base: int
    meditate_base: int
    multiplier: float


def get_quality_multiplier(quality: RestQuality | str) -> float:
    """Multiplier for a rest quality."""
    try:
        return REST_QUALITY_MULTIPLIERS[RestQuality(quality)]
    except ValueError:
        raise InvalidRestInputError(f"Unknown rest quality: {quality!r}") from None


def validate_rest_inputs(character_level: int, corpo: int, essencia: int) -> None:
    """
    Reject impossible rest inputs.

    Raises:
        InvalidRestInputError: Level below 1, or a negative Corpo or Essência
    """
    if character_level < 1:
        raise InvalidRestInputError(f"Level must be at least 1, got {character_level}")
    if corpo < 0:
        raise InvalidRestInputError(f"Corpo cannot be negative, got {corpo}")
    if essencia < 0:
        raise InvalidRestInputError(f"Essência cannot be negative, got {essencia}")


def calculate_rest_recovery(
    character_level: int,
    corpo: int,
    essencia: int,
    quality: RestQuality | str = RestQuality.NORMAL,
    *,
    sleep: bool = True,
    meditate: bool = True,
    sleep_modifiers: int = 0,
    meditate_modifiers: int = 0,
) -> RestRecovery:
    """
    Calculate Vitality and Power Point recovery for a rest.

    Args:
        character_level: Character level (at least 1)
        corpo: Corpo value, drives sleep recovery
        essencia: Essência value, drives meditation recovery
        quality: Rest quality
        sleep: Whether the character slept
        meditate: Whether the character meditated
        sleep_modifiers: Flat bonus to the sleep base
        meditate_modifiers: Flat bonus to the meditation base

    Returns:
        RestRecovery with both amounts, rounded down

    Raises:
        InvalidRestInputError: On invalid level, attributes or quality

    Examples:
        >>> calculate_rest_recovery(3, 1, 1, "precario").pv_recovery
        1
    """
    validate_rest_inputs(character_level, corpo, essencia)
    multiplier = get_quality_multiplier(quality)

    sleep_base = character_level * corpo + sleep_modifiers if sleep else 0
    meditate_base = character_level * essencia + meditate_modifiers if meditate else 0

    recovery = RestRecovery(
        pv_recovery=math.floor(sleep_base * multiplier),
        pp_recovery=math.floor(meditate_base * multiplier),
        sleep_base=sleep_base,
        meditate_base=meditate_base,
        multiplier=multiplier,
    )

    logger.debug(
        "rest_recovery_calculated",
        level=character_level,
        quality=str(quality),
        pv_recovery=recovery.pv_recovery,
        pp_recovery=recovery.pp_recovery,
    )

    return recovery
