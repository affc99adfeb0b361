"""Vulnerability die: d20 → d12 → d10 → d8 → d6 → d4, reset to d20."""

from dataclasses import dataclass

import structlog

from tabuleiro.errors import InvalidVulnerabilityDieError

logger = structlog.get_logger(__name__)

VULNERABILITY_LADDER: tuple[int, ...] = (20, 12, 10, 8, 6, 4)
DEFAULT_VULNERABILITY_DIE = VULNERABILITY_LADDER[0]
MIN_VULNERABILITY_DIE = VULNERABILITY_LADDER[-1]


def _ladder_index(faces: int) -> int:
    try:
        return VULNERABILITY_LADDER.index(faces)
    except ValueError:
        raise InvalidVulnerabilityDieError(faces) from None


def step_down_vulnerability_die(faces: int) -> int:
    """
    Move one step down the ladder; d4 stays d4.

    Raises:
        InvalidVulnerabilityDieError: If faces is not on the ladder

    Examples:
        >>> step_down_vulnerability_die(20)
        12
        >>> step_down_vulnerability_die(4)
        4
    """
    index = _ladder_index(faces)
    return VULNERABILITY_LADDER[min(index + 1, len(VULNERABILITY_LADDER) - 1)]


def reset_vulnerability_die() -> int:
    """Start of an encounter or a critical wound: back to d20."""
    return DEFAULT_VULNERABILITY_DIE


@dataclass(frozen=True)
class VulnerabilityDie:
    """Vulnerability die state."""

    current_faces: int = DEFAULT_VULNERABILITY_DIE
    is_active: bool = False

    def __post_init__(self) -> None:
        _ladder_index(self.current_faces)

    @property
    def is_at_minimum(self) -> bool:
        return self.current_faces == MIN_VULNERABILITY_DIE

    def step_down(self) -> "VulnerabilityDie":
        """Return the die one step smaller."""
        faces = step_down_vulnerability_die(self.current_faces)
        logger.debug("vulnerability_die_stepped", before=self.current_faces, after=faces)
        return VulnerabilityDie(current_faces=faces, is_active=self.is_active)

    def reset(self) -> "VulnerabilityDie":
        """Return the die back at d20."""
        return VulnerabilityDie(current_faces=reset_vulnerability_die(), is_active=self.is_active)

    def __str__(self) -> str:
        return f"d{self.current_faces}"
