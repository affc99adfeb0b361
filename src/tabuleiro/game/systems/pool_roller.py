"""
Pool rolling and success counting.

Every face of 6 or more is a success no matter the die size, and every 1
cancels one success. A penalty roll throws two dice and scores only the lower.
"""

from dataclasses import dataclass

import structlog

from tabuleiro.game.systems.dice_pool import PENALTY_ROLL_DICE, DicePoolFormula
from tabuleiro.game.systems.rng import RandomnessSource

logger = structlog.get_logger(__name__)

SUCCESS_THRESHOLD = 6
CANCELLATION_FACE = 1


@dataclass(frozen=True)
class PoolRollResult:
    """
    Outcome of a pool roll.

    Attributes:
        faces: Every die rolled, in roll order
        die_faces: Size of the dice
        raw_successes: Scored faces of 6 or more
        cancellations: Scored faces of 1
        net_successes: max(0, raw_successes - cancellations)
        is_penalty_roll: Whether only the lower of two dice was scored
    """

    faces: tuple[int, ...]
    die_faces: int
    raw_successes: int
    cancellations: int
    net_successes: int
    is_penalty_roll: bool = False

    @property
    def scored_faces(self) -> tuple[int, ...]:
        """The faces that counted towards successes."""
        if self.is_penalty_roll and self.faces:
            return (min(self.faces),)
        return self.faces


def count_successes(faces: tuple[int, ...]) -> tuple[int, int, int]:
    """
    Classify scored faces.

    Returns:
        (raw_successes, cancellations, net_successes)
    """
    raw = sum(1 for face in faces if face >= SUCCESS_THRESHOLD)
    cancellations = sum(1 for face in faces if face == CANCELLATION_FACE)
    return raw, cancellations, max(0, raw - cancellations)


def roll_pool(formula: DicePoolFormula, rng: RandomnessSource) -> PoolRollResult:
    """
    Roll a pool.

    Draws one ``rng.randint(1, die_faces)`` per die, left to right. A penalty
    roll always draws exactly two dice, whatever dice_count says.

    Args:
        formula: Resolved pool formula
        rng: Randomness source

    Returns:
        The rolled faces and their classification
    """
    count = PENALTY_ROLL_DICE if formula.is_penalty_roll else formula.dice_count
    faces = tuple(rng.randint(1, formula.die_faces) for _ in range(count))

    scored = (min(faces),) if formula.is_penalty_roll else faces
    raw, cancellations, net = count_successes(scored)

    result = PoolRollResult(
        faces=faces,
        die_faces=formula.die_faces,
        raw_successes=raw,
        cancellations=cancellations,
        net_successes=net,
        is_penalty_roll=formula.is_penalty_roll,
    )

    logger.debug(
        "pool_rolled",
        faces=faces,
        die_faces=formula.die_faces,
        is_penalty_roll=formula.is_penalty_roll,
        net_successes=net,
    )

    return result


def format_pool_result(result: PoolRollResult) -> str:
    """Render a roll as e.g. ``"[6, 3, 6, 1, 5] → 1✶"``."""
    faces = ", ".join(str(face) for face in result.faces)
    text = f"[{faces}] → {result.net_successes}✶"
    if result.is_penalty_roll:
        text += " (lower)"
    return text
