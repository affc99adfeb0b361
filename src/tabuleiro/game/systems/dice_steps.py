"""Dice step progression.

Many effects move a damage die up or down "steps" along a fixed ladder,
from a flat 1 to 8d12. Some steps have equivalent alternative notations
(1d8 or 2d4) that resolve to the same position.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class DiceStep:
    """One position on the dice step ladder."""

    index: int
    primary: str
    alternatives: tuple[str, ...] = ()

    @property
    def notations(self) -> tuple[str, ...]:
        """Every notation that names this step, primary first."""
        return (self.primary, *self.alternatives)


_STEP_NOTATIONS: list[tuple[str, ...]] = [
    ("1", "1d1"),
    ("1d2",),
    ("1d3",),
    ("1d4",),
    ("1d6",),
    ("1d8", "2d4"),
    ("1d10",),
    ("1d12", "2d6", "3d4"),
    ("2d8", "4d4"),
    ("3d6",),
    ("2d10", "5d4"),
    ("2d12", "3d8", "4d6", "6d4"),
    ("3d10", "5d6"),
    ("4d8", "8d4"),
    ("3d12", "6d6"),
    ("4d10", "5d8"),
    ("7d6",),
    ("4d12", "6d8", "8d6"),
    ("5d10",),
    ("7d8",),
    ("6d10", "5d12"),
    ("8d8",),
    ("7d10",),
    ("6d12",),
    ("8d10",),
    ("7d12",),
    ("8d12",),
]

DICE_STEPS: tuple[DiceStep, ...] = tuple(
    DiceStep(index=i, primary=notations[0], alternatives=notations[1:])
    for i, notations in enumerate(_STEP_NOTATIONS)
)

DICE_STEPS_COUNT = len(DICE_STEPS)


def get_dice_step(index: int) -> DiceStep | None:
    """Get the step at an index, or None when out of range."""
    if index < 0 or index >= DICE_STEPS_COUNT:
        return None
    return DICE_STEPS[index]


def find_dice_step_index(notation: str) -> int:
    """
    Find a step by any of its notations (case-insensitive, surrounding whitespace ignored).

    Returns:
        The step index, or -1 if no step uses that notation

    Examples:
        >>> find_dice_step_index("2d4")
        5
        >>> find_dice_step_index(" 1D6 ")
        4
    """
    normalized = notation.strip().lower()
    for step in DICE_STEPS:
        if normalized in (n.lower() for n in step.notations):
            return step.index
    return -1


def step_dice(notation: str, steps: int) -> DiceStep | None:
    """
    Move a notation up (positive) or down (negative) the ladder.

    Returns:
        The resulting step, or None if the notation is unknown or the move leaves the ladder
    """
    current = find_dice_step_index(notation)
    if current == -1:
        return None
    return get_dice_step(current + steps)


def format_dice_step(step: DiceStep) -> str:
    """Render a step as ``"primary ou alt1/alt2"``, or just the primary without alternatives."""
    if not step.alternatives:
        return step.primary
    return f"{step.primary} ou {'/'.join(step.alternatives)}"
