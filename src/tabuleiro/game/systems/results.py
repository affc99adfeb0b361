"""
Roll records and history.

A record wraps exactly one result type, discriminated by ``kind``, so callers
branch on the kind instead of probing the result for attributes.
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum

import structlog

from tabuleiro.game.systems.damage import DamageResult
from tabuleiro.game.systems.dice_pool import DicePoolFormula
from tabuleiro.game.systems.legacy_d20 import D20RollResult
from tabuleiro.game.systems.pool_roller import PoolRollResult, format_pool_result

logger = structlog.get_logger(__name__)

MAX_HISTORY_SIZE = 50


class RollKind(StrEnum):
    """Discriminant for RollRecord."""

    POOL = "pool"
    D20 = "d20"
    DAMAGE = "damage"


_RESULT_TYPES: dict[RollKind, type] = {
    RollKind.POOL: PoolRollResult,
    RollKind.D20: D20RollResult,
    RollKind.DAMAGE: DamageResult,
}


@dataclass(frozen=True)
class RollRecord:
    """
    One roll, tagged with its kind.

    Attributes:
        kind: Which result type ``result`` holds
        result: The roll result itself
        context: Free-form label such as the skill or attack name
        formula: Pool formula, for pool rolls
        timestamp: When the roll was recorded (UTC)

    Raises:
        TypeError: If the result does not match the kind
    """

    kind: RollKind
    result: PoolRollResult | D20RollResult | DamageResult
    context: str = ""
    formula: DicePoolFormula | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        expected = _RESULT_TYPES[self.kind]
        if not isinstance(self.result, expected):
            raise TypeError(
                f"{self.kind} record needs a {expected.__name__}, got {type(self.result).__name__}"
            )

    @classmethod
    def pool(
        cls, result: PoolRollResult, formula: DicePoolFormula | None = None, context: str = ""
    ) -> "RollRecord":
        return cls(kind=RollKind.POOL, result=result, context=context, formula=formula)

    @classmethod
    def d20(cls, result: D20RollResult, context: str = "") -> "RollRecord":
        return cls(kind=RollKind.D20, result=result, context=context)

    @classmethod
    def damage(cls, result: DamageResult, context: str = "") -> "RollRecord":
        return cls(kind=RollKind.DAMAGE, result=result, context=context)

    def summary(self) -> str:
        """One-line description for display."""
        prefix = f"{self.context}: " if self.context else ""
        match self.kind:
            case RollKind.POOL:
                formula = f"{self.formula} " if self.formula else ""
                return f"{prefix}{formula}{format_pool_result(self.result)}"
            case RollKind.D20:
                return f"{prefix}{list(self.result.rolls)} → {self.result.total}"
            case RollKind.DAMAGE:
                return f"{prefix}{self.result.total} de dano"


class RollHistory:
    """
    Most recent rolls, newest first, bounded at ``max_size`` entries.

    The history is caller-owned; nothing in the engine keeps a global one.
    """

    def __init__(self, max_size: int = MAX_HISTORY_SIZE) -> None:
        if max_size < 1:
            raise ValueError(f"max_size must be >= 1, got {max_size}")
        self._records: deque[RollRecord] = deque(maxlen=max_size)

    @property
    def max_size(self) -> int:
        return self._records.maxlen or 0

    def add(self, record: RollRecord) -> None:
        """Add a record at the front, dropping the oldest when full."""
        self._records.appendleft(record)
        logger.debug("roll_recorded", kind=str(record.kind), context=record.context)

    def get_all(self) -> list[RollRecord]:
        """All records, newest first."""
        return list(self._records)

    def get_last(self, count: int) -> list[RollRecord]:
        """The ``count`` newest records, newest first."""
        if count <= 0:
            return []
        return list(self._records)[:count]

    def of_kind(self, kind: RollKind | str) -> list[RollRecord]:
        """Records of one kind, newest first."""
        kind = RollKind(kind)
        return [record for record in self._records if record.kind == kind]

    def clear(self) -> None:
        self._records.clear()

    def size(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)
