"""Shared fixtures for all tests."""

from collections.abc import Iterable

import pytest
import structlog

from tabuleiro.config import PACKAGE_RULES_DIR, get_settings
from tabuleiro.rules.loader import get_rule_tables, load_rule_tables


class ScriptedRandom:
    """Randomness source that replays a fixed sequence of die results.

    Every draw is checked against the requested range so a test cannot feed
    a 7 into a d6 by accident.
    """

    def __init__(self, values: Iterable[int]) -> None:
        self._values = list(values)
        self.calls: list[tuple[int, int]] = []

    def randint(self, a: int, b: int) -> int:
        if not self._values:
            raise AssertionError(f"ScriptedRandom exhausted (requested randint({a}, {b}))")
        value = self._values.pop(0)
        if not a <= value <= b:
            raise AssertionError(f"Scripted value {value} outside randint({a}, {b})")
        self.calls.append((a, b))
        return value

    @property
    def remaining(self) -> int:
        return len(self._values)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """Keep environment overrides, cached settings and logging config from leaking between tests."""
    for name in ("TABULEIRO_RULES_DIR", "TABULEIRO_RNG_SEED", "TABULEIRO_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    get_rule_tables.cache_clear()

    yield

    get_settings.cache_clear()
    get_rule_tables.cache_clear()
    structlog.reset_defaults()


@pytest.fixture(scope="session")
def rule_tables():
    """Rule tables loaded from the packaged YAML files."""
    return load_rule_tables(PACKAGE_RULES_DIR)


@pytest.fixture
def scripted():
    """Factory for a ScriptedRandom: ``scripted(6, 3, 1)``."""

    def make(*values: int) -> ScriptedRandom:
        return ScriptedRandom(values)

    return make
