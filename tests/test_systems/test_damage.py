"""Tests for damage resolution."""

import pytest

from tabuleiro.game.systems.damage import (
    DamageKind,
    DiceSpec,
    calculate_graze_damage,
    resolve_attack_damage,
    roll_damage,
)
from tabuleiro.game.systems.legacy_d20 import AttackOutcome


class TestDiceSpec:
    """Tests for dice expressions."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2d6+3", DiceSpec(2, 6, 3)),
            ("d8", DiceSpec(1, 8, 0)),
            ("1d10-1", DiceSpec(1, 10, -1)),
            ("3D4", DiceSpec(3, 4, 0)),
            (" 2d6 + 1 ", DiceSpec(2, 6, 1)),
            ("5", DiceSpec(0, 6, 5)),
        ],
    )
    def test_parse(self, text, expected):
        """Common notations parse."""
        assert DiceSpec.parse(text) == expected

    @pytest.mark.parametrize("text", ["", "abc", "2d", "d", "2x6", "+"])
    def test_parse_invalid(self, text):
        """Anything else is rejected."""
        with pytest.raises(ValueError):
            DiceSpec.parse(text)

    def test_str(self):
        """Specs render back to notation."""
        assert str(DiceSpec(2, 6, 3)) == "2d6+3"
        assert str(DiceSpec(1, 8, -1)) == "1d8-1"
        assert str(DiceSpec(1, 8)) == "1d8"
        assert str(DiceSpec(0, 6, 4)) == "4"

    def test_maximum(self):
        """Maximum is count × faces."""
        assert DiceSpec(3, 8, 2).maximum == 24

    def test_invalid_values(self):
        """Negative counts and faceless dice are rejected."""
        with pytest.raises(ValueError):
            DiceSpec(-1, 6)
        with pytest.raises(ValueError):
            DiceSpec(1, 0)


class TestDamageKind:
    """Tests for picking how damage resolves."""

    def test_from_flags(self):
        """Flags map to kinds."""
        assert DamageKind.from_flags() == DamageKind.NORMAL
        assert DamageKind.from_flags(is_critical=True) == DamageKind.CRITICAL
        assert (
            DamageKind.from_flags(is_critical=True, is_true_critical=True)
            == DamageKind.TRUE_CRITICAL
        )

    def test_graze_takes_precedence(self):
        """A graze flag wins over critical flags."""
        assert DamageKind.from_flags(is_critical=True, is_graze=True) == DamageKind.GRAZE

    def test_from_outcome(self):
        """Attack outcomes map to kinds; a miss deals nothing."""
        assert DamageKind.from_outcome(AttackOutcome.HIT) == DamageKind.NORMAL
        assert DamageKind.from_outcome(AttackOutcome.GRAZE) == DamageKind.GRAZE
        assert DamageKind.from_outcome(AttackOutcome.CRITICAL) == DamageKind.CRITICAL
        assert DamageKind.from_outcome(AttackOutcome.TRUE_CRITICAL) == DamageKind.TRUE_CRITICAL
        assert DamageKind.from_outcome(AttackOutcome.MISS) is None


class TestNormalDamage:
    """Tests for rolled damage."""

    def test_sum_plus_modifier(self, scripted):
        """Dice are summed and the modifier added."""
        result = resolve_attack_damage(DiceSpec(2, 6, 3), scripted(4, 5))
        assert result.kind == DamageKind.NORMAL
        assert result.base_rolls == (4, 5)
        assert result.total == 12

    def test_floored_at_zero(self, scripted):
        """Negative totals become 0."""
        result = resolve_attack_damage(DiceSpec(1, 4, -5), scripted(2))
        assert result.total == 0

    def test_flat_damage(self, scripted):
        """No dice means just the modifier, never negative."""
        rng = scripted()
        assert resolve_attack_damage(DiceSpec(0, 6, 4), rng).total == 4
        assert resolve_attack_damage(DiceSpec(0, 6, -2), rng).total == 0

    def test_roll_damage_order(self, scripted):
        """One draw per die, left to right."""
        rng = scripted(3, 1, 6)
        roll = roll_damage(DiceSpec(3, 6, 1), rng)
        assert roll.rolls == (3, 1, 6)
        assert roll.total == 11
        assert rng.calls == [(1, 6)] * 3


class TestCriticalDamage:
    """Tests for maximized damage."""

    def test_critical_maximizes(self, scripted):
        """Criticals maximize the base dice without rolling."""
        rng = scripted()
        result = resolve_attack_damage(DiceSpec(2, 6, 3), rng, DamageKind.CRITICAL)
        assert result.base_maximized == 12
        assert result.total == 15
        assert result.base_rolls == ()

    def test_critical_ignores_bonus(self, scripted):
        """A plain critical does not roll bonus dice."""
        rng = scripted()
        result = resolve_attack_damage(
            DiceSpec(1, 8, 0), rng, DamageKind.CRITICAL, critical_bonus=DiceSpec(1, 6)
        )
        assert result.total == 8
        assert result.true_critical_damage is None

    def test_true_critical_adds_bonus(self, scripted):
        """True criticals add an independently rolled bonus spec."""
        result = resolve_attack_damage(
            DiceSpec(2, 6, 3),
            scripted(4, 2),
            DamageKind.TRUE_CRITICAL,
            critical_bonus=DiceSpec(2, 4, 1),
        )
        assert result.base_maximized == 12
        assert result.bonus_rolls == (4, 2)
        assert result.true_critical_damage == 7
        assert result.total == 22

    def test_true_critical_without_bonus(self, scripted):
        """Without a bonus spec a true critical is a critical."""
        result = resolve_attack_damage(DiceSpec(1, 10, 2), scripted(), DamageKind.TRUE_CRITICAL)
        assert result.total == 12

    def test_critical_never_negative(self, scripted):
        """Maximized damage with a large negative modifier floors at 0."""
        result = resolve_attack_damage(DiceSpec(1, 4, -10), scripted(), DamageKind.CRITICAL)
        assert result.total == 0


class TestGrazeDamage:
    """Tests for graze damage."""

    def test_half_maximum_with_dice(self):
        """With dice, a graze deals half the maximum base damage."""
        assert calculate_graze_damage(DiceSpec(2, 6, 4)) == 6
        assert calculate_graze_damage(DiceSpec(1, 8)) == 4
        assert calculate_graze_damage(DiceSpec(1, 3)) == 1

    def test_flat_divided_by_three(self):
        """Flat damage grazes for modifier // 3."""
        assert calculate_graze_damage(DiceSpec(0, 6, 7)) == 2
        assert calculate_graze_damage(DiceSpec(0, 6, 9)) == 3

    def test_minimum_one(self):
        """A graze always deals at least 1."""
        assert calculate_graze_damage(DiceSpec(0, 6, 2)) == 1
        assert calculate_graze_damage(DiceSpec(0, 6, 0)) == 1
        assert calculate_graze_damage(DiceSpec(1, 1)) == 1

    def test_graze_never_rolls(self, scripted):
        """Resolving a graze draws no randomness."""
        rng = scripted()
        result = resolve_attack_damage(DiceSpec(2, 6, 4), rng, DamageKind.GRAZE)
        assert result.total == 6
        assert rng.calls == []
        assert "Raspão" in result.breakdown
