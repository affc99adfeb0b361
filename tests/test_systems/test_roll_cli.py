"""Tests for the tabuleiro-roll command."""

import json

import pytest

from tabuleiro.errors import InvalidConditionError, UnknownSkillError
from tabuleiro.main import main, parse_condition, run


class TestParseCondition:
    """Tests for --condition parsing."""

    def test_plain_id(self):
        """A bare id is one stack."""
        condition = parse_condition("fraco")
        assert condition.id == "fraco"
        assert condition.stacks == 1

    def test_with_stacks(self):
        """id:stacks sets the stack count."""
        assert parse_condition("abalado:3").stacks == 3

    def test_empty_stacks(self):
        """An empty stack count means one stack."""
        assert parse_condition("abalado:").stacks == 1

    @pytest.mark.parametrize("text", ["abalado:0", "abalado:-2", "abalado:x"])
    def test_malformed_stacks(self, text):
        """Malformed stack counts raise a contract error naming the condition."""
        with pytest.raises(InvalidConditionError, match="abalado"):
            parse_condition(text)


class TestMain:
    """Tests for running the command."""

    def test_text_output(self, capsys):
        """Text output shows the formula and each roll."""
        exit_code = main(["atletismo", "--corpo", "3", "--tier", "versed", "--seed", "1"])

        output = capsys.readouterr().out
        assert exit_code == 0
        assert output.startswith("atletismo: 3d10")
        assert "✶" in output

    def test_json_output(self, capsys):
        """JSON output holds the formula and the rolled faces."""
        args = ["atletismo", "--corpo", "3", "--tier", "adept", "--seed", "5", "--rolls", "3"]
        main([*args, "--json"])

        payload = json.loads(capsys.readouterr().out)
        assert payload["formula"] == {"dice_count": 3, "die_faces": 8, "is_penalty_roll": False}
        assert len(payload["rolls"]) == 3
        for roll in payload["rolls"]:
            assert len(roll["faces"]) == 3
            assert roll["net_successes"] >= 0

    def test_seed_reproducible(self, capsys):
        """The same seed prints the same rolls."""
        args = ["furtividade", "--agilidade", "4", "--seed", "42", "--json"]
        main(args)
        first = capsys.readouterr().out
        main(args)
        assert capsys.readouterr().out == first

    def test_penalties_applied(self, capsys):
        """Load, armor and conditions reduce the pool."""
        main(
            [
                "atletismo",
                "--corpo",
                "4",
                "--overloaded",
                "--armor",
                "heavy",
                "--condition",
                "fraco",
                "--seed",
                "3",
                "--json",
            ]
        )

        payload = json.loads(capsys.readouterr().out)
        assert payload["formula"]["is_penalty_roll"]
        assert payload["formula"]["dice_count"] == 2
        assert payload["penalties"] == {"agilidade": -1, "corpo": -1}

    def test_size_option(self, capsys):
        """Size adds its skill dice."""
        main(["furtividade", "--agilidade", "2", "--size", "minusculo", "--seed", "1", "--json"])
        assert json.loads(capsys.readouterr().out)["formula"]["dice_count"] == 4

    def test_more_rolls_than_history_default(self, capsys):
        """Every requested roll is printed, past the default history size."""
        main(["atletismo", "--rolls", "60", "--seed", "1", "--json"])
        assert len(json.loads(capsys.readouterr().out)["rolls"]) == 60

    def test_seed_from_settings(self, monkeypatch, capsys):
        """Without --seed the configured seed makes rolls reproducible."""
        monkeypatch.setenv("TABULEIRO_RNG_SEED", "77")
        args = ["atletismo", "--corpo", "3", "--rolls", "5", "--json"]
        main(args)
        first = capsys.readouterr().out
        main(args)
        assert capsys.readouterr().out == first

    def test_unknown_skill_raises(self):
        """main lets contract errors propagate."""
        with pytest.raises(UnknownSkillError):
            main(["voo", "--seed", "1"])


class TestRun:
    """Tests for the console-script wrapper."""

    def test_rules_error_exit_code(self, monkeypatch, capsys):
        """Contract errors exit with status 2 and a message on stderr."""
        monkeypatch.setattr("sys.argv", ["tabuleiro-roll", "voo"])
        with pytest.raises(SystemExit) as exc_info:
            run()
        assert exc_info.value.code == 2
        assert "voo" in capsys.readouterr().err

    def test_success_exit_code(self, monkeypatch, capsys):
        """A successful roll exits with status 0."""
        monkeypatch.setattr("sys.argv", ["tabuleiro-roll", "percepcao", "--seed", "9"])
        with pytest.raises(SystemExit) as exc_info:
            run()
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("percepcao:")

    @pytest.mark.parametrize("condition", ["abalado:0", "abalado:x"])
    def test_malformed_condition_exit_code(self, monkeypatch, capsys, condition):
        """A malformed --condition exits with status 2 instead of a traceback."""
        monkeypatch.setattr(
            "sys.argv", ["tabuleiro-roll", "atletismo", "--condition", condition]
        )
        with pytest.raises(SystemExit) as exc_info:
            run()
        assert exc_info.value.code == 2
        assert "abalado" in capsys.readouterr().err
