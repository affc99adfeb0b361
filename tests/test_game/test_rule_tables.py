"""Tests for rule table models and YAML loading."""

import shutil

import pytest
import yaml

from tabuleiro.config import PACKAGE_RULES_DIR
from tabuleiro.errors import RulesDataError, UnknownConditionError, UnknownTableEntryError
from tabuleiro.game.character.attributes import AttributeName
from tabuleiro.rules import (
    ConditionCategory,
    RuleTables,
    get_rule_tables,
    load_rule_tables,
    load_yaml_table,
)


@pytest.fixture
def rules_copy(tmp_path):
    """A writable copy of the packaged rule tables."""
    target = tmp_path / "rules"
    shutil.copytree(PACKAGE_RULES_DIR, target)
    return target


def rewrite(path, key, mutate):
    """Load a table file, mutate its entries and write it back."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    mutate(data[key])
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, allow_unicode=True)


class TestPackagedTables:
    """Tests for the tables shipped with the package."""

    def test_tables_load(self, rule_tables):
        """All four tables load and are populated."""
        assert isinstance(rule_tables, RuleTables)
        assert len(rule_tables.skills) >= 30
        assert len(rule_tables.conditions) >= 30
        assert "medio" in rule_tables.sizes
        assert len(rule_tables.archetypes) == 6

    def test_entry_ids_injected(self, rule_tables):
        """Each entry carries its own id."""
        for table in (rule_tables.skills, rule_tables.conditions, rule_tables.sizes):
            for entry_id, entry in table.items():
                assert entry.id == entry_id

    def test_stackable_condition(self, rule_tables):
        """Abalado stacks and hits every test."""
        abalado = rule_tables.get_condition("abalado")
        assert abalado.category == ConditionCategory.MENTAL
        assert abalado.stackable
        assert abalado.max_stacks == 5
        assert abalado.dice_penalty.targets == frozenset({"all"})
        assert abalado.dice_penalty.modifier == -1
        assert abalado.dice_penalty.scales_with_stacks

    def test_condition_without_penalty(self, rule_tables):
        """Most conditions carry no dice penalty."""
        assert rule_tables.get_condition("caido").dice_penalty is None
        assert rule_tables.get_condition("sangrando").dice_penalty is None

    def test_auto_conditions_present(self, rule_tables):
        """The resource-triggered conditions exist in the table."""
        for condition_id in ("avariado", "machucado", "esgotado"):
            rule_tables.get_condition(condition_id)

    def test_implications(self, rule_tables):
        """Morrendo implies unconsciousness."""
        assert "inconsciente" in rule_tables.get_condition("morrendo").implies

    def test_size_modifiers(self, rule_tables):
        """Small creatures trade Guard for athletics."""
        pequeno = rule_tables.get_size("pequeno")
        assert pequeno.guard == 2
        assert pequeno.skill_dice["furtividade"] == 1
        assert pequeno.skill_dice["atletismo"] == -1
        assert rule_tables.get_size("medio").skill_dice == {}

    def test_huge_sizes_share_modifiers(self, rule_tables):
        """Every enorme grade shares the same skill dice."""
        first = rule_tables.get_size("enorme-1").skill_dice
        assert rule_tables.get_size("enorme-3").skill_dice == first

    def test_archetype(self, rule_tables):
        """Archetypes name their Guard attribute and PP rate."""
        combatente = rule_tables.get_archetype("combatente")
        assert combatente.guard_attribute == AttributeName.CORPO
        assert combatente.power_points_per_level == 1
        assert rule_tables.get_archetype("feiticeiro").power_points_per_level == 5

    def test_unknown_lookups(self, rule_tables):
        """Lookups fail fast naming the missing id."""
        with pytest.raises(UnknownConditionError):
            rule_tables.get_condition("voando")
        with pytest.raises(UnknownTableEntryError, match="gigante"):
            rule_tables.get_size("gigante")
        with pytest.raises(UnknownTableEntryError, match="bardo"):
            rule_tables.get_archetype("bardo")


class TestLoaderErrors:
    """Tests for malformed rule data."""

    def test_missing_directory(self, tmp_path):
        """A missing directory is a data error."""
        with pytest.raises(RulesDataError, match="does not exist"):
            load_rule_tables(tmp_path / "nope")

    def test_missing_file(self, rules_copy):
        """Every table file is required."""
        (rules_copy / "sizes.yaml").unlink()
        with pytest.raises(RulesDataError, match="not found"):
            load_rule_tables(rules_copy)

    def test_invalid_yaml(self, tmp_path):
        """YAML syntax errors are wrapped."""
        path = tmp_path / "skills.yaml"
        path.write_text("skills: [unclosed\n", encoding="utf-8")
        with pytest.raises(RulesDataError, match="YAML parsing error"):
            load_yaml_table(path, "skills")

    def test_empty_file(self, tmp_path):
        """Empty files are rejected."""
        path = tmp_path / "skills.yaml"
        path.write_text("", encoding="utf-8")
        with pytest.raises(RulesDataError, match="Empty"):
            load_yaml_table(path, "skills")

    def test_missing_key(self, tmp_path):
        """The top-level key must match the table."""
        path = tmp_path / "skills.yaml"
        path.write_text("habilidades: {}\n", encoding="utf-8")
        with pytest.raises(RulesDataError, match="Missing 'skills'"):
            load_yaml_table(path, "skills")

    def test_invalid_entry(self, rules_copy):
        """Validation errors name the offending entry."""
        rewrite(
            rules_copy / "conditions.yaml",
            "conditions",
            lambda entries: entries["abalado"].update(max_stacks=0),
        )
        with pytest.raises(RulesDataError, match="abalado"):
            load_rule_tables(rules_copy)

    def test_unknown_penalty_target(self, rules_copy):
        """Penalty targets must be attributes or 'all'."""
        rewrite(
            rules_copy / "conditions.yaml",
            "conditions",
            lambda entries: entries["fraco"]["dice_penalty"].update(targets=["forca"]),
        )
        with pytest.raises(RulesDataError, match="forca"):
            load_rule_tables(rules_copy)

    def test_dangling_implication(self, rules_copy):
        """Implied conditions must exist."""
        rewrite(
            rules_copy / "conditions.yaml",
            "conditions",
            lambda entries: entries["morrendo"].update(implies=["fantasma"]),
        )
        with pytest.raises(RulesDataError, match="fantasma"):
            load_rule_tables(rules_copy)

    def test_size_references_unknown_skill(self, rules_copy):
        """Size skill dice must name real skills."""
        rewrite(
            rules_copy / "sizes.yaml",
            "sizes",
            lambda entries: entries["grande"]["skill_dice"].update(voo=1),
        )
        with pytest.raises(RulesDataError, match="voo"):
            load_rule_tables(rules_copy)


class TestConfiguredTables:
    """Tests for the cached, settings-driven loader."""

    def test_rules_dir_from_environment(self, rules_copy, monkeypatch):
        """TABULEIRO_RULES_DIR points the loader elsewhere."""
        rewrite(
            rules_copy / "archetypes.yaml",
            "archetypes",
            lambda entries: entries["combatente"].update(power_points_per_level=9),
        )
        monkeypatch.setenv("TABULEIRO_RULES_DIR", str(rules_copy))

        tables = get_rule_tables()

        assert tables.get_archetype("combatente").power_points_per_level == 9

    def test_cached(self):
        """Tables are loaded once."""
        assert get_rule_tables() is get_rule_tables()
