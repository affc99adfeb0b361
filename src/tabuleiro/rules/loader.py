"""
Rule table loader for Tabuleiro do Caos.

Handles loading and validating the static rule tables from YAML files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ValidationError

from tabuleiro.config import get_settings
from tabuleiro.errors import RulesDataError
from tabuleiro.rules.tables import (
    ArchetypeInfo,
    ConditionInfo,
    RuleTables,
    SizeModifiers,
    SkillMetadata,
)

logger = structlog.get_logger(__name__)

# table name -> (file name, entry model)
TABLE_FILES: dict[str, tuple[str, type[BaseModel]]] = {
    "skills": ("skills.yaml", SkillMetadata),
    "conditions": ("conditions.yaml", ConditionInfo),
    "sizes": ("sizes.yaml", SizeModifiers),
    "archetypes": ("archetypes.yaml", ArchetypeInfo),
}


def load_yaml_table(file_path: Path, key: str) -> dict[str, dict[str, Any]]:
    """
    Load a YAML file containing one rule table.

    The file must hold a mapping with a single top-level ``key`` whose value maps
    entry ids to entry fields.

    Args:
        file_path: Path to the YAML file
        key: Expected top-level key (e.g. "skills")

    Returns:
        Mapping of entry id to raw entry data

    Raises:
        RulesDataError: If the file cannot be loaded or has the wrong shape
    """
    try:
        with open(file_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise RulesDataError(f"YAML parsing error in {file_path}: {e}") from e
    except FileNotFoundError:
        raise RulesDataError(f"File not found: {file_path}") from None
    except OSError as e:
        raise RulesDataError(f"Error loading {file_path}: {e}") from e

    if not data:
        raise RulesDataError(f"Empty YAML file: {file_path}")

    if not isinstance(data, dict) or key not in data:
        raise RulesDataError(f"Missing '{key}' key in {file_path}")

    entries = data[key]
    if not isinstance(entries, dict):
        raise RulesDataError(f"'{key}' must be a mapping of id to entry in {file_path}")

    for entry_id, entry in entries.items():
        if not isinstance(entry, dict):
            raise RulesDataError(f"Entry '{entry_id}' in {file_path} must be a mapping")

    return entries


def build_entries(
    raw_entries: dict[str, dict[str, Any]], model: type[BaseModel], file_path: Path
) -> dict[str, Any]:
    """
    Validate raw table entries into models, injecting each entry's id.

    Raises:
        RulesDataError: If any entry fails validation
    """
    entries: dict[str, Any] = {}
    for entry_id, entry in raw_entries.items():
        try:
            entries[entry_id] = model(id=entry_id, **entry)
        except ValidationError as e:
            raise RulesDataError(f"Invalid entry '{entry_id}' in {file_path}: {e}") from e
    return entries


def load_rule_tables(directory: Path) -> RuleTables:
    """
    Load every rule table from a directory.

    Args:
        directory: Directory holding skills.yaml, conditions.yaml, sizes.yaml, archetypes.yaml

    Returns:
        Validated RuleTables instance

    Raises:
        RulesDataError: If the directory or any table is missing or invalid
    """
    if not directory.exists():
        raise RulesDataError(f"Directory does not exist: {directory}")

    if not directory.is_dir():
        raise RulesDataError(f"Not a directory: {directory}")

    tables: dict[str, dict[str, Any]] = {}
    for table_name, (file_name, model) in TABLE_FILES.items():
        file_path = directory / file_name
        raw_entries = load_yaml_table(file_path, table_name)
        tables[table_name] = build_entries(raw_entries, model, file_path)

    try:
        rule_tables = RuleTables(**tables)
    except ValidationError as e:
        raise RulesDataError(f"Inconsistent rule tables in {directory}: {e}") from e

    logger.info(
        "rule_tables_loaded",
        directory=str(directory),
        skills=len(rule_tables.skills),
        conditions=len(rule_tables.conditions),
        sizes=len(rule_tables.sizes),
        archetypes=len(rule_tables.archetypes),
    )

    return rule_tables


@lru_cache
def get_rule_tables() -> RuleTables:
    """Get the rule tables from the configured directory, loaded once."""
    return load_rule_tables(get_settings().rules_dir)
