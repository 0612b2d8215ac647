from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, List

from pydantic import TypeAdapter, ValidationError

from common.policy_engine.dates import parse_instant
from common.policy_engine.models import Rule

logger = logging.getLogger(__name__)

CATEGORIES_FILE_NAME = "categories.json"

_RULES_ADAPTER = TypeAdapter(List[Rule])


class PolicyFileError(ValueError):
    def __init__(self, file: str, message: str):
        super().__init__(f"Policy file {file} failed validation: {message}")
        self.file = file


def policy_files(policies_dir: Path) -> List[Path]:
    if not policies_dir.is_dir():
        raise PolicyFileError(str(policies_dir), "policies directory not found")
    return sorted(
        path
        for path in policies_dir.iterdir()
        if path.is_file() and path.suffix == ".json" and path.name != CATEGORIES_FILE_NAME
    )


def parse_rules(raw: Any, *, source: str) -> List[Rule]:
    try:
        rules = _RULES_ADAPTER.validate_python(raw)
    except ValidationError as exc:
        raise PolicyFileError(source, str(exc)) from exc

    for rule in rules:
        if parse_instant(rule.effective_from) is None:
            raise PolicyFileError(source, f"rule {rule.id}: effective_from is not a valid datetime")
        if rule.effective_to is not None and parse_instant(rule.effective_to) is None:
            raise PolicyFileError(source, f"rule {rule.id}: effective_to is not a valid datetime")
    return rules


def load_rule_file(path: Path) -> List[Rule]:
    try:
        with path.open(encoding="utf-8") as handle:
            raw = json.load(handle)
    except json.JSONDecodeError as exc:
        raise PolicyFileError(path.name, f"invalid JSON ({exc})") from exc
    return parse_rules(raw, source=path.name)


def load_rule_files(paths: Iterable[Path]) -> List[Rule]:
    rules: List[Rule] = []
    for path in paths:
        loaded = load_rule_file(path)
        logger.debug("loaded %d rules from %s", len(loaded), path.name)
        rules.extend(loaded)
    return rules


def load_rules(policies_dir: Path) -> List[Rule]:
    """Load every rule file in the directory, concatenated in file-name order."""
    return load_rule_files(policy_files(Path(policies_dir)))
