from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from pydantic import BaseModel, Field

from .models import Rule


class RuleCatalogEntry(BaseModel):
    rule_id: str
    name: str
    priority: int

    effective_from: str = ""
    effective_to: str = ""

    selectors: Dict[str, str] = Field(default_factory=dict)
    effect_kinds: List[str] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)
    comment: str = ""


def _instant_text(value: Any) -> str:
    if value is None:
        return ""
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _steps_mentioned(rule: Rule) -> List[str]:
    effect = rule.effect
    seen: Dict[str, None] = {}
    for step in effect.always_require_steps or []:
        seen.setdefault(step, None)
    for requirement in effect.require_steps_if or []:
        for step in requirement.steps:
            seen.setdefault(step, None)
    for steps in (effect.category_routes or {}).values():
        for step in steps:
            seen.setdefault(step, None)
    for threshold in effect.skip_steps_below or []:
        seen.setdefault(threshold.step, None)
    return list(seen)


def build_catalog(rules: Iterable[Rule]) -> List[RuleCatalogEntry]:
    entries: List[RuleCatalogEntry] = []
    for rule in rules:
        entries.append(
            RuleCatalogEntry(
                rule_id=rule.id,
                name=rule.name,
                priority=rule.priority,
                effective_from=_instant_text(rule.effective_from),
                effective_to=_instant_text(rule.effective_to),
                selectors=rule.selectors.model_dump(exclude_none=True),
                effect_kinds=rule.effect.kinds(),
                steps=_steps_mentioned(rule),
                comment=rule.comment or "",
            )
        )

    entries.sort(key=lambda e: (e.priority, e.rule_id))
    return entries


def _dump_json(catalog: list[dict[str, Any]]) -> str:
    return json.dumps(catalog, indent=2, sort_keys=True)


def _dump_yaml(catalog: list[dict[str, Any]]) -> str:
    return yaml.safe_dump(catalog, sort_keys=True)


def main(argv: Optional[list[str]] = None) -> None:
    from connectors.policies.config import get_policy_config
    from connectors.policies.loader import load_rules

    parser = argparse.ArgumentParser(description="Generate a catalog of the policy rule set.")
    parser.add_argument(
        "--policies-dir",
        type=Path,
        default=None,
        help="Directory of rule files (default: POLICIES_DIR).",
    )
    parser.add_argument(
        "--format",
        choices=("yaml", "json"),
        default="yaml",
        help="Output format (default: yaml).",
    )
    args = parser.parse_args(argv)

    policies_dir = args.policies_dir or get_policy_config().policies_dir
    catalog = [e.model_dump() for e in build_catalog(load_rules(policies_dir))]
    if args.format == "json":
        print(_dump_json(catalog))
    else:
        print(_dump_yaml(catalog))


if __name__ == "__main__":
    main()
