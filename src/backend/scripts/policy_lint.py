from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Sequence


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


_ensure_backend_on_path()

from common.policy_engine.dates import parse_instant  # noqa: E402
from common.policy_engine.models import Rule  # noqa: E402

# Region -> currency expected on skip thresholds.
REGION_CURRENCY = {"US": "USD", "EU": "EUR"}


@dataclass(frozen=True)
class LintIssue:
    level: str  # ERROR | WARN
    message: str
    rule_ids: tuple[str, ...] = ()


def _selectors_key(rule: Rule) -> tuple:
    s = rule.selectors
    return (s.region or None, s.department or None, s.category or None)


def ranges_overlap(
    a_start: datetime,
    a_end: Optional[datetime],
    b_start: datetime,
    b_end: Optional[datetime],
) -> bool:
    # Open-ended windows run forever.
    a_ends_after_b_starts = a_end is None or b_start <= a_end
    b_ends_after_a_starts = b_end is None or a_start <= b_end
    return a_ends_after_b_starts and b_ends_after_a_starts


def overlap_issues(rules: Sequence[Rule]) -> list[LintIssue]:
    issues: list[LintIssue] = []
    for i, a in enumerate(rules):
        for b in rules[i + 1 :]:
            if _selectors_key(a) != _selectors_key(b):
                continue
            a_start, b_start = parse_instant(a.effective_from), parse_instant(b.effective_from)
            if a_start is None or b_start is None:
                continue
            a_end = parse_instant(a.effective_to) if a.effective_to else None
            b_end = parse_instant(b.effective_to) if b.effective_to else None
            if ranges_overlap(a_start, a_end, b_start, b_end):
                issues.append(LintIssue("ERROR", f"Overlap: {a.id} <-> {b.id}", (a.id, b.id)))
    return issues


def duplicate_id_issues(rules: Iterable[Rule]) -> list[LintIssue]:
    seen: set[str] = set()
    issues: list[LintIssue] = []
    for rule in rules:
        if rule.id in seen:
            issues.append(LintIssue("ERROR", f"Duplicate rule id: {rule.id}", (rule.id,)))
        seen.add(rule.id)
    return issues


def currency_issues(rules: Iterable[Rule]) -> list[LintIssue]:
    issues: list[LintIssue] = []
    for rule in rules:
        region = rule.selectors.region
        expected = REGION_CURRENCY.get(region or "")
        if expected is None:
            continue
        for threshold in rule.effect.skip_steps_below or []:
            if threshold.currency != expected:
                issues.append(
                    LintIssue(
                        "WARN",
                        f"Currency mismatch on {rule.id}: expected {expected} for {region} region",
                        (rule.id,),
                    )
                )
    return issues


def lint_rules(rules: Sequence[Rule]) -> list[LintIssue]:
    return [*overlap_issues(rules), *duplicate_id_issues(rules), *currency_issues(rules)]


def main(argv: list[str] | None = None) -> int:
    from connectors.policies.config import get_policy_config
    from connectors.policies.loader import load_rules

    parser = argparse.ArgumentParser(description="Lint the policy rule set for overlaps and currency mismatches.")
    parser.add_argument("--policies-dir", type=Path, default=None)
    args = parser.parse_args(argv)

    policies_dir = args.policies_dir or get_policy_config().policies_dir
    issues = lint_rules(load_rules(policies_dir))
    if not issues:
        print("policy:lint no issues found")
        return 0

    for issue in issues:
        stream = sys.stderr if issue.level == "ERROR" else sys.stdout
        print(f"{issue.level}: {issue.message}", file=stream)
    return 1 if any(issue.level == "ERROR" for issue in issues) else 0


if __name__ == "__main__":
    raise SystemExit(main())
