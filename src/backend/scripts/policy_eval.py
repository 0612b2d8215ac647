from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Sequence


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


_ensure_backend_on_path()

from pydantic import BaseModel, Field  # noqa: E402

from common.policy_engine.applicability import within_effective_window  # noqa: E402
from common.policy_engine.dates import require_instant  # noqa: E402
from common.policy_engine.engine import evaluate  # noqa: E402
from common.policy_engine.models import Expense, Rule  # noqa: E402
from scripts.policy_lint import overlap_issues  # noqa: E402


class Scenario(BaseModel):
    name: str
    expense: Expense
    expected_steps: Optional[List[str]] = None


class ScenarioResult(BaseModel):
    name: str
    expected: Optional[List[str]] = None
    actual: List[str] = Field(default_factory=list)
    skipped: List[str] = Field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.expected is None or self.expected == self.actual


class PolicyQAReport(BaseModel):
    generated_at: datetime
    conflicts: List[str] = Field(default_factory=list)
    results: List[ScenarioResult] = Field(default_factory=list)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.passed)


DEFAULT_SCENARIOS: list[dict[str, Any]] = [
    {
        "name": "US ride_hail 2024-09-15 should skip manager",
        "expense": {
            "dateISO": "2024-09-15T12:00:00.000Z",
            "region": "US",
            "department": "engineering",
            "category": "ride_hail",
            "total": {"amount": 49, "currency": "USD"},
        },
        "expected_steps": ["finance"],
    },
    {
        "name": "US ride_hail 2024-10-10 $74",
        "expense": {
            "dateISO": "2024-10-10T12:00:00.000Z",
            "region": "US",
            "department": "sales",
            "category": "ride_hail",
            "total": {"amount": 74, "currency": "USD"},
        },
    },
    {
        "name": "EU ride_hail 60 EUR should add compliance",
        "expense": {
            "dateISO": "2025-01-10T12:00:00.000Z",
            "region": "EU",
            "department": "engineering",
            "category": "ride_hail",
            "total": {"amount": 60, "currency": "EUR"},
        },
    },
]


def load_scenarios(path: Optional[Path]) -> list[Scenario]:
    if path is None:
        raw = DEFAULT_SCENARIOS
    else:
        with path.open(encoding="utf-8") as handle:
            raw = json.load(handle)
    return [Scenario.model_validate(item) for item in raw]


def run_policy_qa(rules: Sequence[Rule], scenarios: Sequence[Scenario]) -> PolicyQAReport:
    conflicts = [issue.message for issue in overlap_issues(rules)]
    results: list[ScenarioResult] = []
    for scenario in scenarios:
        at = require_instant(scenario.expense.date)
        active = [rule for rule in rules if within_effective_window(rule, at)]
        decision = evaluate(scenario.expense, active)
        results.append(
            ScenarioResult(
                name=scenario.name,
                expected=scenario.expected_steps,
                actual=decision.steps,
                skipped=decision.skipped,
            )
        )
    return PolicyQAReport(generated_at=datetime.now(timezone.utc), conflicts=conflicts, results=results)


def render_markdown(report: PolicyQAReport) -> str:
    lines = [
        "# Policy QA Report",
        "",
        f"Generated: {report.generated_at.isoformat()}",
        "",
        "## Conflicts",
    ]
    if report.conflicts:
        lines.extend(f"- {conflict}" for conflict in report.conflicts)
    else:
        lines.append("- None")
    lines.append("")
    lines.append("## Scenarios")
    for result in report.results:
        line = f"- {result.name}: actual {', '.join(result.actual) or '(none)'}"
        if result.expected is not None:
            verdict = "PASS" if result.passed else "FAIL"
            line += f" expected {', '.join(result.expected) or '(none)'} [{verdict}]"
        lines.append(line)
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    from connectors.policies.config import get_policy_config
    from connectors.policies.loader import load_rules

    parser = argparse.ArgumentParser(description="Run deterministic policy QA scenarios and write a report.")
    parser.add_argument("--policies-dir", type=Path, default=None)
    parser.add_argument("--scenarios", type=Path, default=None, help="JSON array of scenarios.")
    parser.add_argument("--out", type=Path, default=Path("data/policy_report.md"))
    args = parser.parse_args(argv)

    policies_dir = args.policies_dir or get_policy_config().policies_dir
    report = run_policy_qa(load_rules(policies_dir), load_scenarios(args.scenarios))

    args.out.parent.mkdir(parents=True, exist_ok=True)
    args.out.write_text(render_markdown(report))

    print(f"policy:eval conflicts {len(report.conflicts)}")
    print(f"policy:eval scenarios {len(report.results)} (failed {report.failed})")
    print(f"Report written to {args.out}")
    return 1 if report.failed else 0


if __name__ == "__main__":
    raise SystemExit(main())
