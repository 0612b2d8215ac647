from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path


def _ensure_backend_on_path() -> None:
    backend_dir = Path(__file__).resolve().parents[1]
    if str(backend_dir) not in sys.path:
        sys.path.insert(0, str(backend_dir))


def _load_json(path: Path):
    with path.open() as handle:
        return json.load(handle)


def _render_markdown(decision, explanation: str) -> str:
    lines = ["# Approval Routing", "", explanation, "", "## Steps"]
    lines.extend(f"- {step}" for step in decision.steps or ["(none)"])
    lines.append("")
    lines.append("## Skipped")
    lines.extend(f"- {step}" for step in decision.skipped or ["(none)"])
    lines.append("")
    lines.append("## Rule hits")
    for hit in decision.rule_hits:
        suffix = f" [{hit.step}]" if hit.step else ""
        lines.append(f"- {hit.rule_id}: {hit.reason}{suffix}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    _ensure_backend_on_path()

    from common.policy_engine.dates import InvalidExpenseDate
    from common.policy_engine.engine import PolicyEngine
    from common.policy_engine.models import Expense
    from connectors.policies.config import get_policy_config
    from connectors.policies.store import PolicyStore
    from pipelines.explain import build_explanation

    parser = argparse.ArgumentParser(description="Evaluate one expense against the policy rule set.")
    parser.add_argument("expense", type=Path, help="Path to an expense JSON document.")
    parser.add_argument("--policies-dir", type=Path, default=None)
    parser.add_argument(
        "--all-rules",
        action="store_true",
        help="Pass the unfiltered rule set instead of the rules active on the expense date.",
    )
    parser.add_argument("--format", choices=("json", "markdown"), default="json")
    args = parser.parse_args(argv)

    expense = Expense.model_validate(_load_json(args.expense))
    snapshot = PolicyStore(args.policies_dir or get_policy_config().policies_dir).snapshot()

    try:
        rules = snapshot.rules if args.all_rules else snapshot.active_rules(expense.date)
        decision = PolicyEngine(rules).evaluate(expense)
    except InvalidExpenseDate as exc:
        print(str(exc), file=sys.stderr)
        return 2

    explanation = build_explanation(decision, expense)
    if args.format == "markdown":
        print(_render_markdown(decision, explanation))
    else:
        payload = decision.model_dump(mode="json", by_alias=True)
        payload["explanation"] = explanation
        print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
