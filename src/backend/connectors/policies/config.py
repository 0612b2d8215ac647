from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv


load_dotenv()


POLICIES_DIR_DEFAULT = "policies"
AUDIT_LOG_PATH_DEFAULT = "data/audit.jsonl"


@dataclass(frozen=True)
class PolicyConfig:
    policies_dir: Path
    categories_file: Path
    audit_log_path: Path


def get_policy_config() -> PolicyConfig:
    """
    Load rule-set provider configuration from environment variables.

    Reads:
      POLICIES_DIR, POLICY_CATEGORIES_FILE, AUDIT_LOG_PATH
    """
    policies_dir = Path(_env("POLICIES_DIR", POLICIES_DIR_DEFAULT))
    categories_file = _env("POLICY_CATEGORIES_FILE", "")
    return PolicyConfig(
        policies_dir=policies_dir,
        categories_file=Path(categories_file) if categories_file else policies_dir / "categories.json",
        audit_log_path=Path(_env("AUDIT_LOG_PATH", AUDIT_LOG_PATH_DEFAULT)),
    )


def _env(name: str, default: str) -> str:
    value = os.getenv(name, "").strip()
    return value or default
