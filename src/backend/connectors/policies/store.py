from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from common.policy_engine.applicability import within_effective_window
from common.policy_engine.dates import require_instant
from common.policy_engine.models import Instant, Rule

from .loader import load_rule_files, policy_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolicySnapshot:
    rules: tuple[Rule, ...]
    source_files: tuple[str, ...] = ()
    loaded_at: Optional[datetime] = None

    def active_rules(self, at: Instant) -> tuple[Rule, ...]:
        when = require_instant(at)
        return tuple(rule for rule in self.rules if within_effective_window(rule, when))


class PolicyStore:
    """Owns the current rule-set snapshot.

    Readers get a whole snapshot; reload() builds a new one and swaps the
    reference, so in-flight evaluations keep the snapshot they started with.
    """

    def __init__(self, policies_dir: Path):
        self._policies_dir = Path(policies_dir)
        self._snapshot: Optional[PolicySnapshot] = None
        self._lock = threading.Lock()

    @property
    def policies_dir(self) -> Path:
        return self._policies_dir

    def snapshot(self) -> PolicySnapshot:
        current = self._snapshot
        if current is not None:
            return current
        with self._lock:
            if self._snapshot is None:
                self._snapshot = self._build()
            return self._snapshot

    def reload(self) -> PolicySnapshot:
        fresh = self._build()
        with self._lock:
            self._snapshot = fresh
        return fresh

    def clear(self) -> None:
        with self._lock:
            self._snapshot = None

    def _build(self) -> PolicySnapshot:
        files = policy_files(self._policies_dir)
        rules = load_rule_files(files)
        logger.info("loaded %d rules from %d files in %s", len(rules), len(files), self._policies_dir)
        return PolicySnapshot(
            rules=tuple(rules),
            source_files=tuple(path.name for path in files),
            loaded_at=datetime.now(timezone.utc),
        )
