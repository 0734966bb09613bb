"""
Scoring Audit Trail - Captures scoring decisions for debugging and transparency.

The scorers are pure functions, so nothing is recorded unless the caller
passes its own ScoringAuditLog. When one is supplied, scorers log:
- Need categories dropped and weights renormalized for a policy
- Ratings ignored because the policy has no impact data
- Neutral ratings excluded from a preference profile
- Duplicate ratings for the same policy (last value kept)

This enables:
1. Explaining why a personalized score differs from the default one
2. Spotting content gaps (rated approaches with no dimension vector yet)
3. Detecting upstream rating-store bugs (duplicates)
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class AuditEvent(Enum):
    """Kinds of scoring decisions worth recording."""

    CATEGORIES_RENORMALIZED = "categories_renormalized"  # Absent categories' weights dropped
    RATING_IGNORED = "rating_ignored"  # Policy missing from the catalog or without dimensions
    NEUTRAL_EXCLUDED = "neutral_excluded"  # Rating 0 carries no signal
    DUPLICATE_RATING = "duplicate_rating"  # Same policy rated twice in one input


# Events that indicate a caller-side data problem
WARNING_EVENTS = frozenset({AuditEvent.DUPLICATE_RATING})


def _jsonable(value: Any) -> Any:
    """Reduce enums, tuples and sets in event details to JSON types."""
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, dict):
        return {str(_jsonable(k)): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_jsonable(v) for v in value]
    return str(value)


@dataclass
class ScoringAuditEntry:
    """One recorded scoring decision."""

    policy_id: str
    event: AuditEvent
    details: dict[str, Any] = field(default_factory=dict)
    scorer_name: str = ""
    timestamp: datetime = field(default_factory=datetime.now)
    warning_message: Optional[str] = None

    @property
    def is_warning(self) -> bool:
        return self.warning_message is not None

    def to_dict(self) -> dict:
        return {
            "policy_id": self.policy_id,
            "event": self.event.value,
            "details": _jsonable(self.details),
            "scorer_name": self.scorer_name,
            "timestamp": self.timestamp.isoformat(),
            "warning_message": self.warning_message,
        }


class ScoringAuditLog:
    """Caller-owned collector of scoring decisions.

    Usage:
        audit_log = ScoringAuditLog()
        scorer = ImpactScorer(audit_log=audit_log)
        scorer.evaluate(impact, weights, policy_id="universal-background-checks")

        audit_log.get_summary_for_policy("universal-background-checks")
        audit_log.export_to_json("/tmp/scoring_audit.json")
    """

    def __init__(self):
        self._log: list[ScoringAuditEntry] = []

    def record(
        self,
        policy_id: str,
        event: AuditEvent,
        scorer: str = "",
        warning: Optional[str] = None,
        **details: Any,
    ) -> ScoringAuditEntry:
        """Append one decision.

        Args:
            policy_id: Policy/approach the decision concerns
            event: What happened
            scorer: Name of the component recording it
            warning: Explicit warning text; WARNING_EVENTS get a generated one
            **details: Event-specific data (dropped categories, rating value, ...)
        """
        if warning is None and event in WARNING_EVENTS:
            warning = f"AUDIT WARNING: {policy_id}: {event.value} {_jsonable(details)}"

        entry = ScoringAuditEntry(policy_id, event, details, scorer_name=scorer, warning_message=warning)
        self._log.append(entry)
        if entry.is_warning:
            logger.warning(warning)
        return entry

    def get_warnings(self) -> list[ScoringAuditEntry]:
        return [e for e in self._log if e.is_warning]

    def get_all_entries(self) -> list[ScoringAuditEntry]:
        return list(self._log)

    def get_entries(self, event: AuditEvent) -> list[ScoringAuditEntry]:
        """Entries of one kind, in recording order."""
        return [e for e in self._log if e.event == event]

    def get_summary_for_policy(self, policy_id: str) -> dict:
        """All entries for one policy, grouped by event."""
        mine = [e for e in self._log if e.policy_id == policy_id]
        grouped: dict[str, list[dict]] = {}
        for e in mine:
            grouped.setdefault(e.event.value, []).append(e.to_dict())
        return {
            "policy_id": policy_id,
            "total_entries": len(mine),
            "warnings_count": sum(e.is_warning for e in mine),
            "entries_by_event": grouped,
        }

    def to_json(self) -> str:
        warnings = self.get_warnings()
        return json.dumps(
            {
                "generated_at": datetime.now().isoformat(),
                "total_entries": len(self._log),
                "total_warnings": len(warnings),
                "entries": [e.to_dict() for e in self._log],
                "warnings": [e.to_dict() for e in warnings],
            },
            indent=2,
        )

    def export_to_json(self, filepath: str | Path) -> None:
        """Write ``to_json()`` to a file, creating parent directories."""
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_json())
        logger.info(f"Exported {len(self)} scoring audit entries to {path}")

    def clear(self) -> None:
        self._log.clear()

    def __len__(self) -> int:
        return len(self._log)
