"""In-memory routing counters for diagnostics."""

from collections import Counter
from threading import Lock
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from nanorouter.router.models import RoutingDecision

DECISIONS = "routing.decisions"
PINNED = "routing.pinned"
ESCALATIONS = "routing.escalations"
OVERRIDES = "routing.overrides"
REEVALUATIONS = "routing.reevaluations"
ACTIVE_SESSIONS = "sessions.active"


def metric_name(name: str, tags: Optional[dict[str, Any]] = None) -> str:
    """Render ``name|k=v,...`` with tags sorted by key."""
    if not tags:
        return name
    rendered = ",".join(f"{k}={v}" for k, v in sorted(tags.items()))
    return f"{name}|{rendered}"


class MetricsSink:
    """
    Per-router tallies of routing outcomes.

    Every decision counts once under ``routing.decisions`` tagged with its
    tier; pins, escalations, overrides and re-evaluations get their own
    counters. ``sessions.active`` is a gauge refreshed after each decision.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._counters: Counter[str] = Counter()
        self._gauges: dict[str, float] = {}

    def record_decision(
        self,
        decision: "RoutingDecision",
        override: bool = False,
        escalated: bool = False,
        reevaluated: bool = False,
    ) -> None:
        with self._lock:
            self._counters[metric_name(DECISIONS, {"tier": decision.tier.value})] += 1
            if decision.pinned:
                self._counters[PINNED] += 1
            if override:
                self._counters[OVERRIDES] += 1
            if escalated:
                self._counters[ESCALATIONS] += 1
            if reevaluated:
                self._counters[REEVALUATIONS] += 1

    def set_active_sessions(self, count: int) -> None:
        with self._lock:
            self._gauges[ACTIVE_SESSIONS] = count

    def counter(self, name: str, tags: Optional[dict[str, Any]] = None) -> int:
        with self._lock:
            return self._counters.get(metric_name(name, tags), 0)

    def snapshot(self) -> dict[str, Any]:
        with self._lock:
            return {"counters": dict(self._counters), "gauges": dict(self._gauges)}
