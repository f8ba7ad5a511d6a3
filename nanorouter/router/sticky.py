"""Sticky routing: the interception entry point with session pinning."""

import time
from typing import TYPE_CHECKING, Any, Callable, Optional

from nanorouter.metrics import MetricsSink
from nanorouter.utils.logging import AuditLogger

from .classifier import PromptAnalyzer
from .dispatcher import Dispatcher
from .models import TIER_ORDER, InterceptResult, RoutingRequest
from .session import SessionStore

if TYPE_CHECKING:
    from nanorouter.config.schema import RouterConfig


class StickyRouter:
    """
    Router with sticky sessions - keeps a conversation on its pinned target
    and periodically re-checks whether the conversation has shifted.

    Called before each message is handed to a downstream target; it never
    modifies the message, it only decides where it should go.
    """

    def __init__(
        self,
        config: "RouterConfig",
        audit: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], float]] = None,
        metrics: Optional[MetricsSink] = None,
    ):
        self.config = config
        self.audit = audit or AuditLogger("sticky")
        self.metrics = metrics or MetricsSink()
        self.sessions = SessionStore(
            capacity=config.session.capacity,
            ttl_seconds=config.session.ttl_seconds,
            clock=clock or time.monotonic,
            audit=self.audit,
        )
        self.analyzer = PromptAnalyzer(config, audit=self.audit)
        self.dispatcher = Dispatcher(config, sessions=self.sessions, audit=self.audit)

    def intercept(self, request: RoutingRequest) -> InterceptResult:
        """Analyze and route one message."""
        start = time.perf_counter()

        analysis = self.analyzer.analyze(request.prompt, request.system_prompt)
        session_id = request.session_id if self.config.session_pinning else None
        previous = self.sessions.get(session_id) if session_id else None

        decision = self.dispatcher.route(
            analysis,
            session_id=request.session_id,
            override_target=request.override_target,
            allow_reevaluation=True,
        )

        override = bool(request.override_target)
        if override:
            selection_changed = previous is not None and previous.decision.target != decision.target
            self.audit.info(
                f"Agent {request.agent_id or 'default'} has target override: {request.override_target}"
            )
        else:
            selection_changed = previous is None or previous.decision.target != decision.target

        escalated = analysis.escalated and not override
        reevaluated = (
            previous is not None
            and not override
            and not analysis.escalated
            and self.dispatcher.reevaluation_due(previous.message_count + 1)
        )
        self.metrics.record_decision(
            decision, override=override, escalated=escalated, reevaluated=reevaluated
        )
        self.metrics.set_active_sessions(len(self.sessions))

        return InterceptResult(
            decision=decision,
            pinned=decision.pinned,
            selection_changed=selection_changed,
            processing_ms=(time.perf_counter() - start) * 1000,
            metadata={"agent_id": request.agent_id} if request.agent_id else {},
        )

    def route(self, prompt: str, session_id: Optional[str] = None, **kwargs: Any) -> InterceptResult:
        """Shorthand for ``intercept(RoutingRequest(...))``."""
        return self.intercept(RoutingRequest(prompt=prompt, session_id=session_id, **kwargs))

    def clear_session(self, session_id: str) -> bool:
        """Clear one session's pin."""
        return self.sessions.clear(session_id)

    def clear_sessions(self) -> int:
        """Clear every session pin."""
        count = self.sessions.clear_all()
        self.audit.info(f"Cleared {count} session(s) from pinning cache.")
        return count

    def diagnostics(self) -> dict[str, Any]:
        """Snapshot of configuration and runtime state."""
        return {
            "active_sessions": len(self.sessions),
            "config_version": self.config.version,
            "session_pinning": self.config.session_pinning,
            "auto_escalation": self.config.auto_escalation,
            "active_profile": self.config.active_profile.value,
            "dimensions": len(self.config.dimensions),
            "weight_sum": round(self.analyzer.weight_sum, 4),
            "tiers": {
                tier.value: {
                    "primary": self.config.tiers.for_tier(tier).primary,
                    "fallbacks": len(self.config.tiers.for_tier(tier).fallbacks),
                }
                for tier in TIER_ORDER
            },
            "sessions": self.sessions.stats(),
            "metrics": self.metrics.snapshot(),
        }
