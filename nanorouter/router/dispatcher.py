"""Dispatcher: turns an analysis into a routing decision."""

from dataclasses import replace
from typing import TYPE_CHECKING, Optional

from nanorouter.utils.logging import AuditLogger

from .classifier import classify_tier
from .models import Analysis, RoutingDecision, Tier
from .profiles import adjust_thresholds, analyze_cost
from .session import SessionStore

if TYPE_CHECKING:
    from nanorouter.config.schema import RouterConfig


class Dispatcher:
    """
    Selects a target for an analyzed prompt.

    Evaluated in order, first match wins:
    1. Explicit target override: analysis kept for audit, nothing pinned
    2. Session pin: an existing pin is returned as-is unless auto-escalation
       fired (or a periodic re-evaluation is due)
    3. Full classification against profile-adjusted thresholds, target and
       fallbacks for the tier, cost comparison, pin update
    """

    def __init__(
        self,
        config: "RouterConfig",
        sessions: Optional[SessionStore] = None,
        audit: Optional[AuditLogger] = None,
    ):
        self.config = config
        self.audit = audit or AuditLogger("dispatcher")
        self.sessions = sessions if sessions is not None else SessionStore(
            capacity=config.session.capacity,
            ttl_seconds=config.session.ttl_seconds,
            audit=self.audit,
        )
        self.profile = config.active_profile
        self.thresholds = adjust_thresholds(config.thresholds, self.profile)

    def route(
        self,
        analysis: Analysis,
        session_id: Optional[str] = None,
        override_target: Optional[str] = None,
        allow_reevaluation: bool = False,
    ) -> RoutingDecision:
        """
        Route an analysis to a target.

        Args:
            analysis: Output of the analyzer for the current prompt
            session_id: Conversation key for pinning
            override_target: Hard target override; bypasses selection and pinning
            allow_reevaluation: Every ``session.reevaluate_every``-th message of a
                pinned session runs full classification instead of the pin

        Returns:
            The routing decision. ``pinned`` is set when the session pin decided
            (or a full re-route landed on the pinned target).
        """
        if override_target:
            self.audit.debug(f"Target override active: {override_target}")
            return RoutingDecision(
                target=override_target,
                tier=analysis.tier,
                confidence=analysis.confidence,
                fallbacks=(),
                reason=f"Target override: {override_target}",
                analysis=analysis,
                profile=self.profile,
            )

        previous = None
        if self.config.session_pinning and session_id:
            previous = self.sessions.touch(session_id)

        if previous is not None:
            if analysis.escalated:
                self.audit.info("Session pin overridden by auto-escalation", session_id=session_id)
            elif allow_reevaluation and self.reevaluation_due(previous.message_count):
                self.audit.debug(
                    f"Session {session_id}: re-evaluating at message #{previous.message_count}"
                )
            else:
                pinned = previous.decision
                self.audit.debug(
                    f"Session {session_id}: pinned to {pinned.target} (msg #{previous.message_count})"
                )
                return replace(
                    pinned,
                    reason=f"Session pinned: {pinned.target} (message {previous.message_count})",
                    analysis=analysis,
                    pinned=True,
                )

        decision = self._classify(analysis)

        if self.config.session_pinning and session_id:
            if previous is not None and not analysis.escalated:
                decision = replace(decision, pinned=previous.decision.target == decision.target)
            self.sessions.record(session_id, decision)
            if previous is not None and previous.decision.target != decision.target:
                self.audit.info(
                    f"Session {session_id}: target changed "
                    f"{previous.decision.target} -> {decision.target}"
                )

        self.audit.decision(decision)
        return decision

    def reevaluation_due(self, message_count: int) -> bool:
        every = self.config.session.reevaluate_every
        return every > 0 and message_count % every == 0

    def _classify(self, analysis: Analysis) -> RoutingDecision:
        if analysis.override:
            tier = analysis.tier
        else:
            tier = classify_tier(analysis.confidence, self.thresholds)

        target = self.config.tiers.for_tier(tier)
        return RoutingDecision(
            target=target.primary,
            tier=tier,
            confidence=analysis.confidence,
            fallbacks=tuple(target.fallbacks),
            reason=self._build_reason(analysis, tier),
            analysis=analysis,
            profile=self.profile,
            cost=analyze_cost(tier, self.config.tiers),
        )

    def _build_reason(self, analysis: Analysis, tier: Tier) -> str:
        if analysis.override:
            return analysis.override

        confidence = f"{analysis.confidence * 100:.1f}%"
        signals = [d.name for d in analysis.top_signals(limit=3)]
        if not signals:
            return f"Confidence {confidence}: no significant signals detected -> {tier.value}"
        return f"Confidence {confidence}: primary signals {', '.join(signals)} -> {tier.value}"

    def get_fallback(self, tier: Tier, failed: set[str]) -> Optional[str]:
        """
        First usable target for a tier, walking down to cheaper tiers.

        Returns None when every target in this tier and every lower tier has
        already failed.
        """
        current: Optional[Tier] = tier
        while current is not None:
            for target in self.config.tiers.for_tier(current).chain:
                if target not in failed:
                    self.audit.info(f"Fallback selected: {target} ({len(failed)} targets failed)")
                    return target
            lower = current.downgrade()
            if lower is not None:
                self.audit.warning(
                    f"All {current.value} targets exhausted. Downgrading to {lower.value}."
                )
            current = lower

        self.audit.error("All targets exhausted across all tiers. No fallback available.")
        return None
