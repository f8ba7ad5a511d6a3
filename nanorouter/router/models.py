"""Data models for the tier router."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class Tier(str, Enum):
    """Capability tiers, ordered by increasing severity."""

    EFFICIENT = "efficient"
    BALANCED = "balanced"
    ADVANCED = "advanced"
    REASONING = "reasoning"

    @property
    def rank(self) -> int:
        """Position in the severity order (EFFICIENT is 0)."""
        return TIER_ORDER.index(self)

    def downgrade(self) -> Optional["Tier"]:
        """Next lower-severity tier, or None for EFFICIENT."""
        if self.rank == 0:
            return None
        return TIER_ORDER[self.rank - 1]


TIER_ORDER: tuple[Tier, ...] = (
    Tier.EFFICIENT,
    Tier.BALANCED,
    Tier.ADVANCED,
    Tier.REASONING,
)


class RoutingProfile(str, Enum):
    """Threshold profiles trading cost against capability."""

    ECO = "eco"
    BALANCED = "balanced"
    PERFORMANCE = "performance"


@dataclass(frozen=True)
class DimensionResult:
    """Outcome of one detector for one analyze call."""

    name: str
    activation: float
    weight: float
    contribution: float
    evidence: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "activation": self.activation,
            "weight": self.weight,
            "contribution": self.contribution,
            "evidence": list(self.evidence),
        }


@dataclass(frozen=True)
class Analysis:
    """Scoring result for a single prompt."""

    raw_score: float
    confidence: float
    tier: Tier
    dimensions: tuple[DimensionResult, ...]
    override: Optional[str] = None
    escalated: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    duration_ms: float = 0.0

    def top_signals(self, limit: int = 3) -> list[DimensionResult]:
        """Active dimensions sorted by contribution, largest first."""
        active = [d for d in self.dimensions if d.activation > 0]
        active.sort(key=lambda d: d.contribution, reverse=True)
        return active[:limit]

    def to_dict(self) -> dict[str, Any]:
        return {
            "raw_score": self.raw_score,
            "confidence": self.confidence,
            "tier": self.tier.value,
            "dimensions": [d.to_dict() for d in self.dimensions],
            "override": self.override,
            "escalated": self.escalated,
            "created_at": self.created_at.isoformat(),
            "duration_ms": self.duration_ms,
        }


@dataclass(frozen=True)
class CostAnalysis:
    """Cost of the selected tier against the BALANCED baseline."""

    baseline_target: str
    estimated_savings: float  # positive = cheaper than baseline


@dataclass(frozen=True)
class RoutingDecision:
    """Result of a dispatch; also the value pinned to a session."""

    target: str
    tier: Tier
    confidence: float
    fallbacks: tuple[str, ...]
    reason: str
    analysis: Analysis
    profile: RoutingProfile
    cost: Optional[CostAnalysis] = None
    pinned: bool = False

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready audit record."""
        return {
            "target": self.target,
            "tier": self.tier.value,
            "confidence": self.confidence,
            "fallbacks": list(self.fallbacks),
            "reason": self.reason,
            "profile": self.profile.value,
            "pinned": self.pinned,
            "cost": (
                {
                    "baseline_target": self.cost.baseline_target,
                    "estimated_savings": self.cost.estimated_savings,
                }
                if self.cost
                else None
            ),
            "analysis": self.analysis.to_dict(),
        }


@dataclass(frozen=True)
class SessionEntry:
    """Pinned routing state for one conversation."""

    session_id: str
    decision: RoutingDecision
    pinned_at: float
    message_count: int = 1
    last_access: float = 0.0


@dataclass
class RoutingRequest:
    """Input to the interception entry point."""

    prompt: str
    system_prompt: Optional[str] = None
    session_id: Optional[str] = None
    override_target: Optional[str] = None
    agent_id: Optional[str] = None


@dataclass
class InterceptResult:
    """Decision plus interception metadata."""

    decision: RoutingDecision
    pinned: bool
    selection_changed: bool
    processing_ms: float
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "decision": self.decision.to_dict(),
            "pinned": self.pinned,
            "selection_changed": self.selection_changed,
            "processing_ms": self.processing_ms,
            "metadata": self.metadata,
        }
