"""
Routing profiles.

ECO raises the tier boundaries so more prompts stay on the cheaper tiers;
PERFORMANCE lowers them so capable tiers are reached sooner. BALANCED leaves
the configured boundaries untouched.
"""

from typing import TYPE_CHECKING

from .models import CostAnalysis, RoutingProfile, Tier

if TYPE_CHECKING:
    from nanorouter.config.schema import ThresholdConfig, TiersConfig

# (efficient, balanced, advanced) boundary shifts
PROFILE_DELTAS: dict[RoutingProfile, tuple[float, float, float]] = {
    RoutingProfile.ECO: (0.10, 0.10, 0.05),
    RoutingProfile.BALANCED: (0.0, 0.0, 0.0),
    RoutingProfile.PERFORMANCE: (-0.10, -0.10, -0.05),
}


def _clamp(value: float) -> float:
    return min(max(value, 0.0), 1.0)


def adjust_thresholds(base: "ThresholdConfig", profile: RoutingProfile) -> "ThresholdConfig":
    """
    Shift the boundaries for a profile.

    Shifted boundaries are clamped to [0, 1] and kept non-decreasing, so a
    band squeezed out by the shift becomes empty instead of inverting the
    tier order. The optional ``reasoning`` boundary is left as configured.
    """
    if profile is RoutingProfile.BALANCED:
        return base

    d_efficient, d_balanced, d_advanced = PROFILE_DELTAS[profile]
    efficient = _clamp(base.efficient + d_efficient)
    balanced = max(_clamp(base.balanced + d_balanced), efficient)
    advanced = max(_clamp(base.advanced + d_advanced), balanced)
    return base.model_copy(update={"efficient": efficient, "balanced": balanced, "advanced": advanced})


def analyze_cost(tier: Tier, tiers: "TiersConfig") -> CostAnalysis:
    """Compare the tier's cost-per-million against the BALANCED baseline."""
    baseline = tiers.for_tier(Tier.BALANCED)
    selected = tiers.for_tier(tier)
    return CostAnalysis(
        baseline_target=baseline.primary,
        estimated_savings=(baseline.cost_per_m or 0.0) - (selected.cost_per_m or 0.0),
    )
