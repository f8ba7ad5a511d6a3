"""
Tier router package.

Scores a prompt across weighted dimensions, calibrates the score into a
confidence, maps it to one of four ordered tiers and picks a target, with
sticky per-session pinning and auto-escalation.
"""

from .calibration import Calibrator, sigmoid
from .classifier import PromptAnalyzer, classify_tier
from .dispatcher import Dispatcher
from .models import (
    Analysis,
    CostAnalysis,
    DimensionResult,
    InterceptResult,
    RoutingDecision,
    RoutingProfile,
    RoutingRequest,
    SessionEntry,
    Tier,
)
from .profiles import adjust_thresholds, analyze_cost
from .session import SessionStore
from .sticky import StickyRouter

__all__ = [
    "Analysis",
    "Calibrator",
    "CostAnalysis",
    "DimensionResult",
    "Dispatcher",
    "InterceptResult",
    "PromptAnalyzer",
    "RoutingDecision",
    "RoutingProfile",
    "RoutingRequest",
    "SessionEntry",
    "SessionStore",
    "StickyRouter",
    "Tier",
    "adjust_thresholds",
    "analyze_cost",
    "classify_tier",
    "sigmoid",
]
