"""Prompt analyzer: weighted multi-dimension scoring and tier classification."""

import time
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from nanorouter.utils.logging import AuditLogger

from .calibration import Calibrator
from .detectors import Detector, TextSample, build_detector
from .models import Analysis, DimensionResult, Tier

if TYPE_CHECKING:
    from nanorouter.config.schema import RouterConfig, ThresholdConfig

WEIGHT_TOLERANCE = 0.01


def classify_tier(confidence: float, thresholds: "ThresholdConfig") -> Tier:
    """Strict boundary comparison: below a boundary means the lower tier."""
    if confidence < thresholds.efficient:
        return Tier.EFFICIENT
    if confidence < thresholds.balanced:
        return Tier.BALANCED
    if confidence < thresholds.advanced:
        return Tier.ADVANCED
    return Tier.REASONING


@dataclass(frozen=True)
class CompiledDimension:
    """A dimension resolved at load time: weight plus its detector."""

    name: str
    weight: float
    detect: Detector


class PromptAnalyzer:
    """
    Scores prompts across the configured dimensions.

    Pipeline per call:
    1. Run every detector over the combined (system + user) text
    2. Sum activation x weight and calibrate through the sigmoid
    3. First-pass tier from the base thresholds, or REASONING when
       auto-escalation fires

    The first-pass tier ignores the active profile; the dispatcher
    re-classifies against profile-adjusted thresholds.
    """

    def __init__(self, config: "RouterConfig", audit: Optional[AuditLogger] = None):
        self.config = config
        self.audit = audit or AuditLogger("analyzer")
        self.dimensions: tuple[CompiledDimension, ...] = tuple(
            CompiledDimension(
                name=name,
                weight=dim.weight,
                detect=build_detector(name, dim.keywords, dim.patterns, dim.detector, self.audit),
            )
            for name, dim in config.dimensions.items()
        )
        self.calibrator = Calibrator(
            k=config.calibration.k,
            midpoint=config.calibration.midpoint,
            escalation_dimension=config.escalation_dimension,
        )

        self.weight_sum = sum(d.weight for d in self.dimensions)
        self.miscalibrated = abs(self.weight_sum - 1.0) > WEIGHT_TOLERANCE
        if self.miscalibrated:
            self.audit.warning(
                f"Dimension weights sum to {self.weight_sum:.3f} (expected 1.0). "
                "Results may be miscalibrated."
            )

    def score(self, prompt: str, system_prompt: Optional[str] = None) -> list[DimensionResult]:
        """Run every detector; results follow configuration order."""
        sample = TextSample.from_prompt(prompt, system_prompt)
        results = []
        for dim in self.dimensions:
            activation, evidence = dim.detect(sample)
            results.append(
                DimensionResult(
                    name=dim.name,
                    activation=activation,
                    weight=dim.weight,
                    contribution=activation * dim.weight,
                    evidence=tuple(evidence),
                )
            )
        return results

    def analyze(self, prompt: str, system_prompt: Optional[str] = None) -> Analysis:
        """Score, calibrate and classify a prompt."""
        created_at = datetime.now()
        start = time.perf_counter()

        results = self.score(prompt, system_prompt)
        calibration = self.calibrator.calibrate(results)

        override = None
        escalated = (
            self.config.auto_escalation
            and self.calibrator.escalation_dimension is not None
            and calibration.escalation_markers >= self.config.escalation_threshold
        )
        if escalated:
            tier = Tier.REASONING
            override = (
                f"Auto-escalation: {calibration.escalation_markers} "
                f"{self.calibrator.escalation_dimension} markers detected "
                f"(threshold: {self.config.escalation_threshold})"
            )
        else:
            tier = classify_tier(calibration.confidence, self.config.thresholds)

        duration_ms = (time.perf_counter() - start) * 1000
        self.audit.debug(
            f"Analysis complete in {duration_ms:.2f}ms",
            raw_score=round(calibration.raw_score, 4),
            confidence=round(calibration.confidence, 4),
            tier=tier.value,
        )

        return Analysis(
            raw_score=calibration.raw_score,
            confidence=calibration.confidence,
            tier=tier,
            dimensions=tuple(results),
            override=override,
            escalated=escalated,
            created_at=created_at,
            duration_ms=duration_ms,
        )
