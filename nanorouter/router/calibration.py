"""Sigmoid confidence calibration."""

import math
from dataclasses import dataclass
from typing import Iterable, Optional

from .models import DimensionResult


def sigmoid(score: float, k: float, midpoint: float) -> float:
    """
    Map a raw weighted score to a confidence in (0, 1).

        confidence = 1 / (1 + e^(-k * (score - midpoint)))

    Evaluated in the overflow-safe form for either sign of the exponent.
    """
    z = k * (score - midpoint)
    if z >= 0:
        return 1.0 / (1.0 + math.exp(-z))
    e = math.exp(z)
    return e / (1.0 + e)


@dataclass(frozen=True)
class Calibration:
    raw_score: float
    confidence: float
    escalation_markers: int


class Calibrator:
    """
    Combines dimension results into a raw score and a calibrated confidence.

    The raw score is not clamped: weights summing above 1.0 can push it past
    1.0. When an escalation dimension is configured, its evidence count is
    reported as the escalation-marker counter.
    """

    def __init__(self, k: float, midpoint: float, escalation_dimension: Optional[str] = None):
        self.k = k
        self.midpoint = midpoint
        self.escalation_dimension = escalation_dimension

    def calibrate(self, results: Iterable[DimensionResult]) -> Calibration:
        raw_score = 0.0
        markers = 0
        for result in results:
            raw_score += result.contribution
            if result.name == self.escalation_dimension:
                markers = len(result.evidence)
        return Calibration(
            raw_score=raw_score,
            confidence=sigmoid(raw_score, self.k, self.midpoint),
            escalation_markers=markers,
        )
