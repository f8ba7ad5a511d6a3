"""Shared fixtures for nanorouter tests."""

import pytest
from loguru import logger

from nanorouter.config.schema import RouterConfig
from nanorouter.utils.logging import NullAuditLogger


def compact_config_data() -> dict:
    """Five dimensions, weights summing to 1.0, one-letter targets per tier."""
    return {
        "calibration": {"k": 8.0, "midpoint": 0.5},
        "thresholds": {"efficient": 0.30, "balanced": 0.55, "advanced": 0.78},
        "tiers": {
            "efficient": {"primary": "eff-1", "fallbacks": ["eff-2"], "costPerM": 0.1},
            "balanced": {"primary": "bal-1", "fallbacks": ["bal-2"], "costPerM": 1.0},
            "advanced": {"primary": "adv-1", "fallbacks": ["adv-2"], "costPerM": 3.0},
            "reasoning": {"primary": "rea-1", "fallbacks": ["rea-2"], "costPerM": 10.0},
        },
        "dimensions": {
            "cognitive_load": {
                "weight": 0.4,
                "keywords": ["prove", "step by step", "theorem"],
                "escalation": True,
            },
            "code": {
                "weight": 0.3,
                "keywords": ["function", "class"],
                "patterns": [r"\w+\(\)"],
            },
            "contextual_depth": {"weight": 0.1},
            "interrogative_depth": {"weight": 0.1, "keywords": ["why"]},
            "multi_turn_state": {"weight": 0.1, "keywords": ["as i said"]},
        },
        "escalationThreshold": 2,
        "session": {"capacity": 100, "ttlSeconds": 60, "reevaluateEvery": 5},
    }


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def config_data() -> dict:
    return compact_config_data()


@pytest.fixture
def config(config_data) -> RouterConfig:
    return RouterConfig.model_validate(config_data)


@pytest.fixture
def audit() -> NullAuditLogger:
    return NullAuditLogger()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(autouse=True)
def _restore_loguru_enabled():
    """CLI invocations call logger.disable("nanorouter") globally; undo it between tests."""
    yield
    logger.enable("nanorouter")
