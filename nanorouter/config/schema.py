"""Configuration schema using Pydantic."""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from nanorouter.router.detectors import DetectorKind
from nanorouter.router.models import RoutingProfile, Tier

from .defaults import default_dimensions, default_tiers


class Base(BaseModel):
    """Base model that accepts both camelCase and snake_case keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DimensionConfig(Base):
    """One scoring dimension."""
    weight: float = Field(ge=0.0, le=1.0)
    keywords: list[str] = Field(default_factory=list)
    patterns: list[str] = Field(default_factory=list)
    detector: Optional[DetectorKind] = None  # resolved from the name when unset
    escalation: bool = False  # evidence count feeds auto-escalation


class CalibrationConfig(Base):
    """Sigmoid calibration parameters."""
    k: float = Field(default=8.0, gt=0.0)  # steepness
    midpoint: float = 0.5  # raw score at which confidence = 0.5


class ThresholdConfig(Base):
    """Confidence boundaries between tiers."""
    efficient: float = Field(default=0.30, ge=0.0, le=1.0)  # below -> EFFICIENT
    balanced: float = Field(default=0.55, ge=0.0, le=1.0)  # below -> BALANCED
    advanced: float = Field(default=0.78, ge=0.0, le=1.0)  # below -> ADVANCED, else REASONING
    reasoning: Optional[float] = Field(default=0.90, ge=0.0, le=1.0)  # informational

    @model_validator(mode="after")
    def _check_order(self) -> "ThresholdConfig":
        if not (self.efficient < self.balanced < self.advanced):
            raise ValueError(
                "thresholds must be strictly increasing: efficient < balanced < advanced "
                f"(got {self.efficient}, {self.balanced}, {self.advanced})"
            )
        return self


class TierTargetConfig(Base):
    """Targets for one tier."""
    primary: str = Field(min_length=1)
    fallbacks: list[str] = Field(default_factory=list)
    max_context: Optional[int] = Field(default=None, gt=0)
    cost_per_m: Optional[float] = Field(default=None, ge=0.0)  # per million tokens (input)

    @property
    def chain(self) -> list[str]:
        """Primary followed by fallbacks."""
        return [self.primary, *self.fallbacks]


class TiersConfig(Base):
    """Per-tier targets; all four tiers are required."""
    efficient: TierTargetConfig
    balanced: TierTargetConfig
    advanced: TierTargetConfig
    reasoning: TierTargetConfig

    def for_tier(self, tier: Tier) -> TierTargetConfig:
        return getattr(self, tier.value)


class SessionConfig(Base):
    """Session pinning store limits."""
    capacity: int = Field(default=10_000, ge=1)
    ttl_seconds: float = Field(default=3600.0, gt=0.0)
    reevaluate_every: int = Field(default=5, ge=0)  # 0 disables periodic re-evaluation


class RouterConfig(Base):
    """Root configuration for nanorouter."""
    version: str = "1.0.0"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["pretty", "json"] = "pretty"
    calibration: CalibrationConfig = Field(default_factory=CalibrationConfig)
    thresholds: ThresholdConfig = Field(default_factory=ThresholdConfig)
    active_profile: RoutingProfile = RoutingProfile.BALANCED
    tiers: TiersConfig = Field(default_factory=lambda: TiersConfig.model_validate(default_tiers()))
    dimensions: dict[str, DimensionConfig] = Field(
        default_factory=lambda: {
            name: DimensionConfig.model_validate(dim) for name, dim in default_dimensions().items()
        }
    )
    session_pinning: bool = True
    auto_escalation: bool = True
    escalation_threshold: int = Field(default=2, ge=1)
    session: SessionConfig = Field(default_factory=SessionConfig)

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.upper()
            return "WARNING" if value == "WARN" else value
        return value

    @field_validator("active_profile", mode="before")
    @classmethod
    def _normalize_profile(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value

    @field_validator("dimensions")
    @classmethod
    def _check_dimensions(cls, value: dict[str, DimensionConfig]) -> dict[str, DimensionConfig]:
        if not value:
            raise ValueError("at least one dimension is required")
        flagged = [name for name, dim in value.items() if dim.escalation]
        if len(flagged) > 1:
            raise ValueError(f"only one dimension may set escalation (got {', '.join(flagged)})")
        return value

    @property
    def escalation_dimension(self) -> Optional[str]:
        """Name of the dimension whose evidence counts as escalation markers."""
        for name, dim in self.dimensions.items():
            if dim.escalation:
                return name
        return None

    @property
    def weight_sum(self) -> float:
        return sum(dim.weight for dim in self.dimensions.values())
