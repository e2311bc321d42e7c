"""Pydantic configuration schema for YAML input."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .evaluation import HireRecommendation

COMPONENT_NAMES = ("quiz", "behavioral", "hiring")


class AggregatorConfig(BaseModel):
    weights: dict[str, float] | None = None
    recommendation_scores: dict[HireRecommendation, int] | None = None

    @field_validator("weights")
    @classmethod
    def _known_positive_weights(cls, value: dict[str, float] | None) -> dict[str, float] | None:
        if value is None:
            return value
        unknown = sorted(set(value) - set(COMPONENT_NAMES))
        if unknown:
            raise ValueError(f"Unknown score components: {unknown}")
        for name, weight in value.items():
            if weight <= 0:
                raise ValueError(f"Weight for {name!r} must be positive")
        return value

    @field_validator("recommendation_scores")
    @classmethod
    def _scores_on_ten_point_scale(
        cls, value: dict[HireRecommendation, int] | None
    ) -> dict[HireRecommendation, int] | None:
        if value is None:
            return value
        for key, score in value.items():
            if not 0 <= score <= 10:
                raise ValueError(f"Score for {key.value!r} must be within 0-10")
        return value


class SessionConfig(BaseModel):
    audit_log: str | None = None


class AppConfig(BaseModel):
    aggregator: AggregatorConfig = Field(default_factory=AggregatorConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)

    def to_settings(self) -> dict[str, Any]:
        settings: dict[str, Any] = {}
        aggregator_settings = self.aggregator.model_dump(mode="json", exclude_none=True)
        if aggregator_settings:
            settings["aggregator"] = aggregator_settings
        session_settings = self.session.model_dump(exclude_none=True)
        if session_settings:
            settings["session"] = session_settings
        return settings


def load_config(raw: Any) -> AppConfig:
    if not isinstance(raw, dict):
        raise ValueError("Config must be a mapping")
    return AppConfig.model_validate(raw)
