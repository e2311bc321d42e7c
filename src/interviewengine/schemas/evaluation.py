"""Reviewer-supplied evaluation inputs."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class HireRecommendation(str, Enum):
    STRONG_YES = "strong_yes"
    YES = "yes"
    MAYBE = "maybe"
    NO = "no"
    STRONG_NO = "strong_no"


class BehavioralRubric(BaseModel):
    """Human behavioral assessment for a candidate on a position."""

    candidate_id: str | None = None
    position_id: str | None = None
    communication_score: int = Field(..., ge=1, le=5)
    collaboration_score: int = Field(..., ge=1, le=5)
    problem_solving_score: int = Field(..., ge=1, le=5)
    culture_fit_score: int = Field(..., ge=1, le=5)
    leadership_score: int | None = Field(default=None, ge=1, le=5)
    strength_examples: list[str] = Field(default_factory=list)
    improvement_areas: list[str] = Field(default_factory=list)
    overall_comments: str | None = None

    model_config = ConfigDict(extra="forbid")

    def core_scores(self) -> tuple[int, int, int, int]:
        """The four required sub-scores; leadership is not part of the core."""
        return (
            self.communication_score,
            self.collaboration_score,
            self.problem_solving_score,
            self.culture_fit_score,
        )


class InterviewEvaluation(BaseModel):
    """Grading and hiring-manager output for a completed interview."""

    interview_id: str | None = None
    quiz_score: float | None = Field(default=None, ge=0, le=100)
    hire_recommendation: HireRecommendation | None = None
    notes: str | None = None
    red_flags: list[str] = Field(default_factory=list)
    standout_moments: list[str] = Field(default_factory=list)
    next_steps: str | None = None

    model_config = ConfigDict(extra="forbid")
