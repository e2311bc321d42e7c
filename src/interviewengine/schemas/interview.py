"""Interview session document."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Union

import pendulum
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class InterviewStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (InterviewStatus.COMPLETED, InterviewStatus.CANCELLED)


class CompletionReason(str, Enum):
    MANUAL = "manual"
    EXPIRED = "expired"


class CodeAnswer(BaseModel):
    """Answer to a code snippet question."""

    code: str

    model_config = ConfigDict(extra="forbid")


# Text (option index or free text) or a code submission. ``None`` means cleared.
AnswerValue = Union[CodeAnswer, str]


class Interview(BaseModel):
    """One candidate's attempt at one quiz."""

    id: str
    token: str
    quiz_id: str
    candidate_id: str
    status: InterviewStatus = InterviewStatus.PENDING
    started_at: datetime | None = None
    completed_at: datetime | None = None
    completion_reason: CompletionReason | None = None
    answers: dict[str, AnswerValue | None] = Field(default_factory=dict)
    score: float | None = None

    model_config = ConfigDict(extra="forbid")

    @field_validator("started_at", "completed_at", mode="after")
    @classmethod
    def _as_pendulum(cls, value: datetime | None) -> datetime | None:
        if value is None or isinstance(value, pendulum.DateTime):
            return value
        return pendulum.instance(value)

    @model_validator(mode="after")
    def _lifecycle_invariants(self) -> "Interview":
        self.check_invariants()
        return self

    def check_invariants(self) -> None:
        """Raise ``ValueError`` when timestamps disagree with the status.

        A cancelled interview keeps whatever ``started_at`` it had, since the
        start stamp is written once and never cleared.
        """
        if self.status is InterviewStatus.PENDING and self.started_at is not None:
            raise ValueError("started_at must not be set while pending")
        if self.status in (InterviewStatus.IN_PROGRESS, InterviewStatus.COMPLETED) and self.started_at is None:
            raise ValueError(f"started_at is required when status is {self.status.value}")
        is_completed = self.status is InterviewStatus.COMPLETED
        if (self.completed_at is not None) != is_completed:
            raise ValueError(
                f"completed_at must be set iff status is completed (status={self.status.value})"
            )

    def answered_question_ids(self) -> set[str]:
        return {key for key, value in self.answers.items() if value is not None}
