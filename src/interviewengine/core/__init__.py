"""Core interview engine components."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable

from ..schemas import Interview, InterviewStatus, Quiz

# NOTE: keep imports explicit for export clarity.
from .aggregator import (
    CompositeEvaluationAggregator,
    CompositeScore,
    ScoreComponent,
    compute_overall_score,
    weighted_average,
)
from .answers import find_first_unanswered, normalize_answer, upsert_answer
from .errors import (
    DuplicateInterviewError,
    ExpiredError,
    InterviewEngineError,
    InvalidAnswerError,
    InvalidStateError,
    NotFoundError,
    TerminalStateError,
    UnknownQuestionError,
)
from .invitations import Invitation, InvitationResult, InterviewInviter, generate_token
from .session import InterviewSessionEngine, SessionView, StartResult
from .timer import expiry_date, is_expired, remaining_seconds


@runtime_checkable
class InterviewRepository(Protocol):
    """Interview store contract used by the engine and the inviter."""

    def add(self, interview: Interview) -> Interview:
        """Insert a new interview; duplicates per (candidate, quiz) are rejected."""

    def get_by_token(self, token: str) -> Interview | None:
        """Return a detached copy of the interview, or None."""

    def get_by_id(self, interview_id: str) -> Interview | None:
        """Return a detached copy of the interview, or None."""

    def save(self, interview: Interview) -> None:
        """Persist the interview state."""

    def locked(self, token: str) -> AbstractContextManager[None]:
        """Per-interview serialization point for read-modify-write cycles."""

    def list_interviews(
        self,
        *,
        status: InterviewStatus | None = None,
        quiz_id: str | None = None,
    ) -> list[Interview]:
        """Return interviews matching the filters."""


@runtime_checkable
class QuizProvider(Protocol):
    """Read-only access to quiz definitions."""

    def get(self, quiz_id: str) -> Quiz | None:
        """Return the quiz or None."""


@runtime_checkable
class AuditSink(Protocol):
    def append(self, record: dict) -> None:
        """Append one audit record."""


__all__ = [
    "AuditSink",
    "CompositeEvaluationAggregator",
    "CompositeScore",
    "DuplicateInterviewError",
    "ExpiredError",
    "InterviewEngineError",
    "InterviewInviter",
    "InterviewRepository",
    "InterviewSessionEngine",
    "InvalidAnswerError",
    "InvalidStateError",
    "Invitation",
    "InvitationResult",
    "NotFoundError",
    "QuizProvider",
    "ScoreComponent",
    "SessionView",
    "StartResult",
    "TerminalStateError",
    "UnknownQuestionError",
    "compute_overall_score",
    "expiry_date",
    "find_first_unanswered",
    "generate_token",
    "is_expired",
    "normalize_answer",
    "remaining_seconds",
    "upsert_answer",
    "weighted_average",
]
