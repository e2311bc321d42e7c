"""Pydantic schema definitions shared by the engine, store and CLI."""

from __future__ import annotations

from .evaluation import BehavioralRubric, HireRecommendation, InterviewEvaluation
from .interview import (
    AnswerValue,
    CodeAnswer,
    CompletionReason,
    Interview,
    InterviewStatus,
)
from .quiz import Question, QuestionType, Quiz

__all__ = [
    "AnswerValue",
    "BehavioralRubric",
    "CodeAnswer",
    "CompletionReason",
    "HireRecommendation",
    "Interview",
    "InterviewEvaluation",
    "InterviewStatus",
    "Question",
    "QuestionType",
    "Quiz",
]
