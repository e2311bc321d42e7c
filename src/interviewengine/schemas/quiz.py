"""Quiz and question definitions consumed by the session engine."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QuestionType(str, Enum):
    MULTIPLE_CHOICE = "multiple_choice"
    OPEN_QUESTION = "open_question"
    CODE_SNIPPET = "code_snippet"


class Question(BaseModel):
    """A single quiz question with type-specific fields."""

    id: str
    type: QuestionType
    question: str = ""
    options: list[str] = Field(default_factory=list)
    language: str | None = None

    model_config = ConfigDict(extra="allow")


class Quiz(BaseModel):
    """Ordered, read-only question bank for one interview."""

    id: str
    title: str = ""
    questions: list[Question] = Field(default_factory=list)
    time_limit: int | None = Field(default=None, gt=0, description="Minutes; None means untimed.")

    model_config = ConfigDict(extra="allow")

    @model_validator(mode="after")
    def _unique_question_ids(self) -> "Quiz":
        seen: set[str] = set()
        for question in self.questions:
            if question.id in seen:
                raise ValueError(f"Duplicate question id {question.id!r} in quiz {self.id!r}")
            seen.add(question.id)
        return self

    def question_ids(self) -> list[str]:
        return [question.id for question in self.questions]

    def get_question(self, question_id: str) -> Question | None:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None
