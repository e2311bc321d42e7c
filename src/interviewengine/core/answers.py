"""Answer custody: validation, idempotent upsert and resume lookup."""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from ..schemas import CodeAnswer, Interview, InterviewStatus, Question, QuestionType, Quiz
from ..schemas.interview import AnswerValue
from .errors import InvalidAnswerError, InvalidStateError, UnknownQuestionError


def normalize_answer(question: Question, answer: Any) -> AnswerValue | None:
    """Coerce ``answer`` into the variant required by ``question.type``.

    ``None`` is an explicit clear and is accepted for every question type.
    """
    if answer is None:
        return None

    if question.type is QuestionType.CODE_SNIPPET:
        if isinstance(answer, CodeAnswer):
            return answer
        if isinstance(answer, Mapping) and isinstance(answer.get("code"), str) and set(answer) == {"code"}:
            return CodeAnswer(code=answer["code"])
        raise InvalidAnswerError(
            f"Question {question.id!r} expects a code submission",
            details={"question_id": question.id, "question_type": question.type.value},
        )

    if not isinstance(answer, str):
        raise InvalidAnswerError(
            f"Question {question.id!r} expects a text answer",
            details={"question_id": question.id, "question_type": question.type.value},
        )

    if question.type is QuestionType.MULTIPLE_CHOICE and question.options:
        if not answer.isdigit() or int(answer) >= len(question.options):
            raise InvalidAnswerError(
                f"Answer {answer!r} is not a valid option index for question {question.id!r}",
                details={"question_id": question.id, "option_count": len(question.options)},
            )
    return answer


def upsert_answer(
    interview: Interview,
    quiz: Quiz,
    question_id: str,
    answer: Any,
) -> Interview:
    """Record ``answer`` for ``question_id``, replacing any previous value.

    Mutates and returns ``interview``. Resubmitting the same answer leaves the
    map unchanged. Status is never changed here.
    """
    if interview.status is not InterviewStatus.IN_PROGRESS:
        raise InvalidStateError(
            f"Answers can only be recorded while in progress (status={interview.status.value})",
            details={"interview_id": interview.id, "status": interview.status.value},
        )

    question = quiz.get_question(question_id)
    if question is None:
        raise UnknownQuestionError(
            f"Question {question_id!r} is not part of quiz {quiz.id!r}",
            details={"interview_id": interview.id, "question_id": question_id, "quiz_id": quiz.id},
        )

    interview.answers[question_id] = normalize_answer(question, answer)
    return interview


def find_first_unanswered(
    questions: Sequence[Question],
    answers: Mapping[str, AnswerValue | None] | None,
) -> int:
    """Index of the first question without an answer.

    Falls back to the last index when everything is answered and to ``0`` for
    an empty quiz.
    """
    if not questions:
        return 0
    answers = answers or {}
    for index, question in enumerate(questions):
        if answers.get(question.id) is None:
            return index
    return len(questions) - 1
