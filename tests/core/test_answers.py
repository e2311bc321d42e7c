from __future__ import annotations

from typing import Any

import pendulum
import pytest

from interviewengine.core import (
    InvalidAnswerError,
    InvalidStateError,
    UnknownQuestionError,
    find_first_unanswered,
    upsert_answer,
)
from interviewengine.schemas import CodeAnswer, Interview, InterviewStatus, Question, Quiz


def build_quiz() -> Quiz:
    return Quiz(
        id="QZ-1",
        title="Backend fundamentals",
        time_limit=30,
        questions=[
            Question(id="q1", type="multiple_choice", question="Pick one", options=["GET", "POST", "PUT"]),
            Question(id="q2", type="open_question", question="Explain idempotency"),
            Question(id="q3", type="code_snippet", question="Reverse a list", language="python"),
        ],
    )


def build_interview(**kwargs: Any) -> Interview:
    defaults: dict[str, Any] = {
        "id": "I-1",
        "token": "tok-1",
        "quiz_id": "QZ-1",
        "candidate_id": "C-1",
        "status": InterviewStatus.IN_PROGRESS,
        "started_at": pendulum.datetime(2026, 3, 2, 9, 0, 0),
    }
    defaults.update(kwargs)
    return Interview(**defaults)


def test_upsert_answer_is_idempotent():
    quiz = build_quiz()
    once = upsert_answer(build_interview(), quiz, "q2", "Same result on repeat")
    twice = upsert_answer(
        upsert_answer(build_interview(), quiz, "q2", "Same result on repeat"),
        quiz,
        "q2",
        "Same result on repeat",
    )

    assert once.answers == twice.answers == {"q2": "Same result on repeat"}


def test_upsert_answer_replaces_previous_value():
    quiz = build_quiz()
    interview = build_interview(answers={"q1": "0"})

    upsert_answer(interview, quiz, "q1", "2")

    assert interview.answers == {"q1": "2"}
    assert interview.status is InterviewStatus.IN_PROGRESS


def test_upsert_answer_requires_in_progress():
    interview = build_interview(status=InterviewStatus.PENDING, started_at=None)

    with pytest.raises(InvalidStateError):
        upsert_answer(interview, build_quiz(), "q1", "0")
    assert interview.answers == {}


def test_upsert_answer_rejects_question_outside_quiz():
    interview = build_interview()

    with pytest.raises(UnknownQuestionError) as exc:
        upsert_answer(interview, build_quiz(), "q99", "0")

    assert isinstance(exc.value, InvalidStateError)
    assert exc.value.details["question_id"] == "q99"
    assert interview.answers == {}


def test_code_question_accepts_code_mapping_and_rejects_text():
    quiz = build_quiz()
    interview = build_interview()

    upsert_answer(interview, quiz, "q3", {"code": "print(xs[::-1])"})
    assert interview.answers["q3"] == CodeAnswer(code="print(xs[::-1])")

    with pytest.raises(InvalidAnswerError):
        upsert_answer(interview, quiz, "q3", "print(xs[::-1])")


def test_text_question_rejects_code_submission():
    with pytest.raises(InvalidAnswerError):
        upsert_answer(build_interview(), build_quiz(), "q2", CodeAnswer(code="x = 1"))


@pytest.mark.parametrize("answer", ["3", "-1", "GET", ""])
def test_multiple_choice_requires_existing_option_index(answer: str):
    with pytest.raises(InvalidAnswerError):
        upsert_answer(build_interview(), build_quiz(), "q1", answer)


def test_cleared_answer_counts_as_unanswered():
    quiz = build_quiz()
    interview = build_interview(answers={"q1": "1"})

    upsert_answer(interview, quiz, "q1", None)

    assert "q1" in interview.answers
    assert interview.answered_question_ids() == set()
    assert find_first_unanswered(quiz.questions, interview.answers) == 0


@pytest.mark.parametrize("missing_index", [0, 1, 2])
def test_find_first_unanswered_returns_the_gap(missing_index: int):
    quiz = build_quiz()
    answers = {
        "q1": "0",
        "q2": "Because retries are safe",
        "q3": CodeAnswer(code="xs.reverse()"),
    }
    del answers[quiz.questions[missing_index].id]

    assert find_first_unanswered(quiz.questions, answers) == missing_index


def test_find_first_unanswered_edges():
    quiz = build_quiz()
    full = {"q1": "0", "q2": "text", "q3": CodeAnswer(code="pass")}

    assert find_first_unanswered(quiz.questions, full) == 2
    assert find_first_unanswered(quiz.questions, {}) == 0
    assert find_first_unanswered(quiz.questions, None) == 0
    assert find_first_unanswered([], {"q1": "0"}) == 0
