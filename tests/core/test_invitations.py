from __future__ import annotations

import itertools

import pytest

from interviewengine.core import InterviewInviter, NotFoundError, generate_token
from interviewengine.repository import InMemoryInterviewRepository, InMemoryQuizCatalog
from interviewengine.schemas import InterviewStatus, Question, Quiz


def build_inviter(**kwargs) -> tuple[InterviewInviter, InMemoryInterviewRepository]:
    quiz = Quiz(
        id="QZ-1",
        title="SQL basics",
        time_limit=20,
        questions=[Question(id="q1", type="open_question", question="What is a join?")],
    )
    repository = InMemoryInterviewRepository()
    inviter = InterviewInviter(repository=repository, quizzes=InMemoryQuizCatalog([quiz]), **kwargs)
    return inviter, repository


def test_invite_creates_pending_interviews_with_unique_tokens():
    inviter, repository = build_inviter()

    result = inviter.invite("QZ-1", ["C-1", "C-2", "C-1"])

    assert result.success
    assert [item.candidate_id for item in result.created] == ["C-1", "C-2"]
    tokens = {item.token for item in result.created}
    assert len(tokens) == 2
    for item in result.created:
        interview = repository.get_by_token(item.token)
        assert interview.status is InterviewStatus.PENDING
        assert interview.started_at is None
        assert interview.answers == {}


def test_invite_skips_candidates_with_existing_interview():
    inviter, repository = build_inviter()
    inviter.invite("QZ-1", ["C-1"])

    result = inviter.invite("QZ-1", ["C-1", "C-3"])

    assert not result.success
    assert [item.candidate_id for item in result.created] == ["C-3"]
    assert "C-1" in result.errors
    assert len(repository.list_interviews(quiz_id="QZ-1")) == 2


def test_invite_rejects_unknown_quiz_and_empty_candidates():
    inviter, _ = build_inviter()

    with pytest.raises(NotFoundError):
        inviter.invite("QZ-404", ["C-1"])
    with pytest.raises(ValueError):
        inviter.invite("QZ-1", [])


def test_invite_redraws_colliding_tokens():
    tokens = iter(["dup", "dup", "fresh"])
    ids = itertools.count(1)
    inviter, repository = build_inviter(
        token_factory=lambda: next(tokens),
        id_factory=lambda: f"I-{next(ids)}",
    )

    result = inviter.invite("QZ-1", ["C-1", "C-2"])

    assert [item.token for item in result.created] == ["dup", "fresh"]
    assert repository.get_by_id("I-2").token == "fresh"


def test_generate_token_is_opaque_hex():
    token = generate_token()

    assert len(token) == 32
    int(token, 16)
    assert token != generate_token()
