"""Issue interviews for candidates on a quiz."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterable

import structlog

from ..schemas import Interview, InterviewStatus
from .errors import DuplicateInterviewError, NotFoundError

if TYPE_CHECKING:
    from . import InterviewRepository, QuizProvider


@dataclass(slots=True)
class Invitation:
    interview_id: str
    candidate_id: str
    token: str


@dataclass(slots=True)
class InvitationResult:
    quiz_id: str
    created: list[Invitation] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return bool(self.created) and not self.errors


def generate_token() -> str:
    """Opaque 32-character hex token for unauthenticated session access."""
    return uuid.uuid4().hex


class InterviewInviter:
    """Create pending interviews, one per (candidate, quiz) pair."""

    def __init__(
        self,
        *,
        repository: "InterviewRepository",
        quizzes: "QuizProvider",
        token_factory: Callable[[], str] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._repository = repository
        self._quizzes = quizzes
        self._token_factory = token_factory or generate_token
        self._id_factory = id_factory or (lambda: str(uuid.uuid4()))
        self._logger = structlog.get_logger(__name__)

    def invite(self, quiz_id: str, candidate_ids: Iterable[str]) -> InvitationResult:
        candidates = list(dict.fromkeys(candidate_ids))
        if not candidates:
            raise ValueError("At least one candidate id is required")
        if self._quizzes.get(quiz_id) is None:
            raise NotFoundError(f"Quiz {quiz_id!r} not found", details={"quiz_id": quiz_id})

        result = InvitationResult(quiz_id=quiz_id)
        for candidate_id in candidates:
            interview = Interview(
                id=self._id_factory(),
                token=self._unique_token(),
                quiz_id=quiz_id,
                candidate_id=candidate_id,
                status=InterviewStatus.PENDING,
            )
            try:
                self._repository.add(interview)
            except DuplicateInterviewError as exc:
                result.errors[candidate_id] = exc.message
                continue
            result.created.append(
                Invitation(interview_id=interview.id, candidate_id=candidate_id, token=interview.token)
            )

        self._logger.info(
            "invitations.created",
            quiz_id=quiz_id,
            created=len(result.created),
            skipped=len(result.errors),
        )
        return result

    def _unique_token(self) -> str:
        while True:
            token = self._token_factory()
            if self._repository.get_by_token(token) is None:
                return token
