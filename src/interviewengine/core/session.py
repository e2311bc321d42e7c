"""Interview session state machine.

Status transitions::

    pending ──start──▶ in_progress ──complete / expiry──▶ completed
       │                    │
       └──────cancel────────┴──────────────────────────▶ cancelled

``completed`` and ``cancelled`` are terminal. Expiry is detected rather than
scheduled: every interaction recomputes the remaining time from ``started_at``
and force-completes the interview before the requested action is honoured or
rejected. Every mutation runs inside the store's per-interview lock and
re-reads the interview there, so a write that races a terminal transition is
rejected once that transition is saved.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

import pendulum
import structlog

from ..schemas import CompletionReason, Interview, InterviewStatus, Quiz
from .answers import find_first_unanswered, upsert_answer
from .errors import ExpiredError, InvalidStateError, NotFoundError, TerminalStateError
from .timer import remaining_seconds

if TYPE_CHECKING:
    from . import AuditSink, InterviewRepository, QuizProvider


@dataclass(slots=True)
class StartResult:
    started_at: pendulum.DateTime


@dataclass(slots=True)
class SessionView:
    """What a reconnecting client needs to redraw the session."""

    interview: Interview
    remaining_seconds: int | None
    resume_index: int
    expired: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.interview.token,
            "status": self.interview.status.value,
            "started_at": _iso(self.interview.started_at),
            "completed_at": _iso(self.interview.completed_at),
            "remaining_seconds": self.remaining_seconds,
            "resume_index": self.resume_index,
            "answered": len(self.interview.answered_question_ids()),
            "expired": self.expired,
        }


class InterviewSessionEngine:
    """Drives start, answer, complete, cancel and expiry for interviews."""

    def __init__(
        self,
        *,
        repository: "InterviewRepository",
        quizzes: "QuizProvider",
        now_provider: Callable[[], pendulum.DateTime] | None = None,
        audit_logger: "AuditSink | None" = None,
    ) -> None:
        self._repository = repository
        self._quizzes = quizzes
        self._now_provider = now_provider or pendulum.now
        self._audit = audit_logger
        self._logger = structlog.get_logger(__name__)

    def start(self, token: str) -> StartResult:
        """Move a pending interview to in_progress and stamp ``started_at``.

        Starting an interview that is already running returns the original
        start time, which is what a reloaded client needs.
        """
        with self._repository.locked(token):
            interview = self._load(token)
            self._reject_terminal(interview, "start")

            now = self._now()
            if interview.status is InterviewStatus.IN_PROGRESS:
                quiz = self._quiz_for(interview)
                self._raise_if_expired(interview, quiz, now, "start")
                return StartResult(started_at=interview.started_at)

            interview.status = InterviewStatus.IN_PROGRESS
            interview.started_at = now
            self._repository.save(interview)
            self._record("interview.started", interview)
            return StartResult(started_at=now)

    def submit_answer(self, token: str, question_id: str, answer: Any) -> None:
        """Upsert one answer. Never changes status except on detected expiry."""
        with self._repository.locked(token):
            interview = self._load(token)
            self._reject_terminal(interview, "submit_answer")
            if interview.status is InterviewStatus.PENDING:
                self._reject(
                    InvalidStateError(
                        "Interview has not been started",
                        details={"interview_id": interview.id, "status": interview.status.value},
                    ),
                    interview,
                    "submit_answer",
                )

            quiz = self._quiz_for(interview)
            self._raise_if_expired(interview, quiz, self._now(), "submit_answer")

            try:
                upsert_answer(interview, quiz, question_id, answer)
            except InvalidStateError as exc:
                self._reject(exc, interview, "submit_answer")
            self._repository.save(interview)
            self._logger.info(
                "interview.answer_recorded",
                interview_id=interview.id,
                question_id=question_id,
                answered=len(interview.answered_question_ids()),
            )

    def complete(self, token: str) -> None:
        """Finish an in-progress interview; a no-op if it is already completed.

        Completion never requires every question to be answered.
        """
        with self._repository.locked(token):
            interview = self._load(token)
            if interview.status is InterviewStatus.COMPLETED:
                self._logger.debug("interview.complete_noop", interview_id=interview.id)
                return
            self._reject_terminal(interview, "complete")
            if interview.status is InterviewStatus.PENDING:
                self._reject(
                    InvalidStateError(
                        "Interview has not been started",
                        details={"interview_id": interview.id, "status": interview.status.value},
                    ),
                    interview,
                    "complete",
                )

            quiz = self._quiz_for(interview)
            if self._enforce_expiry(interview, quiz, self._now()):
                return
            self._mark_completed(interview, CompletionReason.MANUAL, self._now())

    def cancel(self, token: str) -> None:
        """Cancel a pending or in-progress interview. Irreversible."""
        with self._repository.locked(token):
            interview = self._load(token)
            self._cancel_locked(interview)

    def cancel_by_id(self, interview_id: str) -> None:
        """Operator cancellation addressed by interview id instead of token."""
        interview = self._repository.get_by_id(interview_id)
        if interview is None:
            raise NotFoundError(f"Interview {interview_id!r} not found", details={"interview_id": interview_id})
        with self._repository.locked(interview.token):
            self._cancel_locked(self._load(interview.token))

    def get_session(self, token: str) -> Interview:
        return self._load(token)

    def check_expiry(self, token: str) -> bool:
        """Timer tick: force-complete the interview if its time is up.

        Returns ``True`` when this call performed the forced completion.
        """
        with self._repository.locked(token):
            interview = self._load(token)
            if interview.status is not InterviewStatus.IN_PROGRESS:
                return False
            return self._enforce_expiry(interview, self._quiz_for(interview), self._now())

    def resume(self, token: str) -> SessionView:
        """Rehydrate a session after reload or reconnection.

        The timer value is recomputed from ``started_at`` and the visible
        question is the first one without an answer.
        """
        with self._repository.locked(token):
            interview = self._load(token)
            quiz = self._quiz_for(interview)
            now = self._now()
            if interview.status is InterviewStatus.IN_PROGRESS:
                self._enforce_expiry(interview, quiz, now)

            resume_index = (
                find_first_unanswered(quiz.questions, interview.answers)
                if interview.status is InterviewStatus.IN_PROGRESS
                else 0
            )
            return SessionView(
                interview=interview,
                remaining_seconds=remaining_seconds(interview.started_at, quiz.time_limit, now),
                resume_index=resume_index,
                expired=interview.completion_reason is CompletionReason.EXPIRED,
            )

    def _cancel_locked(self, interview: Interview) -> None:
        self._reject_terminal(interview, "cancel")
        if interview.status is InterviewStatus.IN_PROGRESS:
            quiz = self._quiz_for(interview)
            self._raise_if_expired(interview, quiz, self._now(), "cancel")

        previous = interview.status
        interview.status = InterviewStatus.CANCELLED
        self._repository.save(interview)
        self._record("interview.cancelled", interview, previous_status=previous.value)

    def _enforce_expiry(self, interview: Interview, quiz: Quiz, now: pendulum.DateTime) -> bool:
        remaining = remaining_seconds(interview.started_at, quiz.time_limit, now)
        if remaining != 0:
            return False
        self._mark_completed(interview, CompletionReason.EXPIRED, now)
        self._record("interview.expired", interview, time_limit=quiz.time_limit)
        return True

    def _raise_if_expired(
        self,
        interview: Interview,
        quiz: Quiz,
        now: pendulum.DateTime,
        action: str,
    ) -> None:
        if self._enforce_expiry(interview, quiz, now):
            self._reject(
                ExpiredError(
                    "Time limit reached; the interview has been completed",
                    details={"interview_id": interview.id, "time_limit": quiz.time_limit},
                ),
                interview,
                action,
            )

    def _mark_completed(
        self,
        interview: Interview,
        reason: CompletionReason,
        now: pendulum.DateTime,
    ) -> None:
        interview.status = InterviewStatus.COMPLETED
        interview.completed_at = now
        interview.completion_reason = reason
        self._repository.save(interview)
        self._record(
            "interview.completed",
            interview,
            reason=reason.value,
            answered=len(interview.answered_question_ids()),
        )

    def _reject_terminal(self, interview: Interview, action: str) -> None:
        if not interview.status.is_terminal:
            return
        if interview.completion_reason is CompletionReason.EXPIRED:
            self._reject(
                ExpiredError(
                    "Time limit reached; the interview has been completed",
                    details={"interview_id": interview.id, "status": interview.status.value},
                ),
                interview,
                action,
            )
        self._reject(
            TerminalStateError(
                f"Interview is {interview.status.value}",
                details={"interview_id": interview.id, "status": interview.status.value},
            ),
            interview,
            action,
        )

    def _reject(self, error: InvalidStateError | TerminalStateError, interview: Interview, action: str) -> None:
        self._logger.warning(
            "interview.rejected",
            interview_id=interview.id,
            action=action,
            code=error.code,
            status=interview.status.value,
        )
        raise error

    def _load(self, token: str) -> Interview:
        interview = self._repository.get_by_token(token)
        if interview is None:
            raise NotFoundError("Interview not found", details={"token": token})
        return interview

    def _quiz_for(self, interview: Interview) -> Quiz:
        quiz = self._quizzes.get(interview.quiz_id)
        if quiz is None:
            raise NotFoundError(
                f"Quiz {interview.quiz_id!r} not found",
                details={"interview_id": interview.id, "quiz_id": interview.quiz_id},
            )
        return quiz

    def _now(self) -> pendulum.DateTime:
        now = self._now_provider()
        return now if isinstance(now, pendulum.DateTime) else pendulum.instance(now)

    def _record(self, event: str, interview: Interview, **extra: Any) -> None:
        self._logger.info(event, interview_id=interview.id, status=interview.status.value, **extra)
        if self._audit:
            self._audit.append(
                {
                    "event": event,
                    "interview_id": interview.id,
                    "candidate_id": interview.candidate_id,
                    "quiz_id": interview.quiz_id,
                    "status": interview.status.value,
                    "timestamp": self._now().to_iso8601_string(),
                    **extra,
                }
            )


def _iso(value: Any) -> str | None:
    if value is None:
        return None
    return pendulum.instance(value).to_iso8601_string()
