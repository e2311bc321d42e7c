"""Error taxonomy for the interview session engine.

Every error carries a stable ``code`` plus two flags that let callers tell
"try again" apart from "this session is over":

* ``retryable`` is always ``False``. The engine never fails transiently; I/O
  errors raised by a store propagate untouched and are the caller's to retry.
* ``session_over`` is ``True`` when the interview can no longer accept input.
"""

from __future__ import annotations

from typing import Any


class InterviewEngineError(Exception):
    """Base class for all engine errors."""

    default_code = "ENGINE_ERROR"
    retryable = False
    session_over = False

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code or self.default_code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "session_over": self.session_over,
            "details": self.details,
        }


class NotFoundError(InterviewEngineError):
    """Unknown token, interview id or quiz id."""

    default_code = "NOT_FOUND"


class InvalidStateError(InterviewEngineError):
    """Operation not allowed in the interview's current status."""

    default_code = "INVALID_STATE"


class UnknownQuestionError(InvalidStateError):
    """Question id does not belong to the interview's quiz."""

    default_code = "UNKNOWN_QUESTION"


class InvalidAnswerError(InvalidStateError):
    """Answer shape does not match the question type."""

    default_code = "INVALID_ANSWER"


class TerminalStateError(InterviewEngineError):
    """Mutation attempted on a completed or cancelled interview."""

    default_code = "TERMINAL_STATE"
    session_over = True


class ExpiredError(TerminalStateError):
    """Time limit reached; the interview has been force-completed."""

    default_code = "EXPIRED"


class DuplicateInterviewError(InterviewEngineError):
    """An interview already exists for the candidate and quiz."""

    default_code = "DUPLICATE_INTERVIEW"


__all__ = [
    "DuplicateInterviewError",
    "ExpiredError",
    "InterviewEngineError",
    "InvalidAnswerError",
    "InvalidStateError",
    "NotFoundError",
    "TerminalStateError",
    "UnknownQuestionError",
]
