"""Interview storage, quiz catalog and JSON snapshot persistence."""

from __future__ import annotations

import json
import threading
from collections import Counter
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator

import pendulum
import structlog
from pydantic import ValidationError

from .core.errors import DuplicateInterviewError, NotFoundError
from .schemas import Interview, InterviewStatus, Quiz
from . import __version__


class InMemoryInterviewRepository:
    """Thread-safe interview store.

    Reads hand out deep copies so that changes only land through ``save``.
    Tokens and (candidate, quiz) pairs are unique, mirroring the constraints
    a relational store would carry.
    """

    def __init__(self, interviews: Iterable[Interview] = ()) -> None:
        self._by_id: dict[str, Interview] = {}
        self._token_index: dict[str, str] = {}
        self._pair_index: dict[tuple[str, str], str] = {}
        self._guard = threading.RLock()
        self._locks: dict[str, threading.RLock] = {}
        for interview in interviews:
            self.add(interview)

    def add(self, interview: Interview) -> Interview:
        interview.check_invariants()
        pair = (interview.candidate_id, interview.quiz_id)
        with self._guard:
            if interview.id in self._by_id:
                raise ValueError(f"Interview id {interview.id!r} already exists")
            if interview.token in self._token_index:
                raise ValueError("Interview token already in use")
            if pair in self._pair_index:
                raise DuplicateInterviewError(
                    f"Candidate {interview.candidate_id!r} already has an interview for quiz {interview.quiz_id!r}",
                    details={"candidate_id": interview.candidate_id, "quiz_id": interview.quiz_id},
                )
            stored = interview.model_copy(deep=True)
            self._by_id[stored.id] = stored
            self._token_index[stored.token] = stored.id
            self._pair_index[pair] = stored.id
            self._locks[stored.token] = threading.RLock()
        return interview

    def get_by_token(self, token: str) -> Interview | None:
        with self._guard:
            interview_id = self._token_index.get(token)
            return self._copy(interview_id)

    def get_by_id(self, interview_id: str) -> Interview | None:
        with self._guard:
            return self._copy(interview_id)

    def find_by_candidate_quiz(self, candidate_id: str, quiz_id: str) -> Interview | None:
        with self._guard:
            return self._copy(self._pair_index.get((candidate_id, quiz_id)))

    def save(self, interview: Interview) -> None:
        interview.check_invariants()
        with self._guard:
            current = self._by_id.get(interview.id)
            if current is None:
                raise NotFoundError(f"Interview {interview.id!r} not found", details={"interview_id": interview.id})
            if current.token != interview.token:
                raise ValueError("Interview token cannot change")
            self._by_id[interview.id] = interview.model_copy(deep=True)

    def delete(self, interview_id: str) -> bool:
        """Administrative removal; not part of the session lifecycle."""
        with self._guard:
            interview = self._by_id.pop(interview_id, None)
            if interview is None:
                return False
            self._token_index.pop(interview.token, None)
            self._pair_index.pop((interview.candidate_id, interview.quiz_id), None)
            self._locks.pop(interview.token, None)
            return True

    def list_interviews(
        self,
        *,
        status: InterviewStatus | None = None,
        quiz_id: str | None = None,
    ) -> list[Interview]:
        with self._guard:
            return [
                interview.model_copy(deep=True)
                for interview in self._by_id.values()
                if (status is None or interview.status is status)
                and (quiz_id is None or interview.quiz_id == quiz_id)
            ]

    def status_counts(self) -> dict[InterviewStatus, int]:
        with self._guard:
            counts = Counter(interview.status for interview in self._by_id.values())
        return {status: counts.get(status, 0) for status in InterviewStatus}

    @contextmanager
    def locked(self, token: str) -> Iterator[None]:
        # Unknown tokens get a throwaway lock; the caller's lookup reports them.
        with self._guard:
            lock = self._locks.get(token) or threading.RLock()
        with lock:
            yield

    def _copy(self, interview_id: str | None) -> Interview | None:
        if interview_id is None:
            return None
        interview = self._by_id.get(interview_id)
        return interview.model_copy(deep=True) if interview else None


class InMemoryQuizCatalog:
    """Read-only quiz lookup."""

    def __init__(self, quizzes: Iterable[Quiz] = ()) -> None:
        self._quizzes = {quiz.id: quiz for quiz in quizzes}

    def add(self, quiz: Quiz) -> None:
        self._quizzes[quiz.id] = quiz

    def get(self, quiz_id: str) -> Quiz | None:
        return self._quizzes.get(quiz_id)

    def all(self) -> list[Quiz]:
        return list(self._quizzes.values())


class SnapshotLoadError(ValueError):
    """Raised when a snapshot document cannot be loaded."""

    def __init__(self, errors: list[str]):
        super().__init__("Snapshot loading failed")
        self.errors = errors

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Snapshot loading failed: {self.errors}"


class SnapshotLoader:
    """Load quizzes and interviews from a JSON snapshot document."""

    def load(self, path: Path) -> tuple[InMemoryQuizCatalog, InMemoryInterviewRepository]:
        with path.open("r", encoding="utf-8") as handle:
            try:
                data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise SnapshotLoadError([f"invalid JSON ({exc})"]) from exc
        if not isinstance(data, dict):
            raise SnapshotLoadError(["snapshot must be a JSON object"])

        errors: list[str] = []
        quizzes: list[Quiz] = []
        for idx, raw in enumerate(data.get("quizzes", [])):
            try:
                quizzes.append(Quiz.model_validate(raw))
            except ValidationError as exc:
                errors.append(f"quizzes[{idx}]: {exc}")

        catalog = InMemoryQuizCatalog(quizzes)
        repository = InMemoryInterviewRepository()
        for idx, raw in enumerate(data.get("interviews", [])):
            try:
                interview = Interview.model_validate(raw)
                repository.add(interview)
            except (ValidationError, ValueError, DuplicateInterviewError) as exc:
                errors.append(f"interviews[{idx}]: {exc}")
                continue
            quiz = catalog.get(interview.quiz_id)
            if quiz is None:
                errors.append(f"interviews[{idx}]: unknown quiz {interview.quiz_id!r}")
                continue
            unknown = sorted(set(interview.answers) - set(quiz.question_ids()))
            if unknown:
                errors.append(f"interviews[{idx}]: answers for unknown questions {unknown}")

        if errors:
            raise SnapshotLoadError(errors)
        return catalog, repository


class SnapshotWriter:
    """Persist quizzes and interviews as a JSON snapshot document."""

    def write(
        self,
        path: Path,
        catalog: InMemoryQuizCatalog,
        repository: InMemoryInterviewRepository,
    ) -> None:
        payload = {
            "metadata": {
                "timestamp": pendulum.now().to_iso8601_string(),
                "app_version": __version__,
            },
            "quizzes": [quiz.model_dump(mode="json") for quiz in catalog.all()],
            "interviews": [
                interview.model_dump(mode="json") for interview in repository.list_interviews()
            ],
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()
        self._logger = structlog.get_logger(__name__)

    def append(self, record: dict) -> None:
        line = json.dumps(record, ensure_ascii=False, default=_json_default)
        with self._lock, self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)
            handle.write("\n")
        self._logger.debug("audit.appended", audit_event=record.get("event"), path=str(self._path))


def _json_default(value):  # type: ignore[override]
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
