"""Dependency injection container for the interview engine."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pendulum
from dependency_injector import containers, providers

from .core import CompositeEvaluationAggregator, InterviewInviter, InterviewSessionEngine
from .repository import AuditLogger, InMemoryInterviewRepository, InMemoryQuizCatalog
from .schemas.config import load_config


class EngineContainer(containers.DeclarativeContainer):
    """Dependency-injector container definition."""

    config = providers.Configuration()

    clock = providers.Object(pendulum.now)

    quiz_catalog = providers.Singleton(InMemoryQuizCatalog)
    interview_repository = providers.Singleton(InMemoryInterviewRepository)
    audit_logger = providers.Object(None)

    session_engine = providers.Factory(
        InterviewSessionEngine,
        repository=interview_repository,
        quizzes=quiz_catalog,
        now_provider=clock,
        audit_logger=audit_logger,
    )

    inviter = providers.Factory(
        InterviewInviter,
        repository=interview_repository,
        quizzes=quiz_catalog,
    )

    aggregator = providers.Singleton(
        CompositeEvaluationAggregator,
        weights=config.aggregator.weights,
        recommendation_scores=config.aggregator.recommendation_scores,
    )


def create_container(
    *,
    settings: dict[str, Any] | None = None,
    now_provider: Callable[[], pendulum.DateTime] | None = None,
    catalog: InMemoryQuizCatalog | None = None,
    repository: InMemoryInterviewRepository | None = None,
) -> EngineContainer:
    """Instantiate container with optional overrides."""

    container = EngineContainer()

    if now_provider is not None:
        container.clock.override(providers.Object(now_provider))
    if catalog is not None:
        container.quiz_catalog.override(providers.Object(catalog))
    if repository is not None:
        container.interview_repository.override(providers.Object(repository))

    if not settings:
        return container

    normalized = load_config(settings).to_settings()
    container.config.from_dict(normalized)

    audit_path = normalized.get("session", {}).get("audit_log")
    if audit_path:
        container.audit_logger.override(providers.Singleton(AuditLogger, Path(audit_path)))

    return container
