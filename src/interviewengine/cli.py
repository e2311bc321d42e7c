"""Typer CLI entrypoint for composite scoring and session inspection."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import pendulum
import typer
import yaml

from .config import load_yaml
from .container import create_container
from .core import InterviewEngineError
from .logging import configure_logging
from .repository import SnapshotLoader, SnapshotLoadError, SnapshotWriter
from .schemas import BehavioralRubric, HireRecommendation
from .schemas.config import load_config

app = typer.Typer(help="Interview session engine CLI.")


def _load_settings(config: Optional[Path]) -> dict[str, Any]:
    if not config:
        return {}
    try:
        settings = load_yaml(config)
        load_config(settings)
    except (ValueError, yaml.YAMLError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc
    return settings


def _load_rubric(path: Optional[Path]) -> Optional[BehavioralRubric]:
    if not path:
        return None
    try:
        return BehavioralRubric.model_validate(load_yaml(path))
    except (ValueError, yaml.YAMLError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--rubric") from exc


@app.command()
def score(
    quiz_score: Optional[float] = typer.Option(None, min=0, max=100, help="Graded quiz score (0-100)."),
    rubric: Optional[Path] = typer.Option(
        None, exists=True, readable=True, dir_okay=False, help="Behavioral rubric (YAML or JSON)."
    ),
    recommendation: Optional[HireRecommendation] = typer.Option(None, help="Hiring manager recommendation."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Compute the composite 0-10 score from whichever signals are available."""
    configure_logging(log_level)
    container = create_container(settings=_load_settings(config))

    result = container.aggregator().aggregate(
        quiz_score=quiz_score,
        rubric=_load_rubric(rubric),
        hire_recommendation=recommendation,
    )
    typer.echo(json.dumps(result.to_dict(), ensure_ascii=False))


@app.command()
def inspect(
    store: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Snapshot JSON path."),
    token: str = typer.Option(..., help="Interview access token."),
    now: Optional[str] = typer.Option(None, help="Evaluate at this ISO timestamp instead of the current time."),
    write: bool = typer.Option(False, "--write", help="Persist forced transitions back to the snapshot."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Show the resumable view of a session, enforcing expiry on the way."""
    configure_logging(log_level)

    try:
        catalog, repository = SnapshotLoader().load(store)
    except SnapshotLoadError as exc:
        typer.echo(json.dumps({"errors": exc.errors}, ensure_ascii=False), err=True)
        raise typer.Exit(code=2) from exc

    now_provider = None
    if now:
        try:
            fixed = pendulum.parse(now)
        except ValueError as exc:
            raise typer.BadParameter(f"Invalid timestamp: {now}", param_hint="--now") from exc
        now_provider = lambda: fixed  # noqa: E731

    container = create_container(
        settings=_load_settings(config),
        now_provider=now_provider,
        catalog=catalog,
        repository=repository,
    )

    try:
        view = container.session_engine().resume(token)
    except InterviewEngineError as exc:
        typer.echo(json.dumps(exc.to_dict(), ensure_ascii=False), err=True)
        raise typer.Exit(code=1) from exc

    if write:
        SnapshotWriter().write(store, catalog, repository)
    typer.echo(json.dumps(view.to_dict(), ensure_ascii=False))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
