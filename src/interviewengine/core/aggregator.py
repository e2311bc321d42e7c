"""Composite evaluation scoring.

Three independently collected signals are mapped onto a common 0-10 scale and
blended with fixed weights. Only the components that are present take part:
the weighted sum is divided by the sum of the present weights, so a missing
signal never counts as zero.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from ..schemas import BehavioralRubric, HireRecommendation, InterviewEvaluation


@dataclass(slots=True)
class ScoreComponent:
    """One present signal on the 0-10 scale with its weight."""

    name: str
    score: int
    weight: float


@dataclass(slots=True)
class CompositeScore:
    """Per-component breakdown and the renormalized overall score."""

    components: list[ScoreComponent] = field(default_factory=list)
    overall: int | None = None

    def component(self, name: str) -> ScoreComponent | None:
        for item in self.components:
            if item.name == name:
                return item
        return None

    def to_dict(self) -> dict:
        return {
            "components": {item.name: {"score": item.score, "weight": item.weight} for item in self.components},
            "overall": self.overall,
        }


def round_half_up(value: float) -> int:
    """Round .5 away from zero for the non-negative scores used here."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def weighted_average(components: Iterable[ScoreComponent]) -> int | None:
    """Rounded weighted mean over the given components, ``None`` when empty."""
    present = list(components)
    if not present:
        return None
    total_weight = sum(item.weight for item in present)
    weighted_sum = sum(item.score * item.weight for item in present)
    return round_half_up(weighted_sum / total_weight)


class CompositeEvaluationAggregator:
    """Combine quiz, behavioral and hiring signals into one overall score."""

    DEFAULT_WEIGHTS: dict[str, float] = {
        "quiz": 0.5,
        "behavioral": 0.3,
        "hiring": 0.2,
    }

    DEFAULT_RECOMMENDATION_SCORES: dict[HireRecommendation, int] = {
        HireRecommendation.STRONG_YES: 10,
        HireRecommendation.YES: 8,
        HireRecommendation.MAYBE: 6,
        HireRecommendation.NO: 4,
        HireRecommendation.STRONG_NO: 2,
    }

    def __init__(
        self,
        *,
        weights: dict[str, float] | None = None,
        recommendation_scores: dict[HireRecommendation | str, int] | None = None,
    ) -> None:
        self._weights = self.DEFAULT_WEIGHTS.copy()
        if weights:
            self._weights.update(weights)
        self._recommendation_scores = self.DEFAULT_RECOMMENDATION_SCORES.copy()
        if recommendation_scores:
            self._recommendation_scores.update(
                {HireRecommendation(key): int(value) for key, value in recommendation_scores.items()}
            )

    @staticmethod
    def quiz_component(quiz_score: float | None) -> int | None:
        """Map a 0-100 quiz score onto 0-10."""
        if quiz_score is None:
            return None
        if not 0 <= quiz_score <= 100:
            raise ValueError(f"quiz_score must be within 0-100, got {quiz_score}")
        return round_half_up(quiz_score / 10)

    @staticmethod
    def behavioral_component(rubric: BehavioralRubric | None) -> int | None:
        """Average the four core 1-5 sub-scores and double onto 0-10."""
        if rubric is None:
            return None
        core = rubric.core_scores()
        return round_half_up(sum(core) / len(core) * 2)

    def hiring_component(self, recommendation: HireRecommendation | str | None) -> int | None:
        if recommendation is None:
            return None
        return self._recommendation_scores[HireRecommendation(recommendation)]

    def aggregate(
        self,
        *,
        quiz_score: float | None = None,
        rubric: BehavioralRubric | None = None,
        hire_recommendation: HireRecommendation | str | None = None,
    ) -> CompositeScore:
        candidates = [
            ("quiz", self.quiz_component(quiz_score)),
            ("behavioral", self.behavioral_component(rubric)),
            ("hiring", self.hiring_component(hire_recommendation)),
        ]
        components = [
            ScoreComponent(name=name, score=score, weight=self._weights[name])
            for name, score in candidates
            if score is not None
        ]
        return CompositeScore(components=components, overall=weighted_average(components))

    def aggregate_evaluation(
        self,
        evaluation: InterviewEvaluation | None,
        rubric: BehavioralRubric | None = None,
    ) -> CompositeScore:
        return self.aggregate(
            quiz_score=evaluation.quiz_score if evaluation else None,
            rubric=rubric,
            hire_recommendation=evaluation.hire_recommendation if evaluation else None,
        )


def compute_overall_score(
    quiz_score: float | None = None,
    rubric: BehavioralRubric | None = None,
    hire_recommendation: HireRecommendation | str | None = None,
) -> int | None:
    """Overall 0-10 score with the default weights, ``None`` with no inputs."""
    return CompositeEvaluationAggregator().aggregate(
        quiz_score=quiz_score,
        rubric=rubric,
        hire_recommendation=hire_recommendation,
    ).overall
