from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from ..config import RecommenderConfig
from ..schemas import (
    Candidate,
    EntityId,
    Rating,
    Resource,
    coerce_catalog,
    coerce_ratings,
    format_score,
)
from ..utils import COMPUTATION_ERROR, NO_DATA, RECOMMENDATIONS_GENERATED, log_event


@dataclass
class ScoreAccumulator:
    """Running similarity-weighted sum for one candidate resource."""

    score: float = 0.0
    weight: float = 0.0
    support: int = 0

    def add(self, rating: float, similarity: float) -> None:
        self.score += float(rating) * float(similarity)
        self.weight += float(similarity)
        self.support += 1


class CollaborativePredictor:
    """Shared scaffolding for the user-based and item-based predictors.

    `predict` is the safe entry point: it never raises and turns any failure
    into an empty list plus a logged ``computation_error`` event. `score` does
    the same work but lets exceptions through, for callers (the hybrid
    recommender) that need to know a predictor failed.
    """

    name = "collaborative"

    def __init__(
        self,
        *,
        similarity_threshold: float = 0.3,
        max_recommendations: int = 10,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        RecommenderConfig(
            similarity_threshold=similarity_threshold,
            max_recommendations=max_recommendations,
        ).validate()
        self.similarity_threshold = float(similarity_threshold)
        self.max_recommendations = int(max_recommendations)
        self.logger = logger or logging.getLogger(type(self).__module__)

    @classmethod
    def from_config(
        cls,
        cfg: RecommenderConfig,
        *,
        max_recommendations: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "CollaborativePredictor":
        return cls(
            similarity_threshold=cfg.similarity_threshold,
            max_recommendations=int(max_recommendations or cfg.max_recommendations),
            logger=logger,
        )

    def predict(
        self,
        user_id: EntityId,
        ratings: Iterable[Rating | Mapping[str, Any]],
        catalog: Iterable[Resource | Mapping[str, Any]],
    ) -> list[Candidate]:
        try:
            return self.score(user_id, ratings, catalog)
        except Exception as exc:
            log_event(
                self.logger,
                logging.ERROR,
                COMPUTATION_ERROR,
                user_id,
                "%s recommendation failed for user %r: %s",
                self.name,
                user_id,
                exc,
                exc=exc,
                predictor=self.name,
            )
            return []

    def score(
        self,
        user_id: EntityId,
        ratings: Iterable[Rating | Mapping[str, Any]],
        catalog: Iterable[Resource | Mapping[str, Any]],
    ) -> list[Candidate]:
        records = coerce_ratings(ratings)
        resources = coerce_catalog(catalog)

        user_ratings = [r for r in records if r.userId == user_id]
        if not user_ratings or not resources:
            log_event(
                self.logger,
                logging.INFO,
                NO_DATA,
                user_id,
                "No %s recommendations for user %r: ratings=%d catalog=%d",
                self.name,
                user_id,
                len(user_ratings),
                len(resources),
                predictor=self.name,
            )
            return []

        rated = {r.resourceId for r in user_ratings}
        accumulators = self._accumulate(user_id, records, user_ratings, rated)
        out = self._rank(accumulators, resources, rated)

        log_event(
            self.logger,
            logging.INFO,
            RECOMMENDATIONS_GENERATED,
            user_id,
            "Generated %d %s recommendations for user %r",
            len(out),
            self.name,
            user_id,
            predictor=self.name,
            count=len(out),
        )
        return out

    def _accumulate(
        self,
        user_id: EntityId,
        records: list[Rating],
        user_ratings: list[Rating],
        rated: set[EntityId],
    ) -> dict[EntityId, ScoreAccumulator]:
        raise NotImplementedError

    def _rank(
        self,
        accumulators: dict[EntityId, ScoreAccumulator],
        resources: list[Resource],
        rated: set[EntityId],
    ) -> list[Candidate]:
        """Weighted average per resource, best first, truncated."""
        by_id = {res.resourceId: res for res in resources}

        scored: list[Candidate] = []
        for resource_id, acc in accumulators.items():
            resource = by_id.get(resource_id)
            if resource is None or resource_id in rated or acc.weight <= 0.0:
                continue
            value = acc.score / acc.weight
            scored.append(
                Candidate(resource=resource, score=value, display_score=format_score(value), support=acc.support)
            )

        scored.sort(key=lambda c: (c.score, c.support), reverse=True)
        return scored[: self.max_recommendations]
