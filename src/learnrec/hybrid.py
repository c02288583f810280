"""Hybrid recommender: user-based + item-based CF blended by fixed weights."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional

from .cf.base import CollaborativePredictor
from .cf.item_based import ItemBasedCF
from .cf.user_based import UserBasedCF
from .config import RecommenderConfig
from .fusion.linear import linear_score_fusion
from .schemas import (
    EntityId,
    HybridRecommendation,
    Rating,
    Resource,
    coerce_catalog,
    coerce_ratings,
    format_score,
)
from .utils import COMPUTATION_ERROR, RECOMMENDATIONS_GENERATED, log_event


class HybridRecommender:
    """Runs both CF predictors and linearly combines their scores.

    Each inner predictor returns up to ``candidate_pool_factor * max_recommendations``
    candidates so that resources strong in only one predictor survive until
    the blend. A failure in either predictor fails the whole call: the result
    is an empty list, never a blend of one predictor's output.
    """

    def __init__(
        self,
        *,
        user_weight: float = 0.5,
        item_weight: float = 0.5,
        max_recommendations: int = 10,
        similarity_threshold: float = 0.3,
        candidate_pool_factor: int = 2,
        logger: Optional[logging.Logger] = None,
        user_predictor: Optional[CollaborativePredictor] = None,
        item_predictor: Optional[CollaborativePredictor] = None,
    ) -> None:
        cfg = RecommenderConfig(
            similarity_threshold=similarity_threshold,
            max_recommendations=max_recommendations,
            user_weight=user_weight,
            item_weight=item_weight,
            candidate_pool_factor=candidate_pool_factor,
        ).validate()
        self.user_weight = float(cfg.user_weight)
        self.item_weight = float(cfg.item_weight)
        self.max_recommendations = int(cfg.max_recommendations)
        self.logger = logger or logging.getLogger(__name__)

        pool = self.max_recommendations * int(cfg.candidate_pool_factor)
        self.user_predictor = user_predictor or UserBasedCF.from_config(cfg, max_recommendations=pool, logger=logger)
        self.item_predictor = item_predictor or ItemBasedCF.from_config(cfg, max_recommendations=pool, logger=logger)

    @classmethod
    def from_config(cls, cfg: RecommenderConfig, *, logger: Optional[logging.Logger] = None) -> "HybridRecommender":
        return cls(
            user_weight=cfg.user_weight,
            item_weight=cfg.item_weight,
            max_recommendations=cfg.max_recommendations,
            similarity_threshold=cfg.similarity_threshold,
            candidate_pool_factor=cfg.candidate_pool_factor,
            logger=logger,
        )

    def recommend(
        self,
        user_id: EntityId,
        ratings: Iterable[Rating | Mapping[str, Any]],
        catalog: Iterable[Resource | Mapping[str, Any]],
        filters: Optional[Mapping[str, Any]] = None,
    ) -> list[HybridRecommendation]:
        """Blend, filter and rank recommendations for `user_id`. Never raises."""
        try:
            records = coerce_ratings(ratings)
            resources = coerce_catalog(catalog)

            user_candidates = self.user_predictor.score(user_id, records, resources)
            item_candidates = self.item_predictor.score(user_id, records, resources)

            by_id = {c.resourceId: c.resource for c in user_candidates}
            for c in item_candidates:
                by_id.setdefault(c.resourceId, c.resource)

            fused = linear_score_fusion(
                [
                    [(c.resourceId, c.score) for c in user_candidates],
                    [(c.resourceId, c.score) for c in item_candidates],
                ],
                [self.user_weight, self.item_weight],
            )

            out: list[HybridRecommendation] = []
            for resource_id, (user_part, item_part), total in fused:
                resource = by_id[resource_id]
                if not resource.matches(filters):
                    continue
                out.append(
                    HybridRecommendation(
                        resource=resource,
                        user_based_score=user_part,
                        item_based_score=item_part,
                        total_score=total,
                        display_score=format_score(total),
                    )
                )
                if len(out) >= self.max_recommendations:
                    break
        except Exception as exc:
            log_event(
                self.logger,
                logging.ERROR,
                COMPUTATION_ERROR,
                user_id,
                "Hybrid recommendation failed for user %r: %s",
                user_id,
                exc,
                exc=exc,
                predictor="hybrid",
            )
            return []

        log_event(
            self.logger,
            logging.INFO,
            RECOMMENDATIONS_GENERATED,
            user_id,
            "Generated %d hybrid recommendations for user %r",
            len(out),
            user_id,
            predictor="hybrid",
            count=len(out),
        )
        return out
