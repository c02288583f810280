"""Item-based collaborative filtering.

Each resource the target user rated votes for the unrated resources most
similar to it (co-rated cosine over the users who rated both), weighted by
the user's own rating.
"""

from __future__ import annotations

from ..schemas import EntityId, Rating
from .base import CollaborativePredictor, ScoreAccumulator
from .similarity import build_similarity_matrix


class ItemBasedCF(CollaborativePredictor):
    name = "item-based"

    def _accumulate(
        self,
        user_id: EntityId,
        records: list[Rating],
        user_ratings: list[Rating],
        rated: set[EntityId],
    ) -> dict[EntityId, ScoreAccumulator]:
        matrix = build_similarity_matrix(records, axis="item")

        accumulators: dict[EntityId, ScoreAccumulator] = {}
        for user_rating in user_ratings:
            if user_rating.resourceId not in matrix:
                continue
            for other_id, sim in matrix.neighbors(user_rating.resourceId, self.similarity_threshold):
                if other_id in rated:
                    continue
                accumulators.setdefault(other_id, ScoreAccumulator()).add(user_rating.rating, sim)
        return accumulators
