"""User-based collaborative filtering.

Ratings from users whose co-rated cosine with the target clears the
similarity threshold are projected onto the resources the target has not
rated; each candidate's score is the similarity-weighted average of those
neighbour ratings.
"""

from __future__ import annotations

from collections import defaultdict

from ..schemas import EntityId, Rating
from .base import CollaborativePredictor, ScoreAccumulator
from .similarity import build_similarity_matrix


class UserBasedCF(CollaborativePredictor):
    name = "user-based"

    def _accumulate(
        self,
        user_id: EntityId,
        records: list[Rating],
        user_ratings: list[Rating],
        rated: set[EntityId],
    ) -> dict[EntityId, ScoreAccumulator]:
        matrix = build_similarity_matrix(records, axis="user")

        ratings_by_user: dict[EntityId, list[Rating]] = defaultdict(list)
        for r in records:
            ratings_by_user[r.userId].append(r)

        accumulators: dict[EntityId, ScoreAccumulator] = {}
        for other_id, sim in matrix.neighbors(user_id, self.similarity_threshold):
            for r in ratings_by_user[other_id]:
                if r.resourceId in rated:
                    continue
                accumulators.setdefault(r.resourceId, ScoreAccumulator()).add(r.rating, sim)
        return accumulators
