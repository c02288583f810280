"""Collaborative-filtering recommendations for learning resources.

Scores resources a learner has not rated from a sparse set of explicit
ratings: user-based and item-based CF over co-rated cosine similarity,
blended by a weighted hybrid with optional attribute filters.
"""

from .cf import ItemBasedCF, SimilarityMatrix, UserBasedCF, build_similarity_matrix, cosine_similarity
from .config import RecommenderConfig, load_config
from .hybrid import HybridRecommender
from .popular import preference_based, top_rated
from .schemas import (
    Candidate,
    HybridRecommendation,
    PopularResource,
    PreferenceRecommendations,
    Rating,
    Resource,
    SimilarEntity,
)

__all__ = [
    "Candidate",
    "HybridRecommendation",
    "HybridRecommender",
    "ItemBasedCF",
    "PopularResource",
    "PreferenceRecommendations",
    "Rating",
    "RecommenderConfig",
    "Resource",
    "SimilarEntity",
    "SimilarityMatrix",
    "UserBasedCF",
    "build_similarity_matrix",
    "cosine_similarity",
    "load_config",
    "preference_based",
    "top_rated",
]
