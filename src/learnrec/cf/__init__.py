"""Memory-based collaborative filtering over explicit resource ratings.

Core idea:
- Build a co-rated cosine similarity matrix over users or over resources
- User-based: recommend what similar users rated, weighted by their similarity
- Item-based: recommend resources similar to the ones the user already rated
"""

from .base import CollaborativePredictor
from .item_based import ItemBasedCF
from .similarity import SimilarityMatrix, build_similarity_matrix, cosine_similarity
from .user_based import UserBasedCF

__all__ = [
    "CollaborativePredictor",
    "ItemBasedCF",
    "SimilarityMatrix",
    "UserBasedCF",
    "build_similarity_matrix",
    "cosine_similarity",
]
