"""Cosine similarity over co-rated counterparts.

A matrix is built over one axis of the rating data:

- ``axis="user"``: entities are users, counterparts are the resources they rated
- ``axis="item"``: entities are resources, counterparts are the users who rated them

For a pair of entities only the counterparts rated by *both* enter the cosine,
so two users who agree on the few resources they share score 1.0 no matter
how much else they rated.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Literal, Mapping

import numpy as np

from ..schemas import EntityId, Rating, SimilarEntity, coerce_ratings

logger = logging.getLogger(__name__)

Axis = Literal["user", "item"]

_AXIS_FIELDS: dict[str, tuple[str, str]] = {
    "user": ("userId", "resourceId"),
    "item": ("resourceId", "userId"),
}


def cosine_similarity(a: Mapping[Any, float], b: Mapping[Any, float]) -> float:
    """Cosine of two ``{counterpart: rating}`` vectors over their shared keys.

    Returns 0.0 when nothing is shared or either restricted vector has zero norm.
    """
    common = [k for k in a if k in b]
    if not common:
        return 0.0
    va = np.fromiter((float(a[k]) for k in common), dtype=np.float64, count=len(common))
    vb = np.fromiter((float(b[k]) for k in common), dtype=np.float64, count=len(common))
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    sim = float(np.dot(va, vb)) / (norm_a * norm_b)
    return min(1.0, max(-1.0, sim))


def _co_rated_cosine(values: np.ndarray, mask: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Pairwise co-rated cosine between the rows of a dense rating matrix.

    `values` holds ratings (0 where unrated) and `mask` marks rated cells.
    Returns (similarity, overlap) where overlap[a, b] counts shared counterparts.
    """
    m = mask.astype(np.float64)
    dot = values @ values.T
    # norm_sq[a, b] = sum of a's squared ratings over counterparts b also rated
    norm_sq = (values * values) @ m.T
    denom = np.sqrt(norm_sq * norm_sq.T)
    overlap = m @ m.T

    with np.errstate(divide="ignore", invalid="ignore"):
        sim = np.where(denom > 0.0, dot / denom, 0.0)
    sim[overlap == 0.0] = 0.0
    np.clip(sim, -1.0, 1.0, out=sim)

    # Keep one value per unordered pair and mirror it.
    upper = np.triu(sim, k=1)
    sim = upper + upper.T
    np.fill_diagonal(sim, 1.0)
    return sim, np.rint(overlap).astype(np.int64)


@dataclass(frozen=True, eq=False)
class SimilarityMatrix:
    """Symmetric entity x entity similarity table with id lookup."""

    axis: str
    ids: tuple[EntityId, ...]
    values: np.ndarray
    overlap: np.ndarray
    index: dict[EntityId, int] = field(repr=False)

    @classmethod
    def empty(cls, axis: str) -> "SimilarityMatrix":
        return cls(
            axis=axis,
            ids=(),
            values=np.zeros((0, 0), dtype=np.float64),
            overlap=np.zeros((0, 0), dtype=np.int64),
            index={},
        )

    def __len__(self) -> int:
        return len(self.ids)

    def __contains__(self, entity: object) -> bool:
        return entity in self.index

    def __iter__(self) -> Iterator[EntityId]:
        return iter(self.ids)

    def __getitem__(self, entity: EntityId) -> dict[EntityId, float]:
        return self.row(entity)

    def _idx(self, entity: EntityId) -> int:
        try:
            return self.index[entity]
        except KeyError:
            raise KeyError(f"Unknown {self.axis} id: {entity!r}") from None

    def similarity(self, a: EntityId, b: EntityId) -> float:
        return float(self.values[self._idx(a), self._idx(b)])

    def common_rated(self, a: EntityId, b: EntityId) -> int:
        return int(self.overlap[self._idx(a), self._idx(b)])

    def row(self, entity: EntityId) -> dict[EntityId, float]:
        i = self._idx(entity)
        return {other: float(s) for other, s in zip(self.ids, self.values[i])}

    def neighbors(self, entity: EntityId, threshold: float) -> list[tuple[EntityId, float]]:
        """Other entities whose similarity to `entity` is at least `threshold`."""
        i = self._idx(entity)
        row = self.values[i]
        out: list[tuple[EntityId, float]] = []
        for j in np.flatnonzero(row >= threshold):
            if int(j) == i:
                continue
            out.append((self.ids[int(j)], float(row[int(j)])))
        return out

    def most_similar(self, entity: EntityId, *, top_n: int = 10, min_overlap: int = 1) -> list[SimilarEntity]:
        """Rank the other entities by similarity, skipping thin overlaps."""
        i = self._idx(entity)
        sims = self.values[i].copy()
        sims[i] = -np.inf
        order = np.argsort(-sims, kind="stable")

        out: list[SimilarEntity] = []
        for j in order:
            if len(out) >= int(top_n):
                break
            j = int(j)
            if j == i:
                continue
            common = int(self.overlap[i, j])
            if common < int(min_overlap):
                continue
            out.append(SimilarEntity(entityId=self.ids[j], similarity=float(sims[j]), common_rated=common))
        return out

    def to_dict(self) -> dict[EntityId, dict[EntityId, float]]:
        return {entity: self.row(entity) for entity in self.ids}


def build_similarity_matrix(ratings: Iterable[Rating | Mapping[str, Any]], axis: Axis = "user") -> SimilarityMatrix:
    """Build the co-rated cosine similarity matrix over `axis`.

    Raises ValueError for an unknown axis and pydantic's ValidationError for
    malformed rating records. When a (entity, counterpart) pair is rated more
    than once the last rating wins.
    """
    if axis not in _AXIS_FIELDS:
        raise ValueError(f"axis must be one of {sorted(_AXIS_FIELDS)}, got {axis!r}")
    key, counterpart = _AXIS_FIELDS[axis]

    records = coerce_ratings(ratings)
    if not records:
        return SimilarityMatrix.empty(axis)

    entity_index: dict[EntityId, int] = {}
    counterpart_index: dict[EntityId, int] = {}
    cells: dict[tuple[int, int], float] = {}
    for r in records:
        e = entity_index.setdefault(getattr(r, key), len(entity_index))
        c = counterpart_index.setdefault(getattr(r, counterpart), len(counterpart_index))
        value = float(r.rating)
        if not math.isfinite(value):
            raise ValueError(f"Non-finite rating for {key}={getattr(r, key)!r}: {r.rating!r}")
        cells[(e, c)] = value

    n_entities = len(entity_index)
    values = np.zeros((n_entities, len(counterpart_index)), dtype=np.float64)
    mask = np.zeros_like(values, dtype=bool)
    rows, cols = zip(*cells.keys())
    values[list(rows), list(cols)] = list(cells.values())
    mask[list(rows), list(cols)] = True

    sim, overlap = _co_rated_cosine(values, mask)
    logger.debug("Similarity matrix built: axis=%s entities=%d ratings=%d", axis, n_entities, len(records))
    return SimilarityMatrix(
        axis=axis,
        ids=tuple(entity_index),
        values=sim,
        overlap=overlap,
        index=dict(entity_index),
    )
