"""Weighted linear fusion of scored candidate lists."""

from __future__ import annotations

from typing import Dict, Hashable, List, Sequence, Tuple


def linear_score_fusion(
    scored_lists: Sequence[Sequence[Tuple[Hashable, float]]],
    weights: Sequence[float],
) -> List[Tuple[Hashable, List[float], float]]:
    """Blend several scored lists with fixed per-list weights.

    Parameters
    ----------
    scored_lists:
        One list of (id, score) pairs per source.
    weights:
        Multiplier for each source. Weights are applied as given, not normalized.

    Returns
    -------
    List[(id, contributions, total)]
        `contributions[i]` is `score * weights[i]` (0.0 when the id is absent
        from source i); sorted desc by total, ties in first-seen order.
    """
    if len(scored_lists) != len(weights):
        raise ValueError(f"Got {len(scored_lists)} scored lists but {len(weights)} weights")

    contributions: Dict[Hashable, List[float]] = {}
    for i, (lst, weight) in enumerate(zip(scored_lists, weights)):
        for item_id, score in lst:
            parts = contributions.setdefault(item_id, [0.0] * len(weights))
            parts[i] = float(score) * float(weight)

    fused = [(item_id, parts, sum(parts)) for item_id, parts in contributions.items()]
    fused.sort(key=lambda x: x[2], reverse=True)
    return fused
