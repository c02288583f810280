"""Recommendations that need no similarity model.

- `top_rated`: well-reviewed resources for everyone (cold-start friendly)
- `preference_based`: resources matching the attribute values a user rates highest

Both work on the same in-memory ratings/catalog inputs as the CF predictors.
Unlike `predict`/`recommend` they let malformed input raise.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Iterable, Mapping, Optional, Sequence

import pandas as pd

from .schemas import (
    EntityId,
    PopularResource,
    PreferenceRecommendations,
    Rating,
    Resource,
    coerce_catalog,
    coerce_ratings,
)
from .utils import NO_DATA, RECOMMENDATIONS_GENERATED, log_event

PREFERENCE_ATTRIBUTES: tuple[str, ...] = ("subject", "type", "grade")


def ratings_frame(records: Sequence[Rating]) -> pd.DataFrame:
    """Rating records as a DataFrame with columns userId, resourceId, rating, isRecommended."""
    return pd.DataFrame(
        [(r.userId, r.resourceId, float(r.rating), r.isRecommended) for r in records],
        columns=["userId", "resourceId", "rating", "isRecommended"],
    )


def rating_stats(records: Sequence[Rating]) -> pd.DataFrame:
    """Per-resource average rating, review count and 'would recommend' count."""
    if not records:
        return pd.DataFrame(columns=["average_rating", "review_count", "recommend_count"])
    df = ratings_frame(records)
    df["recommended"] = df["isRecommended"].eq(True).astype("int64")
    return df.groupby("resourceId", sort=False).agg(
        average_rating=("rating", "mean"),
        review_count=("rating", "size"),
        recommend_count=("recommended", "sum"),
    )


def top_rated(
    ratings: Iterable[Rating | Mapping[str, Any]],
    catalog: Iterable[Resource | Mapping[str, Any]],
    *,
    limit: int = 10,
    min_average: float = 4.0,
    min_reviews: int = 3,
    filters: Optional[Mapping[str, Any]] = None,
) -> list[PopularResource]:
    """Highly rated resources first, then the rest of the catalog in catalog order.

    A resource qualifies with an average of at least `min_average` over at
    least `min_reviews` ratings; qualified resources are ordered by average
    rating, then by how many reviewers recommended them.
    """
    records = coerce_ratings(ratings)
    resources = coerce_catalog(catalog)
    by_id = {res.resourceId: res for res in resources}

    stats = rating_stats(records)
    qualified = stats[
        (stats["average_rating"] >= float(min_average)) & (stats["review_count"] >= int(min_reviews))
    ].sort_values(["average_rating", "recommend_count"], ascending=[False, False], kind="stable")

    out: list[PopularResource] = []
    chosen: set[EntityId] = set()
    for resource_id, row in qualified.iterrows():
        if len(out) >= int(limit):
            break
        resource = by_id.get(resource_id)
        if resource is None or not resource.matches(filters):
            continue
        out.append(
            PopularResource(
                resource=resource,
                average_rating=round(float(row["average_rating"]), 1),
                review_count=int(row["review_count"]),
            )
        )
        chosen.add(resource_id)

    for resource in resources:
        if len(out) >= int(limit):
            break
        if resource.resourceId in chosen or not resource.matches(filters):
            continue
        review_count = int(stats["review_count"].get(resource.resourceId, 0)) if len(stats) else 0
        average = stats["average_rating"].get(resource.resourceId) if review_count else None
        out.append(
            PopularResource(
                resource=resource,
                average_rating=(None if average is None else round(float(average), 1)),
                review_count=review_count,
            )
        )
        chosen.add(resource.resourceId)
    return out


def _top_value(weights: Mapping[Any, float]) -> Any:
    # First value wins ties.
    best_value, best_weight = None, float("-inf")
    for value, weight in weights.items():
        if weight > best_weight:
            best_value, best_weight = value, weight
    return best_value


def preference_based(
    user_id: EntityId,
    ratings: Iterable[Rating | Mapping[str, Any]],
    catalog: Iterable[Resource | Mapping[str, Any]],
    *,
    limit: int = 10,
    filters: Optional[Mapping[str, Any]] = None,
    attributes: Sequence[str] = PREFERENCE_ATTRIBUTES,
    logger: Optional[logging.Logger] = None,
) -> PreferenceRecommendations:
    """Recommend unrated resources sharing the user's favourite attribute values.

    Every rated resource adds ``max(0.1, rating / 5)`` to each of its attribute
    values; the heaviest value per attribute is the preference. Caller filters
    override preferences. Matches are ranked by average rating, and any
    remaining slots are filled with unrated resources matching the filters alone.
    """
    log = logger or logging.getLogger(__name__)
    records = coerce_ratings(ratings)
    resources = coerce_catalog(catalog)

    user_ratings = [r for r in records if r.userId == user_id]
    if not user_ratings:
        log_event(log, logging.INFO, NO_DATA, user_id, "No ratings for user %r; no preference recommendations", user_id)
        return PreferenceRecommendations(resources=[], preferences={})

    by_id = {res.resourceId: res for res in resources}
    weights: dict[str, dict[Any, float]] = {name: defaultdict(float) for name in attributes}
    for r in user_ratings:
        resource = by_id.get(r.resourceId)
        if resource is None:
            continue
        weight = max(0.1, float(r.rating) / 5.0)
        for name in attributes:
            value = resource.attribute(name)
            if value is not None and value != "":
                weights[name][value] += weight

    preferences = {name: _top_value(values) for name, values in weights.items() if values}
    active_filters = {k: v for k, v in (filters or {}).items() if v is not None}
    query = {**preferences, **active_filters}

    rated = {r.resourceId for r in user_ratings}
    stats = rating_stats(records)
    averages = stats["average_rating"].to_dict() if len(stats) else {}
    unrated = [res for res in resources if res.resourceId not in rated]
    unrated.sort(key=lambda res: averages.get(res.resourceId, float("-inf")), reverse=True)

    picked = [res for res in unrated if res.matches(query)][: int(limit)]
    if len(picked) < int(limit):
        picked_ids = {res.resourceId for res in picked}
        extra = [res for res in unrated if res.resourceId not in picked_ids and res.matches(active_filters)]
        picked.extend(extra[: int(limit) - len(picked)])

    log_event(
        log,
        logging.INFO,
        RECOMMENDATIONS_GENERATED,
        user_id,
        "Generated %d preference-based recommendations for user %r",
        len(picked),
        user_id,
        count=len(picked),
    )
    return PreferenceRecommendations(resources=picked, preferences=preferences)
