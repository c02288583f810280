"""Record types flowing through the engine.

Inputs (ratings, catalog resources) are pydantic models so that loosely-typed
records coming from a ratings/catalog source are validated once at the engine
boundary. Outputs are frozen dataclasses, like the rest of the package.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

EntityId = Union[str, int]


class Rating(BaseModel):
    """One explicit rating of a resource by a user."""

    model_config = ConfigDict(frozen=True)

    userId: EntityId
    resourceId: EntityId
    rating: float = Field(..., description="Explicit rating, typically 1..5.")
    isRecommended: Optional[bool] = Field(None, description="Reviewer ticked 'would recommend'.")


class Resource(BaseModel):
    """A catalog entry: a stable id plus arbitrary categorical attributes."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    resourceId: EntityId = Field(..., validation_alias=AliasChoices("resourceId", "_id", "id"))

    def attribute(self, name: str, default: Any = None) -> Any:
        if name == "resourceId":
            return self.resourceId
        extra = self.model_extra or {}
        return extra.get(name, default)

    def matches(self, filters: Optional[Mapping[str, Any]]) -> bool:
        """True if every non-None filter equals the resource's attribute."""
        if not filters:
            return True
        missing = object()
        for key, expected in filters.items():
            if expected is None:
                continue
            if self.attribute(key, missing) != expected:
                return False
        return True


def coerce_ratings(ratings: Iterable[Rating | Mapping[str, Any]]) -> list[Rating]:
    return [r if isinstance(r, Rating) else Rating.model_validate(r) for r in ratings]


def coerce_catalog(resources: Iterable[Resource | Mapping[str, Any]]) -> list[Resource]:
    return [r if isinstance(r, Resource) else Resource.model_validate(r) for r in resources]


@dataclass(frozen=True)
class Candidate:
    """A single predictor's score for an unrated resource."""

    resource: Resource
    score: float
    display_score: str
    support: int

    @property
    def resourceId(self) -> EntityId:
        return self.resource.resourceId


@dataclass(frozen=True)
class HybridRecommendation:
    resource: Resource
    user_based_score: float
    item_based_score: float
    total_score: float
    display_score: str

    @property
    def resourceId(self) -> EntityId:
        return self.resource.resourceId


@dataclass(frozen=True)
class SimilarEntity:
    entityId: EntityId
    similarity: float
    common_rated: int


@dataclass(frozen=True)
class PopularResource:
    resource: Resource
    average_rating: float | None
    review_count: int

    @property
    def resourceId(self) -> EntityId:
        return self.resource.resourceId


@dataclass(frozen=True)
class PreferenceRecommendations:
    resources: list[Resource]
    preferences: dict[str, Any]


def format_score(score: float) -> str:
    return f"{score:.2f}"
