from __future__ import annotations

import logging

import pytest

from learnrec.cf.item_based import ItemBasedCF
from learnrec.cf.user_based import UserBasedCF
from learnrec.config import RecommenderConfig
from learnrec.fusion.linear import linear_score_fusion
from learnrec.hybrid import HybridRecommender
from learnrec.schemas import Candidate, Resource, format_score
from learnrec.utils import COMPUTATION_ERROR


class StubPredictor:
    """Returns fixed candidates, or raises if given an exception."""

    def __init__(self, scores: dict[str, float] | None = None, error: Exception | None = None) -> None:
        self.scores = scores or {}
        self.error = error
        self.calls = 0

    def score(self, user_id, ratings, catalog) -> list[Candidate]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        by_id = {res.resourceId: res for res in catalog}
        return [
            Candidate(resource=by_id[rid], score=s, display_score=format_score(s), support=1)
            for rid, s in self.scores.items()
        ]


def test_blend_uses_weights_without_normalizing(classroom_catalog) -> None:
    rec = HybridRecommender(
        user_weight=0.6,
        item_weight=0.4,
        user_predictor=StubPredictor({"r5": 0.8}),
        item_predictor=StubPredictor({"r5": 0.5}),
    )
    out = rec.recommend("u1", [], classroom_catalog)

    assert len(out) == 1
    assert out[0].resourceId == "r5"
    assert out[0].user_based_score == pytest.approx(0.48)
    assert out[0].item_based_score == pytest.approx(0.2)
    assert out[0].total_score == pytest.approx(0.68)
    assert out[0].display_score == "0.68"


def test_resource_from_one_predictor_gets_zero_for_the_other(classroom_catalog) -> None:
    rec = HybridRecommender(
        user_predictor=StubPredictor({"r3": 4.0}),
        item_predictor=StubPredictor({"r5": 5.0}),
    )
    out = {r.resourceId: r for r in rec.recommend("u1", [], classroom_catalog)}

    assert out["r3"].item_based_score == 0.0
    assert out["r3"].total_score == pytest.approx(2.0)
    assert out["r5"].user_based_score == 0.0
    assert out["r5"].total_score == pytest.approx(2.5)


def test_classroom_blend_order(classroom_ratings, classroom_catalog) -> None:
    out = HybridRecommender().recommend("u1", classroom_ratings, classroom_catalog)

    assert [r.resourceId for r in out] == ["r6", "r3", "r5"]
    totals = [r.total_score for r in out]
    assert totals == sorted(totals, reverse=True)
    for r in out:
        assert r.total_score == pytest.approx(r.user_based_score + r.item_based_score)


def test_scenario_includes_only_the_unrated_resource(scenario_ratings, scenario_catalog) -> None:
    out = HybridRecommender(similarity_threshold=0.0).recommend("u1", scenario_ratings, scenario_catalog)
    ids = [r.resourceId for r in out]
    assert "r3" in ids
    assert "r1" not in ids and "r2" not in ids


def test_filters_are_conjunctive(classroom_ratings, classroom_catalog) -> None:
    rec = HybridRecommender()

    math = rec.recommend("u1", classroom_ratings, classroom_catalog, filters={"subject": "Math"})
    assert math and all(r.resource.attribute("subject") == "Math" for r in math)

    videos = rec.recommend("u1", classroom_ratings, classroom_catalog, filters={"subject": "Math", "type": "video"})
    assert [r.resourceId for r in videos] == ["r3"]

    assert rec.recommend("u1", classroom_ratings, classroom_catalog, filters={"subject": "History"}) == []
    assert rec.recommend("u1", classroom_ratings, classroom_catalog, filters={"difficulty": "hard"}) == []


def test_none_filter_values_are_ignored(classroom_ratings, classroom_catalog) -> None:
    rec = HybridRecommender()
    unfiltered = rec.recommend("u1", classroom_ratings, classroom_catalog)
    assert rec.recommend("u1", classroom_ratings, classroom_catalog, filters={"grade": None}) == unfiltered


def test_filtering_happens_before_truncation(classroom_ratings, classroom_catalog) -> None:
    out = HybridRecommender(max_recommendations=1).recommend(
        "u1", classroom_ratings, classroom_catalog, filters={"subject": "Science"}
    )
    assert [r.resourceId for r in out] == ["r5"]


def test_size_bound_and_no_self_recommendation(classroom_ratings, classroom_catalog) -> None:
    rec = HybridRecommender(max_recommendations=2, similarity_threshold=0.0)
    for user_id in ("u1", "u2", "u3", "u4"):
        rated = {r.resourceId for r in classroom_ratings if r.userId == user_id}
        out = rec.recommend(user_id, classroom_ratings, classroom_catalog)
        assert len(out) <= 2
        assert rated.isdisjoint(r.resourceId for r in out)


def test_empty_inputs_return_empty(classroom_ratings, classroom_catalog) -> None:
    rec = HybridRecommender()
    assert rec.recommend("u1", [], classroom_catalog) == []
    assert rec.recommend("ghost", classroom_ratings, classroom_catalog) == []
    assert rec.recommend("u1", classroom_ratings, []) == []


def test_one_failing_predictor_fails_the_whole_call(classroom_ratings, classroom_catalog, caplog) -> None:
    log = logging.getLogger("test.hybrid.failure")
    rec = HybridRecommender(
        logger=log,
        user_predictor=StubPredictor({"r3": 4.0}),
        item_predictor=StubPredictor(error=RuntimeError("boom")),
    )

    with caplog.at_level(logging.INFO, logger="test.hybrid.failure"):
        out = rec.recommend("u1", classroom_ratings, classroom_catalog)

    assert out == []
    errors = [r for r in caplog.records if getattr(r, "event", None) == COMPUTATION_ERROR]
    assert len(errors) == 1
    assert errors[0].user_id == "u1"
    assert errors[0].error_type == "RuntimeError"


def test_malformed_input_does_not_raise(classroom_catalog) -> None:
    rec = HybridRecommender()
    assert rec.recommend("u1", [{"userId": "u1", "rating": "x"}], classroom_catalog) == []
    assert rec.recommend("u1", None, classroom_catalog) == []  # type: ignore[arg-type]


def test_inner_predictors_get_a_larger_pool() -> None:
    rec = HybridRecommender(max_recommendations=4)
    assert isinstance(rec.user_predictor, UserBasedCF)
    assert isinstance(rec.item_predictor, ItemBasedCF)
    assert rec.user_predictor.max_recommendations == 8
    assert rec.item_predictor.max_recommendations == 8

    rec = HybridRecommender.from_config(RecommenderConfig(max_recommendations=3, candidate_pool_factor=5))
    assert rec.user_predictor.max_recommendations == 15


def test_linear_score_fusion_orders_by_total() -> None:
    fused = linear_score_fusion([[("a", 1.0), ("b", 3.0)], [("b", 1.0), ("c", 10.0)]], [1.0, 0.5])
    assert [item_id for item_id, _, _ in fused] == ["c", "b", "a"]
    assert fused[1][1] == [3.0, 0.5]
    assert fused[1][2] == pytest.approx(3.5)

    with pytest.raises(ValueError):
        linear_score_fusion([[("a", 1.0)]], [1.0, 1.0])


def test_resource_matches() -> None:
    res = Resource(resourceId="r1", subject="Math", grade="5")
    assert res.matches(None)
    assert res.matches({"subject": "Math", "grade": "5"})
    assert not res.matches({"subject": "Math", "grade": "6"})
    assert not res.matches({"type": "video"})
