"""Command-line entry point: recommend learning resources for one learner from CSV files."""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path

import pandas as pd

from .cf.item_based import ItemBasedCF
from .cf.similarity import build_similarity_matrix
from .cf.user_based import UserBasedCF
from .config import RecommenderConfig, load_config
from .data import load_ratings, load_resources, ratings_from_frame, resources_from_frame
from .hybrid import HybridRecommender
from .paths import ProjectPaths, get_repo_root
from .popular import preference_based, top_rated
from .schemas import Rating, Resource
from .utils import setup_logging

MODES = ("hybrid", "user", "item", "top-rated", "preference")


def _parse_filter(text: str) -> tuple[str, str]:
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"Expected key=value, got {text!r}")
    return key.strip(), value.strip()


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Recommend learning resources from explicit ratings")
    p.add_argument("--user-id", type=str, required=True, help="Target learner id (as it appears in ratings.csv)")
    p.add_argument("--ratings", type=Path, default=None, help="Ratings CSV (default: data/ratings.csv)")
    p.add_argument("--resources", type=Path, default=None, help="Resource catalog CSV (default: data/resources.csv)")
    p.add_argument("--config", type=Path, default=None, help="Config YAML with a 'recommender' section")
    p.add_argument("--mode", choices=MODES, default="hybrid", help="Which recommender to run")
    p.add_argument(
        "--filter",
        dest="filters",
        type=_parse_filter,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Resource attribute filter, e.g. subject=Math (repeatable, all must match)",
    )
    p.add_argument("--k", type=int, default=None, help="How many recommendations to return")
    p.add_argument("--top-similar", type=int, default=5, help="How many similar users to show")
    p.add_argument("--log-level", type=str, default="INFO", help="Logging level")
    return p


def _resolve_config(path: Path | None, default: Path) -> RecommenderConfig:
    if path is not None:
        return load_config(path)
    if default.exists():
        return load_config(default)
    return RecommenderConfig()


def load_inputs(args: argparse.Namespace) -> tuple[RecommenderConfig, list[Rating], list[Resource]]:
    try:
        repo_root = get_repo_root()
    except FileNotFoundError:
        repo_root = Path.cwd()
    paths = ProjectPaths.from_repo_root(repo_root)

    cfg = _resolve_config(args.config, paths.config_path)
    if args.k is not None:
        cfg = replace(cfg, max_recommendations=int(args.k)).validate()

    ratings = ratings_from_frame(load_ratings(args.ratings or paths.ratings_csv))
    catalog = resources_from_frame(load_resources(args.resources or paths.resources_csv))
    return cfg, ratings, catalog


def run(
    args: argparse.Namespace,
    cfg: RecommenderConfig,
    ratings: list[Rating],
    catalog: list[Resource],
) -> pd.DataFrame:
    """Run the selected recommender and return its results as a table."""
    filters = dict(args.filters)
    user_id = args.user_id

    if args.mode == "hybrid":
        recs = HybridRecommender.from_config(cfg).recommend(user_id, ratings, catalog, filters=filters)
        rows = [
            {
                "resourceId": r.resourceId,
                "title": r.resource.attribute("title"),
                "user_based": r.user_based_score,
                "item_based": r.item_based_score,
                "score": r.display_score,
            }
            for r in recs
        ]
    elif args.mode in ("user", "item"):
        predictor_cls = UserBasedCF if args.mode == "user" else ItemBasedCF
        candidates = predictor_cls.from_config(cfg).predict(user_id, ratings, catalog)
        rows = [
            {
                "resourceId": c.resourceId,
                "title": c.resource.attribute("title"),
                "support": c.support,
                "score": c.display_score,
            }
            for c in candidates
            if c.resource.matches(filters)
        ]
    elif args.mode == "top-rated":
        popular = top_rated(ratings, catalog, limit=cfg.max_recommendations, filters=filters)
        rows = [
            {
                "resourceId": p.resourceId,
                "title": p.resource.attribute("title"),
                "average_rating": p.average_rating,
                "review_count": p.review_count,
            }
            for p in popular
        ]
    else:
        result = preference_based(user_id, ratings, catalog, limit=cfg.max_recommendations, filters=filters)
        rows = [
            {
                "resourceId": res.resourceId,
                "title": res.attribute("title"),
                "subject": res.attribute("subject"),
                "grade": res.attribute("grade"),
                "type": res.attribute("type"),
            }
            for res in result.resources
        ]
    return pd.DataFrame(rows)


def main(argv: list[str] | None = None) -> None:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level.upper())

    cfg, ratings, catalog = load_inputs(args)
    recs = run(args, cfg, ratings, catalog)

    if args.top_similar > 0:
        matrix = build_similarity_matrix(ratings, axis="user")
        print("\n=== Similar Users ===")
        sims = matrix.most_similar(args.user_id, top_n=args.top_similar) if args.user_id in matrix else []
        if sims:
            df_s = pd.DataFrame([s.__dict__ for s in sims])
            print(df_s.to_string(index=False))
        else:
            print("No similar users found.")

    print(f"\n=== Recommended Resources ({args.mode}) ===")
    if not recs.empty:
        print(recs.to_string(index=False))
    else:
        print("No recommendations found.")


if __name__ == "__main__":
    main()
