from __future__ import annotations

from pathlib import Path
from typing import Dict, Tuple

import pandas as pd

from .schemas import Rating, Resource

REQUIRED_COLUMNS: Dict[str, Tuple[str, ...]] = {
    "ratings": ("userId", "resourceId", "rating"),
    "resources": ("resourceId",),
}


def validate_schema(df: pd.DataFrame, name: str) -> None:
    """Raise ValueError if `df` lacks any column required for table `name`."""
    cols = REQUIRED_COLUMNS[name]
    missing = [c for c in cols if c not in df.columns]
    if missing:
        raise ValueError(f"{name}.csv missing columns: {missing}")


def load_ratings(path: Path) -> pd.DataFrame:
    """Load a ratings CSV (userId, resourceId, rating[, isRecommended]).

    Ids are read as strings: they are opaque keys and may carry leading zeros
    or database object ids. Rows missing any required value are dropped.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"ratings.csv not found: {path}")

    df = pd.read_csv(path, dtype={"userId": "string", "resourceId": "string"})
    validate_schema(df, "ratings")
    df = df.dropna(subset=list(REQUIRED_COLUMNS["ratings"])).reset_index(drop=True)
    df["rating"] = pd.to_numeric(df["rating"], errors="raise").astype("float64")
    if "isRecommended" in df.columns:
        df["isRecommended"] = df["isRecommended"].astype("boolean")
    return df


def load_resources(path: Path) -> pd.DataFrame:
    """Load a resource catalog CSV: resourceId plus any attribute columns."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"resources.csv not found: {path}")

    df = pd.read_csv(path, dtype="string")
    validate_schema(df, "resources")
    if df["resourceId"].isna().any():
        raise ValueError("resources.csv has rows without resourceId")
    if df["resourceId"].duplicated().any():
        raise ValueError("resources.csv has duplicate resourceId values")
    return df


def ratings_from_frame(df: pd.DataFrame) -> list[Rating]:
    validate_schema(df, "ratings")
    has_flag = "isRecommended" in df.columns
    out: list[Rating] = []
    for row in df.itertuples(index=False):
        flag = row.isRecommended if has_flag else None
        out.append(
            Rating(
                userId=str(row.userId),
                resourceId=str(row.resourceId),
                rating=float(row.rating),
                isRecommended=(None if flag is None or pd.isna(flag) else bool(flag)),
            )
        )
    return out


def resources_from_frame(df: pd.DataFrame) -> list[Resource]:
    """Catalog records; empty attribute cells become absent attributes."""
    validate_schema(df, "resources")
    out: list[Resource] = []
    for record in df.to_dict(orient="records"):
        attrs = {k: v for k, v in record.items() if not pd.isna(v)}
        attrs["resourceId"] = str(record["resourceId"])
        out.append(Resource.model_validate(attrs))
    return out
