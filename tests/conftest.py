from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure `import learnrec` works from a source checkout without installing.
SRC_DIR = Path(__file__).resolve().parents[1] / "src"
sys.path.insert(0, str(SRC_DIR))

from learnrec.schemas import Rating, Resource  # noqa: E402


@pytest.fixture()
def scenario_ratings() -> list[Rating]:
    return [
        Rating(userId="u1", resourceId="r1", rating=5),
        Rating(userId="u1", resourceId="r2", rating=4),
        Rating(userId="u2", resourceId="r1", rating=4),
        Rating(userId="u2", resourceId="r2", rating=5),
        Rating(userId="u2", resourceId="r3", rating=4),
    ]


@pytest.fixture()
def scenario_catalog() -> list[Resource]:
    return [
        Resource(resourceId="r1", subject="Math", grade="5"),
        Resource(resourceId="r2", subject="Math", grade="5"),
        Resource(resourceId="r3", subject="Math", grade="6"),
    ]


@pytest.fixture()
def classroom_ratings() -> list[Rating]:
    """Four learners over six resources with overlapping tastes."""
    rows = [
        ("u1", "r1", 5), ("u1", "r2", 4), ("u1", "r4", 2),
        ("u2", "r1", 4), ("u2", "r2", 5), ("u2", "r3", 4), ("u2", "r5", 3),
        ("u3", "r1", 2), ("u3", "r3", 5), ("u3", "r4", 4), ("u3", "r6", 5),
        ("u4", "r2", 5), ("u4", "r3", 4), ("u4", "r6", 4),
    ]
    return [Rating(userId=u, resourceId=r, rating=v) for u, r, v in rows]


@pytest.fixture()
def classroom_catalog() -> list[Resource]:
    return [
        Resource(resourceId="r1", title="Fractions", subject="Math", grade="5", type="video"),
        Resource(resourceId="r2", title="Decimals", subject="Math", grade="5", type="document"),
        Resource(resourceId="r3", title="Geometry", subject="Math", grade="6", type="video"),
        Resource(resourceId="r4", title="Reading", subject="English", grade="5", type="exercise"),
        Resource(resourceId="r5", title="Photosynthesis", subject="Science", grade="6", type="video"),
        Resource(resourceId="r6", title="Ratios", subject="Math", grade="6", type="exercise"),
    ]
