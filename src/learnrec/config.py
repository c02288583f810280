"""Recommender settings and their YAML loader."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml


@dataclass(frozen=True)
class RecommenderConfig:
    similarity_threshold: float = 0.3
    max_recommendations: int = 10
    user_weight: float = 0.5
    item_weight: float = 0.5
    # Inner predictors return up to this many times max_recommendations before blending.
    candidate_pool_factor: int = 2

    def validate(self) -> "RecommenderConfig":
        if not -1.0 <= float(self.similarity_threshold) <= 1.0:
            raise ValueError(f"similarity_threshold must be within [-1, 1], got {self.similarity_threshold}")
        if int(self.max_recommendations) < 1:
            raise ValueError(f"max_recommendations must be >= 1, got {self.max_recommendations}")
        if int(self.candidate_pool_factor) < 1:
            raise ValueError(f"candidate_pool_factor must be >= 1, got {self.candidate_pool_factor}")
        for name in ("user_weight", "item_weight"):
            if not math.isfinite(float(getattr(self, name))):
                raise ValueError(f"{name} must be a finite number")
        return self

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> "RecommenderConfig":
        """Build from a (possibly partial) mapping; unknown keys are rejected."""
        raw = dict(raw or {})
        known = {f.name: f for f in fields(cls)}
        unknown = sorted(set(raw) - set(known))
        if unknown:
            raise ValueError(f"Unknown recommender config keys: {unknown}")

        cfg = cls()
        overrides: dict[str, Any] = {}
        for name, value in raw.items():
            default = getattr(cfg, name)
            overrides[name] = int(value) if isinstance(default, int) else float(value)
        return replace(cfg, **overrides).validate()


def load_config(path: Path) -> RecommenderConfig:
    """Read the ``recommender:`` section of a YAML config file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    obj = yaml.safe_load(path.read_text())
    if obj is None:
        return RecommenderConfig()
    if not isinstance(obj, dict):
        raise ValueError(f"Expected YAML mapping at {path}, got {type(obj)}")

    section = obj.get("recommender", {})
    if section is None:
        section = {}
    if not isinstance(section, dict):
        raise ValueError(f"'recommender' section in {path} must be a mapping")
    return RecommenderConfig.from_mapping(section)
