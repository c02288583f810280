from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProjectPaths:
    data_dir: Path
    ratings_csv: Path
    resources_csv: Path
    config_path: Path

    @classmethod
    def from_repo_root(
        cls,
        repo_root: Path,
        *,
        data_dir: Path | str = "data",
        config_path: Path | str = "config.yaml",
    ) -> "ProjectPaths":
        def _resolve(p: Path | str) -> Path:
            p_path = Path(p) if isinstance(p, str) else p
            if not p_path.is_absolute():
                p_path = repo_root / p_path
            return p_path.resolve()

        data_dir_p = _resolve(data_dir)
        return cls(
            data_dir=data_dir_p,
            ratings_csv=data_dir_p / "ratings.csv",
            resources_csv=data_dir_p / "resources.csv",
            config_path=_resolve(config_path),
        )


def get_repo_root() -> Path:
    """Return repo root by searching upwards for `config.yaml` or `.git`."""
    start = Path.cwd().resolve()
    if start.is_file():
        start = start.parent

    for candidate in (start, *start.parents):
        if (candidate / "config.yaml").is_file() or (candidate / ".git").exists():
            return candidate

    # Fallback: search upwards from this file (useful if called from elsewhere).
    start = Path(__file__).resolve().parent
    for candidate in (start, *start.parents):
        if (candidate / "config.yaml").is_file() or (candidate / ".git").exists():
            return candidate

    raise FileNotFoundError("Could not locate repo root (expected `config.yaml` or `.git`).")
