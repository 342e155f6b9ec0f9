from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml


@dataclass
class PlotSettings:
    figsize: tuple[float, float] = (10.0, 6.0)
    color: str = "blue"
    theme: str = "minimal"
    verbose: bool = True
    create_dir: bool = False
    partial_dependence_resolution: int = 50
    boundary_resolution: int = 200
    interactive_pixels_per_inch: int = 100

    def __post_init__(self) -> None:
        self.figsize = tuple(self.figsize)

    @classmethod
    def from_yaml(cls, path: Path | None) -> "PlotSettings":
        if path is None:
            return cls()
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")

        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
        return cls(**payload)
