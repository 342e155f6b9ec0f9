from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Mapping

from plotpulse.core.errors import InvalidArgument

PlotKind = Literal[
    "residual",
    "qq",
    "scale_location",
    "cooks",
    "residual_leverage",
    "cooks_leverage",
    "partial_dependence",
    "decision_boundary",
]
ModelFamily = Literal["linear", "glm", "mixed", "random_forest", "svm", "decision_tree"]
Statistic = Literal["fitted", "residuals", "std_residuals", "leverage", "cooks_d"]

PLOT_KIND_NAMES: tuple[str, ...] = (
    "residual",
    "qq",
    "scale_location",
    "cooks",
    "residual_leverage",
    "cooks_leverage",
    "partial_dependence",
    "decision_boundary",
)
MODEL_FAMILY_NAMES: tuple[str, ...] = (
    "linear",
    "glm",
    "mixed",
    "random_forest",
    "svm",
    "decision_tree",
)
STATISTIC_NAMES: tuple[str, ...] = ("fitted", "residuals", "std_residuals", "leverage", "cooks_d")


@dataclass(frozen=True)
class ThemeSpec:
    plotly_template: str
    matplotlib_style: str


THEMES: dict[str, ThemeSpec] = {
    "minimal": ThemeSpec(plotly_template="plotly_white", matplotlib_style="seaborn-v0_8-whitegrid"),
    "classic": ThemeSpec(plotly_template="simple_white", matplotlib_style="classic"),
    "dark": ThemeSpec(plotly_template="plotly_dark", matplotlib_style="dark_background"),
    "gray": ThemeSpec(plotly_template="ggplot2", matplotlib_style="ggplot"),
}


@dataclass
class PlotOptions:
    """Chart customization. Empty labels fall back to the chart kind's own title and axes."""

    main: str = ""
    xlab: str = ""
    ylab: str = ""
    theme: str = "minimal"
    boundary_colors: tuple[str, ...] = ("red", "blue")
    contour: bool = True

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any] | None, theme: str = "minimal") -> "PlotOptions":
        payload = dict(params or {})
        if "title" in payload and "main" not in payload:
            payload["main"] = payload["title"]

        known = {entry.name for entry in fields(cls)}
        values = {key: value for key, value in payload.items() if key in known}
        values.setdefault("theme", theme)

        options = cls(**values)
        if options.theme not in THEMES:
            raise InvalidArgument(
                f"Unknown theme '{options.theme}'. Choose from: {', '.join(THEMES)}"
            )
        if isinstance(options.boundary_colors, str) or not options.boundary_colors:
            raise InvalidArgument("boundary_colors must be a non-empty sequence of color strings.")
        options.boundary_colors = tuple(str(entry) for entry in options.boundary_colors)
        options.contour = bool(options.contour)
        return options

    @property
    def theme_spec(self) -> ThemeSpec:
        return THEMES[self.theme]


@dataclass
class ChartRequest:
    model: Any
    y: Any = None
    X: Any = None
    plot_type: str = "residual"
    figsize: Any = (10, 6)
    color: Any = "blue"
    save_path: Path | str | None = None
    plot_params: dict[str, Any] = field(default_factory=dict)
    interactive: bool = False
    verbose: bool = True
    create_dir: bool = False
    render_kwargs: dict[str, Any] = field(default_factory=dict)
