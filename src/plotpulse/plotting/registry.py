from __future__ import annotations

from dataclasses import dataclass, field

from plotpulse.core.errors import UnsupportedPlotType
from plotpulse.core.models import MODEL_FAMILY_NAMES, PLOT_KIND_NAMES


@dataclass(frozen=True)
class PlotKindSpec:
    """How one chart kind is drawn on both rendering paths."""

    kind: str
    title: str
    xlabel: str
    ylabel: str
    statistics: tuple[str, ...] = ()
    panel: int | None = None
    renderer: str | None = None
    families: frozenset[str] = field(default_factory=lambda: frozenset(MODEL_FAMILY_NAMES))

    def supports(self, family: str) -> bool:
        return family in self.families


PLOT_KINDS: dict[str, PlotKindSpec] = {
    spec.kind: spec
    for spec in (
        PlotKindSpec(
            kind="residual",
            title="Residual Plot",
            xlabel="Fitted values",
            ylabel="Residuals",
            statistics=("fitted", "residuals"),
            panel=1,
        ),
        PlotKindSpec(
            kind="qq",
            title="QQ Plot",
            xlabel="Theoretical quantiles",
            ylabel="Standardized residuals",
            statistics=("std_residuals",),
            panel=2,
        ),
        PlotKindSpec(
            kind="scale_location",
            title="Scale-Location Plot",
            xlabel="Fitted values",
            ylabel="sqrt(|Standardized residuals|)",
            statistics=("fitted", "std_residuals"),
            panel=3,
        ),
        PlotKindSpec(
            kind="cooks",
            title="Cook's Distance Plot",
            xlabel="Observation",
            ylabel="Cook's distance",
            statistics=("cooks_d",),
            panel=4,
        ),
        PlotKindSpec(
            kind="residual_leverage",
            title="Residuals vs Leverage Plot",
            xlabel="Leverage",
            ylabel="Standardized residuals",
            statistics=("leverage", "std_residuals"),
            panel=5,
        ),
        PlotKindSpec(
            kind="cooks_leverage",
            title="Cook's Distance vs Leverage Plot",
            xlabel="Leverage",
            ylabel="Cook's distance",
            statistics=("leverage", "cooks_d"),
            panel=6,
        ),
        PlotKindSpec(
            kind="partial_dependence",
            title="Partial Dependence Plot",
            xlabel="Feature value",
            ylabel="Partial dependence",
            renderer="partial_dependence",
            families=frozenset({"random_forest"}),
        ),
        PlotKindSpec(
            kind="decision_boundary",
            title="Decision Boundary",
            xlabel="X1",
            ylabel="X2",
            renderer="decision_boundary",
            families=frozenset({"svm"}),
        ),
    )
}


def get_plot_kind(plot_type: object) -> PlotKindSpec:
    spec = PLOT_KINDS.get(plot_type) if isinstance(plot_type, str) else None
    if spec is None:
        raise UnsupportedPlotType(
            f"Unsupported plot_type {plot_type!r}. Choose from: {', '.join(PLOT_KIND_NAMES)}"
        )
    return spec
