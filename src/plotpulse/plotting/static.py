from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator

import numpy as np

from plotpulse.config.settings import PlotSettings
from plotpulse.core.models import ChartRequest, PlotOptions
from plotpulse.modeling.adapters import ModelAdapter
from plotpulse.plotting.registry import PlotKindSpec

COOKS_CONTOUR_LEVELS = (0.5, 1.0)
LABELLED_EXTREMES = 3


@contextmanager
def rendering_context(style: str | None = None) -> Iterator[None]:
    """Scope matplotlib's global state to one render.

    rcParams (including any style applied inside) and the active figure are put
    back on every exit path.
    """
    import matplotlib
    import matplotlib.pyplot as plt

    previous = plt.gcf().number if plt.get_fignums() else None
    try:
        with matplotlib.rc_context():
            if style:
                plt.style.use(style)
            yield
    finally:
        if previous is not None and plt.fignum_exists(previous):
            plt.figure(previous)


def feature_columns(X: Any) -> tuple[list[str], np.ndarray]:
    values = np.asarray(X, dtype=float)
    if values.ndim == 1:
        values = values.reshape(-1, 1)
    columns = getattr(X, "columns", None)
    if columns is not None:
        names = [str(name) for name in columns]
    else:
        names = [f"X{position}" for position in range(1, values.shape[1] + 1)]
    return names, values


def partial_dependence_target(model: Any) -> Any:
    # Multi-class estimators need an explicit class; use the last one, which is
    # also the positive class of a binary classifier.
    classes = getattr(model, "classes_", None)
    if classes is not None and len(classes) > 2:
        return classes[-1]
    return None


def _add_smoother(ax: Any, x: np.ndarray, y: np.ndarray) -> None:
    from statsmodels.nonparametric.smoothers_lowess import lowess

    if np.unique(x).size < 4:
        return
    smoothed = lowess(y, x, frac=2.0 / 3.0)
    ax.plot(smoothed[:, 0], smoothed[:, 1], color="red", linewidth=1)


def _label_extremes(ax: Any, x: np.ndarray, y: np.ndarray, labels: list[str], score: np.ndarray) -> None:
    for position in np.argsort(score)[-LABELLED_EXTREMES:]:
        ax.annotate(
            labels[position],
            (x[position], y[position]),
            xytext=(3, 3),
            textcoords="offset points",
            fontsize="small",
        )


def _panel_residuals(ax: Any, frame: Any, color: str, adapter: ModelAdapter, **kwargs: Any) -> None:
    x = frame["fitted"].to_numpy()
    y = frame["residuals"].to_numpy()
    ax.scatter(x, y, color=color, **kwargs)
    ax.axhline(0.0, color="gray", linestyle=":", linewidth=1)
    _add_smoother(ax, x, y)
    _label_extremes(ax, x, y, list(frame["observation"]), np.abs(y))


def _panel_qq(ax: Any, frame: Any, color: str, adapter: ModelAdapter, **kwargs: Any) -> None:
    from statsmodels.graphics.gofplots import qqplot

    qqplot(
        frame["std_residuals"].to_numpy(),
        line="q",
        ax=ax,
        markerfacecolor=color,
        markeredgecolor=color,
        **kwargs,
    )


def _panel_scale_location(ax: Any, frame: Any, color: str, adapter: ModelAdapter, **kwargs: Any) -> None:
    x = frame["fitted"].to_numpy()
    y = np.sqrt(np.abs(frame["std_residuals"].to_numpy()))
    ax.scatter(x, y, color=color, **kwargs)
    _add_smoother(ax, x, y)
    _label_extremes(ax, x, y, list(frame["observation"]), y)


def _panel_cooks(ax: Any, frame: Any, color: str, adapter: ModelAdapter, **kwargs: Any) -> None:
    cooks = frame["cooks_d"].to_numpy()
    positions = np.arange(1, cooks.size + 1)
    ax.vlines(positions, 0.0, cooks, color=color, **kwargs)
    _label_extremes(ax, positions, cooks, list(frame["observation"]), cooks)


def _panel_residual_leverage(ax: Any, frame: Any, color: str, adapter: ModelAdapter, **kwargs: Any) -> None:
    leverage = frame["leverage"].to_numpy()
    residuals = frame["std_residuals"].to_numpy()
    ax.scatter(leverage, residuals, color=color, **kwargs)
    ax.axhline(0.0, color="gray", linestyle=":", linewidth=1)

    parameter_count = adapter.parameter_count()
    if parameter_count and leverage.max() > 0:
        ylim = ax.get_ylim()
        h = np.linspace(0.001, min(max(leverage.max() * 1.05, 0.002), 0.999), 100)
        for level in COOKS_CONTOUR_LEVELS:
            bound = np.sqrt(level * parameter_count * (1.0 - h) / h)
            ax.plot(h, bound, color="red", linestyle="--", linewidth=1)
            ax.plot(h, -bound, color="red", linestyle="--", linewidth=1)
        ax.set_ylim(ylim)
    _label_extremes(ax, leverage, residuals, list(frame["observation"]), np.abs(residuals))


def _panel_cooks_leverage(ax: Any, frame: Any, color: str, adapter: ModelAdapter, **kwargs: Any) -> None:
    leverage = frame["leverage"].to_numpy()
    cooks = frame["cooks_d"].to_numpy()
    ax.scatter(leverage, cooks, color=color, **kwargs)
    _label_extremes(ax, leverage, cooks, list(frame["observation"]), cooks)


PANELS = {
    1: _panel_residuals,
    2: _panel_qq,
    3: _panel_scale_location,
    4: _panel_cooks,
    5: _panel_residual_leverage,
    6: _panel_cooks_leverage,
}


class StaticRenderer:
    """Draw one diagnostic chart with matplotlib on a 2x2 panel grid.

    Numbered diagnostics occupy the first panel of the grid. Partial dependence
    and decision boundary charts are drawn by scikit-learn's display helpers and
    span the whole grid.
    """

    def __init__(self, settings: PlotSettings | None = None) -> None:
        self.settings = settings or PlotSettings()

    def render(
        self,
        spec: PlotKindSpec,
        adapter: ModelAdapter,
        frame: Any,
        request: ChartRequest,
        options: PlotOptions,
    ) -> Any:
        import matplotlib.pyplot as plt

        with rendering_context(options.theme_spec.matplotlib_style):
            fig = plt.figure(figsize=tuple(float(value) for value in request.figsize))
            try:
                grid = fig.add_gridspec(2, 2)
                if spec.panel is not None:
                    ax = fig.add_subplot(grid[0, 0])
                    PANELS[spec.panel](ax, frame, request.color, adapter, **request.render_kwargs)
                    ax.set_title(spec.title)
                    ax.set_xlabel(options.xlab or spec.xlabel)
                    ax.set_ylabel(options.ylab or spec.ylabel)
                    if options.main:
                        fig.suptitle(options.main)
                else:
                    ax = fig.add_subplot(grid[:, :])
                    if spec.renderer == "partial_dependence":
                        self._draw_partial_dependence(ax, adapter, request)
                    else:
                        self._draw_decision_boundary(ax, adapter, request, options)
                    fig.suptitle(options.main or spec.title)
            finally:
                # Returned figures stay usable but are not tracked by pyplot.
                plt.close(fig)
        return fig

    def _draw_partial_dependence(self, ax: Any, adapter: ModelAdapter, request: ChartRequest) -> None:
        from sklearn.inspection import PartialDependenceDisplay

        names, _ = feature_columns(request.X)
        PartialDependenceDisplay.from_estimator(
            adapter.model,
            request.X,
            features=list(range(len(names))),
            feature_names=names,
            target=partial_dependence_target(adapter.model),
            grid_resolution=self.settings.partial_dependence_resolution,
            ax=ax,
            line_kw={"color": request.color, **request.render_kwargs},
        )

    def _draw_decision_boundary(
        self,
        ax: Any,
        adapter: ModelAdapter,
        request: ChartRequest,
        options: PlotOptions,
    ) -> None:
        from matplotlib.colors import LinearSegmentedColormap, ListedColormap
        from sklearn.inspection import DecisionBoundaryDisplay

        names, values = feature_columns(request.X)
        classes = getattr(adapter.model, "classes_", None)
        colors = list(options.boundary_colors)
        if classes is not None:
            cmap = ListedColormap(colors)
        else:
            # Regressors predict a continuous surface.
            cmap = LinearSegmentedColormap.from_list("boundary", colors if len(colors) > 1 else colors * 2)

        display = DecisionBoundaryDisplay.from_estimator(
            adapter.model,
            request.X,
            grid_resolution=self.settings.boundary_resolution,
            eps=0.0,
            response_method="predict",
            plot_method="contourf",
            alpha=0.3,
            cmap=cmap,
            xlabel=options.xlab or names[0],
            ylabel=options.ylab or names[1],
            ax=ax,
        )
        if options.contour:
            ax.contour(display.xx0, display.xx1, display.response, colors="black", linewidths=0.8)

        if request.y is None:
            ax.scatter(values[:, 0], values[:, 1], color=request.color, **request.render_kwargs)
            return
        labels = np.asarray(request.y).ravel()
        if classes is None:
            points = ax.scatter(
                values[:, 0],
                values[:, 1],
                c=labels.astype(float),
                cmap=cmap,
                edgecolors="black",
                **request.render_kwargs,
            )
            ax.figure.colorbar(points, ax=ax, label="Response")
            return
        for position, label in enumerate(np.unique(labels)):
            mask = labels == label
            ax.scatter(
                values[mask, 0],
                values[mask, 1],
                color=colors[position % len(colors)],
                edgecolors="black",
                label=str(label),
                **request.render_kwargs,
            )
        ax.legend(title="Class")
