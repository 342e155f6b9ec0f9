from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd
import plotly.graph_objects as go

from plotpulse.config.settings import PlotSettings
from plotpulse.core.models import ChartRequest, PlotOptions
from plotpulse.modeling.adapters import ModelAdapter
from plotpulse.plotting.registry import PlotKindSpec
from plotpulse.plotting.static import feature_columns

HOVER_TEMPLATE = "x: %{x}<br>y: %{y}<br>%{text}<extra></extra>"


def discrete_colorscale(colors: tuple[str, ...], count: int) -> list[list[Any]]:
    """Step colorscale mapping integer codes ``0..count-1`` onto ``colors``."""
    if count <= 1:
        return [[0.0, colors[0]], [1.0, colors[0]]]
    scale: list[list[Any]] = []
    for position in range(count):
        color = colors[position % len(colors)]
        scale.append([position / count, color])
        scale.append([(position + 1) / count, color])
    return scale


class InteractiveRenderer:
    """Build plotly charts over the diagnostic frame and attach hover tooltips."""

    def __init__(self, settings: PlotSettings | None = None) -> None:
        self.settings = settings or PlotSettings()

    def render(
        self,
        spec: PlotKindSpec,
        adapter: ModelAdapter,
        frame: pd.DataFrame,
        request: ChartRequest,
        options: PlotOptions,
    ) -> go.Figure:
        builder = getattr(self, f"_build_{spec.kind}")
        figure = builder(frame, adapter, request, options)
        return self.make_interactive(figure, spec, request, options)

    def make_interactive(
        self,
        figure: go.Figure,
        spec: PlotKindSpec,
        request: ChartRequest,
        options: PlotOptions,
    ) -> go.Figure:
        for trace in figure.data:
            if trace.type in {"heatmap", "contour"} or trace.text is None:
                trace.hoverinfo = "skip"
            else:
                trace.hovertemplate = HOVER_TEMPLATE

        pixels = self.settings.interactive_pixels_per_inch
        width, height = (float(value) for value in request.figsize)
        figure.update_layout(
            template=options.theme_spec.plotly_template,
            title=options.main or spec.title,
            xaxis_title=options.xlab or figure.layout.xaxis.title.text or spec.xlabel,
            yaxis_title=options.ylab or figure.layout.yaxis.title.text or spec.ylabel,
            width=int(width * pixels),
            height=int(height * pixels),
            hovermode="closest",
        )
        return figure

    def _scatter(self, x: Any, y: Any, frame: pd.DataFrame, request: ChartRequest, name: str) -> go.Scatter:
        return go.Scatter(
            x=np.asarray(x),
            y=np.asarray(y),
            mode="markers",
            marker={"color": request.color, **request.render_kwargs},
            text=list(frame["observation"]),
            name=name,
        )

    def _build_residual(self, frame, adapter, request, options) -> go.Figure:
        figure = go.Figure(self._scatter(frame["fitted"], frame["residuals"], frame, request, "Residuals"))
        figure.add_hline(y=0.0, line_dash="dot", line_color="gray")
        return figure

    def _build_qq(self, frame, adapter, request, options) -> go.Figure:
        from statsmodels.graphics.gofplots import ProbPlot

        std_residuals = frame["std_residuals"].to_numpy()
        order = np.argsort(std_residuals)
        probplot = ProbPlot(std_residuals)
        theoretical = np.asarray(probplot.theoretical_quantiles)
        sample = np.asarray(probplot.sample_quantiles)

        # Reference line through the first and third quartiles.
        t_low, t_high = np.percentile(theoretical, [25, 75])
        s_low, s_high = np.percentile(sample, [25, 75])
        slope = (s_high - s_low) / (t_high - t_low)
        intercept = s_low - slope * t_low
        line_x = np.array([theoretical[0], theoretical[-1]])

        labels = frame["observation"].to_numpy()[order]
        figure = go.Figure(
            go.Scatter(
                x=theoretical,
                y=sample,
                mode="markers",
                marker={"color": request.color, **request.render_kwargs},
                text=list(labels),
                name="Standardized residuals",
            )
        )
        figure.add_trace(
            go.Scatter(
                x=line_x,
                y=intercept + slope * line_x,
                mode="lines",
                line={"color": "red"},
                name="Reference line",
            )
        )
        return figure

    def _build_scale_location(self, frame, adapter, request, options) -> go.Figure:
        y = np.sqrt(np.abs(frame["std_residuals"].to_numpy()))
        return go.Figure(self._scatter(frame["fitted"], y, frame, request, "sqrt(|Standardized residuals|)"))

    def _build_cooks(self, frame, adapter, request, options) -> go.Figure:
        cooks = frame["cooks_d"].to_numpy()
        return go.Figure(
            go.Bar(
                x=np.arange(1, cooks.size + 1),
                y=cooks,
                marker={"color": request.color, **request.render_kwargs},
                text=list(frame["observation"]),
                textposition="none",
                name="Cook's distance",
            )
        )

    def _build_residual_leverage(self, frame, adapter, request, options) -> go.Figure:
        return go.Figure(
            self._scatter(frame["leverage"], frame["std_residuals"], frame, request, "Standardized residuals")
        )

    def _build_cooks_leverage(self, frame, adapter, request, options) -> go.Figure:
        return go.Figure(self._scatter(frame["leverage"], frame["cooks_d"], frame, request, "Cook's distance"))

    def _build_partial_dependence(self, frame, adapter, request, options) -> go.Figure:
        from sklearn.inspection import partial_dependence

        names, _ = feature_columns(request.X)
        single = len(names) == 1
        figure = go.Figure()
        for position, name in enumerate(names):
            result = partial_dependence(
                adapter.model,
                request.X,
                features=[position],
                grid_resolution=self.settings.partial_dependence_resolution,
            )
            grid = np.asarray(result["grid_values"][0])
            # Regressors and binary classifiers return one row; multi-class
            # estimators return one row per class and the last class is plotted.
            average = np.asarray(result["average"])[-1]
            line = {"color": request.color} if single else {}
            figure.add_trace(
                go.Scatter(
                    x=grid,
                    y=average,
                    mode="lines",
                    line={**line, **request.render_kwargs},
                    text=[name] * grid.size,
                    name=name,
                )
            )
        return figure

    def _build_decision_boundary(self, frame, adapter, request, options) -> go.Figure:
        names, values = feature_columns(request.X)
        resolution = self.settings.boundary_resolution
        xs = np.linspace(values[:, 0].min(), values[:, 0].max(), resolution)
        ys = np.linspace(values[:, 1].min(), values[:, 1].max(), resolution)
        xx, yy = np.meshgrid(xs, ys)
        grid: Any = np.column_stack([xx.ravel(), yy.ravel()])
        columns = getattr(request.X, "columns", None)
        if columns is not None:
            grid = pd.DataFrame(grid, columns=columns)
        predictions = adapter.predict(grid)

        classes = getattr(adapter.model, "classes_", None)
        colors = options.boundary_colors
        if classes is not None:
            codes = np.searchsorted(classes, predictions)
            tile = go.Heatmap(
                x=xs,
                y=ys,
                z=codes.reshape(xx.shape),
                colorscale=discrete_colorscale(colors, len(classes)),
                zmin=0,
                zmax=max(len(classes) - 1, 1),
                opacity=0.3,
                showscale=False,
                name="Prediction",
            )
        else:
            codes = predictions.astype(float)
            tile = go.Heatmap(
                x=xs,
                y=ys,
                z=codes.reshape(xx.shape),
                colorscale=[[0.0, colors[0]], [1.0, colors[-1]]],
                opacity=0.3,
                showscale=False,
                name="Prediction",
            )
        figure = go.Figure(tile)

        if options.contour and (classes is None or len(classes) > 1):
            contours: dict[str, Any] = {"coloring": "lines"}
            if classes is not None:
                contours.update(start=0.5, end=len(classes) - 1.5, size=1)
            figure.add_trace(
                go.Contour(
                    x=xs,
                    y=ys,
                    z=codes.reshape(xx.shape),
                    autocontour=classes is None,
                    contours=contours,
                    line={"color": "black"},
                    colorscale=[[0.0, "black"], [1.0, "black"]],
                    showscale=False,
                    name="Boundary",
                )
            )

        observations = frame["observation"].to_numpy()
        if request.y is None:
            figure.add_trace(self._scatter(values[:, 0], values[:, 1], frame, request, "Observations"))
        elif classes is None:
            figure.add_trace(
                go.Scatter(
                    x=values[:, 0],
                    y=values[:, 1],
                    mode="markers",
                    marker={
                        "color": np.asarray(request.y, dtype=float).ravel(),
                        "colorscale": [[0.0, colors[0]], [1.0, colors[-1]]],
                        "showscale": True,
                        "colorbar": {"title": {"text": "Response"}},
                        "line": {"color": "black", "width": 1},
                        **request.render_kwargs,
                    },
                    text=list(observations),
                    name="Observations",
                )
            )
        else:
            labels = np.asarray(request.y).ravel()
            for position, label in enumerate(np.unique(labels)):
                mask = labels == label
                figure.add_trace(
                    go.Scatter(
                        x=values[mask, 0],
                        y=values[mask, 1],
                        mode="markers",
                        marker={
                            "color": colors[position % len(colors)],
                            "line": {"color": "black", "width": 1},
                            **request.render_kwargs,
                        },
                        text=list(observations[mask]),
                        name=str(label),
                    )
                )
        figure.update_layout(xaxis_title=names[0], yaxis_title=names[1])
        return figure
