from __future__ import annotations

import numbers
from pathlib import Path
from typing import Any, Mapping

import numpy as np

from plotpulse.config.settings import PlotSettings
from plotpulse.core.errors import (
    InvalidArgument,
    PlotPulseError,
    RenderingFailure,
    UnsupportedCombination,
)
from plotpulse.core.models import ChartRequest, PlotOptions
from plotpulse.core.progress import ProgressLog
from plotpulse.modeling.adapters import ModelAdapter, resolve_adapter
from plotpulse.modeling.statistics import DiagnosticStatistics
from plotpulse.plotting.interactive import InteractiveRenderer
from plotpulse.plotting.persistence import FigureSaver
from plotpulse.plotting.registry import PlotKindSpec, get_plot_kind
from plotpulse.plotting.static import StaticRenderer


class PlotDispatcher:
    """Validate a chart request, compute its statistics, render and optionally save it."""

    def __init__(
        self,
        settings: PlotSettings | None = None,
        statistics: DiagnosticStatistics | None = None,
        static_renderer: StaticRenderer | None = None,
        interactive_renderer: InteractiveRenderer | None = None,
        saver: FigureSaver | None = None,
    ) -> None:
        self.settings = settings or PlotSettings()
        self.statistics = statistics or DiagnosticStatistics()
        self.static_renderer = static_renderer or StaticRenderer(self.settings)
        self.interactive_renderer = interactive_renderer or InteractiveRenderer(self.settings)
        self.saver = saver or FigureSaver()

    def run(self, request: ChartRequest) -> Any:
        log = ProgressLog(request.verbose)
        log("Starting plot_model function")

        adapter = resolve_adapter(request.model)
        spec = get_plot_kind(request.plot_type)
        self._validate_figsize(request.figsize)
        self._validate_color(request.color)
        options = PlotOptions.from_mapping(request.plot_params, theme=self.settings.theme)
        self._validate_combination(spec, adapter)
        self._validate_inputs(spec, adapter, request)

        try:
            frame = self.statistics.run(adapter, spec.statistics, request.y, request.X)
            if request.interactive:
                log("Creating interactive plot")
                figure = self.interactive_renderer.render(spec, adapter, frame, request, options)
                log("Returning interactive plot object")
            else:
                figure = self.static_renderer.render(spec, adapter, frame, request, options)
                if request.save_path is not None and self.saver.save(
                    figure,
                    request.save_path,
                    request.figsize,
                    request.create_dir,
                    log,
                ):
                    log("Returning plot object")
        except PlotPulseError as exc:
            log.error(f"An error occurred: {exc}")
            raise
        except Exception as exc:
            log.error(f"An error occurred: {exc}")
            raise RenderingFailure(str(exc)) from exc

        log("plot_model function completed")
        return figure

    def _validate_figsize(self, figsize: Any) -> None:
        message = "figsize must be a numeric sequence of length 2 (width, height)."
        if isinstance(figsize, (str, bytes, Mapping)):
            raise InvalidArgument(message)
        try:
            values = list(figsize)
        except TypeError as exc:
            raise InvalidArgument(message) from exc
        if len(values) != 2 or not all(
            isinstance(value, numbers.Real) and not isinstance(value, bool) for value in values
        ):
            raise InvalidArgument(message)
        if not all(np.isfinite(float(value)) and float(value) > 0 for value in values):
            raise InvalidArgument("figsize values must be finite and positive.")

    def _validate_color(self, color: Any) -> None:
        if not isinstance(color, str) or not color.strip():
            raise InvalidArgument("color must be a single character string.")

    def _validate_combination(self, spec: PlotKindSpec, adapter: ModelAdapter) -> None:
        if not spec.supports(adapter.family):
            allowed = ", ".join(repr(family) for family in sorted(spec.families))
            raise UnsupportedCombination(
                f"Plot type '{spec.kind}' is only supported for {allowed} models, "
                f"not '{adapter.family}'."
            )
        missing = [statistic for statistic in spec.statistics if not adapter.is_available(statistic)]
        if missing:
            raise UnsupportedCombination(
                f"Plot type '{spec.kind}' needs {', '.join(missing)}, which "
                f"{'is' if len(missing) == 1 else 'are'} unavailable for this '{adapter.family}' model."
            )

    def _validate_inputs(self, spec: PlotKindSpec, adapter: ModelAdapter, request: ChartRequest) -> None:
        if not adapter.requires_features:
            return
        if request.X is None:
            raise InvalidArgument(f"X is required for '{adapter.family}' models.")
        row_count = len(request.X)
        if "residuals" in spec.statistics and request.y is None:
            raise InvalidArgument(f"y is required for '{spec.kind}' plots of '{adapter.family}' models.")
        if request.y is not None and len(request.y) != row_count:
            raise InvalidArgument(
                f"y has {len(request.y)} observations but X has {row_count} rows."
            )
        if spec.renderer == "decision_boundary" and np.shape(request.X)[1:] != (2,):
            raise InvalidArgument("decision_boundary plots need exactly two feature columns in X.")


def plot_model(
    model: Any,
    y: Any = None,
    X: Any = None,
    plot_type: str = "residual",
    figsize: Any = (10, 6),
    color: Any = "blue",
    save_path: Path | str | None = None,
    plot_params: Mapping[str, Any] | None = None,
    interactive: bool = False,
    verbose: bool = True,
    create_dir: bool = False,
    **kwargs: Any,
) -> Any:
    """Render a diagnostic chart for a fitted model.

    Parameters
    ----------
    model:
        Fitted statsmodels OLS/GLM/MixedLM results, or a fitted scikit-learn
        random forest, SVM or decision tree.
    y, X:
        Response and feature matrix. Required for scikit-learn models.
    plot_type:
        One of ``residual``, ``qq``, ``scale_location``, ``cooks``,
        ``residual_leverage``, ``cooks_leverage``, ``partial_dependence``,
        ``decision_boundary``.
    figsize:
        Canvas (width, height) in inches.
    color:
        Color of the plotted points, bars or lines.
    save_path:
        PDF destination for static charts. Interactive charts are never saved.
    plot_params:
        Customization: ``main``/``title``, ``xlab``, ``ylab``, ``theme``,
        ``boundary_colors``, ``contour``. Other keys are ignored.
    interactive:
        Return a plotly figure instead of a matplotlib figure.
    verbose:
        Emit timestamped progress lines on stderr.
    create_dir:
        Create the parent directory of ``save_path`` when it is missing.
    **kwargs:
        Passed through to the primary drawing call.

    Returns
    -------
    matplotlib.figure.Figure or plotly.graph_objects.Figure
    """
    request = ChartRequest(
        model=model,
        y=y,
        X=X,
        plot_type=plot_type,
        figsize=figsize,
        color=color,
        save_path=save_path,
        plot_params=dict(plot_params or {}),
        interactive=interactive,
        verbose=verbose,
        create_dir=create_dir,
        render_kwargs=kwargs,
    )
    return PlotDispatcher().run(request)
