from __future__ import annotations

import io

import matplotlib
import matplotlib.pyplot as plt
import pytest
from matplotlib.figure import Figure

from plotpulse.core.errors import RenderingFailure
from plotpulse.dispatch.dispatcher import plot_model

SUPPORTED_PAIRS = [
    *[("linear", kind) for kind in ("residual", "qq", "scale_location", "cooks", "residual_leverage", "cooks_leverage")],
    *[("glm", kind) for kind in ("residual", "qq", "scale_location", "cooks", "residual_leverage", "cooks_leverage")],
    ("mixed", "residual"),
    ("mixed", "qq"),
    ("mixed", "scale_location"),
    ("random_forest", "residual"),
    ("random_forest", "partial_dependence"),
    ("svm", "decision_boundary"),
    ("decision_tree", "residual"),
]


@pytest.mark.parametrize(("family", "kind"), SUPPORTED_PAIRS)
def test_supported_pairs_render_a_figure(fitted_models, family: str, kind: str) -> None:
    bundle = fitted_models[family]

    figure = plot_model(bundle.model, y=bundle.y, X=bundle.X, plot_type=kind, verbose=False)

    assert isinstance(figure, Figure)
    assert figure.axes
    assert tuple(figure.get_size_inches()) == pytest.approx((10.0, 6.0))


def test_cooks_chart_uses_its_kind_title(fitted_models) -> None:
    figure = plot_model(fitted_models["linear"].model, plot_type="cooks", verbose=False)

    ax = figure.axes[0]
    assert ax.get_title() == "Cook's Distance Plot"
    assert ax.get_xlabel() == "Observation"
    assert ax.get_ylabel() == "Cook's distance"


def test_numbered_diagnostic_sits_in_first_grid_cell(fitted_models) -> None:
    figure = plot_model(fitted_models["linear"].model, plot_type="qq", verbose=False)

    spec = figure.axes[0].get_subplotspec()
    assert spec.rowspan == range(0, 1)
    assert spec.colspan == range(0, 1)


def test_plot_params_override_labels_and_add_suptitle(fitted_models) -> None:
    figure = plot_model(
        fitted_models["glm"].model,
        plot_type="residual",
        plot_params={"main": "Poisson fit", "xlab": "Predicted", "ylab": "Deviance"},
        verbose=False,
    )

    ax = figure.axes[0]
    assert figure._suptitle.get_text() == "Poisson fit"
    assert ax.get_xlabel() == "Predicted"
    assert ax.get_ylabel() == "Deviance"


def test_figsize_sets_canvas_size(fitted_models) -> None:
    figure = plot_model(fitted_models["linear"].model, figsize=(8, 5), verbose=False)

    assert tuple(figure.get_size_inches()) == pytest.approx((8.0, 5.0))


def test_decision_boundary_draws_one_scatter_per_class(fitted_models) -> None:
    bundle = fitted_models["svm"]

    figure = plot_model(
        bundle.model,
        y=bundle.y,
        X=bundle.X,
        plot_type="decision_boundary",
        plot_params={"boundary_colors": ["orange", "purple"], "contour": False},
        verbose=False,
    )

    ax = figure.axes[0]
    assert ax.get_legend().get_title().get_text() == "Class"
    assert [text.get_text() for text in ax.get_legend().get_texts()] == ["0", "1"]
    assert ax.get_xlabel() == "x1"
    assert ax.get_ylabel() == "x2"
    assert figure._suptitle.get_text() == "Decision Boundary"


def test_render_kwargs_reach_the_drawing_call(fitted_models) -> None:
    figure = plot_model(fitted_models["linear"].model, plot_type="residual", marker="x", s=12, verbose=False)

    assert figure.axes[0].collections


def test_rcparams_are_restored_after_render(fitted_models) -> None:
    with matplotlib.rc_context({"axes.grid": False, "lines.linewidth": 3.5}):
        plot_model(fitted_models["linear"].model, plot_type="scale_location", verbose=False)

        assert matplotlib.rcParams["axes.grid"] is False
        assert matplotlib.rcParams["lines.linewidth"] == 3.5


def test_rcparams_are_restored_after_failure(fitted_models) -> None:
    with matplotlib.rc_context({"axes.grid": False, "lines.linewidth": 3.5}):
        with pytest.raises(RenderingFailure):
            plot_model(fitted_models["linear"].model, plot_type="residual", bogus_kw=1, verbose=False)

        assert matplotlib.rcParams["axes.grid"] is False
        assert matplotlib.rcParams["lines.linewidth"] == 3.5


def test_previously_active_figure_stays_current(fitted_models) -> None:
    previous = plt.figure()

    figure = plot_model(fitted_models["linear"].model, plot_type="residual", verbose=False)

    assert figure is not previous
    assert plt.gcf() is previous


def test_failed_render_wraps_library_error_and_closes_figure(fitted_models) -> None:
    open_before = set(plt.get_fignums())

    with pytest.raises(RenderingFailure) as excinfo:
        plot_model(fitted_models["linear"].model, plot_type="residual", bogus_kw=1, verbose=False)

    assert excinfo.value.__cause__ is not None
    assert set(plt.get_fignums()) == open_before


def test_repeated_renders_leave_no_open_figures(fitted_models) -> None:
    plt.close("all")

    for _ in range(25):
        figure = plot_model(fitted_models["linear"].model, verbose=False)

    assert plt.get_fignums() == []
    buffer = io.BytesIO()
    figure.savefig(buffer, format="png")
    assert buffer.getvalue().startswith(b"\x89PNG")


def test_regression_decision_boundary_colors_points_by_response(dataset) -> None:
    from sklearn.svm import SVR

    X = dataset[["x1", "x2"]]
    model = SVR().fit(X, dataset["y"])

    figure = plot_model(model, y=dataset["y"], X=X, plot_type="decision_boundary", verbose=False)

    ax = figure.axes[0]
    assert ax.get_legend() is None
    assert len(figure.axes) == 2
    assert figure.axes[1].get_ylabel() == "Response"
