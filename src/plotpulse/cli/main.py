from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from plotpulse.cli.help_text import EXPLANATIONS
from plotpulse.config.settings import PlotSettings
from plotpulse.core.errors import PlotPulseError
from plotpulse.core.models import MODEL_FAMILY_NAMES, PLOT_KIND_NAMES, THEMES, ChartRequest
from plotpulse.data.loader import DataLoader
from plotpulse.dispatch.dispatcher import PlotDispatcher
from plotpulse.modeling.fitting import GLM_FAMILIES, FitSpec, ModelFitter
from plotpulse.plotting.registry import PLOT_KINDS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plotpulse",
        description="Diagnostic charts for fitted regression and classification models.",
    )
    subparsers = parser.add_subparsers(dest="command")

    kinds = subparsers.add_parser("kinds", help="List chart kinds and the model families they support.")
    kinds.add_argument("--explain", action="store_true", help="Show method context.")

    plot = subparsers.add_parser("plot", help="Fit a model and render one diagnostic chart.")
    _add_plot_arguments(plot)

    return parser


def _add_plot_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("input", type=str, help="Path to input dataset.")
    parser.add_argument("--response", type=str, required=True, help="Response column.")
    parser.add_argument("--features", nargs="*", default=[], help="Feature columns.")
    parser.add_argument(
        "--family",
        choices=list(MODEL_FAMILY_NAMES),
        default="linear",
        help="Model family to fit.",
    )
    parser.add_argument(
        "--formula",
        type=str,
        help="Patsy formula for statsmodels families. Defaults to 'response ~ features'.",
    )
    parser.add_argument("--groups", type=str, help="Grouping column for mixed-effects models.")
    parser.add_argument(
        "--glm-family",
        choices=list(GLM_FAMILIES),
        default="gaussian",
        help="Error distribution for GLM fits.",
    )
    parser.add_argument(
        "--task",
        choices=["auto", "regression", "classification"],
        default="auto",
        help="Estimator type for scikit-learn families. 'auto' classifies non-numeric responses.",
    )
    parser.add_argument(
        "--plot-type",
        choices=list(PLOT_KIND_NAMES),
        default="residual",
        help="Diagnostic chart kind.",
    )
    parser.add_argument(
        "--figsize",
        nargs=2,
        type=float,
        metavar=("WIDTH", "HEIGHT"),
        help="Canvas size in inches. Defaults to the settings file value.",
    )
    parser.add_argument("--color", type=str, help="Point, bar or line color.")
    parser.add_argument("--title", type=str, help="Chart title.")
    parser.add_argument("--xlab", type=str, help="X-axis label.")
    parser.add_argument("--ylab", type=str, help="Y-axis label.")
    parser.add_argument("--theme", choices=list(THEMES), help="Visual theme.")
    parser.add_argument("--no-contour", action="store_true", help="Hide decision boundary contour lines.")
    parser.add_argument("--save-path", type=str, help="PDF destination for static charts.")
    parser.add_argument(
        "--create-dir",
        action="store_true",
        help="Create the --save-path directory when it does not exist.",
    )
    parser.add_argument("--interactive", action="store_true", help="Build an interactive plotly chart.")
    parser.add_argument("--html", type=str, help="Write the interactive chart to this HTML file.")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress log lines.")
    parser.add_argument("--settings", type=str, help="Path to settings YAML.")
    parser.add_argument("--explain", action="store_true", help="Show method context.")


def _build_request(args: argparse.Namespace, settings: PlotSettings, fitted: Any) -> ChartRequest:
    plot_params: dict[str, Any] = {"contour": not args.no_contour}
    for key, value in (("main", args.title), ("xlab", args.xlab), ("ylab", args.ylab), ("theme", args.theme)):
        if value is not None:
            plot_params[key] = value
    return ChartRequest(
        model=fitted.model,
        y=fitted.y,
        X=fitted.X,
        plot_type=args.plot_type,
        figsize=tuple(args.figsize) if args.figsize else settings.figsize,
        color=args.color or settings.color,
        save_path=args.save_path,
        plot_params=plot_params,
        interactive=args.interactive,
        verbose=settings.verbose and not args.quiet,
        create_dir=args.create_dir or settings.create_dir,
    )


def _print_json(payload: dict[str, Any]) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _print_explain(command: str | None) -> bool:
    if not command:
        return False
    explanation = EXPLANATIONS.get(command)
    if explanation is None:
        return False
    print(explanation)
    return True


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.explain:
        _print_explain(args.command)
        return 0

    if args.command == "kinds":
        _print_json(
            {
                kind: {
                    "title": spec.title,
                    "statistics": list(spec.statistics),
                    "families": sorted(spec.families),
                }
                for kind, spec in PLOT_KINDS.items()
            }
        )
        return 0

    if args.command == "plot":
        settings = PlotSettings.from_yaml(Path(args.settings) if args.settings else None)
        try:
            dataset = DataLoader().load(Path(args.input))
            fitted = ModelFitter().run(
                dataset,
                FitSpec(
                    family=args.family,
                    response=args.response,
                    features=args.features or [],
                    formula=args.formula,
                    groups=args.groups,
                    glm_family=args.glm_family,
                    task=args.task,
                ),
            )
            request = _build_request(args, settings, fitted)
            figure = PlotDispatcher(settings=settings).run(request)
        except PlotPulseError as exc:
            _print_json({"error": type(exc).__name__, "message": str(exc)})
            return 2

        html_path = None
        if args.interactive and args.html:
            html_path = Path(args.html)
            figure.write_html(html_path)

        saved = bool(request.save_path) and not request.interactive and Path(request.save_path).exists()
        _print_json(
            {
                "family": args.family,
                "plot_type": args.plot_type,
                "interactive": args.interactive,
                "save_path": request.save_path if saved else None,
                "html_path": str(html_path) if html_path else None,
            }
        )
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
