from __future__ import annotations

import json

import pytest

from plotpulse.cli.main import build_parser, main
from plotpulse.core.models import PLOT_KIND_NAMES


@pytest.fixture
def dataset_csv(dataset, tmp_path):
    path = tmp_path / "observations.csv"
    dataset.to_csv(path, index=False)
    return path


def test_parse_plot_command() -> None:
    parser = build_parser()
    args = parser.parse_args(
        [
            "plot",
            "sample.csv",
            "--response",
            "outcome",
            "--features",
            "age",
            "dose",
            "--family",
            "mixed",
            "--groups",
            "site",
            "--plot-type",
            "qq",
            "--figsize",
            "8",
            "5",
        ]
    )

    assert args.command == "plot"
    assert args.input == "sample.csv"
    assert args.features == ["age", "dose"]
    assert args.family == "mixed"
    assert args.groups == "site"
    assert args.plot_type == "qq"
    assert args.figsize == [8.0, 5.0]


def test_parser_defaults() -> None:
    parser = build_parser()
    args = parser.parse_args(["plot", "sample.csv", "--response", "outcome"])

    assert args.family == "linear"
    assert args.plot_type == "residual"
    assert args.glm_family == "gaussian"
    assert args.task == "auto"
    assert args.figsize is None
    assert args.interactive is False
    assert args.no_contour is False


def test_parser_rejects_unknown_plot_type() -> None:
    parser = build_parser()

    with pytest.raises(SystemExit):
        parser.parse_args(["plot", "sample.csv", "--response", "outcome", "--plot-type", "banana"])


def test_kinds_command_lists_every_kind(capsys) -> None:
    assert main(["kinds"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert list(payload) == list(PLOT_KIND_NAMES)
    assert payload["decision_boundary"]["families"] == ["svm"]
    assert payload["cooks"]["statistics"] == ["cooks_d"]


def test_explain_flag_prints_context(capsys) -> None:
    assert main(["kinds", "--explain"]) == 0

    assert "diagnostic chart kinds" in capsys.readouterr().out


def test_missing_command_prints_help() -> None:
    assert main([]) == 1


def test_plot_command_saves_pdf(dataset_csv, tmp_path, capsys) -> None:
    target = tmp_path / "charts" / "cooks.pdf"

    code = main(
        [
            "plot",
            str(dataset_csv),
            "--response",
            "y",
            "--features",
            "x1",
            "x2",
            "--plot-type",
            "cooks",
            "--save-path",
            str(target),
            "--create-dir",
            "--quiet",
        ]
    )

    assert code == 0
    assert target.exists()
    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert payload["save_path"] == str(target)
    assert payload["plot_type"] == "cooks"
    assert captured.err == ""


def test_plot_command_writes_interactive_html(dataset_csv, tmp_path, capsys) -> None:
    html = tmp_path / "boundary.html"

    code = main(
        [
            "plot",
            str(dataset_csv),
            "--response",
            "label",
            "--features",
            "x1",
            "x2",
            "--family",
            "svm",
            "--task",
            "classification",
            "--plot-type",
            "decision_boundary",
            "--interactive",
            "--html",
            str(html),
            "--quiet",
        ]
    )

    assert code == 0
    assert html.exists()
    payload = json.loads(capsys.readouterr().out)
    assert payload["html_path"] == str(html)
    assert payload["interactive"] is True


def test_plot_command_reports_unsupported_combination(dataset_csv, capsys) -> None:
    code = main(
        [
            "plot",
            str(dataset_csv),
            "--response",
            "y",
            "--features",
            "x1",
            "x2",
            "--plot-type",
            "partial_dependence",
            "--quiet",
        ]
    )

    assert code == 2
    payload = json.loads(capsys.readouterr().out)
    assert payload["error"] == "UnsupportedCombination"


def test_plot_command_reports_missing_columns(dataset_csv, capsys) -> None:
    code = main(["plot", str(dataset_csv), "--response", "nope", "--quiet"])

    assert code == 2
    assert json.loads(capsys.readouterr().out)["error"] == "InvalidArgument"
