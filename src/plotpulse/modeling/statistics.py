from __future__ import annotations

from typing import Any, Iterable

import pandas as pd

from plotpulse.modeling.adapters import ModelAdapter


class DiagnosticStatistics:
    """Build the request-scoped frame of diagnostic statistics a chart needs."""

    def run(
        self,
        adapter: ModelAdapter,
        statistics: Iterable[str],
        y: Any = None,
        X: Any = None,
    ) -> pd.DataFrame:
        columns: dict[str, Any] = {}
        for statistic in statistics:
            if statistic == "fitted":
                columns["fitted"] = adapter.fitted_values(X)
            elif statistic == "residuals":
                columns["residuals"] = adapter.residuals(y, X)
            elif statistic == "std_residuals":
                columns["std_residuals"] = adapter.standardized_residuals()
            elif statistic == "leverage":
                columns["leverage"] = adapter.leverage()
            elif statistic == "cooks_d":
                columns["cooks_d"] = adapter.cooks_distance()
            else:
                raise KeyError(f"Unknown diagnostic statistic: {statistic}")

        frame = pd.DataFrame(columns)
        if X is not None or not adapter.requires_features:
            labels = adapter.observation_labels(X)
        else:
            labels = [str(position) for position in range(1, len(frame) + 1)]
        if not columns:
            frame = pd.DataFrame(index=range(len(labels)))
        frame.insert(0, "observation", labels)
        return frame
