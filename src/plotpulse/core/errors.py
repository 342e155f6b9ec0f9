from __future__ import annotations


class PlotPulseError(Exception):
    """Base class for every error raised by plotpulse."""


class UnsupportedModelType(PlotPulseError, TypeError):
    pass


class UnsupportedPlotType(PlotPulseError, ValueError):
    pass


class InvalidArgument(PlotPulseError, ValueError):
    pass


class UnsupportedCombination(PlotPulseError, ValueError):
    pass


class RenderingFailure(PlotPulseError, RuntimeError):
    """A statistics or charting library call failed; the original error is ``__cause__``."""


class StatisticUnavailable(PlotPulseError, LookupError):
    """The model family does not define the requested diagnostic statistic."""
