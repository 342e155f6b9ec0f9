from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import numpy as np

from plotpulse.core.errors import InvalidArgument, StatisticUnavailable, UnsupportedModelType
from plotpulse.core.models import MODEL_FAMILY_NAMES


def _unwrap(model: Any) -> Any:
    # statsmodels hands back ResultsWrapper objects around the actual results class.
    return getattr(model, "_results", model)


class ModelAdapter(ABC):
    """Capability interface over one fitted-model family.

    Each variant exposes the diagnostic accessors that are well defined for its
    family. Statistics outside ``available_statistics`` raise
    :class:`StatisticUnavailable` instead of returning empty data.
    """

    family = "base"
    requires_features = False
    available_statistics: frozenset[str] = frozenset()

    def __init__(self, model: Any) -> None:
        self.model = model

    @classmethod
    @abstractmethod
    def accepts(cls, model: Any) -> bool:
        raise NotImplementedError

    def is_available(self, statistic: str) -> bool:
        return statistic in self.available_statistics

    def _unavailable(self, statistic: str) -> StatisticUnavailable:
        return StatisticUnavailable(
            f"Statistic '{statistic}' is not defined for '{self.family}' models."
        )

    @abstractmethod
    def fitted_values(self, X: Any = None) -> np.ndarray:
        raise NotImplementedError

    @abstractmethod
    def residuals(self, y: Any = None, X: Any = None) -> np.ndarray:
        raise NotImplementedError

    def standardized_residuals(self) -> np.ndarray:
        raise self._unavailable("std_residuals")

    def leverage(self) -> np.ndarray:
        raise self._unavailable("leverage")

    def cooks_distance(self) -> np.ndarray:
        raise self._unavailable("cooks_d")

    def parameter_count(self) -> int | None:
        return None

    @abstractmethod
    def predict(self, X: Any) -> np.ndarray:
        raise NotImplementedError

    @abstractmethod
    def observation_labels(self, X: Any = None) -> list[str]:
        raise NotImplementedError


class StatsmodelsAdapter(ModelAdapter):
    """Closed-form diagnostics read straight from a statsmodels results object."""

    available_statistics = frozenset({"fitted", "residuals", "std_residuals", "leverage", "cooks_d"})

    def __init__(self, model: Any) -> None:
        super().__init__(model)
        self._influence: Any = None

    @property
    def influence(self) -> Any:
        if self._influence is None:
            self._influence = self.model.get_influence()
        return self._influence

    def fitted_values(self, X: Any = None) -> np.ndarray:
        return np.asarray(self.model.fittedvalues, dtype=float)

    def residuals(self, y: Any = None, X: Any = None) -> np.ndarray:
        return np.asarray(self.model.resid, dtype=float)

    def standardized_residuals(self) -> np.ndarray:
        return np.asarray(self.influence.resid_studentized_internal, dtype=float)

    def leverage(self) -> np.ndarray:
        return np.asarray(self.influence.hat_matrix_diag, dtype=float)

    def cooks_distance(self) -> np.ndarray:
        return np.asarray(self.influence.cooks_distance[0], dtype=float)

    def parameter_count(self) -> int | None:
        return int(np.asarray(self.model.params).size)

    def predict(self, X: Any) -> np.ndarray:
        return np.asarray(self.model.predict(X), dtype=float)

    def observation_labels(self, X: Any = None) -> list[str]:
        row_labels = getattr(getattr(self.model.model, "data", None), "row_labels", None)
        if row_labels is None:
            row_labels = range(1, self.fitted_values().size + 1)
        return [str(label) for label in row_labels]


class LinearModelAdapter(StatsmodelsAdapter):
    family = "linear"

    @classmethod
    def accepts(cls, model: Any) -> bool:
        from statsmodels.regression.linear_model import RegressionResults

        return isinstance(_unwrap(model), RegressionResults)


class GlmAdapter(StatsmodelsAdapter):
    family = "glm"

    @classmethod
    def accepts(cls, model: Any) -> bool:
        from statsmodels.genmod.generalized_linear_model import GLMResults

        return isinstance(_unwrap(model), GLMResults)

    def residuals(self, y: Any = None, X: Any = None) -> np.ndarray:
        return np.asarray(self.model.resid_deviance, dtype=float)

    def standardized_residuals(self) -> np.ndarray:
        return np.asarray(self.influence.resid_studentized, dtype=float)


class MixedModelAdapter(StatsmodelsAdapter):
    family = "mixed"
    available_statistics = frozenset({"fitted", "residuals", "std_residuals"})

    @classmethod
    def accepts(cls, model: Any) -> bool:
        from statsmodels.regression.mixed_linear_model import MixedLMResults

        return isinstance(_unwrap(model), MixedLMResults)

    def standardized_residuals(self) -> np.ndarray:
        residuals = self.residuals()
        return residuals / np.sqrt(float(self.model.scale))

    def leverage(self) -> np.ndarray:
        raise self._unavailable("leverage")

    def cooks_distance(self) -> np.ndarray:
        raise self._unavailable("cooks_d")

    def parameter_count(self) -> int | None:
        return None


class SklearnAdapter(ModelAdapter):
    """Prediction-based diagnostics for scikit-learn estimators.

    Fitted values are predictions on the supplied feature matrix and residuals
    are the supplied response minus those predictions. Residuals only make sense
    for regressors, so classifiers expose no statistics at all.
    """

    requires_features = True

    @classmethod
    def _classes(cls) -> tuple[type, ...]:
        raise NotImplementedError

    @classmethod
    def accepts(cls, model: Any) -> bool:
        return isinstance(model, cls._classes())

    @property
    def is_regressor(self) -> bool:
        from sklearn.base import is_regressor

        return bool(is_regressor(self.model))

    @property
    def available_statistics(self) -> frozenset[str]:  # type: ignore[override]
        if self.is_regressor:
            return frozenset({"fitted", "residuals"})
        return frozenset()

    def _require_features(self, X: Any) -> None:
        if X is None:
            raise InvalidArgument(f"X is required to compute diagnostics for '{self.family}' models.")

    def predict(self, X: Any) -> np.ndarray:
        self._require_features(X)
        return np.asarray(self.model.predict(X))

    def fitted_values(self, X: Any = None) -> np.ndarray:
        if not self.is_regressor:
            raise self._unavailable("fitted")
        return self.predict(X).astype(float)

    def residuals(self, y: Any = None, X: Any = None) -> np.ndarray:
        if not self.is_regressor:
            raise self._unavailable("residuals")
        if y is None:
            raise InvalidArgument(f"y is required to compute residuals for '{self.family}' models.")
        return np.asarray(y, dtype=float).ravel() - self.fitted_values(X)

    def observation_labels(self, X: Any = None) -> list[str]:
        index = getattr(X, "index", None)
        if index is not None:
            return [str(label) for label in index]
        return [str(label) for label in range(1, len(X) + 1)]


class RandomForestAdapter(SklearnAdapter):
    family = "random_forest"

    @classmethod
    def _classes(cls) -> tuple[type, ...]:
        from sklearn.ensemble import (
            ExtraTreesClassifier,
            ExtraTreesRegressor,
            RandomForestClassifier,
            RandomForestRegressor,
        )

        return (RandomForestRegressor, RandomForestClassifier, ExtraTreesRegressor, ExtraTreesClassifier)


class SvmAdapter(SklearnAdapter):
    family = "svm"

    @classmethod
    def _classes(cls) -> tuple[type, ...]:
        from sklearn.svm import SVC, SVR, LinearSVC, LinearSVR, NuSVC, NuSVR

        return (SVC, NuSVC, LinearSVC, SVR, NuSVR, LinearSVR)


class DecisionTreeAdapter(SklearnAdapter):
    family = "decision_tree"

    @classmethod
    def _classes(cls) -> tuple[type, ...]:
        from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

        return (DecisionTreeRegressor, DecisionTreeClassifier)


ADAPTERS: tuple[type[ModelAdapter], ...] = (
    LinearModelAdapter,
    GlmAdapter,
    MixedModelAdapter,
    RandomForestAdapter,
    SvmAdapter,
    DecisionTreeAdapter,
)


def resolve_adapter(model: Any) -> ModelAdapter:
    for adapter_class in ADAPTERS:
        if adapter_class.accepts(model):
            return adapter_class(model)
    raise UnsupportedModelType(
        "This function supports fitted models of the families "
        f"{', '.join(repr(name) for name in MODEL_FAMILY_NAMES)}. "
        f"Got an object of type '{type(model).__name__}'. Please provide a valid model object."
    )
