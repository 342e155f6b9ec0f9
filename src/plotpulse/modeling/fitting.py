from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import pandas as pd

from plotpulse.core.errors import InvalidArgument

Task = Literal["auto", "regression", "classification"]
GLM_FAMILIES = ("gaussian", "binomial", "poisson", "gamma")


@dataclass
class FitSpec:
    family: str
    response: str
    features: list[str] = field(default_factory=list)
    formula: str | None = None
    groups: str | None = None
    glm_family: str = "gaussian"
    task: Task = "auto"
    random_state: int = 0


@dataclass
class FittedModel:
    model: Any
    y: Any = None
    X: Any = None


class ModelFitter:
    """Fit one of the supported model families from a tabular dataset."""

    def build_formula(self, spec: FitSpec) -> str:
        if spec.formula:
            return spec.formula
        rhs = " + ".join(spec.features) if spec.features else "1"
        return f"{spec.response} ~ {rhs}"

    def run(self, dataset: pd.DataFrame, spec: FitSpec) -> FittedModel:
        missing = [column for column in [spec.response, *spec.features] if column not in dataset.columns]
        if missing:
            raise InvalidArgument(f"Columns not found in dataset: {', '.join(missing)}")

        if spec.family == "linear":
            return self._fit_linear(dataset, spec)
        if spec.family == "glm":
            return self._fit_glm(dataset, spec)
        if spec.family == "mixed":
            return self._fit_mixed(dataset, spec)
        if spec.family in {"random_forest", "svm", "decision_tree"}:
            return self._fit_estimator(dataset, spec)
        raise InvalidArgument(f"Unknown model family: {spec.family}")

    def _fit_linear(self, dataset: pd.DataFrame, spec: FitSpec) -> FittedModel:
        import statsmodels.formula.api as smf

        model = smf.ols(formula=self.build_formula(spec), data=dataset).fit()
        return FittedModel(model=model)

    def _fit_glm(self, dataset: pd.DataFrame, spec: FitSpec) -> FittedModel:
        import statsmodels.api as sm
        import statsmodels.formula.api as smf

        families = {
            "gaussian": sm.families.Gaussian,
            "binomial": sm.families.Binomial,
            "poisson": sm.families.Poisson,
            "gamma": sm.families.Gamma,
        }
        if spec.glm_family not in families:
            raise InvalidArgument(
                f"Unknown GLM family '{spec.glm_family}'. Choose from: {', '.join(GLM_FAMILIES)}"
            )
        model = smf.glm(
            formula=self.build_formula(spec),
            data=dataset,
            family=families[spec.glm_family](),
        ).fit()
        return FittedModel(model=model)

    def _fit_mixed(self, dataset: pd.DataFrame, spec: FitSpec) -> FittedModel:
        import statsmodels.formula.api as smf

        if not spec.groups:
            raise InvalidArgument("Mixed-effects models need a grouping column (--groups).")
        if spec.groups not in dataset.columns:
            raise InvalidArgument(f"Grouping column not found in dataset: {spec.groups}")
        model = smf.mixedlm(
            self.build_formula(spec),
            dataset,
            groups=dataset[spec.groups],
        ).fit()
        return FittedModel(model=model)

    def _is_classification(self, response: pd.Series, task: Task) -> bool:
        if task == "auto":
            return not pd.api.types.is_numeric_dtype(response) or pd.api.types.is_bool_dtype(response)
        return task == "classification"

    def _fit_estimator(self, dataset: pd.DataFrame, spec: FitSpec) -> FittedModel:
        from sklearn.ensemble import RandomForestClassifier, RandomForestRegressor
        from sklearn.svm import SVC, SVR
        from sklearn.tree import DecisionTreeClassifier, DecisionTreeRegressor

        if not spec.features:
            raise InvalidArgument(f"'{spec.family}' models need at least one feature column (--features).")

        frame = dataset[[spec.response, *spec.features]].dropna()
        X = frame[spec.features]
        y = frame[spec.response]
        classification = self._is_classification(y, spec.task)

        if spec.family == "random_forest":
            estimator_class = RandomForestClassifier if classification else RandomForestRegressor
            estimator = estimator_class(n_estimators=100, random_state=spec.random_state)
        elif spec.family == "svm":
            estimator = SVC(kernel="rbf") if classification else SVR(kernel="rbf")
        else:
            estimator_class = DecisionTreeClassifier if classification else DecisionTreeRegressor
            estimator = estimator_class(random_state=spec.random_state)

        estimator.fit(X, y)
        return FittedModel(model=estimator, y=y, X=X)
