from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
import pandas as pd  # noqa: E402
import pytest  # noqa: E402

from plotpulse.modeling.fitting import FittedModel  # noqa: E402


def _diagnostic_dataset(n: int = 60, seed: int = 42) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    groups = np.repeat([f"site_{idx}" for idx in range(6)], n // 6)
    group_effect = np.repeat(rng.normal(0, 1.0, 6), n // 6)
    x1 = rng.normal(0, 1, n)
    x2 = rng.normal(5, 2, n)
    y = 1.5 + 2.0 * x1 - 0.7 * x2 + group_effect + rng.normal(0, 0.5, n)
    count = rng.poisson(np.exp(0.3 + 0.4 * x1))
    label = (x1 + 0.5 * (x2 - 5.0) + rng.normal(0, 0.3, n) > 0).astype(int)
    return pd.DataFrame(
        {"y": y, "x1": x1, "x2": x2, "count": count, "label": label, "site": groups}
    )


@pytest.fixture(scope="session")
def dataset() -> pd.DataFrame:
    return _diagnostic_dataset()


@pytest.fixture(scope="session")
def fitted_models(dataset: pd.DataFrame) -> dict[str, FittedModel]:
    import statsmodels.api as sm
    import statsmodels.formula.api as smf
    from sklearn.ensemble import RandomForestRegressor
    from sklearn.svm import SVC
    from sklearn.tree import DecisionTreeRegressor

    X = dataset[["x1", "x2"]]
    return {
        "linear": FittedModel(model=smf.ols("y ~ x1 + x2", data=dataset).fit()),
        "glm": FittedModel(
            model=smf.glm("count ~ x1 + x2", data=dataset, family=sm.families.Poisson()).fit()
        ),
        "mixed": FittedModel(
            model=smf.mixedlm("y ~ x1 + x2", dataset, groups=dataset["site"]).fit()
        ),
        "random_forest": FittedModel(
            model=RandomForestRegressor(n_estimators=20, random_state=0).fit(X, dataset["y"]),
            y=dataset["y"],
            X=X,
        ),
        "svm": FittedModel(
            model=SVC(kernel="rbf").fit(X, dataset["label"]),
            y=dataset["label"],
            X=X,
        ),
        "decision_tree": FittedModel(
            model=DecisionTreeRegressor(max_depth=3, random_state=0).fit(X, dataset["y"]),
            y=dataset["y"],
            X=X,
        ),
    }


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close("all")
