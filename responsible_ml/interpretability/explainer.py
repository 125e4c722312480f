"""
Uniform explainer wrapper.

Every explanation procedure reaches a model only through an Explainer: a
predict function returning the probability of the positive class, the
reference data the model is explained against, the true labels, and a label
used in tables and plots. This lets the hand-written risk score and the
fitted classifiers be treated as the same kind of black box.

Importance, profiles and break-down attributions run in dalex. Each
Explainer builds the matching dalex.Explainer on first use, over a float
copy of the data so that grid values can be written into any column.
"""

import logging
from typing import Any, Callable, List, Optional, Union

import dalex as dx
import numpy as np
import pandas as pd

from ..exceptions import ExplanationError

logger = logging.getLogger(__name__)

PredictFunction = Callable[[Any, pd.DataFrame], np.ndarray]


def default_predict_function(model: Any, X: pd.DataFrame) -> np.ndarray:
    """Positive-class probability from predict_proba, or the model called directly."""
    if hasattr(model, 'predict_proba'):
        proba = np.asarray(model.predict_proba(X), dtype=float)
        if proba.ndim == 2:
            # sklearn estimators return one column per class
            classes = list(getattr(model, 'classes_', [0, 1]))
            return proba[:, classes.index(1) if 1 in classes else -1]
        return proba
    if callable(model):
        return np.asarray(model(X), dtype=float).reshape(-1)
    raise ExplanationError(f"Cannot derive a predict function for {type(model).__name__}")


class Explainer:
    """
    Model wrapper with a uniform calling convention.

    Attributes:
        model: The wrapped model (any object)
        data: Reference data (feature matrix) used by the explanations
        y: True 0/1 labels for data
        predict_function: Callable (model, X) -> probabilities
        label: Name shown in tables and plots
    """

    def __init__(self,
                 model: Any,
                 data: pd.DataFrame,
                 y: Optional[Union[pd.Series, np.ndarray]] = None,
                 predict_function: Optional[PredictFunction] = None,
                 label: Optional[str] = None):
        if not isinstance(data, pd.DataFrame):
            raise ExplanationError(f"data must be a pandas DataFrame, got {type(data).__name__}")
        if data.empty:
            raise ExplanationError("data must not be empty")
        if y is not None:
            y = np.asarray(y).reshape(-1)
            if len(y) != len(data):
                raise ExplanationError(f"data has {len(data)} rows but y has {len(y)}")

        self.model = model
        self.data = data.reset_index(drop=True)
        self.y = y
        self.predict_function = predict_function or default_predict_function
        self.label = label or getattr(model, 'name', None) or type(model).__name__
        self._y_hat: Optional[np.ndarray] = None
        self._dalex: Optional[dx.Explainer] = None

        logger.info(f"Explainer '{self.label}' created: {len(self.data)} rows, "
                    f"{self.data.shape[1]} variables, target {'set' if y is not None else 'missing'}")

    @property
    def feature_names(self) -> List[str]:
        return self.data.columns.tolist()

    def predict(self, X: Union[pd.DataFrame, np.ndarray]) -> np.ndarray:
        """Probabilities for new data, as a 1-D float array."""
        if isinstance(X, np.ndarray):
            X = pd.DataFrame(np.atleast_2d(X), columns=self.feature_names)
        missing = [c for c in self.feature_names if c not in X.columns]
        if missing:
            raise ExplanationError(f"Observation is missing variables: {missing}")
        preds = np.asarray(self.predict_function(self.model, X[self.feature_names]), dtype=float)
        return preds.reshape(-1)

    def _predict_for_dalex(self, model: Any, X: pd.DataFrame) -> np.ndarray:
        return np.asarray(self.predict_function(model, X), dtype=float).reshape(-1)

    @property
    def dalex(self) -> dx.Explainer:
        """The dalex.Explainer behind the explanation procedures (built lazily)."""
        if self._dalex is None:
            self._dalex = dx.Explainer(
                self.model,
                self.data.astype(float),
                self.y,
                predict_function=self._predict_for_dalex,
                label=self.label,
                model_type='classification',
                precalculate=False,
                verbose=False,
            )
            logger.debug(f"dalex explainer created for '{self.label}'")
        return self._dalex

    def to_dalex_frame(self, observation: pd.DataFrame) -> pd.DataFrame:
        """Observation rows in the column order and dtype the dalex explainer uses."""
        return observation[self.feature_names].astype(float).reset_index(drop=True)

    @property
    def y_hat(self) -> np.ndarray:
        """Predictions on the reference data (cached)."""
        if self._y_hat is None:
            self._y_hat = self.predict(self.data)
        return self._y_hat

    def residuals(self) -> np.ndarray:
        """y - y_hat on the reference data."""
        self._require_y()
        return self.y.astype(float) - self.y_hat

    def _require_y(self) -> None:
        if self.y is None:
            raise ExplanationError(f"Explainer '{self.label}' has no target; pass y to use this procedure")

    def check_observation(self, new_observation: Union[pd.DataFrame, pd.Series, dict]) -> pd.DataFrame:
        """Normalize an observation to a DataFrame with the explainer's columns."""
        if isinstance(new_observation, dict):
            new_observation = pd.DataFrame([new_observation])
        elif isinstance(new_observation, pd.Series):
            new_observation = new_observation.to_frame().T
        if not isinstance(new_observation, pd.DataFrame):
            raise ExplanationError(f"Unsupported observation type {type(new_observation).__name__}")
        missing = [c for c in self.feature_names if c not in new_observation.columns]
        if missing:
            raise ExplanationError(f"Observation is missing variables: {missing}")
        observation = new_observation[self.feature_names].reset_index(drop=True)
        return observation.astype({c: self.data[c].dtype for c in self.feature_names}, errors='ignore')

    def check_variables(self, variables: Optional[List[str]]) -> List[str]:
        """Validate a variable subset; None means all variables."""
        if variables is None:
            return self.feature_names
        if isinstance(variables, str):
            variables = [variables]
        unknown = [v for v in variables if v not in self.feature_names]
        if unknown:
            raise ExplanationError(f"Unknown variables for '{self.label}': {unknown}")
        return list(variables)

    def __repr__(self) -> str:
        return f"Explainer(label={self.label!r}, rows={len(self.data)})"


def format_value(value: Any) -> str:
    """Display form of a feature value: whole floats lose the trailing .0."""
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return value
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return str(int(value))
    if isinstance(value, (float, np.floating)):
        return f"{value:.4g}"
    return str(value)


def explain(model: Any, data: pd.DataFrame, y=None, predict_function=None, label=None) -> Explainer:
    """Convenience constructor mirroring Explainer(...)."""
    return Explainer(model, data, y=y, predict_function=predict_function, label=label)
