"""
Base model class for the Responsible ML workflow.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Union, Any

import numpy as np
import pandas as pd

from ..core.metrics import classification_metrics
from ..exceptions import ModelNotFittedError


class BaseModel(ABC):
    """Abstract base class for all binary classifiers in the workflow."""

    def __init__(self, name: str = None, **kwargs):
        """
        Initialize the base model.

        Args:
            name: Model label used in tables, plots and explainers
            **kwargs: Additional model-specific parameters
        """
        self.name = name or self.__class__.__name__
        self.logger = logging.getLogger(f'responsible_ml.models.{self.name}')
        self.model = None
        self.is_trained = False
        self.feature_names: Optional[List[str]] = None

        self.params = kwargs
        self.logger.info(f"Initialized {self.name} with parameters: {kwargs}")

    def fit(self, X: Union[pd.DataFrame, np.ndarray],
            y: Union[pd.Series, np.ndarray] = None, **kwargs) -> 'BaseModel':
        """Fit the model (sklearn-style alias for train)."""
        self.train(X, y, **kwargs)
        return self

    @abstractmethod
    def train(self, X: Union[pd.DataFrame, np.ndarray],
              y: Union[pd.Series, np.ndarray], **kwargs) -> Dict[str, Any]:
        """
        Train the model.

        Args:
            X: Training features
            y: Training targets (0/1)
            **kwargs: Additional training parameters

        Returns:
            Dictionary containing training metrics
        """

    @abstractmethod
    def _predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        """Probability of the positive class for validated input."""

    def predict_proba(self, X: Union[pd.DataFrame, np.ndarray]) -> np.ndarray:
        """
        Probability of the positive class.

        Args:
            X: Input features

        Returns:
            1-D array of probabilities
        """
        self._check_is_trained()
        X = self._validate_input(X)
        return np.asarray(self._predict_proba(X), dtype=float).reshape(-1)

    def predict(self, X: Union[pd.DataFrame, np.ndarray], cutoff: float = 0.5) -> np.ndarray:
        """Hard 0/1 labels at the given probability cutoff."""
        return (self.predict_proba(X) >= cutoff).astype(int)

    def evaluate(self, X: Union[pd.DataFrame, np.ndarray],
                 y: Union[pd.Series, np.ndarray], cutoff: float = 0.5) -> Dict[str, float]:
        """
        Evaluate the model.

        Args:
            X: Test features
            y: Test targets
            cutoff: Probability cutoff for the label-based metrics

        Returns:
            Dictionary containing evaluation metrics
        """
        metrics = classification_metrics(np.asarray(y), self.predict_proba(X), cutoff=cutoff)
        self.logger.info(f"{self.name} evaluation: " +
                         ", ".join(f"{k}={v:.4f}" for k, v in metrics.items()))
        return metrics

    def get_params(self) -> Dict[str, Any]:
        """Get model parameters."""
        return self.params.copy()

    def _check_is_trained(self) -> None:
        if not self.is_trained:
            raise ModelNotFittedError(f"{self.name} must be trained before predicting")

    def _validate_input(self, X: Union[pd.DataFrame, np.ndarray]) -> pd.DataFrame:
        """
        Validate and convert input data.

        Training remembers the feature names; later calls must provide the
        same columns (extra columns are dropped, order is restored).

        Args:
            X: Input features

        Returns:
            DataFrame with the training columns
        """
        if isinstance(X, pd.DataFrame):
            frame = X
        elif isinstance(X, np.ndarray):
            if X.ndim == 1:
                X = X.reshape(1, -1)
            columns = self.feature_names or [f'feature_{i}' for i in range(X.shape[1])]
            if len(columns) != X.shape[1]:
                raise ValueError(f"Expected {len(columns)} features, got {X.shape[1]}")
            frame = pd.DataFrame(X, columns=columns)
        else:
            raise ValueError(f"X must be pandas DataFrame or numpy array, got {type(X)}")

        if self.feature_names is not None:
            missing = [c for c in self.feature_names if c not in frame.columns]
            if missing:
                raise ValueError(f"Missing feature columns for {self.name}: {missing}")
            frame = frame[self.feature_names]

        if frame.isna().any().any():
            self.logger.warning("NaN values detected in features")
        return frame

    def _validate_target(self, y: Union[pd.Series, np.ndarray]) -> np.ndarray:
        y = np.asarray(y).reshape(-1)
        labels = set(np.unique(y).tolist())
        if not labels <= {0, 1}:
            raise ValueError(f"Target must be encoded as 0/1, got labels {sorted(labels)}")
        return y.astype(int)

    def get_feature_importance(self) -> Optional[Dict[str, float]]:
        """Get impurity-based feature importance if the model has one."""
        return None

    def __call__(self, X: Union[pd.DataFrame, np.ndarray]) -> np.ndarray:
        return self.predict_proba(X)

    def __str__(self) -> str:
        return f"{self.name}(trained={self.is_trained})"

    def __repr__(self) -> str:
        return self.__str__()
