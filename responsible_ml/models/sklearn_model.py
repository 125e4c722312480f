"""
Shared plumbing for models backed by a scikit-learn classifier.
"""

from abc import abstractmethod
from typing import Dict, Optional, Union, Any

import numpy as np
import pandas as pd

from .base_model import BaseModel


class SklearnClassifierModel(BaseModel):
    """BaseModel around a scikit-learn estimator exposing predict_proba."""

    @abstractmethod
    def build_model(self) -> Any:
        """Create a fresh, unfitted estimator from self.params."""

    def train(self, X: Union[pd.DataFrame, np.ndarray],
              y: Union[pd.Series, np.ndarray], **kwargs) -> Dict[str, Any]:
        """
        Fit the estimator.

        Args:
            X: Training features
            y: Training targets (0/1)

        Returns:
            Dictionary with training-set metrics
        """
        self.feature_names = None
        X = self._validate_input(X)
        y = self._validate_target(y)
        if len(np.unique(y)) < 2:
            raise ValueError(f"{self.name} needs both classes in the training target")

        self.feature_names = X.columns.tolist()
        self.model = self.build_model()
        self.logger.info(f"Training {self.name} on {X.shape[0]} rows, {X.shape[1]} features")
        self.model.fit(X, y, **kwargs)
        self.is_trained = True

        metrics = self.evaluate(X, y)
        return {'train_' + k: v for k, v in metrics.items()}

    def _predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        proba = self.model.predict_proba(X)
        positive = list(self.model.classes_).index(1)
        return proba[:, positive]

    def get_feature_importance(self) -> Optional[Dict[str, float]]:
        """Impurity-based importance of the fitted estimator."""
        if not self.is_trained or self.feature_names is None:
            return None
        importances = getattr(self.model, 'feature_importances_', None)
        if importances is None:
            return None
        return dict(sorted(zip(self.feature_names, map(float, importances)),
                           key=lambda item: item[1], reverse=True))
