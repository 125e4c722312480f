"""
Hand-written age-band risk score.

The score ignores every feature except age: each patient falls into an age
band with a published relative mortality risk, and the probability is that
relative risk times a base risk. There is nothing to learn; training only
records the feature names so the model can sit next to the fitted ones.
"""

from typing import Dict, Union, Any

import numpy as np
import pandas as pd

from .base_model import BaseModel
from ..config.model_config import CDC_AGE_BREAKS, CDC_AGE_LABELS, CDC_RISK_RATIOS


class CDCRiskModel(BaseModel):
    """Relative risk by age band times a base risk."""

    def __init__(self, base_risk: float = 0.00003, age_column: str = 'Age',
                 age_breaks=CDC_AGE_BREAKS, risk_ratios=CDC_RISK_RATIOS,
                 name: str = 'CDC', **kwargs):
        super().__init__(name=name, base_risk=base_risk, age_column=age_column,
                         age_breaks=tuple(age_breaks), risk_ratios=tuple(risk_ratios), **kwargs)
        if len(risk_ratios) != len(age_breaks) + 1:
            raise ValueError("risk_ratios needs exactly one more entry than age_breaks")
        if list(age_breaks) != sorted(age_breaks):
            raise ValueError("age_breaks must be increasing")
        self.base_risk = float(base_risk)
        self.age_column = age_column
        self.age_breaks = np.asarray(age_breaks, dtype=float)
        self.risk_ratios = np.asarray(risk_ratios, dtype=float)
        self.model = self

    def train(self, X: Union[pd.DataFrame, np.ndarray],
              y: Union[pd.Series, np.ndarray] = None, **kwargs) -> Dict[str, Any]:
        if isinstance(X, pd.DataFrame):
            self.feature_names = X.columns.tolist()
        if self.feature_names is not None and self.age_column not in self.feature_names:
            raise ValueError(f"Column '{self.age_column}' is required by {self.name}")
        self.is_trained = True
        self.logger.info(f"{self.name} ready: base risk {self.base_risk}, {len(self.risk_ratios)} age bands")
        return {'n_samples': int(len(X))}

    def age_band(self, age: Union[np.ndarray, pd.Series]) -> np.ndarray:
        """Index of the age band for each age (bands are right-inclusive)."""
        return np.searchsorted(self.age_breaks, np.asarray(age, dtype=float), side='left')

    def relative_risk(self, age: Union[np.ndarray, pd.Series]) -> np.ndarray:
        return self.risk_ratios[self.age_band(age)]

    def _predict_proba(self, X: pd.DataFrame) -> np.ndarray:
        if self.age_column not in X.columns:
            raise ValueError(f"Column '{self.age_column}' is required by {self.name}")
        return np.clip(self.relative_risk(X[self.age_column]) * self.base_risk, 0.0, 1.0)

    def risk_table(self) -> pd.DataFrame:
        """Age bands with their relative risk and resulting probability."""
        labels = list(CDC_AGE_LABELS) if len(CDC_AGE_LABELS) == len(self.risk_ratios) \
            else [f'band_{i}' for i in range(len(self.risk_ratios))]
        return pd.DataFrame({
            'age_band': labels,
            'upper_bound': list(self.age_breaks) + [np.inf],
            'relative_risk': self.risk_ratios,
            'probability': self.risk_ratios * self.base_risk,
        })
