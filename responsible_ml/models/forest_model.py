"""
Random forest model for the Responsible ML workflow.
"""

from typing import Any

from sklearn.ensemble import RandomForestClassifier

from .sklearn_model import SklearnClassifierModel


class RandomForestModel(SklearnClassifierModel):
    """Probability forest with close-to-default hyper-parameters."""

    def __init__(self, name: str = 'Forest', **kwargs):
        params = {
            'n_estimators': kwargs.pop('n_estimators', 500),
            'max_depth': kwargs.pop('max_depth', None),
            'min_samples_leaf': kwargs.pop('min_samples_leaf', 1),
            'max_features': kwargs.pop('max_features', 'sqrt'),
            'criterion': kwargs.pop('criterion', 'gini'),
            'n_jobs': kwargs.pop('n_jobs', -1),
            'random_state': kwargs.pop('random_state', 42),
        }
        params.update(kwargs)
        super().__init__(name=name, **params)

    def build_model(self) -> Any:
        return RandomForestClassifier(**self.params)
