"""
Decision tree model for the Responsible ML workflow.
"""

from typing import Any

from sklearn.tree import DecisionTreeClassifier, export_text

from .sklearn_model import SklearnClassifierModel


class DecisionTreeModel(SklearnClassifierModel):
    """Single shallow CART tree; readable enough to print."""

    def __init__(self, name: str = 'Tree', **kwargs):
        """
        Initialize the decision tree.

        Args:
            name: Model label
            **kwargs: DecisionTreeClassifier parameters
        """
        params = {
            'max_depth': kwargs.pop('max_depth', 4),
            'min_samples_leaf': kwargs.pop('min_samples_leaf', 20),
            'min_impurity_decrease': kwargs.pop('min_impurity_decrease', 0.0001),
            'criterion': kwargs.pop('criterion', 'gini'),
            'class_weight': kwargs.pop('class_weight', None),
            'random_state': kwargs.pop('random_state', 42),
        }
        params.update(kwargs)
        super().__init__(name=name, **params)

    def build_model(self) -> Any:
        return DecisionTreeClassifier(**self.params)

    def export_text(self) -> str:
        """Tree rules as indented text."""
        self._check_is_trained()
        return export_text(self.model, feature_names=self.feature_names, show_weights=True)

    @property
    def n_leaves(self) -> int:
        self._check_is_trained()
        return int(self.model.get_n_leaves())
