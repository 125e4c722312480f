"""
Random forest with hyper-parameters chosen by cross-validated random search.
"""

from typing import Dict, List, Optional, Tuple, Union, Any

import numpy as np
import pandas as pd
from scipy.stats import randint, uniform
from sklearn.ensemble import RandomForestClassifier
from sklearn.model_selection import RandomizedSearchCV, StratifiedKFold

from .sklearn_model import SklearnClassifierModel


class TunedRandomForestModel(SklearnClassifierModel):
    """
    Random search over forest size, depth, leaf size and split criterion.

    Each candidate is scored by stratified k-fold AUC on the training data;
    the best candidate is refitted on all training rows and used for
    prediction.
    """

    def __init__(self,
                 name: str = 'Tuned forest',
                 n_iter: int = 10,
                 cv_folds: int = 5,
                 scoring: str = 'roc_auc',
                 n_jobs: int = -1,
                 random_state: int = 42,
                 n_estimators_range: Tuple[int, int] = (50, 500),
                 max_depth_range: Tuple[int, int] = (1, 10),
                 min_samples_leaf_range: Tuple[float, float] = (0.01, 0.1),
                 criteria: Optional[List[str]] = None,
                 **kwargs):
        super().__init__(name=name, n_iter=n_iter, cv_folds=cv_folds, scoring=scoring,
                         n_jobs=n_jobs, random_state=random_state,
                         n_estimators_range=tuple(n_estimators_range),
                         max_depth_range=tuple(max_depth_range),
                         min_samples_leaf_range=tuple(min_samples_leaf_range),
                         criteria=list(criteria or ['gini', 'entropy']),
                         **kwargs)
        self.search: Optional[RandomizedSearchCV] = None

    def param_distributions(self) -> Dict[str, Any]:
        """Search space in RandomizedSearchCV format (bounds inclusive)."""
        n_lo, n_hi = self.params['n_estimators_range']
        d_lo, d_hi = self.params['max_depth_range']
        l_lo, l_hi = self.params['min_samples_leaf_range']
        if not (0.0 < l_lo <= l_hi < 1.0):
            raise ValueError(f"min_samples_leaf_range must be fractions in (0, 1), got {(l_lo, l_hi)}")
        return {
            'n_estimators': randint(n_lo, n_hi + 1),
            'max_depth': randint(d_lo, d_hi + 1),
            'min_samples_leaf': uniform(loc=l_lo, scale=l_hi - l_lo),
            'criterion': list(self.params['criteria']),
        }

    def build_model(self) -> RandomizedSearchCV:
        cv = StratifiedKFold(n_splits=self.params['cv_folds'], shuffle=True,
                             random_state=self.params['random_state'])
        base = RandomForestClassifier(random_state=self.params['random_state'],
                                      n_jobs=self.params['n_jobs'])
        return RandomizedSearchCV(
            base,
            param_distributions=self.param_distributions(),
            n_iter=self.params['n_iter'],
            scoring=self.params['scoring'],
            cv=cv,
            refit=True,
            random_state=self.params['random_state'],
            n_jobs=1,
        )

    def train(self, X: Union[pd.DataFrame, np.ndarray],
              y: Union[pd.Series, np.ndarray], **kwargs) -> Dict[str, Any]:
        self.feature_names = None
        X = self._validate_input(X)
        y = self._validate_target(y)
        if np.bincount(y, minlength=2).min() < self.params['cv_folds']:
            raise ValueError(f"{self.name} needs at least {self.params['cv_folds']} rows of each class "
                             f"for {self.params['cv_folds']}-fold cross-validation")

        self.feature_names = X.columns.tolist()
        self.search = self.build_model()
        self.logger.info(f"Tuning {self.name}: {self.params['n_iter']} candidates, "
                         f"{self.params['cv_folds']}-fold CV scored by {self.params['scoring']}")
        self.search.fit(X, y, **kwargs)
        self.model = self.search.best_estimator_
        self.is_trained = True

        self.logger.info(f"Best {self.params['scoring']}: {self.search.best_score_:.4f} "
                         f"with {self.best_params_}")
        metrics = self.evaluate(X, y)
        result = {'train_' + k: v for k, v in metrics.items()}
        result['cv_best_score'] = float(self.search.best_score_)
        return result

    @property
    def best_params_(self) -> Dict[str, Any]:
        self._check_is_trained()
        return dict(self.search.best_params_)

    @property
    def best_score_(self) -> float:
        self._check_is_trained()
        return float(self.search.best_score_)

    def cv_results(self) -> pd.DataFrame:
        """One row per candidate with its parameters and CV score, best first."""
        self._check_is_trained()
        results = pd.DataFrame(self.search.cv_results_)
        columns = [c for c in results.columns if c.startswith('param_')]
        table = results[columns + ['mean_test_score', 'std_test_score', 'rank_test_score']]
        table = table.rename(columns={c: c[len('param_'):] for c in columns})
        return table.sort_values('rank_test_score').reset_index(drop=True)
