"""
Tests for ceteris-paribus profiles.
"""

import unittest
import numpy as np
import pandas as pd
import sys
import os

# Add the parent directory to the path to import responsible_ml
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from responsible_ml.core.data_loader import CovidDataLoader
from responsible_ml.core.config import ExplanationConfig
from responsible_ml.interpretability import Explainer, predict_profile
from responsible_ml.interpretability.predict_profile import calculate_variable_split
from responsible_ml.models import CDCRiskModel, DecisionTreeModel
from responsible_ml.exceptions import ExplanationError


class TestVariableSplit(unittest.TestCase):

    def test_few_values_kept(self):
        data = pd.DataFrame({'flag': [0, 1, 1, 0], 'age': [10.0, 20.0, 30.0, 40.0]})
        splits = calculate_variable_split(data, ['flag', 'age'], grid_points=5)
        self.assertEqual(splits['flag'].tolist(), [0, 1])
        self.assertEqual(splits['age'].tolist(), [10.0, 20.0, 30.0, 40.0])

    def test_quantiles_for_many_values(self):
        data = pd.DataFrame({'age': np.arange(100, dtype=float)})
        grid = calculate_variable_split(data, ['age'], grid_points=11)['age']
        self.assertEqual(len(grid), 11)
        self.assertEqual((grid[0], grid[-1]), (0.0, 99.0))

    def test_too_few_grid_points(self):
        with self.assertRaises(ExplanationError):
            calculate_variable_split(pd.DataFrame({'a': [1, 2]}), ['a'], grid_points=1)


class TestPredictProfile(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        loader = CovidDataLoader()
        X, y = loader.prepare(loader.load_demo(n=400, seed=17))
        cls.X = X
        cls.observation = loader.encode_features(ExplanationConfig().new_observation)
        cls.cdc = Explainer(CDCRiskModel().fit(X), X, y, label='CDC')
        cls.tree = Explainer(DecisionTreeModel(max_depth=3).fit(X, y), X, y, label='Tree')

    def test_passes_through_prediction(self):
        for explainer in (self.cdc, self.tree):
            profiles = predict_profile(explainer, self.observation, variables=['Age', 'Gender'], grid_points=20)
            observed = profiles.observations.iloc[0]
            for variable in ['Age', 'Gender']:
                line = profiles.profile(variable)
                at_observed = line.loc[line['x'] == float(observed[variable]), 'yhat']
                self.assertEqual(len(at_observed), 1)
                self.assertAlmostEqual(at_observed.iloc[0], observed['_yhat_'])

    def test_risk_score_profile(self):
        profiles = predict_profile(self.cdc, self.observation, variables=['Age'],
                                   variable_splits={'Age': [17, 18, 76, 90]})
        line = profiles.profile('Age')
        self.assertEqual(line['x'].tolist(), [17.0, 18.0, 76.0, 90.0])
        np.testing.assert_allclose(line['yhat'], np.array([1, 15, 2800, 7900]) * 0.00003)

    def test_flat_for_unused_variable(self):
        profiles = predict_profile(self.cdc, self.observation, variables=['Cancer'])
        self.assertEqual(profiles.profile('Cancer')['yhat'].nunique(), 1)

    def test_several_observations(self):
        rows = self.X.iloc[:3]
        profiles = predict_profile(self.tree, rows, variables=['Age'], grid_points=10)
        self.assertEqual(sorted(profiles.result['_ids_'].unique().tolist()), [0, 1, 2])
        self.assertEqual(profiles.observations['_ids_'].tolist(), [0, 1, 2])
        self.assertEqual(profiles.result.columns.tolist(), ['_ids_', 'variable', 'x', 'yhat', 'label'])

    def test_without_observed_values(self):
        profiles = predict_profile(self.cdc, self.observation, variables=['Age'],
                                   variable_splits={'Age': [10, 20]}, include_observed=False)
        self.assertEqual(profiles.profile('Age')['x'].tolist(), [10.0, 20.0])

    def test_invalid_split(self):
        with self.assertRaises(ExplanationError):
            predict_profile(self.cdc, self.observation, variables=['Age'], variable_splits={'Gender': [0, 1]})


if __name__ == '__main__':
    unittest.main()
