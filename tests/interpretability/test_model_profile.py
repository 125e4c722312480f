"""
Tests for partial dependence, local dependence and accumulated local effects.
"""

import unittest
import numpy as np
import pandas as pd
import sys
import os

# Add the parent directory to the path to import responsible_ml
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from responsible_ml.core.data_loader import CovidDataLoader
from responsible_ml.interpretability import Explainer, model_profile
from responsible_ml.models import CDCRiskModel, DecisionTreeModel
from responsible_ml.exceptions import ExplanationError


class TestModelProfile(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        loader = CovidDataLoader()
        X, y = loader.prepare(loader.load_demo(n=500, seed=12))
        cls.X = X
        cls.cdc = Explainer(CDCRiskModel().fit(X), X, y, label='CDC')
        cls.tree = Explainer(DecisionTreeModel(max_depth=3).fit(X, y), X, y, label='Tree')

    def test_partial_layout(self):
        profiles = model_profile(self.cdc, variables=['Age', 'Gender'], N=50, grid_points=21, random_state=0)
        self.assertEqual(profiles.result.columns.tolist(), ['variable', 'x', 'yhat', 'group', 'label'])
        age = profiles.profile('Age')
        self.assertLessEqual(len(age), 21)
        self.assertEqual(profiles.profile('Gender')['x'].tolist(), [0.0, 1.0])
        self.assertEqual(profiles.type, 'partial')
        self.assertEqual(len(profiles.cp_profiles.observations), 50)

    def test_unused_variable_is_flat(self):
        profiles = model_profile(self.cdc, variables=['Gender', 'Cancer'], N=80, random_state=1)
        for variable in ['Gender', 'Cancer']:
            yhat = profiles.profile(variable)['yhat'].to_numpy()
            self.assertAlmostEqual(yhat.max() - yhat.min(), 0.0)

    def test_partial_matches_risk_score(self):
        """For an age-only model the partial dependence is the score itself."""
        profiles = model_profile(self.cdc, variables=['Age'], N=None, grid_points=101)
        age = profiles.profile('Age')
        expected = self.cdc.model.relative_risk(age['x']) * self.cdc.model.base_risk
        np.testing.assert_allclose(age['yhat'], expected)

    def test_partial_is_monotone_in_age_after_first_band(self):
        profiles = model_profile(self.cdc, variables=['Age'], N=100, random_state=2)
        age = profiles.profile('Age')
        yhat = age.loc[age['x'] >= 5, 'yhat'].to_numpy()
        self.assertTrue(np.all(np.diff(yhat) >= -1e-12))

    def test_accumulated(self):
        profiles = model_profile(self.cdc, variables=['Age', 'Gender'], type='accumulated', N=200, random_state=3)
        age = profiles.profile('Age')['yhat'].to_numpy()
        gender = profiles.profile('Gender')['yhat'].to_numpy()
        self.assertGreater(age[-1], age[len(age) // 2])
        self.assertAlmostEqual(gender.max() - gender.min(), 0.0)

    def test_conditional(self):
        profiles = model_profile(self.tree, variables=['Age'], type='conditional', N=200, random_state=4)
        age = profiles.profile('Age')
        self.assertFalse(age['yhat'].isna().any())
        self.assertEqual(profiles.type, 'conditional')

    def test_groups(self):
        profiles = model_profile(self.tree, variables=['Age'], groups='Gender', N=200, random_state=5)
        self.assertEqual(sorted(profiles.result['group'].unique().tolist()), ['0', '1'])
        self.assertFalse(profiles.profile('Age', group='1').empty)

    def test_invalid_arguments(self):
        with self.assertRaises(ExplanationError):
            model_profile(self.cdc, type='marginal')
        with self.assertRaises(ExplanationError):
            model_profile(self.cdc, variables=['Weight'])
        with self.assertRaises(ExplanationError):
            model_profile(self.cdc, groups='Region')


if __name__ == '__main__':
    unittest.main()
