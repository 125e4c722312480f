"""
Tests for permutation variable importance.
"""

import unittest
import numpy as np
import pandas as pd
import sys
import os

# Add the parent directory to the path to import responsible_ml
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from responsible_ml.core.data_loader import CovidDataLoader
from responsible_ml.interpretability import Explainer, model_parts
from responsible_ml.interpretability.model_parts import BASELINE, FULL_MODEL
from responsible_ml.models import CDCRiskModel
from responsible_ml.exceptions import ExplanationError


class TestModelParts(unittest.TestCase):
    """Permutation importance on the age-only risk score."""

    @classmethod
    def setUpClass(cls):
        loader = CovidDataLoader()
        X, y = loader.prepare(loader.load_demo(n=600, seed=4))
        cls.explainer = Explainer(CDCRiskModel().fit(X), X, y, label='CDC')

    def test_layout(self):
        importance = model_parts(self.explainer, B=3, N=300, random_state=0)
        result = importance.result
        self.assertEqual(result.columns.tolist(), ['variable', 'permutation', 'dropout_loss', 'label'])
        self.assertEqual(sorted(result['permutation'].unique().tolist()), [0, 1, 2, 3])
        # 7 variables plus the two special rows, for the mean and each round
        self.assertEqual(len(result), 9 * 4)
        mean = importance.mean_importance()
        self.assertEqual(mean['variable'].iloc[0], FULL_MODEL)
        self.assertEqual(mean['variable'].iloc[-1], BASELINE)

    def test_unused_variable_equals_full_model(self):
        importance = model_parts(self.explainer, B=2, N=None, random_state=1)
        result = importance.result
        full = result[result['variable'] == FULL_MODEL].set_index('permutation')['dropout_loss']
        for variable in ['Gender', 'Cancer', 'Diabetes']:
            rows = result[result['variable'] == variable].set_index('permutation')['dropout_loss']
            np.testing.assert_allclose(rows.sort_index(), full.sort_index())

    def test_age_is_most_important(self):
        importance = model_parts(self.explainer, B=3, random_state=2)
        self.assertEqual(importance.ranking()[0], 'Age')
        mean = importance.mean_importance().set_index('variable')['dropout_loss']
        self.assertGreater(mean['Age'], importance.full_model_loss())
        self.assertGreater(mean[BASELINE], importance.full_model_loss())

    def test_difference_type(self):
        importance = model_parts(self.explainer, B=2, type='difference', random_state=3)
        mean = importance.mean_importance().set_index('variable')['dropout_loss']
        self.assertAlmostEqual(mean[FULL_MODEL], 0.0)
        self.assertAlmostEqual(mean['Gender'], 0.0)
        self.assertGreater(mean['Age'], 0.0)

    def test_ratio_type(self):
        importance = model_parts(self.explainer, B=2, type='ratio', random_state=3)
        mean = importance.mean_importance().set_index('variable')['dropout_loss']
        self.assertAlmostEqual(mean[FULL_MODEL], 1.0)

    def test_variable_groups(self):
        importance = model_parts(self.explainer, B=2, random_state=5, variable_groups={
            'age': ['Age'], 'comorbidities': ['Cardiovascular.Diseases', 'Diabetes', 'Cancer'],
        })
        self.assertEqual(set(importance.ranking()), {'age', 'comorbidities'})

    def test_same_seed_same_result(self):
        first = model_parts(self.explainer, B=2, N=200, random_state=9).result
        second = model_parts(self.explainer, B=2, N=200, random_state=9).result
        pd.testing.assert_frame_equal(first, second)

    def test_named_loss(self):
        importance = model_parts(self.explainer, loss_function='root_mean_square', B=1, random_state=0)
        self.assertEqual(importance.loss_name, 'loss_root_mean_square')

    def test_invalid_arguments(self):
        with self.assertRaises(ExplanationError):
            model_parts(self.explainer, type='percent')
        with self.assertRaises(ExplanationError):
            model_parts(self.explainer, B=0)
        with self.assertRaises(ExplanationError):
            model_parts(self.explainer, loss_function='hinge')
        with self.assertRaises(ExplanationError):
            model_parts(self.explainer, variables=['Weight'])
        with self.assertRaises(ExplanationError):
            model_parts(Explainer(self.explainer.model, self.explainer.data))


if __name__ == '__main__':
    unittest.main()
