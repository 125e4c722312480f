"""
Unit tests for classification metrics, curves and model comparison.
"""

import unittest
import numpy as np
import pandas as pd
import tempfile
import os
import sys

# Add the parent directory to the path to import the modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from responsible_ml.core.metrics import (
    auc_safe, classification_metrics, cumulative_gain_frame, lift_curve_frame,
    loss_one_minus_auc, loss_root_mean_square, loss_cross_entropy, loss_accuracy, roc_curve_frame,
)
from responsible_ml.core.evaluator import compare_models, model_performance
from responsible_ml.interpretability import Explainer


class TestClassificationMetrics(unittest.TestCase):
    """Metrics against hand-computed confusion matrices."""

    def setUp(self):
        # TP=2, FN=1, FP=1, TN=2 at cutoff 0.5
        self.y_true = np.array([1, 1, 1, 0, 0, 0])
        self.y_prob = np.array([0.9, 0.6, 0.2, 0.7, 0.3, 0.1])

    def test_confusion_matrix_values(self):
        metrics = classification_metrics(self.y_true, self.y_prob, cutoff=0.5)
        self.assertAlmostEqual(metrics['recall'], 2 / 3)
        self.assertAlmostEqual(metrics['precision'], 2 / 3)
        self.assertAlmostEqual(metrics['f1'], 2 / 3)
        self.assertAlmostEqual(metrics['accuracy'], 4 / 6)
        # 6 of the 9 positive/negative pairs are ranked correctly
        self.assertAlmostEqual(metrics['auc'], 6 / 9)

    def test_cutoff_is_inclusive(self):
        metrics = classification_metrics(np.array([1, 0]), np.array([0.5, 0.4]), cutoff=0.5)
        self.assertEqual(metrics['recall'], 1.0)
        self.assertEqual(metrics['accuracy'], 1.0)

    def test_no_positive_predictions(self):
        metrics = classification_metrics(self.y_true, np.zeros(6), cutoff=0.5)
        self.assertEqual(metrics['precision'], 0.0)
        self.assertEqual(metrics['recall'], 0.0)

    def test_perfect_ranking(self):
        self.assertEqual(auc_safe(np.array([0, 0, 1, 1]), np.array([0.1, 0.2, 0.8, 0.9])), 1.0)

    def test_single_class_auc_is_nan(self):
        self.assertTrue(np.isnan(auc_safe(np.array([1, 1]), np.array([0.2, 0.9]))))

    def test_two_column_probabilities(self):
        proba = np.c_[1 - self.y_prob, self.y_prob]
        self.assertAlmostEqual(auc_safe(self.y_true, proba), 6 / 9)

    def test_length_mismatch(self):
        with self.assertRaises(ValueError):
            classification_metrics(self.y_true, self.y_prob[:3])


class TestCurvesAndLosses(unittest.TestCase):

    def setUp(self):
        self.y_true = np.array([1, 0, 1, 0, 0, 0, 0, 0])
        self.y_prob = np.array([0.9, 0.8, 0.7, 0.4, 0.3, 0.2, 0.1, 0.05])

    def test_roc_frame(self):
        roc = roc_curve_frame(self.y_true, self.y_prob)
        self.assertEqual(roc.columns.tolist(), ['fpr', 'tpr', 'threshold'])
        self.assertEqual(roc['tpr'].iloc[-1], 1.0)

    def test_gain_and_lift(self):
        gain = cumulative_gain_frame(self.y_true, self.y_prob)
        self.assertEqual(gain['gain'].iloc[0], 0.0)
        self.assertEqual(gain['gain'].iloc[-1], 1.0)
        # Top quarter (2 rows) captures one of two positives
        self.assertAlmostEqual(gain.loc[gain['fraction'] == 0.25, 'gain'].iloc[0], 0.5)
        lift = lift_curve_frame(self.y_true, self.y_prob)
        self.assertAlmostEqual(lift['lift'].iloc[0], 4.0)
        self.assertAlmostEqual(lift['lift'].iloc[-1], 1.0)

    def test_losses(self):
        self.assertAlmostEqual(loss_one_minus_auc(np.array([0, 1]), np.array([0.1, 0.9])), 0.0)
        self.assertAlmostEqual(loss_root_mean_square(np.array([0, 1]), np.array([0.0, 0.5])), np.sqrt(0.125))
        self.assertAlmostEqual(loss_accuracy(np.array([0, 1]), np.array([0.6, 0.9])), 0.5)
        self.assertAlmostEqual(loss_cross_entropy(np.array([1]), np.array([np.exp(-1)])), 1.0)


class TestModelComparison(unittest.TestCase):
    """Test model_performance and compare_models on explainers."""

    def setUp(self):
        rng = np.random.default_rng(0)
        self.X = pd.DataFrame({'a': rng.normal(size=200), 'b': rng.normal(size=200)})
        self.y = (self.X['a'] > 0).astype(int).to_numpy()
        self.good = Explainer(lambda X: 1 / (1 + np.exp(-5 * X['a'].to_numpy())), self.X, self.y, label='good')
        self.noise = Explainer(lambda X: np.full(len(X), 0.5), self.X, self.y, label='noise')

    def test_model_performance(self):
        perf = model_performance(self.good)
        self.assertEqual(perf.label, 'good')
        self.assertEqual(perf.metrics['auc'], 1.0)
        self.assertEqual(perf.n_rows, 200)
        self.assertEqual(perf.n_positive, int(self.y.sum()))
        self.assertFalse(perf.roc.empty)
        self.assertEqual(perf.as_row()['model'], 'good')

    def test_compare_models_sorted_and_written(self):
        with tempfile.TemporaryDirectory() as tmp:
            table = compare_models([self.noise, self.good], output_dir=tmp)
            self.assertTrue(os.path.exists(os.path.join(tmp, 'results.csv')))
            with open(os.path.join(tmp, 'RESULTS.md')) as f:
                self.assertIn('good', f.read())
        self.assertEqual(table['model'].tolist(), ['good', 'noise'])
        self.assertEqual(table.columns.tolist()[:6], ['model', 'recall', 'precision', 'f1', 'accuracy', 'auc'])


if __name__ == '__main__':
    unittest.main()
