"""
Unit tests for WorkflowConfig and its sections.
"""

import unittest
import json
import logging
import tempfile
import os
import sys

# Add the parent directory to the path to import the modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from responsible_ml.core.config import WorkflowConfig, DataConfig, MODEL_KINDS
from responsible_ml.config.model_config import CDC_RISK_RATIOS, TunedForestConfig, get_model_config
from responsible_ml.exceptions import ConfigurationError


class TestWorkflowConfigDefaults(unittest.TestCase):
    """Test the built-in defaults."""

    def setUp(self):
        self.config = WorkflowConfig(config_dict={})

    def test_data_defaults(self):
        """Test default data section."""
        self.assertEqual(self.config.data.separator, ';')
        self.assertEqual(self.config.data.target, 'Death')
        self.assertEqual(self.config.data.positive_label, 'Yes')
        self.assertEqual(len(self.config.data.features), 7)
        self.assertNotIn('Hospitalization', self.config.data.features)
        self.assertEqual(self.config.data.feature_binary_columns[0], 'Cardiovascular.Diseases')

    def test_model_defaults(self):
        """Test default model and tuning sections."""
        self.assertEqual(list(self.config.models.enabled), list(MODEL_KINDS))
        self.assertEqual(self.config.models.cdc.base_risk, 0.00003)
        self.assertEqual(tuple(self.config.models.cdc.risk_ratios), CDC_RISK_RATIOS)
        self.assertEqual(self.config.tuning.scoring, 'roc_auc')
        self.assertEqual(self.config.tuning.cv_folds, 5)

    def test_explanation_defaults(self):
        """Test default explanation section."""
        self.assertEqual(self.config.explanation.B, 10)
        self.assertEqual(self.config.explanation.cutoff, 0.5)
        self.assertEqual(self.config.explanation.new_observation['Age'], 76)
        self.assertEqual(self.config.explanation.new_observation['Cardiovascular.Diseases'], 'Yes')

    def test_logging_level_is_int(self):
        """Test that the logging level is resolved to an int."""
        self.assertEqual(self.config.logging.level, logging.INFO)


class TestWorkflowConfigLoading(unittest.TestCase):
    """Test building configurations from dicts and files."""

    def test_round_trip(self):
        """Test that to_dict output rebuilds the same configuration."""
        config = WorkflowConfig(config_dict={
            'models': {'enabled': ['cdc', 'tree'], 'random_state': 7, 'tree': {'max_depth': 3}},
            'explanation': {'B': 3, 'profile_variables': ['Age', 'Gender']},
            'logging': {'level': 'DEBUG'},
        })
        rebuilt = WorkflowConfig(config_dict=config.to_dict())
        self.assertEqual(rebuilt.to_dict(), config.to_dict())
        self.assertEqual(rebuilt.models.tree.max_depth, 3)
        self.assertEqual(rebuilt.models.tree.random_state, 7)
        self.assertEqual(rebuilt.tuning.random_state, 7)
        self.assertEqual(rebuilt.logging.level, logging.DEBUG)

    def test_save_and_from_file(self):
        """Test saving to JSON and loading it back."""
        config = WorkflowConfig(config_dict={'explanation': {'B': 4}})
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'nested', 'config.json')
            config.save(path)
            with open(path) as f:
                self.assertEqual(json.load(f)['explanation']['B'], 4)
            loaded = WorkflowConfig.from_file(path)
        self.assertEqual(loaded.explanation.B, 4)
        self.assertEqual(tuple(loaded.tuning.max_depth_range), TunedForestConfig().max_depth_range)

    def test_missing_file(self):
        with self.assertRaises(ConfigurationError):
            WorkflowConfig.from_file('does/not/exist.json')

    def test_invalid_json(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'broken.json')
            with open(path, 'w') as f:
                f.write('{not json')
            with self.assertRaises(ConfigurationError):
                WorkflowConfig.from_file(path)

    def test_with_output_dir(self):
        config = WorkflowConfig(config_dict={}).with_output_dir('out')
        self.assertEqual(config.output.results_dir, 'out')
        self.assertEqual(config.output.plots_dir, os.path.join('out', 'plots'))
        self.assertEqual(config.output.models_dir, os.path.join('out', 'models'))


class TestWorkflowConfigValidation(unittest.TestCase):
    """Test that invalid values raise ConfigurationError."""

    def assertInvalid(self, config_dict):
        with self.assertRaises(ConfigurationError):
            WorkflowConfig(config_dict=config_dict)

    def test_unknown_section(self):
        self.assertInvalid({'training': {}})

    def test_unknown_key(self):
        self.assertInvalid({'data': {'sheet': 'x'}})

    def test_non_positive_B(self):
        self.assertInvalid({'explanation': {'B': 0}})

    def test_cutoff_out_of_range(self):
        self.assertInvalid({'explanation': {'cutoff': 1.0}})

    def test_cv_folds(self):
        self.assertInvalid({'tuning': {'cv_folds': 1}})

    def test_unknown_model(self):
        self.assertInvalid({'models': {'enabled': ['cdc', 'xgboost']}})

    def test_target_as_feature(self):
        features = DataConfig().features + ['Death']
        self.assertInvalid({'data': {'features': features}})

    def test_risk_ratio_length(self):
        self.assertInvalid({'models': {'cdc': {'risk_ratios': [1, 2]}}})

    def test_unknown_logging_level(self):
        self.assertInvalid({'logging': {'level': 'LOUD'}})


class TestModelConfigPresets(unittest.TestCase):

    def test_get_model_config(self):
        self.assertEqual(get_model_config('tree').max_depth, 4)
        self.assertEqual(get_model_config('forest').n_estimators, 500)
        with self.assertRaises(ValueError):
            get_model_config('svm')


if __name__ == '__main__':
    unittest.main()
