"""
Unit tests for CovidDataLoader and the synthetic demo tables.
"""

import unittest
import pandas as pd
import numpy as np
import tempfile
import os
import sys

# Add the parent directory to the path to import the modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from responsible_ml.core.config import DataConfig
from responsible_ml.core.data_loader import CovidDataLoader
from responsible_ml.data import load_demo
from responsible_ml.exceptions import DataValidationError


def _raw_table():
    return pd.DataFrame({
        'Gender': ['Male', 'female', 'Female', 'Male'],
        'Age': [76, 30, 17, 55],
        'Cardiovascular.Diseases': ['Yes', 'no', 'No', 'NO'],
        'Diabetes': ['No', 'No', 'Yes', 'No'],
        'Neurological.Diseases': ['No', 'No', 'No', 'No'],
        'Kidney.Diseases': ['No', 'No', 'No', 'Yes'],
        'Cancer': ['No', 'Yes', 'No', 'No'],
        'Hospitalization': ['Yes', 'No', 'No', 'Yes'],
        'Fever': ['Yes', 'Yes', 'No', 'No'],
        'Cough': ['No', 'Yes', 'No', 'No'],
        'Death': ['Yes', 'No', 'No', 'no '],
    })


class TestDemoData(unittest.TestCase):
    """Test the deterministic synthetic tables."""

    def test_deterministic(self):
        pd.testing.assert_frame_equal(load_demo(n=200, seed=3), load_demo(n=200, seed=3))

    def test_schema(self):
        df = load_demo(n=300, seed=1)
        config = DataConfig()
        for column in config.features + config.binary_columns + [config.target]:
            self.assertIn(column, df.columns)
        self.assertEqual(len(df), 300)
        self.assertTrue(set(df['Death']) <= {'Yes', 'No'})
        self.assertTrue(df['Age'].between(0, 100).all())

    def test_periods_differ(self):
        spring = load_demo(n=3000, seed=5, period='spring')
        summer = load_demo(n=3000, seed=5, period='summer')
        self.assertGreater(spring['Age'].mean(), summer['Age'].mean())

    def test_unknown_period(self):
        with self.assertRaises(ValueError):
            load_demo(period='winter')


class TestCovidDataLoader(unittest.TestCase):
    """Test loading, validation and encoding."""

    def setUp(self):
        self.loader = CovidDataLoader(DataConfig())
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        import shutil
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_validate_normalizes_labels(self):
        df = self.loader.validate(_raw_table())
        self.assertEqual(df['Cardiovascular.Diseases'].tolist(), ['Yes', 'No', 'No', 'No'])
        self.assertEqual(df['Death'].tolist(), ['Yes', 'No', 'No', 'No'])
        self.assertEqual(df['Gender'].tolist(), ['Male', 'Female', 'Female', 'Male'])

    def test_write_and_load_round_trip(self):
        df = self.loader.load_demo(n=150, seed=11)
        path = os.path.join(self.temp_dir, 'covid_spring.csv')
        self.loader.write_table(df, path)
        with open(path) as f:
            self.assertIn(';', f.readline())
        loaded = self.loader.load_table(path)
        self.assertEqual(len(loaded), 150)
        self.assertEqual(loaded['Death'].tolist(), df['Death'].tolist())

    def test_load_bom_and_padded_header(self):
        raw = _raw_table()
        raw.loc[0, 'Death'] = 'YES'
        header = ';'.join(f" {c} " for c in raw.columns)
        rows = [';'.join(str(v) for v in row) for row in raw.itertuples(index=False)]
        path = os.path.join(self.temp_dir, 'exported.csv')
        with open(path, 'w', encoding='utf-8') as f:
            f.write('\ufeff' + header + '\n' + '\n'.join(rows) + '\n')

        loaded = self.loader.load_table(path)
        self.assertEqual(loaded.columns.tolist(), raw.columns.tolist())
        self.assertEqual(loaded['Death'].tolist(), ['Yes', 'No', 'No', 'No'])
        self.assertEqual(loaded['Age'].tolist(), [76, 30, 17, 55])

    def test_load_train_test(self):
        train_path = os.path.join(self.temp_dir, 'train.csv')
        test_path = os.path.join(self.temp_dir, 'test.csv')
        self.loader.write_table(self.loader.load_demo(n=100, seed=1), train_path)
        self.loader.write_table(self.loader.load_demo(n=80, seed=2, period='summer'), test_path)
        loader = CovidDataLoader(DataConfig(train_path=train_path, test_path=test_path))
        train, test = loader.load_train_test()
        self.assertEqual((len(train), len(test)), (100, 80))

    def test_missing_file(self):
        with self.assertRaises(DataValidationError):
            self.loader.load_table(os.path.join(self.temp_dir, 'missing.csv'))

    def test_missing_column(self):
        with self.assertRaises(DataValidationError):
            self.loader.validate(_raw_table().drop(columns=['Cancer']))

    def test_unknown_yes_no_value(self):
        df = _raw_table()
        df.loc[0, 'Diabetes'] = 'Maybe'
        with self.assertRaises(DataValidationError):
            self.loader.validate(df)

    def test_negative_age(self):
        df = _raw_table()
        df.loc[1, 'Age'] = -4
        with self.assertRaises(DataValidationError):
            self.loader.validate(df)

    def test_non_numeric_age(self):
        df = _raw_table()
        df['Age'] = df['Age'].astype(object)
        df.loc[2, 'Age'] = 'old'
        with self.assertRaises(DataValidationError):
            self.loader.validate(df)

    def test_empty_table(self):
        with self.assertRaises(DataValidationError):
            self.loader.validate(_raw_table().iloc[0:0])

    def test_incomplete_rows_dropped(self):
        df = _raw_table()
        df.loc[3, 'Cancer'] = np.nan
        self.assertEqual(len(self.loader.validate(df)), 3)

    def test_blank_strings_dropped_for_string_dtype(self):
        df = _raw_table().astype({'Cancer': 'string'})
        df.loc[3, 'Cancer'] = '   '
        self.assertEqual(len(self.loader.validate(df)), 3)

    def test_prepare(self):
        X, y = self.loader.prepare(self.loader.validate(_raw_table()))
        self.assertEqual(X.columns.tolist(), DataConfig().features)
        self.assertEqual(X['Gender'].tolist(), [1, 0, 0, 1])
        self.assertEqual(X['Cardiovascular.Diseases'].tolist(), [1, 0, 0, 0])
        self.assertEqual(X['Age'].dtype, np.float64)
        self.assertEqual(y.tolist(), [1, 0, 0, 0])

    def test_encode_single_observation(self):
        X = self.loader.encode_features({
            'Gender': 'Male', 'Age': '76', 'Cardiovascular.Diseases': 'Yes', 'Diabetes': 'No',
            'Neurological.Diseases': 'No', 'Kidney.Diseases': 'No', 'Cancer': 'No',
        })
        self.assertEqual(len(X), 1)
        self.assertEqual(X.iloc[0].to_dict(), {
            'Gender': 1, 'Age': 76.0, 'Cardiovascular.Diseases': 1, 'Diabetes': 0,
            'Neurological.Diseases': 0, 'Kidney.Diseases': 0, 'Cancer': 0,
        })

    def test_encode_missing_feature(self):
        with self.assertRaises(DataValidationError):
            self.loader.encode_features({'Gender': 'Male', 'Age': 50})

    def test_decode_features(self):
        X, _ = self.loader.prepare(self.loader.validate(_raw_table()))
        decoded = self.loader.decode_features(X)
        self.assertEqual(decoded['Gender'].tolist(), ['Male', 'Female', 'Female', 'Male'])
        self.assertEqual(decoded['Cancer'].tolist(), ['No', 'Yes', 'No', 'No'])


if __name__ == '__main__':
    unittest.main()
