"""
Unit tests for DataExplorer.
"""

import unittest
import os
import sys

# Add the parent directory to the path to import the modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from responsible_ml.core.data_loader import CovidDataLoader
from responsible_ml.core.explorer import DataExplorer
from responsible_ml.exceptions import DataValidationError


class TestDataExplorer(unittest.TestCase):
    """Test summaries and stratified tables."""

    @classmethod
    def setUpClass(cls):
        cls.df = CovidDataLoader().load_demo(n=800, seed=21)
        cls.explorer = DataExplorer()

    def test_summarize(self):
        summary = self.explorer.summarize(self.df)
        n_positive = int((self.df['Death'] == 'Yes').sum())
        self.assertEqual(summary['n_rows'], 800)
        self.assertEqual(summary['n_positive'], n_positive)
        self.assertAlmostEqual(summary['outcome_rate'], n_positive / 800)
        self.assertLessEqual(summary['age']['min'], summary['age']['median'])
        self.assertLessEqual(summary['age']['median'], summary['age']['max'])
        self.assertIn('Cancer', summary['prevalence'])

    def test_summarize_empty(self):
        with self.assertRaises(DataValidationError):
            self.explorer.summarize(self.df.iloc[0:0])

    def test_stratified_table_layout(self):
        table = self.explorer.stratified_table(self.df, variables=['Age', 'Gender'])
        self.assertEqual(table.columns.tolist(), ['variable', 'level', 'Overall', 'No', 'Yes', 'p_value'])
        self.assertEqual(table.loc[0, 'Overall'], '800')
        age_row = table[table['variable'] == 'Age (mean (SD))'].iloc[0]
        self.assertTrue(0.0 <= age_row['p_value'] <= 1.0)
        gender_rows = table[table['level'].isin(['Female', 'Male'])]
        self.assertEqual(len(gender_rows), 2)

    def test_age_differs_by_outcome(self):
        table = self.explorer.stratified_table(self.df, variables=['Age'])
        self.assertLess(table.loc[1, 'p_value'], 0.001)

    def test_stratified_table_unknown_variable(self):
        with self.assertRaises(DataValidationError):
            self.explorer.stratified_table(self.df, variables=['Weight'])

    def test_outcome_rate_by_age(self):
        rates = self.explorer.outcome_rate_by(self.df, 'Age')
        self.assertEqual(rates.columns.tolist(), ['level', 'n', 'n_positive', 'outcome_rate'])
        self.assertEqual(int(rates['n'].sum()), 800)
        self.assertTrue(rates['outcome_rate'].between(0, 1).all())
        # Older bins die more often than the youngest bins
        self.assertGreater(rates['outcome_rate'].iloc[-1], rates['outcome_rate'].iloc[0])

    def test_outcome_rate_by_category(self):
        rates = self.explorer.outcome_rate_by(self.df, 'Cardiovascular.Diseases')
        self.assertEqual(sorted(rates['level']), ['No', 'Yes'])
        expected = (self.df.loc[self.df['Cardiovascular.Diseases'] == 'Yes', 'Death'] == 'Yes').mean()
        observed = rates.loc[rates['level'] == 'Yes', 'outcome_rate'].iloc[0]
        self.assertAlmostEqual(observed, expected)

    def test_outcome_rate_unknown_column(self):
        with self.assertRaises(DataValidationError):
            self.explorer.outcome_rate_by(self.df, 'Weight')


if __name__ == '__main__':
    unittest.main()
