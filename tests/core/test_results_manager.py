"""
Unit tests for ReportBuilder and the atomic file helpers.
"""

import unittest
import json
import tempfile
import shutil
import os
import sys

import pandas as pd

# Add the parent directory to the path to import the modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..'))

from responsible_ml.core.io_utils import slugify, write_atomic
from responsible_ml.core.results_manager import ReportBuilder


class TestIoUtils(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_write_atomic_creates_directories(self):
        path = os.path.join(self.temp_dir, 'a', 'b', 'out.txt')
        write_atomic(path, 'hello')
        with open(path) as f:
            self.assertEqual(f.read(), 'hello')
        self.assertEqual([n for n in os.listdir(os.path.dirname(path)) if n.startswith('.tmp_')], [])

    def test_slugify(self):
        self.assertEqual(slugify('Tuned forest'), 'tuned_forest')
        self.assertEqual(slugify('CDC'), 'cdc')
        self.assertEqual(slugify('  '), 'model')


class TestReportBuilder(unittest.TestCase):
    """Test report assembly and artifacts."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.report = ReportBuilder(self.temp_dir, title='Test report')

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_sections_render_in_order(self):
        self.report.add_section('Data').add_text('First paragraph.').add_section('Models')
        text = self.report.render()
        self.assertTrue(text.startswith('# Test report'))
        self.assertLess(text.index('## Data'), text.index('First paragraph.'))
        self.assertLess(text.index('First paragraph.'), text.index('## Models'))

    def test_table_uses_markdown(self):
        self.report.add_table(pd.DataFrame({'model': ['CDC'], 'auc': [0.9]}), caption='Performance')
        text = self.report.render()
        self.assertIn('*Performance*', text)
        self.assertIn('| model', text)
        self.assertIn('0.9000', text)

    def test_empty_table(self):
        self.report.add_table(pd.DataFrame())
        self.assertIn('_No rows._', self.report.render())

    def test_image_paths_are_relative(self):
        plot = os.path.join(self.temp_dir, 'plots', 'roc.png')
        os.makedirs(os.path.dirname(plot))
        open(plot, 'wb').close()
        self.report.add_image(plot, 'ROC').add_image(None, 'missing')
        text = self.report.render()
        self.assertIn('![ROC](plots/roc.png)', text)
        self.assertNotIn('missing', text)

    def test_artifacts_and_write(self):
        path = self.report.save_artifact('importance', pd.DataFrame({'x': [1]}), 'Tuned forest')
        self.assertTrue(path.endswith('importance_tuned_forest.csv'))
        self.report.save_json('config', {'B': 10})
        with open(os.path.join(self.temp_dir, 'config.json')) as f:
            self.assertEqual(json.load(f), {'B': 10})

        report_path = self.report.write()
        with open(report_path) as f:
            text = f.read()
        self.assertIn('## Artifacts', text)
        self.assertIn('importance_tuned_forest.csv', text)


if __name__ == '__main__':
    unittest.main()
