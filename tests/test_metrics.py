"""
Unit tests for metrics module.
"""
import unittest
import pandas as pd
import numpy as np
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from nfl_touchdown_analysis.models.fitted_model import FittedModel
from nfl_touchdown_analysis.utils.metrics import ModelEvaluator, PredictionResult


class TestModelEvaluator(unittest.TestCase):
    """Test cases for ModelEvaluator class."""

    def setUp(self):
        """Set up test fixtures."""
        self.evaluator = ModelEvaluator()

        rng = np.random.default_rng(42)
        n = 40
        self.frame = pd.DataFrame({
            'targets': rng.uniform(10, 150, n),
            'receptions': rng.uniform(5, 100, n),
            'catch_pct': rng.uniform(40, 85, n),
            'yards': rng.uniform(50, 1600, n),
        })
        self.exact = FittedModel(
            name='Exact',
            intercept=0.5,
            coefficients={'targets': 0.02, 'receptions': 0.03, 'catch_pct': 0.0, 'yards': 0.004},
        )
        self.frame['touchdowns'] = self.exact.predict(self.frame)
        self.shifted = FittedModel(
            name='Shifted',
            intercept=1.5,
            coefficients=dict(self.exact.coefficients),
        )

    def test_rmse_exact_match_is_zero(self):
        y = np.array([3.0, 0.0, 7.0, 2.0])
        self.assertEqual(self.evaluator.calculate_rmse(y, y), 0.0)

    def test_rmse_known_value(self):
        """Test RMSE of a constant offset equals the offset."""
        y = np.array([1.0, 2.0, 3.0])
        self.assertAlmostEqual(self.evaluator.calculate_rmse(y, y + 2.0), 2.0)
        self.assertAlmostEqual(self.evaluator.calculate_rmse([0.0, 0.0], [3.0, 4.0]), np.sqrt(12.5))

    def test_rmse_non_negative(self):
        rng = np.random.default_rng(0)
        for _ in range(5):
            a, p = rng.normal(size=20), rng.normal(size=20)
            rmse = self.evaluator.calculate_rmse(a, p)
            self.assertGreater(rmse, 0.0)

    def test_regression_metrics(self):
        """Test metric dict keys and a single-row R² fallback."""
        metrics = self.evaluator.calculate_regression_metrics([1.0, 2.0, 4.0], [1.0, 2.5, 3.5])
        self.assertSetEqual(set(metrics), {'rmse', 'mae', 'r2'})
        self.assertAlmostEqual(metrics['mae'], 1.0 / 3.0)

        single = self.evaluator.calculate_regression_metrics([2.0], [1.0])
        self.assertAlmostEqual(single['rmse'], 1.0)
        self.assertTrue(np.isnan(single['r2']))

    def test_predict(self):
        pred = self.evaluator.predict(self.shifted, self.frame)

        self.assertIsInstance(pred, PredictionResult)
        self.assertEqual(pred.model_name, 'Shifted')
        np.testing.assert_allclose(pred.residuals, -1.0)

        pairs = list(pred.pairs())
        self.assertEqual(len(pairs), len(self.frame))
        self.assertEqual(pairs[0], (pred.actual[0], pred.predicted[0]))
        self.assertListEqual(list(pred.as_frame().columns), ['actual', 'predicted'])

    def test_evaluate_models(self):
        """Test every model is scored on the same rows."""
        results = self.evaluator.evaluate_models([self.exact, self.shifted], self.frame)

        self.assertSetEqual(set(results), {'Exact', 'Shifted'})
        self.assertAlmostEqual(results['Exact']['rmse'], 0.0, places=10)
        self.assertAlmostEqual(results['Shifted']['rmse'], 1.0, places=10)

    def test_compare_models(self):
        """Test model comparison ordering."""
        results = {
            'OLS': {'rmse': 1.8, 'mae': 1.4, 'r2': 0.60},
            'Ridge': {'rmse': 1.7, 'mae': 1.3, 'r2': 0.63},
            'Lasso': {'rmse': 1.9, 'mae': 1.5, 'r2': 0.58},
        }
        table = self.evaluator.compare_models(results)

        self.assertListEqual(list(table.index), ['Ridge', 'OLS', 'Lasso'])
        self.assertListEqual(list(table.columns), ['rmse', 'mae', 'r2', 'rmse_vs_best'])
        self.assertAlmostEqual(table.loc['Ridge', 'rmse_vs_best'], 0.0)
        self.assertAlmostEqual(table.loc['Lasso', 'rmse_vs_best'], 0.2)


if __name__ == '__main__':
    unittest.main()
