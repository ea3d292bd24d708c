"""
Unit tests for the OLS fitter.
"""
import unittest
import dataclasses
import pandas as pd
import numpy as np
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from nfl_touchdown_analysis.models.ols import OLSFitter, OLSResult
from nfl_touchdown_analysis.exceptions import SingularMatrixError


class TestOLSFitter(unittest.TestCase):
    """Test cases for OLSFitter."""

    def setUp(self):
        rng = np.random.default_rng(42)
        n = 200
        self.df = pd.DataFrame({
            'targets': rng.uniform(10, 150, n),
            'receptions': rng.uniform(5, 100, n),
            'catch_pct': rng.uniform(40, 85, n),
            'yards': rng.uniform(50, 1600, n),
        })
        self.true_coefs = {'targets': 0.02, 'receptions': 0.03, 'catch_pct': -0.01, 'yards': 0.005}
        signal = 0.5 + sum(self.df[k] * v for k, v in self.true_coefs.items())
        self.df['touchdowns'] = signal + rng.normal(0, 0.5, n)

    def test_recovers_simple_line(self):
        """Test y = 2 + 3x with zero noise is recovered exactly."""
        x = np.linspace(0, 10, 25)
        df = pd.DataFrame({'x': x, 'y': 2 + 3 * x})

        result = OLSFitter(predictors=['x'], target='y').fit(df)

        self.assertAlmostEqual(result.model.intercept, 2.0, places=8)
        self.assertAlmostEqual(result.model.coefficients['x'], 3.0, places=8)
        self.assertAlmostEqual(result.r_squared, 1.0, places=10)

    def test_recovers_four_predictors_without_noise(self):
        df = self.df.copy()
        df['touchdowns'] = 0.5 + sum(df[k] * v for k, v in self.true_coefs.items())

        result = OLSFitter().fit(df)

        self.assertAlmostEqual(result.model.intercept, 0.5, places=8)
        for name, value in self.true_coefs.items():
            self.assertAlmostEqual(result.model.coefficients[name], value, places=8)

    def test_result_statistics(self):
        """Test the result carries SE, R² and adjusted R²."""
        result = OLSFitter().fit(self.df)

        self.assertIsInstance(result, OLSResult)
        self.assertEqual(result.n_obs, 200)
        self.assertListEqual(list(result.std_errors.index),
                             ['intercept', 'targets', 'receptions', 'catch_pct', 'yards'])
        self.assertTrue((result.std_errors > 0).all())
        self.assertGreater(result.r_squared, 0.9)
        self.assertLess(result.adj_r_squared, result.r_squared)
        self.assertEqual(len(result.residuals), 200)

        table = result.summary_frame()
        self.assertListEqual(list(table.columns), ['estimate', 'std_error', 't_value', 'p_value'])

    def test_residuals_sum_to_zero(self):
        result = OLSFitter().fit(self.df)
        self.assertAlmostEqual(float(result.residuals.sum()), 0.0, places=6)

    def test_predict_matches_fitted_values(self):
        result = OLSFitter().fit(self.df)
        np.testing.assert_allclose(result.model.predict(self.df), result.fitted_values.to_numpy())

    def test_perfect_collinearity_raises(self):
        """Test a duplicated predictor raises instead of dropping a column."""
        df = self.df.copy()
        df['yards'] = 2 * df['targets'] + 3 * df['receptions']

        with self.assertRaises(SingularMatrixError):
            OLSFitter().fit(df)

    def test_constant_predictor_raises(self):
        """Test a predictor collinear with the intercept raises."""
        df = self.df.copy()
        df['catch_pct'] = 65.0

        with self.assertRaises(SingularMatrixError):
            OLSFitter().fit(df)

    def test_too_few_rows_raises(self):
        with self.assertRaises(SingularMatrixError):
            OLSFitter().fit(self.df.head(4))

    def test_model_is_immutable(self):
        model = OLSFitter().fit(self.df).model

        with self.assertRaises(dataclasses.FrozenInstanceError):
            model.intercept = 0.0
        with self.assertRaises(TypeError):
            model.coefficients['yards'] = 1.0


if __name__ == '__main__':
    unittest.main()
