"""
Unit tests for regression diagnostics.
"""
import itertools
import logging
import unittest
import pandas as pd
import numpy as np
import sys
import os

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from nfl_touchdown_analysis.utils.diagnostics import (
    breusch_pagan,
    residual_structure,
    variance_inflation_factors,
)


def orthogonal_design(replicates: int = 3) -> pd.DataFrame:
    """2^4 full factorial in ±1 coding: every pair of columns has zero sample correlation."""
    rows = list(itertools.product([-1.0, 1.0], repeat=4)) * replicates
    return pd.DataFrame(rows, columns=['targets', 'receptions', 'catch_pct', 'yards'])


class TestVarianceInflation(unittest.TestCase):
    """Test cases for the VIF table."""

    def test_uncorrelated_predictors_have_unit_vif(self):
        table = variance_inflation_factors(orthogonal_design())

        np.testing.assert_allclose(table['vif'], 1.0, atol=1e-10)
        np.testing.assert_allclose(table['r_squared'], 0.0, atol=1e-10)
        self.assertFalse(table['flagged'].any())

    def test_one_row_per_predictor(self):
        table = variance_inflation_factors(orthogonal_design())
        self.assertListEqual(table['feature'].tolist(), ['targets', 'receptions', 'catch_pct', 'yards'])

    def test_collinear_predictors_are_flagged_not_raised(self):
        """Test high VIF is advisory: flagged and logged, never an exception."""
        rng = np.random.default_rng(0)
        X = pd.DataFrame({'targets': rng.uniform(10, 150, 100)})
        X['receptions'] = 0.65 * X['targets'] + rng.normal(0, 1, 100)
        X['catch_pct'] = rng.uniform(40, 85, 100)
        X['yards'] = 12 * X['receptions'] + rng.normal(0, 5, 100)

        with self.assertLogs('nfl_touchdown_analysis.utils.diagnostics', level=logging.WARNING):
            table = variance_inflation_factors(X, threshold=5.0)

        flagged = set(table.loc[table['flagged'], 'feature'])
        self.assertTrue({'targets', 'receptions', 'yards'} <= flagged)
        self.assertNotIn('catch_pct', flagged)

    def test_exact_collinearity_gives_infinite_vif(self):
        X = orthogonal_design()
        X['yards'] = X['targets'] + X['receptions']

        table = variance_inflation_factors(X)

        self.assertTrue(table['flagged'].any())
        self.assertGreater(table['vif'].max(), 1e6)

    def test_threshold_is_configurable(self):
        rng = np.random.default_rng(1)
        X = pd.DataFrame({'a': rng.normal(size=200)})
        X['b'] = X['a'] + rng.normal(scale=0.8, size=200)
        X['c'] = rng.normal(size=200)

        loose = variance_inflation_factors(X, threshold=100.0)
        strict = variance_inflation_factors(X, threshold=1.0)

        self.assertFalse(loose['flagged'].any())
        self.assertTrue(strict['flagged'].all())


class TestResidualStructure(unittest.TestCase):
    """Test cases for binned residual spread."""

    def setUp(self):
        rng = np.random.default_rng(3)
        self.fitted = np.linspace(0, 10, 200)
        # noise that grows with the fitted value
        self.residuals = rng.normal(0, 0.1 + 0.2 * self.fitted)

    def test_bins_cover_all_rows(self):
        table = residual_structure(self.fitted, self.residuals, n_bins=5)

        self.assertEqual(len(table), 5)
        self.assertEqual(int(table['count'].sum()), 200)
        self.assertListEqual(list(table.columns),
                             ['bin', 'fitted_mean', 'residual_mean', 'residual_var', 'count'])

    def test_variance_tracks_fan_shape(self):
        table = residual_structure(self.fitted, self.residuals, n_bins=4)
        self.assertGreater(table['residual_var'].iloc[-1], table['residual_var'].iloc[0])

    def test_fewer_unique_fitted_than_bins(self):
        table = residual_structure([1.0, 1.0, 2.0, 2.0], [0.1, -0.1, 0.2, -0.2], n_bins=10)
        self.assertLessEqual(len(table), 2)
        self.assertEqual(int(table['count'].sum()), 4)


class TestBreuschPagan(unittest.TestCase):
    """Test cases for the Breusch–Pagan values."""

    def test_detects_heteroscedastic_noise(self):
        rng = np.random.default_rng(5)
        x = pd.DataFrame({'x': np.linspace(1, 10, 300)})
        resid = rng.normal(0, x['x'].to_numpy())

        result = breusch_pagan(resid, x)

        self.assertSetEqual(set(result), {'lm_stat', 'lm_pvalue', 'f_stat', 'f_pvalue'})
        self.assertLess(result['lm_pvalue'], 0.01)

    def test_homoscedastic_noise_returns_values(self):
        rng = np.random.default_rng(6)
        x = pd.DataFrame({'x': rng.uniform(0, 1, 300)})
        result = breusch_pagan(rng.normal(size=300), x)

        self.assertGreaterEqual(result['lm_pvalue'], 0.0)
        self.assertLessEqual(result['lm_pvalue'], 1.0)


if __name__ == '__main__':
    unittest.main()
