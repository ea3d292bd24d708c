"""
Regression diagnostics: multicollinearity (VIF) and residual structure.

Everything here is advisory. Thresholds only produce log warnings and a
`flagged` column; nothing raises.
"""
from __future__ import annotations

import logging
from typing import Dict, Optional

import numpy as np
import pandas as pd
import statsmodels.api as sm
from statsmodels.stats.diagnostic import het_breuschpagan
from statsmodels.stats.outliers_influence import variance_inflation_factor

from nfl_touchdown_analysis.config import config

logger = logging.getLogger(__name__)


def variance_inflation_factors(
    X: pd.DataFrame,
    *,
    threshold: Optional[float] = None,
) -> pd.DataFrame:
    """
    VIF_j = 1 / (1 - R²_j), with R²_j from regressing predictor j on the others
    (intercept included).

    Returns
    -------
    pd.DataFrame
        Columns: feature, vif, r_squared, flagged. Perfectly collinear
        predictors come back as ``inf`` rather than raising.
    """
    threshold = config.VIF_THRESHOLD if threshold is None else threshold
    exog = sm.add_constant(X.astype(float), has_constant="add")
    values = exog.to_numpy()

    rows = []
    with np.errstate(divide="ignore", invalid="ignore"):
        for i, col in enumerate(exog.columns):
            if col == "const":
                continue
            vif = float(variance_inflation_factor(values, i))
            r2 = 1.0 - 1.0 / vif if np.isfinite(vif) and vif != 0 else 1.0
            rows.append({"feature": col, "vif": vif, "r_squared": r2})

    table = pd.DataFrame(rows)
    table["flagged"] = table["vif"] > threshold
    for _, row in table[table["flagged"]].iterrows():
        logger.warning("High multicollinearity: VIF(%s) = %.2f > %.1f",
                       row["feature"], row["vif"], threshold)
    return table


def residual_structure(
    fitted: pd.Series | np.ndarray,
    residuals: pd.Series | np.ndarray,
    *,
    n_bins: Optional[int] = None,
) -> pd.DataFrame:
    """
    Bin observations by fitted-value quantile and summarise residual spread.

    A residual variance that climbs with the fitted mean is the usual
    heteroscedasticity signature; interpreting it is left to the reader.
    """
    n_bins = n_bins or config.RESIDUAL_BINS
    frame = pd.DataFrame({
        "fitted": np.asarray(fitted, dtype=float),
        "residual": np.asarray(residuals, dtype=float),
    })
    n_bins = max(1, min(n_bins, frame["fitted"].nunique()))
    frame["bin"] = pd.qcut(frame["fitted"], q=n_bins, labels=False, duplicates="drop")

    table = (
        frame.groupby("bin")
        .agg(
            fitted_mean=("fitted", "mean"),
            residual_mean=("residual", "mean"),
            residual_var=("residual", "var"),
            count=("residual", "size"),
        )
        .reset_index()
    )
    return table


def breusch_pagan(residuals, exog: pd.DataFrame) -> Dict[str, float]:
    """Breusch–Pagan LM and F statistics with p-values (informational only)."""
    exog_c = sm.add_constant(exog.astype(float), has_constant="add")
    lm, lm_p, fval, f_p = het_breuschpagan(np.asarray(residuals, dtype=float), exog_c)
    return {
        "lm_stat": float(lm),
        "lm_pvalue": float(lm_p),
        "f_stat": float(fval),
        "f_pvalue": float(f_p),
    }
