"""
Ordinary least squares fit of touchdowns on the receiving predictors.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd
import statsmodels.api as sm

from nfl_touchdown_analysis.config import config
from nfl_touchdown_analysis.exceptions import SingularMatrixError
from nfl_touchdown_analysis.models.fitted_model import FittedModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OLSResult:
    """Fitted OLS model plus the inference statistics statsmodels gives us."""
    model: FittedModel
    std_errors: pd.Series
    t_values: pd.Series
    p_values: pd.Series
    r_squared: float
    adj_r_squared: float
    n_obs: int
    fitted_values: pd.Series
    residuals: pd.Series

    def summary_frame(self) -> pd.DataFrame:
        """One row per term (intercept first): estimate, SE, t, p."""
        estimates = self.model.as_series()
        return pd.DataFrame({
            "estimate": estimates,
            "std_error": self.std_errors,
            "t_value": self.t_values,
            "p_value": self.p_values,
        })


def design_matrix(X: pd.DataFrame) -> pd.DataFrame:
    """Prepend an intercept column even when a predictor is already constant."""
    return sm.add_constant(X.astype(float), has_constant="add")


def check_full_rank(exog: pd.DataFrame) -> None:
    """Raise SingularMatrixError when the design matrix is rank-deficient."""
    rank = np.linalg.matrix_rank(exog.to_numpy())
    if rank < exog.shape[1]:
        raise SingularMatrixError(
            f"Design matrix has rank {rank} < {exog.shape[1]} columns "
            f"({list(exog.columns)}); predictors are perfectly collinear "
            f"or there are too few rows ({exog.shape[0]})"
        )


class OLSFitter:
    """Closed-form least squares via statsmodels (QR under the hood)."""

    def __init__(self, predictors: Optional[List[str]] = None, target: Optional[str] = None):
        self.predictors = list(predictors) if predictors is not None else list(config.PREDICTORS)
        self.target = target or config.TARGET

    def fit(self, train: pd.DataFrame) -> OLSResult:
        X = train[self.predictors]
        y = train[self.target].astype(float)
        exog = design_matrix(X)
        check_full_rank(exog)

        res = sm.OLS(y, exog).fit(method="qr")
        params = res.params
        model = FittedModel(
            name="OLS",
            intercept=float(params["const"]),
            coefficients={p: float(params[p]) for p in self.predictors},
        )
        rename = {"const": "intercept"}
        result = OLSResult(
            model=model,
            std_errors=res.bse.rename(rename),
            t_values=res.tvalues.rename(rename),
            p_values=res.pvalues.rename(rename),
            r_squared=float(res.rsquared),
            adj_r_squared=float(res.rsquared_adj),
            n_obs=int(res.nobs),
            fitted_values=res.fittedvalues,
            residuals=res.resid,
        )
        logger.info("OLS fit on %d rows: R²=%.4f adj R²=%.4f",
                    result.n_obs, result.r_squared, result.adj_r_squared)
        return result
