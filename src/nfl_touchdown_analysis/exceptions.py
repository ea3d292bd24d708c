"""
Error types raised by the touchdown analysis pipeline.
"""
from sklearn.exceptions import ConvergenceWarning as _SklearnConvergenceWarning


class DataLoadError(ValueError):
    """Input spreadsheet is missing, unreadable, malformed or empty after filtering."""


class SingularMatrixError(ValueError):
    """OLS design matrix is rank-deficient (perfectly collinear predictors)."""


class ConvergenceWarning(_SklearnConvergenceWarning):
    """Coordinate descent stopped at max_iter before reaching tolerance.

    Non-fatal: the last iterate is kept and the run continues.
    """
