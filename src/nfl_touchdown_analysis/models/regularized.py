"""
Cross-validated ridge and lasso regression for touchdowns.

Predictors are standardized with training statistics, a descending geometric
penalty grid is built from λ_max, k-fold CV scores every grid value, and the
model is refit on the full training set at λ_min or λ_1se.

Penalty scale follows the elastic-net convention used by sklearn's path
functions::

    (1 / 2n) * ||y - Xw||²  +  λ * l1_ratio * ||w||₁  +  (λ / 2) * (1 - l1_ratio) * ||w||²

so the same λ value means the same thing for both penalties.
"""
from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from sklearn.exceptions import ConvergenceWarning as SklearnConvergenceWarning
from sklearn.linear_model import enet_path
from sklearn.model_selection import KFold
from sklearn.preprocessing import StandardScaler

from nfl_touchdown_analysis.config import config
from nfl_touchdown_analysis.exceptions import ConvergenceWarning
from nfl_touchdown_analysis.models.fitted_model import FittedModel

logger = logging.getLogger(__name__)

L1_RATIOS: Dict[str, float] = {"ridge": 0.0, "lasso": 1.0}
SELECTION_RULES = ("lambda_min", "lambda_1se")


@dataclass(frozen=True)
class CVResult:
    """Cross-validated error for every candidate penalty (grid is descending)."""
    lambdas: NDArray[np.float64]
    cv_mean: NDArray[np.float64]
    cv_se: NDArray[np.float64]
    fold_errors: NDArray[np.float64]      # shape (n_folds, n_lambdas)
    lambda_min: float
    lambda_1se: float

    @property
    def n_folds(self) -> int:
        return int(self.fold_errors.shape[0])

    def index_of(self, lam: float) -> int:
        return int(np.argmin(np.abs(self.lambdas - lam)))

    def error_at(self, lam: float) -> Tuple[float, float]:
        """(cv mean, cv standard error) at the grid point nearest `lam`."""
        i = self.index_of(lam)
        return float(self.cv_mean[i]), float(self.cv_se[i])

    def select(self, rule: str) -> float:
        if rule == "lambda_min":
            return self.lambda_min
        if rule == "lambda_1se":
            return self.lambda_1se
        raise ValueError(f"Unknown penalty selection rule '{rule}'; use one of {SELECTION_RULES}")

    def as_frame(self) -> pd.DataFrame:
        return pd.DataFrame({
            "lambda": self.lambdas,
            "log_lambda": np.log(self.lambdas),
            "cv_mse": self.cv_mean,
            "cv_se": self.cv_se,
        })


@dataclass(frozen=True)
class RegularizedResult:
    """Final refit plus everything needed to reproduce / plot it."""
    model: FittedModel
    cv: CVResult
    selection: str
    scaler: StandardScaler
    standardized_coefficients: pd.Series

    @property
    def penalty(self) -> float:
        return float(self.model.penalty)

    def standardize(self, frame: pd.DataFrame) -> pd.DataFrame:
        """Apply the training-set standardization to any frame (e.g. Test)."""
        cols = list(self.standardized_coefficients.index)
        return pd.DataFrame(
            self.scaler.transform(frame[cols].to_numpy(dtype=float)),
            columns=cols,
            index=frame.index,
        )


def select_lambdas(lambdas: NDArray, cv_mean: NDArray, cv_se: NDArray) -> Tuple[float, float]:
    """
    λ_min = argmin CV error; λ_1se = largest λ whose error is within one SE of it.

    `lambdas` must be sorted descending, so the first qualifying index is the
    largest λ.
    """
    i_min = int(np.argmin(cv_mean))
    threshold = cv_mean[i_min] + cv_se[i_min]
    i_1se = int(np.flatnonzero(cv_mean <= threshold)[0])
    return float(lambdas[i_min]), float(lambdas[i_1se])


class RegularizedFitter:
    """
    Ridge (L2) or lasso (L1) with k-fold cross-validated penalty choice.

    Both paths are solved with sklearn's coordinate descent (`enet_path`),
    warm-starting each λ from the previous, larger one. When the CV minimum
    sits on the smallest grid value the grid is continued downward, at most
    `grid_extensions` times.
    """

    def __init__(
        self,
        penalty: str = "ridge",
        *,
        predictors: Optional[List[str]] = None,
        target: Optional[str] = None,
        n_folds: Optional[int] = None,
        n_lambdas: Optional[int] = None,
        lambda_min_ratio: Optional[float] = None,
        tol: Optional[float] = None,
        max_iter: Optional[int] = None,
        seed: Optional[int] = None,
        selection: Optional[str] = None,
        grid_extensions: Optional[int] = None,
    ):
        if penalty not in L1_RATIOS:
            raise ValueError(f"penalty must be one of {sorted(L1_RATIOS)}, got '{penalty}'")
        self.penalty = penalty
        self.l1_ratio = L1_RATIOS[penalty]
        self.predictors = list(predictors) if predictors is not None else list(config.PREDICTORS)
        self.target = target or config.TARGET
        self.n_folds = n_folds or config.CV_FOLDS
        self.n_lambdas = n_lambdas or config.N_LAMBDAS
        self.lambda_min_ratio = lambda_min_ratio or config.LAMBDA_MIN_RATIO
        self.tol = tol or config.CD_TOL
        self.max_iter = max_iter or config.CD_MAX_ITER
        self.seed = config.RANDOM_SEED if seed is None else seed
        self.selection = selection or config.PENALTY_POLICY[penalty]
        self.grid_extensions = (
            config.GRID_EXTENSIONS if grid_extensions is None else grid_extensions
        )
        if self.selection not in SELECTION_RULES:
            raise ValueError(f"selection must be one of {SELECTION_RULES}, got '{self.selection}'")
        if self.n_lambdas < 2:
            raise ValueError(f"n_lambdas must be at least 2, got {self.n_lambdas}")

    # ------------------------------------------------------------------
    # Building blocks
    # ------------------------------------------------------------------
    def _xy(self, train: pd.DataFrame) -> Tuple[NDArray, NDArray]:
        X = train[self.predictors].to_numpy(dtype=float)
        y = train[self.target].to_numpy(dtype=float)
        return X, y

    def lambda_grid(self, Xs: NDArray, y: NDArray) -> NDArray[np.float64]:
        """
        Descending geometric grid of `n_lambdas` values starting at λ_max.

        Ridge has no finite λ_max, so it is computed as if l1_ratio were
        RIDGE_L1_FLOOR. The grid then runs that many more decades down, so both
        penalties end at λ_max(lasso) * lambda_min_ratio.
        """
        n = Xs.shape[0]
        yc = y - y.mean()
        l1_scale = max(self.l1_ratio, config.RIDGE_L1_FLOOR)
        lam_max = float(np.max(np.abs(Xs.T @ yc)) / (n * l1_scale))
        if not np.isfinite(lam_max) or lam_max <= 0.0:
            logger.warning("Target has no variance to explain; using λ_max = 1.0")
            lam_max = 1.0
        return np.geomspace(lam_max, lam_max * self.lambda_min_ratio * l1_scale, self.n_lambdas)

    def extend_grid(self, lambdas: NDArray) -> NDArray[np.float64]:
        """Continue the grid's geometric step for another n_lambdas // 2 values."""
        step = lambdas[-1] / lambdas[-2]
        n_extra = max(self.n_lambdas // 2, 1)
        extra = lambdas[-1] * step ** np.arange(1, n_extra + 1)
        return np.concatenate([lambdas, extra])

    def _solve_path(self, Xc: NDArray, yc: NDArray, lambdas: NDArray) -> NDArray[np.float64]:
        """Coefficients (n_features, n_lambdas) on centered data, no intercept."""
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", SklearnConvergenceWarning)
            _, coefs, _ = enet_path(
                Xc, yc,
                l1_ratio=self.l1_ratio,
                alphas=lambdas,
                tol=self.tol,
                max_iter=self.max_iter,
            )
        self._reissue(caught, lambdas)
        return coefs

    def _reissue(self, caught, lambdas: NDArray) -> None:
        n_bad = 0
        for w in caught:
            if issubclass(w.category, SklearnConvergenceWarning):
                n_bad += 1
            else:
                warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)
        if n_bad:
            warnings.warn(
                f"{self.penalty} coordinate descent hit max_iter={self.max_iter} "
                f"before tol={self.tol:g} on {n_bad} of {len(lambdas)} penalties; "
                "keeping the last iterate",
                ConvergenceWarning,
                stacklevel=3,
            )

    def _path_on(self, Xs: NDArray, y: NDArray, lambdas: NDArray) -> Tuple[NDArray, float, NDArray]:
        """Centre, solve, and return (coefs, y_mean, x_mean)."""
        x_mean = Xs.mean(axis=0)
        y_mean = float(y.mean())
        coefs = self._solve_path(Xs - x_mean, y - y_mean, lambdas)
        return coefs, y_mean, x_mean

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def cross_validate(self, X: NDArray, y: NDArray, lambdas: NDArray) -> CVResult:
        """
        k-fold CV error for each λ on raw predictors.

        Each fold is standardized with its own training rows only.
        """
        n = X.shape[0]
        k = min(self.n_folds, n)
        if k < 2:
            raise ValueError(f"Need at least 2 training rows for cross-validation, got {n}")
        if k < self.n_folds:
            logger.warning("Only %d training rows; using %d folds instead of %d", n, k, self.n_folds)

        folds = KFold(n_splits=k, shuffle=True, random_state=self.seed)
        fold_errors = np.empty((k, len(lambdas)))
        for f, (tr, te) in enumerate(folds.split(X)):
            scaler = StandardScaler().fit(X[tr])
            coefs, y_mean, x_mean = self._path_on(scaler.transform(X[tr]), y[tr], lambdas)
            preds = y_mean + (scaler.transform(X[te]) - x_mean) @ coefs    # (n_te, n_lambdas)
            fold_errors[f] = np.mean((y[te][:, None] - preds) ** 2, axis=0)

        cv_mean = fold_errors.mean(axis=0)
        cv_se = fold_errors.std(axis=0, ddof=1) / np.sqrt(k)
        lam_min, lam_1se = select_lambdas(lambdas, cv_mean, cv_se)
        logger.info("%s CV (%d folds): λ_min=%.5g λ_1se=%.5g", self.penalty, k, lam_min, lam_1se)
        return CVResult(
            lambdas=lambdas,
            cv_mean=cv_mean,
            cv_se=cv_se,
            fold_errors=fold_errors,
            lambda_min=lam_min,
            lambda_1se=lam_1se,
        )

    def cross_validate_grid(self, X: NDArray, y: NDArray, lambdas: NDArray) -> CVResult:
        """Cross-validate, extending the grid while λ_min is its smallest value."""
        cv = self.cross_validate(X, y, lambdas)
        for _ in range(self.grid_extensions):
            if cv.lambda_min > cv.lambdas[-1]:
                break
            lambdas = self.extend_grid(cv.lambdas)
            logger.info("%s λ_min on the grid edge; extending grid to λ=%.3g",
                        self.penalty, lambdas[-1])
            cv = self.cross_validate(X, y, lambdas)
        return cv

    def coefficient_path(self, train: pd.DataFrame, lambdas: Optional[NDArray] = None) -> pd.DataFrame:
        """Standardized coefficients across the grid, one row per λ."""
        X, y = self._xy(train)
        Xs = StandardScaler().fit_transform(X)
        if lambdas is None:
            lambdas = self.lambda_grid(Xs, y)
        coefs, _, _ = self._path_on(Xs, y, lambdas)
        path = pd.DataFrame(coefs.T, columns=self.predictors)
        path.insert(0, "lambda", lambdas)
        return path

    def fit(self, train: pd.DataFrame) -> RegularizedResult:
        """Cross-validate the penalty then refit on all of `train`."""
        X, y = self._xy(train)
        scaler = StandardScaler().fit(X)
        Xs = scaler.transform(X)

        cv = self.cross_validate_grid(X, y, self.lambda_grid(Xs, y))
        chosen = cv.select(self.selection)

        # walk the grid down to the chosen λ so the final fit is warm-started too
        sub = cv.lambdas[cv.lambdas >= chosen]
        coefs, y_mean, x_mean = self._path_on(Xs, y, sub)
        w = coefs[:, -1]

        beta = w / scaler.scale_
        intercept = y_mean - float(np.dot(x_mean, w)) - float(np.dot(scaler.mean_, beta))
        model = FittedModel(
            name=self.penalty.capitalize(),
            intercept=intercept,
            coefficients=dict(zip(self.predictors, beta.astype(float))),
            penalty=chosen,
            extra={"selection": self.selection, "l1_ratio": self.l1_ratio},
        )
        logger.info("%s refit at %s=%.5g; nonzero coefs: %d/%d", model.name, self.selection,
                    chosen, int(np.count_nonzero(w)), len(w))
        return RegularizedResult(
            model=model,
            cv=cv,
            selection=self.selection,
            scaler=scaler,
            standardized_coefficients=pd.Series(w, index=self.predictors, name=model.name),
        )
