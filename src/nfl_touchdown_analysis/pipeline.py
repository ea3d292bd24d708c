"""
End-to-end touchdown regression analysis.

load → filter → split → OLS → diagnostics → ridge/lasso CV → test RMSE.
Every stage returns a value that is passed to the next; nothing is cached on
module globals.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from nfl_touchdown_analysis.config import Config, config as default_config
from nfl_touchdown_analysis.data.feature_schema import FeatureSchema
from nfl_touchdown_analysis.data.loader import DataLoader
from nfl_touchdown_analysis.data.preprocessor import DataPreprocessor, TrainTestSplit
from nfl_touchdown_analysis.eda import run_full_eda
from nfl_touchdown_analysis.models.fitted_model import FittedModel
from nfl_touchdown_analysis.models.ols import OLSFitter, OLSResult
from nfl_touchdown_analysis.models.regularized import RegularizedFitter, RegularizedResult
from nfl_touchdown_analysis.utils.diagnostics import (
    breusch_pagan,
    residual_structure,
    variance_inflation_factors,
)
from nfl_touchdown_analysis.utils.metrics import ModelEvaluator, PredictionResult

logger = logging.getLogger(__name__)


@dataclass
class AnalysisReport:
    """Everything one run produced."""
    filtered: pd.DataFrame
    split: TrainTestSplit
    ols: OLSResult
    vif: pd.DataFrame
    residual_bins: pd.DataFrame
    heteroscedasticity: Dict[str, float]
    regularized: Dict[str, RegularizedResult]
    predictions: Dict[str, PredictionResult]
    comparison: pd.DataFrame
    coefficient_paths: Dict[str, pd.DataFrame] = field(default_factory=dict)

    @property
    def models(self) -> Dict[str, FittedModel]:
        out = {"OLS": self.ols.model}
        out.update({r.model.name: r.model for r in self.regularized.values()})
        return out

    def coefficient_table(self) -> pd.DataFrame:
        return pd.DataFrame({name: m.as_series() for name, m in self.models.items()})


class TouchdownAnalysis:
    """Configurable runner for the whole analysis."""

    def __init__(
        self,
        cfg: Optional[Config] = None,
        *,
        seed: Optional[int] = None,
        penalty_policy: Optional[Dict[str, str]] = None,
        penalties: Optional[List[str]] = None,
        n_folds: Optional[int] = None,
        n_lambdas: Optional[int] = None,
    ):
        self.cfg = cfg or default_config
        self.seed = self.cfg.RANDOM_SEED if seed is None else seed
        self.penalty_policy = dict(self.cfg.PENALTY_POLICY)
        if penalty_policy:
            self.penalty_policy.update(penalty_policy)
        self.penalties = list(penalties) if penalties is not None else ["ridge", "lasso"]
        self.n_folds = n_folds or self.cfg.CV_FOLDS
        self.n_lambdas = n_lambdas or self.cfg.N_LAMBDAS

        self.schema = FeatureSchema.from_config(self.cfg)
        self.loader = DataLoader(self.schema)
        self.preprocessor = DataPreprocessor(
            positions=self.cfg.POSITIONS,
            train_fraction=self.cfg.TRAIN_FRACTION,
            schema=self.schema,
        )
        self.evaluator = ModelEvaluator(target=self.cfg.TARGET)

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------
    def load(self, filepath: Optional[Union[Path, str]] = None) -> pd.DataFrame:
        return self.loader.load_player_seasons(filepath)

    def fit_ols(self, train: pd.DataFrame) -> OLSResult:
        return OLSFitter(self.cfg.PREDICTORS, self.cfg.TARGET).fit(train)

    def make_regularized_fitter(self, penalty: str) -> RegularizedFitter:
        return RegularizedFitter(
            penalty,
            predictors=self.cfg.PREDICTORS,
            target=self.cfg.TARGET,
            n_folds=self.n_folds,
            n_lambdas=self.n_lambdas,
            lambda_min_ratio=self.cfg.LAMBDA_MIN_RATIO,
            tol=self.cfg.CD_TOL,
            max_iter=self.cfg.CD_MAX_ITER,
            seed=self.seed,
            selection=self.penalty_policy[penalty],
            grid_extensions=self.cfg.GRID_EXTENSIONS,
        )

    def run_frame(self, raw_df: pd.DataFrame, *, with_paths: bool = True) -> AnalysisReport:
        """Run every stage after loading on an in-memory frame."""
        print("── Section 1 Filter & Split ──")
        filtered = self.preprocessor.filter_player_seasons(raw_df)
        split = self.preprocessor.split(filtered, seed=self.seed)

        print("── Section 2 OLS ──")
        ols = self.fit_ols(split.train)

        print("── Section 3 Diagnostics ──")
        X_train, _ = self.preprocessor.make_feature_matrix(split.train, self.cfg.PREDICTORS)
        vif = variance_inflation_factors(X_train, threshold=self.cfg.VIF_THRESHOLD)
        bins = residual_structure(ols.fitted_values, ols.residuals, n_bins=self.cfg.RESIDUAL_BINS)
        het = breusch_pagan(ols.residuals, X_train)

        print("── Section 4 Ridge & Lasso ──")
        regularized: Dict[str, RegularizedResult] = {}
        paths: Dict[str, pd.DataFrame] = {}
        for penalty in self.penalties:
            fitter = self.make_regularized_fitter(penalty)
            regularized[penalty] = fitter.fit(split.train)
            if with_paths:
                paths[penalty] = fitter.coefficient_path(split.train, regularized[penalty].cv.lambdas)

        print("── Section 5 Test Evaluation ──")
        models = [ols.model] + [r.model for r in regularized.values()]
        predictions = {m.name: self.evaluator.predict(m, split.test) for m in models}
        results = {
            name: self.evaluator.calculate_regression_metrics(p.actual, p.predicted)
            for name, p in predictions.items()
        }
        comparison = self.evaluator.compare_models(results)

        return AnalysisReport(
            filtered=filtered,
            split=split,
            ols=ols,
            vif=vif,
            residual_bins=bins,
            heteroscedasticity=het,
            regularized=regularized,
            predictions=predictions,
            comparison=comparison,
            coefficient_paths=paths,
        )

    def run(self, filepath: Optional[Union[Path, str]] = None, **kwargs) -> AnalysisReport:
        return self.run_frame(self.load(filepath), **kwargs)


def format_report(report: AnalysisReport) -> str:
    """Plain-text summary of coefficients, fit, diagnostics and test RMSE."""
    train_n, test_n = report.split.sizes()
    lines = [
        "=" * 72,
        "TOUCHDOWN REGRESSION SUMMARY",
        "=" * 72,
        f"Rows after filtering: {len(report.filtered):,}  (train {train_n:,} / test {test_n:,}, "
        f"seed {report.split.seed})",
        "",
        "OLS coefficients:",
        report.ols.summary_frame().to_string(float_format=lambda v: f"{v:.4f}"),
        f"R² = {report.ols.r_squared:.4f}   adjusted R² = {report.ols.adj_r_squared:.4f}",
        "",
        "Variance inflation factors:",
        report.vif.to_string(index=False, float_format=lambda v: f"{v:.2f}"),
        "",
        "Residual spread by fitted-value bin:",
        report.residual_bins.to_string(index=False, float_format=lambda v: f"{v:.3f}"),
        f"Breusch–Pagan LM = {report.heteroscedasticity['lm_stat']:.3f} "
        f"(p = {report.heteroscedasticity['lm_pvalue']:.4f})",
        "",
    ]
    for name, result in report.regularized.items():
        cv_err, cv_se = result.cv.error_at(result.penalty)
        lines.append(
            f"{name.capitalize()}: λ_min = {result.cv.lambda_min:.5g}, "
            f"λ_1se = {result.cv.lambda_1se:.5g}, refit at {result.selection} "
            f"(CV MSE {cv_err:.4f} ± {cv_se:.4f})"
        )
    lines += [
        "",
        "Coefficients by model:",
        report.coefficient_table().to_string(float_format=lambda v: f"{v:.4f}"),
        "",
        "Test-set comparison:",
        report.comparison.to_string(float_format=lambda v: f"{v:.4f}"),
        "=" * 72,
    ]
    return "\n".join(lines)


def run_full_analysis(
    filepath: Optional[Union[Path, str]] = None,
    *,
    figures_dir: Optional[Union[Path, str]] = None,
    **kwargs,
) -> AnalysisReport:
    """Single convenience entry – load, fit, evaluate, print, optionally plot."""
    analysis = TouchdownAnalysis(**kwargs)
    report = analysis.run(filepath)
    print(format_report(report))
    if figures_dir is not None:
        run_full_eda(report, output_dir=figures_dir)
    return report


# ─────────────────────────── CLI demo ───────────────────────────

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s │ %(levelname)s │ %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    default_config.ensure_directories()
    run_full_analysis(default_config.RECEIVING_FILE, figures_dir=default_config.FIGURES_DIR)
