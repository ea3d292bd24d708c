"""
NFL Touchdown Regression Reporting Utilities

Figures only: nothing here feeds back into the fitted models.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from scipy import stats

from nfl_touchdown_analysis.config import config
from nfl_touchdown_analysis.models.regularized import CVResult
from nfl_touchdown_analysis.utils.diagnostics import residual_structure
from nfl_touchdown_analysis.utils.metrics import PredictionResult

logger = logging.getLogger(__name__)

plt.rcParams.update({
    "figure.figsize": config.FIGURE_SIZE,
    "axes.spines.top": False,
    "axes.spines.right": False,
})
sns.set_palette("husl")

_LABELS = {
    "targets": "Targets",
    "receptions": "Receptions",
    "catch_pct": "Catch %",
    "yards": "Receiving Yards",
    "touchdowns": "Touchdowns",
}


def _save(fig: plt.Figure, savefig: Path | None) -> None:
    if savefig:
        fig.savefig(savefig, dpi=config.DPI, bbox_inches="tight")
        plt.close(fig)


def _label(col: str) -> str:
    return _LABELS.get(col, col)


# ─────────────────────── exploratory figures ────────────────────
def predictor_scatterplots(
    df: pd.DataFrame,
    *,
    predictors: Sequence[str] | None = None,
    target: str | None = None,
    savefig: Path | None = None,
) -> Tuple[pd.Series, plt.Figure]:
    """Touchdowns against each predictor with a linear trend, plus Pearson r."""
    predictors = list(predictors or config.PREDICTORS)
    target = target or config.TARGET

    ncols = 2
    nrows = int(np.ceil(len(predictors) / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(12, 5 * nrows), squeeze=False)
    for ax, col in zip(axes.flat, predictors):
        sns.regplot(x=col, y=target, data=df, ax=ax,
                    scatter_kws={"alpha": 0.4, "s": 15},
                    line_kws={"color": "red", "linestyle": "--"})
        ax.set_xlabel(_label(col))
        ax.set_ylabel(_label(target))
        ax.set_title(f"{_label(target)} vs {_label(col)}")
    for ax in list(axes.flat)[len(predictors):]:
        ax.set_visible(False)

    plt.tight_layout()
    _save(fig, savefig)

    corr = df[predictors].corrwith(df[target]).rename("pearson_r")
    print("\nCorrelation with touchdowns:")
    for col, r in corr.items():
        print(f"{_label(col):>16}: {r:+.3f}")
    return corr, fig


def distribution_histograms(
    df: pd.DataFrame,
    *,
    columns: Sequence[str] | None = None,
    savefig: Path | None = None,
) -> Tuple[pd.DataFrame, plt.Figure]:
    """Histogram of the target and every predictor."""
    columns = list(columns or [config.TARGET] + config.PREDICTORS)
    fig, axes = plt.subplots(1, len(columns), figsize=(4 * len(columns), 4), squeeze=False)
    for ax, col in zip(axes.flat, columns):
        sns.histplot(df[col].dropna(), bins=30, edgecolor="black", color="skyblue", ax=ax)
        ax.axvline(df[col].mean(), color="red", linestyle="--", label="Mean")
        ax.set_title(f"Distribution of {_label(col)}")
        ax.set_xlabel(_label(col))
        ax.legend()

    plt.tight_layout()
    _save(fig, savefig)
    return df[columns].describe().T, fig


def position_boxplot(df: pd.DataFrame, *, savefig: Path | None = None) -> Tuple[pd.DataFrame, plt.Figure]:
    """Touchdowns per season by position."""
    summary = (
        df.groupby(config.POSITION_COL)[config.TARGET]
        .agg(mean_td="mean", seasons="size")
        .reset_index()
    )
    fig, ax = plt.subplots(figsize=(8, 5))
    sns.boxplot(x=config.POSITION_COL, y=config.TARGET, data=df,
                order=[p for p in config.POSITIONS if p in set(df[config.POSITION_COL])],
                hue=config.POSITION_COL, palette="Set2", legend=False, ax=ax)
    ax.set_title("Receiving Touchdowns by Position")
    ax.set_xlabel("")
    ax.set_ylabel(_label(config.TARGET))
    plt.tight_layout()
    _save(fig, savefig)
    return summary, fig


def correlation_heatmap(
    df: pd.DataFrame,
    *,
    predictors: Sequence[str] | None = None,
    savefig: Path | None = None,
) -> Tuple[pd.DataFrame, plt.Figure]:
    """Predictor/target correlation matrix – the quickest look at collinearity."""
    corr = df[list(predictors or config.PREDICTORS) + [config.TARGET]].corr()
    fig, ax = plt.subplots(figsize=(7, 6))
    sns.heatmap(corr, annot=True, fmt=".2f", cmap="coolwarm", vmin=-1, vmax=1, ax=ax)
    ax.set_title("Feature Correlation Matrix")
    plt.tight_layout()
    _save(fig, savefig)
    return corr, fig


# ─────────────────────── model figures ────────────────────
def residual_plots(
    fitted,
    residuals,
    *,
    title: str = "OLS",
    savefig: Path | None = None,
) -> Tuple[pd.DataFrame, plt.Figure]:
    """Residuals vs fitted, residual histogram and normal Q-Q plot."""
    fitted = np.asarray(fitted, dtype=float)
    residuals = np.asarray(residuals, dtype=float)
    binned = residual_structure(fitted, residuals)

    fig, (ax1, ax2, ax3) = plt.subplots(1, 3, figsize=(18, 5))

    ax1.scatter(fitted, residuals, alpha=0.5, color="darkblue", s=15)
    ax1.axhline(0, color="red", linestyle="--")
    ax1.plot(binned["fitted_mean"], binned["residual_mean"], "o-", color="orange",
             label="Binned mean")
    ax1.set_title(f"{title}: Residuals vs Fitted")
    ax1.set_xlabel("Fitted touchdowns")
    ax1.set_ylabel("Residual")
    ax1.legend()

    sns.histplot(residuals, bins=30, edgecolor="black", color="lightcoral", ax=ax2)
    ax2.set_title(f"{title}: Residual Distribution")

    stats.probplot(residuals, dist="norm", plot=ax3)
    ax3.set_title(f"{title}: Normal Q-Q")

    plt.tight_layout()
    _save(fig, savefig)
    return binned, fig


def cv_error_plot(
    cv: CVResult,
    *,
    title: str = "",
    savefig: Path | None = None,
) -> Tuple[pd.DataFrame, plt.Figure]:
    """Mean CV error ± 1 SE against log λ with λ_min and λ_1se marked."""
    frame = cv.as_frame()
    fig, ax = plt.subplots(figsize=(9, 5))
    ax.errorbar(frame["log_lambda"], frame["cv_mse"], yerr=frame["cv_se"],
                fmt="o", color="red", ecolor="gray", markersize=3, capsize=2)
    ax.axvline(np.log(cv.lambda_min), color="black", linestyle="--", label="λ_min")
    ax.axvline(np.log(cv.lambda_1se), color="blue", linestyle=":", label="λ_1se")
    ax.set_xlabel("log(λ)")
    ax.set_ylabel("Mean-squared error")
    ax.set_title(f"{title} {cv.n_folds}-fold CV error".strip())
    ax.legend()
    plt.tight_layout()
    _save(fig, savefig)
    return frame, fig


def coefficient_path_plot(
    path: pd.DataFrame,
    *,
    title: str = "",
    savefig: Path | None = None,
) -> plt.Figure:
    """Standardized coefficients against log λ (output of RegularizedFitter.coefficient_path)."""
    fig, ax = plt.subplots(figsize=(9, 5))
    log_lam = np.log(path["lambda"])
    for col in path.columns.drop("lambda"):
        ax.plot(log_lam, path[col], linewidth=2, label=_label(col))
    ax.axhline(0, color="gray", linewidth=0.8)
    ax.set_xlabel("log(λ)")
    ax.set_ylabel("Standardized coefficient")
    ax.set_title(f"{title} coefficient path".strip())
    ax.legend()
    plt.tight_layout()
    _save(fig, savefig)
    return fig


def prediction_scatter(
    predictions: Sequence[PredictionResult],
    *,
    savefig: Path | None = None,
) -> plt.Figure:
    """Actual vs predicted touchdowns for each model, side by side."""
    fig, axes = plt.subplots(1, len(predictions), figsize=(6 * len(predictions), 5), squeeze=False)
    for ax, pred in zip(axes.flat, predictions):
        ax.scatter(pred.actual, pred.predicted, alpha=0.6, color="purple", s=15)
        lo = float(min(pred.actual.min(), pred.predicted.min()))
        hi = float(max(pred.actual.max(), pred.predicted.max()))
        ax.plot([lo, hi], [lo, hi], "r--")
        ax.set_title(f"{pred.model_name}: Actual vs Predicted")
        ax.set_xlabel("Actual touchdowns")
        ax.set_ylabel("Predicted touchdowns")
    plt.tight_layout()
    _save(fig, savefig)
    return fig


# ───────────────────── orchestrator API ─────────────────────
def run_full_eda(report, *, output_dir: Path | str | None = None) -> Path:
    """Write every figure for a finished AnalysisReport into `output_dir`."""
    output_dir = Path(output_dir) if output_dir is not None else config.FIGURES_DIR
    output_dir.mkdir(parents=True, exist_ok=True)

    df = report.filtered
    predictors = report.ols.model.predictors
    print("── Section 1 Predictor Relationships ──")
    predictor_scatterplots(df, predictors=predictors, savefig=output_dir / "scatter_predictors.png")
    distribution_histograms(df, columns=[config.TARGET] + list(predictors),
                            savefig=output_dir / "histograms.png")
    position_boxplot(df, savefig=output_dir / "touchdowns_by_position.png")
    correlation_heatmap(df, predictors=predictors, savefig=output_dir / "correlation.png")

    print("── Section 2 OLS Residuals ──")
    residual_plots(report.ols.fitted_values, report.ols.residuals,
                   savefig=output_dir / "ols_residuals.png")

    print("── Section 3 Regularization ──")
    for name, result in report.regularized.items():
        cv_error_plot(result.cv, title=name.capitalize(), savefig=output_dir / f"{name}_cv.png")
        if name in report.coefficient_paths:
            coefficient_path_plot(report.coefficient_paths[name], title=name.capitalize(),
                                  savefig=output_dir / f"{name}_path.png")

    print("── Section 4 Test Predictions ──")
    prediction_scatter(list(report.predictions.values()),
                       savefig=output_dir / "test_predictions.png")

    plt.close("all")
    logger.info("All figures saved in %s", output_dir.resolve())
    return output_dir
