"""
Metrics utilities for NFL touchdown analysis.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Mapping, Tuple

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from nfl_touchdown_analysis.config import config
from nfl_touchdown_analysis.models.fitted_model import FittedModel


@dataclass(frozen=True)
class PredictionResult:
    """Actual vs predicted touchdowns for one model on one row set."""
    model_name: str
    actual: NDArray[np.float64]
    predicted: NDArray[np.float64]

    def pairs(self) -> Iterator[Tuple[float, float]]:
        return zip(self.actual.tolist(), self.predicted.tolist())

    @property
    def residuals(self) -> NDArray[np.float64]:
        return self.actual - self.predicted

    def as_frame(self) -> pd.DataFrame:
        return pd.DataFrame({"actual": self.actual, "predicted": self.predicted})


class ModelEvaluator:
    """Prediction error metrics and side-by-side model comparison."""

    def __init__(self, target: str | None = None):
        self.target = target or config.TARGET

    # ---------- single-metric helpers ----------
    @staticmethod
    def calculate_rmse(actual, predicted) -> float:
        """sqrt(mean((actual - predicted)²)); 0 only for an exact match."""
        return float(np.sqrt(mean_squared_error(actual, predicted)))

    @staticmethod
    def calculate_mae(actual, predicted) -> float:
        return float(mean_absolute_error(actual, predicted))

    @staticmethod
    def calculate_r2(actual, predicted) -> float:
        return float(r2_score(actual, predicted))

    # ---------- prediction ----------
    def predict(self, model: FittedModel, frame: pd.DataFrame) -> PredictionResult:
        return PredictionResult(
            model_name=model.name,
            actual=frame[self.target].to_numpy(dtype=float),
            predicted=np.asarray(model.predict(frame), dtype=float),
        )

    # ---------- public aggregator ----------
    def calculate_regression_metrics(self, actual, predicted) -> Dict[str, float]:
        """Return RMSE, MAE and R² for one set of predictions."""
        metrics: Dict[str, float] = {
            "rmse": self.calculate_rmse(actual, predicted),
            "mae": self.calculate_mae(actual, predicted),
        }
        # R² is undefined on fewer than two rows
        metrics["r2"] = self.calculate_r2(actual, predicted) if len(actual) > 1 else np.nan
        return metrics

    def evaluate_models(
        self,
        models: Mapping[str, FittedModel] | List[FittedModel],
        frame: pd.DataFrame,
    ) -> Dict[str, Dict[str, float]]:
        """Score every model on the same rows."""
        if not isinstance(models, Mapping):
            models = {m.name: m for m in models}
        results: Dict[str, Dict[str, float]] = {}
        for name, model in models.items():
            pred = self.predict(model, frame)
            results[name] = self.calculate_regression_metrics(pred.actual, pred.predicted)
        return results

    # ---------- comparison helper ----------
    def compare_models(self, results: Dict[str, Dict[str, float]]) -> pd.DataFrame:
        """
        Turn {model: metric_dict} into a tidy table ordered by RMSE.
        """
        df = pd.DataFrame(results).T
        desired_cols: List[str] = ["rmse", "mae", "r2"]
        for c in desired_cols:
            if c not in df.columns:
                df[c] = np.nan
        df = df[desired_cols].sort_values("rmse", ascending=True)
        df["rmse_vs_best"] = df["rmse"] - df["rmse"].min()
        return df
