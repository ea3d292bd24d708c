"""
Immutable fitted linear model shared by the OLS, ridge and lasso fitters.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class FittedModel:
    """Intercept + per-predictor coefficients on the original predictor scale."""
    name: str
    intercept: float
    coefficients: Mapping[str, float]
    penalty: Optional[float] = None
    extra: Mapping[str, object] = field(default_factory=dict)

    def __post_init__(self):
        # freeze the mappings so the model can't drift after fit
        object.__setattr__(self, "coefficients", MappingProxyType(dict(self.coefficients)))
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @property
    def predictors(self) -> list[str]:
        return list(self.coefficients)

    @property
    def coef_vector(self) -> np.ndarray:
        return np.array([self.coefficients[p] for p in self.predictors], dtype=float)

    def predict(self, frame: pd.DataFrame) -> np.ndarray:
        X = frame[self.predictors].to_numpy(dtype=float)
        return self.intercept + X @ self.coef_vector

    def as_series(self) -> pd.Series:
        return pd.Series({"intercept": self.intercept, **self.coefficients}, name=self.name)
