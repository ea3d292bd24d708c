"""
Data preprocessing module for NFL touchdown analysis.
Handles row filtering, the seeded train/test split, and X/y construction.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, cast

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from nfl_touchdown_analysis.config import config
from nfl_touchdown_analysis.data.feature_schema import FeatureSchema
from nfl_touchdown_analysis.exceptions import DataLoadError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainTestSplit:
    """Disjoint train/test partition of a filtered dataset."""
    train: pd.DataFrame
    test: pd.DataFrame
    seed: int

    @property
    def train_index(self) -> pd.Index:
        return self.train.index

    @property
    def test_index(self) -> pd.Index:
        return self.test.index

    def sizes(self) -> Tuple[int, int]:
        return len(self.train), len(self.test)


class DataPreprocessor:
    """Filters player-seasons to modelable rows and partitions them."""

    def __init__(
        self,
        *,
        positions: Optional[List[str]] = None,
        train_fraction: Optional[float] = None,
        schema: Optional[FeatureSchema] = None,
    ):
        """Create a preprocessor with defaults from central config."""
        self.positions = list(positions) if positions is not None else list(config.POSITIONS)
        self.train_fraction = train_fraction if train_fraction is not None else config.TRAIN_FRACTION
        self.schema = schema or FeatureSchema.from_feature_lists()

        if not 0.0 < self.train_fraction < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {self.train_fraction}")

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------
    def drop_incomplete_rows(self, df: pd.DataFrame) -> pd.DataFrame:
        """Drop rows with a missing target or predictor value."""
        cols = self.schema.complete_case_columns
        filtered_df = cast(pd.DataFrame, df.dropna(subset=cols).copy())
        removed = len(df) - len(filtered_df)
        print("******* Dropped rows with missing values")
        print(f"   Removed {removed} incomplete rows, kept {len(filtered_df):,}")
        return filtered_df

    def filter_positions(self, df: pd.DataFrame) -> pd.DataFrame:
        """Keep offensive skill positions only."""
        mask = df[self.schema.position_col].isin(self.positions).fillna(False).astype(bool)
        filtered_df = cast(pd.DataFrame, df[mask].copy())
        removed = len(df) - len(filtered_df)
        print(f"******* Filtered to positions {self.positions}")
        print(f"   Removed {removed} rows, kept {len(filtered_df):,}")
        return filtered_df

    def filter_player_seasons(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        Run every row filter and refuse to hand an empty frame downstream.

        Returns a new frame with a fresh 0..n-1 index; the input is untouched.
        """
        out = self.drop_incomplete_rows(df)
        out = self.filter_positions(out)
        if out.empty:
            raise DataLoadError(
                "No player-seasons left after filtering "
                f"(complete {self.schema.complete_case_columns}, positions {self.positions})"
            )
        logger.info("Filtered dataset → %d rows", len(out))
        return out.reset_index(drop=True)

    # ------------------------------------------------------------------
    # Split
    # ------------------------------------------------------------------
    def split(self, df: pd.DataFrame, seed: Optional[int] = None) -> TrainTestSplit:
        """
        Seeded split: floor(train_fraction * n) rows to train, the rest to test.

        The seed is passed straight to sklearn's splitter, so the result does not
        depend on global numpy random state.
        """
        seed = config.RANDOM_SEED if seed is None else seed
        n = len(df)
        if n < 2:
            raise ValueError(f"Need at least 2 rows to split, got {n}")

        n_train = int(np.floor(self.train_fraction * n))
        n_train = min(max(n_train, 1), n - 1)

        train_idx, test_idx = train_test_split(
            np.arange(n),
            train_size=n_train,
            shuffle=True,
            random_state=seed,
        )
        train = cast(pd.DataFrame, df.iloc[np.sort(train_idx)].copy())
        test = cast(pd.DataFrame, df.iloc[np.sort(test_idx)].copy())
        print(f"Train: {len(train):,} rows ({len(train) / n:.1%})")
        print(f"Test: {len(test):,} rows ({len(test) / n:.1%})")
        return TrainTestSplit(train=train, test=test, seed=seed)

    # ------------------------------------------------------------------
    # Matrices
    # ------------------------------------------------------------------
    def make_feature_matrix(
        self,
        df: pd.DataFrame,
        predictors: Optional[List[str]] = None,
    ) -> Tuple[pd.DataFrame, pd.Series]:
        """Return X (predictors) and y (target) as float frames."""
        predictors = list(predictors) if predictors is not None else self.schema.numerical
        X = df[predictors].astype(float)
        y = df[self.schema.target].astype(float)
        return X, y
