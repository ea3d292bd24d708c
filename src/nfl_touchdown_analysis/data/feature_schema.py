"""
FeatureSchema – canonical column lists for loading & modelling.
"""
from dataclasses import dataclass, field
from typing import List

import pandas as pd

from nfl_touchdown_analysis.config import FEATURE_LISTS


@dataclass
class FeatureSchema:
    """Container class listing every column by semantic type."""
    identity:  List[str] = field(default_factory=list)      # player name
    nominal:   List[str] = field(default_factory=list)      # position code
    numerical: List[str] = field(default_factory=list)      # regression predictors
    target:    str        = "touchdowns"

    @classmethod
    def from_feature_lists(cls, lists=None) -> "FeatureSchema":
        lists = lists or FEATURE_LISTS
        return cls(
            identity=list(lists.get("identity", [])),
            nominal=list(lists.get("nominal", [])),
            numerical=list(lists.get("numerical", [])),
            target=lists["y_variable"][0],
        )

    @classmethod
    def from_config(cls, cfg) -> "FeatureSchema":
        """Column roles taken from a Config instance rather than the module defaults."""
        return cls(
            identity=[cfg.PLAYER_COL],
            nominal=[cfg.POSITION_COL],
            numerical=list(cfg.PREDICTORS),
            target=cfg.TARGET,
        )

    # ───── convenience helpers ────────────────────────────────────
    @property
    def required_columns(self) -> List[str]:
        """Every column a loaded sheet must carry."""
        return self.identity + self.nominal + self.numerical + [self.target]

    @property
    def complete_case_columns(self) -> List[str]:
        """Columns that must be non-missing for a row to be modelled."""
        return [self.target] + self.numerical

    @property
    def player_col(self) -> str:
        return self.identity[0]

    @property
    def position_col(self) -> str:
        return self.nominal[0]

    def missing_columns(self, df: pd.DataFrame) -> List[str]:
        return [c for c in self.required_columns if c not in df.columns]
