"""
Data loading module for NFL touchdown analysis.
Reads the player-season receiving sheet and normalises its schema.
"""
import logging
import zipfile
from pathlib import Path
from typing import Optional, Union

import numpy as np
import pandas as pd

from nfl_touchdown_analysis.config import config
from nfl_touchdown_analysis.data.feature_schema import FeatureSchema
from nfl_touchdown_analysis.exceptions import DataLoadError

logger = logging.getLogger(__name__)

_READ_ERRORS = (OSError, ValueError, zipfile.BadZipFile, pd.errors.ParserError)


def parse_percentage(series: pd.Series) -> pd.Series:
    """
    Turn values like '65.2%' / 65.2 / 0.652 / '' into floats on a 0–100 scale.

    Excel percent-formatted cells arrive as fractions, so a column with no
    '%' text whose values all lie in [0, 1] is multiplied by 100.
    Unparseable cells become NaN.
    """
    if pd.api.types.is_numeric_dtype(series):
        values = series.astype(float)
        had_percent_sign = False
    else:
        text = series.astype(str).str.strip()
        had_percent_sign = bool(text.str.endswith("%").any())
        cleaned = text.str.rstrip("%").str.strip()
        values = pd.to_numeric(cleaned.replace({"": np.nan, "nan": np.nan}), errors="coerce")

    if not had_percent_sign and values.notna().any() and values.max() <= 1.0:
        logger.info("Percentage column %s looks fractional; rescaling to 0–100", series.name)
        values = values * 100.0
    return values


class DataLoader:
    """Handles loading and schema validation of the player-season dataset."""

    def __init__(self, schema: Optional[FeatureSchema] = None):
        """Initialize the data loader."""
        self.schema = schema or FeatureSchema.from_feature_lists()
        self.raw_df: pd.DataFrame | None = None

    def _read_table(self, filepath: Path) -> pd.DataFrame:
        suffix = filepath.suffix.lower()
        if suffix not in config.SUPPORTED_SUFFIXES:
            raise DataLoadError(
                f"Unsupported file type '{suffix}' for {filepath}; "
                f"expected one of {config.SUPPORTED_SUFFIXES}"
            )
        try:
            if suffix == ".csv":
                return pd.read_csv(filepath)
            return pd.read_excel(filepath)
        except FileNotFoundError as exc:
            raise DataLoadError(f"Receiving data file not found: {filepath}") from exc
        except _READ_ERRORS as exc:
            raise DataLoadError(f"Could not read {filepath}: {exc}") from exc

    def normalize_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        """Rename spreadsheet headers to canonical names and coerce numeric types."""
        headers = [str(c).strip() for c in df.columns]
        canonical = [config.COLUMN_ALIASES.get(h, h) for h in headers]
        df = df.set_axis(canonical, axis=1)

        if df.columns.duplicated().any():
            clashes = {
                name: [h for h, c in zip(headers, canonical) if c == name]
                for name in df.columns[df.columns.duplicated()].unique()
            }
            raise DataLoadError(f"Several headers map to the same column: {clashes}")

        missing = self.schema.missing_columns(df)
        if missing:
            raise DataLoadError(
                f"Input is missing required columns {missing}; "
                f"found {list(df.columns)}"
            )

        df = df[self.schema.required_columns].copy()
        for col in self.schema.complete_case_columns:
            if col in config.PERCENT_COLUMNS:
                df[col] = parse_percentage(df[col])
            else:
                df[col] = pd.to_numeric(df[col], errors="coerce")
        position = self.schema.position_col
        df[position] = df[position].astype("string").str.strip().str.upper()
        return df

    def load_player_seasons(self, filepath: Optional[Union[Path, str]] = None) -> pd.DataFrame:
        """
        Load player-season receiving statistics.

        Args:
            filepath: Optional path to a .xlsx/.xls/.csv sheet

        Returns:
            DataFrame with canonical columns (player, position, predictors, target)

        Raises:
            DataLoadError: file missing/unreadable or required columns absent
        """
        filepath = Path(filepath) if filepath is not None else config.RECEIVING_FILE

        raw = self._read_table(filepath)
        self.raw_df = self.normalize_columns(raw)
        logger.info("Loaded %d player-seasons from %s", len(self.raw_df), filepath)
        print(f"******* Loaded {len(self.raw_df):,} player-seasons from {filepath}")
        return self.raw_df

    def get_data_summary(self) -> dict:
        """
        Get summary statistics of loaded data.

        Returns:
            Dictionary with data summary information
        """
        if self.raw_df is None:
            raise ValueError("No data loaded. Call load_player_seasons() first.")

        df = self.raw_df
        summary = {
            "total_rows": len(df),
            "unique_players": df[self.schema.player_col].nunique(),
            "position_counts": df[self.schema.position_col].value_counts().to_dict(),
            "missing_by_column": df[self.schema.complete_case_columns].isna().sum().to_dict(),
            "touchdown_range": (df[self.schema.target].min(), df[self.schema.target].max()),
        }
        return summary


if __name__ == "__main__":
    print("Testing DataLoader...")

    loader = DataLoader()

    try:
        df = loader.load_player_seasons()
        print(df.head())
        summary = loader.get_data_summary()
        print(f"Total rows: {summary['total_rows']:,}")
        print(f"Unique players: {summary['unique_players']}")
        print(f"Positions: {summary['position_counts']}")
        print("******* DataLoader tests passed!")
    except DataLoadError as e:
        print(f"------------- Error testing DataLoader: {e}")
        print("Note: This is expected if data files are not present.")
