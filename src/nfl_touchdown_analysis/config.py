"""
Configuration module for NFL Touchdown Analysis package.
Contains all constants, paths, and configuration parameters.
"""
from pathlib import Path
from typing import Dict, List


class Config:
    """Main configuration class for the NFL Touchdown Analysis package."""

    # Base paths - relative to the project root so the package works from a checkout
    _CONFIG_DIR = Path(__file__).parent.parent.parent  # Go up to project root
    PROJECT_ROOT = _CONFIG_DIR.resolve()

    DATA_DIR = PROJECT_ROOT / "data"
    RAW_DATA_DIR = DATA_DIR / "raw"
    OUTPUT_DIR = PROJECT_ROOT / "output"
    FIGURES_DIR = OUTPUT_DIR / "figures"

    # Raw data files
    RECEIVING_FILE = RAW_DATA_DIR / "receiving_stats.xlsx"
    SUPPORTED_SUFFIXES = (".xlsx", ".xls", ".csv")

    # Canonical column names used everywhere downstream of the loader
    PLAYER_COL = "player"
    POSITION_COL = "position"
    # Columns given as percentages (text like "65.2%" or Excel fractions)
    PERCENT_COLUMNS = ("catch_pct",)

    # Spreadsheet headers (Pro-Football-Reference style) → canonical names
    COLUMN_ALIASES: Dict[str, str] = {
        "Player": "player",
        "Pos": "position",
        "Position": "position",
        "Tgt": "targets",
        "Targets": "targets",
        "Rec": "receptions",
        "Receptions": "receptions",
        "Ctch%": "catch_pct",
        "Catch%": "catch_pct",
        "Catch %": "catch_pct",
        "Yds": "yards",
        "Yards": "yards",
        "TD": "touchdowns",
        "TDs": "touchdowns",
        "Touchdowns": "touchdowns",
    }

    # Modelling variables
    TARGET = "touchdowns"
    PREDICTORS: List[str] = ["targets", "receptions", "catch_pct", "yards"]
    POSITIONS: List[str] = ["QB", "RB", "WR", "TE"]

    # Split
    TRAIN_FRACTION = 0.8
    RANDOM_SEED = 42

    # Regularized regression
    CV_FOLDS = 10
    N_LAMBDAS = 100
    LAMBDA_MIN_RATIO = 1e-4
    CD_TOL = 1e-7
    CD_MAX_ITER = 10_000
    # λ_max for ridge is computed as if l1_ratio were this floor
    RIDGE_L1_FLOOR = 1e-3
    # Times the grid may be continued downward when λ_min lands on its last value
    GRID_EXTENSIONS = 3

    # Which cross-validated penalty each regularized model is refit at
    PENALTY_POLICY: Dict[str, str] = {
        "ridge": "lambda_1se",
        "lasso": "lambda_min",
    }

    # Diagnostics
    VIF_THRESHOLD = 5.0
    RESIDUAL_BINS = 10

    # Ridge may trail OLS on test RMSE by at most this much before we call it worse
    RMSE_TOLERANCE = 0.05

    # Visualization settings
    FIGURE_SIZE = (12, 8)
    DPI = 100

    @classmethod
    def ensure_directories(cls):
        """Create all required directories if they don't exist."""
        for dir_path in [cls.RAW_DATA_DIR, cls.OUTPUT_DIR, cls.FIGURES_DIR]:
            dir_path.mkdir(parents=True, exist_ok=True)


# Create global config instance
config = Config()

# ───────────────────────── Feature catalogue ─────────────────────────
# Single source of truth for column roles
FEATURE_LISTS: Dict[str, List[str]] = {
    "identity": [Config.PLAYER_COL],
    "nominal": [Config.POSITION_COL],
    "numerical": list(Config.PREDICTORS),
    "y_variable": [Config.TARGET],
}

config.FEATURE_LISTS = FEATURE_LISTS

if __name__ == "__main__":
    print("NFL Touchdown Analysis Configuration")
    print("=" * 40)
    print(f"Data file: {config.RECEIVING_FILE}")
    print(f"Predictors: {config.PREDICTORS}")
    print(f"Target: {config.TARGET}")
    print(f"Positions: {config.POSITIONS}")
    print(f"Penalty policy: {config.PENALTY_POLICY}")

    config.ensure_directories()
    print("******* Configuration loaded and directories created!")
