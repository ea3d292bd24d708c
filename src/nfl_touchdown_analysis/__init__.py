"""
NFL Touchdown Analysis Package
Multiple linear, ridge and lasso regression of receiving touchdowns on
player-season receiving statistics.
"""

__version__ = "1.0.0"
__author__ = "NFL Analytics Team"

# Import main classes for easy access
from .config import config
from .exceptions import ConvergenceWarning, DataLoadError, SingularMatrixError
from .data.loader import DataLoader
from .data.preprocessor import DataPreprocessor, TrainTestSplit

__all__ = [
    'config',
    'ConvergenceWarning',
    'DataLoadError',
    'SingularMatrixError',
    'DataLoader',
    'DataPreprocessor',
    'TrainTestSplit',
]
