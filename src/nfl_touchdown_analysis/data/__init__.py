"""
Data module for NFL touchdown analysis.
"""

from .feature_schema import FeatureSchema
from .loader import DataLoader
from .preprocessor import DataPreprocessor, TrainTestSplit

__all__ = ['FeatureSchema', 'DataLoader', 'DataPreprocessor', 'TrainTestSplit']
