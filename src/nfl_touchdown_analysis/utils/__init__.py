"""Utils module for NFL touchdown analysis."""

from .metrics import ModelEvaluator, PredictionResult

__all__ = ['ModelEvaluator', 'PredictionResult']
