"""Models module for NFL touchdown analysis."""

from .fitted_model import FittedModel
from .ols import OLSFitter, OLSResult
from .regularized import CVResult, RegularizedFitter, RegularizedResult

__all__ = ['FittedModel', 'OLSFitter', 'OLSResult',
           'CVResult', 'RegularizedFitter', 'RegularizedResult']
