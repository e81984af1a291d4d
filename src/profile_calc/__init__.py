"""profile_calc public API."""
from .backends import FitConvergenceWarning, FitOptions, get_backend
from .calculator import CombinedCalculator, ProfileLikelihoodCalculator
from .config import ModelConfig
from .data import Dataset
from .interval import LikelihoodInterval
from .model import GaussianConstraint, Pdf
from .params import Parameter, ParameterSet
from .results import FitParameter, FitResult, HypoTestResult
from . import models

__all__ = [
    "CombinedCalculator",
    "Dataset",
    "FitConvergenceWarning",
    "FitOptions",
    "FitParameter",
    "FitResult",
    "GaussianConstraint",
    "HypoTestResult",
    "LikelihoodInterval",
    "ModelConfig",
    "Parameter",
    "ParameterSet",
    "Pdf",
    "ProfileLikelihoodCalculator",
    "get_backend",
    "models",
]
