"""Ready-made probability models."""
from .counting import poisson_counting
from .exponential import exponential
from .gaussian import gaussian

__all__ = ["gaussian", "exponential", "poisson_counting"]
