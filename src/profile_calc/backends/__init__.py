"""Likelihood backend implementations + registry."""

from __future__ import annotations

from typing import Any, Dict, Union

from .common import (
    CONDITIONAL_FIT_OPTIONS,
    GLOBAL_FIT_OPTIONS,
    FitConvergenceWarning,
    FitOptions,
    LikelihoodBackend,
)
from .scipy_minimize import ScipyMinimizeBackend

_BACKENDS: Dict[str, LikelihoodBackend] = {
    "scipy.minimize": ScipyMinimizeBackend(),
}


def get_backend(name: Union[str, Any]) -> LikelihoodBackend:
    """Return a backend implementation by name (instances pass through)."""
    if not isinstance(name, str):
        return name
    try:
        return _BACKENDS[name]
    except KeyError as e:
        raise ValueError(
            f"Unknown backend {name!r}. Available: {tuple(_BACKENDS.keys())}"
        ) from e


AVAILABLE_BACKENDS = tuple(_BACKENDS.keys())

__all__ = [
    "AVAILABLE_BACKENDS",
    "CONDITIONAL_FIT_OPTIONS",
    "GLOBAL_FIT_OPTIONS",
    "FitConvergenceWarning",
    "FitOptions",
    "LikelihoodBackend",
    "ScipyMinimizeBackend",
    "get_backend",
]
