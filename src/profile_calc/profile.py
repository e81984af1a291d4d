from __future__ import annotations

from typing import Any

from .backends.common import ProfiledFunction
from .params import ParameterSet
from .partition import floating_parameters
from .results import FitResult


def seed_from_fit(poi: ParameterSet, fit_result: FitResult) -> None:
    """Set each POI's value and error from the matching fitted parameter."""
    for fitted in fit_result.float_params_final:
        par = poi.find(fitted.name)
        if par is not None:
            par.set_value(fitted.value)
            par.set_error(fitted.error)


def build_profile(
    backend: Any,
    model: Any,
    data: Any,
    poi: ParameterSet,
    fit_result: FitResult,
) -> ProfiledFunction:
    """Build the profile likelihood of ``model`` on ``data`` over ``poi``.

    The returned profile owns the NLL it wraps. POIs are moved to their
    best-fit values first, so the profile's global minimum is found with a
    short minimisation when it is evaluated here.
    """
    constrained = floating_parameters(backend, model, data) or ParameterSet()
    nll = backend.build_nll(model, data, constrained)
    profile = backend.profile(nll, poi)

    seed_from_fit(poi, fit_result)
    backend.evaluate(profile)
    return profile
