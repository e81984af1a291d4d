from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from .params import Parameter, ParameterSet
from .results import FitResult
from .util import delta_nll_threshold


class LikelihoodInterval:
    """Profile-likelihood-ratio confidence region for the parameters of interest.

    Region edges are not computed here; ``lower_limit``/``upper_limit`` ask the
    profile for its threshold crossings on first use and cache them.
    """

    def __init__(
        self,
        name: str,
        profile: Any,
        best_fit: ParameterSet,
        confidence_level: float = 0.95,
    ):
        self.name = name
        self.profile = profile
        self.best_fit = best_fit
        self._limits: Dict[Tuple[str, bool], float] = {}
        self._confidence_level = 0.0
        self.set_confidence_level(confidence_level)

    def __repr__(self) -> str:
        return (
            f"LikelihoodInterval(name={self.name!r}, "
            f"confidence_level={self._confidence_level:g}, "
            f"parameters={self.parameters_of_interest})"
        )

    @property
    def confidence_level(self) -> float:
        return self._confidence_level

    def set_confidence_level(self, cl: float) -> None:
        cl = float(cl)
        if not (0.0 < cl < 1.0):
            raise ValueError(f"confidence_level must lie in (0, 1), got {cl!r}.")
        self._confidence_level = cl
        self._limits.clear()

    @property
    def parameters_of_interest(self) -> Tuple[str, ...]:
        return self.best_fit.names

    def threshold(self) -> float:
        """Rise of the profiled NLL above its minimum at the region's edge."""
        return delta_nll_threshold(self._confidence_level, len(self.best_fit))

    def _limit(self, name: str, upper: bool) -> float:
        if name not in self.best_fit:
            raise KeyError(f"{name!r} is not a parameter of interest.")
        key = (name, upper)
        if key not in self._limits:
            self._limits[key] = float(self.profile.find_limit(name, self.threshold(), upper))
        return self._limits[key]

    def lower_limit(self, name: str) -> float:
        return self._limit(name, upper=False)

    def upper_limit(self, name: str) -> float:
        return self._limit(name, upper=True)

    def limits(self, name: str) -> Tuple[float, float]:
        return self.lower_limit(name), self.upper_limit(name)

    def contains(self, point: Mapping[str, float]) -> bool:
        """True if ``point`` (POI name -> value) lies inside the region.

        POIs missing from ``point`` take their best-fit value.
        """
        full = self.best_fit.as_dict()
        for k, v in point.items():
            if k not in full:
                raise KeyError(f"{k!r} is not a parameter of interest.")
            full[k] = float(v)
        return float(self.profile(full)) <= self.threshold()

    is_in_interval = contains


def best_fit_parameters(poi: ParameterSet, fit_result: FitResult) -> ParameterSet:
    """Detached POI copies at their fitted values.

    A POI absent from the fit (held constant) keeps its current value.
    """
    best = []
    for par in poi.values():
        fitted = fit_result.find(par.name)
        if fitted is None:
            best.append(par.copy())
        else:
            best.append(
                Parameter(
                    name=fitted.name,
                    value=fitted.value,
                    error=fitted.error,
                    constant=par.constant,
                    bounds=par.bounds,
                )
            )
    return ParameterSet(best)


def build_interval(
    profile: Any,
    poi: ParameterSet,
    fit_result: FitResult,
    confidence_level: float,
    name: Optional[str] = None,
) -> LikelihoodInterval:
    return LikelihoodInterval(
        name=name or "LikelihoodInterval",
        profile=profile,
        best_fit=best_fit_parameters(poi, fit_result),
        confidence_level=confidence_level,
    )
