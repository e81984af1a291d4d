from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol

from ..params import ParameterSet
from ..results import FitResult


class FitConvergenceWarning(UserWarning):
    """A minimisation did not converge to a valid result."""


@dataclass(frozen=True)
class FitOptions:
    """Cost/precision trade-off of a fit.

    - strategy: 0 (cheap), 1 (default), 2 (careful); selects optimiser tolerances
    - hesse: compute Hessian-based uncertainties after the minimisation
    - minos: asymmetric errors (not provided by the bundled backend)
    - save: return a FitResult (False fits, updates parameters, returns None)
    - max_iterations: optimiser iteration cap (None: backend default)
    """

    strategy: int = 1
    hesse: bool = True
    minos: bool = False
    save: bool = True
    max_iterations: Optional[int] = None


GLOBAL_FIT_OPTIONS = FitOptions(strategy=1, hesse=True, save=True)
CONDITIONAL_FIT_OPTIONS = FitOptions(strategy=0, hesse=False, minos=False, save=True)


class NLLFunction(Protocol):
    """Negative log-likelihood over a model and a dataset."""

    parameters: ParameterSet
    constrained: ParameterSet

    def __call__(self, values: Optional[Mapping[str, float]] = None) -> float: ...


class ProfiledFunction(Protocol):
    """An NLL restricted to the POI, every other floating parameter profiled.

    Evaluates to NLL(poi, profiled nuisance) minus the global minimum.
    """

    nll: NLLFunction
    poi: ParameterSet

    def __call__(self, point: Optional[Mapping[str, float]] = None) -> float: ...

    def global_minimum(self) -> float: ...

    def find_limit(self, name: str, threshold: float, upper: bool) -> float: ...


class LikelihoodBackend(Protocol):
    """Backend protocol: fitting and likelihood construction."""

    name: str

    def extract_parameters(self, model: Any, data: Any) -> Optional[ParameterSet]: ...

    def fit(
        self,
        model: Any,
        data: Any,
        constrained: ParameterSet,
        options: FitOptions,
    ) -> Optional[FitResult]: ...

    def build_nll(self, model: Any, data: Any, constrained: ParameterSet) -> NLLFunction: ...

    def profile(self, nll: NLLFunction, poi: ParameterSet) -> ProfiledFunction: ...

    def evaluate(self, function: Any) -> float: ...
