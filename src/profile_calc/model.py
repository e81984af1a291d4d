from __future__ import annotations

from dataclasses import dataclass, replace
import inspect
import math
from typing import Any, Callable, Container, Dict, Mapping, Optional, Tuple, Union

import numpy as np

from .data import Dataset
from .params import Parameter, ParameterSet
from .util import infer_param_names


@dataclass(frozen=True)
class GaussianConstraint:
    """Auxiliary Gaussian term N(mean | param, sigma) multiplying the pdf."""

    name: str
    mean: float
    sigma: float

    def __post_init__(self) -> None:
        if not float(self.sigma) > 0.0:
            raise ValueError(f"Constraint on {self.name!r} needs sigma > 0.")

    def nll(self, value: float) -> float:
        z = (float(value) - float(self.mean)) / float(self.sigma)
        return 0.5 * z * z + math.log(float(self.sigma) * math.sqrt(2.0 * math.pi))


@dataclass
class Pdf:
    """A probability model: a log-density callable plus shared parameters.

    ``func(x, p1, p2, ...)`` returns the per-event log-density. The Parameter
    instances in ``parameters`` are shared with callers; ``fix``/``release``/
    ``bound`` mutate them in place and return ``self`` for chaining.
    """

    name: str
    func: Callable[..., Any]
    param_names: Tuple[str, ...]
    parameters: ParameterSet
    constraints: Tuple[GaussianConstraint, ...] = ()

    # ---- constructor ----
    @staticmethod
    def from_function(
        func: Callable[..., Any],
        *,
        name: Optional[str] = None,
        **initial: Union[float, Parameter],
    ) -> "Pdf":
        """Construct a Pdf from a plain log-density signature.

        Initial values come from ``initial`` (a float, or a Parameter to share
        with another pdf), then from numeric defaults in the signature, then 0.
        """
        names = infer_param_names(func)
        unknown = sorted(set(initial) - set(names))
        if unknown:
            raise KeyError(f"Unknown parameters for {func!r}: {unknown}")

        sig = inspect.signature(func)
        params = []
        for n in names:
            given = initial.get(n)
            if isinstance(given, Parameter):
                params.append(given)
                continue
            value = 0.0
            d = sig.parameters[n].default
            if isinstance(d, (int, float, np.number)) and not isinstance(d, bool):
                value = float(d)
            if given is not None:
                value = float(given)
            params.append(Parameter(name=n, value=value))

        return Pdf(
            name=name or getattr(func, "__name__", "pdf"),
            func=func,
            param_names=names,
            parameters=ParameterSet(params),
        )

    # ---- evaluation ----
    def values(self, overrides: Optional[Mapping[str, float]] = None) -> Dict[str, float]:
        """Current parameter values, with ``overrides`` applied on top."""
        vals = self.parameters.as_dict()
        if overrides:
            for k, v in overrides.items():
                if k in vals:
                    vals[k] = float(v)
        return vals

    def logpdf(self, x: Any, *, values: Optional[Mapping[str, float]] = None, **kwargs) -> Any:
        """Evaluate the per-event log-density at x."""
        vals = self.values(values)
        vals.update({k: float(v) for k, v in kwargs.items()})
        args = [x] + [vals[n] for n in self.param_names]
        return self.func(*args)

    def constraint_nll(
        self, constrained: Container[str], values: Optional[Mapping[str, float]] = None
    ) -> float:
        """Sum of constraint terms whose parameter is in ``constrained``."""
        if not self.constraints:
            return 0.0
        vals = self.values(values)
        return float(
            sum(c.nll(vals[c.name]) for c in self.constraints if c.name in constrained)
        )

    def get_parameters(self, data: Optional[Dataset]) -> Optional[ParameterSet]:
        """Parameters this pdf depends on given ``data`` (None without data)."""
        if data is None:
            return None
        return ParameterSet(self.parameters)

    # ---- configuration (mutates the shared parameters) ----
    def fix(self, **values: float) -> "Pdf":
        """Set parameters to values and mark them constant."""
        for k, v in values.items():
            p = self.parameters[k]
            p.set_value(v)
            p.set_constant(True)
        return self

    def release(self, *names: str) -> "Pdf":
        """Let parameters float again."""
        for k in names:
            self.parameters[k].set_constant(False)
        return self

    def bound(self, **bounds: Tuple[Optional[float], Optional[float]]) -> "Pdf":
        for k, b in bounds.items():
            lo, hi = b
            self.parameters[k].bounds = (lo, hi)
        return self

    def with_constraints(self, *constraints: GaussianConstraint) -> "Pdf":
        """Return the product of this pdf and Gaussian constraint terms.

        The product shares this pdf's Parameter instances. Constraints already
        present are not applied twice.
        """
        for c in constraints:
            if c.name not in self.parameters:
                raise KeyError(f"Constraint on unknown parameter {c.name!r}.")
        new = tuple(c for c in dict.fromkeys(constraints) if c not in self.constraints)
        if not new:
            return self
        names = "_".join(c.name for c in new)
        return replace(
            self,
            name=f"constrained_{self.name}_with_{names}",
            constraints=self.constraints + new,
        )
