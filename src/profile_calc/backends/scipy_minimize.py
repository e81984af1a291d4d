from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional, Tuple
from warnings import warn

import numpy as np
from scipy.optimize import brentq, minimize

from ..params import Parameter, ParameterSet
from ..results import FitParameter, FitResult
from .common import FitOptions

# strategy -> (ftol, gtol, maxiter)
_STRATEGY_TOLERANCES = {
    0: (1e-9, 1e-5, 500),
    1: (1e-10, 1e-8, 15000),
    2: (1e-12, 1e-10, 15000),
}


def _line_search_stalled(res: Any) -> bool:
    """L-BFGS-B gave up in the line search (status 2, ABNORMAL_TERMINATION_IN_LNSRCH)."""
    if bool(res.success):
        return False
    return int(getattr(res, "status", -1)) == 2 and "ABNORMAL" in str(res.message).upper()


def _converged(res: Any) -> bool:
    """L-BFGS-B success, counting a line search stalled at machine precision.

    A stalled line search is recorded as ``stats["line_search_stalled"]`` on
    the fit result.
    """
    if not math.isfinite(float(res.fun)):
        return False
    return bool(res.success) or _line_search_stalled(res)


_PROFILE_OPTIONS = FitOptions(strategy=1, hesse=False)


class NegativeLogLikelihood:
    """-log L of a pdf over a private copy of a dataset, plus constraint terms."""

    def __init__(self, pdf: Any, data: Any, constrained: ParameterSet):
        self.pdf = pdf
        self.data = data.copy()
        self.constrained = ParameterSet(constrained)
        params = pdf.get_parameters(self.data)
        self.parameters = params if params is not None else ParameterSet()
        self.n_evals = 0

    def __call__(self, values: Optional[Mapping[str, float]] = None) -> float:
        self.n_evals += 1
        x = self.data.x
        logp = np.asarray(self.pdf.logpdf(x, values=values), dtype=float)
        logp = np.broadcast_to(logp, (x.shape[0],))
        w = self.data.weights
        if w is None:
            nll = -float(np.sum(logp))
        else:
            # zero-weight events drop out even where the density vanishes
            m = w > 0
            nll = -float(np.sum(w[m] * logp[m]))
        nll += self.pdf.constraint_nll(self.constrained, values)
        if math.isnan(nll):
            return math.inf
        return nll


def _bounds_of(params: List[Parameter]) -> Tuple[np.ndarray, np.ndarray]:
    lo = np.array([p.lower for p in params], dtype=float)
    hi = np.array([p.upper for p in params], dtype=float)
    return lo, hi


def _numdiff_hessian(func, x0, lo, hi, step=None) -> Optional[np.ndarray]:
    """Central finite-difference Hessian, shrinking steps near bounds."""
    x0 = np.asarray(x0, dtype=float)
    npar = int(x0.shape[0])
    step = 1e-4 if step is None else float(step)
    eps = step * (np.abs(x0) + 1.0)

    for i in range(npar):
        if np.isfinite(lo[i]):
            eps[i] = min(eps[i], 0.5 * max(0.0, x0[i] - lo[i]))
        if np.isfinite(hi[i]):
            eps[i] = min(eps[i], 0.5 * max(0.0, hi[i] - x0[i]))
        if eps[i] <= 0.0:
            return None

    f0 = float(func(x0))
    hess = np.zeros((npar, npar), dtype=float)
    for i in range(npar):
        ei = np.zeros(npar, dtype=float)
        ei[i] = eps[i]
        fpp = float(func(x0 + ei))
        fmm = float(func(x0 - ei))
        hess[i, i] = (fpp - 2.0 * f0 + fmm) / (eps[i] ** 2)
        for j in range(i + 1, npar):
            ej = np.zeros(npar, dtype=float)
            ej[j] = eps[j]
            fpp = float(func(x0 + ei + ej))
            fpm = float(func(x0 + ei - ej))
            fmp = float(func(x0 - ei + ej))
            fmm = float(func(x0 - ei - ej))
            hij = (fpp - fpm - fmp + fmm) / (4.0 * eps[i] * eps[j])
            hess[i, j] = hij
            hess[j, i] = hij
    return hess


def _minimize_over(
    nll: NegativeLogLikelihood,
    free: List[Parameter],
    fixed: Mapping[str, float],
    options: FitOptions,
    start: Optional[Mapping[str, float]] = None,
) -> Tuple[Any, Dict[str, float], Any]:
    """Minimise ``nll`` over ``free`` with ``fixed`` overriding current values.

    Returns (scipy result or None, best free values, objective).
    """
    base = nll.parameters.as_dict()
    base.update({k: float(v) for k, v in fixed.items()})
    names = [p.name for p in free]

    def objective(theta: np.ndarray) -> float:
        vals = dict(base)
        for j, name in enumerate(names):
            vals[name] = float(theta[j])
        return nll(vals)

    if not free:
        return None, {}, objective

    start = start or {}
    lo, hi = _bounds_of(free)
    p0 = np.array([float(start.get(p.name, p.value)) for p in free], dtype=float)
    p0 = np.clip(p0, lo, hi)

    ftol, gtol, maxiter = _STRATEGY_TOLERANCES.get(int(options.strategy), _STRATEGY_TOLERANCES[1])
    if options.max_iterations is not None:
        maxiter = int(options.max_iterations)
    scipy_bounds = [
        (None if not math.isfinite(a) else a, None if not math.isfinite(b) else b)
        for a, b in zip(lo, hi)
    ]
    res = minimize(
        lambda v: float(objective(np.asarray(v, dtype=float))),
        p0,
        method="L-BFGS-B",
        bounds=scipy_bounds,
        options={"ftol": ftol, "gtol": gtol, "maxiter": maxiter},
    )
    best = {name: float(v) for name, v in zip(names, np.asarray(res.x, dtype=float))}
    return res, best, objective


class ProfileLikelihood:
    """Profile of an NLL over ``poi``; owns the NLL it was built from.

    Evaluates to min over the other floating parameters of NLL(poi) minus the
    global minimum, which is computed once on first use.
    """

    def __init__(self, nll: NegativeLogLikelihood, poi: ParameterSet, options: FitOptions = _PROFILE_OPTIONS):
        self.nll = nll
        self.poi = ParameterSet(poi)
        self.options = options
        self._abs_min: Optional[float] = None
        self._best: Dict[str, float] = {}

    def _free(self, exclude) -> List[Parameter]:
        return [
            p
            for p in self.nll.constrained.values()
            if not p.constant and p.name not in exclude
        ]

    @property
    def best_fit(self) -> Dict[str, float]:
        self.global_minimum()
        return dict(self._best)

    def global_minimum(self) -> float:
        if self._abs_min is None:
            res, best, objective = _minimize_over(self.nll, self._free(()), {}, self.options)
            self._abs_min = float(res.fun) if res is not None else float(objective(np.empty(0)))
            self._best = best
        return self._abs_min

    def _conditional(self, fixed: Mapping[str, float]) -> float:
        abs_min = self.global_minimum()
        res, _, objective = _minimize_over(
            self.nll, self._free(fixed), fixed, self.options, start=self._best
        )
        value = float(res.fun) if res is not None else float(objective(np.empty(0)))
        return value - abs_min

    def __call__(self, point: Optional[Mapping[str, float]] = None) -> float:
        fixed = {name: p.value for name, p in self.poi.items()}
        if point:
            for k, v in point.items():
                if k not in fixed:
                    raise KeyError(f"{k!r} is not a parameter of interest.")
                fixed[k] = float(v)
        return self._conditional(fixed)

    def find_limit(self, name: str, threshold: float, upper: bool) -> float:
        """Value of POI ``name`` where the profile crosses ``threshold``.

        Every other floating parameter, other POI included, is profiled. The
        bracket grows outward from the best fit in steps of the POI error; if
        it reaches the parameter bound first, the bound is returned.
        """
        par = self.poi[name]
        if par.constant:
            raise ValueError(f"Parameter of interest {name!r} is constant; no limit exists.")
        self.global_minimum()
        x0 = float(self._best.get(name, par.value))
        edge = par.upper if upper else par.lower
        sign = 1.0 if upper else -1.0

        step = par.error if par.error is not None and par.error > 0 and math.isfinite(par.error) else 0.0
        if step <= 0.0:
            step = max(0.1 * abs(x0), 0.1)

        def g(x: float) -> float:
            return self._conditional({name: x}) - float(threshold)

        a = x0
        for _ in range(64):
            b = x0 + sign * step
            if (upper and b >= edge) or (not upper and b <= edge):
                if g(edge) < 0.0:
                    warn(
                        f"Profile for {name!r} does not cross {threshold:g} before its "
                        f"{'upper' if upper else 'lower'} bound; returning the bound.",
                        UserWarning,
                    )
                    return float(edge)
                b = edge
                break
            if g(b) > 0.0:
                break
            a = b
            step *= 2.0
        else:
            raise RuntimeError(f"Could not bracket the {'upper' if upper else 'lower'} limit of {name!r}.")

        lo, hi = (a, b) if a < b else (b, a)
        return float(brentq(g, lo, hi, xtol=1e-10, rtol=1e-10))


class ScipyMinimizeBackend:
    name = "scipy.minimize"

    def extract_parameters(self, model: Any, data: Any) -> Optional[ParameterSet]:
        if model is None or data is None:
            return None
        return model.get_parameters(data)

    def build_nll(self, model: Any, data: Any, constrained: ParameterSet) -> NegativeLogLikelihood:
        return NegativeLogLikelihood(model, data, constrained)

    def profile(self, nll: NegativeLogLikelihood, poi: ParameterSet) -> ProfileLikelihood:
        return ProfileLikelihood(nll, poi)

    def evaluate(self, function: Any) -> float:
        return float(function())

    def fit(
        self,
        model: Any,
        data: Any,
        constrained: ParameterSet,
        options: FitOptions,
    ) -> Optional[FitResult]:
        """Minimise the NLL over the non-constant members of ``constrained``.

        The model's parameters are left at the minimum (values, and errors when
        ``options.hesse`` is set).
        """
        nll = self.build_nll(model, data, constrained)
        free = [p for p in constrained.values() if not p.constant]
        free_names = {p.name for p in free}
        initial = tuple(FitParameter(p.name, p.value, p.error) for p in free)
        const = tuple(
            FitParameter(p.name, p.value, p.error)
            for p in nll.parameters.values()
            if p.name not in free_names
        )

        res, best, objective = _minimize_over(nll, free, {}, options)
        if res is None:
            value = float(objective(np.empty(0)))
            if not options.save:
                return None
            return FitResult(
                min_nll=value,
                float_params_final=(),
                float_params_initial=(),
                const_params=const,
                success=math.isfinite(value),
                message="no floating parameters",
                stats={"backend": self.name, "n_evals": nll.n_evals},
            )

        theta = np.asarray(res.x, dtype=float)
        cov = None
        errors: List[Optional[float]] = [None] * len(free)
        if options.hesse:
            lo, hi = _bounds_of(free)
            hess = _numdiff_hessian(objective, theta, lo, hi)
            if hess is not None:
                try:
                    cov = np.linalg.pinv(hess)
                except np.linalg.LinAlgError:
                    cov = None
            if cov is not None:
                diag = np.diag(cov)
                errors = [float(math.sqrt(d)) if d >= 0.0 else math.nan for d in diag]

        for p, err in zip(free, errors):
            p.set_value(best[p.name])
            if options.hesse:
                p.set_error(err)

        if not options.save:
            return None

        final = tuple(
            FitParameter(p.name, best[p.name], err) for p, err in zip(free, errors)
        )
        return FitResult(
            min_nll=float(res.fun),
            float_params_final=final,
            float_params_initial=initial,
            const_params=const,
            cov=cov,
            status=int(getattr(res, "status", 0)),
            success=_converged(res),
            message=str(res.message),
            stats={
                "backend": self.name,
                "method": "L-BFGS-B",
                "strategy": int(options.strategy),
                "n_evals": nll.n_evals,
                "line_search_stalled": _line_search_stalled(res),
            },
        )
