from __future__ import annotations

from contextlib import contextmanager
import logging
import math
from typing import Any, Iterator, List, Mapping, Optional, Tuple
from warnings import warn

from .backends.common import CONDITIONAL_FIT_OPTIONS, FitConvergenceWarning, FitOptions
from .fit_cache import GlobalFitCache
from .params import Parameter, ParameterSet
from .partition import remove_constant_parameters
from .results import HypoTestResult
from .util import significance_to_pvalue

logger = logging.getLogger(__name__)


@contextmanager
def fixed_parameters(
    params: ParameterSet, targets: Mapping[str, float]
) -> Iterator[ParameterSet]:
    """Temporarily set members of ``params`` to ``targets`` and hold them constant.

    Names in ``targets`` that are not in ``params`` are ignored. Every touched
    parameter gets its previous value and constant flag back on exit, whether
    the block returns or raises. Yields the set of touched parameters.
    """
    touched: List[Tuple[Parameter, float, bool]] = []
    try:
        for name, target in targets.items():
            par = params.find(name)
            if par is None:
                continue
            touched.append((par, par.value, par.constant))
            par.set_value(target)
            par.set_constant(True)
        yield ParameterSet(p for p, _, _ in touched)
    finally:
        for par, value, constant in reversed(touched):
            par.set_value(value)
            par.set_constant(constant)


def run_hypo_test(
    backend: Any,
    cache: GlobalFitCache,
    model: Any,
    data: Any,
    null_values: Optional[Mapping[str, float]],
    *,
    options: FitOptions = CONDITIONAL_FIT_OPTIONS,
    name: Optional[str] = None,
) -> Optional[HypoTestResult]:
    """Profile-likelihood-ratio test of ``null_values`` against the global fit.

    Returns None when the model, data or null values are missing, or when no
    valid global fit exists. The p-value is the upper Normal tail beyond
    sqrt(2 * ΔNLL); with several null parameters this is an approximation
    (Wilks gives χ² with one dof per tested parameter).
    """
    if model is None or data is None:
        return None
    if not null_values:
        return None

    fit = cache.ensure_fit(model, data)
    if fit is None:
        return None
    nll_mle = float(fit.min_nll)

    all_params = backend.extract_parameters(model, data)
    if all_params is None:
        return None
    unknown = [n for n in null_values if n not in all_params]
    if unknown:
        warn(f"Null parameters not in the model are ignored: {unknown}", UserWarning)
    constrained = remove_constant_parameters(all_params)

    with fixed_parameters(constrained, null_values):
        nuisance = remove_constant_parameters(constrained)
        if len(nuisance) > 0:
            cond = backend.fit(model, data, constrained, options)
            if cond is None:
                warn("Conditional fit produced no result.", FitConvergenceWarning)
                return None
            if not cond.valid:
                warn(
                    "Conditional fit did not converge"
                    + (f" ({cond.message})" if cond.message else "")
                    + "; using its minimum as-is.",
                    FitConvergenceWarning,
                )
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("conditional fit:\n%s", cond.summary())
            nll_cond = float(cond.min_nll)
        else:
            # nothing floats: the likelihood is a single number
            nll = backend.build_nll(model, data, constrained)
            nll_cond = float(backend.evaluate(nll))

    delta_nll = max(nll_cond - nll_mle, 0.0)
    t = math.sqrt(2.0 * delta_nll)
    logger.debug(
        "NLL at MLE %.10g, at conditional MLE %.10g, significance %.4g",
        nll_mle,
        nll_cond,
        t,
    )
    return HypoTestResult(
        name=name or "ProfileLRHypoTestResult",
        null_p_value=significance_to_pvalue(t),
        alternate_p_value=0.0,
        test_statistic=t,
        delta_nll=delta_nll,
        nll_mle=nll_mle,
        nll_conditional=nll_cond,
    )
