from __future__ import annotations

import inspect
import math
from typing import Any, Callable, Tuple

from scipy import stats


def significance_to_pvalue(z: float) -> float:
    """One-sided upper-tail probability of a standard Normal beyond ``z``."""
    return float(stats.norm.sf(float(z)))


def pvalue_to_significance(p: float) -> float:
    """Normal-equivalent significance Z of a one-sided p-value."""
    return float(stats.norm.isf(float(p)))


def delta_nll_threshold(confidence_level: float, ndof: int) -> float:
    """ΔNLL crossing value of a profile-likelihood region (Wilks).

    -2 ΔlogL ~ χ²(ndof), so the region at ``confidence_level`` ends where the
    profiled NLL has risen by half the χ² quantile.
    """
    cl = float(confidence_level)
    if not (0.0 < cl < 1.0):
        raise ValueError(f"confidence_level must lie in (0, 1), got {cl!r}.")
    if int(ndof) < 1:
        raise ValueError("ndof must be >= 1.")
    return 0.5 * float(stats.chi2.ppf(cl, int(ndof)))


def infer_param_names(func: Callable[..., Any]) -> Tuple[str, ...]:
    """Infer parameter names from a log-density signature.

    Conventions:
    - first arg is the observable (x)
    - remaining positional/keyword parameters are model parameters

    *args/**kwargs are not supported.
    """
    sig = inspect.signature(func)
    params = list(sig.parameters.values())

    if len(params) < 2:
        raise TypeError("Model function must have at least (x, p1, ...).")

    bad_kinds = {inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD}
    for p in params:
        if p.kind in bad_kinds:
            raise TypeError("*args/**kwargs are not supported in model functions.")

    names = [p.name for p in params[1:]]
    if len(set(names)) != len(names):
        raise TypeError("Duplicate parameter names in function signature.")
    return tuple(names)


def uncertainty_to_string(
    x: float, err: float, precision: int | str | None = 1
) -> str:
    """Format a value with uncertainty as a compact string.

    Returns the shortest string representation of x +/- err as either
    x.xx(ee)e+xx or xxx.xx(ee). Use precision="auto" to follow the
    common 1-or-2 significant-digit rule for the uncertainty.
    """
    auto = precision is None or (
        isinstance(precision, str) and precision.lower() == "auto"
    )
    x = float(x)
    err = float(err)

    if math.isnan(x) or math.isnan(err):
        return "NaN"
    if math.isinf(x) or math.isinf(err):
        return "inf"

    err = abs(err)
    if err == 0.0:
        if auto:
            precision = 1
        precision = max(1, int(precision))  # type: ignore[arg-type]
        return f"{x:.{precision}g}(0)"

    err_exp = int(math.floor(math.log10(err)))
    if auto:
        leading = int(err / (10 ** err_exp) + 1e-12)
        precision = 2 if leading == 1 else 1
    precision = max(1, int(precision))  # type: ignore[arg-type]

    if x == 0.0 or abs(x) < err:
        x_exp = err_exp
    else:
        x_exp = int(math.floor(math.log10(abs(x))))

    un_exp = err_exp - precision + 1
    un_int = round(err * 10 ** (-un_exp))

    no_exp = un_exp
    no_int = round(x * 10 ** (-no_exp))

    fieldw = x_exp - no_exp
    fmt = f"%.{fieldw}f"
    result1 = (fmt + "(%.0f)e%d") % (no_int * 10 ** (-fieldw), un_int, x_exp)

    fieldw = max(0, -no_exp)
    fmt = f"%.{fieldw}f"
    result2 = (fmt + "(%.0f)") % (no_int * 10 ** no_exp, un_int * 10 ** max(0, un_exp))

    return result2 if len(result2) <= len(result1) else result1
