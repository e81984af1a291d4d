from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .util import pvalue_to_significance, uncertainty_to_string

try:
    import uncertainties
except Exception:  # pragma: no cover - optional at import time
    uncertainties = None


@dataclass(frozen=True)
class FitParameter:
    """Final (or initial) state of one parameter in a fit."""

    name: str
    value: float
    error: Optional[float] = None


@dataclass(frozen=True)
class FitResult:
    """Immutable snapshot of a completed minimisation."""

    min_nll: float
    float_params_final: Tuple[FitParameter, ...]
    float_params_initial: Tuple[FitParameter, ...] = ()
    const_params: Tuple[FitParameter, ...] = ()
    cov: Optional[np.ndarray] = None  # floating-parameter covariance, (P,P)
    status: int = 0
    success: bool = True
    message: str = ""
    # Backend-specific extras (e.g. number of evaluations, method)
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return bool(self.success) and math.isfinite(float(self.min_nll))

    @property
    def float_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.float_params_final)

    def find(self, name: str) -> Optional[FitParameter]:
        for p in self.float_params_final:
            if p.name == name:
                return p
        return None

    def correlated_values(self) -> Dict[str, Any]:
        """Return name -> correlated ufloat built from the covariance."""
        if uncertainties is None:
            raise RuntimeError("uncertainties package is not available.")
        if self.cov is None:
            raise ValueError("Fit result carries no covariance matrix.")
        vals = [p.value for p in self.float_params_final]
        corr = uncertainties.correlated_values(vals, np.asarray(self.cov, dtype=float))
        return dict(zip(self.float_names, corr))

    def summary(self, digits: int | str = "auto") -> str:
        """Return a human-readable summary string for the fit."""
        lines = [
            f"FitResult(status={self.status}, valid={self.valid}, "
            f"min_nll={float(self.min_nll):.10g})"
        ]
        if self.message:
            lines.append(f"  message: {self.message}")
        for p in self.float_params_final:
            if p.error is None or not math.isfinite(p.error):
                lines.append(f"  {p.name:>12s}: {p.value:.6g}")
            else:
                lines.append(
                    f"  {p.name:>12s}: {uncertainty_to_string(p.value, p.error, precision=digits)}"
                )
        for p in self.const_params:
            lines.append(f"  {p.name:>12s}: {p.value:.6g} (const)")
        return "\n".join(lines)


@dataclass(frozen=True)
class HypoTestResult:
    """p-value of a null hypothesis from the profile likelihood ratio."""

    name: str
    null_p_value: float
    alternate_p_value: float = 0.0
    test_statistic: float = float("nan")  # sqrt(2 * delta_nll)
    delta_nll: float = float("nan")
    nll_mle: float = float("nan")
    nll_conditional: float = float("nan")

    @property
    def p_value(self) -> float:
        return self.null_p_value

    @property
    def significance(self) -> float:
        """Normal-equivalent significance of the null p-value.

        The test statistic is used when set; it stays finite where the
        p-value underflows.
        """
        if math.isfinite(self.test_statistic):
            return float(self.test_statistic)
        return pvalue_to_significance(self.null_p_value)

    def summary(self, digits: int = 4) -> str:
        return (
            f"HypoTestResult({self.name!r})\n"
            f"  {'p-value':>14s}: {self.null_p_value:.{digits}g}\n"
            f"  {'significance':>14s}: {self.significance:.{digits}g}\n"
            f"  {'delta NLL':>14s}: {self.delta_nll:.{digits}g}"
        )
