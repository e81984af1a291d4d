from __future__ import annotations

from scipy import stats

from ..model import GaussianConstraint, Pdf


def poisson_counting_logpmf(n, s, b):
    """Log-probability of observing n events for signal s on background b."""
    return stats.poisson.logpmf(n, s + b)


def poisson_counting(
    *,
    name: str = "counting",
    s: float = 1.0,
    b: float = 1.0,
    b_mean: float | None = None,
    b_sigma: float | None = None,
) -> Pdf:
    """Return a single-bin counting experiment n ~ Poisson(s + b).

    When ``b_mean`` and ``b_sigma`` are given, the background carries an
    auxiliary Gaussian constraint, which makes ``b`` a constrained nuisance
    parameter.
    """
    pdf = Pdf.from_function(poisson_counting_logpmf, name=name, s=s, b=b).bound(
        s=(0.0, None), b=(1e-9, None)
    )
    if b_mean is not None and b_sigma is not None:
        pdf = pdf.with_constraints(GaussianConstraint("b", b_mean, b_sigma))
    return pdf
