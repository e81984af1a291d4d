from __future__ import annotations

from scipy import stats

from ..model import Pdf


def gaussian_logpdf(x, mu, sigma):
    """Per-event log-density of Normal(mu, sigma)."""
    return stats.norm.logpdf(x, loc=mu, scale=sigma)


def gaussian(
    *, name: str = "gaussian", mu: float = 0.0, sigma: float = 1.0
) -> Pdf:
    """Return a Gaussian Pdf with a positive width.

    Parameters in the model
    -----------------------
    mu   : mean
    sigma: width (> 0)
    """
    return Pdf.from_function(gaussian_logpdf, name=name, mu=mu, sigma=sigma).bound(
        sigma=(1e-6, None)
    )
