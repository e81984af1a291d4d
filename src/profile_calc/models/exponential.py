from __future__ import annotations

import numpy as np

from ..model import Pdf


def exponential_logpdf(x, tau):
    """Per-event log-density of an exponential decay with lifetime tau (x >= 0)."""
    x = np.asarray(x, dtype=float)
    return np.where(x >= 0.0, -x / tau - np.log(tau), -np.inf)


def exponential(*, name: str = "exponential", tau: float = 1.0) -> Pdf:
    """Return an exponential-decay Pdf with lifetime ``tau`` (> 0)."""
    return Pdf.from_function(exponential_logpdf, name=name, tau=tau).bound(
        tau=(1e-9, None)
    )
