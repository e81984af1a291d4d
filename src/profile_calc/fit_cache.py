from __future__ import annotations

import logging
from typing import Any, Optional
from warnings import warn

from .backends.common import GLOBAL_FIT_OPTIONS, FitConvergenceWarning, FitOptions
from .partition import floating_parameters
from .results import FitResult

logger = logging.getLogger(__name__)


class GlobalFitCache:
    """Holds at most one unconstrained maximum-likelihood fit.

    The cache does not watch the model or data; whoever changes them must call
    ``reset()``.
    """

    def __init__(self, backend: Any, options: FitOptions = GLOBAL_FIT_OPTIONS):
        self.backend = backend
        self.options = options
        self._result: Optional[FitResult] = None
        self.n_fits = 0

    @property
    def result(self) -> Optional[FitResult]:
        return self._result

    @property
    def is_valid(self) -> bool:
        return self._result is not None

    def reset(self) -> None:
        self._result = None

    def ensure_fit(self, model: Any, data: Any) -> Optional[FitResult]:
        """Return the cached global fit, running it first if needed."""
        if self._result is not None:
            return self._result
        if model is None or data is None:
            return None

        constrained = floating_parameters(self.backend, model, data)
        if constrained is None:
            logger.debug("no parameters extracted for %s; skipping global fit", getattr(model, "name", model))
            return None
        self.n_fits += 1
        fit = self.backend.fit(model, data, constrained, self.options)
        if fit is None or not fit.valid:
            warn(
                "Global fit did not converge"
                + (f": {fit.message}" if fit is not None and fit.message else "")
                + "; no result available.",
                FitConvergenceWarning,
            )
            return None

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("global fit of %s:\n%s", getattr(model, "name", model), fit.summary())
        self._result = fit
        return fit
