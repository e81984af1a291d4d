from __future__ import annotations

import threading
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Union

from .backends import get_backend
from .backends.common import CONDITIONAL_FIT_OPTIONS, GLOBAL_FIT_OPTIONS, FitOptions
from .config import ModelConfig
from .data import Dataset
from .fit_cache import GlobalFitCache
from .hypotest import run_hypo_test
from .interval import LikelihoodInterval, build_interval
from .model import Pdf
from .params import Parameter, ParameterSet
from .profile import build_profile
from .results import FitResult, HypoTestResult

NullParameters = Union[Mapping[str, float], ParameterSet, Iterable[Parameter]]


class CombinedCalculator(Protocol):
    """A tool that produces both confidence intervals and hypothesis tests."""

    def set_data(self, data: Optional[Dataset]) -> None: ...

    def set_pdf(self, pdf: Optional[Pdf]) -> None: ...

    def set_parameters(self, parameters: Optional[ParameterSet]) -> None: ...

    def set_null_parameters(self, null_parameters: Optional[NullParameters]) -> None: ...

    def set_test_size(self, size: float) -> None: ...

    def set_confidence_level(self, cl: float) -> None: ...

    def get_interval(self) -> Optional[Any]: ...

    def get_hypo_test(self) -> Optional[HypoTestResult]: ...

    def reset(self) -> None: ...


def _null_values(null_parameters: Optional[NullParameters]) -> Optional[Dict[str, float]]:
    if null_parameters is None:
        return None
    if isinstance(null_parameters, ParameterSet):
        return {name: p.value for name, p in null_parameters.items()}
    if isinstance(null_parameters, Mapping):
        return {str(k): float(v) for k, v in null_parameters.items()}
    out: Dict[str, float] = {}
    for p in null_parameters:
        if not isinstance(p, Parameter):
            raise TypeError("null_parameters must be a mapping or Parameter objects.")
        out[p.name] = p.value
    return out


def _check_size(size: float) -> float:
    size = float(size)
    if not (0.0 < size < 1.0):
        raise ValueError(f"Test size must lie in (0, 1), got {size!r}.")
    return size


class ProfileLikelihoodCalculator:
    """Profile-likelihood-ratio intervals and hypothesis tests (Wilks).

    Configure a pdf, a dataset, the parameters of interest and optionally
    null-hypothesis values, then ask ``get_interval()`` or ``get_hypo_test()``.
    The global maximum-likelihood fit is run once and reused until a setter
    for the data, pdf or parameter roles (or ``reset()``) invalidates it; the
    test size does not touch it. Changing the pdf's parameters behind the
    calculator's back requires an explicit ``reset()``.

    One request at a time per instance: each public call holds an instance lock.
    """

    def __init__(
        self,
        data: Optional[Dataset] = None,
        pdf: Optional[Pdf] = None,
        parameters: Optional[ParameterSet] = None,
        size: float = 0.05,
        null_parameters: Optional[NullParameters] = None,
        *,
        backend: Any = "scipy.minimize",
        global_fit_options: FitOptions = GLOBAL_FIT_OPTIONS,
        conditional_fit_options: FitOptions = CONDITIONAL_FIT_OPTIONS,
        name: str = "",
    ):
        self.name = name
        self.backend = get_backend(backend)
        self.conditional_fit_options = conditional_fit_options
        self._lock = threading.RLock()
        self._cache = GlobalFitCache(self.backend, global_fit_options)
        self._data = data
        self._pdf = pdf
        self._poi = None if parameters is None else ParameterSet(parameters)
        self._size = _check_size(size)
        self._null_values = _null_values(null_parameters)

    @classmethod
    def from_model_config(
        cls, data: Optional[Dataset], config: ModelConfig, size: float = 0.05, **kwargs
    ) -> "ProfileLikelihoodCalculator":
        """Build a calculator from a ModelConfig.

        With constraints, the product pdf replaces ``config.pdf``.
        """
        product = config.constrained_pdf()
        if product is not None:
            config.set_pdf(product)
        return cls(
            data=data,
            pdf=config.pdf,
            parameters=config.poi_set(),
            size=size,
            null_parameters=config.null_values or None,
            name=kwargs.pop("name", config.name),
            **kwargs,
        )

    # ---- configuration (model, data and role changes invalidate the cached fit) ----
    def reset(self) -> None:
        with self._lock:
            self._cache.reset()

    def set_data(self, data: Optional[Dataset]) -> None:
        with self._lock:
            self._data = data
            self._cache.reset()

    def set_pdf(self, pdf: Optional[Pdf]) -> None:
        with self._lock:
            self._pdf = pdf
            self._cache.reset()

    def set_parameters(self, parameters: Optional[ParameterSet]) -> None:
        with self._lock:
            self._poi = None if parameters is None else ParameterSet(parameters)
            self._cache.reset()

    def set_null_parameters(self, null_parameters: Optional[NullParameters]) -> None:
        with self._lock:
            self._null_values = _null_values(null_parameters)
            self._cache.reset()

    def set_test_size(self, size: float) -> None:
        with self._lock:
            self._size = _check_size(size)

    def set_confidence_level(self, cl: float) -> None:
        self.set_test_size(1.0 - float(cl))

    # ---- accessors ----
    @property
    def data(self) -> Optional[Dataset]:
        return self._data

    @property
    def pdf(self) -> Optional[Pdf]:
        return self._pdf

    @property
    def parameters(self) -> Optional[ParameterSet]:
        return self._poi

    @property
    def null_parameters(self) -> Optional[Dict[str, float]]:
        return None if self._null_values is None else dict(self._null_values)

    @property
    def size(self) -> float:
        return self._size

    @property
    def confidence_level(self) -> float:
        return 1.0 - self._size

    @property
    def fit_result(self) -> Optional[FitResult]:
        return self._cache.result

    @property
    def n_global_fits(self) -> int:
        return self._cache.n_fits

    # ---- results ----
    def _suffix(self) -> str:
        return f"_{self.name}" if self.name else ""

    def get_interval(self) -> Optional[LikelihoodInterval]:
        """Profile-likelihood interval on the POI at ``1 - size``, or None."""
        with self._lock:
            if self._data is None or self._pdf is None or not self._poi:
                return None
            fit = self._cache.ensure_fit(self._pdf, self._data)
            if fit is None:
                return None
            profile = build_profile(self.backend, self._pdf, self._data, self._poi, fit)
            return build_interval(
                profile,
                self._poi,
                fit,
                confidence_level=1.0 - self._size,
                name="LikelihoodInterval" + self._suffix(),
            )

    def get_hypo_test(self) -> Optional[HypoTestResult]:
        """Test the null values against the global fit, or None."""
        with self._lock:
            return run_hypo_test(
                self.backend,
                self._cache,
                self._pdf,
                self._data,
                self._null_values,
                options=self.conditional_fit_options,
                name="ProfileLRHypoTestResult" + self._suffix(),
            )
