from collections import Counter
from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import pytest

from profile_calc import Dataset, FitOptions, FitParameter, FitResult, ParameterSet, models


class FakeNLL:
    def __init__(self, parameters: ParameterSet, constrained: ParameterSet, value: float):
        self.parameters = parameters
        self.constrained = constrained
        self.value = value

    def __call__(self, values=None) -> float:
        return self.value


class FakeProfile:
    def __init__(self, nll: FakeNLL, poi: ParameterSet):
        self.nll = nll
        self.poi = poi

    def __call__(self, point=None) -> float:
        return 0.0

    def global_minimum(self) -> float:
        return self.nll.value

    def find_limit(self, name: str, threshold: float, upper: bool) -> float:
        return self.poi[name].value + (1.0 if upper else -1.0)


class RecordingBackend:
    """Likelihood backend double that counts calls and returns canned minima.

    The global fit is recognised by ``options.hesse``.
    """

    name = "recording"

    def __init__(
        self,
        *,
        nll_mle: float = 10.0,
        nll_cond: float = 12.0,
        nll_value: float = 15.0,
        best: Optional[Dict[str, float]] = None,
        global_valid: bool = True,
        cond_valid: bool = True,
        cond_error: Optional[Exception] = None,
        cond_result: bool = True,
        extractable: bool = True,
    ):
        self.nll_mle = nll_mle
        self.nll_cond = nll_cond
        self.nll_value = nll_value
        self.best = dict(best or {})
        self.global_valid = global_valid
        self.cond_valid = cond_valid
        self.cond_error = cond_error
        self.cond_result = cond_result
        self.extractable = extractable
        self.calls: Counter = Counter()
        self.fit_options: List[FitOptions] = []
        # (name -> (value, constant)) of the model's parameters at each fit
        self.fit_states: List[Dict[str, Tuple[float, bool]]] = []

    def extract_parameters(self, model: Any, data: Any) -> Optional[ParameterSet]:
        self.calls["extract_parameters"] += 1
        if model is None or data is None or not self.extractable:
            return None
        return model.get_parameters(data)

    def fit(self, model, data, constrained, options) -> Optional[FitResult]:
        self.calls["fit"] += 1
        self.fit_options.append(options)
        self.fit_states.append(
            {n: (p.value, p.constant) for n, p in model.parameters.items()}
        )
        free = [p for p in constrained.values() if not p.constant]
        if options.hesse:
            return FitResult(
                min_nll=self.nll_mle,
                float_params_final=tuple(
                    FitParameter(p.name, self.best.get(p.name, p.value), 0.1) for p in free
                ),
                success=self.global_valid,
                message="" if self.global_valid else "did not converge",
            )
        if self.cond_error is not None:
            raise self.cond_error
        if not self.cond_result:
            return None
        return FitResult(
            min_nll=self.nll_cond,
            float_params_final=tuple(FitParameter(p.name, p.value) for p in free),
            success=self.cond_valid,
            message="" if self.cond_valid else "call limit reached",
        )

    def build_nll(self, model, data, constrained) -> FakeNLL:
        self.calls["build_nll"] += 1
        return FakeNLL(model.get_parameters(data), ParameterSet(constrained), self.nll_value)

    def profile(self, nll, poi) -> FakeProfile:
        self.calls["profile"] += 1
        return FakeProfile(nll, ParameterSet(poi))

    def evaluate(self, function) -> float:
        self.calls["evaluate"] += 1
        return float(function())


@pytest.fixture
def sample_mean_two() -> Dataset:
    # five events with sample mean 2.0 and population variance 0.5
    return Dataset.from_array([1.0, 1.5, 2.0, 2.5, 3.0])


@pytest.fixture
def gaussian_pdf():
    return models.gaussian(mu=0.5, sigma=1.0)


@pytest.fixture
def recording_backend() -> RecordingBackend:
    return RecordingBackend(best={"mu": 2.0, "sigma": 0.7})


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(0)
