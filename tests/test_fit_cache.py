import logging

import pytest

from profile_calc import FitConvergenceWarning, FitResult
from profile_calc.fit_cache import GlobalFitCache

from conftest import RecordingBackend


def test_cache_runs_one_fit_until_reset(gaussian_pdf, sample_mean_two, recording_backend):
    cache = GlobalFitCache(recording_backend)

    first = cache.ensure_fit(gaussian_pdf, sample_mean_two)
    second = cache.ensure_fit(gaussian_pdf, sample_mean_two)

    assert first is second
    assert cache.is_valid
    assert recording_backend.calls["fit"] == 1

    cache.reset()
    assert cache.result is None
    cache.ensure_fit(gaussian_pdf, sample_mean_two)
    assert recording_backend.calls["fit"] == 2
    assert cache.n_fits == 2


def test_cache_fits_floating_parameters_only(gaussian_pdf, sample_mean_two, recording_backend):
    gaussian_pdf.fix(sigma=1.0)
    cache = GlobalFitCache(recording_backend)

    fit = cache.ensure_fit(gaussian_pdf, sample_mean_two)

    assert fit.float_names == ("mu",)


def test_cache_stays_empty_without_model_or_data(gaussian_pdf, sample_mean_two, recording_backend):
    cache = GlobalFitCache(recording_backend)

    assert cache.ensure_fit(None, sample_mean_two) is None
    assert cache.ensure_fit(gaussian_pdf, None) is None
    assert recording_backend.calls["fit"] == 0


def test_cache_rejects_invalid_fit(gaussian_pdf, sample_mean_two):
    backend = RecordingBackend(global_valid=False)
    cache = GlobalFitCache(backend)

    with pytest.warns(FitConvergenceWarning):
        assert cache.ensure_fit(gaussian_pdf, sample_mean_two) is None

    assert not cache.is_valid


def test_cache_skips_fit_when_parameters_cannot_be_extracted(gaussian_pdf, sample_mean_two):
    backend = RecordingBackend(extractable=False)
    cache = GlobalFitCache(backend)

    assert cache.ensure_fit(gaussian_pdf, sample_mean_two) is None

    assert not cache.is_valid
    assert cache.n_fits == 0
    assert backend.calls["fit"] == 0


def test_fit_summary_only_built_for_debug_logging(
    gaussian_pdf, sample_mean_two, recording_backend, monkeypatch, caplog
):
    calls = []
    monkeypatch.setattr(FitResult, "summary", lambda self, digits="auto": calls.append(self) or "fit summary")

    caplog.set_level(logging.INFO, logger="profile_calc.fit_cache")
    GlobalFitCache(recording_backend).ensure_fit(gaussian_pdf, sample_mean_two)
    assert calls == []

    caplog.set_level(logging.DEBUG, logger="profile_calc.fit_cache")
    GlobalFitCache(recording_backend).ensure_fit(gaussian_pdf, sample_mean_two)
    assert len(calls) == 1
    assert "fit summary" in caplog.text
