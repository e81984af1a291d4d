import math

import numpy as np
import pytest

from profile_calc import FitParameter, FitResult, HypoTestResult
from profile_calc.util import delta_nll_threshold, pvalue_to_significance, significance_to_pvalue


def _fit() -> FitResult:
    return FitResult(
        min_nll=3.25,
        float_params_final=(FitParameter("mu", 2.0, 0.25), FitParameter("sigma", 0.7, 0.1)),
        const_params=(FitParameter("offset", 0.0),),
        cov=np.array([[0.0625, 0.01], [0.01, 0.01]]),
    )


def test_fit_result_lookup_and_validity():
    fit = _fit()

    assert fit.valid
    assert fit.find("sigma").value == 0.7
    assert fit.find("offset") is None
    assert not FitResult(min_nll=math.inf, float_params_final=()).valid
    assert not FitResult(min_nll=1.0, float_params_final=(), success=False).valid


def test_fit_result_summary():
    text = _fit().summary(digits=2)

    assert "min_nll=3.25" in text
    assert "2.00(25)" in text
    assert "(const)" in text


def test_correlated_values_use_covariance():
    uncertainties = pytest.importorskip("uncertainties")
    values = _fit().correlated_values()

    cov = np.array(uncertainties.covariance_matrix([values["mu"], values["sigma"]]), dtype=float)
    np.testing.assert_allclose(cov, _fit().cov, rtol=1e-9, atol=1e-12)


def test_hypo_test_result_significance():
    result = HypoTestResult(name="h", null_p_value=significance_to_pvalue(2.5))

    assert result.p_value == result.null_p_value
    assert result.significance == pytest.approx(2.5)
    assert "p-value" in result.summary()


def test_hypo_test_result_significance_beyond_p_value_underflow():
    t = 40.0
    result = HypoTestResult(
        name="h", null_p_value=significance_to_pvalue(t), test_statistic=t, delta_nll=0.5 * t**2
    )

    assert result.null_p_value == 0.0
    assert result.significance == 40.0
    assert "significance" in result.summary()


def test_normal_tail_conversions():
    assert significance_to_pvalue(0.0) == pytest.approx(0.5)
    assert significance_to_pvalue(1.0) == pytest.approx(0.15865525393145707)
    assert pvalue_to_significance(0.15865525393145707) == pytest.approx(1.0)


def test_delta_nll_threshold():
    assert delta_nll_threshold(0.6826894921370859, 1) == pytest.approx(0.5)
    assert delta_nll_threshold(0.95, 1) == pytest.approx(1.920729410347062)
    with pytest.raises(ValueError):
        delta_nll_threshold(1.0, 1)
