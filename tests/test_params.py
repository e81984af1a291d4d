import pytest

from profile_calc import Dataset, Parameter, ParameterSet, models
from profile_calc.backends import get_backend
from profile_calc.partition import floating_parameters, remove_constant_parameters


def _params() -> ParameterSet:
    return ParameterSet(
        [
            Parameter("mu", 1.0),
            Parameter("sigma", 2.0, constant=True),
            Parameter("frac", 0.3, bounds=(0.0, 1.0)),
        ]
    )


def test_parameter_set_indexing_and_references():
    params = _params()

    assert params.names == ("mu", "sigma", "frac")
    assert params[0] is params["mu"]
    assert params.find("missing") is None
    with pytest.raises(KeyError):
        params["missing"]

    view = ParameterSet(params)
    view["mu"].set_value(5.0)
    assert params["mu"].value == 5.0


def test_snapshot_is_detached():
    params = _params()
    snap = params.snapshot()

    params["mu"].set_value(-1.0)

    assert snap["mu"].value == 1.0
    assert snap["mu"] is not params["mu"]


def test_floating_and_constant_split():
    params = _params()

    assert params.floating().names == ("mu", "frac")
    assert params.constant().names == ("sigma",)
    assert remove_constant_parameters(params).names == ("mu", "frac")
    assert params["frac"].lower == 0.0
    assert params["mu"].upper == float("inf")


def test_duplicate_names_keep_first():
    first = Parameter("mu", 1.0)
    params = ParameterSet([first, Parameter("mu", 2.0)])

    assert len(params) == 1
    assert params["mu"] is first


def test_floating_parameters_follow_constant_flags():
    pdf = models.gaussian(mu=0.0, sigma=1.0)
    data = Dataset.from_array([0.1, -0.2, 0.3])
    backend = get_backend("scipy.minimize")

    assert floating_parameters(backend, pdf, data).names == ("mu", "sigma")
    pdf.fix(sigma=1.0)
    assert floating_parameters(backend, pdf, data).names == ("mu",)
    pdf.release("sigma")
    assert floating_parameters(backend, pdf, data).names == ("mu", "sigma")


def test_floating_parameters_none_without_data():
    pdf = models.gaussian()
    backend = get_backend("scipy.minimize")

    assert floating_parameters(backend, pdf, None) is None
    assert len(floating_parameters(backend, pdf.fix(mu=0.0, sigma=1.0), Dataset.from_array([0.0]))) == 0


def test_unknown_backend_name():
    with pytest.raises(ValueError, match="Unknown backend"):
        get_backend("minuit")


def test_parameter_u_requires_error():
    uncertainties = pytest.importorskip("uncertainties")
    p = Parameter("mu", 1.0)
    with pytest.raises(ValueError, match="No error"):
        p.u
    p.set_error(0.5)
    assert isinstance(p.u, uncertainties.core.Variable)
