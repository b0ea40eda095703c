from numpy import array, allclose, exp, isinf, isnan, linspace, log, zeros
from landscape.transforms import Transform, LogTransform, IdentityTransform

import pytest

from hypothesis import given, strategies as st


@given(st.floats(min_value=-30, max_value=30))
def test_log_transform_inverse(u):
    transform = LogTransform()
    assert allclose(transform.forward(transform.inverse(u)), u)


def test_log_transform_values():
    transform = LogTransform()
    x = linspace(0.1, 20, 25)
    assert allclose(transform(x), log(x))
    assert allclose(transform.inverse(log(x)), x)
    assert allclose(transform.log_jacobian(log(x)), log(x))
    assert transform.forward(1.0) == 0.0
    assert isinstance(transform.forward(2.0), float)


def test_log_transform_outside_support():
    values = LogTransform().forward(array([0.0, -1.0]))
    assert isinf(values[0]) and values[0] < 0
    assert isnan(values[1])


def test_log_jacobian():
    # log-jacobian of exp(u) is u, which is checked against a finite difference
    transform = LogTransform()
    u = array([-1.5, 0.0, 2.3])
    du = 1e-6
    numeric = log((transform.inverse(u + du) - transform.inverse(u - du)) / (2 * du))
    assert allclose(transform.log_jacobian(u), numeric, atol=1e-6)


def test_identity_transform():
    transform = IdentityTransform()
    x = array([-2.0, 0.0, 3.5])
    assert allclose(transform(x), x)
    assert allclose(transform.inverse(x), x)
    assert allclose(transform.log_jacobian(x), zeros(3))
    assert transform.inverse(exp(1.0)) == exp(1.0)


def test_transform_is_abstract():
    with pytest.raises(TypeError):
        Transform()


def test_axis_label():
    assert LogTransform().axis_label(r"\sigma") == r"$\log \sigma$"
    assert IdentityTransform().axis_label(r"\sigma") == r"$\sigma$"
