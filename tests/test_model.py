from dataclasses import FrozenInstanceError

from numpy import array, allclose, isclose, isinf, isnan, linspace, log, meshgrid, sqrt
from numpy import median, sin, cos
from numpy.random import default_rng
from scipy.stats import invgamma, norm
from landscape.model import HierarchicalModel, EvaluationContext, OBSERVED_DATA

import pytest


def finite_difference(func=None, x0=None, delta=1e-5):
    grad = []
    for i in range(x0.size):
        x1 = x0.copy()
        x2 = x0.copy()
        dx = x0[i] * delta

        x1[i] -= dx
        x2[i] += dx

        grad.append(0.5 * (func(x2) - func(x1)) / dx)
    return array(grad)


def reference_log_joint(sigma, mu, data=OBSERVED_DATA):
    location = mu + 5 * (sin_plus_cos(mu))
    return (
        invgamma.logpdf(sigma, 2.0, scale=3.0)
        + norm.logpdf(mu, 0.0, sqrt(sigma))
        + norm.logpdf(array(data), location, sqrt(sigma)).sum()
    )


def sin_plus_cos(x):
    return sin(x) + cos(x)


@pytest.fixture
def model():
    return HierarchicalModel()


def test_model_defaults(model):
    assert (model.data == array([1.5, 2.0, 13.0, 2.1, 0.0])).all()
    assert model.shape == 2.0
    assert model.scale == 3.0
    assert model.amplitude == 5.0
    assert model.n_parameters == 2


def test_reparameterise(model):
    assert model.reparameterise(0.0) == 5.0
    mu = linspace(-3, 3, 7)
    assert allclose(model.reparameterise(mu), mu + 5 * sin_plus_cos(mu))


def test_observations_use_reparameterised_location(model):
    sigma = 2.0
    expected = (
        invgamma.logpdf(sigma, 2.0, scale=3.0)
        + norm.logpdf(0.0, 0.0, sqrt(sigma))
        + norm.logpdf(array(OBSERVED_DATA), 5.0, sqrt(sigma)).sum()
    )
    unshifted = (
        invgamma.logpdf(sigma, 2.0, scale=3.0)
        + norm.logpdf(0.0, 0.0, sqrt(sigma))
        + norm.logpdf(array(OBSERVED_DATA), 0.0, sqrt(sigma)).sum()
    )
    assert isclose(model.log_joint(sigma, 0.0), expected)
    assert not isclose(model.log_joint(sigma, 0.0), unshifted)
    assert isclose(model.evaluate(sigma, 0.0), -expected)


def test_evaluate_matches_reference(model):
    for sigma, mu in [(0.5, -1.2), (3.0, 0.7), (12.0, 4.0)]:
        assert isclose(model.evaluate(sigma, mu), -reference_log_joint(sigma, mu))


def test_evaluate_deterministic(model):
    sigma, mu = 1.37, -0.42
    first = model.evaluate(sigma, mu)
    assert all(model.evaluate(sigma, mu) == first for _ in range(10))
    assert HierarchicalModel().evaluate(sigma, mu) == first


def test_evaluate_grid(model):
    sigma_grid, mu_grid = meshgrid(linspace(0.1, 5, 7), linspace(-2, 2, 4))
    values = model.evaluate(sigma_grid, mu_grid)
    assert values.shape == (4, 7)
    assert isclose(values[2, 3], model.evaluate(sigma_grid[2, 3], mu_grid[2, 3]))


def test_evaluate_invalid_sigma(model):
    values = model.evaluate(array([0.0, -1.0, -25.0]), 0.5)
    assert isinf(values).all() and (values > 0).all()
    assert isnan(model.evaluate(float("nan"), 0.5))
    assert isnan(model.evaluate(1.0, float("nan")))


def test_context_is_immutable(model):
    ctx = model.context(2.0, 1.0)
    assert isinstance(ctx, EvaluationContext)
    with pytest.raises(FrozenInstanceError):
        ctx.sigma = 3.0
    # each evaluation builds its own context
    assert model.context(2.0, 1.0) is not ctx
    assert model.joint_log_density(ctx) == model.log_joint(2.0, 1.0)


def test_unconstrained_log_posterior(model):
    theta = array([log(2.5), 0.8])
    assert isclose(model(theta), model.log_joint(2.5, 0.8) + log(2.5))
    assert model.cost(theta) == -model(theta)


def test_unconstrained_gradient(model):
    for theta in [array([0.3, 1.2]), array([-0.7, -2.1]), array([1.9, 0.45])]:
        numeric_gradient = finite_difference(func=model, x0=theta)
        assert allclose(model.gradient(theta), numeric_gradient, rtol=1e-4)
        assert allclose(model.cost_gradient(theta), -model.gradient(theta))


def test_parameter_conversion(model):
    theta = model.to_unconstrained(4.0, -1.5)
    assert allclose(theta, [log(4.0), -1.5])
    sigma, mu = model.to_constrained(theta)
    assert isclose(sigma, 4.0) and mu == -1.5

    sigma, mu = model.to_constrained(array([[0.0, 1.0], [log(3.0), 2.0]]))
    assert allclose(sigma, [1.0, 3.0])
    assert allclose(mu, [1.0, 2.0])


def test_sample_prior(model):
    rng = default_rng(1324)
    samples = array([model.sample_prior(rng) for _ in range(2000)])
    assert (samples[:, 0] > 0).all()
    assert isclose(median(samples[:, 0]), invgamma.median(2.0, scale=3.0), rtol=0.1)
    assert isclose(samples[:, 1].mean(), 0.0, atol=0.25)


def test_generate_initial_guesses(model):
    guesses = model.generate_initial_guesses(
        n_guesses=3, prior_samples=50, generator=default_rng(7)
    )
    assert len(guesses) == 3
    assert all(g.shape == (2,) for g in guesses)
    costs = [model.cost(g) for g in guesses]
    assert costs == sorted(costs)


def test_generate_initial_guesses_bad_arguments(model):
    with pytest.raises(TypeError):
        model.generate_initial_guesses(2.2)

    with pytest.raises(ValueError):
        model.generate_initial_guesses(0)

    with pytest.raises(ValueError):
        model.generate_initial_guesses(1, -3)

    with pytest.raises(ValueError):
        model.generate_initial_guesses(2, 1)


def test_model_bad_arguments():
    with pytest.raises(ValueError):
        HierarchicalModel(shape=-1.0)

    with pytest.raises(ValueError):
        HierarchicalModel(scale=0.0)

    with pytest.raises(ValueError):
        HierarchicalModel(data=[[1.0, 2.0], [3.0, 4.0]])

    with pytest.raises(TypeError):
        HierarchicalModel(amplitude="5")
