from numpy import exp, linspace, zeros
from numpy.random import default_rng
from landscape.chain import Chain
from landscape.model import HierarchicalModel
from landscape.surface import PosteriorPath, PosteriorSurface, build_landscape
from landscape.plotting import landscape_plot, sampler_comparison_plot, trace_plot
from landscape.transforms import IdentityTransform
from mpl_toolkits.mplot3d.art3d import Line3DCollection
import matplotlib.pyplot as plt

import pytest


@pytest.fixture
def model():
    return HierarchicalModel()


@pytest.fixture
def chain(model):
    rng = default_rng(1234)
    sigma = exp(rng.normal(loc=1.0, scale=0.3, size=60))
    mu = rng.normal(loc=0.2, scale=0.5, size=60)
    return Chain(sigma=sigma, mu=mu, log_probability=model.log_joint(sigma, mu))


@pytest.fixture
def landscape(chain, model):
    return build_landscape(chain, model, granularity=25)


def test_landscape_plot(landscape):
    surface, path = landscape
    fig = landscape_plot(surface, path, show=False)

    axes = fig.get_axes()
    assert len(axes) == 1
    lines = [c for c in axes[0].collections if isinstance(c, Line3DCollection)]
    assert len(lines) == 1
    # one segment per consecutive pair of samples, colored by step number
    assert (lines[0].get_array() == path.color_index[:-1]).all()
    plt.close(fig)


def test_landscape_plot_single_point(chain, model):
    single = Chain(
        sigma=chain.sigma[:1],
        mu=chain.mu[:1],
        log_probability=chain.log_probability[:1],
    )
    with pytest.warns(UserWarning):
        surface, path = build_landscape(single, model, granularity=10)
    fig = landscape_plot(surface, path, show=False)
    collections = fig.get_axes()[0].collections
    assert not any(isinstance(c, Line3DCollection) for c in collections)
    plt.close(fig)


def test_landscape_plot_saves_file(landscape, tmp_path):
    filename = tmp_path / "landscape.png"
    fig = landscape_plot(*landscape, show=False, filename=filename)
    assert filename.exists()
    plt.close(fig)


def test_landscape_plot_input_parsing(landscape):
    surface, path = landscape

    with pytest.raises(ValueError):
        landscape_plot(surface, path, labels=["x", "y"], show=False)

    bad_surface = PosteriorSurface(
        sigma_axis=surface.sigma_axis, mu_axis=surface.mu_axis, values=zeros((3, 4))
    )
    with pytest.raises(ValueError):
        landscape_plot(bad_surface, path, show=False)

    with pytest.raises(ValueError):
        landscape_plot(surface, PosteriorPath(points=zeros((5, 2))), show=False)

    with pytest.raises(ValueError):
        landscape_plot(surface, PosteriorPath(points=zeros((0, 3))), show=False)


def test_sampler_comparison_plot(landscape):
    landscapes = {f"sampler {i}": landscape for i in range(5)}
    fig = sampler_comparison_plot(landscapes, show=False)
    assert len(fig.get_axes()) == 5
    assert [ax.get_title() for ax in fig.get_axes()] == list(landscapes)
    plt.close(fig)

    with pytest.raises(ValueError):
        sampler_comparison_plot({}, show=False)


def test_trace_plot(chain):
    fig = trace_plot(chain, show=False)
    assert len(fig.get_axes()) == 3
    plt.close(fig)

    short_chain = Chain(sigma=[1.0], mu=[0.0], log_probability=[-1.0])
    with pytest.raises(ValueError):
        trace_plot(short_chain, show=False)


def test_path_color_index():
    path = PosteriorPath(points=linspace(0, 1, 12).reshape(4, 3))
    assert (path.color_index == [0, 1, 2, 3]).all()


def test_axis_labels_follow_transform(chain, model):
    surface, path = build_landscape(
        chain, model, granularity=15, transform=IdentityTransform()
    )
    fig = landscape_plot(surface, path, show=False)
    assert fig.get_axes()[0].get_xlabel() == r"$\sigma$"
    plt.close(fig)

    surface, path = build_landscape(chain, model, granularity=15)
    fig = landscape_plot(surface, path, show=False)
    assert fig.get_axes()[0].get_xlabel() == r"$\log \sigma$"
    plt.close(fig)

    fig = trace_plot(chain, transform=IdentityTransform(), show=False)
    assert fig.get_axes()[0].get_ylabel() == r"$\sigma$"
    plt.close(fig)

    fig = trace_plot(chain, show=False)
    assert fig.get_axes()[0].get_ylabel() == r"$\log \sigma$"
    plt.close(fig)
