from numpy import ceil, isfinite, sqrt, stack

import matplotlib.pyplot as plt
from matplotlib import colormaps
from matplotlib.colors import Normalize
from mpl_toolkits.mplot3d.art3d import Line3DCollection

from landscape.chain import Chain
from landscape.surface import PosteriorSurface, PosteriorPath
from landscape.transforms import Transform, LogTransform


def landscape_plot(
    surface: PosteriorSurface,
    path: PosteriorPath,
    labels=None,
    show=True,
    filename=None,
    colormap="viridis",
    path_colormap="plasma",
    surface_alpha=0.6,
    axis=None,
):
    """
    Plot the path of a sampler over the posterior surface it explored, as a 3D
    height-field with the path drawn on top of it.

    :param surface: \
        A ``PosteriorSurface`` instance holding the grid and the surface values.

    :param path: \
        A ``PosteriorPath`` instance holding the ordered points of the path.

    :keyword labels: \
        A list of three strings to be used as the x, y and z axis labels. By default
        the x label describes the transform used to build the surface.

    :keyword bool show: \
        Sets whether the plot is displayed.

    :keyword str filename: \
        File path to which the plot will be saved (if specified).

    :keyword str colormap: \
        The name of the matplotlib colormap used to color the surface by value.

    :keyword str path_colormap: \
        The name of the matplotlib colormap used to color the path by step number,
        so that the direction in which the path was traversed can be seen.

    :keyword float surface_alpha: \
        The opacity of the surface.

    :keyword axis: \
        A matplotlib 3D axis object on which the plot will be drawn. If not given,
        a new figure is created.

    :return: \
        The matplotlib figure containing the plot.
    """
    if labels is None:
        labels = [surface.sigma_label, r"$\mu$", "negative log-probability"]
    elif len(labels) != 3:
        raise ValueError(
            """
            [ landscape_plot error ]
            >> The 'labels' argument must contain exactly three strings,
            >> one for each of the x, y and z axes.
            """
        )

    expected_shape = (surface.mu_axis.size, surface.sigma_axis.size)
    if surface.values.shape != expected_shape:
        raise ValueError(
            f"""
            [ landscape_plot error ]
            >> The surface values have shape {surface.values.shape}, which
            >> is inconsistent with the grid axes shape {expected_shape}.
            """
        )

    points = path.points
    if points.ndim != 2 or points.shape[1] != 3 or points.shape[0] == 0:
        raise ValueError(
            """
            [ landscape_plot error ]
            >> The path points must be a non-empty array of shape (n, 3).
            """
        )

    if axis is None:
        fig = plt.figure(figsize=(8, 6))
        axis = fig.add_subplot(111, projection="3d")
    else:
        fig = axis.get_figure()

    X, Y = surface.meshgrid()
    finite = isfinite(surface.values)
    vmin = surface.values[finite].min() if finite.any() else None
    vmax = surface.values[finite].max() if finite.any() else None
    axis.plot_surface(
        X,
        Y,
        surface.values,
        cmap=colormaps[colormap],
        vmin=vmin,
        vmax=vmax,
        alpha=surface_alpha,
        linewidth=0,
        antialiased=False,
    )

    # color each segment of the path by its position in the chain
    path_cmap = colormaps[path_colormap]
    norm = Normalize(vmin=0, vmax=max(path.color_index[-1], 1))
    if points.shape[0] > 1:
        segments = stack([points[:-1], points[1:]], axis=1)
        lines = Line3DCollection(segments, cmap=path_cmap, norm=norm, linewidths=1.5)
        lines.set_array(path.color_index[:-1])
        axis.add_collection3d(lines)

    # mark the start and end of the path
    ends = [0, -1]
    axis.scatter(
        points[ends, 0],
        points[ends, 1],
        points[ends, 2],
        c=path_cmap(norm(path.color_index[ends])),
        marker="o",
        s=30,
        depthshade=False,
    )

    axis.set_xlabel(labels[0])
    axis.set_ylabel(labels[1])
    axis.set_zlabel(labels[2])

    if filename is not None:
        plt.savefig(filename)
    if show:
        plt.show()

    return fig


def sampler_comparison_plot(
    landscapes: dict, show=True, filename=None, labels=None, **kwargs
):
    """
    Plot the paths of several samplers over their posterior surfaces, with one 3D
    panel per sampler. See the documentation of ``landscape_plot`` for a description
    of other allowed keyword arguments.

    :param dict landscapes: \
        A dictionary mapping the title of each panel to a ``(surface, path)`` tuple,
        as returned by ``landscape.surface.build_landscape``.

    :keyword bool show: \
        Sets whether the plot is displayed.

    :keyword str filename: \
        File path to which the plot will be saved (if specified).
    """
    n_panels = len(landscapes)
    if n_panels == 0:
        raise ValueError(
            """
            [ sampler_comparison_plot error ]
            >> At least one landscape must be given.
            """
        )

    n_cols = int(ceil(sqrt(n_panels)))
    n_rows = int(ceil(n_panels / n_cols))
    fig = plt.figure(figsize=(5 * n_cols, 4 * n_rows))
    for k, (title, (surface, path)) in enumerate(landscapes.items()):
        ax = fig.add_subplot(n_rows, n_cols, k + 1, projection="3d")
        landscape_plot(surface, path, labels=labels, show=False, axis=ax, **kwargs)
        ax.set_title(title)

    fig.tight_layout()
    if filename is not None:
        plt.savefig(filename)
    if show:
        plt.show()
    return fig


def trace_plot(chain: Chain, transform: Transform = None, show=True, filename=None):
    """
    Construct a 'trace plot' for a chain which displays the transformed value of
    sigma, the value of mu and the log-probability as a function of step number.

    :param chain: \
        The ``Chain`` to be plotted.

    :keyword transform: \
        The transform applied to sigma. Defaults to ``LogTransform``.

    :keyword bool show: \
        Sets whether the plot is displayed.

    :keyword str filename: \
        File path to which the plot will be saved (if specified).
    """
    if len(chain) < 2:
        raise ValueError(
            f"""\n
            \r[ trace_plot error ]
            \r>> Cannot generate the trace plot as the chain contains
            \r>> fewer than two samples - current chain length is {len(chain)}.
            """
        )

    transform = LogTransform() if transform is None else transform
    traces = [chain.transformed_sigma(transform), chain.mu, chain.log_probability]
    labels = [transform.axis_label(r"\sigma"), r"$\mu$", "log-probability"]

    fig = plt.figure(figsize=(12, 8))
    axes = []
    for i, (trace, label, col) in enumerate(zip(traces, labels, ["C0", "C1", "C2"])):
        share = axes[0] if axes else None
        ax = plt.subplot2grid((3, 1), (i, 0), sharex=share)
        ax.plot(trace, ".", markersize=4, alpha=0.15, c=col)
        ax.set_ylabel(label)
        if i < 2:
            plt.setp(ax.get_xticklabels(), visible=False)
        else:
            ax.set_xlabel("chain step #")
        axes.append(ax)

    fig.tight_layout()
    if filename is not None:
        plt.savefig(filename)
    if show:
        plt.show()
    return fig
