from dataclasses import dataclass, field
from multiprocessing import Pool
from time import time
from warnings import warn

from numpy import arange, array, array_split, concatenate, isfinite, linspace
from numpy import meshgrid, ndarray

from landscape.chain import Chain
from landscape.transforms import Transform, LogTransform
from landscape.utilities import GridProgressPrinter, is_count

GRANULARITY = 500  # number of grid points along each axis
SPREAD = 0.5  # grid margin beyond the chain, in units of the standard deviation
FALLBACK_STD = 1.0  # used in place of the standard deviation of a degenerate chain


@dataclass(frozen=True)
class PosteriorSurface:
    """
    The negative log-joint probability of the model evaluated over a 2D grid.

    ``values`` has shape ``(mu_axis.size, sigma_axis.size)``, such that element
    ``(i, j)`` corresponds to ``mu_axis[i]`` and ``sigma_axis[j]``. The values of
    ``sigma_axis`` are in the transformed (unconstrained) space, which is described
    by ``sigma_label``.
    """

    sigma_axis: ndarray
    mu_axis: ndarray
    values: ndarray
    sigma_label: str = r"$\log \sigma$"

    def meshgrid(self) -> tuple[ndarray, ndarray]:
        return meshgrid(self.sigma_axis, self.mu_axis)


@dataclass(frozen=True)
class PosteriorPath:
    """
    The ordered points of a sampler path through the transformed parameter space.

    ``points`` has shape ``(n_samples, 3)`` with columns ``(transformed sigma, mu,
    negative log-probability)``, and ``color_index`` runs from zero to
    ``n_samples - 1`` in chain order.
    """

    points: ndarray
    color_index: ndarray = field(default=None)

    def __post_init__(self):
        if self.color_index is None:
            object.__setattr__(self, "color_index", arange(self.points.shape[0]))

    @classmethod
    def from_chain(cls, chain: Chain, transform: Transform = None):
        return cls(points=chain.path_points(transform))


def grid_bounds(
    column, spread: float = SPREAD, fallback_std: float = FALLBACK_STD
) -> tuple[float, float]:
    """
    Calculate the grid limits for one parameter from the values visited by a chain.

    The limits are ``[min - spread * std, max + spread * std]`` so the grid extends
    beyond the region explored by the chain. If the standard deviation is zero (as
    it is for a chain containing a single sample) the value of ``fallback_std`` is
    used in its place.

    :param column: \
        The values of the parameter visited by the chain as a 1D array.

    :param float spread: \
        Size of the margin added to either side of the range of ``column``, as a
        multiple of its standard deviation.

    :param float fallback_std: \
        The width used in place of the standard deviation when it is zero.

    :return: \
        The lower and upper limits as a tuple of floats.
    """
    column = array(column, dtype=float).ravel()

    if column.size == 0:
        raise ValueError(
            """\n
            \r[ grid_bounds error ]
            \r>> Grid limits cannot be calculated from an empty chain.
            """
        )

    if not isfinite(column).all():
        raise ValueError(
            """\n
            \r[ grid_bounds error ]
            \r>> The given chain values contain non-finite values.
            """
        )

    if not (spread > 0.0 and fallback_std > 0.0):
        raise ValueError(
            """\n
            \r[ grid_bounds error ]
            \r>> The 'spread' and 'fallback_std' arguments must both be
            \r>> greater than zero.
            """
        )

    std = column.std(ddof=1) if column.size > 1 else 0.0
    if not std > 0.0:
        warn(
            f"""
            [ grid_bounds warning ]
            >> The given chain values have zero spread ({column.size} samples),
            >> so a width of {fallback_std} is used to set the grid limits.
            """
        )
        std = fallback_std

    return column.min() - spread * std, column.max() + spread * std


def build_grid(
    chain: Chain,
    granularity: int = GRANULARITY,
    spread: float = SPREAD,
    fallback_std: float = FALLBACK_STD,
    transform: Transform = None,
) -> tuple[ndarray, ndarray]:
    """
    Build the axes of the grid over which the posterior surface is evaluated.

    :param chain: \
        The ``Chain`` which determines the extent of the grid.

    :param int granularity: \
        The number of grid points along each axis.

    :return: \
        The transformed-sigma axis and the mu axis as a pair of 1D arrays, each of
        size ``granularity`` and in increasing order.
    """
    if not is_count(granularity) or granularity < 2:
        raise ValueError(
            f"""\n
            \r[ build_grid error ]
            \r>> The 'granularity' argument must be an integer greater than 1,
            \r>> but instead has value {granularity}.
            """
        )

    sigma_limits = grid_bounds(chain.transformed_sigma(transform), spread, fallback_std)
    mu_limits = grid_bounds(chain.mu, spread, fallback_std)
    return linspace(*sigma_limits, granularity), linspace(*mu_limits, granularity)


def evaluate_block(args) -> ndarray:
    model, sigma_values, mu_values = args
    sigma_grid, mu_grid = meshgrid(sigma_values, mu_values)
    return model.evaluate(sigma_grid, mu_grid)


def evaluate_surface(
    model,
    sigma_axis: ndarray,
    mu_axis: ndarray,
    transform: Transform = None,
    n_processes: int = 1,
    display_progress: bool = False,
) -> PosteriorSurface:
    """
    Evaluate the negative log-joint probability of a model over a 2D grid.

    The rows of the grid are split into blocks which are evaluated independently,
    and are optionally distributed across a pool of processes. Grid cells where
    the density cannot be evaluated hold non-finite values.

    :param model: \
        An object with an ``evaluate(sigma, mu)`` method, such as ``HierarchicalModel``.

    :param sigma_axis: \
        The grid axis for sigma in the transformed space, as a 1D array.

    :param mu_axis: \
        The grid axis for mu as a 1D array.

    :param transform: \
        The transform relating ``sigma_axis`` to the values of sigma passed to the
        model. Defaults to ``LogTransform``.

    :param int n_processes: \
        The number of processes used to evaluate the grid.

    :param bool display_progress: \
        If set as ``True``, a message is displayed showing the progress of the
        grid evaluation.
    """
    transform = LogTransform() if transform is None else transform
    sigma_axis = array(sigma_axis, dtype=float)
    mu_axis = array(mu_axis, dtype=float)

    if sigma_axis.ndim != 1 or mu_axis.ndim != 1:
        raise ValueError(
            """\n
            \r[ evaluate_surface error ]
            \r>> The 'sigma_axis' and 'mu_axis' arguments must be 1D arrays.
            """
        )

    if not is_count(n_processes) or n_processes < 1:
        raise ValueError(
            """\n
            \r[ evaluate_surface error ]
            \r>> The 'n_processes' argument must be a positive integer.
            """
        )

    sigma_values = transform.inverse(sigma_axis)
    n_blocks = min(mu_axis.size, 20 * n_processes)
    tasks = [(model, sigma_values, b) for b in array_split(mu_axis, n_blocks)]

    printer = GridProgressPrinter(
        display=display_progress, leading_msg="evaluating surface:"
    )
    printer.blocks_initial(n_blocks)
    t_start = time()
    blocks = []
    if n_processes == 1:
        for k, task in enumerate(tasks):
            blocks.append(evaluate_block(task))
            printer.blocks_progress(t_start, k, n_blocks)
    else:
        with Pool(n_processes) as pool:
            for k, block in enumerate(pool.imap(evaluate_block, tasks)):
                blocks.append(block)
                printer.blocks_progress(t_start, k, n_blocks)
    printer.blocks_final(t_start, sigma_axis.size * mu_axis.size)

    return PosteriorSurface(
        sigma_axis=sigma_axis,
        mu_axis=mu_axis,
        values=concatenate(blocks, axis=0),
        sigma_label=transform.axis_label(r"\sigma"),
    )


def build_landscape(
    chain: Chain,
    model,
    granularity: int = GRANULARITY,
    spread: float = SPREAD,
    fallback_std: float = FALLBACK_STD,
    transform: Transform = None,
    n_processes: int = 1,
    display_progress: bool = False,
) -> tuple[PosteriorSurface, PosteriorPath]:
    """
    Build the posterior surface around a chain, and the path of the chain over it.

    :param chain: \
        The ``Chain`` produced by a sampler.

    :param model: \
        The model whose negative log-joint probability forms the surface.

    :param int granularity: \
        The number of grid points along each axis.

    :param float spread: \
        The margin of the grid beyond the chain, in units of the chain's
        standard deviation along each axis.

    :param float fallback_std: \
        The width used in place of the standard deviation of a degenerate chain.

    :param transform: \
        The transform applied to sigma for the grid and the path. Defaults to
        ``LogTransform``.

    :param int n_processes: \
        The number of processes used to evaluate the grid.

    :param bool display_progress: \
        If set as ``True``, a message is displayed showing the progress of the
        grid evaluation.

    :return: \
        A ``PosteriorSurface`` and a ``PosteriorPath`` instance.
    """
    sigma_axis, mu_axis = build_grid(
        chain,
        granularity=granularity,
        spread=spread,
        fallback_std=fallback_std,
        transform=transform,
    )
    surface = evaluate_surface(
        model,
        sigma_axis,
        mu_axis,
        transform=transform,
        n_processes=n_processes,
        display_progress=display_progress,
    )
    return surface, PosteriorPath.from_chain(chain, transform)
