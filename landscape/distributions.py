"""
Log-probability density functions for the distribution families used by the
hierarchical model, written to broadcast over ``numpy`` arrays so that whole
parameter grids can be evaluated in a single call.
"""

from numpy import array, asarray, atleast_1d, isfinite, isnan, log, ndarray, pi, where
from numpy import floating, integer
from numpy import errstate, inf, nan
from scipy.special import gammaln

LOG_2PI = log(2 * pi)


def inverse_gamma_log_pdf(x, shape: float, scale: float):
    """
    Log-probability density of the inverse-gamma distribution.

    :param x: \
        The point(s) at which the density is evaluated, as a float or ``numpy.ndarray``.

    :param float shape: \
        The shape parameter of the distribution.

    :param float scale: \
        The scale parameter of the distribution.

    :returns: \
        The log-density. Points outside the support (``x <= 0``) give ``-inf``,
        and ``nan`` inputs give ``nan``.
    """
    x = asarray(x, dtype=float)
    with errstate(divide="ignore", invalid="ignore"):
        logp = shape * log(scale) - gammaln(shape) - (shape + 1) * log(x) - scale / x
    return where(x > 0.0, logp, where(isnan(x), nan, -inf))[()]


def inverse_gamma_log_pdf_gradient(x, shape: float, scale: float):
    """
    Derivative of the inverse-gamma log-density with respect to ``x``.
    """
    x = asarray(x, dtype=float)
    with errstate(divide="ignore", invalid="ignore"):
        grad = (scale / x - (shape + 1)) / x
    return where(x > 0.0, grad, nan)[()]


def normal_log_pdf(x, mean, sigma):
    """
    Log-probability density of the normal distribution.

    :param x: \
        The point(s) at which the density is evaluated.

    :param mean: \
        The mean of the distribution.

    :param sigma: \
        The standard deviation of the distribution. Non-positive values give
        a log-density of ``-inf``.

    :returns: \
        The log-density, broadcast over the shapes of the arguments.
    """
    x = asarray(x, dtype=float)
    sigma = asarray(sigma, dtype=float)
    with errstate(divide="ignore", invalid="ignore"):
        z = (x - mean) / sigma
        logp = -0.5 * z**2 - log(sigma) - 0.5 * LOG_2PI
    return where(sigma > 0.0, logp, where(isnan(sigma), nan, -inf))[()]


def normal_log_pdf_gradient(x, mean, sigma):
    """
    Partial derivatives of the normal log-density.

    :returns: \
        A tuple ``(d_dx, d_dsigma)``. The derivative with respect to the mean
        is ``-d_dx``.
    """
    x = asarray(x, dtype=float)
    sigma = asarray(sigma, dtype=float)
    with errstate(divide="ignore", invalid="ignore"):
        dx = x - mean
        inv_var = 1.0 / sigma**2
        d_dx = -dx * inv_var
        d_dsigma = (dx**2 * inv_var - 1.0) / sigma
    return d_dx[()], d_dsigma[()]


def validate_distribution_parameters(
    class_name: str, params: list[tuple], require_positive: set[str] = frozenset()
) -> list[float]:
    validated_params = []
    for param_name, param in params:
        is_number = isinstance(param, (int, float, integer, floating))
        if not is_number or isinstance(param, bool):
            raise TypeError(
                f"""\n
                \r[ {class_name} error ]
                \r>> Argument '{param_name}' should be a float or an int,
                \r>> but instead has type:
                \r>> {type(param)}
                """
            )

        if not isfinite(param):
            raise ValueError(
                f"""\n
                \r[ {class_name} error ]
                \r>> Argument '{param_name}' must be finite, but has value {param}.
                """
            )

        if param_name in require_positive and not param > 0.0:
            raise ValueError(
                f"""\n
                \r[ {class_name} error ]
                \r>> Argument '{param_name}' must be greater than zero.
                """
            )

        validated_params.append(float(param))
    return validated_params


def validate_data(class_name: str, data) -> ndarray:
    data = atleast_1d(array(data, dtype=float))

    if data.ndim != 1:
        raise ValueError(
            f"""\n
            \r[ {class_name} error ]
            \r>> The observed data should be a 1D array,
            \r>> but has {data.ndim} dimensions and shape {data.shape}.
            """
        )

    if data.size == 0 or not isfinite(data).all():
        raise ValueError(
            f"""\n
            \r[ {class_name} error ]
            \r>> The observed data must contain at least one value,
            \r>> and all values must be finite.
            """
        )

    # observed data is fixed for the lifetime of the model
    data.setflags(write=False)
    return data
