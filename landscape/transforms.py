from abc import ABC, abstractmethod
from numpy import asarray, exp, log, zeros_like, errstate


class Transform(ABC):
    """
    Base class for element-wise bijections between a constrained parameter
    space and the unconstrained real line.
    """

    @abstractmethod
    def forward(self, x):
        pass

    @abstractmethod
    def inverse(self, u):
        pass

    @abstractmethod
    def log_jacobian(self, u):
        pass

    def __call__(self, x):
        return self.forward(x)

    def axis_label(self, symbol: str) -> str:
        """
        Returns a matplotlib axis label for the transformed values of the parameter
        written as the LaTeX ``symbol``.
        """
        return rf"${symbol}$"


class LogTransform(Transform):
    """
    Maps a positive-support parameter onto the real line via ``u = log(x)``.

    Sampling (and plotting) in terms of ``u`` rather than ``x`` removes the hard
    boundary at zero. A density over ``x`` is converted to a density over ``u``
    by adding ``log_jacobian(u)``.
    """

    def forward(self, x):
        """
        Converts positive parameter values to unconstrained values.

        :param x: \
            Positive parameter values as a float or ``numpy.ndarray``. Values
            less than or equal to zero map to ``-inf`` or ``nan``.

        :return: \
            The corresponding unconstrained values.
        """
        with errstate(divide="ignore", invalid="ignore"):
            return log(asarray(x, dtype=float))[()]

    def inverse(self, u):
        """
        Converts unconstrained values back to positive parameter values.

        :param u: \
            Unconstrained values as a float or ``numpy.ndarray``.

        :return: \
            The corresponding positive parameter values.
        """
        return exp(asarray(u, dtype=float))[()]

    def log_jacobian(self, u):
        """
        The log of the absolute derivative of ``inverse`` evaluated at ``u``.
        """
        return asarray(u, dtype=float)[()]

    def axis_label(self, symbol: str) -> str:
        return rf"$\log {symbol}$"


class IdentityTransform(Transform):
    def forward(self, x):
        return asarray(x, dtype=float)[()]

    def inverse(self, u):
        return asarray(u, dtype=float)[()]

    def log_jacobian(self, u):
        return zeros_like(asarray(u, dtype=float))[()]
