from dataclasses import dataclass
from numpy import array, asarray, broadcast_arrays, cos, sin, sqrt, ndarray
from numpy import errstate, isnan, where, inf, nan, float64
from numpy.random import default_rng, Generator

from landscape.distributions import (
    inverse_gamma_log_pdf,
    inverse_gamma_log_pdf_gradient,
    normal_log_pdf,
    normal_log_pdf_gradient,
    validate_distribution_parameters,
    validate_data,
)
from landscape.transforms import LogTransform

OBSERVED_DATA = (1.5, 2.0, 13.0, 2.1, 0.0)

rng = default_rng()


@dataclass(frozen=True)
class EvaluationContext:
    """
    Immutable record of the parameter values at which the model is evaluated.
    A new context is built for every evaluation, so no state is shared
    between calls.
    """

    sigma: ndarray
    mu: ndarray
    data: ndarray


class HierarchicalModel:
    """
    A two-parameter hierarchical model with a positive 'scale' parameter
    ``sigma`` and a 'location' parameter ``mu``:

    .. math::

        \\sigma \\sim \\mathrm{InvGamma}(a, b), \\quad
        \\mu \\mid \\sigma \\sim \\mathcal{N}(0, \\sqrt{\\sigma}), \\quad
        x_i \\mid \\mu, \\sigma \\sim \\mathcal{N}(\\mu', \\sqrt{\\sigma})

    where the location of the observations is the non-linear reparameterisation
    :math:`\\mu' = \\mu + A(\\sin\\mu + \\cos\\mu)`.

    :param data: \
        The observed data values as a 1D array.

    :param float shape: \
        Shape parameter of the inverse-gamma prior on ``sigma``.

    :param float scale: \
        Scale parameter of the inverse-gamma prior on ``sigma``.

    :param float amplitude: \
        The amplitude ``A`` of the reparameterisation of ``mu``.
    """

    def __init__(self, data=OBSERVED_DATA, shape=2.0, scale=3.0, amplitude=5.0):
        self.data = validate_data("HierarchicalModel", data)
        self.shape, self.scale = validate_distribution_parameters(
            class_name="HierarchicalModel",
            params=[("shape", shape), ("scale", scale)],
            require_positive={"shape", "scale"},
        )
        (self.amplitude,) = validate_distribution_parameters(
            class_name="HierarchicalModel", params=[("amplitude", amplitude)]
        )
        self.transform = LogTransform()
        self.n_parameters = 2

    def reparameterise(self, mu):
        """
        Returns the location of the observation distribution for the given ``mu``.
        """
        mu = asarray(mu, dtype=float)
        return (mu + self.amplitude * (sin(mu) + cos(mu)))[()]

    def reparameterise_gradient(self, mu):
        mu = asarray(mu, dtype=float)
        return (1.0 + self.amplitude * (cos(mu) - sin(mu)))[()]

    def context(self, sigma, mu) -> EvaluationContext:
        sigma, mu = broadcast_arrays(
            asarray(sigma, dtype=float), asarray(mu, dtype=float)
        )
        return EvaluationContext(sigma=sigma, mu=mu, data=self.data)

    def log_joint(self, sigma, mu):
        """
        Returns the log-joint probability density of the model and the observed data.

        :param sigma: \
            Values of the scale parameter as a float or ``numpy.ndarray``. Values
            less than or equal to zero are outside the support of the prior and
            give a log-density of ``-inf``.

        :param mu: \
            Values of the location parameter, broadcast against ``sigma``.

        :returns: \
            The log-joint probability density.
        """
        return self.joint_log_density(self.context(sigma, mu))

    def joint_log_density(self, ctx: EvaluationContext):
        with errstate(invalid="ignore"):
            std = asarray(sqrt(ctx.sigma))
        location = asarray(self.reparameterise(ctx.mu))

        log_prior = inverse_gamma_log_pdf(ctx.sigma, self.shape, self.scale)
        log_prior = log_prior + normal_log_pdf(ctx.mu, 0.0, std)
        # observations run along a trailing axis which is summed over
        log_likelihood = asarray(
            normal_log_pdf(ctx.data, location[..., None], std[..., None])
        ).sum(axis=-1)

        total = log_prior + log_likelihood
        return where(ctx.sigma > 0.0, total, where(isnan(ctx.sigma), nan, -inf))[()]

    def evaluate(self, sigma, mu):
        """
        Returns the negative log-joint probability density (the 'energy') of the
        model for the given parameter values.

        :param sigma: \
            Values of the scale parameter as a float or ``numpy.ndarray``.

        :param mu: \
            Values of the location parameter as a float or ``numpy.ndarray``.

        :returns: \
            The negative log-joint density. Evaluating at ``sigma <= 0`` gives
            ``inf``, and ``nan`` inputs give ``nan``.
        """
        return -self.log_joint(sigma, mu)

    def to_constrained(self, theta: ndarray) -> tuple:
        theta = asarray(theta, dtype=float)
        return self.transform.inverse(theta[..., 0]), theta[..., 1][()]

    def to_unconstrained(self, sigma, mu) -> ndarray:
        return array([self.transform.forward(sigma), mu], dtype=float64)

    def __call__(self, theta: ndarray) -> float:
        """
        Returns the log-posterior probability in the unconstrained parameter space
        ``theta = [log(sigma), mu]``, including the log-Jacobian of the transform.
        This is the density sampled by the MCMC samplers.

        :param theta: \
            The unconstrained model parameters as a 1D ``numpy.ndarray``.

        :returns: \
            The log-posterior probability.
        """
        sigma, mu = self.to_constrained(theta)
        return float(self.log_joint(sigma, mu) + self.transform.log_jacobian(theta[0]))

    def gradient(self, theta: ndarray) -> ndarray:
        """
        Returns the gradient of the unconstrained log-posterior with respect to
        ``theta = [log(sigma), mu]``.

        :param theta: \
            The unconstrained model parameters as a 1D ``numpy.ndarray``.

        :returns: \
            The gradient as a 1D ``numpy.ndarray``.
        """
        sigma, mu = self.to_constrained(theta)
        std = sqrt(sigma)
        location = self.reparameterise(mu)

        # contributions from the priors
        d_dsigma = inverse_gamma_log_pdf_gradient(sigma, self.shape, self.scale)
        d_dmu, d_dstd = normal_log_pdf_gradient(mu, 0.0, std)
        d_dsigma += d_dstd / (2 * std)

        # contributions from the observations
        d_dx, d_dstd = normal_log_pdf_gradient(self.data, location, std)
        d_dmu -= d_dx.sum() * self.reparameterise_gradient(mu)
        d_dsigma += d_dstd.sum() / (2 * std)

        # chain rule for sigma = exp(u), plus the log-Jacobian term
        return array([sigma * d_dsigma + 1.0, d_dmu])

    def cost(self, theta: ndarray) -> float:
        """
        Returns the negative unconstrained log-posterior probability.
        """
        return -self(theta)

    def cost_gradient(self, theta: ndarray) -> ndarray:
        return -self.gradient(theta)

    def sample_prior(self, generator: Generator = None) -> tuple[float, float]:
        """
        Draws a single ``(sigma, mu)`` pair from the prior.

        :param generator: \
            An optional ``numpy.random.Generator`` used to draw the sample.
        """
        generator = rng if generator is None else generator
        sigma = self.scale / generator.gamma(self.shape)
        mu = generator.normal(loc=0.0, scale=sqrt(sigma))
        return sigma, mu

    def generate_initial_guesses(
        self, n_guesses=1, prior_samples=100, generator: Generator = None
    ) -> list[ndarray]:
        """
        Generates starting positions for the samplers by drawing samples from the
        prior and returning the sub-set having the highest posterior log-probability.

        :param int n_guesses: \
            The number of initial guesses returned.

        :param int prior_samples: \
            The number of samples which will be drawn from the prior.

        :returns: \
            A list containing the initial guesses as unconstrained 1D numpy arrays.
        """
        if type(n_guesses) is not int or type(prior_samples) is not int:
            raise TypeError("""'n_guesses' and 'prior_samples' must both be integers""")

        if n_guesses < 1 or prior_samples < 1:
            raise ValueError(
                """'n_guesses' and 'prior_samples' must both be greater than zero"""
            )

        if n_guesses > prior_samples:
            raise ValueError(
                """The value of 'n_guesses' must be less than that of 'prior_samples'"""
            )

        samples = sorted(
            [
                self.to_unconstrained(*self.sample_prior(generator))
                for _ in range(prior_samples)
            ],
            key=self.cost,
        )
        return samples[:n_guesses]
