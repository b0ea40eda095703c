from numpy import array, column_stack, ndarray, savez, load

from landscape.transforms import Transform, LogTransform
from landscape.utilities import is_count


class Chain:
    """
    An ordered record of sampler output over the ``(sigma, mu)`` parameters of the
    hierarchical model, together with the log-joint probability of each sample.

    The order of the samples is the order in which they were produced, and is the
    order in which the path of the sampler is drawn. Samples are never sorted or
    de-duplicated.

    :param sigma: \
        The sampled values of the scale parameter as a 1D array.

    :param mu: \
        The sampled values of the location parameter as a 1D array.

    :param log_probability: \
        The log-joint probability of each sample as a 1D array.
    """

    def __init__(self, sigma, mu, log_probability):
        columns = [array(c, dtype=float) for c in (sigma, mu, log_probability)]

        if any(c.ndim != 1 for c in columns):
            raise ValueError(
                f"""\n
                \r[ Chain error ]
                \r>> The 'sigma', 'mu' and 'log_probability' arguments must be
                \r>> 1D arrays, but instead have shapes
                \r>> {[c.shape for c in columns]} respectively.
                """
            )

        if len({c.size for c in columns}) != 1:
            raise ValueError(
                f"""\n
                \r[ Chain error ]
                \r>> The 'sigma', 'mu' and 'log_probability' arguments must be
                \r>> arrays of equal size, but instead have sizes
                \r>> {[c.size for c in columns]} respectively.
                """
            )

        for c in columns:
            c.setflags(write=False)
        self.sigma, self.mu, self.log_probability = columns

    def __len__(self) -> int:
        return self.sigma.size

    def transformed_sigma(self, transform: Transform = None) -> ndarray:
        """
        Returns the sampled values of ``sigma`` mapped to the unconstrained space.

        :param transform: \
            The transform applied to ``sigma``. Defaults to ``LogTransform``.
        """
        transform = LogTransform() if transform is None else transform
        return array(transform.forward(self.sigma), ndmin=1)

    def path_points(self, transform: Transform = None) -> ndarray:
        """
        Returns the points of the sampler path as a ``numpy.ndarray`` of shape
        ``(n_samples, 3)``, where the columns are the transformed ``sigma``, ``mu``
        and the negative log-probability, in chain order.
        """
        return column_stack(
            [self.transformed_sigma(transform), self.mu, -self.log_probability]
        )

    @classmethod
    def from_markov_chain(
        cls, markov_chain, model, burn: int = 0, thin: int = 1, walker: int = None
    ):
        """
        Builds a ``Chain`` from a sampler which has been run over the unconstrained
        parameters ``[log(sigma), mu]`` of the given model.

        :param markov_chain: \
            An ``inference-tools`` sampler object, such as ``GibbsChain`` or
            ``HamiltonianChain``.

        :param model: \
            The ``HierarchicalModel`` instance which was sampled.

        :param int burn: \
            Number of samples to discard from the start of the chain.

        :param int thin: \
            Only every *m*'th sample is kept for a specified integer *m*.

        :param int walker: \
            For an ``EnsembleSampler``, the index of the walker whose trajectory
            is used. In that case ``burn`` and ``thin`` count iterations of the
            chosen walker. If not given, the positions of all walkers are used in
            the order the sampler stores them, one iteration at a time.
        """
        if walker is None:
            sample = markov_chain.get_sample(burn=burn, thin=thin)
            probs = markov_chain.get_probabilities(burn=burn, thin=thin)
        else:
            sample, probs = walker_trajectory(markov_chain, walker)
            sample, probs = sample[burn::thin], probs[burn::thin]

        sample = array(sample, dtype=float)
        probs = array(probs, dtype=float)
        if sample.ndim != 2 or probs.shape != (sample.shape[0],):
            raise ValueError(
                f"""\n
                \r[ Chain error ]
                \r>> The sampler returned {probs.size} log-probability values
                \r>> for a sample of shape {sample.shape}. Each sample must have
                \r>> exactly one log-probability value.
                """
            )

        sigma, mu = model.to_constrained(sample)
        # the samplers see the log-Jacobian of the transform, which is removed
        # to recover the log-joint probability
        log_probability = probs - model.transform.log_jacobian(sample[:, 0])
        return cls(sigma=sigma, mu=mu, log_probability=log_probability)

    def save(self, filename: str):
        """
        Save the chain as an .npz file.

        :param str filename: file path to which the chain will be saved.
        """
        savez(
            filename,
            sigma=self.sigma,
            mu=self.mu,
            log_probability=self.log_probability,
        )

    @classmethod
    def load(cls, filename: str):
        """
        Load a chain which has been previously saved using the save() method.

        :param str filename: file path of the .npz file containing the chain data.
        """
        D = load(filename)
        return cls(sigma=D["sigma"], mu=D["mu"], log_probability=D["log_probability"])


def walker_trajectory(ensemble, walker: int) -> tuple[ndarray, ndarray]:
    """
    Returns the positions and log-probabilities visited by one walker of an
    ``EnsembleSampler``, in iteration order.
    """
    n_walkers = getattr(ensemble, "n_walkers", None)
    if not is_count(n_walkers):
        raise ValueError(
            """\n
            \r[ Chain error ]
            \r>> A walker can only be selected from an ensemble sampler.
            """
        )

    if not is_count(walker) or not 0 <= walker < n_walkers:
        raise ValueError(
            f"""\n
            \r[ Chain error ]
            \r>> The 'walker' argument must be an integer index between 0 and
            \r>> {n_walkers - 1}, but instead has value {walker}.
            """
        )

    sample = array(ensemble.get_sample(burn=0, thin=1), dtype=float)
    probs = array(ensemble.get_probabilities(burn=0, thin=1), dtype=float)
    n_params = sample.shape[-1]
    return (
        sample.reshape(-1, n_walkers, n_params)[:, walker, :],
        probs.reshape(-1, n_walkers)[:, walker],
    )
