"""
Runs the samplers provided by ``inference-tools`` over the unconstrained
parameters of a model, and collects their output as ``Chain`` objects.
"""

from dataclasses import dataclass, field
from numpy import array, ndarray
from numpy.random import Generator, SeedSequence, default_rng

from inference.mcmc import GibbsChain, PcaChain, HamiltonianChain, EnsembleSampler

from landscape.chain import Chain
from landscape.utilities import is_count

DEFAULT_WIDTHS = (0.5, 1.0)  # initial proposal widths for [log(sigma), mu]


@dataclass(frozen=True)
class SamplerSettings:
    """
    Describes a single sampler run.

    :param str algorithm: \
        The sampling algorithm, one of ``"gibbs"``, ``"pca"``, ``"hmc"`` or
        ``"ensemble"``.

    :param int steps: \
        The number of steps the chain is advanced. For the ensemble sampler this is
        the number of iterations, each of which produces one sample per walker.

    :param int burn: \
        Number of samples to discard from the start of the chain.

    :param int thin: \
        Only every *m*'th sample is kept for a specified integer *m*.

    :param int seed: \
        Seed for the random number generation, for reproducible runs.

    :param bool display_progress: \
        If set as ``True``, the sampler displays its progress.

    :param dict options: \
        Extra keyword arguments passed to the sampler class, for example ``widths``
        or ``epsilon``. For the ensemble sampler, ``n_walkers`` and ``walker_spread``
        control the starting positions of the walkers, and ``walker`` selects a
        single walker whose trajectory forms the chain. Without ``walker`` the
        chain holds the positions of all walkers, interleaved one iteration at a
        time, so its path jumps between walkers rather than following any one
        of them.

    :param str label: \
        Name used to identify the run. Defaults to the name of the algorithm.
    """

    algorithm: str
    steps: int = 2000
    burn: int = 0
    thin: int = 1
    seed: int = None
    display_progress: bool = False
    options: dict = field(default_factory=dict)
    label: str = None

    @property
    def name(self) -> str:
        return self.algorithm if self.label is None else self.label


def build_gibbs(model, start: ndarray, settings: SamplerSettings, generator: Generator):
    options = {"widths": array(DEFAULT_WIDTHS), **settings.options}
    return GibbsChain(
        posterior=model,
        start=start,
        display_progress=settings.display_progress,
        **options,
    )


def build_pca(model, start: ndarray, settings: SamplerSettings, generator: Generator):
    options = {"widths": array(DEFAULT_WIDTHS), **settings.options}
    return PcaChain(
        posterior=model,
        start=start,
        display_progress=settings.display_progress,
        **options,
    )


def build_hmc(model, start: ndarray, settings: SamplerSettings, generator: Generator):
    options = {"epsilon": 0.05, **settings.options}
    return HamiltonianChain(
        posterior=model,
        grad=model.gradient,
        start=start,
        display_progress=settings.display_progress,
        **options,
    )


def build_ensemble(
    model, start: ndarray, settings: SamplerSettings, generator: Generator
):
    options = dict(settings.options)
    n_walkers = options.pop("n_walkers", 10)
    spread = options.pop("walker_spread", 0.1)
    options.pop("walker", None)
    positions = start + spread * generator.normal(size=(n_walkers, start.size))
    return EnsembleSampler(
        posterior=model,
        starting_positions=positions,
        display_progress=settings.display_progress,
        **options,
    )


SAMPLERS = {
    "gibbs": build_gibbs,
    "pca": build_pca,
    "hmc": build_hmc,
    "ensemble": build_ensemble,
}


def validate_settings(settings: SamplerSettings):
    if settings.algorithm not in SAMPLERS:
        raise ValueError(
            f"""\n
            \r[ run_sampler error ]
            \r>> '{settings.algorithm}' is not a recognised sampling algorithm.
            \r>> Available algorithms are:
            \r>> {list(SAMPLERS)}
            """
        )

    counts = {
        "steps": (settings.steps, 1),
        "burn": (settings.burn, 0),
        "thin": (settings.thin, 1),
    }
    for name, (value, minimum) in counts.items():
        if not is_count(value) or value < minimum:
            raise ValueError(
                f"""\n
                \r[ run_sampler error ]
                \r>> The '{name}' setting must be an integer of at least {minimum},
                \r>> but instead has value {value}.
                """
            )


def seed_sampler(sampler, seed_sequence: SeedSequence):
    """
    Replaces the random number generators of a sampler, and of each of its
    parameters where it has them, with generators spawned from ``seed_sequence``.
    """
    params = getattr(sampler, "params", [])
    sampler_seed, *param_seeds = seed_sequence.spawn(1 + len(params))
    sampler.rng = default_rng(sampler_seed)
    for param, param_seed in zip(params, param_seeds):
        param.rng = default_rng(param_seed)


def run_sampler(model, settings: SamplerSettings, start=None) -> Chain:
    """
    Sample from a model using the algorithm given in the settings.

    :param model: \
        The ``HierarchicalModel`` to be sampled.

    :param settings: \
        A ``SamplerSettings`` instance describing the run.

    :param start: \
        The starting position of the chain in the unconstrained parameter space,
        ``[log(sigma), mu]``. If not given, the best of a set of samples drawn
        from the prior is used.

    :return: \
        The output of the sampler as a ``Chain``.
    """
    validate_settings(settings)

    # every source of randomness in the run is derived from the one seed
    guess_seed, build_seed, sampler_seed = SeedSequence(settings.seed).spawn(3)

    if start is None:
        guesses = model.generate_initial_guesses(generator=default_rng(guess_seed))
        start = guesses[0]
    start = array(start, dtype=float)

    build = SAMPLERS[settings.algorithm]
    sampler = build(model, start, settings, default_rng(build_seed))
    seed_sampler(sampler, sampler_seed)
    sampler.advance(settings.steps)

    walker = None
    if settings.algorithm == "ensemble":
        walker = settings.options.get("walker")
    return Chain.from_markov_chain(
        sampler, model, burn=settings.burn, thin=settings.thin, walker=walker
    )


def run_samplers(model, settings: list[SamplerSettings]) -> dict[str, Chain]:
    """
    Runs a sequence of samplers over the same model.

    :return: \
        A dictionary mapping the name of each run to its ``Chain``.
    """
    names = [s.name for s in settings]
    if len(names) != len(set(names)):
        raise ValueError(
            """\n
            \r[ run_samplers error ]
            \r>> Each sampler run must have a unique name. Use the 'label'
            \r>> setting to distinguish runs of the same algorithm.
            """
        )
    return {s.name: run_sampler(model, s) for s in settings}
