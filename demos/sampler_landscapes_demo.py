import matplotlib.pyplot as plt

from landscape.model import HierarchicalModel
from landscape.sampling import SamplerSettings, run_samplers
from landscape.surface import build_landscape
from landscape.plotting import landscape_plot, sampler_comparison_plot, trace_plot


"""
# Sampler landscapes example

Here we run several different MCMC samplers over the same two-parameter
hierarchical model, and plot the path each one takes over the posterior
surface.

The scale parameter sigma must be positive, so all samplers work with
log(sigma) instead, and the surfaces are plotted against log(sigma).
"""

# required for multi-process code when running on windows
if __name__ == "__main__":
    # create the model, which uses the default observed data [1.5, 2.0, 13.0, 2.1, 0.0]
    model = HierarchicalModel()

    # describe the sampler runs we want to compare
    settings = [
        SamplerSettings(algorithm="gibbs", steps=1000, seed=11),
        SamplerSettings(algorithm="pca", steps=1000, seed=11),
        SamplerSettings(algorithm="hmc", steps=500, seed=11),
        SamplerSettings(algorithm="ensemble", steps=100, seed=11),
        # following a single walker gives a continuous path through the ensemble
        SamplerSettings(
            algorithm="ensemble",
            steps=100,
            seed=11,
            options={"walker": 0},
            label="ensemble walker",
        ),
    ]

    # run each sampler - the results are returned as a dictionary of Chain objects
    chains = run_samplers(model, settings)

    # the trace plot shows how each chain moves over time
    trace_plot(chains["gibbs"])

    # a single landscape plot for the HMC chain, evaluating the surface
    # on a 500 x 500 grid using 4 processes
    surface, path = build_landscape(
        chains["hmc"], model, n_processes=4, display_progress=True
    )
    landscape_plot(surface, path)

    # now compare all the samplers side-by-side using a coarser grid
    landscapes = {
        name: build_landscape(chain, model, granularity=150)
        for name, chain in chains.items()
    }
    sampler_comparison_plot(landscapes, filename="sampler_landscapes.png")
    plt.close("all")
