from importlib.metadata import version, PackageNotFoundError

try:
    # module is "landscape", but package is "mcmc-landscape"
    __version__ = version("mcmc-landscape")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["__version__"]
