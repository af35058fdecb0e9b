"""Trip sampling package."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("trip-sampling")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

from . import config, errors  # re-export for convenience

__all__ = ["config", "errors", "__version__"]
