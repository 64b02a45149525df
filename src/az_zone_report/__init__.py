"""Azure zone report."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("az-zone-report")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
