"""
Board content filter: a moderating reverse proxy for the micro-board backend.
"""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("board-filter")
except PackageNotFoundError:  # pragma: no cover - package metadata optional
    __version__ = "0.0.0"

__all__ = ["__version__"]
