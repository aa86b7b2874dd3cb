"""Tickler package metadata.

Exports the package version resolved from installed distribution metadata.

Example:
    >>> from tickler import __version__
    >>> isinstance(__version__, str)
    True
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

__all__ = ["__version__"]

try:
    __version__ = version("tickler")
except PackageNotFoundError:
    __version__ = "0.0.0"
