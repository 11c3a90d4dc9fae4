"""
Package version.

hatchling reads ``__version__`` from this file at build time, so it is the
single place the version is bumped.
"""

__version__ = "0.1.0"
