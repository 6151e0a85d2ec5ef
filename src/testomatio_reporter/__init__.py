"""Testomat.io test run reporter."""

from testomatio_reporter._version import __version__

__all__ = ["__version__"]
