"""Concrete implementations of provider interfaces."""

from .testomatio import TestomatioPipe, detect_build_url

__all__ = [
    "TestomatioPipe",
    "detect_build_url",
]
