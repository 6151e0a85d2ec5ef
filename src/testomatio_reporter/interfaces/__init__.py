"""Protocol definitions for pluggable adapters."""

from .pipe import Pipe

__all__ = ["Pipe"]
