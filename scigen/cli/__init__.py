"""Command-line front end for SciGen.

A terminal renderer over ``SessionState``; it holds no scoring logic of its own.
"""

from .main import main

__all__ = ["main"]
