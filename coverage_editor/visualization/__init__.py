"""Visualization subsystem package (pygame front end)."""

__version__ = "0.1"

__all__ = ["__version__"]
