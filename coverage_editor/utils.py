# coverage_editor/utils.py
"""
Debug switch and small helpers shared across the editor components.
"""

from __future__ import annotations

# Global debug switch
VERBOSE: bool = False


def log(*args, **kwargs) -> None:            # pragma: no cover
    if VERBOSE:
        print(*args, **kwargs)


def set_verbose(flag: bool) -> None:
    global VERBOSE
    VERBOSE = bool(flag)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
