"""
Timing helper for relay stages.

Example:
    with timeit("token") as t:
        token = fetch_token()
    verbose(log, "token_acquired", seconds=t.seconds)
"""
from __future__ import annotations

from time import perf_counter
from typing import Optional


class timeit:
    """Context manager measuring wall-clock time with perf_counter()."""

    def __init__(self, name: str):
        self.name = name
        self._t0: Optional[float] = None
        self.seconds: Optional[float] = None

    def __enter__(self) -> "timeit":
        self._t0 = perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        assert self._t0 is not None
        self.seconds = round(perf_counter() - self._t0, 4)

    def elapsed(self) -> float:
        """Seconds since entering the block, usable while still inside it."""
        assert self._t0 is not None
        return round(perf_counter() - self._t0, 4)
