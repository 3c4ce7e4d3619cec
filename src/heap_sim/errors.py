from __future__ import annotations


class HeapSimError(Exception):
    """Base class for every error raised by the simulated heap."""


class InvalidArgumentError(HeapSimError, ValueError):
    pass


class OutOfRangeError(InvalidArgumentError, IndexError):
    pass


class RangeNotFoundError(HeapSimError, LookupError):
    pass


__all__ = [
    "HeapSimError",
    "InvalidArgumentError",
    "OutOfRangeError",
    "RangeNotFoundError",
]
