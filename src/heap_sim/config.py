from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SpaceConfig:
    """
    Settings for a ManagedSpace.

    max_size: number of words in the simulated address space.
    strict_release: raise RangeNotFoundError when releasing an address that is
        neither allocated nor free, instead of ignoring it.
    auto_coalesce: when no free range fits a request, coalesce once and retry
        before reporting failure.
    """

    max_size: int
    strict_release: bool = False
    auto_coalesce: bool = False
