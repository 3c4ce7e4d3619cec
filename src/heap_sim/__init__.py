"""
Simulated manual memory allocator.

Tracks free and allocated address ranges over an abstract linear address space,
allocates first-fit, and coalesces adjacent free ranges on demand.
"""

from .address_range import AddressRange
from .config import SpaceConfig
from .errors import HeapSimError, InvalidArgumentError, OutOfRangeError, RangeNotFoundError
from .managed_space import ALLOCATION_FAILED, ManagedSpace
from .sequence import NOT_FOUND, Node, OrderedSequence, SequenceIterator

__all__ = [
    "ALLOCATION_FAILED",
    "AddressRange",
    "HeapSimError",
    "InvalidArgumentError",
    "ManagedSpace",
    "NOT_FOUND",
    "Node",
    "OrderedSequence",
    "OutOfRangeError",
    "RangeNotFoundError",
    "SequenceIterator",
    "SpaceConfig",
]
