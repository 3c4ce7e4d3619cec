from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from .address_range import AddressRange
from .config import SpaceConfig
from .errors import InvalidArgumentError, RangeNotFoundError
from .sequence import OrderedSequence

if TYPE_CHECKING:
    from experiments.instrumentation import SpaceProfiler

logger = logging.getLogger(__name__)

ALLOCATION_FAILED = -1


class ManagedSpace:
    """
    Simulated linear address space with manual allocation.

    The space keeps two ordered sequences of AddressRange: the free list and the
    allocated list. Allocation is first-fit over the free list in its current
    order. Released ranges are appended to the free list as they are, and
    adjacent free ranges are only merged when coalesce() is called (or, with
    auto_coalesce, when an allocation would otherwise fail).

    Not thread safe: every public operation must run to completion before the
    next one starts.
    """

    def __init__(
        self,
        max_size: int,
        *,
        strict_release: bool = False,
        auto_coalesce: bool = False,
        profiler: Optional["SpaceProfiler"] = None,
    ) -> None:
        if max_size <= 0:
            raise InvalidArgumentError(f"max_size must be positive, got {max_size}")
        self.max_size = max_size
        self.strict_release = strict_release
        self.auto_coalesce = auto_coalesce
        self.profiler = profiler
        self.free_ranges: OrderedSequence[AddressRange] = OrderedSequence()
        self.allocated_ranges: OrderedSequence[AddressRange] = OrderedSequence()
        self.free_ranges.append_last(AddressRange(0, max_size))

        self._allocations = 0
        self._releases = 0
        self._failures = 0
        self._coalesce_runs = 0

    @classmethod
    def from_config(
        cls, config: SpaceConfig, *, profiler: Optional["SpaceProfiler"] = None
    ) -> "ManagedSpace":
        return cls(
            config.max_size,
            strict_release=config.strict_release,
            auto_coalesce=config.auto_coalesce,
            profiler=profiler,
        )

    # -- Allocation -----------------------------------------------------------------
    def allocate(self, length: int) -> int:
        """
        Allocate ``length`` words and return the base address of the new range.

        Returns ALLOCATION_FAILED when no free range is large enough. Raises
        InvalidArgumentError for a non-positive length.
        """
        if length <= 0:
            raise InvalidArgumentError(f"allocation length must be positive, got {length}")

        address = self._first_fit(length)
        if address == ALLOCATION_FAILED and self.auto_coalesce and len(self.free_ranges) > 1:
            logger.debug("no free range fits %d words, coalescing before retry", length)
            self.coalesce()
            address = self._first_fit(length)

        if address == ALLOCATION_FAILED:
            self._failures += 1
            logger.debug("allocation of %d words failed, %d words free", length, self.available())
            self._record("allocation_failed", {"length": length})
            return ALLOCATION_FAILED

        self._allocations += 1
        logger.debug("allocated %d words at %d", length, address)
        self._record("allocate", {"address": address, "length": length})
        return address

    def _first_fit(self, length: int) -> int:
        for node in self.free_ranges.nodes():
            candidate = node.value
            if candidate.length < length:
                continue
            allocated = AddressRange(candidate.base_address, length)
            if candidate.length == length:
                self.free_ranges.remove_node(node)
            else:
                candidate.base_address += length
                candidate.length -= length
            self.allocated_ranges.append_last(allocated)
            return allocated.base_address
        return ALLOCATION_FAILED

    # -- Release --------------------------------------------------------------------
    def release(self, address: int) -> None:
        """
        Move the allocated range starting at ``address`` to the end of the free list.

        Releasing an address that is already free is ignored. Releasing an unknown
        address is ignored too, unless the space was built with strict_release.
        """
        if not self.allocated_ranges:
            raise InvalidArgumentError("cannot release: nothing is allocated")

        if any(free.base_address == address for free in self.free_ranges):
            logger.debug("address %d is already free, ignoring release", address)
            self._record("release_ignored", {"address": address, "reason": "already_free"})
            return

        for node in self.allocated_ranges.nodes():
            if node.value.base_address == address:
                self.allocated_ranges.remove_node(node)
                self.free_ranges.append_last(node.value)
                self._releases += 1
                logger.debug("released %d words at %d", node.value.length, address)
                self._record("release", {"address": address, "length": node.value.length})
                return

        if self.strict_release:
            raise RangeNotFoundError(f"no allocated range starts at address {address}")
        logger.debug("address %d is not allocated, ignoring release", address)
        self._record("release_ignored", {"address": address, "reason": "unknown"})

    # -- Defragmentation ------------------------------------------------------------
    def coalesce(self) -> int:
        """
        Merge adjacent free ranges and return the number of merges performed.

        The free list is first sorted by base address, then scanned from the front;
        every merge restarts the scan so a grown range can absorb further
        neighbours.
        """
        if len(self.free_ranges) <= 1:
            return 0
        self._sort_free_ranges()

        merges = 0
        merged = True
        while merged:
            merged = False
            for node in self.free_ranges.nodes():
                successor = node.next
                if successor is not None and node.value.is_adjacent_to(successor.value):
                    node.value.length += successor.value.length
                    self.free_ranges.remove_node(successor)
                    merges += 1
                    merged = True
                    break

        self._coalesce_runs += 1
        logger.debug("coalesce merged %d ranges, %d free ranges left", merges, len(self.free_ranges))
        self._record("coalesce", {"merges": merges, "free_ranges": len(self.free_ranges)})
        return merges

    def _sort_free_ranges(self) -> None:
        # Bubble sort over the links, swapping payloads; equal keys never swap.
        swapped = True
        while swapped:
            swapped = False
            node = self.free_ranges.first
            while node is not None and node.next is not None:
                if node.value.base_address > node.next.value.base_address:
                    node.value, node.next.value = node.next.value, node.value
                    swapped = True
                node = node.next

    # -- Introspection --------------------------------------------------------------
    def available(self) -> int:
        return sum(free.length for free in self.free_ranges)

    def allocated(self) -> int:
        return sum(used.length for used in self.allocated_ranges)

    def fragmentation(self) -> float:
        total_free = self.available()
        if total_free == 0:
            return 0.0
        largest = max(free.length for free in self.free_ranges)
        return 1.0 - (largest / total_free)

    def stats(self) -> Dict[str, Any]:
        return {
            "max_size": self.max_size,
            "heap_used": self.allocated(),
            "heap_free": self.available(),
            "free_ranges": len(self.free_ranges),
            "allocated_ranges": len(self.allocated_ranges),
            "fragmentation": self.fragmentation(),
            "allocations": self._allocations,
            "releases": self._releases,
            "failures": self._failures,
            "coalesce_runs": self._coalesce_runs,
        }

    def snapshot(self) -> Dict[str, List[Tuple[int, int]]]:
        """Expose the current free and allocated lists for diagnostics."""
        return {
            "free": [(free.base_address, free.length) for free in self.free_ranges],
            "allocated": [(used.base_address, used.length) for used in self.allocated_ranges],
        }

    def render(self) -> str:
        return f"{self.free_ranges}\n{self.allocated_ranges}"

    def __str__(self) -> str:
        return self.render()

    def _record(self, event_type: str, payload: Dict[str, Any]) -> None:
        if self.profiler:
            self.profiler.record_event(
                event_type,
                {
                    **payload,
                    "heap_used": self.allocated(),
                    "heap_free": self.available(),
                },
            )
