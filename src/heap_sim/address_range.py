from __future__ import annotations

from dataclasses import dataclass

from .errors import InvalidArgumentError


@dataclass(slots=True)
class AddressRange:
    """
    A contiguous span of the simulated address space.

    Ranges are mutated in place by the allocator: allocation advances the base
    of a free range and shrinks it, coalescing grows it. Equality compares both
    fields, so two distinct objects describing the same span are equal.
    """

    base_address: int
    length: int

    def __post_init__(self) -> None:
        if self.base_address < 0:
            raise InvalidArgumentError(f"base address must be non-negative, got {self.base_address}")
        if self.length <= 0:
            raise InvalidArgumentError(f"range length must be positive, got {self.length}")

    @property
    def end(self) -> int:
        return self.base_address + self.length

    def is_adjacent_to(self, other: "AddressRange") -> bool:
        """True if ``other`` starts exactly where this range ends."""
        return self.end == other.base_address

    def __str__(self) -> str:
        return f"({self.base_address} , {self.length})"
