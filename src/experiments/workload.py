from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterator, List, Optional


@dataclass
class Request:
    kind: str  # "allocate" or "release"
    value: int


class WorkloadGenerator:
    """
    Generate a seeded stream of allocate/release requests.

    Release requests always name an address the generator was told about via
    ``observe_allocation``, so a driver can feed results back and get a
    realistic mix of live and freed ranges.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        max_request: int = 64,
        release_probability: float = 0.4,
    ) -> None:
        if max_request <= 0:
            raise ValueError("max_request must be positive")
        if not 0.0 <= release_probability <= 1.0:
            raise ValueError("release_probability must be within [0, 1]")
        self.random = random.Random(seed)
        self.max_request = max_request
        self.release_probability = release_probability
        self._live: List[int] = []

    def observe_allocation(self, address: int) -> None:
        if address >= 0:
            self._live.append(address)

    def next_request(self) -> Request:
        if self._live and self.random.random() < self.release_probability:
            index = self.random.randrange(len(self._live))
            return Request("release", self._live.pop(index))
        return Request("allocate", self.random.randint(1, self.max_request))

    def requests(self, steps: int) -> Iterator[Request]:
        for _ in range(steps):
            yield self.next_request()
