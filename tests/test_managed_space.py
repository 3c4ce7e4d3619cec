import random
import unittest

from heap_sim import (
    ALLOCATION_FAILED,
    AddressRange,
    InvalidArgumentError,
    ManagedSpace,
    RangeNotFoundError,
    SpaceConfig,
)


def total_length(sequence) -> int:
    return sum(block.length for block in sequence)


class AllocateTests(unittest.TestCase):
    def setUp(self) -> None:
        self.space = ManagedSpace(100)

    def test_initial_state(self) -> None:
        self.assertEqual(self.space.free_ranges.values(), [AddressRange(0, 100)])
        self.assertEqual(self.space.allocated_ranges.size(), 0)
        self.assertEqual(self.space.render(), "(0 , 100)\n")

    def test_rejects_non_positive_max_size(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            ManagedSpace(0)

    def test_first_fit_splits_free_range(self) -> None:
        self.assertEqual(self.space.allocate(30), 0)
        self.assertEqual(self.space.free_ranges.values(), [AddressRange(30, 70)])
        self.assertEqual(self.space.allocated_ranges.values(), [AddressRange(0, 30)])

    def test_exact_fit_removes_free_range(self) -> None:
        space = ManagedSpace(50)
        self.assertEqual(space.allocate(50), 0)
        self.assertEqual(space.free_ranges.size(), 0)
        self.assertEqual(space.allocated_ranges.values(), [AddressRange(0, 50)])

    def test_exact_fit_allocates_a_fresh_range_object(self) -> None:
        space = ManagedSpace(50)
        free_block = space.free_ranges.value_at(0)
        space.allocate(50)
        self.assertIsNot(space.allocated_ranges.value_at(0), free_block)

    def test_exhaustion_returns_sentinel_without_mutation(self) -> None:
        space = ManagedSpace(10)
        self.assertEqual(space.allocate(11), ALLOCATION_FAILED)
        self.assertEqual(space.free_ranges.values(), [AddressRange(0, 10)])
        self.assertEqual(space.allocated_ranges.size(), 0)
        self.assertEqual(space.stats()["failures"], 1)

    def test_invalid_length_raises_without_mutation(self) -> None:
        for length in (0, -5):
            with self.assertRaises(InvalidArgumentError):
                self.space.allocate(length)
        self.assertEqual(self.space.free_ranges.values(), [AddressRange(0, 100)])
        self.assertEqual(self.space.allocated_ranges.size(), 0)

    def test_first_fit_prefers_list_order_over_best_fit(self) -> None:
        space = ManagedSpace(100)
        first = space.allocate(40)
        second = space.allocate(10)
        space.allocate(50)
        space.release(first)
        space.release(second)
        # Free list is now [(0, 40), (40, 10)]; a best-fit policy would pick 40.
        self.assertEqual(space.allocate(10), 0)
        self.assertEqual(space.free_ranges.values(), [AddressRange(10, 30), AddressRange(40, 10)])


class ReleaseTests(unittest.TestCase):
    def setUp(self) -> None:
        self.space = ManagedSpace(100)

    def test_release_with_nothing_allocated_raises(self) -> None:
        with self.assertRaises(InvalidArgumentError):
            self.space.release(0)

    def test_release_round_trip(self) -> None:
        address = self.space.allocate(20)
        before = self.space.available()
        self.space.release(address)
        self.assertIn(AddressRange(address, 20), self.space.free_ranges.values())
        self.assertEqual(self.space.available(), before + 20)
        self.assertEqual(self.space.allocated_ranges.size(), 0)

    def test_release_moves_the_same_range_object(self) -> None:
        address = self.space.allocate(20)
        allocated = self.space.allocated_ranges.value_at(0)
        self.space.release(address)
        self.assertIs(self.space.free_ranges.last.value, allocated)

    def test_release_does_not_merge(self) -> None:
        first = self.space.allocate(20)
        self.space.release(first)
        self.assertEqual(
            self.space.free_ranges.values(), [AddressRange(20, 80), AddressRange(0, 20)]
        )

    def test_unknown_and_double_release_are_ignored(self) -> None:
        first = self.space.allocate(20)
        self.space.allocate(10)
        self.space.release(first)
        snapshot = self.space.snapshot()
        self.space.release(first)
        self.space.release(77)
        self.assertEqual(self.space.snapshot(), snapshot)

    def test_strict_release_raises_for_unknown_address(self) -> None:
        space = ManagedSpace.from_config(SpaceConfig(max_size=100, strict_release=True))
        first = space.allocate(20)
        space.allocate(10)
        with self.assertRaises(RangeNotFoundError):
            space.release(77)
        space.release(first)
        space.release(first)
        self.assertEqual(space.allocated_ranges.values(), [AddressRange(20, 10)])


class InvariantTests(unittest.TestCase):
    def test_conservation_and_unique_addresses_under_random_workload(self) -> None:
        rng = random.Random(7)
        space = ManagedSpace(512)
        live = []
        for _ in range(300):
            if live and rng.random() < 0.45:
                space.release(live.pop(rng.randrange(len(live))))
            else:
                address = space.allocate(rng.randint(1, 48))
                if address != ALLOCATION_FAILED:
                    live.append(address)
            if rng.random() < 0.1:
                space.coalesce()
            self.assertEqual(
                total_length(space.free_ranges) + total_length(space.allocated_ranges), 512
            )
            addresses = [block.base_address for block in space.allocated_ranges]
            self.assertEqual(len(addresses), len(set(addresses)))

    def test_stats_track_operations(self) -> None:
        space = ManagedSpace(64)
        address = space.allocate(16)
        space.allocate(100)
        space.release(address)
        space.coalesce()
        stats = space.stats()
        self.assertEqual(stats["allocations"], 1)
        self.assertEqual(stats["failures"], 1)
        self.assertEqual(stats["releases"], 1)
        self.assertEqual(stats["coalesce_runs"], 1)
        self.assertEqual(stats["heap_free"], 64)
        self.assertEqual(stats["free_ranges"], 1)
        self.assertEqual(stats["fragmentation"], 0.0)


if __name__ == "__main__":
    unittest.main()
