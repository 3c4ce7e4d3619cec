from __future__ import annotations

import argparse
import logging
from typing import Any, Dict, List, Optional

from heap_sim import ALLOCATION_FAILED, ManagedSpace, SpaceConfig
from experiments.instrumentation import SpaceProfiler
from experiments.workload import WorkloadGenerator

logger = logging.getLogger(__name__)


def run_simulation(
    config: SpaceConfig,
    steps: int,
    *,
    seed: Optional[int] = 42,
    max_request: int = 64,
    release_probability: float = 0.4,
    coalesce_interval: int = 0,
    profiler: Optional[SpaceProfiler] = None,
    verbose: bool = False,
) -> Dict[str, Any]:
    space = ManagedSpace.from_config(config, profiler=profiler)
    workload = WorkloadGenerator(
        seed, max_request=max_request, release_probability=release_probability
    )

    failures = 0
    for step in range(1, steps + 1):
        request = workload.next_request()
        if request.kind == "allocate":
            address = space.allocate(request.value)
            if address == ALLOCATION_FAILED:
                failures += 1
                logger.info("step %d: no room for %d words", step, request.value)
            workload.observe_allocation(address)
        else:
            space.release(request.value)

        if coalesce_interval and step % coalesce_interval == 0:
            space.coalesce()

        if verbose:
            print(f"[step {step}] {request.kind} {request.value}")
            print(space.render())

    stats = space.stats()
    summary: Dict[str, Any] = {
        "steps": steps,
        "failed_requests": failures,
        "final_fragmentation": stats["fragmentation"],
        **stats,
        "space": space.snapshot(),
    }
    if profiler:
        summary["events"] = profiler.counts()
    return summary


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a first-fit heap simulation.")
    parser.add_argument("--max-size", type=int, default=1024, help="Size of the simulated address space in words.")
    parser.add_argument("--steps", type=int, default=50, help="Number of allocate/release requests to issue.")
    parser.add_argument("--seed", type=int, default=42, help="Seed for the request generator.")
    parser.add_argument("--max-request", type=int, default=64, help="Largest single allocation request.")
    parser.add_argument("--release-probability", type=float, default=0.4, help="Chance that a step releases a live range.")
    parser.add_argument("--coalesce-interval", type=int, default=0, help="Coalesce every N steps (0 disables).")
    parser.add_argument("--auto-coalesce", action="store_true", help="Coalesce and retry when an allocation fails.")
    parser.add_argument("--strict-release", action="store_true", help="Fail on releases of unknown addresses.")
    parser.add_argument("--verbose", action="store_true", help="Print the free and allocated lists after every step.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    parser.add_argument("--profile-dir", default=None, help="Directory for JSONL/CSV event dumps.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = SpaceConfig(
        max_size=args.max_size,
        strict_release=args.strict_release,
        auto_coalesce=args.auto_coalesce,
    )
    profiler = SpaceProfiler(run_id=f"seed{args.seed}", output_dir=args.profile_dir)
    summary = run_simulation(
        config,
        args.steps,
        seed=args.seed,
        max_request=args.max_request,
        release_probability=args.release_probability,
        coalesce_interval=args.coalesce_interval,
        profiler=profiler,
        verbose=args.verbose,
    )
    heap_map = summary.pop("space")
    print("Final stats:", summary)
    print("Heap map:", heap_map)
    written = profiler.flush()
    if written:
        print(f"Events written to {written}")


if __name__ == "__main__":
    main()
