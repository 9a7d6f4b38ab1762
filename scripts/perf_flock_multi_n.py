"""
Multi-N performance validation for the flock tick.

Runs full ticks at 60, 180, 500, 1000 flyers and reports median/p90.
Single-threaded, log-only above the data pack population.
"""

# Pin threading for stable measurement
import os
os.environ.update({
    'OPENBLAS_NUM_THREADS': '1',
    'MKL_NUM_THREADS': '1',
    'NUMEXPR_NUM_THREADS': '1',
    'OMP_NUM_THREADS': '1'
})

import sys
import gc
import time
import numpy as np
from dataclasses import replace
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from aviary.constants import TICK_SUMMARY_INTERVAL
from aviary.data_types import SpawningConfig
from aviary.loader import load_all_data
from aviary.simulation import FlockSimulation

DATA_ROOT = Path(__file__).parent.parent / "data"

# One 60 Hz frame
FRAME_BUDGET_MS = 1000.0 / 60.0


def build_simulation(flyer_count: int) -> FlockSimulation:
    """Data pack world with the spawn count overridden."""
    data = load_all_data(DATA_ROOT)
    world = data['world']
    species_id = world.spawning[0].species_id
    world = replace(world, spawning=[SpawningConfig(species_id=species_id, count=flyer_count)])
    return FlockSimulation.from_world(world, data['species'])


def run_tick_perf_test(flyer_count: int, warmup: int = 20, runs: int = 200) -> dict:
    """
    Run tick performance test at given flyer count.

    Args:
        flyer_count: Number of flyers to simulate
        warmup: Ticks run before measuring (flock settles in)
        runs: Number of measured ticks

    Returns:
        Dict with p50, p90, min, max, mean neighbors
    """
    sim = build_simulation(flyer_count)

    for _ in range(warmup):
        sim.tick()

    # Measure (GC disabled for stable timing)
    gc.collect()
    gc.disable()

    times_ns = []
    try:
        for tick in range(runs):
            start = time.perf_counter_ns()
            sim.tick()
            times_ns.append(time.perf_counter_ns() - start)

            if (tick + 1) % TICK_SUMMARY_INTERVAL == 0:
                sim.print_tick_summary()
    finally:
        gc.enable()

    # Statistics
    times_ms = np.array(times_ns) / 1_000_000
    observed = [len(f.observed) - 1 for f in sim.flyers.values()]

    return {
        'flyer_count': flyer_count,
        'runs': runs,
        'p50_ms': np.percentile(times_ms, 50),
        'p90_ms': np.percentile(times_ms, 90),
        'min_ms': np.min(times_ms),
        'max_ms': np.max(times_ms),
        'mean_observed': float(np.mean(observed)) if observed else 0.0
    }


def main():
    """Run multi-N tick performance validation."""
    print("=" * 80)
    print("Flock Tick Multi-N Performance Validation")
    print("=" * 80)
    print()

    test_sizes = [60, 180, 500, 1000]

    results = []

    for flyer_count in test_sizes:
        print(f"[N = {flyer_count}]")

        result = run_tick_perf_test(flyer_count)

        print(f"  p50: {result['p50_ms']:.3f}ms")
        print(f"  p90: {result['p90_ms']:.3f}ms")
        print(f"  min: {result['min_ms']:.3f}ms, max: {result['max_ms']:.3f}ms")
        print(f"  Observed neighbors (mean): {result['mean_observed']:.1f}")

        if flyer_count <= 180:
            if result['p50_ms'] >= FRAME_BUDGET_MS:
                print(f"  WARNING: p50 {result['p50_ms']:.3f}ms >= {FRAME_BUDGET_MS:.1f}ms frame budget!")
            else:
                headroom_pct = ((FRAME_BUDGET_MS - result['p50_ms']) / FRAME_BUDGET_MS) * 100
                print(f"  PASS: {headroom_pct:.1f}% headroom under frame budget")
        else:
            print("  (log-only, no assertion)")

        results.append(result)
        print()

    # Summary table
    print("=" * 80)
    print("Summary Table")
    print("=" * 80)
    print()
    print("| Flyers | p50 (ms) | p90 (ms) | Observed |")
    print("|--------|----------|----------|----------|")
    for r in results:
        print(f"| {r['flyer_count']:6d} | {r['p50_ms']:8.3f} | {r['p90_ms']:8.3f} | {r['mean_observed']:8.1f} |")

    print()
    print("=" * 80)


if __name__ == '__main__':
    main()
