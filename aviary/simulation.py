"""
Aviary simulation kernel.

Main simulation class that manages flyer lifecycle, the tick pipeline, and
timing telemetry.
"""

import numpy as np
import os
import time
from dataclasses import replace, fields
from pathlib import Path
from typing import Dict, List, Optional

from .flyer import Flyer, RuleOutputs
from .data_types import GlobalTunables, Species, World
from .spatial_hash import SpatialIndex
from .observe import observe
from .boids import evaluate_boids
from .goals import keep_in_bounds, keep_level, compose_goal_velocity
from .flight import reduce_goal, steer, integrate_motion, republish_velocity
from .spawning import spawn_flyers
from .loader import load_all_data, DEFAULT_SCHEMA_DIR, DEFAULT_WORLD_FILE
from .constants import TICK_TIME_WINDOW

PHASES = ('observe', 'rules', 'compose', 'flight', 'motion')


class FlockSimulation:
    """
    Main simulation class for a flock of flyers.

    Owns the flyers, the spatial index and the global tunables, and runs
    the per-tick pipeline.
    """

    def __init__(
        self,
        data_root: Path,
        schema_dir: Optional[Path] = DEFAULT_SCHEMA_DIR,
        spawn_limit: Optional[int] = None,
        spawn_only_species: Optional[List[str]] = None,
        world_file: str = DEFAULT_WORLD_FILE,
        verbose: bool = True
    ):
        """
        Initialize simulation from data pack.

        Args:
            data_root: Path to data directory
            schema_dir: Path to JSON schemas (None skips validation)
            spawn_limit: Optional limit on spawned flyers (for testing)
            spawn_only_species: Optional list of species to spawn (for testing)
            world_file: World file name under data_root/world
            verbose: Print load/spawn progress
        """
        if verbose:
            print("Loading data pack...")
        data = load_all_data(data_root, schema_dir, world_file)
        self._setup(data['world'], data['species'], spawn_limit, spawn_only_species, verbose)

    @classmethod
    def from_world(
        cls,
        world: World,
        species_registry: Dict[str, Species],
        spawn_limit: Optional[int] = None,
        spawn_only_species: Optional[List[str]] = None,
        verbose: bool = False
    ) -> 'FlockSimulation':
        """
        Build a simulation from in-memory definitions (no data pack).

        Args:
            world: World definition
            species_registry: Dict of species_id -> Species
            spawn_limit: Optional limit on spawned flyers
            spawn_only_species: Optional species filter
            verbose: Print spawn progress

        Returns:
            Initialized simulation
        """
        sim = cls.__new__(cls)
        sim._setup(world, species_registry, spawn_limit, spawn_only_species, verbose)
        return sim

    def _setup(
        self,
        world: World,
        species_registry: Dict[str, Species],
        spawn_limit: Optional[int],
        spawn_only_species: Optional[List[str]],
        verbose: bool
    ):
        self.world: World = world
        self.bounds = world.bounds
        self.species_registry: Dict[str, Species] = species_registry
        self.tunables: GlobalTunables = world.tunables

        # Simulation state (insertion order is tick order)
        self.flyers: Dict[str, Flyer] = {}
        self.tick_count: int = 0
        self.dt: float = world.simulation.tick_delta_seconds
        self.smooth_time: float = world.simulation.smooth_time_seconds

        # Spatial index sized once from bounds
        self.spatial = SpatialIndex(self.bounds)

        # Performance metrics
        self._tick_times: List[float] = []
        self._tick_time_sum: float = 0.0
        self._tick_time_window: int = TICK_TIME_WINDOW
        self._phase_times: Dict[str, List[float]] = {name: [] for name in PHASES}

        if verbose:
            print(f"Spawning flyers (limit={spawn_limit}, species={spawn_only_species})...")
        for flyer in spawn_flyers(world, species_registry, spawn_limit, spawn_only_species, verbose):
            self.flyers[flyer.instance_id] = flyer

        if verbose:
            print(f"[OK] Simulation initialized: {len(self.flyers)} flyers, "
                  f"grid={self.spatial.width}x{self.spatial.depth}, "
                  f"dt={self.dt}s, seed={world.simulation.seed}")

    # ========================================================================
    # Flyer lifecycle
    # ========================================================================

    def add_flyer(self, flyer: Flyer):
        """
        Start tracking a flyer. It takes part from the next tick on.

        Raises:
            ValueError: If a flyer with the same instance_id is tracked
        """
        if flyer.instance_id in self.flyers:
            raise ValueError(f"Flyer {flyer.instance_id} already exists")
        self.flyers[flyer.instance_id] = flyer

    def remove_flyer(self, instance_id: str) -> bool:
        """
        Stop tracking a flyer.

        Safe between any two phases of a tick: ids left in other flyers'
        observed lists are skipped, and the removed flyer is not advanced.

        Returns:
            True if the flyer was tracked
        """
        return self.flyers.pop(instance_id, None) is not None

    def get_flyer(self, instance_id: str) -> Optional[Flyer]:
        return self.flyers.get(instance_id)

    def set_tunables(self, **values: float) -> GlobalTunables:
        """
        Replace global tunables. Takes effect from the next tick.

        Args:
            **values: Tunable name -> multiplier (e.g., separation=3.0)

        Returns:
            The new tunables

        Raises:
            KeyError: Unknown tunable name
            ValueError: Negative multiplier
        """
        known = {f.name for f in fields(GlobalTunables)}
        for name, value in values.items():
            if name not in known:
                raise KeyError(f"Unknown tunable: {name}")
            if value < 0:
                raise ValueError(f"Tunable {name} must be >= 0, got {value}")

        self.tunables = replace(self.tunables, **values)
        return self.tunables

    # ========================================================================
    # Tick pipeline
    # ========================================================================

    def tick(self, dt: Optional[float] = None):
        """
        Advance simulation by one time step.

        PHASE ORDER (each phase completes for every flyer before the next):

        1. observe  - rebuild spatial index, assign cells, gather neighbors
        2. rules    - separation/alignment/cohesion, keep-in-bounds, keep-level
        3. compose  - accumulate weighted goals into goal velocity
        4. flight   - reduce goal to targets, then smooth speed/pitch/yaw
        5. motion   - integrate orientation and position, republish velocity

        Neighbor gathering needs every flyer's cell already assigned; goal
        composition needs every rule output written. Alignment reads the
        velocities republished at the end of the previous tick.

        Args:
            dt: Time step in seconds (defaults to world tick_delta_seconds)
        """
        start_time = time.perf_counter()
        dt = self.dt if dt is None else dt

        # Tunables snapshot: read-only for the whole tick
        tunables = self.tunables
        flyers = list(self.flyers.values())

        self._run_phase('observe', self._observe, flyers)
        self._run_phase('rules', self._evaluate_rules, flyers)
        self._run_phase('compose', self._compose_goals, flyers, tunables, dt)
        self._run_phase('flight', self._fly, flyers, dt)
        self._run_phase('motion', self._move, flyers, dt)

        self.tick_count += 1

        elapsed = time.perf_counter() - start_time
        self._record_tick_time(elapsed)

    def _run_phase(self, name: str, phase, *args):
        phase_start = time.perf_counter()
        phase(*args)
        times = self._phase_times[name]
        times.append(time.perf_counter() - phase_start)
        if len(times) > self._tick_time_window:
            times.pop(0)

    def _tracked(self, flyers: List[Flyer]):
        """Flyers of this tick that have not been removed since it started"""
        for flyer in flyers:
            if flyer.instance_id in self.flyers:
                yield flyer

    def _observe(self, flyers: List[Flyer]):
        self.spatial.rebuild(flyers)
        observe(flyers, self.spatial)

        # Debug invariant check (zero perf impact when env var not set)
        if os.getenv('SIM_DEBUG_INVARIANTS') == '1':
            assert self.spatial.indexed_count() == len(flyers), \
                f"indexed ({self.spatial.indexed_count()}) != flyers ({len(flyers)})"
            for flyer in flyers:
                assert flyer.instance_id in self.spatial.cells[flyer.cell], \
                    f"{flyer.instance_id} missing from cell {flyer.cell}"

    def _evaluate_rules(self, flyers: List[Flyer]):
        lookup = self.flyers
        for flyer in self._tracked(flyers):
            sep, ali, coh = evaluate_boids(flyer, lookup)
            bounds_goal, bounds_weight = keep_in_bounds(flyer, self.bounds)
            flyer.rules = RuleOutputs(
                separation=sep,
                alignment=ali,
                cohesion=coh,
                keep_in_bounds=bounds_goal,
                keep_in_bounds_weight=bounds_weight,
                keep_level=keep_level(flyer)
            )

    def _compose_goals(self, flyers: List[Flyer], tunables: GlobalTunables, dt: float):
        for flyer in self._tracked(flyers):
            compose_goal_velocity(flyer, flyer.rules, tunables, dt)

    def _fly(self, flyers: List[Flyer], dt: float):
        tracked = list(self._tracked(flyers))
        for flyer in tracked:
            reduce_goal(flyer)
        for flyer in tracked:
            steer(flyer, dt, self.smooth_time)

    def _move(self, flyers: List[Flyer], dt: float):
        tracked = list(self._tracked(flyers))
        for flyer in tracked:
            integrate_motion(flyer, dt)
        for flyer in tracked:
            republish_velocity(flyer)

    # ========================================================================
    # Telemetry
    # ========================================================================

    def get_tick_stats(self) -> dict:
        """
        Get current tick timing statistics.

        Returns:
            Dict with tick_count, avg_tick_time_ms, last_tick_time_ms
        """
        if not self._tick_times:
            return {
                'tick_count': self.tick_count,
                'avg_tick_time_ms': 0.0,
                'last_tick_time_ms': 0.0
            }

        avg_time = self._tick_time_sum / len(self._tick_times)
        last_time = self._tick_times[-1]

        return {
            'tick_count': self.tick_count,
            'avg_tick_time_ms': avg_time * 1000.0,
            'last_tick_time_ms': last_time * 1000.0
        }

    def _record_tick_time(self, elapsed: float):
        """
        Record tick timing for rolling average.

        Args:
            elapsed: Tick time in seconds
        """
        self._tick_times.append(elapsed)
        self._tick_time_sum += elapsed

        # Maintain rolling window
        if len(self._tick_times) > self._tick_time_window:
            removed = self._tick_times.pop(0)
            self._tick_time_sum -= removed

    def get_flock_stats(self) -> dict:
        """
        Aggregate flight state across the flock.

        Returns:
            Dict with flyer_count, mean_speed, mean_goal_speed,
            mean_speed_deficit, centroid (list or None)
        """
        if not self.flyers:
            return {
                'flyer_count': 0,
                'mean_speed': 0.0,
                'mean_goal_speed': 0.0,
                'mean_speed_deficit': 0.0,
                'centroid': None
            }

        flyers = list(self.flyers.values())
        speeds = np.array([f.speed for f in flyers], dtype=np.float64)
        goal_speeds = np.linalg.norm(np.array([f.goal_velocity for f in flyers]), axis=1)
        positions = np.array([f.position for f in flyers], dtype=np.float64)

        return {
            'flyer_count': len(flyers),
            'mean_speed': float(np.mean(speeds)),
            'mean_goal_speed': float(np.mean(goal_speeds)),
            'mean_speed_deficit': float(np.mean(goal_speeds - speeds)),
            'centroid': positions.mean(axis=0).tolist()
        }

    def get_snapshot(self) -> dict:
        """
        Get complete simulation state snapshot.

        Returns:
            Dict with tick_count, flyers, tunables, timing
        """
        return {
            'tick_count': self.tick_count,
            'flyer_count': len(self.flyers),
            'flyers': [f.to_dict() for f in self.flyers.values()],
            'tunables': {f.name: getattr(self.tunables, f.name) for f in fields(GlobalTunables)},
            'timing': self.get_tick_stats()
        }

    def print_tick_summary(self):
        """Print tick summary to console (lightweight monitoring)"""
        stats = self.get_tick_stats()
        print(f"Tick {stats['tick_count']:5d} | "
              f"Avg: {stats['avg_tick_time_ms']:6.3f} ms | "
              f"Last: {stats['last_tick_time_ms']:6.3f} ms | "
              f"Flyers: {len(self.flyers)}")

    def print_perf_breakdown(self, every: int = 200):
        """
        Print per-phase timing breakdown on interval.

        Only prints every N ticks to reduce overhead.

        Args:
            every: Print interval in ticks (default 200)
        """
        if self.tick_count == 0 or self.tick_count % every != 0:
            return

        window = min(every, len(self._tick_times))
        if window == 0:
            return

        print(f"\n[Perf Breakdown] Tick {self.tick_count} ({len(self.flyers)} flyers)")
        phase_total = 0.0
        for name in PHASES:
            times = self._phase_times[name][-window:]
            avg_ms = sum(times) / len(times) * 1000.0 if times else 0.0
            phase_total += avg_ms
            print(f"  {name.capitalize() + ':':<13} {avg_ms:6.3f} ms")

        flock = self.get_flock_stats()
        print(f"  [Flock] speed_mean={flock['mean_speed']:.1f} "
              f"goal_mean={flock['mean_goal_speed']:.1f} "
              f"deficit_mean={flock['mean_speed_deficit']:.2f}")

        avg_total = sum(self._tick_times[-window:]) / window * 1000.0
        print(f"  Total:        {avg_total:6.3f} ms")
        print(f"  Overhead:     {avg_total - phase_total:6.3f} ms")
