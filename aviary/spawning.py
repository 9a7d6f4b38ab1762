"""
Flyer spawning system.

Spawns flyers from the world spawning configuration with deterministic
placement inside the world bounds.
"""

import numpy as np
from typing import Dict, List, Optional

from .data_types import FlightProperties, RuleWeights, Species, World
from .flyer import Flyer
from .rng import make_seed, random_position_in_box, random_yaw
from .constants import SPAWN_INSET_EXTRA


def spawn_flyers(
    world: World,
    species_registry: Dict[str, Species],
    limit: Optional[int] = None,
    only_species: Optional[List[str]] = None,
    verbose: bool = True
) -> List[Flyer]:
    """
    Spawn flyers according to world spawning configuration.

    Args:
        world: World definition with bounds, seed and spawning config
        species_registry: Dict of species_id -> Species
        limit: Optional limit on total flyers spawned (for testing)
        only_species: Optional list of species IDs to spawn (for testing)
        verbose: Print a warning for unknown species

    Returns:
        List of spawned Flyer instances

    Example (test override):
        flyers = spawn_flyers(world, registry, limit=10, only_species=['house-crow'])
    """
    flyers = []
    total_spawned = 0
    low, high = spawn_region(world)

    for spawn_config in world.spawning:
        species_id = spawn_config.species_id

        if only_species and species_id not in only_species:
            continue

        if species_id not in species_registry:
            if verbose:
                print(f"[WARN] Species {species_id} not found in registry, skipping")
            continue

        species = species_registry[species_id]

        count = spawn_config.count
        if limit is not None:
            count = min(count, limit - total_spawned)

        if count <= 0:
            break

        for index in range(count):
            flyers.append(spawn_flyer(species, index, world.simulation.seed, low, high))

        total_spawned += count

        if limit is not None and total_spawned >= limit:
            break

    return flyers


def spawn_region(world: World):
    """
    Box that spawned flyers are placed in: bounds inset by margin + SPAWN_INSET_EXTRA.

    Collapses to the bounds center on any axis too small for the inset.

    Returns:
        Tuple of (low, high) corners
    """
    inset = world.bounds.margin + SPAWN_INSET_EXTRA
    low = []
    high = []
    for axis_min, axis_max in world.bounds.axis_limits():
        lo, hi = axis_min + inset, axis_max - inset
        if lo > hi:
            lo = hi = 0.5 * (axis_min + axis_max)
        low.append(lo)
        high.append(hi)
    return np.array(low, dtype=np.float64), np.array(high, dtype=np.float64)


def spawn_flyer(
    species: Species,
    index: int,
    world_seed: int,
    low: np.ndarray,
    high: np.ndarray
) -> Flyer:
    """
    Spawn a single flyer, level and cruising at species spawn speed.

    Args:
        species: Species definition
        index: Flyer index within species (used in ID and seed)
        world_seed: World generation seed
        low: Spawn region minimum corner
        high: Spawn region maximum corner

    Returns:
        Flyer whose goal velocity and velocity equal forward * spawn_speed
    """
    flyer_seed = make_seed(world_seed, species.species_id, index)
    position = random_position_in_box(make_seed(flyer_seed, "position"), low, high)
    yaw = random_yaw(make_seed(flyer_seed, "heading"))

    return Flyer(
        instance_id=f"{species.species_id}-{index:04d}",
        species_id=species.species_id,
        position=position,
        props=FlightProperties(**vars(species.flight)),
        weights=RuleWeights(**vars(species.weights)),
        yaw=yaw,
        pitch=0.0,
        speed=species.spawn_speed
    )
