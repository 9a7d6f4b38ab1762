"""
Deterministic RNG utilities for aviary simulation.

Uses SHA256 hashing to derive stable seeds from hierarchical components
(world_seed, species_id, flyer index, component_name). All randomness uses
numpy.random.Generator(PCG64) for reproducible cross-session results.
"""

import hashlib
import math
import numpy as np
from typing import Any


def make_seed(*components: Any) -> int:
    """
    Generate deterministic 64-bit seed from hierarchical components.

    Uses SHA256 to hash components into stable seed value.

    Args:
        *components: Seed components (world_seed, species_id, flyer_index, etc.)

    Returns:
        64-bit integer seed for numpy RNG

    Example:
        flyer_seed = make_seed(world_seed, species_id, flyer_index)
        heading_seed = make_seed(flyer_seed, "heading")
    """
    hash_input = ":".join(str(c) for c in components)
    hash_bytes = hashlib.sha256(hash_input.encode('utf-8')).digest()
    return int.from_bytes(hash_bytes[:8], byteorder='big')


def random_position_in_box(seed: int, low: np.ndarray, high: np.ndarray) -> np.ndarray:
    """
    Generate random position uniformly distributed within an axis-aligned box.

    Args:
        seed: RNG seed (from make_seed())
        low: Box minimum corner [x, y, z]
        high: Box maximum corner [x, y, z]

    Returns:
        Random position as numpy array [x, y, z]
    """
    rng = np.random.Generator(np.random.PCG64(seed))
    return rng.uniform(low, high, size=3).astype(np.float64)


def random_yaw(seed: int) -> float:
    """
    Generate random heading angle in [-pi, pi).

    Args:
        seed: RNG seed

    Returns:
        Yaw in radians
    """
    rng = np.random.Generator(np.random.PCG64(seed))
    return float(rng.uniform(-math.pi, math.pi))
