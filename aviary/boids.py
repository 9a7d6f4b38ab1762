"""
Boids rule evaluation for flyers.

Separation, alignment and cohesion over a flyer's observed neighbor ids.
Each rule returns an unweighted vector; weights are applied by the goal
composer. Ids that are the flyer itself or no longer resolve (removed
flyers) are skipped.
"""

import numpy as np
from typing import Mapping, Tuple

from .constants import PERCEPTION_RADIUS
from .flyer import Flyer


def _neighbors(flyer: Flyer, lookup: Mapping[str, Flyer]):
    """Yield observed flyers, skipping self and stale ids"""
    own_id = flyer.instance_id
    for other_id in flyer.observed:
        if other_id == own_id:
            continue
        other = lookup.get(other_id)
        if other is None:
            continue
        yield other


def separation(
    flyer: Flyer,
    lookup: Mapping[str, Flyer],
    radius: float = PERCEPTION_RADIUS
) -> np.ndarray:
    """
    Push away from every neighbor closer than radius.

    Sums -(other.position - flyer.position) for neighbors strictly inside
    radius. Neighbors at or beyond radius are ignored entirely.

    Returns:
        Separation vector (zero if no neighbor is within radius)
    """
    away = np.zeros(3, dtype=np.float64)
    radius_sq = radius * radius
    for other in _neighbors(flyer, lookup):
        displacement = other.position - flyer.position
        if np.dot(displacement, displacement) < radius_sq:
            away -= displacement
    return away


def alignment(flyer: Flyer, lookup: Mapping[str, Flyer]) -> np.ndarray:
    """
    Match the mean velocity of all observed neighbors (no radius cutoff).

    Uses the velocities republished at the end of the previous tick.

    Returns:
        mean(neighbor velocity) - flyer velocity, or zero with no neighbors
    """
    total = np.zeros(3, dtype=np.float64)
    count = 0
    for other in _neighbors(flyer, lookup):
        total += other.velocity
        count += 1

    if count == 0:
        return total
    return total / count - flyer.velocity


def cohesion(flyer: Flyer, lookup: Mapping[str, Flyer]) -> np.ndarray:
    """
    Steer toward the mean position of all observed neighbors (no radius cutoff).

    Returns:
        mean(neighbor position) - flyer position, or zero with no neighbors
    """
    total = np.zeros(3, dtype=np.float64)
    count = 0
    for other in _neighbors(flyer, lookup):
        total += other.position
        count += 1

    if count == 0:
        return total
    return total / count - flyer.position


def evaluate_boids(
    flyer: Flyer,
    lookup: Mapping[str, Flyer]
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Evaluate all three rules for one flyer.

    Returns:
        Tuple of (separation, alignment, cohesion)
    """
    return (
        separation(flyer, lookup),
        alignment(flyer, lookup),
        cohesion(flyer, lookup),
    )
