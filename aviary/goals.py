"""
Goal generation and composition for flyers.

keep_in_bounds and keep_level produce extra goal vectors next to the boids
rules; compose_goal_velocity folds every goal into the flyer's persistent
goal velocity.

The goal velocity is an additive integrator: it is never reset, each tick
adds dt * (weighted goals) and the result is clamped to the flyer's speed
limits. This gives flyers directional inertia.
"""

import numpy as np
from typing import Tuple

from .constants import WORLD_UP
from .data_types import GlobalTunables, WorldBounds
from .flight_math import inv_lerp, normalize_or_zero
from .flyer import Flyer, RuleOutputs


def keep_in_bounds(flyer: Flyer, bounds: WorldBounds) -> Tuple[np.ndarray, float]:
    """
    Soft push back toward the interior when inside the bounds margin.

    Per axis, below min + margin adds +spd_max * t toward the interior,
    with t = 0 at the margin line and t = 1 at the hard boundary (t keeps
    growing past it). Above max - margin is symmetric.

    Weight is a single flag: 1.0 if any axis triggered, else 0.0.

    Args:
        flyer: Flyer to evaluate
        bounds: World bounds with margin

    Returns:
        Tuple of (goal vector, weight). Goal is the correction minus the
        current velocity (a velocity error), or zero when nothing triggered.
    """
    max_speed = flyer.props.spd_max
    margin = bounds.margin
    correction = np.zeros(3, dtype=np.float64)
    weight = 0.0

    for axis, (axis_min, axis_max) in enumerate(bounds.axis_limits()):
        p = flyer.position[axis]

        if p < axis_min + margin:
            t = inv_lerp(axis_min + margin, axis_min, p) if margin > 0 else 1.0
            correction[axis] += max_speed * t
            weight = 1.0
        if p > axis_max - margin:
            t = inv_lerp(axis_max - margin, axis_max, p) if margin > 0 else 1.0
            correction[axis] -= max_speed * t
            weight = 1.0

    if weight == 0.0:
        return correction, weight

    current_velocity = flyer.forward * flyer.speed
    return correction - current_velocity, weight


def keep_level(flyer: Flyer) -> np.ndarray:
    """
    Bias back toward level flight.

    Stands in for a lift/gravity model: the more the nose points up (or
    down), the harder the goal pulls the opposite way.

    Returns:
        -WORLD_UP * dot(WORLD_UP, forward) * spd_max
    """
    uprightness = float(np.dot(WORLD_UP, flyer.forward))
    return -WORLD_UP * uprightness * flyer.props.spd_max


def clamp_goal_velocity(goal: np.ndarray, spd_min: float, spd_max: float) -> np.ndarray:
    """
    Clamp goal velocity magnitude into [spd_min, spd_max], keeping direction.

    A zero vector has no direction and is returned unchanged.

    Args:
        goal: Goal velocity [vx, vy, vz]
        spd_min: Minimum goal speed
        spd_max: Maximum goal speed

    Returns:
        Clamped goal velocity
    """
    direction, speed = normalize_or_zero(goal)

    if speed > spd_max:
        return direction * spd_max
    if 0.0 < speed < spd_min:
        return direction * spd_min
    return goal


def compose_goal_velocity(
    flyer: Flyer,
    rules: RuleOutputs,
    tunables: GlobalTunables,
    dt: float
):
    """
    Accumulate weighted goals into flyer.goal_velocity, then clamp.

    Each goal is scaled by the flyer's own weight and the flock-wide
    tunable for its category.

    Args:
        flyer: Flyer to update (goal_velocity modified in place)
        rules: Goal vectors evaluated for this flyer this tick
        tunables: Tunables snapshot for this tick (read-only)
        dt: Time step in seconds
    """
    weights = flyer.weights
    total = (
        rules.separation * (weights.separation * tunables.separation)
        + rules.alignment * (weights.alignment * tunables.alignment)
        + rules.cohesion * (weights.cohesion * tunables.cohesion)
        + rules.keep_in_bounds * (rules.keep_in_bounds_weight * tunables.keep_in_bounds)
        + rules.keep_level * (weights.keep_level * tunables.keep_level)
    )

    goal = flyer.goal_velocity + dt * total
    flyer.goal_velocity = clamp_goal_velocity(goal, flyer.props.spd_min, flyer.props.spd_max)
