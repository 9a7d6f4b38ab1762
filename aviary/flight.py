"""
Flight controller and motion integration.

Each tick, per flyer:

1. reduce_goal: goal velocity -> target speed, yaw and pitch
2. steer: smooth speed, pitch and yaw toward their targets (rate limited)
3. integrate_motion: rebuild orientation (roll banks with yaw rate), step
   position along forward
4. republish_velocity: publish forward * speed for next tick's alignment
"""

import numpy as np

from .constants import STEERING_SMOOTH_TIME
from .flight_math import (
    clamp,
    direction_to_angles,
    lerp,
    normalize_or_zero,
    orientation_from_euler,
    smooth_damp,
    smooth_damp_angle,
)
from .flyer import Flyer, GoalComponents


def reduce_goal(flyer: Flyer) -> GoalComponents:
    """
    Reduce the goal velocity to steering targets.

    A flyer only commits to the full goal speed when it already faces the
    goal; while turning it is pulled toward its minimum speed.

    A zero goal velocity reduces to a zero direction: facing is 0, so the
    target speed is spd_min, and the angles are those of (0, 0, 0)
    (yaw = atan2(-0, -0) = -pi, pitch = 0).

    Args:
        flyer: Flyer to update (flyer.goal replaced)

    Returns:
        The new GoalComponents
    """
    props = flyer.props
    goal_direction, goal_speed = normalize_or_zero(flyer.goal_velocity)

    facing = clamp(float(np.dot(goal_direction, flyer.forward)), 0.0, 1.0)
    yaw, pitch = direction_to_angles(goal_direction)

    speed = min(lerp(props.spd_min, goal_speed, facing), props.spd_max)

    flyer.goal = GoalComponents(speed=speed, yaw=yaw, pitch=pitch)
    return flyer.goal


def steer(flyer: Flyer, dt: float, smooth_time: float = STEERING_SMOOTH_TIME):
    """
    Smooth speed, pitch and yaw toward flyer.goal.

    Speed is limited by accel_max, pitch by pitch_rate_max and yaw by
    yaw_rate_max. Angles always turn the short way round.

    Args:
        flyer: Flyer to update in place
        dt: Time step in seconds (0 is allowed)
        smooth_time: Smoothing time in seconds
    """
    props = flyer.props
    goal = flyer.goal

    flyer.speed, flyer.acceleration = smooth_damp(
        flyer.speed, goal.speed, flyer.acceleration,
        smooth_time, props.accel_max, dt
    )
    flyer.pitch, flyer.pitch_rate = smooth_damp_angle(
        flyer.pitch, goal.pitch, flyer.pitch_rate,
        smooth_time, props.pitch_rate_max, dt
    )
    flyer.yaw, flyer.yaw_rate = smooth_damp_angle(
        flyer.yaw, goal.yaw, flyer.yaw_rate,
        smooth_time, props.yaw_rate_max, dt
    )


def integrate_motion(flyer: Flyer, dt: float):
    """
    Rebuild orientation and advance position one explicit Euler step.

    Roll is not smoothed: it banks in proportion to the current yaw rate.

    Args:
        flyer: Flyer to update in place
        dt: Time step in seconds
    """
    flyer.roll = flyer.props.roll_from_yaw_rate * flyer.yaw_rate
    flyer.orientation = orientation_from_euler(flyer.yaw, flyer.pitch, flyer.roll)
    flyer.position += flyer.forward * flyer.speed * dt


def republish_velocity(flyer: Flyer):
    """
    Publish the effective velocity for the next tick's alignment rule.

    Alignment therefore always reacts to a neighbor's velocity from the
    previous tick.
    """
    flyer.velocity = flyer.forward * flyer.speed
