"""
Scalar and angular helpers for the flight controller.

Interpolation, angle wrapping, critically-damped smoothing, and the
direction <-> yaw/pitch mapping. All helpers are pure and safe to call
with dt = 0 or degenerate inputs.

Angle convention: yaw = 0 and pitch = 0 look down -Z. Positive yaw turns
toward -X (counter-clockwise seen from above), positive pitch looks up.
"""
from __future__ import annotations

import math
import sys
from typing import Tuple

import numpy as np
from scipy.spatial.transform import Rotation

from .constants import EULER_ORDER, FORWARD_AXIS, SMOOTH_TIME_FLOOR

TAU = 2.0 * math.pi
FLOAT_MAX = sys.float_info.max


def lerp(start: float, end: float, t: float) -> float:
    """Linear interpolation, t is not clamped."""
    return (1.0 - t) * start + t * end


def inv_lerp(start: float, end: float, value: float) -> float:
    """
    Inverse of lerp: where value sits between start (0.0) and end (1.0).

    Not clamped. Callers must not pass start == end.
    """
    return (value - start) / (end - start)


def clamp(value: float, low: float, high: float) -> float:
    return low if value < low else (high if value > high else value)


def normalize_or_zero(vec: np.ndarray) -> Tuple[np.ndarray, float]:
    """
    Normalize vector to unit length, leaving zero vectors at zero.

    Args:
        vec: Vector to normalize [x, y, z]

    Returns:
        Tuple of (unit vector or zero vector, original length)
    """
    length = math.sqrt(float(np.dot(vec, vec)))
    if length == 0.0:
        return np.zeros(3, dtype=np.float64), 0.0
    return vec / length, length


# ============================================================================
# Angles
# ============================================================================

def repeat(t: float, length: float) -> float:
    """
    Loop t into [0, length], mirrored for negative t.

    repeat(-pi, tau) == -pi, repeat(8.158, tau) ~= 1.8748
    """
    abs_t = abs(t)
    wrapped = clamp(abs_t - math.floor(abs_t / length) * length, 0.0, length)
    return math.copysign(wrapped, t)


def delta_angle(current: float, target: float) -> float:
    """
    Shortest signed rotation from current to target, in (-pi, pi].

    Args:
        current: Current angle (radians)
        target: Target angle (radians, any winding)

    Returns:
        Signed delta; adding it to current reaches target the short way
    """
    delta = repeat(_saturate(target - current), TAU)
    if delta > math.pi:
        delta -= TAU
    if delta <= -math.pi:
        delta += TAU
    return delta


def direction_to_angles(direction: np.ndarray) -> Tuple[float, float]:
    """
    Yaw and pitch that point the forward axis along direction.

    Args:
        direction: Unit vector [x, y, z]

    Returns:
        (yaw, pitch) with yaw in [-pi, pi], pitch in [-pi/2, pi/2]
    """
    yaw = math.atan2(-direction[0], -direction[2])
    pitch = math.asin(clamp(float(direction[1]), -1.0, 1.0))
    return yaw, pitch


def angles_to_direction(yaw: float, pitch: float) -> np.ndarray:
    """
    Forward direction for a yaw/pitch pair (inverse of direction_to_angles).

    Equivalent to rotating (0, 0, -1) by yaw about up, then by pitch about
    the resulting right axis.
    """
    cos_pitch = math.cos(pitch)
    return np.array([
        -math.sin(yaw) * cos_pitch,
        math.sin(pitch),
        -math.cos(yaw) * cos_pitch,
    ], dtype=np.float64)


def orientation_from_euler(yaw: float, pitch: float, roll: float) -> np.ndarray:
    """
    Orientation quaternion from intrinsic yaw (Y), pitch (X), roll (Z).

    Returns:
        Quaternion [x, y, z, w] (scipy scalar-last order)
    """
    return Rotation.from_euler(EULER_ORDER, [yaw, pitch, roll]).as_quat()


def forward_from_orientation(orientation: np.ndarray) -> np.ndarray:
    """Rotate the forward axis (0, 0, -1) by an orientation quaternion."""
    return Rotation.from_quat(orientation).apply(FORWARD_AXIS)


# ============================================================================
# Smoothing
# ============================================================================

def smooth_damp(
    current: float,
    target: float,
    rate: float,
    smooth_time: float,
    max_rate: float,
    dt: float
) -> Tuple[float, float]:
    """
    Critically-damped spring step toward target.

    Closed-form approximation of exp(-omega * dt); no oscillation, the
    excursion per step is limited to max_rate * smooth_time.

    Args:
        current: Current value
        target: Target value
        rate: Current rate of change (carried between calls)
        smooth_time: Approximate time to reach target (seconds)
        max_rate: Maximum rate of change
        dt: Time step (seconds, may be 0)

    Returns:
        Tuple of (new value, new rate)

    Note:
        When the overshoot guard snaps to target with dt == 0 the rate is
        returned unchanged instead of being recomputed.
    """
    smooth_time = max(smooth_time, SMOOTH_TIME_FLOOR)
    omega = 2.0 / smooth_time

    x = omega * dt
    decay = 1.0 / (1.0 + x + 0.48 * x * x + 0.235 * x * x * x)

    # Every intermediate saturates at +-FLOAT_MAX so finite input stays finite
    original_target = target
    max_change = _saturate(max_rate * smooth_time)
    change = clamp(_saturate(current - target), -max_change, max_change)
    target = _saturate(current - change)

    temp = _saturate(_saturate(rate + _saturate(omega * change)) * dt)
    new_rate = _saturate(_saturate(rate - _saturate(omega * temp)) * decay)
    new_value = _saturate(target + _saturate(change + temp) * decay)

    # Overshoot guard
    if (original_target - current > 0.0) == (new_value > original_target):
        new_value = original_target
        if dt > 0.0:
            new_rate = (new_value - original_target) / dt

    return new_value, new_rate


def smooth_damp_angle(
    current: float,
    target: float,
    rate: float,
    smooth_time: float,
    max_rate: float,
    dt: float
) -> Tuple[float, float]:
    """smooth_damp for angles in radians; always turns the short way round."""
    target = _saturate(current + delta_angle(current, target))
    return smooth_damp(current, target, rate, smooth_time, max_rate, dt)


def _saturate(value: float) -> float:
    return clamp(value, -FLOAT_MAX, FLOAT_MAX)
