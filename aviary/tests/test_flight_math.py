import math

import numpy as np

from aviary.flight_math import (
    TAU,
    angles_to_direction,
    clamp,
    delta_angle,
    direction_to_angles,
    forward_from_orientation,
    inv_lerp,
    lerp,
    normalize_or_zero,
    orientation_from_euler,
    repeat,
    smooth_damp,
    smooth_damp_angle,
)


def test_lerp_and_inv_lerp():
    assert lerp(50.0, 100.0, 0.0) == 50.0
    assert lerp(50.0, 100.0, 1.0) == 100.0
    assert np.isclose(lerp(50.0, 100.0, 0.25), 62.5)
    # Not clamped
    assert np.isclose(lerp(0.0, 10.0, 1.5), 15.0)

    assert np.isclose(inv_lerp(50.0, 0.0, 25.0), 0.5)
    assert np.isclose(inv_lerp(50.0, 0.0, -10.0), 1.2)


def test_clamp():
    assert clamp(5.0, 0.0, 1.0) == 1.0
    assert clamp(-5.0, 0.0, 1.0) == 0.0
    assert clamp(0.5, 0.0, 1.0) == 0.5


def test_normalize_or_zero():
    unit, length = normalize_or_zero(np.array([3.0, 0.0, 4.0]))
    assert np.isclose(length, 5.0)
    assert np.allclose(unit, [0.6, 0.0, 0.8])

    unit, length = normalize_or_zero(np.zeros(3))
    assert length == 0.0
    assert np.all(unit == 0.0)


def test_repeat_and_delta_angle_known_values():
    assert np.isclose(repeat(8.158, TAU), 1.8748, atol=1e-4)
    assert np.isclose(repeat(-math.pi, TAU), -math.pi)

    assert np.isclose(delta_angle(0.0, 4.0), -2.2831855, atol=1e-6)
    assert np.isclose(delta_angle(4.0, 0.0), 2.2831855, atol=1e-6)
    assert np.isclose(delta_angle(0.0, 1.0), 1.0)


def test_delta_angle_range():
    for current in np.linspace(-10.0, 10.0, 41):
        for target in np.linspace(-10.0, 10.0, 41):
            d = delta_angle(current, target)
            assert -math.pi < d <= math.pi + 1e-12
            # Same angle modulo tau
            residue = (current + d - target) / TAU
            assert abs(residue - round(residue)) < 1e-9

    # -pi maps to +pi
    assert np.isclose(delta_angle(0.0, -math.pi), math.pi)


def test_direction_angle_round_trip():
    rng = np.random.Generator(np.random.PCG64(7))
    for _ in range(1000):
        direction = rng.normal(size=3)
        direction /= np.linalg.norm(direction)
        yaw, pitch = direction_to_angles(direction)
        assert -math.pi <= yaw <= math.pi
        assert -math.pi / 2 <= pitch <= math.pi / 2
        assert np.allclose(angles_to_direction(yaw, pitch), direction, atol=1e-9)


def test_axis_conventions():
    # Yaw 0 looks down -Z
    yaw, pitch = direction_to_angles(np.array([0.0, 0.0, -1.0]))
    assert np.isclose(yaw, 0.0) and np.isclose(pitch, 0.0)

    # Positive yaw turns toward -X
    yaw, _ = direction_to_angles(np.array([-1.0, 0.0, 0.0]))
    assert np.isclose(yaw, math.pi / 2)

    _, pitch = direction_to_angles(np.array([0.0, 1.0, 0.0]))
    assert np.isclose(pitch, math.pi / 2)


def test_forward_ignores_roll():
    for yaw in np.linspace(-3.0, 3.0, 7):
        for pitch in np.linspace(-1.2, 1.2, 5):
            expected = angles_to_direction(yaw, pitch)
            for roll in (-0.8, 0.0, 0.5):
                q = orientation_from_euler(yaw, pitch, roll)
                assert np.isclose(np.linalg.norm(q), 1.0)
                assert np.allclose(forward_from_orientation(q), expected, atol=1e-9)


def test_smooth_damp_finite_for_any_dt():
    for dt in (0.0, 0.001, 1.0, 1000.0):
        value, rate = smooth_damp(0.0, 10.0, 0.0, 0.2, 3.0, dt)
        assert math.isfinite(value) and math.isfinite(rate), f"dt={dt}"

        value, rate = smooth_damp_angle(0.0, 3.0, 0.5, 0.2, 3.0, dt)
        assert math.isfinite(value) and math.isfinite(rate), f"dt={dt}"

    # Zero smooth time is floored, not divided by
    value, rate = smooth_damp(0.0, 10.0, 0.0, 0.0, 3.0, 0.1)
    assert math.isfinite(value) and math.isfinite(rate)


def test_smooth_damp_finite_for_extreme_inputs():
    assert all(map(math.isfinite, smooth_damp(1e308, -1e308, 0.0, 0.2, 1e308, 1.0)))
    assert all(map(math.isfinite, smooth_damp(0.0, 1.0, 1e306, 0.2, 3.0, 1000.0)))

    magnitudes = (-1.7e308, -1e300, 0.0, 1e300, 1.7e308)
    for current in magnitudes:
        for target in magnitudes:
            for rate in magnitudes:
                for dt in (0.0, 0.001, 1.0, 1000.0, 1e308):
                    for max_rate in (3.0, 1e308):
                        value, new_rate = smooth_damp(current, target, rate, 0.2, max_rate, dt)
                        assert math.isfinite(value) and math.isfinite(new_rate), \
                            f"smooth_damp({current}, {target}, {rate}, dt={dt}, max={max_rate})"

                        value, new_rate = smooth_damp_angle(current, target, rate, 0.2, max_rate, dt)
                        assert math.isfinite(value) and math.isfinite(new_rate), \
                            f"smooth_damp_angle({current}, {target}, {rate}, dt={dt}, max={max_rate})"


def test_smooth_damp_unchanged_for_ordinary_inputs():
    # Hand-computed step: change clamped to 0.6, omega 10, dt 1/60
    value, rate = smooth_damp(50.0, 100.0, 0.0, 0.2, 3.0, 1.0 / 60.0)
    x = 10.0 / 60.0
    decay = 1.0 / (1.0 + x + 0.48 * x * x + 0.235 * x * x * x)
    temp = (10.0 * -0.6) / 60.0
    assert np.isclose(value, 50.6 + (-0.6 + temp) * decay)
    assert np.isclose(rate, -10.0 * temp * decay)


def test_smooth_damp_converges_without_overshoot():
    value, rate = 0.0, 0.0
    for _ in range(600):
        value, rate = smooth_damp(value, 10.0, rate, 0.2, 100.0, 1.0 / 60.0)
        assert value <= 10.0
    assert np.isclose(value, 10.0, atol=1e-3)


def test_smooth_damp_dt_zero_keeps_rate_on_snap():
    value, rate = smooth_damp(10.0, 10.0, 3.5, 0.2, 3.0, 0.0)
    assert value == 10.0
    assert rate == 3.5


def test_smooth_damp_angle_turns_short_way():
    # Target just past pi: the short way is negative
    value, _ = smooth_damp_angle(0.0, math.pi + 0.1, 0.0, 0.2, 3.0, 0.1)
    assert value < 0.0

    value, _ = smooth_damp_angle(0.0, math.pi - 0.1, 0.0, 0.2, 3.0, 0.1)
    assert value > 0.0


def test_smooth_damp_angle_converges_short_way():
    value, rate = 0.0, 0.0
    for _ in range(600):
        value, rate = smooth_damp_angle(value, math.pi + 0.1, rate, 0.2, 3.0, 1.0 / 60.0)
        assert value <= 0.0
    assert np.isclose(value, -(math.pi - 0.1), atol=1e-3)
