"""
Central configuration constants for aviary simulation.

Defines default values, thresholds, and configuration parameters
used across multiple modules.
"""

import numpy as np

# ============================================================================
# World Axes
# ============================================================================

# +Y is up, flyers look down -Z when yaw = pitch = roll = 0
WORLD_UP = np.array([0.0, 1.0, 0.0], dtype=np.float64)
FORWARD_AXIS = np.array([0.0, 0.0, -1.0], dtype=np.float64)

# Euler order for orientation quaternions (intrinsic yaw, pitch, roll)
EULER_ORDER = "YXZ"


# ============================================================================
# Boids Configuration
# ============================================================================

# Separation only reacts to neighbors closer than this (hard cutoff, meters)
PERCEPTION_RADIUS = 15.0


# ============================================================================
# Steering Configuration
# ============================================================================

# Smoothing time for speed, pitch and yaw (seconds)
STEERING_SMOOTH_TIME = 0.2

# Lower bound for smoothing time (avoids omega = 2 / 0)
SMOOTH_TIME_FLOOR = 1e-5


# ============================================================================
# Global Tunables Defaults
# ============================================================================

TUNABLE_DEFAULTS = {
    'separation': 2.0,
    'alignment': 2.0,
    'cohesion': 2.0,
    'keep_in_bounds': 0.5,
    'keep_level': 0.5,
}


# ============================================================================
# Spawning Configuration
# ============================================================================

# Extra inset (beyond bounds margin) for spawn positions, meters
SPAWN_INSET_EXTRA = 50.0

# Initial speed when a species omits spawn_speed (m/s)
SPAWN_SPEED_DEFAULT = 75.0


# ============================================================================
# Performance Configuration
# ============================================================================

# Tick timing window for rolling average
TICK_TIME_WINDOW = 100  # Number of ticks to average

# Default tick summary interval (print every N ticks)
TICK_SUMMARY_INTERVAL = 100  # Print summary every 100 ticks
