"""
Data types mirroring YAML schema structures.

These dataclasses are populated by loader.py from YAML files.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .constants import SPAWN_SPEED_DEFAULT, STEERING_SMOOTH_TIME, TUNABLE_DEFAULTS


# ============================================================================
# Species Definition
# ============================================================================

@dataclass
class FlightProperties:
    """Flight limits of a species (fixed per flyer after spawn)"""
    accel_max: float  # Max speed change rate (m/s^2)
    spd_min: float  # m/s
    spd_max: float  # m/s
    yaw_rate_max: float  # rad/s
    pitch_rate_max: float  # rad/s
    roll_from_yaw_rate: float = 0.0  # Roll (rad) per unit yaw rate (rad/s)


@dataclass
class RuleWeights:
    """Per-flyer goal weights, set at spawn"""
    separation: float = 0.10
    alignment: float = 0.20
    cohesion: float = 0.02
    keep_level: float = 0.1


@dataclass
class Species:
    """Complete species definition"""
    species_id: str
    name: str
    flight: FlightProperties
    weights: RuleWeights
    spawn_speed: float = SPAWN_SPEED_DEFAULT
    description: Optional[str] = None


# ============================================================================
# World Definition
# ============================================================================

@dataclass(frozen=True)
class WorldBounds:
    """
    Axis-aligned world box plus spatial hash sizing.

    Grid dimensions are derived once: cells_x = floor(x_size / cell_size),
    cells_z = floor(z_size / cell_size), never below 1.
    """
    x_min: float
    x_max: float
    y_min: float
    y_max: float
    z_min: float
    z_max: float
    cell_size: float
    margin: float

    @property
    def x_size(self) -> float:
        return self.x_max - self.x_min

    @property
    def y_size(self) -> float:
        return self.y_max - self.y_min

    @property
    def z_size(self) -> float:
        return self.z_max - self.z_min

    @property
    def cells_x(self) -> int:
        return _cell_count(self.x_size, self.cell_size)

    @property
    def cells_z(self) -> int:
        return _cell_count(self.z_size, self.cell_size)

    def axis_limits(self):
        """[(min, max)] for x, y, z"""
        return [
            (self.x_min, self.x_max),
            (self.y_min, self.y_max),
            (self.z_min, self.z_max),
        ]


def _cell_count(extent: float, cell_size: float) -> int:
    if cell_size <= 0:
        return 1
    return max(1, int(extent // cell_size))


@dataclass(frozen=True)
class GlobalTunables:
    """
    Flock-wide goal multipliers, one per goal category.

    Frozen: the simulation swaps in a new instance between ticks and each
    tick reads the instance it captured at tick start.
    """
    separation: float = TUNABLE_DEFAULTS['separation']
    alignment: float = TUNABLE_DEFAULTS['alignment']
    cohesion: float = TUNABLE_DEFAULTS['cohesion']
    keep_in_bounds: float = TUNABLE_DEFAULTS['keep_in_bounds']
    keep_level: float = TUNABLE_DEFAULTS['keep_level']


@dataclass
class SpawningConfig:
    """Species spawning configuration"""
    species_id: str
    count: int


@dataclass
class SimulationConfig:
    """Simulation global defaults"""
    tick_delta_seconds: float = 1.0 / 60.0
    smooth_time_seconds: float = STEERING_SMOOTH_TIME
    seed: int = 0


@dataclass
class World:
    """Complete world definition"""
    world_id: str
    name: str
    bounds: WorldBounds
    simulation: SimulationConfig
    tunables: GlobalTunables
    spawning: List[SpawningConfig] = field(default_factory=list)
    description: Optional[str] = None
