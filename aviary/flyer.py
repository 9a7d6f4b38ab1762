"""
Flyer runtime representation.

Flyers are spawned from species definitions and exist in the simulation.
Each flyer has a unique instance_id, position, orientation, smoothed flight
state, and a persistent goal velocity.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List

from .data_types import FlightProperties, RuleWeights
from .flight_math import angles_to_direction, forward_from_orientation, orientation_from_euler


def _zero3() -> np.ndarray:
    return np.zeros(3, dtype=np.float64)


@dataclass
class RuleOutputs:
    """
    Goal vectors produced for one flyer during one tick.

    Replaced every tick, never accumulated. keep_in_bounds_weight is a
    single binary flag (1.0 if any axis triggered, else 0.0).
    """
    separation: np.ndarray = field(default_factory=_zero3)
    alignment: np.ndarray = field(default_factory=_zero3)
    cohesion: np.ndarray = field(default_factory=_zero3)
    keep_in_bounds: np.ndarray = field(default_factory=_zero3)
    keep_in_bounds_weight: float = 0.0
    keep_level: np.ndarray = field(default_factory=_zero3)


@dataclass
class GoalComponents:
    """The goal velocity reduced to steering targets"""
    speed: float = 0.0
    yaw: float = 0.0
    pitch: float = 0.0


@dataclass
class Flyer:
    """
    Runtime flyer in simulation.

    Attributes:
        instance_id: Unique identifier (format: "{species_id}-{index:04d}")
        species_id: Species definition ID (e.g., "house-crow")
        position: 3D position [x, y, z] in meters (y = altitude)
        props: Flight limits from species
        weights: Per-flyer goal weights from species
        yaw: Heading about +Y (radians, 0 = looking down -Z)
        pitch: Elevation (radians, positive = nose up)
        roll: Bank angle, derived from yaw_rate every tick
        speed: Current linear speed (m/s)
        acceleration: Current rate of change of speed (m/s^2)
        yaw_rate: Current yaw rate (rad/s)
        pitch_rate: Current pitch rate (rad/s)
        goal_velocity: Persistent desired velocity, accumulates across ticks
        velocity: Effective velocity republished at the end of each tick
        orientation: Quaternion [x, y, z, w] built from yaw/pitch/roll
        goal: Steering targets reduced from goal_velocity this tick
        rules: Goal vectors evaluated this tick
        cell: Spatial hash cell assigned this tick
        observed: Candidate neighbor ids gathered this tick (may include self)
    """
    instance_id: str
    species_id: str
    position: np.ndarray
    props: FlightProperties
    weights: RuleWeights
    yaw: float = 0.0
    pitch: float = 0.0
    roll: float = 0.0
    speed: float = 0.0
    acceleration: float = 0.0
    yaw_rate: float = 0.0
    pitch_rate: float = 0.0
    goal_velocity: np.ndarray = None
    velocity: np.ndarray = None
    orientation: np.ndarray = None
    goal: GoalComponents = field(default_factory=GoalComponents)
    rules: RuleOutputs = field(default_factory=RuleOutputs)
    cell: int = 0
    observed: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Ensure vectors are float64 arrays, derive missing state from heading"""
        self.position = np.array(self.position, dtype=np.float64)

        if self.orientation is None:
            self.orientation = orientation_from_euler(self.yaw, self.pitch, self.roll)
        else:
            self.orientation = np.array(self.orientation, dtype=np.float64)

        heading = angles_to_direction(self.yaw, self.pitch)
        if self.velocity is None:
            self.velocity = heading * self.speed
        else:
            self.velocity = np.array(self.velocity, dtype=np.float64)

        if self.goal_velocity is None:
            self.goal_velocity = heading * self.speed
        else:
            self.goal_velocity = np.array(self.goal_velocity, dtype=np.float64)

    @property
    def forward(self) -> np.ndarray:
        """Unit forward vector of the current orientation"""
        return forward_from_orientation(self.orientation)

    @property
    def speed_deficit(self) -> float:
        """
        How much faster the flyer wants to go than it currently does.

        |goal_velocity| - speed; the signal a behavior layer uses to decide
        when to flap.
        """
        return float(np.linalg.norm(self.goal_velocity)) - self.speed

    def to_dict(self) -> dict:
        """
        Serialize flyer state to JSON-compatible dict.

        Returns:
            Dict with position, orientation, velocities and flight state
        """
        return {
            'instance_id': self.instance_id,
            'species_id': self.species_id,
            'position': self.position.tolist(),
            'orientation': self.orientation.tolist(),
            'velocity': self.velocity.tolist(),
            'goal_velocity': self.goal_velocity.tolist(),
            'speed': self.speed,
            'speed_deficit': self.speed_deficit,
            'yaw': self.yaw,
            'pitch': self.pitch,
            'roll': self.roll,
            'cell': self.cell
        }
