"""
Aviary Flocking Simulation

A deterministic, headless flock simulator. Flyers steer toward an emergent
goal velocity built from boids rules, soft bounds and a leveling bias.

Architecture: Aviary owns the numeric flight state. Renderers and behavior
layers are consumers.
"""

__version__ = "0.1.0"
