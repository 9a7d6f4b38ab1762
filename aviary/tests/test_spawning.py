import math

import numpy as np

from aviary.data_types import (
    FlightProperties, GlobalTunables, RuleWeights, SimulationConfig,
    SpawningConfig, Species, World, WorldBounds
)
from aviary.rng import make_seed, random_position_in_box, random_yaw
from aviary.spawning import spawn_flyers, spawn_region


def _crow():
    return Species(
        species_id='house-crow',
        name='House Crow',
        flight=FlightProperties(3.0, 50.0, 100.0, 3.0, 0.7, 0.33),
        weights=RuleWeights(),
        spawn_speed=75.0
    )


def _world(counts, seed=2022, margin=50.0, y_max=250.0):
    return World(
        world_id='test-sky',
        name='Test Sky',
        bounds=WorldBounds(0.0, 600.0, 0.0, y_max, 0.0, 600.0, 50.0, margin),
        simulation=SimulationConfig(seed=seed),
        tunables=GlobalTunables(),
        spawning=[SpawningConfig(species_id=sid, count=n) for sid, n in counts]
    )


def test_make_seed_is_stable():
    assert make_seed(2022, 'house-crow', 0) == make_seed(2022, 'house-crow', 0)
    assert make_seed(2022, 'house-crow', 0) != make_seed(2022, 'house-crow', 1)
    assert make_seed(2022, 'house-crow', 0) != make_seed(2023, 'house-crow', 0)
    assert 0 <= make_seed('anything') < 2 ** 64


def test_random_helpers_in_range():
    low = np.array([100.0, 100.0, 100.0])
    high = np.array([500.0, 150.0, 500.0])
    for i in range(50):
        p = random_position_in_box(make_seed(i), low, high)
        assert np.all(p >= low) and np.all(p <= high)
        yaw = random_yaw(make_seed(i, 'heading'))
        assert -math.pi <= yaw < math.pi


def test_spawn_region_inset():
    low, high = spawn_region(_world([]))
    assert np.allclose(low, [100.0, 100.0, 100.0])
    assert np.allclose(high, [500.0, 150.0, 500.0])

    # Too thin for the inset: collapses to the center on that axis
    low, high = spawn_region(_world([], y_max=150.0))
    assert low[1] == high[1] == 75.0


def test_spawn_flyers_deterministic():
    registry = {'house-crow': _crow()}
    first = spawn_flyers(_world([('house-crow', 12)]), registry)
    second = spawn_flyers(_world([('house-crow', 12)]), registry)

    assert [f.instance_id for f in first] == [f"house-crow-{i:04d}" for i in range(12)]
    for a, b in zip(first, second):
        assert np.array_equal(a.position, b.position)
        assert a.yaw == b.yaw

    other_seed = spawn_flyers(_world([('house-crow', 12)], seed=1), registry)
    assert not np.array_equal(first[0].position, other_seed[0].position)


def test_spawned_state():
    flyers = spawn_flyers(_world([('house-crow', 5)]), {'house-crow': _crow()})
    for flyer in flyers:
        assert flyer.pitch == 0.0
        assert flyer.speed == 75.0
        assert np.allclose(flyer.velocity, flyer.forward * 75.0)
        assert np.allclose(flyer.goal_velocity, flyer.velocity)

    # Per-flyer copies, not shared with the species
    flyers[0].weights.separation = 9.0
    assert flyers[1].weights.separation == 0.10


def test_spawn_limit_and_filter(capsys):
    registry = {'house-crow': _crow()}
    world = _world([('house-crow', 10), ('magpie', 5)])

    assert len(spawn_flyers(world, registry, limit=4)) == 4
    assert len(spawn_flyers(world, registry, only_species=['magpie'], verbose=False)) == 0

    flyers = spawn_flyers(world, registry)
    assert len(flyers) == 10
    assert "[WARN] Species magpie" in capsys.readouterr().out
