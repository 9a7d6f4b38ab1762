import numpy as np

from aviary.boids import alignment, cohesion, evaluate_boids, separation
from aviary.data_types import FlightProperties, RuleWeights
from aviary.flyer import Flyer


def _make_flyer(instance_id, position, velocity=(0.0, 0.0, -75.0)):
    return Flyer(
        instance_id=instance_id,
        species_id='test',
        position=np.array(position, dtype=np.float64),
        props=FlightProperties(3.0, 50.0, 100.0, 3.0, 0.7),
        weights=RuleWeights(),
        speed=75.0,
        velocity=np.array(velocity, dtype=np.float64)
    )


def _pair(b_position):
    a = _make_flyer('a', [0.0, 0.0, 0.0], velocity=[0.0, 0.0, -60.0])
    b = _make_flyer('b', b_position, velocity=[-60.0, 0.0, 0.0])
    a.observed = ['a', 'b']
    b.observed = ['a', 'b']
    return a, b, {'a': a, 'b': b}


def test_two_flyers_close():
    a, b, lookup = _pair([5.0, 0.0, 0.0])

    sep, ali, coh = evaluate_boids(a, lookup)
    assert np.allclose(sep, [-5.0, 0.0, 0.0])
    assert np.allclose(coh, [5.0, 0.0, 0.0])
    assert np.allclose(ali, [-60.0, 0.0, 60.0])

    # Symmetric for b
    assert np.allclose(separation(b, lookup), [5.0, 0.0, 0.0])
    assert np.allclose(cohesion(b, lookup), [-5.0, 0.0, 0.0])


def test_alone_gives_zero():
    a = _make_flyer('a', [10.0, 20.0, 30.0])
    a.observed = ['a']
    lookup = {'a': a}

    for vec in evaluate_boids(a, lookup):
        assert np.all(vec == 0.0)


def test_separation_cutoff_is_strict():
    # Exactly at the radius: ignored by separation, still counted by cohesion
    a, _, lookup = _pair([15.0, 0.0, 0.0])
    assert np.all(separation(a, lookup) == 0.0)
    assert np.allclose(cohesion(a, lookup), [15.0, 0.0, 0.0])

    a, _, lookup = _pair([14.99, 0.0, 0.0])
    assert np.allclose(separation(a, lookup), [-14.99, 0.0, 0.0])


def test_separation_sums_all_close_neighbors():
    a = _make_flyer('a', [0.0, 0.0, 0.0])
    b = _make_flyer('b', [3.0, 0.0, 0.0])
    c = _make_flyer('c', [0.0, 4.0, 0.0])
    d = _make_flyer('d', [40.0, 0.0, 0.0])
    a.observed = ['a', 'b', 'c', 'd']
    lookup = {f.instance_id: f for f in (a, b, c, d)}

    assert np.allclose(separation(a, lookup), [-3.0, -4.0, 0.0])
    assert np.allclose(cohesion(a, lookup), [43.0 / 3.0, 4.0 / 3.0, 0.0])


def test_stale_ids_skipped():
    a, b, lookup = _pair([5.0, 0.0, 0.0])
    a.observed = ['a', 'ghost', 'b', 'removed-0001']

    sep, ali, coh = evaluate_boids(a, lookup)
    assert np.allclose(sep, [-5.0, 0.0, 0.0])
    assert np.allclose(coh, [5.0, 0.0, 0.0])
    assert np.allclose(ali, b.velocity - a.velocity)


def test_only_stale_ids_gives_zero():
    a = _make_flyer('a', [0.0, 0.0, 0.0])
    a.observed = ['a', 'gone']
    for vec in evaluate_boids(a, {'a': a}):
        assert np.all(vec == 0.0)


def test_alignment_uses_published_velocity():
    a, b, lookup = _pair([5.0, 0.0, 0.0])
    # Changing speed without republishing must not affect alignment
    b.speed = 99.0
    assert np.allclose(alignment(a, lookup), [-60.0, 0.0, 60.0])
