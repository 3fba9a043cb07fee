import pytest

from cellife.grid import (
    GRID_HEIGHT,
    GRID_WIDTH,
    NUM_COLOURS,
    CellColour,
    Grid,
    grid_index,
    save_grid,
)
from cellife.particle import (
    Particle,
    SavedParticles,
    convert_grid_to_particles,
    force_between_particles,
    format_particles,
    load_particles,
    particle_in_bounds,
    perturb,
    save_particles,
    shadow_point,
    update,
)
from cellife.vector2d import Vec2


def identity():
    return [[float(x == y) for y in range(NUM_COLOURS)] for x in range(NUM_COLOURS)]


class FixedRandom:
    def __init__(self, values):
        self._values = iter(values)

    def randint(self, a, b):
        value = next(self._values)
        assert a <= value <= b
        return value


@pytest.mark.parametrize(
    "pos, expected",
    [
        (Vec2(0.0, 0.0), True),
        (Vec2(99.5, 99.5), True),
        (Vec2(float(GRID_WIDTH), 0.0), False),
        (Vec2(-0.5, 10.0), False),
        (Vec2(10.0, float(GRID_HEIGHT)), False),
    ],
)
def test_particle_in_bounds(pos, expected):
    assert particle_in_bounds(pos) is expected


def test_shadow_point_wraps_across_left_edge():
    assert shadow_point(Vec2(1.0, 50.0), Vec2(99.0, 50.0)) == Vec2(-1.0, 50.0)


def test_shadow_point_wraps_diagonally():
    result = shadow_point(Vec2(1.0, 1.0), Vec2(99.0, 99.0))
    assert result == Vec2(99.0 - GRID_WIDTH, 99.0 - GRID_HEIGHT)


def test_repulsion_pushes_apart():
    a = Particle(CellColour.RED, Vec2(10.0, 10.0))
    b = Particle(CellColour.RED, Vec2(11.0, 10.0))
    force = force_between_particles(a, b, identity(), 2, 16)
    assert force == Vec2(-0.5, 0.0)


def test_force_is_antisymmetric_for_same_colour():
    a = Particle(CellColour.BLUE, Vec2(10.0, 10.0))
    b = Particle(CellColour.BLUE, Vec2(13.0, 14.0))
    f_ab = force_between_particles(a, b, identity(), 2, 16)
    f_ba = force_between_particles(b, a, identity(), 2, 16)
    assert f_ab.x == pytest.approx(-f_ba.x)
    assert f_ab.y == pytest.approx(-f_ba.y)


def test_attraction_points_towards_other():
    a = Particle(CellColour.RED, Vec2(10.0, 10.0))
    b = Particle(CellColour.RED, Vec2(14.0, 10.0))
    force = force_between_particles(a, b, identity(), 2, 16)
    assert force.x > 0
    assert force.y == 0


def test_force_zero_beyond_max_distance():
    a = Particle(CellColour.RED, Vec2(10.0, 10.0))
    b = Particle(CellColour.RED, Vec2(40.0, 10.0))
    assert force_between_particles(a, b, identity(), 2, 16) == Vec2(0.0, 0.0)


def test_force_uses_wrapped_neighbour():
    a = Particle(CellColour.RED, Vec2(1.0, 50.0))
    b = Particle(CellColour.RED, Vec2(99.0, 50.0))
    force = force_between_particles(a, b, identity(), 3, 16)
    # The wrapped copy sits just to the left, so repulsion pushes right.
    assert force.x > 0


def test_coincident_particles_exert_no_force():
    a = Particle(CellColour.RED, Vec2(5.0, 5.0))
    assert force_between_particles(a, a, identity(), 2, 16) == Vec2(0.0, 0.0)


def test_update_single_particle_stays_put():
    p = Particle(CellColour.GREEN, Vec2(20.0, 30.0))
    assert update([p], identity(), 0.1, 16, 2) == [p]


def test_update_repelling_particles_move_apart_and_keep_colours():
    particles = [
        Particle(CellColour.RED, Vec2(50.0, 50.0)),
        Particle(CellColour.BLUE, Vec2(51.0, 50.0)),
    ]
    moved = update(particles, identity(), 1.0, 16, 2)
    assert [p.colour for p in moved] == [CellColour.RED, CellColour.BLUE]
    assert moved[0].position.distance(moved[1].position) > 1.0
    assert particles[0].position == Vec2(50.0, 50.0)


def test_update_wraps_positions_into_bounds():
    particles = [
        Particle(CellColour.RED, Vec2(0.2, 50.0)),
        Particle(CellColour.RED, Vec2(1.2, 50.0)),
    ]
    moved = update(particles, identity(), 1.0, 16, 2)
    assert all(particle_in_bounds(p.position) for p in moved)
    assert moved[0].position.x > 90


def test_format_particles():
    particles = [
        Particle(CellColour.BLUE, Vec2(1.5, 2.0)),
        Particle(CellColour.WHITE, Vec2(0.25, 99.0)),
    ]
    assert format_particles(particles) == (
        "x:1.5 y:2 colour:2\n" "x:0.25 y:99 colour:8\n"
    )


def test_format_particles_empty():
    assert format_particles([]) == ""


def test_perturb_applies_random_offsets_without_wrapping():
    particles = [
        Particle(CellColour.RED, Vec2(0.0, 0.0)),
        Particle(CellColour.PINK, Vec2(5.5, 7.5)),
    ]
    result = perturb(particles, FixedRandom([-1, -1, 1, 0]))
    assert result == [
        Particle(CellColour.RED, Vec2(-1.0, -1.0)),
        Particle(CellColour.PINK, Vec2(6.5, 7.5)),
    ]


def test_perturb_moves_at_most_one_per_axis():
    particles = [Particle(CellColour.RED, Vec2(float(i), float(i))) for i in range(20)]
    result = perturb(particles)
    for before, after in zip(particles, result):
        assert abs(after.position.x - before.position.x) <= 1
        assert abs(after.position.y - before.position.y) <= 1
        assert after.colour == before.colour


def test_save_and_load_round_trip(tmp_path):
    particles = [
        Particle(CellColour.RED, Vec2(1.5, 2.25)),
        Particle(CellColour.ORANGE, Vec2(98.0, 0.5)),
    ]
    attraction = identity()
    attraction[0][1] = -3.0
    path = save_particles(particles, 12, 3, attraction, "demo", tmp_path)
    assert path == tmp_path / "demo.particle"
    assert path.stat().st_size == 8 + 4 * NUM_COLOURS * NUM_COLOURS + 8 + 12 * 2

    loaded = load_particles("demo.particle", tmp_path)
    assert loaded == SavedParticles(particles, 12, 3, attraction)


def test_load_without_suffix_prefers_particle(tmp_path):
    particles = [Particle(CellColour.GREEN, Vec2(3.0, 4.0))]
    save_particles(particles, 10, 2, identity(), "both", tmp_path)
    grid = Grid()
    grid.colours[0] = CellColour.RED
    save_grid(grid, 20, 5, identity(), "both", tmp_path)

    loaded = load_particles("both", tmp_path)
    assert loaded.particles == particles
    assert loaded.neighbour_range == 10


def test_load_without_suffix_falls_back_to_grid(tmp_path):
    grid = Grid()
    grid.colours[grid_index(Vec2(3, 7))] = CellColour.YELLOW
    save_grid(grid, 20, 5, identity(), "cells", tmp_path)

    loaded = load_particles("cells", tmp_path)
    assert loaded.particles == [Particle(CellColour.YELLOW, Vec2(3.0, 7.0))]
    assert (loaded.neighbour_range, loaded.repulsion_range) == (20, 5)


def test_convert_grid_to_particles(tmp_path):
    grid = Grid()
    grid.colours[grid_index(Vec2(1, 0))] = CellColour.BLUE
    grid.colours[grid_index(Vec2(0, 2))] = CellColour.RED
    attraction = identity()
    save_grid(grid, 16, 2, attraction, "g", tmp_path)

    saved = convert_grid_to_particles("g", tmp_path)
    assert saved.particles == [
        Particle(CellColour.BLUE, Vec2(1.0, 0.0)),
        Particle(CellColour.RED, Vec2(0.0, 2.0)),
    ]
    assert saved.colour_attraction == attraction


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_particles("absent", tmp_path)


def test_load_truncated_file_raises(tmp_path):
    particles = [Particle(CellColour.RED, Vec2(1.0, 1.0))]
    path = save_particles(particles, 16, 2, identity(), "cut", tmp_path)
    path.write_bytes(path.read_bytes()[:-4])
    with pytest.raises(ValueError):
        load_particles("cut.particle", tmp_path)


def test_save_rejects_bad_attraction_matrix(tmp_path):
    with pytest.raises(ValueError):
        save_particles([], 16, 2, [[1.0]], "bad", tmp_path)