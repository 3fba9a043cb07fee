"""Free-moving particles driven by the same colour attraction rules as the grid."""

from __future__ import annotations

import random
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Protocol, Sequence

from cellife.grid import (
    DEFAULT_SAVE_DIR,
    GRID_HEIGHT,
    GRID_SUFFIX,
    GRID_WIDTH,
    NUM_COLOURS,
    CellColour,
    grid_xy,
    load_grid,
    shadow_cell,
)
from cellife.mathutils import wrap_mod
from cellife.vector2d import Vec2

PARTICLE_RADIUS = 5
PARTICLE_SUFFIX = ".particle"

_HEADER = struct.Struct(f"<ii{NUM_COLOURS * NUM_COLOURS}f")
_COUNT = struct.Struct("<Q")
_PARTICLE = struct.Struct("<iff")


@dataclass(frozen=True)
class Particle:
    """A coloured particle at a position measured in grid cells."""

    colour: CellColour
    position: Vec2


@dataclass
class SavedParticles:
    """Particles together with the simulation settings stored alongside them."""

    particles: list[Particle]
    neighbour_range: int
    repulsion_range: int
    colour_attraction: list[list[float]]


class _RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


def particle_in_bounds(pos: Vec2) -> bool:
    """Whether a position lies inside the simulation area."""
    return 0 <= pos.x < GRID_WIDTH and 0 <= pos.y < GRID_HEIGHT


def shadow_point(a: Vec2, b: Vec2) -> Vec2:
    """The copy of ``b`` on a neighbouring tiling of the area closest to ``a``."""
    return shadow_cell(a, b)


def force_between_particles(
    particle_a: Particle,
    particle_b: Particle,
    colour_attraction: Sequence[Sequence[float]],
    repulsion_distance: float,
    max_distance: float,
) -> Vec2:
    """Force that ``particle_b`` exerts on ``particle_a``, allowing wrapping.

    Linear repulsion up to ``repulsion_distance``, then a linear rise towards
    the colour coefficient and a linear fall back to zero at ``max_distance``.
    """
    coeff = colour_attraction[particle_a.colour - 1][particle_b.colour - 1]
    a_pos = particle_a.position
    b_pos = particle_b.position
    distance = a_pos.distance(b_pos)

    b_prime = shadow_point(a_pos, b_pos)
    wrap_distance = a_pos.distance(b_prime)
    if wrap_distance < distance:
        distance = wrap_distance
        b_pos = b_prime

    # Coincident particles have no direction to push along.
    if distance == 0:
        return Vec2(0.0, 0.0)

    magnitude = 0.0
    if distance < repulsion_distance:
        magnitude = distance / repulsion_distance - 1
    elif distance < (max_distance - repulsion_distance) / 2:
        magnitude = (2 * coeff) / (max_distance - repulsion_distance) * (
            distance - repulsion_distance
        )
    elif distance < max_distance:
        magnitude = (2 * coeff) / (repulsion_distance - max_distance) * (
            distance - max_distance
        )

    return Vec2(
        magnitude * ((b_pos.x - a_pos.x) / distance),
        magnitude * ((b_pos.y - a_pos.y) / distance),
    )


def update(
    particles: Sequence[Particle],
    colour_attraction: Sequence[Sequence[float]],
    dt: float,
    neighbour_range: float,
    repulsion_range: float,
) -> list[Particle]:
    """Move every particle by its net force over ``dt`` and return the new list."""
    moved = []
    for i, particle in enumerate(particles):
        fx = fy = 0.0
        for j, other in enumerate(particles):
            if j == i:
                continue
            force = force_between_particles(
                particle, other, colour_attraction, repulsion_range, neighbour_range
            )
            fx += force.x
            fy += force.y

        new_pos = particle.position + Vec2(fx * dt, fy * dt)
        if not particle_in_bounds(new_pos):
            new_pos = Vec2(
                wrap_mod(new_pos.x, GRID_WIDTH), wrap_mod(new_pos.y, GRID_HEIGHT)
            )
        moved.append(Particle(particle.colour, new_pos))
    return moved


def format_particles(particles: Iterable[Particle]) -> str:
    """One line per particle giving its position and colour number."""
    return "".join(
        f"x:{p.position.x:g} y:{p.position.y:g} colour:{int(p.colour)}\n"
        for p in particles
    )


def perturb(
    particles: Iterable[Particle], rng: _RandomSource | None = None
) -> list[Particle]:
    """Nudge every particle by -1, 0 or 1 in each axis, without wrapping."""
    rng = rng if rng is not None else random.Random()
    nudged = []
    for p in particles:
        dx = rng.randint(-1, 1)
        dy = rng.randint(-1, 1)
        nudged.append(Particle(p.colour, p.position + Vec2(dx, dy)))
    return nudged


def _attraction_values(colour_attraction: Sequence[Sequence[float]]) -> list[float]:
    rows = list(colour_attraction)
    if len(rows) != NUM_COLOURS or any(len(row) != NUM_COLOURS for row in rows):
        raise ValueError(
            f"colour attraction must be a {NUM_COLOURS}x{NUM_COLOURS} matrix"
        )
    return [float(value) for row in rows for value in row]


def save_particles(
    particles: Sequence[Particle],
    neighbour_range: int,
    repulsion_range: int,
    colour_attraction: Sequence[Sequence[float]],
    name: str,
    directory: str | Path = DEFAULT_SAVE_DIR,
) -> Path:
    """Write particles and their settings to a binary ``.particle`` file."""
    values = _attraction_values(colour_attraction)
    chunks = [
        _HEADER.pack(neighbour_range, repulsion_range, *values),
        _COUNT.pack(len(particles)),
    ]
    chunks.extend(
        _PARTICLE.pack(int(p.colour), float(p.position.x), float(p.position.y))
        for p in particles
    )
    if not name.endswith(PARTICLE_SUFFIX):
        name += PARTICLE_SUFFIX
    path = Path(directory) / name
    with open(path, "wb") as stream:
        stream.write(b"".join(chunks))
    return path


def load_particles(
    name: str, directory: str | Path = DEFAULT_SAVE_DIR
) -> SavedParticles:
    """Read particles from a ``.particle`` file, or convert a ``.grid`` file.

    A name with neither suffix is resolved to an existing ``.particle`` file
    first, then to an existing ``.grid`` file.
    """
    folder = Path(directory)
    if not name.endswith(PARTICLE_SUFFIX) and not name.endswith(GRID_SUFFIX):
        if (folder / (name + PARTICLE_SUFFIX)).exists():
            name += PARTICLE_SUFFIX
        elif (folder / (name + GRID_SUFFIX)).exists():
            name += GRID_SUFFIX

    if name.endswith(GRID_SUFFIX):
        return convert_grid_to_particles(name, directory)

    path = folder / name
    with open(path, "rb") as stream:
        data = stream.read()

    fixed = _HEADER.size + _COUNT.size
    if len(data) < fixed:
        raise ValueError(f"{path} is truncated")
    neighbour, repulsion, *values = _HEADER.unpack_from(data, 0)
    (count,) = _COUNT.unpack_from(data, _HEADER.size)
    if len(data) < fixed + count * _PARTICLE.size:
        raise ValueError(f"{path} is truncated")

    particles = [
        Particle(CellColour(colour), Vec2(x, y))
        for colour, x, y in _PARTICLE.iter_unpack(
            data[fixed : fixed + count * _PARTICLE.size]
        )
    ]
    attraction = [
        list(values[row * NUM_COLOURS : (row + 1) * NUM_COLOURS])
        for row in range(NUM_COLOURS)
    ]
    return SavedParticles(particles, neighbour, repulsion, attraction)


def convert_grid_to_particles(
    name: str, directory: str | Path = DEFAULT_SAVE_DIR
) -> SavedParticles:
    """Load a saved grid and turn each non-blank cell into a particle."""
    saved = load_grid(name, directory)
    particles = [
        Particle(colour, grid_xy(index).to_float())
        for index, colour in enumerate(saved.grid.colours)
        if colour != CellColour.BLANK
    ]
    return SavedParticles(
        particles,
        saved.neighbour_range,
        saved.repulsion_range,
        saved.colour_attraction,
    )