"""Cellular automaton in which coloured cells move under particle-life forces."""

from __future__ import annotations

import random
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Protocol, Sequence

from cellife.mathutils import round_away, wrap_mod
from cellife.vector2d import Vec2

GRID_WIDTH = 100
GRID_HEIGHT = 100
CELL_COUNT = GRID_WIDTH * GRID_HEIGHT
NUM_COLOURS = 8
UPDATE_THRESHOLD = 0.1
GRID_SUFFIX = ".grid"
DEFAULT_SAVE_DIR = "saved_states"

_HEADER = struct.Struct(f"<ii{NUM_COLOURS * NUM_COLOURS}f")
_COLOURS = struct.Struct(f"<{CELL_COUNT}i")
_DIRECTIONS = struct.Struct(f"<{CELL_COUNT * 2}i")
_FILE_SIZE = _HEADER.size + _COLOURS.size + _DIRECTIONS.size


class CellColour(IntEnum):
    """Colour of a grid cell; BLANK marks an empty cell."""

    BLANK = 0
    RED = 1
    BLUE = 2
    GREEN = 3
    PINK = 4
    YELLOW = 5
    BROWN = 6
    ORANGE = 7
    WHITE = 8


_RGB = {
    CellColour.BLANK: (0, 0, 0),
    CellColour.RED: (230, 41, 55),
    CellColour.BLUE: (0, 121, 241),
    CellColour.GREEN: (0, 228, 48),
    CellColour.PINK: (255, 109, 194),
    CellColour.YELLOW: (253, 249, 0),
    CellColour.BROWN: (127, 106, 79),
    CellColour.ORANGE: (255, 161, 0),
    CellColour.WHITE: (255, 255, 255),
}


def _blank_colours() -> list[CellColour]:
    return [CellColour.BLANK] * CELL_COUNT


def _zero_directions() -> list[Vec2]:
    return [Vec2(0, 0)] * CELL_COUNT


@dataclass
class Grid:
    """Cell colours and movement directions, stored row by row."""

    colours: list[CellColour] = field(default_factory=_blank_colours)
    directions: list[Vec2] = field(default_factory=_zero_directions)

    def __post_init__(self) -> None:
        if len(self.colours) != CELL_COUNT or len(self.directions) != CELL_COUNT:
            raise ValueError(f"a grid holds exactly {CELL_COUNT} cells")


@dataclass
class SavedGrid:
    """A grid together with the simulation settings stored alongside it."""

    grid: Grid
    neighbour_range: int
    repulsion_range: int
    colour_attraction: list[list[float]]


class _RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


def colour_rgb(colour: int) -> tuple[int, int, int]:
    """Display colour of a cell as an RGB triple."""
    try:
        return _RGB[CellColour(colour)]
    except ValueError:
        raise ValueError(f"{colour!r} has no colour") from None


def grid_index(pos: Vec2) -> int:
    """Flat index of a cell position; the position is not bounds-checked."""
    return pos.y * GRID_WIDTH + pos.x


def grid_xy(index: int) -> Vec2:
    """Cell position of a flat index."""
    y, x = divmod(index, GRID_WIDTH)
    return Vec2(x, y)


def in_bounds(pos: Vec2) -> bool:
    """Whether a position lies on the grid."""
    return 0 <= pos.x < GRID_WIDTH and 0 <= pos.y < GRID_HEIGHT


def grid_mod(pos: Vec2) -> Vec2:
    """Wrap a position onto the grid, treating it as a torus."""
    return Vec2(wrap_mod(pos.x, GRID_WIDTH), wrap_mod(pos.y, GRID_HEIGHT))


def _shadows(b: Vec2) -> list[Vec2]:
    return [
        Vec2(b.x - GRID_WIDTH, b.y),
        Vec2(b.x + GRID_WIDTH, b.y),
        Vec2(b.x, b.y - GRID_HEIGHT),
        Vec2(b.x, b.y + GRID_HEIGHT),
        Vec2(b.x - GRID_WIDTH, b.y - GRID_HEIGHT),
        Vec2(b.x - GRID_WIDTH, b.y + GRID_HEIGHT),
        Vec2(b.x + GRID_WIDTH, b.y - GRID_HEIGHT),
        Vec2(b.x + GRID_WIDTH, b.y + GRID_HEIGHT),
    ]


def shadow_cell(a: Vec2, b: Vec2) -> Vec2:
    """The copy of ``b`` on a neighbouring tiling of the grid closest to ``a``."""
    return min(_shadows(b), key=a.distance)


def shortest_distance(a: Vec2, b: Vec2) -> float:
    """Distance between two cells, allowing wrapping across the grid edges."""
    return min(a.distance(candidate) for candidate in [b, *_shadows(b)])


def force_between_cells(
    cell_a: Vec2,
    cell_b: Vec2,
    b_colour: CellColour,
    colour_attraction: Sequence[Sequence[float]],
    original: Grid,
    repulsion_distance: float,
    max_distance: float,
) -> Vec2:
    """Force that cell ``b`` exerts on cell ``a``.

    Linear repulsion up to ``repulsion_distance``, then a linear rise towards
    the colour coefficient and a linear fall back to zero at ``max_distance``.
    """
    a_colour = original.colours[grid_index(cell_a)]
    coeff = colour_attraction[a_colour - 1][b_colour - 1]
    distance = cell_a.distance(cell_b)

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
        magnitude * ((cell_b.x - cell_a.x) / distance),
        magnitude * ((cell_b.y - cell_a.y) / distance),
    )


def _wrapped_hits(centre: int, target: int, radius: int, size: int) -> int:
    """How many coordinates in ``centre ± radius`` wrap onto ``target``."""
    low, high = centre - radius, centre + radius
    if high < low:
        return 0
    first = low + (target - low) % size
    if first > high:
        return 0
    return (high - first) // size + 1


def update(
    original: Grid,
    colour_attraction: Sequence[Sequence[float]],
    dt: float,
    neighbour_range: int,
    repulsion_range: int,
) -> Grid:
    """Advance the grid by one step and return the next generation."""
    target = Grid()
    live = [
        (index, grid_xy(index), colour)
        for index, colour in enumerate(original.colours)
        if colour != CellColour.BLANK
    ]

    # Direction pass: each live cell moves one step along its net force.
    for index, pos, _ in live:
        fx = fy = 0.0
        for other_index, other_pos, other_colour in live:
            if other_index == index:
                continue
            hits = _wrapped_hits(
                pos.x, other_pos.x, neighbour_range, GRID_WIDTH
            ) * _wrapped_hits(pos.y, other_pos.y, neighbour_range, GRID_HEIGHT)
            if not hits:
                continue
            neighbour = other_pos
            shadow = shadow_cell(pos, neighbour)
            if pos.distance(shadow) < pos.distance(neighbour):
                neighbour = shadow
            if pos.distance(neighbour) > neighbour_range:
                continue
            force = force_between_cells(
                pos,
                neighbour,
                other_colour,
                colour_attraction,
                original,
                repulsion_range,
                neighbour_range,
            )
            fx += force.x * hits
            fy += force.y * hits
        target.directions[index] = Vec2(round_away(fx * dt), round_away(fy * dt))

    # Colour pass: every live cell votes for the cell it moves into.
    votes: dict[int, list[int]] = {}
    for index, pos, colour in live:
        step = target.directions[index]
        if abs(step.x) > neighbour_range or abs(step.y) > neighbour_range:
            continue
        destination = grid_mod(pos + step)
        if shortest_distance(destination, pos) > neighbour_range:
            continue
        tally = votes.setdefault(grid_index(destination), [0] * (NUM_COLOURS + 1))
        tally[colour] += 1

    for index, tally in votes.items():
        winner = max(range(len(tally)), key=lambda c: (tally[c], -c))
        target.colours[index] = CellColour(winner)

    return target


def perturb(original: Grid, rng: _RandomSource | None = None) -> Grid:
    """Nudge every live cell by up to one step in each axis.

    Cells nudged past an edge continue from the opposite end of the flat
    cell sequence.
    """
    rng = rng if rng is not None else random.Random()
    target = Grid()
    for index, colour in enumerate(original.colours):
        if colour == CellColour.BLANK:
            continue
        dx = rng.randint(-1, 1)
        dy = rng.randint(-1, 1)
        moved = grid_index(grid_xy(index) + Vec2(dx, dy))
        target.colours[moved % CELL_COUNT] = colour
    return target


def grid_path(name: str, directory: str | Path = DEFAULT_SAVE_DIR) -> Path:
    """Path of a saved grid, adding the ``.grid`` suffix when missing."""
    if not name.endswith(GRID_SUFFIX):
        name += GRID_SUFFIX
    return Path(directory) / name


def _attraction_values(colour_attraction: Sequence[Sequence[float]]) -> list[float]:
    rows = list(colour_attraction)
    if len(rows) != NUM_COLOURS or any(len(row) != NUM_COLOURS for row in rows):
        raise ValueError(
            f"colour attraction must be a {NUM_COLOURS}x{NUM_COLOURS} matrix"
        )
    return [float(value) for row in rows for value in row]


def save_grid(
    grid: Grid,
    neighbour_range: int,
    repulsion_range: int,
    colour_attraction: Sequence[Sequence[float]],
    name: str,
    directory: str | Path = DEFAULT_SAVE_DIR,
) -> Path:
    """Write a grid and its settings to a binary ``.grid`` file."""
    values = _attraction_values(colour_attraction)
    data = b"".join(
        [
            _HEADER.pack(neighbour_range, repulsion_range, *values),
            _COLOURS.pack(*(int(colour) for colour in grid.colours)),
            _DIRECTIONS.pack(
                *(part for direction in grid.directions for part in direction)
            ),
        ]
    )
    path = grid_path(name, directory)
    with open(path, "wb") as stream:
        stream.write(data)
    return path


def load_grid(name: str, directory: str | Path = DEFAULT_SAVE_DIR) -> SavedGrid:
    """Read a grid and its settings from a binary ``.grid`` file."""
    path = grid_path(name, directory)
    with open(path, "rb") as stream:
        data = stream.read()
    if len(data) < _FILE_SIZE:
        raise ValueError(f"{path} is truncated")

    neighbour, repulsion, *values = _HEADER.unpack_from(data, 0)
    offset = _HEADER.size
    colours = [CellColour(v) for v in _COLOURS.unpack_from(data, offset)]
    offset += _COLOURS.size
    flat = _DIRECTIONS.unpack_from(data, offset)
    directions = [Vec2(x, y) for x, y in zip(flat[0::2], flat[1::2])]
    attraction = [
        list(values[row * NUM_COLOURS : (row + 1) * NUM_COLOURS])
        for row in range(NUM_COLOURS)
    ]
    return SavedGrid(Grid(colours, directions), neighbour, repulsion, attraction)