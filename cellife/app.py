"""Interactive front end: a game chooser plus the cellular and particle simulations."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass, field
from enum import Enum, auto
from itertools import product
from pathlib import Path
from typing import Callable, Iterator, Sequence, TypeVar, Union

import pygame

from cellife import grid as cells
from cellife import particle as parts
from cellife.grid import (
    DEFAULT_SAVE_DIR,
    GRID_HEIGHT,
    GRID_WIDTH,
    NUM_COLOURS,
    UPDATE_THRESHOLD,
    CellColour,
    Grid,
    colour_rgb,
    grid_index,
    grid_xy,
    in_bounds,
)
from cellife.particle import PARTICLE_RADIUS, Particle
from cellife.vector2d import Vec2

WINDOW_SIZE = (1000, 1000)
WINDOW_TITLE = "Cellular Life"
DEFAULT_NEIGHBOUR_RANGE = 16
DEFAULT_REPULSION_RANGE = 2
MAX_REPULSION_RANGE = 50
MAX_NEIGHBOUR_RANGE = 100
MENU_WIDTH = 220
FILE_NAME_LIMIT = 63

_FPS = 60
_LEFT = 1
_RIGHT = 3

_BLACK = (0, 0, 0)
_WHITE = (255, 255, 255)
_GRAY = (130, 130, 130)
_DARKGRAY = (80, 80, 80)
_LABEL = (200, 200, 200)
_BOX_FILL = (40, 40, 40)
_BOX_BORDER = (131, 131, 131)
_BOX_ACTIVE = (4, 146, 199)
_BUTTON_FILL = (201, 201, 201)
_BUTTON_TEXT = (104, 104, 104)

_LARGE_TEXT = 24
_SMALL_TEXT = 18
_TITLE_TEXT = 40

_REPULSION = "repulsion"
_NEIGHBOUR = "neighbour"
_FILE_NAME = "file_name"
_INT_FIELDS = {
    _REPULSION: ("repulsion_range", MAX_REPULSION_RANGE),
    _NEIGHBOUR: ("neighbour_range", MAX_NEIGHBOUR_RANGE),
}

_REPULSION_BOX = pygame.Rect(10, 40, 160, 30)
_NEIGHBOUR_BOX = pygame.Rect(10, 120, 160, 30)
_CLEAR_BUTTON = pygame.Rect(10, 440, 160, 30)
_PAUSE_BUTTON = pygame.Rect(10, 480, 160, 30)
_GRIDLINES_BUTTON = pygame.Rect(10, 520, 160, 30)
_SELECTED_SWATCH = pygame.Rect(100, 570, 24, 24)
_FILE_BOX = pygame.Rect(10, 710, 160, 30)
_SAVE_BUTTON = pygame.Rect(10, 750, 75, 30)
_LOAD_BUTTON = pygame.Rect(95, 750, 75, 30)
_PERTURB_BUTTON = pygame.Rect(10, 800, 160, 30)

_PAINT_COLOURS = [colour for colour in CellColour if colour != CellColour.BLANK]

Point = Union[Sequence[float], Vec2]
_T = TypeVar("_T")


def default_attraction() -> list[list[float]]:
    """Attraction matrix where each colour attracts only itself."""
    return [[float(x == y) for y in range(NUM_COLOURS)] for x in range(NUM_COLOURS)]


@dataclass
class Settings:
    """Simulation settings shared by both games and kept between them."""

    colour_attraction: list[list[float]] = field(default_factory=default_attraction)
    neighbour_range: int = DEFAULT_NEIGHBOUR_RANGE
    repulsion_range: int = DEFAULT_REPULSION_RANGE
    save_dir: Path = Path(DEFAULT_SAVE_DIR)


@dataclass
class UiState:
    """State of the on-screen menu and the keyboard toggles."""

    value_box_texts: list[list[str]]
    selected_colour: CellColour = CellColour.BLUE
    file_name: str = ""
    editing: object = None
    edit_text: str = ""
    menu_mode: bool = False
    pause: bool = False
    grid_lines: bool = False
    clear: bool = False
    save: bool = False
    load: bool = False
    perturb: bool = False


class _Outcome(Enum):
    NONE = auto()
    QUIT = auto()
    BACK = auto()
    PLACE = auto()
    STEP = auto()


class _Fonts:
    def __init__(self) -> None:
        self._cache: dict[int, pygame.font.Font] = {}

    def __call__(self, size: int) -> pygame.font.Font:
        font = self._cache.get(size)
        if font is None:
            font = self._cache[size] = pygame.font.Font(None, size)
        return font


def cell_size(screen_width: int, screen_height: int) -> Vec2:
    """Size in pixels of one grid cell for the given screen size."""
    return Vec2(screen_width // GRID_WIDTH, screen_height // GRID_HEIGHT)


def _screen_cell(pos: Point, size: Vec2) -> Vec2:
    x, y = pos
    return Vec2(int(x / size.x), int(y / size.y))


def screen_to_grid(pos: Point, size: Vec2) -> int:
    """Flat grid index of the cell under a screen position."""
    return grid_index(_screen_cell(pos, size))


def attraction_texts(colour_attraction: Sequence[Sequence[float]]) -> list[list[str]]:
    """Attraction values formatted for the menu's value boxes."""
    return [[f"{value:.0f}" for value in row] for row in colour_attraction]


# --- menu editing ---------------------------------------------------------


def _end_edit(state: UiState, settings: Settings) -> None:
    widget = state.editing
    state.editing = None
    if widget in _INT_FIELDS:
        attribute, limit = _INT_FIELDS[widget]
        value = int(state.edit_text) if state.edit_text else 0
        setattr(settings, attribute, min(max(value, 0), limit))
        state.edit_text = ""
    elif isinstance(widget, tuple):
        _, x, y = widget
        try:
            settings.colour_attraction[x][y] = float(state.value_box_texts[x][y])
        except ValueError:
            state.value_box_texts[x][y] = f"{settings.colour_attraction[x][y]:.0f}"


def _begin_edit(state: UiState, settings: Settings, widget: object) -> None:
    if state.editing is not None:
        _end_edit(state, settings)
    state.editing = widget
    if widget in _INT_FIELDS:
        state.edit_text = str(getattr(settings, _INT_FIELDS[widget][0]))


def _edited(text: str, event: pygame.event.Event, allowed: Callable[[str], bool], limit: int) -> str:
    if event.key == pygame.K_BACKSPACE:
        return text[:-1]
    char = getattr(event, "unicode", "")
    if len(char) == 1 and allowed(char) and len(text) < limit:
        return text + char
    return text


def _handle_typing(state: UiState, settings: Settings, event: pygame.event.Event) -> None:
    if event.key in (pygame.K_RETURN, pygame.K_KP_ENTER):
        _end_edit(state, settings)
        return
    widget = state.editing
    if widget == _FILE_NAME:
        state.file_name = _edited(state.file_name, event, str.isprintable, FILE_NAME_LIMIT)
    elif widget in _INT_FIELDS:
        state.edit_text = _edited(state.edit_text, event, str.isdigit, 9)
    elif isinstance(widget, tuple):
        _, x, y = widget
        texts = state.value_box_texts
        texts[x][y] = _edited(texts[x][y], event, lambda c: c in "0123456789.-", 31)


def _attraction_rect(x: int, y: int) -> pygame.Rect:
    return pygame.Rect(26 + 24 * x, 222 + 24 * y, 24, 24)


def _palette() -> Iterator[tuple[CellColour, pygame.Rect]]:
    for x, y in product(range(4), range(2)):
        yield CellColour(y * 4 + x + 1), pygame.Rect(10 + x * 24, 604 + y * 24, 24, 24)


def _panel_click(state: UiState, settings: Settings, pos: tuple[int, int]) -> None:
    target: object = None
    if _REPULSION_BOX.collidepoint(pos):
        target = _REPULSION
    elif _NEIGHBOUR_BOX.collidepoint(pos):
        target = _NEIGHBOUR
    elif _FILE_BOX.collidepoint(pos):
        target = _FILE_NAME
    else:
        for x, y in product(range(NUM_COLOURS), repeat=2):
            if _attraction_rect(x, y).collidepoint(pos):
                target = ("attraction", x, y)
                break

    if target is not None:
        if state.editing == target:
            _end_edit(state, settings)
        else:
            _begin_edit(state, settings, target)
        return

    if state.editing is not None:
        _end_edit(state, settings)

    if _CLEAR_BUTTON.collidepoint(pos):
        state.clear = True
    elif _PAUSE_BUTTON.collidepoint(pos):
        state.pause = not state.pause
    elif _GRIDLINES_BUTTON.collidepoint(pos):
        state.grid_lines = not state.grid_lines
    elif _SAVE_BUTTON.collidepoint(pos):
        state.save = True
    elif _LOAD_BUTTON.collidepoint(pos):
        state.load = True
    elif _PERTURB_BUTTON.collidepoint(pos):
        state.perturb = True
    else:
        for colour, rect in _palette():
            if rect.collidepoint(pos):
                state.selected_colour = colour
                break


def _handle_event(state: UiState, settings: Settings, event: pygame.event.Event) -> _Outcome:
    if event.type == pygame.QUIT:
        return _Outcome.QUIT

    if event.type == pygame.MOUSEBUTTONDOWN:
        if state.menu_mode and event.button == _LEFT:
            _panel_click(state, settings, event.pos)
        if not state.menu_mode or event.pos[0] > MENU_WIDTH:
            return _Outcome.PLACE
        return _Outcome.NONE

    if event.type == pygame.KEYDOWN:
        if event.key == pygame.K_ESCAPE:
            state.menu_mode = False
            return _Outcome.BACK
        typing_name = state.editing == _FILE_NAME
        if state.editing is not None:
            _handle_typing(state, settings, event)
        if not typing_name:
            if event.key == pygame.K_c:
                state.clear = True
            elif event.key == pygame.K_g:
                state.grid_lines = not state.grid_lines
            elif event.key == pygame.K_TAB:
                state.menu_mode = not state.menu_mode
                if not state.menu_mode and state.editing is not None:
                    _end_edit(state, settings)
            elif event.key == pygame.K_SPACE:
                state.pause = not state.pause
        if event.key == pygame.K_RIGHT:
            return _Outcome.STEP

    return _Outcome.NONE


def _attempt(action: Callable[..., _T], *args: object) -> _T | None:
    try:
        return action(*args)
    except (OSError, ValueError) as error:
        print(f"Failed to open file: {error}", file=sys.stderr)
        return None


def _apply_saved(state: UiState, settings: Settings, saved: cells.SavedGrid | parts.SavedParticles) -> None:
    settings.neighbour_range = saved.neighbour_range
    settings.repulsion_range = saved.repulsion_range
    settings.colour_attraction = saved.colour_attraction
    state.value_box_texts = attraction_texts(settings.colour_attraction)


# --- drawing --------------------------------------------------------------


def _draw_label(surface: pygame.Surface, font: pygame.font.Font, text: str, rect: pygame.Rect) -> None:
    image = font.render(text, True, _LABEL)
    surface.blit(image, image.get_rect(midleft=(rect.x, rect.centery)))


def _draw_box(
    surface: pygame.Surface,
    font: pygame.font.Font,
    rect: pygame.Rect,
    text: str,
    *,
    fill: tuple[int, int, int],
    border: tuple[int, int, int],
    text_colour: tuple[int, int, int],
    centred: bool = True,
) -> None:
    pygame.draw.rect(surface, fill, rect)
    pygame.draw.rect(surface, border, rect, 2)
    image = font.render(text, True, text_colour)
    if centred:
        place = image.get_rect(center=rect.center)
    else:
        place = image.get_rect(midleft=(rect.x + 6, rect.centery))
    surface.blit(image, place)


def _draw_value_box(surface: pygame.Surface, font: pygame.font.Font, rect: pygame.Rect, text: str, active: bool, *, centred: bool = True) -> None:
    _draw_box(
        surface, font, rect, text,
        fill=_BOX_FILL,
        border=_BOX_ACTIVE if active else _BOX_BORDER,
        text_colour=_WHITE,
        centred=centred,
    )


def _draw_button(surface: pygame.Surface, font: pygame.font.Font, rect: pygame.Rect, text: str) -> None:
    _draw_box(surface, font, rect, text, fill=_BUTTON_FILL, border=_BOX_BORDER, text_colour=_BUTTON_TEXT)


def _draw_panel(surface: pygame.Surface, fonts: _Fonts, state: UiState, settings: Settings) -> None:
    large = fonts(_LARGE_TEXT)
    small = fonts(_SMALL_TEXT)

    for label_y, rect, widget, value in (
        (10, _REPULSION_BOX, _REPULSION, settings.repulsion_range),
        (90, _NEIGHBOUR_BOX, _NEIGHBOUR, settings.neighbour_range),
    ):
        _draw_label(surface, large, "Repulsion Range:" if widget == _REPULSION else "Neighbour Range:",
                    pygame.Rect(10, label_y, 160, 30))
        active = state.editing == widget
        _draw_value_box(surface, large, rect, state.edit_text if active else str(value), active)

    _draw_label(surface, large, "Attraction", pygame.Rect(10, 170, 160, 30))
    for i, colour in enumerate(_PAINT_COLOURS):
        surface.fill(colour_rgb(colour), pygame.Rect(30 + 24 * i, 203, 16, 16))
        surface.fill(colour_rgb(colour), pygame.Rect(6, 226 + 24 * i, 16, 16))
    for x, y in product(range(NUM_COLOURS), repeat=2):
        widget = ("attraction", x, y)
        _draw_value_box(surface, small, _attraction_rect(x, y), state.value_box_texts[x][y], state.editing == widget)

    _draw_button(surface, large, _CLEAR_BUTTON, "Clear")
    _draw_button(surface, large, _PAUSE_BUTTON, "Unpause" if state.pause else "Pause")
    _draw_button(surface, large, _GRIDLINES_BUTTON, "Gridlines")

    _draw_label(surface, large, "Selected:", pygame.Rect(10, 570, 90, 24))
    surface.fill(colour_rgb(state.selected_colour), _SELECTED_SWATCH)
    for colour, rect in _palette():
        surface.fill(colour_rgb(colour), rect)

    _draw_label(surface, large, "File Name:", pygame.Rect(10, 680, 160, 30))
    _draw_value_box(surface, large, _FILE_BOX, state.file_name, state.editing == _FILE_NAME, centred=False)
    _draw_button(surface, large, _SAVE_BUTTON, "Save")
    _draw_button(surface, large, _LOAD_BUTTON, "Load")
    _draw_button(surface, large, _PERTURB_BUTTON, "Perturb")


def _draw_grid_lines(surface: pygame.Surface, size: Vec2) -> None:
    width, height = surface.get_size()
    for x in range(GRID_WIDTH):
        pygame.draw.line(surface, _DARKGRAY, (x * size.x, 0), (x * size.x, height))
    for y in range(GRID_HEIGHT):
        pygame.draw.line(surface, _DARKGRAY, (0, y * size.y), (width, y * size.y))


def _draw_overlay(surface: pygame.Surface, fonts: _Fonts, state: UiState, settings: Settings, size: Vec2) -> None:
    if state.grid_lines:
        _draw_grid_lines(surface, size)
    if state.menu_mode:
        _draw_panel(surface, fonts, state, settings)
    else:
        surface.blit(fonts(_LARGE_TEXT).render("Press TAB to open menu", True, _GRAY), (10, 10))


def _draw_cells(surface: pygame.Surface, grid: Grid, size: Vec2) -> None:
    for index, colour in enumerate(grid.colours):
        if colour == CellColour.BLANK:
            continue
        corner = grid_xy(index) * size
        surface.fill(colour_rgb(colour), pygame.Rect(corner.x, corner.y, size.x, size.y))


def _draw_particles(surface: pygame.Surface, particles: Sequence[Particle], size: Vec2) -> None:
    for particle in particles:
        centre = particle.position * size
        pygame.draw.circle(surface, colour_rgb(particle.colour), (centre.x, centre.y), PARTICLE_RADIUS)


# --- games ----------------------------------------------------------------


def run_cellular(screen: pygame.Surface, clock: pygame.time.Clock, settings: Settings) -> bool:
    """Run the cellular game; True when the window is closed, False on Escape."""
    pygame.font.init()
    fonts = _Fonts()
    state = UiState(attraction_texts(settings.colour_attraction))
    size = cell_size(*screen.get_size())
    grid = Grid()
    dt_acc = 0.0

    def step(current: Grid) -> Grid:
        return cells.update(
            current, settings.colour_attraction, UPDATE_THRESHOLD,
            settings.neighbour_range, settings.repulsion_range,
        )

    while True:
        frame_time = clock.tick(_FPS) / 1000
        for event in pygame.event.get():
            outcome = _handle_event(state, settings, event)
            if outcome is _Outcome.QUIT:
                return True
            if outcome is _Outcome.BACK:
                return False
            if outcome is _Outcome.PLACE:
                cell = _screen_cell(event.pos, size)
                if in_bounds(cell):
                    if event.button == _LEFT:
                        grid.colours[grid_index(cell)] = state.selected_colour
                    elif event.button == _RIGHT:
                        grid.colours[grid_index(cell)] = CellColour.BLANK
            elif outcome is _Outcome.STEP and state.pause:
                grid = step(grid)

        if state.clear:
            state.clear = False
            grid = Grid()
        if state.save:
            state.save = False
            _attempt(
                cells.save_grid, grid, settings.neighbour_range, settings.repulsion_range,
                settings.colour_attraction, state.file_name, settings.save_dir,
            )
        if state.load:
            state.load = False
            saved = _attempt(cells.load_grid, state.file_name, settings.save_dir)
            if saved is not None:
                grid = saved.grid
                _apply_saved(state, settings, saved)
        if state.perturb:
            state.perturb = False
            grid = cells.perturb(grid)

        if not state.pause:
            if dt_acc >= UPDATE_THRESHOLD:
                dt_acc -= UPDATE_THRESHOLD
                grid = step(grid)
            dt_acc += frame_time

        screen.fill(_BLACK)
        _draw_cells(screen, grid, size)
        _draw_overlay(screen, fonts, state, settings, size)
        pygame.display.flip()


def run_particles(screen: pygame.Surface, clock: pygame.time.Clock, settings: Settings) -> bool:
    """Run the particle game; True when the window is closed, False on Escape."""
    pygame.font.init()
    fonts = _Fonts()
    state = UiState(attraction_texts(settings.colour_attraction))
    size = cell_size(*screen.get_size())
    particles: list[Particle] = []

    while True:
        frame_time = clock.tick(_FPS) / 1000
        for event in pygame.event.get():
            outcome = _handle_event(state, settings, event)
            if outcome is _Outcome.QUIT:
                return True
            if outcome is _Outcome.BACK:
                return False
            if outcome is _Outcome.PLACE and event.button == _LEFT:
                x, y = event.pos
                particles.append(Particle(state.selected_colour, Vec2(x / size.x, y / size.y)))

        if state.clear:
            state.clear = False
            particles = []
        if state.save:
            state.save = False
            _attempt(
                parts.save_particles, particles, settings.neighbour_range, settings.repulsion_range,
                settings.colour_attraction, state.file_name, settings.save_dir,
            )
        if state.load:
            state.load = False
            saved = _attempt(parts.load_particles, state.file_name, settings.save_dir)
            if saved is not None:
                particles = saved.particles
                _apply_saved(state, settings, saved)
        if state.perturb:
            state.perturb = False
            particles = parts.perturb(particles)

        if not state.pause:
            particles = parts.update(
                particles, settings.colour_attraction, frame_time,
                float(settings.neighbour_range), float(settings.repulsion_range),
            )

        screen.fill(_BLACK)
        _draw_particles(screen, particles, size)
        _draw_overlay(screen, fonts, state, settings, size)
        pygame.display.flip()


def _choose_game(screen: pygame.Surface, clock: pygame.time.Clock, fonts: _Fonts) -> bool | None:
    """True for the cellular game, False for particles, None when closing."""
    width, height = screen.get_size()
    while True:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return None
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == _LEFT:
                return event.pos[0] < width // 2

        mouse_left = pygame.mouse.get_pos()[0] < width // 2
        font = fonts(_TITLE_TEXT)
        screen.fill(_BLACK)
        screen.blit(font.render("Click on a game to start", True, _WHITE), (width // 2 - 200, 20))
        screen.blit(
            font.render("Cellular", True, colour_rgb(CellColour.BLUE) if mouse_left else _WHITE),
            (100, height // 2),
        )
        screen.blit(
            font.render("Particle", True, _WHITE if mouse_left else colour_rgb(CellColour.RED)),
            (width // 2 + 100, height // 2),
        )
        pygame.display.flip()
        clock.tick(_FPS)


def main(argv: Sequence[str] | None = None) -> int:
    """Open the window and alternate between the game chooser and the games."""
    parser = argparse.ArgumentParser(
        prog="cellife", description="Cellular and particle life simulations."
    )
    parser.add_argument(
        "--save-dir", default=DEFAULT_SAVE_DIR,
        help="directory holding saved states (default: %(default)s)",
    )
    args = parser.parse_args(argv)

    pygame.init()
    try:
        screen = pygame.display.set_mode(WINDOW_SIZE)
        pygame.display.set_caption(WINDOW_TITLE)
        clock = pygame.time.Clock()
        fonts = _Fonts()
        settings = Settings(save_dir=Path(args.save_dir))
        while True:
            choice = _choose_game(screen, clock, fonts)
            if choice is None:
                return 0
            run = run_cellular if choice else run_particles
            if run(screen, clock, settings):
                return 0
    finally:
        pygame.quit()


if __name__ == "__main__":
    sys.exit(main())