# cellife

An interactive artificial-life toy with two modes that share the same rules:

- **Cellular**: a 100 × 100 wrapping grid of coloured cells. Each step, every
  live cell feels a force from the coloured cells within the neighbour range,
  turns that force into a move (each component rounded away from zero), and
  each target cell takes the colour that most cells voted to move into it.
- **Particle**: free-moving coloured particles on the same wrapping 100 × 100
  world, pushed and pulled by the same force law.

The force between two things depends on their distance: linear repulsion
inside the *repulsion range*, then a linear rise towards the colour pair's
coefficient and a linear fall back to zero at the *neighbour range*.
Distances are measured across the world's edges where that is shorter.
Coefficients are set per pair of colours in an 8 × 8 attraction table; by
default each colour has coefficient 1 with itself and 0 with the others.
The default neighbour range is 16 and the default repulsion range is 2.

## Install

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Run

```
cellife
cellife --save-dir path/to/states
```

A 1000 × 1000 window opens; click the left half to start the cellular mode or
the right half to start the particle mode. Settings (ranges and the
attraction table) are kept when switching between modes.

### Controls

| Input               | Action                                                  |
|---------------------|---------------------------------------------------------|
| Left click          | place a cell / particle of the selected colour          |
| Right click         | clear a cell (cellular mode)                            |
| Tab                 | open or close the settings menu                         |
| Space               | pause / unpause                                         |
| Right arrow         | single step while paused (cellular mode)                |
| G                   | toggle grid lines                                       |
| C                   | clear the world                                         |
| Escape              | return to the mode chooser                              |

The keyboard shortcuts are ignored while the file name box is being edited.
With the menu open, clicks on the left 220 pixels go to the menu only.

The settings menu edits the repulsion range (0–50), the neighbour range
(0–100) and the attraction table; click a box to edit it and click it again
or press Enter to apply. It also picks the drawing colour, has Clear, Pause
and Gridlines buttons, a Perturb button that nudges everything randomly by
up to one cell in each axis, and a file name box with Save and Load buttons.

In cellular mode the grid advances once every 0.1 seconds of running time;
in particle mode particles move every frame by the force times the frame
time.

## Saved states

States are written to the save directory (`saved_states` by default, or the
one given with `--save-dir`); the directory must already exist. Grids are
stored as `<name>.grid`, particle sets as `<name>.particle`, the extension
being added when missing. Each file keeps the neighbour and repulsion ranges
and the attraction table alongside the world, in little-endian binary.

In particle mode, loading a name without an extension looks for `.particle`
first and then `.grid`; a grid is turned into one particle per coloured cell.
When a file cannot be read or written, a message starting
`Failed to open file` is printed to standard error and the world is left as
it was.

## Using the library

The simulation code works without a window:

```python
from cellife.grid import Grid, CellColour, update, save_grid, load_grid
from cellife.app import default_attraction

grid = Grid()
grid.colours[0] = CellColour.RED
grid.colours[1] = CellColour.RED
next_grid = update(grid, default_attraction(), 0.1, 16, 2)
```

- `cellife.grid`: `Grid` (lists `colours` and `directions` of 10 000 cells,
  row by row), `CellColour`, `update` (returns the next `Grid`), `perturb`,
  position helpers (`grid_index`, `grid_xy`, `in_bounds`, `grid_mod`,
  `shadow_cell`, `shortest_distance`), `force_between_cells`, `colour_rgb`,
  and `save_grid` / `load_grid` (which returns a `SavedGrid`).
- `cellife.particle`: `Particle`, `update` (returns a new list),
  `force_between_particles`, `perturb`, `format_particles`,
  `save_particles`, `load_particles` and `convert_grid_to_particles` (which
  return a `SavedParticles`).
- `cellife.vector2d.Vec2`: the small immutable 2-D vector both use.
- `cellife.mathutils`: `round_away` and `wrap_mod`.
- `cellife.resource_dir.search_and_set_resource_dir(folder_name, app_dir)`:
  looks for a folder in the working directory, then in the application
  directory and up to three levels above it, and changes into it when found.

`perturb` in both modules takes an optional random source with a
`randint(a, b)` method, such as `random.Random(seed)`, for repeatable runs.