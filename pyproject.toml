[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cellife"
version = "0.1.0"
description = "Coloured cellular automaton and particle-life simulation with attraction rules between colours"
requires-python = ">=3.10"
dependencies = [
    "pygame",
]
keywords = ["artificial life", "particle life", "cellular automaton", "simulation", "pygame"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Life",
    "Topic :: Games/Entertainment :: Simulation",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
cellife = "cellife.app:main"

[tool.hatch.build.targets.wheel]
packages = ["cellife"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
