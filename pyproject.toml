[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rogueworld"
version = "0.1.0"
description = "World model for a tile-based roguelike: items, monsters, path finding, field of view, procedural maps and an overworld grid"
requires-python = ">=3.10"
dependencies = []
keywords = ["roguelike", "procedural-generation", "pathfinding", "field-of-view", "dungeon"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Role-Playing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["rogueworld"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
