"""Items, monsters, path finding, field of view, map generation and overworld management for a tile-based roguelike."""

__version__ = "0.1.0"

__all__ = [
    "items",
    "collection",
    "monsters",
    "navigator",
    "map_generator",
    "overworld",
]