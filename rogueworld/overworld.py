"""The overworld: a stack of floors, each a 5x5 grid of maps generated on demand."""

from __future__ import annotations

import copy
import random
import sys
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Optional

from .map_generator import (
    Border,
    BorderFlags,
    GeneratedMap,
    GenerationParams,
    MapAssignment,
    MapGenerator,
    MapTheme,
)
from .monsters import MonsterType
from .navigator import GRID_HEIGHT, GRID_WIDTH, Position

OVERWORLD_SIZE = 5

_ALL_SIDES = BorderFlags.TOP | BorderFlags.BOTTOM | BorderFlags.LEFT | BorderFlags.RIGHT


@dataclass(frozen=True)
class OverworldPos:
    """Where a map sits: its floor and its cell in the floor's 5x5 grid."""

    floor: int
    x: int
    y: int


CENTER = OverworldPos(0, 2, 2)

Grid = list[list[Optional[GeneratedMap]]]


def _empty_grid() -> Grid:
    return [[None] * OVERWORLD_SIZE for _ in range(OVERWORLD_SIZE)]


def _in_grid(opos: OverworldPos) -> bool:
    return opos.floor >= 0 and 0 <= opos.x < OVERWORLD_SIZE and 0 <= opos.y < OVERWORLD_SIZE


def _ensure_floor(floors: list[Grid], floor: int) -> None:
    while len(floors) <= floor:
        floors.append(_empty_grid())


class Overworld:
    """The maps the player has entered, each an independent copy of its generated map."""

    def __init__(self) -> None:
        self.maps: list[Grid] = [_empty_grid()]

    def add_map(self, opos: OverworldPos, generated_map: GeneratedMap) -> GeneratedMap:
        """Store a copy of ``generated_map`` at ``opos`` and return the copy.

        Raises ValueError if a map is already stored there.
        """
        if not _in_grid(opos):
            raise IndexError(f"overworld position {opos} is outside the grid")
        _ensure_floor(self.maps, opos.floor)
        if self.maps[opos.floor][opos.x][opos.y] is not None:
            raise ValueError(f"map at position {opos} already exists")
        level = copy.deepcopy(generated_map)
        self.maps[opos.floor][opos.x][opos.y] = level
        return level

    def get_map(self, opos: OverworldPos) -> GeneratedMap | None:
        if not _in_grid(opos) or opos.floor >= len(self.maps):
            return None
        return self.maps[opos.floor][opos.x][opos.y]


def _mirror_top(p: Position) -> Position:
    return (p[0], 0)


def _mirror_right(p: Position) -> Position:
    return (GRID_WIDTH - 1, p[1])


def _mirror_bottom(p: Position) -> Position:
    return (p[0], GRID_HEIGHT - 1)


def _mirror_left(p: Position) -> Position:
    return (0, p[1])


# For each side: offset of the neighbouring map, how its opposite edge maps onto
# ours, and the flag that opens this side.
_NEIGHBOURS: tuple[tuple[Border, int, int, Callable[[Position], Position], BorderFlags], ...] = (
    (Border.TOP, 0, -1, _mirror_top, BorderFlags.TOP),
    (Border.RIGHT, 1, 0, _mirror_right, BorderFlags.RIGHT),
    (Border.BOTTOM, 0, 1, _mirror_bottom, BorderFlags.BOTTOM),
    (Border.LEFT, -1, 0, _mirror_left, BorderFlags.LEFT),
)


class OverworldGenerator:
    """Drives background map generation so neighbouring maps share their exits.

    Creating one starts the worker and requests the centre map of floor 0;
    once that is ready its neighbours and the floor below are requested.
    """

    def __init__(self, monster_types: Sequence[MonsterType], rng: random.Random | None = None) -> None:
        self._lock = threading.Lock()
        self.generated_maps: list[Grid] = [_empty_grid()]
        self.map_generator = MapGenerator(monster_types, rng)
        self.map_generator.start(self._on_map_ready)
        params = GenerationParams(borders=_ALL_SIDES | BorderFlags.DOWN, theme=MapTheme.CHASM)
        self.map_generator.request_generation(CENTER, params)

    def __enter__(self) -> OverworldGenerator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Stop the background worker."""
        self.map_generator.stop()

    def _store(self, opos: OverworldPos, generated_map: GeneratedMap) -> None:
        with self._lock:
            _ensure_floor(self.generated_maps, opos.floor)
            self.generated_maps[opos.floor][opos.x][opos.y] = generated_map

    def _on_map_ready(self, assignment: MapAssignment) -> None:
        opos = assignment.opos
        self._store(opos, assignment.map)
        if opos == CENTER:
            stairs = assignment.map.downstair_teleport
            if stairs is None:
                print("Centre map has no downstairs; adjacent maps not set up.", file=sys.stderr)
                return
            self.setup_adjacent_maps(opos.floor, opos.x, opos.y, stairs)

    def get_generated_map(self, opos: OverworldPos) -> GeneratedMap | None:
        """The generated map at ``opos``, waiting if it is still being built.

        Returns None if it was never requested or lies outside the grid.
        """
        if not _in_grid(opos):
            return None
        generated = self.map_generator.wait_for_map(opos)
        if generated is None:
            return None
        self._store(opos, generated)
        return generated

    def _fill_predefined_borders(self, opos: OverworldPos, params: GenerationParams) -> None:
        for side, dx, dy, mirror, flag in _NEIGHBOURS:
            nx, ny = opos.x + dx, opos.y + dy
            if not (0 <= nx < OVERWORLD_SIZE and 0 <= ny < OVERWORLD_SIZE):
                continue
            neighbour = self.get_generated_map(OverworldPos(opos.floor, nx, ny))
            if neighbour is None:
                continue
            edge = neighbour.border_positions[side.opposite()]
            params.predefined_borders[side] = [mirror(p) for p in edge]
            params.borders |= flag

    def setup_adjacent_maps(self, floor: int, x: int, y: int, stairs_pos: Position) -> None:
        """Request the four orthogonal neighbours of a map and the centre of the floor below."""
        for dx, dy in ((-1, 0), (0, -1), (0, 1), (1, 0)):
            nx, ny = x + dx, y + dy
            if not (0 <= nx < OVERWORLD_SIZE and 0 <= ny < OVERWORLD_SIZE):
                continue
            opos = OverworldPos(floor, nx, ny)
            if self.get_generated_map(opos) is not None:
                continue
            params = GenerationParams(theme=MapTheme.CHASM)
            if nx != 0:
                params.borders |= BorderFlags.LEFT
            if nx != OVERWORLD_SIZE - 1:
                params.borders |= BorderFlags.RIGHT
            if ny != 0:
                params.borders |= BorderFlags.TOP
            if ny != OVERWORLD_SIZE - 1:
                params.borders |= BorderFlags.BOTTOM
            params.borders |= BorderFlags.DOWN
            self._fill_predefined_borders(opos, params)
            self.map_generator.request_generation(opos, params)

        below = OverworldPos(floor + 1, 2, 2)
        params = GenerationParams(
            borders=_ALL_SIDES | BorderFlags.DOWN,
            theme=MapTheme.CHASM,
            predefined_start_pos=tuple(stairs_pos),
            force_regen=True,
        )
        self.map_generator.request_generation(below, params)