"""Procedural map generation and a background worker that builds maps on request."""

from __future__ import annotations

import queue
import random
import threading
from collections.abc import Callable, Hashable, Sequence
from dataclasses import dataclass, field
from enum import Enum, Flag, IntEnum
from typing import Any

from .items import Orb, Teleport
from .monsters import Monster, MonsterType
from .navigator import GRID_HEIGHT, GRID_WIDTH, Position


class TileKind(Enum):
    FLOOR = "floor"
    WALL = "wall"
    CHASM = "chasm"


class MapTheme(Enum):
    ANY = "any"
    CHASM = "chasm"
    WALL = "wall"


class BorderFlags(Flag):
    NONE = 0
    TOP = 0b0001
    BOTTOM = 0b0010
    LEFT = 0b0100
    RIGHT = 0b1000
    DOWN = 0b0001_0000


class Border(IntEnum):
    """A map edge; its value indexes ``border_positions``."""

    TOP = 0
    RIGHT = 1
    BOTTOM = 2
    LEFT = 3

    def opposite(self) -> Border:
        return Border((self.value + 2) % 4)


class MapStatus(Enum):
    NOT_REQUESTED = "not_requested"
    REQUESTED = "requested"
    READY = "ready"


def _empty_borders() -> list[list[Position]]:
    return [[] for _ in Border]


@dataclass
class GenerationParams:
    num_walks: int = 6
    walk_length: int = 80
    min_dist_between_starts: int = 6
    radius: int = 1
    borders: BorderFlags = BorderFlags.NONE
    theme: MapTheme = MapTheme.ANY
    predefined_borders: list[list[Position]] = field(default_factory=_empty_borders)
    predefined_start_pos: Position | None = None
    force_regen: bool = False
    tier: int = 0


@dataclass
class GeneratedMap:
    """A freshly generated level: tiles indexed ``tiles[x][y]`` plus contents."""

    tiles: list[list[TileKind]]
    walkable_cache: list[Position]
    available_walkable_cache: list[Position]
    monsters: list[Monster] = field(default_factory=list)
    border_positions: list[list[Position]] = field(default_factory=_empty_borders)
    downstair_teleport: Position | None = None
    creatures: dict[Position, int] = field(default_factory=dict)
    items: dict[Position, list[Any]] = field(default_factory=dict)

    def is_walkable(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < GRID_WIDTH and 0 <= y < GRID_HEIGHT and self.tiles[x][y] is TileKind.FLOOR

    def _take_available(self, count: int) -> list[Position]:
        split = max(len(self.available_walkable_cache) - count, 0)
        taken = self.available_walkable_cache[split:]
        del self.available_walkable_cache[split:]
        return taken

    def _place_item(self, pos: Position, item: Any) -> None:
        self.items.setdefault(pos, []).append(item)

    def add_random_monsters(
        self,
        monster_types: Sequence[MonsterType],
        count: int,
        rng: random.Random | None = None,
    ) -> None:
        """Put up to ``count`` random monsters on free walkable positions."""
        rng = rng or random.Random()
        if count > 0 and self.available_walkable_cache and not monster_types:
            raise ValueError("monster type list is empty")
        for pos in self._take_available(count):
            monster = Monster(pos, rng.choice(monster_types))
            self.creatures[pos] = monster.id
            self.monsters.append(monster)
        rng.shuffle(self.walkable_cache)


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _carve_tile(tiles: list[list[TileKind]], x: int, y: int, walkable: list[Position]) -> None:
    if not (0 <= x < GRID_WIDTH and 0 <= y < GRID_HEIGHT):
        return
    if tiles[x][y] is not TileKind.FLOOR:
        tiles[x][y] = TileKind.FLOOR
        walkable.append((x, y))


def _carve_jagged_path(
    tiles: list[list[TileKind]],
    current: Position,
    goal: Position,
    walkable: list[Position],
    radius: int,
) -> None:
    while current != goal:
        cx, cy = current
        if radius == 0:
            _carve_tile(tiles, cx, cy, walkable)
        elif radius == 1:
            for ox, oy in ((0, 0), (1, 0), (0, 1), (1, 1)):
                _carve_tile(tiles, cx + ox, cy + oy, walkable)
        else:
            for dx in range(-radius, radius + 1):
                for dy in range(-radius, radius + 1):
                    _carve_tile(tiles, cx + dx, cy + dy, walkable)

        nx = min(max(cx + _sign(goal[0] - cx), 0), GRID_WIDTH - 1)
        ny = min(max(cy + _sign(goal[1] - cy), 0), GRID_HEIGHT - 1)
        current = (nx, ny)


_SIDES: tuple[tuple[Border, BorderFlags, Position], ...] = (
    (Border.TOP, BorderFlags.TOP, (0, 1)),
    (Border.RIGHT, BorderFlags.RIGHT, (-1, 0)),
    (Border.BOTTOM, BorderFlags.BOTTOM, (0, -1)),
    (Border.LEFT, BorderFlags.LEFT, (1, 0)),
)


def _random_edge(side: Border, rng: random.Random) -> list[Position]:
    if side in (Border.TOP, Border.BOTTOM):
        length = rng.randrange(1, 4)
        start = rng.randrange(1, GRID_WIDTH - length)
        y = 0 if side is Border.TOP else GRID_HEIGHT - 1
        return [(start + i, y) for i in range(length)]
    length = rng.randrange(1, 4)
    start = rng.randrange(1, GRID_HEIGHT - length)
    x = GRID_WIDTH - 1 if side is Border.RIGHT else 0
    return [(x, start + i) for i in range(length)]


def _place_border_anchors(
    tiles: list[list[TileKind]], params: GenerationParams, rng: random.Random
) -> list[tuple[Position, Position]]:
    anchors: list[tuple[Position, Position]] = []
    for side, flag, (ox, oy) in _SIDES:
        if flag not in params.borders:
            continue
        predefined = [tuple(p) for p in params.predefined_borders[side]]
        edge = predefined or _random_edge(side, rng)
        for x, y in edge:
            tiles[x][y] = TileKind.FLOOR
            anchors.append(((x, y), (x + ox, y + oy)))
    return anchors


def _random_walk_step(x: int, y: int, rng: random.Random) -> Position:
    choice = rng.randrange(8)
    left, right = x > 1, x < GRID_WIDTH - 2
    up, down = y > 1, y < GRID_HEIGHT - 2
    if choice == 0 and left:
        return x - 1, y
    if choice == 1 and right:
        return x + 1, y
    if choice == 2 and up:
        return x, y - 1
    if choice == 3 and down:
        return x, y + 1
    if choice == 4 and left and up:
        return x - 1, y - 1
    if choice == 5 and right and up:
        return x + 1, y - 1
    if choice == 6 and left and down:
        return x - 1, y + 1
    if choice == 7 and right and down:
        return x + 1, y + 1
    return x, y


def _pick_walk_start(starts: list[Position], min_dist: int, rng: random.Random) -> Position:
    while True:
        x = rng.randrange(3, GRID_WIDTH - 3)
        y = rng.randrange(3, GRID_HEIGHT - 3)
        if all(abs(sx - x) + abs(sy - y) >= min_dist for sx, sy in starts):
            return x, y


def generate_map(params: GenerationParams, rng: random.Random | None = None) -> GeneratedMap:
    """Carve a level out of solid ground with random walks joined by jagged paths."""
    rng = rng or random.Random()

    if params.theme is MapTheme.ANY:
        ground = TileKind.CHASM if rng.random() < 0.5 else TileKind.WALL
    elif params.theme is MapTheme.CHASM:
        ground = TileKind.CHASM
    else:
        ground = TileKind.WALL

    tiles = [[ground] * GRID_HEIGHT for _ in range(GRID_WIDTH)]
    walkable: list[Position] = []
    visited: set[Position] = set()

    anchors = _place_border_anchors(tiles, params, rng)

    starts: list[Position] = []
    if params.predefined_start_pos is not None:
        starts.append(tuple(params.predefined_start_pos))

    for _, (nx, ny) in anchors:
        if (nx, ny) not in visited:
            tiles[nx][ny] = TileKind.FLOOR
            walkable.append((nx, ny))
            visited.add((nx, ny))
        starts.append((nx, ny))

    for i in range(params.num_walks + len(starts)):
        if i >= len(starts):
            x, y = _pick_walk_start(starts, params.min_dist_between_starts, rng)
            starts.append((x, y))
        else:
            x, y = starts[i]

        for _ in range(params.walk_length):
            if x >= GRID_WIDTH or y >= GRID_HEIGHT:
                break
            if (x, y) not in visited:
                tiles[x][y] = TileKind.FLOOR
                walkable.append((x, y))
                visited.add((x, y))
            x, y = _random_walk_step(x, y, rng)

    starts.sort(key=lambda p: p[0] + p[1])
    for prev, current in zip(starts, starts[1:]):
        _carve_jagged_path(tiles, prev, current, walkable, params.radius)

    available = list(walkable)
    rng.shuffle(available)
    generated = GeneratedMap(tiles, walkable, available)

    for x in range(GRID_WIDTH):
        if tiles[x][0] is TileKind.FLOOR:
            generated.border_positions[Border.TOP].append((x, 0))
        if tiles[x][GRID_HEIGHT - 1] is TileKind.FLOOR:
            generated.border_positions[Border.BOTTOM].append((x, GRID_HEIGHT - 1))
    for y in range(GRID_HEIGHT):
        if tiles[0][y] is TileKind.FLOOR:
            generated.border_positions[Border.LEFT].append((0, y))
        if tiles[GRID_WIDTH - 1][y] is TileKind.FLOOR:
            generated.border_positions[Border.RIGHT].append((GRID_WIDTH - 1, y))

    return generated


def populate_map(
    generated_map: GeneratedMap,
    monster_types: Sequence[MonsterType],
    rng: random.Random | None = None,
) -> None:
    """Add one monster, the downstairs teleport and two orbs."""
    rng = rng or random.Random()
    generated_map.add_random_monsters(monster_types, 1, rng)

    for pos in generated_map._take_available(1):
        generated_map._place_item(pos, Teleport())
        generated_map.downstair_teleport = pos

    for pos in generated_map._take_available(2):
        generated_map._place_item(pos, Orb())


@dataclass
class MapAssignment:
    opos: Hashable
    map: GeneratedMap


class MapGenerator:
    """Generates maps on a worker thread, one request per overworld position.

    Requests made before :meth:`start` are kept and served once it runs.
    """

    def __init__(self, monster_types: Sequence[MonsterType], rng: random.Random | None = None) -> None:
        self._monster_types = monster_types
        self._rng = rng or random.Random()
        self._commands: queue.Queue[tuple[Hashable, GenerationParams] | None] = queue.Queue()
        self._cond = threading.Condition()
        self._statuses: dict[Hashable, MapStatus] = {}
        self._maps: dict[Hashable, GeneratedMap] = {}
        self._errors: dict[Hashable, Exception] = {}
        self._thread: threading.Thread | None = None
        self._stopped = False

    def __enter__(self) -> MapGenerator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def start(self, callback: Callable[[MapAssignment], None]) -> None:
        if self._thread is not None:
            raise RuntimeError("map generator already started")
        self._thread = threading.Thread(target=self._run, args=(callback,), daemon=True)
        self._thread.start()

    def _run(self, callback: Callable[[MapAssignment], None]) -> None:
        while (command := self._commands.get()) is not None:
            opos, params = command
            try:
                generated = generate_map(params, self._rng)
                populate_map(generated, self._monster_types, self._rng)
            except Exception as exc:  # report to waiters instead of killing the worker
                with self._cond:
                    self._statuses[opos] = MapStatus.NOT_REQUESTED
                    self._errors[opos] = exc
                    self._cond.notify_all()
                continue
            with self._cond:
                self._statuses[opos] = MapStatus.READY
                self._maps[opos] = generated
                self._cond.notify_all()
            callback(MapAssignment(opos, generated))

    def get_map_status(self, opos: Hashable) -> MapStatus:
        with self._cond:
            return self._statuses.get(opos, MapStatus.NOT_REQUESTED)

    def wait_for_map(self, opos: Hashable) -> GeneratedMap | None:
        """Block while ``opos`` is being generated; return the map if ready.

        Raises RuntimeError if generating that map failed.
        """
        with self._cond:
            while self._statuses.get(opos) is MapStatus.REQUESTED and not self._stopped:
                self._cond.wait()
            error = self._errors.get(opos)
            if error is not None:
                raise RuntimeError(f"generation of map {opos!r} failed: {error}") from error
            if self._statuses.get(opos) is MapStatus.READY:
                return self._maps[opos]
            return None

    def request_generation(self, opos: Hashable, params: GenerationParams) -> bool:
        """Queue ``opos`` for generation unless already requested; return whether queued."""
        with self._cond:
            if self._statuses.get(opos, MapStatus.NOT_REQUESTED) is not MapStatus.NOT_REQUESTED:
                return False
            self._statuses[opos] = MapStatus.REQUESTED
            self._errors.pop(opos, None)
        self._commands.put((opos, params))
        return True

    def stop(self) -> None:
        if self._thread is not None:
            self._commands.put(None)
            self._thread.join()
            self._thread = None
        with self._cond:
            self._stopped = True
            self._cond.notify_all()