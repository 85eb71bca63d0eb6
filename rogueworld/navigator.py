"""Grid geometry, A* path finding and shadow-casting field of view."""

from __future__ import annotations

import heapq
import itertools
from collections.abc import Callable, Iterator

TILE_SIZE = 32.0
GRID_WIDTH = 33
GRID_HEIGHT = 33

Position = tuple[int, int]

_DIRECTIONS = (
    (0, -1), (1, 0), (0, 1), (-1, 0),
    (-1, -1), (1, -1), (1, 1), (-1, 1),
)
_STRAIGHT_COST = 10
_DIAGONAL_COST = 14


def _heuristic(pos: Position, goal: Position) -> int:
    dx = abs(goal[0] - pos[0])
    dy = abs(goal[1] - pos[1])
    return 10 * (dx + dy) - 6 * min(dx, dy)


def _neighbours(
    pos: Position, is_walkable: Callable[[Position], bool]
) -> Iterator[tuple[Position, int]]:
    x, y = pos
    for dx, dy in _DIRECTIONS:
        nx, ny = x + dx, y + dy
        if nx >= 0 and ny >= 0 and is_walkable((nx, ny)):
            yield (nx, ny), _DIAGONAL_COST if dx and dy else _STRAIGHT_COST


def find_path(
    start: Position, goal: Position, is_walkable: Callable[[Position], bool]
) -> list[Position] | None:
    """Shortest 8-way path from ``start`` to ``goal``, both included.

    ``is_walkable`` is asked only about non-negative coordinates and must
    bound the search itself. Returns None when the goal cannot be reached.
    """
    start = (start[0], start[1])
    goal = (goal[0], goal[1])
    counter = itertools.count()
    heap = [(_heuristic(start, goal), 0, next(counter), start)]
    parents: dict[Position, Position | None] = {start: None}
    best: dict[Position, int] = {start: 0}

    while heap:
        _, neg_cost, _, node = heapq.heappop(heap)
        cost = -neg_cost
        if node == goal:
            path = []
            step: Position | None = node
            while step is not None:
                path.append(step)
                step = parents[step]
            path.reverse()
            return path
        if cost > best[node]:
            continue
        for neighbour, step_cost in _neighbours(node, is_walkable):
            new_cost = cost + step_cost
            if neighbour in best and best[neighbour] <= new_cost:
                continue
            best[neighbour] = new_cost
            parents[neighbour] = node
            heapq.heappush(
                heap,
                (new_cost + _heuristic(neighbour, goal), -new_cost, next(counter), neighbour),
            )
    return None


def _in_bounds(x: int, y: int) -> bool:
    return 0 <= x < GRID_WIDTH and 0 <= y < GRID_HEIGHT


def _transform(octant: int, cx: int, cy: int, dx: int, dy: int) -> Position:
    if octant == 0:
        return cx + dx, cy + dy
    if octant == 1:
        return cx + dy, cy + dx
    if octant == 2:
        return cx + dy, cy - dx
    if octant == 3:
        return cx + dx, cy - dy
    if octant == 4:
        return cx - dx, cy - dy
    if octant == 5:
        return cx - dy, cy - dx
    if octant == 6:
        return cx - dy, cy + dx
    if octant == 7:
        return cx - dx, cy + dy
    return cx, cy


def _cast_light(
    opaque: Callable[[int, int], bool],
    visible: set[Position],
    cx: int,
    cy: int,
    row: int,
    start_slope: float,
    end_slope: float,
    radius: int,
    octant: int,
) -> None:
    if start_slope < end_slope:
        return
    next_start_slope = start_slope

    for i in range(row, radius + 1):
        blocked = False
        dx = -i
        while dx <= 0:
            dy = -i
            nx, ny = _transform(octant, cx, cy, dx, dy)
            l_slope = (dx - 0.5) / (dy + 0.5)
            r_slope = (dx + 0.5) / (dy - 0.5)

            if r_slope > start_slope:
                dx += 1
                continue
            if l_slope < end_slope:
                break

            cell_opaque = opaque(nx, ny)
            if _in_bounds(nx, ny) and not cell_opaque and dx * dx + dy * dy <= radius * radius:
                visible.add((nx, ny))

            if blocked:
                if cell_opaque:
                    next_start_slope = r_slope
                    dx += 1
                    continue
                blocked = False
                start_slope = next_start_slope
            elif cell_opaque:
                blocked = True
                _cast_light(opaque, visible, cx, cy, i + 1, next_start_slope, l_slope, radius, octant)
                next_start_slope = r_slope

            dx += 1

        if blocked:
            break


def compute_fov(
    is_opaque: Callable[[Position], bool], origin: Position, max_radius: int
) -> set[Position]:
    """Positions visible from ``origin`` within ``max_radius``.

    Cells outside the grid count as opaque; opaque cells are never listed,
    but the origin always is.
    """
    origin = (origin[0], origin[1])

    def opaque(x: int, y: int) -> bool:
        return not _in_bounds(x, y) or bool(is_opaque((x, y)))

    visible = {origin}
    for octant in range(8):
        _cast_light(opaque, visible, origin[0], origin[1], 1, 1.0, 0.0, max_radius, octant)
    return visible