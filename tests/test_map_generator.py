import random
import threading

import pytest

from rogueworld.items import Orb, Teleport
from rogueworld.map_generator import (
    Border,
    BorderFlags,
    GeneratedMap,
    GenerationParams,
    MapAssignment,
    MapGenerator,
    MapStatus,
    MapTheme,
    TileKind,
    generate_map,
    populate_map,
)
from rogueworld.monsters import MonsterType
from rogueworld.navigator import GRID_HEIGHT, GRID_WIDTH


def _rat():
    return MonsterType(id=1, name="Rat", glyph="r", color=(1, 2, 3), max_hp=5, melee_damage=1)


def _floor_positions(generated):
    return {
        (x, y)
        for x in range(GRID_WIDTH)
        for y in range(GRID_HEIGHT)
        if generated.tiles[x][y] is TileKind.FLOOR
    }


@pytest.mark.parametrize(
    "side,expected",
    [
        (Border.TOP, Border.BOTTOM),
        (Border.BOTTOM, Border.TOP),
        (Border.LEFT, Border.RIGHT),
        (Border.RIGHT, Border.LEFT),
    ],
)
def test_border_opposite(side, expected):
    assert side.opposite() is expected


def test_border_flags_select_opened_sides():
    combined = BorderFlags.TOP | BorderFlags.LEFT
    assert BorderFlags.LEFT in combined
    assert BorderFlags.RIGHT not in combined
    params = GenerationParams(borders=combined, theme=MapTheme.WALL, radius=0)
    generated = generate_map(params, random.Random(29))
    assert generated.border_positions[Border.TOP]
    assert generated.border_positions[Border.LEFT]
    assert generated.border_positions[Border.RIGHT] == []
    assert generated.border_positions[Border.BOTTOM] == []


def test_generation_params_defaults():
    params = GenerationParams()
    assert params.num_walks == 6
    assert params.walk_length == 80
    assert params.min_dist_between_starts == 6
    assert params.radius == 1
    assert params.borders == BorderFlags.NONE
    assert params.theme is MapTheme.ANY
    assert params.predefined_borders == [[], [], [], []]


def test_generated_map_shape_and_caches():
    generated = generate_map(GenerationParams(theme=MapTheme.CHASM), random.Random(1))
    assert len(generated.tiles) == GRID_WIDTH
    assert all(len(column) == GRID_HEIGHT for column in generated.tiles)
    assert len(set(generated.walkable_cache)) == len(generated.walkable_cache)
    assert all(generated.is_walkable(p) for p in generated.walkable_cache)
    assert sorted(generated.available_walkable_cache) == sorted(generated.walkable_cache)
    kinds = {kind for column in generated.tiles for kind in column}
    assert kinds <= {TileKind.FLOOR, TileKind.CHASM}


def test_wall_theme_uses_walls():
    generated = generate_map(GenerationParams(theme=MapTheme.WALL), random.Random(2))
    kinds = {kind for column in generated.tiles for kind in column}
    assert kinds == {TileKind.FLOOR, TileKind.WALL}


def test_no_borders_leaves_edges_closed():
    generated = generate_map(GenerationParams(theme=MapTheme.WALL), random.Random(3))
    assert generated.border_positions == [[], [], [], []]


def test_same_seed_gives_same_map():
    params = GenerationParams(borders=BorderFlags.TOP | BorderFlags.RIGHT)
    first = generate_map(params, random.Random(42))
    second = generate_map(params, random.Random(42))
    assert first.tiles == second.tiles
    assert first.walkable_cache == second.walkable_cache


def test_random_border_anchors_open_edges():
    params = GenerationParams(
        borders=BorderFlags.TOP | BorderFlags.RIGHT | BorderFlags.BOTTOM | BorderFlags.LEFT,
        theme=MapTheme.CHASM,
    )
    generated = generate_map(params, random.Random(5))
    top = generated.border_positions[Border.TOP]
    right = generated.border_positions[Border.RIGHT]
    assert top and all(y == 0 for _, y in top)
    assert right and all(x == GRID_WIDTH - 1 for x, _ in right)
    assert generated.border_positions[Border.BOTTOM]
    assert generated.border_positions[Border.LEFT]
    floors = _floor_positions(generated)
    for x, y in top:
        assert (x, 1) in floors


def test_predefined_border_positions_are_kept():
    params = GenerationParams(borders=BorderFlags.TOP, theme=MapTheme.WALL)
    params.predefined_borders[Border.TOP] = [(5, 0), (6, 0)]
    generated = generate_map(params, random.Random(7))
    assert generated.border_positions[Border.TOP] == [(5, 0), (6, 0)]
    assert (5, 1) in generated.walkable_cache
    assert (6, 1) in generated.walkable_cache
    assert generated.border_positions[Border.BOTTOM] == []


def test_predefined_start_is_walkable():
    params = GenerationParams(predefined_start_pos=(10, 12))
    generated = generate_map(params, random.Random(9))
    assert (10, 12) in generated.walkable_cache
    assert generated.is_walkable((10, 12))


def test_is_walkable_out_of_bounds():
    generated = generate_map(GenerationParams(), random.Random(11))
    assert generated.is_walkable((GRID_WIDTH, 0)) is False
    assert generated.is_walkable((-1, 3)) is False


def test_populate_map_places_contents():
    rng = random.Random(13)
    generated = generate_map(GenerationParams(), rng)
    available_before = len(generated.available_walkable_cache)
    populate_map(generated, [_rat()], rng)

    assert len(generated.monsters) == 1
    monster = generated.monsters[0]
    assert generated.creatures[monster.position] == monster.id
    assert monster.hp == 5

    stairs = generated.downstair_teleport
    assert stairs is not None
    assert any(isinstance(item, Teleport) for item in generated.items[stairs])

    orbs = [pos for pos, items in generated.items.items() if any(isinstance(i, Orb) for i in items)]
    assert len(orbs) == 2
    assert len(generated.available_walkable_cache) == available_before - 4


def test_add_random_monsters_without_types_raises():
    generated = GeneratedMap(
        [[TileKind.FLOOR] * GRID_HEIGHT for _ in range(GRID_WIDTH)], [(1, 1)], [(1, 1)]
    )
    with pytest.raises(ValueError):
        generated.add_random_monsters([], 1, random.Random(0))


def test_add_random_monsters_limited_by_free_positions():
    generated = GeneratedMap(
        [[TileKind.FLOOR] * GRID_HEIGHT for _ in range(GRID_WIDTH)],
        [(1, 1), (2, 2)],
        [(1, 1), (2, 2)],
    )
    generated.add_random_monsters([_rat()], 5, random.Random(0))
    assert len(generated.monsters) == 2
    assert generated.available_walkable_cache == []
    assert set(generated.creatures) == {(1, 1), (2, 2)}


def test_map_generator_produces_map_once():
    received = []
    done = threading.Event()

    def callback(assignment):
        received.append(assignment)
        done.set()

    with MapGenerator([_rat()], random.Random(17)) as generator:
        assert generator.get_map_status("center") is MapStatus.NOT_REQUESTED
        generator.start(callback)
        assert generator.request_generation("center", GenerationParams()) is True
        generated = generator.wait_for_map("center")
        assert done.wait(timeout=10)
        assert generator.get_map_status("center") is MapStatus.READY
        assert generator.request_generation("center", GenerationParams()) is False

    assert isinstance(received[0], MapAssignment)
    assert received[0].opos == "center"
    assert received[0].map is generated
    assert len(received) == 1


def test_map_generator_unknown_position_returns_none():
    with MapGenerator([_rat()]) as generator:
        generator.start(lambda assignment: None)
        assert generator.wait_for_map("nowhere") is None


def test_map_generator_reports_failure():
    with MapGenerator([], random.Random(19)) as generator:
        generator.start(lambda assignment: None)
        generator.request_generation("bad", GenerationParams())
        with pytest.raises(RuntimeError):
            generator.wait_for_map("bad")
        assert generator.get_map_status("bad") is MapStatus.NOT_REQUESTED


def test_map_generator_serves_requests_made_before_start():
    with MapGenerator([_rat()], random.Random(23)) as generator:
        generator.request_generation((0, 1, 1), GenerationParams())
        assert generator.get_map_status((0, 1, 1)) is MapStatus.REQUESTED
        generator.start(lambda assignment: None)
        generated = generator.wait_for_map((0, 1, 1))
        assert len(generated.monsters) == 1