# rogueworld

This package holds the world model for a tile-based roguelike: the data and
rules for items, monsters, movement, sight and level generation. It uses only
the standard library.

## Modules

- **`rogueworld.items`** holds the item types. `Orb` and `Teleport` are floor
  items. `Container` is a chest that holds item ids and has `add_item` and
  `remove_item`. The equipment classes are `Weapon`, `Armor`, `Shield`,
  `Helmet` and `Boots`. Each one wraps a `BaseHoldableItemData` and is read
  from a JSON object with `from_dict`; a field that is missing or has the
  wrong type raises `ValueError`. `parse_holdable_group` reads one group
  object, such as `{"weapons": [...]}`, and returns its `HoldableGroupKind`
  and its items.
- **`rogueworld.collection`** has `ItemCollection`, an ordered list of
  equipment. It reads the list of groups from a JSON file with
  `load_holdable_items(path)`, or from data that is already parsed with
  `load_holdable_groups(groups)`, and looks items up with `find(item_id)`.
  You may pass it a `script_loader` callable. The collection calls it for
  every item that names a script, and its result sets the item's `scripted`
  flag. If the loader raises, the error is printed to stderr and loading
  goes on.
- **`rogueworld.monsters`** has `MonsterType`, which is read with `from_dict`
  or from a JSON list with `load_monster_types(path)`. It also has `Monster`.
  Every monster gets a unique id when it is created and starts at its type's
  `max_hp`. `add_health` keeps hit points between 0 and that maximum.
- **`rogueworld.navigator`** works on a 33×33 grid (`GRID_WIDTH`,
  `GRID_HEIGHT`) whose positions are `(x, y)` tuples. `find_path` is an
  eight-way A* search in which diagonal steps cost 14 and straight steps
  cost 10. It returns the path with both ends included, or `None` if there is
  no path. `compute_fov` is recursive shadow casting. It returns the set of
  visible cells that are not opaque, and it always includes the origin.
- **`rogueworld.map_generator`** builds levels. `generate_map(params, rng)`
  carves floor out of chasm or wall with random walks and joins the walks with
  jagged paths. It opens the border exits chosen by `GenerationParams.borders`
  (`BorderFlags`); if `predefined_borders` is set, those exits are placed at
  the given positions. `populate_map` adds one random monster, a downstairs
  teleport and two orbs. `MapGenerator` generates maps on a background thread,
  one request per position. You query it with `get_map_status` and
  `wait_for_map`. If a generation fails, `wait_for_map` raises `RuntimeError`.
- **`rogueworld.overworld`** handles floors made of 5×5 grids of maps,
  addressed by `OverworldPos(floor, x, y)`. `Overworld` keeps the maps the
  player has entered, each one a separate copy made by `add_map`.
  `OverworldGenerator` starts generating the centre map of floor 0 as soon as
  it is created. When that map is ready, it requests the maps next to it and
  the centre map of the floor below. Each new map takes its exits from the
  edges of the neighbours that already exist. Call `close()` to stop it, or
  use it as a context manager.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Example

```python
import random

from rogueworld.map_generator import BorderFlags, GenerationParams, MapTheme, generate_map
from rogueworld.navigator import find_path

params = GenerationParams(
    borders=BorderFlags.TOP | BorderFlags.LEFT,
    theme=MapTheme.CHASM,
)
world = generate_map(params, random.Random(7))

start, goal = world.walkable_cache[0], world.walkable_cache[-1]
path = find_path(start, goal, world.is_walkable)
print(len(path) if path else "unreachable")
```

## What it does not do

This is not a playable game. There is no window or rendering, no keyboard or
mouse input, no game loop, no player character and no combat. The package
also has no scripting engine. Item and monster scripts are only recorded by
path, and any loading of them goes through a `script_loader` callable that
you supply.