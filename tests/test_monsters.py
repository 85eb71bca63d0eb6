import json

import pytest

from rogueworld.monsters import Monster, MonsterType, load_monster_types


def _goblin_data(**overrides):
    data = {
        "id": 7,
        "name": "Goblin",
        "glyph": "g",
        "color": [10, 200, 30],
        "max_hp": 12,
        "melee_damage": 3,
        "script": None,
    }
    data.update(overrides)
    return data


def test_from_dict_reads_all_fields():
    kind = MonsterType.from_dict(_goblin_data(script="scripts/goblin.lua"))
    assert kind.id == 7
    assert kind.name == "Goblin"
    assert kind.glyph == "g"
    assert kind.color == (10, 200, 30)
    assert kind.max_hp == 12
    assert kind.melee_damage == 3
    assert kind.script_path == "scripts/goblin.lua"
    assert kind.scripted is False


def test_script_identity_and_functions():
    kind = MonsterType.from_dict(_goblin_data(scripted=True))
    assert kind.script_id == 7
    assert kind.is_scripted is True
    assert kind.script_functions == ("on_update", "on_death")


def test_rgba_is_opaque():
    kind = MonsterType.from_dict(_goblin_data())
    assert kind.rgba() == (10, 200, 30, 255)


@pytest.mark.parametrize("key", ["id", "name", "glyph", "color", "max_hp", "melee_damage"])
def test_missing_field_raises(key):
    data = _goblin_data()
    del data[key]
    with pytest.raises(ValueError):
        MonsterType.from_dict(data)


@pytest.mark.parametrize(
    "overrides",
    [
        {"glyph": "gg"},
        {"color": [1, 2]},
        {"color": [1, 2, 300]},
        {"max_hp": -1},
        {"id": "seven"},
        {"script": 5},
        {"scripted": "yes"},
    ],
)
def test_invalid_field_raises(overrides):
    with pytest.raises(ValueError):
        MonsterType.from_dict(_goblin_data(**overrides))


def test_from_dict_rejects_non_object():
    with pytest.raises(ValueError):
        MonsterType.from_dict(["not", "an", "object"])


def test_load_monster_types(tmp_path):
    path = tmp_path / "monsters.json"
    path.write_text(json.dumps([_goblin_data(), _goblin_data(id=8, name="Orc")]), encoding="utf-8")
    kinds = load_monster_types(path)
    assert [k.id for k in kinds] == [7, 8]
    assert [k.name for k in kinds] == ["Goblin", "Orc"]


def test_load_monster_types_requires_list(tmp_path):
    path = tmp_path / "monsters.json"
    path.write_text(json.dumps(_goblin_data()), encoding="utf-8")
    with pytest.raises(ValueError):
        load_monster_types(path)


def test_new_monster_starts_at_full_health():
    kind = MonsterType.from_dict(_goblin_data())
    monster = Monster((4, 5), kind)
    assert monster.get_health() == (12, 12)
    assert monster.position == (4, 5)
    assert monster.name == "Goblin"
    assert monster.is_alive


def test_monster_ids_are_unique_and_increasing():
    kind = MonsterType.from_dict(_goblin_data())
    first = Monster((1, 1), kind)
    second = Monster((2, 2), kind)
    third = Monster((3, 3), kind)
    assert first.id < second.id < third.id


def test_add_health_clamps_to_zero():
    monster = Monster((1, 1), MonsterType.from_dict(_goblin_data()))
    monster.add_health(-1000)
    assert monster.get_health() == (0, 12)
    assert not monster.is_alive


def test_add_health_clamps_to_max():
    monster = Monster((1, 1), MonsterType.from_dict(_goblin_data()))
    monster.add_health(-5)
    assert monster.hp == 7
    monster.add_health(1000)
    assert monster.hp == 12