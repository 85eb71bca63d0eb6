"""Monster kinds and the monsters that roam the maps."""

from __future__ import annotations

import itertools
import json
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from os import PathLike
from pathlib import Path
from typing import Any, Callable, ClassVar

from .navigator import Position


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_uint(value: Any) -> bool:
    return _is_int(value) and value >= 0


def _is_glyph(value: Any) -> bool:
    return isinstance(value, str) and len(value) == 1


def _is_rgb(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) == 3
        and all(_is_int(c) and 0 <= c <= 255 for c in value)
    )


def _get(data: Mapping[str, Any], key: str, check: Callable[[Any], bool], expected: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    value = data[key]
    if not check(value):
        raise ValueError(f"field {key!r} must be {expected}, got {value!r}")
    return value


@dataclass
class MonsterType:
    """A kind of monster as described in the monster data file."""

    id: int
    name: str
    glyph: str
    color: tuple[int, int, int]
    max_hp: int
    melee_damage: int
    script: str | None = None
    scripted: bool = False

    script_functions: ClassVar[tuple[str, ...]] = ("on_update", "on_death")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MonsterType:
        if not isinstance(data, Mapping):
            raise ValueError(f"expected an object, got {type(data).__name__}")
        script = data.get("script")
        if script is not None and not isinstance(script, str):
            raise ValueError(f"field 'script' must be a string or null, got {script!r}")
        scripted = data.get("scripted", False)
        if not isinstance(scripted, bool):
            raise ValueError(f"field 'scripted' must be a boolean, got {scripted!r}")
        return cls(
            id=_get(data, "id", _is_uint, "a non-negative integer"),
            name=_get(data, "name", lambda v: isinstance(v, str), "a string"),
            glyph=_get(data, "glyph", _is_glyph, "a single character"),
            color=tuple(_get(data, "color", _is_rgb, "three integers from 0 to 255")),
            max_hp=_get(data, "max_hp", _is_uint, "a non-negative integer"),
            melee_damage=_get(data, "melee_damage", _is_int, "an integer"),
            script=script,
            scripted=scripted,
        )

    def rgba(self) -> tuple[int, int, int, int]:
        """The colour with full opacity."""
        r, g, b = self.color
        return (r, g, b, 255)

    @property
    def script_id(self) -> int:
        return self.id

    @property
    def script_path(self) -> str | None:
        return self.script

    @property
    def is_scripted(self) -> bool:
        return self.scripted


def load_monster_types(path: str | PathLike[str]) -> list[MonsterType]:
    """Read a JSON list of monster kinds."""
    entries = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(entries, list):
        raise ValueError("monster data must be a list")
    return [MonsterType.from_dict(entry) for entry in entries]


_id_lock = threading.Lock()
_ids = itertools.count(1)


def _next_monster_id() -> int:
    with _id_lock:
        return next(_ids)


@dataclass
class Monster:
    """A living monster; each gets a process-wide unique id on creation."""

    position: Position
    kind: MonsterType
    hp: int = field(init=False)
    id: int = field(init=False)

    def __post_init__(self) -> None:
        self.hp = self.kind.max_hp
        self.id = _next_monster_id()

    @property
    def name(self) -> str:
        return self.kind.name

    @property
    def is_alive(self) -> bool:
        return self.hp > 0

    def add_health(self, amount: int) -> None:
        """Change hit points, clamped to the range 0..max_hp."""
        self.hp = min(max(self.hp + amount, 0), self.kind.max_hp)

    def get_health(self) -> tuple[int, int]:
        return (self.hp, self.kind.max_hp)