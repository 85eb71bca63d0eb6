"""Item data: containers, orbs, teleports and holdable equipment."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, ClassVar, Union


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_uint(value: Any) -> bool:
    return _is_int(value) and value >= 0


def _is_str(value: Any) -> bool:
    return isinstance(value, str)


def _is_uint_list(value: Any) -> bool:
    return isinstance(value, list) and all(_is_uint(v) for v in value)


def _is_list_of_lists(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(v, list) for v in value)


def _require_mapping(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"expected an object, got {type(data).__name__}")
    return data


def _get(data: Mapping[str, Any], key: str, check: Callable[[Any], bool], expected: str) -> Any:
    if key not in data:
        raise ValueError(f"missing field {key!r}")
    value = data[key]
    if not check(value):
        raise ValueError(f"field {key!r} must be {expected}, got {value!r}")
    return value


@dataclass
class BaseItemData:
    """Identity shared by every item."""

    id: int
    name: str
    description: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BaseItemData:
        data = _require_mapping(data)
        return cls(
            id=_get(data, "id", _is_uint, "a non-negative integer"),
            name=_get(data, "name", _is_str, "a string"),
            description=_get(data, "description", _is_str, "a string"),
        )


@dataclass
class Orb:
    """An orb lying on the floor; picking it up grants a skill point."""


@dataclass
class Teleport:
    """A staircase leading to the next floor."""


def _generic_container_data() -> BaseItemData:
    return BaseItemData(0, "Generic Container", "A container to hold items.")


@dataclass
class Container:
    """A chest holding item ids."""

    base_item: BaseItemData = field(default_factory=_generic_container_data)
    items: list[int] = field(default_factory=list)

    def add_item(self, item_id: int) -> None:
        self.items.append(item_id)

    def remove_item(self, item_id: int) -> int | None:
        """Remove the first occurrence of ``item_id``; return it, or None if absent."""
        try:
            self.items.remove(item_id)
        except ValueError:
            return None
        return item_id


class HoldableGroupKind(Enum):
    WEAPONS = "weapons"
    ARMOR = "armor"
    SHIELDS = "shields"
    HELMETS = "helmets"
    BOOTS = "boots"

    @property
    def item_label(self) -> str:
        """Singular word for one item of this group."""
        return {
            HoldableGroupKind.WEAPONS: "weapon",
            HoldableGroupKind.ARMOR: "armor",
            HoldableGroupKind.SHIELDS: "shield",
            HoldableGroupKind.HELMETS: "helmet",
            HoldableGroupKind.BOOTS: "boots",
        }[self]


@dataclass
class BaseHoldableItemData:
    """Fields common to all equipment."""

    base_item: BaseItemData
    item_class: str
    modifier: int
    attribute_modifier: str
    required: list[list[Any]]
    slot: str
    script: str | None = None
    scripted: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> BaseHoldableItemData:
        data = _require_mapping(data)
        script = data.get("script")
        if script is not None and not isinstance(script, str):
            raise ValueError(f"field 'script' must be a string or null, got {script!r}")
        scripted = data.get("scripted", False)
        if not isinstance(scripted, bool):
            raise ValueError(f"field 'scripted' must be a boolean, got {scripted!r}")
        return cls(
            base_item=BaseItemData.from_dict(data),
            item_class=_get(data, "class", _is_str, "a string"),
            modifier=_get(data, "modifier", _is_int, "an integer"),
            attribute_modifier=_get(data, "attribute_modifier", _is_str, "a string"),
            required=[list(r) for r in _get(data, "required", _is_list_of_lists, "a list of lists")],
            slot=_get(data, "slot", _is_str, "a string"),
            script=script,
            scripted=scripted,
        )


@dataclass
class _Holdable:
    base_holdable: BaseHoldableItemData

    kind: ClassVar[HoldableGroupKind]
    script_functions: ClassVar[tuple[str, ...]] = ()

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]):
        return cls(BaseHoldableItemData.from_dict(data))

    @property
    def id(self) -> int:
        return self.base_holdable.base_item.id

    @property
    def name(self) -> str:
        return self.base_holdable.base_item.name

    @property
    def script_id(self) -> int:
        return self.base_holdable.base_item.id

    @property
    def script_path(self) -> str | None:
        return self.base_holdable.script

    @property
    def is_scripted(self) -> bool:
        return self.base_holdable.scripted


@dataclass
class Weapon(_Holdable):
    attack_dice: list[int] = field(default_factory=list)
    two_handed: bool = False

    kind: ClassVar[HoldableGroupKind] = HoldableGroupKind.WEAPONS
    script_functions: ClassVar[tuple[str, ...]] = ("on_get_attack_damage",)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Weapon:
        data = _require_mapping(data)
        base = BaseHoldableItemData.from_dict(data)
        return cls(
            base,
            attack_dice=list(_get(data, "attack_dice", _is_uint_list, "a list of non-negative integers")),
            two_handed=_get(data, "two-handed", lambda v: isinstance(v, bool), "a boolean"),
        )


@dataclass
class Armor(_Holdable):
    defense_dice: list[int] = field(default_factory=list)

    kind: ClassVar[HoldableGroupKind] = HoldableGroupKind.ARMOR

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Armor:
        data = _require_mapping(data)
        base = BaseHoldableItemData.from_dict(data)
        return cls(
            base,
            defense_dice=list(_get(data, "defense_dice", _is_uint_list, "a list of non-negative integers")),
        )


@dataclass
class Shield(_Holdable):
    kind: ClassVar[HoldableGroupKind] = HoldableGroupKind.SHIELDS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Shield:
        return cls(BaseHoldableItemData.from_dict(data))


@dataclass
class Helmet(_Holdable):
    kind: ClassVar[HoldableGroupKind] = HoldableGroupKind.HELMETS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Helmet:
        return cls(BaseHoldableItemData.from_dict(data))


@dataclass
class Boots(_Holdable):
    kind: ClassVar[HoldableGroupKind] = HoldableGroupKind.BOOTS

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Boots:
        return cls(BaseHoldableItemData.from_dict(data))


Item = Union[Weapon, Armor, Shield, Helmet, Boots]
ItemKind = Union[Orb, Teleport, HoldableGroupKind, Container]

_GROUP_LAYOUT: tuple[tuple[HoldableGroupKind, type[_Holdable]], ...] = (
    (HoldableGroupKind.WEAPONS, Weapon),
    (HoldableGroupKind.ARMOR, Armor),
    (HoldableGroupKind.SHIELDS, Shield),
    (HoldableGroupKind.HELMETS, Helmet),
    (HoldableGroupKind.BOOTS, Boots),
)


def parse_holdable_group(data: Any) -> tuple[HoldableGroupKind, list[Item]]:
    """Parse one group object such as ``{"weapons": [...]}``.

    Group shapes are tried in a fixed order; the first that fits wins.
    """
    data = _require_mapping(data)
    for kind, item_type in _GROUP_LAYOUT:
        entries = data.get(kind.value)
        if not isinstance(entries, list):
            continue
        try:
            return kind, [item_type.from_dict(entry) for entry in entries]
        except ValueError:
            continue
    raise ValueError("data did not match any holdable item group")