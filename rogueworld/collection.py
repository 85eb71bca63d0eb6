"""The catalogue of holdable items loaded from JSON."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable, Iterator
from os import PathLike
from pathlib import Path
from typing import Any

from .items import HoldableGroupKind, Item, parse_holdable_group

ScriptLoader = Callable[[Item], bool]


class ItemCollection:
    """Ordered list of every known holdable item.

    ``script_loader`` is called for each item that names a script; its
    return value becomes the item's ``scripted`` flag. A loader that raises
    leaves the item unscripted and reports the error on stderr.
    """

    def __init__(self, script_loader: ScriptLoader | None = None) -> None:
        self.items: list[Item] = []
        self._script_loader = script_loader

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def load_holdable_items(self, path: str | PathLike[str]) -> None:
        groups = json.loads(Path(path).read_text(encoding="utf-8"))
        self.load_holdable_groups(groups)

    def load_holdable_groups(self, groups: Any) -> None:
        if not isinstance(groups, list):
            raise ValueError("holdable item data must be a list of groups")
        parsed = [parse_holdable_group(group) for group in groups]
        for kind, entries in parsed:
            for item in entries:
                if item.script_path is not None:
                    self._load_script(kind, item)
                self.items.append(item)

    def find(self, item_id: int) -> Item | None:
        return next((item for item in self.items if item.id == item_id), None)

    def _load_script(self, kind: HoldableGroupKind, item: Item) -> None:
        if self._script_loader is None:
            return
        try:
            loaded = self._script_loader(item)
        except Exception as exc:  # a broken script must not stop loading
            print(f"Error loading {kind.item_label} script: {exc}", file=sys.stderr)
            return
        item.base_holdable.scripted = bool(loaded)