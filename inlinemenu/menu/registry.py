from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from inlinemenu.exceptions import ConstructionError
from inlinemenu.menu.values import ValueStack


if TYPE_CHECKING:
    from inlinemenu.menu.node import MenuNode


class TreeRegistry:
    """
    Indices shared by every node of one menu tree.

    The registry owns node storage for the tree: parents and children refer
    to each other through ids looked up here. ``by_id``, ``by_path`` and
    ``by_index`` always describe the same set of nodes, and
    ``by_index[node.index] is node`` holds for each of them.
    """

    def __init__(self, values: ValueStack | None = None) -> None:
        self.by_id: dict[str, MenuNode] = {}
        self.by_path: dict[str, MenuNode] = {}
        self.by_index: list[MenuNode] = []
        self.values = values if values is not None else ValueStack()
        self.active: MenuNode | None = None
        # one in-flight dispatch per tree
        self.lock = asyncio.Lock()

    @property
    def size(self) -> int:
        return len(self.by_index)

    @property
    def last_index(self) -> int:
        return len(self.by_index) - 1

    def add(self, node: MenuNode) -> None:
        if node.id in self.by_id:
            raise ConstructionError(f'Menu with id "{node.id}" is previously defined')

        path = node.path
        if path in self.by_path:
            raise ConstructionError(f'Menu with path "{path}" is previously defined')

        self.by_id[node.id] = node
        self.by_path[path] = node
        node.index = len(self.by_index)
        self.by_index.append(node)

    def remove(self, node: MenuNode) -> bool:
        if self.by_id.get(node.id) is not node:
            return False

        del self.by_id[node.id]
        for path, candidate in list(self.by_path.items()):
            if candidate is node:
                del self.by_path[path]

        position = self.by_index.index(node)
        del self.by_index[position]
        for index in range(position, len(self.by_index)):
            self.by_index[index].index = index

        if self.active is node:
            self.active = None

        return True

    def get_by_index(self, index: int) -> MenuNode | None:
        if 0 <= index < len(self.by_index):
            return self.by_index[index]
        return None

    def clear(self) -> None:
        self.by_id.clear()
        self.by_path.clear()
        self.by_index.clear()
        self.values.clear()
        self.active = None

    def __contains__(self, node: object) -> bool:
        return any(candidate is node for candidate in self.by_index)

    def __len__(self) -> int:
        return len(self.by_index)
