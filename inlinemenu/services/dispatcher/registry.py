from __future__ import annotations

import weakref
from collections.abc import Iterator
from typing import Any

import structlog

from inlinemenu.menu.dynamic import DynamicMenuLifecycle
from inlinemenu.menu.node import MenuNode


logger = structlog.get_logger(__name__)


class MenuRegistry:
    """
    Registered menu trees by root id.

    Incoming events are routed through this registry and cross-tree
    navigation looks trees up here. The registry lives as long as whoever
    created it; ``bind_keeper`` additionally ties the registrations to an
    external object without keeping that object alive.
    """

    def __init__(self) -> None:
        self._trees: dict[str, MenuNode] = {}
        self._keeper_finalizer: weakref.finalize | None = None

    def register(self, tree: MenuNode) -> MenuNode:
        root = tree.root
        previous = self._trees.get(root.id)
        if previous is not None and previous is not root:
            logger.warning('Menu tree replaced in registry', tree_id=root.id)

        self._trees[root.id] = root
        return root

    def unregister(self, id_or_tree: str | MenuNode) -> bool:
        tree_id = id_or_tree.root.id if isinstance(id_or_tree, MenuNode) else id_or_tree
        if tree_id not in self._trees:
            return False

        del self._trees[tree_id]
        logger.debug('Menu tree unregistered', tree_id=tree_id)
        return True

    def lookup_by_id(self, tree_id: str) -> MenuNode | None:
        return self._trees.get(tree_id)

    def dispose(self, tree: MenuNode) -> None:
        """Unregisters a tree and detaches its root, clearing its value stack."""
        root = tree.root
        registered = self._trees.get(root.id)
        if registered is root:
            del self._trees[root.id]
        DynamicMenuLifecycle.detach(root)

    def clear(self) -> None:
        self._trees.clear()

    def bind_keeper(self, keeper: Any) -> None:
        """Clears all registrations once ``keeper`` is garbage collected."""
        if self._keeper_finalizer is not None:
            self._keeper_finalizer.detach()
        self._keeper_finalizer = weakref.finalize(keeper, self.clear)

    def __contains__(self, tree_id: object) -> bool:
        return tree_id in self._trees

    def __iter__(self) -> Iterator[MenuNode]:
        return iter(list(self._trees.values()))

    def __len__(self) -> int:
        return len(self._trees)
