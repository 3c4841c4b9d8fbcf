from __future__ import annotations

from typing import Protocol

from inlinemenu.exceptions import NavigationError, SelfNavigationError
from inlinemenu.menu.node import MenuNode, normalize_path, resolve_relative_path


class TreeLookup(Protocol):
    def lookup_by_id(self, tree_id: str) -> MenuNode | None: ...


class PathResolver:
    """
    Resolves navigation targets against the node a button lives in.

    Targets are absolute paths (``/main/sub/``), relative paths (``./x``,
    ``../y``), symbolic ids, or signed indices. Paths and ids that are not
    found in the current tree are looked up in other registered trees, with
    the leading path segment taken as the id of that tree's root.
    """

    def __init__(self, trees: TreeLookup | None = None):
        self._trees = trees

    def resolve(self, target: str | int | MenuNode, current: MenuNode) -> MenuNode:
        node = self._find(target, current)
        if node is current:
            raise SelfNavigationError(
                f'It is not possible to navigate from menu "{current.path}" to itself', _describe(target)
            )
        return node

    def _find(self, target: str | int | MenuNode, current: MenuNode) -> MenuNode:
        if isinstance(target, MenuNode):
            return target

        if isinstance(target, bool):
            raise NavigationError('Invalid navigation target type: bool', target)

        if isinstance(target, int):
            return self.resolve_index(target, current)

        if not isinstance(target, str) or not target.strip():
            raise NavigationError(f'Invalid navigation target: {target!r}')

        target = target.strip()
        if target.startswith('.'):
            return self.resolve_path(resolve_relative_path(current.path, target), current)

        if '/' in target:
            return self.resolve_path(target, current)

        return self.resolve_id(target, current)

    def resolve_index(self, index: int, current: MenuNode) -> MenuNode:
        """
        Absolute creation-order index, or a negative index relative to the
        highest index of the tree at the time of the call.

        A negative index wraps modulo the highest index, so in a tree of four
        menus ``-1`` is index 2 and ``-3`` is the root.
        """
        registry = current.registry
        last_index = registry.last_index
        position = index

        if index < 0:
            if last_index <= 0 or index < -last_index:
                raise NavigationError(
                    f'Given menu index was out of range: {index}, menu count: {registry.size}', index
                )
            position = index % last_index

        node = registry.get_by_index(position)
        if node is None:
            raise NavigationError(f'Given menu index was out of range: {index}, menu count: {registry.size}', index)

        return node

    def resolve_path(self, path: str, current: MenuNode) -> MenuNode:
        path = normalize_path(path)
        if path == '/':
            return current.root

        node = current.registry.by_path.get(path)
        if node is not None:
            return node

        tree_id = path.strip('/').split('/', 1)[0]
        tree = self._lookup_tree(tree_id)
        if tree is not None and tree.registry is not current.registry:
            node = tree.registry.by_path.get(path)
            if node is not None:
                return node

        raise NavigationError(f'Menu by path is not found: "{path}"', path)

    def resolve_id(self, menu_id: str, current: MenuNode) -> MenuNode:
        node = current.registry.by_id.get(menu_id)
        if node is not None:
            return node

        tree = self._lookup_tree(menu_id)
        if tree is not None:
            return tree

        raise NavigationError(f'Menu with id "{menu_id}" is not found', menu_id)

    def _lookup_tree(self, tree_id: str) -> MenuNode | None:
        if self._trees is None:
            return None
        return self._trees.lookup_by_id(tree_id)


def _describe(target: str | int | MenuNode) -> str | int:
    if isinstance(target, MenuNode):
        return target.path
    return target
