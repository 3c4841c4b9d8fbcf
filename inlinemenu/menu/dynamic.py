"""Attach, detach and rebuild of menus whose content comes from a function."""

from __future__ import annotations

from typing import Any

import structlog

from inlinemenu.config import settings
from inlinemenu.exceptions import ConstructionError
from inlinemenu.menu.button import ButtonNode
from inlinemenu.menu.changes import Change
from inlinemenu.menu.layout import MenuLayout, coerce_layout
from inlinemenu.menu.node import MenuNode


logger = structlog.get_logger(__name__)


class DynamicMenuLifecycle:
    @staticmethod
    async def materialize(node: MenuNode) -> MenuNode:
        await node.materialize()
        return node

    @staticmethod
    def detach(node: MenuNode) -> None:
        path = node.path
        node.detach()
        logger.debug('Menu detached', menu_id=node.id, path=path)

    @staticmethod
    def attach(node: MenuNode, parent: MenuNode, button: ButtonNode | None = None) -> None:
        node.attach(parent, button)
        if button is not None and button.navigate_to != node.id:
            button.dynamic_menu_id = node.id
        logger.debug('Menu attached', menu_id=node.id, path=node.path, index=node.index)

    @classmethod
    def rebuild(cls, node: MenuNode) -> MenuNode:
        """
        Replaces a dynamic menu with a fresh instance produced by the same builder.

        The replacement keeps id, path, parent and button slot; it is registered
        at the end of the index and shares the tree's value stack. Content is
        produced lazily on its first render. A root has no slot to be replaced
        in, so it is flagged for an in-place rebuild instead.
        """
        if node.builder is None:
            raise ConstructionError(f'Menu "{node.id}" is not created by a function')

        parent = node.parent
        if parent is None:
            node.mark_change(Change.UPDATE)
            return node

        button = parent.buttons.get(node.owner_button_id) if node.owner_button_id else None
        owned_slot = button is not None and button.dynamic_menu_id == node.id

        replacement = MenuNode(node.text, node.id, builder=node.builder, extra=node.extra)
        cls.detach(node)
        replacement.attach(parent, button)
        if owned_slot:
            button.dynamic_menu_id = replacement.id

        logger.info('🔄 Dynamic menu rebuilt', menu_id=replacement.id, path=replacement.path)
        return replacement

    @classmethod
    def attach_to_button(cls, button: ButtonNode, source: Any) -> MenuNode:
        """
        Attaches a new menu as an ephemeral child owned by ``button``.

        ``source`` is a layout (model or mapping), a ready-made ``MenuNode`` or a
        builder function. A menu previously attached to the button is detached
        first, so the replacement can take over its id and path.
        """
        menu = button.menu
        previous = button.dynamic_menu
        if previous is not None:
            cls.detach(previous)

        default_id = previous.id if previous is not None else f'{menu.id}.{button.id}'

        if isinstance(source, MenuNode):
            if source.parent is not None:
                raise ConstructionError(f'Menu "{source.id}" is already attached to another menu')
            node = source
        elif callable(source):
            node = MenuNode(settings.MENU_PLACEHOLDER_TEXT, default_id, builder=source)
        else:
            layout: MenuLayout = coerce_layout(source)
            node = MenuNode(layout.text, layout.id or default_id, extra=layout.extra)
            node.populate(layout)

        node.attach(menu, button)
        button.dynamic_menu_id = node.id
        logger.debug('Menu attached to button', menu_id=node.id, path=node.path, button=button.path)
        return node
