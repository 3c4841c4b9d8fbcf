from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from inlinemenu.config import settings
from inlinemenu.menu.layout import MenuLayout, parse_layout
from inlinemenu.menu.node import MenuNode
from inlinemenu.utils.ids import generate_id


def build_menu(
    source: MenuLayout | Mapping[str, Any] | MenuNode | Callable[..., Any],
    id: str | None = None,
) -> MenuNode:
    """
    Creates a menu tree from a layout.

    The layout is validated first and only then turned into nodes, so the
    caller's layout object is never used as node storage. A callable source
    produces a dynamic root whose content is built on first render. Without
    an id in the layout or the arguments a random one is generated.
    """
    if isinstance(source, MenuNode):
        return source

    if callable(source) and not isinstance(source, (MenuLayout, Mapping)):
        return MenuNode(settings.MENU_PLACEHOLDER_TEXT, id or generate_id(), builder=source)

    layout = parse_layout(source)
    root = MenuNode(layout.text, layout.id or id or generate_id(), extra=layout.extra)
    return root.populate(layout)


inline_menu = build_menu
