from __future__ import annotations

import inspect
import posixpath
from collections.abc import Callable, Iterator, Mapping
from typing import Any

import structlog

from inlinemenu.config import settings
from inlinemenu.exceptions import ConstructionError, SelfNavigationError
from inlinemenu.menu.button import ButtonNode
from inlinemenu.menu.changes import Change, ChangeTracker
from inlinemenu.menu.layout import ButtonLayout, MenuLayout, SubMenuLayout, coerce_layout
from inlinemenu.menu.registry import TreeRegistry
from inlinemenu.menu.render import RenderedButton, RenderedMenu
from inlinemenu.menu.state import Computed
from inlinemenu.menu.values import ValueStack
from inlinemenu.utils.ids import generate_id, validate_id


logger = structlog.get_logger(__name__)

MenuBuilderFunc = Callable[[ValueStack], Any]


def normalize_path(path: str) -> str:
    path = path.strip()
    if not path.startswith('/'):
        path = f'/{path}'
    if not path.endswith('/'):
        path += '/'
    return path


def resolve_relative_path(base: str, relative: str) -> str:
    return normalize_path(posixpath.normpath(posixpath.join(base, relative)))


class MenuNode(ChangeTracker):
    """
    One screen: a message text plus an ordered mapping of buttons.

    A node created without a parent is the root of a new tree and owns a
    fresh ``TreeRegistry``; child nodes share the registry of their root.
    Parent and children are kept as id handles resolved through that
    registry, so replacing a node with a new instance under the same id keeps
    every link intact.
    """

    def __init__(
        self,
        text: str,
        id: str | None = None,
        *,
        parent: MenuNode | None = None,
        builder: MenuBuilderFunc | None = None,
        extra: Mapping[str, Any] | None = None,
    ):
        if not isinstance(text, str):
            raise ConstructionError('The type of the menu text was not a string')
        text = text.strip()
        if not text:
            raise ConstructionError('The text of the menu was empty')

        self.id = validate_id(id) if id is not None else generate_id()
        self._text = text
        self.buttons: dict[str, ButtonNode] = {}
        self.builder = builder
        self.extra: dict[str, Any] | None = dict(extra) if extra else None
        self.is_pure = True
        self.index = 0
        self.owner_button_id: str | None = None
        self.last_render: RenderedMenu | None = None
        self.change_flags = Change.DRAW
        self._needs_content = builder is not None
        self._parent_id: str | None = None
        self._children: list[str] = []
        self._path: str | None = None

        if parent is None:
            self._registry = TreeRegistry()
            self._registry.add(self)
        else:
            self._registry = parent._registry
            self._parent_id = parent.id
            try:
                self._registry.add(self)
            except ConstructionError:
                self._parent_id = None
                raise
            parent._children.append(self.id)

    # -- tree ---------------------------------------------------------------

    @property
    def registry(self) -> TreeRegistry:
        return self._registry

    @property
    def values(self) -> ValueStack:
        return self._registry.values

    @property
    def parent(self) -> MenuNode | None:
        if self._parent_id is None:
            return None
        return self._registry.by_id.get(self._parent_id)

    @property
    def children(self) -> list[MenuNode]:
        by_id = self._registry.by_id
        return [by_id[child_id] for child_id in self._children if child_id in by_id]

    @property
    def root(self) -> MenuNode:
        target = self
        while target.parent is not None:
            target = target.parent
        return target

    @property
    def path(self) -> str:
        if self._path is None:
            parent = self.parent
            self._path = f'{parent.path if parent else "/"}{self.id}/'
        return self._path

    @property
    def last_menu_index(self) -> int:
        return self._registry.last_index

    @property
    def is_dynamic(self) -> bool:
        return self.builder is not None

    @property
    def text(self) -> str:
        return self._text

    @text.setter
    def text(self, to: str) -> None:
        if not isinstance(to, str):
            return
        to = to.strip()
        if not to or to == self._text:
            return

        self._text = to
        self.mark_change(Change.TEXT)

    def walk(self) -> Iterator[MenuNode]:
        """Yields this node and its descendants, parents before children."""
        yield self
        for child in self.children:
            yield from child.walk()

    def mark_impure(self) -> None:
        target: MenuNode | None = self
        while target is not None:
            target.is_pure = False
            target = target.parent

    def get_child_by_path(self, path: str) -> MenuNode | None:
        path = normalize_path(path)
        if path == '/':
            return self.root
        return self._registry.by_path.get(path)

    def get_child_with_index(self, index: int) -> MenuNode | None:
        return self._registry.get_by_index(index)

    def get_button_by_path(self, path: str) -> ButtonNode | None:
        separator = path.rfind('/')
        if separator < 0:
            return None

        menu = self.get_child_by_path(path[: separator + 1])
        if menu is None:
            return None
        return menu.buttons.get(path[separator + 1 :])

    # -- construction -------------------------------------------------------

    def add_button(self, text: str, id: str | None = None) -> ButtonNode:
        button = ButtonNode(self, text, id)
        if button.id in self.buttons:
            raise ConstructionError(f'Button with id "{button.id}" is previously defined in menu "{self.path}"')

        self.buttons[button.id] = button
        self.mark_change(Change.LAYOUT)
        return button

    def add_submenu(
        self,
        text: str,
        button_text: str | None = None,
        id: str | None = None,
        button_id: str | None = None,
        full: bool | Callable[[], Any] = False,
        hidden: bool | Callable[[], Any] = False,
        *,
        extra: Mapping[str, Any] | None = None,
    ) -> MenuNode:
        """Creates a child menu and a button in this menu that opens it."""
        button_text = button_text if button_text is not None else text
        if not isinstance(button_text, str) or not button_text.strip():
            raise ConstructionError('The text of the button text was empty')

        button_id = validate_id(button_id, 'button') if button_id is not None else generate_id()
        if button_id in self.buttons:
            raise ConstructionError(f'Button with id "{button_id}" is previously defined in menu "{self.path}"')

        child = MenuNode(text, id, parent=self, extra=extra)
        child.owner_button_id = button_id

        button = self.add_button(button_text, button_id)
        button.navigate_to = child.id
        button.set_full(full).set_hidden(hidden)
        return child

    def add_dynamic_submenu(
        self,
        button_text: str,
        builder: MenuBuilderFunc,
        id: str | None = None,
        button_id: str | None = None,
        full: bool | Callable[[], Any] = False,
        hidden: bool | Callable[[], Any] = False,
    ) -> MenuNode:
        """Like ``add_submenu`` but the child content is produced by ``builder``.

        The builder receives the tree's value stack and is called the first
        time the child is rendered.
        """
        if not callable(builder):
            raise ConstructionError('The builder of a dynamic menu must be callable')

        button_id = validate_id(button_id, 'button') if button_id is not None else generate_id()
        child = self.add_submenu(
            settings.MENU_PLACEHOLDER_TEXT,
            button_text,
            id if id is not None else f'{self.id}.{button_id}',
            button_id,
            full,
            hidden,
        )
        child.builder = builder
        child._needs_content = True
        return child

    def add_navigation_button(self, text: str, target: str | int, id: str | None = None) -> ButtonNode:
        button = self.add_button(text, id)
        try:
            button.set_navigate(target)
        except (ConstructionError, SelfNavigationError):
            del self.buttons[button.id]
            raise
        return button

    def end(self) -> MenuNode:
        return self.parent or self

    def end_menu(self) -> MenuNode:
        return self.end()

    def set_extra(self, extra: Mapping[str, Any] | None) -> MenuNode:
        """Sets transport options of the message, e.g. ``{'parse_mode': 'HTML'}``."""
        extra = dict(extra) if extra else None
        if extra is not None:
            extra.pop('reply_markup', None)
        self.extra = extra
        return self

    def populate(self, layout: MenuLayout) -> MenuNode:
        for key, entry in layout.buttons.items():
            if isinstance(entry, str):
                self.add_button(entry, key)
            elif isinstance(entry, SubMenuLayout):
                child_id = entry.id or key
                child = self.add_submenu(
                    entry.text,
                    entry.button_text or entry.text,
                    child_id,
                    entry.button_id or f'nav.{self.id}.{child_id}',
                    entry.full,
                    entry.hidden,
                    extra=entry.extra,
                )
                child.populate(entry)
            else:
                self._add_button_from_layout(key, entry)

        return self

    def _add_button_from_layout(self, key: str, entry: ButtonLayout) -> None:
        if entry.menu is not None:
            self.add_dynamic_submenu(entry.text, entry.menu, entry.menu_id, key, entry.full, entry.hidden)
            return

        if entry.navigate is not None:
            button = self.add_navigation_button(entry.text, entry.navigate, key)
        else:
            button = self.add_button(entry.text, key)

        button.set_full(entry.full).set_hidden(entry.hidden)
        if entry.url is not None:
            button.set_url(entry.url)
        if entry.on_press is not None and entry.navigate is None:
            button.on_press(entry.on_press)

    def to_layout(self) -> MenuLayout:
        """Snapshot of this node as a declarative layout (ephemeral children excluded)."""
        children = {child.owner_button_id: child for child in self.children if child.owner_button_id}
        buttons: dict[str, Any] = {}

        for button in self.buttons.values():
            hidden = _state_value(button.hidden_state)
            full = _state_value(button.full_state)
            child = children.get(button.id)

            if child is not None and button.navigate_to == child.id:
                if child.builder is not None:
                    buttons[button.id] = ButtonLayout(
                        text=button.text, menu=child.builder, menu_id=child.id, full=full, hidden=hidden
                    )
                else:
                    sub = child.to_layout()
                    buttons[button.id] = SubMenuLayout(
                        id=child.id,
                        text=sub.text,
                        extra=sub.extra,
                        buttons=sub.buttons,
                        button_text=button.text,
                        button_id=button.id,
                        full=full,
                        hidden=hidden,
                    )
                continue

            buttons[button.id] = ButtonLayout(
                text=button.text,
                url=button.url,
                navigate=button.navigate_to,
                on_press=button.action,
                full=full,
                hidden=hidden,
            )

        return MenuLayout(id=self.id, text=self._text, extra=self.extra, buttons=buttons)

    # -- rendering ----------------------------------------------------------

    async def render(self, soft: bool = False) -> RenderedMenu:
        """Builds the rows of this menu.

        With ``soft`` the change flags and the cached render are left as they
        were, which is how the acting menu is handed to a button action.
        """
        if not self.is_changed and self.last_render is not None and self.is_pure:
            return self.last_render

        if self.builder is not None and (self._needs_content or self.has_change(Change.UPDATE)):
            await self.materialize()

        rows: list[tuple[RenderedButton, ...]] = []
        current_row: list[RenderedButton] = []
        for button in list(self.buttons.values()):
            item = await button.render()
            if item.full:
                if current_row:
                    rows.append(tuple(current_row))
                    current_row = []
                rows.append((item,))
            else:
                current_row.append(item)

        if current_row:
            rows.append(tuple(current_row))

        menu = RenderedMenu(
            id=self.id,
            path=self.path,
            index=self.index,
            text=self._text,
            rows=tuple(rows),
            is_pure=self.is_pure,
            extra=self.extra,
        )

        if not soft:
            self.last_render = menu
            self.clear_changes()

        return menu

    # -- dynamic content ----------------------------------------------------

    async def materialize(self) -> None:
        """Runs the builder and replaces text and buttons in place."""
        if self.builder is None:
            return

        result = self.builder(self.values)
        if inspect.isawaitable(result):
            result = await result

        self.replace_content(coerce_layout(result))
        self._needs_content = False
        self.change_flags &= ~Change.UPDATE
        logger.debug('Dynamic menu content built', path=self.path, buttons=len(self.buttons))

    def replace_content(self, layout: MenuLayout) -> None:
        for child in self.children:
            child.detach()

        self.buttons = {}
        self.text = layout.text
        if layout.extra is not None:
            self.set_extra(layout.extra)
        self.populate(layout)
        self.mark_change(Change.LAYOUT)

    # -- attach / detach ----------------------------------------------------

    def detach(self) -> None:
        """
        Removes this node and its subtree from the tree.

        Id, path and index registrations are dropped, later indices shift down
        by one, the owning button slot is released. The detached subtree gets
        a private registry of its own. Detaching a root disposes the tree and
        clears its value stack.
        """
        registry = self._registry
        parent = self.parent

        if parent is None:
            registry.clear()
            return

        subtree = list(self.walk())
        for node in reversed(subtree):
            registry.remove(node)

        if self.id in parent._children:
            parent._children.remove(self.id)
        for button in parent.buttons.values():
            if button.dynamic_menu_id == self.id:
                button.dynamic_menu_id = None

        self._parent_id = None
        self.owner_button_id = None
        self._rehome(subtree, TreeRegistry())

    def attach(self, parent: MenuNode, button: ButtonNode | None = None) -> None:
        """Registers this node and its subtree under ``parent``, sharing its registry and value stack."""
        if self._parent_id is not None:
            raise ConstructionError(f'Menu "{self.id}" is already attached to "{self._parent_id}"')

        subtree = list(self.walk())
        target = parent._registry
        for node in subtree:
            if node.id in target.by_id:
                raise ConstructionError(f'Menu with id "{node.id}" is previously defined')

        self._parent_id = parent.id
        self._rehome(subtree, target)
        parent._children.append(self.id)

        if button is not None:
            self.owner_button_id = button.id
        if not self.is_pure:
            parent.mark_impure()

    def _rehome(self, subtree: list[MenuNode], registry: TreeRegistry) -> None:
        for node in subtree:
            node._registry = registry
            node._path = None
        for node in subtree:
            registry.add(node)

    def __repr__(self) -> str:
        return f'MenuNode(id={self.id!r}, path={self._path or self.id!r}, index={self.index})'


def _state_value(state: Any) -> Any:
    if isinstance(state, Computed):
        return state.func
    return state.value
