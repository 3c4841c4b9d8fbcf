from __future__ import annotations

import posixpath
import weakref
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import structlog

from inlinemenu.exceptions import ConstructionError, SelfNavigationError
from inlinemenu.menu.changes import Change, ChangeTracker
from inlinemenu.menu.render import RenderedButton
from inlinemenu.menu.state import Computed, Constant, as_state
from inlinemenu.utils.ids import generate_id, validate_id


if TYPE_CHECKING:
    from inlinemenu.menu.node import MenuNode


logger = structlog.get_logger(__name__)


class ButtonNode(ChangeTracker):
    """
    One button of a menu.

    Every setter returns the button, so it doubles as a fluent builder:
    ``menu.add_button('Refresh').on_press(refresh).set_full(True).end()``.
    A button with a URL never reaches the dispatcher. Without an action or
    a navigation target the press is forwarded to the missing-action hook.
    """

    def __init__(self, menu: MenuNode, text: str, id: str | None = None):
        if not isinstance(text, str) or not text.strip():
            raise ConstructionError('The text of the button was empty')

        self.id = validate_id(id, 'button') if id is not None else generate_id()
        self._menu = weakref.ref(menu)
        self._text = text.strip()
        self._hidden: Constant[bool] | Computed[bool] = Constant(False)
        self._full: Constant[bool] | Computed[bool] = Constant(False)
        self._hidden_value = False
        self._full_value = False
        self.url: str | None = None
        self.action: Callable[..., Any] | None = None
        self.navigate_to: str | int | None = None
        self.dynamic_menu_id: str | None = None
        self.is_pure = True
        self.last_render: RenderedButton | None = None
        self.change_flags = Change.NONE
        self._url_conflict_reported = False

    @property
    def menu(self) -> MenuNode:
        menu = self._menu()
        if menu is None:
            raise ConstructionError(f'Button "{self.id}" outlived its menu')
        return menu

    @property
    def path(self) -> str:
        return f'{self.menu.path}{self.id}'

    @property
    def dynamic_menu(self) -> MenuNode | None:
        if self.dynamic_menu_id is None:
            return None
        return self.menu.registry.by_id.get(self.dynamic_menu_id)

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

    @property
    def hidden(self) -> bool:
        return self._hidden_value

    @hidden.setter
    def hidden(self, to: bool | Callable[[], Any]) -> None:
        self.set_hidden(to)

    @property
    def full(self) -> bool:
        return self._full_value

    @full.setter
    def full(self, to: bool | Callable[[], Any]) -> None:
        self.set_full(to)

    @property
    def hidden_state(self) -> Constant[bool] | Computed[bool]:
        return self._hidden

    @property
    def full_state(self) -> Constant[bool] | Computed[bool]:
        return self._full

    def mark_change(self, change: Change) -> None:
        super().mark_change(change)
        menu = self._menu()
        if menu is not None:
            menu.mark_change(Change.LAYOUT)

    def set_text(self, text: str) -> ButtonNode:
        self.text = text
        return self

    def set_hidden(self, to: bool | Callable[[], Any]) -> ButtonNode:
        state = as_state(to)
        if isinstance(state, Computed):
            self._hidden = state
            self._mark_impure()
            self.mark_change(Change.VISIBILITY)
            return self

        value = bool(state.value)
        if isinstance(self._hidden, Constant) and self._hidden.value == value:
            return self

        self._hidden = Constant(value)
        if value != self._hidden_value:
            self._hidden_value = value
            self.mark_change(Change.VISIBILITY)
        return self

    def set_full(self, to: bool | Callable[[], Any]) -> ButtonNode:
        state = as_state(to)
        if isinstance(state, Computed):
            self._full = state
            self._mark_impure()
            self.mark_change(Change.LAYOUT)
            return self

        value = bool(state.value)
        if isinstance(self._full, Constant) and self._full.value == value:
            return self

        self._full = Constant(value)
        if value != self._full_value:
            self._full_value = value
            self.mark_change(Change.LAYOUT)
        return self

    def set_url(self, url: str) -> ButtonNode:
        url = (url or '').strip()
        if not url:
            raise ConstructionError(f'The url of button "{self.id}" was empty')
        self.url = url
        return self

    def on_press(self, func: Callable[..., Any]) -> ButtonNode:
        if not callable(func):
            raise ConstructionError(f'The action of button "{self.id}" is not callable')
        self.action = func
        return self

    def set_navigate(self, target: str | int) -> ButtonNode:
        """Makes the button navigate to a menu given by path, relative path, id or index."""
        if isinstance(target, bool) or not isinstance(target, (str, int)):
            raise ConstructionError('Invalid parameter type for navigation button')

        if isinstance(target, str):
            target = target.strip()
            if not target:
                raise ConstructionError('The navigation target was empty')
            self._reject_self_navigation(target)

        self.navigate_to = target
        return self

    def end(self) -> MenuNode:
        return self.menu

    async def render(self) -> RenderedButton:
        if self.is_pure and not self.is_changed and self.last_render is not None:
            return self.last_render

        if isinstance(self._full, Computed):
            value = bool(await self._full.evaluate())
            if value != self._full_value:
                self._full_value = value
                self.mark_change(Change.LAYOUT)

        if isinstance(self._hidden, Computed):
            value = bool(await self._hidden.evaluate())
            if value != self._hidden_value:
                self._hidden_value = value
                self.mark_change(Change.VISIBILITY)

        if self.url is not None:
            if (self.action is not None or self.navigate_to is not None) and not self._url_conflict_reported:
                self._url_conflict_reported = True
                logger.warning('Button has both url and action, url wins', path=self.path)

            rendered = RenderedButton(
                id=self.id,
                text=self._text,
                hidden=self._hidden_value,
                full=self._full_value,
                url=self.url,
            )
        else:
            rendered = RenderedButton(
                id=self.id,
                text=self._text,
                hidden=self._hidden_value,
                full=self._full_value,
                callback_data=self.path,
            )

        self.last_render = rendered
        self.clear_changes()
        return rendered

    def _mark_impure(self) -> None:
        self.is_pure = False
        menu = self._menu()
        if menu is not None:
            menu.mark_impure()

    def _reject_self_navigation(self, target: str) -> None:
        menu = self.menu
        if target.startswith('.'):
            resolved = posixpath.normpath(posixpath.join(menu.path, target)).rstrip('/') + '/'
            if resolved == menu.path:
                raise SelfNavigationError(
                    f'It is not possible to create navigation button for the same menu ({self.path})', target
                )
        elif target in (menu.id, menu.path, menu.path.rstrip('/')):
            raise SelfNavigationError(
                f'It is not possible to create navigation button for the same menu ({self.path})', target
            )

    def __repr__(self) -> str:
        return f'ButtonNode(id={self.id!r}, text={self._text!r})'
