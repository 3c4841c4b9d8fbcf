"""Rendered snapshots of menus and the decision of how to present them."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True, slots=True)
class RenderedButton:
    id: str
    text: str
    hidden: bool = False
    full: bool = False
    url: str | None = None
    # opaque action reference: the button path
    callback_data: str | None = None


Rows = tuple[tuple[RenderedButton, ...], ...]


@dataclass(frozen=True, slots=True)
class RenderedMenu:
    id: str
    path: str
    index: int
    text: str
    rows: Rows
    is_pure: bool = True
    extra: Mapping[str, Any] | None = field(default=None, compare=False, hash=False)

    def iter_buttons(self) -> Iterator[RenderedButton]:
        for row in self.rows:
            yield from row

    def find(self, button_id: str) -> RenderedButton | None:
        for button in self.iter_buttons():
            if button.id == button_id:
                return button
        return None


class RenderAction(str, Enum):
    REPLACE = 'replace'
    PATCH_KEYBOARD = 'patch_keyboard'
    CLOSE = 'close'
    NONE = 'none'


class KeyboardChangeKind(str, Enum):
    ADDED = 'added'
    REMOVED = 'removed'
    MOVED = 'moved'
    CHANGED = 'changed'


@dataclass(frozen=True, slots=True)
class KeyboardChange:
    kind: KeyboardChangeKind
    button_id: str
    field: str | None = None


def _positions(rows: Rows) -> dict[str, tuple[int, int, RenderedButton]]:
    return {
        button.id: (row_index, column, button)
        for row_index, row in enumerate(rows)
        for column, button in enumerate(row)
    }


def diff_keyboards(old_rows: Rows, new_rows: Rows) -> list[KeyboardChange]:
    """Structural diff of two keyboards: row shape plus id, text, hidden and url per button."""
    old = _positions(old_rows)
    new = _positions(new_rows)
    changes: list[KeyboardChange] = []

    for button_id in old:
        if button_id not in new:
            changes.append(KeyboardChange(KeyboardChangeKind.REMOVED, button_id))

    for button_id, (row, column, button) in new.items():
        previous = old.get(button_id)
        if previous is None:
            changes.append(KeyboardChange(KeyboardChangeKind.ADDED, button_id))
            continue

        previous_row, previous_column, previous_button = previous
        if (previous_row, previous_column) != (row, column):
            changes.append(KeyboardChange(KeyboardChangeKind.MOVED, button_id))

        for name in ('text', 'hidden', 'url'):
            if getattr(previous_button, name) != getattr(button, name):
                changes.append(KeyboardChange(KeyboardChangeKind.CHANGED, button_id, name))

    return changes


def decide_render(
    previous: RenderedMenu | None,
    current: RenderedMenu,
    *,
    needs_draw: bool = False,
    is_active: bool = True,
) -> RenderAction:
    if previous is None or needs_draw or not is_active:
        return RenderAction.REPLACE

    if previous.text != current.text:
        return RenderAction.REPLACE

    if diff_keyboards(previous.rows, current.rows):
        return RenderAction.PATCH_KEYBOARD

    return RenderAction.NONE
