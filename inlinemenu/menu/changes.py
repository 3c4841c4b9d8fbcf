"""Change flags recorded per menu and per button since their last render."""

from enum import IntFlag


class Change(IntFlag):
    """What changed on a node since it was last rendered.

    On a button the flags name the property that changed. On a menu ``TEXT``
    is the message text and ``LAYOUT`` is set whenever any of its buttons
    changed, so a message edit and a keyboard-only patch can be told apart.
    """

    NONE = 0
    TEXT = 1 << 0
    VISIBILITY = 1 << 1
    LAYOUT = 1 << 2
    # never rendered
    DRAW = 1 << 3
    # dynamic content has to be recomputed before deciding what changed
    UPDATE = 1 << 4


class ChangeTracker:
    change_flags: Change = Change.NONE

    @property
    def is_changed(self) -> bool:
        return self.change_flags != Change.NONE

    def has_change(self, change: Change) -> bool:
        return (self.change_flags & change) == change

    def has_any_change(self, *changes: Change) -> bool:
        return any(self.has_change(change) for change in changes)

    def has_changes(self, *changes: Change) -> bool:
        combined = Change.NONE
        for change in changes:
            combined |= change
        return self.has_change(combined)

    def mark_change(self, change: Change) -> None:
        self.change_flags |= change

    def clear_changes(self) -> None:
        self.change_flags = Change.NONE
