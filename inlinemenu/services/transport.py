from __future__ import annotations

from abc import ABC, abstractmethod

from inlinemenu.menu.render import RenderedMenu


class MenuTransport(ABC):
    """
    What the dispatcher needs from a messaging platform.

    One transport instance is bound to one message: ``send`` posts it, the
    other methods edit or remove it.
    """

    @abstractmethod
    async def send(self, menu: RenderedMenu) -> None:
        """Posts ``menu`` as a new message."""

    @abstractmethod
    async def replace(self, menu: RenderedMenu) -> None:
        """Replaces both the text and the keyboard of the message."""

    @abstractmethod
    async def patch_keyboard(self, menu: RenderedMenu) -> None:
        """Replaces only the keyboard of the message."""

    @abstractmethod
    async def close(self, text: str | None = None) -> None:
        """Deletes the message, or replaces it with ``text`` and no keyboard."""

    @abstractmethod
    async def remove_keyboard(self) -> None:
        """Removes the keyboard and keeps the message text."""
