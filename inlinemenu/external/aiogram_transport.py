from __future__ import annotations

from typing import Any

import structlog
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import CallbackQuery, Message

from inlinemenu.keyboards.inline import build_inline_keyboard, get_empty_keyboard
from inlinemenu.menu.render import RenderedMenu
from inlinemenu.services.transport import MenuTransport


logger = structlog.get_logger(__name__)

# extra keys a menu may carry that are passed straight to the Bot API call
_SEND_OPTIONS = ('parse_mode', 'disable_web_page_preview', 'link_preview_options', 'protect_content')


def _send_kwargs(menu: RenderedMenu) -> dict[str, Any]:
    if not menu.extra:
        return {}
    return {key: value for key, value in menu.extra.items() if key in _SEND_OPTIONS}


def _is_not_modified(error: TelegramBadRequest) -> bool:
    return 'message is not modified' in str(error).lower()


class AiogramTransport(MenuTransport):
    """
    Draws menus into one Telegram message.

    Built from the message a command arrived in, ``send`` answers it with a
    new menu message which every later call then edits.
    """

    def __init__(self, message: Message, *, owned: bool = False):
        self.message = message
        self._owned = owned

    @classmethod
    def from_callback(cls, callback: CallbackQuery) -> AiogramTransport:
        if not isinstance(callback.message, Message):
            raise ValueError('Callback message is not accessible')
        return cls(callback.message, owned=True)

    async def send(self, menu: RenderedMenu) -> None:
        sent = await self.message.answer(
            menu.text,
            reply_markup=build_inline_keyboard(menu),
            **_send_kwargs(menu),
        )
        self.message = sent
        self._owned = True

    async def replace(self, menu: RenderedMenu) -> None:
        if not self._owned:
            await self.send(menu)
            return

        try:
            await self.message.edit_text(
                menu.text,
                reply_markup=build_inline_keyboard(menu),
                **_send_kwargs(menu),
            )
        except TelegramBadRequest as error:
            if not _is_not_modified(error):
                raise
            logger.debug('Menu message already up to date', path=menu.path)

    async def patch_keyboard(self, menu: RenderedMenu) -> None:
        try:
            await self.message.edit_reply_markup(reply_markup=build_inline_keyboard(menu))
        except TelegramBadRequest as error:
            if not _is_not_modified(error):
                raise
            logger.debug('Menu keyboard already up to date', path=menu.path)

    async def close(self, text: str | None = None) -> None:
        if text:
            await self.message.edit_text(text, reply_markup=get_empty_keyboard())
            return

        try:
            await self.message.delete()
        except TelegramBadRequest as error:
            logger.warning('⚠️ Failed to delete menu message', error=error)
            await self.remove_keyboard()

    async def remove_keyboard(self) -> None:
        try:
            await self.message.edit_reply_markup(reply_markup=None)
        except TelegramBadRequest as error:
            if not _is_not_modified(error):
                raise
