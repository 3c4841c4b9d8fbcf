from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, TelegramObject
from structlog.contextvars import bound_contextvars


def menu_log_context(callback_data: str | None) -> dict[str, str]:
    """Splits a button path such as ``/main/sub/ok`` into tree, menu and button."""
    if not callback_data or not callback_data.startswith('/'):
        return {}

    menu_path, _, button_id = callback_data.rpartition('/')
    tree_id = callback_data[1:].split('/', 1)[0]
    if not menu_path or not tree_id or not button_id:
        return {}

    return {'menu_tree': tree_id, 'menu_path': f'{menu_path}/', 'menu_button': button_id}


class ContextVarsMiddleware(BaseMiddleware):
    """Binds the pressing user, the chat and the pressed menu button for every log line of a callback."""

    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        if not isinstance(event, CallbackQuery):
            return await handler(event, data)

        ctx: dict[str, Any] = menu_log_context(event.data)
        if event.from_user:
            ctx['user_id'] = event.from_user.id
            ctx['username'] = event.from_user.username or ''
        if event.message is not None:
            ctx['chat_id'] = event.message.chat.id

        with bound_contextvars(**ctx):
            return await handler(event, data)
