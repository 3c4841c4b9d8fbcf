from collections.abc import Awaitable, Callable
from time import monotonic
from typing import Any

import structlog
from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message, TelegramObject

from inlinemenu.config import settings


logger = structlog.get_logger(__name__)


class LoggingMiddleware(BaseMiddleware):
    async def __call__(
        self,
        handler: Callable[[TelegramObject, dict[str, Any]], Awaitable[Any]],
        event: TelegramObject,
        data: dict[str, Any],
    ) -> Any:
        start_time = monotonic()

        try:
            if isinstance(event, Message) and event.from_user:
                user_info = f'@{event.from_user.username}' if event.from_user.username else f'ID:{event.from_user.id}'
                logger.info('📩 Message', user_info=user_info, text=event.text or event.caption or '[media]')

            elif isinstance(event, CallbackQuery) and event.from_user:
                user_info = f'@{event.from_user.username}' if event.from_user.username else f'ID:{event.from_user.id}'
                logger.info('🔘 Menu callback', user_info=user_info, event_data=event.data)

            result = await handler(event, data)

            execution_time = monotonic() - start_time
            if execution_time > settings.MENU_SLOW_DISPATCH_SECONDS:
                logger.warning('⏱️ Slow menu operation', execution_time=round(execution_time, 2))

            return result

        except Exception as e:
            execution_time = monotonic() - start_time
            logger.exception('❌ Failed to handle event', execution_time=round(execution_time, 2), error=e)
            raise
