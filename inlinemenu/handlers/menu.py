import structlog
from aiogram import Dispatcher, F, types
from aiogram.types import InaccessibleMessage

from inlinemenu.external.aiogram_transport import AiogramTransport
from inlinemenu.menu.node import MenuNode
from inlinemenu.middlewares.context_binding import ContextVarsMiddleware
from inlinemenu.middlewares.logging import LoggingMiddleware
from inlinemenu.services.dispatcher.service import CallbackDispatcher


logger = structlog.get_logger(__name__)


async def handle_menu_callback(callback: types.CallbackQuery, menu_dispatcher: CallbackDispatcher):
    # messages older than 48 hours can no longer be edited
    if callback.message is None or isinstance(callback.message, InaccessibleMessage):
        logger.debug('Menu message is not accessible', event_data=callback.data)
        await callback.answer()
        return

    transport = AiogramTransport.from_callback(callback)
    try:
        await menu_dispatcher.dispatch(callback.data, transport, callback)
    finally:
        await callback.answer()


async def show_menu(message: types.Message, menu: MenuNode, menu_dispatcher: CallbackDispatcher) -> AiogramTransport:
    """Answers ``message`` with ``menu`` and returns the transport bound to the new message."""
    transport = AiogramTransport(message)
    await menu_dispatcher.show(menu, transport)
    return transport


def register_handlers(dp: Dispatcher, menu_dispatcher: CallbackDispatcher | None = None) -> CallbackDispatcher:
    menu_dispatcher = menu_dispatcher or CallbackDispatcher()
    dp['menu_dispatcher'] = menu_dispatcher

    dp.callback_query.outer_middleware(ContextVarsMiddleware())
    dp.callback_query.middleware(LoggingMiddleware())

    dp.callback_query.register(handle_menu_callback, F.data.startswith('/'))
    return menu_dispatcher
