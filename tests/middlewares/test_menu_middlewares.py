from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog
from aiogram.types import CallbackQuery

from inlinemenu.middlewares import ContextVarsMiddleware, LoggingMiddleware
from inlinemenu.middlewares.context_binding import menu_log_context


def _callback(data: str = '/main/a') -> MagicMock:
    callback = MagicMock(spec=CallbackQuery)
    callback.from_user = SimpleNamespace(id=42, username='alice')
    callback.message = SimpleNamespace(chat=SimpleNamespace(id=-100))
    callback.data = data
    return callback


async def test_context_binding_for_menu_callbacks():
    seen = {}

    async def handler(event, data):
        seen.update(structlog.contextvars.get_contextvars())
        return 'ok'

    result = await ContextVarsMiddleware()(handler, _callback(), {})

    assert result == 'ok'
    assert seen == {
        'user_id': 42,
        'username': 'alice',
        'chat_id': -100,
        'menu_tree': 'main',
        'menu_path': '/main/',
        'menu_button': 'a',
    }
    assert 'menu_path' not in structlog.contextvars.get_contextvars()


async def test_context_binding_skips_other_events():
    seen = {}

    async def handler(event, data):
        seen.update(structlog.contextvars.get_contextvars())
        return 'ok'

    message = SimpleNamespace(from_user=SimpleNamespace(id=42, username='alice'), chat=SimpleNamespace(id=-100))

    assert await ContextVarsMiddleware()(handler, message, {}) == 'ok'
    assert seen == {}


@pytest.mark.parametrize(
    ('callback_data', 'expected'),
    [
        ('/main/sub/ok', {'menu_tree': 'main', 'menu_path': '/main/sub/', 'menu_button': 'ok'}),
        ('/main', {}),
        ('/main/', {}),
        ('buy_tariff', {}),
        (None, {}),
    ],
)
def test_menu_log_context(callback_data, expected):
    assert menu_log_context(callback_data) == expected


async def test_logging_middleware_passes_result_through():
    handler = AsyncMock(return_value='done')

    result = await LoggingMiddleware()(handler, _callback(), {'key': 'value'})

    assert result == 'done'
    handler.assert_awaited_once()


async def test_logging_middleware_reraises_errors():
    handler = AsyncMock(side_effect=RuntimeError('boom'))

    with pytest.raises(RuntimeError):
        await LoggingMiddleware()(handler, _callback(), {})
