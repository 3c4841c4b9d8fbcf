from inlinemenu.keyboards import build_inline_keyboard, get_empty_keyboard
from inlinemenu.menu import MenuNode


async def test_hidden_buttons_and_empty_rows_are_dropped():
    main = MenuNode('Main', 'main')
    main.add_button('A', 'a')
    main.add_button('Hidden', 'hidden').set_full(True).set_hidden(True)
    main.add_button('Site', 'site').set_url('https://example.com')

    keyboard = build_inline_keyboard(await main.render())

    assert len(keyboard.inline_keyboard) == 2
    assert keyboard.inline_keyboard[0][0].text == 'A'
    assert keyboard.inline_keyboard[0][0].callback_data == '/main/a'
    assert keyboard.inline_keyboard[1][0].url == 'https://example.com'
    assert keyboard.inline_keyboard[1][0].callback_data is None


def test_empty_keyboard():
    assert get_empty_keyboard().inline_keyboard == []
