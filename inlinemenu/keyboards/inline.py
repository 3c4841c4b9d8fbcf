from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from inlinemenu.menu.render import RenderedButton, RenderedMenu


def _to_inline_button(button: RenderedButton) -> InlineKeyboardButton:
    if button.url is not None:
        return InlineKeyboardButton(text=button.text, url=button.url)
    return InlineKeyboardButton(text=button.text, callback_data=button.callback_data)


def build_inline_keyboard(menu: RenderedMenu) -> InlineKeyboardMarkup:
    """Hidden buttons are left out; rows that end up empty are dropped."""
    keyboard: list[list[InlineKeyboardButton]] = []
    for row in menu.rows:
        buttons = [_to_inline_button(button) for button in row if not button.hidden]
        if buttons:
            keyboard.append(buttons)

    return InlineKeyboardMarkup(inline_keyboard=keyboard)


def get_empty_keyboard() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[])
