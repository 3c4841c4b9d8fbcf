from .inline import build_inline_keyboard, get_empty_keyboard


__all__ = ['build_inline_keyboard', 'get_empty_keyboard']
