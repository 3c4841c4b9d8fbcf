from .aiogram_transport import AiogramTransport


__all__ = ['AiogramTransport']
