from .context_binding import ContextVarsMiddleware
from .logging import LoggingMiddleware


__all__ = ['ContextVarsMiddleware', 'LoggingMiddleware']
