import secrets

from inlinemenu.config import settings
from inlinemenu.exceptions import ConstructionError


def generate_id(length: int | None = None) -> str:
    """Returns a random url-safe id of ``length`` characters."""
    size = length or settings.MENU_ID_LENGTH
    return secrets.token_urlsafe(size)[:size]


def validate_id(value: object, kind: str = 'menu') -> str:
    """Trims an id and rejects empty ids and ids that would break paths."""
    if not isinstance(value, str):
        raise ConstructionError(f'The {kind} id must be a string, got {type(value).__name__}')

    value = value.strip()
    if not value:
        raise ConstructionError(f'The {kind} id was empty')
    if '/' in value:
        raise ConstructionError(f'The {kind} id must not contain "/": {value!r}')
    if value.startswith('.'):
        raise ConstructionError(f'The {kind} id must not start with ".": {value!r}')

    return value
