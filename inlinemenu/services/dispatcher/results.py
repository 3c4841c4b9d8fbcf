"""Results a button action may return, as objects or plain mappings."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator
from pydantic.alias_generators import to_camel


logger = structlog.get_logger(__name__)


def _is_flag(value: Any) -> bool:
    return isinstance(value, bool) or callable(value)


def _is_target(value: Any) -> bool:
    return isinstance(value, (str, int)) and not isinstance(value, bool)


_RESULT_KEY_CHECKS: dict[str, Callable[[Any], bool]] = {
    'text': lambda value: isinstance(value, str),
    'hidden': _is_flag,
    'hide': _is_flag,
    'full': _is_flag,
    'message': lambda value: isinstance(value, str),
    'navigate': _is_target,
    'close': lambda value: isinstance(value, bool),
    'close_with': lambda value: isinstance(value, str),
    'closeWith': lambda value: isinstance(value, str),
    'update': lambda value: isinstance(value, bool),
    'menu': lambda value: value is not None,
    'value': lambda value: True,
}


class ActionResult(BaseModel):
    """
    What should happen after a button was pressed.

    ``text``, ``hidden`` and ``full`` update the pressed button, ``message``
    the text of its menu. At most one of ``navigate``, ``close`` /
    ``close_with``, ``menu`` and ``update`` is honored, in that order.
    ``value`` is pushed onto the value stack under the button id.
    """

    model_config = ConfigDict(
        frozen=True,
        extra='ignore',
        populate_by_name=True,
        alias_generator=to_camel,
        arbitrary_types_allowed=True,
    )

    text: str | None = None
    hidden: bool | Callable[..., Any] | None = None
    full: bool | Callable[..., Any] | None = None
    message: str | None = None
    navigate: str | int | None = None
    close: bool = False
    close_with: str | None = None
    update: bool = False
    menu: Any = None
    value: Any = None

    @field_validator('text', 'message', 'close_with')
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip()

    @property
    def has_value(self) -> bool:
        return 'value' in self.model_fields_set

    @classmethod
    def coerce(cls, value: Any) -> ActionResult | None:
        """Returns an ``ActionResult`` for result-like values, ``None`` for anything else."""
        if isinstance(value, cls):
            return value
        if not is_result_like(value):
            return None

        data = dict(value)
        if 'hide' in data and 'hidden' not in data:
            data['hidden'] = data.pop('hide')

        try:
            return cls.model_validate(data)
        except ValidationError as error:
            logger.warning('Malformed button action result ignored', error=str(error))
            return None


def is_result_like(value: Any) -> bool:
    if isinstance(value, ActionResult):
        return True
    if not isinstance(value, Mapping):
        return False

    for key, check in _RESULT_KEY_CHECKS.items():
        if key in value and check(value[key]):
            return True
    return False
