"""Property state that is either a constant or computed at render time."""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar


T = TypeVar('T')


@dataclass(frozen=True, slots=True)
class Constant(Generic[T]):
    value: T

    @property
    def is_pure(self) -> bool:
        return True

    async def evaluate(self) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Computed(Generic[T]):
    func: Callable[[], T | Awaitable[T]]

    @property
    def is_pure(self) -> bool:
        return False

    async def evaluate(self) -> T:
        result = self.func()
        if inspect.isawaitable(result):
            result = await result
        return result


def as_state(value: Any) -> Constant[Any] | Computed[Any]:
    if isinstance(value, (Constant, Computed)):
        return value
    if callable(value):
        return Computed(value)
    return Constant(value)
