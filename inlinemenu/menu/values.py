from __future__ import annotations

from collections.abc import Iterator
from typing import Any


class ValueStack:
    """
    Ordered record of the values returned by button actions.

    One slot per button id that contributed a value: pushing again from the
    same button replaces the value in its slot. A stack belongs to one tree
    and is shared by reference with every dynamically attached descendant,
    so menus built later can read earlier choices by key or by position.
    """

    __slots__ = ('_keys', '_values')

    def __init__(self) -> None:
        self._keys: list[str] = []
        self._values: dict[str, Any] = {}

    def push(self, key: str, value: Any) -> int:
        """Stores ``value`` under ``key`` and returns the stack length."""
        if key not in self._values:
            self._keys.append(key)
        self._values[key] = value
        return len(self._keys)

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def keys(self) -> list[str]:
        return list(self._keys)

    def items(self) -> list[tuple[str, Any]]:
        return [(key, self._values[key]) for key in self._keys]

    def as_dict(self) -> dict[str, Any]:
        return dict(self.items())

    def clear(self) -> None:
        self._keys.clear()
        self._values.clear()

    def __getitem__(self, item: int | str) -> Any:
        if isinstance(item, int):
            return self._values[self._keys[item]]
        return self._values[item]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[Any]:
        return (self._values[key] for key in self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __repr__(self) -> str:
        return f'ValueStack({self.as_dict()!r})'
