import sys
from pathlib import Path


ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import pytest

from inlinemenu.menu.render import RenderedMenu
from inlinemenu.services.transport import MenuTransport


class FakeTransport(MenuTransport):
    """Records every call instead of talking to a messaging platform."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    async def send(self, menu: RenderedMenu) -> None:
        self.calls.append(('send', menu))

    async def replace(self, menu: RenderedMenu) -> None:
        self.calls.append(('replace', menu))

    async def patch_keyboard(self, menu: RenderedMenu) -> None:
        self.calls.append(('patch_keyboard', menu))

    async def close(self, text: str | None = None) -> None:
        self.calls.append(('close', text))

    async def remove_keyboard(self) -> None:
        self.calls.append(('remove_keyboard', None))

    @property
    def kinds(self) -> list[str]:
        return [kind for kind, _ in self.calls]

    @property
    def last(self) -> object:
        return self.calls[-1][1]


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()
