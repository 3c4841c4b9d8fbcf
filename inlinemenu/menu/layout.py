"""Pydantic schemas for declarative menu layouts."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Annotated, Any, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, ValidationError
from pydantic.alias_generators import to_camel

from inlinemenu.exceptions import ConstructionError


Flag = bool | Callable[..., Any]


class _LayoutModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra='forbid',
        populate_by_name=True,
        alias_generator=to_camel,
        str_strip_whitespace=True,
    )


class ButtonLayout(_LayoutModel):
    """A single button: a label with an action, a link or a navigation target."""

    text: str = Field(..., min_length=1)
    url: str | None = None
    navigate: str | int | None = None
    on_press: Callable[..., Any] | None = None
    # builder of a dynamic submenu opened by this button
    menu: Callable[..., Any] | None = None
    menu_id: str | None = None
    full: Flag = False
    hidden: Flag = False


def _button_entry_kind(value: Any) -> str:
    if isinstance(value, str):
        return 'label'
    if isinstance(value, Mapping):
        return 'menu' if 'buttons' in value else 'button'
    if isinstance(value, MenuLayout):
        return 'menu'
    return 'button'


ButtonEntry = Annotated[
    Union[
        Annotated[Annotated[str, Field(min_length=1)], Tag('label')],
        Annotated[ButtonLayout, Tag('button')],
        Annotated['SubMenuLayout', Tag('menu')],
    ],
    Discriminator(_button_entry_kind),
]


class MenuLayout(_LayoutModel):
    """A menu: message text plus buttons keyed by id in render order."""

    id: str | None = None
    text: str = Field(..., min_length=1)
    extra: dict[str, Any] | None = None
    buttons: dict[str, ButtonEntry] = Field(default_factory=dict)


class SubMenuLayout(MenuLayout):
    """A nested menu together with the button that opens it."""

    button_text: str | None = None
    button_id: str | None = None
    full: Flag = False
    hidden: Flag = False


MenuLayout.model_rebuild()
SubMenuLayout.model_rebuild()


def parse_layout(source: MenuLayout | Mapping[str, Any]) -> MenuLayout:
    if isinstance(source, MenuLayout):
        return source

    if not isinstance(source, Mapping):
        raise ConstructionError(f'Unexpected type of menu source: "{type(source).__name__}"')

    try:
        return MenuLayout.model_validate(dict(source))
    except ValidationError as error:
        raise ConstructionError(f'Invalid menu layout: {error}') from error


def coerce_layout(source: Any) -> MenuLayout:
    """Turns whatever a dynamic menu builder returned into a layout."""
    if isinstance(source, MenuLayout):
        return source
    if isinstance(source, Mapping):
        return parse_layout(source)

    to_layout = getattr(source, 'to_layout', None)
    if callable(to_layout):
        return to_layout()

    raise ConstructionError(f'Built menu was not a layout object or menu node: {type(source).__name__}')
