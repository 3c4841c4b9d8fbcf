from .builder import build_menu, inline_menu
from .button import ButtonNode
from .changes import Change, ChangeTracker
from .dynamic import DynamicMenuLifecycle
from .layout import ButtonLayout, MenuLayout, SubMenuLayout, coerce_layout, parse_layout
from .node import MenuNode, normalize_path, resolve_relative_path
from .registry import TreeRegistry
from .render import (
    KeyboardChange,
    KeyboardChangeKind,
    RenderAction,
    RenderedButton,
    RenderedMenu,
    decide_render,
    diff_keyboards,
)
from .resolver import PathResolver
from .state import Computed, Constant, as_state
from .values import ValueStack


__all__ = [
    'ButtonLayout',
    'ButtonNode',
    'Change',
    'ChangeTracker',
    'Computed',
    'Constant',
    'DynamicMenuLifecycle',
    'KeyboardChange',
    'KeyboardChangeKind',
    'MenuLayout',
    'MenuNode',
    'PathResolver',
    'RenderAction',
    'RenderedButton',
    'RenderedMenu',
    'SubMenuLayout',
    'TreeRegistry',
    'ValueStack',
    'as_state',
    'build_menu',
    'coerce_layout',
    'decide_render',
    'diff_keyboards',
    'inline_menu',
    'normalize_path',
    'parse_layout',
    'resolve_relative_path',
]
