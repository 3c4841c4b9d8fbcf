from inlinemenu.exceptions import (
    ConstructionError,
    MenuError,
    NavigationError,
    SelfNavigationError,
    SequenceProtocolError,
)
from inlinemenu.menu import (
    ButtonNode,
    Change,
    MenuLayout,
    MenuNode,
    RenderAction,
    RenderedMenu,
    ValueStack,
    build_menu,
    inline_menu,
)
from inlinemenu.services.dispatcher import (
    ActionResult,
    ButtonPress,
    CallbackDispatcher,
    DispatchResult,
    MenuRegistry,
    StepSequence,
)
from inlinemenu.services.transport import MenuTransport


__version__ = '0.1.0'

__all__ = [
    'ActionResult',
    'ButtonNode',
    'ButtonPress',
    'CallbackDispatcher',
    'Change',
    'ConstructionError',
    'DispatchResult',
    'MenuError',
    'MenuLayout',
    'MenuNode',
    'MenuRegistry',
    'MenuTransport',
    'NavigationError',
    'RenderAction',
    'RenderedMenu',
    'SelfNavigationError',
    'SequenceProtocolError',
    'StepSequence',
    'ValueStack',
    'build_menu',
    'inline_menu',
]
