class MenuError(Exception):
    """Base exception of the menu engine."""


class ConstructionError(MenuError):
    """Raised synchronously while building a menu tree.

    Duplicate ids, empty text, invalid ids and malformed layouts end up here.
    """


class NavigationError(MenuError):
    """A path, id or index did not resolve to a menu node."""

    def __init__(self, message: str, target: str | int | None = None):
        self.message = message
        self.target = target
        super().__init__(self.message)


class SelfNavigationError(NavigationError):
    """A menu node was asked to navigate to itself."""


class SequenceProtocolError(MenuError):
    """A multi-step action yielded a value nobody could handle in strict mode."""

    def __init__(self, value: object):
        self.value = value
        super().__init__(f'Unexpected value yielded from a multi-step action: ({type(value).__name__}) {value!r}')
