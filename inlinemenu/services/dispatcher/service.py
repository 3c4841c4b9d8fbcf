from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from time import monotonic
from typing import Any

import structlog

from inlinemenu.config import settings
from inlinemenu.exceptions import SequenceProtocolError
from inlinemenu.menu.button import ButtonNode
from inlinemenu.menu.changes import Change
from inlinemenu.menu.dynamic import DynamicMenuLifecycle
from inlinemenu.menu.node import MenuNode
from inlinemenu.menu.render import RenderAction, RenderedMenu, decide_render
from inlinemenu.menu.resolver import PathResolver
from inlinemenu.menu.values import ValueStack
from inlinemenu.services.dispatcher.registry import MenuRegistry
from inlinemenu.services.dispatcher.results import ActionResult
from inlinemenu.services.dispatcher.sequence import StepKind, StepSequence, as_sequence, is_sequence
from inlinemenu.services.transport import MenuTransport


logger = structlog.get_logger(__name__)

MissingActionHandler = Callable[[str, str, Any], Any]
ApplyCallback = Callable[[Any], Awaitable[bool]]
StepHandler = Callable[[Any, Any, ApplyCallback], Any]
SequenceHandler = Callable[[Any, StepSequence, ApplyCallback], Any]
ErrorHandler = Callable[[Exception], Any]
UnhandledHandler = Callable[[str, Any], Any]


class DispatchState(str, Enum):
    IDLE = 'idle'
    RESOLVING = 'resolving'
    EXECUTING = 'executing'
    APPLYING = 'applying'


@dataclass(slots=True)
class ButtonPress:
    """Everything a button action gets to see about the press."""

    event: Any
    button: ButtonNode
    node: MenuNode
    menu: RenderedMenu
    values: ValueStack

    @property
    def button_id(self) -> str:
        return self.button.id

    @property
    def button_text(self) -> str:
        return self.button.text

    @property
    def path(self) -> str:
        return self.button.path


@dataclass(slots=True)
class DispatchResult:
    path: str
    button_id: str
    values: ValueStack
    value: Any = None
    has_value: bool = False
    action: RenderAction = RenderAction.NONE
    target: MenuNode | None = None
    applied: list[ActionResult] = field(default_factory=list)
    # node of another tree, presented once that tree's lock is held
    deferred_target: MenuNode | None = field(default=None, repr=False)


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


class CallbackDispatcher:
    """
    Routes button presses to menu trees and applies what the actions return.

    Each dispatch runs Idle -> Resolving -> Executing -> Applying -> Idle while
    holding the tree's lock, so presses on one tree never interleave.
    """

    def __init__(self, registry: MenuRegistry | None = None, *, strict: bool | None = None):
        self.registry = registry if registry is not None else MenuRegistry()
        self.resolver = PathResolver(self.registry)
        # unrecognized multi-step values raise instead of being ignored
        self.strict = settings.MENU_STRICT_MODE if strict is None else strict
        self._states: dict[str, DispatchState] = {}
        self._missing_action_handler: MissingActionHandler | None = None
        self._step_handler: StepHandler | None = None
        self._sequence_handler: SequenceHandler | None = None
        self._error_handler: ErrorHandler | None = None
        self._unhandled_handler: UnhandledHandler | None = None

    # -- hooks --------------------------------------------------------------

    def on_missing_action(self, handler: MissingActionHandler) -> MissingActionHandler:
        """Handler for buttons without an action: ``handler(button_text, path, event)``."""
        self._missing_action_handler = handler
        return handler

    def on_step(self, handler: StepHandler) -> StepHandler:
        """Handler for non-result values of multi-step actions: ``handler(event, value, apply)``.

        Whatever it returns is sent back into the sequence. Ignored while an
        ``on_sequence`` handler is installed.
        """
        self._step_handler = handler
        return handler

    def on_sequence(self, handler: SequenceHandler) -> SequenceHandler:
        """Handler that drives multi-step actions itself: ``handler(event, sequence, apply)``.

        It advances the ``StepSequence`` and passes results to ``apply``; the
        sequence is closed afterwards if the handler left it unfinished.
        """
        self._sequence_handler = handler
        return handler

    def on_error(self, handler: ErrorHandler) -> ErrorHandler:
        self._error_handler = handler
        return handler

    def on_unhandled(self, handler: UnhandledHandler) -> UnhandledHandler:
        self._unhandled_handler = handler
        return handler

    # -- registry -----------------------------------------------------------

    def register(self, tree: MenuNode) -> MenuNode:
        return self.registry.register(tree)

    def unregister(self, id_or_tree: str | MenuNode) -> bool:
        return self.registry.unregister(id_or_tree)

    def lookup_by_id(self, tree_id: str) -> MenuNode | None:
        return self.registry.lookup_by_id(tree_id)

    def dispose(self, tree: MenuNode) -> None:
        self._states.pop(tree.root.id, None)
        self.registry.dispose(tree)

    def state_of(self, tree_id: str) -> DispatchState:
        return self._states.get(tree_id, DispatchState.IDLE)

    def locate(self, data: Any) -> tuple[MenuNode, ButtonNode] | None:
        """Finds the registered button an event path points at."""
        if not isinstance(data, str) or not data.startswith('/'):
            return None

        segments = data[1:].split('/')
        if len(segments) < 2 or not segments[0]:
            return None

        root = self.registry.lookup_by_id(segments[0])
        if root is None:
            return None

        button = root.get_button_by_path(data)
        if button is None:
            return None

        return button.menu, button

    # -- presentation -------------------------------------------------------

    async def show(self, menu: MenuNode, transport: MenuTransport) -> RenderedMenu:
        """Registers the tree of ``menu`` and posts ``menu`` as a new message."""
        self.registry.register(menu)
        registry = menu.registry
        async with registry.lock:
            rendered = await menu.render()
            await transport.send(rendered)
            registry.active = menu

        logger.info('📋 Menu shown', tree_id=menu.root.id, path=menu.path)
        return rendered

    async def close(
        self,
        menu: MenuNode,
        transport: MenuTransport,
        text: str | None = None,
        keyboard_only: bool = False,
    ) -> None:
        async with menu.registry.lock:
            await self._close(menu, transport, text, keyboard_only=keyboard_only)

    # -- dispatch -----------------------------------------------------------

    async def dispatch(self, data: str, transport: MenuTransport, event: Any = None) -> DispatchResult | None:
        """
        Handles one button press.

        Returns ``None`` when the event does not belong to any registered
        button, or when a failure was passed to the error handler.
        """
        located = self.locate(data)
        if located is None:
            await self._report_unhandled(data, event)
            return None

        node, _ = located
        registry = node.registry
        tree_id = node.root.id
        start_time = monotonic()

        async with registry.lock:
            self._states[tree_id] = DispatchState.RESOLVING
            acting: MenuNode | None = None
            try:
                # the tree may have been closed while waiting for the lock
                located = self.locate(data)
                if located is None:
                    await self._report_unhandled(data, event)
                    return None

                acting, button = located
                if button.url is not None:
                    logger.debug('URL button press ignored', path=data)
                    return None

                result = await self._run(button, transport, event, tree_id)
            except Exception as error:
                await self._handle_failure(error, acting, data)
                return None
            finally:
                self._states[tree_id] = DispatchState.IDLE

        target = result.deferred_target
        if target is not None:
            # the acting tree's lock is released first, so two trees never wait on each other
            result.deferred_target = None
            try:
                async with target.registry.lock:
                    result.action = await self._present(target, transport)
            except Exception as error:
                await self._handle_failure(error, target, data)
                return None

        logger.debug(
            'Menu dispatch finished',
            path=data,
            action=result.action.value,
            execution_time=round(monotonic() - start_time, 3),
        )
        return result

    async def _run(self, button: ButtonNode, transport: MenuTransport, event: Any, tree_id: str) -> DispatchResult:
        node = button.menu
        self._states[tree_id] = DispatchState.EXECUTING

        snapshot = await node.render(soft=True)
        press = ButtonPress(event=event, button=button, node=node, menu=snapshot, values=node.values)
        outcome = DispatchResult(path=button.path, button_id=button.id, values=node.values)

        if button.action is not None:
            raw = button.action(press)
        elif button.navigate_to is not None:
            raw = ActionResult(navigate=button.navigate_to)
        elif self._missing_action_handler is not None:
            raw = self._missing_action_handler(button.text, button.path, event)
        else:
            logger.debug('Button has no action and no fallback handler', path=button.path)
            raw = None

        if not is_sequence(raw):
            raw = await _maybe_await(raw)

        self._states[tree_id] = DispatchState.APPLYING

        if is_sequence(raw):
            await self._run_sequence(as_sequence(raw), press, transport, outcome)
            return outcome

        result = ActionResult.coerce(raw)
        if result is not None:
            await self._apply(result, press, transport, outcome)
        elif raw is not None:
            logger.debug('Button action returned a value that is not a result', path=button.path)

        return outcome

    async def _run_sequence(
        self,
        sequence: StepSequence,
        press: ButtonPress,
        transport: MenuTransport,
        outcome: DispatchResult,
    ) -> Any:
        async def apply(value: Any) -> bool:
            result = ActionResult.coerce(value)
            if result is None:
                return False
            await self._apply(result, press, transport, outcome)
            return True

        if self._sequence_handler is not None:
            try:
                return await _maybe_await(self._sequence_handler(press.event, sequence, apply))
            finally:
                if not sequence.done:
                    await sequence.aclose()

        sent: Any = None
        try:
            while True:
                step = await sequence.advance(sent)
                sent = None

                if step.kind is StepKind.DONE:
                    return step.payload

                if step.kind is StepKind.RESULT:
                    await self._apply(step.payload, press, transport, outcome)
                    continue

                if step.payload is None:
                    continue

                if self._step_handler is not None:
                    sent = await _maybe_await(self._step_handler(press.event, step.payload, apply))
                    continue

                if self.strict:
                    raise SequenceProtocolError(step.payload)

                logger.debug('Multi-step value ignored', path=press.path, value_type=type(step.payload).__name__)
        finally:
            if not sequence.done:
                await sequence.aclose()

    async def _apply(
        self,
        result: ActionResult,
        press: ButtonPress,
        transport: MenuTransport,
        outcome: DispatchResult,
    ) -> None:
        button = press.button
        menu = button.menu
        outcome.applied.append(result)

        if result.text is not None:
            button.set_text(result.text)
        if result.hidden is not None:
            button.set_hidden(result.hidden)
        if result.full is not None:
            button.set_full(result.full)
        if result.message is not None:
            menu.text = result.message

        if result.has_value:
            menu.values.push(button.id, result.value)
            outcome.value = result.value
            outcome.has_value = True
            outcome.values = menu.values

        if result.navigate is not None:
            target = self.resolver.resolve(result.navigate, menu)
            outcome.target = target
            if target.registry is not menu.registry:
                menu.registry.active = None
                self.registry.register(target)
                outcome.deferred_target = target
                outcome.action = RenderAction.NONE
            else:
                outcome.deferred_target = None
                outcome.action = await self._present(target, transport)
        elif result.close or result.close_with is not None:
            await self._close(menu, transport, result.close_with or None)
            outcome.action = RenderAction.CLOSE
            outcome.target = None
        elif result.menu is not None:
            child = DynamicMenuLifecycle.attach_to_button(button, result.menu)
            outcome.action = await self._present(child, transport)
            outcome.target = child
        elif result.update:
            target = menu
            if menu.builder is not None:
                target = DynamicMenuLifecycle.rebuild(menu)
                if target.parent is None:
                    self.registry.register(target)
            else:
                menu.mark_change(Change.UPDATE)
            outcome.action = await self._present(target, transport)
            outcome.target = target
        else:
            active = menu.registry.active
            if menu.has_change(Change.TEXT):
                outcome.action = await self._present(menu, transport)
                outcome.target = menu
            elif active is not None and active is not menu and active.is_changed:
                outcome.action = await self._present(active, transport)
                outcome.target = active
            elif button.is_changed or menu.is_changed:
                outcome.action = await self._present(menu, transport)
                outcome.target = menu

    async def _present(self, target: MenuNode, transport: MenuTransport) -> RenderAction:
        registry = target.registry
        previous = target.last_render
        needs_draw = target.has_change(Change.DRAW)
        is_active = registry.active is target

        rendered = await target.render()
        action = decide_render(previous, rendered, needs_draw=needs_draw, is_active=is_active)

        if action is RenderAction.REPLACE:
            await transport.replace(rendered)
        elif action is RenderAction.PATCH_KEYBOARD:
            await transport.patch_keyboard(rendered)

        registry.active = target
        logger.debug('Menu presented', path=target.path, action=action.value)
        return action

    async def _close(
        self,
        menu: MenuNode,
        transport: MenuTransport,
        text: str | None,
        keyboard_only: bool = False,
    ) -> None:
        menu.registry.active = None
        text = text.strip() if text else None

        if keyboard_only or (text is not None and text == menu.text):
            await transport.remove_keyboard()
        else:
            await transport.close(text)

        self.registry.unregister(menu.root)
        logger.info('Menu closed', tree_id=menu.root.id, path=menu.path)

    async def _handle_failure(self, error: Exception, node: MenuNode | None, data: str) -> None:
        """Marks ``node`` for a full redraw and hands ``error`` to the error hook, or re-raises it."""
        if node is not None:
            node.mark_change(Change.DRAW)
        logger.exception('❌ Menu dispatch failed', path=data, error=error)
        if self._error_handler is None:
            raise error
        await _maybe_await(self._error_handler(error))

    async def _report_unhandled(self, data: Any, event: Any) -> None:
        logger.debug('Unhandled menu event', event_data=data)
        if self._unhandled_handler is not None:
            await _maybe_await(self._unhandled_handler(data, event))
