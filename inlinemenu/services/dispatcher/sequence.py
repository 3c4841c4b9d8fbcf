"""
Multi-step button actions.

A button action may return a sequence instead of a single result: a
generator, an async generator, or a ``StepSequence`` subclass. The
dispatcher drives it through ``advance`` until it reports ``DONE``.
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncGenerator, Generator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from inlinemenu.services.dispatcher.results import ActionResult


class StepKind(str, Enum):
    RESULT = 'result'
    VALUE = 'value'
    DONE = 'done'


@dataclass(frozen=True, slots=True)
class Step:
    kind: StepKind
    payload: Any = None


class StepSequence:
    """
    Resumable state machine with three transitions.

    ``RESULT`` carries an ``ActionResult`` to apply, ``VALUE`` an opaque value
    for the step handler, ``DONE`` the final return value. Subclasses that do
    not wrap a generator override ``produce``: return the next raw value, or
    call ``finish`` to end the sequence.
    """

    def __init__(self, source: Generator[Any, Any, Any] | AsyncGenerator[Any, Any] | None = None):
        self._source = source
        self._done = False
        self._return_value: Any = None

    @property
    def done(self) -> bool:
        return self._done

    def finish(self, value: Any = None) -> Step:
        self._done = True
        self._return_value = value
        return Step(StepKind.DONE, value)

    async def produce(self, sent: Any) -> Any:
        raise NotImplementedError

    async def advance(self, sent: Any = None) -> Step:
        if self._done:
            return Step(StepKind.DONE, self._return_value)

        source = self._source
        try:
            if inspect.isasyncgen(source):
                raw = await source.asend(sent)
            elif inspect.isgenerator(source):
                raw = source.send(sent)
            else:
                raw = await self.produce(sent)
        except StopAsyncIteration:
            return self.finish()
        except StopIteration as stop:
            return self.finish(stop.value)

        if isinstance(raw, Step):
            if raw.kind is StepKind.DONE:
                return self.finish(raw.payload)
            return raw

        result = ActionResult.coerce(raw)
        if result is not None:
            return Step(StepKind.RESULT, result)
        return Step(StepKind.VALUE, raw)

    async def aclose(self) -> None:
        source = self._source
        self._done = True
        if inspect.isasyncgen(source):
            await source.aclose()
        elif inspect.isgenerator(source):
            source.close()


def is_sequence(value: Any) -> bool:
    return isinstance(value, StepSequence) or inspect.isgenerator(value) or inspect.isasyncgen(value)


def as_sequence(value: Any) -> StepSequence:
    if isinstance(value, StepSequence):
        return value
    return StepSequence(value)
