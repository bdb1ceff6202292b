"""
Handlers for the stack/dictionary effect and the error effect.

``run_state`` threads an immutable ``State`` through a computation and only
hands the final state back when the computation finishes. ``catch_errors``
collapses the computation into an ``Ok`` or ``Err`` outcome; an ``Err``
carries no state, so whatever the failed computation did to the stack is
simply never seen by the caller.
"""

from dataclasses import dataclass
from typing import Any, Generator, Union

from loguru import logger

from joy.joy_datatypes import JoyError, PoppingEmptyStack, State, Undefined
from joy.joy_effects import LookupWord, PopValue, PushValue, StackEffect, Throw, handle, throw

log = logger.bind(component="handlers")


@dataclass(frozen=True)
class Ok:
    value: Any = None


@dataclass(frozen=True)
class Err:
    error: JoyError


Outcome = Union[Ok, Err]


def _state_step(state: State, request: StackEffect):
    match request:
        case PushValue(value):
            return state.push(value), None
        case PopValue():
            if not state.stack:
                yield from throw(PoppingEmptyStack())
            value, state = state.pop()
            return state, value
        case LookupWord(name):
            if name not in state.dictionary:
                yield from throw(Undefined(name))
            # The dictionary is never modified; the program runs against the current stack.
            return state, state.dictionary[name]
    raise TypeError(f"not a stack request: {request!r}")


def run_state(state: State, computation: Generator):
    """Handles stack requests against ``state``; returns ``(final_state, result)``."""
    return (yield from handle(computation, StackEffect, _state_step, state))


def catch_errors(computation: Generator):
    """
    Turns an error signal into ``Err(error)`` and normal completion into
    ``Ok(result)``. Nothing after the signal runs: the computation is closed
    without being resumed.
    """
    answer = None
    try:
        while True:
            try:
                request = computation.send(answer)
            except StopIteration as stop:
                return Ok(stop.value)
            if isinstance(request, Throw):
                log.debug("computation aborted: {}", request.error)
                return Err(request.error)
            answer = yield request
    finally:
        computation.close()
