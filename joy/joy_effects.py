"""
Effect requests and the relay mechanism shared by every handler.

A computation is a generator that yields effect requests and receives each
request's answer back from ``send``. It performs nothing by itself; handlers
walk it request by request. A handler answers the requests of its own kind
and relays every other request outward unchanged, resuming the computation
with whatever the outer handler answered. Handlers therefore nest in any
order over one computation type.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generator, Tuple, Type

from joy.joy_datatypes import JoyError, Value


class UnhandledEffect(Exception):
    """A request reached the outermost driver without meeting a handler."""

    def __init__(self, request: 'Effect'):
        super().__init__(request)
        self.request = request


# =================================================================
# Requests
# =================================================================

class Effect:
    """Base class for every effect request."""
    __slots__ = ()


class StackEffect(Effect):
    __slots__ = ()


class ErrorEffect(Effect):
    __slots__ = ()


class IOEffect(Effect):
    __slots__ = ()


@dataclass(frozen=True)
class PushValue(StackEffect):
    value: Value


@dataclass(frozen=True)
class PopValue(StackEffect):
    pass


@dataclass(frozen=True)
class LookupWord(StackEffect):
    name: str


@dataclass(frozen=True)
class Throw(ErrorEffect):
    """Aborts the rest of the computation. Never answered."""
    error: JoyError


@dataclass(frozen=True)
class PrintLine(IOEffect):
    text: str


@dataclass(frozen=True)
class ReadLine(IOEffect):
    pass


# =================================================================
# Request helpers (use with ``yield from``)
# =================================================================

def push(value: Value):
    yield PushValue(value)


def pop():
    return (yield PopValue())


def lookup(name: str):
    return (yield LookupWord(name))


def throw(error: JoyError):
    yield Throw(error)
    # The error handler closes the computation instead of answering.
    raise RuntimeError(f"error signal {error!r} was resumed")


def print_line(text: str):
    yield PrintLine(text)


def read_line():
    return (yield ReadLine())


# =================================================================
# Relay
# =================================================================

Step = Callable[[Any, Effect], Generator[Effect, Any, Tuple[Any, Any]]]


def handle(computation: Generator, kind: Type[Effect], step: Step, state: Any = None):
    """
    Interprets the requests of ``kind`` in ``computation``.

    ``step(state, request)`` is itself a generator: it may yield requests of
    its own (an error signal, say), which travel outward like relayed ones,
    and it returns ``(next_state, answer)``. Requests of any other kind are
    yielded outward unchanged and the outer answer is sent back in.

    Returns ``(final_state, result)`` once the computation finishes.
    """
    answer = None
    try:
        while True:
            try:
                request = computation.send(answer)
            except StopIteration as stop:
                return state, stop.value
            if isinstance(request, kind):
                state, answer = yield from step(state, request)
            else:
                answer = yield request
    finally:
        computation.close()


def run(computation: Generator) -> Any:
    """Runs a computation whose requests have all been handled."""
    try:
        request = next(computation)
    except StopIteration as stop:
        return stop.value
    computation.close()
    raise UnhandledEffect(request)

