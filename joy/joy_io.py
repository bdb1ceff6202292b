"""
The two interchangeable I/O handlers.

``live`` performs real console output and input; ``drive_console`` awaits
the lines it reads and ``run_live`` composes the two. ``simulate`` checks a
computation's I/O against a recorded script of ``ExpectOutput`` and
``SendInput`` records, one record per request, in order. A script that does
not match raises a ``SimulatedIOError``: that is a broken test fixture, not
a language error, so it is never turned into an ``Err`` outcome.
"""

import asyncio
import sys
from dataclasses import dataclass
from functools import wraps
from typing import Awaitable, Callable, Generator, Iterable, Optional, Tuple, Union

from loguru import logger

from joy.joy_effects import Effect, IOEffect, PrintLine, ReadLine, UnhandledEffect, handle

log = logger.bind(component="io")


# A basic awaitable input prompt.
async def ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return await loop.run_in_executor(None, sys.stdin.readline)


@dataclass(frozen=True)
class AwaitLine(Effect):
    """A console read, answered by the async driver outside every handler."""
    pass


def _live_step(writer: Callable[[str], None], request: IOEffect):
    match request:
        case PrintLine(text):
            writer(text)
            return writer, None
        case ReadLine():
            line = yield AwaitLine()
            return writer, line
    raise TypeError(f"not an I/O request: {request!r}")


def live(computation: Generator, writer: Optional[Callable[[str], None]] = None):
    """
    Handles I/O requests against the console; returns the computation's result.

    ``PrintLine`` goes to ``writer`` (``print`` by default). ``ReadLine`` is
    passed outward as ``AwaitLine`` so that ``drive_console`` can await it.
    Requests of other kinds are relayed outward.
    """
    _, result = yield from handle(computation, IOEffect, _live_step, writer or print)
    return result


async def drive_console(computation: Generator,
                        reader: Optional[Callable[[str], Awaitable[str]]] = None):
    """
    Runs a fully handled computation, awaiting ``reader`` for each line read.

    There is no timeout. An empty read means end of input and raises
    EOFError. Any other request raises UnhandledEffect.
    """
    reader = reader or ainput
    answer = None
    try:
        while True:
            try:
                request = computation.send(answer)
            except StopIteration as stop:
                return stop.value
            if not isinstance(request, AwaitLine):
                raise UnhandledEffect(request)
            line = await reader("")
            if line == "":
                raise EOFError
            answer = line.rstrip("\r\n")
            log.debug("read line {!r}", answer)
    finally:
        computation.close()


async def run_live(computation: Generator,
                   reader: Optional[Callable[[str], Awaitable[str]]] = None,
                   writer: Optional[Callable[[str], None]] = None):
    """Handles ``computation``'s I/O on the console and drives it to completion."""
    return await drive_console(live(computation, writer), reader)


# =================================================================
# Scripted I/O
# =================================================================

@dataclass(frozen=True)
class ExpectOutput:
    text: str


@dataclass(frozen=True)
class SendInput:
    text: str


SimulatedIO = Union[ExpectOutput, SendInput]


def expect(text: str) -> ExpectOutput:
    return ExpectOutput(text)


def send(text: str) -> SendInput:
    return SendInput(text)


class SimulatedIOError(Exception):
    """The computation's I/O diverged from the script."""
    pass


class IncorrectOutput(SimulatedIOError):
    def __init__(self, expected: str, actual: str):
        super().__init__(expected, actual)
        self.expected = expected
        self.actual = actual

    def __str__(self):
        return f"expected output {self.expected!r} but got {self.actual!r}"


class UnexpectedOutput(SimulatedIOError):
    def __init__(self, text: str):
        super().__init__(text)
        self.text = text

    def __str__(self):
        return f"unexpected output {self.text!r} while input was scripted"


class UnexpectedInput(SimulatedIOError):
    def __str__(self):
        return "unexpected input request while output was scripted"


class EndOfExpectations(SimulatedIOError):
    def __str__(self):
        return "I/O requested after the script was exhausted"


def pure_step(func):
    """Adapts a step that never emits requests of its own to ``handle``."""
    @wraps(func)
    def step(state, request):
        yield from ()
        return func(state, request)
    return step


@pure_step
def _scripted_step(expectations: Tuple[SimulatedIO, ...], request: IOEffect):
    if not expectations:
        raise EndOfExpectations()
    head, rest = expectations[0], expectations[1:]
    match request, head:
        case PrintLine(text), ExpectOutput(expected):
            if text != expected:
                raise IncorrectOutput(expected, text)
            log.debug("output {!r} matched", text)
            return rest, None
        case PrintLine(text), SendInput():
            raise UnexpectedOutput(text)
        case ReadLine(), SendInput(text):
            log.debug("sent input {!r}", text)
            return rest, text
        case ReadLine(), ExpectOutput():
            raise UnexpectedInput()
    raise TypeError(f"not an I/O request: {request!r}")


def simulate(expectations: Iterable[SimulatedIO], computation: Generator):
    """
    Handles I/O requests against ``expectations``.

    Returns ``(unconsumed_expectations, result)``. Requests of other kinds
    are relayed outward.
    """
    return (yield from handle(computation, IOEffect, _scripted_step, tuple(expectations)))
