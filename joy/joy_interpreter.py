"""
Compiles term sequences into computations and defines the builtin words.
"""

import inspect
from types import MappingProxyType
from typing import Iterable, Mapping

from loguru import logger

from joy.joy_datatypes import (
    ClosureValue, IntValue, Number, Program, Quoted, State, Term, TypeMismatch, Value, Word
)
from joy.joy_effects import lookup, pop, print_line, push, throw
from joy.joy_handlers import catch_errors, run_state
from joy.joy_printer import Printer

log = logger.bind(component="interpreter")


# ===================================================================
# Casts
# ===================================================================

def cast_program(value: Value):
    if isinstance(value, ClosureValue):
        return value.program
    yield from throw(TypeMismatch())


def cast_int(value: Value):
    if isinstance(value, IntValue):
        return value.value
    yield from throw(TypeMismatch())


# ===================================================================
# Compiler
# ===================================================================

def interpret(terms: Iterable[Term]) -> Program:
    """Compiles ``terms`` into a program that runs them left to right."""
    steps = [_compile_term(term) for term in terms]

    def program():
        for step in steps:
            yield from step()

    return program


def _compile_term(term: Term) -> Program:
    match term:
        case Word(name):
            def word():
                body = yield from lookup(name)
                yield from body()
            return word
        case Quoted(body):
            # Quoted bodies are compiled once, up front.
            closure = ClosureValue(interpret(body), body)
            return lambda: push(closure)
        case Number(value):
            return lambda: push(IntValue(value))
    raise TypeError(f"Unknown term: {term!r}")


def evaluate(terms: Iterable[Term], state: State):
    """
    Runs ``terms`` against ``state`` with the stack and error effects handled.

    The returned computation only emits I/O requests, so it can be given to
    either I/O handler. It finishes with ``Ok((final_state, None))`` or
    ``Err(error)``.
    """
    terms = list(terms)
    log.debug("evaluating {} term(s) on a stack of {}", len(terms), len(state.stack))
    return catch_errors(run_state(state, interpret(terms)()))


# ===================================================================
# Builtins
# ===================================================================

class StdLib:
    """The builtin words. Each ``_name`` method is a program."""

    # Method names that cannot spell their word.
    operators = {'add': '+'}

    def __init__(self, printer: Printer = None):
        self.printer = printer or Printer()

    def _pop(self):
        yield from pop()

    def _i(self):
        program = yield from cast_program((yield from pop()))
        yield from program()

    def _dup(self):
        v = yield from pop()
        yield from push(v)
        yield from push(v)

    def _dip(self):
        # Protects the top value and runs the program beneath it.
        v = yield from pop()
        program = yield from cast_program((yield from pop()))
        yield from program()
        yield from push(v)

    def _add(self):
        a = yield from cast_int((yield from pop()))
        b = yield from cast_int((yield from pop()))
        yield from push(IntValue(a + b))

    def _print(self):
        v = yield from pop()
        yield from print_line(self.printer.pformat(v))

    def words(self) -> Mapping[str, Program]:
        words = {}
        for name, member in inspect.getmembers(self):
            if name.startswith('_') and not name.startswith('__') and callable(member):
                word_name = name[1:]
                words[self.operators.get(word_name, word_name)] = member
        return MappingProxyType(words)


def initial_dictionary() -> Mapping[str, Program]:
    return StdLib().words()


def initial_state() -> State:
    return State(stack=(), dictionary=initial_dictionary())
