"""
Defines the core data types for the silly-joy runtime.

This module provides the static term model produced by the parser, the
values that live on the evaluation stack, the interpreter state threaded
through the state handler, and the language-level error taxonomy.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Callable, Generator, Mapping, Tuple, Union


# A compiled computation: a zero-argument callable returning a fresh
# generator of effect requests. Calling it again replays the computation.
Program = Callable[[], Generator[Any, Any, Any]]


# =================================================================
# Terms
# =================================================================

@dataclass(frozen=True)
class Word:
    name: str


@dataclass(frozen=True)
class Number:
    value: int


@dataclass(frozen=True)
class Quoted:
    """A bracket-quoted sub-program; pushed as a closure when evaluated."""
    terms: Tuple['Term', ...] = ()

    def __post_init__(self):
        # Accept any iterable so callers can pass lists.
        object.__setattr__(self, 'terms', tuple(self.terms))


Term = Union[Word, Number, Quoted]


# =================================================================
# Values
# =================================================================

@dataclass(frozen=True)
class IntValue:
    value: int


@dataclass(frozen=True)
class ClosureValue:
    """
    A quoted program on the stack.

    Equality and display only consider the source terms; the compiled
    program is never compared or run by either.
    """
    program: Program = field(compare=False, repr=False)
    ast: Tuple[Term, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'ast', tuple(self.ast))


Value = Union[IntValue, ClosureValue]


# =================================================================
# Interpreter state
# =================================================================

@dataclass(frozen=True)
class State:
    """
    The stack and dictionary of one evaluation.

    States are immutable: every operation returns the next state and leaves
    the receiver untouched, so a caller holding the pre-evaluation state
    still has it after a failed run.
    """
    stack: Tuple[Value, ...] = ()
    dictionary: Mapping[str, Program] = field(default_factory=lambda: MappingProxyType({}), compare=False)

    def __post_init__(self):
        object.__setattr__(self, 'stack', tuple(self.stack))
        if not isinstance(self.dictionary, MappingProxyType):
            object.__setattr__(self, 'dictionary', MappingProxyType(dict(self.dictionary)))

    def push(self, value: Value) -> 'State':
        return replace(self, stack=(value,) + self.stack)

    def pop(self) -> Tuple[Value, 'State']:
        """
        Returns the top value and the state beneath it. The stack must not be
        empty; running programs get ``PoppingEmptyStack`` from the state
        handler instead.
        """
        return self.stack[0], replace(self, stack=self.stack[1:])


# =================================================================
# Errors
# =================================================================

class JoyError(Exception):
    """Base class for errors signalled by a running program."""

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self.args == other.args

    def __hash__(self):
        return hash((type(self), self.args))

    def __str__(self):
        return type(self).__name__


class Undefined(JoyError):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self):
        return f"Undefined: {self.name}"


class PoppingEmptyStack(JoyError):
    pass


class TypeMismatch(JoyError):
    pass


class ParseError(Exception):
    """Raised when source text does not match the grammar."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return f"ParseError: {self.message}"
