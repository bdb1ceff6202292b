"""
silly-joy: a small concatenative language whose interpreter expresses every
stack operation, error, and console interaction as an effect request.
"""
from loguru import logger

from joy.joy_datatypes import (
    ClosureValue, IntValue, JoyError, Number, ParseError, PoppingEmptyStack,
    Quoted, State, TypeMismatch, Undefined, Word,
)
from joy.joy_handlers import Err, Ok
from joy.joy_io import ExpectOutput, SendInput, SimulatedIOError, expect, send
from joy.joy_runtime import ExecutionResult, JoyRunner, parse, simulate_source, simulate_unsafe

# Silent when embedded; the front end enables it with --debug.
logger.disable("joy")
