"""
Parses and runs silly-joy source, keeping the interpreter state between runs.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Iterable, List, Literal, Optional, Tuple

from koine import Parser
from loguru import logger

from joy.joy_datatypes import ParseError, State, Term
from joy.joy_effects import run
from joy.joy_handlers import Err, Ok, Outcome
from joy.joy_interpreter import evaluate, initial_state
from joy.joy_io import SimulatedIO, run_live, simulate
from joy.joy_printer import Printer
from joy.joy_transformer import JoyTransformer

log = logger.bind(component="runtime")

GRAMMAR_PATH = Path(__file__).parent / "grammar" / "joy_grammar.yaml"


@dataclass
class ExecutionResult:
    """The structured result of running one piece of source."""
    status: Literal['success', 'error']
    state: Optional[State] = None
    error: Optional[Exception] = None

    def format_error(self) -> str:
        if self.status != 'error':
            return ""
        return str(self.error or "Unknown error")


class JoyRunner:
    """Parses, transforms, and executes silly-joy code against a live console."""

    _parser: Optional[Parser] = None
    _transformer: Optional[JoyTransformer] = None

    def __init__(self, state: Optional[State] = None,
                 reader: Optional[Callable[[str], Awaitable[str]]] = None,
                 writer: Optional[Callable[[str], None]] = None):
        if JoyRunner._parser is None:
            JoyRunner._parser = Parser.from_file(str(GRAMMAR_PATH))
        if JoyRunner._transformer is None:
            JoyRunner._transformer = JoyTransformer()

        self.parser = JoyRunner._parser
        self.transformer = JoyRunner._transformer
        self.printer = Printer()
        self.state = state if state is not None else initial_state()
        self.reader = reader
        self.writer = writer

    def parse(self, source: str) -> List[Term]:
        parse_out = self.parser.parse(source)
        if parse_out.get('status') != 'success':
            raise ParseError(parse_out.get('message') or str(parse_out))
        return self.transformer.transform(parse_out['ast'])

    def stack_lines(self) -> List[str]:
        """The current stack, top first, in display format."""
        return [self.printer.pformat(v) for v in self.state.stack]

    async def handle_script(self, source_code: str) -> ExecutionResult:
        """
        Runs ``source_code`` with real console I/O. On success the final state
        becomes current; on any failure the current state is kept as it was.
        """
        try:
            terms = self.parse(source_code)
        except ParseError as e:
            return ExecutionResult(status='error', error=e)

        outcome = await run_live(evaluate(terms, self.state), self.reader, self.writer)
        match outcome:
            case Ok((state, _)):
                self.state = state
                return ExecutionResult(status='success', state=state)
            case Err(error):
                log.debug("run failed, keeping a stack of {}", len(self.state.stack))
                return ExecutionResult(status='error', error=error)


def parse(source: str) -> List[Term]:
    return JoyRunner().parse(source)


def simulate_source(source: str, expectations: Iterable[SimulatedIO],
                    state: Optional[State] = None) -> Tuple[Outcome, Tuple[SimulatedIO, ...]]:
    """
    Runs ``source`` under the scripted I/O handler.

    Returns the outcome and the expectations left unconsumed. Raises
    ParseError for bad source and SimulatedIOError when the script is broken.
    """
    terms = parse(source)
    state = state if state is not None else initial_state()
    leftover, outcome = run(simulate(expectations, evaluate(terms, state)))
    return outcome, leftover


def simulate_unsafe(source: str, expectations: Iterable[SimulatedIO]) -> State:
    """Like ``simulate_source`` from the initial state, but raises the JoyError on failure."""
    outcome, _ = simulate_source(source, expectations)
    match outcome:
        case Ok((state, _)):
            return state
        case Err(error):
            raise error
    raise TypeError(f"unexpected outcome {outcome!r}")
