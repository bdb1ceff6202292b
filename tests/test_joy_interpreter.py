import pytest

from joy.joy_datatypes import (
    ClosureValue, IntValue, Number, PoppingEmptyStack, Quoted, TypeMismatch, Undefined, Word
)
from joy.joy_effects import Throw, run
from joy.joy_handlers import Err, Ok
from joy.joy_interpreter import StdLib, cast_int, evaluate, initial_dictionary, initial_state, interpret
from joy.joy_io import EndOfExpectations, IncorrectOutput, expect, simulate
from joy.joy_runtime import parse


def closure(*terms):
    return ClosureValue(interpret(terms), terms)


def run_terms(source, expectations=(), state=None):
    state = state if state is not None else initial_state()
    leftover, outcome = run(simulate(expectations, evaluate(parse(source), state)))
    assert leftover == ()
    return outcome


def final_stack(source, expectations=(), state=None):
    outcome = run_terms(source, expectations, state)
    assert isinstance(outcome, Ok), outcome
    state, _ = outcome.value
    return list(state.stack)


def test_builtin_dictionary_is_fixed():
    assert set(initial_dictionary()) == {"pop", "i", "dup", "dip", "+", "print"}


def test_stdlib_maps_operator_methods():
    words = StdLib().words()
    assert "+" in words
    assert "add" not in words


# --- Happy paths ---

SUCCESS_CASES = [
    ("empty_program", "", []),
    ("push_numbers", "1 2", [IntValue(2), IntValue(1)]),
    ("add", "1 2 +", [IntValue(3)]),
    ("add_negative", "5 -8 +", [IntValue(-3)]),
    ("dup_add", "3 dup +", [IntValue(6)]),
    ("pop", "1 2 pop", [IntValue(1)]),
    ("quote_then_i", "[1 2 +] i", [IntValue(3)]),
    ("nested_i", "[[4] i] i", [IntValue(4)]),
    ("dip_runs_program_beneath", "10 [3 +] 4 dip", [IntValue(4), IntValue(13)]),
    ("dup_closure", "[dup] dup", [closure(Word("dup")), closure(Word("dup"))]),
    ("quote_is_not_run", "[undefinedword]", [closure(Word("undefinedword"))]),
]


@pytest.mark.parametrize("test_id, source, expected", SUCCESS_CASES, ids=[c[0] for c in SUCCESS_CASES])
def test_evaluation(test_id, source, expected):
    assert final_stack(source) == expected


def test_closure_keeps_its_source():
    [value] = final_stack("[1 [dup] i]")
    assert value.ast == (Number(1), Quoted([Word("dup")]), Word("i"))


def test_closure_can_run_twice():
    assert final_stack("[1] dup i pop i") == [IntValue(1)]


def test_runs_against_existing_stack():
    state = initial_state().push(IntValue(40))
    assert final_stack("2 +", state=state) == [IntValue(42)]


# --- Output ---

def test_print_emits_display_text():
    assert final_stack("1 print", [expect("1")]) == []


def test_print_closure():
    assert final_stack("[hello] print", [expect("[hello]")]) == []


def test_print_order_matches_program_order():
    assert final_stack("1 print [2 +] print 3", [expect("1"), expect("[2 +]")]) == [IntValue(3)]


def test_print_mismatch_is_fatal():
    with pytest.raises(IncorrectOutput) as excinfo:
        run_terms("1 print", [expect("2")])
    assert (excinfo.value.expected, excinfo.value.actual) == ("2", "1")


def test_unscripted_print_is_fatal():
    with pytest.raises(EndOfExpectations):
        run_terms("1 print")


# --- Errors ---

ERROR_CASES = [
    ("pop_empty", "pop", PoppingEmptyStack()),
    ("undefined", "frobnicate", Undefined("frobnicate")),
    ("i_on_int", "1 i", TypeMismatch()),
    ("add_closure", "[1] 2 +", TypeMismatch()),
    ("add_one_operand", "1 +", PoppingEmptyStack()),
    ("dup_inside_quote", "[dup] i", PoppingEmptyStack()),
    ("dip_needs_closure_beneath", "1 2 dip", TypeMismatch()),
    ("dip_program_sees_empty_stack", "[3 +] 4 dip", PoppingEmptyStack()),
    ("dip_int_then_closure", "[2 +] 5 dip", PoppingEmptyStack()),
    ("undefined_inside_quote", "[nope] i", Undefined("nope")),
    ("print_empty", "print", PoppingEmptyStack()),
]


@pytest.mark.parametrize("test_id, source, error", ERROR_CASES, ids=[c[0] for c in ERROR_CASES])
def test_evaluation_errors(test_id, source, error):
    assert run_terms(source) == Err(error)


def test_failed_run_leaves_callers_state_alone():
    before = initial_state().push(IntValue(1))
    outcome = run_terms("5 6 [dup] i pop pop pop pop pop", state=before)
    assert outcome == Err(PoppingEmptyStack())
    assert before.stack == (IntValue(1),)


def test_output_before_failure_still_happens():
    assert run_terms("7 print pop", [expect("7")]) == Err(PoppingEmptyStack())


def test_nothing_after_failure_is_printed():
    # The script is empty: a print after the failure would raise EndOfExpectations.
    assert run_terms("pop 1 print") == Err(PoppingEmptyStack())


def test_cast_int_rejects_closure():
    assert next(cast_int(closure())) == Throw(TypeMismatch())
