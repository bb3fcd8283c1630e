# tests/conftest.py
import pytest

from tokparsec.Parsec import Error, Ok, Result, State
from tokparsec.Source import CHARS


def assert_result_eq(res1: Result, res2: Result):
    """
    Deep comparison of two Results.
    """
    assert res1.consumed == res2.consumed, f"Consumed mismatch: {res1.consumed} != {res2.consumed}"

    # Check Result Type
    if isinstance(res1, Ok):
        assert isinstance(res2, Ok), "Result mismatch: Ok vs Error"
        assert res1.value == res2.value
        assert res1.state.offset == res2.state.offset
        assert res1.state.pos == res2.state.pos
        # Compare messages kept on successes
        assert res1.message == res2.message
    else:
        assert isinstance(res2, Error), "Result mismatch: Error vs Ok"
        assert res1.message == res2.message


def expected_of(result: Result) -> set:
    assert isinstance(result, Error), f"expected a failure, got {result!r}"
    return set(result.message.expected)


@pytest.fixture
def initial_state():
    def _make(input_data, source_map=CHARS):
        return State.init(input_data, source_map)

    return _make
