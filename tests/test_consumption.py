# tests/test_consumption.py
from tokparsec.Char import char, digit, string
from tokparsec.Parsec import Error, Ok, Parser
from tokparsec.Prim import pure


def test_choice_commits_on_consumption(initial_state):
    """
    (char('a') >> char('b')) | char('a')
    Input: 'ac'

    1. First parser matches 'a' (consumes).
    2. Then fails on 'c' (expected 'b').
    3. Because it consumed, | should NOT try the second option.
    """
    parser = (char("a") >> char("b")) | char("a")

    result = parser(initial_state("ac"))

    # Should be an Error, consumed
    assert result.consumed is True
    assert isinstance(result, Error)
    # The error should be about expecting 'b', not about the second branch
    assert result.message.expected == ("b",)
    assert result.message.input == "c"


def test_rhs_never_runs_after_consuming_lhs(initial_state):
    calls = []

    def counting(state):
        calls.append(state)
        return pure("never")(state)

    parser = string("foo") | Parser(counting)

    result = parser(initial_state("fox"))

    assert isinstance(result, Error)
    assert result.consumed is True
    assert calls == []


def test_always_succeeding_rhs_does_not_rescue_consuming_lhs():
    parser = string("foo") | pure("rescued")

    result = parser.run("far")

    assert isinstance(result, Error)
    assert result.message.expected == ("foo",)


def test_backtrack_reverts_consumption(initial_state):
    """
    (char('a') >> char('b')).backtrack() | char('a')
    Input: 'ac'

    1. First parser matches 'a', fails on 'c'.
    2. backtrack reports the failure as non-consuming.
    3. | sees a non-consuming failure and tries the second branch from the start.
    4. Second branch matches 'a', rest "c".
    """
    parser = (char("a") >> char("b")).backtrack() | char("a")

    result = parser(initial_state("ac"))

    assert isinstance(result, Ok)
    assert result.value.value == "a"
    assert result.state.offset == 1
    # The successful branch consumed.
    assert result.consumed is True


def test_backtrack_law():
    p = string("foo")
    q = string("fob")

    assert isinstance((p | q).run("fob"), Error)
    assert (p.backtrack() | q).run("fob").get() == "fob"


def test_label_only_applies_to_non_consuming_results():
    parser = string("foo").label("keyword")

    assert parser.run("bar").message.expected == ("keyword",)
    # Three characters into "foo" is not "expected keyword".
    assert parser.run("fob").message.expected == ("foo",)


def test_label_does_not_change_consumption():
    parser = (char("a") >> char("b")).label("ab")

    result = parser.run("ac")

    assert result.consumed is True
    assert result.message.expected == ("b",)


def test_filter_failure_is_non_consuming():
    parser = digit().filter(lambda c: c != '9') | char('9')

    result = parser.run("9")

    assert isinstance(result, Ok)
    assert result.value.value == '9'


def test_filter_reports_rejected_value():
    result = digit().filter(lambda c: c != '9').label("small digit").run("9")

    assert isinstance(result, Error)
    assert result.consumed is False
    assert result.message.input == "9"
    assert result.message.expected == ("small digit",)
    assert result.message.offset == 0


def test_collect_maps_or_fails_without_consuming():
    small = digit().collect(lambda c: int(c) if c != '9' else None)
    parser = small | char('9').as_(9)

    assert parser.run("3").get() == 3
    assert parser.run("9").get() == 9

    result = small.run("9")
    assert isinstance(result, Error)
    assert result.consumed is False
    assert result.message.input == "9"


def test_flat_map_of_pure_prefix_is_not_consuming():
    parser = pure(1) >> (lambda _: char('x'))

    result = parser.run("y")

    assert isinstance(result, Error)
    assert result.consumed is False


def test_non_consuming_success_still_tries_alternative():
    parser = string("foo").backtrack() | string("bar")

    assert parser.run("bar").get() == "bar"


def test_optional_does_not_swallow_consuming_failure():
    parser = string("foo").optional()

    assert parser.run("bar").get() is None
    result = parser.run("fob")
    assert isinstance(result, Error)
    assert result.consumed is True
