import logging

import pytest

from tokparsec.Char import char, digit, identifier, string
from tokparsec.Combinators import parser_trace
from tokparsec.Parsec import EOF, Error, Message, Ok, ParseError, Parser
from tokparsec.Prim import ap, lazy, pure, run_parser
from tokparsec.Source import Position


# --- Messages ---

def test_message_rendering():
    msg = Message(2, Position(0, 2), "z", ("foo", "bar"))
    assert str(msg) == "Parse error at line 0, column 2: found z, expected one of foo, bar"

    at_end = Message(3, Position(1, 0), EOF)
    assert str(at_end) == "Parse error at line 1, column 0: found EOF"
    assert repr(EOF) == "EOF"


def test_merge_puts_earlier_labels_first():
    earlier = Message(0, Position(0, 0), "x", ("a",))
    later = Message(0, Position(0, 0), "x", ("b", "c"))

    assert later.merge_expected(earlier).expected == ("a", "b", "c")


def test_message_at_reports_the_next_token(initial_state):
    state = initial_state("ab").consume("a")

    assert Message.at(state, ["b"]) == Message(1, Position(0, 1), "b", ("b",))
    assert Message.at(state.consume("b")).input is EOF


def test_empty_message():
    assert Message.empty() == Message(0, Position(0, 0), "", ())


# --- Results ---

def test_parse_raises_parse_error():
    with pytest.raises(ParseError) as exc_info:
        string("foo").parse("bar")

    assert exc_info.value.message.expected == ("foo",)
    assert str(exc_info.value) == str(exc_info.value.message)


def test_get_and_to_either():
    ok = string("foo").run("foo")
    assert isinstance(ok, Ok)
    assert ok.get() == "foo"
    assert ok.to_either() == ("foo", None)

    err = string("foo").run("bar")
    assert isinstance(err, Error)
    assert err.to_either() == (None, err.message)
    with pytest.raises(ParseError):
        err.get()


def test_run_parser():
    assert run_parser(digit(), "7") == ("7", None)

    res, err = run_parser(digit(), "x")
    assert res is None
    assert err.input == "x"
    assert err.expected == ("digit",)


# --- Debug logging ---

def test_named_parsers_log_their_attempts(caplog):
    caplog.set_level(logging.DEBUG, logger="tokparsec")
    keyword = string("foo").named("keyword")

    keyword.run("foo")

    assert repr(keyword) == "keyword"
    assert "running keyword on 3 tokens" in caplog.text
    assert "trying keyword at line 0, column 0" in caplog.text
    assert "keyword matched up to line 0, column 3" in caplog.text


def test_named_parsers_log_failures(caplog):
    caplog.set_level(logging.DEBUG, logger="tokparsec")

    string("foo").named("keyword").run("bar")

    assert "keyword failed at line 0, column 0, expected foo" in caplog.text


def test_named_parsers_are_quiet_above_debug(caplog):
    caplog.set_level(logging.INFO, logger="tokparsec")

    assert string("foo").named("keyword").parse("foo") == "foo"
    assert caplog.text == ""


def test_parser_trace(caplog):
    caplog.set_level(logging.DEBUG, logger="tokparsec")

    p = char('a') >> parser_trace("after a") >> char('b')

    assert p.parse("abc") == "b"
    assert "after a: 'bc' at offset 1, line 0, column 1" in caplog.text


# --- Helpers ---

def test_lazy_allows_recursive_grammars():
    nested = lazy(lambda: parens)
    parens = (char('(') >> nested << char(')')).map(lambda depth: depth + 1) | pure(0)

    assert parens.parse("((()))") == 3
    assert parens.parse("") == 0

    res, err = run_parser(parens, "(()")
    assert res is None
    assert err.input is EOF
    assert err.expected == (")",)


def test_lazy_builds_its_parser_once():
    built = []

    def build():
        built.append(True)
        return digit()

    p = lazy(build)
    p.run("1")
    p.run("2")

    assert len(built) == 1


def test_ap_applies_a_parsed_function():
    increment = char('+').as_(lambda n: n + 1)

    assert ap(increment)(digit().map(int)).parse("4+") == 5


def test_as_replaces_the_value():
    result = char('t').as_(True).run("t")

    assert result.get() is True
    assert result.value.end == Position(0, 1)


def test_filter_not_rejects_without_consuming():
    non_zero = digit().filter_not(lambda d: d == '0').label("non-zero digit")

    assert non_zero.parse("5") == "5"

    result = non_zero.run("0")
    assert isinstance(result, Error)
    assert result.consumed is False
    assert result.message.input == "0"
    assert result.message.expected == ("non-zero digit",)


def test_identifier_and_parser_repr():
    assert identifier().parse("abc_1") == "abc_1"
    assert repr(Parser(digit())).startswith("<Parser at ")


@pytest.mark.parametrize("derive", [
    lambda p: p.map(len),
    lambda p: p.label("kw"),
    lambda p: p.backtrack(),
    lambda p: p.filter(bool),
    lambda p: p.with_position(),
])
def test_derived_parsers_are_unnamed_but_keep_logging(caplog, derive):
    caplog.set_level(logging.DEBUG, logger="tokparsec")
    derived = derive(string("foo").named("keyword"))

    derived.run("foo")

    assert repr(derived).startswith("<Parser at ")
    assert "trying keyword at line 0, column 0" in caplog.text
    assert "keyword matched up to line 0, column 3" in caplog.text
