from functools import reduce
from typing import Any, Callable, Iterable, List, Optional, Tuple

from .Parsec import Error, Message, Ok, Parser, Result, State, T, U, pure
from .Source import Parsed
from .Token import TokenParser

__all__ = [
    "pure", "fail", "satisfy", "token", "end", "sequence", "one_of", "lazy", "ap", "run_parser",
]

def satisfy(predicate: Callable[[Any], bool]) -> TokenParser:
    """Parses a single token for which `predicate` holds, and returns it."""
    return TokenParser(predicate)

def token() -> TokenParser:
    """Parses any single token."""
    return TokenParser(lambda _: True)

def fail(*expected: str) -> Parser[Any]:
    """A parser that always fails without consuming, expecting `expected`."""
    def parse(state: State) -> Result[Any]:
        return Error(False, Message.at(state, expected))
    return Parser(parse)

def end() -> Parser[None]:
    """Succeeds, without consuming, only at the end of input."""
    def parse(state: State) -> Result[None]:
        if state.is_at_end():
            return Ok(False, Parsed(None, state.pos, state.pos), state, Message.empty())
        return Error(False, Message.at(state, ["EOF"]))
    return Parser(parse)

def sequence(parsers: Iterable[Parser[T]]) -> Parser[List[T]]:
    """
    Runs `parsers` one after the other and collects their values.

    Equivalent to folding `flat_map` from the right, down to `pure([])`, without
    the nesting: the first failure is returned, consuming if anything before it
    consumed.
    """
    parsers = list(parsers)
    if not parsers:
        return pure([])

    def parse(state: State) -> Result[List[T]]:
        values: List[T] = []
        consumed = False
        start = None
        current = state
        for p in parsers:
            result = p(current)
            if not isinstance(result, Ok):
                return result.consume() if consumed else result
            if start is None:
                start = result.value.start
            consumed = consumed or result.consumed
            values.append(result.value.value)
            current = result.state
        return Ok(consumed, Parsed(values, start, current.pos), current, Message.empty())
    return Parser(parse)

def one_of(head: Parser[T], *tail: Parser[T]) -> Parser[T]:
    """`head | tail[0] | tail[1] | ...`"""
    return reduce(lambda acc, p: acc | p, tail, head)

def lazy(thunk: Callable[[], Parser[T]]) -> Parser[T]:
    """Defers building a parser until it first runs, for recursive grammars."""
    cell: List[Parser[T]] = []
    def parse(state: State) -> Result[T]:
        if not cell:
            cell.append(thunk())
        return cell[0](state)
    return Parser(parse)

def ap(ff: Parser[Callable[[T], U]]) -> Callable[[Parser[T]], Parser[U]]:
    """Lifts a parsed function: `ap(ff)(fa)` parses `fa`, then `ff`, and applies."""
    def apply(fa: Parser[T]) -> Parser[U]:
        return fa.flat_map(lambda a: ff.map(lambda f: f(a)))
    return apply

def run_parser(parser: Parser[T], source: Any, **kwargs: Any) -> Tuple[Optional[T], Optional[Message]]:
    """Runs `parser` on `source`, returning `(value, None)` or `(None, message)`."""
    return parser.run(source, **kwargs).to_either()
