from functools import reduce
from typing import Any, Callable, List, Optional

from .Parsec import Error, Message, Ok, Parser, Result, State, T, log, pure
from .Prim import end, fail, one_of, sequence
from .Source import Parsed

OpFuncType = Callable[[T, T], T]

# 1. choice: Tries parsers in order, moving on only while nothing was consumed
def choice(parsers: List[Parser[T]]) -> Parser[T]:
    """
    Applies a list of parsers in order until one consumes input or the list is
    exhausted. Fails without expecting anything if the list is empty.
    """
    if not parsers:
        return fail()
    return one_of(*parsers)

# 2. count: Parses n occurrences of a parser
def count(n: int, p: Parser[T]) -> Parser[List[T]]:
    return sequence([p] * n)

# 3. between: Parses an opening parser, a main parser, and a closing parser
def between(open: Parser[Any], close: Parser[Any], p: Parser[T]) -> Parser[T]:
    """Parses 'open', then 'p', then 'close', returning the result of 'p'."""
    return p.between(open, close)

# 4. option: Tries a parser, returning a default value on failure
def option(x: T, p: Parser[T]) -> Parser[T]:
    """
    Tries parser p; returns its result if successful, else x if it fails without consuming input.
    """
    return p | pure(x)

# 5. option_maybe: Tries a parser, returning Optional[T]
def option_maybe(p: Parser[T]) -> Parser[Optional[T]]:
    return p.optional()

# 6. many / many1 / skip_many: Repetition
def many(p: Parser[T]) -> Parser[List[T]]:
    """Parse zero or more occurrences of `p`."""
    return p.rep0()

def many1(p: Parser[T]) -> Parser[List[T]]:
    """Parse one or more occurrences of `p`."""
    return p.rep()

def skip_many(p: Parser[Any]) -> Parser[None]:
    return p.rep0().as_(None)

# 7. sep_by / sep_by1: Occurrences separated by a separator
def sep_by(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    """
    Parses zero or more occurrences of p separated by sep, returning a list of p's results.
    """
    return p.rep_sep0(sep)

def sep_by1(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    return p.rep_sep(sep)

# 8. end_by: Occurrences each followed by a separator
def end_by(p: Parser[T], sep: Parser[Any]) -> Parser[List[T]]:
    """
    Parses zero or more occurrences of p, each followed by sep, returning a list of p's results.
    """
    return p.followed_by(sep).rep0()

# 9. chainl1: Left-associative operator chain
def chainl1(p: Parser[T], op: Parser[OpFuncType]) -> Parser[T]:
    """
    Parses one or more p separated by op, applying op left-associatively.
    """
    def fold(pair):
        first, rest = pair
        return reduce(lambda acc, step: step[0](acc, step[1]), rest, first)
    return (p & (op & p).rep0()).map(fold)

# 10. chainr1: Right-associative operator chain
def chainr1(p: Parser[T], op: Parser[OpFuncType]) -> Parser[T]:
    """
    Parses one or more p separated by op, applying op right-associatively.
    """
    def fold(pair):
        first, rest = pair
        if not rest:
            return first
        # [t0, (op1, t1), (op2, t2)] is t0 op1 (t1 op2 t2)
        terms = [first] + [term for _, term in rest]
        acc = terms[-1]
        for index in range(len(rest) - 1, -1, -1):
            acc = rest[index][0](terms[index], acc)
        return acc
    return (p & (op & p).rep0()).map(fold)

# 11. eof: Succeeds only at the end of input
def eof() -> Parser[None]:
    return end().label("end of input")

# 12. not_followed_by: Succeeds if a parser fails
def not_followed_by(p: Parser[Any]) -> Parser[None]:
    """
    Succeeds without consuming when `p` fails. When `p` succeeds, fails without
    consuming, reporting what `p` matched and expecting "not <matched>".
    """
    def parse(state: State) -> Result[None]:
        result = p(state)
        if isinstance(result, Ok):
            matched = str(result.value.value)
            msg = Message(state.offset, result.value.start, matched, (f"not {matched}",))
            return Error(False, msg)
        return Ok(False, Parsed(None, state.pos, state.pos), state, Message.empty())
    return Parser(parse)

# 13. parser_trace: Debugging parser that logs the remaining input
def parser_trace(label_str: str) -> Parser[None]:
    def parse(state: State) -> Result[None]:
        remaining = state.input[state.offset:state.offset + 30]
        more = '...' if len(state.input) - state.offset > 30 else ''
        log.debug("%s: %r%s at offset %d, %s", label_str, remaining, more, state.offset, state.pos)
        return Ok(False, Parsed(None, state.pos, state.pos), state, Message.empty())
    return Parser(parse)
