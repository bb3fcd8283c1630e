import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Generic, List, Optional, Sequence, Tuple, TypeVar, Union

from .Source import CHARS, Parsed, Position, SourceMap, as_tokens, initial_pos, source_map_for

T = TypeVar('T')  # Generic type for parser results
U = TypeVar('U')

log = logging.getLogger("tokparsec")


@dataclass(frozen=True)
class State:
    """
    Parser state: the full token sequence, how far into it we are, and the
    position right after the last consumed token.

    States are never modified; consuming tokens yields a new state.
    """
    input: Sequence[Any]
    offset: int
    pos: Position
    source_map: SourceMap = CHARS

    @classmethod
    def init(cls, tokens: Sequence[Any], source_map: SourceMap = CHARS) -> 'State':
        return cls(tokens, 0, initial_pos, source_map)

    def is_at_end(self) -> bool:
        return self.offset >= len(self.input)

    def starts_at(self, token: Any) -> Position:
        return self.source_map.starts_at(token, self.pos)

    def consume(self, token: Any) -> 'State':
        return replace(self, offset=self.offset + 1, pos=self.source_map.ends_at(token, self.pos))

    def consume_rep(self, tokens: Sequence[Any]) -> 'State':
        # Token widths vary, so the new position has to be walked token by token.
        pos = self.pos
        for token in tokens:
            pos = self.source_map.ends_at(token, pos)
        return replace(self, offset=self.offset + len(tokens), pos=pos)

    def __repr__(self) -> str:
        return f"State(offset={self.offset}, pos={self.pos!r})"


class _Eof:
    """Observed input of a failure that happened at the end of input."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "EOF"

    __str__ = __repr__

EOF = _Eof()


@dataclass(frozen=True)
class Message:
    """
    Describes a parse failure.

    - `offset`: index of the token at which the failure happened.
    - `pos`: where that token starts.
    - `input`: the offending token (or rejected value) as text, or `EOF`.
    - `expected`: labels of what would have been accepted instead.
    """
    offset: int
    pos: Position
    input: Union[str, _Eof]
    expected: Tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> 'Message':
        return cls(0, initial_pos, "", ())

    @classmethod
    def at(cls, state: State, expected: Sequence[str] = ()) -> 'Message':
        """Reports the token under `state` (or the end of input) as unexpected."""
        if state.is_at_end():
            return cls(state.offset, state.pos, EOF, tuple(expected))
        token = state.input[state.offset]
        return cls(state.offset, state.starts_at(token), str(token), tuple(expected))

    def expecting(self, label: str) -> 'Message':
        return replace(self, expected=(label,))

    def merge_expected(self, other: 'Message') -> 'Message':
        """Puts the labels of `other`, an alternative tried earlier, in front of ours."""
        return replace(self, expected=other.expected + self.expected)

    def __str__(self) -> str:
        text = f"Parse error at {self.pos}: found {self.input}"
        if self.expected:
            text += f", expected one of {', '.join(self.expected)}"
        return text


class ParseError(Exception):
    """Raised by `Parser.parse` and `Result.get` when parsing failed."""

    def __init__(self, message: Message):
        super().__init__(str(message))
        self.message = message


class GrammarError(Exception):
    """
    Raised when a grammar cannot terminate, such as repeating a parser that
    succeeds without consuming any input.
    """


class Result(Generic[T]):
    """
    Outcome of running a parser: `Ok` or `Error`.

    Every result knows whether it consumed input, which is what `|` uses to
    decide whether the alternative may still be tried. Successes carry a message
    too, so that `filter` and `collect` have something to report if they turn
    the success into a failure.
    """
    consumed: bool
    message: Message

    def map(self, f: Callable[[T], U]) -> 'Result[U]':
        raise NotImplementedError

    def map_message(self, f: Callable[[Message], Message]) -> 'Result[T]':
        return replace(self, message=f(self.message))

    def label(self, label: str) -> 'Result[T]':
        # A consuming result is not one of several candidates anymore: it is the
        # branch that was taken, and its own message is the more precise one.
        if self.consumed:
            return self
        return self.map_message(lambda msg: msg.expecting(label))

    def consume(self) -> 'Result[T]':
        return self if self.consumed else replace(self, consumed=True)

    def mark_non_consuming(self) -> 'Result[T]':
        return replace(self, consumed=False) if self.consumed else self

    def set_start(self, pos: Position) -> 'Result[T]':
        return self

    def to_either(self) -> Tuple[Optional[T], Optional[Message]]:
        raise NotImplementedError

    def get(self) -> T:
        raise NotImplementedError


@dataclass(frozen=True)
class Ok(Result[T]):
    consumed: bool
    value: Parsed[T]
    state: State
    message: Message

    def map(self, f: Callable[[T], U]) -> 'Result[U]':
        return replace(self, value=self.value.map(f))

    def set_start(self, pos: Position) -> 'Result[T]':
        return replace(self, value=self.value.with_start(pos))

    def to_either(self) -> Tuple[Optional[T], Optional[Message]]:
        return self.value.value, None

    def get(self) -> T:
        return self.value.value


@dataclass(frozen=True)
class Error(Result[Any]):
    consumed: bool
    message: Message

    def map(self, f: Callable[[Any], U]) -> 'Result[U]':
        return self

    def to_either(self) -> Tuple[Optional[Any], Optional[Message]]:
        return None, self.message

    def get(self) -> Any:
        raise ParseError(self.message)


def pure(value: T) -> 'Parser[T]':
    """Succeeds with `value` without consuming input."""
    def parse(state: State) -> Result[T]:
        return Ok(False, Parsed(value, state.pos, state.pos), state, Message.empty())
    return Parser(parse)


class Parser(Generic[T]):
    """
    Parses a sequence of tokens into a `T`.

    Parsers are non-backtracking by default: once an alternative has consumed
    input, it is the alternative, and its failure is the failure. Use
    `backtrack` to opt out, and `label` to describe what a parser expects so
    that failures read "expected one of array, object" rather than "expected [".
    """
    def __init__(self, parse_fn: Callable[[State], Result[T]], name: Optional[str] = None):
        self.parse_fn = parse_fn
        self.name = name

    def __call__(self, state: State) -> Result[T]:
        return self.parse_fn(state)

    def __repr__(self) -> str:
        return self.name if self.name is not None else f"<{type(self).__name__} at {id(self):#x}>"

    # Running

    def run(self,
            source: Any,
            as_tokens: Callable[[Any], Sequence[Any]] = as_tokens,
            source_map: Optional[SourceMap] = None) -> Result[T]:
        """
        Tokenizes `source` and runs the parser from its first token.

        The source map defaults to the one registered for the type of the tokens.
        """
        tokens = as_tokens(source)
        if source_map is None:
            source_map = source_map_for(tokens)
        log.debug("running %r on %d tokens", self, len(tokens))
        result = self(State.init(tokens, source_map))
        if log.isEnabledFor(logging.DEBUG):
            if isinstance(result, Ok):
                log.debug("%r succeeded at offset %d", self, result.state.offset)
            else:
                log.debug("%r failed: %s", self, result.message)
        return result

    def parse(self, source: Any, **kwargs: Any) -> T:
        """Like `run`, but returns the parsed value or raises `ParseError`."""
        return self.run(source, **kwargs).get()

    def named(self, name: str) -> 'Parser[T]':
        """
        Names this parser; named parsers report their attempts to the debug log.

        Only the parser returned here carries the name. Parsers built on top of
        it are unnamed, and still log through it whenever they run it.
        """
        def parse(state: State) -> Result[T]:
            if not log.isEnabledFor(logging.DEBUG):
                return self(state)
            log.debug("trying %s at %s", name, state.pos)
            result = self(state)
            if isinstance(result, Ok):
                log.debug("%s matched up to %s", name, result.state.pos)
            else:
                log.debug("%s failed at %s, expected %s", name, result.message.pos,
                          ", ".join(result.message.expected))
            return result
        return Parser(parse, name)

    # Labels

    def label(self, label: str) -> 'Parser[T]':
        """
        Sets the label of this parser, the description used in error messages.

        The label only replaces the message of non-consuming results; see
        `Result.label`.
        """
        def parse(state: State) -> Result[T]:
            return self(state).label(label)
        return Parser(parse)

    # Filtering

    def filter(self, predicate: Callable[[T], bool]) -> 'Parser[T]':
        """
        Fails any success whose value does not match `predicate`.

        Such failures are non-consuming, even if the underlying parser did read
        input: in `digit().filter(lambda c: c != '9') | char('9')`, input "9"
        must still reach `char('9')`.
        """
        def parse(state: State) -> Result[T]:
            result = self(state)
            if isinstance(result, Ok) and not predicate(result.value.value):
                return Error(False, _rejected(result, state))
            return result
        return Parser(parse)

    def filter_not(self, predicate: Callable[[T], bool]) -> 'Parser[T]':
        return self.filter(lambda value: not predicate(value))

    def collect(self, f: Callable[[T], Optional[U]]) -> 'Parser[U]':
        """
        A `filter` and a `map` rolled into one: `f` returns `None` for values it
        does not accept, which fail the same, non-consuming, way `filter` does.
        """
        def parse(state: State) -> Result[U]:
            result = self(state)
            if not isinstance(result, Ok):
                return result
            mapped = f(result.value.value)
            if mapped is None:
                return Error(False, _rejected(result, state))
            return replace(result, value=Parsed(mapped, result.value.start, result.value.end))
        return Parser(parse)

    # Mapping

    def map(self, f: Callable[[T], U]) -> 'Parser[U]':
        def parse(state: State) -> Result[U]:
            return self(state).map(f)
        return Parser(parse)

    def as_(self, value: U) -> 'Parser[U]':
        return self.map(lambda _: value)

    def with_position(self) -> 'Parser[Parsed[T]]':
        """Tags the parsed value with the span it was parsed from."""
        def parse(state: State) -> Result[Parsed[T]]:
            result = self(state)
            if isinstance(result, Ok):
                return replace(result, value=result.value.map(lambda _: result.value))
            return result
        return Parser(parse)

    # Combining parsers

    def flat_map(self, f: Callable[[T], 'Parser[U]']) -> 'Parser[U]':
        """
        Monadic bind (>>=).

        The combined result starts where this parser's value starts. If this
        parser consumed input, so did the combination, whatever `f` does next.
        """
        def parse(state: State) -> Result[U]:
            result = self(state)
            if not isinstance(result, Ok):
                return result
            next_result = f(result.value.value)(result.state)
            if result.consumed:
                next_result = next_result.consume()
            return next_result.set_start(result.value.start)
        return Parser(parse)

    bind = flat_map

    def __or__(self, other: 'Parser[U]') -> 'Parser[Union[T, U]]':
        """
        Attempts either this parser or `other`.

        `other` is only tried if this parser did not consume input, successful or
        not. With `string("foo") | string("bar")` on "foa", "bar" cannot match
        once "fo" has been read, and the useful error is "expected o, found a",
        not "expected foo or bar".

        Labels of both sides are merged only when neither consumed. If `other`
        consumed, it is the branch that was taken and its result is returned
        as is.
        """
        def parse(state: State) -> Result[Union[T, U]]:
            lhs = self(state)
            if lhs.consumed:
                return lhs
            rhs = other(state)
            if rhs.consumed:
                return rhs
            return rhs.map_message(lambda msg: msg.merge_expected(lhs.message))
        return Parser(parse)

    def and_then(self, other: 'Parser[U]') -> 'Parser[Tuple[T, U]]':
        return self.flat_map(lambda a: other.map(lambda b: (a, b)))

    def then(self, other: 'Parser[U]') -> 'Parser[U]':
        """Sequences two parsers, keeping the value of `other` (*>)."""
        return self.flat_map(lambda _: other)

    def followed_by(self, other: 'Parser[Any]') -> 'Parser[T]':
        """Sequences two parsers, keeping the value of this one (<*)."""
        return self.flat_map(lambda a: other.map(lambda _: a))

    def __and__(self, other: 'Parser[U]') -> 'Parser[Tuple[T, U]]':
        return self.and_then(other)

    def __rshift__(self, other: Union['Parser[U]', Callable[[T], 'Parser[U]']]) -> 'Parser[U]':
        # p >> q keeps q's value, p >> f binds.
        if isinstance(other, Parser):
            return self.then(other)
        return self.flat_map(other)

    def __lshift__(self, other: 'Parser[Any]') -> 'Parser[T]':
        return self.followed_by(other)

    # Misc.

    def between(self, left: 'Parser[Any]', right: 'Parser[Any]') -> 'Parser[T]':
        return left.then(self).followed_by(right)

    def surrounded_by(self, p: 'Parser[Any]') -> 'Parser[T]':
        return self.between(p, p)

    def backtrack(self) -> 'Parser[T]':
        """
        Reports every result of this parser as non-consuming, so that `|` tries
        the alternative even after this parser read input.
        """
        def parse(state: State) -> Result[T]:
            return self(state).mark_non_consuming()
        return Parser(parse)

    def optional(self) -> 'Parser[Optional[T]]':
        """
        Parses this or nothing, yielding `None` for nothing. A failure after
        consuming input is still a failure.
        """
        return self | pure(None)

    # Repetition

    def rep(self) -> 'Parser[List[T]]':
        """
        One or more occurrences.

        Behaves as `self >> (lambda h: self.rep0().map(lambda t: [h] + t))`
        would, but runs in a loop rather than one stack frame per occurrence.
        """
        def parse(state: State) -> Result[List[T]]:
            steps: List[Ok] = []
            current = state
            while True:
                result = self(current)
                if not isinstance(result, Ok):
                    break
                if not result.consumed and result.state.offset == current.offset:
                    raise GrammarError(f"{self!r} succeeded without consuming input inside a repetition")
                steps.append(result)
                current = result.state

            if not steps or result.consumed:
                return result
            return _unwind_rep(steps, result)
        return Parser(parse)

    def rep0(self) -> 'Parser[List[T]]':
        """Zero or more occurrences."""
        return self.rep() | pure([])

    def rep_sep(self, sep: 'Parser[Any]') -> 'Parser[List[T]]':
        """One or more occurrences, separated by `sep`."""
        return (self & sep.then(self).rep0()).map(lambda pair: [pair[0]] + pair[1])

    def rep_sep0(self, sep: 'Parser[Any]') -> 'Parser[List[T]]':
        """Zero or more occurrences, separated by `sep`."""
        return self.rep_sep(sep) | pure([])


def _rejected(result: Ok, state: State) -> Message:
    """Message of a success turned into a failure by `filter` or `collect`."""
    return replace(result.message, offset=state.offset, pos=result.value.start, input=str(result.value.value))

def _unwind_rep(steps: List[Ok], failure: Result[Any]) -> Result[List[Any]]:
    """
    Assembles the result of `rep` from its successful steps and the
    non-consuming failure that ended it.

    Going back from the last step, each step's tail is `rep0` at the state the
    step left off: the tail's own result if it consumed, otherwise an empty
    list at that state carrying the tail's labels.
    """
    last = steps[-1].state
    stop = len(steps)  # steps[:stop] are the values of the current tail
    consumed = False
    end = last.pos
    state = last
    message = Message.empty().merge_expected(failure.message)

    for index in range(len(steps) - 1, -1, -1):
        step = steps[index]
        consumed = step.consumed or consumed
        if index > 0 and not consumed:
            # rep0 at the previous state: its rep did not consume, so the
            # empty alternative is taken instead.
            state = steps[index - 1].state
            stop = index
            end = state.pos
            message = Message.empty().merge_expected(message)

    values = [step.value.value for step in steps[:stop]]
    return Ok(consumed, Parsed(values, steps[0].value.start, end), state, message)
