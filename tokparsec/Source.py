from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from functools import singledispatch
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar('T')
U = TypeVar('U')
Tok = TypeVar('Tok')

@dataclass(frozen=True)
class Position:
    """A line and column in the source, both counted from 0."""
    line: int = 0
    column: int = 0

    def next_line(self) -> 'Position':
        return Position(self.line + 1, 0)

    def next_column(self) -> 'Position':
        return Position(self.line, self.column + 1)

    def __str__(self) -> str:
        return f"line {self.line}, column {self.column}"

initial_pos = Position(0, 0)

@dataclass(frozen=True)
class Parsed(Generic[T]):
    """A value together with the span of input it was parsed from."""
    value: T
    start: Position
    end: Position

    def map(self, f: Callable[[T], U]) -> 'Parsed[U]':
        return Parsed(f(self.value), self.start, self.end)

    def with_start(self, pos: Position) -> 'Parsed[T]':
        return replace(self, start=pos)


class SourceMap(Generic[Tok]):
    """
    Knows where a token starts and ends, given the position right after the
    previous token.

    For characters this is trivial: a character starts where the previous one
    ended. Tokens produced by a separate tokenizing pass usually carry their own
    span, which cannot be derived from their neighbours (think "1   2").
    """

    def starts_at(self, token: Tok, current: Position) -> Position:
        return current

    def ends_at(self, token: Tok, current: Position) -> Position:
        raise NotImplementedError


class CharSourceMap(SourceMap[str]):
    def ends_at(self, token: str, current: Position) -> Position:
        if token == '\n':
            return current.next_line()
        return current.next_column()


class SpanSourceMap(SourceMap[Parsed]):
    """Tokens that already know their own start and end position."""

    def starts_at(self, token: Parsed, current: Position) -> Position:
        return token.start

    def ends_at(self, token: Parsed, current: Position) -> Position:
        return token.end


class FunctionSourceMap(SourceMap[Tok]):
    """Source map built from plain functions, for one-off token types."""

    def __init__(self,
                 ends_at: Callable[[Tok, Position], Position],
                 starts_at: Optional[Callable[[Tok, Position], Position]] = None):
        self._ends_at = ends_at
        self._starts_at = starts_at

    def starts_at(self, token: Tok, current: Position) -> Position:
        if self._starts_at is None:
            return current
        return self._starts_at(token, current)

    def ends_at(self, token: Tok, current: Position) -> Position:
        return self._ends_at(token, current)


CHARS = CharSourceMap()
SPANS = SpanSourceMap()


class MissingSourceMapError(LookupError):
    def __init__(self, token_type: type):
        super().__init__(f"no source map registered for tokens of type {token_type.__name__}")
        self.token_type = token_type


# Dispatches on the token itself; registration is by type, so subclasses share
# their parent's map unless they register their own.
@singledispatch
def _source_map_of(token: Any) -> SourceMap:
    raise MissingSourceMapError(type(token))

def register_source_map(token_type: type, source_map: SourceMap) -> None:
    """Installs the source map used for every token of `token_type`."""
    _source_map_of.register(token_type, lambda _token: source_map)

class RegisteredSourceMap(SourceMap[Any]):
    """
    Looks up the registered source map of every token by its type, so that one
    stream may mix token types with different maps.
    """

    def starts_at(self, token: Any, current: Position) -> Position:
        return _source_map_of(token).starts_at(token, current)

    def ends_at(self, token: Any, current: Position) -> Position:
        return _source_map_of(token).ends_at(token, current)

BY_TYPE = RegisteredSourceMap()

def source_map_for(tokens: Sequence[Any]) -> SourceMap:
    """The source map used for `tokens` when none is given explicitly."""
    if isinstance(tokens, str):
        return CHARS
    return BY_TYPE

register_source_map(str, CHARS)
register_source_map(Parsed, SPANS)


@singledispatch
def as_tokens(source: Any) -> Sequence[Any]:
    """
    Turns a source value into the indexable, finite token sequence parsers run on.

    Strings and other sequences are already indexable and are used as they are;
    any other finite iterable is materialized into a tuple. New source types are
    supported with `as_tokens.register`.
    """
    if isinstance(source, Iterable):
        return tuple(source)
    raise TypeError(f"cannot tokenize a value of type {type(source).__name__}")

@as_tokens.register(str)
def _(source: str) -> Sequence[str]:
    return source

@as_tokens.register(Sequence)
def _(source: Sequence) -> Sequence[Any]:
    return source

# Indexing a deque walks it, and it cannot be sliced.
@as_tokens.register(deque)
def _(source: deque) -> Sequence[Any]:
    return tuple(source)
