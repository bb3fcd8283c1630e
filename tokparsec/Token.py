from dataclasses import replace
from typing import Any, Callable, List, Sequence, Tuple

from .Parsec import Error, Message, Ok, Parser, Result, State
from .Source import Parsed


class TokenParser(Parser[Any]):
    """
    Matches single tokens against a predicate.

    Knowing that it works directly on the input lets it treat repetition as a
    range over the token array instead of one step per token: `digit().rep()`
    on "567" slices indices 0 to 3 in one go rather than parsing '5', '6' and
    '7' individually. Results are exactly those of the step-by-step version.
    """

    def __init__(self, predicate: Callable[[Any], bool], expected: Sequence[str] = ()):
        self.predicate = predicate
        self.expected: Tuple[str, ...] = tuple(expected)
        super().__init__(self._match)

    def _match(self, state: State) -> Result[Any]:
        if state.is_at_end():
            return Error(False, Message.at(state, self.expected))
        token = state.input[state.offset]
        if not self.predicate(token):
            return Error(False, Message.at(state, self.expected))
        new_state = state.consume(token)
        return Ok(True, Parsed(token, state.starts_at(token), new_state.pos), new_state, Message.empty())

    def label(self, label: str) -> 'TokenParser':
        # Single token matches only fail without consuming, so the label always
        # ends up on failures.
        return TokenParser(self.predicate, (label,))

    def _scan(self, state: State, allow_empty: bool) -> Result[List[Any]]:
        tokens = state.input
        start = stop = state.offset
        while stop < len(tokens) and self.predicate(tokens[stop]):
            stop += 1

        if start == stop:
            if not allow_empty:
                return Error(False, Message.at(state, self.expected))
            return Ok(False, Parsed([], state.pos, state.pos), state, _run_labels(self.expected))

        value = list(tokens[start:stop])
        new_state = state.consume_rep(value)
        # The run starts where its first token starts, which is not necessarily
        # where the previous token ended.
        parsed = Parsed(value, state.starts_at(tokens[start]), new_state.pos)
        return Ok(True, parsed, new_state, _run_labels(self.expected))

    def rep(self) -> Parser[List[Any]]:
        return Parser(lambda state: self._scan(state, allow_empty=False))

    def rep0(self) -> Parser[List[Any]]:
        return Parser(lambda state: self._scan(state, allow_empty=True))


def _run_labels(expected: Tuple[str, ...]) -> Message:
    """Message left on a successful run: the labels of the token that ended it."""
    return replace(Message.empty(), expected=expected)
