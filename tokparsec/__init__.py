# Core
from .Source import (
    Position, Parsed, initial_pos,
    SourceMap, CharSourceMap, SpanSourceMap, FunctionSourceMap, RegisteredSourceMap,
    CHARS, SPANS, BY_TYPE,
    MissingSourceMapError, register_source_map, source_map_for, as_tokens
)
from .Parsec import (
    Parser, State, Message, EOF, Result, Ok, Error,
    ParseError, GrammarError, pure
)
from .Prim import run_parser, fail, satisfy, token, end, sequence, one_of, lazy, ap

# Contiguous runs of tokens
from .Token import TokenParser

# Characters
from .Char import (
    char, string, letter, digit, whitespace, alpha_num,
    upper, lower, hex_digit, newline, any_of, none_of, identifier
)

# Combinators
from .Combinators import (
    choice, count, between, option, option_maybe,
    many, many1, skip_many, sep_by, sep_by1, end_by,
    chainl1, chainr1, eof, not_followed_by, parser_trace
)
