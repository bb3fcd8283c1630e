from typing import Callable, Union

from .Parsec import Parser
from .Prim import satisfy, sequence
from .Token import TokenParser

# Helper function: Parses a single character, given either itself or a predicate
def char(c: Union[str, Callable[[str], bool]]) -> TokenParser:
    """Parses the character `c` (labelled with it), or any character matching `c` if it is a predicate."""
    if callable(c):
        return satisfy(c)
    return satisfy(lambda x: x == c).label(c)

# Core function: Parses a specific string
def string(s: str) -> Parser[str]:
    """
    Parses the exact string `s` and returns it.

    Every character reports `s` as expected, so that failing halfway through
    "foo" on "faz" says "expected foo" at the 'a'.
    """
    return sequence([char(c).label(s) for c in s]).map("".join).label(s)

# 1. letter: Parses an alphabetic character
def letter() -> TokenParser:
    """Parses an alphabetic character and returns it."""
    return satisfy(str.isalpha).label("letter")

# 2. digit: Parses a decimal digit
def digit() -> TokenParser:
    """Parses a digit and returns it."""
    return satisfy(str.isdigit).label("digit")

# 3. whitespace: Parses a whitespace character
def whitespace() -> TokenParser:
    return satisfy(str.isspace).label("whitespace")

# 4. alphaNum: Parses an alphanumeric character
def alpha_num() -> TokenParser:
    return satisfy(str.isalnum).label("letter or digit")

# 5. upper: Parses an uppercase letter
def upper() -> TokenParser:
    return satisfy(str.isupper).label("uppercase letter")

# 6. lower: Parses a lowercase letter
def lower() -> TokenParser:
    return satisfy(str.islower).label("lowercase letter")

# 7. hexDigit: Parses a hexadecimal digit
def hex_digit() -> TokenParser:
    """Parses a hexadecimal digit (0-9, a-f, A-F) and returns it."""
    return satisfy(lambda c: c in "0123456789abcdefABCDEF").label("hexadecimal digit")

# 8. newline: Parses a newline character
def newline() -> TokenParser:
    return char('\n').label("new-line")

# 9. oneOf: Parses any character in the given string
def any_of(cs: str) -> TokenParser:
    """Succeeds if the current character is in `cs`."""
    return satisfy(lambda c: c in cs).label(f"one of {cs}")

# 10. noneOf: Parses any character not in the given string
def none_of(cs: str) -> TokenParser:
    """Succeeds if the current character is not in `cs`."""
    return satisfy(lambda c: c not in cs).label(f"none of {cs}")

# 11. identifier: Parses a run of letters, digits and underscores
def identifier() -> Parser[str]:
    """Letters, digits and underscores, at least one."""
    return (letter() | digit() | char('_')).rep().map("".join)
