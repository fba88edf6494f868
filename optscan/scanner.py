"""
optscan token scanner: find long options in a token vector and extract their values.

Accepted forms
- '--key value'  → spaced: the next token is the value unless it looks like an
                   option (starts with '-'); both tokens are consumed.
- '--key=value'  → inline: the text after '=' is the value; only the key token
                   is consumed. '--key=' captures an empty value.
- '--key'        → bare: no qualifying next token; nothing is captured and only
                   the key token is consumed, so the argument resolves to its default.

Matching
- a token matches key K when it starts with exactly two hyphens, the third
  character is an ASCII letter or digit, and the text after the hyphens starts
  with K. This is a prefix test: key 'name' also matches '--namespace'. The rest
  of such a token ('space') is the reserved glued form, which captures and
  consumes nothing. Only the first matching token is considered.

Known gaps (not implemented)
- grouped short options ('-abc' as '-a -b -c').
- short options in general, including glued short values ('-ofoo').

The token vector is shared: every extraction mutates it in place, so each key is
scanned against what the previous keys left behind.
"""
import sys
from collections.abc import Iterable
from enum import Enum
from typing import NamedTuple

from rich.console import Console

from .utils import Unset

console = Console(stderr=True)


class Form(Enum):
    ABSENT = "absent"
    SPACED = "spaced"
    INLINE = "inline"
    BARE = "bare"
    GLUED = "glued"


class Extraction(NamedTuple):
    """
    Outcome of one extraction.

    - form: which syntax matched (Form.ABSENT when the key was not found).
    - value: the captured raw string, or Unset for ABSENT and GLUED.
    - index: position of the key token before removal, or None.
    - consumed: the tokens removed from the vector, in order.
    """
    form: Form
    value: object = Unset
    index: object = None
    consumed: tuple = ()


def normalize(prompt=Unset, /):
    """
    Build the working token vector.

    Empty tokens are dropped. If nothing remains, the process's own arguments
    (sys.argv without the program name) are used instead, also without empties.

    Raises
    - TypeError: when prompt is not Unset or an iterable of strings.
    """
    if prompt is Unset:
        prompt = ()
    elif isinstance(prompt, str) or not isinstance(prompt, Iterable):
        raise TypeError("normalize() argument must be an iterable of strings")

    def _sanitized(iterable):
        for item in iterable:
            if not isinstance(item, str):
                raise TypeError("normalize() argument must be an iterable of strings")
            if item:
                yield item

    if tokens := list(_sanitized(prompt)):
        return tokens
    return list(_sanitized(sys.argv[1:]))


def is_option(token, /):
    return token.startswith("-")


def is_long_option(token, /):
    """
    True for '--x...' where x is an ASCII letter or digit.
    """
    return len(token) > 2 and token[:2] == "--" and token[2].isascii() and token[2].isalnum()


def locate(tokens, key, /):
    """
    Index of the first token matching key (prefix semantics), or None.
    """
    if not key:
        return None
    for index, token in enumerate(tokens):
        if is_long_option(token) and token[2:].startswith(key):
            return index
    return None


def extract(tokens, key, /):
    """
    Locate key in tokens, pull out its value and remove the consumed tokens.

    The list is mutated in place; tokens that are not consumed keep their
    relative order. Returns an Extraction describing what happened.
    """
    if (index := locate(tokens, key)) is None:
        return Extraction(Form.ABSENT)

    rest = tokens[index][2 + len(key):]

    if not rest:
        following = index + 1
        if following < len(tokens) and not is_option(tokens[following]):
            consumed = tuple(tokens[index:following + 1])
            del tokens[index:following + 1]
            return Extraction(Form.SPACED, consumed[1], index, consumed)
        consumed = (tokens.pop(index),)
        return Extraction(Form.BARE, "", index, consumed)

    if rest.startswith("="):
        consumed = (tokens.pop(index),)
        return Extraction(Form.INLINE, rest[1:], index, consumed)

    return Extraction(Form.GLUED, Unset, index)


class Scanner:
    """
    Stateful scan over one token vector.

    Usage
        scanner = Scanner(["a/b", "--depth", "5", "c"])
        scanner.scan("depth", argument)   # argument.captured == "5"
        scanner.remainder                 # ("a/b", "c")

    When trace is True every step is logged to the stderr console.
    """

    def __init__(self, tokens, /, *, trace=False):
        if not isinstance(tokens, list):
            raise TypeError("Scanner() argument must be a list of tokens")
        self._tokens = tokens
        self.trace = trace

    @property
    def tokens(self):
        return self._tokens

    @property
    def remainder(self):
        return tuple(self._tokens)

    def scan(self, key, argument, /):
        """
        Extract key from the shared vector and capture the value on argument.

        Spaced, inline and bare matches store their value (bare stores ""); absent
        and glued matches leave the argument untouched.
        """
        extraction = extract(self._tokens, key)

        if extraction.form in (Form.SPACED, Form.INLINE, Form.BARE):
            argument.capture(extraction.value)

        if self.trace:
            console.log(
                "scan --%s: %s" % (key, extraction.form.value),
                {"value": extraction.value, "index": extraction.index, "consumed": extraction.consumed},
            )
        return extraction


__all__ = (
    "Form",
    "Extraction",
    "Scanner",
    "normalize",
    "is_option",
    "is_long_option",
    "locate",
    "extract",
)
