r"""
optscan argument descriptors.

Overview
- Argument: one declared option (its short/long spelling, type tag, default and
  help text) plus the raw string captured for it by the scanner.

Lifecycle
- Declared   → Argument(...) checks the metadata types.
- Validated  → validate() trims the keys and rejects unusable spellings.
- Registered → a Parser indexes it by short and/or long key.
- Resolved   → the scanner stores the raw string it found via capture().
- Parsed     → resolve() turns captured-or-default into the typed value.

Metadata
- short: "" or a single ASCII alphanumeric character (e.g. "o").
- long: "" or an identifier (e.g. "outfile"); matched against "--outfile".
- type: a type tag understood by the type registry (see optscan.coercions).
- default: returned as-is when nothing was captured; never coerced.
- descr: help text (str or rich Text), None when not given.

Quick example:
    >>> from optscan import Argument, Type
    >>> depth = Argument("d", "depth", Type.INT, 2, "the traversal depth")
    >>> depth.resolve()
    2
    >>> depth.resolve("5")
    5
"""
import functools
import operator
import re

from rich.text import Text

from .coercions import Type, types
from .faults import ConfigError
from .utils import *

# what the scanner can find after '--': an ASCII letter or digit, then no blanks or '='
_LONG_KEY = re.compile(r"[A-Za-z0-9][^\s=]*")


class ArgumentType(type):
    """
    Metaclass providing stable introspection for descriptors.

    - __typename__ is derived from the class name (camel-case split with hyphens).
    - every name in __introspectable__ becomes a read-only property over "_{name}".
    - __repr__/__rich_repr__ list the introspectable fields.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"
        self.__repr__ = __repr__

        if "__rich_repr__" not in namespace:
            @rename("__rich_repr__")
            def __rich_repr__(self):
                for name in type(self).__introspectable__:
                    yield name, getattr(self, name)
            self.__rich_repr__ = __rich_repr__

        return self


class Argument(metaclass=ArgumentType):
    """
    Named, typed option descriptor.

    Properties
    - short, long, type, descr, captured are read-only mirrors of the private fields.
    - default is returned untouched (it is trusted to already carry the right type).
    """

    __introspectable__ = (
        "short",
        "long",
        "type",
        "descr",
        "captured",
    )

    def __init__(self, short="", long="", type=Type.STRING, default=None, descr=Unset):
        if not isinstance(short, str):
            raise TypeError(f"{__class__.__typename__} 'short' must be a string")
        if not isinstance(long, str):
            raise TypeError(f"{__class__.__typename__} 'long' must be a string")
        if not isinstance(descr, str | Text | Unset):
            raise TypeError(f"{__class__.__typename__} 'descr' must be a string")

        self._short = short
        self._long = long
        self._type = type
        self._default = default
        self._descr = coalesce(descr)
        self._captured = ""

    @property
    def default(self):
        return self._default

    def __rich_repr__(self):
        yield "short", self._short
        yield "long", self._long
        yield "type", self._type
        yield "default", self._default
        yield "descr", self._descr
        yield "captured", self._captured

    def validate(self):
        """
        Trim both keys and check that the argument can be registered.

        Raises
        - ConfigError: if both keys are empty after trimming, if the short key
          is not a single ASCII alphanumeric character, or if the long key does
          not start with one or holds whitespace or an "=".
        """
        self._short = self._short.strip()
        self._long = self._long.strip()

        if not self._short and not self._long:
            raise ConfigError(
                "either the short or the long key must be non-empty",
                argument=self,
                hint="declare a long key such as 'depth' or a short key such as 'd'",
            )
        if self._short and not (len(self._short) == 1 and self._short.isascii() and self._short.isalnum()):
            raise ConfigError(
                "short key %r must be a single alphanumeric character" % self._short,
                argument=self,
                key=self._short,
                hint="use a long key for multi-character spellings",
            )
        if self._long and not _LONG_KEY.fullmatch(self._long):
            raise ConfigError(
                "long key %r cannot be matched as '--%s'" % (self._long, self._long),
                argument=self,
                key=self._long,
                hint="start with a letter or digit and leave out whitespace and '='",
            )
        return self

    def capture(self, value, /):
        if not isinstance(value, str):
            raise TypeError("capture() argument must be a string")
        self._captured = value

    def resolve(self, value="", /, *, registry=types, **options):
        """
        Return the typed value for this argument.

        The first non-empty string of (value, captured) is coerced through the
        registry; when both are empty the default is returned without coercion.

        Raises
        - UnknownTypeError / ParseError: propagated from the registry.
        """
        if not (value := value or self._captured):
            return self._default
        return registry.coerce(self._type, value, argument=self, **options)


__all__ = (
    "Argument",
)

# Not part of the public API.
del ArgumentType
