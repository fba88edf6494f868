"""
optscan faults (errors) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every user-facing fault.
- ParserException: base type carrying a message plus read-only options; knows how
  to render itself with rich in a short, lowercased, actionable way.
- ConfigError / DuplicateKeyError / UnknownTypeError / ParseError / NotFoundError:
  the concrete faults raised by declarations, coercions and lookups.
- report(): print any fault to the stderr console (the library's logging surface).

Integration
- Faults are always raised to the caller; nothing here exits the process.
- Hosts may customize output by defining, in __main__:
  • __prog__   → program name shown in the header.
  • __styles__ → palette overrides (keys listed in ParserException.__rich__).
  • __codes__  → FaultCode → label remapping (see FaultCode.normalize()).
"""
import os.path
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers).

    grouping
    - declarations (2110x)
      • CONFIG, DUPLICATE_KEY
    - coercions (2120x)
      • UNKNOWN_TYPE, PARSE
    - lookups (2130x)
      • NOT_FOUND
    """
    # --- declaration errors ---
    CONFIG        = 21101
    DUPLICATE_KEY = 21102

    # --- coercion errors ---
    UNKNOWN_TYPE  = 21201
    PARSE         = 21202

    # --- lookup errors ---
    NOT_FOUND     = 21301

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class ParserException(Exception):
    """
    base class of every optscan fault.

    options (all optional, read-only once built)
    - title: short headline shown in the rendered header.
    - code: FaultCode for the header; subclasses provide a default.
    - hint: one actionable sentence shown after the message.
    - colorful/fancy: rendering switches used by __rich__.
    - any context the raiser wants to attach (key, namespace, argument, ...).
    """
    __faultcode__ = Unset
    __title__ = "parser error"

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(*(() if message is Unset else (message,)))
        self.message = message
        self.options = MappingProxyType({
            "title": type(self).__title__,
            "code": type(self).__faultcode__,
            "hint": Unset,
        } | options)

    def __str__(self):
        return "" if self.message is Unset else self.message

    def __getattr__(self, name):
        # context options double as attributes (error.key, error.namespace, ...)
        try:
            return self.__dict__["options"][name]
        except KeyError:
            raise AttributeError(name) from None

    def __rich__(self):
        main = __import__("__main__")
        colorful = self.options.get("colorful", True)
        fancy = self.options.get("fancy", False)

        styles = defaultdict(str, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        } | getattr(main, "__styles__", {}))

        def styler(style):
            return styles[style] if colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment
            return Text(str(fragment), style)

        name = getattr(main, "__prog__", os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "optscan")
        code = self.options["code"]

        header = Text.assemble(
            "[ ",
            text(name, styler("prog-name")),
            " — ",
            text(code.normalize() if isinstance(code, FaultCode) else "-", styler("code")),
            " | ",
            text(str(self.options["title"]).title(), styler("error-title")),
            " ]"
        )
        message = text(str(self), styler("error-message"))

        renders = [message]
        if self.options["hint"]:
            renders.append(Text.assemble(text(" → ", styler("hint-arrow")), text(self.options["hint"], styler("hint"))))

        if fancy:
            return Panel(Group(*renders), title=header, title_align="left")

        return Group(header, *renders)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        replaced = type(self)(self.message, **{**self.options, **overrides})
        replaced.__cause__ = self.__cause__
        return replaced


class ConfigError(ParserException, ValueError):
    __faultcode__ = FaultCode.CONFIG
    __title__ = "bad declaration"


class DuplicateKeyError(ParserException):
    __faultcode__ = FaultCode.DUPLICATE_KEY
    __title__ = "duplicated key"


class UnknownTypeError(ParserException):
    __faultcode__ = FaultCode.UNKNOWN_TYPE
    __title__ = "unknown type"


class ParseError(ParserException, ValueError):
    __faultcode__ = FaultCode.PARSE
    __title__ = "invalid value"


class NotFoundError(ParserException, LookupError):
    __faultcode__ = FaultCode.NOT_FOUND
    __title__ = "unknown key"


def report(fault, /, **options):
    """
    print a fault to the stderr console.

    options override the fault's own rendering options (e.g. colorful=False,
    fancy=True) without mutating it.
    """
    if not isinstance(fault, ParserException):
        raise TypeError("report() argument must be a parser exception")
    console.print(fault.__replace__(**options) if options else fault)


__all__ = (
    "ParserException",
    "ConfigError",
    "DuplicateKeyError",
    "UnknownTypeError",
    "ParseError",
    "NotFoundError",
    "FaultCode",
    "report",
)
