"""
optscan parser: declare options, scan a token stream, query typed values.

What this module provides
- Parser: owns the short-key and long-key namespaces, the working token vector,
  the type registry and the parsed-value cache.

Flow
    parser = Parser(["a/b", "--depth", "5", "c"])
    parser.add("depth", Type.INT, 2, "the traversal depth")
    parser.parse()
    parser.get("depth")   # 5
    parser.args           # ("a/b", "c")

Parsing
- every registered long key is scanned, in lexicographic order, against the
  shared token vector (see optscan.scanner for the accepted forms).
- every key of both namespaces (short first, then long; each lexicographic)
  is then resolved and coerced, and the result is cached under that key in
  that namespace's cache. A descriptor registered under both keys yields two
  cache entries, and a short key spelled like a long key never hides it.
- lookups without a namespace try the long cache first, then the short one.
- a coercion failure stops the pass: the failing key has no cache entry,
  keys processed before it keep theirs.

Threading
- a reentrant lock guards the namespaces, the token vector and the cache;
  parse() holds it for the whole scan-and-coerce pass.
"""
import shlex
from collections import defaultdict
from threading import RLock
from types import MappingProxyType

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import Argument
from .coercions import Type, TypeRegistry, types
from .faults import DuplicateKeyError, NotFoundError, ParserException
from .scanner import Scanner, console, normalize
from .utils import *


class Parser:
    """
    Option registry and parser for one token stream.

    Parameters
    - prompt:
      • Unset: read tokens from sys.argv[1:].
      • str: shell-like string; split via shlex.split.
      • Iterable[str]: pre-tokenized sequence.
      Empty tokens are dropped; if none remain, sys.argv[1:] is used.
    - registry: TypeRegistry used for coercions (a private copy of the default
      registry when omitted).
    - trace: log scan and coercion steps to the stderr console.
    - colorful / fancy: rendering switches for help output.
    """

    def __init__(self, prompt=Unset, /, *, registry=Unset, trace=False, colorful=True, fancy=False):
        if isinstance(prompt, str):
            prompt = shlex.split(prompt)
        if registry is not Unset and not isinstance(registry, TypeRegistry):
            raise TypeError("Parser() 'registry' must be a type registry")

        self._lock = RLock()
        self._tokens = normalize(prompt)
        self._registry = types.copy() if registry is Unset else registry
        self._shorts = {}
        self._longs = {}
        self._cache = {"short": {}, "long": {}}

        self.trace = bool(trace)
        self.colorful = bool(colorful)
        self.fancy = bool(fancy)

    def __repr__(self):
        with self._lock:
            return "parser(longs=%r, shorts=%r, args=%r)" % (sorted(self._longs), sorted(self._shorts), self._tokens)

    @property
    def registry(self):
        return self._registry

    @property
    def shorts(self):
        with self._lock:
            return MappingProxyType(dict(self._shorts))

    @property
    def longs(self):
        with self._lock:
            return MappingProxyType(dict(self._longs))

    @property
    def args(self):
        """
        Tokens not consumed by any option, in their original relative order.
        """
        with self._lock:
            return tuple(self._tokens)

    def register(self, argument, /):
        """
        Validate an argument and index it under its short and long keys.

        Both namespaces are checked before anything is inserted, so a collision
        leaves the parser unchanged. Declared types play no part in uniqueness.

        Raises
        - TypeError: if argument is not an Argument.
        - ConfigError: from argument.validate().
        - DuplicateKeyError: with namespace ("short" or "long") and key.
        """
        if not isinstance(argument, Argument):
            raise TypeError("register() argument must be an argument")
        argument.validate()

        with self._lock:
            for namespace, key, keys in (
                ("short", argument.short, self._shorts),
                ("long", argument.long, self._longs),
            ):
                if key and key in keys:
                    raise DuplicateKeyError(
                        "%s key %r is already registered" % (namespace, key),
                        namespace=namespace,
                        key=key,
                        argument=argument,
                        hint="pick another spelling; each %s key can be declared only once" % namespace,
                    )
            if argument.short:
                self._shorts[argument.short] = argument
            if argument.long:
                self._longs[argument.long] = argument
        return argument

    def add(self, long, type=Type.STRING, default=None, descr=Unset, /):
        """
        Declare a long-only option (e.g. add("depth", Type.INT, 2, "the traversal depth")).
        """
        return self.register(Argument("", long, type, default, descr))

    def add_option(self, short, long, type=Type.STRING, default=None, descr=Unset, /):
        """
        Declare an option with a short and/or a long key.
        """
        return self.register(Argument(short, long, type, default, descr))

    def parse(self):
        """
        Scan the token vector for every long key, then coerce and cache every value.

        Raises
        - UnknownTypeError: a captured string has a type with no coercion.
        - ParseError: a captured string cannot be coerced; carries key and argument.
        """
        with self._lock:
            scanner = Scanner(self._tokens, trace=self.trace)
            for key in sorted(self._longs):
                scanner.scan(key, self._longs[key])

            for namespace, arguments in (("short", self._shorts), ("long", self._longs)):
                cache = self._cache[namespace]
                for key in sorted(arguments):
                    try:
                        cache[key] = arguments[key].resolve(registry=self._registry, key=key, namespace=namespace)
                    except ParserException:
                        cache.pop(key, None)
                        raise
                    if self.trace:
                        console.log("coerce %s %r" % (namespace, key), {"value": cache[key]})

    def _caches(self, namespace):
        # (namespace, cache) pairs in lookup order
        if namespace is Unset:
            return ("long", self._cache["long"]), ("short", self._cache["short"])
        if namespace not in self._cache:
            raise ValueError("namespace must be 'short' or 'long', not %r" % (namespace,))
        return (namespace, self._cache[namespace]),

    def get(self, key, default=None, /, *, namespace=Unset):
        """
        Cached value for key, or default when the key has no cache entry.

        namespace ("short" or "long") restricts the lookup to one cache; by
        default the long cache is tried before the short one.
        """
        with self._lock:
            for _, cache in self._caches(namespace):
                if key in cache:
                    return cache[key]
            return default

    def value(self, key, /, *, namespace=Unset):
        """
        Cached value for key (namespace as in get()).

        Raises
        - NotFoundError: the key was never registered or never resolved.
        """
        with self._lock:
            caches = self._caches(namespace)
            for _, cache in caches:
                if key in cache:
                    return cache[key]

            registries = {"short": self._shorts, "long": self._longs}
            registered = any(key in registries[name] for name, _ in caches)
            raise NotFoundError(
                "key %r %s" % (key, "was not parsed yet" if registered else "is not registered"),
                key=key,
                namespace=coalesce(namespace),
                hint="call parse() first" if registered else "declare it with add() or add_option()",
            )

    def render_help(self):
        """
        Build a rich table of the declared options.

        Palette keys (override via __styles__ in __main__)
        - short-name, long-name, type-name, default-value, argument-description
        """
        styles = defaultdict(str, {
            "short-name": "bold #22C55E",  # GREEN for short spellings
            "long-name": "bold #00E6FF",  # CYAN for long spellings
            "type-name": "bold #FFD600",  # AMBER for types
            "default-value": "#D1D5DB",  # light gray
            "argument-description": "#9CA3AF",  # muted gray
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        table = Table(box=None, show_header=False, pad_edge=False)
        table.add_column("names", no_wrap=True)
        table.add_column("type", no_wrap=True)
        table.add_column("default")
        table.add_column("description")

        with self._lock:
            seen = []
            for namespace in (self._longs, self._shorts):
                for key in sorted(namespace):
                    if namespace[key] not in seen:
                        seen.append(namespace[key])

        for argument in seen:
            names = Text(", ").join(part for part in (
                Text("-" + argument.short, styler("short-name")) if argument.short else None,
                Text("--" + argument.long, styler("long-name")) if argument.long else None,
            ) if part is not None)
            table.add_row(
                names,
                Text(getattr(argument.type, "name", str(argument.type)).lower(), styler("type-name")),
                Text("(default: %r)" % (argument.default,), styler("default-value")),
                Text(str(argument.descr or ""), styler("argument-description")),
            )

        if self.fancy:
            return Panel(table, title="options", title_align="left")
        return table

    def print_help(self):
        Console(stderr=True).print(self.render_help())


__all__ = (
    "Parser",
)
