"""
optscan type registry: type tags and their string coercions.

Overview
- Type: enumerated tags identifying the supported value kinds.
- parse_*: pure str → value coercions. They raise ValueError for malformed input
  and OverflowError for out-of-range input, like the builtin converters do.
- TypeRegistry: tag → coercion mapping. Wraps coercion failures in ParseError and
  reports unregistered tags with UnknownTypeError.
- types: the default registry. Parsers take a private copy of it.

Notes
- Type.INTERFACE has no built-in coercion: a default of any kind passes through
  untouched, but asking to coerce a captured string fails with UnknownTypeError
  unless the host registers one.
- Integers are checked against the 32-bit ranges; there are no 64-bit integer tags.
"""
import math
import re
import struct
from enum import IntEnum
from fractions import Fraction
from threading import Lock

from .faults import DuplicateKeyError, ParseError, UnknownTypeError
from .utils import Unset, coalesce


class Type(IntEnum):
    INTERFACE = 1
    BOOL = 2
    INT = 3
    UINT = 4
    FLOAT32 = 5
    FLOAT64 = 6
    STRING = 7


_BOOLEANS = {
    "1": True, "t": True, "T": True, "TRUE": True, "true": True, "True": True,
    "0": False, "f": False, "F": False, "FALSE": False, "false": False, "False": False,
}

_INT = re.compile(r"[+-]?[0-9]+")
_UINT = re.compile(r"[0-9]+")
_FLOAT = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_SPECIAL = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)
_SINGLE_INFINITY = 0x7F800000


def parse_bool(text, /):
    try:
        return _BOOLEANS[text]
    except KeyError:
        raise ValueError("invalid boolean literal %r" % text) from None


def parse_int(text, /):
    """
    signed base-10 integer within [-2**31, 2**31 - 1].
    """
    if not _INT.fullmatch(text):
        raise ValueError("invalid integer literal %r" % text)
    if not -2 ** 31 <= (value := int(text)) <= 2 ** 31 - 1:
        raise OverflowError("integer %r is out of the 32-bit signed range" % text)
    return value


def parse_uint(text, /):
    """
    unsigned base-10 integer within [0, 2**32 - 1]; signs are not accepted.
    """
    if not _UINT.fullmatch(text):
        raise ValueError("invalid unsigned integer literal %r" % text)
    if (value := int(text)) > 2 ** 32 - 1:
        raise OverflowError("integer %r is out of the 32-bit unsigned range" % text)
    return value


def parse_float64(text, /):
    """
    base-10 decimal float (double precision).

    accepted: optional sign, digits with an optional fraction, optional exponent,
    plus inf/infinity/nan in any case. finite literals too large for a double are
    rejected instead of silently becoming infinities.
    """
    if _SPECIAL.fullmatch(text):
        return float(text)
    if not _FLOAT.fullmatch(text):
        raise ValueError("invalid float literal %r" % text)
    if math.isinf(value := float(text)):
        raise OverflowError("float %r is out of the double precision range" % text)
    return value


def _single(value):
    return struct.unpack("<f", struct.pack("<f", value))[0]


def _single_bits(value):
    return struct.unpack("<I", struct.pack("<f", value))[0]


def _single_from_bits(bits):
    return struct.unpack("<f", struct.pack("<I", bits))[0]


def parse_float32(text, /):
    """
    base-10 decimal float rounded once to the nearest single precision value.

    the double parsed first can land exactly on the midpoint of two single
    precision values while the decimal text lies beside it; the exact decimal
    then decides between the two (ties go to the even mantissa).
    """
    value = parse_float64(text)
    try:
        # struct refuses finite values beyond the single precision range
        single = _single(value)
    except OverflowError:
        raise OverflowError("float %r is out of the single precision range" % text) from None
    if _SPECIAL.fullmatch(text):
        return single

    exact = abs(Fraction(text))
    nearest = Fraction(abs(single))
    if nearest == exact:
        return single

    bits = _single_bits(abs(single)) + (1 if nearest < exact else -1)
    if bits >= _SINGLE_INFINITY:
        return single
    neighbour = _single_from_bits(bits)
    error, other = exact - nearest, exact - Fraction(neighbour)
    if abs(other) < abs(error) or (abs(other) == abs(error) and not bits % 2):
        return math.copysign(neighbour, value)
    return single


def parse_string(text, /):
    return text


class TypeRegistry:
    """
    Mapping of type tags to coercion callables.

    Any hashable tag can be registered; the built-in Type members are registered
    in the default registry (except Type.INTERFACE). Access is guarded by a lock so
    a registry can be shared by parsers running in different threads.
    """

    def __init__(self, coercions=Unset, /):
        self._lock = Lock()
        self._coercions = {}
        for type, coercion in dict(coalesce(coercions, {})).items():
            self.register(type, coercion)

    def __contains__(self, type):
        with self._lock:
            return type in self._coercions

    def __repr__(self):
        with self._lock:
            return "type-registry(%s)" % ", ".join(map(repr, self._coercions))

    def register(self, type, coercion, /, *, replace=False):
        """
        Register a coercion for a type tag and return the coercion.

        Raises
        - TypeError: if the coercion is not callable.
        - DuplicateKeyError: if the tag is already registered and replace is False.
        """
        if not callable(coercion):
            raise TypeError("register() second argument must be callable")
        with self._lock:
            if type in self._coercions and not replace:
                raise DuplicateKeyError(
                    "type %r already has a coercion" % (type,),
                    namespace="type",
                    key=type,
                    hint="pass replace=True to override the existing coercion",
                )
            self._coercions[type] = coercion
        return coercion

    def resolve(self, type, /):
        """
        Return the coercion registered for a tag.

        Raises
        - UnknownTypeError: if the tag was never registered.
        """
        with self._lock:
            try:
                return self._coercions[type]
            except (KeyError, TypeError):
                raise UnknownTypeError(
                    "unknown type: %r" % (type,),
                    type=type,
                    hint="register a coercion for this type before parsing",
                ) from None

    def coerce(self, type, text, /, **options):
        """
        Coerce a raw string with the coercion registered for a tag.

        Extra options are attached to the raised ParseError (e.g. key, argument).

        Raises
        - UnknownTypeError: if the tag was never registered.
        - ParseError: if the coercion rejects the string; the original
          exception is chained as __cause__.
        """
        coercion = self.resolve(type)
        try:
            return coercion(text)
        except (ValueError, ArithmeticError) as error:
            raise ParseError(
                "cannot parse %r as %s: %s" % (text, getattr(type, "name", type), error),
                type=type,
                value=text,
                **options,
            ) from error

    def copy(self):
        with self._lock:
            return type(self)(self._coercions)


types = TypeRegistry({
    Type.BOOL: parse_bool,
    Type.INT: parse_int,
    Type.UINT: parse_uint,
    Type.FLOAT32: parse_float32,
    Type.FLOAT64: parse_float64,
    Type.STRING: parse_string,
})


__all__ = (
    "Type",
    "TypeRegistry",
    "types",
    "parse_bool",
    "parse_int",
    "parse_uint",
    "parse_float32",
    "parse_float64",
    "parse_string",
)
