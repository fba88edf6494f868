"""
Type registry tests (built-in coercions, registration, failure wrapping).

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import math
import struct
import unittest
from unittest import TestCase

from optscan import Type, TypeRegistry, types, ParseError, UnknownTypeError, DuplicateKeyError
from optscan.coercions import parse_bool, parse_int, parse_uint, parse_float32, parse_float64, parse_string


class TestBuiltinCoercions(TestCase):
    """Behavioral tests for the plain str → value coercions."""

    def testBoolAcceptsStrictLiterals(self):
        for text in ("1", "t", "T", "TRUE", "true", "True"):
            self.assertIs(parse_bool(text), True, text)
        for text in ("0", "f", "F", "FALSE", "false", "False"):
            self.assertIs(parse_bool(text), False, text)

    def testBoolRejectsLooseLiterals(self):
        for text in ("yes", "no", "TrUe", "", " true"):
            with self.assertRaises(ValueError):
                parse_bool(text)

    def testIntParsesSignedDecimal(self):
        self.assertEqual(parse_int("5"), 5)
        self.assertEqual(parse_int("-1"), -1)
        self.assertEqual(parse_int("+7"), 7)

    def testIntRangeIs32Bit(self):
        self.assertEqual(parse_int("2147483647"), 2 ** 31 - 1)
        self.assertEqual(parse_int("-2147483648"), -2 ** 31)
        with self.assertRaises(OverflowError):
            parse_int("2147483648")
        with self.assertRaises(OverflowError):
            parse_int("-2147483649")

    def testIntRejectsMalformed(self):
        for text in ("notanumber", "5.0", "1_000", " 5", "0x10", ""):
            with self.assertRaises(ValueError):
                parse_int(text)

    def testUintRejectsSigns(self):
        self.assertEqual(parse_uint("4294967295"), 2 ** 32 - 1)
        with self.assertRaises(OverflowError):
            parse_uint("4294967296")
        for text in ("-1", "+1"):
            with self.assertRaises(ValueError):
                parse_uint(text)

    def testFloat64DecimalSyntax(self):
        self.assertEqual(parse_float64("2.5"), 2.5)
        self.assertEqual(parse_float64("1e3"), 1000.0)
        self.assertEqual(parse_float64(".5"), 0.5)
        self.assertEqual(parse_float64("1."), 1.0)
        self.assertEqual(parse_float64("-3"), -3.0)

    def testFloat64SpecialValues(self):
        self.assertEqual(parse_float64("inf"), math.inf)
        self.assertEqual(parse_float64("-Infinity"), -math.inf)
        self.assertTrue(math.isnan(parse_float64("NaN")))

    def testFloat64RejectsOverflowAndMalformed(self):
        with self.assertRaises(OverflowError):
            parse_float64("1e400")
        for text in ("abc", "0x1p3", "1e", ""):
            with self.assertRaises(ValueError):
                parse_float64(text)

    def testFloat32RoundsToSinglePrecision(self):
        self.assertEqual(parse_float32("2.5"), 2.5)
        self.assertEqual(parse_float32("0.1"), struct.unpack("f", struct.pack("f", 0.1))[0])
        self.assertNotEqual(parse_float32("0.1"), 0.1)

    def testFloat32RoundsOnceFromDecimal(self):
        # the double nearest to this text is the midpoint 1 + 2**-24 itself
        self.assertEqual(parse_float32("1.0000000596046447755"), 1 + 2 ** -23)
        self.assertEqual(parse_float32("-1.0000000596046447755"), -(1 + 2 ** -23))
        self.assertEqual(parse_float32("1.0000000596046447753"), 1.0)

    def testFloat32MidpointTiesToEven(self):
        self.assertEqual(parse_float32("1.000000059604644775390625"), 1.0)
        self.assertEqual(parse_float32("1.000000178813934326171875"), 1 + 2 ** -22)

    def testFloat32RejectsOverflow(self):
        with self.assertRaises(OverflowError):
            parse_float32("1e39")

    def testStringIsIdentity(self):
        self.assertEqual(parse_string("--weird value"), "--weird value")


class TestTypeRegistry(TestCase):
    """Behavioral tests for TypeRegistry."""

    def testDefaultRegistryCoversBuiltinTypes(self):
        for type in (Type.BOOL, Type.INT, Type.UINT, Type.FLOAT32, Type.FLOAT64, Type.STRING):
            self.assertIn(type, types)
        self.assertNotIn(Type.INTERFACE, types)

    def testResolveUnknownTypeRaises(self):
        with self.assertRaises(UnknownTypeError) as context:
            types.resolve(Type.INTERFACE)
        self.assertIs(context.exception.type, Type.INTERFACE)

    def testResolveUnhashableTypeRaises(self):
        with self.assertRaises(UnknownTypeError):
            types.resolve([])

    def testCoerceWrapsFailures(self):
        with self.assertRaises(ParseError) as context:
            types.coerce(Type.INT, "notanumber")
        self.assertIsInstance(context.exception.__cause__, ValueError)
        self.assertIsInstance(context.exception, ValueError)
        self.assertEqual(context.exception.value, "notanumber")

    def testCoerceWrapsOverflow(self):
        with self.assertRaises(ParseError) as context:
            types.coerce(Type.UINT, "4294967296")
        self.assertIsInstance(context.exception.__cause__, OverflowError)

    def testCoerceAttachesOptions(self):
        with self.assertRaises(ParseError) as context:
            types.coerce(Type.BOOL, "maybe", key="recursive")
        self.assertEqual(context.exception.key, "recursive")

    def testRegisterCustomType(self):
        registry = TypeRegistry()
        registry.register("csv", lambda text: text.split(","))
        self.assertEqual(registry.coerce("csv", "a,b"), ["a", "b"])

    def testRegisterDuplicateRaises(self):
        registry = types.copy()
        with self.assertRaises(DuplicateKeyError) as context:
            registry.register(Type.INT, int)
        self.assertEqual(context.exception.namespace, "type")

    def testRegisterReplace(self):
        registry = types.copy()
        registry.register(Type.INT, int, replace=True)
        self.assertEqual(registry.coerce(Type.INT, " 1_000 "), 1000)

    def testRegisterRequiresCallable(self):
        with self.assertRaises(TypeError):
            TypeRegistry().register("x", "not callable")

    def testCopyIsIndependent(self):
        registry = types.copy()
        registry.register(Type.INTERFACE, str)
        self.assertIn(Type.INTERFACE, registry)
        self.assertNotIn(Type.INTERFACE, types)


if __name__ == "__main__":
    unittest.main()
