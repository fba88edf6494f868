"""
Fault tests (codes, options, rendering, reporting).

Conventions
- Test method names follow CamelCase per project convention.
- Rendering goes to an in-memory rich console; no terminal is required.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from optscan import (
    ParserException,
    ConfigError,
    DuplicateKeyError,
    UnknownTypeError,
    ParseError,
    NotFoundError,
    FaultCode,
    report,
)


def render(renderable):
    buffer = io.StringIO()
    Console(file=buffer, width=120, color_system=None).print(renderable)
    return buffer.getvalue()


class TestFaultHierarchy(TestCase):
    """Behavioral tests for fault types, codes and options."""

    def testCodesPerFault(self):
        for cls, code in (
            (ConfigError, FaultCode.CONFIG),
            (DuplicateKeyError, FaultCode.DUPLICATE_KEY),
            (UnknownTypeError, FaultCode.UNKNOWN_TYPE),
            (ParseError, FaultCode.PARSE),
            (NotFoundError, FaultCode.NOT_FOUND),
        ):
            fault = cls("boom")
            self.assertIsInstance(fault, ParserException)
            self.assertIs(fault.code, code)

    def testBuiltinBases(self):
        self.assertIsInstance(ConfigError(), ValueError)
        self.assertIsInstance(ParseError(), ValueError)
        self.assertIsInstance(NotFoundError(), LookupError)
        self.assertNotIsInstance(DuplicateKeyError(), ValueError)

    def testMessageAndStr(self):
        self.assertEqual(str(ParseError("cannot parse 'x' as INT")), "cannot parse 'x' as INT")
        self.assertEqual(str(ParseError()), "")

    def testOptionsAreAttributes(self):
        fault = DuplicateKeyError("dup", namespace="long", key="frequency")
        self.assertEqual(fault.namespace, "long")
        self.assertEqual(fault.key, "frequency")
        self.assertEqual(fault.title, "duplicated key")
        with self.assertRaises(AttributeError):
            fault.missing

    def testOptionsAreReadOnly(self):
        fault = NotFoundError("nope", key="depth")
        with self.assertRaises(TypeError):
            fault.options["key"] = "other"

    def testReplaceKeepsCause(self):
        try:
            try:
                int("x")
            except ValueError as error:
                raise ParseError("bad", key="depth") from error
        except ParseError as fault:
            replaced = fault.__replace__(colorful=False)
        self.assertIsInstance(replaced, ParseError)
        self.assertIsInstance(replaced.__cause__, ValueError)
        self.assertEqual(replaced.key, "depth")
        self.assertIs(replaced.colorful, False)


class TestFaultCodes(TestCase):
    """Behavioral tests for FaultCode.normalize()."""

    def testNumericByDefault(self):
        with mock.patch("__main__.__codes__", {}, create=True):
            self.assertEqual(FaultCode.PARSE.normalize(), "21202")

    def testHostLabels(self):
        with mock.patch("__main__.__codes__", {FaultCode.PARSE: "E-PARSE"}, create=True):
            self.assertEqual(FaultCode.PARSE.normalize(), "E-PARSE")
            self.assertEqual(FaultCode.CONFIG.normalize(), "21101")


class TestFaultRendering(TestCase):
    """Behavioral tests for __rich__ and report()."""

    def testPlainRendering(self):
        fault = ParseError("cannot parse 'x' as INT", hint="pass a decimal integer", colorful=False)
        with mock.patch("__main__.__prog__", "influx", create=True):
            output = render(fault)
        self.assertIn("influx", output)
        self.assertIn("21202", output)
        self.assertIn("Invalid Value", output)
        self.assertIn("cannot parse 'x' as INT", output)
        self.assertIn("pass a decimal integer", output)

    def testFancyRendering(self):
        fault = ConfigError("either the short or the long key must be non-empty", fancy=True, colorful=False)
        output = render(fault)
        self.assertIn("Bad Declaration", output)
        self.assertIn("must be non-empty", output)

    def testReportPrintsToConsole(self):
        fault = NotFoundError("key 'depth' is not registered")
        with mock.patch("optscan.faults.console") as console:
            report(fault)
        console.print.assert_called_once_with(fault)

    def testReportAppliesOverrides(self):
        fault = NotFoundError("key 'depth' is not registered", key="depth")
        with mock.patch("optscan.faults.console") as console:
            report(fault, colorful=False)
        printed, = console.print.call_args.args
        self.assertIsNot(printed, fault)
        self.assertIs(printed.colorful, False)
        self.assertEqual(printed.key, "depth")

    def testReportRequiresFault(self):
        with self.assertRaises(TypeError):
            report(ValueError("nope"))


if __name__ == "__main__":
    unittest.main()
