# python
"""
Faults module behavioral tests.

Scope
- Validate fault codes, default messages and fault-specific context.
- Validate trigger(): raising, warning, and shell-mode rendering through rich.
- Validate copy.replace support and getdoc lookups.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import copy
import io
import unittest
from unittest import TestCase

from rich.console import Console

from cmdwrap import (
    CommandException,
    CommandNotFoundError,
    CommandExecutionError,
    CommandWarning,
    ReservedFieldWarning,
    FaultCode,
    trigger,
    getdoc,
)
from cmdwrap.faults import console


def render(renderable, /):
    output = Console(file=io.StringIO(), width=100, color_system=None)
    output.print(renderable)
    return output.file.getvalue()


class TestFaultCode(TestCase):
    """Behavioral tests for the stable fault codes."""

    def testValuesAreStable(self):
        self.assertEqual(FaultCode.COMMAND_NOT_FOUND, 21101)
        self.assertEqual(FaultCode.EXECUTION_FAILED, 21102)
        self.assertEqual(FaultCode.RESERVED_FIELD, 22101)

    def testNormalizeDefaultsToNumber(self):
        self.assertEqual(FaultCode.EXECUTION_FAILED.normalize(), "21102")


class TestCommandNotFoundError(TestCase):
    """Behavioral tests for missing binaries."""

    def testDefaultMessageNamesBinary(self):
        fault = CommandNotFoundError(name="perl")
        self.assertEqual(str(fault), "couldn't find command 'perl'")
        self.assertEqual(fault.name, "perl")
        self.assertIs(fault.options["code"], FaultCode.COMMAND_NOT_FOUND)

    def testIsCommandException(self):
        self.assertIsInstance(CommandNotFoundError(name="perl"), CommandException)

    def testExplicitMessageWins(self):
        self.assertEqual(str(CommandNotFoundError("no perl here", name="perl")), "no perl here")

    def testOptionsAreReadOnly(self):
        fault = CommandNotFoundError(name="perl")
        with self.assertRaises(TypeError):
            fault.options["name"] = "ruby"


class TestCommandExecutionError(TestCase):
    """Behavioral tests for failed runs."""

    def testContext(self):
        fault = CommandExecutionError(path="/usr/bin/perl", status=2, reason="exited with value 2", stderr=["x"])
        self.assertEqual(str(fault), "error running '/usr/bin/perl': exited with value 2")
        self.assertEqual(fault.path, "/usr/bin/perl")
        self.assertEqual(fault.status, 2)
        self.assertEqual(fault.reason, "exited with value 2")
        self.assertEqual(fault.stderr, ["x"])
        self.assertIs(fault.options["code"], FaultCode.EXECUTION_FAILED)

    def testStderrDefaultsToEmpty(self):
        self.assertEqual(CommandExecutionError(path="/bin/false", status=1, reason="x").stderr, [])

    def testReplaceKeepsContext(self):
        fault = CommandExecutionError(path="/bin/false", status=1, reason="exited with value 1")
        replaced = copy.replace(fault, fancy=True)
        self.assertIsInstance(replaced, CommandExecutionError)
        self.assertEqual(str(replaced), str(fault))
        self.assertEqual(replaced.status, 1)
        self.assertTrue(replaced.options["fancy"])


class TestTrigger(TestCase):
    """Behavioral tests for surfacing faults."""

    def testRaisesOutsideShell(self):
        with self.assertRaises(CommandNotFoundError):
            trigger(CommandNotFoundError(name="perl"))

    def testShellModeRendersAndExits(self):
        with console.capture() as capture:
            with self.assertRaises(SystemExit) as context:
                trigger(CommandNotFoundError(name="perl"), shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        output = capture.get()
        self.assertIn("Command Not Found", output)
        self.assertIn("couldn't find command 'perl'", output)

    def testWarningWarnsOutsideShell(self):
        with self.assertWarns(ReservedFieldWarning):
            trigger(ReservedFieldWarning(owner="Tool", name="stdout"))

    def testWarningRendersInShell(self):
        with console.capture() as capture:
            trigger(ReservedFieldWarning(owner="Tool", name="stdout"), shell=True, colorful=False)
        self.assertIn("'Tool' field 'stdout' is reserved and was ignored", capture.get())

    def testRejectsNonFaults(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("nope"))


class TestRendering(TestCase):
    """Behavioral tests for rich rendering."""

    def testPlainRendering(self):
        output = render(CommandExecutionError(path="/bin/false", status=1, reason="exited with value 1"))
        self.assertIn("21102", output)
        self.assertIn("Command Failed", output)
        self.assertIn("error running '/bin/false': exited with value 1", output)
        self.assertIn("→", output)

    def testFancyRendering(self):
        fault = copy.replace(CommandNotFoundError(name="perl"), fancy=True)
        output = render(fault)
        self.assertIn("╭", output)
        self.assertIn("couldn't find command 'perl'", output)

    def testWarningRendering(self):
        output = render(ReservedFieldWarning(owner="Tool", name="stderr"))
        self.assertIn("22101", output)
        self.assertIn("Reserved Field", output)
        self.assertIsInstance(ReservedFieldWarning(owner="Tool", name="stderr"), CommandWarning)


class TestGetdoc(TestCase):
    """Behavioral tests for optional code documentation."""

    def testMissingDocIsNone(self):
        self.assertIsNone(getdoc(FaultCode.COMMAND_NOT_FOUND))

    def testRejectsNonCodes(self):
        with self.assertRaises(TypeError):
            getdoc(21101)


if __name__ == "__main__":
    unittest.main()
