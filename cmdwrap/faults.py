"""
cmdwrap faults (errors and warnings) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for every issue a command
  wrapper can surface (a missing binary, a failed run, a reserved field name).
- CommandException / CommandWarning: base types that carry a message + options and
  know how to render themselves in a short, lowercased, actionable way.
- trigger(): central entry point to surface any fault (raise, warn, or render).
- getdoc(): optional description lookup for a code from the host application.

Integration
- Library code raises faults directly; nothing is printed unless asked to.
- Host scripts catch CommandException and call trigger(fault, shell=True) to render
  it on stderr through rich and exit with status 1.
- Hosts can restyle output with a __styles__ mapping in __main__, remap codes with
  __codes__, name the program with __prog__, and document codes with __docs__.
"""
import copy
import inspect
import sys
import warnings
from abc import ABC
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset, coalesce

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used by command wrappers (stable identifiers).

    grouping (by high-level domain)
    - execution errors (211xx)
      • COMMAND_NOT_FOUND, EXECUTION_FAILED
    - declaration warnings (221xx)
      • RESERVED_FIELD
    """
    # --- execution errors (21xxx) ---
    COMMAND_NOT_FOUND           = 21101
    EXECUTION_FAILED            = 21102

    # --- warnings (22xxx) ---
    RESERVED_FIELD              = 22101

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels. when no mapping
        is present, the numeric value is returned as a string.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, styles, title_style, message_style):
    """
    Shared rich rendering for exceptions and warnings.

    Produces a header/message/hint group, or a panel titled with the header
    when the fault is fancy.
    """
    main = __import__("__main__")
    styles = defaultdict(str, styles | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", True)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    prog = text(getattr(main, "__prog__", fault.options.get("prog", "cmdwrap")), "prog-name")

    header = Text.assemble(
        "[ ",
        prog,
        " — ",
        text(fault.options["code"].normalize(), "code"),
        " | ",
        text(fault.options["title"].title(), title_style),
        " ]"
    )
    message = text(fault.message, message_style)
    hint = Text.assemble(text(" → ", "hint-arrow"), text(fault.options.get("hint"), "hint"))

    if fault.options.get("fancy", False):
        return Panel(Group(message, hint), title=header, title_align="left")

    return Group(header, message, hint)


class CommandException(Exception):
    """
    Base class for every error raised while running a wrapped command.

    The message is a single lowercased sentence; everything else (code, title,
    hint, and fault-specific context such as the binary name) lives in the
    read-only `options` mapping.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title

            # body
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",  # gentle green arrow
            "hint": "italic #9CE19C",  # gentle green hint text
        }, "error-title", "error-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            raise self from None
        console.print(self)
        sys.exit(1)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class CommandNotFoundError(CommandException):
    """
    The binary name did not resolve to any executable on the search path.
    """

    def __init__(self, message=Unset, /, **options):
        options = {
            "code": FaultCode.COMMAND_NOT_FOUND,
            "title": "command not found",
            "hint": "install it or put its directory on PATH, or set 'bin_name' to a full path",
        } | options
        super().__init__(coalesce(message, f"couldn't find command {options.get('name')!r}"), **options)

    @property
    def name(self):
        return self.options.get("name")


class CommandExecutionError(CommandException):
    """
    The child process could not be launched, or it exited reporting failure.

    Context
    - path: the resolved executable that was run.
    - code: exit status, negative signal number, or errno when the launch failed.
    - reason: short description of what went wrong.
    - stderr: lines captured from the failed run (empty when it never started).
    """

    def __init__(self, message=Unset, /, **options):
        options = {
            "code": FaultCode.EXECUTION_FAILED,
            "title": "command failed",
            "hint": "check the captured stderr and the flags passed to the command",
            "stderr": (),
        } | options
        super().__init__(
            coalesce(message, f"error running {options.get('path')!r}: {options.get('reason')}"),
            **options
        )

    @property
    def path(self):
        return self.options.get("path")

    @property
    def status(self):
        return self.options.get("status")

    @property
    def reason(self):
        return self.options.get("reason")

    @property
    def stderr(self):
        return list(self.options.get("stderr", ()))


class CommandWarning(ABC, Warning):
    """
    Base class for non-fatal issues found while declaring wrappers.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(coalesce(message, ""))
        self.message = message
        self.options = MappingProxyType(options)

    def __str__(self):
        return coalesce(self.message, "")

    def __rich__(self):
        return _render(self, {
            # header parts
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #FFB400",  # amber fault code for warnings
            "warning-title": "bold #FFC2E0",  # softer pinky title for warnings

            # body
            "warning-message": "#D6D6DE",  # slightly lighter gray body
            "hint-arrow": "#B8EFAF dim",  # softer green arrow
            "hint": "italic #B8EFAF",  # softer green hint text
        }, "warning-title", "warning-message")

    def __trigger__(self) -> None:
        if not self.options.get("shell", False):
            return warnings.warn(self, stacklevel=len(inspect.stack()))
        console.print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class ReservedFieldWarning(CommandWarning):
    """
    A wrapper declared a field under a reserved name (bin_name, stdout, stderr).
    """

    def __init__(self, message=Unset, /, **options):
        options = {
            "code": FaultCode.RESERVED_FIELD,
            "title": "reserved field",
            "hint": "rename the field and map it back with fullname=...",
        } | options
        super().__init__(
            coalesce(message, f"{options.get('owner')!r} field {options.get('name')!r} is reserved and was ignored"),
            **options
        )


def trigger(fault, /, **options):
    """
    surface a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via copy.replace(fault, **options) before triggering.
    - in shell mode, rendering happens via the stderr rich console; otherwise exceptions
      are raised and warnings go through the warnings module.

    typical options
    - shell, fancy, colorful, prog, title, hint.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


def getdoc(code, /):
    """
    optional documentation fetch for a fault code.

    the host application may expose a __docs__ mapping in __main__ where keys
    are FaultCode instances and values are short documentation strings.
    when not found, returns None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a fault-code")
    try:
        return getattr(__import__("__main__"), "__docs__", {})[code]
    except KeyError:
        return None


__all__ = (
    "CommandException",
    "CommandNotFoundError",
    "CommandExecutionError",
    "CommandWarning",
    "ReservedFieldWarning",
    "FaultCode",
    "trigger",
    "getdoc",
)
