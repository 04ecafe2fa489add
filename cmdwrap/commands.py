r"""
cmdwrap command wrappers.

Overview
- Command
  • Base behavior for wrapper classes. Subclass it, declare Flag/Option fields, and the
    instance turns those fields into command-line flags for the binary it wraps.
  • bin_name: the binary to run, derived lazily from the class name ("Perl" -> "perl").
  • cmd_args(*args): the flag list in field declaration order, then the extra arguments.
  • run(*args): locate the binary on PATH, run it synchronously, capture stdout/stderr.

- CommandType
  • Metaclass collecting declared fields into an ordered, read-only __fields__ mapping,
    dropping declarations that collide with reserved names, and wiring __repr__ and
    __rich_repr__ from the current field values.

Class options
- verbose: bool
  Echo each command line (and the stderr of failed runs) to the stderr console.

Quick example:
    >>> class Perl(Command):
    ...     e = Option()
    ...
    >>> perl = Perl(e="'print join \", \", @ARGV'")
    >>> perl.cmd_args("foo", "bar", "baz")
    ['-e', '\'print join ", ", @ARGV\'', 'foo', 'bar', 'baz']
    >>> perl.e = 'print join ", ", @ARGV'
    >>> perl.run("foo", "bar", "baz")
    True
    >>> perl.stdout
    ['foo, bar, baz']

Notes
- Arguments are passed to the child as a list; nothing goes through a shell and
  nothing is quoted or escaped on the caller's behalf.
- Captured buffers are only replaced by a successful run. A failed run leaves the
  previous buffers in place and reports its own stderr on the raised fault.
"""
import functools
import operator
import os.path
import re
import shlex
import shutil
import subprocess
from types import MappingProxyType

from rich.text import Text

from .faults import *
from .faults import console
from .fields import Field
from .utils import *


class CommandType(type):
    """
    Metaclass that turns wrapper classes into introspectable command types.

    Responsibilities
    - Collect Field descriptors into __fields__ from every class in the MRO (Command
      bases and plain mixins alike): base-class fields first, then the class's own
      fields in declaration order. Redeclaring a field keeps its slot;
      shadowing it with a plain value removes it.
    - Keep reserved names (bin_name, stdout, stderr) out of the field list. A Field
      declared under a reserved name is dropped with a ReservedFieldWarning so the
      inherited accessor stays in effect.
    - Accept a plain string bin_name in the class body as the default binary name.
    - Provide stable __repr__/__rich_repr__ showing bin_name and every field value on
      the root class; wrappers inherit them unless they define their own.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).

    Options (metaclass construction-time)
    - verbose: when given, sets __verbose__ for the class and its subclasses.
    """
    __reserved__ = ("bin_name", "stdout", "stderr")

    def __new__(cls, name, bases, namespace, *, verbose=Unset, **options):
        namespace = dict(namespace)

        # A plain string is a default binary name, not a replacement for the property.
        if isinstance(binname := namespace.get("bin_name"), str):
            del namespace["bin_name"]
            namespace["__binname__"] = binname

        dropped = []
        for reserved in cls.__reserved__:
            if isinstance(namespace.get(reserved), Field):
                del namespace[reserved]
                dropped.append(reserved)

        if verbose is not Unset:
            namespace["__verbose__"] = bool(verbose)

        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            },
            **options
        )

        fields = {}
        for base in reversed(self.__mro__):
            for key, object in vars(base).items():
                if key in cls.__reserved__:
                    continue
                if isinstance(object, Field):
                    fields[key] = object
                elif key in fields:
                    fields.pop(key)
        self.__fields__ = MappingProxyType(fields)

        for reserved in dropped:
            trigger(ReservedFieldWarning(owner=name, name=reserved))

        # Installed on the root class only; wrappers inherit it or define their own.
        if any(isinstance(base, CommandType) for base in bases):
            return self

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with the current values.

            Example
            - perl(bin_name='perl', e="'print 1'")
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            """
            Yield (name, value) pairs: bin_name first, then every declared field.
            """
            yield "bin_name", self.bin_name
            for name in type(self).__fields__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Command(metaclass=CommandType):
    """
    Base behavior mapping an object's declared fields onto a command line.

    Lifecycle
    - Not yet run: stdout and stderr are None.
    - Ran: stdout and stderr hold the lines captured from the last successful run.

    Attributes
    - bin_name: str
      Binary to run. Defaults to build_bin_name(); assign to override.
    - stdout / stderr: list[str] | None
      Read-only copies of the captured buffers, one string per line.

    Overriding
    - build_bin_name() can be overridden to derive the binary name differently.
    """
    __fields__ = MappingProxyType({})
    __binname__ = Unset
    __verbose__ = False

    _bin_name = Unset
    _stdout = Unset
    _stderr = Unset

    stdout = mirror("stdout")
    stderr = mirror("stderr")

    def __init__(self, /, **values):
        """
        Construct a command object.

        Parameters
        - bin_name: str (optional)
          Binary name overriding build_bin_name().
        - **values:
          Initial values for declared fields. Unknown names raise TypeError.
        """
        for name, value in values.items():
            if name == "bin_name":
                self.bin_name = value
            elif name in type(self).__fields__:
                setattr(self, name, value)
            else:
                raise TypeError(f"{type(self).__name__}() got an unexpected keyword argument {name!r}")

    @property
    def bin_name(self):
        if self._bin_name is Unset:
            self.bin_name = self.build_bin_name()
        return self._bin_name

    @bin_name.setter
    def bin_name(self, value):
        if not isinstance(value, str):
            raise TypeError(f"{type(self).__typename__} 'bin_name' must be a string")
        elif not value.strip():
            raise ValueError(f"{type(self).__typename__} 'bin_name' cannot be empty")
        self._bin_name = value

    def build_bin_name(self):
        """
        Build the default binary name: the class-body bin_name if one was given,
        otherwise the lower-cased class name.
        """
        return coalesce(type(self).__binname__, type(self).__name__.lower())

    def locate(self):
        """
        Resolve bin_name to an absolute executable path using the PATH search rules.

        Raises
        - CommandNotFoundError: when nothing on the search path matches.
        """
        if (path := shutil.which(self.bin_name)) is None:
            raise CommandNotFoundError(name=self.bin_name)
        return os.path.abspath(path)

    def cmd_args(self, *args):
        """
        Build the argument list for the current field values.

        Each declared field contributes its flag group in declaration order: a Flag
        emits its token when truthy, an Option emits [token, value] when its value
        is not None. The extra arguments follow verbatim.
        """
        flags = []
        for name, field in type(self).__fields__.items():
            flags.extend(field.render(getattr(self, name)))
        return [*flags, *args]

    def run(self, *args):
        """
        Run the command with the current flags plus the extra arguments.

        The extra arguments are passed as-is; they are never quoted or escaped.

        Returns
        - True once the command exited successfully and stdout/stderr were captured.

        Raises
        - CommandNotFoundError: bin_name could not be located.
        - CommandExecutionError: the process could not be started or exited non-zero.
          The previously captured buffers are left untouched.
        """
        path = self.locate()
        argv = [path, *self.cmd_args(*args)]

        if type(self).__verbose__:
            console.print(Text.assemble(("$ ", "dim"), shlex.join(map(str, argv))), soft_wrap=True)

        try:
            process = subprocess.run(argv, capture_output=True, text=True, errors="replace")
        except (OSError, ValueError, TypeError) as error:
            # ValueError/TypeError: argv the child could never be started with (NUL bytes, non-strings)
            raise CommandExecutionError(
                path=path,
                status=getattr(error, "errno", None),
                reason=getattr(error, "strerror", None) or str(error),
            ) from error

        stdout = process.stdout.splitlines()
        stderr = process.stderr.splitlines()

        if process.returncode:
            if process.returncode < 0:
                reason = f"died with signal {-process.returncode}"
            else:
                reason = f"exited with value {process.returncode}"
            if type(self).__verbose__:
                for line in stderr:
                    console.print(Text(line, "dim"), soft_wrap=True)
            raise CommandExecutionError(path=path, status=process.returncode, reason=reason, stderr=stderr)

        self._stdout = stdout
        self._stderr = stderr
        return True


__all__ = (
    "CommandType",
    "Command",
)
