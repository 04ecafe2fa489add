r"""
cmdwrap field descriptors.

Overview
- Fields
  • Option[_T]: value-bearing field rendered as a two-token group, e.g. ["--out", "file.txt"].
  • Flag: presence-only field rendered as a single token, e.g. ["-v"], and only when truthy.

- Binding
  • Fields are data descriptors. Declared in a Command class body, they learn their
    attribute name through __set_name__ and the CommandType metaclass records them in
    declaration order.
  • Reading a field on the class returns the descriptor itself; reading it on an
    instance returns the current value, or a per-instance copy of the field default
    when nothing was set.

Token rules
- Default prefix is "-" for single-character names and "--" otherwise.
- 'prefix' replaces the default prefix; the name is kept.
- 'fullname' replaces prefix and name altogether and wins over 'prefix' when both are given.

Metadata (sanitized on construction)
- prefix: Unset | str (empty allowed, e.g. for "if=" style tools that use fullname instead).
- fullname: Unset | str, non-empty after trimming.
- descr: Unset | str | Text (short help), non-empty when provided.
- Option only
  • type: Callable turning the current value into its command-line string (default str).
  • default: any value; None means "not set" and renders nothing.
- Flag only
  • default: coerced to bool.

Quick example:
    >>> class Tool(Command):
    ...     v = Flag()
    ...     out = Option()
    ...     jobs = Option("-", type=int)
    ...     level = Option(fullname="-O")
    ...
    >>> Tool(v=True, out="file.txt").cmd_args()
    ['-v', '--out', 'file.txt']
"""
import builtins
import copy
import functools
import operator
import re

from rich.text import Text

from .utils import *


class FieldType(type):
    """
    Metaclass that gives field specs a stable, introspectable surface.

    Responsibilities
    - Derive __typename__ from the class name (camel-case split with hyphens) for
      messages and representations.
    - Expose every name listed in __introspectable__ as a read-only property mirroring
      the private "_{name}" attribute.
    - Provide __repr__/__rich_repr__ built from __displayable__ (or __introspectable__).
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(name='out', token='--out', type=<class 'str'>, ...)
            """
            return f"{type(self).__typename__}({
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            })"
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate metadata shared by Option and Flag.

    - prefix: Unset or a string. Empty strings are accepted as-is.
    - fullname: Unset or a non-empty string after trimming.
    - descr: Unset or a non-empty string after trimming; Unset becomes None.

    Conflicting prefix + fullname is not an error: fullname takes precedence when
    the token is computed.

    Raises
    - TypeError: when a value has the wrong type.
    - ValueError: when a string is empty after trimming (fullname, descr).
    """
    if not isinstance(metadata["prefix"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'prefix' must be a string")

    if not isinstance(fullname := metadata["fullname"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'fullname' must be a string")
    elif isinstance(fullname, str) and not (fullname := fullname.strip()):
        raise ValueError(f"{cls.__typename__} 'fullname' cannot be empty")
    metadata["fullname"] = fullname

    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


class Field(metaclass=FieldType):
    """
    Common descriptor plumbing for declared command fields.

    Subclasses define how a value becomes a flag group through render(). The
    field name is only known once the owning class is created (__set_name__);
    until then the token cannot be computed.
    """

    def __set_name__(self, owner, name):
        if self._name is not Unset and self._name != name:
            raise TypeError(f"{type(self).__typename__} is already bound to {self._name!r}")
        self._name = name

    def __get__(self, instance, owner=None):
        if instance is None:
            return self
        # Each instance gets its own copy of the default on first read.
        if self._name not in instance.__dict__:
            instance.__dict__[self._name] = copy.copy(self._default)
        return instance.__dict__[self._name]

    def __set__(self, instance, value):
        instance.__dict__[self._name] = value

    def __delete__(self, instance):
        instance.__dict__.pop(self._name, None)

    @property
    def name(self):
        return coalesce(self._name)

    @property
    def token(self):
        """
        The option token for this field: fullname, else prefix + name.
        """
        if self._fullname is not Unset:
            return self._fullname
        if self._name is Unset:
            raise TypeError(f"unbound {type(self).__typename__} has no token")
        prefix = coalesce(self._prefix, "-" if len(self._name) == 1 else "--")
        return prefix + self._name

    def render(self, value, /):
        raise NotImplementedError


class Option[_T](Field):
    """
    Value-bearing field.

    Renders as [token, str(type(value))] when the value is defined (not None), and as
    nothing otherwise. The value is converted with 'type' (str by default) and is
    never quoted or escaped.
    """

    __introspectable__ = (
        "prefix",
        "fullname",
        "type",
        "default",
        "descr",
    )

    __displayable__ = (
        "name",
        "token",
        "type",
        "default",
        "descr",
    )

    def __init__(self, prefix=Unset, fullname=Unset, *, type=str, default=None, descr=Unset):
        """
        Construct an Option field.

        Parameters
        - prefix: Unset | str
          Replaces the default "-"/"--" prefix.
        - fullname: Unset | str
          Replaces prefix and name; takes precedence over prefix.
        - type: Callable
          Converter applied to the value when rendering. Only callability is enforced.
        - default: Any
          Value read back when the instance never set one. None renders nothing.
        - descr: Unset | str
          Short description shown in representations.
        """
        metadata = {
            "prefix": prefix,
            "fullname": fullname,
            "type": type,
            "default": default,
            "descr": descr,
        }
        _sanitize_metadata(builtins.type(self), metadata)

        if not callable(metadata["type"]):
            raise TypeError(f"{builtins.type(self).__typename__} 'type' must be callable")

        self._name = Unset
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def render(self, value, /):
        if value is None or value is Unset:
            return []
        return [self.token, str(self._type(value))]


class Flag(Field):
    """
    Presence-only field.

    Renders as [token] when the value is truthy, and as nothing when it is false
    or unset.
    """

    __introspectable__ = (
        "prefix",
        "fullname",
        "default",
        "descr",
    )

    __displayable__ = (
        "name",
        "token",
        "default",
        "descr",
    )

    def __init__(self, prefix=Unset, fullname=Unset, *, default=False, descr=Unset):
        """
        Construct a Flag field.

        Parameters
        - prefix: Unset | str
          Replaces the default "-"/"--" prefix.
        - fullname: Unset | str
          Replaces prefix and name; takes precedence over prefix.
        - default: bool
          Whether the flag is emitted when the instance never set it.
        - descr: Unset | str
          Short description shown in representations.
        """
        metadata = {
            "prefix": prefix,
            "fullname": fullname,
            "default": bool(default),
            "descr": descr,
        }
        _sanitize_metadata(builtins.type(self), metadata)

        self._name = Unset
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def render(self, value, /):
        if not value:
            return []
        return [self.token]


__all__ = (
    "Field",
    "Option",
    "Flag",
)
