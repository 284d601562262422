r"""
Argschema schema specifications and decorators.

Overview
- Option schemas
  • Flag: named, presence-only switch (no payload), e.g., -v/--verbose.
  • Single[_T]: named option carrying exactly one value, e.g., -o/--output FILE.
  • Multiple[_T]: named option carrying between `min` and `max` values.
  Every option declares at most one short name ("-o") and one long name
  ("--output"), a binding site, and presentation metadata.

- Command schema
  • Command: a command name (or None for the top-level command), its ordered
    options, and the target factory whose instances receive bound values.
  • @command(...): build a Command around a handler class.

- Introspection & representation
  • SchemaType metaclass provides stable __repr__/__rich_repr__ and exposes selected
    fields via read-only properties declared in __introspectable__/__displayable__.

Binding sites
- A string: the attribute set on the target (default: the long name with hyphens
  turned into underscores, else the short letter).
- A callable: invoked as setter(target, value).

Validation highlights (construction time)
- Names must be "-x" (single letter) or "--name" (letter first, then letters,
  digits or hyphens, two chars at least), else MalformedNameError.
- Command names follow the same grammar as long names, but a single letter is
  accepted.
- descr strings are trimmed; empty strings are rejected.
Registration-time rules (default uniqueness, arity typing, bounds, duplicate
names) live in argschema.registry.

Quick example:
    >>> from argschema import command, Single, Flag
    >>> @command("build", Single("-o", "--output"), Flag("-v", "--verbose", optional=True))
    ... class Build(Handler):
    ...     def handle(self, context): ...
    ...
"""
import builtins
import functools
import operator
import re
import sys
from enum import IntEnum

from rich.text import Text

from .faults import MalformedNameError
from .utils import *


class Arity(IntEnum):
    """
    Value arity of an option.

    - NONE: presence only; binds True.
    - SINGLE: exactly one value.
    - MULTIPLE: between the option's min and max values.
    """
    NONE = 0
    SINGLE = 1
    MULTIPLE = 2


class SchemaType(type):
    """
    Metaclass of schema specifications.

    Responsibilities
    - Provide stable, readable __repr__/__rich_repr__ implementations.
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Seal concrete specifications (sealed=True) against subclassing.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
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
            - single(short='o', long='output', bind='output', ...)
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

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(cls, **options):  # NOQA: F-841
                raise TypeError(f"type {self.__name__!r} is not an acceptable base type")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: validate presentation metadata shared by options and commands.

    - descr: Unset | str | Text; trimmed, non-empty when provided, None when Unset.
    - order: an integer (not a boolean).
    - hidden: coerced to bool by the caller.
    """
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)

    if not isinstance(order := metadata["order"], int) or isinstance(order, bool):
        raise TypeError(f"{cls.__typename__} 'order' must be an integer")


def _sanitize_named_metadata(cls, metadata, /):
    r"""
    Internal: split shell-style names into the short and long identities.

    Accepted forms
    - short: "-x", exactly one letter after a single hyphen.
    - long: "--name", a letter first, then letters/digits/hyphens (two chars at least).

    At least one name is required, and at most one of each kind.

    Raises
    - TypeError: when a name is not a string.
    - MalformedNameError: when a name breaks the grammar or an identity repeats.
    """
    if not (names := metadata.pop("names")):
        raise MalformedNameError(f"{cls.__typename__} must specify at least one name")

    short = long = None
    for name in names:
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} names must be strings")
        if name.startswith("--"):
            if not is_long_name(name[2:]):
                raise MalformedNameError(f"{cls.__typename__} name {name!r} is not a valid long name")
            if long is not None:
                raise MalformedNameError(f"{cls.__typename__} cannot have more than one long name")
            long = name[2:]
        elif name.startswith("-"):
            if not is_short_name(name[1:]):
                raise MalformedNameError(f"{cls.__typename__} name {name!r} is not a valid short name")
            if short is not None:
                raise MalformedNameError(f"{cls.__typename__} cannot have more than one short name")
            short = name[1:]
        else:
            raise MalformedNameError(f"{cls.__typename__} name {name!r} must start with '-' or '--'")

    metadata["short"] = short
    metadata["long"] = long

    # Binding site defaults to the long identity, then the short one.
    if (bind := metadata["bind"]) is Unset:
        bind = (long or short).replace("-", "_")
    elif isinstance(bind, str):
        if not bind.isidentifier():
            raise ValueError(f"{cls.__typename__} 'bind' must be a valid attribute name")
    elif not callable(bind):
        raise TypeError(f"{cls.__typename__} 'bind' must be an attribute name or a callable")
    metadata["bind"] = bind


def _sanitize_parametric_metadata(cls, metadata, /):
    """
    Internal: validate value-related metadata.

    - type: must be callable (a class or a conversion function).
    - hint: any object shown as the default value in help; never assigned.
    """
    if not callable(metadata["type"]):
        raise TypeError(f"{cls.__typename__} 'type' must be callable")
    metadata["hint"] = coalesce(metadata["hint"])


def _build(cls, metadata, /):
    _sanitize_metadata(cls, metadata)
    _sanitize_named_metadata(cls, metadata)
    _sanitize_parametric_metadata(cls, metadata)

    self = super(Option, cls).__new__(cls)
    for name, object in metadata.items():
        setattr(self, "_" + name, object)
    return self


class Option(metaclass=SchemaType):
    """
    Named option specification (abstract).

    Concrete kinds are Flag, Single and Multiple; each fixes the arity.

    Properties
    - short / long: the option identities without their hyphens (None when absent).
    - bind: attribute name or setter callable receiving the converted value.
    - type: conversion target (element type for Multiple).
    - optional: a missing non-optional option fails the match.
    - default: the option absorbs the unlabeled values that follow a command token.
    - hint: default-value hint shown in help only.
    - descr / order / hidden: presentation metadata.
    """
    __introspectable__ = (
        "short",
        "long",
        "bind",
        "type",
        "optional",
        "default",
        "hint",
        "descr",
        "order",
        "hidden",
    )
    __displayable__ = ("short", "long", "bind", "type", "optional", "default")

    arity = Unset

    def __new__(cls, *names, **metadata):
        raise TypeError(f"{cls.__typename__} is abstract, use flag, single or multiple")

    @property
    def bounds(self):
        """
        (min, max) number of values accepted by this option.
        """
        match self.arity:
            case Arity.NONE:
                return 0, 0
            case Arity.SINGLE:
                return 1, 1
            case _:
                return self.min, self.max

    @property
    def names(self):
        """
        Shell-style names, short first (e.g., ("-o", "--output")).
        """
        return tuple(
            prefix + name for prefix, name in (("-", self.short), ("--", self.long)) if name is not None
        )

    def assign(self, target, value, /):
        """
        Bind value into target through the binding site.
        """
        if isinstance(self.bind, str):
            setattr(target, self.bind, value)
        else:
            self.bind(target, value)


class Flag(Option, sealed=True):
    """
    Presence-only option: binds True when present.

    A flag cannot be the default option, and its type must stay bool
    (checked at registration).
    """
    __introspectable__ = Option.__introspectable__
    __displayable__ = ("short", "long", "bind", "optional")

    arity = Arity.NONE

    def __new__(
            cls,
            *names,
            bind=Unset,
            type=bool,
            optional=False,
            descr=Unset,
            order=0,
            hidden=False
    ):
        """
        Construct a Flag spec.

        Parameters
        - names: "-x" and/or "--name".
        - bind: Unset | str | Callable[[target, bool], None].
        - type: declared target type; registration requires bool.
        - optional: whether the flag may be absent.
        - descr / order / hidden: presentation metadata.
        """
        return _build(cls, {
            "names": names,
            "bind": bind,
            "type": type,
            "optional": bool(optional),
            "default": False,
            "hint": Unset,
            "descr": descr,
            "order": order,
            "hidden": bool(hidden),
        })


class Single[_T](Option, sealed=True):
    """
    Option carrying exactly one value, converted to `type`.
    """
    __introspectable__ = Option.__introspectable__

    arity = Arity.SINGLE

    def __new__(
            cls,
            *names,
            bind=Unset,
            type=str,
            optional=False,
            default=False,
            hint=Unset,
            descr=Unset,
            order=0,
            hidden=False
    ):
        return _build(cls, {
            "names": names,
            "bind": bind,
            "type": type,
            "optional": bool(optional),
            "default": bool(default),
            "hint": hint,
            "descr": descr,
            "order": order,
            "hidden": bool(hidden),
        })


class Multiple[_T](Option, sealed=True):
    """
    Option carrying between `min` and `max` values.

    Each value is converted to `type` independently, and the results are
    gathered, in input order, into `container` (list by default).

    Notes
    - Bounds (min ≥ 1, max ≥ 1, min ≤ max) and the container kind (an ordered
      Sequence other than str/bytes) are checked at registration.
    """
    __introspectable__ = Option.__introspectable__ + ("min", "max", "container")
    __displayable__ = Option.__displayable__ + ("min", "max")

    arity = Arity.MULTIPLE

    def __new__(
            cls,
            *names,
            min=1,
            max=sys.maxsize,
            container=list,
            bind=Unset,
            type=str,
            optional=False,
            default=False,
            hint=Unset,
            descr=Unset,
            order=0,
            hidden=False
    ):
        if not isinstance(min, int) or isinstance(min, bool):
            raise TypeError(f"{cls.__typename__} 'min' must be an integer")
        if not isinstance(max, int) or isinstance(max, bool):
            raise TypeError(f"{cls.__typename__} 'max' must be an integer")
        if not isinstance(container, builtins.type):
            raise TypeError(f"{cls.__typename__} 'container' must be a type")
        return _build(cls, {
            "names": names,
            "bind": bind,
            "type": type,
            "optional": bool(optional),
            "default": bool(default),
            "hint": hint,
            "descr": descr,
            "order": order,
            "hidden": bool(hidden),
            "min": min,
            "max": max,
            "container": container,
        })


class Command(metaclass=SchemaType, sealed=True):
    """
    Command schema: a name (None for the top-level command), ordered option
    schemas, and the target factory receiving bound values.

    Properties
    - name: str | None
    - options: tuple of option schemas, in declaration order.
    - target: zero-argument callable producing the object values are bound into.
    - order / descr / hidden: presentation metadata.
    - toplevel: True when name is None.
    - default: the default option, or None.
    """
    __introspectable__ = (
        "name",
        "options",
        "target",
        "order",
        "descr",
        "hidden",
    )
    __displayable__ = ("name", "options", "target")

    def __new__(cls, name, /, *options, target, order=0, descr=Unset, hidden=False):
        """
        Construct a Command schema.

        Parameters
        - name: str | None
          The sub-command name, or None for the top-level command.
        - options: Option instances, in declaration order.
        - target: Callable[[], object]
          Factory invoked once per match attempt (normally a Handler subclass).
        - order / descr / hidden: presentation metadata.

        Raises
        - MalformedNameError: when name breaks the command-name grammar.
        - TypeError: on wrongly typed arguments.
        """
        if name is not None:
            if not isinstance(name, str):
                raise TypeError(f"{cls.__typename__} name must be a string or None")
            if not is_command_name(name):
                raise MalformedNameError(f"{cls.__typename__} name {name!r} is not a valid command name")
        for option in options:
            if not isinstance(option, Option):
                raise TypeError(f"{cls.__typename__} options must be option schemas, not {type(option).__name__!r}")
        if not callable(target):
            raise TypeError(f"{cls.__typename__} 'target' must be callable")

        metadata = {
            "name": name,
            "options": options,
            "target": target,
            "order": order,
            "descr": descr,
            "hidden": bool(hidden),
        }
        _sanitize_metadata(cls, metadata)

        self = super().__new__(cls)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)
        return self

    @property
    def toplevel(self):
        return self._name is None

    @property
    def default(self):
        return next((option for option in self._options if option.default), None)

    def __iter__(self):
        return iter(self._options)


def command(*options, **metadata):
    """
    Decorator factory for defining a command around a handler class.

    Usage
    - Named command:
        @command("build", Single("-o", "--output"), descr="build the project")
        class Build(Handler): ...

    - Top-level command (no name, or an explicit None):
        @command(Flag("-q", "--quiet", optional=True))
        class Main(Handler): ...

    Behavior
    - A leading string (or None) is taken as the command name; every other
      positional argument is an option schema.
    - Returns the Command whose target is the decorated class.
    """
    name = None
    if options and isinstance(options[0], str | None):
        name, *options = options

    @rename("command")
    def wrapper(target, /):
        if not callable(target):
            raise TypeError("@command() must be applied to a callable")
        return Command(name, *options, target=target, **metadata)

    return wrapper


__all__ = (
    # Public API surface for consumers of argschema.schemas.

    # Enumerations
    "Arity",

    # Classes (specifications)
    "Option",
    "Flag",
    "Single",
    "Multiple",
    "Command",

    # Decorators
    "command",
)
