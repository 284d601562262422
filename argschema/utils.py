"""
Argschema utilities (internal helpers, carefully exposed)

Scope
- Core building blocks used across the package for consistent semantics.
- Public-but-internal leaning: stable enough for consumers, designed primarily
  to support the schemas/lexer/matcher layers.

Overview
- UnsetType / Unset
  • Singleton sentinel to represent “value not provided” without conflating with None.
  • Falsey (bool(Unset) is False), printable as "Unset", and non-subclassable.

- coalesce(value, default=None)
  • Replace Unset with a concrete default, but preserve legitimate falsey values like None/0/""/[].

- rename(callable, name) / @rename("name")
  • Assign stable __name__/__qualname__ to generated wrappers for clean tracebacks and help.

- mirror("attr")
  • Read-only property factory exposing a private backing field (self._attr); containers
    are handed out as immutable copies.

- Name grammar
  • is_short_name(text): a single letter ("o" in "-o").
  • is_long_name(text): two or more chars, a leading letter, then letters/digits/hyphens.
  • is_command_name(text): like a long name, but a single letter is accepted.

- Case rule
  • fold(text, ignorecase): the comparison key of a name under the session's case rule.
  • same(left, right, ignorecase): compare two names under that rule.

Quick examples
    >>> one = coalesce(Unset, "fallback")  # "fallback"
    >>> two = coalesce(None, "fallback")    # None  (None is preserved)
    >>> is_long_name("dry-run"), is_long_name("x"), is_long_name("1st")
    (True, False, False)
    >>> same("Build", "build", True)
    True
"""
import builtins
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Internal sentinel type representing a value that was not provided.

    This is used when None is a legitimate user value, but the API needs a way
    to distinguish “not provided” from “provided as None”. A single instance,
    Unset, is exposed for use as the default in internal parameters.

    Characteristics
    - Boolean-false: bool(Unset) is False, but it is distinct from None and 0.
    - Printable: repr(Unset) -> "Unset" for friendly diagnostics.
    - Non-subclassable: this type is sealed; do not subclass.
    - Singleton per process: UnsetType() always yields the same instance.
    """

    def __or__(self, other, /):
        """
        Support PEP 604 unions in isinstance checks (e.g., str | Unset).
        """
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


def coalesce(object, default=None, /):
    """
    Resolve an internal Unset sentinel to a concrete default.

    Returns the given object unless it is the Unset sentinel, in which case the
    provided default is returned. Falsey values like None, 0, "" or [] are
    preserved as-is; they are not treated as “unset”.

    Examples
    - coalesce("name", "fallback") -> "name"
    - coalesce(Unset, "fallback")  -> "fallback"
    - coalesce(None, "fallback")   -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set a stable __name__/__qualname__ on a callable, or return a decorator
    that will do so later.

    Forms
    - Function form: rename(callable, name) -> callable
    - Decorator form: rename(name) -> (decorator)

    Notes
    - Only metadata changes; some built-in callables are not updatable and
      raise TypeError.
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                if not builtins.callable(callable):
                    raise TypeError("@rename() must be applied to a callable")
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _immortalize(object):
    """
    Recursively freeze container values.

    Behavior
    - Sequence (non-string): a tuple with each element processed.
    - Mapping: a read-only proxy over a fresh dict whose values are processed.
    - Set: a frozenset with each element processed.
    - Anything else: returned as-is.
    """
    if isinstance(object, Sequence) and not isinstance(object, str | bytes):
        return tuple(map(_immortalize, object))
    elif isinstance(object, Mapping):
        return MappingProxyType(dict(zip(object.keys(), map(_immortalize, object.values()))))
    elif isinstance(object, Set):
        return frozenset(map(_immortalize, object))
    else:
        return object


def mirror(name, /):
    """
    Define a read-only property that mirrors a private backing attribute.

    The generated property reads "_{name}" on the instance and returns an
    immutable copy for container types, so the public surface can never be
    used to mutate schema state.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _immortalize(getattr(self, "_" + name))

    return property(getter)


def is_short_name(text, /):
    """
    Return whether text is a valid short option name (a single letter).
    """
    return isinstance(text, str) and len(text) == 1 and text.isalpha()


def is_long_name(text, /):
    """
    Return whether text is a valid long option name.

    Rules
    - at least two characters;
    - the first character is a letter;
    - every character is a letter, a digit, or a hyphen.
    """
    if not isinstance(text, str) or len(text) < 2 or not text[0].isalpha():
        return False
    return all(char.isalnum() or char == "-" for char in text)


def is_command_name(text, /):
    """
    Return whether text is a valid command name (a letter, then letters, digits or hyphens).
    """
    if not isinstance(text, str) or not text or not text[0].isalpha():
        return False
    return all(char.isalnum() or char == "-" for char in text)


def fold(text, ignorecase=False, /):
    """
    Return the comparison key of a name under the case rule of a session.
    """
    return text.casefold() if ignorecase and text is not None else text


def same(left, right, ignorecase=False, /):
    return fold(left, ignorecase) == fold(right, ignorecase)


Unset = UnsetType()
"""
Internal sentinel for “not provided”.

Use Unset as a default when None is a valid, user-meaningful value but you still
need to distinguish “no input” from “explicitly passed None”.
"""


__all__ = (
    # Public API surface for consumers of argschema.utils.

    # Functions
    "coalesce",
    "rename",
    "mirror",
    "is_short_name",
    "is_long_name",
    "is_command_name",
    "fold",
    "same",

    # Types
    "UnsetType",

    # Constants
    "Unset",
)
