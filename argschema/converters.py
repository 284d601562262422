"""
Argschema value coercion.

Overview
- Coercer: session-scoped table mapping a target type to a converter
  (a callable turning one string into one value).
  • coerce(text, type): str passes through; a registered converter wins; otherwise
    the generic fallback applies (Enum members by name then value, else type(text)).
  • coerce_all(values, type, container): element-wise coercion gathered in order.
  • register(type, converter): extend or override the table for this session only.

- Builtin value types
  • File / Directory: pathlib paths naming a file or a directory (not checked for existence).
  • Switch: "on" / "off" toggle; truthy when on.
  • codecs.CodecInfo: text encodings looked up by name.
  • bool: true/false, yes/no, on/off, 1/0 (case-insensitive).

Failures of any converter surface as ConversionError.
"""
import builtins
import codecs
import logging
from enum import Enum, StrEnum
from pathlib import Path
from types import MappingProxyType

from .faults import ConversionError
from .utils import *

logger = logging.getLogger(__name__)


class File(Path):
    """
    Path expected to name a file.
    """


class Directory(Path):
    """
    Path expected to name a directory.
    """


class Switch(StrEnum):
    """
    on/off toggle value.
    """
    ON = "on"
    OFF = "off"

    def __bool__(self):
        return self is Switch.ON


def _path(cls):
    @rename(cls.__name__.lower())
    def converter(text, /):
        if not text:
            raise ValueError("path cannot be empty")
        return cls(text)
    return converter


def encoding(text, /):
    """
    Look up a text encoding by name.

    "utf-8be" designates UTF-8 with a byte-order mark (utf-8-sig); names
    unknown to the codec registry fall back to UTF-8.
    """
    if text.strip().lower() == "utf-8be":
        return codecs.lookup("utf-8-sig")
    try:
        return codecs.lookup(text)
    except LookupError:
        logger.debug("unknown encoding %r, falling back to utf-8", text)
        return codecs.lookup("utf-8")


def boolean(text, /):
    match text.strip().lower():
        case "true" | "yes" | "on" | "1":
            return True
        case "false" | "no" | "off" | "0":
            return False
        case _:
            raise ValueError("expected one of true/false, yes/no, on/off, 1/0")


def switch(text, /):
    try:
        return Switch(text.strip().lower())
    except ValueError:
        raise ValueError("expected 'on' or 'off'") from None


def _member(type, text, /):
    for member in type:
        if member.name.casefold() == text.casefold():
            return member
    for member in type:
        if str(member.value) == text:
            return member
    raise ValueError(f"expected one of {', '.join(member.name.lower() for member in type)}")


BUILTINS = MappingProxyType({
    File: _path(File),
    Directory: _path(Directory),
    codecs.CodecInfo: encoding,
    bool: boolean,
    Switch: switch,
})
"""
Converters every Coercer starts from.
"""


class Coercer:
    """
    Session-scoped value coercer.

    Each instance owns a copy of the builtin table, so registering a converter
    never leaks into other sessions.
    """

    def __init__(self, converters=Unset, /):
        self._converters = dict(BUILTINS)
        for type, converter in coalesce(converters, {}).items():
            self.register(type, converter)

    converters = mirror("converters")

    def register(self, type, converter, /):
        """
        Register converter for type (replacing any previous one).

        Returns the converter, enabling decorator-style usage.
        """
        if not isinstance(type, builtins.type):
            raise TypeError("register() first argument must be a type")
        if not callable(converter):
            raise TypeError("register() second argument must be callable")
        self._converters[type] = converter
        return converter

    def __contains__(self, type):
        return type in self._converters

    def coerce(self, text, type, /):
        """
        Convert one string into an instance of type.

        Raises
        - ConversionError: when the converter rejects the text.
        """
        if not isinstance(text, str):
            raise TypeError("coerce() first argument must be a string")
        if type is str:
            return text

        if (converter := self._converters.get(type)) is None:
            if isinstance(type, builtins.type) and issubclass(type, Enum):
                converter = lambda text, /: _member(type, text)  # NOQA: E-731
            else:
                converter = type

        try:
            return converter(text)
        except ConversionError:
            raise
        except (ValueError, TypeError, LookupError, ArithmeticError) as exception:
            raise ConversionError(text, type, str(exception)) from exception

    def coerce_all(self, values, type, /, container=list):
        """
        Convert every value independently and gather the results, in order, into container.
        """
        return container(self.coerce(value, type) for value in values)


__all__ = (
    "File",
    "Directory",
    "Switch",
    "Coercer",
    "BUILTINS",
    "encoding",
    "boolean",
)
